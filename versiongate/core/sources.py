"""Installed-version sources."""

import logging
import re
import subprocess
from importlib.metadata import PackageNotFoundError, version as dist_version

from packaging.version import InvalidVersion, Version as PkgVersion

logger = logging.getLogger(__name__)

_VERSION_NAME_RE = re.compile(r"versionName='([^']*)'")


class StaticVersionSource:
    """Version string compiled into the host application."""

    def __init__(self, raw: str):
        self.raw = raw

    def installed_version(self) -> str:
        return self.raw


class PackageMetadataSource:
    """Version of an installed distribution, from its package metadata.

    Local and dev suffixes (``1.2.3+build7``, ``1.2.3.dev1``) are reduced
    to the base release so they compare like the published version.
    """

    def __init__(self, distribution: str):
        self.distribution = distribution

    def installed_version(self) -> str:
        try:
            raw = dist_version(self.distribution)
        except PackageNotFoundError:
            logger.error("Distribution %s is not installed", self.distribution)
            return ""

        try:
            return PkgVersion(raw).base_version
        except InvalidVersion:
            logger.warning("Cannot normalize version %s of %s", raw, self.distribution)
            return raw


class ApkBadgingSource:
    """versionName of an Android package, read via ``aapt dump badging``."""

    def __init__(self, apk_path: str, aapt: str = 'aapt', timeout: float = 30):
        self.apk_path = apk_path
        self.aapt = aapt
        self.timeout = timeout

    def installed_version(self) -> str:
        try:
            result = subprocess.run(
                [self.aapt, 'dump', 'badging', self.apk_path],
                capture_output=True, text=True, timeout=self.timeout,
                encoding='utf-8', errors='ignore',
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.error("aapt failed for %s: %s", self.apk_path, e)
            return ""

        if result.returncode != 0:
            logger.error("aapt exited with %d: %s", result.returncode, result.stderr[:500])
            return ""

        for line in result.stdout.splitlines():
            if line.startswith('package:'):
                match = _VERSION_NAME_RE.search(line)
                if match:
                    return match.group(1)
        logger.error("No versionName in badging output for %s", self.apk_path)
        return ""
