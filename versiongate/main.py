"""VersionGate — entry point for a one-shot update check.

Usage: versiongate [settings.json]

Exit codes: 0 no update needed, 1 update available, 2 installed version
malformed, 3 settings invalid (e.g. malformed minimum_version).
"""

import sys
import os
import logging

from versiongate.config.settings import GateSettings
from versiongate.core.gate import VersionGate
from versiongate.core.version import ParseError

EXIT_UP_TO_DATE = 0
EXIT_UPDATE_AVAILABLE = 1
EXIT_MALFORMED_VERSION = 2
EXIT_BAD_SETTINGS = 3


def setup_logging(data_dir: str):
    """Configure logging to file and console."""
    log_dir = os.path.join(data_dir, 'logs')
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, 'versiongate.log')

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        handlers=[
            logging.FileHandler(log_file, encoding='utf-8'),
            logging.StreamHandler(),
        ],
    )


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    settings = GateSettings.load(argv[0] if argv else None)
    settings.ensure_dirs()

    setup_logging(settings.data_dir)
    logger = logging.getLogger(__name__)
    logger.info("Checking %s", settings.app_id or "<no app id>")

    try:
        gate = VersionGate.from_settings(settings)
    except ParseError as e:
        logger.error("Invalid minimum_version in settings: %s", e)
        return EXIT_BAD_SETTINGS

    try:
        decision = gate.check()
    except ParseError as e:
        logger.error("Update check aborted: %s", e)
        return EXIT_MALFORMED_VERSION

    if decision.update_available:
        print(f"Update {'required' if decision.forced else 'available'}: "
              f"{decision.installed} -> {decision.latest}")
        url = gate.store_url()
        if url:
            print(url)
        return EXIT_UPDATE_AVAILABLE

    print(f"No update required: {decision.installed}")
    return EXIT_UP_TO_DATE


if __name__ == '__main__':
    sys.exit(main())
