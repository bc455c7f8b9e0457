import subprocess
from importlib.metadata import PackageNotFoundError
from types import SimpleNamespace

import pytest

from versiongate.core import sources
from versiongate.core.sources import ApkBadgingSource, PackageMetadataSource, StaticVersionSource


def test_static_source_returns_raw_string():
    assert StaticVersionSource('1.2.0').installed_version() == '1.2.0'


@pytest.mark.parametrize('raw, expected', [
    ('1.2.3', '1.2.3'),
    ('1.2.3+build.7', '1.2.3'),
    ('1.2.3.dev4', '1.2.3'),
    ('1.2.3.post1', '1.2.3'),
])
def test_package_metadata_reduces_to_base_release(monkeypatch, raw, expected):
    monkeypatch.setattr(sources, 'dist_version', lambda name: raw)
    assert PackageMetadataSource('example-app').installed_version() == expected


def test_package_metadata_keeps_unparseable_version(monkeypatch):
    monkeypatch.setattr(sources, 'dist_version', lambda name: 'nightly')
    assert PackageMetadataSource('example-app').installed_version() == 'nightly'


def test_package_metadata_missing_distribution(monkeypatch):
    def missing(name):
        raise PackageNotFoundError(name)

    monkeypatch.setattr(sources, 'dist_version', missing)
    assert PackageMetadataSource('not-installed').installed_version() == ''


BADGING = (
    "package: name='com.example.app' versionCode='42' versionName='2.3.4' "
    "platformBuildVersionName='13' compileSdkVersion='33'\n"
    "sdkVersion:'24'\n"
    "application-label:'Example'\n"
)


def test_apk_badging_reads_version_name(monkeypatch):
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        return SimpleNamespace(returncode=0, stdout=BADGING, stderr='')

    monkeypatch.setattr(sources.subprocess, 'run', fake_run)
    source = ApkBadgingSource('/builds/app.apk', aapt='/sdk/aapt')

    assert source.installed_version() == '2.3.4'
    assert calls == [['/sdk/aapt', 'dump', 'badging', '/builds/app.apk']]


def test_apk_badging_failure_returns_empty(monkeypatch):
    monkeypatch.setattr(
        sources.subprocess, 'run',
        lambda cmd, **kwargs: SimpleNamespace(returncode=1, stdout='', stderr='ERROR: dump failed'),
    )
    assert ApkBadgingSource('/builds/app.apk').installed_version() == ''


def test_apk_badging_missing_tool(monkeypatch):
    def not_found(cmd, **kwargs):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(sources.subprocess, 'run', not_found)
    assert ApkBadgingSource('/builds/app.apk').installed_version() == ''


def test_apk_badging_timeout(monkeypatch):
    def slow(cmd, **kwargs):
        raise subprocess.TimeoutExpired(cmd, kwargs.get('timeout'))

    monkeypatch.setattr(sources.subprocess, 'run', slow)
    assert ApkBadgingSource('/builds/app.apk', timeout=1).installed_version() == ''
