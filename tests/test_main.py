import json
from urllib.error import URLError

import pytest

from versiongate import main as entry
from versiongate.network import oracles


class FakeResponse:
    status = 200

    def __init__(self, payload):
        self._body = json.dumps(payload).encode('utf-8')

    def read(self):
        return self._body

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


@pytest.fixture
def settings_file(tmp_path):
    def write(**overrides):
        data = {
            'app_id': 'com.example.app',
            'data_dir': str(tmp_path / 'data'),
            'installed_version': '1.2.0',
            'oracle': 'backend',
            'backend_url': 'https://api.example.com/app/version',
            'backend_field': 'data.latest_version',
            'store_url': 'https://play.google.com/store/apps/details?id={app_id}',
        }
        data.update(overrides)
        path = tmp_path / 'settings.json'
        path.write_text(json.dumps(data), encoding='utf-8')
        return str(path)
    return write


def backend_returns(monkeypatch, latest):
    monkeypatch.setattr(
        oracles, 'urlopen',
        lambda req, timeout=None: FakeResponse({'ok': True, 'data': {'latest_version': latest}}),
    )


def test_outdated_install_exits_with_update_available(monkeypatch, capsys, settings_file):
    backend_returns(monkeypatch, '1.3.0')
    assert entry.main([settings_file()]) == entry.EXIT_UPDATE_AVAILABLE
    out = capsys.readouterr().out
    assert 'Update required: 1.2.0 -> 1.3.0' in out
    assert 'https://play.google.com/store/apps/details?id=com.example.app' in out


def test_optional_update_is_reported(monkeypatch, capsys, settings_file):
    backend_returns(monkeypatch, '1.3.0')
    assert entry.main([settings_file(minimum_version='1.0.0')]) == entry.EXIT_UPDATE_AVAILABLE
    assert 'Update available: 1.2.0 -> 1.3.0' in capsys.readouterr().out


def test_current_install_exits_clean(monkeypatch, capsys, settings_file):
    backend_returns(monkeypatch, '1.2.0')
    assert entry.main([settings_file()]) == entry.EXIT_UP_TO_DATE
    assert 'No update required: 1.2.0' in capsys.readouterr().out


def test_unreachable_backend_fails_open(monkeypatch, settings_file):
    def offline(req, timeout=None):
        raise URLError('Network is unreachable')

    monkeypatch.setattr(oracles, 'urlopen', offline)
    assert entry.main([settings_file()]) == entry.EXIT_UP_TO_DATE


def test_malformed_installed_version_exits_2(monkeypatch, settings_file):
    backend_returns(monkeypatch, '1.3.0')
    assert entry.main([settings_file(installed_version='1.2')]) == entry.EXIT_MALFORMED_VERSION


def test_malformed_minimum_version_is_a_settings_error(monkeypatch, settings_file):
    backend_returns(monkeypatch, '1.3.0')
    assert entry.main([settings_file(minimum_version='latest')]) == entry.EXIT_BAD_SETTINGS
