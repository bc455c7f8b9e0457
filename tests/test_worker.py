import pytest

QtCore = pytest.importorskip('PyQt6.QtCore')

from versiongate.core.gate import VersionGate, get_gate_worker_class  # noqa: E402
from versiongate.core.sources import StaticVersionSource  # noqa: E402


class FixedOracle:
    def __init__(self, latest):
        self.latest = latest

    def latest_version(self, app_id):
        return self.latest


@pytest.fixture(scope='module')
def qapp():
    app = QtCore.QCoreApplication.instance() or QtCore.QCoreApplication([])
    yield app


def test_worker_class_is_cached():
    assert get_gate_worker_class() is get_gate_worker_class()


def test_worker_emits_decision(qapp):
    triggered = []
    gate = VersionGate('com.example', StaticVersionSource('1.2.0'), FixedOracle('1.3.0'),
                       remediation=lambda: triggered.append(True))
    worker = get_gate_worker_class()(gate)
    received = []
    worker.decision_ready.connect(lambda decision, remediate: received.append((decision, remediate)))

    worker._do_check()

    assert len(received) == 1
    decision, remediate = received[0]
    assert decision.update_available and decision.forced
    remediate()
    assert triggered == [True]


def test_worker_reports_malformed_installed_version(qapp):
    gate = VersionGate('com.example', StaticVersionSource('one.two'), FixedOracle('1.3.0'))
    worker = get_gate_worker_class()(gate)
    failures = []
    worker.check_failed.connect(failures.append)

    worker._do_check()

    assert len(failures) == 1
    assert 'one.two' in failures[0]
