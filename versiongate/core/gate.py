"""Version gate — retrieval orchestration, decision, and the Qt worker.

Architecture:
  VersionGate — pure Python logic (no Qt dependency), blocking methods
  GateWorker  — QThread wrapper with pyqtSignal for thread-safe UI updates
"""

import http.client
import logging

from versiongate.branding import AppBranding
from versiongate.core.decision import decide
from versiongate.core.models import (
    RetrievalError, RetrievalFailure, RetrievalReason, TRANSIENT_REASONS,
    UpdateDecision,
)
from versiongate.core.remediation import (
    NativeUpdateRemediation, StoreListingRemediation, android_market_intent,
)
from versiongate.core.sources import (
    ApkBadgingSource, PackageMetadataSource, StaticVersionSource,
)
from versiongate.core.version import ParseError, Version, parse
from versiongate.network.oracles import AppStoreOracle, BackendApiOracle, PlayStoreOracle

logger = logging.getLogger(__name__)


def fetch_latest(app_id: str, oracle, retries: int = 0) -> Version | RetrievalFailure:
    """Ask ``oracle`` for the latest version of ``app_id``.

    Never raises for retrieval problems: network errors, bad statuses,
    timeouts and unusable responses all come back as RetrievalFailure.
    Only NETWORK and TIMEOUT failures are retried, at most ``retries`` times.
    """
    attempts = max(retries, 0) + 1
    failure = RetrievalFailure(RetrievalReason.NETWORK, "no attempt made")

    for attempt in range(1, attempts + 1):
        try:
            raw = oracle.latest_version(app_id)
        except RetrievalError as e:
            failure = RetrievalFailure.from_error(e)
        except TimeoutError as e:
            failure = RetrievalFailure(RetrievalReason.TIMEOUT, str(e) or "timed out")
        except OSError as e:
            failure = RetrievalFailure(RetrievalReason.NETWORK, str(e))
        except http.client.HTTPException as e:
            failure = RetrievalFailure(RetrievalReason.NETWORK, f"{type(e).__name__}: {e}")
        else:
            if raw is None:
                return RetrievalFailure(RetrievalReason.UNEXPECTED_FORMAT,
                                        "Latest version unknown")
            try:
                return parse(raw)
            except ParseError as e:
                logger.warning("Latest version for %s is malformed: %r", app_id, e.raw)
                return RetrievalFailure(RetrievalReason.UNEXPECTED_FORMAT, str(e))

        if failure.reason not in TRANSIENT_REASONS or attempt == attempts:
            break
        logger.info("Attempt %d/%d for %s failed (%s), retrying",
                    attempt, attempts, app_id, failure.reason.value)

    logger.warning("Failed to fetch latest version of %s: %s %s",
                   app_id, failure.reason.value, failure.detail)
    return failure


class VersionGate:
    """Decides whether the running app must be updated before use.

    All methods are synchronous (blocking) — run them off the UI thread,
    e.g. through the worker from get_gate_worker_class().
    """

    def __init__(self, app_id: str, source, oracle, *,
                 remediation=None, minimum_version: str = '', retries: int = 0):
        self.app_id = app_id
        self.source = source
        self.oracle = oracle
        self.remediation = remediation
        self.retries = retries
        # A malformed minimum is a configuration error and raises here
        self.minimum_version = parse(minimum_version) if minimum_version else None

    @classmethod
    def from_settings(cls, settings) -> 'VersionGate':
        """Wire sources, oracle and remediation from GateSettings."""
        if settings.installed_version:
            source = StaticVersionSource(settings.installed_version)
        elif settings.distribution:
            source = PackageMetadataSource(settings.distribution)
        elif settings.apk_path:
            source = ApkBadgingSource(settings.apk_path, aapt=settings.aapt_path)
        else:
            source = StaticVersionSource(AppBranding.VERSION)

        if settings.oracle == 'app_store':
            oracle = AppStoreOracle(country=settings.country, timeout=settings.timeout)
        elif settings.oracle == 'backend':
            oracle = BackendApiOracle(settings.backend_url, field=settings.backend_field,
                                      store_url=settings.store_url,
                                      timeout=settings.timeout)
        else:
            oracle = PlayStoreOracle(locale=settings.locale, timeout=settings.timeout)

        if settings.remediation == 'native':
            argv = settings.native_command or android_market_intent(settings.app_id)
            remediation = NativeUpdateRemediation(argv)
        elif settings.store_url:
            url = settings.store_url.replace('{app_id}', settings.app_id)
            remediation = StoreListingRemediation(url)
        else:
            remediation = None  # resolved per check, the oracle may learn the URL

        return cls(
            settings.app_id, source, oracle,
            remediation=remediation,
            minimum_version=settings.minimum_version,
            retries=settings.retries,
        )

    # ── Check ────────────────────────────────────────────────────────

    def installed_version(self) -> Version:
        """Parse the installed version. Raises ParseError if malformed."""
        raw = self.source.installed_version()
        try:
            return parse(raw)
        except ParseError:
            logger.error("Cannot parse installed version: %r", raw)
            raise

    def check(self) -> UpdateDecision:
        """Fetch the latest version and decide.

        Raises ParseError only for a malformed installed version; every
        retrieval problem ends in NO_UPDATE_NEEDED.
        """
        installed = self.installed_version()
        latest = fetch_latest(self.app_id, self.oracle, self.retries)
        decision = decide(installed, latest, self.minimum_version)

        if decision.update_available:
            logger.info("Update available for %s: %s -> %s (forced=%s)",
                        self.app_id, installed, decision.latest, decision.forced)
        elif decision.failure is not None:
            logger.info("Latest version of %s unknown, not forcing an update", self.app_id)
        else:
            logger.info("%s %s is up to date", self.app_id, installed)
        return decision

    def run(self, on_decision) -> UpdateDecision:
        """Check and hand the decision to ``on_decision(decision, remediate)``."""
        decision = self.check()
        on_decision(decision, self.remediate)
        return decision

    # ── Remediate ────────────────────────────────────────────────────

    def store_url(self) -> str:
        if isinstance(self.remediation, StoreListingRemediation):
            return self.remediation.url
        store_url = getattr(self.oracle, 'store_url', None)
        return store_url(self.app_id) if store_url else ''

    def remediate(self):
        """Send the user to the update destination without waiting for it."""
        remediation = self.remediation
        if remediation is None:
            url = self.store_url()
            if not url:
                logger.warning("No update destination configured for %s", self.app_id)
                return None
            remediation = StoreListingRemediation(url)
        logger.info("Starting remediation for %s", self.app_id)
        return remediation()


# ── QThread Worker ───────────────────────────────────────────────────

# Import PyQt6 only when the worker is actually used (lazy import
# to keep VersionGate itself free of Qt dependency)

def _get_worker_class():
    """Lazy import to avoid PyQt6 at module level."""
    from PyQt6.QtCore import QThread, pyqtSignal

    class GateWorker(QThread):
        """Background worker running one gate check.

        Signals are dispatched to the thread owning the receiver, so a
        presentation layer can connect its blocking prompt directly.
        """

        decision_ready = pyqtSignal(object, object)  # UpdateDecision, remediate
        check_failed = pyqtSignal(str)               # Malformed installed version

        def __init__(self, gate: VersionGate, parent=None):
            super().__init__(parent)
            self._gate = gate

        def check(self):
            """Start background update check."""
            self.start()

        def run(self):
            """Thread entry point."""
            self._do_check()

        def _do_check(self):
            try:
                self._gate.run(self.decision_ready.emit)
            except Exception as e:
                self.check_failed.emit(str(e))
                logger.warning("Update check failed: %s", e)

    return GateWorker


# Module-level accessor
_GateWorkerClass = None


def get_gate_worker_class():
    """Get the GateWorker class (lazy-imported to avoid PyQt6 at import time)."""
    global _GateWorkerClass
    if _GateWorkerClass is None:
        _GateWorkerClass = _get_worker_class()
    return _GateWorkerClass
