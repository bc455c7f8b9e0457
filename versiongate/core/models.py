"""Update-check data models."""

from dataclasses import dataclass
from enum import Enum

from versiongate.core.version import Version


class RetrievalReason(Enum):
    NETWORK = "network"
    BAD_STATUS = "bad_status"
    UNEXPECTED_FORMAT = "unexpected_format"
    TIMEOUT = "timeout"


# Retried by fetch_latest; other reasons fail immediately
TRANSIENT_REASONS = frozenset({RetrievalReason.NETWORK, RetrievalReason.TIMEOUT})


class RetrievalError(Exception):
    """Raised by a version oracle when the latest version cannot be fetched."""

    def __init__(self, reason: RetrievalReason, detail: str = ""):
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason.value}: {detail}" if detail else reason.value)


@dataclass(frozen=True)
class RetrievalFailure:
    """Latest version could not be determined."""
    reason: RetrievalReason
    detail: str = ""

    @staticmethod
    def from_error(error: RetrievalError) -> 'RetrievalFailure':
        return RetrievalFailure(error.reason, error.detail)


class DecisionKind(Enum):
    NO_UPDATE_NEEDED = "no_update_needed"
    UPDATE_AVAILABLE = "update_available"


@dataclass(frozen=True)
class UpdateDecision:
    """Outcome of comparing the installed version against the latest one."""
    kind: DecisionKind
    installed: Version
    latest: Version | None          # None when retrieval failed
    forced: bool = False
    failure: RetrievalFailure | None = None

    @property
    def update_available(self) -> bool:
        return self.kind is DecisionKind.UPDATE_AVAILABLE
