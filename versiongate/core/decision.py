"""Update decision — pure function over (installed, latest)."""

from versiongate.core.models import DecisionKind, RetrievalFailure, UpdateDecision
from versiongate.core.version import Comparison, Version, compare


def decide(installed: Version, latest_result: Version | RetrievalFailure,
           minimum: Version | None = None) -> UpdateDecision:
    """Decide whether ``installed`` must be updated.

    A failed retrieval never blocks the user: it yields NO_UPDATE_NEEDED.
    A strictly newer latest version yields UPDATE_AVAILABLE, forced unless
    a ``minimum`` supported version is given and ``installed`` meets it.
    """
    if isinstance(latest_result, RetrievalFailure):
        return UpdateDecision(
            kind=DecisionKind.NO_UPDATE_NEEDED,
            installed=installed,
            latest=None,
            failure=latest_result,
        )

    if compare(latest_result, installed) is not Comparison.GREATER_THAN:
        return UpdateDecision(
            kind=DecisionKind.NO_UPDATE_NEEDED,
            installed=installed,
            latest=latest_result,
        )

    if minimum is None:
        forced = True
    else:
        forced = compare(installed, minimum) is Comparison.LESS_THAN

    return UpdateDecision(
        kind=DecisionKind.UPDATE_AVAILABLE,
        installed=installed,
        latest=latest_result,
        forced=forced,
    )
