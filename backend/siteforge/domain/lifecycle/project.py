from siteforge.domain.status import ProjectStatus
from siteforge.domain.invariants.exceptions import IllegalTransition


def assert_project_transition(*, from_status: str, to_status: str) -> None:
    """
    Project status only moves forward. Re-reporting the current stage is
    allowed so the worker can deliver at-least-once.
    """
    current = ProjectStatus(from_status)
    target = ProjectStatus(to_status)

    if target.rank < current.rank:
        raise IllegalTransition(
            f"Illegal project transition: {current.value} → {target.value}"
        )


def assert_selectable(status: str) -> None:
    """Configuration is captured once, on CREATED → GBP_SELECTED."""
    if ProjectStatus(status) != ProjectStatus.CREATED:
        raise IllegalTransition(
            f"Business can only be selected while CREATED (currently {status})."
        )
