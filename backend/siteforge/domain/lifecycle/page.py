from typing import Set

from siteforge.domain.status import PageStatus
from siteforge.domain.invariants.exceptions import (
    IllegalTransition,
    NotADraft,
    NotInactive,
)

# Explicit allowed state transitions.
# inactive -> draft never happens in place: restore copies into a new row.
ALLOWED_PAGE_TRANSITIONS: dict[str, Set[str]] = {
    PageStatus.DRAFT: {PageStatus.PUBLISHED},
    PageStatus.PUBLISHED: {PageStatus.INACTIVE},
    PageStatus.INACTIVE: set(),
}


def assert_page_transition(*, from_status: str, to_status: str) -> None:
    """
    Guards page lifecycle transitions.
    Single source of truth for status changes.
    """
    allowed = ALLOWED_PAGE_TRANSITIONS.get(PageStatus(from_status), set())

    if PageStatus(to_status) not in allowed:
        # Only drafts can be published
        error = NotADraft if to_status == PageStatus.PUBLISHED else IllegalTransition
        raise error(f"Illegal page transition: {from_status} → {to_status}")


def assert_draft(page) -> None:
    if page.status != PageStatus.DRAFT:
        raise NotADraft(
            f"Version {page.version} of '{page.path}' is {page.status}, not a draft."
        )


def assert_inactive(page) -> None:
    if page.status != PageStatus.INACTIVE:
        raise NotInactive(
            f"Version {page.version} of '{page.path}' is {page.status}, not inactive."
        )
