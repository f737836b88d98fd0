from typing import Any, Dict, List, Optional

from siteforge.models.page import Page
from siteforge.domain.invariants.page import assert_sections
from siteforge.domain.lifecycle.page import assert_draft
from siteforge.utils.audit import log_action
from siteforge.utils.optimistic_lock import enforce_optimistic_lock
from siteforge.utils.transaction import transactional
from .locking import lock_page


def save_draft(
    *,
    tenant_id: str,
    page_id: str,
    sections: List[Dict[str, Any]],
    edit_chat_history: Optional[Dict[str, Any]] = None,
) -> Page:
    """
    Overwrite a draft's content. Published and inactive rows are immutable.

    When edit_chat_history is None the stored history is left alone.
    """
    assert_sections(sections)

    page, _ = lock_page(tenant_id, page_id)

    with transactional():
        assert_draft(page)

        enforce_optimistic_lock(page)

        page.sections = sections
        if edit_chat_history is not None:
            page.edit_chat_history = edit_chat_history

        log_action(
            action="page.save",
            entity_type="page",
            entity_id=page.id,
            payload={"version": page.version, "sections": len(sections)},
        )

    return page
