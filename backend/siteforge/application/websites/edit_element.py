from typing import Any, Dict

from siteforge.domain.invariants.page import assert_editable
from siteforge.domain.lifecycle.page import assert_draft
from siteforge.services import element_editor
from siteforge.utils.audit import log_action
from siteforge.extensions import db
from .locking import lock_page


def edit_page_element(
    *,
    tenant_id: str,
    page_id: str,
    data: Dict[str, Any],
) -> Dict[str, Any]:
    """
    Run one LLM edit against an element of a draft.

    Nothing is written to the page: the caller applies the returned HTML to
    its working copy and saves explicitly.
    """
    css_class = data.get("selector") or ""
    current_html = data.get("current_html")
    instruction = (data.get("instruction") or "").strip()

    if not current_html or not instruction:
        raise ValueError("current_html and instruction are required")

    assert_editable(css_class)

    page, _ = lock_page(tenant_id, page_id)
    assert_draft(page)
    # Release the row locks before the slow model call
    db.session.commit()

    result = element_editor.edit_element(
        css_class=css_class,
        current_html=current_html,
        instruction=instruction,
        chat_history=data.get("chat_history") or [],
    )

    log_action(
        action="page.edit",
        entity_type="page",
        entity_id=page.id,
        payload={
            "selector": css_class,
            "rejected": result["rejected"],
            "input_tokens": result["debug"]["input_tokens"],
            "output_tokens": result["debug"]["output_tokens"],
        },
    )
    db.session.commit()

    return result
