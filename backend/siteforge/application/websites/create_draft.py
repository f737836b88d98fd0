# siteforge/application/websites/create_draft.py
from siteforge.extensions import db
from siteforge.models.page import Page
from siteforge.domain.status import PageStatus
from siteforge.domain.invariants.page import latest_draft, require_published
from siteforge.utils.audit import log_action
from siteforge.utils.transaction import transactional
from siteforge.utils.versioning import copy_content, next_version
from .locking import lock_page


def create_draft_from_published(
    *,
    tenant_id: str,
    page_id: str,
) -> Page:
    """
    Return the draft to edit for the path of `page_id`.

    - The path must have a published version.
    - An existing draft is returned as-is (repeated calls do not pile up
      drafts).
    - Otherwise the published version is copied into a new row with the next
      version number.
    """
    page, siblings = lock_page(tenant_id, page_id)

    with transactional():
        published = require_published(siblings)

        existing = latest_draft(siblings)
        if existing is not None:
            return existing

        content = copy_content(published)

        draft = Page()
        draft.tenant_id = tenant_id
        draft.project_id = published.project_id
        draft.path = published.path
        draft.version = next_version(published.project_id, published.path)
        draft.status = PageStatus.DRAFT.value
        draft.sections = content["sections"]
        draft.edit_chat_history = content["edit_chat_history"]

        db.session.add(draft)
        db.session.flush()

        log_action(
            action="page.draft",
            entity_type="page",
            entity_id=draft.id,
            payload={"path": draft.path, "from_version": published.version, "version": draft.version},
        )

    return draft
