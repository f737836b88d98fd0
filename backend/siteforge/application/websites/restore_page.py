# siteforge/application/websites/restore_page.py
from siteforge.extensions import db
from siteforge.models.page import Page
from siteforge.domain.status import PageStatus
from siteforge.domain.lifecycle.page import assert_inactive
from siteforge.utils.audit import log_action
from siteforge.utils.transaction import transactional
from siteforge.utils.versioning import copy_content, next_version
from .locking import lock_page


def restore_page(
    *,
    tenant_id: str,
    page_id: str,
) -> Page:
    """
    Bring an archived version back as a new draft.

    The archived row is left untouched (still inactive); the copy takes the
    next version number, never the archived one.
    """
    archived, _ = lock_page(tenant_id, page_id)

    with transactional():
        assert_inactive(archived)

        content = copy_content(archived)

        draft = Page()
        draft.tenant_id = tenant_id
        draft.project_id = archived.project_id
        draft.path = archived.path
        draft.version = next_version(archived.project_id, archived.path)
        draft.status = PageStatus.DRAFT.value
        draft.sections = content["sections"]
        draft.edit_chat_history = content["edit_chat_history"]

        db.session.add(draft)
        db.session.flush()

        log_action(
            action="page.restore",
            entity_type="page",
            entity_id=draft.id,
            payload={
                "path": draft.path,
                "from_version": archived.version,
                "version": draft.version,
            },
        )

    return draft
