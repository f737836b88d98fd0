# siteforge/application/websites/publish_page.py
from typing import Dict

from siteforge.domain.status import PageStatus
from siteforge.domain.invariants.page import assert_sections, assert_single_published
from siteforge.domain.lifecycle.page import assert_page_transition
from siteforge.utils.audit import log_action
from siteforge.utils.transaction import transactional
from .locking import lock_page


def publish_page(
    *,
    tenant_id: str,
    page_id: str,
) -> Dict[str, object]:
    """
    Publish a draft and retire the previously published version.

    Responsibilities:
    - row locks on every version of the path
    - lifecycle enforcement (draft → published, published → inactive)
    - one transaction, so no reader sees the promotion without the demotion
    - audit logging
    """
    # 1️⃣ Lock the page and its siblings
    page, siblings = lock_page(tenant_id, page_id)

    with transactional():
        # 2️⃣ Lifecycle transition enforcement
        assert_page_transition(from_status=page.status, to_status=PageStatus.PUBLISHED)
        assert_sections(page.sections or [], publish=True)

        # 3️⃣ Demote whatever is live
        demoted = []
        for sibling in siblings:
            if sibling.id != page.id and sibling.status == PageStatus.PUBLISHED:
                assert_page_transition(
                    from_status=sibling.status, to_status=PageStatus.INACTIVE
                )
                sibling.status = PageStatus.INACTIVE.value
                demoted.append(sibling)

        # 4️⃣ Promote
        page.status = PageStatus.PUBLISHED.value

        # 5️⃣ Exactly one published row before commit
        assert_single_published(siblings)

        # 6️⃣ Audit logging
        log_action(
            action="page.publish",
            entity_type="page",
            entity_id=page.id,
            payload={
                "path": page.path,
                "version": page.version,
                "demoted": [p.version for p in demoted],
            },
        )

    return {
        "page": page,
        "demoted": demoted,
    }
