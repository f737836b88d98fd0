import copy

from sqlalchemy import select

from siteforge.extensions import db


def copy_content(page):
    """Detached copy of a page's content fields, for seeding a new version row."""
    return {
        "sections": copy.deepcopy(page.sections or []),
        "edit_chat_history": copy.deepcopy(page.edit_chat_history),
    }


def next_version(project_id, path):
    """
    Reserve the next version number for a path.

    Backed by PageSequence rather than MAX(version) so numbers freed by
    deletes are never handed out again. Must run inside the caller's
    transaction.
    """
    from siteforge.models.page import Page, PageSequence

    seq = db.session.execute(
        select(PageSequence)
        .where(PageSequence.project_id == project_id, PageSequence.path == path)
        .with_for_update()
    ).scalar_one_or_none()

    if seq is None:
        # Paths created before sequences existed
        highest = db.session.execute(
            select(db.func.max(Page.version))
            .where(Page.project_id == project_id, Page.path == path)
        ).scalar() or 0

        seq = PageSequence()
        seq.project_id = project_id
        seq.path = path
        seq.last_version = highest
        db.session.add(seq)

    seq.last_version += 1
    db.session.flush()
    return seq.last_version
