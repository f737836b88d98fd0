"""Tests for PageVersionManager against the in-memory backend."""

import asyncio

import pytest

from siteforge.client.errors import PublishNotConfirmed, RemoteError
from siteforge.client.records import Section
from siteforge.client.versions import PageVersionManager
from siteforge.domain.invariants.exceptions import (
    CannotDeletePublished,
    NoPublishedVersion,
    NotADraft,
    NotInactive,
    SoleVersion,
)
from siteforge.domain.status import PageStatus

P, D, I = PageStatus.PUBLISHED, PageStatus.DRAFT, PageStatus.INACTIVE

ABOUT = [Section(name="hero", content='<h1 class="sf-hero-section-title">About us</h1>')]


def _run(coro):
    return asyncio.run(coro)


def _published_count(backend, path):
    return sum(1 for row in backend.rows(path) if row.status == PageStatus.PUBLISHED)


# ---------------------------------------------------------------------------
# Create draft
# ---------------------------------------------------------------------------

def test_create_draft_copies_published_into_next_version(fake_backend):
    fake_backend.seed("/about", P, sections=ABOUT)
    manager = PageVersionManager(fake_backend, "p1")

    draft = _run(manager.create_draft_from_published("/about"))

    assert draft.version == 2
    assert draft.status == PageStatus.DRAFT
    assert draft.sections == ABOUT
    assert [v.version for v in manager.versions("/about")] == [1, 2]


def test_create_draft_is_idempotent(fake_backend):
    fake_backend.seed("/about", P)
    manager = PageVersionManager(fake_backend, "p1")

    async def scenario():
        first = await manager.create_draft_from_published("about")
        second = await manager.create_draft_from_published("/about/")
        return first, second

    first, second = _run(scenario())

    assert first.id == second.id
    assert fake_backend.count("create_draft") == 1
    assert len(fake_backend.rows("/about")) == 2


def test_create_draft_without_published_version(fake_backend):
    fake_backend.seed("/about", I)
    manager = PageVersionManager(fake_backend, "p1")

    with pytest.raises(NoPublishedVersion):
        _run(manager.create_draft_from_published("/about"))

    assert fake_backend.count("create_draft") == 0


def test_create_draft_on_unpublished_path(fake_backend):
    fake_backend.seed("/new", D)
    manager = PageVersionManager(fake_backend, "p1")

    with pytest.raises(NoPublishedVersion):
        _run(manager.create_draft_from_published("/new"))

    assert fake_backend.count("create_draft") == 0
    assert len(fake_backend.rows("/new")) == 1


# ---------------------------------------------------------------------------
# Save
# ---------------------------------------------------------------------------

def test_save_draft_overwrites_content(fake_backend):
    (draft,) = fake_backend.seed("/about", D)
    manager = PageVersionManager(fake_backend, "p1")
    sections = [Section(name="hero", content="<h1>New</h1>")]

    saved = _run(manager.save_draft(draft.id, sections, chat_history={"x": []}))

    assert saved.sections == sections
    assert fake_backend.pages[draft.id].edit_chat_history == {"x": []}


def test_save_published_version_is_refused_locally(fake_backend):
    published, _ = fake_backend.seed("/about", P, D)
    manager = PageVersionManager(fake_backend, "p1")
    _run(manager.load("/about"))

    with pytest.raises(NotADraft):
        _run(manager.save_draft(published.id, ABOUT))

    assert fake_backend.count("save_draft") == 0


# ---------------------------------------------------------------------------
# Publish
# ---------------------------------------------------------------------------

def test_about_page_v1_to_v2_publish(fake_backend):
    v1, = fake_backend.seed("/about", P, sections=ABOUT)
    manager = PageVersionManager(fake_backend, "p1")

    async def scenario():
        draft = await manager.create_draft_from_published("/about")
        await manager.save_draft(draft.id, [Section(name="hero", content="<h1>v2</h1>")])
        published = await manager.publish(draft.id)
        return draft, published

    draft, published = _run(scenario())

    assert published.id == draft.id
    assert published.version == 2
    assert fake_backend.pages[v1.id].status == PageStatus.INACTIVE
    assert fake_backend.pages[draft.id].status == PageStatus.PUBLISHED
    assert _published_count(fake_backend, "/about") == 1
    assert [v.status for v in manager.versions("/about")] == [I, P]


def test_publish_non_draft_is_refused_locally(fake_backend):
    v1, v2 = fake_backend.seed("/about", I, P)
    manager = PageVersionManager(fake_backend, "p1")

    with pytest.raises(NotADraft):
        _run(manager.publish(v1.id))
    with pytest.raises(NotADraft):
        _run(manager.publish(v2.id))

    assert fake_backend.count("publish") == 0


def test_publish_not_confirmed_when_backend_leaves_two_published(fake_backend):
    fake_backend.publish_atomic = False
    _, draft = fake_backend.seed("/about", P, D)
    manager = PageVersionManager(fake_backend, "p1")

    with pytest.raises(PublishNotConfirmed):
        _run(manager.publish(draft.id))


def _lose_publish_reply(backend):
    commit = backend.publish

    async def publish(page_id):
        await commit(page_id)
        raise RemoteError("connection reset")

    backend.publish = publish


def test_publish_with_lost_reply_is_confirmed_by_reread(fake_backend):
    v1, draft = fake_backend.seed("/about", P, D)
    manager = PageVersionManager(fake_backend, "p1")
    _lose_publish_reply(fake_backend)

    published = _run(manager.publish(draft.id))

    assert published.id == draft.id
    assert published.status == P
    assert fake_backend.pages[v1.id].status == I
    assert [v.status for v in manager.versions("/about")] == [I, P]


def test_publish_retry_after_landed_commit_succeeds(fake_backend):
    _, draft = fake_backend.seed("/about", P, D)
    manager = PageVersionManager(fake_backend, "p1")

    async def scenario():
        await manager.load("/about")
        _lose_publish_reply(fake_backend)
        fake_backend.failures["list_versions"] = RemoteError("still offline")
        with pytest.raises(RemoteError):
            await manager.publish(draft.id)
        return await manager.publish(draft.id)

    published = _run(scenario())

    assert published.id == draft.id
    assert fake_backend.count("publish") == 2
    assert _published_count(fake_backend, "/about") == 1


def test_publish_failure_before_commit_is_raised(fake_backend):
    v1, draft = fake_backend.seed("/about", P, D)
    manager = PageVersionManager(fake_backend, "p1")
    fake_backend.failures["publish"] = RemoteError("bad gateway", status_code=502)

    with pytest.raises(RemoteError):
        _run(manager.publish(draft.id))

    assert fake_backend.pages[draft.id].status == D
    assert fake_backend.pages[v1.id].status == P


def test_concurrent_publishes_rely_on_backend_atomicity(fake_backend):
    # The client takes no lock; one-published holds because each remote
    # publish swaps atomically.
    fake_backend.seed("/about", P, I)
    manager = PageVersionManager(fake_backend, "p1")

    async def scenario():
        versions = await manager.load("/about")
        inactive = versions[1]
        first = await manager.restore(inactive.id)
        second = await fake_backend.restore_version(inactive.id)
        await manager.load("/about")
        return await asyncio.gather(
            manager.publish(first.id),
            manager.publish(second.id),
            return_exceptions=True,
        )

    results = _run(scenario())

    assert _published_count(fake_backend, "/about") == 1
    failures = [r for r in results if isinstance(r, Exception)]
    assert all(isinstance(f, PublishNotConfirmed) for f in failures)
    assert len(failures) <= 1


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------

def test_delete_published_version_is_refused(fake_backend):
    published, _ = fake_backend.seed("/about", P, D)
    manager = PageVersionManager(fake_backend, "p1")

    with pytest.raises(CannotDeletePublished):
        _run(manager.delete_version(published.id))

    assert fake_backend.count("delete_version") == 0


def test_delete_sole_version_is_refused(fake_backend):
    (draft,) = fake_backend.seed("/about", D)
    manager = PageVersionManager(fake_backend, "p1")

    with pytest.raises(SoleVersion):
        _run(manager.delete_version(draft.id))

    assert fake_backend.count("delete_version") == 0


def test_delete_version_updates_cache(fake_backend):
    _, inactive, _ = fake_backend.seed("/about", D, I, P)
    manager = PageVersionManager(fake_backend, "p1")

    _run(manager.delete_version(inactive.id))

    assert [v.version for v in manager.versions("/about")] == [1, 3]
    assert inactive.id not in fake_backend.pages


def test_version_numbers_are_never_reused(fake_backend):
    fake_backend.seed("/about", P)
    manager = PageVersionManager(fake_backend, "p1")

    async def scenario():
        v2 = await manager.create_draft_from_published("/about")
        await manager.delete_version(v2.id)
        v3 = await manager.create_draft_from_published("/about")
        await manager.delete_all_versions("/about")
        v4 = await manager.create_page("/about", ABOUT)
        return v2, v3, v4

    v2, v3, v4 = _run(scenario())

    assert (v2.version, v3.version, v4.version) == (2, 3, 4)
    assert manager.versions("/about") == [v4]


def test_delete_all_versions_is_unconditional(fake_backend):
    fake_backend.seed("/about", I, P, D)
    manager = PageVersionManager(fake_backend, "p1")

    removed = _run(manager.delete_all_versions("/about"))

    assert removed == 3
    assert fake_backend.rows("/about") == []
    assert manager.versions("/about") == []


# ---------------------------------------------------------------------------
# Restore
# ---------------------------------------------------------------------------

def test_restore_creates_new_draft_and_keeps_archive(fake_backend):
    archived, _ = fake_backend.seed("/about", I, P, sections=ABOUT)
    manager = PageVersionManager(fake_backend, "p1")

    restored = _run(manager.restore(archived.id))

    assert restored.version == 3
    assert restored.status == PageStatus.DRAFT
    assert restored.sections == ABOUT
    assert fake_backend.pages[archived.id].status == PageStatus.INACTIVE


def test_restore_requires_inactive(fake_backend):
    _, draft = fake_backend.seed("/about", P, D)
    manager = PageVersionManager(fake_backend, "p1")

    with pytest.raises(NotInactive):
        _run(manager.restore(draft.id))

    assert fake_backend.count("restore_version") == 0
