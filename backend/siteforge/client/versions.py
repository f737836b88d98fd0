# siteforge/client/versions.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from siteforge.domain.status import PageStatus
from siteforge.domain.invariants.page import (
    assert_deletable,
    latest_draft,
    normalize_path,
    require_published,
)
from siteforge.domain.invariants.exceptions import NotADraft
from siteforge.domain.lifecycle.page import assert_draft, assert_inactive
from .backend import WebsiteBackend
from .errors import PublishNotConfirmed, RemoteError
from .records import PageVersion, Section

logger = logging.getLogger(__name__)


class PageVersionManager:
    """
    Version rows of one project's pages, cached per path.

    Lifecycle guards run against the cache before any remote call; the
    backend runs the same guards again under its row locks.
    """

    def __init__(self, backend: WebsiteBackend, project_id: str):
        self.backend = backend
        self.project_id = project_id
        self._paths: Dict[str, List[PageVersion]] = {}

    # ------------------------
    # Cache
    # ------------------------

    async def load(self, path: str) -> List[PageVersion]:
        path = normalize_path(path)
        rows = await self.backend.list_versions(self.project_id, path)
        self._paths[path] = sorted(rows, key=lambda v: v.version)
        return self.versions(path)

    def versions(self, path: str) -> List[PageVersion]:
        """Cached rows for a path, oldest first."""
        return list(self._paths.get(normalize_path(path), []))

    def published(self, path: str) -> Optional[PageVersion]:
        return next(
            (v for v in self.versions(path) if v.status == PageStatus.PUBLISHED), None
        )

    def _cached(self, page_id: str) -> Optional[PageVersion]:
        for rows in self._paths.values():
            for row in rows:
                if row.id == page_id:
                    return row
        return None

    async def _resolve(self, page_id: str) -> PageVersion:
        row = self._cached(page_id)
        if row is None:
            page = await self.backend.fetch_page(page_id)
            await self.load(page.path)
            row = self._cached(page_id) or page
        return row

    def _remember(self, row: PageVersion) -> PageVersion:
        rows = [v for v in self._paths.get(row.path, []) if v.id != row.id]
        rows.append(row)
        self._paths[row.path] = sorted(rows, key=lambda v: v.version)
        return row

    def _forget(self, row: PageVersion) -> None:
        self._paths[row.path] = [v for v in self._paths.get(row.path, []) if v.id != row.id]

    async def _sole_published(self, row: PageVersion) -> Optional[PageVersion]:
        try:
            rows = await self.load(row.path)
        except RemoteError:
            return None
        published = [v for v in rows if v.status == PageStatus.PUBLISHED]
        if [v.id for v in published] == [row.id]:
            return published[0]
        return None

    async def fetch(self, page_id: str) -> PageVersion:
        """One row with its content; listings carry metadata only."""
        return self._remember(await self.backend.fetch_page(page_id))

    # ------------------------
    # Operations
    # ------------------------

    async def create_page(self, path: str, sections: Optional[List[Section]] = None) -> PageVersion:
        page = await self.backend.create_page(self.project_id, normalize_path(path), sections or [])
        return self._remember(page)

    async def create_draft_from_published(self, path: str) -> PageVersion:
        """
        Return the draft to edit, copying the published version if none exists.

        Raises NoPublishedVersion when nothing on the path is published.
        """
        path = normalize_path(path)
        if path not in self._paths:
            await self.load(path)

        rows = self.versions(path)
        published = require_published(rows)

        existing = latest_draft(rows)
        if existing is not None:
            return existing

        draft = await self.backend.create_draft(published.id)
        return self._remember(draft)

    async def save_draft(
        self,
        page_id: str,
        sections: List[Section],
        chat_history: Optional[Dict[str, Any]] = None,
    ) -> PageVersion:
        row = await self._resolve(page_id)
        assert_draft(row)

        saved = await self.backend.save_draft(
            page_id,
            sections,
            chat_history,
            if_unmodified_since=row.updated_at,
        )
        return self._remember(saved)

    async def publish(self, page_id: str) -> PageVersion:
        """
        Publish a draft, then read the path back to check the swap landed.

        Raises PublishNotConfirmed when the read shows the target not
        published or another row still published next to it. A failed call
        whose commit did land (lost response, or a retry after one) counts
        as success once the read shows the target as the only published row.
        """
        row = await self._resolve(page_id)
        assert_draft(row)

        try:
            await self.backend.publish(page_id)
        except (RemoteError, NotADraft) as exc:
            landed = await self._sole_published(row)
            if landed is None:
                raise
            logger.info(
                "Publish of %s v%s already landed (%s)", row.path, row.version, exc
            )
            return landed

        rows = await self.load(row.path)
        published = [v for v in rows if v.status == PageStatus.PUBLISHED]
        if [v.id for v in published] != [page_id]:
            logger.warning(
                "Publish of %s v%s not confirmed; published rows: %s",
                row.path, row.version, [v.version for v in published],
            )
            raise PublishNotConfirmed(
                f"Publish of version {row.version} of '{row.path}' was not confirmed"
            )

        return published[0]

    async def delete_version(self, page_id: str) -> None:
        row = await self._resolve(page_id)
        assert_deletable(row, self.versions(row.path))

        await self.backend.delete_version(page_id)
        self._forget(row)

    async def delete_all_versions(self, path: str) -> int:
        path = normalize_path(path)
        removed = await self.backend.delete_all_versions(self.project_id, path)
        self._paths.pop(path, None)
        return removed

    async def restore(self, archived_page_id: str) -> PageVersion:
        """Copy an inactive version into a new draft; the archived row stays inactive."""
        row = await self._resolve(archived_page_id)
        assert_inactive(row)

        draft = await self.backend.restore_version(archived_page_id)
        return self._remember(draft)
