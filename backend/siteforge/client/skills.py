# siteforge/client/skills.py
from __future__ import annotations

import logging
from typing import Callable, Optional

from siteforge.config import ClientConfig
from siteforge.domain.status import SKILL_TERMINAL_STATUSES, SkillStatus
from .backend import WebsiteBackend
from .poller import PollHandle, PollReconciler
from .records import SkillSnapshot

logger = logging.getLogger(__name__)


class SkillGenerationWatcher:
    """
    Start artifact generation for a skill and poll until it is ready or
    failed, giving up after a fixed number of attempts.
    """

    def __init__(
        self,
        backend: WebsiteBackend,
        skill_id: str,
        reconciler: Optional[PollReconciler] = None,
        max_attempts: Optional[int] = None,
        on_change: Optional[Callable[[SkillSnapshot], None]] = None,
    ):
        self.backend = backend
        self.skill_id = skill_id
        self.reconciler = reconciler or PollReconciler()
        self.max_attempts = max_attempts or ClientConfig.SKILL_POLL_MAX_ATTEMPTS
        self.on_change = on_change

        self.snapshot: Optional[SkillSnapshot] = None
        self.timed_out = False
        self._handle: Optional[PollHandle] = None

    @property
    def status(self) -> Optional[SkillStatus]:
        return self.snapshot.status if self.snapshot is not None else None

    @property
    def done(self) -> bool:
        return self.status in SKILL_TERMINAL_STATUSES or self.timed_out

    def _update(self, snapshot: SkillSnapshot) -> None:
        self.snapshot = snapshot
        if self.on_change is not None:
            self.on_change(snapshot)

    def _exhausted(self) -> None:
        self.timed_out = True
        logger.warning(
            "Skill %s still %s after %s polls", self.skill_id, self.status, self.max_attempts
        )

    def _watch(self) -> None:
        if self._handle is not None and self._handle.active:
            return

        self._handle = self.reconciler.start(
            fetch=lambda: self.backend.fetch_skill_status(self.skill_id),
            is_terminal=lambda snapshot: snapshot.status in SKILL_TERMINAL_STATUSES,
            on_update=self._update,
            max_attempts=self.max_attempts,
            on_exhausted=self._exhausted,
        )

    async def start(self) -> SkillSnapshot:
        self.timed_out = False
        self._update(await self.backend.start_skill_generation(self.skill_id))
        if not self.done:
            self._watch()
        return self.snapshot

    async def resume(self) -> SkillSnapshot:
        """Re-attach to a generation started elsewhere."""
        self._update(await self.backend.fetch_skill_status(self.skill_id))
        if self.status == SkillStatus.GENERATING:
            self._watch()
        return self.snapshot

    async def wait(self) -> Optional[SkillSnapshot]:
        if self._handle is not None:
            await self._handle.wait()
        return self.snapshot

    def close(self) -> None:
        self.reconciler.cancel(self._handle)
        self._handle = None
