# siteforge/client/pipeline.py
from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Set

from siteforge.domain.status import NON_POLLING_STATUSES, ProjectStatus
from siteforge.domain.invariants.exceptions import IllegalTransition, TemplateNotReady
from siteforge.domain.lifecycle.project import assert_selectable
from .backend import WebsiteBackend
from .observation import Confirmed, Local, Observation
from .poller import PollHandle, PollReconciler
from .records import PipelineConfig, Place, ProjectSnapshot

logger = logging.getLogger(__name__)


class PipelineController:
    """
    Drives one project through the generation pipeline.

    The server is never pushed to us: after a user action the controller
    assumes the next status locally (`Local`) and polls until the worker
    reports `READY`. Observations only move the status forward.
    """

    def __init__(
        self,
        backend: WebsiteBackend,
        project_id: str,
        reconciler: Optional[PollReconciler] = None,
        on_change: Optional[Callable[[Observation], None]] = None,
    ):
        self.backend = backend
        self.project_id = project_id
        self.reconciler = reconciler or PollReconciler()
        self.on_change = on_change

        self.state: Optional[Observation] = None
        self.project: Optional[ProjectSnapshot] = None
        self.pending_place: Optional[Place] = None

        self._handle: Optional[PollHandle] = None
        self._trigger_tasks: Set[asyncio.Task] = set()

    @property
    def status(self) -> Optional[ProjectStatus]:
        return self.state.status if self.state is not None else None

    @property
    def polling(self) -> bool:
        return self._handle is not None and self._handle.active

    # ------------------------
    # Observation
    # ------------------------

    def _set_state(self, state: Observation) -> None:
        self.state = state
        if self.on_change is not None:
            self.on_change(state)

    def _observe(self, snapshot: ProjectSnapshot) -> bool:
        current = self.status
        if current is not None and snapshot.status.rank < current.rank:
            logger.debug(
                "Ignoring stale status %s for %s (at %s)",
                snapshot.status, self.project_id, current,
            )
            return False

        self.project = snapshot
        self._set_state(Confirmed(snapshot.status))
        return True

    def _ensure_polling(self) -> None:
        if self.status in NON_POLLING_STATUSES:
            self._stop_polling()
            return

        if self.polling:
            return

        self._handle = self.reconciler.start(
            fetch=lambda: self.backend.fetch_project_status(self.project_id),
            is_terminal=lambda snapshot: snapshot.status == ProjectStatus.READY,
            on_update=self._observe,
        )

    def _stop_polling(self) -> None:
        self.reconciler.cancel(self._handle)
        self._handle = None

    async def load(self) -> Observation:
        snapshot = await self.backend.fetch_project_status(self.project_id)
        self._observe(snapshot)
        self._ensure_polling()
        return self.state

    # ------------------------
    # User actions
    # ------------------------

    def select_place(self, place: Place) -> None:
        assert_selectable(self.status or ProjectStatus.CREATED)
        self.pending_place = place

    def clear_selection(self) -> None:
        self.pending_place = None

    async def confirm(
        self,
        template_id: str,
        *,
        place: Optional[Place] = None,
        primary_color: Optional[str] = None,
        accent_color: Optional[str] = None,
    ) -> Observation:
        """
        CREATED → GBP_SELECTED.

        The configuration is persisted before returning; the pipeline trigger
        is fired in the background and never rolls the transition back.
        """
        place = place or self.pending_place
        if place is None:
            raise ValueError("No place selected")

        assert_selectable(self.status or ProjectStatus.CREATED)

        template = await self.backend.fetch_template(template_id)
        if template is None:
            raise TemplateNotReady(f"Template {template_id!r} does not exist")
        if not template.pages:
            raise TemplateNotReady(f"Template {template.name!r} has no pages")

        config = PipelineConfig.from_place(
            place,
            template_id,
            primary_color=primary_color,
            accent_color=accent_color,
        )
        self.project = await self.backend.save_selection(self.project_id, config)
        self.pending_place = None

        self._set_state(Local(ProjectStatus.GBP_SELECTED))
        self._fire_trigger(config)
        self._ensure_polling()
        return self.state

    def _fire_trigger(self, config: PipelineConfig) -> None:
        task = asyncio.get_running_loop().create_task(self._trigger(config))
        self._trigger_tasks.add(task)
        task.add_done_callback(self._trigger_tasks.discard)

    async def _trigger(self, config: PipelineConfig) -> None:
        try:
            await self.backend.trigger_pipeline_start(self.project_id, config)
        except Exception:
            logger.error(
                "Pipeline trigger failed for project %s", self.project_id, exc_info=True
            )

    async def start_pipeline(self) -> None:
        """Re-send the trigger. Safe to repeat; the worker tolerates duplicates."""
        if self.status is None or self.status in NON_POLLING_STATUSES:
            raise IllegalTransition(
                f"Pipeline cannot be started from {self.status}"
            )

        config = PipelineConfig.from_project(self.project)
        await self.backend.trigger_pipeline_start(self.project_id, config)
        self._ensure_polling()

    async def settle(self) -> None:
        """Wait for background triggers and the active poll loop to finish."""
        if self._trigger_tasks:
            await asyncio.gather(*self._trigger_tasks, return_exceptions=True)
        if self._handle is not None:
            await self._handle.wait()

    def close(self) -> None:
        """View teardown. In-flight triggers are left to complete."""
        self._stop_polling()
