# siteforge/client/poller.py
from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Set

from siteforge.config import ClientConfig

logger = logging.getLogger(__name__)

Fetch = Callable[[], Awaitable[Any]]


class PollHandle:
    """
    One running poll loop.

    `cancelled` is set by `PollReconciler.cancel`; `finished` once the loop
    has exited for any reason (terminal result, exhaustion, cancellation).
    """

    def __init__(self, interval: float, max_attempts: Optional[int] = None):
        self.interval = interval
        self.max_attempts = max_attempts
        self.attempts = 0
        self.cancelled = False
        self.exhausted = False
        self._task: Optional[asyncio.Task] = None

    @property
    def finished(self) -> bool:
        return self._task is None or self._task.done()

    @property
    def active(self) -> bool:
        return not (self.cancelled or self.finished)

    async def wait(self) -> None:
        """Block until the loop exits. Never raises for cancellation."""
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)


class PollReconciler:
    """
    Repeatedly fetch remote state until it is terminal.

    Ticks are chained: the next sleep starts only after the previous fetch
    settled, so a slow backend never sees overlapping requests from the same
    handle.
    """

    def __init__(self, interval: Optional[float] = None):
        self.interval = ClientConfig.POLL_INTERVAL_SECONDS if interval is None else interval
        self._handles: Set[PollHandle] = set()

    @property
    def handles(self) -> Set[PollHandle]:
        return set(self._handles)

    def start(
        self,
        fetch: Fetch,
        is_terminal: Callable[[Any], bool],
        on_update: Callable[[Any], None],
        interval: Optional[float] = None,
        max_attempts: Optional[int] = None,
        on_exhausted: Optional[Callable[[], None]] = None,
    ) -> PollHandle:
        handle = PollHandle(
            interval=self.interval if interval is None else interval,
            max_attempts=max_attempts,
        )
        self._handles.add(handle)
        handle._task = asyncio.get_running_loop().create_task(
            self._run(handle, fetch, is_terminal, on_update, on_exhausted)
        )
        return handle

    async def _run(self, handle, fetch, is_terminal, on_update, on_exhausted):
        try:
            while True:
                await asyncio.sleep(handle.interval)
                if handle.cancelled:
                    return

                handle.attempts += 1
                try:
                    result = await fetch()
                except Exception as exc:
                    logger.warning(
                        "Poll attempt %s failed, retrying: %s", handle.attempts, exc
                    )
                else:
                    # Cancelled while the fetch was in flight
                    if handle.cancelled:
                        return

                    on_update(result)
                    if is_terminal(result):
                        return

                if handle.max_attempts is not None and handle.attempts >= handle.max_attempts:
                    handle.exhausted = True
                    logger.warning("Polling gave up after %s attempts", handle.attempts)
                    if on_exhausted is not None:
                        on_exhausted()
                    return
        finally:
            self._handles.discard(handle)

    def cancel(self, handle: Optional[PollHandle]) -> None:
        """Stop a handle. Safe to call repeatedly or after it finished."""
        if handle is None or handle.cancelled:
            return

        handle.cancelled = True
        task = handle._task
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()
        self._handles.discard(handle)

    def cancel_all(self) -> None:
        for handle in list(self._handles):
            self.cancel(handle)
