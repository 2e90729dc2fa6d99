"""
AQL Job Desk - Autosave Scheduler
Version: 1.1.0

Changelog:
v1.1.0 (2026-10-12): Failed saves re-arm the timer; warning callback after
                      repeated failures
v1.0.0 (2026-09-28): Single-flight debounced saver, one per draft

Debounced, single-flight persistence for one draft:

- schedule(payload) restarts the quiet-period timer; only the latest payload
  is kept (trailing-edge coalescing)
- at most one save is in flight; a timer that fires during a save waits for
  it and then writes the newest payload
- cancel() stops the timer and drops the pending payload, but lets an
  in-flight save run to completion
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from config import settings

logger = logging.getLogger(__name__)


class AutosaveScheduler:
    """Owns the debounce timer and the in-flight save task for one draft."""

    def __init__(
        self,
        save: Callable[[Any], Awaitable[Any]],
        debounce_s: Optional[float] = None,
        on_saved: Optional[Callable[[Any], None]] = None,
        on_error: Optional[Callable[[Exception, int], None]] = None,
        name: str = "draft",
    ):
        """
        Args:
            save: coroutine function persisting one payload, returns the stored row
            debounce_s: quiet period after the last schedule() call
            on_saved: called with the save result after each successful write
            on_error: called with (exception, consecutive_failures) after a failed write
            name: label for log lines
        """
        self._save = save
        self.debounce_s = settings.AUTOSAVE_DEBOUNCE_S if debounce_s is None else debounce_s
        self._on_saved = on_saved
        self._on_error = on_error
        self.name = name

        self._pending: Any = None
        self._has_pending = False
        self._timer: Optional[asyncio.Task] = None
        self._inflight: Optional[asyncio.Task] = None
        self._cancelled = False
        self.consecutive_failures = 0
        self.save_count = 0

    @property
    def in_flight(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    @property
    def has_pending(self) -> bool:
        return self._has_pending

    def schedule(self, payload: Any) -> None:
        """Queue payload and (re)start the debounce timer."""
        self._cancelled = False
        self._pending = payload
        self._has_pending = True
        self._restart_timer()

    async def save_now(self, payload: Any) -> Any:
        """Skip the debounce: write payload as soon as the in-flight save is done."""
        self._cancelled = False
        self._pending = payload
        self._has_pending = True
        return await self.flush()

    async def flush(self) -> Any:
        """Write the pending payload now. Returns the save result, or None."""
        self._cancel_timer()
        await self._wait_for_inflight()
        if not self._has_pending:
            return None
        task = self._start_save()
        return await asyncio.shield(task)

    def cancel(self) -> None:
        """Drop the pending payload and timer. An in-flight save is left alone."""
        self._cancel_timer()
        self._pending = None
        self._has_pending = False
        self._cancelled = True

    async def wait_idle(self) -> None:
        """Wait until no save is running (test and shutdown helper)."""
        await self._wait_for_inflight()

    # -- internals --

    def _restart_timer(self) -> None:
        self._cancel_timer()
        self._timer = asyncio.get_running_loop().create_task(self._fire_after_delay())

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def _fire_after_delay(self) -> None:
        await asyncio.sleep(self.debounce_s)
        await self._wait_for_inflight()
        if self._has_pending:
            self._start_save()

    async def _wait_for_inflight(self) -> None:
        # another caller may start a save while we wait, so loop
        while self.in_flight:
            await asyncio.wait({self._inflight})

    def _start_save(self) -> asyncio.Task:
        payload = self._pending
        self._pending = None
        self._has_pending = False
        self._inflight = asyncio.get_running_loop().create_task(self._run_save(payload))
        return self._inflight

    async def _run_save(self, payload: Any) -> Any:
        try:
            result = await self._save(payload)
        except Exception as e:
            self.consecutive_failures += 1
            logger.warning(f"Autosave of {self.name} failed "
                           f"(attempt {self.consecutive_failures}): {e}")
            if self._cancelled:
                return None
            # keep the failed payload unless a newer one arrived meanwhile
            if not self._has_pending:
                self._pending = payload
                self._has_pending = True
            if self._on_error:
                self._on_error(e, self.consecutive_failures)
            if self._timer is None or self._timer.done():
                self._restart_timer()
            return None

        self.consecutive_failures = 0
        self.save_count += 1
        if self._on_saved:
            self._on_saved(result)
        return result
