"""
Host-side polling of named schedule timers.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import datetime, timezone, tzinfo
from typing import TYPE_CHECKING

from flash_core.logging import scoped_schedule

from .config import CronSettings, cron_settings
from .events import CallbackListener, EventManager, ScheduleArrived
from .tracker import TriggerTracker, make_tracker

if TYPE_CHECKING:
    from .events import EventCallback
    from .schemas import ScheduleTimerConfig

logger = logging.getLogger(__name__)


class ScheduleTimer:
    """
    A named schedule bound to its own TriggerTracker.

    Examples:
        >>> timer1 = ScheduleTimer("0/5 * * * * ? *")
        >>> timer2 = ScheduleTimer("every 5 seconds", name="heartbeat")

    Args:
        expression: Cron syntax or an English phrase.
        name: Identifier used in events and logs. Defaults to the expression.
        tz: Zone the schedule runs in. None uses CRON_TIMEZONE.

    Raises:
        ExpressionError: If the expression cannot be translated or parsed.
    """

    def __init__(
        self,
        expression: str,
        name: str | None = None,
        tz: tzinfo | str | None = None,
    ):
        self.expression = expression
        self.name = name or expression
        self.tracker: TriggerTracker = make_tracker(expression, tz=tz)

    @classmethod
    def from_config(cls, config: ScheduleTimerConfig) -> ScheduleTimer:
        return cls(config.expression, name=config.name, tz=config.tz)

    def should_trigger(self, now: datetime) -> bool:
        """Polls the tracker; True if the schedule came due since the last check."""
        return self.tracker.poll(now)

    def __repr__(self) -> str:
        return f"ScheduleTimer(name={self.name!r}, expression={self.expression!r})"


class CronJobPlugin:
    """
    Polls registered timers every tick and emits ScheduleArrived events.

    Polling can be driven by the host (`check_schedule_timers`) or by the
    plugin's own loop (`start` / `shutdown`).

    Examples:
        >>> plugin = CronJobPlugin()
        >>> plugin.add_timer(ScheduleTimer("every 3 seconds", name="three"))
        >>> plugin.observe("three", lambda event: print("3 seconds passed"))
        >>>
        >>> async def main():
        ...     await plugin.start()
        ...     await asyncio.sleep(10)
        ...     await plugin.shutdown()
    """

    def __init__(
        self,
        event_manager: EventManager | None = None,
        settings: CronSettings | None = None,
    ) -> None:
        self.events = event_manager or EventManager()
        self.settings = settings or cron_settings

        self._timers: dict[str, ScheduleTimer] = {}
        self._running = False
        self._main_task: asyncio.Task[None] | None = None
        self._wakeup = asyncio.Event()

    @property
    def timers(self) -> list[ScheduleTimer]:
        return list(self._timers.values())

    @property
    def running(self) -> bool:
        return self._running

    def add_timer(self, timer: ScheduleTimer) -> None:
        """
        Register a timer, replacing any timer with the same name.

        A replaced timer's state is discarded; the new one starts unarmed.
        """
        if timer.name in self._timers:
            logger.info("Replacing timer %s", timer.name)
        else:
            logger.info("Added timer %s (%s)", timer.name, timer.expression)
        timer.tracker.reset()
        self._timers[timer.name] = timer
        self._wakeup.set()

    def remove_timer(self, name: str) -> bool:
        """Unregister a timer. Returns False if no timer had that name."""
        removed = self._timers.pop(name, None)
        if removed is not None:
            logger.info("Removed timer %s", name)
        return removed is not None

    def get_timer(self, name: str) -> ScheduleTimer | None:
        return self._timers.get(name)

    def observe(self, name: str, callback: EventCallback) -> CallbackListener:
        """Call `callback` with every ScheduleArrived event of timer `name`."""
        listener = CallbackListener(callback, timer_name=name)
        self.events.add_listener(listener)
        return listener

    async def check_schedule_timers(
        self,
        now: datetime | None = None,
    ) -> list[ScheduleArrived]:
        """
        Poll every timer once and dispatch an event for each one that is due.

        All timers are polled before any event is dispatched, so listeners see
        a consistent snapshot of the tick.
        """
        if now is None:
            now = datetime.now(timezone.utc)

        arrived: list[ScheduleArrived] = []
        for timer in list(self._timers.values()):
            with scoped_schedule(timer.name):
                if not timer.should_trigger(now):
                    continue
                scheduled_time = timer.tracker.last_fired
                logger.debug("Timer due at %s", scheduled_time)
            arrived.append(
                ScheduleArrived(
                    timer_name=timer.name,
                    scheduled_time=scheduled_time,
                    timestamp=now,
                ),
            )

        for event in arrived:
            await self.events.dispatch(event)

        return arrived

    async def start(self) -> None:
        """Start polling in a background task. Calling it again is a no-op."""
        if self._running:
            return

        self._running = True
        self._main_task = asyncio.create_task(self._run_loop())

    async def shutdown(self) -> None:
        """Stop the polling task and wait for it to finish."""
        if not self._running:
            return

        self._running = False
        self._wakeup.set()

        if self._main_task:
            self._main_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._main_task
            self._main_task = None

    async def _run_loop(self) -> None:
        """
        Main loop running while the plugin is active.

        Each iteration polls all timers, then waits for the tick interval or
        a wakeup signal. Errors back off for CRON_ERROR_BACKOFF_INTERVAL.
        """
        while self._running:
            try:
                await self.check_schedule_timers()
                await self._wait(self.settings.CRON_TICK_INTERVAL)
            except asyncio.CancelledError:
                break
            except Exception as exc:
                logger.exception("Cron loop error", exc_info=exc)
                await self._wait(self.settings.CRON_ERROR_BACKOFF_INTERVAL)

    async def _wait(self, timeout: float) -> None:
        try:
            await asyncio.wait_for(self._wakeup.wait(), timeout=timeout)
        except asyncio.TimeoutError:
            pass
        finally:
            self._wakeup.clear()
