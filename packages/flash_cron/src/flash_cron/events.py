"""Event definitions and listener interfaces."""

from __future__ import annotations

import asyncio
import inspect
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Awaitable, Callable, Union

from flash_core.logging import scoped_schedule

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduleArrived:
    """
    Emitted once for every poll in which a timer came due.

    Attributes:
        timer_name: Name of the timer that came due.
        scheduled_time: The occurrence that made the timer due. When several
            occurrences were missed this is the latest of them.
        timestamp: The poll time that observed it.
        payload: Extra catch-all data attached by the host.
    """

    timer_name: str
    scheduled_time: datetime
    timestamp: datetime
    payload: Any | None = None


class EventListener(ABC):
    """
    Interface for receiving ScheduleArrived events.
    """

    @abstractmethod
    async def on_event(self, event: ScheduleArrived) -> None:
        """Handle an incoming event asynchronously."""
        ...


EventCallback = Callable[[ScheduleArrived], Union[Awaitable[None], None]]


class CallbackListener(EventListener):
    """
    Adapts a plain callable (sync or async) into a listener.

    When `timer_name` is set, only events for that timer are delivered.
    """

    def __init__(self, callback: EventCallback, timer_name: str | None = None):
        self.callback = callback
        self.timer_name = timer_name

    async def on_event(self, event: ScheduleArrived) -> None:
        if self.timer_name is not None and event.timer_name != self.timer_name:
            return
        result = self.callback(event)
        if inspect.isawaitable(result):
            await result

    def __repr__(self) -> str:
        name = getattr(self.callback, "__qualname__", repr(self.callback))
        return f"CallbackListener({name}, timer_name={self.timer_name!r})"


class EventManager:
    """
    Central hub for managing listeners and dispatching events.

    Handles safe execution of listeners so one failure doesn't halt the others.
    """

    def __init__(self) -> None:
        self._listeners: list[EventListener] = []

    @property
    def listeners(self) -> list[EventListener]:
        return list(self._listeners)

    def add_listener(self, listener: EventListener) -> None:
        """Register a new listener to receive events."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: EventListener) -> None:
        """Unregister an existing listener."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def dispatch(self, event: ScheduleArrived) -> None:
        """
        Dispatch an event to all registered listeners concurrently.

        Exceptions in listeners are logged but suppressed.
        """
        if not self._listeners:
            return

        with scoped_schedule(event.timer_name):
            tasks = [
                self._safe_notify(listener, event) for listener in self._listeners
            ]
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _safe_notify(
        self, listener: EventListener, event: ScheduleArrived
    ) -> None:
        """Executes a single listener with error handling."""
        try:
            await listener.on_event(event)
        except Exception:
            logger.exception("Error in event listener %r", listener)
