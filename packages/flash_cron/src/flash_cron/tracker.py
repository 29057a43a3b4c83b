"""
Due detection over a recurrence rule.

A TriggerTracker turns a "next occurrence" oracle into a "has fired since
the last check" detector that tolerates irregular or delayed polling.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Final

from .config import resolve_timezone
from .expression import parse_expression
from .rules import RecurrenceRule, parse_schedule

logger = logging.getLogger(__name__)

# Arming offset before a future occurrence, so the strictly-after search of
# the next poll lands on that occurrence.
ARM_EPSILON: Final[timedelta] = timedelta(milliseconds=1)


def _utc(value: datetime) -> datetime:
    """
    `value` as a UTC instant. Naive datetimes are taken as local wall-clock time.

    Aware datetimes sharing a tzinfo compare by wall time and ignore `fold`,
    so occurrences are compared here.
    """
    return value.astimezone(timezone.utc)


class TriggerTracker:
    """
    Stateful due-detector for a single recurrence rule.

    The only state is `last_fired`: None while unarmed, otherwise the
    occurrence most recently reported as due (or the arming point just
    before the first upcoming occurrence).

    A tracker assumes a single writer. Hosts polling one instance from
    several threads must serialize the calls.

    Examples:
        >>> tracker = make_tracker("every 5 seconds")
        >>> tracker.poll(datetime(2026, 1, 1, 0, 0, 0, tzinfo=timezone.utc))
        True
        >>> tracker.poll(datetime(2026, 1, 1, 0, 0, 3, tzinfo=timezone.utc))
        False
    """

    def __init__(self, rule: RecurrenceRule, expression: str | None = None):
        self._rule = rule
        self._last_fired: datetime | None = None
        self.expression = expression

    @classmethod
    def from_expression(
        cls,
        expression: str,
        tz: tzinfo | str | None = None,
    ) -> TriggerTracker:
        """
        Normalize `expression`, parse it and return an unarmed tracker.

        Raises:
            ExpressionError: If the expression cannot be translated or parsed.
        """
        canonical = parse_expression(expression)
        rule = parse_schedule(canonical, tz=resolve_timezone(tz))
        return cls(rule, expression=expression)

    @property
    def rule(self) -> RecurrenceRule:
        return self._rule

    @property
    def last_fired(self) -> datetime | None:
        return self._last_fired

    @property
    def armed(self) -> bool:
        return self._last_fired is not None

    def reset(self) -> None:
        """Return to the unarmed state."""
        self._last_fired = None

    def poll(self, now: datetime) -> bool:
        """
        Report whether an unreported occurrence is at or before `now`.

        Returns True at most once per call. Occurrences missed between two
        polls are coalesced into a single True, never queued.
        """
        now = _utc(now)

        if self._last_fired is None:
            candidate = self._rule.first_at_or_after(now)
            if candidate is None:
                return False
            if now >= _utc(candidate):
                self._last_fired = candidate
                logger.debug("Schedule %s due at %s", self._label, candidate)
                return True
            self._last_fired = _utc(candidate) - ARM_EPSILON
            logger.debug("Schedule %s armed for %s", self._label, candidate)
            return False

        candidate = self._rule.first_after(self._last_fired)
        if candidate is None or now < _utc(candidate):
            return False

        latest = self._rule.last_at_or_before(now)
        # last_fired only moves forward
        if latest is None or _utc(latest) < _utc(candidate):
            latest = candidate
        self._last_fired = latest
        if _utc(latest) != _utc(candidate):
            logger.debug(
                "Schedule %s coalesced occurrences %s..%s",
                self._label,
                candidate,
                latest,
            )
        else:
            logger.debug("Schedule %s due at %s", self._label, candidate)
        return True

    @property
    def _label(self) -> str:
        return repr(self.expression) if self.expression else repr(self._rule)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(rule={self._rule!r}, "
            f"last_fired={self._last_fired!r})"
        )


def make_tracker(expression: str, tz: tzinfo | str | None = None) -> TriggerTracker:
    """
    Creates an unarmed tracker for a cron or English expression.

    Args:
        expression: Cron syntax (6 or 7 fields) or an English phrase.
        tz: Zone the schedule runs in. None uses CRON_TIMEZONE,
            "local" the process's local zone.

    Raises:
        ExpressionError: If the expression cannot be translated or parsed.
    """
    return TriggerTracker.from_expression(expression, tz=tz)


class SchedulePredicate:
    """
    Callable wrapper over exactly one TriggerTracker.

    Behaves like repeated `poll` calls on a private tracker; without an
    argument it polls with the current time.
    """

    def __init__(self, tracker: TriggerTracker):
        self._tracker = tracker

    @property
    def tracker(self) -> TriggerTracker:
        return self._tracker

    def __call__(self, now: datetime | None = None) -> bool:
        if now is None:
            now = datetime.now(timezone.utc)
        return self._tracker.poll(now)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._tracker!r})"


def schedule_passed(
    expression: str,
    tz: tzinfo | str | None = None,
) -> SchedulePredicate:
    """
    Creates a predicate that is True whenever the schedule has come due.

    Examples:
        >>> every_5_sec = schedule_passed("0/5 * * * * ? *")
        >>> if every_5_sec():
        ...     print("five seconds passed")

    Raises:
        ExpressionError: If the expression cannot be translated or parsed.
    """
    return SchedulePredicate(make_tracker(expression, tz=tz))


make_trigger_predicate = schedule_passed
