"""CronSchedule - Recurrence rule backed by a 6/7-field cron expression."""

from __future__ import annotations

import calendar
from datetime import datetime, timedelta, timezone, tzinfo
from typing import ClassVar, Final

from flash_cron.exceptions import InvalidCronSyntaxError
from flash_cron.schemas import CronScheduleConfig

from .base import RecurrenceRule

MIN_YEAR: Final[int] = 1970
MAX_YEAR: Final[int] = 2100

ONE_SECOND: Final[timedelta] = timedelta(seconds=1)

# Zone offset changes are assumed to be further apart than this
OFFSET_SCAN_STEP: Final[timedelta] = timedelta(days=1)


class CronField:
    """Parses and matches a single cron field."""

    def __init__(
        self,
        expr: str,
        min_val: int,
        max_val: int,
        aliases: dict[str, int] | None = None,
    ):
        self.expr = expr
        self.min_val = min_val
        self.max_val = max_val
        self.aliases = aliases if aliases else {}
        self.values = self._parse(expr)
        self._ordered = sorted(self.values)

    def _parse(self, expr: str) -> set[int]:
        """Parses a cron sub-expression (e.g., '0/15', '1,5', 'MON-FRI', '?')."""
        expr = expr.upper()
        for alias, val in self.aliases.items():
            expr = expr.replace(alias, str(val))

        values = set()
        for part in expr.split(","):
            if "/" in part:
                range_part, step_part = part.split("/")
                step = int(step_part)
                if step <= 0:
                    msg = f"Step must be positive, got {step}"
                    raise ValueError(msg)
                if range_part in ("*", "?"):
                    start, end = self.min_val, self.max_val
                elif "-" in range_part:
                    start, end = self._parse_range(range_part)
                else:
                    start = int(range_part)
                    end = self.max_val
                values.update(range(start, end + 1, step))
                # An out-of-range start yields an empty range above
                values.add(start)

            elif "-" in part:
                start, end = self._parse_range(part)
                values.update(range(start, end + 1))

            elif part in ("*", "?"):
                values.update(range(self.min_val, self.max_val + 1))

            else:
                values.add(int(part))

        for v in values:
            if v < self.min_val or v > self.max_val:
                msg = f"Value {v} out of range [{self.min_val}, {self.max_val}]"
                raise ValueError(msg)

        return values

    @staticmethod
    def _parse_range(part: str) -> tuple[int, int]:
        start, end = map(int, part.split("-"))
        if start > end:
            msg = f"Range start {start} is after range end {end}"
            raise ValueError(msg)
        return start, end

    def matches(self, value: int) -> bool:
        return value in self.values

    def next_value(self, current: int) -> int | None:
        """Finds the next valid value greater than current."""
        for v in self._ordered:
            if v > current:
                return v
        return None

    def prev_value(self, current: int) -> int | None:
        """Finds the previous valid value less than current."""
        for v in reversed(self._ordered):
            if v < current:
                return v
        return None

    def first_value(self) -> int:
        """Returns the smallest valid value."""
        return self._ordered[0]

    def last_value(self) -> int:
        """Returns the largest valid value."""
        return self._ordered[-1]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CronField):
            return self.values == other.values
        return False

    def __hash__(self) -> int:
        return hash(frozenset(self.values))

    def __repr__(self) -> str:
        return f"CronField({self.expr!r})"


class CronSchedule(RecurrenceRule):
    """
    Recurrence rule that matches cron expressions.

    Format: second minute hour day month day_of_week [year]

    Examples:
        >>> # 1. Fields: Run every 15 minutes
        >>> schedule = CronSchedule(CronScheduleConfig(minute="0/15"))

        >>> # 2. From String (6-field): Run every 5 seconds
        >>> schedule = CronSchedule.from_string("0/5 * * * * ?")

        >>> # 3. From String (7-field): 9:00 AM on weekdays, 2030 only
        >>> schedule = CronSchedule.from_string("0 0 9 ? * MON-FRI 2030")

    Args:
        second: (0-59)
        minute: (0-59)
        hour: (0-23)
        day: (1-31)
        month: (1-12) or JAN-DEC
        day_of_week: (1-7) or SUN-SAT (1 is Sunday)
        year: (1970-2100)
        tz: Timezone occurrences are computed in. None means local time.
    """

    DAY_ALIASES: ClassVar[dict[str, int]] = {
        "SUN": 1,
        "MON": 2,
        "TUE": 3,
        "WED": 4,
        "THU": 5,
        "FRI": 6,
        "SAT": 7,
    }
    MONTH_ALIASES: ClassVar[dict[str, int]] = {
        "JAN": 1,
        "FEB": 2,
        "MAR": 3,
        "APR": 4,
        "MAY": 5,
        "JUN": 6,
        "JUL": 7,
        "AUG": 8,
        "SEP": 9,
        "OCT": 10,
        "NOV": 11,
        "DEC": 12,
    }

    def __init__(self, config: CronScheduleConfig):
        self.second = config.second
        self.minute = config.minute
        self.hour = config.hour
        self.day = config.day
        self.month = config.month
        self.day_of_week = config.day_of_week
        self.year = config.year
        self.tz = config.tz

        self._second = CronField(self.second, 0, 59)
        self._minute = CronField(self.minute, 0, 59)
        self._hour = CronField(self.hour, 0, 23)
        self._day = CronField(self.day, 1, 31)
        self._month = CronField(self.month, 1, 12, self.MONTH_ALIASES)
        self._day_of_week = CronField(self.day_of_week, 1, 7, self.DAY_ALIASES)
        self._year = CronField(self.year, MIN_YEAR, MAX_YEAR)

    @classmethod
    def from_string(cls, expr: str, tz: tzinfo | None = None) -> CronSchedule:
        """
        Creates a CronSchedule from a canonical cron string.

        Supports:
        - 6 fields: second minute hour day month day_of_week
        - 7 fields: second minute hour day month day_of_week year

        Raises:
            InvalidCronSyntaxError: On a wrong field count or any bad field.
        """
        parts = expr.split()
        num_parts = len(parts)

        if num_parts == 6:
            parts.append("*")
        elif num_parts != 7:
            msg = (
                f"Invalid cron expression: '{expr}'. "
                f"Expected 6 or 7 fields, got {num_parts}."
            )
            raise InvalidCronSyntaxError(msg, expression=expr)

        second, minute, hour, day, month, dow, year = parts
        try:
            return cls(
                config=CronScheduleConfig(
                    second=second,
                    minute=minute,
                    hour=hour,
                    day=day,
                    month=month,
                    day_of_week=dow,
                    year=year,
                    tz=tz,
                ),
            )
        except ValueError as e:
            msg = f"Invalid cron expression: '{expr}'. {e}"
            raise InvalidCronSyntaxError(msg, expression=expr) from e

    def first_at_or_after(self, t: datetime) -> datetime | None:
        return self._next_occurrence(self._instant(t))

    def first_after(self, t: datetime) -> datetime | None:
        return self._next_occurrence(self._instant(t) + ONE_SECOND)

    def last_at_or_before(self, t: datetime) -> datetime | None:
        return self._previous_occurrence(self._instant(t))

    def now(self) -> datetime:
        """Current time in the schedule's zone."""
        if self.tz is None:
            return datetime.now().astimezone()
        return datetime.now(self.tz)

    @staticmethod
    def _instant(t: datetime) -> datetime:
        """`t` in UTC, truncated to the second. Naive values are local time."""
        return t.astimezone(timezone.utc).replace(microsecond=0)

    def _localize(self, instant: datetime) -> datetime:
        if self.tz is None:
            return instant.astimezone()
        return instant.astimezone(self.tz)

    def _offset(self, instant: datetime) -> timedelta:
        return self._localize(instant).utcoffset() or timedelta(0)

    def _wall(self, instant: datetime) -> datetime:
        return self._localize(instant).replace(tzinfo=None)

    def _next_occurrence(self, start: datetime) -> datetime | None:
        """
        First occurrence at or after the UTC instant `start`.

        Wall-clock time only maps back to instants while the UTC offset holds,
        so the search restarts at every offset change it would step over.
        Occurrences in a repeated hour are found on both passes; wall times
        skipped by a forward shift never occur.
        """
        while True:
            offset = self._offset(start)
            wall = self._search_forward(self._wall(start))
            if wall is None:
                return None
            instant = (wall - offset).replace(tzinfo=timezone.utc)
            shift = self._next_shift(start, instant, offset)
            if shift is None:
                return self._localize(instant)
            start = shift

    def _previous_occurrence(self, end: datetime) -> datetime | None:
        """Last occurrence at or before the UTC instant `end`."""
        while True:
            offset = self._offset(end)
            wall = self._search_backward(self._wall(end))
            if wall is None:
                return None
            instant = (wall - offset).replace(tzinfo=timezone.utc)
            shift = self._previous_shift(end, instant, offset)
            if shift is None:
                return self._localize(instant)
            end = shift

    def _next_shift(
        self, start: datetime, end: datetime, offset: timedelta
    ) -> datetime | None:
        """First instant in (start, end] whose UTC offset is not `offset`."""
        lo = start
        point = start + OFFSET_SCAN_STEP
        while point < end and self._offset(point) == offset:
            lo = point
            point += OFFSET_SCAN_STEP
        hi = min(point, end)
        if self._offset(hi) == offset:
            return None

        while hi - lo > ONE_SECOND:
            mid = lo + timedelta(seconds=(hi - lo) // ONE_SECOND // 2)
            if self._offset(mid) == offset:
                lo = mid
            else:
                hi = mid
        return hi

    def _previous_shift(
        self, end: datetime, start: datetime, offset: timedelta
    ) -> datetime | None:
        """Last instant in [start, end) whose UTC offset is not `offset`."""
        hi = end
        point = end - OFFSET_SCAN_STEP
        while point > start and self._offset(point) == offset:
            hi = point
            point -= OFFSET_SCAN_STEP
        lo = max(point, start)
        if self._offset(lo) == offset:
            return None

        while hi - lo > ONE_SECOND:
            mid = lo + timedelta(seconds=(hi - lo) // ONE_SECOND // 2)
            if self._offset(mid) == offset:
                hi = mid
            else:
                lo = mid
        return lo

    def _matches_day(self, dt: datetime) -> bool:
        # Python 0=Mon, cron 1=Sun
        cron_dow = (dt.weekday() + 1) % 7 + 1
        return self._day.matches(dt.day) and self._day_of_week.matches(cron_dow)

    def _search_forward(self, candidate: datetime) -> datetime | None:
        """Finds the first matching wall time at or after `candidate`."""
        while candidate.year <= MAX_YEAR:
            if not self._year.matches(candidate.year):
                next_year = self._advance_year(candidate)
                if next_year is None:
                    return None
                candidate = next_year
                continue

            if not self._month.matches(candidate.month):
                candidate = self._advance_month(candidate)
                continue

            if not self._matches_day(candidate):
                candidate = self._advance_day(candidate)
                continue

            if not self._hour.matches(candidate.hour):
                candidate = self._advance_hour(candidate)
                continue

            if not self._minute.matches(candidate.minute):
                candidate = self._advance_minute(candidate)
                continue

            if not self._second.matches(candidate.second):
                candidate = self._advance_second(candidate)
                continue

            return candidate

        return None

    def _search_backward(self, candidate: datetime) -> datetime | None:
        """Finds the last matching wall time at or before `candidate`."""
        while candidate.year >= MIN_YEAR:
            if not self._year.matches(candidate.year):
                prev_year = self._retreat_year(candidate)
                if prev_year is None:
                    return None
                candidate = prev_year
                continue

            if not self._month.matches(candidate.month):
                candidate = self._retreat_month(candidate)
                continue

            if not self._matches_day(candidate):
                candidate = self._retreat_day(candidate)
                continue

            if not self._hour.matches(candidate.hour):
                candidate = self._retreat_hour(candidate)
                continue

            if not self._minute.matches(candidate.minute):
                candidate = self._retreat_minute(candidate)
                continue

            if not self._second.matches(candidate.second):
                candidate = self._retreat_second(candidate)
                continue

            return candidate

        return None

    def _advance_year(self, dt: datetime) -> datetime | None:
        next_val = self._year.next_value(dt.year)
        if next_val is None:
            return None
        return datetime(next_val, 1, 1)

    def _advance_month(self, dt: datetime) -> datetime:
        """Jump to the start of the next valid month."""
        next_val = self._month.next_value(dt.month)
        if next_val:
            year = dt.year
        else:
            next_val = self._month.first_value()
            year = dt.year + 1

        return datetime(year, next_val, 1)

    def _advance_day(self, dt: datetime) -> datetime:
        """Jump to the start of the next candidate day."""
        days_in_month = calendar.monthrange(dt.year, dt.month)[1]
        next_val = self._day.next_value(dt.day)

        if not next_val or next_val > days_in_month:
            return self._advance_month(dt)

        return dt.replace(day=next_val, hour=0, minute=0, second=0)

    def _advance_hour(self, dt: datetime) -> datetime:
        next_val = self._hour.next_value(dt.hour)
        if next_val is None:
            return self._advance_day(dt)
        return dt.replace(hour=next_val, minute=0, second=0)

    def _advance_minute(self, dt: datetime) -> datetime:
        next_val = self._minute.next_value(dt.minute)
        if next_val is None:
            return self._advance_hour(dt)
        return dt.replace(minute=next_val, second=0)

    def _advance_second(self, dt: datetime) -> datetime:
        next_val = self._second.next_value(dt.second)
        if next_val is None:
            return self._advance_minute(dt)
        return dt.replace(second=next_val)

    def _retreat_year(self, dt: datetime) -> datetime | None:
        prev_val = self._year.prev_value(dt.year)
        if prev_val is None:
            return None
        return datetime(prev_val, 12, 31, 23, 59, 59)

    def _retreat_month(self, dt: datetime) -> datetime:
        """Jump to the last second of the previous valid month."""
        prev_val = self._month.prev_value(dt.month)
        if prev_val:
            year = dt.year
        else:
            prev_val = self._month.last_value()
            year = dt.year - 1

        last_day = calendar.monthrange(year, prev_val)[1]
        return datetime(year, prev_val, last_day, 23, 59, 59)

    def _retreat_day(self, dt: datetime) -> datetime:
        """Jump to the last second of the previous candidate day."""
        prev_val = self._day.prev_value(dt.day)
        if prev_val is None:
            return self._retreat_month(dt)
        return dt.replace(day=prev_val, hour=23, minute=59, second=59)

    def _retreat_hour(self, dt: datetime) -> datetime:
        prev_val = self._hour.prev_value(dt.hour)
        if prev_val is None:
            return self._retreat_day(dt)
        return dt.replace(hour=prev_val, minute=59, second=59)

    def _retreat_minute(self, dt: datetime) -> datetime:
        prev_val = self._minute.prev_value(dt.minute)
        if prev_val is None:
            return self._retreat_hour(dt)
        return dt.replace(minute=prev_val, second=59)

    def _retreat_second(self, dt: datetime) -> datetime:
        prev_val = self._second.prev_value(dt.second)
        if prev_val is None:
            return self._retreat_minute(dt)
        return dt.replace(second=prev_val)


def parse_schedule(expr: str, tz: tzinfo | None = None) -> CronSchedule:
    """Parses a canonical cron string into a CronSchedule."""
    return CronSchedule.from_string(expr, tz=tz)
