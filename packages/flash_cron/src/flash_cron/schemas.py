"""Pydantic schemas/data contracts for schedules."""

import zoneinfo
from datetime import timezone, tzinfo
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, field_serializer, field_validator

LOCAL_TIMEZONE = "local"


def validate_timezone(v: Any) -> Any:
    """Ensure the value is a timezone, a ZoneInfo name, or "local" (None)."""
    if v is None or isinstance(v, tzinfo):
        return v
    if isinstance(v, str):
        if v.strip().lower() == LOCAL_TIMEZONE:
            return None
        try:
            return zoneinfo.ZoneInfo(v)
        except (zoneinfo.ZoneInfoNotFoundError, ValueError) as z:
            msg = f"Invalid timezone name: {v}"
            raise ValueError(msg) from z
    msg = f"Invalid timezone type: {type(v).__name__}"
    raise ValueError(msg)


# Pydantic V2 cannot generate a core schema for datetime.tzinfo, so the
# BeforeValidator does the type enforcement and conversion.
TzType = Annotated[Any, BeforeValidator(validate_timezone)]


def _serialize_tz(v: Any) -> str:
    if isinstance(v, zoneinfo.ZoneInfo):
        return v.key
    if isinstance(v, timezone):
        return str(v)
    if v is None:
        return LOCAL_TIMEZONE
    msg = f"Expected ZoneInfo, timezone or None, got {type(v).__name__}"
    raise ValueError(msg)


class CronScheduleConfig(BaseModel):
    """Field-wise configuration for a cron schedule.

    Supports 7 fields: second minute hour day month day_of_week year

    Aliases:
        - Days: SUN, MON, TUE, WED, THU, FRI, SAT (SUN is 1)
        - Months: JAN, FEB, MAR, APR, MAY, JUN, JUL, AUG, SEP, OCT, NOV, DEC

    Examples:
        - second="0", minute="0/15" - Every 15 minutes at :00
        - second="30", minute="0", hour="9", day="?", day_of_week="MON-FRI"
        - month="JAN,JUL", day="1" - First day of January and July
    """

    second: str = "0"
    minute: str = "*"
    hour: str = "*"
    day: str = "*"
    month: str = "*"
    day_of_week: str = "*"
    year: str = "*"
    tz: TzType | None = None

    @field_serializer("tz")
    def serialize_timezone(self, v: Any) -> str:
        """Convert ZoneInfo or timezone object to string for JSON serialization."""
        return _serialize_tz(v)


class ScheduleTimerConfig(BaseModel):
    """Declarative definition of a named schedule timer.

    `expression` is either canonical cron syntax or an English phrase and is
    checked eagerly, so a bad schedule fails when the config is loaded rather
    than on the first poll. `tz` is "local", an IANA zone name, or None for
    the CRON_TIMEZONE setting.
    """

    expression: str
    name: str | None = None
    tz: str | None = None

    @field_validator("expression")
    @classmethod
    def validate_expression(cls, v: str) -> str:
        from .expression import parse_expression
        from .rules.cron import parse_schedule

        parse_schedule(parse_expression(v))
        return v

    @field_validator("tz")
    @classmethod
    def validate_tz(cls, v: str | None) -> str | None:
        if v is not None:
            validate_timezone(v)
        return v
