"""
Settings for the cron package.
"""

from datetime import tzinfo

from flash_core.config import FlashSettings
from pydantic import field_validator

from .schemas import LOCAL_TIMEZONE, validate_timezone


class CronSettings(FlashSettings):
    """
    Cron defaults, overridable from the environment or `.env`.

    CRON_TIMEZONE applies to every schedule created without an explicit zone.
    """

    CRON_TIMEZONE: str = LOCAL_TIMEZONE
    CRON_TICK_INTERVAL: float = 1.0
    CRON_ERROR_BACKOFF_INTERVAL: float = 5.0

    @field_validator("CRON_TIMEZONE")
    @classmethod
    def validate_cron_timezone(cls, v: str) -> str:
        validate_timezone(v)
        return v

    @field_validator("CRON_TICK_INTERVAL", "CRON_ERROR_BACKOFF_INTERVAL")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            msg = "interval must be positive"
            raise ValueError(msg)
        return v


cron_settings = CronSettings()


def resolve_timezone(
    tz: tzinfo | str | None = None,
    settings: CronSettings | None = None,
) -> tzinfo | None:
    """
    Resolve a timezone argument to the zone a schedule runs in.

    Returns None for local time.

    Examples:
        >>> resolve_timezone("UTC")
        zoneinfo.ZoneInfo(key='UTC')
        >>> resolve_timezone("local") is None
        True
    """
    if tz is None:
        tz = (settings or cron_settings).CRON_TIMEZONE
    return validate_timezone(tz)
