"""
Cron and English schedules with poll-based due detection.

Expression Format

    | sec  | min  | hour | day of month | month | day of week | year      |
    |------|------|------|--------------|-------|-------------|-----------|
    | *    | *    | *    | *            | *     | *           | *         |
    | 0-59 | 0-59 | 0-23 | 1-31         | 1-12  | 1-7         | 1970-2100 |

The year may be omitted. Comma lists (`0,15,30,45 * * * * ?`), ranges
(`1-5 * * * * ?`) and steps (`0/5 * * * * ?`) are allowed.
"""

from .config import CronSettings, cron_settings, resolve_timezone
from .english import str_cron_syntax
from .events import CallbackListener, EventListener, EventManager, ScheduleArrived
from .exceptions import (
    ExpressionError,
    InvalidCronSyntaxError,
    UntranslatableExpressionError,
)
from .expression import parse_expression
from .plugin import CronJobPlugin, ScheduleTimer
from .presets import CronPreset
from .rules import CronSchedule, RecurrenceRule, parse_schedule
from .schemas import CronScheduleConfig, ScheduleTimerConfig
from .tracker import (
    SchedulePredicate,
    TriggerTracker,
    make_tracker,
    make_trigger_predicate,
    schedule_passed,
)

__all__ = [
    "CallbackListener",
    "CronJobPlugin",
    "CronPreset",
    "CronSchedule",
    "CronScheduleConfig",
    "CronSettings",
    "EventListener",
    "EventManager",
    "ExpressionError",
    "InvalidCronSyntaxError",
    "RecurrenceRule",
    "ScheduleArrived",
    "SchedulePredicate",
    "ScheduleTimer",
    "ScheduleTimerConfig",
    "TriggerTracker",
    "UntranslatableExpressionError",
    "cron_settings",
    "make_tracker",
    "make_trigger_predicate",
    "parse_expression",
    "parse_schedule",
    "resolve_timezone",
    "schedule_passed",
    "str_cron_syntax",
]
