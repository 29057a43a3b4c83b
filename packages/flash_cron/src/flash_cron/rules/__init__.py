"""
Domain - Recurrence Rules.

Rules are pure: given a point in time they compute the neighbouring
occurrence. Same inputs always produce the same outputs.
No I/O, no asyncio calls, no side effects.
"""

from .base import RecurrenceRule
from .cron import CronField, CronSchedule, parse_schedule

__all__ = [
    "RecurrenceRule",
    "CronField",
    "CronSchedule",
    "parse_schedule",
]
