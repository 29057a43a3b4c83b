"""English phrase to canonical cron translation."""

from __future__ import annotations

import re
from typing import Callable, Final

from .exceptions import UntranslatableExpressionError

WEEKDAYS: Final[dict[str, str]] = {
    "sunday": "SUN",
    "monday": "MON",
    "tuesday": "TUE",
    "wednesday": "WED",
    "thursday": "THU",
    "friday": "FRI",
    "saturday": "SAT",
}

_AT = r"(?:\s+at\s+(?P<time>.+))?"
_TWELVE_HOUR = re.compile(
    r"^(?P<hour>\d{1,2})(?::(?P<minute>\d{2}))?\s*(?P<meridiem>am|pm)$"
)
_TWENTY_FOUR_HOUR = re.compile(r"^(?P<hour>\d{1,2}):(?P<minute>\d{2})$")


class _Untranslatable(Exception):
    """Internal signal that a matched phrase carries unusable values."""


def _every(count: str, upper: int) -> int:
    n = int(count)
    if n < 1 or n > upper:
        raise _Untranslatable
    return n


def _parse_time(text: str | None) -> tuple[int, int]:
    """Returns (hour, minute) for "9 am", "9:30 pm", "21:30", "noon", "midnight"."""
    if text is None or text == "midnight":
        return 0, 0
    if text == "noon":
        return 12, 0

    match = _TWELVE_HOUR.match(text)
    if match:
        hour = int(match["hour"])
        minute = int(match["minute"] or 0)
        if not 1 <= hour <= 12 or minute > 59:
            raise _Untranslatable
        hour %= 12
        if match["meridiem"] == "pm":
            hour += 12
        return hour, minute

    match = _TWENTY_FOUR_HOUR.match(text)
    if match:
        hour, minute = int(match["hour"]), int(match["minute"])
        if hour > 23 or minute > 59:
            raise _Untranslatable
        return hour, minute

    raise _Untranslatable


def _on_days(days: str) -> Callable[[re.Match[str]], str]:
    def build(match: re.Match[str]) -> str:
        hour, minute = _parse_time(match["time"])
        return f"0 {minute} {hour} ? * {days} *"

    return build


def _daily(match: re.Match[str]) -> str:
    hour, minute = _parse_time(match["time"])
    return f"0 {minute} {hour} */1 * ? *"


def _on_weekday(match: re.Match[str]) -> str:
    return _on_days(WEEKDAYS[match["day"]])(match)


_RULES: Final[list[tuple[re.Pattern[str], Callable[[re.Match[str]], str]]]] = [
    (re.compile(r"^every second$"), lambda m: "* * * * * ? *"),
    (
        re.compile(r"^every (?P<n>\d+) seconds?$"),
        lambda m: f"0/{_every(m['n'], 59)} * * * * ? *",
    ),
    (re.compile(r"^every minute$"), lambda m: "0 * * * * ? *"),
    (
        re.compile(r"^every (?P<n>\d+) minutes?$"),
        lambda m: f"0 0/{_every(m['n'], 59)} * * * ? *",
    ),
    (re.compile(r"^every hour$"), lambda m: "0 0 * * * ? *"),
    (
        re.compile(r"^every (?P<n>\d+) hours?$"),
        lambda m: f"0 0 0/{_every(m['n'], 23)} * * ? *",
    ),
    (re.compile(rf"^every day{_AT}$"), _daily),
    (re.compile(rf"^every (?P<day>{'|'.join(WEEKDAYS)}){_AT}$"), _on_weekday),
    (re.compile(rf"^every weekday{_AT}$"), _on_days("MON-FRI")),
    (re.compile(rf"^every weekend{_AT}$"), _on_days("SAT,SUN")),
]


def str_cron_syntax(phrase: str) -> str:
    """
    Translate an English schedule phrase into canonical 7-field cron syntax.

    Matching is case-insensitive and ignores repeated whitespace.

    Raises:
        UntranslatableExpressionError: If no rule matches the phrase.

    Examples:
        >>> str_cron_syntax("every 5 seconds")
        '0/5 * * * * ? *'
        >>> str_cron_syntax("every day at 1 am")
        '0 0 1 */1 * ? *'
        >>> str_cron_syntax("every monday at 9:30 pm")
        '0 30 21 ? * MON *'
    """
    text = " ".join(phrase.lower().split())

    for pattern, build in _RULES:
        match = pattern.match(text)
        if match is None:
            continue
        try:
            return build(match)
        except _Untranslatable:
            break

    msg = f"Cannot translate schedule phrase: '{phrase}'"
    raise UntranslatableExpressionError(msg, expression=phrase)
