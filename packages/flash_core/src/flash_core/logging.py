"""
Logging setup shared by the flash packages.

Log lines carry a UTC timestamp and, while a schedule is being polled or its
events dispatched, the schedule's name:

    2026-01-01 09:00:00.004Z INFO     [nightly] flash_cron.plugin: Added timer
"""

import logging
import sys
import time
from contextlib import contextmanager
from contextvars import ContextVar
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterator, Optional, Union

from .config import flash_settings

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(schedule_str)s%(name)s: %(message)s"

active_schedule: ContextVar[Optional[str]] = ContextVar("active_schedule", default=None)


class ScheduleFormatter(logging.Formatter):
    """Prefixes records with the active schedule name; timestamps are UTC."""

    converter = time.gmtime

    def formatTime(self, record, datefmt=None):  # noqa: N802
        utc = self.converter(record.created)
        if datefmt:
            return time.strftime(datefmt, utc)
        return "%s.%03dZ" % (time.strftime("%Y-%m-%d %H:%M:%S", utc), record.msecs)

    def format(self, record: logging.LogRecord) -> str:
        name = active_schedule.get()
        record.schedule_str = f"[{name}] " if name else ""
        return super().format(record)


def get_logger(name: str) -> logging.Logger:
    """Shorthand for ``logging.getLogger``; pass ``__name__``."""
    return logging.getLogger(name)


def _file_handler(
    log_file: Union[str, Path], max_bytes: int, backup_count: int
) -> Optional[logging.Handler]:
    path = Path(log_file).resolve()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return RotatingFileHandler(
            path,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        sys.stderr.write(f"Cannot open log file {path}: {e}\n")
        return None


def setup_logging(
    level: Union[int, str, None] = None,
    log_file: Optional[Union[str, Path]] = None,
    max_bytes: int = 10 * 1024 * 1024,
    backup_count: int = 10,
    capture_roots: bool = True,
    module_name: str = "flash_cron",
) -> None:
    """
    Send log records to stdout and, optionally, a rotating file.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        level: Name or number of the threshold level. Defaults to LOG_LEVEL.
        log_file: Rotating log file path. Defaults to LOG_FILE; None disables it.
        max_bytes: Size at which the log file is rotated.
        backup_count: Rotated files kept next to the active one.
        capture_roots: Configure the root logger. When False only the
            `module_name` logger is configured and it stops propagating.
        module_name: Logger namespace used when `capture_roots` is False.
    """
    level = flash_settings.LOG_LEVEL if level is None else level
    log_file = flash_settings.LOG_FILE if log_file is None else log_file
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    target = logging.getLogger() if capture_roots else logging.getLogger(module_name)
    target.handlers.clear()
    target.setLevel(level)
    if not capture_roots:
        target.propagate = False

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        file_handler = _file_handler(log_file, max_bytes, backup_count)
        if file_handler is not None:
            handlers.append(file_handler)

    formatter = ScheduleFormatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        target.addHandler(handler)


def current_schedule() -> Optional[str]:
    """Name of the schedule being handled in this context, if any."""
    return active_schedule.get()


@contextmanager
def scoped_schedule(name: str) -> Iterator[None]:
    """
    Tag every log line emitted inside the block with `name`.

    >>> with scoped_schedule("every-5-sec"):
    ...     logger.info("due")  # "... [every-5-sec] flash_cron.plugin: due"
    """
    token = active_schedule.set(name)
    try:
        yield
    finally:
        active_schedule.reset(token)
