"""
Cron jobs example for flash_cron.

Run this application with:
    python apps/example_cron/main.py

Stop it with Ctrl+C.
"""

import asyncio
import contextlib
import logging

from flash_core import setup_logging
from flash_cron import CronJobPlugin, ScheduleArrived, ScheduleTimer, schedule_passed

logger = logging.getLogger("flash_cron.example")

# Frame-style systems gated by a predicate, polled by the host loop
per_5_sec = schedule_passed("every 5 seconds")
per_min = schedule_passed("every 1 minute")
per_hour = schedule_passed("every hour")


def on_three_seconds(event: ScheduleArrived) -> None:
    logger.info("3 seconds passed (scheduled for %s)", event.scheduled_time)


async def run_systems(frame_interval: float = 1 / 60) -> None:
    while True:
        if per_5_sec():
            logger.info("system run every 5 sec")
        if per_min():
            logger.info("system run every minute")
        if per_hour():
            logger.info("system run every hour")
        await asyncio.sleep(frame_interval)


async def main() -> None:
    setup_logging(level="INFO")

    plugin = CronJobPlugin()
    plugin.add_timer(ScheduleTimer("every 3 seconds", name="three-seconds"))
    plugin.observe("three-seconds", on_three_seconds)

    await plugin.start()
    try:
        await run_systems()
    finally:
        await plugin.shutdown()


if __name__ == "__main__":
    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(main())
