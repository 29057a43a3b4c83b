"""Predefined cron expressions for common schedules."""

from enum import Enum


class CronPreset(str, Enum):
    """
    Canonical expressions for common schedules.

    Each value is what the English translator produces for the matching
    phrase, e.g. EVERY_5_SEC for "every 5 seconds" and EVERY_1_PM for
    "every day at 1 pm".

    Examples:
        >>> schedule_passed(CronPreset.EVERY_HOUR)
    """

    EVERY_5_SEC = "0/5 * * * * ? *"
    EVERY_10_SEC = "0/10 * * * * ? *"
    EVERY_30_SEC = "0/30 * * * * ? *"
    EVERY_MIN = "0 * * * * ? *"
    EVERY_5_MIN = "0 0/5 * * * ? *"
    EVERY_10_MIN = "0 0/10 * * * ? *"
    EVERY_30_MIN = "0 0/30 * * * ? *"
    EVERY_HOUR = "0 0 * * * ? *"
    EVERY_DAY = "0 0 0 */1 * ? *"

    EVERY_1_AM = "0 0 1 */1 * ? *"
    EVERY_2_AM = "0 0 2 */1 * ? *"
    EVERY_3_AM = "0 0 3 */1 * ? *"
    EVERY_4_AM = "0 0 4 */1 * ? *"
    EVERY_5_AM = "0 0 5 */1 * ? *"
    EVERY_6_AM = "0 0 6 */1 * ? *"
    EVERY_7_AM = "0 0 7 */1 * ? *"
    EVERY_8_AM = "0 0 8 */1 * ? *"
    EVERY_9_AM = "0 0 9 */1 * ? *"
    EVERY_10_AM = "0 0 10 */1 * ? *"
    EVERY_11_AM = "0 0 11 */1 * ? *"
    EVERY_12_PM = "0 0 12 */1 * ? *"
    EVERY_1_PM = "0 0 13 */1 * ? *"
    EVERY_2_PM = "0 0 14 */1 * ? *"
    EVERY_3_PM = "0 0 15 */1 * ? *"
    EVERY_4_PM = "0 0 16 */1 * ? *"
    EVERY_5_PM = "0 0 17 */1 * ? *"
    EVERY_6_PM = "0 0 18 */1 * ? *"
    EVERY_7_PM = "0 0 19 */1 * ? *"
    EVERY_8_PM = "0 0 20 */1 * ? *"
    EVERY_9_PM = "0 0 21 */1 * ? *"
    EVERY_10_PM = "0 0 22 */1 * ? *"
    EVERY_11_PM = "0 0 23 */1 * ? *"
