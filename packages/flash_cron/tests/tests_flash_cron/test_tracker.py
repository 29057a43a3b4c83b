from datetime import datetime, timedelta, timezone

import pytest
from flash_cron.exceptions import (
    ExpressionError,
    InvalidCronSyntaxError,
    UntranslatableExpressionError,
)
from flash_cron.rules import RecurrenceRule
from flash_cron.tracker import ARM_EPSILON, TriggerTracker, make_tracker


@pytest.fixture
def t0():
    """Thursday, Jan 1st 2026 00:00:00 UTC."""
    return datetime(2026, 1, 1, tzinfo=timezone.utc)


def seconds(n: float) -> timedelta:
    return timedelta(seconds=n)


class ListRule(RecurrenceRule):
    """Rule over an explicit, sorted list of occurrences."""

    def __init__(self, occurrences: list[datetime]):
        self.occurrences = sorted(occurrences)

    def first_at_or_after(self, t):
        t = t.replace(microsecond=0)
        return next((o for o in self.occurrences if o >= t), None)

    def first_after(self, t):
        t = t.replace(microsecond=0)
        return next((o for o in self.occurrences if o > t), None)

    def last_at_or_before(self, t):
        t = t.replace(microsecond=0)
        return next((o for o in reversed(self.occurrences) if o <= t), None)


class TestBootstrap:
    """First poll on an unarmed tracker."""

    def test_due_immediately_when_now_is_an_occurrence(self, t0):
        tracker = make_tracker("every second", tz="UTC")

        assert tracker.armed is False
        assert tracker.poll(t0) is True
        assert tracker.last_fired == t0

    def test_sub_second_now_fires_for_its_own_second(self, t0):
        tracker = make_tracker("* * * * * ?", tz="UTC")

        assert tracker.poll(t0 + timedelta(milliseconds=500)) is True
        assert tracker.last_fired == t0

    def test_future_occurrence_arms_just_before_it(self, t0):
        tracker = make_tracker("0 0 * * * ?", tz="UTC")
        top_of_hour = t0 + timedelta(hours=1)

        assert tracker.poll(t0 + timedelta(minutes=30)) is False
        assert tracker.armed is True
        assert tracker.last_fired == top_of_hour - ARM_EPSILON

        assert tracker.poll(top_of_hour - timedelta(milliseconds=1)) is False
        assert tracker.poll(top_of_hour) is True
        assert tracker.last_fired == top_of_hour

    def test_exhausted_rule_stays_unarmed(self):
        tracker = make_tracker("0 0 0 1 1 ? 2030", tz="UTC")

        assert tracker.poll(datetime(2031, 1, 1, tzinfo=timezone.utc)) is False
        assert tracker.armed is False
        assert tracker.last_fired is None


class TestArmed:
    def test_no_fire_before_period_elapses(self, t0):
        tracker = make_tracker("every 1 hour", tz="UTC")

        assert tracker.poll(t0 + seconds(1)) is False
        assert tracker.poll(t0 + seconds(1800)) is False
        assert tracker.poll(t0 + seconds(3601)) is True

    def test_each_occurrence_reported_once(self, t0):
        tracker = make_tracker("0/5 * * * * ?", tz="UTC")

        assert tracker.poll(t0) is True
        assert tracker.poll(t0) is False
        assert tracker.poll(t0 + seconds(4)) is False
        assert tracker.poll(t0 + seconds(5)) is True
        assert tracker.poll(t0 + seconds(5)) is False
        assert tracker.poll(t0 + seconds(9.9)) is False

    def test_coalescing(self, t0):
        tracker = make_tracker("every 1 second", tz="UTC")

        assert tracker.poll(t0) is True
        assert tracker.poll(t0 + seconds(10)) is True
        assert tracker.last_fired == t0 + seconds(10)
        assert tracker.poll(t0 + seconds(10.5)) is False
        assert tracker.poll(t0 + seconds(11)) is True

    def test_coalescing_after_long_gap_lands_on_latest_occurrence(self, t0):
        tracker = make_tracker("0 0/15 * * * ?", tz="UTC")
        tracker.poll(t0)

        # Asleep for three days
        assert tracker.poll(t0 + timedelta(days=3, minutes=20)) is True
        assert tracker.last_fired == t0 + timedelta(days=3, minutes=15)
        assert tracker.poll(t0 + timedelta(days=3, minutes=29)) is False
        assert tracker.poll(t0 + timedelta(days=3, minutes=30)) is True

    def test_exhausted_rule_keeps_last_fired(self):
        utc = timezone.utc
        tracker = make_tracker("0 0 0 1 1 ? 2030", tz="UTC")

        assert tracker.poll(datetime(2029, 6, 1, tzinfo=utc)) is False
        assert tracker.poll(datetime(2030, 1, 1, tzinfo=utc)) is True
        assert tracker.poll(datetime(2035, 1, 1, tzinfo=utc)) is False
        assert tracker.last_fired == datetime(2030, 1, 1, tzinfo=utc)

    def test_frequent_polling_reports_every_occurrence(self, t0):
        """Polling every 100ms for 20s sees each 5-second occurrence exactly once."""
        tracker = make_tracker("every 5 seconds", tz="UTC")

        fired = []
        for k in range(201):
            now = t0 + timedelta(milliseconds=100 * k)
            if tracker.poll(now):
                fired.append(tracker.last_fired)

        assert fired == [t0 + seconds(n) for n in (0, 5, 10, 15, 20)]

    def test_irregular_polling_never_reports_twice(self, t0):
        tracker = make_tracker("0/7 * * * * ?", tz="UTC")

        now = t0
        reported = []
        for step in [0.3, 2.5, 11, 0.1, 6.9, 0.05, 31, 3, 3, 3, 120, 0.7] * 5:
            now += seconds(step)
            if tracker.poll(now):
                assert tracker.last_fired <= now
                assert tracker.last_fired == tracker.rule.last_at_or_before(now)
                reported.append(tracker.last_fired)

        assert reported == sorted(set(reported))

    def test_coalescing_with_irregular_rule(self, t0):
        rule = ListRule([t0 + seconds(3), t0 + seconds(7), t0 + seconds(20)])
        tracker = TriggerTracker(rule)

        assert tracker.poll(t0) is False
        assert tracker.last_fired == t0 + seconds(3) - ARM_EPSILON
        assert tracker.poll(t0 + seconds(10)) is True
        assert tracker.last_fired == t0 + seconds(7)
        assert tracker.poll(t0 + seconds(15)) is False
        assert tracker.poll(t0 + seconds(20)) is True
        assert tracker.poll(t0 + seconds(100)) is False


class TestConstruction:
    def test_idempotent_construction(self, t0):
        a = make_tracker("0/3 * * * * ?", tz="UTC")
        b = make_tracker("0/3 * * * * ?", tz="UTC")

        polls = [t0 + seconds(s) for s in (0, 1, 2.5, 3, 8, 8.2, 9, 30)]
        assert [a.poll(now) for now in polls] == [b.poll(now) for now in polls]
        assert a.last_fired == b.last_fired

    def test_invalid_english_rejected(self):
        with pytest.raises(UntranslatableExpressionError):
            make_tracker("not a real schedule")

    def test_invalid_cron_rejected(self):
        with pytest.raises(InvalidCronSyntaxError):
            make_tracker("61 * * * * ?")

    def test_errors_share_a_base(self):
        with pytest.raises(ExpressionError):
            make_tracker("not a real schedule")
        with pytest.raises(ExpressionError):
            make_tracker("* * * *")

    def test_valid_cron_accepted(self):
        tracker = make_tracker("0/5 * * * * *")

        assert isinstance(tracker, TriggerTracker)
        assert tracker.armed is False
        assert tracker.expression == "0/5 * * * * *"

    def test_timezone_argument(self, t0):
        utc_tracker = make_tracker("0 0 9 * * ?", tz="UTC")
        tokyo_tracker = make_tracker("0 0 9 * * ?", tz="Asia/Tokyo")

        # 00:00 UTC is 09:00 in Tokyo
        assert tokyo_tracker.poll(t0) is True
        assert utc_tracker.poll(t0) is False

    def test_naive_now_is_local_time(self):
        tracker = make_tracker("* * * * * ?", tz="local")
        now = datetime(2026, 1, 1, 12, 0, 0)

        assert tracker.poll(now) is True
        assert tracker.poll(now) is False
        assert tracker.poll(now + seconds(1)) is True


class TestDaylightSaving:
    """New York schedules polled with UTC `now` across both offset changes."""

    @staticmethod
    def sweep(tracker, start, stop, step):
        fired = []
        now = start
        while now <= stop:
            if tracker.poll(now):
                fired.append(tracker.last_fired.astimezone(timezone.utc))
            now += step
        return fired

    def test_repeated_hour_reports_once_per_poll_window(self):
        tracker = make_tracker("* * * * * ?", tz="America/New_York")
        second_pass = datetime(2026, 11, 1, 6, 30, tzinfo=timezone.utc)  # 01:30 EST

        polls = [second_pass + timedelta(milliseconds=100 * k) for k in range(10)]
        assert [tracker.poll(now) for now in polls] == [True] + [False] * 9
        assert tracker.last_fired == second_pass

    def test_repeated_hour_fires_each_occurrence_once(self):
        tracker = make_tracker("0/5 * * * * ?", tz="America/New_York")
        start = datetime(2026, 11, 1, 5, 0, tzinfo=timezone.utc)
        stop = datetime(2026, 11, 1, 7, 30, tzinfo=timezone.utc)

        fired = self.sweep(tracker, start, stop, seconds(1))

        assert fired == [start + seconds(5 * k) for k in range(1801)]

    def test_hourly_schedule_fires_on_both_passes(self):
        tracker = make_tracker("0 0 * * * ?", tz="America/New_York")

        fired = self.sweep(
            tracker,
            datetime(2026, 11, 1, 4, 30, tzinfo=timezone.utc),
            datetime(2026, 11, 1, 7, 30, tzinfo=timezone.utc),
            timedelta(minutes=10),
        )

        assert fired == [
            datetime(2026, 11, 1, 5, tzinfo=timezone.utc),  # 01:00 EDT
            datetime(2026, 11, 1, 6, tzinfo=timezone.utc),  # 01:00 EST
            datetime(2026, 11, 1, 7, tzinfo=timezone.utc),  # 02:00 EST
        ]

    def test_arming_before_the_repeated_hour(self):
        tracker = make_tracker("0 0 * * * ?", tz="America/New_York")
        last_edt_second = datetime(2026, 11, 1, 5, 59, 59, tzinfo=timezone.utc)
        first_est_hour = datetime(2026, 11, 1, 6, tzinfo=timezone.utc)

        assert tracker.poll(last_edt_second) is False
        assert tracker.last_fired == first_est_hour - ARM_EPSILON
        assert tracker.poll(last_edt_second + seconds(0.5)) is False
        assert tracker.poll(first_est_hour) is True
        assert tracker.last_fired == first_est_hour

    def test_skipped_hour_fires_once_per_elapsed_minute(self):
        tracker = make_tracker("0 * * * * ?", tz="America/New_York")
        start = datetime(2026, 3, 8, 6, 0, tzinfo=timezone.utc)
        stop = datetime(2026, 3, 8, 8, 0, tzinfo=timezone.utc)

        fired = self.sweep(tracker, start, stop, seconds(30))

        assert fired == [start + timedelta(minutes=k) for k in range(121)]


def test_reset_returns_to_unarmed(t0):
    tracker = make_tracker("every second", tz="UTC")
    tracker.poll(t0)

    tracker.reset()

    assert tracker.armed is False
    assert tracker.last_fired is None
    assert tracker.poll(t0) is True
