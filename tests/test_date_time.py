"""Unit tests for the pure pass-time calculations."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import datetime, timedelta
from app.services.validation_types import PassWindow
from app.utils.date_time import (
    calculate_consecutive_hours, can_extend_pass, facility_local_time, format_duration,
    format_hour, hours_until_cooldown_ends, is_cooldown_period_over,
    is_expired_beyond_grace, is_pass_active, is_pass_expired, is_within_operating_hours,
    ordinal_suffix, remaining_minutes,
)

DAY = datetime(2026, 3, 10)


def at(hour, minute=0):
    return DAY + timedelta(hours=hour, minutes=minute)


def window(start, end):
    return PassWindow(start_time=start, end_time=end, duration=int((end - start).total_seconds() // 3600))


class TestConsecutiveHours:
    def test_empty_history_is_zero(self):
        assert calculate_consecutive_hours([]) == 0

    def test_back_to_back_passes_are_summed(self):
        assert calculate_consecutive_hours([window(at(8), at(12)), window(at(12), at(16))]) == 8

    def test_three_chained_passes(self):
        windows = [window(at(8), at(12)), window(at(12), at(16)), window(at(16), at(20))]
        assert calculate_consecutive_hours(windows) == 12

    def test_sixteen_minute_gap_resets_chain(self):
        assert calculate_consecutive_hours([window(at(8), at(12)), window(at(12, 16), at(16, 16))]) == 4

    def test_fifteen_minute_gap_is_continuous(self):
        assert calculate_consecutive_hours([window(at(8), at(12)), window(at(12, 15), at(16, 15))]) == 8

    def test_reset_discards_earlier_chain(self):
        windows = [window(at(0), at(4)), window(at(4), at(8)), window(at(10), at(12))]
        assert calculate_consecutive_hours(windows) == 2

    def test_input_order_does_not_matter(self):
        windows = [window(at(16), at(20)), window(at(8), at(12)), window(at(12), at(16))]
        assert calculate_consecutive_hours(windows) == 12

    def test_overlapping_passes_are_double_counted(self):
        # 08-12 and 10-14 overlap by two hours; both durations are summed.
        assert calculate_consecutive_hours([window(at(8), at(12)), window(at(10), at(14))]) == 8

    def test_partial_hours_truncate(self):
        assert calculate_consecutive_hours([window(at(8), at(11, 59))]) == 3


class TestCooldown:
    def test_cooldown_not_over_one_hour_after_end(self):
        assert not is_cooldown_period_over(at(11), 2, at(12))
        assert hours_until_cooldown_ends(at(11), 2, at(12)) == 1

    def test_cooldown_boundary_is_still_cooling(self):
        assert not is_cooldown_period_over(at(10), 2, at(12))

    def test_cooldown_over_after_boundary(self):
        assert is_cooldown_period_over(at(10), 2, at(12, 1))
        assert hours_until_cooldown_ends(at(10), 2, at(12, 1)) == 0

    def test_remaining_hours_round_up(self):
        assert hours_until_cooldown_ends(at(11, 30), 2, at(12)) == 2

    def test_zero_cooldown(self):
        assert is_cooldown_period_over(at(11), 0, at(11, 1))


class TestOperatingHours:
    def test_no_restriction_is_always_open(self):
        assert is_within_operating_hours(None, None, at(3))
        assert is_within_operating_hours(8, None, at(3))

    def test_day_window_start_inclusive_end_exclusive(self):
        assert is_within_operating_hours(8, 18, at(8))
        assert is_within_operating_hours(8, 18, at(17, 59))
        assert not is_within_operating_hours(8, 18, at(18))
        assert not is_within_operating_hours(8, 18, at(7, 59))

    def test_overnight_window(self):
        assert is_within_operating_hours(22, 6, at(23))
        assert is_within_operating_hours(22, 6, at(22))
        assert is_within_operating_hours(22, 6, at(0))
        assert is_within_operating_hours(22, 6, at(5, 59))
        assert not is_within_operating_hours(22, 6, at(6))
        assert not is_within_operating_hours(22, 6, at(12))

    def test_facility_local_time(self):
        assert facility_local_time(at(12), "UTC") == at(12)
        assert facility_local_time(at(12), "Asia/Dubai") == at(16)


class TestPassWindow:
    def test_expired_only_after_end(self):
        assert not is_pass_expired(at(12), at(11, 59))
        assert not is_pass_expired(at(12), at(12))
        assert is_pass_expired(at(12), at(12, 1))

    def test_active_strictly_inside_window(self):
        assert is_pass_active(at(8), at(12), at(10))
        assert not is_pass_active(at(8), at(12), at(8))
        assert not is_pass_active(at(8), at(12), at(12))
        assert not is_pass_active(at(8), at(12), at(13))


class TestGracePeriod:
    def test_extension_denied_at_exact_boundary(self):
        assert not can_extend_pass(at(12), 15, at(12, 15))

    def test_extension_allowed_inside_grace(self):
        assert can_extend_pass(at(12), 15, at(12, 14))

    def test_not_expired_at_exact_boundary(self):
        assert not is_expired_beyond_grace(at(12), 15, at(12, 15))
        assert is_expired_beyond_grace(at(12), 15, at(12, 16))


class TestDisplayHelpers:
    def test_format_hour(self):
        assert format_hour(0) == "12:00 AM"
        assert format_hour(8) == "8:00 AM"
        assert format_hour(12) == "12:00 PM"
        assert format_hour(18) == "6:00 PM"

    def test_ordinal_suffix(self):
        assert [f"{n}{ordinal_suffix(n)}" for n in (1, 2, 3, 4, 11, 12, 13, 21, 22)] == [
            "1st", "2nd", "3rd", "4th", "11th", "12th", "13th", "21st", "22nd"]

    def test_format_duration(self):
        assert format_duration(1) == "1 hour"
        assert format_duration(8) == "8 hours"
        assert format_duration(48) == "2 days"
        assert format_duration(25) == "1 day 1 hour"

    def test_remaining_minutes_never_negative(self):
        assert remaining_minutes(at(12), at(13)) == 0
        assert remaining_minutes(at(13), at(12, 30)) == 30
