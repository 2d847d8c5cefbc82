# app/utils/date_time.py
"""
Pure time calculations for parking passes.
No DB access, no clock reads: every function takes `now` explicitly.
All datetimes are naive UTC, as stored by the models.

Durations use whole units truncated toward zero: a 3h59m window counts as
3 hours, a 15m40s gap counts as 15 minutes.
"""

import math
from datetime import datetime, timedelta, timezone
from typing import Iterable, Optional
from zoneinfo import ZoneInfo

from app.config import settings

# Fixed tolerance between back-to-back passes. Not derived from a policy's grace period.
CONSECUTIVE_GAP_TOLERANCE_MINUTES = 15


def _whole_minutes(delta: timedelta) -> int:
    return int(delta.total_seconds() / 60)


def _whole_hours(delta: timedelta) -> int:
    return int(delta.total_seconds() / 3600)


def plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


# ── Pass windows ─────────────────────────────────────────────────────────────

def calculate_consecutive_hours(windows: Iterable) -> int:
    """
    Hours of the most recent unbroken chain of passes.

    Windows are walked in start-time order. A window starting no more than
    CONSECUTIVE_GAP_TOLERANCE_MINUTES after the previous window's end extends
    the chain; a longer gap discards the chain and starts a new one.

    Overlapping windows (negative gap) also extend the chain and are summed in
    full, so overlapping wall-clock time is counted twice. Existing pass history
    was accumulated under this rule; keep it unless product confirms otherwise.
    """
    ordered = sorted(windows, key=lambda w: w.start_time)
    if not ordered:
        return 0

    first = ordered[0]
    current_end = first.end_time
    total = _whole_hours(first.end_time - first.start_time)

    for window in ordered[1:]:
        gap_minutes = _whole_minutes(window.start_time - current_end)
        hours = _whole_hours(window.end_time - window.start_time)
        if gap_minutes <= CONSECUTIVE_GAP_TOLERANCE_MINUTES:
            total += hours
        else:
            total = hours
        current_end = window.end_time

    return total


def calculate_end_time(start_time: datetime, duration_hours: int) -> datetime:
    return start_time + timedelta(hours=duration_hours)


def extend_end_time(current_end_time: datetime, extension_hours: int) -> datetime:
    return current_end_time + timedelta(hours=extension_hours)


def remaining_minutes(end_time: datetime, now: datetime) -> int:
    return max(0, _whole_minutes(end_time - now))


def is_pass_expired(end_time: datetime, now: datetime) -> bool:
    return now > end_time


def is_pass_active(start_time: datetime, end_time: datetime, now: datetime) -> bool:
    return start_time < now < end_time


# ── Cooldown ─────────────────────────────────────────────────────────────────

def cooldown_end_time(last_end_time: datetime, cooldown_hours: int) -> datetime:
    return last_end_time + timedelta(hours=cooldown_hours)


def is_cooldown_period_over(last_end_time: datetime, cooldown_hours: int, now: datetime) -> bool:
    """Strict: at exactly the cooldown end the plate is still cooling down."""
    return now > cooldown_end_time(last_end_time, cooldown_hours)


def hours_until_cooldown_ends(last_end_time: datetime, cooldown_hours: int, now: datetime) -> int:
    if is_cooldown_period_over(last_end_time, cooldown_hours, now):
        return 0
    minutes = _whole_minutes(cooldown_end_time(last_end_time, cooldown_hours) - now)
    return math.ceil(minutes / 60)


# ── Operating hours ──────────────────────────────────────────────────────────

def facility_local_time(now: datetime, tz_name: Optional[str] = None) -> datetime:
    """Convert a naive UTC timestamp to the facility's wall clock (naive)."""
    tz = ZoneInfo(tz_name or settings.FACILITY_TIMEZONE)
    return now.replace(tzinfo=timezone.utc).astimezone(tz).replace(tzinfo=None)


def is_within_operating_hours(start_hour: Optional[int], end_hour: Optional[int],
                              local_now: datetime) -> bool:
    """
    Start hour inclusive, end hour exclusive. start > end is an overnight
    window (e.g. 22 → 6). Either bound missing means open around the clock.
    """
    if start_hour is None or end_hour is None:
        return True

    hour = local_now.hour
    if start_hour > end_hour:
        return hour >= start_hour or hour < end_hour
    return start_hour <= hour < end_hour


# ── Grace period ─────────────────────────────────────────────────────────────

def grace_period_end(end_time: datetime, grace_period_minutes: int) -> datetime:
    return end_time + timedelta(minutes=grace_period_minutes)


def can_extend_pass(end_time: datetime, grace_period_minutes: int, now: datetime) -> bool:
    """True strictly before the grace period runs out; the boundary instant denies."""
    return now < grace_period_end(end_time, grace_period_minutes)


def is_expired_beyond_grace(end_time: datetime, grace_period_minutes: int, now: datetime) -> bool:
    """True strictly after the grace period; the boundary instant is not expired."""
    return now > grace_period_end(end_time, grace_period_minutes)


# ── Display ──────────────────────────────────────────────────────────────────

def format_hour(hour: int) -> str:
    """24h hour → '8:00 AM' style. 24 renders as midnight."""
    hour = hour % 24
    if hour == 0:
        return "12:00 AM"
    if hour == 12:
        return "12:00 PM"
    if hour < 12:
        return f"{hour}:00 AM"
    return f"{hour - 12}:00 PM"


def ordinal_suffix(num: int) -> str:
    j, k = num % 10, num % 100
    if j == 1 and k != 11:
        return "st"
    if j == 2 and k != 12:
        return "nd"
    if j == 3 and k != 13:
        return "rd"
    return "th"


def format_duration(hours: int) -> str:
    if hours < 24:
        return plural(hours, "hour")
    days, rest = divmod(hours, 24)
    if rest == 0:
        return plural(days, "day")
    return f"{plural(days, 'day')} {plural(rest, 'hour')}"
