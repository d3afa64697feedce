"""
Daily work-session window.

A work session belongs to the "shop day" that starts at the daily reset
boundary (04:00 local time by default) and runs until the next boundary.
Both functions are pure: the current time is always passed in.
"""
from datetime import datetime, timedelta
from typing import Optional

from dreampuff.config import get_settings
from dreampuff.utils.time_utils import local_tz


def _localize(dt: datetime) -> datetime:
    # Client-side timestamps without tzinfo are local wall-clock times
    if dt.tzinfo is None:
        return dt.replace(tzinfo=local_tz())
    return dt


def effective_window_start(now: datetime, reset_hour: Optional[int] = None) -> datetime:
    """
    Start of the shop day containing ``now``.

    Today's boundary if ``now`` is at or after it, otherwise yesterday's.
    """
    if reset_hour is None:
        reset_hour = get_settings().DAILY_RESET_HOUR
    now = _localize(now).astimezone(local_tz())
    boundary = now.replace(hour=reset_hour, minute=0, second=0, microsecond=0)
    if now < boundary:
        boundary -= timedelta(days=1)
    return boundary


def is_session_valid(
    last_session_start: datetime,
    now: datetime,
    reset_hour: Optional[int] = None,
) -> bool:
    """True iff ``last_session_start`` falls inside the current shop day (inclusive)."""
    return _localize(last_session_start) >= effective_window_start(now, reset_hour)
