"""Tests for the daily work-session window."""
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from dreampuff.session.timeframe import effective_window_start, is_session_valid

JAKARTA = ZoneInfo("Asia/Jakarta")


def local(*args):
    return datetime(*args, tzinfo=JAKARTA)


def test_window_starts_today_after_reset():
    """Test the window starts at today's 04:00 once it has passed."""
    assert effective_window_start(local(2026, 10, 19, 9, 30)) == local(2026, 10, 19, 4, 0)


def test_window_starts_yesterday_before_reset():
    """Test the window starts at yesterday's 04:00 before today's boundary."""
    assert effective_window_start(local(2026, 10, 19, 3, 59)) == local(2026, 10, 18, 4, 0)


def test_window_start_exactly_at_reset():
    """Test the boundary instant itself opens a new window."""
    assert effective_window_start(local(2026, 10, 19, 4, 0)) == local(2026, 10, 19, 4, 0)


def test_session_valid_within_window():
    """Test a session started after today's boundary is valid."""
    assert is_session_valid(local(2026, 10, 19, 8, 0), local(2026, 10, 19, 17, 0))


def test_session_valid_is_inclusive():
    """Test a session started exactly at the boundary is valid."""
    assert is_session_valid(local(2026, 10, 19, 4, 0), local(2026, 10, 19, 23, 0))


def test_session_expired_after_reset():
    """Test yesterday's session expires at 04:00."""
    assert not is_session_valid(local(2026, 10, 18, 22, 0), local(2026, 10, 19, 4, 0))
    assert not is_session_valid(local(2026, 10, 19, 3, 59), local(2026, 10, 19, 4, 1))


def test_late_night_session_valid_until_reset():
    """Test a session started at 23:00 is still valid at 03:30 next day."""
    assert is_session_valid(local(2026, 10, 18, 23, 0), local(2026, 10, 19, 3, 30))


def test_custom_reset_hour():
    """Test the boundary hour can be overridden."""
    now = local(2026, 10, 19, 5, 0)

    assert effective_window_start(now, reset_hour=6) == local(2026, 10, 18, 6, 0)
    assert is_session_valid(local(2026, 10, 18, 7, 0), now, reset_hour=6)
    assert not is_session_valid(local(2026, 10, 18, 7, 0), now)


def test_naive_datetimes_are_local():
    """Test naive timestamps are read as local wall-clock time."""
    assert effective_window_start(datetime(2026, 10, 19, 3, 0)) == local(2026, 10, 18, 4, 0)
    assert is_session_valid(datetime(2026, 10, 19, 4, 30), local(2026, 10, 19, 12, 0))


def test_aware_datetimes_in_other_zones():
    """Test aware timestamps are compared as instants."""
    # 21:30 UTC on the 18th is 04:30 on the 19th in Jakarta
    start = datetime(2026, 10, 18, 21, 30, tzinfo=timezone.utc)
    now = local(2026, 10, 19, 12, 0)

    assert is_session_valid(start, now)
    assert not is_session_valid(start - timedelta(hours=1), now)


def test_now_in_other_zone_uses_local_boundary():
    """Test the boundary is 04:00 shop time even when now is given in UTC."""
    # 22:00 UTC on the 19th is 05:00 on the 20th in Jakarta
    now = datetime(2026, 10, 19, 22, 0, tzinfo=timezone.utc)
    # 10:00 UTC on the 19th is 17:00 on the 19th in Jakarta: the previous shop day
    start = datetime(2026, 10, 19, 10, 0, tzinfo=timezone.utc)

    assert effective_window_start(now) == local(2026, 10, 20, 4, 0)
    assert effective_window_start(now).utcoffset() == timedelta(hours=7)
    assert not is_session_valid(start, now)
    assert is_session_valid(datetime(2026, 10, 19, 21, 30, tzinfo=timezone.utc), now)
