from datetime import date, datetime, time, timezone
from typing import Optional, Tuple
from zoneinfo import ZoneInfo

from dreampuff.config import get_settings

# id-ID names, Monday first (datetime.weekday() order)
_WEEKDAYS_ID = ("Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Minggu")
_MONTHS_ID = (
    "Januari", "Februari", "Maret", "April", "Mei", "Juni",
    "Juli", "Agustus", "September", "Oktober", "November", "Desember",
)


def utcnow() -> datetime:
    """Server-side 'now' in UTC (naive, canonical storage format)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def local_tz() -> ZoneInfo:
    """Timezone in which the shop's calendar days are counted."""
    return ZoneInfo(get_settings().TIMEZONE)


def to_local(dt: datetime) -> datetime:
    """
    Convert a datetime to the shop's local timezone.

    Naive values are stored UTC and are interpreted as such.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(local_tz())


def to_storage(dt: datetime) -> datetime:
    """Normalize an aware datetime to naive UTC; naive values pass through."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def local_day_bounds(start_day: date, end_day: date) -> Tuple[datetime, datetime]:
    """
    Inclusive storage-format bounds covering whole local calendar days.

    The first instant is 00:00:00.000 of ``start_day`` and the last is
    23:59:59.999 of ``end_day``, both in the shop's timezone.
    """
    tz = local_tz()
    start = datetime.combine(start_day, time.min, tzinfo=tz)
    end = datetime.combine(end_day, time(23, 59, 59, 999000), tzinfo=tz)
    return to_storage(start), to_storage(end)


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """
    Serializes datetime to ISO-8601 with trailing 'Z'.
    If dt is naive, it is treated as UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    dt_utc = dt.astimezone(timezone.utc)
    return dt_utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_readable_date(dt: datetime) -> str:
    """Long Indonesian date, e.g. 'Senin, 19 Oktober 2026'."""
    local = to_local(dt)
    return (
        f"{_WEEKDAYS_ID[local.weekday()]}, {local.day} "
        f"{_MONTHS_ID[local.month - 1]} {local.year}"
    )
