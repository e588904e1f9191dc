"""Day keys and the Sunday-anchored weekly reset window.

All bucketing happens in one configured IANA zone (ENG_TIMEZONE). Day keys
are local calendar dates rendered as YYYY-MM-DD; the weekly reset boundary
is the next local Sunday midnight, stored as an aware UTC datetime.
Windows are half-open: start <= value < end.
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from engagement.errors import InvalidInput

DAY_KEY_FORMAT = "%Y-%m-%d"


def get_zone(tz: str | tzinfo | None = None) -> tzinfo:
    """Resolve a zone name to a tzinfo. None means UTC."""
    if tz is None:
        return timezone.utc
    if isinstance(tz, tzinfo):
        return tz
    try:
        return ZoneInfo(tz)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise InvalidInput(f"Unknown timezone: {tz!r}") from e


def as_utc(dt: datetime) -> datetime:
    """Normalize to aware UTC. Naive values (e.g. read back from SQLite) are taken as UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_day_key(key: str) -> date:
    """Parse a YYYY-MM-DD day key. Raises InvalidInput on anything else."""
    if not isinstance(key, str) or len(key) != 10:
        raise InvalidInput(f"Invalid day key: {key!r}")
    try:
        return datetime.strptime(key, DAY_KEY_FORMAT).date()
    except ValueError as e:
        raise InvalidInput(f"Invalid day key: {key!r}") from e


def to_local_date(value: date | datetime | str, tz: str | tzinfo | None = None) -> date:
    """Project a datetime, date or day key onto the local calendar."""
    if isinstance(value, datetime):
        return as_utc(value).astimezone(get_zone(tz)).date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return parse_day_key(value)
    raise InvalidInput(f"Expected a date, got {type(value).__name__}")


def day_key(value: date | datetime | str, tz: str | tzinfo | None = None) -> str:
    """Canonical YYYY-MM-DD key for the local day containing value."""
    return to_local_date(value, tz).strftime(DAY_KEY_FORMAT)


def local_today(now: datetime | None = None, tz: str | tzinfo | None = None) -> date:
    """Today's date in the configured zone."""
    return to_local_date(now or utc_now(), tz)


def yesterday_key(today: date) -> str:
    return (today - timedelta(days=1)).strftime(DAY_KEY_FORMAT)


def local_midnight(d: date, tz: str | tzinfo | None = None) -> datetime:
    """Local midnight of d, as aware UTC."""
    return datetime.combine(d, time.min, tzinfo=get_zone(tz)).astimezone(timezone.utc)


def next_weekly_reset(
    reference: datetime | date | None = None,
    tz: str | tzinfo | None = None,
) -> datetime:
    """Next Sunday 00:00 local strictly after reference, as aware UTC.

    A reference of exactly Sunday midnight returns the following Sunday.
    A bare date is taken as local midnight of that day.
    """
    if reference is None:
        reference = utc_now()
    d = to_local_date(reference, tz)
    # Sunday is 6 in Python's weekday(); shift so Sunday is 0.
    days_since_sunday = (d.weekday() + 1) % 7
    return local_midnight(d + timedelta(days=7 - days_since_sunday), tz)


def week_window(
    reset_at: datetime | date | str,
    tz: str | tzinfo | None = None,
) -> tuple[date, date]:
    """Local date window [reset - 7d, reset) ending at a reset boundary."""
    end = to_local_date(reset_at, tz)
    return end - timedelta(days=7), end


def current_week_window(now: datetime | None = None, tz: str | tzinfo | None = None) -> tuple[date, date]:
    """Window of the week in progress: [last Sunday, next Sunday)."""
    return week_window(next_weekly_reset(now, tz), tz)


def in_window(value: date | datetime, start: date | datetime, end: date | datetime) -> bool:
    """True iff start <= value < end."""
    return start <= value < end


def month_start(today: date) -> date:
    return today.replace(day=1)


def year_start(today: date) -> date:
    return today.replace(month=1, day=1)
