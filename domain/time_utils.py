"""UTC time helpers.

Every stored instant is timezone-aware UTC. Naive datetimes coming from
callers are taken to already be UTC, aware ones are converted.
"""
from datetime import date, datetime, timezone
from typing import Callable

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current instant as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def to_utc(dt: datetime) -> datetime:
    """Normalize a datetime to aware UTC"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utc_today(clock: Clock = utc_now) -> date:
    """Current UTC calendar date according to ``clock``"""
    return to_utc(clock()).date()


def utc_date(dt: datetime) -> date:
    """Calendar date of ``dt`` once normalized to UTC"""
    return to_utc(dt).date()


def format_short_date(value, fmt: str = "%d/%m/%Y") -> str:
    """Format a date or datetime the way guest-facing messages show it"""
    if isinstance(value, datetime):
        value = utc_date(value)
    return value.strftime(fmt)
