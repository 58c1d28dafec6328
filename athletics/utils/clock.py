"""
Time helpers.

Ledger timestamps are stored as naive UTC (like every other DateTime column in
the app); schedule logic works on timezone-aware datetimes.
"""
from datetime import datetime, timezone
from typing import Callable
from zoneinfo import ZoneInfo

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Current time as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def as_naive_utc(moment: datetime) -> datetime:
    """Convert an aware datetime to the naive UTC form stored in the database"""
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc).replace(tzinfo=None)


def local_time(moment: datetime, tz: ZoneInfo) -> datetime:
    """Aware datetime in the given zone (naive input is taken as UTC)"""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz)
