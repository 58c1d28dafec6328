"""
Reminder windows - decides whether a game is due for a reminder right now.

Two windows:
1. 24-hour reminder: game starts more than 21 and at most 27 hours from now.
   The window is 6 hours wide so an hourly pass (or a pass delayed by a
   restart) cannot step over it.
2. Game-day reminder: game is today (reference timezone) and it is
   between 8:00 and 9:00 AM local time.
"""
import enum
import re
from datetime import datetime, time, timedelta, timezone
from typing import List, Optional, Protocol
from zoneinfo import ZoneInfo

from athletics.models.sent_notification import NotificationKind
from athletics.utils.clock import local_time

# Window bounds in hours before kickoff (lower bound exclusive, upper inclusive)
WINDOW_24_HOUR_MIN = 21
WINDOW_24_HOUR_MAX = 27

# Game-day window [start, end) in local wall-clock time
GAME_DAY_WINDOW_START = time(8, 0)
GAME_DAY_WINDOW_END = time(9, 0)

# "7:00 PM", "11:30am", "7:00 PM (JV 5:30)"
_TIME_PATTERN = re.compile(r"(\d+):(\d+)\s*(AM|PM)", re.IGNORECASE)


class ScheduledGame(Protocol):
    date: object
    time: str


class ReminderWindow(str, enum.Enum):
    TWENTY_FOUR_HOUR = "24hour"
    GAME_DAY = "gameday"

    @property
    def email_kind(self) -> NotificationKind:
        if self is ReminderWindow.TWENTY_FOUR_HOUR:
            return NotificationKind.REMINDER_24_HOUR
        return NotificationKind.GAME_DAY

    @property
    def push_kind(self) -> NotificationKind:
        if self is ReminderWindow.TWENTY_FOUR_HOUR:
            return NotificationKind.REMINDER_24_HOUR_PUSH
        return NotificationKind.GAME_DAY_PUSH


def parse_game_time(text: Optional[str]) -> Optional[time]:
    """
    Parse the time of day out of a schedule time string.

    Returns None when the string has no "H:MM AM/PM" in it (e.g. "TBA").
    """
    if not text:
        return None

    match = _TIME_PATTERN.search(text)
    if not match:
        return None

    hours = int(match.group(1))
    minutes = int(match.group(2))
    is_pm = match.group(3).upper() == "PM"

    if is_pm and hours != 12:
        hours += 12
    if not is_pm and hours == 12:
        hours = 0

    if hours > 23 or minutes > 59:
        return None
    return time(hours, minutes)


def game_start(game: ScheduledGame, tz: ZoneInfo) -> datetime:
    """Kickoff as an aware datetime. Unparseable times fall back to midnight."""
    game_date = game.date
    if isinstance(game_date, datetime):
        game_date = game_date.date()
    start_time = parse_game_time(game.time) or time(0, 0)
    return datetime.combine(game_date, start_time, tzinfo=tz)


def hours_until(game: ScheduledGame, now: datetime, tz: ZoneInfo) -> float:
    # Compare in UTC so a DST change between now and kickoff is counted
    start = game_start(game, tz).astimezone(timezone.utc)
    return (start - local_time(now, timezone.utc)) / timedelta(hours=1)


def in_24_hour_window(game: ScheduledGame, now: datetime, tz: ZoneInfo) -> bool:
    remaining = hours_until(game, now, tz)
    return WINDOW_24_HOUR_MIN < remaining <= WINDOW_24_HOUR_MAX


def in_game_day_window(game: ScheduledGame, now: datetime, tz: ZoneInfo) -> bool:
    local_now = local_time(now, tz)
    if game_start(game, tz).date() != local_now.date():
        return False
    return GAME_DAY_WINDOW_START <= local_now.time() < GAME_DAY_WINDOW_END


def due_windows(game: ScheduledGame, now: datetime, tz: ZoneInfo) -> List[ReminderWindow]:
    """All windows the game is in right now (24-hour first)."""
    windows = []
    if in_24_hour_window(game, now, tz):
        windows.append(ReminderWindow.TWENTY_FOUR_HOUR)
    if in_game_day_window(game, now, tz):
        windows.append(ReminderWindow.GAME_DAY)
    return windows
