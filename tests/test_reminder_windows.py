"""
Tests for reminder window evaluation.

Tests cover:
- Parsing the free-text schedule time
- 24-hour window boundaries (exclusive at 21h, inclusive at 27h)
- Game-day window (8:00-9:00 AM local, same calendar day)
"""
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from athletics.models.sent_notification import NotificationKind
from athletics.services.reminder_windows import (
    ReminderWindow,
    parse_game_time,
    game_start,
    hours_until,
    in_24_hour_window,
    in_game_day_window,
    due_windows,
)
from tests.factories import NOW, TZ, hours_from_now, make_game


class TestParseGameTime:
    @pytest.mark.parametrize(
        "text,expected",
        [
            ("7:00 PM", time(19, 0)),
            ("7:00 pm", time(19, 0)),
            ("11:30AM", time(11, 30)),
            ("12:00 PM", time(12, 0)),
            ("12:15 AM", time(0, 15)),
            ("05:45 PM", time(17, 45)),
            ("6:30 PM (JV 4:30)", time(18, 30)),
        ],
    )
    def test_parses_meridiem_times(self, text, expected):
        assert parse_game_time(text) == expected

    @pytest.mark.parametrize("text", ["TBA", "", None, "7 PM", "19:00"])
    def test_unparseable_returns_none(self, text):
        assert parse_game_time(text) is None

    def test_unparseable_time_starts_at_midnight(self):
        game = make_game(NOW, time="TBA")
        assert game_start(game, TZ) == datetime(2026, 10, 20, 0, 0, tzinfo=TZ)


class Test24HourWindow:
    """Boundary policy: 21 < hours_until <= 27."""

    def test_just_inside_lower_bound(self):
        game = make_game(hours_from_now(21, 1))
        assert in_24_hour_window(game, NOW, TZ) is True

    def test_exactly_21_hours_is_excluded(self):
        game = make_game(hours_from_now(21))
        assert hours_until(game, NOW, TZ) == 21
        assert in_24_hour_window(game, NOW, TZ) is False

    def test_exactly_27_hours_is_included(self):
        game = make_game(hours_from_now(27))
        assert in_24_hour_window(game, NOW, TZ) is True

    def test_just_outside_upper_bound(self):
        game = make_game(hours_from_now(27, 1))
        assert in_24_hour_window(game, NOW, TZ) is False

    def test_nominal_24_hours(self):
        game = make_game(hours_from_now(24))
        assert due_windows(game, NOW, TZ) == [ReminderWindow.TWENTY_FOUR_HOUR]

    def test_past_game_not_eligible(self):
        game = make_game(hours_from_now(-2))
        assert in_24_hour_window(game, NOW, TZ) is False

    def test_utc_clock_matches_local_clock(self):
        game = make_game(hours_from_now(26))
        utc_now = NOW.astimezone(timezone.utc)
        assert hours_until(game, utc_now, TZ) == pytest.approx(26)

    def test_naive_now_is_utc(self):
        game = make_game(hours_from_now(24))
        naive_utc = NOW.astimezone(timezone.utc).replace(tzinfo=None)
        assert hours_until(game, naive_utc, TZ) == pytest.approx(24)
        assert in_24_hour_window(game, naive_utc, TZ) is True

    def test_counts_real_hours_across_dst_change(self):
        # DST ends 2026-11-01 02:00 in New York; the wall clock repeats an hour
        tz = ZoneInfo("America/New_York")
        now = datetime(2026, 10, 31, 20, 0, tzinfo=tz)
        game = make_game(datetime(2026, 11, 1, 19, 0, tzinfo=tz))
        assert hours_until(game, now, tz) == pytest.approx(24)


class TestGameDayWindow:
    def _morning(self, hour: int, minute: int = 0) -> datetime:
        return datetime(2026, 10, 20, hour, minute, tzinfo=TZ)

    def test_inside_window(self):
        game = make_game(self._morning(19))
        assert in_game_day_window(game, self._morning(8, 30), TZ) is True

    def test_window_start_is_inclusive(self):
        game = make_game(self._morning(19))
        assert in_game_day_window(game, self._morning(8, 0), TZ) is True

    def test_window_end_is_exclusive(self):
        game = make_game(self._morning(19))
        assert in_game_day_window(game, self._morning(9, 0), TZ) is False

    def test_before_window(self):
        game = make_game(self._morning(19))
        assert in_game_day_window(game, self._morning(7, 59), TZ) is False

    def test_game_tomorrow_not_eligible(self):
        game = make_game(self._morning(19) + timedelta(days=1))
        assert in_game_day_window(game, self._morning(8, 30), TZ) is False

    def test_unparseable_time_still_matches_by_date(self):
        game = make_game(self._morning(19), time="TBA")
        assert in_game_day_window(game, self._morning(8, 30), TZ) is True

    def test_uses_reference_timezone_day(self):
        # 8:30 AM in New York is 12:30 UTC on the same date
        game = make_game(self._morning(19))
        utc_now = self._morning(8, 30).astimezone(timezone.utc)
        assert in_game_day_window(game, utc_now, TZ) is True

    def test_game_day_only(self):
        game = make_game(self._morning(19))
        assert due_windows(game, self._morning(8, 15), TZ) == [ReminderWindow.GAME_DAY]


class TestWindowKinds:
    def test_email_and_push_kinds_are_distinct(self):
        assert ReminderWindow.TWENTY_FOUR_HOUR.email_kind == NotificationKind.REMINDER_24_HOUR
        assert ReminderWindow.TWENTY_FOUR_HOUR.push_kind == NotificationKind.REMINDER_24_HOUR_PUSH
        assert ReminderWindow.GAME_DAY.email_kind == NotificationKind.GAME_DAY
        assert ReminderWindow.GAME_DAY.push_kind == NotificationKind.GAME_DAY_PUSH

    def test_game_outside_both_windows(self):
        game = make_game(hours_from_now(48))
        assert due_windows(game, NOW, TZ) == []

    def test_accepts_datetime_game_date(self):
        game = make_game(hours_from_now(24), date=datetime.combine(date(2026, 10, 21), time(0, 0)))
        assert game_start(game, TZ) == datetime(2026, 10, 21, 14, 0, tzinfo=TZ)
