"""
Tests for the Mailjet and Web Push adapters.

The network is never touched: Mailjet calls go through an httpx mock
transport and pywebpush's webpush() is replaced.
"""
import threading
from datetime import date
from types import SimpleNamespace

import httpx
import pytest
from pywebpush import WebPushException

from athletics.models.sent_notification import NotificationKind
from athletics.services import mailer, push
from athletics.services.mailer import (
    MailjetEmailService,
    format_game_date,
    reminder_subject,
    reminder_html,
)
from athletics.services.push import WebPushService, reminder_title, reminder_body
from athletics.services.reminder_windows import ReminderWindow
from tests.factories import hours_from_now, make_game, make_subscription, make_push_subscription


@pytest.fixture
def game():
    return make_game(hours_from_now(24), opponent="Essex <Hornets>", is_home=False)


class TestEmailContent:
    def test_format_game_date(self):
        assert format_game_date(date(2026, 10, 24)) == "Saturday, October 24, 2026"

    def test_subjects(self, game):
        assert reminder_subject(NotificationKind.REMINDER_24_HOUR, game) == "Reminder: Football game tomorrow!"
        assert reminder_subject(NotificationKind.GAME_DAY, game) == "Game Day: Football vs Essex <Hornets>"

    def test_html_is_escaped_and_has_unsubscribe_link(self, game):
        body = reminder_html(NotificationKind.GAME_DAY, game, "https://lakers.example/unsubscribe?token=t")

        assert "Essex &lt;Hornets&gt;" in body
        assert "<Hornets>" not in body
        assert "https://lakers.example/unsubscribe?token=t" in body
        assert "Away - Colchester High School" in body


class TestMailjetEmailService:
    @pytest.fixture
    def service(self):
        service = MailjetEmailService()
        service.api_key = "key"
        service.secret_key = "secret"
        service.initialized = True
        return service

    def mock_mailjet(self, monkeypatch, handler):
        real_client = httpx.AsyncClient
        monkeypatch.setattr(
            mailer.httpx,
            "AsyncClient",
            lambda **kwargs: real_client(transport=httpx.MockTransport(handler), **kwargs),
        )

    @pytest.mark.asyncio
    async def test_unconfigured_fails_without_network(self, game):
        service = MailjetEmailService()
        service.initialized = False

        outcome = await service.send_reminder(NotificationKind.GAME_DAY, make_subscription(), game)

        assert outcome.delivered is False
        assert "not configured" in outcome.error

    @pytest.mark.asyncio
    async def test_success(self, service, monkeypatch, game):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"Messages": [{"Status": "success"}]})

        self.mock_mailjet(monkeypatch, handler)
        subscription = make_subscription("fan@example.com")

        outcome = await service.send_reminder(NotificationKind.REMINDER_24_HOUR, subscription, game)

        assert outcome.delivered is True
        [request] = requests
        assert request.headers["Authorization"].startswith("Basic ")
        assert b"fan@example.com" in request.content
        assert subscription.unsubscribe_token.encode() in request.content

    @pytest.mark.asyncio
    async def test_http_error(self, service, monkeypatch, game):
        self.mock_mailjet(monkeypatch, lambda request: httpx.Response(401, json={"ErrorMessage": "nope"}))

        outcome = await service.send_reminder(NotificationKind.GAME_DAY, make_subscription(), game)

        assert outcome.delivered is False
        assert "401" in outcome.error

    @pytest.mark.asyncio
    async def test_rejected_message(self, service, monkeypatch, game):
        self.mock_mailjet(
            monkeypatch,
            lambda request: httpx.Response(200, json={"Messages": [{"Status": "error"}]}),
        )

        outcome = await service.send_reminder(NotificationKind.GAME_DAY, make_subscription(), game)

        assert outcome.delivered is False


class TestPushContent:
    def test_titles(self, game):
        assert reminder_title(ReminderWindow.TWENTY_FOUR_HOUR, game) == "Game Tomorrow: Football"
        assert reminder_title(ReminderWindow.GAME_DAY, game) == "Game Today: Football"

    def test_away_body(self, game):
        assert reminder_body(game) == (
            f"Lakers vs Essex <Hornets> at {game.time} | Away - Colchester High School"
        )


class TestWebPushService:
    @pytest.fixture
    def service(self):
        service = WebPushService()
        service.vapid_private_key = "private"
        service.vapid_public_key = "public"
        service.initialized = True
        return service

    @pytest.mark.asyncio
    async def test_unconfigured(self):
        service = WebPushService()
        service.initialized = False

        outcome = await service.send_notification(
            make_push_subscription().subscription_info(), "title", "body"
        )

        assert outcome.delivered is False
        assert service.get_public_key() is None

    @pytest.mark.asyncio
    async def test_success(self, service, monkeypatch):
        calls = []
        monkeypatch.setattr(push, "webpush", lambda **kwargs: calls.append(kwargs))
        info = make_push_subscription().subscription_info()

        outcome = await service.send_notification(info, "Game Today: Football", "body", {"url": "/schedule"})

        assert outcome.delivered is True
        [call] = calls
        assert call["subscription_info"] == info
        assert call["headers"] == {"Urgency": "high"}
        assert '"url": "/schedule"' in call["data"]

    @pytest.mark.asyncio
    async def test_send_runs_off_the_event_loop_thread(self, service, monkeypatch):
        threads = []
        monkeypatch.setattr(push, "webpush", lambda **kwargs: threads.append(threading.get_ident()))

        outcome = await service.send_notification(
            make_push_subscription().subscription_info(), "title", "body"
        )

        assert outcome.delivered is True
        assert threads and threads[0] != threading.get_ident()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [404, 410])
    async def test_expired_subscription(self, service, monkeypatch, status_code):
        def reject(**kwargs):
            raise WebPushException("gone", response=SimpleNamespace(status_code=status_code, text="gone"))

        monkeypatch.setattr(push, "webpush", reject)

        outcome = await service.send_notification(
            make_push_subscription().subscription_info(), "title", "body"
        )

        assert outcome.delivered is False
        assert outcome.token_invalid is True

    @pytest.mark.asyncio
    async def test_transient_failure(self, service, monkeypatch):
        def reject(**kwargs):
            raise WebPushException("server error", response=SimpleNamespace(status_code=500, text="boom"))

        monkeypatch.setattr(push, "webpush", reject)

        outcome = await service.send_notification(
            make_push_subscription().subscription_info(), "title", "body"
        )

        assert outcome.delivered is False
        assert outcome.token_invalid is False
