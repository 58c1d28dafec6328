"""
Mailjet email service for game reminders.

Uses the Mailjet v3.1 Send API directly over HTTPS.

Set in .env:
   MAILJET_API_KEY=...
   MAILJET_SECRET_KEY=...
   FROM_EMAIL=noreply@colchestersd.org
"""
import html
import logging
from datetime import date

import httpx

from athletics.config import get_settings
from athletics.models.game import Game
from athletics.models.sent_notification import NotificationKind
from athletics.models.subscription import Subscription
from athletics.services.delivery import DeliveryOutcome

settings = get_settings()
logger = logging.getLogger(__name__)


def format_game_date(value: date) -> str:
    """Saturday, October 24, 2026"""
    return f"{value:%A}, {value:%B} {value.day}, {value:%Y}"


def reminder_subject(kind: NotificationKind, game: Game) -> str:
    if kind == NotificationKind.REMINDER_24_HOUR:
        return f"Reminder: {game.sport} game tomorrow!"
    return f"Game Day: {game.sport} vs {game.opponent}"


def reminder_html(kind: NotificationKind, game: Game, unsubscribe_url: str) -> str:
    intro = (
        f"This is your 24-hour reminder for an upcoming {settings.team_name} game!"
        if kind == NotificationKind.REMINDER_24_HOUR
        else f"It's game day! The {settings.team_name} play today."
    )
    home_away = "vs" if game.is_home else "@"
    location = "Home" if game.is_home else "Away"
    return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{html.escape(reminder_subject(kind, game))}</title></head>
<body style="font-family: Arial, sans-serif; color: #1f2937;">
  <p>{html.escape(intro)}</p>
  <h2>{html.escape(game.sport)}: {html.escape(settings.team_name)} {home_away} {html.escape(game.opponent)}</h2>
  <p>
    <strong>Date:</strong> {format_game_date(game.date)}<br>
    <strong>Time:</strong> {html.escape(game.time)}<br>
    <strong>Location:</strong> {location} - {html.escape(game.location)}
  </p>
  <p style="font-size: 12px; color: #6b7280;">
    <a href="{html.escape(unsubscribe_url)}">Unsubscribe</a> from these reminders.
  </p>
</body>
</html>"""


class MailjetEmailService:
    """Mailjet wrapper. Returns a failed outcome instead of raising when unconfigured."""

    def __init__(self):
        self.api_key = settings.mailjet_api_key
        self.secret_key = settings.mailjet_secret_key
        self.api_url = settings.mailjet_api_url
        self.initialized = bool(self.api_key and self.secret_key)

        if self.initialized:
            logger.info(f"Mailjet configured with FROM_EMAIL {settings.from_email}")
        else:
            logger.warning("MAILJET_API_KEY or MAILJET_SECRET_KEY not set - reminder emails disabled")

    def unsubscribe_url(self, subscription: Subscription) -> str:
        return f"{settings.app_url}/unsubscribe?token={subscription.unsubscribe_token}"

    async def send_reminder(
        self,
        kind: NotificationKind,
        subscription: Subscription,
        game: Game,
    ) -> DeliveryOutcome:
        """Send a 24-hour or game-day reminder to one subscriber."""
        if not self.initialized:
            return DeliveryOutcome.failed("Email service not configured")

        message = {
            "From": {"Email": settings.from_email, "Name": settings.from_name},
            "To": [{"Email": subscription.email, "Name": subscription.email.split("@")[0]}],
            "Subject": reminder_subject(kind, game),
            "HTMLPart": reminder_html(kind, game, self.unsubscribe_url(subscription)),
        }

        async with httpx.AsyncClient() as client:
            try:
                response = await client.post(
                    self.api_url,
                    json={"SandboxMode": False, "Messages": [message]},
                    auth=(self.api_key, self.secret_key),
                    timeout=15.0,
                )
                response.raise_for_status()
            except httpx.HTTPError as e:
                logger.error(f"Failed to send {kind.value} reminder to {subscription.email}: {e}")
                return DeliveryOutcome.failed(str(e))

        statuses = [m.get("Status") for m in response.json().get("Messages", [])]
        if statuses and all(status == "success" for status in statuses):
            return DeliveryOutcome.ok()
        return DeliveryOutcome.failed(f"Mailjet rejected message: {statuses}")

    def is_configured(self) -> bool:
        return self.initialized


# Singleton instance
mail_service = MailjetEmailService()
