"""
Web Push Notification Service using VAPID

Native browser push notifications for Web and PWA.
No Firebase needed - uses standard Web Push Protocol.

Setup:
1. Generate VAPID keys:
   npx web-push generate-vapid-keys

2. Set in .env:
   VAPID_PUBLIC_KEY=your_public_key
   VAPID_PRIVATE_KEY=your_private_key
   VAPID_CONTACT_EMAIL=admin@colchestersd.org
"""
import asyncio
import json
import logging
from typing import Optional, Dict, Any

from pywebpush import webpush, WebPushException

from athletics.config import get_settings
from athletics.models.game import Game
from athletics.services.delivery import DeliveryOutcome
from athletics.services.reminder_windows import ReminderWindow

settings = get_settings()
logger = logging.getLogger(__name__)

# Push service responses meaning the subscription is gone for good
EXPIRED_STATUS_CODES = (404, 410)


def short_endpoint(endpoint: str) -> str:
    """Truncated endpoint for log lines"""
    return f"{endpoint[:20]}..."


def reminder_title(window: ReminderWindow, game: Game) -> str:
    if window is ReminderWindow.TWENTY_FOUR_HOUR:
        return f"Game Tomorrow: {game.sport}"
    return f"Game Today: {game.sport}"


def reminder_body(game: Game) -> str:
    location_text = f"Home - {game.location}" if game.is_home else f"Away - {game.location}"
    return f"{settings.team_name} vs {game.opponent} at {game.time} | {location_text}"


class WebPushService:
    """
    Web Push API service using VAPID authentication.

    Works with any modern browser (Chrome, Firefox, Edge, Safari 16+).
    """

    def __init__(self):
        self.vapid_private_key = settings.vapid_private_key
        self.vapid_public_key = settings.vapid_public_key
        self.vapid_email = settings.vapid_contact_email

        self.initialized = bool(self.vapid_private_key and self.vapid_public_key)

        if self.initialized:
            logger.info("Web Push initialized with VAPID")
        else:
            logger.warning("VAPID keys not configured - push reminders disabled")

    def get_public_key(self) -> Optional[str]:
        """Get VAPID public key for frontend subscription"""
        return self.vapid_public_key if self.initialized else None

    async def send_notification(
        self,
        subscription: Dict[str, Any],
        title: str,
        body: str,
        data: Optional[Dict[str, Any]] = None,
        icon: Optional[str] = "/icons/icon-192x192.png",
        badge: Optional[str] = "/icons/icon-96x96.png",
    ) -> DeliveryOutcome:
        """
        Send push notification to a single subscription.

        Args:
            subscription: Push subscription object from frontend
                {
                    "endpoint": "https://fcm.googleapis.com/...",
                    "keys": {
                        "p256dh": "...",
                        "auth": "..."
                    }
                }
            title: Notification title
            body: Notification body text
            data: Additional data payload (gameId, sport, url)

        Returns:
            DeliveryOutcome; token_invalid is set when the subscription expired
        """
        if not self.initialized:
            logger.info(f"Push not configured - would send: {title}")
            return DeliveryOutcome.failed("Push service not configured")

        payload = json.dumps({
            "title": title,
            "body": body,
            "icon": icon,
            "badge": badge,
            "url": (data or {}).get("url", "/"),
            "requireInteraction": True,
            "data": data or {},
        })

        try:
            # webpush() does a blocking HTTP request
            await asyncio.to_thread(
                webpush,
                subscription_info=subscription,
                data=payload,
                vapid_private_key=self.vapid_private_key,
                vapid_claims={
                    "sub": f"mailto:{self.vapid_email}"
                },
                headers={"Urgency": "high"},
            )
        except WebPushException as e:
            # Handle expired/invalid subscriptions
            if e.response is not None and e.response.status_code in EXPIRED_STATUS_CODES:
                logger.info(
                    f"Subscription expired/invalid, should be removed: "
                    f"{short_endpoint(subscription.get('endpoint', ''))}"
                )
                return DeliveryOutcome.failed("subscription_expired", token_invalid=True)

            logger.error(f"WebPush error: {e}")
            return DeliveryOutcome.failed(str(e))

        return DeliveryOutcome.ok()

    def is_configured(self) -> bool:
        """Check if push service is properly configured"""
        return self.initialized


# Singleton instance
push_service = WebPushService()
