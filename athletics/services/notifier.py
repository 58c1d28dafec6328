"""
Game reminder delivery.

One pass:
1. Loads every game, email subscriber and push subscriber
2. Finds games inside the 24-hour or game-day window
3. For every interested subscriber, claims the reminder slot, delivers it,
   and records the outcome in the ledger

Any number of passes may run at once (scheduled, manual, other replicas);
the ledger's claim protocol makes sure each slot is delivered once.
"""
import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional, Protocol, Set
from zoneinfo import ZoneInfo

from athletics.config import get_settings
from athletics.database import async_session_maker
from athletics.models.game import Game
from athletics.models.push_subscription import PushSubscription
from athletics.models.sent_notification import NotificationKind
from athletics.models.subscription import Subscription
from athletics.schemas.notification import NotificationPassResult
from athletics.services.claims import ClaimProtocol
from athletics.services.delivery import DeliveryOutcome
from athletics.services.directory import ScheduleDirectory
from athletics.services.ledger import SqlLedgerStore
from athletics.services.mailer import mail_service
from athletics.services.push import push_service, reminder_title, reminder_body, short_endpoint
from athletics.services.reminder_windows import ReminderWindow, due_windows
from athletics.utils.clock import Clock, utc_now

settings = get_settings()
logger = logging.getLogger(__name__)


class GameDirectory(Protocol):
    async def load_all_games(self) -> List[Game]: ...
    async def load_all_subscriptions(self) -> List[Subscription]: ...
    async def load_all_push_subscriptions(self) -> List[PushSubscription]: ...
    async def delete_push_subscription(self, endpoint: str) -> bool: ...


class EmailSender(Protocol):
    async def send_reminder(
        self, kind: NotificationKind, subscription: Subscription, game: Game
    ) -> DeliveryOutcome: ...


class PushSender(Protocol):
    async def send_notification(
        self,
        subscription: Dict[str, Any],
        title: str,
        body: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> DeliveryOutcome: ...


def interested_in(subscribers: list, sport: str) -> list:
    return [sub for sub in subscribers if sport in (sub.sports or [])]


class NotificationService:
    def __init__(
        self,
        directory: GameDirectory,
        claims: ClaimProtocol,
        email_sender: EmailSender,
        push_sender: PushSender,
        tz: ZoneInfo,
        clock: Clock = utc_now,
    ):
        self.directory = directory
        self.claims = claims
        self.email_sender = email_sender
        self.push_sender = push_sender
        self.tz = tz
        self.clock = clock

    async def run_notification_pass(self) -> NotificationPassResult:
        """Run one reminder pass. Never raises; problems end up in result.errors."""
        result = NotificationPassResult()

        try:
            games = await self.directory.load_all_games()
            subscriptions = await self.directory.load_all_subscriptions()
            push_subscriptions = await self.directory.load_all_push_subscriptions()
        except Exception as e:
            logger.error(f"Error loading schedule for notification pass: {e}")
            result.errors.append(f"System error: {e}")
            return result

        if not subscriptions and not push_subscriptions:
            logger.info("No subscriptions found")
            return result

        now = self.clock()
        removed_endpoints: Set[str] = set()

        for game in games:
            windows = due_windows(game, now, self.tz)
            if not windows:
                continue

            for window in windows:
                if window is ReminderWindow.TWENTY_FOUR_HOUR:
                    result.games_in_24_hour_window += 1
                else:
                    result.games_in_game_day_window += 1

                for subscription in interested_in(subscriptions, game.sport):
                    await self._deliver_email(result, game, window, subscription)

                for push_subscription in interested_in(push_subscriptions, game.sport):
                    if push_subscription.endpoint in removed_endpoints:
                        continue
                    removed = await self._deliver_push(result, game, window, push_subscription)
                    if removed:
                        removed_endpoints.add(push_subscription.endpoint)

        logger.info(
            f"Notification pass complete: {result.emails_sent} emails and {result.pushes_sent} pushes sent, "
            f"{result.duplicates_skipped} duplicates skipped for {result.games_in_24_hour_window} 24-hour "
            f"and {result.games_in_game_day_window} game day games"
        )
        if result.errors:
            logger.error(f"{len(result.errors)} errors during notification pass")
        return result

    async def _claim(
        self,
        result: NotificationPassResult,
        game: Game,
        subscriber_id: str,
        kind: NotificationKind,
        label: str,
    ) -> bool:
        """Claim the slot and mark it sending. False means: do not deliver."""
        try:
            claimed = await self.claims.try_claim(game.id, subscriber_id, kind)
        except Exception as e:
            self._record_error(result, f"Failed to record notification for {label}: {e}")
            return False

        if not claimed:
            result.duplicates_skipped += 1
            logger.info(
                f"Skipping duplicate {kind.value} reminder for {game.sport} vs {game.opponent} to {label}"
            )
            return False

        try:
            marked = await self.claims.mark_sending(game.id, subscriber_id, kind)
        except Exception as e:
            # Row stays pending; stale recovery picks it up on a later pass
            self._record_error(result, f"Failed to mark notification as sending for {label}: {e}")
            return False

        if not marked:
            result.duplicates_skipped += 1
            logger.warning(f"{kind.value} reminder for {label} was advanced by another worker")
            return False
        return True

    async def _reconcile(
        self,
        result: NotificationPassResult,
        game: Game,
        subscriber_id: str,
        kind: NotificationKind,
        label: str,
        outcome: DeliveryOutcome,
    ) -> bool:
        """Write the delivery outcome back to the ledger. True if delivered."""
        if not outcome.delivered:
            try:
                await self.claims.delete_record(game.id, subscriber_id, kind)
            except Exception as e:
                # Row stays sending; stale recovery retries it
                self._record_error(result, f"Failed to release notification for {label}: {e}")
            self._record_error(
                result,
                f"Delivery failed for {label}: {outcome.error or 'unknown error'} - will retry on next check",
            )
            return False

        try:
            await self.claims.mark_sent(game.id, subscriber_id, kind)
        except Exception as e:
            # Delivered but still "sending"; it may be re-sent after the stale threshold
            self._record_error(result, f"Reminder sent to {label} but mark-sent failed: {e}")

        result.delivered += 1
        return True

    async def _deliver_email(
        self,
        result: NotificationPassResult,
        game: Game,
        window: ReminderWindow,
        subscription: Subscription,
    ) -> None:
        kind = window.email_kind
        if not await self._claim(result, game, subscription.id, kind, subscription.email):
            return

        try:
            outcome = await self.email_sender.send_reminder(kind, subscription, game)
        except Exception as e:
            outcome = DeliveryOutcome.failed(f"email send raised {e!r}")

        if await self._reconcile(result, game, subscription.id, kind, subscription.email, outcome):
            result.emails_sent += 1
            logger.info(
                f"Sent {kind.value} reminder for {game.sport} vs {game.opponent} to {subscription.email}"
            )

    async def _deliver_push(
        self,
        result: NotificationPassResult,
        game: Game,
        window: ReminderWindow,
        push_subscription: PushSubscription,
    ) -> bool:
        """Deliver one push reminder. Returns True if the subscription was removed."""
        kind = window.push_kind
        label = f"push {short_endpoint(push_subscription.endpoint)}"
        if not await self._claim(result, game, push_subscription.id, kind, label):
            return False

        try:
            outcome = await self.push_sender.send_notification(
                push_subscription.subscription_info(),
                reminder_title(window, game),
                reminder_body(game),
                {"gameId": game.id, "sport": game.sport, "url": "/schedule"},
            )
        except Exception as e:
            outcome = DeliveryOutcome.failed(f"push send raised {e!r}")

        if await self._reconcile(result, game, push_subscription.id, kind, label, outcome):
            result.pushes_sent += 1
            logger.info(f"Push sent for {game.sport} vs {game.opponent} to {label}")
            return False

        if not outcome.token_invalid:
            return False

        try:
            await self.directory.delete_push_subscription(push_subscription.endpoint)
        except Exception as e:
            self._record_error(result, f"Failed to remove invalid {label}: {e}")
            return False
        logger.info(f"Removed invalid {label}")
        return True

    @staticmethod
    def _record_error(result: NotificationPassResult, message: str) -> None:
        logger.error(message)
        result.errors.append(message)


def build_notification_service() -> NotificationService:
    """Notification service wired to the app database, Mailjet and Web Push."""
    return NotificationService(
        directory=ScheduleDirectory(async_session_maker),
        claims=ClaimProtocol(
            SqlLedgerStore(async_session_maker),
            stale_after=timedelta(minutes=settings.notification_stale_minutes),
        ),
        email_sender=mail_service,
        push_sender=push_service,
        tz=ZoneInfo(settings.reference_timezone),
    )
