from athletics.models.game import Game
from athletics.models.subscription import Subscription
from athletics.models.push_subscription import PushSubscription
from athletics.models.sent_notification import (
    SentNotification,
    NotificationKind,
    NotificationStatus,
)

__all__ = [
    "Game",
    "Subscription",
    "PushSubscription",
    "SentNotification",
    "NotificationKind",
    "NotificationStatus",
]
