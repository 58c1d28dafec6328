from athletics.schemas.notification import (
    NotificationPassResult,
    NotificationTriggerResponse,
    SchedulerStatusResponse,
)
from athletics.schemas.subscription import (
    SubscriptionCreate,
    SubscriptionResponse,
    UnsubscribeRequest,
    UnsubscribeResponse,
    SubscriptionSportsResponse,
    PushSubscriptionCreate,
    PushSubscriptionResponse,
    PushUnsubscribeRequest,
)

__all__ = [
    "NotificationPassResult",
    "NotificationTriggerResponse",
    "SchedulerStatusResponse",
    "SubscriptionCreate",
    "SubscriptionResponse",
    "UnsubscribeRequest",
    "UnsubscribeResponse",
    "SubscriptionSportsResponse",
    "PushSubscriptionCreate",
    "PushSubscriptionResponse",
    "PushUnsubscribeRequest",
]
