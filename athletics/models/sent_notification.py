import uuid
import enum
from datetime import datetime
from sqlalchemy import String, DateTime, UniqueConstraint, Index, Enum as SQLEnum
from sqlalchemy.orm import Mapped, mapped_column
from typing import Optional

from athletics.database import Base


def enum_values(enum_cls) -> list:
    """Store enum values ('24hour', 'sent') rather than member names"""
    return [member.value for member in enum_cls]


class NotificationKind(str, enum.Enum):
    """Reminder slot. Email and push are tracked separately so a fan can get both."""
    REMINDER_24_HOUR = "24hour"
    GAME_DAY = "gameday"
    REMINDER_24_HOUR_PUSH = "24hour-push"
    GAME_DAY_PUSH = "gameday-push"


class NotificationStatus(str, enum.Enum):
    PENDING = "pending"    # Claimed, delivery not attempted yet
    SENDING = "sending"    # Delivery in progress, outcome unknown if the worker dies
    SENT = "sent"          # Delivered; kept forever so the slot is never reused


class SentNotification(Base):
    """
    Claim ledger for game reminders.

    The unique constraint on (game_id, subscriber_id, kind) is what makes an
    INSERT an atomic claim: whoever inserts the row owns the delivery.
    """
    __tablename__ = "sent_notifications"

    __table_args__ = (
        UniqueConstraint("game_id", "subscriber_id", "kind", name="uq_sent_notification"),
        Index("ix_sent_notifications_status_created", "status", "created_at"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    game_id: Mapped[str] = mapped_column(String(36), index=True)
    subscriber_id: Mapped[str] = mapped_column(String(36))  # Subscription.id or PushSubscription.id
    kind: Mapped[NotificationKind] = mapped_column(
        SQLEnum(NotificationKind, values_callable=enum_values)
    )
    status: Mapped[NotificationStatus] = mapped_column(
        SQLEnum(NotificationStatus, values_callable=enum_values), default=NotificationStatus.PENDING
    )

    # Reset on every claim, reclaim and pending->sending transition (staleness clock)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    sent_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    def __repr__(self) -> str:
        return f"<SentNotification {self.kind.value} game={self.game_id} status={self.status.value}>"
