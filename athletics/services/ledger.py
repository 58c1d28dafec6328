"""
Notification ledger - storage primitives for reminder claims.

Every primitive is a single short transaction. The only operations that must
be atomic across workers are the claim INSERT (guarded by the unique
constraint) and the conditional UPDATEs; everything built on top of them
needs no locking.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import NamedTuple, Optional

from sqlalchemy import select, update, delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from athletics.models.sent_notification import (
    SentNotification,
    NotificationKind,
    NotificationStatus,
)


class ClaimKey(NamedTuple):
    game_id: str
    subscriber_id: str
    kind: NotificationKind


@dataclass
class LedgerEntry:
    """Snapshot of one ledger row. Timestamps are naive UTC."""
    key: ClaimKey
    status: NotificationStatus
    created_at: datetime
    sent_at: Optional[datetime] = None


class LedgerStore(ABC):
    """Row-level primitives the claim protocol is built on."""

    @abstractmethod
    async def insert_pending(self, key: ClaimKey, now: datetime) -> bool:
        """Insert a pending row. False if the key already exists."""

    @abstractmethod
    async def get(self, key: ClaimKey) -> Optional[LedgerEntry]:
        """Load the row for a key, or None."""

    @abstractmethod
    async def reclaim_stale(
        self,
        key: ClaimKey,
        expected_status: NotificationStatus,
        stale_before: datetime,
        now: datetime,
    ) -> bool:
        """
        Reset a stale row to pending with created_at=now.

        Only applies while the row still has expected_status and
        created_at < stale_before. True if this call changed the row.
        """

    @abstractmethod
    async def mark_sending(self, key: ClaimKey, now: datetime) -> bool:
        """pending -> sending, refreshing created_at. True if the row was pending."""

    @abstractmethod
    async def mark_sent(self, key: ClaimKey, now: datetime) -> bool:
        """Set status sent and sent_at=now. True if the row exists."""

    @abstractmethod
    async def delete(self, key: ClaimKey) -> bool:
        """Remove the row. True if it existed."""


class SqlLedgerStore(LedgerStore):
    """Ledger backed by the sent_notifications table."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    @staticmethod
    def _match(key: ClaimKey):
        return (
            SentNotification.game_id == key.game_id,
            SentNotification.subscriber_id == key.subscriber_id,
            SentNotification.kind == key.kind,
        )

    async def insert_pending(self, key: ClaimKey, now: datetime) -> bool:
        async with self.session_factory() as session:
            session.add(SentNotification(
                game_id=key.game_id,
                subscriber_id=key.subscriber_id,
                kind=key.kind,
                status=NotificationStatus.PENDING,
                created_at=now,
            ))
            try:
                await session.commit()
            except IntegrityError:
                # Unique constraint - someone else holds (or held) this slot
                await session.rollback()
                return False
            return True

    async def get(self, key: ClaimKey) -> Optional[LedgerEntry]:
        async with self.session_factory() as session:
            result = await session.execute(
                select(SentNotification).where(*self._match(key))
            )
            row = result.scalar_one_or_none()
            if row is None:
                return None
            return LedgerEntry(
                key=key,
                status=row.status,
                created_at=row.created_at,
                sent_at=row.sent_at,
            )

    async def _execute_update(self, stmt) -> bool:
        async with self.session_factory() as session:
            result = await session.execute(
                stmt.execution_options(synchronize_session=False)
            )
            await session.commit()
            return result.rowcount > 0

    async def reclaim_stale(
        self,
        key: ClaimKey,
        expected_status: NotificationStatus,
        stale_before: datetime,
        now: datetime,
    ) -> bool:
        return await self._execute_update(
            update(SentNotification)
            .where(
                *self._match(key),
                SentNotification.status == expected_status,
                SentNotification.created_at < stale_before,
            )
            .values(status=NotificationStatus.PENDING, created_at=now)
        )

    async def mark_sending(self, key: ClaimKey, now: datetime) -> bool:
        return await self._execute_update(
            update(SentNotification)
            .where(
                *self._match(key),
                SentNotification.status == NotificationStatus.PENDING,
            )
            .values(status=NotificationStatus.SENDING, created_at=now)
        )

    async def mark_sent(self, key: ClaimKey, now: datetime) -> bool:
        return await self._execute_update(
            update(SentNotification)
            .where(*self._match(key))
            .values(status=NotificationStatus.SENT, sent_at=now)
        )

    async def delete(self, key: ClaimKey) -> bool:
        return await self._execute_update(
            delete(SentNotification).where(*self._match(key))
        )
