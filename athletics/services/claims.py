"""
Reminder claim protocol.

Each (game, subscriber, kind) slot moves through

    (absent) -> pending -> sending -> sent

A worker that inserts the pending row owns the delivery. Rows stuck in
pending or sending longer than the stale threshold are presumed to belong
to a crashed worker and may be reclaimed by exactly one other worker.

A stale "sending" row is reclaimed even though the reminder may already have
gone out: a missed reminder is worse than an occasional duplicate.
"""
import logging
from datetime import timedelta

from athletics.models.sent_notification import NotificationKind, NotificationStatus
from athletics.services.ledger import ClaimKey, LedgerStore
from athletics.utils.clock import Clock, utc_now, as_naive_utc

logger = logging.getLogger(__name__)

DEFAULT_STALE_AFTER = timedelta(minutes=5)


class ClaimProtocol:
    def __init__(
        self,
        store: LedgerStore,
        stale_after: timedelta = DEFAULT_STALE_AFTER,
        clock: Clock = utc_now,
    ):
        self.store = store
        self.stale_after = stale_after
        self.clock = clock

    def _now(self):
        return as_naive_utc(self.clock())

    async def try_claim(self, game_id: str, subscriber_id: str, kind: NotificationKind) -> bool:
        """
        Try to take ownership of a reminder slot.

        Returns True if the caller must now deliver the reminder. Storage
        errors other than the uniqueness conflict propagate.
        """
        key = ClaimKey(game_id, subscriber_id, kind)
        now = self._now()

        if await self.store.insert_pending(key, now):
            return True

        existing = await self.store.get(key)
        if existing is None:
            # Row deleted between our insert and read; the next pass retries
            return False

        if existing.status == NotificationStatus.SENT:
            return False

        stale_before = now - self.stale_after
        if existing.created_at >= stale_before:
            # Another worker is handling it right now
            return False

        reclaimed = await self.store.reclaim_stale(key, existing.status, stale_before, now)
        if not reclaimed:
            return False

        if existing.status == NotificationStatus.SENDING:
            logger.warning(
                f"Reclaimed stale 'sending' {kind.value} reminder for game {game_id} "
                f"(may duplicate if it was already delivered)"
            )
        else:
            logger.info(f"Reclaimed stale pending {kind.value} reminder for game {game_id}")
        return True

    async def mark_sending(self, game_id: str, subscriber_id: str, kind: NotificationKind) -> bool:
        """Record that delivery is about to start. Only moves a pending row."""
        return await self.store.mark_sending(ClaimKey(game_id, subscriber_id, kind), self._now())

    async def mark_sent(self, game_id: str, subscriber_id: str, kind: NotificationKind) -> bool:
        """Turn the row into a permanent tombstone."""
        return await self.store.mark_sent(ClaimKey(game_id, subscriber_id, kind), self._now())

    async def delete_record(self, game_id: str, subscriber_id: str, kind: NotificationKind) -> bool:
        """Release the slot after a failed delivery so the next pass can retry."""
        return await self.store.delete(ClaimKey(game_id, subscriber_id, kind))
