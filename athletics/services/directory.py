"""
Read side of the schedule for the reminder engine: games, email
subscribers and push subscribers.
"""
from typing import List

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from athletics.models.game import Game
from athletics.models.subscription import Subscription
from athletics.models.push_subscription import PushSubscription


class ScheduleDirectory:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    async def load_all_games(self) -> List[Game]:
        async with self.session_factory() as session:
            result = await session.execute(select(Game).order_by(Game.date))
            return list(result.scalars().all())

    async def load_all_subscriptions(self) -> List[Subscription]:
        async with self.session_factory() as session:
            result = await session.execute(select(Subscription))
            return list(result.scalars().all())

    async def load_all_push_subscriptions(self) -> List[PushSubscription]:
        async with self.session_factory() as session:
            result = await session.execute(select(PushSubscription))
            return list(result.scalars().all())

    async def delete_push_subscription(self, endpoint: str) -> bool:
        """Remove a push subscription the push service rejected permanently."""
        async with self.session_factory() as session:
            result = await session.execute(
                delete(PushSubscription).where(PushSubscription.endpoint == endpoint)
            )
            await session.commit()
            return result.rowcount > 0
