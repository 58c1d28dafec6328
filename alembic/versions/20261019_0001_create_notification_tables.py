"""Create schedule, subscription and reminder ledger tables

Revision ID: 0001
Revises:
Create Date: 2026-10-19

sent_notifications is the reminder claim ledger. Its unique constraint on
(game_id, subscriber_id, kind) is what lets concurrent workers claim a
reminder with a plain INSERT:
1. INSERT succeeds -> this worker sends the reminder
2. Unique violation -> someone else has (or had) the slot
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

notification_kind = sa.Enum(
    '24hour', 'gameday', '24hour-push', 'gameday-push',
    name='notificationkind',
)
notification_status = sa.Enum('pending', 'sending', 'sent', name='notificationstatus')


def upgrade() -> None:
    op.create_table(
        'games',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('sport', sa.String(50), nullable=False),
        sa.Column('opponent', sa.String(200), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('time', sa.String(50), nullable=False),
        sa.Column('location', sa.Text(), nullable=False),
        sa.Column('is_home', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('home_score', sa.Integer(), nullable=True),
        sa.Column('away_score', sa.Integer(), nullable=True),
        sa.Column('final', sa.Boolean(), nullable=False, server_default=sa.false()),
    )
    op.create_index('ix_games_date', 'games', ['date'])
    op.create_index('ix_games_sport_date', 'games', ['sport', 'date'])

    op.create_table(
        'subscriptions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('email', sa.String(254), nullable=False),
        sa.Column('sports', sa.JSON(), nullable=False),
        sa.Column('unsubscribe_token', sa.String(36), nullable=False, unique=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
    )
    op.create_index('ix_subscriptions_email', 'subscriptions', ['email'])

    op.create_table(
        'push_subscriptions',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('endpoint', sa.Text(), nullable=False, unique=True),
        sa.Column('p256dh', sa.Text(), nullable=False),
        sa.Column('auth', sa.String(100), nullable=False),
        sa.Column('sports', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    )

    op.create_table(
        'sent_notifications',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('game_id', sa.String(36), nullable=False),
        sa.Column('subscriber_id', sa.String(36), nullable=False),
        sa.Column('kind', notification_kind, nullable=False),
        sa.Column('status', notification_status, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('sent_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('game_id', 'subscriber_id', 'kind', name='uq_sent_notification'),
    )
    op.create_index('ix_sent_notifications_game_id', 'sent_notifications', ['game_id'])
    op.create_index(
        'ix_sent_notifications_status_created',
        'sent_notifications',
        ['status', 'created_at'],
    )


def downgrade() -> None:
    op.drop_index('ix_sent_notifications_status_created', table_name='sent_notifications')
    op.drop_index('ix_sent_notifications_game_id', table_name='sent_notifications')
    op.drop_table('sent_notifications')
    op.drop_table('push_subscriptions')
    op.drop_index('ix_subscriptions_email', table_name='subscriptions')
    op.drop_table('subscriptions')
    op.drop_index('ix_games_date', table_name='games')
    op.drop_index('ix_games_sport_date', table_name='games')
    op.drop_table('games')

    notification_status.drop(op.get_bind(), checkfirst=True)
    notification_kind.drop(op.get_bind(), checkfirst=True)
