"""Create video catalog and watch history tables

Revision ID: 3f1c9a7b2d10
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c9a7b2d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users, channels, videos and watch_history."""
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.String(length=255), nullable=False,
                  comment='The unique external identifier for the user.'),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('avatar', sa.String(length=512), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(op.f('ix_users_user_id'), 'users', ['user_id'], unique=True)

    op.create_table(
        'channels',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('icon', sa.String(length=512), nullable=True),
        sa.Column('owner_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
    )
    op.create_index(op.f('ix_channels_owner_id'), 'channels', ['owner_id'], unique=False)

    op.create_table(
        'videos',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('title', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', sa.String(length=64), nullable=False, server_default='General'),
        sa.Column('url', sa.String(length=512), nullable=False),
        sa.Column('thumbnail', sa.String(length=512), nullable=True),
        sa.Column('duration', sa.Float(), nullable=False, server_default='0'),
        sa.Column('is_short', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('views', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('channel_id', sa.Integer(), sa.ForeignKey('channels.id', ondelete='CASCADE'), nullable=False),
        sa.Column('owner_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    for column in ('category', 'is_short', 'is_deleted', 'channel_id', 'owner_id', 'created_at'):
        op.create_index(op.f(f'ix_videos_{column}'), 'videos', [column], unique=False)

    op.create_table(
        'watch_history',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('video_id', sa.Integer(), sa.ForeignKey('videos.id', ondelete='CASCADE'), nullable=False),
        sa.Column('watched_at', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('progress', sa.Float(), nullable=False, server_default='0'),
    )
    op.create_index(op.f('ix_watch_history_user_id'), 'watch_history', ['user_id'], unique=False)
    op.create_index(op.f('ix_watch_history_video_id'), 'watch_history', ['video_id'], unique=False)


def downgrade() -> None:
    """Drop every table created above."""
    op.drop_table('watch_history')
    op.drop_table('videos')
    op.drop_table('channels')
    op.drop_index(op.f('ix_users_user_id'), table_name='users')
    op.drop_table('users')
