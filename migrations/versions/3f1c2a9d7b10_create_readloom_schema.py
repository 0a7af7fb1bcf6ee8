"""Create readloom schema

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7b10'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table('users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('points', sa.Integer(), nullable=False),
        sa.Column('escrow_points', sa.Integer(), nullable=False),
        sa.Column('is_admin', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('points >= 0', name='ck_users_points_non_negative'),
        sa.CheckConstraint('escrow_points >= 0', name='ck_users_escrow_non_negative'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email')
    )
    op.create_index('idx_users_email', 'users', ['email'])

    op.create_table('books',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('author', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('condition', sa.String(length=20), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=False),
        sa.Column('images', sa.JSON(), nullable=False),
        sa.Column('chapters', sa.JSON(), nullable=False),
        sa.Column('current_owner_id', sa.String(length=36), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False),
        sa.Column('is_deleted', sa.Boolean(), nullable=False),
        sa.Column('points_cost', sa.Integer(), nullable=False),
        sa.Column('points_computed', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('points_cost > 0', name='ck_books_points_cost_positive'),
        sa.ForeignKeyConstraint(['current_owner_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_books_title', 'books', ['title'])
    op.create_index('idx_books_author', 'books', ['author'])
    op.create_index('idx_books_owner', 'books', ['current_owner_id'])
    op.create_index('idx_books_listing', 'books', ['is_deleted', 'is_available', 'created_at'])

    op.create_table('wishlist_entries',
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('book_id', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['book_id'], ['books.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('user_id', 'book_id'),
        sa.UniqueConstraint('user_id', 'book_id', name='uix_wishlist_user_book')
    )
    op.create_index('idx_wishlist_book', 'wishlist_entries', ['book_id'])

    op.create_table('exchange_points',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('address', sa.String(length=500), nullable=False),
        sa.Column('city', sa.String(length=255), nullable=False),
        sa.Column('country', sa.String(length=255), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('latitude >= -90 AND latitude <= 90', name='ck_exchange_points_latitude'),
        sa.CheckConstraint('longitude >= -180 AND longitude <= 180', name='ck_exchange_points_longitude'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_exchange_points_active', 'exchange_points', ['is_active'])
    op.create_index('idx_exchange_points_city', 'exchange_points', ['city'])

    op.create_table('exchanges',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('book_id', sa.String(length=36), nullable=False),
        sa.Column('from_user_id', sa.String(length=36), nullable=False),
        sa.Column('to_user_id', sa.String(length=36), nullable=False),
        sa.Column('exchange_point_id', sa.String(length=36), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('points_cost', sa.Integer(), nullable=False),
        sa.Column('points_escrowed', sa.Integer(), nullable=False),
        sa.Column('video_room_id', sa.String(length=255), nullable=True),
        sa.Column('verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('approved_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint('points_cost > 0', name='ck_exchanges_points_cost_positive'),
        sa.CheckConstraint('points_escrowed >= 0', name='ck_exchanges_escrow_non_negative'),
        sa.ForeignKeyConstraint(['book_id'], ['books.id'], ),
        sa.ForeignKeyConstraint(['from_user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['to_user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['exchange_point_id'], ['exchange_points.id'], ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_exchanges_book_status', 'exchanges', ['book_id', 'status'])
    op.create_index('idx_exchanges_from_user', 'exchanges', ['from_user_id'])
    op.create_index('idx_exchanges_to_user', 'exchanges', ['to_user_id'])
    op.create_index('idx_exchanges_completed_at', 'exchanges', ['completed_at'])
    op.create_index(
        'uq_exchanges_active_book', 'exchanges', ['book_id'],
        unique=True,
        sqlite_where=sa.text("status IN ('REQUESTED', 'APPROVED')"),
        postgresql_where=sa.text("status IN ('REQUESTED', 'APPROVED')")
    )

    op.create_table('points_credits',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('source_ref', sa.String(length=255), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('source_ref')
    )
    op.create_index('idx_points_credits_user', 'points_credits', ['user_id'])

    op.create_table('forum_posts',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('author_id', sa.String(length=36), nullable=True),
        sa.Column('book_id', sa.String(length=36), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('is_anonymous', sa.Boolean(), nullable=False),
        sa.Column('is_flagged', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['author_id'], ['users.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['book_id'], ['books.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_forum_posts_book', 'forum_posts', ['book_id'])
    op.create_index('idx_forum_posts_flagged', 'forum_posts', ['is_flagged'])

    op.create_table('forum_replies',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('post_id', sa.String(length=36), nullable=False),
        sa.Column('author_id', sa.String(length=36), nullable=True),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('is_anonymous', sa.Boolean(), nullable=False),
        sa.Column('is_flagged', sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['author_id'], ['users.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['post_id'], ['forum_posts.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_forum_replies_post', 'forum_replies', ['post_id'])

    op.create_table('chat_messages',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('book_id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=True),
        sa.Column('display_name', sa.String(length=255), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['book_id'], ['books.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_chat_messages_book_id', 'chat_messages', ['book_id', 'id'])

    op.create_table('reports',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('exchange_id', sa.String(length=36), nullable=False),
        sa.Column('book_id', sa.String(length=36), nullable=False),
        sa.Column('reporter_id', sa.String(length=36), nullable=False),
        sa.Column('reason', sa.String(length=50), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['book_id'], ['books.id'], ),
        sa.ForeignKeyConstraint(['exchange_id'], ['exchanges.id'], ),
        sa.ForeignKeyConstraint(['reporter_id'], ['users.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('exchange_id', 'reporter_id', 'reason', name='uix_reports_exchange_reporter_reason')
    )
    op.create_index('idx_reports_status', 'reports', ['status'])
    op.create_index('idx_reports_reporter', 'reports', ['reporter_id'])

    op.create_table('book_history_entries',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('book_id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=True),
        sa.Column('display_name', sa.String(length=255), nullable=False),
        sa.Column('city', sa.String(length=255), nullable=False),
        sa.Column('reading_duration', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['book_id'], ['books.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_book_history_book', 'book_history_entries', ['book_id', 'created_at'])

    op.create_table('reading_guides',
        sa.Column('book_id', sa.String(length=36), nullable=False),
        sa.Column('difficulty_level', sa.String(length=20), nullable=False),
        sa.Column('recommended_reader_type', sa.Text(), nullable=False),
        sa.Column('suggested_reading_pace', sa.Text(), nullable=False),
        sa.Column('tips', sa.JSON(), nullable=False),
        sa.Column('generated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['book_id'], ['books.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('book_id')
    )


def downgrade() -> None:
    # Drop tables in reverse dependency order
    op.drop_table('reading_guides')
    op.drop_table('book_history_entries')
    op.drop_table('reports')
    op.drop_table('chat_messages')
    op.drop_table('forum_replies')
    op.drop_table('forum_posts')
    op.drop_table('points_credits')
    op.drop_index('uq_exchanges_active_book', table_name='exchanges')
    op.drop_table('exchanges')
    op.drop_table('exchange_points')
    op.drop_table('wishlist_entries')
    op.drop_table('books')
    op.drop_table('users')
