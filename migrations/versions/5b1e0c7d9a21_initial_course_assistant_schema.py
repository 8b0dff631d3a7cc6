"""initial course assistant schema

Revision ID: 5b1e0c7d9a21
Revises:
Create Date: 2026-10-18 09:12:40.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5b1e0c7d9a21'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create topics, FAQs, notes, chat sessions/logs, feedback and admins."""
    op.create_table(
        'admins',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', sa.Enum('admin', 'super_admin', name='admin_role'), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default='true', nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('last_login', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_admins_email', 'admins', ['email'], unique=True)

    op.create_table(
        'topics',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('icon', sa.String(50), nullable=True),
        sa.Column('color', sa.String(20), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_topics_name', 'topics', ['name'], unique=True)

    op.create_table(
        'faqs',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('topic_id', sa.Uuid(), sa.ForeignKey('topics.id', ondelete='CASCADE'), nullable=False),
        sa.Column('question', sa.Text(), nullable=False),
        sa.Column('answer', sa.Text(), nullable=False),
        sa.Column('keywords', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'notes',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('topic_id', sa.Uuid(), sa.ForeignKey('topics.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String(500), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('keywords', sa.Text(), nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default='true', nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )

    op.create_table(
        'chat_sessions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('session_id', sa.String(255), nullable=False),
        sa.Column('user_agent', sa.String(500), nullable=True),
        sa.Column('ip_address', sa.String(100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
    )
    op.create_index('ix_chat_sessions_session_id', 'chat_sessions', ['session_id'], unique=True)

    op.create_table(
        'chat_logs',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column(
            'session_id', sa.String(255),
            sa.ForeignKey('chat_sessions.session_id', ondelete='CASCADE'), nullable=False,
        ),
        sa.Column('user_query', sa.Text(), nullable=False),
        sa.Column('bot_response', sa.Text(), nullable=False),
        sa.Column('faq_id', sa.Uuid(), sa.ForeignKey('faqs.id', ondelete='SET NULL'), nullable=True),
        sa.Column('note_id', sa.Uuid(), sa.ForeignKey('notes.id', ondelete='SET NULL'), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=True),
        sa.CheckConstraint('faq_id IS NULL OR note_id IS NULL', name='ck_chat_logs_single_source'),
    )
    op.create_index('ix_chat_logs_session_id', 'chat_logs', ['session_id'])

    op.create_table(
        'feedback',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('chat_log_id', sa.Uuid(), sa.ForeignKey('chat_logs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('rating IN (1, 2)', name='ck_feedback_rating'),
    )


def downgrade() -> None:
    """Drop all course assistant tables."""
    op.drop_table('feedback')
    op.drop_index('ix_chat_logs_session_id', table_name='chat_logs')
    op.drop_table('chat_logs')
    op.drop_index('ix_chat_sessions_session_id', table_name='chat_sessions')
    op.drop_table('chat_sessions')
    op.drop_table('notes')
    op.drop_table('faqs')
    op.drop_index('ix_topics_name', table_name='topics')
    op.drop_table('topics')
    op.drop_index('ix_admins_email', table_name='admins')
    op.drop_table('admins')
    op.execute("DROP TYPE IF EXISTS admin_role")
