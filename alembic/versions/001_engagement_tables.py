"""Engagement ledger tables.

Creates user_achievements, practice_streaks and activity_sessions.

Revision ID: 001_engagement_tables
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_engagement_tables"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Per-member ledger ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_achievements (
            member_id VARCHAR(128) PRIMARY KEY,
            user_name VARCHAR(256),
            user_picture TEXT,
            team_id VARCHAR(128),
            current_streak INTEGER NOT NULL DEFAULT 0,
            longest_streak INTEGER NOT NULL DEFAULT 0,
            total_sessions INTEGER NOT NULL DEFAULT 0,
            sessions_today INTEGER NOT NULL DEFAULT 0,
            sessions_this_week INTEGER NOT NULL DEFAULT 0,
            sessions_this_month INTEGER NOT NULL DEFAULT 0,
            last_session_date VARCHAR(10),
            daily_points JSONB NOT NULL DEFAULT '{}',
            unlocked_badges JSONB NOT NULL DEFAULT '[]',
            weekly_reset_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CHECK (longest_streak >= current_streak)
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_user_achievements_team_id
        ON user_achievements(team_id)
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_user_achievements_weekly_reset_at
        ON user_achievements(weekly_reset_at)
    """)

    # --- Practiced days ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS practice_streaks (
            id BIGSERIAL PRIMARY KEY,
            member_id VARCHAR(128) NOT NULL,
            practice_date DATE NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT practice_streaks_member_date_key UNIQUE (member_id, practice_date)
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_practice_streaks_member_id
        ON practice_streaks(member_id)
    """)

    # --- Activity log ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS activity_sessions (
            id BIGSERIAL PRIMARY KEY,
            member_id VARCHAR(128) NOT NULL,
            session_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS ix_activity_sessions_member_at
        ON activity_sessions(member_id, session_at)
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS activity_sessions")
    op.execute("DROP TABLE IF EXISTS practice_streaks")
    op.execute("DROP TABLE IF EXISTS user_achievements")
