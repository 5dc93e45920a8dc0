"""habits, completions, mood and profile tables

Revision ID: 20240601_initial
Revises:
Create Date: 2024-06-01
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "20240601_initial"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "habits_habit",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("icon", sa.String(length=64), nullable=False, server_default="⭐"),
        sa.Column("icon_color", sa.String(length=64), nullable=False, server_default=""),
        sa.Column("frequency", sa.String(length=16), nullable=False, server_default="daily"),
        sa.Column("daily_goal", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("unit", sa.String(length=64), nullable=False, server_default="times"),
        sa.Column("description", sa.Text()),
        sa.Column("reminder_enabled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("reminder_time", sa.String(length=5), nullable=False, server_default="09:00"),
        sa.Column("current_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("best_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("total_completions", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint(
            "frequency IN ('daily', 'weekly', 'custom')", name="ck_habits_habit_frequency"
        ),
    )
    op.create_index("ix_habits_habit_user_id", "habits_habit", ["user_id"])
    op.create_index("ix_habits_habit_user_created", "habits_habit", ["user_id", "created_at"])

    op.create_table(
        "habits_completion",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "habit_id",
            sa.Integer(),
            sa.ForeignKey("habits_habit.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("completion_date", sa.Date(), nullable=False),
        sa.Column("completed_amount", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint(
            "habit_id", "user_id", "completion_date", name="ux_habits_completion_habit_user_date"
        ),
    )
    op.create_index("ix_habits_completion_habit_id", "habits_completion", ["habit_id"])
    op.create_index(
        "ix_habits_completion_user_date", "habits_completion", ["user_id", "completion_date"]
    )

    op.create_table(
        "mood_daily_entry",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("mood", sa.String(length=32)),
        sa.Column("focus_level", sa.Integer()),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.UniqueConstraint("user_id", "date", name="ux_mood_daily_entry_user_date"),
    )
    op.create_index("ix_mood_daily_entry_user_id", "mood_daily_entry", ["user_id"])

    op.create_table(
        "users_profile",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.String(length=128), nullable=False),
        sa.Column("first_name", sa.String(length=128)),
        sa.Column("last_name", sa.String(length=128)),
        sa.Column("email", sa.String(length=255)),
        sa.Column("timezone", sa.String(length=64)),
        sa.Column("language", sa.String(length=64)),
        sa.Column("profile_image", sa.Text(), nullable=False, server_default=""),
        sa.Column("created_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_users_profile_user_id", "users_profile", ["user_id"], unique=True)


def downgrade():
    op.drop_index("ix_users_profile_user_id", table_name="users_profile")
    op.drop_table("users_profile")
    op.drop_index("ix_mood_daily_entry_user_id", table_name="mood_daily_entry")
    op.drop_table("mood_daily_entry")
    op.drop_index("ix_habits_completion_user_date", table_name="habits_completion")
    op.drop_index("ix_habits_completion_habit_id", table_name="habits_completion")
    op.drop_table("habits_completion")
    op.drop_index("ix_habits_habit_user_created", table_name="habits_habit")
    op.drop_index("ix_habits_habit_user_id", table_name="habits_habit")
    op.drop_table("habits_habit")
