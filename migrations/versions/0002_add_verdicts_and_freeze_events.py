"""add daily_verdicts and freeze_events tables

Revision ID: 0002
Revises: 0001
Create Date: 2026-03-04

daily_verdicts: one row per (user_id, day), overwritten on re-evaluation.
freeze_events: append-only audit of freezes earned and used.
"""
from alembic import op
import sqlalchemy as sa

revision = "0002"
down_revision = "0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "daily_verdicts",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("day", sa.Date(), nullable=False),
        sa.Column("verdict_key", sa.String(64), nullable=False),
        sa.Column("verdict_text", sa.Text(), nullable=False),
        sa.Column("verdict_subtext", sa.Text(), nullable=True),
        sa.Column("severity", sa.String(16), nullable=False),
        sa.Column("primary_factor", sa.String(64), nullable=False),
        sa.Column("score_change", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("dev_flow_score", sa.Integer(), nullable=True),
        sa.Column(
            "computed_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_daily_verdicts_id", "daily_verdicts", ["id"])
    op.create_index("ix_daily_verdicts_user_id", "daily_verdicts", ["user_id"])
    op.create_index("ix_daily_verdicts_day", "daily_verdicts", ["day"])
    op.create_unique_constraint(
        "uq_daily_verdict_user_day",
        "daily_verdicts",
        ["user_id", "day"],
    )

    op.create_table(
        "freeze_events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("event_type", sa.String(16), nullable=False),
        sa.Column("streak_at_event", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
    )
    op.create_index("ix_freeze_events_id", "freeze_events", ["id"])
    op.create_index("ix_freeze_events_user_id", "freeze_events", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_freeze_events_user_id", table_name="freeze_events")
    op.drop_index("ix_freeze_events_id", table_name="freeze_events")
    op.drop_table("freeze_events")
    op.drop_constraint("uq_daily_verdict_user_day", "daily_verdicts", type_="unique")
    op.drop_index("ix_daily_verdicts_day", table_name="daily_verdicts")
    op.drop_index("ix_daily_verdicts_user_id", table_name="daily_verdicts")
    op.drop_index("ix_daily_verdicts_id", table_name="daily_verdicts")
    op.drop_table("daily_verdicts")
