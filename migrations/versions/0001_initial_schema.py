"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-03-02 00:00:00.000000

users, daily_activity, dev_flow_scores, xp_transactions.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # --- users ---
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("github_login", sa.String(128), nullable=False),
        sa.Column("display_name", sa.String(256), nullable=True),
        sa.Column("current_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("longest_streak", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_activity_date", sa.Date(), nullable=True),
        sa.Column("freeze_days_available", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("freeze_days_used_total", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_freeze_earned_date", sa.Date(), nullable=True),
        sa.Column("protected_gap_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("current_score", sa.Integer(), nullable=True),
        sa.Column("total_xp", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("xp_synced_date", sa.Date(), nullable=True),
        sa.Column("xp_synced_commits", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("xp_synced_prs_merged", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("xp_synced_active_days", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("version_id", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_id", "users", ["id"])
    op.create_index("ix_users_github_login", "users", ["github_login"], unique=True)

    # --- daily_activity ---
    op.create_table(
        "daily_activity",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("day", sa.Date(), nullable=False),
        sa.Column("commits", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("prs_opened", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("prs_merged", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("issues_closed", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("lines_added", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("lines_deleted", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("coding_minutes", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_weekend", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("commits_by_hour", sa.Text(), nullable=True),
        sa.Column("languages", sa.Text(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "day", name="uq_daily_activity_user_day"),
    )
    op.create_index("ix_daily_activity_id", "daily_activity", ["id"])
    op.create_index("ix_daily_activity_user_id", "daily_activity", ["user_id"])
    op.create_index("ix_daily_activity_day", "daily_activity", ["day"])

    # --- dev_flow_scores ---
    op.create_table(
        "dev_flow_scores",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("day", sa.Date(), nullable=False),
        sa.Column("building_ratio", sa.Integer(), nullable=False),
        sa.Column("consistency", sa.Integer(), nullable=False),
        sa.Column("shipping_frequency", sa.Integer(), nullable=False),
        sa.Column("focus_depth", sa.Integer(), nullable=False),
        sa.Column("recovery_balance", sa.Integer(), nullable=False),
        sa.Column("raw_weighted_total", sa.Integer(), nullable=False),
        sa.Column("gaming_detected", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("gaming_penalty", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("gaming_reason", sa.String(256), nullable=True),
        sa.Column("final_score", sa.Integer(), nullable=False),
        sa.Column("change_from_yesterday", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("percentile", sa.Integer(), nullable=False, server_default="50"),
        sa.Column("global_average", sa.Integer(), nullable=False, server_default="50"),
        sa.Column("computed_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "day", name="uq_dev_flow_score_user_day"),
    )
    op.create_index("ix_dev_flow_scores_id", "dev_flow_scores", ["id"])
    op.create_index("ix_dev_flow_scores_user_id", "dev_flow_scores", ["user_id"])
    op.create_index("ix_dev_flow_scores_day", "dev_flow_scores", ["day"])

    # --- xp_transactions ---
    op.create_table(
        "xp_transactions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("source", sa.String(64), nullable=False),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("description", sa.String(256), nullable=True),
        sa.Column("metadata", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.CheckConstraint("amount > 0", name="ck_xp_transactions_amount_positive"),
    )
    op.create_index("ix_xp_transactions_id", "xp_transactions", ["id"])
    op.create_index("ix_xp_transactions_user_id", "xp_transactions", ["user_id"])
    op.create_index("ix_xp_transactions_source", "xp_transactions", ["source"])


def downgrade() -> None:
    op.drop_table("xp_transactions")
    op.drop_table("dev_flow_scores")
    op.drop_table("daily_activity")
    op.drop_index("ix_users_github_login", table_name="users")
    op.drop_index("ix_users_id", table_name="users")
    op.drop_table("users")
