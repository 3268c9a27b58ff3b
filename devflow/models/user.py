"""
User — the single owner of streak state, XP total and current score.

`version_id` is an optimistic-lock counter (SQLAlchemy version_id_col):
two concurrent evaluations of the same user cannot both commit a streak
or freeze update; the loser gets StaleDataError.

xp_synced_* columns remember what the last evaluation already paid XP for,
so re-evaluating the same day only pays for new commits / PRs.
"""
from datetime import datetime, date
from sqlalchemy import Integer, String, DateTime, Date, func
from sqlalchemy.orm import Mapped, mapped_column

from devflow.db.base import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    github_login: Mapped[str] = mapped_column(String(128), nullable=False, unique=True, index=True)
    display_name: Mapped[str | None] = mapped_column(String(256), nullable=True)

    # --- streak state ---
    current_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    longest_streak: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_activity_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    freeze_days_available: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    freeze_days_used_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_freeze_earned_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    protected_gap_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # --- score / xp ---
    current_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    total_xp: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    xp_synced_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    xp_synced_commits: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    xp_synced_prs_merged: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    xp_synced_active_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    version_id: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    __mapper_args__ = {"version_id_col": version_id}
