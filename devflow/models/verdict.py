"""
DailyVerdict — one classification of "today" per (user, day).

Explicit recompute overwrites the row; the unique constraint keeps it at
one per day.
"""
from datetime import datetime, date
from sqlalchemy import Integer, String, Text, DateTime, Date, ForeignKey, func, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from devflow.db.base import Base


class DailyVerdict(Base):
    __tablename__ = "daily_verdicts"
    __table_args__ = (
        UniqueConstraint("user_id", "day", name="uq_daily_verdict_user_day"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    verdict_key: Mapped[str] = mapped_column(String(64), nullable=False)
    verdict_text: Mapped[str] = mapped_column(Text, nullable=False)
    verdict_subtext: Mapped[str | None] = mapped_column(Text, nullable=True)
    severity: Mapped[str] = mapped_column(String(16), nullable=False)
    primary_factor: Mapped[str] = mapped_column(String(64), nullable=False)
    score_change: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    dev_flow_score: Mapped[int | None] = mapped_column(Integer, nullable=True)
    computed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
