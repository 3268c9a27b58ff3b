"""
DevFlowScore — persisted ScoreSnapshot for one (user, day).

Derived cache: daily_activity stays the source of truth. Recomputing the
same day overwrites the row (upsert on the unique constraint).
"""
from datetime import datetime, date
from sqlalchemy import Integer, String, Boolean, DateTime, Date, ForeignKey, func, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from devflow.db.base import Base


class DevFlowScore(Base):
    __tablename__ = "dev_flow_scores"
    __table_args__ = (
        UniqueConstraint("user_id", "day", name="uq_dev_flow_score_user_day"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day: Mapped[date] = mapped_column(Date, nullable=False, index=True)

    building_ratio: Mapped[int] = mapped_column(Integer, nullable=False)
    consistency: Mapped[int] = mapped_column(Integer, nullable=False)
    shipping_frequency: Mapped[int] = mapped_column(Integer, nullable=False)
    focus_depth: Mapped[int] = mapped_column(Integer, nullable=False)
    recovery_balance: Mapped[int] = mapped_column(Integer, nullable=False)
    raw_weighted_total: Mapped[int] = mapped_column(Integer, nullable=False)

    gaming_detected: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    gaming_penalty: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    gaming_reason: Mapped[str | None] = mapped_column(String(256), nullable=True)

    final_score: Mapped[int] = mapped_column(Integer, nullable=False, comment="0–100, post-penalty")
    change_from_yesterday: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    percentile: Mapped[int] = mapped_column(Integer, nullable=False, default=50)
    global_average: Mapped[int] = mapped_column(Integer, nullable=False, default=50)

    computed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
