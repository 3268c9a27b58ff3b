"""
FreezeEvent — audit trail of streak freezes.

Append-only. event_type values:
  "earned"  — a 7-day multiple was reached
  "used"    — a freeze was consumed to cover a missed day
"""
from datetime import datetime
from sqlalchemy import Integer, String, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column

from devflow.db.base import Base


class FreezeEventType:
    EARNED = "earned"
    USED = "used"


class FreezeEvent(Base):
    __tablename__ = "freeze_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    event_type: Mapped[str] = mapped_column(String(16), nullable=False)
    streak_at_event: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
