"""
XpTransaction — append-only XP ledger.

users.total_xp is the running sum of `amount`; rows are never updated or
deleted. metadata: JSON-encoded dict stored as Text.
"""
from datetime import datetime
from sqlalchemy import Integer, String, Text, DateTime, ForeignKey, func, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from devflow.db.base import Base


class XpTransaction(Base):
    __tablename__ = "xp_transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_xp_transactions_amount_positive"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    source: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str | None] = mapped_column(String(256), nullable=True)
    xp_metadata: Mapped[str | None] = mapped_column(
        "metadata", Text, nullable=True,
        comment="JSON-encoded dict with context for the award",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
