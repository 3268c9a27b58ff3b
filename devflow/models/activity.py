"""
DailyActivity — one calendar day of GitHub facts for one user.

Written by the ingestion collaborator (PUT /users/{id}/activity), read by
every calculator. Upserted by (user_id, day).

commits_by_hour / languages: JSON-encoded dicts stored as Text (stdlib json).
"""
import json
from datetime import datetime, date
from sqlalchemy import Integer, Text, Boolean, DateTime, Date, ForeignKey, func, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from devflow.db.base import Base


def _load_counts(raw: str | None) -> dict:
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except (ValueError, TypeError):
        return {}
    return data if isinstance(data, dict) else {}


class DailyActivity(Base):
    __tablename__ = "daily_activity"
    __table_args__ = (
        UniqueConstraint("user_id", "day", name="uq_daily_activity_user_day"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    day: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    commits: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    prs_opened: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    prs_merged: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    issues_closed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    lines_added: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    lines_deleted: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    coding_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_weekend: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    commits_by_hour_json: Mapped[str | None] = mapped_column(
        "commits_by_hour", Text, nullable=True,
        comment='JSON-encoded {"0".."23": count}',
    )
    languages_json: Mapped[str | None] = mapped_column(
        "languages", Text, nullable=True,
        comment='JSON-encoded {"Python": count, ...}',
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    @property
    def commits_by_hour(self) -> dict:
        return _load_counts(self.commits_by_hour_json)

    @property
    def languages(self) -> dict:
        return _load_counts(self.languages_json)
