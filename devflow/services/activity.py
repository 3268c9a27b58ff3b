"""
Activity storage — batch upsert of daily facts and window loading.

Rules:
- Rows are keyed by (user_id, day); a second PUT for the same day overwrites.
- Calculators never see ORM rows, only ActivityDay / ActivityWindow.
- db.commit() only in upsert_activity().
"""
from __future__ import annotations

import json
from datetime import date, timedelta
from typing import Any, Iterable, Mapping

from sqlalchemy.orm import Session

from devflow.core.errors import InvalidInputError
from devflow.models.activity import DailyActivity
from devflow.services.activity_window import ActivityDay, ActivityWindow
from devflow.services.users import get_user

_COUNT_FIELDS = (
    "commits",
    "prs_opened",
    "prs_merged",
    "issues_closed",
    "lines_added",
    "lines_deleted",
    "coding_minutes",
)


def _jdump(counts: Mapping[Any, int] | None) -> str | None:
    if not counts:
        return None
    return json.dumps({str(k): int(v) for k, v in counts.items()}, sort_keys=True)


def upsert_activity(
    db: Session,
    user_id: int,
    days: Iterable[Mapping[str, Any]],
) -> list[DailyActivity]:
    """
    Insert or overwrite one DailyActivity row per item.
    Each item carries `day` plus any of the count fields, `commits_by_hour`,
    `languages` and `is_weekend`. Omitted counts are stored as 0.
    """
    get_user(db, user_id)
    items = list(days)

    seen: set[date] = set()
    for item in items:
        if item["day"] in seen:
            raise InvalidInputError(
                message=f"Duplicate activity record for {item['day']}.",
                details={"day": str(item["day"])},
            )
        seen.add(item["day"])

    existing = {
        row.day: row
        for row in db.query(DailyActivity)
        .filter(DailyActivity.user_id == user_id, DailyActivity.day.in_(list(seen)))
        .all()
    } if seen else {}

    rows: list[DailyActivity] = []
    for item in items:
        day = item["day"]
        row = existing.get(day)
        if row is None:
            row = DailyActivity(user_id=user_id, day=day)
            db.add(row)
        for name in _COUNT_FIELDS:
            setattr(row, name, int(item.get(name) or 0))
        is_weekend = item.get("is_weekend")
        row.is_weekend = day.weekday() >= 5 if is_weekend is None else bool(is_weekend)
        row.commits_by_hour_json = _jdump(item.get("commits_by_hour"))
        row.languages_json = _jdump(item.get("languages"))
        rows.append(row)

    db.commit()
    for row in rows:
        db.refresh(row)
    return sorted(rows, key=lambda r: r.day)


def get_activity_rows(db: Session, user_id: int, start: date, end: date) -> list[DailyActivity]:
    return (
        db.query(DailyActivity)
        .filter(
            DailyActivity.user_id == user_id,
            DailyActivity.day >= start,
            DailyActivity.day <= end,
        )
        .order_by(DailyActivity.day.asc())
        .all()
    )


def load_window(db: Session, user_id: int, end: date, size: int) -> ActivityWindow:
    """ActivityWindow of `size` days ending on `end`; gaps become empty days."""
    if size < 1:
        raise InvalidInputError(
            message=f"Window size must be at least 1. Received {size}.",
            details={"size": size},
        )
    start = end - timedelta(days=size - 1)
    rows = get_activity_rows(db, user_id, start, end)
    return ActivityWindow.build((ActivityDay.from_record(r) for r in rows), end=end, size=size)

