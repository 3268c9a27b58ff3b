"""
Activity window — the immutable input of every calculator.

An ActivityDay is one calendar day of facts for one user. An ActivityWindow
is a contiguous run of N such days ending on `end` (inclusive), oldest first.
Days with no stored row are filled in as zero-activity days, not treated as
missing data.

Window sizes used by the engine:
  SCORE_WINDOW_DAYS  (14) — productivity score
  WEEK_WINDOW_DAYS    (7) — XP sync deltas and verdict inputs
  BESTS_WINDOW_DAYS  (30) — personal bests

Plain frozen dataclasses — no ORM, no Pydantic.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Iterable, Mapping, Optional

from devflow.core.errors import InvalidInputError

SCORE_WINDOW_DAYS = 14
WEEK_WINDOW_DAYS = 7
BESTS_WINDOW_DAYS = 30


def _count(value: Any) -> int:
    """Coerce a stored count to a non-negative int."""
    if value is None:
        return 0
    return max(0, int(value))


@dataclass(frozen=True)
class ActivityDay:
    day: date
    commits: int = 0
    prs_opened: int = 0
    prs_merged: int = 0
    issues_closed: int = 0
    lines_added: int = 0
    lines_deleted: int = 0
    coding_minutes: int = 0
    commits_by_hour: Mapping[int, int] = field(default_factory=dict)
    is_weekend: Optional[bool] = None
    languages: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self):
        # Derive the weekend flag from the calendar when the source omits it.
        if self.is_weekend is None:
            object.__setattr__(self, "is_weekend", self.day.weekday() >= 5)

    @property
    def is_active(self) -> bool:
        return self.commits > 0

    @property
    def coding_hours(self) -> float:
        return self.coding_minutes / 60

    @property
    def peak_hour_commits(self) -> int:
        return max(self.commits_by_hour.values(), default=0)

    @classmethod
    def empty(cls, day: date) -> "ActivityDay":
        return cls(day=day)

    @classmethod
    def from_record(cls, record: Any) -> "ActivityDay":
        """
        Build a day from a stored row (ORM object or dict).
        Negative counts are clamped to zero so they never reach scoring math.
        """
        get = record.get if isinstance(record, Mapping) else (
            lambda name, default=None: getattr(record, name, default)
        )
        raw_hours = get("commits_by_hour") or {}
        hours: dict[int, int] = {}
        for hour, count in raw_hours.items():
            h = int(hour)
            if 0 <= h <= 23:
                hours[h] = _count(count)
        languages = {str(k): _count(v) for k, v in (get("languages") or {}).items()}
        day = get("day")
        if not isinstance(day, date):
            raise InvalidInputError(
                message=f"Activity record has an invalid date: {day!r}.",
                details={"day": str(day)},
            )
        return cls(
            day=day,
            commits=_count(get("commits")),
            prs_opened=_count(get("prs_opened")),
            prs_merged=_count(get("prs_merged")),
            issues_closed=_count(get("issues_closed")),
            lines_added=_count(get("lines_added")),
            lines_deleted=_count(get("lines_deleted")),
            coding_minutes=_count(get("coding_minutes")),
            commits_by_hour=hours,
            is_weekend=get("is_weekend"),
            languages=languages,
        )


@dataclass(frozen=True)
class ActivityWindow:
    end: date
    days: tuple[ActivityDay, ...]
    recorded_days: int = 0   # how many days came from real rows (not gap fill)

    # --- construction -----------------------------------------------------

    @classmethod
    def build(
        cls,
        records: Iterable[ActivityDay],
        end: date,
        size: int,
    ) -> "ActivityWindow":
        """
        Window of `size` days ending on `end`, oldest first.
        Records outside the range are ignored; duplicate dates are rejected.
        """
        if size < 1:
            raise InvalidInputError(
                message=f"Window size must be at least 1. Received {size}.",
                details={"size": size},
            )
        start = end - timedelta(days=size - 1)
        by_day: dict[date, ActivityDay] = {}
        for rec in records:
            if rec.day in by_day:
                raise InvalidInputError(
                    message=f"Duplicate activity record for {rec.day}.",
                    details={"day": str(rec.day)},
                )
            if start <= rec.day <= end:
                by_day[rec.day] = rec

        days = tuple(
            by_day.get(start + timedelta(days=i)) or ActivityDay.empty(start + timedelta(days=i))
            for i in range(size)
        )
        return cls(end=end, days=days, recorded_days=len(by_day))

    # --- aggregates -------------------------------------------------------

    @property
    def size(self) -> int:
        return len(self.days)

    @property
    def today(self) -> ActivityDay:
        return self.days[-1]

    @property
    def has_history(self) -> bool:
        return self.recorded_days > 0

    @property
    def active_days(self) -> int:
        return sum(1 for d in self.days if d.is_active)

    @property
    def total_commits(self) -> int:
        return sum(d.commits for d in self.days)

    @property
    def total_prs_merged(self) -> int:
        return sum(d.prs_merged for d in self.days)

    @property
    def total_prs_opened(self) -> int:
        return sum(d.prs_opened for d in self.days)

    @property
    def total_coding_hours(self) -> float:
        return sum(d.coding_minutes for d in self.days) / 60

