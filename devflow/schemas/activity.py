"""
Activity schemas.

PUT /users/{id}/activity → ActivityUpsertRequest → ActivityListResponse
GET /users/{id}/activity → ActivityOverviewResponse
GET /users/{id}/bests    → PersonalBestsResponse
"""
from __future__ import annotations

from datetime import date
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ACTIVITY_MAX_DAYS = 366

NonNegative = Annotated[int, Field(ge=0)]


class ActivityDayIn(BaseModel):
    """One calendar day of already-fetched GitHub activity."""
    day: date = Field(examples=["2026-03-02"])
    commits: NonNegative = 0
    prs_opened: NonNegative = 0
    prs_merged: NonNegative = 0
    issues_closed: NonNegative = 0
    lines_added: NonNegative = 0
    lines_deleted: NonNegative = 0
    coding_minutes: NonNegative = 0
    commits_by_hour: dict[int, NonNegative] = Field(
        default_factory=dict,
        description="Commits per hour of day, keys 0..23.",
        examples=[{"9": 3, "14": 2}],
    )
    is_weekend: Optional[bool] = Field(
        default=None, description="Defaults to Saturday/Sunday from `day`."
    )
    languages: dict[str, NonNegative] = Field(default_factory=dict, examples=[{"Python": 4}])

    @field_validator("commits_by_hour")
    @classmethod
    def hours_in_range(cls, v: dict[int, int]) -> dict[int, int]:
        bad = [h for h in v if not 0 <= h <= 23]
        if bad:
            raise ValueError(f"commits_by_hour keys must be 0..23, got {sorted(bad)}")
        return v


class ActivityUpsertRequest(BaseModel):
    days: list[ActivityDayIn] = Field(min_length=1, max_length=ACTIVITY_MAX_DAYS)


class ActivityDayResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    day: str
    commits: int
    prs_opened: int
    prs_merged: int
    issues_closed: int
    lines_added: int
    lines_deleted: int
    coding_minutes: int
    commits_by_hour: dict[int, int]
    is_weekend: bool
    languages: dict[str, int]


class ActivityListResponse(BaseModel):
    total: int
    items: list[ActivityDayResponse]


class LanguageCount(BaseModel):
    language: str
    commits: int


class ActivitySummaryResponse(BaseModel):
    start: str
    end: str
    total_commits: int
    total_prs: int = Field(description="PRs opened + merged.")
    total_issues: int
    total_lines_added: int
    total_lines_deleted: int
    active_days: int
    top_languages: list[LanguageCount]
    most_productive_hour: int = Field(description="0..23; 9 when no hourly data exists.")
    weekday_commits: int
    weekend_commits: int
    average_score: Optional[int] = None
    trend: str = Field(description='"up" | "down" | "stable"')


class ActivityOverviewResponse(BaseModel):
    days: list[ActivityDayResponse] = Field(description="Every day of the window, oldest first.")
    summary: ActivitySummaryResponse


class PersonalBestsResponse(BaseModel):
    longest_streak: int
    current_streak: int = Field(description="Streak as of the window end, 0 once it has lapsed.")
    most_commits_in_day: int
    most_commits_in_week: int = Field(description="Best rolling 7-day commit total.")
    total_commits: int
    total_prs: int = Field(description="Merged PRs in the window.")
    first_active_date: Optional[str] = None
    active_months: int
    window_days: int
