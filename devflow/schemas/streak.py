"""
Streak schemas.

GET  /users/{id}/streak        → StreakResponse
POST /users/{id}/streak/freeze → FreezeUseResponse
"""
from typing import Optional
from pydantic import BaseModel, Field


class FreezeStatusResponse(BaseModel):
    freezes_available: int
    max_freezes: int
    freezes_used_total: int
    days_until_next_freeze: int
    will_earn_freeze_today: bool
    last_earned: Optional[str] = None


class FreezeEventResponse(BaseModel):
    event_type: str = Field(description="\"earned\" or \"used\".")
    streak_at_event: int
    notes: Optional[str] = None
    created_at: str


class StreakResponse(BaseModel):
    current_streak: int = Field(description="0 once the grace day and any freezes have lapsed.")
    stored_streak: int = Field(description="Streak as of the last evaluated active day.")
    longest_streak: int
    last_activity_date: Optional[str] = None
    protected_gap_days: int
    hours_until_break: int
    at_risk: bool
    freeze: FreezeStatusResponse
    recent_freeze_events: list[FreezeEventResponse] = Field(default_factory=list, description="Newest first.")


class FreezeUseResponse(BaseModel):
    current_streak: int
    freezes_available: int
    freezes_used_total: int
    protected_gap_days: int
    message: str
