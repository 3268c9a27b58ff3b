"""
Evaluation schemas.

POST /users/{id}/evaluate → EvaluateRequest → EvaluationResponse
"""
from datetime import date
from typing import Optional
from pydantic import BaseModel, Field

from devflow.schemas.score import ScoreResponse
from devflow.schemas.verdict import VerdictResponse
from devflow.schemas.xp import LevelInfoResponse


class EvaluateRequest(BaseModel):
    day: Optional[date] = Field(
        default=None,
        description="Day to evaluate. Defaults to today (UTC).",
        examples=["2026-03-02"],
    )


class StreakOutcome(BaseModel):
    current_streak: int
    longest_streak: int
    freeze_days_available: int
    extended: bool
    broken: bool
    freeze_protected: bool
    freeze_earned: bool
    stale: bool


class XpAwardLine(BaseModel):
    source: str
    amount: int
    description: str


class XpOutcome(BaseModel):
    awarded: list[XpAwardLine]
    total_awarded: int
    total_xp: int
    skipped: bool = Field(description="True when the day predates the last XP sync.")
    leveled_up: bool
    level: LevelInfoResponse


class EvaluationResponse(BaseModel):
    user_id: int
    day: str
    streak: StreakOutcome
    score: ScoreResponse
    xp: XpOutcome
    verdict: VerdictResponse
    attempts: int
