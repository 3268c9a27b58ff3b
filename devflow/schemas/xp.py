"""
XP schemas.

GET  /users/{id}/xp → XpOverviewResponse
POST /users/{id}/xp → XpAwardRequest → XpAwardResponse
"""
from typing import Any, Optional
from pydantic import BaseModel, ConfigDict, Field

from devflow.services.xp_ledger import XpSource


class LevelInfoResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    level: int
    title: str
    color: str = Field(description="Hex colour for the level badge.")
    xp: int
    xp_for_current_level: int
    xp_for_next_level: int
    progress_pct: int = Field(description="Progress towards the next level, 0–100.")


class MilestoneResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    level: int
    title: str
    xp_required: int
    xp_remaining: int


class XpTransactionResponse(BaseModel):
    id: int
    source: str
    amount: int
    description: Optional[str] = None
    metadata: Optional[dict[str, Any]] = None
    created_at: str


class XpOverviewResponse(BaseModel):
    total_xp: int
    total_xp_display: str = Field(description='Compact form, e.g. "12.5K".', examples=["12.5K"])
    level: LevelInfoResponse
    next_milestone: Optional[MilestoneResponse] = Field(
        default=None, description="Next level threshold; null at the top level."
    )
    total_transactions: int
    recent: list[XpTransactionResponse] = Field(description="Newest first.")


class XpAwardRequest(BaseModel):
    """
    A discrete XP event. `amount` is validated by the ledger itself so a
    non-positive value surfaces as INVALID_AMOUNT rather than a field error.
    """
    source: XpSource = Field(examples=["challenge_won"])
    amount: int = Field(examples=[100])
    description: str = Field(default="", max_length=256)
    metadata: Optional[dict[str, Any]] = None


class XpAwardResponse(BaseModel):
    source: str
    amount: int
    description: str
    total_xp: int
    old_level: int
    new_level: int
    leveled_up: bool
    level: LevelInfoResponse
