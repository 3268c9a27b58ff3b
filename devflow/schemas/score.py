"""
Score schemas.

GET /users/{id}/score → ScoreResponse
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class ScoreComponentsResponse(BaseModel):
    building_ratio: int
    consistency: int
    shipping_frequency: int
    focus_depth: int
    recovery_balance: int


class GamingResponse(BaseModel):
    detected: bool
    penalty: int
    reason: Optional[str] = None


class ScoreResponse(BaseModel):
    """One stored DevFlow Score."""
    model_config = ConfigDict(from_attributes=True)

    day: str
    components: ScoreComponentsResponse
    raw_weighted_total: int
    gaming: GamingResponse
    final_score: int = Field(description="0–100, after the anti-gaming penalty.", examples=[72])
    change_from_yesterday: int
    percentile: int = Field(description="Share of users scoring strictly lower, 0–100.")
    global_average: int
