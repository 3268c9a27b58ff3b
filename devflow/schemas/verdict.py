"""
Verdict schemas.

GET /users/{id}/verdict → VerdictResponse
"""
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class VerdictResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    day: str
    verdict_key: str = Field(examples=["momentum_building"])
    text: str
    subtext: Optional[str] = None
    severity: str = Field(description='"praise" | "warning" | "neutral" | "critical"')
    primary_factor: str
    score_change: int
    dev_flow_score: Optional[int] = None
