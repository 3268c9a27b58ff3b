"""
User schemas.

POST /users      → UserCreateRequest → UserResponse
GET  /users/{id} → UserResponse
"""
from typing import Annotated, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator

from devflow.schemas.xp import LevelInfoResponse


class UserCreateRequest(BaseModel):
    github_login: Annotated[str, Field(
        min_length=1,
        max_length=128,
        description="GitHub username. Unique.",
        examples=["octocat"],
    )]
    display_name: Optional[str] = Field(default=None, max_length=256, examples=["The Octocat"])

    @field_validator("github_login", mode="before")
    @classmethod
    def strip_login(cls, v: str) -> str:
        stripped = v.strip() if isinstance(v, str) else v
        if not stripped:
            raise ValueError("github_login must not be empty after stripping whitespace")
        return stripped


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    github_login: str
    display_name: Optional[str] = None
    current_streak: int = Field(description="Streak as of today (UTC), 0 once it has lapsed.")
    longest_streak: int
    last_activity_date: Optional[str] = Field(default=None, description="ISO date of the last active day.")
    freeze_days_available: int
    current_score: Optional[int] = Field(default=None, description="Latest DevFlow Score, 0–100.")
    total_xp: int
    level: LevelInfoResponse
    created_at: str
