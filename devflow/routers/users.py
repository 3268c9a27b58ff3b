"""
Users router.

POST /users        — create a user
GET  /users/{id}   — user with streak, score and level
"""
from __future__ import annotations

from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from devflow.db.base import get_db
from devflow.models.user import User
from devflow.schemas.common import ErrorResponse
from devflow.schemas.user import UserCreateRequest, UserResponse
from devflow.services.streak_tracker import effective_streak
from devflow.services.users import create_user, get_user, streak_state_of
from devflow.routers.xp import level_to_response
from devflow.services.xp_ledger import level_info

router = APIRouter(prefix="/users", tags=["users"])


def _today() -> date:
    return datetime.now(tz=timezone.utc).date()


def user_to_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        github_login=user.github_login,
        display_name=user.display_name,
        current_streak=effective_streak(streak_state_of(user), _today()),
        longest_streak=user.longest_streak,
        last_activity_date=str(user.last_activity_date) if user.last_activity_date else None,
        freeze_days_available=user.freeze_days_available,
        current_score=user.current_score,
        total_xp=user.total_xp,
        level=level_to_response(level_info(user.total_xp)),
        created_at=user.created_at.isoformat() if user.created_at else "",
    )


@router.post(
    "",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a user",
    responses={409: {"model": ErrorResponse, "description": "Login already taken."}},
)
def create(payload: UserCreateRequest, db: Session = Depends(get_db)):
    user = create_user(db, payload.github_login, payload.display_name)
    return user_to_response(user)


@router.get(
    "/{user_id}",
    response_model=UserResponse,
    summary="Get a user",
    responses={404: {"model": ErrorResponse, "description": "Unknown user."}},
)
def read(user_id: int, db: Session = Depends(get_db)):
    return user_to_response(get_user(db, user_id))
