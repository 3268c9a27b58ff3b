"""
Streak router.

GET  /users/{id}/streak          — live streak, freeze status and history, hours until break
POST /users/{id}/streak/freeze   — consume one freeze
"""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from devflow.db.base import get_db
from devflow.models.freeze_event import FreezeEvent
from devflow.schemas.common import ErrorResponse
from devflow.schemas.streak import (
    FreezeEventResponse,
    FreezeStatusResponse,
    FreezeUseResponse,
    StreakResponse,
)
from devflow.services.streak_tracker import (
    effective_streak,
    freeze_status,
    hours_until_break,
    is_at_risk,
)
from devflow.services.streaks import consume_freeze, get_freeze_events
from devflow.services.users import get_user, streak_state_of

router = APIRouter(prefix="/users", tags=["streak"])


def _freeze_event_to_response(event: FreezeEvent) -> FreezeEventResponse:
    return FreezeEventResponse(
        event_type=event.event_type,
        streak_at_event=event.streak_at_event,
        notes=event.notes,
        created_at=event.created_at.isoformat() if event.created_at else "",
    )


@router.get(
    "/{user_id}/streak",
    response_model=StreakResponse,
    summary="Streak status",
    responses={404: {"model": ErrorResponse, "description": "Unknown user."}},
)
def get_streak(
    user_id: int,
    now: Optional[datetime] = Query(
        default=None,
        description="Wall-clock time to measure against. Defaults to now (UTC).",
        examples=["2026-03-02T18:30:00"],
    ),
    db: Session = Depends(get_db),
):
    """
    The streak survives through the whole day after the last active day,
    plus one more day per freeze used since. `current_streak` reads 0 once
    that cover has lapsed, even before the next evaluation resets it.
    """
    state = streak_state_of(get_user(db, user_id))
    at = now or datetime.now(tz=timezone.utc)
    today = at.date()
    status_ = freeze_status(state, today)
    return StreakResponse(
        current_streak=effective_streak(state, today),
        stored_streak=state.current_streak,
        longest_streak=state.longest_streak,
        last_activity_date=str(state.last_activity_date) if state.last_activity_date else None,
        protected_gap_days=state.protected_gap_days,
        hours_until_break=hours_until_break(state, at),
        at_risk=is_at_risk(state, today),
        freeze=FreezeStatusResponse(
            freezes_available=status_.freezes_available,
            max_freezes=status_.max_freezes,
            freezes_used_total=status_.freezes_used_total,
            days_until_next_freeze=status_.days_until_next_freeze,
            will_earn_freeze_today=status_.will_earn_freeze_today,
            last_earned=str(status_.last_earned) if status_.last_earned else None,
        ),
        recent_freeze_events=[
            _freeze_event_to_response(e) for e in get_freeze_events(db, user_id)
        ],
    )


@router.post(
    "/{user_id}/streak/freeze",
    response_model=FreezeUseResponse,
    summary="Use a streak freeze",
    responses={
        404: {"model": ErrorResponse, "description": "Unknown user."},
        409: {"model": ErrorResponse, "description": "No freeze available, or a concurrent update."},
    },
)
def use_streak_freeze(user_id: int, db: Session = Depends(get_db)):
    """Spend one freeze to cover one missed day. Freezes are earned every 7 streak days, max 3."""
    state = consume_freeze(db, user_id)
    return FreezeUseResponse(
        current_streak=state.current_streak,
        freezes_available=state.freeze_days_available,
        freezes_used_total=state.freeze_days_used_total,
        protected_gap_days=state.protected_gap_days,
        message=f"Freeze used. {state.freeze_days_available} remaining.",
    )
