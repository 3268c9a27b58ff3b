"""
Streak persistence — freeze consumption and the freeze audit trail.

Streak advancement itself happens inside the evaluation pipeline; this
module covers the explicit user action (use a freeze) and reads.
"""
from __future__ import annotations

from typing import Optional

from sqlalchemy.orm import Session

from devflow.models.freeze_event import FreezeEvent, FreezeEventType
from devflow.services.streak_tracker import StreakState, use_freeze
from devflow.services.users import (
    apply_streak_state,
    commit_user_mutation,
    get_user,
    streak_state_of,
)


def record_freeze_event(
    db: Session,
    user_id: int,
    event_type: str,
    streak: int,
    notes: Optional[str] = None,
) -> None:
    db.add(FreezeEvent(
        user_id=user_id,
        event_type=event_type,
        streak_at_event=streak,
        notes=notes,
    ))


def consume_freeze(db: Session, user_id: int) -> StreakState:
    """
    Spend one freeze to cover one missed day of the current gap.
    Raises NoFreezeAvailableError (409) with the balance at zero.
    """
    user = get_user(db, user_id)
    state = use_freeze(streak_state_of(user))
    apply_streak_state(user, state)
    record_freeze_event(
        db, user_id, FreezeEventType.USED, state.current_streak,
        notes=f"Covers {state.protected_gap_days} missed day(s) since {state.last_activity_date}",
    )
    commit_user_mutation(db, user_id)
    return state


def get_freeze_events(db: Session, user_id: int, limit: int = 20) -> list[FreezeEvent]:
    return (
        db.query(FreezeEvent)
        .filter(FreezeEvent.user_id == user_id)
        .order_by(FreezeEvent.created_at.desc(), FreezeEvent.id.desc())
        .limit(limit)
        .all()
    )
