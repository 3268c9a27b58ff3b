"""
User service — the user row is the single owner of streak state and XP.

Public API
----------
create_user(db, github_login, display_name) -> User
get_user(db, user_id)                       -> User   (UserNotFoundError)
streak_state_of(user)                       -> StreakState
apply_streak_state(user, state)             -> None   (no commit)
commit_user_mutation(db, user_id)           -> None   (ConcurrentMutationConflictError)
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from devflow.core.errors import (
    ConcurrentMutationConflictError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from devflow.models.user import User
from devflow.services.streak_tracker import StreakState

logger = logging.getLogger(__name__)


def create_user(db: Session, github_login: str, display_name: Optional[str] = None) -> User:
    login = github_login.strip()
    if db.query(User.id).filter(User.github_login == login).first() is not None:
        raise UserAlreadyExistsError(login)

    user = User(github_login=login, display_name=display_name)
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        # Lost a race with a concurrent create of the same login.
        db.rollback()
        raise UserAlreadyExistsError(login) from exc
    db.refresh(user)
    logger.info("Created user %d (%s)", user.id, login)
    return user


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise UserNotFoundError(user_id)
    return user


def streak_state_of(user: User) -> StreakState:
    return StreakState(
        current_streak=user.current_streak,
        longest_streak=user.longest_streak,
        last_activity_date=user.last_activity_date,
        freeze_days_available=user.freeze_days_available,
        freeze_days_used_total=user.freeze_days_used_total,
        last_freeze_earned_date=user.last_freeze_earned_date,
        protected_gap_days=user.protected_gap_days,
    )


def apply_streak_state(user: User, state: StreakState) -> None:
    """Copy a StreakState onto the user row. Unchanged values are not touched."""
    for name in (
        "current_streak",
        "longest_streak",
        "last_activity_date",
        "freeze_days_available",
        "freeze_days_used_total",
        "last_freeze_earned_date",
        "protected_gap_days",
    ):
        value = getattr(state, name)
        if getattr(user, name) != value:
            setattr(user, name, value)


def commit_user_mutation(db: Session, user_id: int) -> None:
    """
    Commit a unit of work that updated the user row.
    A concurrent writer that bumped version_id first turns into a 409.
    """
    try:
        db.commit()
    except StaleDataError as exc:
        db.rollback()
        logger.warning("Concurrent update of user %d detected; changes rolled back", user_id)
        raise ConcurrentMutationConflictError(user_id) from exc
