"""
Streak tracker — consecutive active days, a grace day, and freeze insurance.

Transition table for advance(today, state)
------------------------------------------
  today.day < last_activity_date        → stale recompute: no-op
  today.commits == 0                     → no change (a break is only decided
                                           when the next active day arrives)
  today.commits > 0 and
    last_activity_date == today.day      → no change (idempotent re-entry)
    last_activity_date is None           → current = 1
    gap == 1 day                         → current += 1
    gap >= 2 days, missed days all
      covered by consumed freezes        → current += 1
    gap >= 2 days, otherwise             → current = 1

After an active transition:
  last_activity_date = today, protected_gap_days = 0,
  longest = max(longest, current),
  and a freeze is earned when current is a positive multiple of 7, none was
  earned today yet, and fewer than MAX_FREEZE_DAYS are held.

Grace day
---------
A streak stays alive through the whole calendar day *after* the last active
day. Activity on day D keeps the streak safe until the end of D+1, so
the break horizon is ~48h from the start of D, not 24h.

Freezes
-------
use_freeze() is an explicit action. Each freeze consumed covers one missed
calendar day of the current gap; the next advance() that closes the gap
resets protected_gap_days whether or not the cover was needed.

StreakState values are immutable; every transition returns a new one.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta
from typing import Optional

from devflow.core.errors import NoFreezeAvailableError
from devflow.services.activity_window import ActivityDay

logger = logging.getLogger(__name__)

MAX_FREEZE_DAYS = 3
FREEZE_EARN_INTERVAL = 7
GRACE_DAYS = 1


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class StreakState:
    current_streak: int = 0
    longest_streak: int = 0
    last_activity_date: Optional[date] = None
    freeze_days_available: int = 0
    freeze_days_used_total: int = 0
    last_freeze_earned_date: Optional[date] = None
    protected_gap_days: int = 0


@dataclass(frozen=True)
class StreakTransition:
    """What advance() did, for logging and API responses."""
    state: StreakState
    extended: bool = False
    broken: bool = False
    freeze_protected: bool = False
    freeze_earned: bool = False
    stale: bool = False


@dataclass(frozen=True)
class FreezeStatus:
    freezes_available: int
    max_freezes: int
    freezes_used_total: int
    days_until_next_freeze: int
    will_earn_freeze_today: bool
    last_earned: Optional[date]


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

def _maybe_earn_freeze(state: StreakState, today: date) -> tuple[StreakState, bool]:
    if (
        state.current_streak > 0
        and state.current_streak % FREEZE_EARN_INTERVAL == 0
        and state.last_freeze_earned_date != today
        and state.freeze_days_available < MAX_FREEZE_DAYS
    ):
        earned = replace(
            state,
            freeze_days_available=state.freeze_days_available + 1,
            last_freeze_earned_date=today,
        )
        logger.info("Freeze earned at %d-day streak on %s", state.current_streak, today)
        return earned, True
    return state, False


def advance_with_details(today: ActivityDay, state: StreakState) -> StreakTransition:
    """advance() plus flags describing which branch of the table fired."""
    last = state.last_activity_date

    if last is not None and today.day < last:
        logger.info(
            "Stale streak recompute for %s ignored (last activity %s)", today.day, last
        )
        return StreakTransition(state=state, stale=True)

    if not today.is_active or last == today.day:
        return StreakTransition(state=state)

    broken = False
    protected = False
    if last is None:
        current = 1
    else:
        gap = (today.day - last).days
        missed = gap - GRACE_DAYS
        if missed <= 0:
            current = state.current_streak + 1
        elif missed <= state.protected_gap_days:
            current = state.current_streak + 1
            protected = True
        else:
            current = 1
            broken = state.current_streak > 0

    new_state = replace(
        state,
        current_streak=current,
        longest_streak=max(state.longest_streak, current),
        last_activity_date=today.day,
        protected_gap_days=0,
    )
    new_state, earned = _maybe_earn_freeze(new_state, today.day)

    if broken:
        logger.info("Streak of %d broken on %s", state.current_streak, today.day)

    return StreakTransition(
        state=new_state,
        extended=not broken,
        broken=broken,
        freeze_protected=protected,
        freeze_earned=earned,
    )


def advance(today: ActivityDay, state: StreakState) -> StreakState:
    """Apply one day of activity to the streak state."""
    return advance_with_details(today, state).state


def use_freeze(state: StreakState) -> StreakState:
    """
    Consume one freeze to cover one missed day of the current gap.
    Raises NoFreezeAvailableError when the balance is zero.
    """
    if state.freeze_days_available <= 0:
        raise NoFreezeAvailableError()
    logger.info(
        "Freeze used to protect %d-day streak (%d left)",
        state.current_streak, state.freeze_days_available - 1,
    )
    return replace(
        state,
        freeze_days_available=state.freeze_days_available - 1,
        freeze_days_used_total=state.freeze_days_used_total + 1,
        protected_gap_days=state.protected_gap_days + 1,
    )


# ---------------------------------------------------------------------------
# Read-only telemetry
# ---------------------------------------------------------------------------

def streak_deadline(state: StreakState) -> Optional[datetime]:
    """Naive local datetime at which the streak breaks without new activity."""
    if state.last_activity_date is None:
        return None
    covered = GRACE_DAYS + state.protected_gap_days
    return datetime.combine(state.last_activity_date + timedelta(days=covered + 1), time.min)


def hours_until_break(state: StreakState, now: datetime) -> int:
    """
    Whole hours left before the streak breaks, clamped at 0.
    `now` is the user's local wall-clock time (naive).
    """
    deadline = streak_deadline(state)
    if deadline is None:
        return 0
    remaining = (deadline - now.replace(tzinfo=None)).total_seconds() / 3600
    return max(0, math.floor(remaining))


def is_at_risk(state: StreakState, today: date) -> bool:
    """True when the streak is alive but needs activity today to survive."""
    if state.current_streak == 0 or state.last_activity_date is None:
        return False
    return (today - state.last_activity_date).days == GRACE_DAYS + state.protected_gap_days


def freeze_status(state: StreakState, today: date) -> FreezeStatus:
    current = state.current_streak
    return FreezeStatus(
        freezes_available=state.freeze_days_available,
        max_freezes=MAX_FREEZE_DAYS,
        freezes_used_total=state.freeze_days_used_total,
        days_until_next_freeze=FREEZE_EARN_INTERVAL - (current % FREEZE_EARN_INTERVAL),
        will_earn_freeze_today=(
            current > 0
            and current % FREEZE_EARN_INTERVAL == 0
            and state.last_freeze_earned_date != today
            and state.freeze_days_available < MAX_FREEZE_DAYS
        ),
        last_earned=state.last_freeze_earned_date,
    )


def effective_streak(state: StreakState, today: date) -> int:
    """Current streak as seen on `today`: 0 once the grace and freeze cover has lapsed."""
    if state.last_activity_date is None:
        return 0
    gap = (today - state.last_activity_date).days
    if gap - GRACE_DAYS > state.protected_gap_days:
        return 0
    return state.current_streak
