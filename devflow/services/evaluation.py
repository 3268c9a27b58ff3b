"""
Evaluation pipeline — one user, one day.

Order (fixed)
-------------
  1. streak   advance StreakState with today's ActivityDay
  2. score    14-day window -> ScoreSnapshot, upsert dev_flow_scores
  3. xp       pay only what the last evaluation of this day has not paid
  4. verdict  classify today, upsert daily_verdicts

Everything is written in one transaction. The user row carries an
optimistic version counter; if another request updated it in between, the
commit fails, the session is rolled back and the whole pipeline is re-run
(up to settings.EVALUATION_MAX_RETRIES times) before surfacing a 409.

Idempotency
-----------
Re-evaluating the same day with the same activity changes nothing:
  - advance() is a no-op when last_activity_date == day
  - score and verdict rows are upserts on (user_id, day)
  - XP deltas come from users.xp_synced_* so commits and PRs are paid once,
    the streak bonus once per active day, the perfect week once per run of
    7/7 weeks

Public API
----------
evaluate_day(db, user_id, day)   -> EvaluationResult
get_score(db, user_id, day)      -> DevFlowScore   (SnapshotNotFoundError)
get_verdict(db, user_id, day)    -> DailyVerdict   (SnapshotNotFoundError)
get_scores(db, user_id, start, end) -> list[DevFlowScore]
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from devflow.core.config import settings
from devflow.core.errors import ConcurrentMutationConflictError, SnapshotNotFoundError
from devflow.models.dev_flow_score import DevFlowScore
from devflow.models.freeze_event import FreezeEventType
from devflow.models.user import User
from devflow.models.verdict import DailyVerdict
from devflow.services.activity import load_window
from devflow.services.activity_window import ActivityWindow, SCORE_WINDOW_DAYS, WEEK_WINDOW_DAYS
from devflow.services.score_calculator import ScoreSnapshot, calculate_score
from devflow.services.streak_tracker import StreakTransition, advance_with_details, effective_streak
from devflow.services.streaks import record_freeze_event
from devflow.services.users import apply_streak_state, commit_user_mutation, get_user, streak_state_of
from devflow.services.verdict_selector import Verdict, VerdictInput, select_verdict
from devflow.services.xp import persist_ledger
from devflow.services.xp_ledger import AppliedXp, XpLedger, calculate_sync_xp

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------

@dataclass
class EvaluationResult:
    user_id: int
    day: date
    streak: StreakTransition
    score: ScoreSnapshot
    xp_awarded: list[AppliedXp]
    total_xp: int
    xp_skipped: bool            # day is older than the last XP sync
    verdict: Verdict
    attempts: int = 1


def _today() -> date:
    return datetime.now(tz=timezone.utc).date()


# ---------------------------------------------------------------------------
# Step 1 — streak
# ---------------------------------------------------------------------------

def _step_streak(db: Session, user: User, window: ActivityWindow) -> StreakTransition:
    transition = advance_with_details(window.today, streak_state_of(user))
    apply_streak_state(user, transition.state)
    if transition.freeze_earned:
        record_freeze_event(
            db, user.id, FreezeEventType.EARNED, transition.state.current_streak,
            notes=f"Reached a {transition.state.current_streak}-day streak on {window.end}",
        )
    return transition


# ---------------------------------------------------------------------------
# Step 2 — score
# ---------------------------------------------------------------------------

def _step_score(db: Session, user: User, window: ActivityWindow) -> ScoreSnapshot:
    day = window.end
    previous = (
        db.query(DevFlowScore.final_score)
        .filter(DevFlowScore.user_id == user.id, DevFlowScore.day == day - timedelta(days=1))
        .scalar()
    )
    peers = [
        score for (score,) in
        db.query(User.current_score)
        .filter(User.id != user.id, User.current_score.isnot(None))
        .all()
    ]
    snapshot = calculate_score(window, previous_score=previous, peer_scores=peers)
    _upsert_score(db, user.id, snapshot)

    newer_exists = (
        db.query(DevFlowScore.id)
        .filter(DevFlowScore.user_id == user.id, DevFlowScore.day > day)
        .first()
        is not None
    )
    if not newer_exists and user.current_score != snapshot.final_score:
        user.current_score = snapshot.final_score
    return snapshot


def _upsert_score(db: Session, user_id: int, snap: ScoreSnapshot) -> None:
    row = (
        db.query(DevFlowScore)
        .filter(DevFlowScore.user_id == user_id, DevFlowScore.day == snap.day)
        .first()
    )
    if row is None:
        row = DevFlowScore(user_id=user_id, day=snap.day)
        db.add(row)
    row.building_ratio = snap.components.building_ratio
    row.consistency = snap.components.consistency
    row.shipping_frequency = snap.components.shipping_frequency
    row.focus_depth = snap.components.focus_depth
    row.recovery_balance = snap.components.recovery_balance
    row.raw_weighted_total = snap.raw_weighted_total
    row.gaming_detected = snap.gaming.detected
    row.gaming_penalty = snap.gaming.penalty
    row.gaming_reason = snap.gaming.reason
    row.final_score = snap.final_score
    row.change_from_yesterday = snap.change_from_yesterday
    row.percentile = snap.percentile
    row.global_average = snap.global_average
    row.computed_at = datetime.now(tz=timezone.utc)


# ---------------------------------------------------------------------------
# Step 3 — xp
# ---------------------------------------------------------------------------

def _step_xp(
    db: Session,
    user: User,
    week: ActivityWindow,
    streak: StreakTransition,
) -> tuple[list[AppliedXp], bool]:
    day = week.end
    today = week.today

    if user.xp_synced_date is not None and day < user.xp_synced_date:
        logger.info("XP for user %d on %s skipped: already synced %s", user.id, day, user.xp_synced_date)
        return [], True

    same_day = user.xp_synced_date == day
    paid_commits = user.xp_synced_commits if same_day else 0
    paid_prs = user.xp_synced_prs_merged if same_day else 0
    first_active_sync = today.is_active and paid_commits == 0

    sync = calculate_sync_xp(
        new_commits_today=max(0, today.commits - paid_commits),
        current_streak=streak.state.current_streak if first_active_sync else 0,
        new_prs_merged=max(0, today.prs_merged - paid_prs),
        days_active_this_week=week.active_days,
        previous_days_active_this_week=user.xp_synced_active_days,
    )

    ledger = XpLedger(user.total_xp)
    applied = ledger.apply(sync, metadata={"day": str(day)})
    persist_ledger(db, user, ledger)

    user.xp_synced_date = day
    user.xp_synced_commits = max(paid_commits, today.commits)
    user.xp_synced_prs_merged = max(paid_prs, today.prs_merged)
    user.xp_synced_active_days = week.active_days
    return applied, False


# ---------------------------------------------------------------------------
# Step 4 — verdict
# ---------------------------------------------------------------------------

def _step_verdict(
    db: Session,
    user: User,
    week: ActivityWindow,
    previous_streak: int,
    score: ScoreSnapshot,
) -> Verdict:
    today = week.today
    inputs = VerdictInput(
        current_streak=effective_streak(streak_state_of(user), week.end),
        previous_streak=previous_streak,
        today_commits=today.commits,
        today_prs=today.prs_opened + today.prs_merged,
        week_commits=week.total_commits,
        active_days_in_week=week.active_days,
        is_weekend=bool(today.is_weekend),
        has_history=week.has_history,
    )
    verdict = select_verdict(week.end, inputs)

    row = (
        db.query(DailyVerdict)
        .filter(DailyVerdict.user_id == user.id, DailyVerdict.day == week.end)
        .first()
    )
    if row is None:
        row = DailyVerdict(user_id=user.id, day=week.end)
        db.add(row)
    row.verdict_key = verdict.verdict_key
    row.verdict_text = verdict.text
    row.verdict_subtext = verdict.subtext
    row.severity = verdict.severity
    row.primary_factor = verdict.primary_factor
    row.score_change = verdict.score_change
    row.dev_flow_score = score.final_score
    row.computed_at = datetime.now(tz=timezone.utc)
    return verdict


# ---------------------------------------------------------------------------
# Public — main entry point
# ---------------------------------------------------------------------------

def _evaluate_once(db: Session, user_id: int, day: date) -> EvaluationResult:
    user = get_user(db, user_id)
    window = load_window(db, user_id, day, SCORE_WINDOW_DAYS)
    week = load_window(db, user_id, day, WEEK_WINDOW_DAYS)
    # streak as seen the day before, so a lapse is reported once
    previous_streak = effective_streak(streak_state_of(user), day - timedelta(days=1))

    streak = _step_streak(db, user, window)
    score = _step_score(db, user, window)
    xp_awarded, xp_skipped = _step_xp(db, user, week, streak)
    verdict = _step_verdict(db, user, week, previous_streak, score)

    total_xp = user.total_xp
    commit_user_mutation(db, user_id)

    logger.info(
        "Evaluated user %d on %s: streak=%d score=%d xp=+%d verdict=%s",
        user_id, day, streak.state.current_streak, score.final_score,
        sum(a.entry.amount for a in xp_awarded), verdict.verdict_key,
    )
    return EvaluationResult(
        user_id=user_id,
        day=day,
        streak=streak,
        score=score,
        xp_awarded=xp_awarded,
        total_xp=total_xp,
        xp_skipped=xp_skipped,
        verdict=verdict,
    )


def evaluate_day(
    db: Session,
    user_id: int,
    day: Optional[date] = None,
    max_retries: Optional[int] = None,
) -> EvaluationResult:
    """
    Run streak -> score -> xp -> verdict for one user and day (default today, UTC).
    Re-runs the whole pipeline after a concurrent update of the user row.
    """
    target = day or _today()
    retries = settings.EVALUATION_MAX_RETRIES if max_retries is None else max_retries

    attempt = 0
    while True:
        attempt += 1
        try:
            result = _evaluate_once(db, user_id, target)
        except ConcurrentMutationConflictError:
            if attempt > retries:
                raise
            logger.warning(
                "Retrying evaluation of user %d on %s after conflict (attempt %d)",
                user_id, target, attempt + 1,
            )
            continue
        result.attempts = attempt
        return result


# ---------------------------------------------------------------------------
# Public — query helpers
# ---------------------------------------------------------------------------

def get_score(db: Session, user_id: int, day: Optional[date] = None) -> DevFlowScore:
    target = day or _today()
    get_user(db, user_id)
    row = (
        db.query(DevFlowScore)
        .filter(DevFlowScore.user_id == user_id, DevFlowScore.day == target)
        .first()
    )
    if row is None:
        raise SnapshotNotFoundError("score", user_id, target)
    return row


def get_scores(db: Session, user_id: int, start: date, end: date) -> list[DevFlowScore]:
    """Stored scores in [start, end], oldest first."""
    return (
        db.query(DevFlowScore)
        .filter(
            DevFlowScore.user_id == user_id,
            DevFlowScore.day >= start,
            DevFlowScore.day <= end,
        )
        .order_by(DevFlowScore.day.asc())
        .all()
    )


def get_verdict(db: Session, user_id: int, day: Optional[date] = None) -> DailyVerdict:
    target = day or _today()
    get_user(db, user_id)
    row = (
        db.query(DailyVerdict)
        .filter(DailyVerdict.user_id == user_id, DailyVerdict.day == target)
        .first()
    )
    if row is None:
        raise SnapshotNotFoundError("verdict", user_id, target)
    return row
