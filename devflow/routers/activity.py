"""
Activity router.

PUT /users/{id}/activity   — batch upsert of daily activity
GET /users/{id}/activity   — window of days plus an activity summary
GET /users/{id}/bests      — personal bests over the last 30 days
"""
from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from devflow.db.base import get_db
from devflow.models.activity import DailyActivity
from devflow.schemas.activity import (
    ActivityDayResponse,
    ActivityListResponse,
    ActivityOverviewResponse,
    ActivitySummaryResponse,
    ActivityUpsertRequest,
    LanguageCount,
    PersonalBestsResponse,
)
from devflow.schemas.common import ErrorResponse
from devflow.services.activity import load_window, upsert_activity
from devflow.services.activity_window import ActivityDay, BESTS_WINDOW_DAYS, SCORE_WINDOW_DAYS
from devflow.services.evaluation import get_scores
from devflow.services.insights import personal_bests, summarize_activity
from devflow.services.users import get_user, streak_state_of

router = APIRouter(prefix="/users", tags=["activity"])


def _today() -> date:
    return datetime.now(tz=timezone.utc).date()


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def _row_to_response(row: DailyActivity) -> ActivityDayResponse:
    return _day_to_response(ActivityDay.from_record(row))


def _day_to_response(d: ActivityDay) -> ActivityDayResponse:
    return ActivityDayResponse(
        day=str(d.day),
        commits=d.commits,
        prs_opened=d.prs_opened,
        prs_merged=d.prs_merged,
        issues_closed=d.issues_closed,
        lines_added=d.lines_added,
        lines_deleted=d.lines_deleted,
        coding_minutes=d.coding_minutes,
        commits_by_hour=dict(d.commits_by_hour),
        is_weekend=bool(d.is_weekend),
        languages=dict(d.languages),
    )


# ---------------------------------------------------------------------------
# PUT /users/{id}/activity
# ---------------------------------------------------------------------------

@router.put(
    "/{user_id}/activity",
    response_model=ActivityListResponse,
    summary="Upsert daily activity",
    responses={
        404: {"model": ErrorResponse, "description": "Unknown user."},
        422: {"model": ErrorResponse, "description": "Negative counts, bad hours or duplicate days."},
    },
)
def put_activity(user_id: int, payload: ActivityUpsertRequest, db: Session = Depends(get_db)):
    """
    Store already-fetched activity, one row per (user, day). Sending the same
    day again overwrites it. Nothing is recomputed until the next evaluation.
    """
    rows = upsert_activity(db, user_id, (d.model_dump() for d in payload.days))
    return ActivityListResponse(total=len(rows), items=[_row_to_response(r) for r in rows])


# ---------------------------------------------------------------------------
# GET /users/{id}/activity
# ---------------------------------------------------------------------------

@router.get(
    "/{user_id}/activity",
    response_model=ActivityOverviewResponse,
    summary="Activity window and summary",
    responses={404: {"model": ErrorResponse, "description": "Unknown user."}},
)
def get_activity(
    user_id: int,
    end: Optional[date] = Query(default=None, description="Last day of the window. Defaults to today (UTC)."),
    days: int = Query(default=SCORE_WINDOW_DAYS, ge=1, le=366, description="Window size."),
    db: Session = Depends(get_db),
):
    """Every day of the window (gaps filled with zeros) plus totals and score trend."""
    get_user(db, user_id)
    target = end or _today()
    window = load_window(db, user_id, target, days)
    scores = [
        row.final_score
        for row in get_scores(db, user_id, target - timedelta(days=days - 1), target)
    ]
    summary = summarize_activity(window, scores)
    return ActivityOverviewResponse(
        days=[_day_to_response(d) for d in window.days],
        summary=ActivitySummaryResponse(
            start=str(summary.start),
            end=str(summary.end),
            total_commits=summary.total_commits,
            total_prs=summary.total_prs,
            total_issues=summary.total_issues,
            total_lines_added=summary.total_lines_added,
            total_lines_deleted=summary.total_lines_deleted,
            active_days=summary.active_days,
            top_languages=[LanguageCount(language=lang, commits=n) for lang, n in summary.top_languages],
            most_productive_hour=summary.most_productive_hour,
            weekday_commits=summary.weekday_commits,
            weekend_commits=summary.weekend_commits,
            average_score=summary.average_score,
            trend=summary.trend,
        ),
    )


# ---------------------------------------------------------------------------
# GET /users/{id}/bests
# ---------------------------------------------------------------------------

@router.get(
    "/{user_id}/bests",
    response_model=PersonalBestsResponse,
    summary="Personal bests over the last 30 days",
    responses={404: {"model": ErrorResponse, "description": "Unknown user."}},
)
def get_bests(
    user_id: int,
    end: Optional[date] = Query(default=None, description="Last day of the window. Defaults to today (UTC)."),
    db: Session = Depends(get_db),
):
    user = get_user(db, user_id)
    window = load_window(db, user_id, end or _today(), BESTS_WINDOW_DAYS)
    bests = personal_bests(window, streak_state_of(user))
    return PersonalBestsResponse(
        longest_streak=bests.longest_streak,
        current_streak=bests.current_streak,
        most_commits_in_day=bests.most_commits_in_day,
        most_commits_in_week=bests.most_commits_in_week,
        total_commits=bests.total_commits,
        total_prs=bests.total_prs,
        first_active_date=str(bests.first_active_date) if bests.first_active_date else None,
        active_months=bests.active_months,
        window_days=window.size,
    )
