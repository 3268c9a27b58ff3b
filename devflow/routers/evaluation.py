"""
Evaluation router.

POST /users/{id}/evaluate   — run streak → score → xp → verdict for a day
GET  /users/{id}/score      — stored DevFlow Score for a day
GET  /users/{id}/verdict    — stored verdict for a day
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from devflow.db.base import get_db
from devflow.models.dev_flow_score import DevFlowScore
from devflow.models.verdict import DailyVerdict
from devflow.routers.xp import level_to_response
from devflow.schemas.common import ErrorResponse
from devflow.schemas.evaluation import (
    EvaluateRequest,
    EvaluationResponse,
    StreakOutcome,
    XpAwardLine,
    XpOutcome,
)
from devflow.schemas.score import GamingResponse, ScoreComponentsResponse, ScoreResponse
from devflow.schemas.verdict import VerdictResponse
from devflow.services.evaluation import EvaluationResult, evaluate_day, get_score, get_verdict
from devflow.services.score_calculator import ScoreSnapshot
from devflow.services.verdict_selector import Verdict
from devflow.services.xp_ledger import level_info

router = APIRouter(prefix="/users", tags=["evaluation"])


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def _snapshot_to_response(s: ScoreSnapshot) -> ScoreResponse:
    return ScoreResponse(
        day=str(s.day),
        components=ScoreComponentsResponse(
            building_ratio=s.components.building_ratio,
            consistency=s.components.consistency,
            shipping_frequency=s.components.shipping_frequency,
            focus_depth=s.components.focus_depth,
            recovery_balance=s.components.recovery_balance,
        ),
        raw_weighted_total=s.raw_weighted_total,
        gaming=GamingResponse(
            detected=s.gaming.detected,
            penalty=s.gaming.penalty,
            reason=s.gaming.reason,
        ),
        final_score=s.final_score,
        change_from_yesterday=s.change_from_yesterday,
        percentile=s.percentile,
        global_average=s.global_average,
    )


def _score_row_to_response(row: DevFlowScore) -> ScoreResponse:
    return ScoreResponse(
        day=str(row.day),
        components=ScoreComponentsResponse(
            building_ratio=row.building_ratio,
            consistency=row.consistency,
            shipping_frequency=row.shipping_frequency,
            focus_depth=row.focus_depth,
            recovery_balance=row.recovery_balance,
        ),
        raw_weighted_total=row.raw_weighted_total,
        gaming=GamingResponse(
            detected=row.gaming_detected,
            penalty=row.gaming_penalty,
            reason=row.gaming_reason,
        ),
        final_score=row.final_score,
        change_from_yesterday=row.change_from_yesterday,
        percentile=row.percentile,
        global_average=row.global_average,
    )


def _verdict_to_response(v: Verdict, score: Optional[int]) -> VerdictResponse:
    return VerdictResponse(
        day=str(v.day),
        verdict_key=v.verdict_key,
        text=v.text,
        subtext=v.subtext,
        severity=v.severity,
        primary_factor=v.primary_factor,
        score_change=v.score_change,
        dev_flow_score=score,
    )


def _verdict_row_to_response(row: DailyVerdict) -> VerdictResponse:
    return VerdictResponse(
        day=str(row.day),
        verdict_key=row.verdict_key,
        text=row.verdict_text,
        subtext=row.verdict_subtext,
        severity=row.severity,
        primary_factor=row.primary_factor,
        score_change=row.score_change,
        dev_flow_score=row.dev_flow_score,
    )


def _result_to_response(r: EvaluationResult) -> EvaluationResponse:
    state = r.streak.state
    return EvaluationResponse(
        user_id=r.user_id,
        day=str(r.day),
        streak=StreakOutcome(
            current_streak=state.current_streak,
            longest_streak=state.longest_streak,
            freeze_days_available=state.freeze_days_available,
            extended=r.streak.extended,
            broken=r.streak.broken,
            freeze_protected=r.streak.freeze_protected,
            freeze_earned=r.streak.freeze_earned,
            stale=r.streak.stale,
        ),
        score=_snapshot_to_response(r.score),
        xp=XpOutcome(
            awarded=[
                XpAwardLine(
                    source=a.entry.source.value,
                    amount=a.entry.amount,
                    description=a.entry.description,
                )
                for a in r.xp_awarded
            ],
            total_awarded=sum(a.entry.amount for a in r.xp_awarded),
            total_xp=r.total_xp,
            skipped=r.xp_skipped,
            leveled_up=any(a.leveled_up for a in r.xp_awarded),
            level=level_to_response(level_info(r.total_xp)),
        ),
        verdict=_verdict_to_response(r.verdict, r.score.final_score),
        attempts=r.attempts,
    )


# ---------------------------------------------------------------------------
# POST /users/{id}/evaluate
# ---------------------------------------------------------------------------

@router.post(
    "/{user_id}/evaluate",
    response_model=EvaluationResponse,
    summary="Evaluate a day",
    responses={
        404: {"model": ErrorResponse, "description": "Unknown user."},
        409: {"model": ErrorResponse, "description": "Concurrent update persisted after retry."},
    },
)
def evaluate(
    user_id: int,
    payload: Optional[EvaluateRequest] = None,
    db: Session = Depends(get_db),
):
    """
    Run the pipeline for one day in fixed order: **streak → score → XP → verdict**.

    ### Idempotency
    Evaluating the same day twice with unchanged activity returns the same
    score and verdict and pays no XP the second time. New commits or PRs
    added to the day since the last run are paid on re-evaluation.

    Evaluating a day older than the last active day does not touch the streak.
    """
    result = evaluate_day(db, user_id, payload.day if payload else None)
    return _result_to_response(result)


# ---------------------------------------------------------------------------
# GET /users/{id}/score
# ---------------------------------------------------------------------------

@router.get(
    "/{user_id}/score",
    response_model=ScoreResponse,
    summary="Stored DevFlow Score",
    responses={
        404: {"model": ErrorResponse, "description": "Unknown user, or no score computed for that day."},
    },
)
def read_score(
    user_id: int,
    day: Optional[date] = Query(default=None, description="Defaults to today (UTC).", examples=["2026-03-02"]),
    db: Session = Depends(get_db),
):
    return _score_row_to_response(get_score(db, user_id, day))


# ---------------------------------------------------------------------------
# GET /users/{id}/verdict
# ---------------------------------------------------------------------------

@router.get(
    "/{user_id}/verdict",
    response_model=VerdictResponse,
    summary="Stored daily verdict",
    responses={
        404: {"model": ErrorResponse, "description": "Unknown user, or no verdict computed for that day."},
    },
)
def read_verdict(
    user_id: int,
    day: Optional[date] = Query(default=None, description="Defaults to today (UTC).", examples=["2026-03-02"]),
    db: Session = Depends(get_db),
):
    return _verdict_row_to_response(get_verdict(db, user_id, day))
