"""
XP router.

GET  /users/{id}/xp   — level, next milestone and recent ledger entries
POST /users/{id}/xp   — award XP for a discrete event
"""
from __future__ import annotations

import json
from typing import Any, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from devflow.db.base import get_db
from devflow.models.xp_transaction import XpTransaction
from devflow.schemas.common import ErrorResponse
from devflow.schemas.xp import (
    LevelInfoResponse,
    MilestoneResponse,
    XpAwardRequest,
    XpAwardResponse,
    XpOverviewResponse,
    XpTransactionResponse,
)
from devflow.services.users import get_user
from devflow.services.xp import award_xp, get_transactions
from devflow.services.xp_ledger import LevelInfo, format_xp, level_info, next_milestone

router = APIRouter(prefix="/users", tags=["xp"])


# ---------------------------------------------------------------------------
# Serialization helpers
# ---------------------------------------------------------------------------

def level_to_response(info: LevelInfo) -> LevelInfoResponse:
    return LevelInfoResponse(
        level=info.level,
        title=info.title,
        color=info.color,
        xp=info.xp,
        xp_for_current_level=info.xp_for_current_level,
        xp_for_next_level=info.xp_for_next_level,
        progress_pct=info.progress_pct,
    )


def _parse_metadata(raw: Optional[str]) -> Optional[dict[str, Any]]:
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (ValueError, TypeError):
        return None


def _tx_to_response(tx: XpTransaction) -> XpTransactionResponse:
    return XpTransactionResponse(
        id=tx.id,
        source=tx.source,
        amount=tx.amount,
        description=tx.description,
        metadata=_parse_metadata(tx.xp_metadata),
        created_at=tx.created_at.isoformat() if tx.created_at else "",
    )


# ---------------------------------------------------------------------------
# GET /users/{id}/xp
# ---------------------------------------------------------------------------

@router.get(
    "/{user_id}/xp",
    response_model=XpOverviewResponse,
    summary="XP, level and recent ledger entries",
    responses={404: {"model": ErrorResponse, "description": "Unknown user."}},
)
def get_xp(
    user_id: int,
    limit: int = Query(default=20, ge=1, le=200, description="Page size."),
    offset: int = Query(default=0, ge=0, description="Skip N items."),
    db: Session = Depends(get_db),
):
    user = get_user(db, user_id)
    total, items = get_transactions(db, user_id, limit=limit, offset=offset)
    milestone = next_milestone(user.total_xp)
    return XpOverviewResponse(
        total_xp=user.total_xp,
        total_xp_display=format_xp(user.total_xp),
        level=level_to_response(level_info(user.total_xp)),
        next_milestone=MilestoneResponse(
            level=milestone.level,
            title=milestone.title,
            xp_required=milestone.xp_required,
            xp_remaining=milestone.xp_remaining,
        ) if milestone else None,
        total_transactions=total,
        recent=[_tx_to_response(tx) for tx in items],
    )


# ---------------------------------------------------------------------------
# POST /users/{id}/xp
# ---------------------------------------------------------------------------

@router.post(
    "/{user_id}/xp",
    response_model=XpAwardResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Award XP",
    responses={
        404: {"model": ErrorResponse, "description": "Unknown user."},
        409: {"model": ErrorResponse, "description": "Concurrent update of the same user."},
        422: {"model": ErrorResponse, "description": "Amount is not a positive integer."},
    },
)
def post_xp(user_id: int, payload: XpAwardRequest, db: Session = Depends(get_db)):
    """
    Append one ledger entry. The total never decreases: a zero or negative
    amount is rejected with `INVALID_AMOUNT` and nothing is written.
    """
    applied = award_xp(
        db,
        user_id,
        source=payload.source,
        amount=payload.amount,
        description=payload.description,
        metadata=payload.metadata,
    )
    return XpAwardResponse(
        source=applied.entry.source.value,
        amount=applied.entry.amount,
        description=applied.entry.description,
        total_xp=applied.total_xp,
        old_level=applied.old_level,
        new_level=applied.new_level,
        leveled_up=applied.leveled_up,
        level=level_to_response(level_info(applied.total_xp)),
    )
