"""
XP persistence — writes XpLedger entries as xp_transactions rows.

users.total_xp and the transaction rows change in the same commit, so the
running total always equals the sum of the ledger.
"""
from __future__ import annotations

import json
from typing import Any, Optional

from sqlalchemy.orm import Session

from devflow.models.user import User
from devflow.models.xp_transaction import XpTransaction
from devflow.services.users import commit_user_mutation, get_user
from devflow.services.xp_ledger import AppliedXp, XpLedger, XpSource


def persist_ledger(db: Session, user: User, ledger: XpLedger) -> None:
    """Add the ledger's pending entries and the new total to the session (no commit)."""
    for entry in ledger.pending:
        db.add(XpTransaction(
            user_id=user.id,
            source=entry.source.value,
            amount=entry.amount,
            description=entry.description,
            xp_metadata=json.dumps(entry.metadata, default=str) if entry.metadata else None,
            created_at=entry.timestamp,
        ))
    ledger.pending.clear()
    if user.total_xp != ledger.total_xp:
        user.total_xp = ledger.total_xp


def award_xp(
    db: Session,
    user_id: int,
    source: XpSource,
    amount: int,
    description: str = "",
    metadata: Optional[dict[str, Any]] = None,
) -> AppliedXp:
    """Award XP for a discrete event. InvalidAmountError leaves total_xp untouched."""
    user = get_user(db, user_id)
    ledger = XpLedger(user.total_xp)
    applied = ledger.award(source, amount, metadata=metadata, description=description)
    persist_ledger(db, user, ledger)
    commit_user_mutation(db, user_id)
    return applied


def get_transactions(
    db: Session,
    user_id: int,
    limit: int = 20,
    offset: int = 0,
) -> tuple[int, list[XpTransaction]]:
    """Return (total, page) of a user's ledger, newest first."""
    q = db.query(XpTransaction).filter(XpTransaction.user_id == user_id)
    total = q.count()
    items = (
        q.order_by(XpTransaction.created_at.desc(), XpTransaction.id.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return total, items
