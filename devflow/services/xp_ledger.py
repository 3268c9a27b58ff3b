"""
XP ledger and level curve.

XP sources and amounts
----------------------
  DAILY_COMMIT           10 per commit today (capped at 10 commits)
  STREAK_BONUS            5 × current streak length
  PR_MERGED              50 per merged PR
  WEEK_SHIPPED          200 once, when the week reaches 7/7 active days
  CHALLENGE_WON         100
  ACHIEVEMENT_UNLOCKED   25

Levels
------
  Level   1 Newcomer          0 XP
  Level   5 Contributor     500 XP
  Level  10 Shipper       2,000 XP
  Level  20 Builder      10,000 XP
  Level  30 Architect    25,000 XP
  Level  50 Legend      100,000 XP
  Level 100 Immortal    500,000 XP

The ledger is append-only and total_xp is its running sum; nothing ever
decrements it. LevelInfo is derived from total_xp on read and never stored.
"""
from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from devflow.core.errors import InvalidAmountError
from devflow.services.score_calculator import round_half_up

logger = logging.getLogger(__name__)


class XpSource(str, enum.Enum):
    DAILY_COMMIT = "daily_commit"
    STREAK_BONUS = "streak_bonus"
    PR_MERGED = "pr_merged"
    WEEK_SHIPPED = "week_shipped"
    CHALLENGE_WON = "challenge_won"
    ACHIEVEMENT_UNLOCKED = "achievement_unlocked"


XP_REWARDS = {
    XpSource.DAILY_COMMIT: 10,
    XpSource.STREAK_BONUS: 5,      # per day of current streak
    XpSource.PR_MERGED: 50,
    XpSource.WEEK_SHIPPED: 200,
    XpSource.CHALLENGE_WON: 100,
    XpSource.ACHIEVEMENT_UNLOCKED: 25,
}

DAILY_COMMIT_CAP = 10
PERFECT_WEEK_DAYS = 7


@dataclass(frozen=True)
class Level:
    level: int
    title: str
    xp_required: int
    color: str


# Ascending by xp_required.
LEVELS: tuple[Level, ...] = (
    Level(1, "Newcomer", 0, "#71717a"),
    Level(5, "Contributor", 500, "#3b82f6"),
    Level(10, "Shipper", 2000, "#10b981"),
    Level(20, "Builder", 10000, "#8b5cf6"),
    Level(30, "Architect", 25000, "#f59e0b"),
    Level(50, "Legend", 100000, "#ef4444"),
    Level(100, "Immortal", 500000, "#ec4899"),
)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LevelInfo:
    level: int
    title: str
    color: str
    xp: int
    xp_for_current_level: int
    xp_for_next_level: int
    progress_pct: int


@dataclass(frozen=True)
class Milestone:
    level: int
    title: str
    xp_required: int
    xp_remaining: int


@dataclass(frozen=True)
class XpLedgerEntry:
    source: XpSource
    amount: int
    timestamp: datetime
    description: str = ""
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AppliedXp:
    entry: XpLedgerEntry
    total_xp: int
    old_level: int
    new_level: int
    leveled_up: bool


@dataclass(frozen=True)
class XpAward:
    """One line of a sync breakdown, not yet applied to any ledger."""
    source: XpSource
    amount: int
    description: str


@dataclass(frozen=True)
class SyncXp:
    total: int
    breakdown: list[XpAward]


# ---------------------------------------------------------------------------
# Level curve
# ---------------------------------------------------------------------------

def level_info(total_xp: int) -> LevelInfo:
    """Highest level whose threshold is <= total_xp, plus progress to the next."""
    index = 0
    for i in range(len(LEVELS) - 1, -1, -1):
        if total_xp >= LEVELS[i].xp_required:
            index = i
            break
    current = LEVELS[index]
    nxt = LEVELS[index + 1] if index + 1 < len(LEVELS) else current

    if nxt is current:
        progress = 100
    else:
        span = Decimal(nxt.xp_required - current.xp_required)
        progress = min(100, round_half_up(
            Decimal(total_xp - current.xp_required) / span * 100
        ))

    return LevelInfo(
        level=current.level,
        title=current.title,
        color=current.color,
        xp=total_xp,
        xp_for_current_level=current.xp_required,
        xp_for_next_level=nxt.xp_required,
        progress_pct=progress,
    )


def next_milestone(total_xp: int) -> Optional[Milestone]:
    for lvl in LEVELS:
        if total_xp < lvl.xp_required:
            return Milestone(
                level=lvl.level,
                title=lvl.title,
                xp_required=lvl.xp_required,
                xp_remaining=lvl.xp_required - total_xp,
            )
    return None


def format_xp(xp: int) -> str:
    """12500 -> "12.5K", 1200000 -> "1.2M"."""
    if xp >= 1_000_000:
        return f"{xp / 1_000_000:.1f}M"
    if xp >= 1_000:
        return f"{xp / 1_000:.1f}K"
    return str(xp)


# ---------------------------------------------------------------------------
# Ledger
# ---------------------------------------------------------------------------

class XpLedger:
    """
    In-memory view of one user's ledger.

    The persistence layer seeds it with the stored total, calls award(),
    then writes `pending` entries and `total_xp` back.
    """

    def __init__(self, total_xp: int = 0):
        self.total_xp = total_xp
        self.pending: list[XpLedgerEntry] = []

    @property
    def level(self) -> LevelInfo:
        return level_info(self.total_xp)

    def award(
        self,
        source: XpSource,
        amount: int,
        metadata: Optional[dict[str, Any]] = None,
        description: str = "",
        timestamp: Optional[datetime] = None,
    ) -> AppliedXp:
        if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
            raise InvalidAmountError(amount)

        old = level_info(self.total_xp)
        entry = XpLedgerEntry(
            source=XpSource(source),
            amount=amount,
            timestamp=timestamp or datetime.now(tz=timezone.utc),
            description=description or f"Earned {amount} XP",
            metadata=dict(metadata or {}),
        )
        self.pending.append(entry)
        self.total_xp += amount
        new = level_info(self.total_xp)

        leveled_up = new.level > old.level
        if leveled_up:
            logger.info("Level up: %d (%s) -> %d (%s)", old.level, old.title, new.level, new.title)

        return AppliedXp(
            entry=entry,
            total_xp=self.total_xp,
            old_level=old.level,
            new_level=new.level,
            leveled_up=leveled_up,
        )

    def apply(self, sync: SyncXp, metadata: Optional[dict[str, Any]] = None) -> list[AppliedXp]:
        """Award every line of a sync breakdown in order."""
        return [
            self.award(item.source, item.amount, metadata=metadata, description=item.description)
            for item in sync.breakdown
        ]


# ---------------------------------------------------------------------------
# Daily sync award
# ---------------------------------------------------------------------------

def _plural(n: int, word: str) -> str:
    return f"{n} {word}{'s' if n != 1 else ''}"


def calculate_sync_xp(
    new_commits_today: int,
    current_streak: int,
    new_prs_merged: int,
    days_active_this_week: int,
    previous_days_active_this_week: int,
) -> SyncXp:
    """
    XP earned by one sync. The perfect-week bonus is edge-triggered: it fires
    only when the week goes from <7 to 7 active days.
    """
    breakdown: list[XpAward] = []

    if new_commits_today > 0:
        breakdown.append(XpAward(
            source=XpSource.DAILY_COMMIT,
            amount=XP_REWARDS[XpSource.DAILY_COMMIT] * min(new_commits_today, DAILY_COMMIT_CAP),
            description=f"{_plural(new_commits_today, 'commit')} today",
        ))

    if current_streak > 0:
        breakdown.append(XpAward(
            source=XpSource.STREAK_BONUS,
            amount=XP_REWARDS[XpSource.STREAK_BONUS] * current_streak,
            description=f"{current_streak}-day streak bonus",
        ))

    if new_prs_merged > 0:
        breakdown.append(XpAward(
            source=XpSource.PR_MERGED,
            amount=XP_REWARDS[XpSource.PR_MERGED] * new_prs_merged,
            description=f"{_plural(new_prs_merged, 'PR')} merged",
        ))

    if (
        days_active_this_week == PERFECT_WEEK_DAYS
        and previous_days_active_this_week < PERFECT_WEEK_DAYS
    ):
        breakdown.append(XpAward(
            source=XpSource.WEEK_SHIPPED,
            amount=XP_REWARDS[XpSource.WEEK_SHIPPED],
            description="Perfect week! 7/7 days shipped",
        ))

    return SyncXp(total=sum(item.amount for item in breakdown), breakdown=breakdown)
