"""
Productivity score — DevFlow Score.

Definition
----------
A 0–100 composite computed from the trailing 14-day ActivityWindow
(today inclusive). Five components, each clamped to [0, 100]:

  component          weight  formula
  -----------------  ------  ------------------------------------------------
  building_ratio      0.30   min(100, prs_merged*20 + commits*2)
                             - 30 if hours > 50 and commits < 20
  consistency         0.25   round(active_days / 14 * 100 * 1.2)
  shipping_frequency  0.20   round((prs_merged / 2) / 3 * 100)   (3 PRs/week)
  focus_depth         0.15   round(hours_per_active_day / 3 * 100)
  recovery_balance    0.10   round((1 - |rest_days - 4| / 4) * 100)

raw_weighted_total = round(sum(weight * component)).

Anti-gaming (applied after weighting; penalties add, last reason wins):
  hours > 40 and commits < 10                        → −10
  any day with commits > 20 and peak hour > 15       → −5

final_score = clamp(raw_weighted_total − penalty, 0, 100).

Cross-user figures (percentile, global average) come from a caller-supplied
list of every *other* user's current score; the fresh final score is counted
as one more user. Nothing here queries a database.

All rounding is half-up (Decimal ROUND_HALF_UP), not Python's banker's
rounding.

Public API
----------
calculate_score(window, previous_score, peer_scores) -> ScoreSnapshot
compute_components(window)                           -> ScoreComponents
detect_gaming(window)                                -> GamingCheck
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Sequence

from devflow.services.activity_window import ActivityWindow, SCORE_WINDOW_DAYS

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

WEIGHTS = {
    "building_ratio": Decimal("0.30"),
    "consistency": Decimal("0.25"),
    "shipping_frequency": Decimal("0.20"),
    "focus_depth": Decimal("0.15"),
    "recovery_balance": Decimal("0.10"),
}

DEFAULT_PREVIOUS_SCORE = 50
NEUTRAL_SCORE = 50

# building_ratio
_PR_POINTS = 20
_COMMIT_POINTS = 2
_CONSUMING_HOURS = 50
_CONSUMING_MAX_COMMITS = 20
_CONSUMING_PENALTY = 30

_CONSISTENCY_BOOST = Decimal("1.2")
_TARGET_PRS_PER_WEEK = 3
_TARGET_FOCUS_HOURS = 3
_IDEAL_REST_DAYS = 4

# anti-gaming
_LONG_SESSION_HOURS = 40
_LONG_SESSION_MAX_COMMITS = 10
_LONG_SESSION_PENALTY = 10
_BURST_DAY_COMMITS = 20
_BURST_PEAK_HOUR_COMMITS = 15
_BURST_PENALTY = 5

REASON_LONG_SESSIONS = "Long sessions with minimal output detected"
REASON_COMMIT_BATCHING = "Commit batching detected"


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ScoreComponents:
    building_ratio: int
    consistency: int
    shipping_frequency: int
    focus_depth: int
    recovery_balance: int

    def weighted_total(self) -> int:
        total = sum(
            (Decimal(getattr(self, name)) * weight for name, weight in WEIGHTS.items()),
            Decimal("0"),
        )
        return round_half_up(total)


@dataclass(frozen=True)
class GamingCheck:
    detected: bool
    penalty: int
    reason: Optional[str]


@dataclass(frozen=True)
class ScoreSnapshot:
    day: date
    components: ScoreComponents
    raw_weighted_total: int
    gaming: GamingCheck
    final_score: int
    change_from_yesterday: int
    percentile: int
    global_average: int


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def round_half_up(value) -> int:
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def clamp(value: int, low: int = 0, high: int = 100) -> int:
    return max(low, min(high, value))


# ---------------------------------------------------------------------------
# Components
# ---------------------------------------------------------------------------

def compute_components(window: ActivityWindow) -> ScoreComponents:
    commits = window.total_commits
    prs_merged = window.total_prs_merged
    hours = Decimal(sum(d.coding_minutes for d in window.days)) / Decimal(60)
    active = window.active_days
    size = window.size

    shipping = min(100, prs_merged * _PR_POINTS + commits * _COMMIT_POINTS)
    consuming_penalty = (
        _CONSUMING_PENALTY
        if hours > _CONSUMING_HOURS and commits < _CONSUMING_MAX_COMMITS
        else 0
    )
    building_ratio = clamp(shipping - consuming_penalty)

    consistency = clamp(round_half_up(
        Decimal(active) / Decimal(size) * 100 * _CONSISTENCY_BOOST
    ))

    weekly_prs = Decimal(prs_merged) / Decimal(2)
    shipping_frequency = clamp(round_half_up(weekly_prs / _TARGET_PRS_PER_WEEK * 100))

    if active > 0:
        avg_hours = hours / Decimal(active)
        focus_depth = clamp(round_half_up(avg_hours / _TARGET_FOCUS_HOURS * 100))
    else:
        focus_depth = 0

    rest_days = size - active
    balance = 1 - Decimal(abs(rest_days - _IDEAL_REST_DAYS)) / Decimal(_IDEAL_REST_DAYS)
    recovery_balance = clamp(round_half_up(balance * 100))

    return ScoreComponents(
        building_ratio=building_ratio,
        consistency=consistency,
        shipping_frequency=shipping_frequency,
        focus_depth=focus_depth,
        recovery_balance=recovery_balance,
    )


# ---------------------------------------------------------------------------
# Anti-gaming
# ---------------------------------------------------------------------------

def detect_gaming(window: ActivityWindow) -> GamingCheck:
    detected = False
    penalty = 0
    reason: Optional[str] = None

    if (
        window.total_coding_hours > _LONG_SESSION_HOURS
        and window.total_commits < _LONG_SESSION_MAX_COMMITS
    ):
        detected = True
        penalty += _LONG_SESSION_PENALTY
        reason = REASON_LONG_SESSIONS

    batching = any(
        d.commits > _BURST_DAY_COMMITS and d.peak_hour_commits > _BURST_PEAK_HOUR_COMMITS
        for d in window.days
    )
    if batching:
        detected = True
        penalty += _BURST_PENALTY
        reason = REASON_COMMIT_BATCHING

    return GamingCheck(detected=detected, penalty=penalty, reason=reason)


# ---------------------------------------------------------------------------
# Cross-user comparison
# ---------------------------------------------------------------------------

def percentile_of(score: int, all_scores: Sequence[int]) -> int:
    if not all_scores:
        return NEUTRAL_SCORE
    below = sum(1 for s in all_scores if s < score)
    return clamp(round_half_up(Decimal(below) / Decimal(len(all_scores)) * 100))


def global_average(all_scores: Sequence[int]) -> int:
    if not all_scores:
        return NEUTRAL_SCORE
    return round_half_up(Decimal(sum(all_scores)) / Decimal(len(all_scores)))


# ---------------------------------------------------------------------------
# Public — main entry point
# ---------------------------------------------------------------------------

def calculate_score(
    window: ActivityWindow,
    previous_score: Optional[int] = None,
    peer_scores: Sequence[int] = (),
) -> ScoreSnapshot:
    """
    Score the window ending on window.end.

    previous_score: yesterday's stored final score (50 when absent).
    peer_scores:    every other user's current score. Percentile and global
                    average are taken over peers plus this fresh score, so
                    re-scoring the same day is idempotent.
    """
    if window.size != SCORE_WINDOW_DAYS:
        logger.debug("Scoring a %d-day window (expected %d)", window.size, SCORE_WINDOW_DAYS)

    components = compute_components(window)
    raw_total = components.weighted_total()
    gaming = detect_gaming(window)
    final = clamp(raw_total - gaming.penalty)

    if gaming.detected:
        logger.info(
            "Gaming detected for window ending %s: penalty=%d reason=%s",
            window.end, gaming.penalty, gaming.reason,
        )

    previous = DEFAULT_PREVIOUS_SCORE if previous_score is None else previous_score
    everyone = [*peer_scores, final]

    return ScoreSnapshot(
        day=window.end,
        components=components,
        raw_weighted_total=raw_total,
        gaming=gaming,
        final_score=final,
        change_from_yesterday=final - previous,
        percentile=percentile_of(final, everyone),
        global_average=global_average(everyone),
    )
