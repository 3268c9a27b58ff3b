"""
Read-only insights over an ActivityWindow.

personal_bests(window, streak)          -> PersonalBests
summarize_activity(window, scores)      -> ActivitySummary
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from devflow.services.activity_window import ActivityWindow
from devflow.services.score_calculator import round_half_up
from devflow.services.streak_tracker import StreakState, effective_streak

DEFAULT_PRODUCTIVE_HOUR = 9
_TREND_UP = Decimal("1.1")
_TREND_DOWN = Decimal("0.9")


@dataclass(frozen=True)
class PersonalBests:
    longest_streak: int
    current_streak: int
    most_commits_in_day: int
    most_commits_in_week: int
    total_commits: int
    total_prs: int
    first_active_date: Optional[date]
    active_months: int


@dataclass(frozen=True)
class ActivitySummary:
    start: date
    end: date
    total_commits: int
    total_prs: int
    total_issues: int
    total_lines_added: int
    total_lines_deleted: int
    active_days: int
    top_languages: list[tuple[str, int]]
    most_productive_hour: int
    weekday_commits: int
    weekend_commits: int
    average_score: Optional[int]
    trend: str


def personal_bests(window: ActivityWindow, streak: StreakState) -> PersonalBests:
    """current_streak is the streak as seen on window.end, 0 once it has lapsed."""
    commits = [d.commits for d in window.days]

    best_week = sum(commits) if len(commits) < 7 else 0
    for i in range(0, max(0, len(commits) - 6)):
        best_week = max(best_week, sum(commits[i:i + 7]))

    first_active = next((d.day for d in window.days if d.is_active), None)
    months = {(d.day.year, d.day.month) for d in window.days if d.is_active}

    return PersonalBests(
        longest_streak=max(streak.longest_streak, streak.current_streak),
        current_streak=effective_streak(streak, window.end),
        most_commits_in_day=max(commits, default=0),
        most_commits_in_week=best_week,
        total_commits=window.total_commits,
        total_prs=window.total_prs_merged,
        first_active_date=first_active,
        active_months=len(months),
    )


def score_trend(scores: Sequence[int]) -> str:
    """Compare the mean of the second half of `scores` with the first half."""
    if len(scores) < 2:
        return "stable"
    mid = len(scores) // 2
    first = Decimal(sum(scores[:mid])) / Decimal(mid)
    second = Decimal(sum(scores[mid:])) / Decimal(len(scores) - mid)
    if second > first * _TREND_UP:
        return "up"
    if second < first * _TREND_DOWN:
        return "down"
    return "stable"


def summarize_activity(
    window: ActivityWindow,
    scores: Sequence[int] = (),
) -> ActivitySummary:
    """
    scores: stored daily final scores inside the window, oldest first.
    """
    languages: Counter[str] = Counter()
    hours: Counter[int] = Counter()
    weekday = weekend = 0

    for d in window.days:
        languages.update(d.languages)
        hours.update(d.commits_by_hour)
        if d.is_weekend:
            weekend += d.commits
        else:
            weekday += d.commits

    # Ties go to the earliest hour.
    busiest = [h for h, c in sorted(hours.items(), key=lambda kv: (-kv[1], kv[0])) if c > 0]
    top_languages = sorted(
        ((lang, n) for lang, n in languages.items() if n > 0),
        key=lambda kv: (-kv[1], kv[0]),
    )

    return ActivitySummary(
        start=window.days[0].day,
        end=window.end,
        total_commits=window.total_commits,
        total_prs=window.total_prs_opened + window.total_prs_merged,
        total_issues=sum(d.issues_closed for d in window.days),
        total_lines_added=sum(d.lines_added for d in window.days),
        total_lines_deleted=sum(d.lines_deleted for d in window.days),
        active_days=window.active_days,
        top_languages=top_languages,
        most_productive_hour=busiest[0] if busiest else DEFAULT_PRODUCTIVE_HOUR,
        weekday_commits=weekday,
        weekend_commits=weekend,
        average_score=(
            round_half_up(Decimal(sum(scores)) / Decimal(len(scores))) if scores else None
        ),
        trend=score_trend(scores),
    )
