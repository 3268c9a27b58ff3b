"""
Verdict selector — "how did today go?" in one word.

Rules (evaluated top to bottom, first match wins)
-------------------------------------------------
  1. streak >= 7 and commits today   → streak_milestone (>= 14) / momentum_building
  2. PRs today                       → shipped_real_progress  (shipping)
  3. > 5 commits today               → shipped_real_progress  (commits)
  4. weekend and commits today       → showed_up
  5. idle, streak 0, had a streak    → streak_dead
  6. idle, < 2 active days this week → prolonged_absence (no history) / inconsistent
  7. idle                            → rest_day
  8. >= 5 active days, < 10 commits  → busy_not_productive
  9. otherwise                       → average_day

Rules are data (VERDICT_RULES); copy is data (DEFAULT_TEMPLATES). Callers
may pass their own templates; the selector only picks a key and fills
`{placeholder}` slots.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Callable, Mapping, Optional


class Severity:
    PRAISE   = "praise"
    WARNING  = "warning"
    NEUTRAL  = "neutral"
    CRITICAL = "critical"


class VerdictKey:
    STREAK_MILESTONE      = "streak_milestone"
    MOMENTUM_BUILDING     = "momentum_building"
    SHIPPED_REAL_PROGRESS = "shipped_real_progress"
    SHOWED_UP             = "showed_up"
    STREAK_DEAD           = "streak_dead"
    PROLONGED_ABSENCE     = "prolonged_absence"
    INCONSISTENT          = "inconsistent"
    REST_DAY              = "rest_day"
    BUSY_NOT_PRODUCTIVE   = "busy_not_productive"
    AVERAGE_DAY           = "average_day"


# ---------------------------------------------------------------------------
# Inputs / outputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class VerdictInput:
    current_streak: int
    previous_streak: int
    today_commits: int
    today_prs: int              # opened + merged
    week_commits: int           # trailing 7 days, today inclusive
    active_days_in_week: int
    is_weekend: bool
    has_history: bool           # any stored activity in the week


@dataclass(frozen=True)
class VerdictTemplate:
    text: str
    subtext: Optional[str]
    severity: str
    emoji: str = ""


@dataclass(frozen=True)
class Verdict:
    day: date
    verdict_key: str
    text: str
    subtext: Optional[str]
    severity: str
    primary_factor: str
    score_change: int
    emoji: str = ""


DEFAULT_TEMPLATES: dict[str, VerdictTemplate] = {
    VerdictKey.SHIPPED_REAL_PROGRESS: VerdictTemplate(
        "You shipped real progress today.",
        "Keep this energy. You're building something.",
        Severity.PRAISE, "🚀",
    ),
    VerdictKey.MOMENTUM_BUILDING: VerdictTemplate(
        "Momentum is building. Do not break it.",
        "You're on day {streak}. Make it {streak + 1}.",
        Severity.PRAISE, "🔥",
    ),
    VerdictKey.SHOWED_UP: VerdictTemplate(
        "You showed up when it mattered.",
        "Weekend push. That's dedication.",
        Severity.PRAISE, "💪",
    ),
    VerdictKey.STREAK_MILESTONE: VerdictTemplate(
        "{streak} days. You're becoming unstoppable.",
        "This is who you are now.",
        Severity.PRAISE, "⚡",
    ),
    VerdictKey.BUSY_NOT_PRODUCTIVE: VerdictTemplate(
        "You were busy, not productive.",
        "{lastWeek} commits across the week. What did you actually ship?",
        Severity.WARNING, "⚠️",
    ),
    VerdictKey.INCONSISTENT: VerdictTemplate(
        "Inconsistency is killing your growth.",
        "{days} days off this week. That's not a habit.",
        Severity.WARNING, "🎲",
    ),
    VerdictKey.REST_DAY: VerdictTemplate(
        "Rest day. Recovery is progress too.",
        "Come back tomorrow with energy.",
        Severity.NEUTRAL, "🧘",
    ),
    VerdictKey.AVERAGE_DAY: VerdictTemplate(
        "Average day. Nothing more, nothing less.",
        "Average compounds. Keep showing up.",
        Severity.NEUTRAL, "📊",
    ),
    VerdictKey.STREAK_DEAD: VerdictTemplate(
        "The streak is dead. Start again.",
        "You had {lostStreak} days. Now you have 0.",
        Severity.CRITICAL, "💀",
    ),
    VerdictKey.PROLONGED_ABSENCE: VerdictTemplate(
        "You've been gone for {days} days.",
        "The longer you wait, the harder it gets to return.",
        Severity.CRITICAL, "👻",
    ),
}


# ---------------------------------------------------------------------------
# Decision tree
# ---------------------------------------------------------------------------

Predicate = Callable[[VerdictInput], bool]
Resolver = Callable[[VerdictInput], tuple[str, str]]


def _fixed(key: str, factor: str) -> Resolver:
    return lambda _: (key, factor)


VERDICT_RULES: list[tuple[str, Predicate, Resolver]] = [
    (
        "streak_with_activity",
        lambda v: v.current_streak >= 7 and v.today_commits > 0,
        lambda v: (
            (VerdictKey.STREAK_MILESTONE if v.current_streak >= 14 else VerdictKey.MOMENTUM_BUILDING),
            "streak",
        ),
    ),
    (
        "prs_today",
        lambda v: v.today_prs > 0,
        _fixed(VerdictKey.SHIPPED_REAL_PROGRESS, "shipping"),
    ),
    (
        "many_commits",
        lambda v: v.today_commits > 5,
        _fixed(VerdictKey.SHIPPED_REAL_PROGRESS, "commits"),
    ),
    (
        "weekend_work",
        lambda v: v.is_weekend and v.today_commits > 0,
        _fixed(VerdictKey.SHOWED_UP, "weekend_work"),
    ),
    (
        "lost_streak",
        lambda v: v.today_commits == 0 and v.current_streak == 0 and v.previous_streak > 0,
        _fixed(VerdictKey.STREAK_DEAD, "lost_streak"),
    ),
    (
        "mostly_idle_week",
        lambda v: v.today_commits == 0 and v.active_days_in_week < 2,
        lambda v: (
            (VerdictKey.INCONSISTENT, "consistency")
            if v.has_history
            else (VerdictKey.PROLONGED_ABSENCE, "inactivity")
        ),
    ),
    (
        "idle_today",
        lambda v: v.today_commits == 0,
        _fixed(VerdictKey.REST_DAY, "recovery"),
    ),
    (
        "busy_low_output",
        lambda v: v.active_days_in_week >= 5 and v.week_commits < 10,
        _fixed(VerdictKey.BUSY_NOT_PRODUCTIVE, "low_output"),
    ),
]

DEFAULT_VERDICT = (VerdictKey.AVERAGE_DAY, "general_activity")


def classify(inputs: VerdictInput) -> tuple[str, str, Optional[str]]:
    """Return (verdict_key, primary_factor, rule_name) for the first matching rule."""
    for name, predicate, resolve in VERDICT_RULES:
        if predicate(inputs):
            key, factor = resolve(inputs)
            return key, factor, name
    key, factor = DEFAULT_VERDICT
    return key, factor, None


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

_PLACEHOLDER_RE = re.compile(r"\{([^{}]+)\}")


def placeholder_values(inputs: VerdictInput) -> dict[str, str]:
    return {
        "streak": str(inputs.current_streak),
        "streak + 1": str(inputs.current_streak + 1),
        "days": str(max(1, 7 - inputs.active_days_in_week)),
        "lostStreak": str(inputs.previous_streak),
        "lastWeek": str(inputs.week_commits),
        "thisWeek": str(inputs.today_commits),
    }


def fill_template(template: Optional[str], values: Mapping[str, str]) -> Optional[str]:
    """Substitute known {placeholders}; unknown ones are left as written."""
    if template is None:
        return None
    return _PLACEHOLDER_RE.sub(lambda m: values.get(m.group(1).strip(), m.group(0)), template)


def score_change_for(today_commits: int) -> int:
    return min(5, today_commits // 2) if today_commits > 0 else -2


# ---------------------------------------------------------------------------
# Public — main entry point
# ---------------------------------------------------------------------------

def select_verdict(
    day: date,
    inputs: VerdictInput,
    templates: Optional[Mapping[str, VerdictTemplate]] = None,
) -> Verdict:
    table = templates if templates is not None else DEFAULT_TEMPLATES
    key, factor, _ = classify(inputs)
    template = table.get(key) or table.get(VerdictKey.AVERAGE_DAY) or DEFAULT_TEMPLATES[VerdictKey.AVERAGE_DAY]
    values = placeholder_values(inputs)

    return Verdict(
        day=day,
        verdict_key=key,
        text=fill_template(template.text, values) or "",
        subtext=fill_template(template.subtext, values),
        severity=template.severity,
        primary_factor=factor,
        score_change=score_change_for(inputs.today_commits),
        emoji=template.emoji,
    )
