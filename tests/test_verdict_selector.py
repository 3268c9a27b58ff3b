"""
Tests for the verdict decision tree.

Rule order matters: the first matching rule wins, so most cases below are
built to also satisfy a later rule.
"""
from datetime import date

import pytest

from devflow.services.verdict_selector import (
    DEFAULT_TEMPLATES,
    Severity,
    VerdictInput,
    VerdictKey,
    VerdictTemplate,
    classify,
    fill_template,
    score_change_for,
    select_verdict,
)

DAY = date(2026, 3, 10)   # Tuesday


def _inputs(**kw) -> VerdictInput:
    base = dict(
        current_streak=0,
        previous_streak=0,
        today_commits=0,
        today_prs=0,
        week_commits=0,
        active_days_in_week=0,
        is_weekend=False,
        has_history=True,
    )
    base.update(kw)
    return VerdictInput(**base)


class TestRuleOrder:
    def test_ten_day_streak_is_momentum_not_milestone(self):
        v = select_verdict(DAY, _inputs(current_streak=10, previous_streak=9, today_commits=3,
                                        week_commits=20, active_days_in_week=7))
        assert v.verdict_key == VerdictKey.MOMENTUM_BUILDING
        assert v.primary_factor == "streak"
        assert v.subtext == "You're on day 10. Make it 11."
        assert v.severity == Severity.PRAISE

    def test_fourteen_day_streak_is_milestone(self):
        v = select_verdict(DAY, _inputs(current_streak=14, today_commits=1))
        assert v.verdict_key == VerdictKey.STREAK_MILESTONE
        assert v.text == "14 days. You're becoming unstoppable."

    def test_streak_rule_beats_prs(self):
        key, factor, rule = classify(_inputs(current_streak=20, today_commits=2, today_prs=3))
        assert key == VerdictKey.STREAK_MILESTONE
        assert rule == "streak_with_activity"

    def test_prs_today(self):
        v = select_verdict(DAY, _inputs(current_streak=3, today_commits=1, today_prs=1))
        assert v.verdict_key == VerdictKey.SHIPPED_REAL_PROGRESS
        assert v.primary_factor == "shipping"

    def test_many_commits(self):
        v = select_verdict(DAY, _inputs(current_streak=2, today_commits=6))
        assert v.verdict_key == VerdictKey.SHIPPED_REAL_PROGRESS
        assert v.primary_factor == "commits"

    def test_weekend_work(self):
        v = select_verdict(DAY, _inputs(current_streak=1, today_commits=2, is_weekend=True))
        assert v.verdict_key == VerdictKey.SHOWED_UP

    def test_lost_streak(self):
        v = select_verdict(DAY, _inputs(previous_streak=5, active_days_in_week=1))
        assert v.verdict_key == VerdictKey.STREAK_DEAD
        assert v.subtext == "You had 5 days. Now you have 0."
        assert v.severity == Severity.CRITICAL

    def test_inconsistent_week(self):
        v = select_verdict(DAY, _inputs(active_days_in_week=1, has_history=True))
        assert v.verdict_key == VerdictKey.INCONSISTENT
        assert v.subtext == "6 days off this week. That's not a habit."

    def test_prolonged_absence_without_history(self):
        v = select_verdict(DAY, _inputs(active_days_in_week=0, has_history=False))
        assert v.verdict_key == VerdictKey.PROLONGED_ABSENCE
        assert v.text == "You've been gone for 7 days."

    def test_rest_day(self):
        v = select_verdict(DAY, _inputs(current_streak=3, active_days_in_week=3))
        assert v.verdict_key == VerdictKey.REST_DAY
        assert v.score_change == -2

    def test_busy_not_productive(self):
        v = select_verdict(DAY, _inputs(current_streak=5, today_commits=2, week_commits=8,
                                        active_days_in_week=5))
        assert v.verdict_key == VerdictKey.BUSY_NOT_PRODUCTIVE
        assert v.subtext == "8 commits across the week. What did you actually ship?"

    def test_average_day(self):
        v = select_verdict(DAY, _inputs(current_streak=2, today_commits=3, week_commits=12,
                                        active_days_in_week=3))
        assert v.verdict_key == VerdictKey.AVERAGE_DAY
        assert v.primary_factor == "general_activity"


class TestTemplates:
    def test_unknown_placeholder_left_intact(self):
        assert fill_template("{streak} and {mystery}", {"streak": "4"}) == "4 and {mystery}"

    def test_none_template(self):
        assert fill_template(None, {"streak": "4"}) is None

    def test_custom_templates(self):
        templates = {VerdictKey.REST_DAY: VerdictTemplate("Off on day {streak}", None, Severity.NEUTRAL)}
        v = select_verdict(DAY, _inputs(current_streak=3, active_days_in_week=3), templates)
        assert v.text == "Off on day 3"
        assert v.subtext is None

    def test_missing_key_falls_back_to_average(self):
        v = select_verdict(DAY, _inputs(current_streak=3, active_days_in_week=3), templates={})
        assert v.verdict_key == VerdictKey.REST_DAY
        assert v.text == DEFAULT_TEMPLATES[VerdictKey.AVERAGE_DAY].text

    def test_every_key_has_default_copy(self):
        keys = {v for k, v in vars(VerdictKey).items() if k.isupper()}
        assert keys <= set(DEFAULT_TEMPLATES)


class TestScoreChange:
    @pytest.mark.parametrize("commits,expected", [(0, -2), (1, 0), (3, 1), (10, 5), (40, 5)])
    def test_score_change(self, commits, expected):
        assert score_change_for(commits) == expected


def test_deterministic():
    inputs = _inputs(current_streak=8, today_commits=4)
    assert select_verdict(DAY, inputs) == select_verdict(DAY, inputs)
