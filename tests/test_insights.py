"""
Tests for personal bests and the activity summary.
"""
from datetime import date, timedelta

from devflow.services.activity_window import ActivityDay, ActivityWindow
from devflow.services.insights import personal_bests, score_trend, summarize_activity
from devflow.services.streak_tracker import StreakState

END = date(2026, 3, 15)   # Sunday


def _window(days, size=30):
    return ActivityWindow.build(days, end=END, size=size)


class TestPersonalBests:
    def test_records(self):
        days = [
            ActivityDay(day=date(2026, 2, 27), commits=4, prs_merged=1),
            ActivityDay(day=date(2026, 3, 2), commits=9),
            ActivityDay(day=date(2026, 3, 3), commits=2),
            ActivityDay(day=date(2026, 3, 12), commits=5, prs_merged=2),
        ]
        bests = personal_bests(
            _window(days), StreakState(current_streak=2, longest_streak=6, last_activity_date=date(2026, 3, 14)),
        )
        assert bests.most_commits_in_day == 9
        assert bests.most_commits_in_week == 15     # Feb 27 .. Mar 5
        assert bests.total_commits == 20
        assert bests.total_prs == 3
        assert bests.first_active_date == date(2026, 2, 27)
        assert bests.active_months == 2
        assert bests.longest_streak == 6
        assert bests.current_streak == 2

    def test_empty(self):
        bests = personal_bests(_window([]), StreakState())
        assert bests.most_commits_in_day == 0
        assert bests.most_commits_in_week == 0
        assert bests.first_active_date is None
        assert bests.active_months == 0

    def test_lapsed_streak_reads_zero(self):
        days = [ActivityDay(day=END - timedelta(days=18 + i), commits=1) for i in range(3)]
        state = StreakState(current_streak=3, longest_streak=3, last_activity_date=END - timedelta(days=18))
        bests = personal_bests(_window(days), state)
        assert bests.current_streak == 0
        assert bests.longest_streak == 3

    def test_short_window_week_is_the_window_total(self):
        days = [ActivityDay(day=END - timedelta(days=i), commits=i + 1) for i in range(3)]
        bests = personal_bests(_window(days, size=3), StreakState())
        assert bests.most_commits_in_week == 6


class TestSummary:
    def test_totals_languages_and_hours(self):
        days = [
            ActivityDay(day=END, commits=3, prs_opened=1, lines_added=40, is_weekend=False,
                        commits_by_hour={14: 2, 9: 1}, languages={"Python": 3}),
            ActivityDay(day=END - timedelta(days=2), commits=4, prs_merged=1, issues_closed=2,
                        commits_by_hour={14: 1, 9: 3}, languages={"Python": 1, "Go": 3},
                        is_weekend=True),
        ]
        s = summarize_activity(_window(days, size=7))
        assert s.total_commits == 7
        assert s.total_prs == 2
        assert s.total_issues == 2
        assert s.total_lines_added == 40
        assert s.active_days == 2
        assert s.top_languages == [("Python", 4), ("Go", 3)]
        assert s.most_productive_hour == 9          # 4 vs 3, ties would go to the earlier hour
        assert s.weekend_commits == 4
        assert s.weekday_commits == 3
        assert s.average_score is None
        assert s.trend == "stable"

    def test_default_hour(self):
        s = summarize_activity(_window([ActivityDay(day=END, commits=1)], size=7))
        assert s.most_productive_hour == 9

    def test_average_and_trend(self):
        s = summarize_activity(_window([], size=7), scores=[40, 40, 60, 61])
        assert s.average_score == 50
        assert s.trend == "up"

    def test_trend(self):
        assert score_trend([80, 80, 60, 60]) == "down"
        assert score_trend([50, 52]) == "stable"
        assert score_trend([70]) == "stable"
