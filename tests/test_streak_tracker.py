"""
Tests for the streak state machine.

Covered:
  - 6 -> 7 earns the first freeze
  - one-day grace, break on a 2-day gap, freeze covering a missed day
  - idempotent same-day re-entry, stale recomputes, idle days
  - freeze cap and conservation, NoFreezeAvailableError
  - deadline / hours until break / at-risk / effective streak
"""
from datetime import date, datetime, timedelta

import pytest

from devflow.core.errors import NoFreezeAvailableError
from devflow.services.activity_window import ActivityDay
from devflow.services.streak_tracker import (
    MAX_FREEZE_DAYS,
    StreakState,
    advance,
    advance_with_details,
    effective_streak,
    freeze_status,
    hours_until_break,
    is_at_risk,
    streak_deadline,
    use_freeze,
)

D = date(2026, 3, 10)


def _active(day: date, commits: int = 1) -> ActivityDay:
    return ActivityDay(day=day, commits=commits)


def _idle(day: date) -> ActivityDay:
    return ActivityDay(day=day)


def _run(start: date, days: int, state: StreakState | None = None) -> StreakState:
    state = state or StreakState()
    for i in range(days):
        state = advance(_active(start + timedelta(days=i)), state)
    return state


class TestAdvance:
    def test_first_activity_starts_at_one(self):
        s = advance(_active(D), StreakState())
        assert s.current_streak == 1
        assert s.longest_streak == 1
        assert s.last_activity_date == D

    def test_seventh_day_earns_freeze(self):
        state = StreakState(current_streak=6, longest_streak=6, last_activity_date=D - timedelta(days=1))
        t = advance_with_details(_active(D), state)
        assert t.state.current_streak == 7
        assert t.state.freeze_days_available == 1
        assert t.state.last_freeze_earned_date == D
        assert t.freeze_earned is True

    def test_next_day_extends(self):
        state = StreakState(current_streak=3, longest_streak=3, last_activity_date=D - timedelta(days=1))
        t = advance_with_details(_active(D), state)
        assert t.state.current_streak == 4
        assert t.extended is True
        assert t.broken is False

    def test_one_missed_day_breaks(self):
        state = StreakState(current_streak=5, longest_streak=5, last_activity_date=D - timedelta(days=2))
        t = advance_with_details(_active(D), state)
        assert t.state.current_streak == 1
        assert t.state.longest_streak == 5
        assert t.broken is True

    def test_freeze_covers_one_missed_day(self):
        state = StreakState(
            current_streak=9, longest_streak=9, last_activity_date=D - timedelta(days=2),
            freeze_days_available=1,
        )
        state = use_freeze(state)
        t = advance_with_details(_active(D), state)
        assert t.state.current_streak == 10
        assert t.freeze_protected is True
        assert t.state.protected_gap_days == 0

    def test_one_freeze_does_not_cover_two_missed_days(self):
        state = StreakState(
            current_streak=9, longest_streak=9, last_activity_date=D - timedelta(days=3),
            freeze_days_available=1,
        )
        t = advance_with_details(_active(D), use_freeze(state))
        assert t.state.current_streak == 1
        assert t.broken is True
        assert t.state.protected_gap_days == 0

    def test_same_day_is_idempotent(self):
        once = advance(_active(D), StreakState(current_streak=6, longest_streak=6, last_activity_date=D - timedelta(days=1)))
        twice = advance(_active(D, commits=5), once)
        assert twice == once

    def test_stale_day_is_ignored(self):
        state = _run(D, 3)
        t = advance_with_details(_active(D), state)
        assert t.stale is True
        assert t.state == state

    def test_idle_day_changes_nothing(self):
        state = _run(D, 3)
        assert advance(_idle(D + timedelta(days=3)), state) == state

    def test_longest_never_decreases(self):
        state = _run(D, 10)
        state = advance(_active(D + timedelta(days=15)), state)
        assert state.current_streak == 1
        assert state.longest_streak == 10
        state = _run(D + timedelta(days=16), 3, state)
        assert state.longest_streak == 10


class TestFreezes:
    def test_earned_every_seven_days_capped(self):
        state = _run(D, 28)
        assert state.current_streak == 28
        assert state.freeze_days_available == MAX_FREEZE_DAYS

    def test_not_earned_at_cap(self):
        state = StreakState(
            current_streak=20, longest_streak=20, last_activity_date=D - timedelta(days=1),
            freeze_days_available=3,
        )
        t = advance_with_details(_active(D), state)
        assert t.state.current_streak == 21
        assert t.state.freeze_days_available == 3
        assert t.freeze_earned is False

    def test_conservation(self):
        state = _run(D, 14)                   # two earn events
        state = use_freeze(state)
        assert state.freeze_days_available == 2 - 1
        assert state.freeze_days_used_total == 1

    def test_use_with_none_raises(self):
        state = StreakState(current_streak=4, freeze_days_available=0)
        with pytest.raises(NoFreezeAvailableError):
            use_freeze(state)

    def test_use_does_not_touch_streak(self):
        state = _run(D, 7)
        after = use_freeze(state)
        assert after.current_streak == state.current_streak
        assert after.protected_gap_days == 1

    def test_status(self):
        status = freeze_status(_run(D, 3), D + timedelta(days=2))
        assert status.days_until_next_freeze == 4
        assert status.max_freezes == 3
        assert status.will_earn_freeze_today is False


class TestTelemetry:
    def test_deadline_is_end_of_grace_day(self):
        state = StreakState(current_streak=2, last_activity_date=date(2026, 3, 2))
        assert streak_deadline(state) == datetime(2026, 3, 4, 0, 0)

    def test_hours_until_break(self):
        state = StreakState(current_streak=2, last_activity_date=date(2026, 3, 2))
        assert hours_until_break(state, datetime(2026, 3, 2, 10, 0)) == 38
        assert hours_until_break(state, datetime(2026, 3, 3, 23, 30)) == 0
        assert hours_until_break(state, datetime(2026, 3, 6, 12, 0)) == 0

    def test_freeze_extends_deadline(self):
        state = StreakState(current_streak=2, last_activity_date=date(2026, 3, 2), protected_gap_days=1)
        assert hours_until_break(state, datetime(2026, 3, 3, 10, 0)) == 38

    def test_no_activity_means_zero_hours(self):
        assert hours_until_break(StreakState(), datetime(2026, 3, 2, 10, 0)) == 0
        assert streak_deadline(StreakState()) is None

    def test_at_risk_on_grace_day_only(self):
        state = StreakState(current_streak=3, last_activity_date=D)
        assert is_at_risk(state, D) is False
        assert is_at_risk(state, D + timedelta(days=1)) is True
        assert is_at_risk(StreakState(), D) is False

    def test_effective_streak(self):
        state = StreakState(current_streak=5, last_activity_date=D)
        assert effective_streak(state, D + timedelta(days=1)) == 5
        assert effective_streak(state, D + timedelta(days=2)) == 0
        covered = StreakState(current_streak=5, last_activity_date=D, protected_gap_days=1)
        assert effective_streak(covered, D + timedelta(days=2)) == 5
        assert effective_streak(StreakState(), D) == 0
