"""
Endpoint tests: users, activity, evaluation, score, streak, freeze, XP,
verdict and personal bests.
"""
from datetime import date, timedelta

START = date(2031, 6, 2)   # Monday


def _create_user(client, login: str) -> int:
    r = client.post("/users", json={"github_login": login, "display_name": "Dev"})
    assert r.status_code == 201
    return r.json()["id"]


def _put_days(client, user_id: int, days: list[dict]) -> dict:
    r = client.put(f"/users/{user_id}/activity", json={"days": days})
    assert r.status_code == 200, r.text
    return r.json()


def _evaluate(client, user_id: int, day: date) -> dict:
    r = client.post(f"/users/{user_id}/evaluate", json={"day": str(day)})
    assert r.status_code == 200, r.text
    return r.json()


def _active_run(client, user_id: int, start: date, n: int) -> list[dict]:
    _put_days(client, user_id, [
        {"day": str(start + timedelta(days=i)), "commits": 3, "coding_minutes": 90}
        for i in range(n)
    ])
    return [_evaluate(client, user_id, start + timedelta(days=i)) for i in range(n)]


# ---------------------------------------------------------------------------
# Health / users
# ---------------------------------------------------------------------------

class TestHealth:
    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"


class TestUsers:
    def test_create_and_read(self, client, login):
        user_id = _create_user(client, login)
        body = client.get(f"/users/{user_id}").json()
        assert body["github_login"] == login
        assert body["current_streak"] == 0
        assert body["current_score"] is None
        assert body["level"]["title"] == "Newcomer"

    def test_lapsed_streak_reads_zero(self, client, login):
        user_id = _create_user(client, login)
        _active_run(client, user_id, date(2020, 1, 6), 3)
        body = client.get(f"/users/{user_id}").json()
        assert body["current_streak"] == 0
        assert body["longest_streak"] == 3
        assert body["last_activity_date"] == "2020-01-08"


# ---------------------------------------------------------------------------
# Activity
# ---------------------------------------------------------------------------

class TestActivity:
    def test_upsert_overwrites_same_day(self, client, login):
        user_id = _create_user(client, login)
        day = str(START)
        _put_days(client, user_id, [{"day": day, "commits": 2, "commits_by_hour": {"10": 2}}])
        body = _put_days(client, user_id, [{"day": day, "commits": 5, "languages": {"Rust": 5}}])
        assert body["total"] == 1
        item = body["items"][0]
        assert item["commits"] == 5
        assert item["commits_by_hour"] == {}
        assert item["languages"] == {"Rust": 5}
        assert item["is_weekend"] is False

    def test_negative_count_rejected(self, client, login):
        user_id = _create_user(client, login)
        r = client.put(f"/users/{user_id}/activity", json={"days": [{"day": str(START), "commits": -1}]})
        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"

    def test_bad_hour_rejected(self, client, login):
        user_id = _create_user(client, login)
        r = client.put(f"/users/{user_id}/activity", json={
            "days": [{"day": str(START), "commits": 1, "commits_by_hour": {"25": 1}}],
        })
        assert r.status_code == 422

    def test_duplicate_days_rejected(self, client, login):
        user_id = _create_user(client, login)
        r = client.put(f"/users/{user_id}/activity", json={
            "days": [{"day": str(START), "commits": 1}, {"day": str(START), "commits": 2}],
        })
        assert r.status_code == 422
        assert r.json()["code"] == "INVALID_INPUT"

    def test_window_and_summary(self, client, login):
        user_id = _create_user(client, login)
        _put_days(client, user_id, [
            {"day": str(START), "commits": 4, "commits_by_hour": {"15": 4}, "languages": {"Go": 4}},
            {"day": str(START + timedelta(days=2)), "commits": 1, "prs_merged": 1},
        ])
        r = client.get(f"/users/{user_id}/activity", params={"end": str(START + timedelta(days=6)), "days": 7})
        assert r.status_code == 200
        body = r.json()
        assert len(body["days"]) == 7
        assert body["summary"]["total_commits"] == 5
        assert body["summary"]["active_days"] == 2
        assert body["summary"]["most_productive_hour"] == 15
        assert body["summary"]["top_languages"] == [{"language": "Go", "commits": 4}]

    def test_unknown_user(self, client):
        r = client.put("/users/999999/activity", json={"days": [{"day": str(START), "commits": 1}]})
        assert r.status_code == 404


# ---------------------------------------------------------------------------
# Evaluation / score / verdict
# ---------------------------------------------------------------------------

class TestEvaluation:
    def test_evaluate_then_read(self, client, login):
        user_id = _create_user(client, login)
        body = _active_run(client, user_id, START, 1)[0]
        assert body["streak"]["current_streak"] == 1
        assert body["xp"]["total_awarded"] == 30 + 5
        assert body["attempts"] == 1

        score = client.get(f"/users/{user_id}/score", params={"day": str(START)})
        assert score.status_code == 200
        assert score.json()["final_score"] == body["score"]["final_score"]

        verdict = client.get(f"/users/{user_id}/verdict", params={"day": str(START)})
        assert verdict.status_code == 200
        assert verdict.json()["verdict_key"] == body["verdict"]["verdict_key"]
        assert verdict.json()["dev_flow_score"] == body["score"]["final_score"]

    def test_evaluate_twice_same_result(self, client, login):
        user_id = _create_user(client, login)
        first = _active_run(client, user_id, START, 2)[-1]
        second = _evaluate(client, user_id, START + timedelta(days=1))
        assert second["score"] == first["score"]
        assert second["verdict"] == first["verdict"]
        assert second["xp"]["total_awarded"] == 0
        assert second["xp"]["total_xp"] == first["xp"]["total_xp"]

    def test_score_not_computed(self, client, login):
        user_id = _create_user(client, login)
        r = client.get(f"/users/{user_id}/score", params={"day": str(START)})
        assert r.status_code == 404
        assert r.json()["code"] == "NOT_COMPUTED"

    def test_evaluate_unknown_user(self, client):
        r = client.post("/users/999999/evaluate", json={"day": str(START)})
        assert r.status_code == 404


# ---------------------------------------------------------------------------
# Streak / freeze
# ---------------------------------------------------------------------------

class TestStreakAndFreeze:
    def test_freeze_flow(self, client, login):
        user_id = _create_user(client, login)
        run = _active_run(client, user_id, START, 7)
        assert run[-1]["streak"]["freeze_earned"] is True

        # day 8 missed; cover it, then come back on day 9
        r = client.post(f"/users/{user_id}/streak/freeze")
        assert r.status_code == 200
        assert r.json()["freezes_available"] == 0
        assert r.json()["protected_gap_days"] == 1

        events = client.get(f"/users/{user_id}/streak").json()["recent_freeze_events"]
        assert [(e["event_type"], e["streak_at_event"]) for e in events] == [("used", 7), ("earned", 7)]

        day9 = START + timedelta(days=8)
        _put_days(client, user_id, [{"day": str(day9), "commits": 1}])
        body = _evaluate(client, user_id, day9)
        assert body["streak"]["current_streak"] == 8
        assert body["streak"]["freeze_protected"] is True

        r = client.post(f"/users/{user_id}/streak/freeze")
        assert r.status_code == 409
        assert r.json()["code"] == "NO_FREEZE_AVAILABLE"

    def test_streak_status(self, client, login):
        user_id = _create_user(client, login)
        _active_run(client, user_id, START, 3)
        last = START + timedelta(days=2)

        r = client.get(f"/users/{user_id}/streak", params={"now": f"{last + timedelta(days=1)}T12:00:00"})
        assert r.status_code == 200
        body = r.json()
        assert body["current_streak"] == 3
        assert body["hours_until_break"] == 12
        assert body["at_risk"] is True
        assert body["freeze"]["days_until_next_freeze"] == 4

        lapsed = client.get(f"/users/{user_id}/streak", params={"now": f"{last + timedelta(days=3)}T08:00:00"})
        assert lapsed.json()["current_streak"] == 0
        assert lapsed.json()["stored_streak"] == 3
        assert lapsed.json()["hours_until_break"] == 0


# ---------------------------------------------------------------------------
# XP
# ---------------------------------------------------------------------------

class TestXp:
    def test_award_and_overview(self, client, login):
        user_id = _create_user(client, login)
        r = client.post(f"/users/{user_id}/xp", json={"source": "challenge_won", "amount": 100})
        assert r.status_code == 201
        assert r.json()["total_xp"] == 100

        r = client.post(f"/users/{user_id}/xp", json={
            "source": "achievement_unlocked", "amount": 450, "metadata": {"badge": "first-pr"},
        })
        assert r.json()["leveled_up"] is True
        assert r.json()["level"]["title"] == "Contributor"

        overview = client.get(f"/users/{user_id}/xp").json()
        assert overview["total_xp"] == 550
        assert overview["total_transactions"] == 2
        assert overview["recent"][0]["metadata"] == {"badge": "first-pr"}
        assert overview["next_milestone"]["title"] == "Shipper"
        assert overview["next_milestone"]["xp_remaining"] == 1450

    def test_non_positive_amount_rejected(self, client, login):
        user_id = _create_user(client, login)
        for amount in (0, -10):
            r = client.post(f"/users/{user_id}/xp", json={"source": "challenge_won", "amount": amount})
            assert r.status_code == 422
            assert r.json()["code"] == "INVALID_AMOUNT"
        assert client.get(f"/users/{user_id}/xp").json()["total_xp"] == 0

    def test_unknown_source_rejected(self, client, login):
        user_id = _create_user(client, login)
        r = client.post(f"/users/{user_id}/xp", json={"source": "bribery", "amount": 10})
        assert r.status_code == 422
        assert r.json()["code"] == "VALIDATION_ERROR"


# ---------------------------------------------------------------------------
# Personal bests
# ---------------------------------------------------------------------------

class TestBests:
    def test_bests(self, client, login):
        user_id = _create_user(client, login)
        _active_run(client, user_id, START, 4)
        r = client.get(f"/users/{user_id}/bests", params={"end": str(START + timedelta(days=10))})
        assert r.status_code == 200
        body = r.json()
        assert body["longest_streak"] == 4
        assert body["current_streak"] == 0
        assert body["most_commits_in_day"] == 3
        assert body["most_commits_in_week"] == 12
        assert body["first_active_date"] == str(START)
        assert body["window_days"] == 30
