"""HTTP tests against a temporary SQLite database (see conftest.py)."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from app.models import User, UserSettings, WorkoutLog

API = "/api/v1"


def _log(user_id: str, day: str, n_exercises: int = 1, **kwargs) -> WorkoutLog:
    return WorkoutLog(
        user_id=user_id,
        date=datetime.fromisoformat(f"{day}T12:00:00").replace(tzinfo=timezone.utc),
        exercises=[{"name": f"Exercise {i}"} for i in range(n_exercises)],
        **kwargs,
    )


@pytest.fixture
def community(seed):
    """Five users (plus orphaned logs for a sixth) with March 2024 activity."""
    seed(
        User(id="alice", username="alice", email="alice@example.com"),
        User(id="bob", username=None, email="bob@example.com"),
        User(id="carol", username="carol", email="carol@example.com"),
        User(id="erin", username="erin", email="erin@example.com"),
        User(id="frank", username="frank", email="frank@example.com"),
        UserSettings(user_id="alice", inspiration_quote="One more rep."),
    )
    seed(
        # alice: W10 x2, W11 x2, W12 x1 -> 5 this month, streak 2/2
        *[_log("alice", d) for d in ("2024-03-04", "2024-03-06", "2024-03-11", "2024-03-13", "2024-03-19")],
        # bob: W09 x2, W10 x2, W11 x1 -> 5 this month, streak 2/2
        *[_log("bob", d) for d in ("2024-03-01", "2024-03-02", "2024-03-05", "2024-03-08", "2024-03-15")],
        # carol: W10 x3 -> 3 this month, streak 1/1
        *[_log("carol", d) for d in ("2024-03-04", "2024-03-05", "2024-03-06")],
        # dave has no users row
        *[_log("dave", f"2024-03-{d:02d}") for d in range(1, 11)],
        # erin: logs without exercises don't count this month
        *[_log("erin", d, n_exercises=0) for d in ("2024-03-07", "2024-03-08")],
        # frank: February only
        *[_log("frank", d) for d in ("2024-02-05", "2024-02-06")],
    )


# ── App / health ─────────────────────────────────────────────────────────

def test_root(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_health(client):
    r = client.get(f"{API}/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_readiness(client):
    r = client.get(f"{API}/health/ready")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "database": "connected"}


# ── Streaks ──────────────────────────────────────────────────────────────

def test_user_streak(client, community):
    r = client.get(f"{API}/streaks/alice")
    assert r.status_code == 200
    assert r.json() == {
        "user_id": "alice",
        "current_streak": 2,
        "longest_streak": 2,
        "last_workout_date": "2024-03-19",
    }


def test_user_streak_without_logs_is_zero(client, community):
    r = client.get(f"{API}/streaks/nobody")
    assert r.status_code == 200
    assert r.json() == {
        "user_id": "nobody",
        "current_streak": 0,
        "longest_streak": 0,
        "last_workout_date": None,
    }


def test_all_streaks(client, community):
    r = client.get(f"{API}/streaks")
    assert r.status_code == 200
    by_user = {s["user_id"]: (s["current_streak"], s["longest_streak"]) for s in r.json()}
    assert [s["user_id"] for s in r.json()] == sorted(by_user)
    assert by_user == {
        "alice": (2, 2),
        "bob": (2, 2),
        "carol": (1, 1),
        "dave": (2, 2),  # every day of W09 (Fri-Sun) and W10
        "erin": (1, 1),
        "frank": (1, 1),
    }


def test_streaks_with_pre_1000_dates(client, seed):
    monday = date(999, 3, 1) - timedelta(days=date(999, 3, 1).weekday())
    days = [monday + timedelta(days=n) for n in (0, 1, 7, 8)]
    seed(User(id="alice", email="alice@example.com"), *[_log("alice", d.isoformat()) for d in days])

    r = client.get(f"{API}/streaks")
    assert r.status_code == 200
    assert [(s["user_id"], s["current_streak"], s["longest_streak"]) for s in r.json()] == [("alice", 0, 2)]

    r = client.get(f"{API}/streaks/alice")
    assert r.status_code == 200
    assert r.json()["last_workout_date"] == days[-1].isoformat()


def test_all_streaks_empty(client):
    r = client.get(f"{API}/streaks")
    assert r.status_code == 200
    assert r.json() == []


# ── Leaderboard ──────────────────────────────────────────────────────────

def test_leaderboard(client, community):
    r = client.get(f"{API}/leaderboard")
    assert r.status_code == 200
    body = r.json()
    assert body["month"] == "2024-03"
    entries = body["entries"]

    assert [e["rank"] for e in entries] == [1, 1, 3]
    assert {e["user_id"] for e in entries[:2]} == {"alice", "bob"}
    assert entries[2]["user_id"] == "carol"
    assert [e["workout_count"] for e in entries] == [5, 5, 3]

    alice = next(e for e in entries if e["user_id"] == "alice")
    assert alice["email"] == "alice@example.com"
    assert alice["inspiration_quote"] == "One more rep."
    assert (alice["current_streak"], alice["longest_streak"]) == (2, 2)

    bob = next(e for e in entries if e["user_id"] == "bob")
    assert bob["username"] is None
    assert bob["inspiration_quote"] is None


def test_leaderboard_excludes_unknown_and_inactive_users(client, community):
    user_ids = {e["user_id"] for e in client.get(f"{API}/leaderboard").json()["entries"]}
    assert "dave" not in user_ids  # no users row
    assert "erin" not in user_ids  # no exercises in this month's logs
    assert "frank" not in user_ids  # nothing this month


def test_leaderboard_empty(client):
    r = client.get(f"{API}/leaderboard")
    assert r.status_code == 200
    assert r.json() == {"month": "2024-03", "entries": []}


# ── Workout logs ─────────────────────────────────────────────────────────

def test_create_and_list_workout_logs(client, seed):
    seed(User(id="alice", username="alice", email="alice@example.com"))

    r = client.post(
        f"{API}/workout-logs",
        json={
            "user_id": "alice",
            "program_id": "p1",
            "day_id": "d1",
            "date": "2024-03-18T07:30:00+02:00",
            "exercises": [{"name": "Squat", "sets": 3}],
        },
    )
    assert r.status_code == 201
    created = r.json()
    assert created["user_id"] == "alice"
    assert created["date"].startswith("2024-03-18T05:30:00")
    assert created["exercises"] == [{"name": "Squat", "sets": 3}]

    client.post(f"{API}/workout-logs", json={"user_id": "alice", "program_id": "p2", "date": "2024-03-19T08:00:00Z"})

    r = client.get(f"{API}/workout-logs", params={"user_id": "alice"})
    assert r.status_code == 200
    assert [log["program_id"] for log in r.json()] == ["p2", "p1"]  # newest first

    r = client.get(f"{API}/workout-logs", params={"user_id": "alice", "program_id": "p1", "day_id": "d1"})
    assert [log["id"] for log in r.json()] == [created["id"]]

    assert client.get(f"{API}/workout-logs", params={"user_id": "bob"}).json() == []


def test_create_workout_log_unknown_user(client):
    r = client.post(f"{API}/workout-logs", json={"user_id": "ghost", "exercises": []})
    assert r.status_code == 404


def test_create_workout_log_out_of_range_date(client, seed):
    seed(User(id="alice", email="alice@example.com"))
    r = client.post(f"{API}/workout-logs", json={"user_id": "alice", "date": "9999-12-31T23:00:00-05:00"})
    assert r.status_code == 422
    assert r.json()["detail"] == "Workout date out of range"
    assert client.get(f"{API}/workout-logs", params={"user_id": "alice"}).json() == []


def test_create_workout_log_requires_user_id(client):
    r = client.post(f"{API}/workout-logs", json={"exercises": []})
    assert r.status_code == 422


def test_delete_workout_log(client, seed):
    seed(User(id="alice", email="alice@example.com"), User(id="bob", email="bob@example.com"))
    log_id = client.post(
        f"{API}/workout-logs", json={"user_id": "alice", "date": "2024-03-18T10:00:00Z"}
    ).json()["id"]

    # Someone else's log is not found
    r = client.delete(f"{API}/workout-logs/{log_id}", params={"user_id": "bob"})
    assert r.status_code == 404

    r = client.delete(f"{API}/workout-logs/{log_id}", params={"user_id": "alice"})
    assert r.status_code == 204
    assert client.get(f"{API}/workout-logs", params={"user_id": "alice"}).json() == []

    r = client.delete(f"{API}/workout-logs/{log_id}", params={"user_id": "alice"})
    assert r.status_code == 404


def test_logged_workouts_feed_streaks(client, seed):
    seed(User(id="alice", email="alice@example.com"))
    for day in ("2024-03-04", "2024-03-06", "2024-03-11", "2024-03-13"):
        r = client.post(f"{API}/workout-logs", json={"user_id": "alice", "date": f"{day}T18:00:00Z"})
        assert r.status_code == 201

    streak = client.get(f"{API}/streaks/alice").json()
    assert (streak["current_streak"], streak["longest_streak"]) == (2, 2)


# ── User settings ────────────────────────────────────────────────────────

def test_user_settings_roundtrip(client, seed):
    seed(User(id="alice", email="alice@example.com"))

    r = client.get(f"{API}/user-settings/alice")
    assert r.status_code == 200
    assert r.json()["inspiration_quote"] is None

    r = client.put(f"{API}/user-settings/alice", json={"inspiration_quote": "  Keep going.  "})
    assert r.status_code == 200
    assert r.json()["inspiration_quote"] == "Keep going."

    r = client.put(f"{API}/user-settings/alice", json={"inspiration_quote": ""})
    assert r.status_code == 200
    assert r.json()["inspiration_quote"] is None


def test_user_settings_unknown_user(client):
    r = client.put(f"{API}/user-settings/ghost", json={"inspiration_quote": "hi"})
    assert r.status_code == 404
