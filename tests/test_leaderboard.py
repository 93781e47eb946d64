import pytest

from ydkb.services.leaderboard import all_time_leaderboard, daily_leaderboard, record_result
from ydkb.services.scoring import compute_score, compute_total_score

from conftest import FakeSupabase


def test_compute_score():
    assert compute_score("easy", 1, True) == 100
    assert compute_score("easy", 3, True) == 60
    assert compute_score("hard", 2, True) == 160
    assert compute_score("hof", 1, True) == 300
    assert compute_score("hof", 3, False) == 0
    assert compute_score("easy", 9, True) == 0


def test_compute_total_score():
    assert compute_total_score([{"score": 100}, {"score": 60}, {"score": None}]) == 160


def test_record_result_upserts_per_day_user_and_tier():
    db = FakeSupabase()
    record_result(db, "hoopsfan", "2024-02-15", "Easy", attempts=3, correct=True)
    row = record_result(db, "hoopsfan", "2024-02-15", "easy", attempts=1, correct=True)

    assert row["score"] == 100
    assert len(db.tables["results"]) == 1
    assert db.tables["results"][0]["attempts"] == 1


def test_record_result_give_up_scores_zero():
    row = record_result(FakeSupabase(), "hoopsfan", "2024-02-15", "hof", attempts=1, correct=True, gave_up=True)
    assert row["correct"] is False
    assert row["score"] == 0


@pytest.mark.parametrize("username,difficulty,attempts", [
    ("", "easy", 1),
    ("x" * 40, "easy", 1),
    ("hoopsfan", "medium", 1),
    ("hoopsfan", "easy", -1),
])
def test_record_result_validation(username, difficulty, attempts):
    with pytest.raises(ValueError):
        record_result(FakeSupabase(), username, "2024-02-15", difficulty, attempts=attempts, correct=True)


def _db_with_results():
    db = FakeSupabase()
    record_result(db, "alice", "2024-02-15", "easy", 1, True)   # 100
    record_result(db, "alice", "2024-02-15", "hard", 4, False)  # 0
    record_result(db, "bob", "2024-02-15", "hof", 2, True)      # 240
    record_result(db, "bob", "2024-02-14", "easy", 5, False)    # 0
    record_result(db, "carol", "2024-02-14", "easy", 2, True)   # 80
    return db


def test_daily_leaderboard():
    rows = daily_leaderboard(_db_with_results(), "2024-02-15")
    assert rows == [
        {"username": "bob", "score": 240, "solved": ["hof"], "rank": 1},
        {"username": "alice", "score": 100, "solved": ["easy"], "rank": 2},
    ]


def test_all_time_leaderboard():
    rows = all_time_leaderboard(_db_with_results())
    assert [(r["username"], r["total_score"], r["games_played"], r["win_rate"]) for r in rows] == [
        ("bob", 240, 2, 50),
        ("alice", 100, 2, 50),
        ("carol", 80, 1, 100),
    ]
    assert [r["rank"] for r in rows] == [1, 2, 3]


def test_results_and_leaderboard_routes(client):
    r = client.post("/api/results", json={
        "username": "alice", "date": "2024-02-15", "difficulty": "hard", "attempts": 2, "correct": True,
    })
    assert r.status_code == 200
    assert r.get_json()["result"]["score"] == 160

    board = client.get("/api/leaderboard?date=2024-02-15").get_json()
    assert board["date"] == "2024-02-15"
    assert board["rows"][0]["username"] == "alice"

    alltime = client.get("/api/leaderboard/all-time").get_json()
    assert alltime["rows"][0]["total_score"] == 160


def test_results_route_rejects_bad_input(client):
    r = client.post("/api/results", json={"username": "alice", "difficulty": "medium", "attempts": 1})
    assert r.status_code == 400
    r = client.post("/api/results", json={"username": "alice", "difficulty": "easy", "attempts": "many"})
    assert r.status_code == 400


def test_leaderboard_local_mode_is_empty(local_client):
    assert local_client.get("/api/leaderboard?date=2024-02-15").get_json()["rows"] == []
    assert local_client.get("/api/leaderboard/all-time").get_json() == {"rows": []}


def test_record_result_rejects_attempts_past_the_budget():
    with pytest.raises(ValueError):
        record_result(FakeSupabase(), "hoopsfan", "2024-02-15", "hof", attempts=4, correct=True, max_attempts=3)
    row = record_result(FakeSupabase(), "hoopsfan", "2024-02-15", "hof", attempts=3, correct=True, max_attempts=3)
    assert row["score"] == 180


def test_record_result_win_needs_an_attempt():
    with pytest.raises(ValueError):
        record_result(FakeSupabase(), "hoopsfan", "2024-02-15", "hof", attempts=0, correct=True)


def test_results_route_caps_attempts_per_tier(client):
    r = client.post("/api/results", json={
        "username": "alice", "date": "2024-02-15", "difficulty": "Hall of Fame", "attempts": 4, "correct": True,
    })
    assert r.status_code == 400
    r = client.post("/api/results", json={
        "username": "alice", "date": "2024-02-15", "difficulty": "easy", "attempts": 5, "correct": False,
    })
    assert r.status_code == 200
    assert r.get_json()["result"]["score"] == 0
