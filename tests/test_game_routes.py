import json

import pytest

DAY = "2024-02-15"


@pytest.fixture
def seeded(fake_db):
    fake_db.tables["daily_challenges"] = [
        {"id": 5, "challenge_date": DAY, "easy_player_id": 1, "hard_player_id": 10, "hof_player_id": 11},
    ]
    return fake_db


def _start(client, difficulty="easy"):
    return client.post("/api/game/difficulty", json={"difficulty": difficulty, "date": DAY})


def test_idle_until_a_difficulty_is_picked(client):
    assert client.get("/api/game").get_json() == {"status": "idle", "difficulty": None}


def test_guess_requires_a_difficulty(client):
    r = client.post("/api/game/guess", json={"guess": "Rice"})
    assert r.status_code == 400


def test_unknown_difficulty(client, seeded):
    r = client.post("/api/game/difficulty", json={"difficulty": "medium", "date": DAY})
    assert r.status_code == 400


def test_no_challenge_for_the_date(client):
    r = _start(client)
    assert r.status_code == 404


def test_select_difficulty_starts_playing(client, seeded):
    body = _start(client, "easy").get_json()
    assert body["status"] == "playing"
    assert body["difficulty"] == "easy"
    assert body["maxAttempts"] == 5
    assert body["attemptsRemaining"] == 5
    assert body["player"]["name"] == "Patrick Mahomes"
    assert "college" not in body["player"]
    assert "answer" not in body


def test_hall_of_fame_budget(client, seeded):
    body = _start(client, "Hall of Fame").get_json()
    assert body["difficulty"] == "hof"
    assert body["maxAttempts"] == 3
    assert body["player"]["id"] == 11


def test_wrong_then_right(client, seeded):
    _start(client)
    wrong = client.post("/api/game/guess", json={"guess": "Baylor University"}).get_json()
    assert wrong["correct"] is False
    assert wrong["accepted"] is True
    assert wrong["attempts"] == 1
    assert wrong["feedback"] == ["You're on the right track with a university."]
    assert wrong["status"] == "playing"

    right = client.post("/api/game/guess", json={"guess": "texas tech university"}).get_json()
    assert right["correct"] is True
    assert right["status"] == "won"
    assert right["gameComplete"] is True
    assert right["answer"] == "Texas Tech University"
    assert right["score"] == 80

    # state survives across requests
    assert client.get("/api/game").get_json() == {k: v for k, v in right.items() if k not in ("correct", "accepted")}


def test_out_of_attempts(client, seeded):
    _start(client, "hof")
    for guess in ("Rice", "Tulane", "Baylor"):
        body = client.post("/api/game/guess", json={"guess": guess}).get_json()
    assert body["status"] == "lost"
    assert body["attempts"] == 3
    assert body["answer"] == "Minnesota State University, Mankato"
    assert body["score"] == 0

    late = client.post("/api/game/guess", json={"guess": "Minnesota State University, Mankato"}).get_json()
    assert late["accepted"] is False
    assert late["status"] == "lost"


def test_give_up(client, seeded):
    _start(client, "hard")
    client.post("/api/game/guess", json={"guess": "Rice"})
    body = client.post("/api/game/give-up").get_json()
    assert body["status"] == "lost"
    assert body["gaveUp"] is True
    assert body["attemptsRemaining"] == 3
    assert body["answer"] == "Eastern Washington University"


def test_reset(client, seeded):
    _start(client)
    client.post("/api/game/guess", json={"guess": "Rice"})
    body = client.post("/api/game/reset").get_json()
    assert body["attempts"] == 0
    assert body["guesses"] == []
    assert client.get("/api/game").get_json()["attempts"] == 0


def test_state_is_stored_under_the_date_and_player_key(client, seeded):
    _start(client)
    client.post("/api/game/guess", json={"guess": "Rice"})
    with client.session_transaction() as sess:
        stored = json.loads(sess["game-2024-02-15-1"])
    assert stored == {
        "attempts": 1,
        "correctGuess": False,
        "gaveUp": False,
        "guesses": ["Rice"],
        "gameComplete": False,
        "feedback": ["That's not it. Try another college."],
    }


def test_switching_tiers_keeps_each_session(client, seeded):
    _start(client, "easy")
    client.post("/api/game/guess", json={"guess": "Rice"})
    _start(client, "hard")
    assert client.get("/api/game").get_json()["attempts"] == 0
    back = _start(client, "easy").get_json()
    assert back["attempts"] == 1
    assert back["guesses"] == ["Rice"]


def test_missing_guess(client, seeded):
    _start(client)
    assert client.post("/api/game/guess", json={"guess": "  "}).status_code == 400


def test_shared_hard_and_hof_player_stays_within_each_budget(client, seeded):
    seeded.tables["daily_challenges"][0]["hof_player_id"] = 10
    _start(client, "hard")
    for guess in ("Rice", "Tulane", "Baylor"):
        body = client.post("/api/game/guess", json={"guess": guess}).get_json()
    assert body["status"] == "playing"
    assert body["attemptsRemaining"] == 1

    hof = _start(client, "hof").get_json()
    assert hof["player"]["id"] == 10
    assert hof["attempts"] <= hof["maxAttempts"] == 3
    assert hof["status"] == "lost"
    assert hof["attemptsRemaining"] == 0

    late = client.post("/api/game/guess", json={"guess": "Eastern Washington University"}).get_json()
    assert late["accepted"] is False
