import os
from typing import Any, Optional

from flask import Blueprint, current_app, jsonify, request, session

from . import get_today
from .admin import require_admin
from .services.challenge import (
    ChallengeError,
    ChallengeNotFound,
    build_local_challenge,
    create_challenge,
    fetch_players,
    load_challenge,
    map_players,
    parse_date,
)
from .services.colleges import search_colleges
from .services.daily import load_players_local
from .services.game import (
    clear_session,
    describe,
    load_session,
    save_session,
)
from .services.hints import generate_hint
from .services.images import get_player_image
from .services.leaderboard import all_time_leaderboard, daily_leaderboard, record_result
from .services.scoring import compute_score
from .services.tiers import CHALLENGE_COLUMNS, DEFAULT_MAX_ATTEMPTS, normalize_tier

bp = Blueprint("main", __name__)

# Bundled players for local mode (no database configured)
PLAYERS = load_players_local()


def get_db() -> Any:
    return current_app.extensions.get("supabase")


def _date_param(value: Optional[str]) -> str:
    return parse_date(value, default=get_today())


def _bad_date(value: Optional[str]):
    return jsonify(error=f"Invalid date {value!r}; expected YYYY-MM-DD"), 400


def get_challenge_payload(date_str: str) -> dict:
    """Single source of truth for the daily challenge: DB when configured, seed otherwise."""
    db = get_db()
    if db is None:
        return build_local_challenge(date_str, PLAYERS)
    return load_challenge(db, date_str)


@bp.route("/health")
def health():
    return {"ok": True}


# --- Challenges --------------------------------------------------------------

@bp.get("/api/create-challenge")
@require_admin
def create_challenge_route():
    raw = request.args.get("date")
    try:
        date_str = _date_param(raw)
    except ValueError:
        return _bad_date(raw)

    db = get_db()
    if db is None:
        return jsonify(success=False, error="Database not configured"), 500

    try:
        challenge, created = create_challenge(
            db, date_str, pool_limit=current_app.config["CANDIDATE_POOL_LIMIT"]
        )
    except ChallengeError as e:
        current_app.logger.warning("create-challenge %s failed: %s", date_str, e)
        return jsonify(success=False, error=str(e)), 500
    except Exception as e:
        current_app.logger.exception("create-challenge %s crashed", date_str)
        return jsonify(success=False, error=str(e) or "An error occurred"), 500

    if created:
        body = {"success": True, "message": "Challenge created successfully", "challenge": challenge}
    else:
        body = {"success": False, "message": "Challenge already exists for this date", "challenge": challenge}

    try:
        ids = [challenge.get(c) for c in CHALLENGE_COLUMNS.values()]
        body["players"] = map_players(challenge, fetch_players(db, ids))
    except Exception:
        current_app.logger.exception("create-challenge: player details fetch failed")
        if created:
            body["message"] = "Challenge created but failed to fetch player details"
    return jsonify(body)


@bp.get("/api/daily-challenge")
def daily_challenge():
    raw = request.args.get("date")
    try:
        date_str = _date_param(raw)
    except ValueError:
        return _bad_date(raw)

    try:
        return jsonify(get_challenge_payload(date_str))
    except ChallengeNotFound as e:
        return jsonify(error=str(e)), 404
    except ChallengeError as e:
        current_app.logger.warning("daily-challenge %s: %s", date_str, e)
        return jsonify(error=str(e)), 500
    except Exception as e:
        current_app.logger.exception("daily-challenge %s crashed", date_str)
        return jsonify(error=str(e) or "An error occurred"), 500


@bp.post("/api/daily-challenge/hint")
def daily_challenge_hint():
    data = request.get_json(silent=True) or {}
    guess = data.get("guess")
    answer = data.get("answer")
    if not isinstance(guess, str) or not isinstance(answer, str) or not guess or not answer:
        return jsonify(error="Missing guess or answer"), 400
    return jsonify(hint=generate_hint(guess, answer))


@bp.get("/api/colleges")
def colleges():
    try:
        results = search_colleges(
            request.args.get("search"),
            get_db(),
            limit=current_app.config["COLLEGE_SEARCH_LIMIT"],
            min_length=current_app.config["COLLEGE_SEARCH_MIN_LENGTH"],
        )
    except Exception as e:
        current_app.logger.exception("college search failed")
        return jsonify(error=str(e) or "College search failed"), 500
    return jsonify(results)


@bp.get("/api/player-image")
def player_image():
    name = (request.args.get("name") or "").strip()
    if not name:
        return jsonify(error="Missing name"), 400
    return jsonify(name=name, image=get_player_image(name))


@bp.get("/api/test-connection")
def test_connection():
    env = {
        "supabaseUrl": "Defined" if os.getenv("SUPABASE_URL") else "Missing",
        "supabaseKey": "Defined" if (os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_ANON_KEY")) else "Missing",
    }
    db = get_db()
    if db is None:
        return jsonify(success=False, error="Supabase not configured", env=env), 500

    try:
        p = db.table("players").select("*", count="exact").limit(5).execute()
    except Exception as e:
        current_app.logger.exception("test-connection: players query failed")
        return jsonify(success=False, error=str(e), details="Failed to query players table"), 500

    def probe(table: str, with_count: bool) -> dict:
        try:
            q = db.table(table).select("*", count="exact") if with_count else db.table(table).select("*")
            r = q.limit(5 if with_count else 1).execute()
        except Exception as e:
            current_app.logger.warning("test-connection: %s unreachable: %s", table, e)
            out = {"exists": False, "sample": []}
            if with_count:
                out["count"] = 0
            return out
        out = {"exists": True, "sample": getattr(r, "data", None) or []}
        if with_count:
            out["count"] = getattr(r, "count", None) or 0
        return out

    return jsonify(
        success=True,
        connection="Successful",
        tables={
            "players": {
                "exists": True,
                "count": getattr(p, "count", None) or 0,
                "sample": getattr(p, "data", None) or [],
            },
            "colleges": probe("colleges", True),
            "dailyChallenges": probe("daily_challenges", False),
        },
        env=env,
    )


# --- Game sessions (state lives in the signed session cookie) ----------------

def _max_attempts(tier: str) -> int:
    limits = current_app.config.get("MAX_ATTEMPTS") or DEFAULT_MAX_ATTEMPTS
    return int(limits.get(tier, DEFAULT_MAX_ATTEMPTS[tier]))


def _prune_old_games(date_str: str) -> None:
    # Keep the cookie small: only the active date's sessions are kept
    for k in [k for k in session.keys() if k.startswith("game-") and not k.startswith(f"game-{date_str}-")]:
        session.pop(k, None)


def _game_view(gs, tier: str, player: dict) -> dict:
    out = describe(gs, tier)
    out["player"] = {k: player.get(k) for k in ("id", "name", "position", "team", "jersey_number")}
    if gs.game_complete:
        out["answer"] = player.get("college")
        out["score"] = compute_score(tier, gs.attempts, gs.correct_guess)
    return out


def _load_active_game():
    """(tier, player, GameSession) for the selected difficulty, or None when idle."""
    tier = session.get("difficulty")
    date_str = session.get("game_date")
    if not tier or not date_str:
        return None
    player = get_challenge_payload(date_str)["players"][tier]
    return tier, player, load_session(session, date_str, player["id"], _max_attempts(tier))


def _game_error(e: Exception):
    if isinstance(e, ChallengeNotFound):
        return jsonify(error=str(e)), 404
    if isinstance(e, ChallengeError):
        current_app.logger.warning("game: %s", e)
    else:
        current_app.logger.exception("game request crashed")
    return jsonify(error=str(e) or "An error occurred"), 500


@bp.get("/api/game")
def game_state():
    try:
        active = _load_active_game()
    except Exception as e:
        return _game_error(e)
    if active is None:
        return jsonify(describe(None))
    tier, player, gs = active
    return jsonify(_game_view(gs, tier, player))


@bp.post("/api/game/difficulty")
def game_select_difficulty():
    data = request.get_json(silent=True) or {}
    tier = normalize_tier(data.get("difficulty"))
    if not tier:
        return jsonify(error="difficulty must be one of: easy, hard, hof"), 400
    raw = data.get("date")
    try:
        date_str = _date_param(raw)
    except ValueError:
        return _bad_date(raw)

    try:
        player = get_challenge_payload(date_str)["players"][tier]
    except Exception as e:
        return _game_error(e)

    _prune_old_games(date_str)
    session.permanent = True
    session["difficulty"] = tier
    session["game_date"] = date_str
    gs = load_session(session, date_str, player["id"], _max_attempts(tier))
    save_session(session, gs)
    return jsonify(_game_view(gs, tier, player))


@bp.post("/api/game/guess")
def game_guess():
    data = request.get_json(silent=True) or {}
    guess = data.get("guess")
    if not isinstance(guess, str) or not guess.strip():
        return jsonify(error="Missing guess"), 400

    try:
        active = _load_active_game()
    except Exception as e:
        return _game_error(e)
    if active is None:
        return jsonify(error="Select a difficulty first"), 400
    tier, player, gs = active

    before = gs.attempts
    correct = gs.make_guess(guess, player.get("college") or "")
    save_session(session, gs)

    out = _game_view(gs, tier, player)
    out["correct"] = correct
    out["accepted"] = gs.attempts > before
    return jsonify(out)


@bp.post("/api/game/give-up")
def game_give_up():
    try:
        active = _load_active_game()
    except Exception as e:
        return _game_error(e)
    if active is None:
        return jsonify(error="Select a difficulty first"), 400
    tier, player, gs = active
    gs.give_up()
    save_session(session, gs)
    return jsonify(_game_view(gs, tier, player))


@bp.post("/api/game/reset")
def game_reset():
    try:
        active = _load_active_game()
    except Exception as e:
        return _game_error(e)
    if active is None:
        return jsonify(describe(None))
    tier, player, gs = active
    clear_session(session, gs.date, gs.player_id)
    gs.reset()
    return jsonify(_game_view(gs, tier, player))


# --- Results & leaderboards --------------------------------------------------

@bp.post("/api/results")
def post_result():
    data = request.get_json(silent=True) or {}
    raw = data.get("date")
    try:
        date_str = _date_param(raw)
    except ValueError:
        return _bad_date(raw)

    db = get_db()
    if db is None:
        return jsonify(error="Database not configured"), 500

    tier = normalize_tier(data.get("difficulty"))
    try:
        row = record_result(
            db,
            username=data.get("username") or "",
            date_str=date_str,
            difficulty=data.get("difficulty") or "",
            attempts=data.get("attempts", 0),
            correct=bool(data.get("correct")),
            gave_up=bool(data.get("gave_up")),
            max_attempts=_max_attempts(tier) if tier else None,
        )
    except (ValueError, TypeError) as e:
        return jsonify(error=str(e)), 400
    except Exception as e:
        current_app.logger.exception("saving result failed")
        return jsonify(error=str(e) or "Failed to save result"), 500
    return jsonify(success=True, result=row)


@bp.get("/api/leaderboard")
def leaderboard():
    raw = request.args.get("date")
    try:
        date_str = _date_param(raw)
    except ValueError:
        return _bad_date(raw)

    rows = []
    db = get_db()
    if db is not None:
        try:
            rows = daily_leaderboard(db, date_str)
        except Exception:
            current_app.logger.exception("Leaderboard query failed")
            return jsonify(error="Leaderboard query failed"), 500
    return jsonify(date=date_str, rows=rows)


@bp.get("/api/leaderboard/all-time")
def leaderboard_all_time():
    rows = []
    db = get_db()
    if db is not None:
        try:
            rows = all_time_leaderboard(db)
        except Exception:
            current_app.logger.exception("All-time leaderboard query failed")
            return jsonify(error="All-time leaderboard query failed"), 500
    return jsonify(rows=rows)
