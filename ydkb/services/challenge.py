# ydkb/services/challenge.py
"""Daily challenge generation and loading.

One `daily_challenges` row per date, holding one player id per tier.
Everything here talks to the Supabase client passed in by the caller and
raises ChallengeError subclasses; the HTTP layer turns those into JSON errors.
"""
from __future__ import annotations

import logging
import random
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .daily import rng_for_date
from .tiers import CHALLENGE_COLUMNS, DIFFICULTY_LABELS

log = logging.getLogger(__name__)

QUESTION = "Which college did this player attend?"
PLAYER_FIELDS = "id, name, position, college, difficulty, team, jersey_number, ppg, points_per_game"
TIER_ORDER = ("easy", "hard", "hof")


class ChallengeError(RuntimeError):
    """Raised when a challenge can't be created or loaded."""


class EmptyTierError(ChallengeError):
    def __init__(self, tier: str, detail: Optional[str] = None):
        self.tier = tier
        label = DIFFICULTY_LABELS.get(tier, tier)
        super().__init__(f"Failed to fetch {label} players: {detail or 'No players found'}")


class ChallengeNotFound(ChallengeError):
    def __init__(self, date_str: str):
        self.date = date_str
        super().__init__("No challenge found for this date")


class MissingPlayersError(ChallengeError):
    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__("Missing player data for challenge")


def parse_date(value: Optional[str], default: Optional[date] = None) -> str:
    """Validate YYYY-MM-DD (or fall back to `default`). Raises ValueError."""
    value = (value or "").strip()
    if not value:
        if default is None:
            raise ValueError("Missing date")
        return default.isoformat()
    return datetime.strptime(value, "%Y-%m-%d").date().isoformat()


def _rows(resp: Any) -> List[dict]:
    return getattr(resp, "data", None) or []


# --- Generator ---------------------------------------------------------------

def get_challenge_row(client: Any, date_str: str) -> Optional[dict]:
    resp = (
        client.table("daily_challenges")
        .select("*")
        .eq("challenge_date", date_str)
        .limit(1)
        .execute()
    )
    data = _rows(resp)
    return data[0] if data else None


def fetch_candidate_ids(client: Any, tier: str, limit: int = 100) -> List[Any]:
    """Up to `limit` player ids for a tier; EmptyTierError when none come back."""
    try:
        resp = (
            client.table("players")
            .select("id")
            .eq("difficulty", DIFFICULTY_LABELS[tier])
            .limit(limit)
            .execute()
        )
    except Exception as e:
        raise EmptyTierError(tier, str(e)) from e
    ids = [r["id"] for r in _rows(resp) if r.get("id") is not None]
    if not ids:
        raise EmptyTierError(tier)
    return ids


def pick_tier_players(easy_ids: List[Any], hard_ids: List[Any], rng: Any = None) -> Dict[str, Any]:
    """
    One uniform pick per pool. Hall of Fame draws from the Hard pool minus the
    Hard pick; with a single Hard candidate it reuses that player.
    """
    if not easy_ids:
        raise EmptyTierError("easy")
    if not hard_ids:
        raise EmptyTierError("hard")
    rng = rng or random

    easy = rng.choice(easy_ids)
    hard = rng.choice(hard_ids)
    hof_pool = [pid for pid in hard_ids if pid != hard]
    hof = rng.choice(hof_pool) if hof_pool else hard
    return {"easy": easy, "hard": hard, "hof": hof}


def create_challenge(
    client: Any,
    date_str: str,
    pool_limit: int = 100,
    rng: Any = None,
) -> Tuple[dict, bool]:
    """
    Ensure a challenge exists for `date_str`.
    Returns (row, created). An existing row is returned untouched.
    """
    try:
        existing = get_challenge_row(client, date_str)
    except Exception as e:
        raise ChallengeError(f"Failed to create challenge: {e}") from e
    if existing:
        return existing, False

    easy_ids = fetch_candidate_ids(client, "easy", pool_limit)
    hard_ids = fetch_candidate_ids(client, "hard", pool_limit)
    picks = pick_tier_players(easy_ids, hard_ids, rng)

    row = {"challenge_date": date_str}
    for tier, column in CHALLENGE_COLUMNS.items():
        row[column] = picks[tier]

    try:
        resp = client.table("daily_challenges").insert(row).execute()
    except Exception as e:
        # Lost a race with another writer? The unique date constraint wins.
        try:
            winner = get_challenge_row(client, date_str)
        except Exception:
            winner = None
        if winner:
            log.info("challenge for %s created concurrently; reusing row %s", date_str, winner.get("id"))
            return winner, False
        raise ChallengeError(f"Failed to create challenge: {e}") from e

    data = _rows(resp)
    created = data[0] if data else get_challenge_row(client, date_str)
    if not created:
        raise ChallengeError("Failed to create challenge: insert returned no row")
    log.info("created challenge for %s: %s", date_str, picks)
    return created, True


def create_challenges_for_range(
    client: Any,
    start: date,
    days: int = 7,
    pool_limit: int = 100,
) -> dict:
    """Create challenges for the `days` dates after `start`; existing ones count as verified."""
    created = existing = 0
    errors: List[dict] = []
    for i in range(1, days + 1):
        d = (start + timedelta(days=i)).isoformat()
        try:
            _, was_created = create_challenge(client, d, pool_limit)
        except ChallengeError as e:
            log.warning("create challenge for %s failed: %s", d, e)
            errors.append({"date": d, "error": str(e)})
            continue
        if was_created:
            created += 1
        else:
            existing += 1
    return {
        "created": created,
        "existing": existing,
        "errors": errors,
        "message": f"Created/verified {created + existing} challenges. Errors: {len(errors)}",
    }


# --- Reader ------------------------------------------------------------------

def fetch_players(client: Any, ids: Iterable[Any]) -> List[dict]:
    ids = sorted({i for i in ids if i is not None})
    if not ids:
        return []
    resp = client.table("players").select(PLAYER_FIELDS).in_("id", ids).execute()
    return _rows(resp)


def map_players(challenge: dict, players: List[dict]) -> Dict[str, dict]:
    """Tier key -> player record, for whichever players were found."""
    by_id = {p["id"]: p for p in players}
    out: Dict[str, dict] = {}
    for tier, column in CHALLENGE_COLUMNS.items():
        p = by_id.get(challenge.get(column))
        if p:
            out[tier] = p
    return out


def _option(player: dict) -> dict:
    return {
        "id": player["id"],
        "name": player.get("name"),
        "team": player.get("team"),
        "position": player.get("position"),
        "jersey_number": player.get("jersey_number"),
        "ppg": player.get("ppg") or player.get("points_per_game"),
        "college": player.get("college"),
    }


def build_payload(date_str: str, challenge_id: Any, player_map: Dict[str, dict]) -> dict:
    """Shape the question / options / correctOption response for a date."""
    missing = [t for t in TIER_ORDER if t not in player_map]
    if missing:
        raise MissingPlayersError(missing)

    # Hall of Fame may share the Hard player; one option per distinct player
    options: List[dict] = []
    seen = set()
    for tier in TIER_ORDER:
        p = player_map[tier]
        if p["id"] not in seen:
            seen.add(p["id"])
            options.append(_option(p))

    # Same order every time a given date is loaded
    rng_for_date(date.fromisoformat(date_str)).shuffle(options)

    subject_id = player_map["easy"]["id"]
    correct = next(i for i, o in enumerate(options) if o["id"] == subject_id)

    return {
        "date": date_str,
        "challenge_id": challenge_id,
        "players": {t: player_map[t] for t in TIER_ORDER},
        "question": QUESTION,
        "options": options,
        "correctOption": correct,
    }


def load_challenge(client: Any, date_str: str) -> dict:
    challenge = get_challenge_row(client, date_str)
    if not challenge:
        raise ChallengeNotFound(date_str)
    players = fetch_players(client, [challenge.get(c) for c in CHALLENGE_COLUMNS.values()])
    return build_payload(date_str, challenge.get("id"), map_players(challenge, players))


def build_local_challenge(date_str: str, players: List[dict]) -> dict:
    """Deterministic challenge from the bundled seed (no database configured)."""
    easy_ids = [p["id"] for p in players if p.get("difficulty") == DIFFICULTY_LABELS["easy"]]
    hard_ids = [p["id"] for p in players if p.get("difficulty") == DIFFICULTY_LABELS["hard"]]
    picks = pick_tier_players(easy_ids, hard_ids, rng_for_date(date.fromisoformat(date_str)))
    by_id = {p["id"]: p for p in players}
    return build_payload(date_str, None, {t: by_id[pid] for t, pid in picks.items()})


# --- Admin -------------------------------------------------------------------

def list_recent_challenges(client: Any, limit: int = 10) -> List[dict]:
    """Newest challenges first, each with easy_player / hard_player / hof_player attached."""
    resp = (
        client.table("daily_challenges")
        .select("*")
        .order("challenge_date", desc=True)
        .limit(limit)
        .execute()
    )
    rows = _rows(resp)
    ids = [r.get(c) for r in rows for c in CHALLENGE_COLUMNS.values()]
    by_id = {p["id"]: p for p in fetch_players(client, ids)}

    out = []
    for r in rows:
        item = dict(r)
        for tier, column in CHALLENGE_COLUMNS.items():
            item[f"{tier}_player"] = by_id.get(r.get(column))
        out.append(item)
    return out


def delete_challenge(client: Any, challenge_id: int) -> bool:
    """True when a row was removed."""
    resp = client.table("daily_challenges").delete().eq("id", challenge_id).execute()
    return bool(_rows(resp))
