# ydkb/services/leaderboard.py
from __future__ import annotations

from collections import defaultdict
from datetime import datetime as _dt, timezone as _tz
from typing import Any, List, Optional

from .scoring import compute_score
from .tiers import normalize_tier

MAX_USERNAME_LEN = 32


def record_result(
    client: Any,
    username: str,
    date_str: str,
    difficulty: str,
    attempts: int,
    correct: bool,
    gave_up: bool = False,
    max_attempts: Optional[int] = None,
) -> dict:
    """
    Upsert one finished game; the score is always computed here, never trusted from clients.
    A win needs at least one attempt, and attempts past `max_attempts` are rejected.
    """
    name = (username or "").strip()
    if not name or len(name) > MAX_USERNAME_LEN:
        raise ValueError(f"username must be 1-{MAX_USERNAME_LEN} characters")
    tier = normalize_tier(difficulty)
    if not tier:
        raise ValueError(f"Unknown difficulty: {difficulty!r}")
    attempts = int(attempts)
    if attempts < 0:
        raise ValueError("attempts must be >= 0")
    if max_attempts is not None and attempts > max_attempts:
        raise ValueError(f"attempts must be <= {max_attempts} for {tier}")
    won = bool(correct) and not gave_up
    if won and attempts < 1:
        raise ValueError("a correct guess needs at least one attempt")

    row = {
        "challenge_date": date_str,
        "username": name,
        "difficulty": tier,
        "attempts": attempts,
        "correct": won,
        "gave_up": bool(gave_up),
        "score": compute_score(tier, attempts, won),
        "updated_at": _dt.now(_tz.utc).isoformat(),
    }
    client.table("results").upsert(row, on_conflict="challenge_date,username,difficulty").execute()
    return row


def daily_leaderboard(client: Any, date_str: str, limit: int = 50) -> List[dict]:
    """Per-user score for one date (summed across tiers), highest first."""
    res = (
        client.table("results")
        .select("username,difficulty,score,correct")
        .eq("challenge_date", date_str)
        .execute()
    )
    data = getattr(res, "data", None) or []

    totals = defaultdict(int)
    solved = defaultdict(list)
    for r in data:
        name = r.get("username")
        if not name:
            continue
        totals[name] += int(r.get("score") or 0)
        if r.get("correct"):
            solved[name].append(r.get("difficulty"))

    rows = [
        {"username": name, "score": total, "solved": sorted(solved[name])}
        for name, total in totals.items()
    ]
    rows.sort(key=lambda x: (-x["score"], x["username"].lower()))
    return [dict(r, rank=i) for i, r in enumerate(rows[:limit], start=1)]


def all_time_leaderboard(client: Any, limit: int = 50) -> List[dict]:
    """Total score per user plus games played and win rate (percent)."""
    res = client.table("results").select("username,score,correct").execute()
    data = getattr(res, "data", None) or []

    agg = defaultdict(lambda: {"total_score": 0, "games_played": 0, "wins": 0})
    for r in data:
        name = r.get("username")
        if not name:
            continue
        a = agg[name]
        a["total_score"] += int(r.get("score") or 0)
        a["games_played"] += 1
        a["wins"] += 1 if r.get("correct") else 0

    rows = [
        {
            "username": name,
            "total_score": a["total_score"],
            "games_played": a["games_played"],
            "win_rate": round(100 * a["wins"] / a["games_played"]),
        }
        for name, a in agg.items()
    ]
    rows.sort(key=lambda x: (-x["total_score"], x["username"].lower()))
    return [dict(r, rank=i) for i, r in enumerate(rows[:limit], start=1)]
