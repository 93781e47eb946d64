# ydkb/services/daily.py
import json
import os
import random
from datetime import date
from typing import Any

DATA_DIR = os.path.join(os.path.dirname(__file__), "..", "data")
PLAYERS_SEED_PATH = os.path.join(DATA_DIR, "players_seed.json")
COLLEGES_SEED_PATH = os.path.join(DATA_DIR, "colleges_seed.json")


def load_players_local() -> list[dict[str, Any]]:
    with open(PLAYERS_SEED_PATH, "r", encoding="utf-8") as f:
        players = json.load(f)
    # Drop rows the game can't use (no college to guess)
    return [p for p in (_normalize_player(p) for p in players) if p.get("college")]


def load_colleges_local() -> list[dict[str, Any]]:
    with open(COLLEGES_SEED_PATH, "r", encoding="utf-8") as f:
        return json.load(f)


def rng_for_date(d: date) -> random.Random:
    """Deterministic RNG per calendar date."""
    return random.Random(d.toordinal())


# --- helpers -----------------------------------------------------------------

def _normalize_player(player: dict) -> dict:
    """
    Return a shallow copy of player with:
    - college trimmed
    - ppg filled from points_per_game when only the alias is present
    """
    out = dict(player)  # shallow copy
    out["college"] = (out.get("college") or "").strip()
    if out.get("ppg") is None and out.get("points_per_game") is not None:
        out["ppg"] = out["points_per_game"]
    return out
