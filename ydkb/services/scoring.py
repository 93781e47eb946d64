# ydkb/services/scoring.py

from __future__ import annotations
from typing import Iterable, Mapping

# Base scoring knobs
START_SCORE = 100
PENALTY_PER_MISS = 20  # lose 20 points per wrong guess before the right one

# Harder tiers pay more (keys match services.tiers)
TIER_MULTIPLIER = {
    "easy": 1,
    "hard": 2,
    "hof": 3,
}


def compute_score(difficulty: str, attempts: int, correct: bool) -> int:
    """
    - attempts counts every guess including the correct one (1..max).
    - Lost or abandoned games score zero.
    """
    if not correct:
        return 0
    a = max(1, int(attempts or 1))
    base = max(0, START_SCORE - PENALTY_PER_MISS * (a - 1))
    return base * TIER_MULTIPLIER.get(str(difficulty).lower(), 1)


def compute_total_score(rows: Iterable[Mapping]) -> int:
    """Sum of the stored per-game scores."""
    return sum(int(r.get("score") or 0) for r in rows)
