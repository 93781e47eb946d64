# ydkb/services/tiers.py
from __future__ import annotations
from typing import Dict, Optional

# Tier key -> value stored in players.difficulty
DIFFICULTY_LABELS: Dict[str, str] = {
    "easy": "Easy",
    "hard": "Hard",
    "hof": "Hall of Fame",
}

# Tier key -> daily_challenges column
CHALLENGE_COLUMNS: Dict[str, str] = {
    "easy": "easy_player_id",
    "hard": "hard_player_id",
    "hof": "hof_player_id",
}

# Guesses allowed per tier (all keys MUST be lowercase and match the API)
DEFAULT_MAX_ATTEMPTS: Dict[str, int] = {
    "easy": 5,
    "hard": 4,
    "hof": 3,
}

# Accepted spellings from clients and CSVs
_ALIASES = {
    "easy": "easy", "e": "easy",
    "hard": "hard", "h": "hard",
    "hof": "hof", "hall of fame": "hof", "hall-of-fame": "hof", "halloffame": "hof",
    "hall_of_fame": "hof",
}


def normalize_tier(value: Optional[str]) -> Optional[str]:
    """Map 'Easy', 'HOF', 'Hall of Fame', ... to a tier key; None if unknown."""
    if not value:
        return None
    return _ALIASES.get(str(value).strip().lower())
