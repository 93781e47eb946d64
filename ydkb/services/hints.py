from __future__ import annotations
from typing import Dict, Optional

# Placeholder geography: only a handful of schools are mapped so far
COLLEGE_REGIONS: Dict[str, str] = {
    "harvard university": "northeast",
    "stanford university": "west",
    "university of michigan": "midwest",
}

CORRECT_FEEDBACK = "Correct!"
DEFAULT_HINT = "That's not it. Try another college."


def _clean(s: Optional[str]) -> str:
    return (s or "").strip().lower()


def is_correct_guess(guess: Optional[str], answer: Optional[str]) -> bool:
    """
    Case-insensitive exact match. No punctuation or abbreviation handling:
    'Ohio State' does NOT match 'Ohio State University'.
    """
    g, a = _clean(guess), _clean(answer)
    return bool(g) and g == a


def generate_hint(guess: str, answer: str) -> str:
    """Canned feedback for a wrong guess, based on plain substring checks."""
    g, a = _clean(guess), _clean(answer)

    if "university" in g and "university" in a:
        return "You're on the right track with a university."

    if "college" in g and "college" in a:
        return "You're on the right track with a college."

    g_region = COLLEGE_REGIONS.get(g)
    a_region = COLLEGE_REGIONS.get(a)
    if g_region and a_region:
        if g_region == a_region:
            return "You're looking in the right region!"
        return "Try looking in a different region."

    return DEFAULT_HINT
