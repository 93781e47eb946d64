# ydkb/services/colleges.py
from __future__ import annotations
from typing import Any, Iterable, List, Optional
import re

from rapidfuzz import fuzz

from .daily import load_colleges_local

# PostgREST ilike wildcards; user input must not smuggle its own
_WILDCARD_RE = re.compile(r"[%_*]")


def clean_term(term: Optional[str]) -> str:
    """Trim and collapse whitespace; drop SQL wildcard characters."""
    s = _WILDCARD_RE.sub("", term or "")
    return " ".join(s.split())


def rank_colleges(term: str, colleges: Iterable[dict], limit: int = 10) -> List[dict]:
    """
    Keep substring matches (case-insensitive), best RapidFuzz score first,
    ties by name.
    """
    t = term.lower()
    hits = [c for c in colleges if t in (c.get("name") or "").lower()]
    hits.sort(key=lambda c: (-fuzz.WRatio(t, c["name"].lower()), c["name"]))
    return [{"id": c.get("id"), "name": c["name"]} for c in hits[:limit]]


def search_colleges(
    term: Optional[str],
    client: Any = None,
    limit: int = 10,
    min_length: int = 2,
) -> List[dict]:
    """Colleges whose name contains `term`; empty for short terms."""
    t = clean_term(term)
    if len(t) < min_length:
        return []

    if client is None:
        return rank_colleges(t, load_colleges_local(), limit)

    # Over-fetch so ranking has something to choose from
    resp = (
        client.table("colleges")
        .select("id, name")
        .ilike("name", f"%{t}%")
        .order("name")
        .limit(limit * 5)
        .execute()
    )
    rows = getattr(resp, "data", None) or []
    return rank_colleges(t, rows, limit)
