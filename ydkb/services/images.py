# ydkb/services/images.py
"""Player headshots from TheSportsDB (free tier), with a few pinned images."""
from __future__ import annotations

import logging
from typing import Dict, Optional

import requests

log = logging.getLogger(__name__)

SEARCH_URL = "https://www.thesportsdb.com/api/v1/json/3/searchplayers.php"
PLACEHOLDER_IMAGE = "https://www.thesportsdb.com/images/media/player/thumb/placeholder.png"

# Pinned images for common players (skips the API call)
FALLBACK_IMAGES: Dict[str, str] = {
    "Randall Cunningham": "https://www.thesportsdb.com/images/media/player/thumb/7i1hqx1520188106.jpg",
    "Tom Brady": "https://www.thesportsdb.com/images/media/player/thumb/ot0n9t1582135052.jpg",
    "Patrick Mahomes": "https://www.thesportsdb.com/images/media/player/thumb/9rik8v1579611775.jpg",
    "Jerry Rice": "https://www.thesportsdb.com/images/media/player/thumb/6vz9oy1520188106.jpg",
    "Peyton Manning": "https://www.thesportsdb.com/images/media/player/thumb/ynv1uf1520188106.jpg",
}


def get_player_image(name: str, timeout: float = 5.0) -> Optional[str]:
    """
    Image URL for a player name.
    - pinned image if we have one
    - else the NFL match (or first hit) from TheSportsDB
    - None when rate limited, placeholder on any other miss
    """
    name = (name or "").strip()
    if not name:
        return None
    if name in FALLBACK_IMAGES:
        return FALLBACK_IMAGES[name]

    try:
        resp = requests.get(SEARCH_URL, params={"p": name}, timeout=timeout)
        if resp.status_code == 429:
            log.warning("TheSportsDB rate limit hit looking up %r", name)
            return None
        if not (200 <= resp.status_code < 300):
            log.warning("TheSportsDB returned HTTP %s for %r", resp.status_code, name)
            return PLACEHOLDER_IMAGE
        data = resp.json() or {}
    except requests.Timeout:
        log.warning("TheSportsDB lookup timed out for %r", name)
        return PLACEHOLDER_IMAGE
    except (requests.RequestException, ValueError) as e:
        log.warning("TheSportsDB lookup failed for %r: %s", name, e)
        return PLACEHOLDER_IMAGE

    hits = data.get("player") or []
    nfl = next(
        (p for p in hits if p.get("strSport") == "American Football" or "NFL" in (p.get("strTeam") or "")),
        None,
    )
    if nfl and nfl.get("strThumb"):
        return nfl["strThumb"]
    if hits and hits[0].get("strThumb"):
        return hits[0]["strThumb"]
    return PLACEHOLDER_IMAGE
