# tools/build_seed.py
# Build the bundled player/college seeds from a roster CSV, and optionally
# push them to Supabase.
#
# Outputs (default --out-dir ydkb/data):
#   players_seed.json
#   colleges_seed.json
#
# Usage:
#   python tools/build_seed.py roster.csv
#   python tools/build_seed.py roster.csv --upload     # needs SUPABASE_URL + SUPABASE_SERVICE_ROLE_KEY

from __future__ import annotations

import argparse
import json
import os
import re
from typing import Any, Dict, List, Optional

import pandas as pd

from ydkb.services.tiers import DIFFICULTY_LABELS, normalize_tier

DEFAULT_OUT_DIR = os.path.join(os.path.dirname(__file__), "..", "ydkb", "data")

# ---------------- Column alias maps ----------------
ALIASES = {
    "id":            ["id", "player_id"],
    "name":          ["name", "player_name", "full_name", "display_name"],
    "college":       ["college", "school", "college_name"],
    "position":      ["position", "pos"],
    "difficulty":    ["difficulty", "tier", "level"],
    "team":          ["team", "team_name", "recent_team"],
    "jersey_number": ["jersey_number", "jersey", "number"],
    "ppg":           ["ppg", "points_per_game"],
}
PLAYER_COLUMNS = list(ALIASES.keys())

_JUNK_COLLEGES = {"", "n/a", "na", "none", "null", "-", "unknown"}


def ensure_canonical_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Ensure df has canonical columns by copying from first available alias."""
    cols = set(df.columns)
    for canon, options in ALIASES.items():
        if canon in cols:
            continue
        for opt in options:
            if opt in cols:
                df[canon] = df[opt]
                break
        else:
            df[canon] = pd.NA
    return df


def clean_college(s: Any) -> Optional[str]:
    """Trim/collapse whitespace; None for blanks and placeholders."""
    if s is None or (not isinstance(s, str) and pd.isna(s)):
        return None
    s = re.sub(r"\s+", " ", str(s)).strip()
    return None if s.lower() in _JUNK_COLLEGES else s


def normalize_difficulty(v: Any) -> Optional[str]:
    """'easy' / 'HOF' / 'hall-of-fame' -> the label stored in players.difficulty."""
    if v is None or (not isinstance(v, str) and pd.isna(v)):
        return None
    tier = normalize_tier(str(v))
    return DIFFICULTY_LABELS[tier] if tier else None


def build_players(raw: pd.DataFrame) -> pd.DataFrame:
    df = ensure_canonical_columns(raw.copy())
    df["name"] = df["name"].astype("string").str.strip()
    df["college"] = df["college"].map(clean_college)
    df["difficulty"] = df["difficulty"].map(normalize_difficulty)
    df["jersey_number"] = pd.to_numeric(df["jersey_number"], errors="coerce").astype("Int64")
    df["ppg"] = pd.to_numeric(df["ppg"], errors="coerce")

    before = len(df)
    df = df[df["name"].notna() & (df["name"] != "") & df["college"].notna() & df["difficulty"].notna()]
    dropped = before - len(df)
    if dropped:
        print(f"[WARN] Dropped {dropped} rows missing name, college or difficulty")

    df = df.drop_duplicates(subset=["name", "college"], keep="first").reset_index(drop=True)

    # Fill missing ids after the highest existing one
    ids = pd.to_numeric(df["id"], errors="coerce")
    next_id = int(ids.max()) + 1 if ids.notna().any() else 1
    missing = ids.isna()
    ids.loc[missing] = list(range(next_id, next_id + int(missing.sum())))
    df["id"] = ids.astype("Int64")

    return df[PLAYER_COLUMNS]


def build_colleges(players: pd.DataFrame) -> pd.DataFrame:
    names = sorted(set(players["college"].dropna()), key=str.lower)
    return pd.DataFrame({"id": range(1, len(names) + 1), "name": names})


def to_records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """JSON-safe records: NA -> None, numpy scalars -> Python."""
    out = []
    for rec in df.to_dict(orient="records"):
        clean = {}
        for k, v in rec.items():
            if v is None or (not isinstance(v, str) and pd.isna(v)):
                clean[k] = None
            elif hasattr(v, "item"):
                clean[k] = v.item()
            else:
                clean[k] = v
        out.append(clean)
    return out


def write_json(records: List[Dict[str, Any]], path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(records, f, indent=2, ensure_ascii=False)
        f.write("\n")
    print(f"[OK] Wrote {path} ({len(records)} rows)")


def upload(client: Any, players: List[Dict[str, Any]], colleges: List[Dict[str, Any]]) -> None:
    """Upsert seeds by id; colleges first so names exist before players reference them."""
    client.table("colleges").upsert(colleges, on_conflict="id").execute()
    print(f"[OK] Upserted {len(colleges)} colleges")
    client.table("players").upsert(players, on_conflict="id").execute()
    print(f"[OK] Upserted {len(players)} players")


def main(argv: Optional[List[str]] = None) -> int:
    ap = argparse.ArgumentParser(description="Build player/college seeds from a roster CSV.")
    ap.add_argument("csv", help="Roster CSV (name, college, position, difficulty, team, jersey_number, ppg)")
    ap.add_argument("--out-dir", default=DEFAULT_OUT_DIR)
    ap.add_argument("--upload", action="store_true", help="Upsert into Supabase as well")
    args = ap.parse_args(argv)

    raw = pd.read_csv(args.csv)
    print(f"[INFO] Read {len(raw)} rows from {args.csv}")

    players_df = build_players(raw)
    colleges_df = build_colleges(players_df)
    counts = players_df["difficulty"].value_counts().to_dict()
    print(f"[INFO] {len(players_df)} players by tier: {counts}; {len(colleges_df)} colleges")

    players = to_records(players_df)
    colleges = to_records(colleges_df)

    os.makedirs(args.out_dir, exist_ok=True)
    write_json(players, os.path.join(args.out_dir, "players_seed.json"))
    write_json(colleges, os.path.join(args.out_dir, "colleges_seed.json"))

    if args.upload:
        from dotenv import load_dotenv
        from supabase import create_client

        load_dotenv()
        url = os.getenv("SUPABASE_URL")
        key = os.getenv("SUPABASE_SERVICE_ROLE_KEY")
        if not (url and key):
            print("[WARN] SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY missing; skipping upload.")
            return 1
        upload(create_client(url, key), players, colleges)

    print("[DONE] seed build complete.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
