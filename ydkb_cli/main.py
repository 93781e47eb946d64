"""Admin CLI for the daily college challenge.

Usage:
    ydkb create [--date YYYY-MM-DD]
    ydkb week [--days N]
    ydkb show [--date YYYY-MM-DD]
    ydkb colleges <term>
    ydkb hint <guess> <answer>
    ydkb check
"""
from __future__ import annotations

import argparse
import sys
from typing import List, Optional

from . import api


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ydkb",
        description="Manage and inspect daily college challenges over the HTTP API.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p_create = sub.add_parser("create", help="Create the challenge for a date (default: today)")
    p_create.add_argument("--date", help="Challenge date, YYYY-MM-DD")

    p_week = sub.add_parser("week", help="Create challenges for the upcoming days")
    p_week.add_argument("--days", type=int, default=7, help="How many days ahead (default: 7)")

    p_show = sub.add_parser("show", help="Show a day's question and options")
    p_show.add_argument("--date", help="Challenge date, YYYY-MM-DD")

    p_colleges = sub.add_parser("colleges", help="Search colleges by name")
    p_colleges.add_argument("term", help="Part of a college name (e.g., 'state')")

    p_hint = sub.add_parser("hint", help="Ask for the hint a wrong guess would get")
    p_hint.add_argument("guess")
    p_hint.add_argument("answer")

    sub.add_parser("check", help="Check database connectivity")

    return parser


def _cmd_create(date: Optional[str]) -> int:
    data = api.create_challenge(date)
    c = data.get("challenge") or {}
    print(data.get("message") or data.get("error") or "")
    print(f"{c.get('challenge_date')}: easy={c.get('easy_player_id')} "
          f"hard={c.get('hard_player_id')} hof={c.get('hof_player_id')}")
    return 0


def _cmd_week(days: int) -> int:
    data = api.create_week(days)
    print(data.get("message", ""))
    for err in data.get("errors") or []:
        print(f"  {err.get('date')}: {err.get('error')}")
    return 0 if not data.get("errors") else 1


def _cmd_show(date: Optional[str]) -> int:
    data = api.get_challenge(date)
    print(f"{data.get('date')}  {data.get('question')}")
    for i, opt in enumerate(data.get("options") or []):
        mark = "*" if i == data.get("correctOption") else " "
        print(f"{mark} {i + 1}. {opt.get('name')} ({opt.get('position')}, {opt.get('team')}) - {opt.get('college')}")
    return 0


def _cmd_colleges(term: str) -> int:
    results = api.search_colleges(term)
    if not results:
        print("No results.")
        return 0
    for c in results:
        print(c.get("name"))
    return 0


def _cmd_hint(guess: str, answer: str) -> int:
    print(api.get_hint(guess, answer))
    return 0


def _cmd_check() -> int:
    data = api.check_connection()
    for name, info in (data.get("tables") or {}).items():
        state = "ok" if info.get("exists") else "missing"
        count = info.get("count")
        print(f"{name}: {state}" + (f" ({count} rows)" if count is not None else ""))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        if args.command == "create":
            return _cmd_create(args.date)
        if args.command == "week":
            return _cmd_week(args.days)
        if args.command == "show":
            return _cmd_show(args.date)
        if args.command == "colleges":
            return _cmd_colleges(args.term)
        if args.command == "hint":
            return _cmd_hint(args.guess, args.answer)
        if args.command == "check":
            return _cmd_check()
    except api.APIError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    parser.error("Unknown command")
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
