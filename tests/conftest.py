import re
from types import SimpleNamespace

import pytest

from ydkb import create_app


class FakeQuery:
    """Just enough of the postgrest builder for the app: filters, order, limit, writes."""

    def __init__(self, db, table):
        self.db = db
        self.table = table
        self.op = "select"
        self.payload = None
        self.on_conflict = None
        self.count = None
        self.filters = []
        self.order_by = None
        self.limit_n = None

    # builders
    def select(self, *columns, count=None):
        self.op = "select"
        self.count = count
        return self

    def insert(self, payload):
        self.op, self.payload = "insert", payload
        return self

    def upsert(self, payload, on_conflict=None):
        self.op, self.payload, self.on_conflict = "upsert", payload, on_conflict
        return self

    def delete(self):
        self.op = "delete"
        return self

    def eq(self, col, val):
        self.filters.append(lambda r: r.get(col) == val)
        return self

    def in_(self, col, vals):
        vals = list(vals)
        self.filters.append(lambda r: r.get(col) in vals)
        return self

    def ilike(self, col, pattern):
        rx = re.compile("^" + ".*".join(re.escape(p) for p in pattern.split("%")) + "$", re.IGNORECASE)
        self.filters.append(lambda r: bool(rx.match(str(r.get(col) or ""))))
        return self

    def order(self, col, desc=False):
        self.order_by = (col, desc)
        return self

    def limit(self, n):
        self.limit_n = n
        return self

    # execution
    def _matching(self, rows):
        return [r for r in rows if all(f(r) for f in self.filters)]

    def execute(self):
        self.db.calls.append((self.table, self.op))
        if (self.table, self.op) in self.db.fail_on or self.table in self.db.fail_on:
            raise RuntimeError(f"{self.table} {self.op} failed")
        rows = self.db.tables.setdefault(self.table, [])

        if self.op == "select":
            out = self._matching(rows)
            if self.order_by:
                col, desc = self.order_by
                out = sorted(out, key=lambda r: r.get(col), reverse=desc)
            total = len(out)
            if self.limit_n is not None:
                out = out[: self.limit_n]
            return SimpleNamespace(data=[dict(r) for r in out], count=total if self.count else None)

        if self.op == "delete":
            gone = self._matching(rows)
            self.db.tables[self.table] = [r for r in rows if r not in gone]
            return SimpleNamespace(data=gone, count=None)

        items = self.payload if isinstance(self.payload, list) else [self.payload]
        written = []
        for item in items:
            item = dict(item)
            if self.op == "upsert":
                keys = (self.on_conflict or "id").split(",")
                existing = next((r for r in rows if all(r.get(k) == item.get(k) for k in keys)), None)
                if existing is not None:
                    existing.update(item)
                    written.append(dict(existing))
                    continue
            for col in self.db.unique.get(self.table, ()):
                if any(r.get(col) == item.get(col) for r in rows):
                    raise RuntimeError(f"duplicate key value violates unique constraint on {col}")
            item.setdefault("id", max((r.get("id") or 0 for r in rows), default=0) + 1)
            rows.append(item)
            written.append(dict(item))
        return SimpleNamespace(data=written, count=None)


class FakeSupabase:
    def __init__(self, tables=None):
        self.tables = {k: [dict(r) for r in v] for k, v in (tables or {}).items()}
        self.unique = {"daily_challenges": ("challenge_date",)}
        self.fail_on = set()
        self.calls = []

    def table(self, name):
        return FakeQuery(self, name)


PLAYERS = [
    {"id": 1, "name": "Patrick Mahomes", "college": "Texas Tech University", "position": "QB",
     "difficulty": "Easy", "team": "Kansas City Chiefs", "jersey_number": 15, "ppg": None},
    {"id": 2, "name": "Tom Brady", "college": "University of Michigan", "position": "QB",
     "difficulty": "Easy", "team": "Tampa Bay Buccaneers", "jersey_number": 12, "ppg": None},
    {"id": 10, "name": "Cooper Kupp", "college": "Eastern Washington University", "position": "WR",
     "difficulty": "Hard", "team": "Los Angeles Rams", "jersey_number": 10, "points_per_game": 14.2},
    {"id": 11, "name": "Adam Thielen", "college": "Minnesota State University, Mankato", "position": "WR",
     "difficulty": "Hard", "team": "Minnesota Vikings", "jersey_number": 19, "ppg": None},
]

COLLEGES = [
    {"id": 1, "name": "Ohio State University"},
    {"id": 2, "name": "Oklahoma State University"},
    {"id": 3, "name": "Boston College"},
    {"id": 4, "name": "University of Michigan"},
]


@pytest.fixture
def fake_db():
    return FakeSupabase({"players": PLAYERS, "colleges": COLLEGES})


@pytest.fixture
def app(fake_db):
    return create_app(
        config={"TESTING": True, "SECRET_KEY": "test", "SESSION_COOKIE_SECURE": False, "ADMIN_TOKEN": None},
        client=fake_db,
    )


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def local_client(monkeypatch):
    """App with no database: seed-backed local mode."""
    for var in ("SUPABASE_URL", "SUPABASE_ANON_KEY", "SUPABASE_SERVICE_ROLE_KEY"):
        monkeypatch.delenv(var, raising=False)
    app = create_app(config={"TESTING": True, "SECRET_KEY": "test", "SESSION_COOKIE_SECURE": False, "ADMIN_TOKEN": None})
    return app.test_client()
