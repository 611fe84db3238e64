"""Pytest configuration.

Provides an in-memory stand-in for the Supabase query builder so routes and
services run end to end without a hosted backend.
"""

import copy
import os
import re
import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

# Must be set before the app (and its settings) are imported.
os.environ.setdefault("RATE_LIMIT", "10000/minute")
os.environ.setdefault("SUPABASE_URL", "http://supabase.test")
os.environ.setdefault("SUPABASE_KEY", "anon-test-key")

from fastapi.testclient import TestClient  # noqa: E402

from bizsubs.core.cache import query_cache  # noqa: E402
from bizsubs.core.dependencies import get_current_user  # noqa: E402
from bizsubs.database.supabase_client import get_auth_client, get_supabase  # noqa: E402
from bizsubs.main import app  # noqa: E402

USER = {"id": "user-1", "email": "owner@example.com"}

_JOIN_RE = re.compile(r"(\w+)\(([^)]*)\)")


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str) -> None:
        self.db = db
        self.table_name = table
        self._filters = []
        self._joins = []
        self._order = None
        self._limit = None
        self._single = False
        self._op = "select"
        self._payload = None
        self._on_conflict = "id"

    # Query building
    def select(self, columns: str = "*"):
        self._joins = [
            (table, [c.strip() for c in cols.split(",") if c.strip()])
            for table, cols in _JOIN_RE.findall(columns)
        ]
        return self

    def eq(self, column, value):
        self._filters.append(lambda row: row.get(column) == value)
        return self

    def in_(self, column, values):
        self._filters.append(lambda row: row.get(column) in values)
        return self

    def lte(self, column, value):
        self._filters.append(lambda row: row.get(column) is not None and str(row[column]) <= str(value))
        return self

    def gte(self, column, value):
        self._filters.append(lambda row: row.get(column) is not None and str(row[column]) >= str(value))
        return self

    def lt(self, column, value):
        self._filters.append(lambda row: row.get(column) is not None and str(row[column]) < str(value))
        return self

    def order(self, column, desc=False):
        self._order = (column, desc)
        return self

    def limit(self, count):
        self._limit = count
        return self

    def single(self):
        self._single = True
        return self

    def maybe_single(self):
        self._single = True
        return self

    # Writes
    def insert(self, data):
        self._op, self._payload = "insert", data
        return self

    def update(self, data):
        self._op, self._payload = "update", data
        return self

    def delete(self):
        self._op = "delete"
        return self

    def upsert(self, data, on_conflict="id"):
        self._op, self._payload, self._on_conflict = "upsert", data, on_conflict
        return self

    def execute(self):
        if self.table_name in self.db.failing_tables:
            raise RuntimeError(f"{self.table_name} unavailable")
        handler = getattr(self, f"_execute_{self._op}")
        return SimpleNamespace(data=handler())

    # Execution
    def _rows(self):
        return self.db.tables.setdefault(self.table_name, [])

    def _matching(self):
        return [row for row in self._rows() if all(f(row) for f in self._filters)]

    def _with_joins(self, row):
        result = copy.deepcopy(row)
        for table, columns in self._joins:
            fk = f"{table[:-1]}_id"
            target = next((r for r in self.db.tables.get(table, []) if r["id"] == row.get(fk)), None)
            result[table] = {c: target.get(c) for c in columns} if target else None
        return result

    def _execute_select(self):
        rows = self._matching()
        if self._order:
            column, desc = self._order
            present = sorted((r for r in rows if r.get(column) is not None), key=lambda r: r[column], reverse=desc)
            rows = present + [r for r in rows if r.get(column) is None]
        if self._limit is not None:
            rows = rows[: self._limit]
        rows = [self._with_joins(r) for r in rows]
        if self._single:
            return rows[0] if rows else None
        return rows

    def _new_row(self, data):
        row = {"id": str(uuid.uuid4()), **copy.deepcopy(data)}
        now = datetime.now(timezone.utc).isoformat()
        row.setdefault("created_at", now)
        if self.table_name == "activity_logs":
            row.setdefault("timestamp", now)
        return row

    def _execute_insert(self):
        payload = self._payload if isinstance(self._payload, list) else [self._payload]
        rows = [self._new_row(data) for data in payload]
        self._rows().extend(rows)
        return copy.deepcopy(rows)

    def _execute_update(self):
        rows = self._matching()
        for row in rows:
            row.update(copy.deepcopy(self._payload))
        return copy.deepcopy(rows)

    def _execute_delete(self):
        rows = self._matching()
        self.db.tables[self.table_name] = [r for r in self._rows() if r not in rows]
        return copy.deepcopy(rows)

    def _execute_upsert(self):
        key = self._on_conflict
        existing = next((r for r in self._rows() if r.get(key) == self._payload.get(key)), None)
        if existing is not None:
            existing.update(copy.deepcopy(self._payload))
            return [copy.deepcopy(existing)]
        row = self._new_row(self._payload)
        self._rows().append(row)
        return [copy.deepcopy(row)]


class FakeSupabase:
    def __init__(self) -> None:
        self.tables = {}
        self.failing_tables = set()

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def seed(self, table: str, *rows):
        stored = []
        for data in rows:
            row = FakeQuery(self, table)._new_row(data)
            self.tables.setdefault(table, []).append(row)
            stored.append(row)
        return stored[0] if len(stored) == 1 else stored


@pytest.fixture
def db():
    return FakeSupabase()


@pytest.fixture(autouse=True)
def _clear_query_cache():
    query_cache.clear()
    yield
    query_cache.clear()


@pytest.fixture
def client(db):
    app.dependency_overrides[get_supabase] = lambda: db
    app.dependency_overrides[get_auth_client] = lambda: db
    app.dependency_overrides[get_current_user] = lambda: dict(USER)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
