"""Shared fixtures: an in-memory Supabase stand-in and a configured app client."""

from __future__ import annotations

import json
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from tabledash.config import get_settings
from tabledash.core.supabase_client import get_client_factory
from tabledash.deps import get_dashboard_config, get_public_db
from tabledash.main import app
from tabledash.modules.dashboard.cache import QueryResultCache, get_query_cache

ANON_KEY = "anon-publishable-key"
VITE_ANON_KEY = "vite-anon-key"
SECRET_KEY = "service-secret-key"


class FakeAPIError(Exception):
    """Shaped like postgrest's APIError: message, code and hint attributes."""

    def __init__(self, message: str, code: str = "42P01", hint: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.hint = hint


def _matches_or(row: dict, expression: str) -> bool:
    for part in expression.split(","):
        column, _, pattern = part.split(".", 2)
        needle = pattern.strip("%").lower()
        if needle in str(row.get(column) or "").lower():
            return True
    return False


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.op = "select"
        self.payload = None
        self.filters: list[tuple[str, object]] = []
        self.or_expression: str | None = None
        self.bounds: tuple[int, int] | None = None
        self.max_rows: int | None = None
        self.count: str | None = None
        self.columns = "*"

    def _record(self, *call):
        self.db.calls.append((self.table_name, *call))
        return self

    def select(self, columns="*", count=None):
        self.columns = columns
        self.count = count
        return self._record("select", columns, count)

    def eq(self, column, value):
        self.filters.append((column, value))
        return self._record("eq", column, value)

    def or_(self, expression):
        self.or_expression = expression
        return self._record("or", expression)

    def range(self, start, end):
        self.bounds = (start, end)
        return self._record("range", start, end)

    def limit(self, n):
        self.max_rows = n
        return self._record("limit", n)

    def insert(self, data):
        self.op, self.payload = "insert", data
        return self._record("insert", data)

    def update(self, data):
        self.op, self.payload = "update", data
        return self._record("update", data)

    def delete(self):
        self.op = "delete"
        return self._record("delete")

    def execute(self):
        self.db.executions += 1
        error = self.db.errors.get(self.table_name)
        if error is not None:
            raise error

        rows = self.db.tables.setdefault(self.table_name, [])
        matched = [r for r in rows if all(str(r.get(c)) == str(v) for c, v in self.filters)]
        if self.or_expression:
            matched = [r for r in matched if _matches_or(r, self.or_expression)]

        if self.op == "insert":
            row = dict(self.payload)
            row.setdefault("id", self.db.next_id())
            rows.append(row)
            return SimpleNamespace(data=[dict(row)], count=None)
        if self.op == "update":
            for row in matched:
                row.update(self.payload)
            return SimpleNamespace(data=[dict(r) for r in matched], count=None)
        if self.op == "delete":
            self.db.tables[self.table_name] = [r for r in rows if r not in matched]
            return SimpleNamespace(data=[dict(r) for r in matched], count=None)

        total = len(matched)
        if self.bounds is not None:
            matched = matched[self.bounds[0] : self.bounds[1] + 1]
        if self.max_rows is not None:
            matched = matched[: self.max_rows]
        return SimpleNamespace(data=[dict(r) for r in matched], count=total if self.count else None)


class FakeSupabase:
    """Tables are lists of dicts; every builder call is recorded."""

    def __init__(self):
        self.tables: dict[str, list[dict]] = {}
        self.errors: dict[str, Exception] = {}
        self.calls: list[tuple] = []
        self.keys: list[str] = []
        self.executions = 0
        self._next_id = 1000

    def next_id(self) -> int:
        self._next_id += 1
        return self._next_id

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def calls_for(self, table: str) -> list[tuple]:
        return [call[1:] for call in self.calls if call[0] == table]


DASHBOARD_ENV = {
    "SUPABASE_URL": "https://project.supabase.co",
    "SUPABASE_PUBLISHABLE_DEFAULT_KEY": ANON_KEY,
    "VITE_SUPABASE_PUBLISHABLE_DEFAULT_KEY": VITE_ANON_KEY,
    "SUPABASE_TABLE_DIC": json.dumps(
        {
            "navigation": {
                "show_name": "Navigation",
                "name": "Name",
                "url": "Link",
                "category": "Category",
                "secret": "Secret",
            },
            "films": {"show_name": "Films", "title": "Title", "poster": "Poster", "keyword": "Keyword"},
            "notes": {"body": "Body"},
        }
    ),
    "SUPABASE_TABLE_CATEGORY_COL": json.dumps({"navigation": "category", "films": "genre"}),
    "SUPABASE_TABLE_CATEGORY_ENABLE": json.dumps({"navigation": "true", "films": False}),
    "SUPABASE_TABLE_SHOW_COL_THUMB": json.dumps({"navigation": ["url"]}),
    "SUPABASE_TABLE_SHOW_VIEWS": json.dumps({"navigation": "table, card", "films": ["card"]}),
    "SUPABASE_TABLE_DEFAULT_SEARCH": json.dumps({"navigation": "name,url", "films": ["title"]}),
    "SUPABASE_TABLE_NOT_SHOW_COL": "secret",
    "SUPABASE_TABLE_CARD_FLIP": json.dumps({"films": ["poster", "keyword"]}),
    "SUPABASE_TABLE_CARD_FLIP_DEFAULT_IMG": "https://img.example/default.png",
    "VOD_API_BASE_URL": "https://vod.example",
    "VOD_API_PATH": "/api.php/provide/vod",
    "SYSTEM_NAME": "Test Dashboard",
    "APP_ENV": "development",
}


@pytest.fixture
def dashboard_env(monkeypatch):
    """Environment for a fully configured deployment."""
    for name, value in DASHBOARD_ENV.items():
        monkeypatch.setenv(name, value)
    get_settings.cache_clear()
    get_dashboard_config.cache_clear()
    yield
    get_settings.cache_clear()
    get_dashboard_config.cache_clear()


@pytest.fixture
def fake_db():
    return FakeSupabase()


@pytest.fixture
def query_cache():
    return QueryResultCache(ttl_seconds=60)


@pytest.fixture
def client(dashboard_env, fake_db, query_cache):
    """TestClient with the database and cache replaced by in-memory fakes."""

    def factory(key: str):
        fake_db.keys.append(key)
        return fake_db

    app.dependency_overrides[get_public_db] = lambda: fake_db
    app.dependency_overrides[get_client_factory] = lambda: factory
    app.dependency_overrides[get_query_cache] = lambda: query_cache
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"x-supabase-secret-key": SECRET_KEY}
