# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures for all tests.
#
# Key features:
# - A complete, valid environment mapping (base_env)
# - Settings built from it, with per-test overrides (make_settings)
# - An in-memory stand-in for the Supabase query builder (fake_supabase)
# - A TestClient around the API app with a controllable clock
# =============================================================================

from __future__ import annotations

import uuid
from collections import defaultdict
from typing import Any

import pytest
from fastapi.testclient import TestClient

from app.config import Settings, load_configuration
from app.main import create_app
from lib.supabase_client import SupabaseClient


BASE_ENV = {
    "NODE_ENV": "test",
    "DATABASE_URL": "https://test-project.supabase.co",
    "SUPABASE_SERVICE_KEY": "test-service-key",
    "ADMIN_EMAIL": "admin@kori.test",
    "ADMIN_PASSWORD": "Sup3r-Secret!",
    "ML_JWT_SECRET": "ml-jwt-secret-value",
    "ADMIN_JWT_SECRET": "admin-jwt-secret-value",
}


# =============================================================================
# Configuration Fixtures
# =============================================================================

@pytest.fixture
def base_env() -> dict[str, str]:
    """A valid environment mapping (fresh copy per test)."""
    return dict(BASE_ENV)


@pytest.fixture
def make_settings(base_env):
    """Build Settings from base_env plus overrides."""
    def _make(**overrides: str) -> Settings:
        return load_configuration({**base_env, **overrides})
    return _make


@pytest.fixture
def settings(make_settings) -> Settings:
    return make_settings()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every variable Settings reads from the process environment."""
    for name in Settings.model_fields:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


# =============================================================================
# API Fixtures
# =============================================================================

class FakeClock:
    """Monotonic clock the tests move by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def api_app(settings, clock):
    return create_app(settings, clock=clock)


@pytest.fixture
def api_client(api_app):
    """TestClient that returns 500 responses instead of raising."""
    with TestClient(api_app, raise_server_exceptions=False) as client:
        yield client


# =============================================================================
# Supabase Fake
# =============================================================================

class FakeResponse:
    def __init__(self, data: list[dict[str, Any]]):
        self.data = data


class FakeQuery:
    """Chainable subset of the postgrest query builder."""

    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table = table
        self.operation = "select"
        self.payload: dict[str, Any] | None = None
        self.filters: list[tuple[str, Any]] = []
        self.row_limit: int | None = None
        self.ignore_duplicates = False
        self.on_conflict = "id"

    def select(self, columns: str = "*") -> "FakeQuery":
        self.operation = "select"
        return self

    def insert(self, row: dict[str, Any]) -> "FakeQuery":
        self.operation, self.payload = "insert", dict(row)
        return self

    def update(self, values: dict[str, Any]) -> "FakeQuery":
        self.operation, self.payload = "update", dict(values)
        return self

    def upsert(
        self,
        row: dict[str, Any],
        on_conflict: str = "id",
        ignore_duplicates: bool = False,
    ) -> "FakeQuery":
        self.operation, self.payload = "upsert", dict(row)
        self.on_conflict = on_conflict
        self.ignore_duplicates = ignore_duplicates
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append((column, value))
        return self

    def limit(self, count: int) -> "FakeQuery":
        self.row_limit = count
        return self

    def _matches(self, row: dict[str, Any]) -> bool:
        return all(row.get(column) == value for column, value in self.filters)

    def execute(self) -> FakeResponse:
        self.db.calls.append((self.table, self.operation))
        rows = self.db.tables[self.table]

        if self.operation != "select" and self.table in self.db.fail_writes:
            raise self.db.fail_writes[self.table]

        if self.operation == "select":
            found = [dict(row) for row in rows if self._matches(row)]
            return FakeResponse(found[: self.row_limit] if self.row_limit else found)

        if self.operation == "insert":
            row = {"id": str(uuid.uuid4()), **self.payload}
            self.db.check_unique(self.table, row)
            rows.append(row)
            return FakeResponse([dict(row)])

        if self.operation == "update":
            updated = []
            for row in rows:
                if self._matches(row):
                    row.update(self.payload)
                    updated.append(dict(row))
            return FakeResponse(updated)

        # upsert
        key = self.payload[self.on_conflict]
        for row in rows:
            if row.get(self.on_conflict) == key:
                if not self.ignore_duplicates:
                    row.update(self.payload)
                return FakeResponse([])
        rows.append(dict(self.payload))
        return FakeResponse([dict(self.payload)])


class FakeSupabase:
    """
    In-memory replacement for supabase.Client.

    - tables: rows per table name
    - calls: (table, operation) for every executed query
    - fail_writes: table -> exception raised by any write to it
    - unique: table -> columns that must stay unique on insert
    """

    def __init__(self):
        self.tables: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.calls: list[tuple[str, str]] = []
        self.fail_writes: dict[str, Exception] = {}
        self.unique: dict[str, tuple[str, ...]] = {"admin_users": ("email",)}

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def check_unique(self, table: str, row: dict[str, Any]) -> None:
        from postgrest.exceptions import APIError

        for column in self.unique.get(table, ()):
            if any(existing.get(column) == row.get(column) for existing in self.tables[table]):
                raise APIError({
                    "message": f"duplicate key value violates unique constraint on {column}",
                    "code": "23505",
                })


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture(autouse=True)
def reset_supabase_singleton():
    """Never leak a cached client between tests."""
    SupabaseClient.reset()
    yield
    SupabaseClient.reset()
