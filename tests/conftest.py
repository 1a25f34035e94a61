"""Shared fixtures: an in-memory stand-in for the Supabase query builder and a wired TestClient."""

import copy
import uuid
from datetime import datetime
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional

import pytest
from fastapi.testclient import TestClient

USER_ID = "user_test_123"


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.op = "select"
        self.payload: Any = None
        self.on_conflict = "id"
        self.filters: List[Callable[[Dict[str, Any]], bool]] = []
        self.order_by: Optional[tuple] = None
        self.limit_n: Optional[int] = None
        self.mode: Optional[str] = None
        self.count_requested = False

    # query verbs
    def select(self, *columns, count=None):
        self.op = "select"
        self.count_requested = count is not None
        return self

    def insert(self, data):
        self.op, self.payload = "insert", data
        return self

    def update(self, data):
        self.op, self.payload = "update", data
        return self

    def upsert(self, data, on_conflict: str = "id"):
        self.op, self.payload, self.on_conflict = "upsert", data, on_conflict
        return self

    def delete(self):
        self.op = "delete"
        return self

    # filters and modifiers
    def eq(self, column, value):
        self.filters.append(lambda row: row.get(column) == value)
        return self

    def gte(self, column, value):
        self.filters.append(lambda row: row.get(column) is not None and row.get(column) >= value)
        return self

    def in_(self, column, values):
        self.filters.append(lambda row: row.get(column) in values)
        return self

    def order(self, column, desc=False):
        self.order_by = (column, desc)
        return self

    def limit(self, n):
        self.limit_n = n
        return self

    def single(self):
        self.mode = "single"
        return self

    def maybe_single(self):
        self.mode = "maybe_single"
        return self

    def _matches(self) -> List[Dict[str, Any]]:
        return [r for r in self.db.rows(self.table_name) if all(f(r) for f in self.filters)]

    def execute(self):
        self.db.calls.append((self.table_name, self.op, copy.deepcopy(self.payload)))
        self.db.check_failure(self.table_name, self.op, self.payload)
        handler = getattr(self, f"_exec_{self.op}")
        return handler()

    def _exec_select(self):
        rows = self._matches()
        if self.order_by:
            column, desc = self.order_by
            rows = sorted(rows, key=lambda r: (r.get(column) is None, r.get(column) or ""), reverse=desc)
        count = len(rows)
        if self.limit_n is not None:
            rows = rows[: self.limit_n]
        rows = copy.deepcopy(rows)
        if self.mode == "maybe_single":
            return SimpleNamespace(data=rows[0], count=count) if rows else None
        if self.mode == "single":
            if len(rows) != 1:
                raise Exception("JSON object requested, multiple (or no) rows returned")
            return SimpleNamespace(data=rows[0], count=count)
        return SimpleNamespace(data=rows, count=count if self.count_requested else None)

    def _exec_insert(self):
        items = self.payload if isinstance(self.payload, list) else [self.payload]
        inserted = [self.db.add(self.table_name, item) for item in items]
        return SimpleNamespace(data=copy.deepcopy(inserted), count=None)

    def _exec_update(self):
        updated = []
        for row in self._matches():
            row.update(copy.deepcopy(self.payload))
            updated.append(row)
        return SimpleNamespace(data=copy.deepcopy(updated), count=None)

    def _exec_upsert(self):
        items = self.payload if isinstance(self.payload, list) else [self.payload]
        result = []
        for item in items:
            key = item.get(self.on_conflict)
            existing = next((r for r in self.db.rows(self.table_name) if key is not None and r.get(self.on_conflict) == key), None)
            if existing is not None:
                existing.update(copy.deepcopy(item))
                result.append(existing)
            else:
                result.append(self.db.add(self.table_name, item))
        return SimpleNamespace(data=copy.deepcopy(result), count=None)

    def _exec_delete(self):
        doomed = self._matches()
        self.db.tables[self.table_name] = [r for r in self.db.rows(self.table_name) if r not in doomed]
        return SimpleNamespace(data=copy.deepcopy(doomed), count=None)


class FakeSupabase:
    """Enough of supabase.Client's table() API for service tests."""

    def __init__(self, tables: Optional[Dict[str, List[Dict[str, Any]]]] = None):
        self.tables: Dict[str, List[Dict[str, Any]]] = copy.deepcopy(tables or {})
        self.calls: List[tuple] = []
        self._failures: List[tuple] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rows(self, name: str) -> List[Dict[str, Any]]:
        return self.tables.setdefault(name, [])

    def add(self, name: str, item: Dict[str, Any]) -> Dict[str, Any]:
        row = copy.deepcopy(item)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", datetime.utcnow().isoformat())
        self.rows(name).append(row)
        return row

    def fail(self, table: str, op: Optional[str] = None, when: Optional[Callable[[Any], bool]] = None,
             message: str = "database unavailable"):
        """Make matching executes raise. `when` receives the write payload."""
        self._failures.append((table, op, when, message))

    def check_failure(self, table: str, op: str, payload: Any):
        for f_table, f_op, when, message in self._failures:
            if f_table == table and f_op in (None, op) and (when is None or when(payload)):
                raise Exception(message)

    def writes(self, table: str, op: Optional[str] = None) -> List[Any]:
        return [p for t, o, p in self.calls if t == table and o != "select" and (op is None or o == op)]


@pytest.fixture
def fake_db() -> FakeSupabase:
    return FakeSupabase({
        "profiles": [{
            "id": USER_ID,
            "email": "agent@example.com",
            "full_name": "Avery Agent",
            "subscription_tier": "Subscriber",
            "subscription_status": "active",
            "has_call_center_addon": False,
        }],
    })


@pytest.fixture
def current_user() -> Dict[str, Any]:
    return {"id": USER_ID, "session_id": "sess_1", "email": "agent@example.com", "claims": {"sub": USER_ID}}


@pytest.fixture
def client(fake_db: FakeSupabase, current_user: Dict[str, Any]) -> TestClient:
    """TestClient on the real app with auth and the database overridden."""
    from pulse.core.dependencies import get_current_user_id
    from pulse.database.supabase_client import get_supabase
    from pulse.main import app

    app.dependency_overrides[get_supabase] = lambda: fake_db
    app.dependency_overrides[get_current_user_id] = lambda: current_user
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def fresh_rate_limits():
    """Every test starts with an empty per-client request budget."""
    from pulse.main import limiter

    limiter.reset()
    yield
