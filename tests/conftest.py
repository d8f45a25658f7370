# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import copy
import itertools
from datetime import datetime, timezone
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from unittest.mock import Mock

from core.errors import Conflict
from core.rate_limiter import reset_rate_limits
from core.session import issue_credential
from core.store import DataStore, get_store
from main import create_app
from models.enums import PrincipalKind
from models.principal import Principal


# ============================================================
# In-memory DataStore
# ============================================================
UNIQUE_FIELDS = {
    "profiles": ("user_id",),
    "sub_admin_users": ("username",),
    "admin_users": ("username",),
    "categories": ("name",),
}


class InMemoryStore(DataStore):
    """Evaluates the same Predicate objects SupabaseStore compiles to PostgREST."""

    def __init__(self):
        self.tables = {}
        self._ids = itertools.count(1)

    def rows(self, table):
        return self.tables.setdefault(table, [])

    def seed(self, table, **row):
        if table != "profiles" and "id" not in row:
            row["id"] = f"{table}-{next(self._ids)}"
        row.setdefault("created_at", datetime.now(timezone.utc).isoformat())
        self.rows(table).append(row)
        return row

    def fetch_one(self, table, predicate):
        rows = self.fetch_many(table, predicate, order_by=None, limit=1)
        return rows[0] if rows else None

    def fetch_many(self, table, predicate, *, order_by="created_at", desc=True, limit=None):
        found = [copy.deepcopy(r) for r in self.rows(table) if predicate.matches(r)]
        if order_by:
            found.sort(key=lambda r: str(r.get(order_by) or ""), reverse=desc)
        if limit:
            found = found[:limit]
        return found

    def conditional_update(self, table, predicate, patch):
        affected = 0
        for row in self.rows(table):
            if predicate.matches(row):
                row.update(patch)
                affected += 1
        return affected

    def insert(self, table, record):
        for field in UNIQUE_FIELDS.get(table, ()):
            if any(r.get(field) == record.get(field) for r in self.rows(table)):
                raise Conflict(f"Failed to insert into {table}: Record already exists")
        return copy.deepcopy(self.seed(table, **dict(record)))

    def count(self, table, predicate):
        return sum(1 for r in self.rows(table) if predicate.matches(r))


# ============================================================
# Principals
# ============================================================
@pytest.fixture
def admin():
    return Principal(kind=PrincipalKind.admin, id="admin-1", username="root")


@pytest.fixture
def india_sub_admin():
    return Principal(
        kind=PrincipalKind.sub_admin,
        id="sub-india",
        username="india_ops",
        assigned_countries=("India",),
    )


@pytest.fixture
def brazil_sub_admin():
    return Principal(
        kind=PrincipalKind.sub_admin,
        id="sub-brazil",
        username="brazil_ops",
        assigned_countries=("Brazil",),
    )


@pytest.fixture
def member():
    return Principal(kind=PrincipalKind.user, id="user-1")


@pytest.fixture
def other_member():
    return Principal(kind=PrincipalKind.user, id="user-2")


@pytest.fixture
def anonymous():
    return Principal.anonymous()


# ============================================================
# Store + seeded marketplace
# ============================================================
@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def marketplace(store):
    """A small world: members in India and China, listings in several states."""
    store.seed(
        "profiles",
        user_id="user-1",
        full_name="Asha Rao",
        email="asha@example.com",
        country="IN",
        approval_status="approved",
    )
    store.seed(
        "profiles",
        user_id="user-2",
        full_name="Li Wei",
        email="li@example.com",
        country="China",
        approval_status="pending",
    )
    store.seed(
        "profiles",
        user_id="user-3",
        full_name="Joao Silva",
        email="joao@example.com",
        country="Brazil",
        approval_status="pending",
    )

    store.seed(
        "products",
        id="prod-br",
        exporter_id="user-1",
        name="Green coffee",
        description="Arabica beans, 60kg sacks",
        category="Agriculture",
        country_origin="BR",
        status="active",
    )
    store.seed(
        "products",
        id="prod-cn",
        exporter_id="user-2",
        name="Solar panels",
        description="Monocrystalline 400W panels",
        category="Energy",
        country_origin="China",
        status="active",
    )
    store.seed(
        "products",
        id="prod-done",
        exporter_id="user-1",
        name="Cotton bales",
        description="Long staple cotton",
        category="Textiles",
        country_origin="India",
        status="done",
    )

    store.seed(
        "product_requests",
        id="req-open",
        requester_id="user-2",
        title="Need basmati rice",
        description="Looking for 20 tonnes of basmati rice",
        category="Agriculture",
        target_country="IN",
        status="open",
    )
    store.seed(
        "product_requests",
        id="req-deleted",
        requester_id="user-1",
        title="Steel coils wanted",
        description="Cold rolled steel coils, monthly volume",
        category="Metals",
        target_country="Russia",
        status="deleted",
    )
    return store


# ============================================================
# App / client
# ============================================================
@pytest.fixture(scope="function")
def app(store):
    """Create a test FastAPI application instance backed by the in-memory store."""
    application = create_app()
    application.dependency_overrides[get_store] = lambda: store
    yield application
    application.dependency_overrides.clear()


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI application."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth_header():
    """Build an Authorization header carrying a fresh session credential."""

    def _header(principal: Principal, login_time=None):
        return {"Authorization": f"Bearer {issue_credential(principal, login_time=login_time)}"}

    return _header


@pytest.fixture
def mock_supabase_client():
    """Create a mock Supabase client."""
    mock_client = Mock()
    mock_table = Mock()
    mock_client.table.return_value = mock_table
    return mock_client


@pytest.fixture(autouse=True)
def reset_limits():
    """Reset login throttling before each test."""
    reset_rate_limits()
    yield
    reset_rate_limits()
