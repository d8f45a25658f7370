# core/store.py

"""
Datastore boundary for the policy engine.

The engine only ever talks to storage through these four operations (plus a
count for dashboards). Concurrent writers are arbitrated by the database:
conditional_update() scopes the UPDATE by a predicate and reports how many
rows it touched, so a lost race shows up as 0 rather than as an error.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from core.errors import StoreError, translate_supabase_error
from core.logging_config import logger
from core.predicates import Predicate
from core.supabase_client import get_supabase_client
from core.utils import sanitize


class DataStore(ABC):

    @abstractmethod
    def fetch_one(self, table: str, predicate: Predicate) -> Optional[Dict[str, Any]]:
        ...

    @abstractmethod
    def fetch_many(
        self,
        table: str,
        predicate: Predicate,
        *,
        order_by: Optional[str] = "created_at",
        desc: bool = True,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        ...

    @abstractmethod
    def conditional_update(self, table: str, predicate: Predicate, patch: Dict[str, Any]) -> int:
        """Apply `patch` to rows matching `predicate`; return rows affected."""

    @abstractmethod
    def insert(self, table: str, record: Dict[str, Any]) -> Dict[str, Any]:
        """Insert and return the stored row. Unique violations raise Conflict."""

    @abstractmethod
    def count(self, table: str, predicate: Predicate) -> int:
        ...


# ============================================================
# Supabase (PostgREST) implementation
# ============================================================
class SupabaseStore(DataStore):

    def __init__(self, client=None):
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = get_supabase_client()
        if self._client is None:
            raise StoreError("Supabase client not configured")
        return self._client

    def fetch_one(self, table, predicate):
        rows = self.fetch_many(table, predicate, order_by=None, limit=1)
        return rows[0] if rows else None

    def fetch_many(self, table, predicate, *, order_by="created_at", desc=True, limit=None):
        if predicate.is_never:
            return []

        try:
            query = predicate.apply(self.client.table(table).select("*"))
            if order_by:
                query = query.order(order_by, desc=desc)
            if limit:
                query = query.limit(limit)
            result = query.execute()
        except StoreError:
            raise
        except Exception as e:
            raise translate_supabase_error(e, f"Failed to fetch from {table}") from e

        return result.data or []

    def conditional_update(self, table, predicate, patch):
        if predicate.is_never:
            return 0

        try:
            query = predicate.apply(self.client.table(table).update(sanitize(patch)))
            result = query.execute()
        except StoreError:
            raise
        except Exception as e:
            raise translate_supabase_error(e, f"Failed to update {table}") from e

        affected = len(result.data or [])
        logger.debug(f"Conditional update on {table}: {affected} row(s)")
        return affected

    def insert(self, table, record):
        try:
            result = self.client.table(table).insert(sanitize(record)).execute()
        except StoreError:
            raise
        except Exception as e:
            raise translate_supabase_error(e, f"Failed to insert into {table}") from e

        if not result.data:
            raise StoreError(f"Insert into {table} returned no row")
        return result.data[0]

    def count(self, table, predicate):
        if predicate.is_never:
            return 0

        try:
            query = self.client.table(table).select("id", count="exact", head=True)
            result = predicate.apply(query).execute()
        except StoreError:
            raise
        except Exception as e:
            raise translate_supabase_error(e, f"Failed to count {table}") from e

        return result.count or 0


_store: Optional[DataStore] = None


def get_store() -> DataStore:
    """FastAPI dependency; tests override it with an in-memory store."""
    global _store
    if _store is None:
        _store = SupabaseStore()
    return _store
