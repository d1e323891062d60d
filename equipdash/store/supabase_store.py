from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client

from equipdash.core.errors import StoreError
from equipdash.store.base import RecordStore, Row

logger = logging.getLogger(__name__)


class SupabaseStore(RecordStore):
    """
    RecordStore backed by the Supabase (PostgREST) client SDK.
    """

    def __init__(self, client: Client):
        self.db = client

    @classmethod
    def connect(cls, url: str, key: str) -> "SupabaseStore":
        return cls(create_client(url, key))

    def _run(self, table: str, query) -> List[Row]:
        try:
            result = query.execute()
        except (APIError, httpx.HTTPError) as e:
            logger.error("Supabase call on %s failed: %s", table, e, exc_info=True)
            raise StoreError(str(e), table=table) from e

        return list(result.data or []) if result else []

    def _select(self, table: str, exclude_id: Optional[str]):
        query = self.db.table(table).select("*")
        if exclude_id:
            query = query.neq("id", exclude_id)
        return query

    # -------------------------
    # Lookups
    # -------------------------

    def find_equal(self, table: str, field: str, value: Any, *, exclude_id=None):
        return self._run(table, self._select(table, exclude_id).eq(field, value))

    def find_containing(self, table: str, field: str, value: Any, *, exclude_id=None):
        return self._run(table, self._select(table, exclude_id).contains(field, [value]))

    def find_text(self, table: str, field: str, needle: str, *, exclude_id=None):
        return self._run(table, self._select(table, exclude_id).ilike(field, f"%{needle}%"))

    def get(self, table: str, record_id: str) -> Optional[Row]:
        rows = self._run(table, self._select(table, None).eq("id", record_id).limit(1))
        return rows[0] if rows else None

    def list(self, table: str) -> List[Row]:
        return self._run(table, self._select(table, None).order("created_at", desc=True))

    # -------------------------
    # Writes
    # -------------------------

    def insert(self, table: str, row: Row) -> Row:
        rows = self._run(table, self.db.table(table).insert(row))
        if not rows:
            raise StoreError("insert returned no row", table=table)
        return rows[0]

    def update(self, table: str, record_id: str, changes: Row) -> Row:
        rows = self._run(table, self.db.table(table).update(changes).eq("id", record_id))
        if not rows:
            raise StoreError(f"no row {record_id}", table=table)
        return rows[0]

    def delete(self, table: str, record_id: str) -> None:
        self._run(table, self.db.table(table).delete().eq("id", record_id))
