import copy
import datetime
import json
import logging
import uuid
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from equipdash.core.errors import StoreError
from equipdash.store.base import RecordStore, Row

logger = logging.getLogger(__name__)


class MemoryStore(RecordStore):
    """
    Process-local store keeping every table as a dict of rows.

    Used by the tests and the demo server. Rows are copied on the way in
    and out so callers cannot mutate stored state behind the store's back.
    """

    def __init__(self, tables: Optional[Dict[str, Iterable[Row]]] = None):
        # table -> record_id -> row
        self.tables: Dict[str, Dict[str, Row]] = {}

        # table -> message; lets tests simulate a backend outage per table
        self.failures: Dict[str, str] = {}

        for table, rows in (tables or {}).items():
            for row in rows:
                self.insert(table, row)

    @classmethod
    def from_json(cls, path: str | Path) -> "MemoryStore":
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(path)

        with path.open("r", encoding="utf-8") as f:
            data = json.load(f)

        store = cls(data)
        logger.info("Seeded memory store from %s (%d tables)", path, len(store.tables))
        return store

    # -------------------------
    # Failure injection
    # -------------------------

    def fail_table(self, table: str, message: str = "backend unavailable") -> None:
        self.failures[table] = message

    def heal(self, table: Optional[str] = None) -> None:
        if table is None:
            self.failures.clear()
        else:
            self.failures.pop(table, None)

    def _check(self, table: str) -> Dict[str, Row]:
        if table in self.failures:
            raise StoreError(self.failures[table], table=table)
        return self.tables.setdefault(table, {})

    # -------------------------
    # Lookups
    # -------------------------

    def _select(self, table: str, predicate, exclude_id: Optional[str]) -> List[Row]:
        rows = self._check(table)
        return [
            copy.deepcopy(row)
            for rid, row in rows.items()
            if rid != exclude_id and predicate(row)
        ]

    def find_equal(self, table, field, value, *, exclude_id=None):
        return self._select(table, lambda r: r.get(field) == value, exclude_id)

    def find_containing(self, table, field, value, *, exclude_id=None):
        return self._select(table, lambda r: value in (r.get(field) or []), exclude_id)

    def find_text(self, table, field, needle, *, exclude_id=None):
        needle = needle.lower()
        return self._select(
            table, lambda r: needle in str(r.get(field) or "").lower(), exclude_id
        )

    def get(self, table, record_id):
        row = self._check(table).get(record_id)
        return copy.deepcopy(row) if row is not None else None

    def list(self, table):
        return [copy.deepcopy(r) for r in self._check(table).values()]

    # -------------------------
    # Writes
    # -------------------------

    def insert(self, table: str, row: Row) -> Row:
        rows = self._check(table)
        row = copy.deepcopy(row)
        row.setdefault("id", str(uuid.uuid4()))
        row.setdefault("created_at", datetime.datetime.now(datetime.timezone.utc).isoformat())

        if row["id"] in rows:
            raise StoreError(f"duplicate key {row['id']}", table=table)

        rows[row["id"]] = row
        return copy.deepcopy(row)

    def update(self, table: str, record_id: str, changes: Row) -> Row:
        rows = self._check(table)
        if record_id not in rows:
            raise StoreError(f"no row {record_id}", table=table)

        rows[record_id].update(copy.deepcopy(changes))
        return copy.deepcopy(rows[record_id])

    def delete(self, table: str, record_id: str) -> None:
        rows = self._check(table)
        if record_id not in rows:
            raise StoreError(f"no row {record_id}", table=table)
        del rows[record_id]

    # -------------------------
    # Introspection helpers
    # -------------------------

    def summary(self) -> Dict[str, int]:
        return {table: len(rows) for table, rows in self.tables.items()}
