from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence

from equipdash.core.catalog import (
    STRICT_COLLECTIONS,
    Collection,
    CollectionSpec,
    MacShape,
    spec_for,
)
from equipdash.core.errors import StoreError, ValidationIndeterminate
from equipdash.core.mac import is_valid_format, normalize_mac, split_mac_field
from equipdash.store.base import RecordStore, Row

logger = logging.getLogger(__name__)


@dataclass
class Conflict:
    """One record that already holds the MAC being checked."""
    collection: Collection
    record_id: str
    mac: str
    fields: Dict[str, Any] = field(default_factory=dict)

    @property
    def spec(self) -> CollectionSpec:
        return spec_for(self.collection)

    @property
    def table(self) -> str:
        return self.spec.table

    @property
    def label(self) -> str:
        """Display fields joined, e.g. ``Router X (RX-200)``."""
        values = [str(self.fields[f]) for f in self.spec.display_fields if self.fields.get(f)]
        if not values:
            return self.record_id
        head, *rest = values
        return f"{head} ({', '.join(rest)})" if rest else head

    def to_dict(self) -> Dict[str, Any]:
        return {
            "collection": self.collection.value,
            "table": self.table,
            "record_id": self.record_id,
            "mac": self.mac,
            "label": self.label,
            "fields": dict(self.fields),
        }


@dataclass
class ConflictSet:
    mac: str
    conflicts: List[Conflict] = field(default_factory=list)

    # collections whose lookup failed in a non-strict search
    failed: List[Collection] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.conflicts)

    def __len__(self) -> int:
        return len(self.conflicts)

    def __iter__(self) -> Iterator[Conflict]:
        return iter(self.conflicts)

    @property
    def complete(self) -> bool:
        return not self.failed

    def in_collection(self, collection: Collection) -> List[Conflict]:
        return [c for c in self.conflicts if c.collection is collection]

    def by_collection(self) -> Dict[Collection, List[Conflict]]:
        grouped: Dict[Collection, List[Conflict]] = {}
        for c in self.conflicts:
            grouped.setdefault(c.collection, []).append(c)
        return grouped

    def to_dict(self) -> Dict[str, Any]:
        return {
            "mac": self.mac,
            "conflicts": [c.to_dict() for c in self.conflicts],
            "failed": [c.value for c in self.failed],
        }


class ConflictFinder:
    """
    Looks a MAC up in each MAC-bearing collection.

    One table-driven loop over CollectionSpec replaces a hand-written
    query per table.
    """

    def __init__(self, store: RecordStore):
        self.store = store

    def lookup(self, spec: CollectionSpec, mac: str, exclude_id: Optional[str] = None) -> List[Conflict]:
        """Query a single collection. Raises StoreError on backend failure."""
        if spec.shape is MacShape.SINGLE:
            rows = self.store.find_equal(spec.table, spec.mac_field, mac, exclude_id=exclude_id)
        elif spec.shape is MacShape.ARRAY:
            rows = self.store.find_containing(spec.table, spec.mac_field, mac, exclude_id=exclude_id)
        else:
            # substring search, then confirm on the decoded field so a
            # prefix of a longer token never counts
            rows = [
                r for r in self.store.find_text(spec.table, spec.mac_field, mac, exclude_id=exclude_id)
                if mac in split_mac_field(r.get(spec.mac_field))
            ]

        return [self._to_conflict(spec, mac, row) for row in rows]

    def _to_conflict(self, spec: CollectionSpec, mac: str, row: Row) -> Conflict:
        keep = spec.display_fields + ("created_at",)
        if spec.quantity_field:
            keep += (spec.quantity_field,)
        return Conflict(
            collection=spec.collection,
            record_id=str(row.get("id")),
            mac=mac,
            fields={k: row[k] for k in keep if row.get(k) is not None},
        )

    def find_conflicts(
        self,
        mac: str,
        exclude_id: Optional[str] = None,
        *,
        collections: Sequence[Collection] = STRICT_COLLECTIONS,
        strict: bool = False,
    ) -> ConflictSet:
        """
        Return every record, across ``collections``, holding ``mac``.

        Non-strict searches log a failing collection, note it in
        ``ConflictSet.failed`` and keep going. Strict searches raise
        ValidationIndeterminate instead.
        """
        mac = normalize_mac(mac)
        result = ConflictSet(mac=mac)

        if not is_valid_format(mac):
            return result

        for collection in collections:
            spec = spec_for(collection)
            try:
                found = self.lookup(spec, mac, exclude_id)
            except StoreError as e:
                if strict:
                    raise ValidationIndeterminate(mac, spec.table, e) from e
                logger.warning("Conflict lookup for %s in %s failed: %s", mac, spec.table, e)
                result.failed.append(collection)
                continue

            result.conflicts.extend(found)

        return result

    def conflicting_macs(
        self,
        macs: Iterable[str],
        exclude_id: Optional[str] = None,
        *,
        collections: Sequence[Collection] = STRICT_COLLECTIONS,
    ) -> List[str]:
        """Subset of ``macs`` already present somewhere. Strict."""
        return [
            mac for mac in macs
            if self.find_conflicts(mac, exclude_id, collections=collections, strict=True)
        ]
