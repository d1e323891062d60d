from __future__ import annotations

import re
from typing import Any, Dict, List

from equipdash.core.catalog import Collection, spec_for
from equipdash.store.base import RecordStore

MIN_SEARCH_DIGITS = 2


def _hex_only(value: str | None) -> str:
    return re.sub(r"[^0-9a-f]", "", (value or "").lower())


def search_equipment(store: RecordStore, term: str) -> List[Dict[str, Any]]:
    """
    Equipment whose MAC contains the hex digits typed so far.

    Separators and case are ignored on both sides, so ``c85a`` finds
    ``C8:5A:9F:C7:B9:C0``. Fewer than two digits returns nothing.
    """
    needle = _hex_only(term)
    if len(needle) < MIN_SEARCH_DIGITS:
        return []

    spec = spec_for(Collection.EQUIPMENT)
    results = []
    for row in store.list(spec.table):
        mac = row.get(spec.mac_field)
        if mac and needle in _hex_only(mac):
            results.append({
                "id": row.get("id"),
                "name": row.get("name"),
                "model": row.get("model") or "N/A",
                "mac_address": mac,
                "location": row.get("location") or "not set",
            })

    results.sort(key=lambda r: str(r["mac_address"]))
    return results
