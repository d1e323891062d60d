from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple


class Collection(str, Enum):
    EQUIPMENT = "equipment"
    INVENTORY_BOX = "inventory_box"
    DEFECT_REPORT = "defect_report"
    RECOVERY_REPORT = "recovery_report"
    RMA = "rma"


class MacShape(str, Enum):
    SINGLE = "single"        # one MAC in a text column
    ARRAY = "array"          # text[] column
    JOINED = "joined"        # " | " joined text column


class CallContext(str, Enum):
    """Screen a check is issued from; drives the recovery exception."""
    RECOVERY = "recovery"
    PRODUCTION = "production"
    OTHER = "other"


@dataclass(frozen=True)
class CollectionSpec:
    collection: Collection
    table: str
    label: str
    mac_field: str
    shape: MacShape
    display_fields: Tuple[str, ...]
    quantity_field: str | None = None

    @property
    def multi_mac(self) -> bool:
        return self.shape is MacShape.ARRAY


def _all_specs() -> List[CollectionSpec]:
    """
    Every MAC-bearing collection, in lookup order.
    This is the single source of truth.
    """
    return [
        CollectionSpec(
            Collection.EQUIPMENT,
            table="equipment",
            label="Equipment",
            mac_field="mac_address",
            shape=MacShape.SINGLE,
            display_fields=("name", "model"),
        ),
        CollectionSpec(
            Collection.INVENTORY_BOX,
            table="inventory_boxes",
            label="Inventory boxes",
            mac_field="macs",
            shape=MacShape.ARRAY,
            display_fields=("box_number", "equipment", "model"),
        ),
        CollectionSpec(
            Collection.DEFECT_REPORT,
            table="defect_reports",
            label="Defect reports",
            mac_field="macs",
            shape=MacShape.ARRAY,
            display_fields=("equipment", "model", "registered_on"),
            quantity_field="quantity",
        ),
        CollectionSpec(
            Collection.RECOVERY_REPORT,
            table="recovery_reports",
            label="Recovery reports",
            mac_field="macs",
            shape=MacShape.ARRAY,
            display_fields=("equipment", "problem", "solution", "responsible"),
        ),
        CollectionSpec(
            Collection.RMA,
            table="rma_records",
            label="RMA records",
            mac_field="mac_address",
            shape=MacShape.JOINED,
            display_fields=("rma_number", "equipment", "model"),
        ),
    ]


_SPECS = {s.collection: s for s in _all_specs()}

STRICT_COLLECTIONS = (
    Collection.EQUIPMENT,
    Collection.INVENTORY_BOX,
    Collection.DEFECT_REPORT,
)

RECOVERY_AWARE_COLLECTIONS = STRICT_COLLECTIONS + (Collection.RECOVERY_REPORT,)


def spec_for(collection: Collection | str) -> CollectionSpec:
    return _SPECS[Collection(collection)]


def by_table(table: str) -> CollectionSpec:
    for spec in _SPECS.values():
        if spec.table == table:
            return spec
    raise KeyError(table)


def available_collections():
    return [
        {
            "slug": s.collection.value,
            "table": s.table,
            "label": s.label,
            "multi_mac": s.multi_mac,
        }
        for s in _all_specs()
    ]
