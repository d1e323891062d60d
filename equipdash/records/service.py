from __future__ import annotations

import datetime
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple

from equipdash.core.catalog import CallContext, Collection, CollectionSpec, MacShape, spec_for
from equipdash.core.enforcer import IssueKind, ListValidation, UniquenessEnforcer
from equipdash.core.errors import RecordNotFound
from equipdash.core.mac import is_valid_format, join_mac_field
from equipdash.core import messages
from equipdash.store.base import RecordStore, Row

logger = logging.getLogger(__name__)

# screen each collection is written from, for the recovery exception
CONTEXTS: Dict[Collection, CallContext] = {
    Collection.EQUIPMENT: CallContext.PRODUCTION,
    Collection.INVENTORY_BOX: CallContext.PRODUCTION,
    Collection.DEFECT_REPORT: CallContext.OTHER,
    Collection.RECOVERY_REPORT: CallContext.RECOVERY,
}


@dataclass
class Submission:
    record: Optional[Row] = None
    validation: ListValidation = field(default_factory=ListValidation)

    @property
    def accepted(self) -> bool:
        return self.record is not None

    def to_dict(self):
        return {
            "accepted": self.accepted,
            "record": self.record,
            "validation": self.validation.to_dict(),
        }


def _macs_of(spec: CollectionSpec, value: Any) -> Optional[List[str]]:
    """Raw MAC tokens of a submitted field, or None when the field has the wrong shape."""
    if value is None:
        return []
    if isinstance(value, str):
        if spec.shape is MacShape.JOINED:
            # keep the raw tokens so bad ones are reported, not normalized away
            return [p.strip() for p in re.split(r"[|,]", value) if p.strip()]
        return [value.strip()] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(m).strip() for m in value if m is not None]
    return None


def _stored_value(spec: CollectionSpec, macs: List[str]) -> Any:
    macs = [m.upper() for m in macs]
    if spec.shape is MacShape.SINGLE:
        return macs[0] if macs else None
    if spec.shape is MacShape.JOINED:
        return join_mac_field(macs)
    return macs


class RecordService:
    """
    Gate in front of every write that carries MAC addresses.

    A submission is validated in full first; nothing is written unless
    every MAC passes. Edits exclude the edited record from the lookups.
    """

    def __init__(self, store: RecordStore, enforcer: Optional[UniquenessEnforcer] = None):
        self.store = store
        self.enforcer = enforcer or UniquenessEnforcer(store)

    # -------------------------
    # Validation
    # -------------------------

    def _format_only(self, macs: Iterable[str]) -> ListValidation:
        result = ListValidation()
        seen = set()
        for mac in macs:
            if not is_valid_format(mac):
                result.add(IssueKind.FORMAT, mac, messages.format_message(mac))
            elif mac.upper() in seen:
                result.add(IssueKind.DUPLICATE, mac.upper(), messages.duplicate_message(mac.upper()))
            else:
                seen.add(mac.upper())
        return result

    def validate(self, collection: Collection | str, macs: List[str], exclude_id: Optional[str] = None) -> ListValidation:
        spec = spec_for(collection)
        if spec.collection is Collection.RMA:
            # returned hardware is registered elsewhere by definition
            return self._format_only(macs)
        if spec.shape is MacShape.SINGLE and len(macs) > 1:
            result = ListValidation()
            result.add(IssueKind.FORMAT, ", ".join(macs), f"{spec.label} holds a single MAC address")
            return result
        return self.enforcer.validate_list(macs, CONTEXTS[spec.collection], exclude_id)

    def _collect(self, spec: CollectionSpec, value: Any, exclude_id: Optional[str] = None) -> Tuple[Optional[List[str]], ListValidation]:
        macs = _macs_of(spec, value)
        if macs is None:
            result = ListValidation()
            result.add(
                IssueKind.FORMAT,
                repr(value),
                f"{spec.mac_field} must be text or a list of MAC addresses, got {type(value).__name__}",
            )
            return None, result
        return macs, self.validate(spec.collection, macs, exclude_id)

    def _check_quantity(self, spec: CollectionSpec, row: Row, macs: List[str], validation: ListValidation):
        if not spec.quantity_field:
            return

        quantity = row.get(spec.quantity_field)
        if quantity is None:
            row[spec.quantity_field] = len(macs)
            return

        try:
            count = int(quantity)
        except (TypeError, ValueError):
            validation.add(IssueKind.QUANTITY, "", f"Quantity {quantity!r} is not a whole number")
            return

        if count != len(macs):
            validation.add(
                IssueKind.QUANTITY,
                "",
                f"Quantity {quantity} does not match the {len(macs)} MAC address(es) given",
            )

    # -------------------------
    # Writes
    # -------------------------

    def create(self, collection: Collection | str, row: Row) -> Submission:
        spec = spec_for(collection)
        row = dict(row)

        macs, validation = self._collect(spec, row.get(spec.mac_field))
        if macs is not None:
            self._check_quantity(spec, row, macs, validation)

        if not validation.valid:
            logger.info("Blocked new %s record: %s", spec.table, "; ".join(validation.errors))
            return Submission(None, validation)

        row[spec.mac_field] = _stored_value(spec, macs)
        record = self.store.insert(spec.table, row)
        logger.info("Created %s/%s with %d MAC(s)", spec.table, record.get("id"), len(macs))
        return Submission(record, validation)

    def update(self, collection: Collection | str, record_id: str, changes: Row) -> Submission:
        """
        Validate and apply a partial edit. Raises RecordNotFound for an unknown id.

        When the MAC field changes on a collection with a quantity field,
        the quantity follows the new list length, an empty list included.
        """
        spec = spec_for(collection)
        changes = dict(changes)
        validation = ListValidation()

        current = self.store.get(spec.table, record_id)
        if current is None:
            raise RecordNotFound(spec.table, record_id)

        if spec.mac_field in changes:
            macs, validation = self._collect(spec, changes[spec.mac_field], exclude_id=record_id)
            if macs is not None:
                self._check_quantity(spec, changes, macs, validation)
                changes[spec.mac_field] = _stored_value(spec, macs)
        elif spec.quantity_field and spec.quantity_field in changes:
            stored = _macs_of(spec, current.get(spec.mac_field)) or []
            self._check_quantity(spec, changes, stored, validation)

        if not validation.valid:
            logger.info("Blocked edit of %s/%s: %s", spec.table, record_id, "; ".join(validation.errors))
            return Submission(None, validation)

        record = self.store.update(spec.table, record_id, changes)
        return Submission(record, validation)

    # -------------------------
    # Per-collection helpers
    # -------------------------

    def create_equipment(self, name: str, mac_address: Optional[str] = None, **fields) -> Submission:
        return self.create(Collection.EQUIPMENT, dict(fields, name=name, mac_address=mac_address))

    def create_box(self, box_number: str, equipment: str, macs: List[str], **fields) -> Submission:
        return self.create(
            Collection.INVENTORY_BOX,
            dict(fields, box_number=box_number, equipment=equipment, macs=macs),
        )

    def create_defect(
        self, equipment: str, model: str, macs: List[str], quantity: Optional[int] = None, **fields
    ) -> Submission:
        row = dict(fields, equipment=equipment, model=model, macs=macs)
        if quantity is not None:
            row["quantity"] = quantity
        return self.create(Collection.DEFECT_REPORT, row)

    def create_recovery(
        self, equipment: str, problem: str, solution: str, responsible: str, macs: List[str], **fields
    ) -> Submission:
        return self.create(
            Collection.RECOVERY_REPORT,
            dict(fields, equipment=equipment, problem=problem, solution=solution,
                 responsible=responsible, macs=macs),
        )

    def create_rma(self, equipment: str, mac_address: str | List[str] = "", **fields) -> Submission:
        row = dict(fields, equipment=equipment, mac_address=mac_address)
        row.setdefault("rma_number", self.next_rma_number())
        return self.create(Collection.RMA, row)

    def next_rma_number(self, today: Optional[datetime.date] = None) -> str:
        """RMA-<year>-<NNN>, numbered within the current year."""
        year = (today or datetime.date.today()).year
        spec = spec_for(Collection.RMA)
        count = sum(
            1 for r in self.store.list(spec.table)
            if str(r.get("created_at", "")).startswith(str(year))
        )
        return f"RMA-{year}-{count + 1:03d}"
