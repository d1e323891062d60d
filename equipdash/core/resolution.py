from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from equipdash.core.catalog import (
    RECOVERY_AWARE_COLLECTIONS,
    Collection,
    CollectionSpec,
    spec_for,
)
from equipdash.core.conflicts import Conflict, ConflictFinder, ConflictSet
from equipdash.core.errors import PermissionDenied, RemediationError, StoreError
from equipdash.core.mac import normalize_mac
from equipdash.store.base import RecordStore, Row

logger = logging.getLogger(__name__)


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


class Action(str, Enum):
    REMOVE_MAC = "remove_mac"
    EDIT_RECORD = "edit_record"
    DELETE_RECORD = "delete_record"


EDITOR_PATHS: Dict[Collection, str] = {
    Collection.EQUIPMENT: "/equipment",
    Collection.INVENTORY_BOX: "/inventory",
    Collection.DEFECT_REPORT: "/defects",
    Collection.RECOVERY_REPORT: "/recovery",
    Collection.RMA: "/rma",
}


@dataclass(frozen=True)
class Resolution:
    conflict: Conflict
    status: str                 # removed | deleted | cancelled
    record: Optional[Row] = None

    @property
    def changed(self) -> bool:
        return self.status != "cancelled"


@dataclass(frozen=True)
class EditTarget:
    conflict: Conflict
    url: str


@dataclass
class ConflictEntry:
    conflict: Conflict
    actions: List[Action]

    @property
    def informational(self) -> bool:
        # single-MAC records can only be fixed by editing them by hand
        return not self.conflict.spec.multi_mac


@dataclass
class ResolutionView:
    mac: str
    role: Role
    conflicts: ConflictSet
    groups: List[Tuple[CollectionSpec, List[ConflictEntry]]] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.conflicts

    def to_dict(self):
        return {
            "mac": self.mac,
            "role": self.role.value,
            "failed": [c.value for c in self.conflicts.failed],
            "groups": [
                {
                    "collection": spec.collection.value,
                    "label": spec.label,
                    "conflicts": [
                        dict(
                            e.conflict.to_dict(),
                            actions=[a.value for a in e.actions],
                            informational=e.informational,
                        )
                        for e in entries
                    ],
                }
                for spec, entries in self.groups
            ],
        }


class ConflictResolver:
    """
    Remediation for a MAC that is already in use.

    Every user may strip the MAC out of a multi-MAC record. Editing or
    deleting a whole record is reserved for admins, and deletion needs
    explicit confirmation.
    """

    def __init__(self, store: RecordStore, finder: Optional[ConflictFinder] = None):
        self.store = store
        self.finder = finder or ConflictFinder(store)

    def actions_for(self, conflict: Conflict, role: Role) -> List[Action]:
        actions = []
        if role is Role.ADMIN:
            actions += [Action.EDIT_RECORD, Action.DELETE_RECORD]
        if conflict.spec.multi_mac:
            actions.append(Action.REMOVE_MAC)
        return actions

    def open(self, mac: str, role: Role = Role.USER, exclude_id: Optional[str] = None) -> ResolutionView:
        conflicts = self.finder.find_conflicts(
            mac, exclude_id, collections=RECOVERY_AWARE_COLLECTIONS
        )
        view = ResolutionView(mac=conflicts.mac, role=role, conflicts=conflicts)

        for collection, found in conflicts.by_collection().items():
            entries = [ConflictEntry(c, self.actions_for(c, role)) for c in found]
            view.groups.append((spec_for(collection), entries))

        return view

    def locate(self, collection: Collection | str, record_id: str, mac: str) -> Conflict:
        """Rebuild a Conflict for a record named by a form post or CLI flag."""
        spec = spec_for(collection)
        mac = normalize_mac(mac)

        try:
            found = self.finder.lookup(spec, mac)
        except StoreError as e:
            raise RemediationError(f"Could not read {spec.table}: {e}") from e

        for conflict in found:
            if conflict.record_id == record_id:
                return conflict

        raise RemediationError(f"{spec.label} record {record_id} does not hold {mac}")

    # -------------------------
    # Actions
    # -------------------------

    def remove_mac(self, conflict: Conflict) -> Resolution:
        spec = conflict.spec
        if not spec.multi_mac:
            raise RemediationError(
                f"Cannot strip the MAC from a {spec.label.lower()} record; edit it instead"
            )

        try:
            current = self.store.get(spec.table, conflict.record_id)
        except StoreError as e:
            raise RemediationError(f"Could not read {spec.table}/{conflict.record_id}: {e}") from e

        if current is None:
            raise RemediationError(f"{spec.label} record {conflict.record_id} no longer exists")

        target = conflict.mac.upper()
        updated = [m for m in (current.get(spec.mac_field) or []) if m and str(m).upper() != target]

        changes: Row = {spec.mac_field: updated}
        if spec.quantity_field:
            changes[spec.quantity_field] = len(updated)

        try:
            record = self.store.update(spec.table, conflict.record_id, changes)
        except StoreError as e:
            raise RemediationError(f"Could not update {spec.table}/{conflict.record_id}: {e}") from e

        logger.info("Removed %s from %s/%s", conflict.mac, spec.table, conflict.record_id)
        return Resolution(conflict, "removed", record)

    def edit_target(self, conflict: Conflict, role: Role) -> EditTarget:
        if role is not Role.ADMIN:
            raise PermissionDenied("Editing a full record requires an admin")
        path = EDITOR_PATHS[conflict.collection]
        return EditTarget(conflict, f"{path}?edit={conflict.record_id}")

    def delete_record(self, conflict: Conflict, role: Role, *, confirmed: bool = False) -> Resolution:
        if role is not Role.ADMIN:
            raise PermissionDenied("Deleting a full record requires an admin")

        if not confirmed:
            return Resolution(conflict, "cancelled")

        spec = conflict.spec
        try:
            self.store.delete(spec.table, conflict.record_id)
        except StoreError as e:
            raise RemediationError(f"Could not delete {spec.table}/{conflict.record_id}: {e}") from e

        logger.info("Deleted %s/%s (held %s)", spec.table, conflict.record_id, conflict.mac)
        return Resolution(conflict, "deleted")
