from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from equipdash.core.catalog import (
    RECOVERY_AWARE_COLLECTIONS,
    STRICT_COLLECTIONS,
    CallContext,
    Collection,
    spec_for,
)
from equipdash.core.conflicts import Conflict, ConflictFinder
from equipdash.core.errors import StoreError, ValidationIndeterminate
from equipdash.core.mac import is_valid_format, normalize_mac
from equipdash.core import messages
from equipdash.store.base import RecordStore

logger = logging.getLogger(__name__)


class Verdict(str, Enum):
    ALLOW = "allow"
    REJECT = "reject"


# (collection the MAC was found in, screen the check came from) -> verdict.
# Pairs missing from the table are rejected.
POLICY: Dict[Tuple[Collection, CallContext], Verdict] = {
    (Collection.EQUIPMENT, CallContext.RECOVERY): Verdict.REJECT,
    (Collection.EQUIPMENT, CallContext.PRODUCTION): Verdict.REJECT,
    (Collection.EQUIPMENT, CallContext.OTHER): Verdict.REJECT,
    (Collection.INVENTORY_BOX, CallContext.RECOVERY): Verdict.REJECT,
    (Collection.INVENTORY_BOX, CallContext.PRODUCTION): Verdict.REJECT,
    (Collection.INVENTORY_BOX, CallContext.OTHER): Verdict.REJECT,
    (Collection.DEFECT_REPORT, CallContext.RECOVERY): Verdict.REJECT,
    (Collection.DEFECT_REPORT, CallContext.PRODUCTION): Verdict.REJECT,
    (Collection.DEFECT_REPORT, CallContext.OTHER): Verdict.REJECT,
    # recovered hardware may be reused in a new production run
    (Collection.RECOVERY_REPORT, CallContext.PRODUCTION): Verdict.ALLOW,
    (Collection.RECOVERY_REPORT, CallContext.RECOVERY): Verdict.REJECT,
    (Collection.RECOVERY_REPORT, CallContext.OTHER): Verdict.REJECT,
}


def verdict_for(collection: Collection, context: CallContext) -> Verdict:
    return POLICY.get((collection, context), Verdict.REJECT)


@dataclass(frozen=True)
class MacCheck:
    """
    Outcome of a single uniqueness check.

    Truthy when the MAC is already taken, so ``if enforcer.check_exists(m)``
    reads the same as a plain boolean check.
    """
    mac: str
    exists: bool
    conflict: Optional[Conflict] = None

    # matches the policy let through, e.g. a recovery report seen from production
    allowed: Tuple[Conflict, ...] = ()

    def __bool__(self) -> bool:
        return self.exists

    @property
    def message(self) -> Optional[str]:
        if not self.exists or self.conflict is None:
            return None
        return messages.conflict_message(self.conflict)


class IssueKind(str, Enum):
    FORMAT = "format"
    DUPLICATE = "duplicate"
    CONFLICT = "conflict"
    QUANTITY = "quantity"       # record-level: quantity field vs MAC count


@dataclass(frozen=True)
class MacIssue:
    kind: IssueKind
    mac: str
    message: str
    conflict: Optional[Conflict] = None

    def to_dict(self):
        return {
            "kind": self.kind.value,
            "mac": self.mac,
            "message": self.message,
            "conflict": self.conflict.to_dict() if self.conflict else None,
        }


@dataclass
class ListValidation:
    issues: List[MacIssue] = field(default_factory=list)

    @property
    def valid(self) -> bool:
        return not self.issues

    @property
    def errors(self) -> List[str]:
        return [i.message for i in self.issues]

    def of_kind(self, kind: IssueKind) -> List[MacIssue]:
        return [i for i in self.issues if i.kind is kind]

    def add(self, kind: IssueKind, mac: str, message: str, conflict: Optional[Conflict] = None):
        self.issues.append(MacIssue(kind, mac, message, conflict))

    def to_dict(self):
        return {
            "valid": self.valid,
            "errors": self.errors,
            "issues": [i.to_dict() for i in self.issues],
        }


class UniquenessEnforcer:
    """
    Decides whether a MAC may be accepted.

    Format is the caller's concern: a string that is not a MAC never
    matches anything here. Lookups fail closed: a store error raises
    ValidationIndeterminate and is never reported as "free".
    """

    def __init__(self, store: RecordStore, finder: Optional[ConflictFinder] = None):
        self.store = store
        self.finder = finder or ConflictFinder(store)

    def _check(
        self,
        mac: str,
        collections: Sequence[Collection],
        context: Optional[CallContext],
        exclude_id: Optional[str],
    ) -> MacCheck:
        mac = normalize_mac(mac)
        if not is_valid_format(mac):
            return MacCheck(mac=mac, exists=False)

        allowed: List[Conflict] = []

        for collection in collections:
            spec = spec_for(collection)
            try:
                found = self.finder.lookup(spec, mac, exclude_id)
            except StoreError as e:
                logger.error("Uniqueness lookup for %s in %s failed", mac, spec.table, exc_info=True)
                raise ValidationIndeterminate(mac, spec.table, e) from e

            if not found:
                continue

            if context is None or verdict_for(collection, context) is Verdict.REJECT:
                return MacCheck(mac=mac, exists=True, conflict=found[0], allowed=tuple(allowed))

            logger.info("%s found in %s, allowed from %s context", mac, spec.table, context.value)
            allowed.extend(found)

        return MacCheck(mac=mac, exists=False, allowed=tuple(allowed))

    def check_exists(self, mac: str, exclude_id: Optional[str] = None) -> MacCheck:
        """Equipment, inventory boxes, defect reports; first match rejects."""
        return self._check(mac, STRICT_COLLECTIONS, None, exclude_id)

    def check_exists_with_context(
        self,
        mac: str,
        context: CallContext | str,
        exclude_id: Optional[str] = None,
    ) -> MacCheck:
        """As check_exists, plus recovery reports judged by POLICY."""
        return self._check(mac, RECOVERY_AWARE_COLLECTIONS, CallContext(context), exclude_id)

    def validate_list(
        self,
        macs: Iterable[str],
        context: CallContext | str | None = None,
        exclude_id: Optional[str] = None,
    ) -> ListValidation:
        """
        Check a batch, collecting every problem instead of stopping at the first.

        With no context the strict check is used. MACs are checked one at
        a time, in order.
        """
        result = ListValidation()
        seen = set()
        ctx = CallContext(context) if context is not None else None

        for raw in macs:
            mac = (raw or "").strip()

            if not is_valid_format(mac):
                result.add(IssueKind.FORMAT, mac, messages.format_message(mac))
                continue

            key = mac.upper()
            if key in seen:
                result.add(IssueKind.DUPLICATE, key, messages.duplicate_message(key))
                continue
            seen.add(key)

            if ctx is None:
                check = self.check_exists(key, exclude_id)
            else:
                check = self.check_exists_with_context(key, ctx, exclude_id)

            if check:
                result.add(IssueKind.CONFLICT, key, check.message, check.conflict)

        return result
