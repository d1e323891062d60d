"""
User-facing text for validation and resolution results.

Validation code returns structured values; this module is the only
place that turns them into sentences for the web pages and the CLI.
"""

from __future__ import annotations

import re
from typing import List

from equipdash.core.catalog import by_table
from equipdash.core.conflicts import Conflict

INDETERMINATE_MESSAGE = (
    "The MAC address could not be checked against the existing records. "
    "Nothing was saved; please try again."
)

GENERIC_VALIDATION_MESSAGE = (
    "MAC addresses could not be validated. Check the data and try again."
)

_STORE_DUPLICATE = re.compile(
    r"MAC ([0-9A-F:]+) is already registered.*?in table (\w+)", re.IGNORECASE
)
_STORE_DUPLICATE_IN_RECORD = re.compile(
    r"MAC ([0-9A-F:]+) is duplicated within the same record", re.IGNORECASE
)


def conflict_message(conflict: Conflict) -> str:
    return (
        f"MAC {conflict.mac} is already registered in {conflict.spec.label.lower()}: "
        f"{conflict.label}"
    )


def format_message(mac: str) -> str:
    return f"Invalid MAC format: {mac!r}"


def duplicate_message(mac: str) -> str:
    return f"MAC repeated in the list: {mac}"


def describe_check(check) -> str:
    if check:
        return check.message
    if check.allowed:
        labels = ", ".join(c.label for c in check.allowed)
        return f"MAC {check.mac} is available (recovered in: {labels})"
    return f"MAC {check.mac} is available"


def describe_validation(validation) -> List[str]:
    if validation.valid:
        return ["All MAC addresses are valid and available."]
    return list(validation.errors)


def describe_bulk(bulk) -> List[str]:
    lines = [f"{len(bulk.valid)} valid MAC address(es) read"]
    for token in bulk.invalid:
        lines.append(f"Skipped {token.raw!r}: {token.reason}")
    return lines


def describe_resolution(resolution) -> str:
    spec = resolution.conflict.spec
    target = f"{spec.label.lower()} record {resolution.conflict.label}"
    if resolution.status == "removed":
        return f"Removed {resolution.conflict.mac} from {target}"
    if resolution.status == "deleted":
        return f"Deleted {target}"
    return f"Left {target} unchanged"


def translate_store_error(text: str) -> str:
    """
    Turn a uniqueness violation raised by the database into friendly text.
    """
    text = text or ""

    m = _STORE_DUPLICATE.search(text)
    if m:
        mac, table = m.group(1).upper(), m.group(2)
        try:
            where = by_table(table).label.lower()
        except KeyError:
            where = table
        return (
            f"MAC {mac} is already registered in {where}. "
            "Every MAC must be unique across the system."
        )

    m = _STORE_DUPLICATE_IN_RECORD.search(text)
    if m:
        return (
            f"MAC {m.group(1).upper()} appears more than once in the same record. "
            "Remove the duplicates."
        )

    return GENERIC_VALIDATION_MESSAGE
