# Centralized MAC address formatting helpers
# Canonical form here means: six uppercase hex octets joined by colons
# (AA:BB:CC:DD:EE:FF)

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, List

CANONICAL_LENGTH = 17
HEX_DIGITS = 12

_NON_HEX = re.compile(r"[^0-9A-Fa-f]")
_CANONICAL = re.compile(r"^([0-9A-Fa-f]{2}:){5}[0-9A-Fa-f]{2}$")
_BARE_HEX = re.compile(r"^[0-9A-Fa-f]{12}$")
# separators a pasted MAC may legitimately carry between octets
_ALLOWED = re.compile(r"^[0-9A-Fa-f:\-. ]+$")
# newline, comma, pipe, or a run of two or more whitespace characters
_BULK_SPLIT = re.compile(r"[\r\n,|]+|\s{2,}")

FIELD_SEPARATOR = " | "


def normalize_mac(value: str | None) -> str:
    """
    Reformat free-form input into (a prefix of) the canonical form.

    Every non-hex character is dropped, a colon goes after every two
    retained digits and the result is cut at 17 characters. Partial
    input yields a partial address, so this is safe to run on every
    keystroke.
    """
    if not value:
        return ""

    clean = _NON_HEX.sub("", value).upper()
    pairs = [clean[i:i + 2] for i in range(0, len(clean), 2)]
    return ":".join(pairs)[:CANONICAL_LENGTH]


def is_valid_format(mac: str | None) -> bool:
    if not mac:
        return False
    return bool(_CANONICAL.match(mac))


def _reinsert_colons(token: str) -> str:
    if _BARE_HEX.match(token):
        return ":".join(token[i:i + 2] for i in range(0, HEX_DIGITS, 2))
    return token


def split_bulk(text: str | None) -> List[str]:
    """
    Split pasted text into candidate MAC tokens.

    Bare 12-digit hex tokens get their colons back; everything else is
    returned trimmed but otherwise untouched.
    """
    if not text:
        return []

    tokens = []
    for part in _BULK_SPLIT.split(text):
        part = part.strip()
        if part:
            tokens.append(_reinsert_colons(part))
    return tokens


@dataclass(frozen=True)
class InvalidToken:
    raw: str
    reason: str


@dataclass
class BulkParse:
    valid: List[str] = field(default_factory=list)
    invalid: List[InvalidToken] = field(default_factory=list)


def _token_problem(token: str) -> str | None:
    if not _ALLOWED.match(token):
        return "contains characters that are not hexadecimal digits or separators"

    digits = len(_NON_HEX.sub("", token))
    if digits != HEX_DIGITS:
        return f"has {digits} hexadecimal digits, expected {HEX_DIGITS}"

    if not is_valid_format(normalize_mac(token)):
        return "does not form six two-digit octets"

    return None


def parse_bulk(text: str | None) -> BulkParse:
    """
    Parse pasted text into canonical MACs plus the tokens that failed.

    Order is kept and duplicates are not collapsed; reporting repeats is
    the list validator's job.
    """
    result = BulkParse()

    for token in split_bulk(text):
        problem = _token_problem(token)
        if problem:
            result.invalid.append(InvalidToken(raw=token, reason=problem))
        else:
            result.valid.append(normalize_mac(token))

    return result


# -------------------------
# RMA single-field codec
# -------------------------

def split_mac_field(value: str | None) -> List[str]:
    """Decode a pipe/comma joined MAC field into canonical MACs."""
    if not value:
        return []

    macs = []
    for part in re.split(r"[|,]", value):
        mac = normalize_mac(part.strip())
        if mac:
            macs.append(mac)
    return macs


def join_mac_field(macs: Iterable[str]) -> str:
    return FIELD_SEPARATOR.join(normalize_mac(m) for m in macs if m)
