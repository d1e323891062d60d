from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, List, Optional

from equipdash.config import Settings, configure_logging
from equipdash.core.catalog import RECOVERY_AWARE_COLLECTIONS, CallContext, Collection
from equipdash.core.conflicts import ConflictFinder
from equipdash.core.enforcer import UniquenessEnforcer
from equipdash.core.errors import (
    ConfigurationError,
    PermissionDenied,
    RemediationError,
    StoreError,
    ValidationIndeterminate,
)
from equipdash.core.mac import is_valid_format, normalize_mac, parse_bulk
from equipdash.core.resolution import ConflictResolver, Role
from equipdash.core.search import search_equipment
from equipdash.core import messages
from equipdash.store.registry import open_store

EXIT_OK = 0
EXIT_REJECTED = 1
EXIT_USAGE = 2
EXIT_INDETERMINATE = 3
EXIT_REMEDIATION = 4

# ----------------------------
# Rendering helpers
# ----------------------------

def _table(rows: List[List[str]], headers: List[str]) -> str:
    """Small dependency-free table renderer."""
    cols = len(headers)
    widths = [len(h) for h in headers]
    for r in rows:
        for i in range(cols):
            widths[i] = max(widths[i], len(r[i]) if i < len(r) else 0)

    def fmt_row(r: List[str]) -> str:
        r = (r + [""] * cols)[:cols]
        return " | ".join((r[i] or "").ljust(widths[i]) for i in range(cols))

    sep = "-+-".join("-" * w for w in widths)
    out = [fmt_row(headers), sep]
    out += [fmt_row(r) for r in rows]
    return "\n".join(out)


def _emit(args, payload: Any, text: str) -> None:
    if args.format == "json":
        print(json.dumps(payload, indent=2))
    else:
        print(text)


def _read_input(value: Optional[str]) -> str:
    """Literal text, ``@file`` or ``-`` for stdin."""
    if value is None or value == "-":
        return sys.stdin.read()
    if value.startswith("@"):
        return Path(value[1:]).read_text(encoding="utf-8")
    return value


def _role(args, settings: Settings) -> Role:
    return Role.ADMIN if settings.is_admin(getattr(args, "user", None)) else Role.USER


# ----------------------------
# Commands
# ----------------------------

def cmd_normalize(args, settings) -> int:
    mac = normalize_mac(args.mac)
    valid = is_valid_format(mac)
    _emit(args, {"mac": mac, "valid": valid}, f"{mac}{'' if valid else '  (incomplete)'}")
    return EXIT_OK if valid else EXIT_REJECTED


def cmd_parse(args, settings) -> int:
    bulk = parse_bulk(_read_input(args.text))
    payload = {
        "valid": bulk.valid,
        "invalid": [{"raw": t.raw, "reason": t.reason} for t in bulk.invalid],
    }
    lines = list(bulk.valid) + [""] + messages.describe_bulk(bulk)
    _emit(args, payload, "\n".join(lines))
    return EXIT_OK if not bulk.invalid else EXIT_REJECTED


def cmd_check(args, settings) -> int:
    mac = normalize_mac(args.mac)
    if not is_valid_format(mac):
        _emit(args, {"mac": args.mac, "exists": False, "valid_format": False},
              messages.format_message(args.mac))
        return EXIT_USAGE

    enforcer = UniquenessEnforcer(open_store(settings))
    if args.context:
        result = enforcer.check_exists_with_context(mac, args.context, args.exclude_id)
    else:
        result = enforcer.check_exists(mac, args.exclude_id)

    payload = {
        "mac": result.mac,
        "exists": result.exists,
        "message": messages.describe_check(result),
        "conflict": result.conflict.to_dict() if result.conflict else None,
    }
    _emit(args, payload, messages.describe_check(result))
    return EXIT_REJECTED if result else EXIT_OK


def cmd_validate(args, settings) -> int:
    bulk = parse_bulk(_read_input(args.text))
    enforcer = UniquenessEnforcer(open_store(settings))

    # unparseable tokens go through the validator too, so they surface as format errors
    macs = bulk.valid + [t.raw for t in bulk.invalid]
    validation = enforcer.validate_list(macs, args.context, args.exclude_id)

    rows = [[i.kind.value, i.mac, i.message] for i in validation.issues]
    text = _table(rows, ["Kind", "MAC", "Problem"]) if rows else messages.describe_validation(validation)[0]
    _emit(args, validation.to_dict(), text)
    return EXIT_OK if validation.valid else EXIT_REJECTED


def cmd_conflicts(args, settings) -> int:
    finder = ConflictFinder(open_store(settings))
    collections = RECOVERY_AWARE_COLLECTIONS
    if args.include_rma:
        collections = collections + (Collection.RMA,)

    found = finder.find_conflicts(args.mac, args.exclude_id, collections=collections)

    rows = [[c.spec.label, c.record_id, c.label] for c in found]
    parts = [f"=== {found.mac} ==="]
    parts.append(_table(rows, ["Collection", "Record", "Details"]) if rows else "(no records hold this MAC)")
    if found.failed:
        parts.append("Could not search: " + ", ".join(c.value for c in found.failed))

    _emit(args, found.to_dict(), "\n".join(parts))
    return EXIT_INDETERMINATE if found.failed else (EXIT_REJECTED if found else EXIT_OK)


def cmd_remove_mac(args, settings) -> int:
    resolver = ConflictResolver(open_store(settings))
    conflict = resolver.locate(args.collection, args.record_id, args.mac)
    resolution = resolver.remove_mac(conflict)
    _emit(args, {"status": resolution.status, "record": resolution.record},
          messages.describe_resolution(resolution))
    return EXIT_OK


def cmd_delete_record(args, settings) -> int:
    resolver = ConflictResolver(open_store(settings))
    conflict = resolver.locate(args.collection, args.record_id, args.mac)

    confirmed = args.yes
    if not confirmed and _role(args, settings) is Role.ADMIN:
        answer = input(f"Delete {conflict.spec.label.lower()} record {conflict.label}? [y/N] ")
        confirmed = answer.strip().lower() in ("y", "yes")

    resolution = resolver.delete_record(conflict, _role(args, settings), confirmed=confirmed)
    _emit(args, {"status": resolution.status}, messages.describe_resolution(resolution))
    return EXIT_OK if resolution.changed else EXIT_REJECTED


def cmd_search(args, settings) -> int:
    results = search_equipment(open_store(settings), args.term)
    rows = [[r["mac_address"], r["name"] or "-", r["model"], r["location"]] for r in results]
    text = _table(rows, ["MAC", "Name", "Model", "Location"]) if rows else "(no equipment found)"
    _emit(args, {"results": results}, text)
    return EXIT_OK


def cmd_serve(args, settings) -> int:
    import uvicorn

    uvicorn.run(
        "equipdash.web.app:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
    )
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="equipdash", description="equipdash (MAC address registry)")
    p.add_argument("--format", choices=["text", "json"], default="text", help="Output format")
    sub = p.add_subparsers(dest="command", required=True)

    contexts = [c.value for c in CallContext]
    collections = [c.value for c in Collection]

    norm = sub.add_parser("normalize", help="Reformat a MAC address")
    norm.add_argument("mac")
    norm.set_defaults(func=cmd_normalize)

    parse = sub.add_parser("parse", help="Split pasted text into MAC addresses")
    parse.add_argument("text", nargs="?", help="Text, @file, or - for stdin (default)")
    parse.set_defaults(func=cmd_parse)

    check = sub.add_parser("check", help="Check whether a MAC is already registered")
    check.add_argument("mac")
    check.add_argument("--context", choices=contexts, help="Apply the recovery rule for this screen")
    check.add_argument("--exclude-id", help="Record being edited")
    check.set_defaults(func=cmd_check)

    validate = sub.add_parser("validate", help="Validate a list of MAC addresses")
    validate.add_argument("text", nargs="?", help="Text, @file, or - for stdin (default)")
    validate.add_argument("--context", choices=contexts)
    validate.add_argument("--exclude-id", help="Record being edited")
    validate.set_defaults(func=cmd_validate)

    conflicts = sub.add_parser("conflicts", help="List every record holding a MAC")
    conflicts.add_argument("mac")
    conflicts.add_argument("--exclude-id", help="Record being edited")
    conflicts.add_argument("--include-rma", action="store_true", help="Also search RMA records")
    conflicts.set_defaults(func=cmd_conflicts)

    def add_target(cmd):
        cmd.add_argument("mac")
        cmd.add_argument("--collection", required=True, choices=collections)
        cmd.add_argument("--record-id", required=True)
        cmd.add_argument("--user", help="Email of the acting user")

    remove = sub.add_parser("remove-mac", help="Strip a MAC out of a multi-MAC record")
    add_target(remove)
    remove.set_defaults(func=cmd_remove_mac)

    delete = sub.add_parser("delete-record", help="Delete a conflicting record (admin)")
    add_target(delete)
    delete.add_argument("--yes", action="store_true", help="Skip the confirmation prompt")
    delete.set_defaults(func=cmd_delete_record)

    search = sub.add_parser("search", help="Find equipment by (part of) its MAC")
    search.add_argument("term")
    search.set_defaults(func=cmd_search)

    serve = sub.add_parser("serve", help="Run the web UI")
    serve.add_argument("--host")
    serve.add_argument("--port", type=int)
    serve.set_defaults(func=cmd_serve)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_USAGE

    configure_logging(settings.log_level)

    try:
        return args.func(args, settings)
    except ValidationIndeterminate:
        print(f"ERROR: {messages.INDETERMINATE_MESSAGE}", file=sys.stderr)
        return EXIT_INDETERMINATE
    except (RemediationError, PermissionDenied) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_REMEDIATION
    except StoreError as e:
        print(f"ERROR: {messages.translate_store_error(str(e))}", file=sys.stderr)
        return EXIT_INDETERMINATE


if __name__ == "__main__":
    raise SystemExit(main())
