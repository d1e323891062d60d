from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from equipdash.core.catalog import RECOVERY_AWARE_COLLECTIONS, CallContext, Collection, available_collections
from equipdash.core.conflicts import ConflictFinder
from equipdash.core.enforcer import UniquenessEnforcer
from equipdash.core.mac import is_valid_format, normalize_mac, parse_bulk
from equipdash.core.resolution import ConflictResolver, Role
from equipdash.core.search import search_equipment
from equipdash.core import messages
from equipdash.store.base import RecordStore
from equipdash.web.deps import get_enforcer, get_finder, get_resolver, get_role, get_store

router = APIRouter(prefix="/api")


class MacIn(BaseModel):
    mac: str


class TextIn(BaseModel):
    text: str


class CheckIn(BaseModel):
    mac: str
    context: Optional[CallContext] = None
    exclude_id: Optional[str] = None


class ListIn(BaseModel):
    macs: List[str]
    context: Optional[CallContext] = None
    exclude_id: Optional[str] = None


@router.get("/collections")
def collections():
    return available_collections()


@router.post("/macs/normalize")
def normalize(body: MacIn):
    mac = normalize_mac(body.mac)
    return {"mac": mac, "valid": is_valid_format(mac)}


@router.post("/macs/parse")
def parse(body: TextIn):
    bulk = parse_bulk(body.text)
    return {
        "valid": bulk.valid,
        "invalid": [{"raw": t.raw, "reason": t.reason} for t in bulk.invalid],
    }


@router.post("/macs/check")
def check(body: CheckIn, enforcer: UniquenessEnforcer = Depends(get_enforcer)):
    if not is_valid_format(normalize_mac(body.mac)):
        return {"mac": body.mac, "valid_format": False, "exists": False,
                "message": messages.format_message(body.mac)}

    if body.context is None:
        result = enforcer.check_exists(body.mac, body.exclude_id)
    else:
        result = enforcer.check_exists_with_context(body.mac, body.context, body.exclude_id)

    return {
        "mac": result.mac,
        "valid_format": True,
        "exists": result.exists,
        "message": messages.describe_check(result),
        "conflict": result.conflict.to_dict() if result.conflict else None,
        "allowed": [c.to_dict() for c in result.allowed],
    }


@router.post("/macs/validate")
def validate(body: ListIn, enforcer: UniquenessEnforcer = Depends(get_enforcer)):
    return enforcer.validate_list(body.macs, body.context, body.exclude_id).to_dict()


@router.post("/macs/conflicting")
def conflicting(body: ListIn, finder: ConflictFinder = Depends(get_finder)):
    """MACs of a batch that already exist somewhere; drives the "validate MACs" button."""
    conflicts = finder.conflicting_macs(body.macs, body.exclude_id)
    return {"valid": not conflicts, "conflicts": conflicts}


@router.get("/macs/{mac}/conflicts")
def conflicts(
    mac: str,
    exclude_id: Optional[str] = None,
    resolver: ConflictResolver = Depends(get_resolver),
    role: Role = Depends(get_role),
):
    return resolver.open(mac, role, exclude_id).to_dict()


@router.get("/macs/{mac}/occurrences")
def occurrences(mac: str, finder: ConflictFinder = Depends(get_finder)):
    """Every record holding the MAC, RMA records included."""
    found = finder.find_conflicts(
        mac, collections=RECOVERY_AWARE_COLLECTIONS + (Collection.RMA,)
    )
    return found.to_dict()


@router.get("/search")
def search(q: str = "", store: RecordStore = Depends(get_store)):
    return {"results": search_equipment(store, q)}
