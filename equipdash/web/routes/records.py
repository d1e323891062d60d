from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from equipdash.core.catalog import Collection
from equipdash.records.service import RecordService
from equipdash.web.deps import get_records

router = APIRouter(prefix="/api/records")


def _collection(slug: str) -> Collection:
    try:
        return Collection(slug)
    except ValueError:
        raise HTTPException(status_code=404, detail=f"Unknown collection: {slug}") from None


def _respond(submission, created: bool = False):
    if not submission.accepted:
        return JSONResponse(submission.to_dict(), status_code=422)
    return JSONResponse(submission.to_dict(), status_code=201 if created else 200)


@router.post("/{collection}")
def create_record(
    collection: str,
    row: Dict[str, Any],
    records: RecordService = Depends(get_records),
):
    coll = _collection(collection)
    if coll is Collection.RMA:
        row.setdefault("rma_number", records.next_rma_number())
    return _respond(records.create(coll, row), created=True)


@router.patch("/{collection}/{record_id}")
def update_record(
    collection: str,
    record_id: str,
    changes: Dict[str, Any],
    records: RecordService = Depends(get_records),
):
    return _respond(records.update(_collection(collection), record_id, changes))
