"""
api/routes/records.py -- CRUD routes for the records collection.

Routes:
  GET    /records        -- list (q, _sort, _order, _page, _limit); X-Total-Count header
  POST   /records        -- create; 201 with the assigned id
  GET    /records/{id}   -- detail
  PUT    /records/{id}   -- full replace (title and description required)
  PATCH  /records/{id}   -- partial update
  DELETE /records/{id}   -- 204

Validation:
  Missing or blank title/description is rejected by the request models and
  surfaces as a 400 validation_error through the handler in api/main.py.

Records have no owner. Any authenticated caller may read or write any
record; concurrent writes are last-write-wins.
"""

import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response

from api.models import RecordCreate, RecordPatch, RecordResponse
from auth.dependencies import get_current_user
from records.models import Record
from records.store import RecordStore

logger = logging.getLogger("recordkeeper.api")

# Router-level dependency: every route below requires a valid bearer token.
router = APIRouter(dependencies=[Depends(get_current_user)])


def _not_found(record_id: int) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail={"code": "not_found", "message": f"Record {record_id} not found."},
    )


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------


@router.get("/records", response_model=list[RecordResponse])
def list_records(
    request: Request,
    response: Response,
    q: Optional[str] = Query(default=None, max_length=200),
    sort: Optional[str] = Query(default=None, alias="_sort"),
    order: Literal["asc", "desc"] = Query(default="asc", alias="_order"),
    page: Optional[int] = Query(default=None, alias="_page", ge=1),
    limit: Optional[int] = Query(default=None, alias="_limit", ge=1, le=1000),
) -> list[RecordResponse]:
    """Return records, optionally filtered, sorted and paginated."""
    store: RecordStore = request.app.state.record_store
    records, total = store.list_records(q=q, sort=sort, order=order, page=page, limit=limit)
    response.headers["X-Total-Count"] = str(total)
    return [RecordResponse.from_record(r) for r in records]


@router.post("/records", response_model=RecordResponse, status_code=201)
def create_record(request: Request, body: RecordCreate) -> RecordResponse:
    """Create a record and return it with its assigned id."""
    store: RecordStore = request.app.state.record_store
    record_id = store.create_record(Record(title=body.title, description=body.description))
    logger.info("Record %s created", record_id)
    return RecordResponse.from_record(store.get_record(record_id))


# ---------------------------------------------------------------------------
# Item
# ---------------------------------------------------------------------------


@router.get("/records/{record_id}", response_model=RecordResponse)
def get_record(request: Request, record_id: int) -> RecordResponse:
    store: RecordStore = request.app.state.record_store
    record = store.get_record(record_id)
    if record is None:
        raise _not_found(record_id)
    return RecordResponse.from_record(record)


@router.put("/records/{record_id}", response_model=RecordResponse)
def replace_record(request: Request, record_id: int, body: RecordCreate) -> RecordResponse:
    """Overwrite both fields of an existing record."""
    store: RecordStore = request.app.state.record_store
    if not store.replace_record(record_id, title=body.title, description=body.description):
        raise _not_found(record_id)
    logger.info("Record %s replaced", record_id)
    return RecordResponse.from_record(store.get_record(record_id))


@router.patch("/records/{record_id}", response_model=RecordResponse)
def patch_record(request: Request, record_id: int, body: RecordPatch) -> RecordResponse:
    """Update only the fields present in the body."""
    store: RecordStore = request.app.state.record_store
    changes = body.model_dump(exclude_none=True)
    if not changes:
        raise HTTPException(
            status_code=400,
            detail={"code": "no_changes", "message": "No fields to update."},
        )
    if not store.patch_record(record_id, **changes):
        raise _not_found(record_id)
    logger.info("Record %s patched (%s)", record_id, ", ".join(sorted(changes)))
    return RecordResponse.from_record(store.get_record(record_id))


@router.delete("/records/{record_id}", status_code=204)
def delete_record(request: Request, record_id: int) -> Response:
    store: RecordStore = request.app.state.record_store
    if not store.delete_record(record_id):
        raise _not_found(record_id)
    logger.info("Record %s deleted", record_id)
    return Response(status_code=204)
