"""Identifier issue and decode routes."""

from fastapi import APIRouter, Depends, HTTPException, Query

from api.dependencies import get_generator
from idgen import MAX_ID

router = APIRouter(prefix="/api/v1/ids", tags=["ids"])

MAX_BATCH = 1000


@router.post("")
async def issue(generator=Depends(get_generator)):
    """Issue one identifier. Sent as a string so JSON clients keep all 64 bits."""
    return {"id": str(generator.next_id())}


@router.post("/batch")
async def issue_batch(count: int = Query(10, ge=1, le=MAX_BATCH), generator=Depends(get_generator)):
    """Issue ``count`` identifiers in order."""
    return {"ids": [str(identifier) for identifier in generator.next_ids(count)]}


@router.get("/{identifier}/decode")
async def decode(identifier: int, generator=Depends(get_generator)):
    """Split an identifier into timestamp, node and sequence."""
    if not 0 <= identifier <= MAX_ID:
        raise HTTPException(status_code=422, detail=f"identifier must be within [0, {MAX_ID}]")
    return {"id": str(identifier), **generator.decode(identifier).to_dict()}
