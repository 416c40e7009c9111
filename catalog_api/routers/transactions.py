"""
Transactions Router for the STAC Catalog Search API.

This module contains HTTP push ingestion and partial item updates.
Ingestion runs the same normalizer and bulk pipeline as the queue
indexer and returns only once the batch is confirmed written.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, HTTPException, Path

from ..constants import NAME_PATTERN
from ..deps import get_ingest_pipeline, get_item_service, get_normalizer
from ..errors import CatalogError
from ..models import IngestResponse
from ..services import IngestPipeline, ItemService, RecordNormalizer
from .common import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Transactions"])


@router.post("/ingest", response_model=IngestResponse, summary="Ingest catalog records")
async def ingest_records(
    event: Any = Body(..., description="A record, a list of records, or a queue batch envelope"),
    normalizer: RecordNormalizer = Depends(get_normalizer),
    pipeline: IngestPipeline = Depends(get_ingest_pipeline),
) -> IngestResponse:
    """
    Ingest one batch of collections and items.

    By-reference records ({"href": ...}) are fetched before ingestion.
    The batch is all or nothing: any failure fails the request.
    """
    if not isinstance(event, (dict, list)):
        raise HTTPException(status_code=400, detail="Body must be a JSON object or array.")
    try:
        records = await normalizer.normalize(event)
        result = await pipeline.ingest(records)
    except CatalogError as e:
        raise to_http_exception(e)

    return IngestResponse(
        collections=result.collections,
        items=result.items,
        skipped=result.skipped,
    )


@router.patch("/collections/{collection_id}/items/{item_id}", summary="Partially update an item")
async def update_item(
    collection_id: str = Path(..., pattern=NAME_PATTERN, description="Collection id"),
    item_id: str = Path(..., pattern=NAME_PATTERN, description="Item id"),
    patch: Dict[str, Any] = Body(..., description="Partial item (RFC 7386 merge patch)"),
    items: ItemService = Depends(get_item_service),
) -> Dict[str, Any]:
    """
    Merge a partial item into the stored item.

    properties.updated is always set to the server time.
    """
    if "id" in patch and patch["id"] != item_id:
        raise HTTPException(status_code=400, detail="Patch 'id' does not match the item id in the path.")
    if "collection" in patch and patch["collection"] != collection_id:
        raise HTTPException(
            status_code=400, detail="Patch 'collection' does not match the collection id in the path."
        )
    try:
        return await items.update_item(item_id, patch)
    except CatalogError as e:
        raise to_http_exception(e)
