"""
Admin Router for the STAC Catalog Search API.

This module contains the index lifecycle endpoints.
"""

import logging

from fastapi import APIRouter, Depends, Path

from ..constants import NAME_PATTERN
from ..deps import get_index_manager
from ..errors import CatalogError
from ..models import OperationResponse
from ..services import IndexManager
from .common import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Administration"])


@router.put("/indices/{index_name}", summary="Create an index if missing")
async def ensure_index(
    index_name: str = Path(..., pattern=NAME_PATTERN, description="Index name"),
    manager: IndexManager = Depends(get_index_manager),
) -> OperationResponse:
    """
    Ensure an index exists, creating it with its mapping if needed.

    Safe to call repeatedly.
    """
    try:
        created = await manager.ensure_index(index_name)
    except CatalogError as e:
        raise to_http_exception(e)
    if created:
        return OperationResponse(message=f"Index '{index_name}' created.")
    return OperationResponse(message=f"Index '{index_name}' already exists.")


@router.post("/indices", summary="Create the catalog indices if missing")
async def ensure_indices(
    manager: IndexManager = Depends(get_index_manager),
) -> OperationResponse:
    try:
        await manager.ensure_indices()
    except CatalogError as e:
        raise to_http_exception(e)
    return OperationResponse(
        message=f"Indices '{manager.collections_index}' and '{manager.items_index}' are ready."
    )
