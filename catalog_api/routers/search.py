"""
Search Router for the STAC Catalog Search API.

This module contains the item search endpoints and the read-only
collection and item lookups.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request
from pydantic import ValidationError

from ..constants import NAME_PATTERN
from ..deps import get_search_service
from ..errors import CatalogError
from ..models import SearchRequest, SearchResponse
from ..services import SearchService
from .common import parse_fields, parse_json_param, parse_sortby, split_csv, to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Search"])


def _get_next_link(request: Request, limit: int):
    def build(page: int) -> Dict[str, Any]:
        return {
            "rel": "next",
            "title": "next",
            "type": "application/json",
            "href": str(request.url.include_query_params(page=page, limit=limit)),
        }
    return build


def _post_next_link(request: Request):
    def build(page: int) -> Dict[str, Any]:
        return {
            "rel": "next",
            "title": "next",
            "type": "application/json",
            "href": str(request.url),
            "method": "POST",
            "body": {"page": page},
            "merge": True,
        }
    return build


@router.get("/search", response_model=SearchResponse, summary="Search items")
async def search_items_get(
    request: Request,
    collections: Optional[str] = Query(None, description="Comma-separated collection ids"),
    ids: Optional[str] = Query(None, description="Comma-separated item ids"),
    datetime: Optional[str] = Query(None, description="Instant or 'start/end' range"),
    intersects: Optional[str] = Query(None, description="GeoJSON geometry"),
    query: Optional[str] = Query(None, description="JSON property filters"),
    sortby: Optional[str] = Query(None, description="Sort fields, e.g. '-properties.datetime,+id'"),
    fields: Optional[str] = Query(None, description="Field projection, e.g. 'properties.eo:cloud_cover,-bbox'"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=10000, description="Results per page"),
    search: SearchService = Depends(get_search_service),
) -> SearchResponse:
    """
    Search items with query-string parameters.

    Returns:
        SearchResponse with results, paging context and a next link
    """
    params: Dict[str, Any] = {"page": page, "limit": limit}
    if collections:
        params["collections"] = split_csv(collections)
    if ids:
        params["ids"] = split_csv(ids)
    if datetime:
        params["datetime"] = datetime
    if intersects:
        params["intersects"] = parse_json_param("intersects", intersects)
    if query:
        params["query"] = parse_json_param("query", query)
    if sortby:
        params["sortby"] = parse_sortby(sortby)
    if fields is not None:
        params["fields"] = parse_fields(fields)

    try:
        search_request = SearchRequest(**params)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        return await search.search(
            search_request,
            index=search.items_index,
            page=page,
            limit=limit,
            next_link=_get_next_link(request, limit),
        )
    except CatalogError as e:
        raise to_http_exception(e)


@router.post("/search", response_model=SearchResponse, summary="Search items")
async def search_items_post(
    request: Request,
    search_request: SearchRequest,
    search: SearchService = Depends(get_search_service),
) -> SearchResponse:
    """
    Search items with a JSON body.

    Paging comes from the body's 'page' and 'limit'.
    """
    try:
        return await search.search(
            search_request,
            index=search.items_index,
            page=search_request.page,
            limit=search_request.limit,
            next_link=_post_next_link(request),
        )
    except CatalogError as e:
        raise to_http_exception(e)


@router.get("/collections", response_model=SearchResponse, summary="List collections")
async def list_collections(
    request: Request,
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=10000, description="Results per page"),
    search: SearchService = Depends(get_search_service),
) -> SearchResponse:
    try:
        return await search.list_collections(
            page=page, limit=limit, next_link=_get_next_link(request, limit)
        )
    except CatalogError as e:
        raise to_http_exception(e)


@router.get("/collections/{collection_id}", summary="Get a collection")
async def get_collection(
    collection_id: str = Path(..., pattern=NAME_PATTERN, description="Collection id"),
    search: SearchService = Depends(get_search_service),
) -> Dict[str, Any]:
    try:
        return await search.get_collection(collection_id)
    except CatalogError as e:
        raise to_http_exception(e)


@router.get(
    "/collections/{collection_id}/items",
    response_model=SearchResponse,
    summary="List items of a collection",
)
async def list_collection_items(
    request: Request,
    collection_id: str = Path(..., pattern=NAME_PATTERN, description="Collection id"),
    datetime: Optional[str] = Query(None, description="Instant or 'start/end' range"),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(10, ge=1, le=10000, description="Results per page"),
    search: SearchService = Depends(get_search_service),
) -> SearchResponse:
    search_request = SearchRequest(collections=[collection_id], datetime=datetime)
    try:
        return await search.search(
            search_request,
            index=search.items_index,
            page=page,
            limit=limit,
            next_link=_get_next_link(request, limit),
        )
    except CatalogError as e:
        raise to_http_exception(e)


@router.get("/collections/{collection_id}/items/{item_id}", summary="Get an item")
async def get_item(
    collection_id: str = Path(..., pattern=NAME_PATTERN, description="Collection id"),
    item_id: str = Path(..., pattern=NAME_PATTERN, description="Item id"),
    search: SearchService = Depends(get_search_service),
) -> Dict[str, Any]:
    try:
        return await search.get_item(collection_id, item_id)
    except CatalogError as e:
        raise to_http_exception(e)
