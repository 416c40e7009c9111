"""
FastAPI dependencies for the catalog routers.

Each getter returns a service the lifespan built on app.state. Tests swap
them out through app.dependency_overrides.
"""
from fastapi import Request

from .services import IndexManager, IngestPipeline, ItemService, RecordNormalizer, SearchService


def get_search_service(request: Request) -> SearchService:
    if not hasattr(request.app.state, "search_service"):
        raise NotImplementedError("Search service not initialized")
    return request.app.state.search_service


def get_item_service(request: Request) -> ItemService:
    if not hasattr(request.app.state, "item_service"):
        raise NotImplementedError("Item service not initialized")
    return request.app.state.item_service


def get_index_manager(request: Request) -> IndexManager:
    if not hasattr(request.app.state, "index_manager"):
        raise NotImplementedError("Index manager not initialized")
    return request.app.state.index_manager


def get_ingest_pipeline(request: Request) -> IngestPipeline:
    if not hasattr(request.app.state, "ingest_pipeline"):
        raise NotImplementedError("Ingest pipeline not initialized")
    return request.app.state.ingest_pipeline


def get_normalizer(request: Request) -> RecordNormalizer:
    if not hasattr(request.app.state, "normalizer"):
        raise NotImplementedError("Record normalizer not initialized")
    return request.app.state.normalizer
