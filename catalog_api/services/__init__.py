"""
Services package for the STAC Catalog Search API.

This package contains the engine client and the business logic services
used by the API routes and the indexer. Services encapsulate engine
access and keep routes free of query and ingest details.
"""

from .engine import EngineClient
from .index_manager import IndexManager
from .ingest import IngestPipeline, IngestResult
from .items import ItemService
from .normalizer import RecordNormalizer
from .search_service import SearchService
from .sources import ReferenceFetcher

__all__ = [
    "EngineClient",
    "IndexManager",
    "IngestPipeline",
    "IngestResult",
    "ItemService",
    "RecordNormalizer",
    "SearchService",
    "ReferenceFetcher",
]
