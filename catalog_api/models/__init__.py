"""
Models package for the STAC Catalog Search API.

This package contains all Pydantic models used for request validation,
response serialization, and internal data structures.
"""

from .schemas import (
    SortRule,
    FieldsSpec,
    SearchRequest,
    SearchContext,
    SearchResponse,
    IngestResponse,
    OperationResponse,
)

__all__ = [
    "SortRule",
    "FieldsSpec",
    "SearchRequest",
    "SearchContext",
    "SearchResponse",
    "IngestResponse",
    "OperationResponse",
]
