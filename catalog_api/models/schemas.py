"""
Pydantic schemas for the STAC Catalog Search API.

This module contains the data models used for request validation and
response serialization throughout the API.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class SortRule(BaseModel):
    """
    A single sort rule.

    Attributes:
        field: Document field to sort by (e.g., 'properties.datetime')
        direction: 'asc' or 'desc'
    """
    field: str = Field(..., description="Field to sort by")
    direction: Literal["asc", "desc"] = Field(default="desc", description="Sort direction")


class FieldsSpec(BaseModel):
    """Field projection: extra fields to include and fields to exclude."""
    include: List[str] = Field(default_factory=list, description="Fields to add to the baseline set")
    exclude: List[str] = Field(default_factory=list, description="Fields to drop from results")


class SearchRequest(BaseModel):
    """
    A STAC search request.

    Filter predicates in 'query' map a property name to operators, e.g.
    {"eo:cloud_cover": {"gte": 0, "lt": 10}}. Supported operators are
    eq, in, gt, lt, gte and lte.

    The presence of 'fields' is significant even when empty: any field
    selection switches results to the baseline include set.
    """
    model_config = ConfigDict(populate_by_name=True)

    query: Optional[Dict[str, Dict[str, Any]]] = Field(None, description="Property filters")
    intersects: Optional[Dict[str, Any]] = Field(None, description="GeoJSON geometry to intersect")
    collections: Optional[List[str]] = Field(None, description="Collection ids")
    id: Optional[str] = Field(None, description="Single item id")
    ids: Optional[List[str]] = Field(None, description="Item ids")
    datetime: Optional[str] = Field(None, description="Instant or 'start/end' range")
    sortby: Optional[List[SortRule]] = Field(None, description="Ordered sort rules")
    field_selection: Optional[FieldsSpec] = Field(None, alias="fields", description="Field projection")
    page: int = Field(default=1, ge=1, description="Page number (1-based)")
    limit: int = Field(default=10, ge=1, le=10000, description="Results per page")

    @property
    def has_field_selection(self) -> bool:
        return "field_selection" in self.model_fields_set


class SearchContext(BaseModel):
    """Pagination context of a search response."""
    page: int
    limit: int
    matched: int = Field(..., description="Total hits reported by the engine")
    returned: int = Field(..., description="Results in this page")


class SearchResponse(BaseModel):
    """Response model for searches."""
    results: List[Dict[str, Any]] = Field(..., description="Matched documents")
    context: SearchContext
    links: List[Dict[str, Any]] = Field(default_factory=list, description="Pagination links")


class IngestResponse(BaseModel):
    """Response model for record ingestion."""
    status: str = Field(default="ok", description="Operation status")
    collections: int = Field(..., description="Collections written")
    items: int = Field(..., description="Items written")
    skipped: int = Field(..., description="Records that were neither collections nor items")


class OperationResponse(BaseModel):
    """Generic response for admin operations."""
    status: str = Field(default="ok", description="Operation status")
    message: str = Field(..., description="Operation result message")
