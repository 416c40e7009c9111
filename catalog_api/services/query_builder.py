"""
Query Compiler for the STAC Catalog Search API.

Pure functions translating a SearchRequest into an Elasticsearch query
document. Nothing in this module performs I/O.

Compiled filter queries are wrapped in constant_score so results are
filtered, never ranked by relevance:

    {"query": {"constant_score": {"filter": {"bool": {"must": [...]}}}},
     "sort": [...]}
"""

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..constants import DEFAULT_SORT, DEFAULT_SOURCE_INCLUDES, RANGE_OPERATORS
from ..models import SearchRequest

logger = logging.getLogger(__name__)

OPEN_BOUNDS = ("", "..")


def property_key(name: str) -> str:
    return f"properties.{name}"


def build_range_query(prop: str, operators: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Merge every range operator on a property into one range clause.

    Args:
        prop: Property name (without the 'properties.' prefix)
        operators: Operator to operand mapping for the property

    Returns:
        A single range clause, or None if no range operator is present
    """
    bounds = {op: operators[op] for op in RANGE_OPERATORS if op in operators}
    if not bounds:
        return None
    return {"range": {property_key(prop): bounds}}


def build_property_queries(prop: str, operators: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """Compile the clauses for one filtered property."""
    clauses: List[Dict[str, Any]] = []
    # eq is evaluated first and wins over in on the same property
    if "eq" in operators:
        clauses.append({"term": {property_key(prop): operators["eq"]}})
    elif "in" in operators:
        clauses.append({"terms": {property_key(prop): operators["in"]}})

    range_query = build_range_query(prop, operators)
    if range_query:
        clauses.append(range_query)

    unsupported = set(operators) - {"eq", "in", *RANGE_OPERATORS}
    if unsupported:
        logger.debug(f"Ignoring unsupported operator(s) {sorted(unsupported)} on {prop}")
    return clauses


def build_datetime_query(datetime: Optional[str]) -> Optional[Dict[str, Any]]:
    """
    Compile a datetime instant or 'start/end' range.

    An open endpoint ('..' or empty) drops that bound.
    """
    if not datetime:
        return None
    date_range = datetime.split("/")
    if len(date_range) == 2:
        start, end = date_range
        bounds = {}
        if start not in OPEN_BOUNDS:
            bounds["gte"] = start
        if end not in OPEN_BOUNDS:
            bounds["lte"] = end
        if not bounds:
            return None
        return {"range": {"properties.datetime": bounds}}
    return {"term": {"properties.datetime": datetime}}


def build_query(request: SearchRequest) -> Dict[str, Any]:
    """Compile the general filter path into a constant-score boolean filter."""
    must: List[Dict[str, Any]] = []
    for prop, operators in (request.query or {}).items():
        must.extend(build_property_queries(prop, operators))

    if request.collections:
        must.append({"terms": {"collection": request.collections}})

    if request.intersects:
        must.append({"geo_shape": {"geometry": {"shape": request.intersects}}})

    datetime_query = build_datetime_query(request.datetime)
    if datetime_query:
        must.append(datetime_query)

    return {"query": {"constant_score": {"filter": {"bool": {"must": must}}}}}


def build_id_query(item_id: str) -> Dict[str, Any]:
    return {"query": {"constant_score": {"filter": {"term": {"id": item_id}}}}}


def build_ids_query(ids: List[str]) -> Dict[str, Any]:
    return {"query": {"ids": {"values": ids}}}


def build_sort(request: SearchRequest) -> List[Dict[str, Any]]:
    """Compile sort rules in order, defaulting to newest first."""
    if request.sortby:
        return [{rule.field: {"order": rule.direction}} for rule in request.sortby]
    return copy.deepcopy(DEFAULT_SORT)


def build_fields_filter(request: SearchRequest) -> Tuple[List[str], List[str]]:
    """
    Compute _source includes and excludes.

    With no field selection at all, both lists are empty and documents are
    returned whole. Otherwise includes start from the baseline set, gain
    any requested fields and lose every excluded field; excludes are
    carried through unchanged.

    Returns:
        Tuple of (includes, excludes)
    """
    if not request.has_field_selection:
        return [], []

    includes = list(DEFAULT_SOURCE_INCLUDES)
    excludes: List[str] = []
    fields = request.field_selection
    if fields:
        for name in fields.include:
            if name not in includes:
                includes.append(name)
        if fields.exclude:
            includes = [name for name in includes if name not in fields.exclude]
            excludes = list(fields.exclude)
    return includes, excludes


@dataclass
class CompiledSearch:
    """A compiled search: body plus paging and projection parameters."""

    body: Dict[str, Any]
    size: int
    from_: int
    includes: List[str] = field(default_factory=list)
    excludes: List[str] = field(default_factory=list)

    def to_params(self, index: str) -> Dict[str, Any]:
        """Render as search parameters, e.g. for logging."""
        params: Dict[str, Any] = {
            "index": index,
            "body": self.body,
            "size": self.size,
            "from": self.from_,
        }
        if self.includes:
            params["_source_includes"] = self.includes
        if self.excludes:
            params["_source_excludes"] = self.excludes
        return params


def compile_search(request: SearchRequest, page: int = 1, limit: int = 10) -> CompiledSearch:
    """
    Compile a full search request.

    An 'ids' or 'id' shortcut replaces the general filter path entirely.

    Args:
        request: The search request
        page: 1-based page number
        limit: Page size

    Returns:
        CompiledSearch ready for execution
    """
    if request.ids:
        body = build_ids_query(request.ids)
    elif request.id:
        body = build_id_query(request.id)
    else:
        body = build_query(request)
    body["sort"] = build_sort(request)

    includes, excludes = build_fields_filter(request)
    return CompiledSearch(
        body=body,
        size=limit,
        from_=(page - 1) * limit,
        includes=includes,
        excludes=excludes,
    )
