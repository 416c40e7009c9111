"""
Shared helpers for the API routers: error mapping and GET parameter parsing.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from fastapi import HTTPException

from ..errors import (
    CatalogError,
    EngineError,
    InvalidRecordError,
    MissingCollectionError,
    NotFoundError,
    SourceFetchError,
    UnsupportedSourceError,
)

logger = logging.getLogger(__name__)


def to_http_exception(error: CatalogError) -> HTTPException:
    """Map a catalog error onto an HTTP status."""
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, (InvalidRecordError, MissingCollectionError, UnsupportedSourceError)):
        return HTTPException(status_code=400, detail=str(error))
    if isinstance(error, (EngineError, SourceFetchError)):
        return HTTPException(status_code=502, detail=str(error))
    logger.error(f"Unmapped catalog error: {error}")
    return HTTPException(status_code=500, detail=str(error))


def split_csv(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def parse_sortby(value: str) -> List[Dict[str, str]]:
    """Parse '+field,-other' into sort rules; no prefix means ascending."""
    rules = []
    for part in split_csv(value):
        if part.startswith("-"):
            rules.append({"field": part[1:], "direction": "desc"})
        else:
            rules.append({"field": part.lstrip("+"), "direction": "asc"})
    return rules


def parse_fields(value: str) -> Dict[str, List[str]]:
    """Parse 'a,-b' into include and exclude lists."""
    include, exclude = [], []
    for part in split_csv(value):
        if part.startswith("-"):
            exclude.append(part[1:])
        else:
            include.append(part.lstrip("+"))
    return {"include": include, "exclude": exclude}


def parse_json_param(name: str, value: str) -> Any:
    try:
        return json.loads(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Query parameter '{name}' must be valid JSON.")
