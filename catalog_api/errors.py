"""
Exception taxonomy for the STAC catalog services.

Every error raised by the ingestion and query paths derives from
CatalogError so callers (API routers, the indexer loop) can map them
to responses or exit codes in one place.
"""

from typing import Optional


class CatalogError(Exception):
    """Base class for all catalog errors."""


class UnsupportedSourceError(CatalogError):
    """A by-reference record points at a URI scheme we cannot fetch."""

    def __init__(self, href: str):
        super().__init__(f"Unsupported source: {href}")
        self.href = href


class SourceFetchError(CatalogError):
    """Fetching a by-reference record failed."""

    def __init__(self, href: str, reason: str):
        super().__init__(f"Failed to fetch {href}: {reason}")
        self.href = href


class InvalidRecordError(CatalogError):
    """A record is ambiguous or is missing fields required for its kind."""


class MissingCollectionError(CatalogError):
    """An item references a collection that is not in the store."""

    def __init__(self, item_id: str, collection_id: Optional[str]):
        super().__init__(
            f"Collection {collection_id} does not exist, add it before ingesting item {item_id}"
        )
        self.item_id = item_id
        self.collection_id = collection_id


class EngineError(CatalogError):
    """The search engine reported a failure."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class IndexExistsError(EngineError):
    """Index creation lost a race with another creator."""


class NotFoundError(CatalogError):
    """The requested document does not exist."""
