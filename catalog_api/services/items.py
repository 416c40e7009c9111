"""
Partial-update executor for items.

Applies an RFC 7386 style merge patch to a stored item and stamps
properties.updated with the server time.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from ..errors import InvalidRecordError, NotFoundError
from .engine import EngineClient
from .records import is_link, strip_hierarchy_links

logger = logging.getLogger(__name__)


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def with_updated_timestamp(patch: Dict[str, Any], timestamp: str) -> Dict[str, Any]:
    """
    Return a copy of the patch with properties.updated set.

    Caller-supplied properties are kept; the timestamp overrides any
    'updated' value they carry.
    """
    properties = dict(patch.get("properties") or {})
    properties["updated"] = timestamp
    return {**patch, "properties": properties}


def without_hierarchy_links(patch: Dict[str, Any]) -> Dict[str, Any]:
    """Drop hierarchy links from a patch that replaces 'links'."""
    links = patch.get("links")
    if links is None:
        return patch
    if not isinstance(links, list) or not all(is_link(link) for link in links):
        raise InvalidRecordError("Patch has malformed 'links'")
    return strip_hierarchy_links(patch)


class ItemService:
    """
    Applies partial updates to items.

    Attributes:
        engine: Shared engine client
        items_index: Name of the items index
    """

    def __init__(
        self,
        engine: EngineClient,
        items_index: str,
        clock: Optional[Callable[[], str]] = None,
    ):
        self.engine = engine
        self.items_index = items_index
        self.clock = clock or utc_now

    async def update_item(self, item_id: str, patch: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge a partial item into the stored document.

        Args:
            item_id: Id of the item to update
            patch: Partial item description

        Returns:
            The updated document

        Raises:
            NotFoundError: If the item does not exist
            InvalidRecordError: If the patch carries malformed links
            EngineError: On any other engine failure
        """
        doc = with_updated_timestamp(without_hierarchy_links(patch), self.clock())
        logger.debug(f"Updating item {item_id} with {doc}")
        try:
            updated = await self.engine.update(self.items_index, item_id, doc)
        except NotFoundError as e:
            logger.error(f"Item {item_id} not found")
            raise NotFoundError(f"Item {item_id} not found") from e
        logger.info(f"Updated item {item_id}")
        return updated
