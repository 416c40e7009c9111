"""
Index lifecycle for the STAC Catalog Search services.

Creates the collections and items indices with their mappings when they
are missing. Creation is idempotent: losing a race to another creator is
logged and ignored.
"""

import logging
from typing import Any, Dict

from ..errors import IndexExistsError
from .engine import EngineClient
from .mappings import COLLECTIONS_MAPPING, ITEMS_MAPPING

logger = logging.getLogger(__name__)


class IndexManager:
    """
    Ensures the catalog indices exist.

    Attributes:
        engine: Shared engine client
        collections_index: Name of the collections index
        items_index: Name of the items index
    """

    def __init__(self, engine: EngineClient, collections_index: str, items_index: str):
        self.engine = engine
        self.collections_index = collections_index
        self.items_index = items_index

    def mapping_for(self, index: str) -> Dict[str, Any]:
        """
        Select the mapping for an index name.

        Names other than the two configured indices fall back to the
        collections mapping.
        """
        if index == self.items_index:
            return ITEMS_MAPPING
        if index != self.collections_index:
            logger.warning(
                f"Index '{index}' is neither the collections nor the items index; "
                "applying the collections mapping"
            )
        return COLLECTIONS_MAPPING

    async def ensure_index(self, index: str) -> bool:
        """
        Create an index if it does not already exist.

        Args:
            index: Index name

        Returns:
            True if this call created the index, False otherwise

        Raises:
            EngineError: On engine failures other than a creation race
        """
        if await self.engine.index_exists(index):
            logger.debug(f"Index {index} already exists")
            return False

        mapping = self.mapping_for(index)
        try:
            await self.engine.create_index(index, mapping)
        except IndexExistsError as e:
            logger.debug(f"Error creating index {index}, already created: {e}")
            return False

        logger.info(f"Created index {index}")
        logger.debug(f"Mapping: {mapping}")
        return True

    async def ensure_indices(self) -> None:
        """Ensure both the collections and items indices exist."""
        await self.ensure_index(self.collections_index)
        await self.ensure_index(self.items_index)
