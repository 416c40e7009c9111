"""
Search Executor for the STAC Catalog Search API.

Compiles a SearchRequest, runs it against an index scope and shapes the
response envelope (results, paging context, next link).
"""

import logging
from typing import Any, Callable, Dict, Optional

from ..errors import NotFoundError
from ..models import SearchContext, SearchRequest, SearchResponse, SortRule
from .engine import EngineClient
from .query_builder import compile_search

logger = logging.getLogger(__name__)

NextLink = Callable[[int], Dict[str, Any]]

# Collections carry no properties.datetime to sort on
COLLECTION_SORT = [SortRule(field="id", direction="asc")]


def total_hits(hits: Dict[str, Any]) -> int:
    """Read the total hit count, which is an object on Elasticsearch 7+."""
    total = hits.get("total", 0)
    if isinstance(total, dict):
        return int(total.get("value", 0))
    return int(total)


class SearchService:
    """
    Runs compiled searches.

    Attributes:
        engine: Shared engine client
        collections_index: Name of the collections index
        items_index: Name of the items index
    """

    def __init__(self, engine: EngineClient, collections_index: str, items_index: str):
        self.engine = engine
        self.collections_index = collections_index
        self.items_index = items_index

    async def search(
        self,
        request: SearchRequest,
        index: str = "*",
        page: int = 1,
        limit: int = 10,
        next_link: Optional[NextLink] = None,
    ) -> SearchResponse:
        """
        Execute a search.

        Args:
            request: Search request to compile
            index: Index name or pattern; '*' searches every index
            page: 1-based page number
            limit: Page size
            next_link: Builds the 'next' link for a page number

        Returns:
            SearchResponse envelope

        Raises:
            EngineError: If the engine rejects the query
        """
        compiled = compile_search(request, page=page, limit=limit)
        logger.info(f"Elasticsearch query: {compiled.to_params(index)}")

        response = await self.engine.search(
            index=index,
            body=compiled.body,
            size=compiled.size,
            from_=compiled.from_,
            source_includes=compiled.includes,
            source_excludes=compiled.excludes,
        )
        logger.debug(f"Result: {response}")

        hits = response.get("hits", {})
        results = [hit.get("_source", {}) for hit in hits.get("hits", [])]
        matched = total_hits(hits)

        links = []
        if page * limit < matched:
            build = next_link or (lambda n: default_next_link(n, limit))
            links.append(build(page + 1))

        return SearchResponse(
            results=results,
            context=SearchContext(page=page, limit=limit, matched=matched, returned=len(results)),
            links=links,
        )

    async def list_collections(
        self, page: int = 1, limit: int = 10, next_link: Optional[NextLink] = None
    ) -> SearchResponse:
        """Page through the collections index."""
        return await self.search(
            SearchRequest(sortby=COLLECTION_SORT),
            index=self.collections_index,
            page=page,
            limit=limit,
            next_link=next_link,
        )

    async def get_collection(self, collection_id: str) -> Dict[str, Any]:
        """Fetch one collection by id."""
        response = await self.search(
            SearchRequest(id=collection_id, sortby=COLLECTION_SORT),
            index=self.collections_index,
            limit=1,
        )
        if not response.results:
            raise NotFoundError(f"Collection {collection_id} not found")
        return response.results[0]

    async def get_item(self, collection_id: str, item_id: str) -> Dict[str, Any]:
        """Fetch one item by id, scoped to its collection."""
        response = await self.search(SearchRequest(id=item_id), index=self.items_index, limit=1)
        item = next((r for r in response.results if r.get("collection") == collection_id), None)
        if item is None:
            raise NotFoundError(f"Item {item_id} not found in collection {collection_id}")
        return item


def default_next_link(page: int, limit: int) -> Dict[str, Any]:
    return {
        "rel": "next",
        "title": "next",
        "type": "application/json",
        "href": f"?page={page}&limit={limit}",
    }
