"""
Search Engine Client for the STAC Catalog Search services.

This module wraps a single AsyncElasticsearch connection shared by every
service in the process. The connection is established lazily on first use,
health-checked once, and reused until close() is called.
"""

import asyncio
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence

from elasticsearch import ApiError, AsyncElasticsearch, TransportError
from elasticsearch import NotFoundError as EsNotFoundError
from elasticsearch.helpers import BulkIndexError, async_bulk

from ..errors import EngineError, IndexExistsError, NotFoundError

logger = logging.getLogger(__name__)


class EngineClient:
    """
    Owns the process-wide Elasticsearch connection.

    The underlying AsyncElasticsearch client is created on the first call
    to client() and memoized; concurrent first callers wait on a lock so
    exactly one connection is made. The client is safe for concurrent
    request issuance, so no locking happens after initialization.

    Attributes:
        host: Elasticsearch endpoint URL
        request_timeout: Per-request timeout in seconds
    """

    def __init__(
        self,
        host: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
        verify_certs: bool = True,
        request_timeout: int = 30,
    ):
        """
        Initialize the EngineClient without connecting.

        Args:
            host: Elasticsearch endpoint (e.g., 'http://localhost:9200')
            username: Optional basic auth user
            password: Optional basic auth password
            verify_certs: Whether to verify TLS certificates
            request_timeout: Per-request timeout in seconds
        """
        self.host = host
        self.username = username
        self.password = password
        self.verify_certs = verify_certs
        self.request_timeout = request_timeout
        self._client: Optional[AsyncElasticsearch] = None
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings) -> "EngineClient":
        return cls(
            host=settings.ES_HOST,
            username=settings.ES_USERNAME,
            password=settings.ES_PASSWORD,
            verify_certs=settings.ES_VERIFY_CERTS,
            request_timeout=settings.ES_REQUEST_TIMEOUT,
        )

    async def client(self) -> AsyncElasticsearch:
        """
        Get the Elasticsearch client, connecting if necessary.

        Returns:
            Connected AsyncElasticsearch instance

        Raises:
            EngineError: If the cluster cannot be reached
        """
        if self._client is not None:
            logger.debug("Using existing Elasticsearch connection")
            return self._client
        async with self._lock:
            if self._client is None:
                self._client = await self._connect()
        return self._client

    async def _connect(self) -> AsyncElasticsearch:
        kwargs: Dict[str, Any] = {
            "hosts": [self.host],
            "verify_certs": self.verify_certs,
            "request_timeout": self.request_timeout,
        }
        if self.username and self.password:
            kwargs["basic_auth"] = (self.username, self.password)

        client = AsyncElasticsearch(**kwargs)
        try:
            health = await client.cluster.health()
        except (ApiError, TransportError) as e:
            await client.close()
            logger.error(f"Failed to connect to Elasticsearch at {self.host}: {e}")
            raise EngineError(f"Failed to connect to Elasticsearch: {e}") from e

        logger.info(f"Connected to Elasticsearch at {self.host}")
        logger.debug(f"Health: {dict(health)}")
        return client

    async def close(self) -> None:
        """Close the Elasticsearch connection."""
        if self._client is not None:
            await self._client.close()
            self._client = None
            logger.info("Elasticsearch connection closed.")

    @contextmanager
    def _errors(self, operation: str) -> Iterator[None]:
        """Translate elasticsearch exceptions into the catalog taxonomy."""
        try:
            yield
        except ApiError as e:
            logger.error(f"Elasticsearch {operation} failed: {e}")
            raise EngineError(str(e), status_code=e.status_code) from e
        except TransportError as e:
            logger.error(f"Elasticsearch {operation} failed: {e}")
            raise EngineError(str(e)) from e

    async def search(
        self,
        index: str,
        body: Dict[str, Any],
        size: int,
        from_: int,
        source_includes: Optional[Sequence[str]] = None,
        source_excludes: Optional[Sequence[str]] = None,
    ) -> Dict[str, Any]:
        """
        Run a search request.

        Args:
            index: Index name or pattern
            body: Compiled body holding 'query' and 'sort'
            size: Result count
            from_: Result window offset
            source_includes: Optional _source include list
            source_excludes: Optional _source exclude list

        Returns:
            The raw response body
        """
        client = await self.client()
        params: Dict[str, Any] = {
            "index": index,
            "query": body["query"],
            "size": size,
            "from_": from_,
            "track_total_hits": True,
        }
        if body.get("sort"):
            params["sort"] = body["sort"]
        if source_includes:
            params["source_includes"] = list(source_includes)
        if source_excludes:
            params["source_excludes"] = list(source_excludes)

        with self._errors("search"):
            response = await client.search(**params)
        return response.body

    async def update(self, index: str, doc_id: str, doc: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply a partial document merge and return the updated source.

        Raises:
            NotFoundError: If the document does not exist
            EngineError: On any other engine failure
        """
        client = await self.client()
        with self._errors("update"):
            try:
                response = await client.update(index=index, id=doc_id, doc=doc, source=True)
            except EsNotFoundError as e:
                raise NotFoundError(str(e)) from e
        return response.body.get("get", {}).get("_source", {})

    async def bulk(self, actions: List[Dict[str, Any]]) -> int:
        """
        Submit one flush of bulk actions.

        Every action is sent in a single request; any per-document
        failure fails the whole flush.

        Returns:
            Number of documents acknowledged
        """
        if not actions:
            return 0
        client = await self.client()
        try:
            with self._errors("bulk"):
                success, _ = await async_bulk(
                    client,
                    actions,
                    chunk_size=len(actions),
                    raise_on_error=True,
                    raise_on_exception=True,
                )
        except BulkIndexError as e:
            first = e.errors[0] if e.errors else {}
            logger.error(f"Bulk write failed for {len(e.errors)} document(s): {first}")
            raise EngineError(f"Bulk write failed for {len(e.errors)} document(s): {first}") from e
        return success

    async def document_exists(self, index: str, doc_id: str) -> bool:
        client = await self.client()
        with self._errors("exists"):
            return bool(await client.exists(index=index, id=doc_id))

    async def index_exists(self, index: str) -> bool:
        client = await self.client()
        with self._errors("indices.exists"):
            return bool(await client.indices.exists(index=index))

    async def create_index(self, index: str, mappings: Dict[str, Any]) -> None:
        """
        Create an index with the given mappings.

        Raises:
            IndexExistsError: If the index was created concurrently
            EngineError: On any other engine failure
        """
        client = await self.client()
        try:
            await client.indices.create(index=index, mappings=mappings)
        except ApiError as e:
            if "resource_already_exists_exception" in str(e):
                raise IndexExistsError(str(e), status_code=e.status_code) from e
            logger.error(f"Elasticsearch indices.create failed: {e}")
            raise EngineError(str(e), status_code=e.status_code) from e
        except TransportError as e:
            logger.error(f"Elasticsearch indices.create failed: {e}")
            raise EngineError(str(e)) from e
