"""
Bulk Ingest Pipeline for the STAC Catalog Search services.

Records flow through three stages:

1. Prepare: tag and validate every record and check that each item's
   collection exists. Nothing is written if this stage fails.
2. Transform (producer): route each record to its index, strip hierarchy
   links and build a bulk write directive.
3. Write (consumer): drain up to batch_size directives from a bounded
   queue and flush them as one bulk request.

The queue bound is the high-water mark: the producer blocks while the
writer is flushing, so no more than batch_size writes are pending at once.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Set, Tuple

from prometheus_client import Counter

from ..errors import MissingCollectionError
from .engine import EngineClient
from .records import (
    BulkWriteDirective,
    CatalogRecord,
    RecordKind,
    classify_record,
    strip_hierarchy_links,
    validate_record,
)

logger = logging.getLogger(__name__)

# Metrics
records_ingested = Counter(
    "catalog_records_ingested_total", "Total number of catalog records ingested.", ["kind"]
)

_END = object()


@dataclass
class IngestResult:
    """Outcome of one successful ingest call."""

    collections: int = 0
    items: int = 0
    skipped: int = 0
    written: int = 0


class IngestPipeline:
    """
    Streams a batch of catalog records into the engine.

    The whole batch either succeeds or fails: a rejected record or a
    failed flush fails the ingest call, and per-record outcomes are not
    reported.

    Attributes:
        engine: Shared engine client
        collections_index: Index receiving collections
        items_index: Index receiving items
        batch_size: Maximum number of directives in flight at once
    """

    def __init__(
        self,
        engine: EngineClient,
        collections_index: str,
        items_index: str,
        batch_size: int = 500,
    ):
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.engine = engine
        self.collections_index = collections_index
        self.items_index = items_index
        self.batch_size = batch_size

    async def ingest(self, records: Iterable[CatalogRecord]) -> IngestResult:
        """
        Ingest a batch of records.

        Args:
            records: Ordered catalog records

        Returns:
            IngestResult with per-kind counts

        Raises:
            InvalidRecordError: If a record is ambiguous or malformed
            MissingCollectionError: If an item's collection is absent
            EngineError: If any flush fails
        """
        result = IngestResult()
        try:
            prepared = await self._prepare(records, result)

            queue: asyncio.Queue = asyncio.Queue(maxsize=self.batch_size)
            producer = asyncio.create_task(self._produce(prepared, queue))
            try:
                result.written = await self._consume(queue)
            except BaseException:
                producer.cancel()
                raise
            await producer
        except Exception as e:
            logger.error(f"Error ingesting: {e}")
            raise

        records_ingested.labels(kind=RecordKind.COLLECTION.value).inc(result.collections)
        records_ingested.labels(kind=RecordKind.ITEM.value).inc(result.items)
        logger.info(
            f"Ingested {result.written} record(s): {result.collections} collection(s), "
            f"{result.items} item(s), {result.skipped} skipped"
        )
        return result

    async def _prepare(
        self, records: Iterable[CatalogRecord], result: IngestResult
    ) -> List[Tuple[RecordKind, CatalogRecord]]:
        prepared: List[Tuple[RecordKind, CatalogRecord]] = []
        for record in records:
            kind = classify_record(record)
            if kind is RecordKind.UNKNOWN:
                record_id = record.get("id") if isinstance(record, dict) else None
                logger.warning(f"Skipping record {record_id!r}: neither a collection nor an item")
                result.skipped += 1
                continue
            validate_record(kind, record)
            prepared.append((kind, record))

        batch_collections: Set[str] = {
            record["id"] for kind, record in prepared if kind is RecordKind.COLLECTION
        }
        known: Dict[str, bool] = {}
        for kind, record in prepared:
            if kind is RecordKind.COLLECTION:
                result.collections += 1
                continue
            result.items += 1
            collection_id = record["collection"]
            if collection_id in batch_collections:
                continue
            if collection_id not in known:
                known[collection_id] = await self.engine.document_exists(
                    self.collections_index, collection_id
                )
            if not known[collection_id]:
                raise MissingCollectionError(record["id"], collection_id)
        return prepared

    def _directive(self, kind: RecordKind, record: CatalogRecord) -> BulkWriteDirective:
        index = self.collections_index if kind is RecordKind.COLLECTION else self.items_index
        doc = strip_hierarchy_links(record)
        return BulkWriteDirective(index=index, id=doc["id"], doc=doc)

    async def _produce(
        self, prepared: List[Tuple[RecordKind, CatalogRecord]], queue: asyncio.Queue
    ) -> None:
        error: Optional[Exception] = None
        try:
            for kind, record in prepared:
                await queue.put(self._directive(kind, record))
        except Exception as e:
            error = e
        await queue.put(_END)
        if error is not None:
            raise error

    async def _consume(self, queue: asyncio.Queue) -> int:
        written = 0
        finished = False
        while not finished:
            directive = await queue.get()
            if directive is _END:
                break
            batch = [directive]
            while len(batch) < self.batch_size:
                try:
                    directive = queue.get_nowait()
                except asyncio.QueueEmpty:
                    break
                if directive is _END:
                    finished = True
                    break
                batch.append(directive)
            written += await self._flush(batch)
        return written

    async def _flush(self, batch: List[BulkWriteDirective]) -> int:
        logger.debug(f"Flushing {len(batch)} directive(s)")
        await self.engine.bulk([d.to_action() for d in batch])
        return len(batch)
