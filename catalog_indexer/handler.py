"""
Ingest event handler.

Resolves an ingest event into records and runs them through the bulk
ingest pipeline. Shared by the Kafka consumer and the Lambda-style
handler() entry point.
"""

import asyncio
import logging
from typing import Any, Mapping, Optional

from catalog_api.services import (
    EngineClient,
    IndexManager,
    IngestPipeline,
    IngestResult,
    RecordNormalizer,
    ReferenceFetcher,
)
from catalog_api.settings import settings

logger = logging.getLogger(__name__)

CREATE_INDICES_FLAG = "create_indices"


def is_flag_only(event: Any) -> bool:
    """True for an event that only asks for index creation."""
    return isinstance(event, Mapping) and set(event) == {CREATE_INDICES_FLAG}


async def handle_event(
    event: Any,
    normalizer: RecordNormalizer,
    pipeline: IngestPipeline,
    index_manager: Optional[IndexManager] = None,
) -> IngestResult:
    """
    Ingest every record carried by an event.

    Args:
        event: Single record, list of records, or queue batch envelope
        normalizer: Resolves the event into records
        pipeline: Writes the records
        index_manager: Used when the event sets 'create_indices'

    Returns:
        IngestResult of the batch

    Raises:
        CatalogError: Any failure; the batch is not partially acknowledged
    """
    logger.debug(f"Event: {event}")

    if isinstance(event, Mapping) and event.get(CREATE_INDICES_FLAG) and index_manager:
        await index_manager.ensure_indices()
    if is_flag_only(event):
        return IngestResult()

    try:
        records = await normalizer.normalize(event)
        result = await pipeline.ingest(records)
    except Exception as e:
        logger.error(f"Failed to ingest event: {e}")
        raise

    logger.debug(f"Ingested {len(records)} record(s)")
    return result


async def _handle_once(event: Any) -> IngestResult:
    engine = EngineClient.from_settings(settings)
    fetcher = ReferenceFetcher(aws_region=settings.AWS_REGION, timeout=settings.HTTP_FETCH_TIMEOUT)
    try:
        return await handle_event(
            event,
            RecordNormalizer(fetcher),
            IngestPipeline(
                engine, settings.COLLECTIONS_INDEX, settings.ITEMS_INDEX, batch_size=settings.ES_BATCH_SIZE
            ),
            IndexManager(engine, settings.COLLECTIONS_INDEX, settings.ITEMS_INDEX),
        )
    finally:
        fetcher.close()
        await engine.close()


def handler(event: Any, context: Any = None) -> dict:
    """Lambda-style entry point: one event, one ingest call."""
    result = asyncio.run(_handle_once(event))
    return {
        "collections": result.collections,
        "items": result.items,
        "skipped": result.skipped,
    }
