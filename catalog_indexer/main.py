# catalog_indexer/main.py
import asyncio
import logging

from catalog_api.services import (
    EngineClient,
    IndexManager,
    IngestPipeline,
    RecordNormalizer,
    ReferenceFetcher,
)
from catalog_api.settings import settings

from .consumer import connect_consumer, run_consumer

logger = logging.getLogger(__name__)


async def main() -> None:
    engine = EngineClient.from_settings(settings)
    fetcher = ReferenceFetcher(aws_region=settings.AWS_REGION, timeout=settings.HTTP_FETCH_TIMEOUT)
    index_manager = IndexManager(engine, settings.COLLECTIONS_INDEX, settings.ITEMS_INDEX)
    pipeline = IngestPipeline(
        engine, settings.COLLECTIONS_INDEX, settings.ITEMS_INDEX, batch_size=settings.ES_BATCH_SIZE
    )

    consumer = await asyncio.to_thread(
        connect_consumer,
        settings.KAFKA_BROKER_URL,
        settings.KAFKA_TOPIC,
        settings.KAFKA_GROUP_ID,
        settings.KAFKA_MAX_POLL_RECORDS,
    )
    logger.info(f"Starting Indexing Service against {settings.ES_HOST}...")
    try:
        await run_consumer(consumer, RecordNormalizer(fetcher), pipeline, index_manager)
    finally:
        consumer.close()
        fetcher.close()
        await engine.close()


def run() -> None:
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    asyncio.run(main())


if __name__ == "__main__":
    run()
