"""
Kafka consumer for the indexer.

Each poll yields up to KAFKA_MAX_POLL_RECORDS messages. They are wrapped
in a queue batch envelope ({"Records": [{"body": ...}]}) and ingested as
one batch; offsets are committed only after the batch is written.
"""

import asyncio
import logging
import time
from typing import Any, Dict, List

from kafka import KafkaConsumer
from kafka.errors import KafkaError

from catalog_api.services import IndexManager, IngestPipeline, RecordNormalizer

from .handler import handle_event

logger = logging.getLogger(__name__)


def connect_consumer(
    broker_url: str,
    topic: str,
    group_id: str,
    max_poll_records: int,
    retry_delay: float = 5.0,
) -> KafkaConsumer:
    """
    Connect to Kafka, retrying until the broker is reachable.

    Returns:
        KafkaConsumer subscribed to the topic
    """
    while True:
        try:
            consumer = KafkaConsumer(
                topic,
                bootstrap_servers=broker_url,
                auto_offset_reset="earliest",
                group_id=group_id,
                enable_auto_commit=False,
                max_poll_records=max_poll_records,
                value_deserializer=lambda m: m.decode("utf-8"),
            )
            logger.info(f"Kafka Consumer connected and subscribed to '{topic}'")
            return consumer
        except KafkaError as e:
            logger.warning(f"Failed to connect to Kafka consumer: {e}. Retrying in {retry_delay} seconds...")
            time.sleep(retry_delay)


def to_envelope(messages: List[Any]) -> Dict[str, Any]:
    """Wrap polled Kafka messages in a queue batch envelope."""
    return {"Records": [{"body": message.value} for message in messages]}


async def run_consumer(
    consumer: KafkaConsumer,
    normalizer: RecordNormalizer,
    pipeline: IngestPipeline,
    index_manager: IndexManager,
    poll_timeout_ms: int = 1000,
) -> None:
    """
    Consume and ingest batches until cancelled.

    A failed batch is logged and re-raised without committing, so its
    messages are redelivered once the indexer restarts.
    """
    logger.info("Listening for messages to index...")
    while True:
        polled = await asyncio.to_thread(consumer.poll, timeout_ms=poll_timeout_ms)
        messages = [message for batch in polled.values() for message in batch]
        if not messages:
            continue

        try:
            result = await handle_event(to_envelope(messages), normalizer, pipeline, index_manager)
        except Exception as e:
            logger.error(f"Error indexing batch of {len(messages)} message(s): {e}")
            raise

        await asyncio.to_thread(consumer.commit)
        logger.info(
            f"Indexed batch of {len(messages)} message(s): "
            f"{result.collections} collection(s), {result.items} item(s)"
        )
