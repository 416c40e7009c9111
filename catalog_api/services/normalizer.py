"""
Record Normalizer for the STAC Catalog Search services.

Turns an ingest event into an ordered list of catalog records. Three
envelope shapes are accepted:

* a single record, passed directly;
* a queue batch, {"Records": [{"body": "<json>"}, ...]};
* inside a queue batch, a notification wrapper
  {"Type": "Notification", "Message": "<json>"} whose message is the record.

Any resolved payload carrying an 'href' is a pointer and is fetched.
"""

import asyncio
import json
import logging
from typing import Any, List, Mapping

from ..errors import InvalidRecordError
from .records import CatalogRecord
from .sources import ReferenceFetcher

logger = logging.getLogger(__name__)


def is_queue_event(event: Mapping[str, Any]) -> bool:
    return "Records" in event


def is_notification(body: Mapping[str, Any]) -> bool:
    return body.get("Type") == "Notification"


def _decode(value: Any) -> Any:
    if isinstance(value, (str, bytes, bytearray)):
        try:
            return json.loads(value)
        except ValueError as e:
            raise InvalidRecordError(f"Message body is not valid JSON: {e}") from e
    return value


class RecordNormalizer:
    """
    Resolves event envelopes into catalog records.

    Attributes:
        fetcher: Resolves by-reference records
    """

    def __init__(self, fetcher: ReferenceFetcher):
        self.fetcher = fetcher

    async def normalize(self, event: Any) -> List[CatalogRecord]:
        """
        Resolve an event into records, preserving input order.

        A failure resolving any one message fails the whole batch.

        Args:
            event: Single record, list of records, or queue batch envelope

        Returns:
            Ordered list of catalog records
        """
        if isinstance(event, list):
            return list(await asyncio.gather(*(self.resolve(r) for r in event)))
        if isinstance(event, Mapping) and is_queue_event(event):
            messages = event["Records"]
            logger.debug(f"Resolving {len(messages)} queue message(s)")
            return list(await asyncio.gather(*(self.from_message(m) for m in messages)))
        return [await self.resolve(event)]

    async def from_message(self, message: Mapping[str, Any]) -> CatalogRecord:
        """Resolve one queue message into a record."""
        body = _decode(message.get("body"))
        if isinstance(body, Mapping) and is_notification(body):
            return await self.resolve(_decode(body.get("Message")))
        return await self.resolve(body)

    async def resolve(self, payload: Any) -> CatalogRecord:
        """Return the payload, or the document it points to."""
        if isinstance(payload, Mapping) and "href" in payload:
            return await self.fetcher.fetch(payload["href"])
        return payload
