"""
Catalog record classification and transformation.

A record is tagged once, on entry to the ingest pipeline, as a collection
(it has an 'extent'), an item (it has a 'geometry') or unknown. Tagged
records are then turned into bulk write directives with their hierarchy
links removed.
"""

import enum
from dataclasses import dataclass
from typing import Any, Dict, Mapping

from ..constants import BULK_ACTION, BULK_RETRY_ON_CONFLICT, HIERARCHY_LINK_RELS
from ..errors import InvalidRecordError

CatalogRecord = Dict[str, Any]


class RecordKind(str, enum.Enum):
    COLLECTION = "collection"
    ITEM = "item"
    UNKNOWN = "unknown"


def classify_record(record: Any) -> RecordKind:
    """
    Tag a record by its structural signature.

    Raises:
        InvalidRecordError: If the record carries both signatures
    """
    if not isinstance(record, Mapping):
        return RecordKind.UNKNOWN
    has_extent = "extent" in record
    has_geometry = "geometry" in record
    if has_extent and has_geometry:
        raise InvalidRecordError(
            f"Record {record.get('id')!r} has both 'extent' and 'geometry'; "
            "cannot tell a collection from an item"
        )
    if has_extent:
        return RecordKind.COLLECTION
    if has_geometry:
        return RecordKind.ITEM
    return RecordKind.UNKNOWN


def validate_record(kind: RecordKind, record: CatalogRecord) -> None:
    """
    Check the fields a tagged record needs before it can be written.

    Raises:
        InvalidRecordError: If a required field is missing or malformed
    """
    record_id = record.get("id")
    if not isinstance(record_id, str) or not record_id:
        raise InvalidRecordError(f"{kind.value.capitalize()} record is missing a string 'id'")

    links = record.get("links", [])
    if not isinstance(links, list) or not all(is_link(link) for link in links):
        raise InvalidRecordError(f"Record {record_id} has malformed 'links'")

    if kind is RecordKind.ITEM:
        collection = record.get("collection")
        if not isinstance(collection, str) or not collection:
            raise InvalidRecordError(f"Item {record_id} does not name a string 'collection'")


def is_link(link: Any) -> bool:
    return isinstance(link, Mapping) and isinstance(link.get("rel", ""), str)


def strip_hierarchy_links(record: CatalogRecord) -> CatalogRecord:
    """Return a copy of the record without hierarchy links; the input is untouched."""
    links = [link for link in record.get("links", []) if link.get("rel") not in HIERARCHY_LINK_RELS]
    return {**record, "links": links}


@dataclass(frozen=True)
class BulkWriteDirective:
    """One create-or-update write against the engine."""

    index: str
    id: str
    doc: CatalogRecord
    action: str = BULK_ACTION
    retry_on_conflict: int = BULK_RETRY_ON_CONFLICT
    doc_as_upsert: bool = True

    def to_action(self) -> Dict[str, Any]:
        """Render as an elasticsearch.helpers bulk action."""
        return {
            "_op_type": self.action,
            "_index": self.index,
            "_id": self.id,
            "retry_on_conflict": self.retry_on_conflict,
            "doc": self.doc,
            "doc_as_upsert": self.doc_as_upsert,
        }
