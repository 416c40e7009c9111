"""In-memory fakes and record factories shared by the tests."""
from typing import Any, Dict, List, Optional

from catalog_api.errors import EngineError, IndexExistsError, NotFoundError, UnsupportedSourceError

FIXED_TIMESTAMP = "2024-05-01T12:00:00.000Z"


class FakeEngine:
    """In-memory stand-in for EngineClient."""

    def __init__(self):
        self.collections = set()
        self.indices = set()
        self.documents: Dict[str, Dict[str, Any]] = {}
        self.flushes: List[List[Dict[str, Any]]] = []
        self.fail_on_flush: Optional[int] = None
        self.search_calls: List[Dict[str, Any]] = []
        self.search_total = 0
        self.search_error: Optional[Exception] = None
        self.updates: List[Dict[str, Any]] = []
        self.created: List[Dict[str, Any]] = []
        self.race_on_create = False

    async def document_exists(self, index, doc_id):
        return doc_id in self.collections

    async def bulk(self, actions):
        self.flushes.append(list(actions))
        if self.fail_on_flush is not None and len(self.flushes) == self.fail_on_flush:
            raise EngineError("Bulk write failed for 1 document(s)", status_code=400)
        return len(actions)

    async def search(self, index, body, size, from_, source_includes=None, source_excludes=None):
        self.search_calls.append(
            {
                "index": index,
                "body": body,
                "size": size,
                "from_": from_,
                "source_includes": source_includes,
                "source_excludes": source_excludes,
            }
        )
        if self.search_error:
            raise self.search_error
        docs = list(self.documents.values())
        if not docs:
            docs = [{"id": f"item-{i}"} for i in range(self.search_total)]
        page = docs[from_:from_ + size]
        total = self.search_total or len(docs)
        return {"hits": {"total": {"value": total, "relation": "eq"}, "hits": [{"_source": d} for d in page]}}

    async def update(self, index, doc_id, doc):
        self.updates.append({"index": index, "id": doc_id, "doc": doc})
        if doc_id not in self.documents:
            raise NotFoundError(f"document {doc_id} missing")
        merged = {**self.documents[doc_id], **doc}
        self.documents[doc_id] = merged
        return merged

    async def index_exists(self, index):
        return index in self.indices

    async def create_index(self, index, mappings):
        self.created.append({"index": index, "mappings": mappings})
        if self.race_on_create:
            raise IndexExistsError("resource_already_exists_exception", status_code=400)
        self.indices.add(index)


class FakeFetcher:
    """Serves by-reference records from a dict keyed by href."""

    def __init__(self, documents=None):
        self.documents = documents or {}
        self.fetched: List[str] = []

    async def fetch(self, href):
        self.fetched.append(href)
        if href not in self.documents:
            raise UnsupportedSourceError(href)
        return self.documents[href]


def make_collection(collection_id="sentinel-2", **extra):
    record = {
        "id": collection_id,
        "type": "Collection",
        "extent": {"spatial": {"bbox": [[-180, -90, 180, 90]]}, "temporal": {"interval": [[None, None]]}},
        "links": [
            {"rel": "self", "href": f"https://example.com/collections/{collection_id}"},
            {"rel": "license", "href": "https://example.com/license"},
        ],
    }
    record.update(extra)
    return record


def make_item(item_id="S2A_001", collection="sentinel-2", **extra):
    record = {
        "id": item_id,
        "type": "Feature",
        "collection": collection,
        "geometry": {"type": "Point", "coordinates": [10.0, 50.0]},
        "bbox": [10.0, 50.0, 10.0, 50.0],
        "properties": {"datetime": "2020-01-15T10:00:00Z", "eo:cloud_cover": 12},
        "assets": {},
        "links": [
            {"rel": "self", "href": f"https://example.com/items/{item_id}"},
            {"rel": "parent", "href": "https://example.com/collections/sentinel-2"},
            {"rel": "alternate", "href": f"https://example.com/items/{item_id}.html"},
        ],
    }
    record.update(extra)
    return record


