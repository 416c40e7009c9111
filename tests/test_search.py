"""Tests for search and lookup endpoints."""
import json

from catalog_api.errors import EngineError
from tests.fakes import make_collection, make_item


def test_post_search_returns_envelope(client, engine):
    engine.search_total = 12
    r = client.post("/search", json={"collections": ["sentinel-2"], "limit": 5})
    assert r.status_code == 200
    data = r.json()
    assert data["context"] == {"page": 1, "limit": 5, "matched": 12, "returned": 5}
    next_link = data["links"][0]
    assert next_link["method"] == "POST"
    assert next_link["body"] == {"page": 2}
    assert engine.search_calls[0]["index"] == "items"


def test_post_search_rejects_bad_limit(client):
    r = client.post("/search", json={"limit": 0})
    assert r.status_code == 422


def test_get_search_parses_query_string(client, engine):
    query = json.dumps({"eo:cloud_cover": {"lt": 10}})
    r = client.get(
        "/search",
        params={
            "collections": "sentinel-2,landsat",
            "datetime": "2020-01-01T00:00:00Z/2020-12-31T23:59:59Z",
            "query": query,
            "sortby": "-properties.datetime,+id",
            "fields": "properties.eo:cloud_cover,-bbox",
        },
    )
    assert r.status_code == 200
    call = engine.search_calls[0]
    must = call["body"]["query"]["constant_score"]["filter"]["bool"]["must"]
    assert {"range": {"properties.eo:cloud_cover": {"lt": 10}}} in must
    assert {"terms": {"collection": ["sentinel-2", "landsat"]}} in must
    assert call["body"]["sort"] == [{"properties.datetime": {"order": "desc"}}, {"id": {"order": "asc"}}]
    assert "properties.eo:cloud_cover" in call["source_includes"]
    assert call["source_excludes"] == ["bbox"]


def test_get_search_next_link_keeps_query(client, engine):
    engine.search_total = 30
    r = client.get("/search", params={"collections": "sentinel-2", "limit": 10})
    href = r.json()["links"][0]["href"]
    assert "page=2" in href
    assert "collections=sentinel-2" in href


def test_get_search_invalid_json_returns_400(client):
    r = client.get("/search", params={"query": "{not json"})
    assert r.status_code == 400


def test_engine_failure_returns_502(client, engine):
    engine.search_error = EngineError("cluster unavailable")
    r = client.post("/search", json={})
    assert r.status_code == 502


def test_get_collection(client, engine):
    engine.documents["sentinel-2"] = make_collection()
    r = client.get("/collections/sentinel-2")
    assert r.status_code == 200
    assert r.json()["id"] == "sentinel-2"


def test_get_missing_collection_returns_404(client):
    r = client.get("/collections/absent")
    assert r.status_code == 404


def test_list_collection_items_filters_by_collection(client, engine):
    r = client.get("/collections/sentinel-2/items", params={"limit": 3})
    assert r.status_code == 200
    call = engine.search_calls[0]
    assert call["size"] == 3
    must = call["body"]["query"]["constant_score"]["filter"]["bool"]["must"]
    assert must == [{"terms": {"collection": ["sentinel-2"]}}]


def test_get_item(client, engine):
    engine.documents["S2A_001"] = make_item()
    r = client.get("/collections/sentinel-2/items/S2A_001")
    assert r.status_code == 200
    assert r.json()["id"] == "S2A_001"
