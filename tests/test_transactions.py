"""Tests for ingest and partial update endpoints."""
import json

from tests.fakes import FIXED_TIMESTAMP, make_collection, make_item


def test_ingest_list_of_records(client, engine):
    r = client.post("/ingest", json=[make_collection(), make_item("a"), {"id": "orphan"}])
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "collections": 1, "items": 1, "skipped": 1}
    assert len(engine.flushes) == 1


def test_ingest_queue_envelope(client, engine):
    engine.collections.add("sentinel-2")
    event = {"Records": [{"body": json.dumps(make_item("a"))}, {"body": json.dumps(make_item("b"))}]}
    r = client.post("/ingest", json=event)
    assert r.status_code == 200
    assert r.json()["items"] == 2


def test_ingest_by_reference(client, engine, fetcher):
    engine.collections.add("sentinel-2")
    fetcher.documents["s3://bucket/item.json"] = make_item("by-ref")
    r = client.post("/ingest", json={"href": "s3://bucket/item.json"})
    assert r.status_code == 200
    assert engine.flushes[0][0]["_id"] == "by-ref"


def test_ingest_item_without_collection_returns_400(client, engine):
    r = client.post("/ingest", json=make_item("a", collection="absent"))
    assert r.status_code == 400
    assert "absent" in r.json()["detail"]
    assert engine.flushes == []


def test_ingest_write_failure_returns_502(client, engine):
    engine.fail_on_flush = 1
    r = client.post("/ingest", json=make_collection())
    assert r.status_code == 502


def test_ingest_rejects_scalar_body(client):
    r = client.post("/ingest", json="hello")
    assert r.status_code == 400


def test_patch_item_sets_updated(client, engine):
    engine.documents["S2A_001"] = make_item()
    r = client.patch("/collections/sentinel-2/items/S2A_001", json={"properties": {"eo:cloud_cover": 1}})
    assert r.status_code == 200
    properties = r.json()["properties"]
    assert properties == {"eo:cloud_cover": 1, "updated": FIXED_TIMESTAMP}


def test_patch_missing_item_returns_404(client):
    r = client.patch("/collections/sentinel-2/items/ghost", json={"status": "x"})
    assert r.status_code == 404


def test_patch_with_mismatched_id_returns_400(client):
    r = client.patch("/collections/sentinel-2/items/S2A_001", json={"id": "other"})
    assert r.status_code == 400


def test_ingest_item_with_object_collection_returns_400(client, engine):
    r = client.post("/ingest", json=[make_item("a", collection={"x": 1})])
    assert r.status_code == 400
    assert "collection" in r.json()["detail"]
    assert engine.flushes == []


def test_ingest_link_with_list_rel_returns_400(client, engine):
    engine.collections.add("sentinel-2")
    r = client.post("/ingest", json=make_item("a", links=[{"rel": ["self"], "href": "s"}]))
    assert r.status_code == 400
    assert engine.flushes == []


def test_patch_drops_hierarchy_links(client, engine):
    engine.documents["S2A_001"] = make_item()
    links = [
        {"rel": "self", "href": "https://example.com/items/S2A_001"},
        {"rel": "license", "href": "https://example.com/license"},
    ]
    r = client.patch("/collections/sentinel-2/items/S2A_001", json={"links": links})
    assert r.status_code == 200
    assert engine.updates[0]["doc"]["links"] == [links[1]]


def test_patch_with_malformed_links_returns_400(client):
    r = client.patch("/collections/sentinel-2/items/S2A_001", json={"links": [{"rel": ["self"]}]})
    assert r.status_code == 400
