"""Tests for the query compiler."""
from catalog_api.models import SearchRequest
from catalog_api.services.query_builder import (
    build_datetime_query,
    build_fields_filter,
    build_query,
    build_range_query,
    build_sort,
    compile_search,
)


def _must(body):
    return body["query"]["constant_score"]["filter"]["bool"]["must"]


def test_range_operators_merge_into_one_clause():
    body = build_query(SearchRequest(query={"foo": {"gt": 1, "lte": 5}}))
    must = _must(body)
    assert must == [{"range": {"properties.foo": {"gt": 1, "lte": 5}}}]


def test_range_query_none_without_range_operators():
    assert build_range_query("foo", {"eq": 3}) is None


def test_eq_and_in_compile_to_term_and_terms():
    request = SearchRequest(query={"platform": {"eq": "sentinel-2a"}, "instrument": {"in": ["msi", "oli"]}})
    must = _must(build_query(request))
    assert {"term": {"properties.platform": "sentinel-2a"}} in must
    assert {"terms": {"properties.instrument": ["msi", "oli"]}} in must


def test_eq_takes_precedence_over_in_on_same_property():
    must = _must(build_query(SearchRequest(query={"foo": {"eq": 1, "in": [1, 2]}})))
    assert must == [{"term": {"properties.foo": 1}}]


def test_equality_and_range_on_same_property():
    must = _must(build_query(SearchRequest(query={"foo": {"in": [1, 2], "gte": 0}})))
    assert must == [
        {"terms": {"properties.foo": [1, 2]}},
        {"range": {"properties.foo": {"gte": 0}}},
    ]


def test_unsupported_operators_are_ignored():
    assert _must(build_query(SearchRequest(query={"foo": {"startsWith": "a"}}))) == []


def test_collections_and_intersects_clauses():
    geometry = {"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 1], [0, 0]]]}
    must = _must(build_query(SearchRequest(collections=["a", "b"], intersects=geometry)))
    assert must == [
        {"terms": {"collection": ["a", "b"]}},
        {"geo_shape": {"geometry": {"shape": geometry}}},
    ]


def test_datetime_range():
    assert build_datetime_query("2020-01-01/2020-02-01") == {
        "range": {"properties.datetime": {"gte": "2020-01-01", "lte": "2020-02-01"}}
    }


def test_datetime_instant():
    assert build_datetime_query("2020-01-01") == {"term": {"properties.datetime": "2020-01-01"}}


def test_datetime_open_ended_range():
    assert build_datetime_query("../2020-02-01") == {
        "range": {"properties.datetime": {"lte": "2020-02-01"}}
    }
    assert build_datetime_query("../..") is None


def test_datetime_clause_joins_the_conjunction():
    must = _must(build_query(SearchRequest(query={"foo": {"eq": 1}}, datetime="2020-01-01")))
    assert must[-1] == {"term": {"properties.datetime": "2020-01-01"}}
    assert len(must) == 2


def test_id_shortcut_bypasses_filters():
    compiled = compile_search(SearchRequest(id="abc", collections=["x"]))
    assert compiled.body["query"] == {"constant_score": {"filter": {"term": {"id": "abc"}}}}


def test_ids_shortcut_bypasses_filters():
    compiled = compile_search(SearchRequest(ids=["a", "b"], id="c", datetime="2020-01-01"))
    assert compiled.body["query"] == {"ids": {"values": ["a", "b"]}}


def test_default_sort_is_datetime_descending():
    assert build_sort(SearchRequest()) == [
        {"properties.datetime": {"order": "desc", "unmapped_type": "date"}}
    ]


def test_sort_rules_keep_order():
    request = SearchRequest(
        sortby=[{"field": "properties.eo:cloud_cover", "direction": "asc"}, {"field": "id", "direction": "desc"}]
    )
    assert build_sort(request) == [
        {"properties.eo:cloud_cover": {"order": "asc"}},
        {"id": {"order": "desc"}},
    ]


def test_no_field_selection_returns_everything():
    assert build_fields_filter(SearchRequest()) == ([], [])


def test_empty_field_selection_uses_baseline():
    includes, excludes = build_fields_filter(SearchRequest(fields={}))
    assert includes == [
        "id", "type", "geometry", "bbox", "links", "assets", "collection", "properties.datetime",
    ]
    assert excludes == []


def test_exclude_removes_from_baseline_and_is_carried():
    includes, excludes = build_fields_filter(SearchRequest(fields={"exclude": ["bbox"]}))
    assert "bbox" not in includes
    assert includes == ["id", "type", "geometry", "links", "assets", "collection", "properties.datetime"]
    assert excludes == ["bbox"]


def test_include_adds_unseen_fields_once():
    includes, _ = build_fields_filter(
        SearchRequest(fields={"include": ["properties.eo:cloud_cover", "id"]})
    )
    assert includes.count("id") == 1
    assert includes[-1] == "properties.eo:cloud_cover"


def test_pagination_window():
    compiled = compile_search(SearchRequest(), page=2, limit=10)
    assert compiled.from_ == 10
    assert compiled.size == 10
    params = compiled.to_params("items")
    assert params["from"] == 10 and params["size"] == 10
    assert "_source_includes" not in params
