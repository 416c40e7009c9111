"""
Pytest fixtures and configuration.
Services run against in-memory fakes of the engine and reference fetcher,
so no Elasticsearch, Kafka or S3 is needed.
"""
import os

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("LOG_LEVEL", "DEBUG")

from catalog_api.deps import (
    get_index_manager,
    get_ingest_pipeline,
    get_item_service,
    get_normalizer,
    get_search_service,
)
from catalog_api.main import app
from catalog_api.services import (
    IndexManager,
    IngestPipeline,
    ItemService,
    RecordNormalizer,
    SearchService,
)
from tests.fakes import FIXED_TIMESTAMP, FakeEngine, FakeFetcher


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def fetcher():
    return FakeFetcher()


@pytest.fixture
def pipeline(engine):
    return IngestPipeline(engine, "collections", "items", batch_size=500)


@pytest.fixture
def client(engine, fetcher):
    app.dependency_overrides[get_search_service] = lambda: SearchService(engine, "collections", "items")
    app.dependency_overrides[get_item_service] = lambda: ItemService(
        engine, "items", clock=lambda: FIXED_TIMESTAMP
    )
    app.dependency_overrides[get_index_manager] = lambda: IndexManager(engine, "collections", "items")
    app.dependency_overrides[get_ingest_pipeline] = lambda: IngestPipeline(engine, "collections", "items")
    app.dependency_overrides[get_normalizer] = lambda: RecordNormalizer(fetcher)
    # Context manager ensures lifespan runs so app.state is populated
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
