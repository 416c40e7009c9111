# catalog_api/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from prometheus_fastapi_instrumentator import Instrumentator

from .constants import APP_NAME, VERSION
from .routers import admin_router, search_router, transactions_router
from .services import (
    EngineClient,
    IndexManager,
    IngestPipeline,
    ItemService,
    RecordNormalizer,
    ReferenceFetcher,
    SearchService,
)
from .settings import settings

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # The engine connects lazily, on the first request that needs it
    engine = EngineClient.from_settings(settings)
    fetcher = ReferenceFetcher(aws_region=settings.AWS_REGION, timeout=settings.HTTP_FETCH_TIMEOUT)

    app.state.engine = engine
    app.state.fetcher = fetcher
    app.state.search_service = SearchService(engine, settings.COLLECTIONS_INDEX, settings.ITEMS_INDEX)
    app.state.item_service = ItemService(engine, settings.ITEMS_INDEX)
    app.state.index_manager = IndexManager(engine, settings.COLLECTIONS_INDEX, settings.ITEMS_INDEX)
    app.state.ingest_pipeline = IngestPipeline(
        engine, settings.COLLECTIONS_INDEX, settings.ITEMS_INDEX, batch_size=settings.ES_BATCH_SIZE
    )
    app.state.normalizer = RecordNormalizer(fetcher)

    if settings.CREATE_INDICES_ON_STARTUP:
        await app.state.index_manager.ensure_indices()

    logger.info(f"{APP_NAME} {VERSION} started")
    yield

    fetcher.close()
    await engine.close()
    logger.info(f"{APP_NAME} stopped")


app = FastAPI(title=APP_NAME, version=VERSION, lifespan=lifespan)
Instrumentator().instrument(app).expose(app)

app.include_router(search_router)
app.include_router(transactions_router)
app.include_router(admin_router)


@app.get("/", tags=["Health"])
def root():
    return {"service": APP_NAME, "status": "healthy", "version": VERSION}


@app.get("/health", tags=["Health"])
def health():
    return {
        "status": "healthy",
        "collections_index": settings.COLLECTIONS_INDEX,
        "items_index": settings.ITEMS_INDEX,
    }
