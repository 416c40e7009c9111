# catalog_api/settings.py
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Elasticsearch Configuration
    ES_HOST: str = "http://localhost:9200"
    ES_USERNAME: Optional[str] = None
    ES_PASSWORD: Optional[str] = None
    ES_VERIFY_CERTS: bool = True
    ES_REQUEST_TIMEOUT: int = 30

    # Index names and bulk high-water mark
    COLLECTIONS_INDEX: str = "collections"
    ITEMS_INDEX: str = "items"
    ES_BATCH_SIZE: int = 500
    CREATE_INDICES_ON_STARTUP: bool = False

    # By-reference record sources
    AWS_REGION: Optional[str] = None
    HTTP_FETCH_TIMEOUT: int = 10

    # Kafka Configuration (indexer)
    KAFKA_BROKER_URL: str = "localhost:9092"
    KAFKA_TOPIC: str = "stac_ingest"
    KAFKA_GROUP_ID: str = "stac_catalog_indexing_group"
    KAFKA_MAX_POLL_RECORDS: int = 500

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = '.env'
        env_file_encoding = 'utf-8'


settings = Settings()
