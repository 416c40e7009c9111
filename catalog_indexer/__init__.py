"""Queue-driven indexer feeding catalog records into the search engine."""
