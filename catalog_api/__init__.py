"""STAC catalog search API and core services."""
