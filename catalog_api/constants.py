"""
Application-wide constants for the STAC Catalog Search API.

Centralizes version, index defaults and the fixed STAC vocabularies used
by ingestion and query compilation.
"""

# Application metadata
APP_NAME = "STAC Catalog Search API"
VERSION = "1.0.0"

# Link relations that describe catalog hierarchy; these are rebuilt at
# response time and are never stored.
HIERARCHY_LINK_RELS = frozenset(["self", "root", "parent", "child", "collection", "item"])

# Bulk write directive defaults
BULK_ACTION = "update"
BULK_RETRY_ON_CONFLICT = 3

# Fields always returned once a request asks for any field selection
DEFAULT_SOURCE_INCLUDES = (
    "id",
    "type",
    "geometry",
    "bbox",
    "links",
    "assets",
    "collection",
    "properties.datetime",
)

# Indices without properties.datetime (collections) sort those docs last
DEFAULT_SORT = [{"properties.datetime": {"order": "desc", "unmapped_type": "date"}}]

RANGE_OPERATORS = ("gt", "lt", "gte", "lte")

# Path parameter validation for ids and index names
NAME_PATTERN = r"^[a-zA-Z0-9_.:-]+$"
