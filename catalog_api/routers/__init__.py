"""
Routers package for the STAC Catalog Search API.

This package contains all API route definitions organized by domain.
"""

from .admin import router as admin_router
from .search import router as search_router
from .transactions import router as transactions_router

__all__ = [
    "admin_router",
    "search_router",
    "transactions_router",
]
