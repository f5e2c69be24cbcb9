"""API-specific dependencies."""

from .dependencies import (
    ServiceCache,
    get_document_service,
    get_search_service,
    get_service_cache,
    get_settings_dependency,
    get_store,
)

__all__ = [
    "ServiceCache",
    "get_document_service",
    "get_search_service",
    "get_service_cache",
    "get_settings_dependency",
    "get_store",
]
