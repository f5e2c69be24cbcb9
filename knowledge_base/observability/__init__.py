"""
Observability module.

Provides structured logging, correlation ID tracking and request logging
middleware.
"""

from knowledge_base.observability.correlation import correlation_scope, get_correlation_id
from knowledge_base.observability.logger import configure_logging

__all__ = [
    "configure_logging",
    "correlation_scope",
    "get_correlation_id",
]
