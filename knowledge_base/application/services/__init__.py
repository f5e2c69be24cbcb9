"""
Application services.

Exports:
  - DocumentService: Ingestion and document maintenance
  - SearchService: Retrieval
"""

from knowledge_base.application.services.document_service import DocumentService
from knowledge_base.application.services.search_service import SearchService

__all__ = ["DocumentService", "SearchService"]
