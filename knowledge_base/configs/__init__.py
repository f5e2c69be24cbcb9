"""
Configuration management module.

Provides centralized, type-safe configuration using Pydantic Settings.
All config modules support environment variable mapping with validation.
"""

from knowledge_base.configs.blob_storage import BlobStorageSettings
from knowledge_base.configs.database import DatabaseSettings
from knowledge_base.configs.ingestion import IngestionSettings
from knowledge_base.configs.retrieval import RetrievalSettings
from knowledge_base.configs.settings import Settings, get_settings

__all__ = [
    "BlobStorageSettings",
    "DatabaseSettings",
    "IngestionSettings",
    "RetrievalSettings",
    "Settings",
    "get_settings",
]
