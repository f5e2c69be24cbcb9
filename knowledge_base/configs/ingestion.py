"""
Ingestion pipeline configuration.

Chunking, embedding and per-item limits for the ingestion coordinator.

Dependencies: pydantic, pydantic_settings
System role: Ingestion pipeline configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class IngestionSettings(BaseSettings):
    """Settings for document ingestion."""

    model_config = SettingsConfigDict(
        env_prefix="INGESTION_",
        case_sensitive=False,
        extra="ignore",
    )

    # Chunking settings
    chunk_size: int = Field(default=1000, description="Maximum chunk size in characters")
    chunk_overlap: int = Field(default=200, description="Overlap between consecutive chunks")

    # Embedding settings
    embedding_model: str = Field(
        default="models/gemini-embedding-001",
        description="Google Gemini embedding model ID",
    )
    embedding_dimension: int = Field(
        default=1024,
        description="Fixed embedding vector dimension",
    )

    max_files_per_request: int = Field(default=20, description="Upper bound on files per batch")
    item_timeout_seconds: float | None = Field(
        default=None,
        description="Abort a single item after this many seconds (None disables)",
    )
    url_fetch_timeout_seconds: float = Field(
        default=30.0,
        description="HTTP timeout for URL and remote file fetches",
    )
