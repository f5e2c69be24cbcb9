"""
Ingestion request items and aggregate results.

Dependencies: pydantic, knowledge_base.models.chunk_record
System role: Input and output contracts of the ingestion coordinator
"""

import enum

from pydantic import BaseModel, Field

from knowledge_base.models.chunk_record import BotConfig, SourceType


class ItemStatus(str, enum.Enum):
    """Outcome of one successfully handled item."""

    SUCCESS = "success"
    REPLACED = "replaced"
    SKIPPED_DUPLICATE = "skipped_duplicate"


class FileItem(BaseModel):
    """Uploaded file payload."""

    file_name: str = Field(min_length=1)
    data: bytes
    mime_type: str = "application/octet-stream"


class IngestionOptions(BaseModel):
    """Request-wide metadata applied to every ingested item."""

    title: str | None = None
    description: str | None = None
    titles: list[str] = Field(default_factory=list, description="Per-file titles by position")
    descriptions: list[str] = Field(default_factory=list, description="Per-file descriptions by position")
    bot_config: BotConfig = Field(default_factory=BotConfig)

    def title_for(self, index: int) -> str | None:
        """Per-file title, falling back to the request-wide title."""
        if index < len(self.titles) and self.titles[index]:
            return self.titles[index]
        return self.title

    def description_for(self, index: int) -> str | None:
        """Per-file description, falling back to the request-wide description."""
        if index < len(self.descriptions) and self.descriptions[index]:
            return self.descriptions[index]
        return self.description


class ItemResult(BaseModel):
    """Success entry for one ingested item."""

    item: str = Field(description="File name or URL")
    type: SourceType
    document_id: str
    chunks_created: int
    status: ItemStatus = ItemStatus.SUCCESS
    version_number: int = 1
    replaced_document_id: str | None = None
    blob_url: str | None = None
    blob_ref: str | None = None
    content_hash: str | None = Field(default=None, description="Hash prefix, for display")
    text_length: int = 0
    processing_time_ms: float = 0.0


class ItemError(BaseModel):
    """Error entry for one failed item."""

    item: str
    type: SourceType
    error: str
    error_type: str


class IngestionResult(BaseModel):
    """Aggregate result of one ingestion request."""

    tenant_id: str
    total_items: int
    success_count: int
    error_count: int
    results: list[ItemResult] = Field(default_factory=list)
    errors: list[ItemError] = Field(default_factory=list)
    message: str = ""

    @property
    def new_count(self) -> int:
        return sum(1 for r in self.results if r.status == ItemStatus.SUCCESS)

    @property
    def replaced_count(self) -> int:
        return sum(1 for r in self.results if r.status == ItemStatus.REPLACED)

    @property
    def skipped_count(self) -> int:
        return sum(1 for r in self.results if r.status == ItemStatus.SKIPPED_DUPLICATE)
