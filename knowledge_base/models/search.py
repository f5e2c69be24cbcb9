"""
Search domain models and schemas.

Dependencies: pydantic
System role: Retrieval API contracts
"""

import enum
from datetime import datetime

from pydantic import BaseModel, Field

from knowledge_base.models.chunk_record import SourceType


class SearchMode(str, enum.Enum):
    """Closed set of retrieval strategies."""

    VECTOR = "vector"
    LEXICAL = "lexical"
    KEYWORD = "keyword"
    HYBRID = "hybrid"


class SearchFilters(BaseModel):
    """Optional structured filters."""

    source_type: SourceType | None = None
    file_type: str | None = None
    date_from: datetime | None = None
    date_to: datetime | None = None


class SearchHit(BaseModel):
    """Single ranked search result."""

    content: str
    document_id: str
    chunk_index: int
    source_title: str
    source_uri: str
    source_type: SourceType
    score: float


class SearchRequest(BaseModel):
    """Request schema for POST /search."""

    tenant_id: str = Field(min_length=1)
    query: str = Field(min_length=1)
    limit: int = Field(default=10, ge=1, le=100)
    mode: SearchMode = SearchMode.HYBRID
    filters: SearchFilters = Field(default_factory=SearchFilters)


class SearchResponse(BaseModel):
    """Response schema for POST /search."""

    tenant_id: str
    query: str
    mode: SearchMode
    count: int
    results: list[SearchHit]
    filters_applied: bool = False
