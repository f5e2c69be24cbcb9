"""
Collaborator protocols consumed by the core.

The core depends on these structural types only; concrete adapters live in
knowledge_base.boundary and test doubles satisfy them with AsyncMock.

Dependencies: typing
System role: Seams between core logic and external services
"""

from typing import Protocol

from knowledge_base.models.storage import BlobInfo


class TextExtractor(Protocol):
    """Turns files and URLs into plain text."""

    async def extract_file(self, data: bytes, file_name: str, mime_type: str | None = None) -> str:
        """Extract text from file bytes. Raises NoContentError on empty output."""
        ...

    async def extract_url(self, url: str) -> str:
        """Fetch a page and extract its text. Raises NoContentError on empty output."""
        ...

    async def download_file(self, url: str) -> tuple[bytes, str, str]:
        """Download a remote file as (data, file_name, mime_type)."""
        ...


class EmbeddingProvider(Protocol):
    """Length-preserving text embedding."""

    model_name: str

    async def embed(self, texts: list[str]) -> list[list[float]]:
        ...

    async def embed_query(self, text: str) -> list[float]:
        ...


class BlobStore(Protocol):
    """Raw file storage."""

    async def upload(self, data: bytes, name: str, mime_type: str) -> BlobInfo:
        ...

    async def delete(self, blob_ref: str) -> bool:
        """Delete a blob; deleting a missing blob returns True."""
        ...
