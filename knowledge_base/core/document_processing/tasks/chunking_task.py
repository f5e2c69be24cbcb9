"""
Text chunking task using RecursiveCharacterTextSplitter.

Splits extracted text into retrievable chunks, preferring paragraph, line,
sentence and word boundaries before falling back to raw characters.

Dependencies: langchain_text_splitters
System role: Chunking stage of document ingestion
"""

import logging

from langchain_text_splitters import RecursiveCharacterTextSplitter

from knowledge_base.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

SEPARATORS = ["\n\n", "\n", ". ", " ", ""]


class ChunkingTask:
    """Split text into chunks using RecursiveCharacterTextSplitter."""

    def __init__(
        self,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
    ) -> None:
        """
        Initialize chunking task with splitter configuration.

        Args:
            chunk_size: Maximum chunk size in characters
            chunk_overlap: Overlap between consecutive chunks

        Raises:
            ValueError: When overlap is not smaller than size
        """
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        if not 0 <= chunk_overlap < chunk_size:
            raise ValueError("chunk_overlap must be in [0, chunk_size)")

        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            separators=SEPARATORS,
            length_function=len,
        )

    def split(self, text: str) -> list[str]:
        """
        Split text into ordered, non-empty chunks.

        Never drops content: when the splitter fails or yields nothing
        usable, the whole text is returned as one chunk.

        Args:
            text: Extracted document text

        Returns:
            list[str]: Chunks in document order

        Raises:
            ValidationError: When text is empty or whitespace-only
        """
        if not text or not text.strip():
            raise ValidationError("Cannot split empty text", field="text")

        try:
            chunks = [c for c in self._splitter.split_text(text) if c.strip()]
        except Exception as e:
            logger.warning(
                "Splitter failed, using whole text as one chunk",
                extra={"error_type": type(e).__name__, "error_msg": str(e)},
            )
            chunks = []

        return chunks or [text]


def split(text: str, size: int = 1000, overlap: int = 200) -> list[str]:
    """Split text with a one-off ChunkingTask."""
    return ChunkingTask(chunk_size=size, chunk_overlap=overlap).split(text)
