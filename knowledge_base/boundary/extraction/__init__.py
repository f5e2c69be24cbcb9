"""Text extraction boundary."""

from knowledge_base.boundary.extraction.text_extractor import DefaultTextExtractor, html_to_text

__all__ = ["DefaultTextExtractor", "html_to_text"]
