"""
Text extraction for uploaded files, web pages and remote files.

Plain text formats are decoded directly; PDFs are parsed with LangChain's
PyPDFLoader from a temporary file; URLs are fetched with httpx and HTML is
parsed with lxml and reduced to visible text.

Dependencies: httpx, lxml, langchain_community.document_loaders, pypdf
System role: Text extraction boundary for the ingestion coordinator
"""

import asyncio
import logging
import mimetypes
import os
import tempfile
from pathlib import PurePosixPath
from urllib.parse import unquote, urlparse

import httpx
from langchain_community.document_loaders import PyPDFLoader
from lxml import etree
from lxml import html as lxml_html
from lxml.etree import ParserError

from knowledge_base.configs.ingestion import IngestionSettings
from knowledge_base.core.exceptions import ExtractionError, NoContentError

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = frozenset({".txt", ".md", ".csv", ".json"})
PDF_EXTENSION = ".pdf"
SUPPORTED_EXTENSIONS = TEXT_EXTENSIONS | {PDF_EXTENSION}

NON_CONTENT_TAGS = ("script", "style", "noscript", "template")

_HTTP_HEADERS = {"User-Agent": "knowledge-base-rag/0.1"}


def html_to_text(markup: str) -> str:
    """
    Reduce an HTML document to its visible text.

    Args:
        markup: Raw HTML

    Returns:
        str: Whitespace-normalized text without scripts, styles, comments or tags;
            empty when the markup cannot be parsed
    """
    try:
        root = lxml_html.fromstring(markup)
    except (ParserError, ValueError):
        return ""
    if not isinstance(root.tag, str) or root.tag in NON_CONTENT_TAGS:
        return ""
    for node in list(root.iter(*NON_CONTENT_TAGS, etree.Comment)):
        node.drop_tree()
    return " ".join(" ".join(root.itertext()).split())


def file_extension(file_name: str) -> str:
    """Lower-cased extension including the dot, or ''."""
    return PurePosixPath(file_name).suffix.lower()


def _require_text(text: str, source: str) -> str:
    if not text or not text.strip():
        raise NoContentError("No text content could be extracted", source=source)
    return text


class DefaultTextExtractor:
    """Extract text from .txt/.md/.csv/.json/.pdf files and web pages."""

    def __init__(
        self,
        fetch_timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize extractor.

        Args:
            fetch_timeout: HTTP timeout in seconds for URL fetches
            transport: Optional httpx transport (tests inject MockTransport)
        """
        self._timeout = httpx.Timeout(fetch_timeout)
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: IngestionSettings) -> "DefaultTextExtractor":
        return cls(fetch_timeout=settings.url_fetch_timeout_seconds)

    async def extract_file(self, data: bytes, file_name: str, mime_type: str | None = None) -> str:
        """
        Extract text from an uploaded file.

        Args:
            data: Raw file bytes
            file_name: File name; the extension selects the parser
            mime_type: Declared MIME type (informational)

        Returns:
            str: Extracted text

        Raises:
            ExtractionError: When the type is unsupported or parsing fails
            NoContentError: When the file yields no text
        """
        ext = file_extension(file_name)
        if ext in TEXT_EXTENSIONS:
            try:
                text = data.decode("utf-8-sig")
            except UnicodeDecodeError as e:
                raise ExtractionError(f"File is not valid UTF-8: {e}", source=file_name) from e
            return _require_text(text, file_name)

        if ext == PDF_EXTENSION:
            text = await asyncio.to_thread(self._parse_pdf, data, file_name)
            return _require_text(text, file_name)

        raise ExtractionError(
            f"Unsupported file type: {ext or 'none'}",
            source=file_name,
            details={"supported": sorted(SUPPORTED_EXTENSIONS), "mime_type": mime_type},
        )

    def _parse_pdf(self, data: bytes, file_name: str) -> str:
        fd, path = tempfile.mkstemp(suffix=PDF_EXTENSION)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            documents = PyPDFLoader(path).load()
        except Exception as e:
            raise ExtractionError(f"Failed to parse PDF: {e}", source=file_name) from e
        finally:
            os.unlink(path)
        return "\n\n".join(doc.page_content for doc in documents if doc.page_content)

    async def _get(self, url: str) -> httpx.Response:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                transport=self._transport,
                follow_redirects=True,
                headers=_HTTP_HEADERS,
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
                return response
        except httpx.HTTPStatusError as e:
            raise ExtractionError(
                f"Fetch failed with status {e.response.status_code}",
                source=url,
            ) from e
        except httpx.HTTPError as e:
            raise ExtractionError(f"Fetch failed: {e}", source=url) from e

    async def extract_url(self, url: str) -> str:
        """
        Fetch a web page and extract its text.

        Raises:
            ExtractionError: When the fetch fails
            NoContentError: When the page has no visible text
        """
        response = await self._get(url)
        content_type = response.headers.get("content-type", "").lower()
        if "html" in content_type or response.text.lstrip().startswith("<"):
            text = html_to_text(response.text)
        else:
            text = response.text
        logger.info("URL extracted", extra={"url": url, "text_length": len(text)})
        return _require_text(text, url)

    async def download_file(self, url: str) -> tuple[bytes, str, str]:
        """
        Download a remote file.

        Args:
            url: File URL

        Returns:
            tuple[bytes, str, str]: (data, file_name, mime_type); the file name
            is the last path segment of the URL

        Raises:
            ExtractionError: When the download fails
        """
        response = await self._get(url)
        file_name = unquote(PurePosixPath(urlparse(url).path).name) or "download"
        mime_type = (
            response.headers.get("content-type", "").split(";")[0].strip()
            or mimetypes.guess_type(file_name)[0]
            or "application/octet-stream"
        )
        return response.content, file_name, mime_type
