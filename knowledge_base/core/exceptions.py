"""
Exception hierarchy for the knowledge base.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Item-level errors (extraction, embedding, blob storage) are recorded per
ingested item; StoreError is systemic and aborts the whole request.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class KnowledgeBaseError(Exception):
    """Base exception for all knowledge base errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ValidationError(KnowledgeBaseError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            message: Error message
            field: Field name that failed validation
            details: Additional context
        """
        details = details or {}
        if field:
            details["field"] = field
        super().__init__(message, details)


class ExtractionError(KnowledgeBaseError):
    """Raised when text cannot be extracted from a file or URL."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize extraction error.

        Args:
            message: Error message
            source: File name or URL that failed
            details: Additional context
        """
        details = details or {}
        if source:
            details["source"] = source
        super().__init__(message, details)


class NoContentError(ExtractionError):
    """Raised when extraction succeeds but yields no usable text."""

    pass


class EmbeddingError(KnowledgeBaseError):
    """Raised when embedding generation fails or returns the wrong count."""

    pass


class BlobStorageError(KnowledgeBaseError):
    """Raised when a blob upload or delete fails."""

    def __init__(
        self,
        message: str,
        blob_ref: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize blob storage error.

        Args:
            message: Error message
            blob_ref: Blob reference involved in the failed call
            details: Additional context
        """
        details = details or {}
        if blob_ref:
            details["blob_ref"] = blob_ref
        super().__init__(message, details)


class StoreError(KnowledgeBaseError):
    """Raised when the chunk record store itself fails."""

    def __init__(
        self,
        message: str,
        operation: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize store error.

        Args:
            message: Error message
            operation: Operation that failed (insert, find, update, delete, count)
            details: Additional context
        """
        details = details or {}
        if operation:
            details["operation"] = operation
        super().__init__(message, details)


class DocumentNotFoundError(KnowledgeBaseError):
    """Raised when no chunk records exist for a tenant/document pair."""

    def __init__(
        self,
        tenant_id: str,
        document_id: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize document not found error.

        Args:
            tenant_id: Tenant the lookup was scoped to
            document_id: ID of the missing document
            details: Additional context
        """
        details = details or {}
        details["tenant_id"] = tenant_id
        details["document_id"] = document_id
        super().__init__(f"Document not found: {document_id}", details)


class RetrievalError(KnowledgeBaseError):
    """Raised when a search cannot be executed."""

    def __init__(
        self,
        message: str,
        tenant_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize retrieval error.

        Args:
            message: Error message
            tenant_id: Tenant the search was scoped to
            details: Additional context
        """
        details = details or {}
        if tenant_id:
            details["tenant_id"] = tenant_id
        super().__init__(message, details)
