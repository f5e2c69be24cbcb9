"""
Blob storage value objects.

Dependencies: pydantic
System role: Return types of the blob store boundary
"""

from pydantic import BaseModel, Field


class BlobInfo(BaseModel):
    """Result of a blob upload."""

    url: str = Field(description="Object URL")
    blob_ref: str = Field(description="Opaque reference used for deletion")
    original_name: str
    size: int
    mime_type: str = "application/octet-stream"


class BlobDeletion(BaseModel):
    """Outcome of deleting one blob during document deletion."""

    blob_ref: str
    status: str = Field(description="deleted, missing or failed")
    error: str | None = None
