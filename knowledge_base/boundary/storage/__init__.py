"""Blob storage boundary."""

from knowledge_base.boundary.storage.s3_blob_store import S3BlobStore

__all__ = ["S3BlobStore"]
