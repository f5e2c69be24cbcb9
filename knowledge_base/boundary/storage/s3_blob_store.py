"""
S3 blob store for raw uploaded files.

Uploads file bytes under generated keys and deletes them by key. boto3 is
blocking, so every call runs in a worker thread via asyncio.to_thread.

Dependencies: boto3, botocore
System role: Blob storage boundary for the ingestion coordinator
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from pathlib import PurePosixPath

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from knowledge_base.configs.blob_storage import BlobStorageSettings
from knowledge_base.core.exceptions import BlobStorageError
from knowledge_base.models.storage import BlobInfo

logger = logging.getLogger(__name__)

_MISSING_CODES = {"404", "NoSuchKey", "NotFound"}


class S3BlobStore:
    """S3-backed blob store (put_object / delete_object)."""

    def __init__(self, settings: BlobStorageSettings, client=None) -> None:
        """
        Initialize S3 blob store.

        Args:
            settings: Bucket, region, key prefix and optional endpoint
            client: Preconfigured boto3 S3 client (created from settings if None)
        """
        self._bucket = settings.bucket
        self._region = settings.region
        self._prefix = settings.key_prefix
        self._endpoint_url = settings.endpoint_url
        self._s3_client = client or boto3.client(
            "s3",
            region_name=settings.region,
            endpoint_url=settings.endpoint_url,
        )

    def build_key(self, original_name: str) -> str:
        """
        Generate a unique object key for a file.

        Args:
            original_name: Client-side file name

        Returns:
            str: "{prefix}{uuid}-{timestamp}{ext}"
        """
        ext = PurePosixPath(original_name).suffix.lower()
        timestamp = int(datetime.now(timezone.utc).timestamp() * 1000)
        return f"{self._prefix}{uuid.uuid4()}-{timestamp}{ext}"

    def object_url(self, key: str) -> str:
        """Public URL of an object key."""
        if self._endpoint_url:
            return f"{self._endpoint_url.rstrip('/')}/{self._bucket}/{key}"
        return f"https://{self._bucket}.s3.{self._region}.amazonaws.com/{key}"

    async def upload(self, data: bytes, name: str, mime_type: str) -> BlobInfo:
        """
        Upload file bytes.

        Args:
            data: Raw file content
            name: Original file name
            mime_type: MIME type stored as ContentType

        Returns:
            BlobInfo: URL and blob reference (the object key)

        Raises:
            BlobStorageError: When the upload fails
        """
        key = self.build_key(name)
        try:
            await asyncio.to_thread(
                self._s3_client.put_object,
                Bucket=self._bucket,
                Key=key,
                Body=data,
                ContentType=mime_type,
                Metadata={"original-name": name.encode("ascii", "ignore").decode()},
            )
        except (ClientError, BotoCoreError) as e:
            raise BlobStorageError(f"Failed to upload {name}: {e}", blob_ref=key) from e

        logger.info(
            "Blob uploaded",
            extra={"blob_ref": key, "original_name": name, "size": len(data)},
        )
        return BlobInfo(
            url=self.object_url(key),
            blob_ref=key,
            original_name=name,
            size=len(data),
            mime_type=mime_type,
        )

    async def delete(self, blob_ref: str) -> bool:
        """
        Delete a blob. Deleting a missing object succeeds.

        Args:
            blob_ref: Object key

        Returns:
            bool: True once the object no longer exists

        Raises:
            BlobStorageError: When the delete call fails
        """
        try:
            await asyncio.to_thread(
                self._s3_client.delete_object,
                Bucket=self._bucket,
                Key=blob_ref,
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in _MISSING_CODES:
                return True
            raise BlobStorageError(f"Failed to delete blob: {e}", blob_ref=blob_ref) from e
        except BotoCoreError as e:
            raise BlobStorageError(f"Failed to delete blob: {e}", blob_ref=blob_ref) from e

        logger.info("Blob deleted", extra={"blob_ref": blob_ref})
        return True
