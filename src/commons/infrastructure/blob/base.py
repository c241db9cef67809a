"""Abstract base class for blob storage operations."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import BinaryIO


@dataclass
class BlobMetadata:
    """Metadata for a stored blob."""

    path: str
    size_bytes: int
    content_type: str
    created_at: datetime
    etag: str


class BlobNotFoundError(Exception):
    """Raised when a blob or its bucket does not exist."""

    def __init__(self, bucket: str, path: str) -> None:
        self.bucket = bucket
        self.path = path
        super().__init__(f"Blob not found: {bucket}/{path}")


class BlobAccessDeniedError(Exception):
    """Raised when the credentials may not read or write a blob."""

    def __init__(self, bucket: str, path: str) -> None:
        self.bucket = bucket
        self.path = path
        super().__init__(f"Access denied: {bucket}/{path}")


class BlobStorageBase(ABC):
    """Abstract base class for blob storage operations.

    Implementations should handle:
    - AWS S3
    - MinIO (local development)
    """

    @abstractmethod
    async def upload(
        self,
        bucket: str,
        path: str,
        data: BinaryIO | bytes,
        content_type: str = "application/octet-stream",
    ) -> BlobMetadata:
        """Upload in-memory bytes or an open binary stream.

        Args:
            bucket: Target bucket name.
            path: Object key within the bucket.
            data: File-like object or bytes to upload.
            content_type: MIME type of the content.

        Returns:
            Metadata of the uploaded blob.
        """

    @abstractmethod
    async def upload_file(
        self,
        bucket: str,
        path: str,
        local_path: Path,
        content_type: str = "application/octet-stream",
    ) -> BlobMetadata:
        """Stream a local file to storage without reading it into memory.

        Args:
            bucket: Target bucket name.
            path: Object key within the bucket.
            local_path: File to upload.
            content_type: MIME type of the content.

        Returns:
            Metadata of the uploaded blob.
        """

    @abstractmethod
    def download_stream(
        self,
        bucket: str,
        path: str,
        chunk_size: int = 8192,
    ) -> AsyncIterator[bytes]:
        """Stream download a blob in chunks.

        Raises:
            BlobNotFoundError: If the blob doesn't exist.
            BlobAccessDeniedError: If reading is not permitted.
        """
        ...

    @abstractmethod
    async def download_to_file(
        self,
        bucket: str,
        path: str,
        local_path: Path,
        chunk_size: int = 8192,
    ) -> int:
        """Download a blob to a local file using streaming.

        Parent directories of ``local_path`` are created. The file is
        flushed and closed before this returns.

        Args:
            bucket: Source bucket name.
            path: Object key within the bucket.
            local_path: Local filesystem path to write to.
            chunk_size: Size of each chunk in bytes.

        Returns:
            Number of bytes written.

        Raises:
            BlobNotFoundError: If the blob doesn't exist.
            BlobAccessDeniedError: If reading is not permitted.
        """

    @abstractmethod
    def public_url(self, bucket: str, path: str) -> str:
        """Build the public (unsigned) URL of an object."""
