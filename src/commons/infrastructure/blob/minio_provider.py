"""MinIO client implementation of blob storage."""

import asyncio
import io
from collections.abc import AsyncIterator
from datetime import UTC, datetime
from pathlib import Path
from typing import BinaryIO

from minio import Minio
from minio.error import S3Error

from src.commons.infrastructure.blob.base import (
    BlobAccessDeniedError,
    BlobMetadata,
    BlobNotFoundError,
    BlobStorageBase,
)

_NOT_FOUND_CODES = frozenset({"NoSuchKey", "NoSuchBucket", "NoSuchObject"})
_ACCESS_DENIED_CODES = frozenset({"AccessDenied", "AllAccessDisabled"})


def _translate_s3_error(error: S3Error, bucket: str, path: str) -> Exception | None:
    """Map a MinIO S3Error to the storage exception for its code, if any."""
    if error.code in _NOT_FOUND_CODES:
        return BlobNotFoundError(bucket, path)
    if error.code in _ACCESS_DENIED_CODES:
        return BlobAccessDeniedError(bucket, path)
    return None


class MinioBlobStorage(BlobStorageBase):
    """MinIO client implementation of blob storage.

    Works with both AWS S3 (production) and MinIO (local development).
    Blocking client calls run in the default executor.
    """

    def __init__(
        self,
        endpoint: str,
        access_key: str,
        secret_key: str,
        secure: bool = True,
        region: str | None = None,
        public_domain: str | None = None,
    ) -> None:
        """Initialize MinIO client.

        Args:
            endpoint: S3/MinIO endpoint (e.g., "s3.amazonaws.com").
            access_key: Access key ID.
            secret_key: Secret access key.
            secure: Use HTTPS connection.
            region: Bucket region.
            public_domain: Host suffix for public URLs,
                defaults to ``s3.{region}.amazonaws.com``.
        """
        self._client = Minio(
            endpoint=endpoint,
            access_key=access_key or None,
            secret_key=secret_key or None,
            secure=secure,
            region=region,
        )
        self._endpoint = endpoint
        self._public_domain = public_domain or f"s3.{region or 'us-east-1'}.amazonaws.com"

    async def upload(
        self,
        bucket: str,
        path: str,
        data: BinaryIO | bytes,
        content_type: str = "application/octet-stream",
    ) -> BlobMetadata:
        """Upload in-memory bytes or an open binary stream."""
        loop = asyncio.get_running_loop()

        if isinstance(data, bytes):
            data_io: BinaryIO = io.BytesIO(data)
            length = len(data)
        else:
            data.seek(0, io.SEEK_END)
            length = data.tell()
            data.seek(0)
            data_io = data

        def _upload() -> str:
            try:
                result = self._client.put_object(
                    bucket_name=bucket,
                    object_name=path,
                    data=data_io,
                    length=length,
                    content_type=content_type,
                )
            except S3Error as e:
                translated = _translate_s3_error(e, bucket, path)
                if translated is None:
                    raise
                raise translated from e
            return result.etag or ""

        etag = await loop.run_in_executor(None, _upload)
        return BlobMetadata(
            path=path,
            size_bytes=length,
            content_type=content_type,
            created_at=datetime.now(UTC),
            etag=etag,
        )

    async def upload_file(
        self,
        bucket: str,
        path: str,
        local_path: Path,
        content_type: str = "application/octet-stream",
    ) -> BlobMetadata:
        """Stream a local file to storage."""
        with local_path.open("rb") as f:
            return await self.upload(bucket, path, f, content_type=content_type)

    async def download_stream(  # type: ignore[override]
        self,
        bucket: str,
        path: str,
        chunk_size: int = 8192,
    ) -> AsyncIterator[bytes]:
        """Stream download a blob in chunks."""
        loop = asyncio.get_running_loop()

        try:
            response = await loop.run_in_executor(
                None, self._client.get_object, bucket, path
            )
        except S3Error as e:
            translated = _translate_s3_error(e, bucket, path)
            if translated is None:
                raise
            raise translated from e

        try:
            while True:
                chunk: bytes = await loop.run_in_executor(
                    None, response.read, chunk_size
                )
                if not chunk:
                    break
                yield chunk
        finally:
            response.close()
            response.release_conn()

    async def download_to_file(
        self,
        bucket: str,
        path: str,
        local_path: Path,
        chunk_size: int = 8192,
    ) -> int:
        """Download a blob to a local file using streaming."""
        local_path.parent.mkdir(parents=True, exist_ok=True)
        written = 0
        with local_path.open("wb") as f:
            async for chunk in self.download_stream(bucket, path, chunk_size):
                f.write(chunk)
                written += len(chunk)
            f.flush()
        return written

    def public_url(self, bucket: str, path: str) -> str:
        """Build the virtual-hosted style URL of an object."""
        return f"https://{bucket}.{self._public_domain}/{path.lstrip('/')}"
