"""Shared fakes for application service tests."""

from collections.abc import AsyncIterator
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, BinaryIO

import pytest

from src.commons.infrastructure.blob.base import (
    BlobMetadata,
    BlobNotFoundError,
    BlobStorageBase,
)
from src.commons.infrastructure.documentdb.base import DocumentDBBase
from src.domain.models.job import JobContext
from src.domain.value_objects.rendition_ladder import RenditionLadder
from src.infrastructure.video.base import TranscodeResult, TranscoderBase


class InMemoryBlobStorage(BlobStorageBase):
    """Blob storage keeping objects in a dict keyed by (bucket, key)."""

    def __init__(self, domain: str = "s3.us-east-1.amazonaws.com") -> None:
        self.objects: dict[tuple[str, str], bytes] = {}
        self.content_types: dict[tuple[str, str], str] = {}
        self.upload_order: list[str] = []
        self.fail_upload_on: str | None = None
        self.upload_error: Exception | None = None
        self.download_error: Exception | None = None
        self._domain = domain

    async def upload(
        self,
        bucket: str,
        path: str,
        data: BinaryIO | bytes,
        content_type: str = "application/octet-stream",
    ) -> BlobMetadata:
        if path == self.fail_upload_on:
            raise self.upload_error or OSError(f"upload of {path} failed")
        payload = data if isinstance(data, bytes) else data.read()
        self.objects[(bucket, path)] = payload
        self.content_types[(bucket, path)] = content_type
        self.upload_order.append(path)
        return BlobMetadata(
            path=path,
            size_bytes=len(payload),
            content_type=content_type,
            created_at=datetime.now(UTC),
            etag="etag",
        )

    async def upload_file(
        self,
        bucket: str,
        path: str,
        local_path: Path,
        content_type: str = "application/octet-stream",
    ) -> BlobMetadata:
        with local_path.open("rb") as f:
            return await self.upload(bucket, path, f, content_type=content_type)

    async def download_stream(
        self,
        bucket: str,
        path: str,
        chunk_size: int = 8192,
    ) -> AsyncIterator[bytes]:
        if (bucket, path) not in self.objects:
            raise BlobNotFoundError(bucket, path)
        data = self.objects[(bucket, path)]
        for i in range(0, len(data), chunk_size):
            yield data[i : i + chunk_size]

    async def download_to_file(
        self,
        bucket: str,
        path: str,
        local_path: Path,
        chunk_size: int = 8192,
    ) -> int:
        local_path.parent.mkdir(parents=True, exist_ok=True)
        written = 0
        with local_path.open("wb") as f:
            async for chunk in self.download_stream(bucket, path, chunk_size):
                f.write(chunk)
                written += len(chunk)
                if self.download_error is not None:
                    raise self.download_error
        return written

    def public_url(self, bucket: str, path: str) -> str:
        return f"https://{bucket}.{self._domain}/{path}"

    def keys(self, bucket: str) -> list[str]:
        return sorted(key for b, key in self.objects if b == bucket)


class InMemoryDocumentDB(DocumentDBBase):
    """Document store keeping collections as dicts keyed by '_id'."""

    def __init__(self) -> None:
        self.collections: dict[str, dict[str, dict[str, Any]]] = {}
        self.connected = False
        self.close_calls = 0
        self.connect_error: Exception | None = None
        self.update_error: Exception | None = None
        self.update_calls: list[tuple[str, str, dict[str, Any]]] = []

    async def connect(self) -> None:
        if self.connect_error is not None:
            raise self.connect_error
        self.connected = True

    async def find_by_id_and_update(
        self,
        collection: str,
        document_id: str,
        updates: dict[str, Any],
    ) -> dict[str, Any] | None:
        self.update_calls.append((collection, document_id, updates))
        if self.update_error is not None:
            raise self.update_error
        doc = self.collections.get(collection, {}).get(document_id)
        if doc is None:
            return None
        doc.update(updates)
        return {"id": document_id, **{k: v for k, v in doc.items() if k != "_id"}}

    async def close(self) -> None:
        self.close_calls += 1
        self.connected = False

    def seed(self, collection: str, document_id: str, **fields: Any) -> None:
        self.collections.setdefault(collection, {})[document_id] = {
            "_id": document_id,
            **fields,
        }


class FakeHlsTranscoder(TranscoderBase):
    """Writes a small rendition tree instead of running ffmpeg."""

    def __init__(
        self,
        return_code: int = 0,
        diagnostics: str = "",
        segments_per_rung: int = 2,
        timed_out: bool = False,
    ) -> None:
        self.return_code = return_code
        self.diagnostics = diagnostics
        self.segments_per_rung = segments_per_rung
        self.timed_out = timed_out
        self.calls: list[dict[str, Any]] = []

    async def transcode(
        self,
        source_path: Path,
        output_dir: Path,
        ladder: RenditionLadder,
        timeout: float | None = None,
    ) -> TranscodeResult:
        self.calls.append(
            {
                "source_path": source_path,
                "output_dir": output_dir,
                "ladder": ladder,
                "timeout": timeout,
                "source_exists": source_path.exists(),
            }
        )
        output_dir.mkdir(parents=True, exist_ok=True)
        (output_dir / "master.m3u8").write_text("#EXTM3U\n")
        for i in range(len(ladder.rungs)):
            rung_dir = output_dir / str(i)
            rung_dir.mkdir(exist_ok=True)
            (rung_dir / "playlist.m3u8").write_text("#EXTM3U\n")
            for n in range(self.segments_per_rung):
                (rung_dir / f"segment{n}.ts").write_bytes(b"\x47" * 188)

        success = self.return_code == 0 and not self.timed_out
        return TranscodeResult(
            success=success,
            return_code=None if self.timed_out else self.return_code,
            diagnostics=self.diagnostics,
            timed_out=self.timed_out,
        )


@pytest.fixture
def blob_storage() -> InMemoryBlobStorage:
    storage = InMemoryBlobStorage()
    storage.objects[("in-bucket", "videos/abc.mp4")] = b"source-bytes" * 100
    return storage


@pytest.fixture
def document_db() -> InMemoryDocumentDB:
    db = InMemoryDocumentDB()
    db.seed("videos", "abc", title="Sample", description="A video", url=None)
    return db


@pytest.fixture
def transcoder() -> FakeHlsTranscoder:
    return FakeHlsTranscoder()


@pytest.fixture
def job(tmp_path) -> JobContext:
    return JobContext.create(
        "s3://in-bucket/videos/abc.mp4",
        "out-bucket",
        video_id="abc",
        scratch_dir=tmp_path,
    )


@pytest.fixture
def make_transcoder():
    """Build a fake transcoder with custom behaviour."""
    return FakeHlsTranscoder
