"""Unit tests for the source fetcher."""

import asyncio

import pytest

from src.application.services.fetcher import SourceFetcher
from src.commons.infrastructure.blob.base import BlobAccessDeniedError
from src.domain.exceptions import FetchError


class TestSourceFetcher:
    """Tests for SourceFetcher."""

    async def test_fetch_writes_source(self, blob_storage, job):
        size = await SourceFetcher(blob_storage, chunk_size=64).fetch(job)

        expected = blob_storage.objects[("in-bucket", "videos/abc.mp4")]
        assert size == len(expected)
        assert job.local_source_path.read_bytes() == expected

    async def test_missing_object(self, blob_storage, job):
        del blob_storage.objects[("in-bucket", "videos/abc.mp4")]

        with pytest.raises(FetchError) as exc_info:
            await SourceFetcher(blob_storage).fetch(job)

        assert exc_info.value.video_id == "abc"
        assert "not found" in exc_info.value.reason
        assert not job.local_source_path.exists()

    async def test_interrupted_stream_removes_partial_file(self, blob_storage, job):
        blob_storage.download_error = ConnectionResetError("connection reset")

        with pytest.raises(FetchError) as exc_info:
            await SourceFetcher(blob_storage, chunk_size=16).fetch(job)

        assert isinstance(exc_info.value.__cause__, ConnectionResetError)
        assert not job.local_source_path.exists()

    async def test_access_denied(self, blob_storage, job):
        blob_storage.download_error = BlobAccessDeniedError("in-bucket", "videos/abc.mp4")

        with pytest.raises(FetchError, match="access denied"):
            await SourceFetcher(blob_storage).fetch(job)

    async def test_timeout(self, blob_storage, job):
        async def _slow(*args, **kwargs):
            await asyncio.sleep(10)

        blob_storage.download_to_file = _slow

        with pytest.raises(FetchError, match="timed out"):
            await SourceFetcher(blob_storage).fetch(job, timeout=0.01)

    async def test_transport_timeout_without_deadline(self, blob_storage, job):
        blob_storage.download_error = TimeoutError("read timed out")

        with pytest.raises(FetchError) as exc_info:
            await SourceFetcher(blob_storage, chunk_size=16).fetch(job)

        assert "download of s3://in-bucket/videos/abc.mp4 failed" in exc_info.value.reason
        assert "None" not in exc_info.value.reason
        assert not job.local_source_path.exists()
