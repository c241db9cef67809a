"""Unit tests for the rendition publisher."""

import asyncio

import pytest

from src.application.services.publisher import (
    PLAYLIST_CONTENT_TYPE,
    SEGMENT_CONTENT_TYPE,
    Publisher,
    content_type_for,
    iter_output_files,
)
from src.commons.infrastructure.blob.base import BlobAccessDeniedError
from src.domain.exceptions import PublishError
from src.domain.value_objects.rendition_ladder import DEFAULT_LADDER


async def _build_tree(transcoder, job):
    await transcoder.transcode(
        job.local_source_path,
        job.local_output_dir,
        DEFAULT_LADDER,
    )


class TestContentTypeFor:
    """Tests for extension-based content types."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("master.m3u8", PLAYLIST_CONTENT_TYPE),
            ("0/playlist.m3u8", PLAYLIST_CONTENT_TYPE),
            ("INDEX.M3U8", SEGMENT_CONTENT_TYPE),
            ("0/segment0.ts", SEGMENT_CONTENT_TYPE),
            ("thumbnail.jpg", SEGMENT_CONTENT_TYPE),
            ("no_extension", SEGMENT_CONTENT_TYPE),
        ],
    )
    def test_mapping(self, path, expected):
        assert content_type_for(path) == expected

    def test_values(self):
        assert PLAYLIST_CONTENT_TYPE == "application/x-mpegURL"
        assert SEGMENT_CONTENT_TYPE == "video/MP2T"


class TestIterOutputFiles:
    """Tests for the output tree walk."""

    def test_yields_files_depth_first(self, tmp_path):
        (tmp_path / "1").mkdir()
        (tmp_path / "0" / "nested").mkdir(parents=True)
        (tmp_path / "master.m3u8").write_text("m")
        (tmp_path / "0" / "playlist.m3u8").write_text("p")
        (tmp_path / "0" / "nested" / "deep.ts").write_text("d")
        (tmp_path / "1" / "segment0.ts").write_text("s")

        relatives = [relative for _, relative in iter_output_files(tmp_path)]

        assert relatives == [
            "0/nested/deep.ts",
            "0/playlist.m3u8",
            "1/segment0.ts",
            "master.m3u8",
        ]

    def test_directories_are_never_yielded(self, tmp_path):
        (tmp_path / "empty").mkdir()
        assert list(iter_output_files(tmp_path)) == []

    def test_is_lazy(self, tmp_path):
        walker = iter_output_files(tmp_path / "missing")
        # Nothing is touched until the first item is requested
        with pytest.raises(FileNotFoundError):
            next(walker)


class TestPublisher:
    """Tests for Publisher."""

    async def test_publishes_every_file(self, blob_storage, transcoder, job):
        await _build_tree(transcoder, job)

        keys = await Publisher(blob_storage).publish(job)

        assert len(keys) == 1 + 4 * 3
        assert "processed/abc/master.m3u8" in keys
        for rung in range(4):
            assert f"processed/abc/{rung}/playlist.m3u8" in keys
            assert f"processed/abc/{rung}/segment0.ts" in keys
        assert blob_storage.keys("out-bucket") == sorted(keys)

    async def test_uploads_in_walk_order(self, blob_storage, transcoder, job):
        await _build_tree(transcoder, job)

        keys = await Publisher(blob_storage).publish(job)

        assert blob_storage.upload_order == keys
        assert keys[0] == "processed/abc/0/playlist.m3u8"
        assert keys[-1] == "processed/abc/master.m3u8"

    async def test_content_types(self, blob_storage, transcoder, job):
        await _build_tree(transcoder, job)

        await Publisher(blob_storage).publish(job)

        types = blob_storage.content_types
        assert types[("out-bucket", "processed/abc/master.m3u8")] == "application/x-mpegURL"
        assert types[("out-bucket", "processed/abc/2/segment1.ts")] == "video/MP2T"

    async def test_failure_aborts_remaining_uploads(self, blob_storage, transcoder, job):
        await _build_tree(transcoder, job)
        blob_storage.fail_upload_on = "processed/abc/1/playlist.m3u8"

        with pytest.raises(PublishError) as exc_info:
            await Publisher(blob_storage).publish(job)

        assert exc_info.value.key == "processed/abc/1/playlist.m3u8"
        # Objects uploaded before the failure stay in place
        assert blob_storage.upload_order == [
            "processed/abc/0/playlist.m3u8",
            "processed/abc/0/segment0.ts",
            "processed/abc/0/segment1.ts",
        ]

    async def test_access_denied(self, blob_storage, transcoder, job):
        await _build_tree(transcoder, job)
        blob_storage.fail_upload_on = "processed/abc/0/playlist.m3u8"
        blob_storage.upload_error = BlobAccessDeniedError("out-bucket", "k")

        with pytest.raises(PublishError, match="access denied"):
            await Publisher(blob_storage).publish(job)

    async def test_missing_output_dir(self, blob_storage, job):
        with pytest.raises(PublishError):
            await Publisher(blob_storage).publish(job)

    async def test_timeout(self, blob_storage, transcoder, job):
        await _build_tree(transcoder, job)

        async def _slow(*args, **kwargs):
            await asyncio.sleep(10)

        blob_storage.upload_file = _slow

        with pytest.raises(PublishError, match="timed out") as exc_info:
            await Publisher(blob_storage).publish(job, timeout=0.01)

        assert exc_info.value.key == "processed/abc/0/playlist.m3u8"

    async def test_transport_timeout_without_deadline(self, blob_storage, transcoder, job):
        await _build_tree(transcoder, job)
        blob_storage.fail_upload_on = "processed/abc/0/segment0.ts"
        blob_storage.upload_error = TimeoutError("write timed out")

        with pytest.raises(PublishError) as exc_info:
            await Publisher(blob_storage).publish(job)

        assert exc_info.value.reason.startswith("upload of processed/abc/0/segment0.ts failed")
        assert "None" not in exc_info.value.reason
