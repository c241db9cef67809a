"""Unit tests for the local scratch manager."""

import shutil
from unittest.mock import patch

from src.application.services.scratch import LocalScratchManager
from src.domain.exceptions import CleanupError


class TestLocalScratchManager:
    """Tests for LocalScratchManager."""

    def test_prepare_creates_scratch_root(self, tmp_path, job):
        shutil.rmtree(tmp_path)
        LocalScratchManager(job).prepare()
        assert tmp_path.is_dir()

    def test_prepare_removes_stale_output(self, job):
        stale = job.local_output_dir / "0"
        stale.mkdir(parents=True)
        (stale / "segment0.ts").write_bytes(b"old")

        LocalScratchManager(job).prepare()

        assert not job.local_output_dir.exists()

    def test_cleanup_removes_source_and_output(self, job):
        job.local_source_path.write_bytes(b"video")
        (job.local_output_dir / "1").mkdir(parents=True)
        (job.local_output_dir / "1" / "playlist.m3u8").write_text("#EXTM3U")

        errors = LocalScratchManager(job).cleanup()

        assert errors == []
        assert not job.local_source_path.exists()
        assert not job.local_output_dir.exists()

    def test_cleanup_with_nothing_created(self, job):
        assert LocalScratchManager(job).cleanup() == []

    def test_cleanup_is_idempotent(self, job):
        job.local_source_path.write_bytes(b"video")
        scratch = LocalScratchManager(job)

        assert scratch.cleanup() == []
        assert scratch.cleanup() == []
        assert not job.local_source_path.exists()

    def test_cleanup_reports_errors_without_raising(self, job, caplog):
        job.local_source_path.write_bytes(b"video")
        job.local_output_dir.mkdir()

        with patch(
            "src.application.services.scratch.shutil.rmtree",
            side_effect=PermissionError("denied"),
        ):
            errors = LocalScratchManager(job).cleanup()

        assert len(errors) == 1
        assert isinstance(errors[0], CleanupError)
        assert errors[0].path == str(job.local_output_dir)
        # The source file is still removed when the output tree is not
        assert not job.local_source_path.exists()
        assert any(r.levelname == "WARNING" for r in caplog.records)
