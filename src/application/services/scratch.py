"""Local scratch space for one transcode job."""

import shutil
from pathlib import Path

from src.commons.telemetry import get_logger
from src.domain.exceptions import CleanupError
from src.domain.models.job import JobContext


class LocalScratchManager:
    """Owns the job's local source file and output directory.

    Cleanup is idempotent and never raises: removal failures are logged
    as :class:`CleanupError` and returned so the caller can report them.
    """

    def __init__(self, job: JobContext) -> None:
        """Initialize scratch manager.

        Args:
            job: Context whose local paths this manager owns.
        """
        self._job = job
        self._logger = get_logger(__name__)

    @property
    def source_path(self) -> Path:
        """Where the fetched source is written."""
        return self._job.local_source_path

    @property
    def output_dir(self) -> Path:
        """Where the rendition tree is written."""
        return self._job.local_output_dir

    def prepare(self) -> None:
        """Create the scratch root and drop leftovers from an earlier run.

        A stale output tree would otherwise be published alongside fresh
        output, so it is removed before the transcoder runs.
        """
        self.source_path.parent.mkdir(parents=True, exist_ok=True)
        self.output_dir.parent.mkdir(parents=True, exist_ok=True)
        if self.output_dir.exists():
            self._logger.warning(
                "Removing stale output directory",
                extra={"path": str(self.output_dir)},
            )
            shutil.rmtree(self.output_dir)

    def cleanup(self) -> list[CleanupError]:
        """Delete the source file and the output tree if they exist.

        Returns:
            Errors for paths that could not be removed (empty on success).
        """
        errors: list[CleanupError] = []

        try:
            self.source_path.unlink(missing_ok=True)
        except OSError as e:
            errors.append(self._cleanup_error(self.source_path, e))

        try:
            if self.output_dir.is_dir():
                shutil.rmtree(self.output_dir)
            elif self.output_dir.exists():
                self.output_dir.unlink()
        except OSError as e:
            errors.append(self._cleanup_error(self.output_dir, e))

        if not errors:
            self._logger.debug(
                "Scratch space removed",
                extra={
                    "source_path": str(self.source_path),
                    "output_dir": str(self.output_dir),
                },
            )
        return errors

    def _cleanup_error(self, path: Path, error: OSError) -> CleanupError:
        cleanup_error = CleanupError(self._job.video_id, str(error), str(path))
        self._logger.warning(str(cleanup_error), extra={"path": str(path)})
        return cleanup_error
