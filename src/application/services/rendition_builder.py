"""Rendition building stage."""

from src.commons.telemetry import get_logger, timed
from src.domain.exceptions import TranscodeError
from src.domain.models.job import JobContext
from src.domain.value_objects.rendition_ladder import DEFAULT_LADDER, RenditionLadder
from src.infrastructure.video.base import TranscodeResult, TranscoderBase


class RenditionBuilder:
    """Turns the fetched source into an HLS rendition tree.

    Any non-zero exit of the transcoder is a total failure, whatever it
    managed to write before exiting.
    """

    def __init__(
        self,
        transcoder: TranscoderBase,
        ladder: RenditionLadder = DEFAULT_LADDER,
    ) -> None:
        self._transcoder = transcoder
        self._ladder = ladder
        self._logger = get_logger(__name__)

    @property
    def ladder(self) -> RenditionLadder:
        return self._ladder

    @timed(label="transcode")
    async def build(
        self,
        job: JobContext,
        timeout: float | None = None,
    ) -> TranscodeResult:
        """Run the transcoder once over the job's source.

        Raises:
            TranscodeError: If the transcoder fails, times out or cannot start.
        """
        self._logger.info(
            "Transcoding source",
            extra={
                "rungs": [rung.name for rung in self._ladder.rungs],
                "output_dir": str(job.local_output_dir),
            },
        )

        result = await self._transcoder.transcode(
            job.local_source_path,
            job.local_output_dir,
            self._ladder,
            timeout=timeout,
        )

        if not result.success:
            if result.timed_out:
                reason = f"timed out after {timeout}s"
            elif result.return_code is None:
                reason = "transcoder could not be started"
            else:
                reason = f"transcoder exited with code {result.return_code}"
            raise TranscodeError(
                job.video_id,
                reason,
                diagnostics=result.diagnostics_tail(),
                return_code=result.return_code,
            )

        self._logger.info(
            "Transcoding complete",
            extra={"duration_seconds": round(result.duration_seconds, 2)},
        )
        return result
