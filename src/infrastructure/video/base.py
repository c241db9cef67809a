"""Abstract base class for the external transcoding capability."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from src.domain.value_objects.rendition_ladder import RenditionLadder


@dataclass
class TranscodeResult:
    """Outcome of one transcoder invocation."""

    success: bool
    return_code: int | None
    diagnostics: str = ""
    timed_out: bool = False
    duration_seconds: float = 0.0

    def diagnostics_tail(self, max_lines: int = 20) -> str:
        """Last lines of the diagnostic output, where encoders report errors."""
        lines = self.diagnostics.strip().splitlines()
        return "\n".join(lines[-max_lines:])


class TranscoderBase(ABC):
    """Abstract base class for HLS rendition transcoding.

    Implementations should handle:
    - FFmpeg (subprocess)
    """

    @abstractmethod
    async def transcode(
        self,
        source_path: Path,
        output_dir: Path,
        ladder: RenditionLadder,
        timeout: float | None = None,
    ) -> TranscodeResult:
        """Encode ``source_path`` into an HLS rendition tree under ``output_dir``.

        Produces one master playlist plus one sub-directory per rung, each
        with its variant playlist and media segments. Blocks (from the
        caller's point of view) until the tool exits.

        Args:
            source_path: Local source video.
            output_dir: Directory to write the rendition tree into.
            ladder: Rungs and packaging options.
            timeout: Seconds before the tool is killed; None for no limit.

        Returns:
            Success, or a failure carrying the tool's diagnostic output.
        """
