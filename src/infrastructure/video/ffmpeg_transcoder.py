"""FFmpeg implementation of HLS rendition transcoding."""

import asyncio
import time
from pathlib import Path

from src.commons.telemetry import get_logger
from src.domain.value_objects.rendition_ladder import RenditionLadder
from src.infrastructure.video.base import TranscodeResult, TranscoderBase


class FFmpegHlsTranscoder(TranscoderBase):
    """FFmpeg-based multi-bitrate HLS transcoder.

    One ffmpeg process decodes the source once, splits the video into one
    scaled branch per rung and re-encodes audio track 0 separately for every
    rung, so each variant stream carries its own audio rendition.

    Requires ffmpeg to be installed and available in PATH.
    """

    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        video_codec: str = "libx264",
        audio_codec: str = "aac",
        master_playlist_name: str = "master.m3u8",
        variant_playlist_name: str = "playlist.m3u8",
        segment_filename: str = "segment%d.ts",
    ) -> None:
        """Initialize FFmpeg transcoder.

        Args:
            ffmpeg_path: Path to ffmpeg executable.
            video_codec: Encoder for video rungs.
            audio_codec: Encoder for audio renditions.
            master_playlist_name: File name of the master playlist.
            variant_playlist_name: File name of each variant playlist.
            segment_filename: Segment file pattern inside each variant directory.
        """
        self._ffmpeg = ffmpeg_path
        self._video_codec = video_codec
        self._audio_codec = audio_codec
        self._master_playlist_name = master_playlist_name
        self._variant_playlist_name = variant_playlist_name
        self._segment_filename = segment_filename
        self._logger = get_logger(__name__)

    def build_command(
        self,
        source_path: Path,
        output_dir: Path,
        ladder: RenditionLadder,
    ) -> list[str]:
        """Build the ffmpeg argument list for ``ladder``."""
        count = len(ladder.rungs)

        branches = "".join(f"[v{i}]" for i in range(count))
        filters = [f"[0:v]split={count}{branches}"]
        filters.extend(
            f"[v{i}]scale=-2:{rung.height}[v{i}out]"
            for i, rung in enumerate(ladder.rungs)
        )

        cmd = [
            self._ffmpeg,
            "-hide_banner",
            "-nostdin",
            "-y",
            "-i",
            str(source_path),
            "-filter_complex",
            "; ".join(filters),
        ]

        for i, rung in enumerate(ladder.rungs):
            cmd.extend(
                [
                    "-map",
                    f"[v{i}out]",
                    f"-c:v:{i}",
                    self._video_codec,
                    f"-b:v:{i}",
                    rung.video_bitrate,
                    "-map",
                    "0:a:0",
                    f"-c:a:{i}",
                    self._audio_codec,
                    f"-b:a:{i}",
                    rung.audio_bitrate,
                ]
            )

        var_stream_map = " ".join(f"v:{i},a:{i}" for i in range(count))
        cmd.extend(
            [
                "-var_stream_map",
                var_stream_map,
                "-master_pl_name",
                self._master_playlist_name,
                "-f",
                "hls",
                "-hls_time",
                str(ladder.segment_seconds),
                "-hls_list_size",
                str(ladder.playlist_size),
                "-hls_segment_filename",
                str(output_dir / "%v" / self._segment_filename),
                str(output_dir / "%v" / self._variant_playlist_name),
            ]
        )
        return cmd

    async def transcode(
        self,
        source_path: Path,
        output_dir: Path,
        ladder: RenditionLadder,
        timeout: float | None = None,
    ) -> TranscodeResult:
        """Run ffmpeg once and wait for it to exit."""
        output_dir.mkdir(parents=True, exist_ok=True)
        cmd = self.build_command(source_path, output_dir, ladder)

        self._logger.debug(
            "Starting ffmpeg",
            extra={"command": " ".join(cmd), "timeout_seconds": timeout},
        )

        start = time.perf_counter()
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            return TranscodeResult(
                success=False,
                return_code=None,
                diagnostics=f"Could not start {self._ffmpeg}: {e}",
            )

        try:
            _, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
        except TimeoutError:
            await self._kill(process)
            return TranscodeResult(
                success=False,
                return_code=process.returncode,
                diagnostics=f"ffmpeg timed out after {timeout}s",
                timed_out=True,
                duration_seconds=time.perf_counter() - start,
            )
        except asyncio.CancelledError:
            await self._kill(process)
            raise

        return_code = process.returncode
        return TranscodeResult(
            success=return_code == 0,
            return_code=return_code,
            diagnostics=stderr.decode("utf-8", errors="replace") if stderr else "",
            duration_seconds=time.perf_counter() - start,
        )

    async def _kill(self, process: asyncio.subprocess.Process) -> None:
        """Kill a still-running ffmpeg process and reap it."""
        if process.returncode is not None:
            return
        try:
            process.kill()
        except ProcessLookupError:
            return
        await process.wait()
        self._logger.warning("ffmpeg process killed", extra={"pid": process.pid})
