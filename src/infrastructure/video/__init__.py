"""Video transcoding services."""

from src.infrastructure.video.base import TranscodeResult, TranscoderBase
from src.infrastructure.video.ffmpeg_transcoder import FFmpegHlsTranscoder

__all__ = [
    "TranscodeResult",
    "TranscoderBase",
    "FFmpegHlsTranscoder",
]
