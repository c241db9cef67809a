"""Infrastructure layer - external service implementations."""

from src.infrastructure.factory import (
    InfrastructureFactory,
    build_mongo_connection_string,
)
from src.infrastructure.video import (
    FFmpegHlsTranscoder,
    TranscodeResult,
    TranscoderBase,
)

__all__ = [
    # Factory
    "InfrastructureFactory",
    "build_mongo_connection_string",
    # Video
    "TranscoderBase",
    "TranscodeResult",
    "FFmpegHlsTranscoder",
]
