"""Rendition ladder value objects."""

from pydantic import BaseModel, ConfigDict, Field


class Rung(BaseModel):
    """One entry of the ladder: output height plus video and audio bitrates."""

    model_config = ConfigDict(frozen=True)

    height: int = Field(ge=144, le=4320, description="Output height in pixels")
    video_bitrate_kbps: int = Field(gt=0, description="Target video bitrate")
    audio_bitrate_kbps: int = Field(gt=0, description="Target audio bitrate")

    @property
    def name(self) -> str:
        """Conventional label, e.g. '720p'."""
        return f"{self.height}p"

    @property
    def video_bitrate(self) -> str:
        """Video bitrate in encoder notation, e.g. '2800k'."""
        return f"{self.video_bitrate_kbps}k"

    @property
    def audio_bitrate(self) -> str:
        """Audio bitrate in encoder notation, e.g. '128k'."""
        return f"{self.audio_bitrate_kbps}k"


class RenditionLadder(BaseModel):
    """The set of rungs encoded from one source plus HLS packaging options.

    Rungs are numbered by position; rung ``i`` is written to sub-directory
    ``i`` of the output tree.
    """

    model_config = ConfigDict(frozen=True)

    rungs: tuple[Rung, ...] = Field(min_length=1)
    segment_seconds: int = Field(
        default=6,
        ge=1,
        le=60,
        description="Target media segment duration",
    )
    playlist_size: int = Field(
        default=0,
        ge=0,
        description="Maximum playlist entries; 0 keeps every segment",
    )

    def __len__(self) -> int:
        return len(self.rungs)


DEFAULT_RUNGS: tuple[Rung, ...] = (
    Rung(height=360, video_bitrate_kbps=800, audio_bitrate_kbps=96),
    Rung(height=480, video_bitrate_kbps=1400, audio_bitrate_kbps=128),
    Rung(height=720, video_bitrate_kbps=2800, audio_bitrate_kbps=128),
    Rung(height=1080, video_bitrate_kbps=5000, audio_bitrate_kbps=192),
)

DEFAULT_LADDER = RenditionLadder(rungs=DEFAULT_RUNGS)
