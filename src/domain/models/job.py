"""Transcode job domain model."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from src.domain.value_objects.source_locator import SourceLocator


class PipelineState(str, Enum):
    """Lifecycle states of one pipeline run."""

    CONNECTING = "connecting"  # Opening the catalog connection
    FETCHING = "fetching"  # Streaming the source to scratch space
    TRANSCODING = "transcoding"  # Running the external transcoder
    PUBLISHING = "publishing"  # Uploading the rendition tree
    CATALOG_UPDATING = "catalog_updating"  # Writing the playback URL
    ABORTING = "aborting"  # A fatal stage error occurred
    CLEANUP = "cleanup"  # Removing scratch paths
    DONE = "done"  # Terminal


class JobContext(BaseModel):
    """Everything one job needs to know about its inputs and outputs.

    ``video_id`` is both the catalog primary key and the output key
    namespace, so storage keys and catalog lookups derive from one field.
    Local paths are namespaced by ``video_id`` to keep jobs for different
    videos apart on a shared scratch volume.
    """

    model_config = ConfigDict(frozen=True)

    video_id: str = Field(min_length=1)
    source: SourceLocator
    output_bucket: str = Field(min_length=1)
    local_source_path: Path
    local_output_dir: Path
    output_key_prefix: str
    master_playlist_name: str = "master.m3u8"

    @classmethod
    def create(
        cls,
        source_url: str,
        output_bucket: str,
        *,
        video_id: str | None = None,
        scratch_dir: Path | str = "/tmp",  # noqa: S108
        output_prefix_template: str = "processed/{video_id}/",
        master_playlist_name: str = "master.m3u8",
    ) -> JobContext:
        """Build a context from job inputs.

        When ``video_id`` is not given it is the stem of the source key
        (``videos/abc.mp4`` gives ``abc``).

        Raises:
            InvalidSourceLocatorError: If ``source_url`` cannot be parsed.
            ValueError: If a required field ends up empty.
        """
        source = SourceLocator.from_url(source_url)
        vid = video_id or source.stem
        scratch = Path(scratch_dir)
        prefix = output_prefix_template.format(video_id=vid)
        if not prefix.endswith("/"):
            prefix += "/"

        return cls(
            video_id=vid,
            source=source,
            output_bucket=output_bucket,
            local_source_path=scratch / f"{vid}{source.suffix}",
            local_output_dir=scratch / f"processed_{vid}",
            output_key_prefix=prefix,
            master_playlist_name=master_playlist_name,
        )

    @property
    def master_playlist_key(self) -> str:
        """Object key of the master playlist."""
        return f"{self.output_key_prefix}{self.master_playlist_name}"

    def output_key_for(self, relative_path: str) -> str:
        """Object key for a file at ``relative_path`` in the output tree."""
        return f"{self.output_key_prefix}{relative_path.lstrip('/')}"
