"""DTOs for pipeline runs."""

from datetime import datetime

from pydantic import BaseModel, Field

from src.domain.models.job import PipelineState


class TranscodeJobResult(BaseModel):
    """Outcome of one pipeline run."""

    video_id: str = Field(description="Video the job ran for")
    success: bool = Field(description="Whether every fatal stage succeeded")
    state: PipelineState = Field(description="Final state reached")
    states: list[PipelineState] = Field(
        default_factory=list,
        description="States visited, in order",
    )
    failed_stage: str | None = Field(
        default=None,
        description="Stage that failed the job",
    )
    error: str | None = Field(default=None, description="Failure message")
    published_objects: int = Field(default=0, ge=0, description="Objects uploaded")
    playlist_url: str | None = Field(
        default=None,
        description="Public URL of the master playlist",
    )
    catalog_updated: bool = Field(
        default=False,
        description="Whether a catalog record received the playback URL",
    )
    catalog_error: str | None = Field(
        default=None,
        description="Non-fatal catalog failure, if any",
    )
    cleanup_errors: list[str] = Field(
        default_factory=list,
        description="Scratch paths that could not be removed",
    )
    started_at: datetime = Field(description="When the run started")
    finished_at: datetime = Field(description="When the run finished")

    @property
    def duration_seconds(self) -> float:
        """Wall-clock duration of the run."""
        return (self.finished_at - self.started_at).total_seconds()
