"""Domain exceptions for the rendition pipeline."""

from __future__ import annotations


class DomainException(Exception):
    """Base exception for domain errors."""


class InvalidSourceLocatorError(DomainException):
    """Raised when a storage URL cannot be parsed into bucket and key."""

    def __init__(self, url: str, reason: str = "Invalid storage URL") -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Invalid source locator '{url}': {reason}")


class PipelineError(DomainException):
    """Base exception for failures of a single pipeline stage."""

    stage: str = "pipeline"

    def __init__(self, video_id: str, reason: str) -> None:
        self.video_id = video_id
        self.reason = reason
        super().__init__(f"{self.stage} failed for {video_id}: {reason}")


class CatalogConnectionError(PipelineError):
    """Raised when the catalog connection cannot be opened."""

    stage = "connecting"


class FetchError(PipelineError):
    """Raised when the source object cannot be streamed to local storage."""

    stage = "fetching"


class TranscodeError(PipelineError):
    """Raised when the external transcoder fails."""

    stage = "transcoding"

    def __init__(
        self,
        video_id: str,
        reason: str,
        diagnostics: str = "",
        return_code: int | None = None,
    ) -> None:
        self.diagnostics = diagnostics
        self.return_code = return_code
        super().__init__(video_id, reason)


class PublishError(PipelineError):
    """Raised when any rendition file fails to upload."""

    stage = "publishing"

    def __init__(self, video_id: str, reason: str, key: str | None = None) -> None:
        self.key = key
        super().__init__(video_id, reason)


class CatalogUpdateError(PipelineError):
    """Raised when the catalog record cannot be updated."""

    stage = "catalog_updating"


class CleanupError(PipelineError):
    """Raised when a local scratch path cannot be removed."""

    stage = "cleanup"

    def __init__(self, video_id: str, reason: str, path: str) -> None:
        self.path = path
        super().__init__(video_id, reason)
