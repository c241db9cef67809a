"""Domain layer - business models and logic."""

from src.domain.exceptions import (
    CatalogConnectionError,
    CatalogUpdateError,
    CleanupError,
    DomainException,
    FetchError,
    InvalidSourceLocatorError,
    PipelineError,
    PublishError,
    TranscodeError,
)
from src.domain.models import CatalogVideo, JobContext, PipelineState
from src.domain.value_objects import (
    DEFAULT_LADDER,
    RenditionLadder,
    Rung,
    SourceLocator,
)

__all__ = [
    # Exceptions
    "DomainException",
    "InvalidSourceLocatorError",
    "PipelineError",
    "CatalogConnectionError",
    "FetchError",
    "TranscodeError",
    "PublishError",
    "CatalogUpdateError",
    "CleanupError",
    # Models
    "CatalogVideo",
    "JobContext",
    "PipelineState",
    # Value Objects
    "SourceLocator",
    "Rung",
    "RenditionLadder",
    "DEFAULT_LADDER",
]
