"""Domain models."""

from src.domain.models.job import JobContext, PipelineState
from src.domain.models.video import CatalogVideo

__all__ = [
    "CatalogVideo",
    "JobContext",
    "PipelineState",
]
