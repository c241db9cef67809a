"""Application layer - use cases and orchestration.

This layer contains:
- Services: pipeline stages and the orchestrator that sequences them
- DTOs: job outcome returned to the worker entry point
"""

from src.application.dtos import TranscodeJobResult
from src.application.services import (
    CatalogUpdater,
    LocalScratchManager,
    PipelineOrchestrator,
    Publisher,
    RenditionBuilder,
    SourceFetcher,
)

__all__ = [
    # DTOs
    "TranscodeJobResult",
    # Services
    "CatalogUpdater",
    "LocalScratchManager",
    "PipelineOrchestrator",
    "Publisher",
    "RenditionBuilder",
    "SourceFetcher",
]
