"""Application services for the rendition pipeline."""

from src.application.services.catalog import CatalogUpdater
from src.application.services.fetcher import SourceFetcher
from src.application.services.pipeline import PipelineOrchestrator
from src.application.services.publisher import (
    PLAYLIST_CONTENT_TYPE,
    SEGMENT_CONTENT_TYPE,
    Publisher,
    content_type_for,
    iter_output_files,
)
from src.application.services.rendition_builder import RenditionBuilder
from src.application.services.scratch import LocalScratchManager

__all__ = [
    "CatalogUpdater",
    "LocalScratchManager",
    "PLAYLIST_CONTENT_TYPE",
    "PipelineOrchestrator",
    "Publisher",
    "RenditionBuilder",
    "SEGMENT_CONTENT_TYPE",
    "SourceFetcher",
    "content_type_for",
    "iter_output_files",
]
