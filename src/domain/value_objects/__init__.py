"""Domain value objects."""

from src.domain.value_objects.rendition_ladder import (
    DEFAULT_LADDER,
    RenditionLadder,
    Rung,
)
from src.domain.value_objects.source_locator import SourceLocator

__all__ = [
    "DEFAULT_LADDER",
    "RenditionLadder",
    "Rung",
    "SourceLocator",
]
