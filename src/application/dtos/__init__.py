"""Data transfer objects for the application layer."""

from src.application.dtos.pipeline import TranscodeJobResult

__all__ = [
    "TranscodeJobResult",
]
