"""Blob storage abstractions and implementations."""

from src.commons.infrastructure.blob.base import (
    BlobAccessDeniedError,
    BlobMetadata,
    BlobNotFoundError,
    BlobStorageBase,
)
from src.commons.infrastructure.blob.minio_provider import MinioBlobStorage

__all__ = [
    # Base classes
    "BlobMetadata",
    "BlobStorageBase",
    # Implementations
    "MinioBlobStorage",
    # Exceptions
    "BlobNotFoundError",
    "BlobAccessDeniedError",
]
