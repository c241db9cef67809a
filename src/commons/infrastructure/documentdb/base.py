"""Abstract base class for document database operations."""

from abc import ABC, abstractmethod
from typing import Any


class DocumentDBBase(ABC):
    """Abstract base class for document database operations.

    Implementations should handle:
    - MongoDB
    """

    @abstractmethod
    async def connect(self) -> None:
        """Open the connection and verify the server is reachable.

        Raises:
            Exception: Provider error if the server cannot be reached.
        """

    @abstractmethod
    async def find_by_id_and_update(
        self,
        collection: str,
        document_id: str,
        updates: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Set fields on a document and return it as updated.

        Only the given fields are written; all other fields keep their values.

        Args:
            collection: Collection name.
            document_id: Document ID to update.
            updates: Fields to set.

        Returns:
            The updated document, or None if no document has that ID.
        """

    @abstractmethod
    async def close(self) -> None:
        """Close the connection. Safe to call more than once."""
