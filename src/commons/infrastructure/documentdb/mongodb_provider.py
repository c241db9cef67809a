"""MongoDB implementation of document database."""

from typing import Any

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ReturnDocument

from src.commons.infrastructure.documentdb.base import DocumentDBBase
from src.commons.telemetry import get_logger


def _id_candidates(document_id: str) -> list[Any]:
    """IDs to try for a lookup: the raw string, then its ObjectId form."""
    candidates: list[Any] = [document_id]
    if ObjectId.is_valid(document_id):
        candidates.append(ObjectId(document_id))
    return candidates


def _restore_id(doc: dict[str, Any]) -> dict[str, Any]:
    """Expose MongoDB's '_id' as 'id' for domain model compatibility."""
    doc = dict(doc)
    doc["id"] = str(doc.pop("_id"))
    return doc


class MongoDBDocumentDB(DocumentDBBase):
    """MongoDB implementation of document database.

    Uses Motor for async operations. Records written by other services may
    use either string or ObjectId primary keys, so lookups try both.
    """

    def __init__(
        self,
        connection_string: str,
        database_name: str,
        server_selection_timeout_ms: int = 10000,
    ) -> None:
        """Initialize MongoDB client.

        Motor connects lazily; call :meth:`connect` to verify reachability.

        Args:
            connection_string: MongoDB connection URI. A database named in the
                URI path takes precedence over ``database_name``.
            database_name: Fallback database name.
            server_selection_timeout_ms: How long to wait for a server.
        """
        self._client: AsyncIOMotorClient[dict[str, Any]] = AsyncIOMotorClient(
            connection_string,
            serverSelectionTimeoutMS=server_selection_timeout_ms,
        )
        self._db: AsyncIOMotorDatabase[dict[str, Any]] = (
            self._client.get_default_database(default=database_name)
        )
        self._closed = False
        self._logger = get_logger(__name__)

    async def connect(self) -> None:
        """Ping the server so connection problems surface immediately."""
        await self._client.admin.command("ping")
        self._logger.info(
            "MongoDB connected", extra={"database": self._db.name}
        )

    async def find_by_id_and_update(
        self,
        collection: str,
        document_id: str,
        updates: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Apply ``$set`` to the matching document and return the new version."""
        update_doc = updates.copy()
        update_doc.pop("id", None)
        update_doc.pop("_id", None)

        for candidate in _id_candidates(document_id):
            doc = await self._db[collection].find_one_and_update(
                {"_id": candidate},
                {"$set": update_doc},
                return_document=ReturnDocument.AFTER,
            )
            if doc is not None:
                return _restore_id(doc)
        return None

    async def close(self) -> None:
        """Close the client."""
        if self._closed:
            return
        self._client.close()
        self._closed = True
        self._logger.info("MongoDB connection closed")
