"""Catalog update stage."""

from pydantic import ValidationError
from pymongo.errors import PyMongoError

from src.commons.infrastructure.documentdb.base import DocumentDBBase
from src.commons.telemetry import get_logger, timed
from src.domain.exceptions import CatalogUpdateError
from src.domain.models.job import JobContext
from src.domain.models.video import CatalogVideo


class CatalogUpdater:
    """Records the playback URL on the job's catalog entry."""

    def __init__(
        self,
        document_db: DocumentDBBase,
        collection: str = "videos",
        fail_on_missing: bool = False,
    ) -> None:
        """Initialize catalog updater.

        Args:
            document_db: Catalog store.
            collection: Collection holding video records.
            fail_on_missing: Raise instead of warning when no record matches.
        """
        self._doc_db = document_db
        self._collection = collection
        self._fail_on_missing = fail_on_missing
        self._logger = get_logger(__name__)

    @timed(label="catalog_update")
    async def update(self, job: JobContext, playlist_url: str) -> bool:
        """Set ``url`` on the record whose primary key is the job's video ID.

        Args:
            job: Job whose record to update.
            playlist_url: Public URL of the master playlist.

        Returns:
            True if a record was updated, False if none matched.

        Raises:
            CatalogUpdateError: If the write fails, or if no record matches
                and ``fail_on_missing`` is set.
        """
        try:
            document = await self._doc_db.find_by_id_and_update(
                self._collection,
                job.video_id,
                CatalogVideo.playback_url_update(playlist_url),
            )
        except PyMongoError as e:
            raise CatalogUpdateError(job.video_id, f"update failed: {e}") from e

        if document is None:
            if self._fail_on_missing:
                raise CatalogUpdateError(job.video_id, "no catalog record found")
            self._logger.warning(
                "No catalog record found for video",
                extra={"collection": self._collection},
            )
            return False

        try:
            video = CatalogVideo.from_document(document)
        except ValidationError as e:
            self._logger.warning(
                f"Updated catalog record does not match the video schema: {e}",
                extra={"collection": self._collection},
            )
        else:
            self._logger.info(
                "Catalog record updated",
                extra={"title": video.title, "url": video.url},
            )
        return True
