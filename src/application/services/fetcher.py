"""Source fetching stage."""

import asyncio

from minio.error import MinioException
from urllib3.exceptions import HTTPError as Urllib3HTTPError

from src.commons.infrastructure.blob.base import (
    BlobAccessDeniedError,
    BlobNotFoundError,
    BlobStorageBase,
)
from src.commons.telemetry import get_logger, timed
from src.domain.exceptions import FetchError
from src.domain.models.job import JobContext


class SourceFetcher:
    """Streams the job's source object to its local source path."""

    def __init__(
        self,
        blob_storage: BlobStorageBase,
        chunk_size: int = 1024 * 1024,
    ) -> None:
        """Initialize fetcher.

        Args:
            blob_storage: Storage to read the source from.
            chunk_size: Bytes per streamed read.
        """
        self._blob = blob_storage
        self._chunk_size = chunk_size
        self._logger = get_logger(__name__)

    @timed(label="fetch")
    async def fetch(self, job: JobContext, timeout: float | None = None) -> int:
        """Download the source object.

        Succeeds only after every byte is written and the file is closed.
        A partial file is removed on failure.

        Args:
            job: Job whose source to fetch.
            timeout: Seconds before the download is abandoned.

        Returns:
            Number of bytes written.

        Raises:
            FetchError: If the object is missing, unreadable or the stream
                is interrupted or times out.
        """
        source = job.source
        target = job.local_source_path

        self._logger.info(
            "Fetching source",
            extra={"source": source.to_url(), "path": str(target)},
        )

        try:
            size = await asyncio.wait_for(
                self._blob.download_to_file(
                    source.bucket,
                    source.key,
                    target,
                    chunk_size=self._chunk_size,
                ),
                timeout=timeout,
            )
        except TimeoutError as e:
            self._discard_partial(job)
            # socket timeouts are TimeoutError too; only a set deadline is ours
            if timeout is None:
                reason = f"download of {source} failed: {e}"
            else:
                reason = f"timed out after {timeout}s"
            raise FetchError(job.video_id, reason) from e
        except BlobNotFoundError as e:
            self._discard_partial(job)
            raise FetchError(job.video_id, f"source object not found: {source}") from e
        except BlobAccessDeniedError as e:
            self._discard_partial(job)
            raise FetchError(job.video_id, f"access denied to {source}") from e
        except (MinioException, Urllib3HTTPError, OSError) as e:
            self._discard_partial(job)
            raise FetchError(job.video_id, f"download of {source} failed: {e}") from e

        self._logger.info(
            "Source fetched",
            extra={"size_bytes": size, "path": str(target)},
        )
        return size

    def _discard_partial(self, job: JobContext) -> None:
        try:
            job.local_source_path.unlink(missing_ok=True)
        except OSError as e:
            self._logger.warning(
                f"Could not remove partial download: {e}",
                extra={"path": str(job.local_source_path)},
            )
