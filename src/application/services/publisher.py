"""Publishing stage: upload the rendition tree to object storage."""

import asyncio
import os
from collections.abc import Iterator
from pathlib import Path

from minio.error import MinioException
from urllib3.exceptions import HTTPError as Urllib3HTTPError

from src.commons.infrastructure.blob.base import (
    BlobAccessDeniedError,
    BlobNotFoundError,
    BlobStorageBase,
)
from src.commons.telemetry import get_logger, timed
from src.domain.exceptions import PublishError
from src.domain.models.job import JobContext

PLAYLIST_CONTENT_TYPE = "application/x-mpegURL"
SEGMENT_CONTENT_TYPE = "video/MP2T"


def content_type_for(path: str | Path) -> str:
    """Content type of a rendition file, by extension.

    Playlists are ``application/x-mpegURL``; everything else is treated
    as an MPEG-TS segment.
    """
    if str(path).endswith(".m3u8"):
        return PLAYLIST_CONTENT_TYPE
    return SEGMENT_CONTENT_TYPE


def iter_output_files(root: Path) -> Iterator[tuple[Path, str]]:
    """Lazily walk ``root`` depth-first, yielding regular files only.

    Entries are visited in name order so uploads are deterministic.

    Yields:
        ``(absolute_path, relative_posix_path)`` per file.
    """
    with os.scandir(root) as scanner:
        entries = sorted(scanner, key=lambda entry: entry.name)

    for entry in entries:
        path = Path(entry.path)
        if entry.is_dir(follow_symlinks=False):
            for child, relative in iter_output_files(path):
                yield child, f"{entry.name}/{relative}"
        elif entry.is_file(follow_symlinks=False):
            yield path, entry.name


class Publisher:
    """Uploads every file of the job's output tree under its key prefix.

    Uploads run one at a time in walk order. The first failure aborts the
    remaining uploads; objects already written are left in place.
    """

    def __init__(self, blob_storage: BlobStorageBase) -> None:
        """Initialize publisher.

        Args:
            blob_storage: Storage to upload into.
        """
        self._blob = blob_storage
        self._logger = get_logger(__name__)

    @timed(label="publish")
    async def publish(
        self,
        job: JobContext,
        timeout: float | None = None,
    ) -> list[str]:
        """Upload the rendition tree.

        Args:
            job: Job whose output to publish.
            timeout: Seconds allowed for the whole upload loop.

        Returns:
            Object keys written, in upload order.

        Raises:
            PublishError: On the first failed upload, or when the deadline
                expires.
        """
        published: list[str] = []
        current: dict[str, str | None] = {"key": None}

        async def _upload_all() -> None:
            for local_path, relative in iter_output_files(job.local_output_dir):
                key = job.output_key_for(relative)
                current["key"] = key
                content_type = content_type_for(local_path)
                self._logger.debug(
                    "Uploading rendition file",
                    extra={"key": key, "content_type": content_type},
                )
                await self._blob.upload_file(
                    job.output_bucket,
                    key,
                    local_path,
                    content_type=content_type,
                )
                published.append(key)

        self._logger.info(
            "Publishing renditions",
            extra={"bucket": job.output_bucket, "prefix": job.output_key_prefix},
        )

        try:
            await asyncio.wait_for(_upload_all(), timeout=timeout)
        except TimeoutError as e:
            # socket timeouts are TimeoutError too; only a set deadline is ours
            if timeout is None:
                reason = f"upload of {current['key']} failed: {e}"
            else:
                reason = f"timed out after {timeout}s ({len(published)} objects uploaded)"
            raise PublishError(job.video_id, reason, key=current["key"]) from e
        except BlobNotFoundError as e:
            raise PublishError(
                job.video_id,
                f"bucket {job.output_bucket} does not exist",
                key=current["key"],
            ) from e
        except BlobAccessDeniedError as e:
            raise PublishError(
                job.video_id,
                f"access denied writing {current['key']}",
                key=current["key"],
            ) from e
        except (MinioException, Urllib3HTTPError, OSError) as e:
            raise PublishError(
                job.video_id,
                f"upload of {current['key']} failed: {e}",
                key=current["key"],
            ) from e

        self._logger.info(
            "Renditions published",
            extra={"objects": len(published), "prefix": job.output_key_prefix},
        )
        return published
