"""Pipeline orchestrator: fetch, transcode, publish and record one video."""

import asyncio
from datetime import UTC, datetime

from pymongo.errors import PyMongoError

from src.application.dtos.pipeline import TranscodeJobResult
from src.application.services.catalog import CatalogUpdater
from src.application.services.fetcher import SourceFetcher
from src.application.services.publisher import Publisher
from src.application.services.rendition_builder import RenditionBuilder
from src.application.services.scratch import LocalScratchManager
from src.commons.infrastructure.blob.base import BlobStorageBase
from src.commons.infrastructure.documentdb.base import DocumentDBBase
from src.commons.settings.models import Settings
from src.commons.telemetry import LogContext, get_logger, set_job_id
from src.domain.exceptions import (
    CatalogConnectionError,
    CatalogUpdateError,
    FetchError,
    PipelineError,
    TranscodeError,
)
from src.domain.models.job import JobContext, PipelineState
from src.domain.value_objects.rendition_ladder import DEFAULT_LADDER, RenditionLadder
from src.infrastructure.video.base import TranscoderBase


class _Run:
    """Mutable bookkeeping for a single run."""

    def __init__(self, job: JobContext) -> None:
        self.job = job
        self.started_at = datetime.now(UTC)
        self.states: list[PipelineState] = []
        self.success = False
        self.failed_stage: str | None = None
        self.error: str | None = None
        self.published: list[str] = []
        self.playlist_url: str | None = None
        self.catalog_updated = False
        self.catalog_error: str | None = None
        self.cleanup_errors: list[str] = []

    @property
    def state(self) -> PipelineState | None:
        return self.states[-1] if self.states else None

    def fail(self, stage: str, error: str) -> None:
        self.success = False
        self.failed_stage = stage
        self.error = error

    def to_result(self) -> TranscodeJobResult:
        return TranscodeJobResult(
            video_id=self.job.video_id,
            success=self.success,
            state=self.state or PipelineState.DONE,
            states=list(self.states),
            failed_stage=self.failed_stage,
            error=self.error,
            published_objects=len(self.published),
            playlist_url=self.playlist_url,
            catalog_updated=self.catalog_updated,
            catalog_error=self.catalog_error,
            cleanup_errors=self.cleanup_errors,
            started_at=self.started_at,
            finished_at=datetime.now(UTC),
        )


class PipelineOrchestrator:
    """Runs one transcode job end to end.

    Stages run strictly in order:

        connecting -> fetching -> transcoding -> publishing
            -> catalog_updating -> cleanup -> done

    A fatal stage error moves the run to ``aborting`` and skips the
    remaining stages. Scratch cleanup runs on every exit path, including
    cancellation, and the catalog connection is closed after it.

    Catalog update failures are logged without failing the job unless
    ``pipeline.fail_on_catalog_error`` is set.
    """

    def __init__(
        self,
        blob_storage: BlobStorageBase,
        document_db: DocumentDBBase,
        transcoder: TranscoderBase,
        settings: Settings,
        ladder: RenditionLadder | None = None,
    ) -> None:
        """Initialize orchestrator.

        Args:
            blob_storage: Object storage for source and renditions.
            document_db: Catalog store.
            transcoder: External transcoding capability.
            settings: Application settings.
            ladder: Rendition ladder; the default four-rung ladder with the
                configured segment duration when omitted.
        """
        self._blob = blob_storage
        self._doc_db = document_db
        self._pipeline_settings = settings.pipeline
        self._logger = get_logger(__name__)

        if ladder is None:
            ladder = DEFAULT_LADDER.model_copy(
                update={"segment_seconds": settings.transcoder.segment_seconds}
            )

        self._fetcher = SourceFetcher(
            blob_storage,
            chunk_size=settings.blob_storage.chunk_size_bytes,
        )
        self._builder = RenditionBuilder(transcoder, ladder)
        self._publisher = Publisher(blob_storage)
        self._catalog = CatalogUpdater(
            document_db,
            collection=settings.document_db.collections.videos,
            fail_on_missing=settings.pipeline.fail_on_catalog_error,
        )

    async def run(self, job: JobContext) -> TranscodeJobResult:
        """Execute the pipeline for ``job``.

        Stage failures and unexpected errors are reported in the returned
        result rather than raised. Cancellation is re-raised after cleanup.

        Args:
            job: The job to run.

        Returns:
            Outcome of the run.
        """
        set_job_id()
        run = _Run(job)
        scratch = LocalScratchManager(job)

        with LogContext(video_id=job.video_id):
            self._logger.info(
                "Pipeline started",
                extra={
                    "source": job.source.to_url(),
                    "output_bucket": job.output_bucket,
                    "output_prefix": job.output_key_prefix,
                },
            )
            try:
                await self._run_stages(run, scratch)
                run.success = True
            except PipelineError as e:
                run.fail(e.stage, str(e))
                self._enter(run, PipelineState.ABORTING)
                self._log_stage_failure(e)
            except asyncio.CancelledError:
                run.fail(self._stage_name(run), "cancelled")
                self._enter(run, PipelineState.ABORTING)
                self._logger.warning("Pipeline cancelled")
                raise
            except Exception as e:
                run.fail(self._stage_name(run), f"unexpected error: {e}")
                self._enter(run, PipelineState.ABORTING)
                self._logger.exception(
                    "Pipeline failed with unexpected error",
                    extra={"stage": run.failed_stage, "error": str(e)},
                )
            finally:
                await self._teardown(run, scratch)

            self._enter(run, PipelineState.DONE)
            result = run.to_result()
            self._logger.info(
                "Pipeline finished",
                extra={
                    "success": result.success,
                    "failed_stage": result.failed_stage,
                    "published_objects": result.published_objects,
                    "catalog_updated": result.catalog_updated,
                    "duration_seconds": round(result.duration_seconds, 2),
                },
            )
            return result

    async def _run_stages(self, run: _Run, scratch: LocalScratchManager) -> None:
        job = run.job
        settings = self._pipeline_settings

        self._enter(run, PipelineState.CONNECTING)
        try:
            await self._doc_db.connect()
        except PyMongoError as e:
            raise CatalogConnectionError(job.video_id, str(e)) from e

        self._enter(run, PipelineState.FETCHING)
        try:
            scratch.prepare()
        except OSError as e:
            raise FetchError(job.video_id, f"could not prepare scratch space: {e}") from e
        await self._fetcher.fetch(job, timeout=settings.fetch_timeout_seconds)

        self._enter(run, PipelineState.TRANSCODING)
        await self._builder.build(job, timeout=settings.transcode_timeout_seconds)

        self._enter(run, PipelineState.PUBLISHING)
        run.published = await self._publisher.publish(
            job,
            timeout=settings.publish_timeout_seconds,
        )
        run.playlist_url = self._blob.public_url(
            job.output_bucket,
            job.master_playlist_key,
        )

        self._enter(run, PipelineState.CATALOG_UPDATING)
        try:
            run.catalog_updated = await self._catalog.update(job, run.playlist_url)
        except CatalogUpdateError as e:
            if settings.fail_on_catalog_error:
                raise
            run.catalog_error = str(e)
            self._logger.error(
                "Catalog update failed; renditions remain published",
                extra={"error": str(e), "playlist_url": run.playlist_url},
            )

    async def _teardown(self, run: _Run, scratch: LocalScratchManager) -> None:
        self._enter(run, PipelineState.CLEANUP)
        run.cleanup_errors = [str(e) for e in scratch.cleanup()]

        try:
            await self._doc_db.close()
        except PyMongoError as e:
            self._logger.warning(f"Failed to close catalog connection: {e}")

    def _enter(self, run: _Run, state: PipelineState) -> None:
        run.states.append(state)
        self._logger.info(f"Pipeline state: {state.value}", extra={"state": state.value})

    def _log_stage_failure(self, error: PipelineError) -> None:
        extra: dict[str, object] = {"stage": error.stage, "error": error.reason}
        if isinstance(error, TranscodeError):
            extra["return_code"] = error.return_code
            extra["diagnostics"] = error.diagnostics
        key = getattr(error, "key", None)
        if key:
            extra["key"] = key
        self._logger.error(str(error), extra=extra)

    @staticmethod
    def _stage_name(run: _Run) -> str:
        return run.state.value if run.state else PipelineState.CONNECTING.value
