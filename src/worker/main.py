"""Command-line worker: run the rendition pipeline for one video and exit.

Usage:
    python -m src.worker [--input-url URL] [--output-bucket NAME] [--video-id ID]

Job inputs default to configuration (``config/appsettings*.json``,
``HLS_PIPELINE__JOB__*`` or the legacy ``INPUT_S3_URL`` /
``OUTPUT_BUCKET_NAME`` / ``VIDEO_FILE_KEY`` variables). Exit status is 0 on
success, 1 on failure and 130 when interrupted.
"""

import argparse
import asyncio
import signal
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from src.application.dtos.pipeline import TranscodeJobResult
from src.application.services.pipeline import PipelineOrchestrator
from src.commons.settings import Settings, get_settings
from src.commons.telemetry import configure_logging, get_logger
from src.domain.exceptions import InvalidSourceLocatorError
from src.domain.models.job import JobContext
from src.infrastructure.factory import InfrastructureFactory

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130

logger = get_logger(__name__)


@dataclass
class WorkerArgs:
    """Parsed command line arguments."""

    input_url: str | None = None
    output_bucket: str | None = None
    video_id: str | None = None
    scratch_dir: str | None = None
    config_dir: Path | None = None
    environment: str | None = None


def parse_args(argv: list[str] | None = None) -> WorkerArgs:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Transcode one stored video into an HLS rendition ladder",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--input-url", help="Source object URL (s3://bucket/key)")
    parser.add_argument("--output-bucket", help="Bucket to publish renditions to")
    parser.add_argument(
        "--video-id",
        help="Catalog ID and output namespace (default: source key stem)",
    )
    parser.add_argument("--scratch-dir", help="Local working directory")
    parser.add_argument(
        "--config-dir",
        type=Path,
        help="Directory holding appsettings*.json (default: ./config)",
    )
    parser.add_argument("--environment", help="Configuration environment name")

    args = parser.parse_args(argv)
    return WorkerArgs(
        input_url=args.input_url,
        output_bucket=args.output_bucket,
        video_id=args.video_id,
        scratch_dir=args.scratch_dir,
        config_dir=args.config_dir,
        environment=args.environment,
    )


def apply_overrides(settings: Settings, args: WorkerArgs) -> Settings:
    """Return settings with job fields replaced by command line values."""
    overrides = {
        field: value
        for field, value in (
            ("input_url", args.input_url),
            ("output_bucket", args.output_bucket),
            ("video_id", args.video_id),
            ("scratch_dir", args.scratch_dir),
        )
        if value
    }
    if not overrides:
        return settings
    job = settings.job.model_copy(update=overrides)
    return settings.model_copy(update={"job": job})


def build_job(settings: Settings) -> JobContext:
    """Build the job context from resolved settings.

    Raises:
        InvalidSourceLocatorError: If the input URL is missing or malformed.
        ValueError: If the output bucket is not configured.
    """
    job_settings = settings.job
    if not job_settings.output_bucket:
        raise ValueError("Output bucket is not configured")

    return JobContext.create(
        job_settings.input_url,
        job_settings.output_bucket,
        video_id=job_settings.video_id,
        scratch_dir=job_settings.scratch_dir,
        output_prefix_template=job_settings.output_prefix_template,
        master_playlist_name=settings.transcoder.master_playlist_name,
    )


async def run_job(
    settings: Settings,
    job: JobContext,
    factory: InfrastructureFactory | None = None,
) -> TranscodeJobResult:
    """Run the pipeline with providers from ``factory`` and close them after."""
    factory = factory or InfrastructureFactory(settings)
    orchestrator = PipelineOrchestrator(
        blob_storage=factory.get_blob_storage(),
        document_db=factory.get_document_db(),
        transcoder=factory.get_transcoder(),
        settings=settings,
    )
    try:
        return await orchestrator.run(job)
    finally:
        await factory.close_all()


async def _run_until_signalled(settings: Settings, job: JobContext) -> int:
    """Run the job, cancelling it on SIGINT or SIGTERM."""
    loop = asyncio.get_running_loop()
    task = asyncio.ensure_future(run_job(settings, job))

    def _cancel(signame: str) -> None:
        logger.warning(f"Received {signame}, cancelling job")
        task.cancel()

    installed: list[signal.Signals] = []
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _cancel, sig.name)
            installed.append(sig)
        except (NotImplementedError, RuntimeError):
            continue

    try:
        result = await task
    except asyncio.CancelledError:
        logger.warning("Job interrupted", extra={"video_id": job.video_id})
        return EXIT_INTERRUPTED
    finally:
        for sig in installed:
            loop.remove_signal_handler(sig)

    return EXIT_SUCCESS if result.success else EXIT_FAILURE


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Process exit status.
    """
    load_dotenv()
    args = parse_args(argv)

    settings = apply_overrides(
        get_settings(config_dir=args.config_dir, environment=args.environment),
        args,
    )
    configure_logging(
        level=settings.telemetry.log_level or settings.app.log_level,
        format_type=settings.telemetry.log_format,
        logger_name="src",
    )

    try:
        job = build_job(settings)
    except (InvalidSourceLocatorError, ValueError) as e:
        logger.error(f"Invalid job configuration: {e}")
        return EXIT_FAILURE

    try:
        return asyncio.run(_run_until_signalled(settings, job))
    except KeyboardInterrupt:
        return EXIT_INTERRUPTED
    except Exception:
        logger.exception("Worker failed", extra={"video_id": job.video_id})
        return EXIT_FAILURE
