"""Worker entry point - runs one transcode job per process."""

from src.worker.main import (
    EXIT_FAILURE,
    EXIT_INTERRUPTED,
    EXIT_SUCCESS,
    WorkerArgs,
    apply_overrides,
    build_job,
    main,
    parse_args,
    run_job,
)

__all__ = [
    "EXIT_FAILURE",
    "EXIT_INTERRUPTED",
    "EXIT_SUCCESS",
    "WorkerArgs",
    "apply_overrides",
    "build_job",
    "main",
    "parse_args",
    "run_job",
]
