"""Telemetry helpers for timing pipeline stages and scoping log context."""

import functools
import inspect
import logging
import time
from collections.abc import Callable
from typing import Any, ParamSpec, TypeVar, overload

from src.commons.telemetry.logger import get_log_context, get_logger, log_context_var

P = ParamSpec("P")
R = TypeVar("R")


@overload
def timed(
    func: Callable[P, R],
) -> Callable[P, R]: ...


@overload
def timed(
    *,
    logger: logging.Logger | None = None,
    level: int = logging.DEBUG,
    label: str | None = None,
) -> Callable[[Callable[P, R]], Callable[P, R]]: ...


def timed(
    func: Callable[P, R] | None = None,
    *,
    logger: logging.Logger | None = None,
    level: int = logging.DEBUG,
    label: str | None = None,
) -> Callable[P, R] | Callable[[Callable[P, R]], Callable[P, R]]:
    """Decorator to measure and log execution time.

    The duration is logged whether the call returns or raises, with an
    ``outcome`` field of ``ok`` or ``error``.

    Args:
        func: The function to decorate (when used without parentheses).
        logger: Optional logger instance. Defaults to the function's module logger.
        level: Log level for timing messages.
        label: Name to log instead of the function's qualified name.

    Returns:
        Decorated function.
    """

    def decorator(fn: Callable[P, R]) -> Callable[P, R]:
        log = logger or get_logger(fn.__module__)
        name = label or fn.__qualname__

        def _log(start: float, outcome: str) -> None:
            elapsed_ms = (time.perf_counter() - start) * 1000
            log.log(
                level,
                f"{name} completed",
                extra={"duration_ms": round(elapsed_ms, 2), "outcome": outcome},
            )

        @functools.wraps(fn)
        def sync_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            start = time.perf_counter()
            try:
                result = fn(*args, **kwargs)
            except BaseException:
                _log(start, "error")
                raise
            _log(start, "ok")
            return result

        @functools.wraps(fn)
        async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            start = time.perf_counter()
            try:
                result = await fn(*args, **kwargs)  # type: ignore[misc]
            except BaseException:
                _log(start, "error")
                raise
            _log(start, "ok")
            return result  # type: ignore[no-any-return]

        if inspect.iscoroutinefunction(fn):
            return async_wrapper  # type: ignore[return-value]
        return sync_wrapper

    if func is not None:
        return decorator(func)
    return decorator


class LogContext:
    """Context manager for adding temporary logging context."""

    def __init__(self, **kwargs: Any) -> None:
        self.context = kwargs
        self._previous_context: dict[str, Any] = {}

    def __enter__(self) -> "LogContext":
        """Enter the context, adding values to log context."""
        self._previous_context = get_log_context()
        log_context_var.set({**self._previous_context, **self.context})
        return self

    def __exit__(self, *args: Any) -> None:
        """Exit the context, restoring previous values."""
        log_context_var.set(self._previous_context)
