"""Timing helpers used around demo parsing and planning."""

import logging
import time
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def timed(func: F) -> F:
    """Log how long each call to ``func`` takes."""

    @wraps(func)
    def wrapper(*args, **kwargs):
        started = time.perf_counter()
        result = func(*args, **kwargs)
        logger.info(f"{func.__name__} completed in {time.perf_counter() - started:.3f}s")
        return result

    return wrapper  # type: ignore


class PerformanceMonitor:
    """Context manager that logs the duration of a named step; ``elapsed`` holds it afterwards."""

    def __init__(self, operation_name: str, log_level: int = logging.INFO):
        self.operation_name = operation_name
        self.log_level = log_level
        self.elapsed = 0.0
        self._started: float | None = None

    def __enter__(self):
        self._started = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed = time.perf_counter() - (self._started or 0)
        if exc_type is not None:
            logger.error(f"{self.operation_name} failed after {self.elapsed:.3f}s: {exc_val}")
        else:
            logger.log(self.log_level, f"{self.operation_name} took {self.elapsed:.3f}s")
        return False


def format_duration(seconds: float) -> str:
    """Render a footage length: ``850ms``, ``7.1s`` or ``2m 30s``."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    if seconds < 60:
        return f"{seconds:.1f}s"
    return f"{int(seconds // 60)}m {int(seconds % 60)}s"
