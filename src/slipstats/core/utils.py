"""
Utility functions for SlipStats.

This module provides:
- Performance timing decorator and context manager
- Lenient value conversion for replay exports
- Ratio and frame-count helpers
"""

import logging
import math
import time
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from slipstats.core.constants import FRAMES_PER_SECOND

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])


def timed(func: F) -> F:
    """
    Decorator to measure and log function execution time.

    Usage:
        @timed
        def my_function():
            ...
    """

    @wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        result = func(*args, **kwargs)
        elapsed = time.perf_counter() - start_time
        logger.info(f"{func.__name__} completed in {elapsed:.3f}s")
        return result

    return wrapper  # type: ignore


class PerformanceMonitor:
    """
    Context manager for monitoring performance of code blocks.

    Usage:
        with PerformanceMonitor("loading replays"):
            load_matches(...)
    """

    def __init__(self, operation_name: str, log_level: int = logging.INFO):
        self.operation_name = operation_name
        self.log_level = log_level
        self.start_time: float | None = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed = time.perf_counter() - (self.start_time or 0)
        if exc_type is not None:
            logger.error(f"{self.operation_name} failed after {elapsed:.3f}s: {exc_val}")
        else:
            logger.log(self.log_level, f"{self.operation_name} completed in {elapsed:.3f}s")
        return False


def safe_int(value: Any, default: int = 0) -> int:
    """Safely convert a value to int."""
    if value is None:
        return default
    try:
        return int(value)
    except (ValueError, TypeError):
        return default


def safe_float(value: Any, default: float = 0.0) -> float:
    """Safely convert a value to float."""
    if value is None:
        return default
    try:
        result = float(value)
    except (ValueError, TypeError):
        return default
    return default if math.isnan(result) else result


def ratio(count: float, total: float) -> float:
    """
    Divide count by total without hiding degenerate input.

    A zero total produces NaN for a zero count and a signed infinity
    otherwise, so callers can show "N/A" instead of a fake 0.
    """
    if total == 0:
        if count == 0:
            return math.nan
        return math.copysign(math.inf, count)
    return count / total


def frames_to_seconds(frames: int) -> float:
    """Convert a frame count to seconds."""
    return frames / FRAMES_PER_SECOND


def frames_to_duration(frames: int | None) -> str:
    """
    Format a frame count as an ``m:ss`` duration string.

    Negative frame numbers (the pre-game countdown) clamp to ``0:00``.
    ``None`` yields ``"-"``.
    """
    if frames is None:
        return "-"
    total_seconds = max(0, int(frames_to_seconds(frames)))
    minutes, seconds = divmod(total_seconds, 60)
    return f"{minutes}:{seconds:02d}"


def format_ratio(value: float, digits: int = 2, suffix: str = "") -> str:
    """Format a derived ratio, rendering non-finite values as N/A."""
    if not math.isfinite(value):
        return "N/A"
    return f"{value:.{digits}f}{suffix}"
