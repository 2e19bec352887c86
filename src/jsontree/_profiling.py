"""
Hot-path profiling for the parser.

Disabled unless ``JSONTREE_PROFILE`` is set in the environment. When disabled,
``hot_path`` hands the function back untouched, so production parsing pays
nothing for it.
"""

import functools
import os
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any
from typing import TypeVar

PROFILE_HOT_PATHS = __debug__ and "JSONTREE_PROFILE" in os.environ

F = TypeVar("F", bound=Callable[..., Any])


@dataclass
class HotPathStats:
    """Statistics for one profiled parser function."""

    function_name: str
    call_count: int = 0
    total_time_ns: int = 0

    def record_call(self, duration_ns: int) -> None:
        """Records one call and its duration."""
        self.call_count += 1
        self.total_time_ns += duration_ns

    @property
    def mean_time_ns(self) -> float:
        return self.total_time_ns / self.call_count if self.call_count else 0.0


_hot_path_stats: dict[str, HotPathStats] = {}


def hot_path(name: str, enabled: bool | None = None) -> Callable[[F], F]:
    """
    Marks a function as a parser hot path.

    Timing is recorded under ``name`` when profiling is enabled. ``enabled``
    overrides the environment switch, which is mostly useful in tests.
    """
    active = PROFILE_HOT_PATHS if enabled is None else enabled

    def decorator(func: F) -> F:
        if not active:
            return func

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            start = time.perf_counter_ns()
            try:
                return func(*args, **kwargs)
            finally:
                stats = _hot_path_stats.get(name)
                if stats is None:
                    stats = _hot_path_stats[name] = HotPathStats(name)
                stats.record_call(time.perf_counter_ns() - start)

        return wrapper  # type: ignore[return-value]

    return decorator


def get_hot_path_stats() -> dict[str, HotPathStats]:
    """Returns a copy of the current profiling statistics."""
    return _hot_path_stats.copy()


def clear_hot_path_stats() -> None:
    """Clears profiling statistics."""
    _hot_path_stats.clear()
