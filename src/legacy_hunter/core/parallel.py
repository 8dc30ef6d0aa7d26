"""Bounded parallel execution for per-script detection."""

from __future__ import annotations

import os
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, NamedTuple, Optional, TypeVar

T = TypeVar("T")
R = TypeVar("R")

# min(cpu_count, 8); 4 when the CPU count is unknown
DEFAULT_WORKERS = min(os.cpu_count() or 4, 8)

# Every in-flight script keeps its content and source map in memory
MAX_WORKERS = 32

# Below this many items a pool costs more than it saves
MIN_PARALLEL_ITEMS = 2


@dataclass
class ParallelConfig:
    """Worker pool settings for multi-script detection."""

    enabled: bool = True
    max_workers: int = DEFAULT_WORKERS

    def __post_init__(self) -> None:
        self.max_workers = max(1, min(self.max_workers, MAX_WORKERS))

    def should_parallelize(self, item_count: int) -> bool:
        """Check if a pool is worth starting for item_count items."""
        return self.enabled and self.max_workers > 1 and item_count >= MIN_PARALLEL_ITEMS


class Outcome(NamedTuple):
    """Result of applying a function to one item. Only one of result and error is set."""

    item: Any
    result: Any
    error: Optional[Exception]


def _attempt(func: Callable[[T], R], item: T) -> Outcome:
    try:
        return Outcome(item, func(item), None)
    except Exception as e:
        return Outcome(item, None, e)


def parallel_map_ordered(
    func: Callable[[T], R],
    items: list[T],
    config: ParallelConfig | None = None,
) -> list[Outcome]:
    """
    Apply a function to items in parallel, returning outcomes in input order.

    A failure in one item is captured in its Outcome and never affects the
    others.

    Args:
        func: Function to apply to each item
        items: List of items to process
        config: Parallel execution configuration

    Returns:
        One (item, result, error) Outcome per input item, in input order
    """
    config = config or ParallelConfig()

    if not config.should_parallelize(len(items)):
        return [_attempt(func, item) for item in items]

    with ThreadPoolExecutor(max_workers=config.max_workers) as executor:
        return list(executor.map(lambda item: _attempt(func, item), items))
