"""Estimate the bytes that legacy polyfills and transforms add to a script."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Optional

from legacy_hunter.core.matcher import Match
from legacy_hunter.patterns import Pattern, is_transform_name
from legacy_hunter.patterns.polyfills import DATA_DIR

logger = logging.getLogger(__name__)

DEFAULT_GRAPH_DATA_PATH = DATA_DIR / "polyfill-graph-data.json"


@dataclass(frozen=True)
class DependencyGraph:
    """Module sizes and the modules each polyfill pulls into a bundle."""

    module_sizes: tuple[int, ...]
    dependencies: Mapping[str, tuple[int, ...]]
    max_size: int

    @classmethod
    def from_dict(cls, data: Any, source: str = "<dict>") -> DependencyGraph:
        """Validate raw graph JSON and freeze it."""
        if not isinstance(data, dict):
            raise ValueError(f"Polyfill graph data in {source} must be an object")

        sizes = data.get("moduleSizes")
        dependencies = data.get("dependencies")
        max_size = data.get("maxSize")

        if not isinstance(sizes, list) or not all(isinstance(s, int) and s >= 0 for s in sizes):
            raise ValueError(f"Invalid moduleSizes in {source}")
        if not isinstance(dependencies, dict):
            raise ValueError(f"Invalid dependencies in {source}")
        if not isinstance(max_size, int) or max_size < 0:
            raise ValueError(f"Invalid maxSize in {source}")

        frozen: dict[str, tuple[int, ...]] = {}
        for name, indices in dependencies.items():
            if not isinstance(indices, list) or not all(
                isinstance(i, int) and 0 <= i < len(sizes) for i in indices
            ):
                raise ValueError(f"Invalid module indices for '{name}' in {source}")
            frozen[name] = tuple(indices)

        return cls(
            module_sizes=tuple(sizes),
            dependencies=MappingProxyType(frozen),
            max_size=max_size,
        )


@lru_cache(maxsize=None)
def load_dependency_graph(path: Optional[Path] = None) -> DependencyGraph:
    """
    Load the polyfill dependency graph, once per path.

    Raises:
        ValueError: If the file is missing or malformed
    """
    source = path or DEFAULT_GRAPH_DATA_PATH
    try:
        with open(source, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ValueError(f"Cannot read polyfill graph data {source}: {e}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {source}: {e}") from e

    return DependencyGraph.from_dict(data, str(source))


def partition_matches(matches: Iterable[Match]) -> tuple[list[Match], list[Match]]:
    """Split matches into (polyfills, transforms)."""
    polyfills: list[Match] = []
    transforms: list[Match] = []
    for match in matches:
        (transforms if is_transform_name(match.name) else polyfills).append(match)
    return polyfills, transforms


def estimate_polyfill_bytes(matches: Iterable[Match], graph: DependencyGraph) -> int:
    """
    Sum the sizes of all modules the matched polyfills depend on.

    Modules shared between polyfills are counted once. The total is capped at
    the size of the whole polyfill runtime.
    """
    modules_seen: set[int] = set()
    for match in matches:
        modules = graph.dependencies.get(match.name)
        if modules is None:
            logger.debug("No size data for polyfill %s", match.name)
            continue
        modules_seen.update(modules)

    total = sum(graph.module_sizes[index] for index in modules_seen)
    return min(total, graph.max_size)


def estimate_transform_bytes(
    matches: Iterable[Match],
    content: str,
    pattern_lookup: Callable[[str], Pattern | None],
) -> int:
    """Sum each matched transform's own estimate over the full file content."""
    total = 0
    for match in matches:
        pattern = pattern_lookup(match.name)
        if pattern is None or pattern.estimate_bytes is None:
            continue
        total += max(0, pattern.estimate_bytes(content))
    return total


def estimate_wasted_bytes(
    content: str,
    matches: Iterable[Match],
    graph: DependencyGraph,
    pattern_lookup: Callable[[str], Pattern | None],
) -> int:
    """
    Estimate the bytes a script could save without its legacy code.

    Args:
        content: Full script text, used by transform heuristics
        matches: Signals found in the script
        graph: Polyfill dependency graph
        pattern_lookup: Resolves a signal name to its Pattern

    Returns:
        Uncompressed byte estimate
    """
    polyfills, transforms = partition_matches(matches)
    return estimate_polyfill_bytes(polyfills, graph) + estimate_transform_bytes(
        transforms, content, pattern_lookup
    )
