"""Signal pattern definitions for polyfills and transforms."""

from __future__ import annotations

from typing import Optional

from .base import Pattern, PolyfillEntry, is_transform_name
from .polyfills import (
    build_polyfill_expression,
    get_core_js_polyfill_data,
    get_polyfill_patterns,
    load_polyfill_module_data,
)
from .transforms import TRANSFORM_PATTERNS, count_occurrences, get_transform_patterns


def get_all_patterns(catalog: Optional[tuple[PolyfillEntry, ...]] = None) -> list[Pattern]:
    """Get all registered signal patterns, polyfills first."""
    return get_polyfill_patterns(catalog) + get_transform_patterns()


__all__ = [
    "Pattern",
    "PolyfillEntry",
    "TRANSFORM_PATTERNS",
    "build_polyfill_expression",
    "count_occurrences",
    "get_all_patterns",
    "get_core_js_polyfill_data",
    "get_polyfill_patterns",
    "get_transform_patterns",
    "is_transform_name",
    "load_polyfill_module_data",
]
