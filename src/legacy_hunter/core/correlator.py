"""Infer polyfills from a bundle's source map when the text gives nothing away."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from legacy_hunter.core.matcher import Match
from legacy_hunter.core.sourcemap import SourceMap
from legacy_hunter.patterns import PolyfillEntry

if TYPE_CHECKING:
    from legacy_hunter.core.detector import Script

logger = logging.getLogger(__name__)

_CORE_JS_2_RE = re.compile(r"node_modules/core-js/modules/es[67]")


@dataclass
class Bundle:
    """A script paired with the source map that lists its original sources."""

    script: Script
    raw_map: dict[str, Any]
    map: SourceMap

    @classmethod
    def from_raw_map(cls, script: Script, raw_map: dict[str, Any]) -> Bundle:
        """Create a bundle, parsing raw_map into a SourceMap."""
        return cls(script=script, raw_map=raw_map, map=SourceMap.from_dict(raw_map))

    @property
    def sources(self) -> list[str]:
        """Return the original source paths listed in the map."""
        return self.map.sources


def source_matches_module(source: str, module: str) -> bool:
    """Check if a bundled source path is the file for a polyfill module."""
    return source.endswith(f"/{module}.js") or f"node_modules/{module}/" in source


def find_module_source(sources: Iterable[str], modules: Iterable[str]) -> str | None:
    """Return the first source path belonging to any of the given modules."""
    module_list = list(modules)
    for source in sources:
        if any(source_matches_module(source, module) for module in module_list):
            return source
    return None


def correlate_source_map(
    source_map: SourceMap,
    catalog: Iterable[PolyfillEntry],
    matches: list[Match],
) -> list[Match]:
    """
    Add matches for polyfills whose module files are listed in the source map.

    Polyfills already found by pattern matching are left alone. The location
    comes from the first mapping into the module file, or (0, 0) when the map
    has no mapping for it.

    Args:
        source_map: Parsed source map of the script
        catalog: Polyfill catalog entries
        matches: Matches from pattern matching (not modified)

    Returns:
        New list with the pattern matches followed by the inferred ones
    """
    combined = list(matches)
    seen = {match.name for match in matches}

    for entry in catalog:
        if entry.name in seen:
            continue

        source = find_module_source(source_map.sources, entry.modules)
        if source is None:
            continue

        mapping = source_map.find_entry_for_source(source)
        if mapping is not None:
            match = Match(name=entry.name, line=mapping.line_number, column=mapping.column_number)
        else:
            match = Match(name=entry.name, line=0, column=0)

        logger.debug("Source map lists %s for %s", source, entry.name)
        seen.add(entry.name)
        combined.append(match)

    return combined


def uses_core_js_2(sources: Iterable[str]) -> bool:
    """Check if any bundled source comes from core-js version 2."""
    return any(_CORE_JS_2_RE.search(source) for source in sources)
