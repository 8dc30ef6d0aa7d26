"""Polyfill catalog loading and regex generation."""

from __future__ import annotations

import json
import logging
import re
from functools import lru_cache
from pathlib import Path
from typing import Any, Optional

from legacy_hunter.patterns.base import Pattern, PolyfillEntry

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent.parent / "data"
DEFAULT_MODULE_DATA_PATH = DATA_DIR / "polyfill-module-data.json"


def _quoted(token: str) -> str:
    """Match a token inside either kind of string delimiter."""
    return f"['\"]{re.escape(token)}['\"]"


def build_polyfill_expression(object_name: Optional[str], prop: str, core_js_module: str) -> str:
    """
    Build the regex fragment that finds one polyfill in shipped code.

    Args:
        object_name: Owner of the property, e.g. "String.prototype" or "Object".
            None for a global such as "Promise".
        prop: Property being polyfilled, e.g. "startsWith"
        core_js_module: core-js@3 module id, e.g. "es.string.starts-with"

    Returns:
        Alternation of every textual form a bundler or minifier may emit
    """
    prop_re = re.escape(prop)
    alternatives: list[str] = []

    if object_name:
        object_re = re.escape(object_name)
        # String.prototype.startsWith =
        alternatives.append(rf"{object_re}\.{prop_re}\s?=[^=]")
        # String.prototype['startsWith'] =
        alternatives.append(rf"{object_re}\[{_quoted(prop)}\]\s?=[^=]")
    else:
        # window.Promise = / ;Promise = / but not: SomePromise =
        alternatives.append(rf"(?:window\.|[\s;]+){prop_re}\s?=[^=]")

    # Object.defineProperty(String.prototype, 'startsWith'
    owner_re = re.escape(object_name) if object_name else "window"
    alternatives.append(rf"defineProperty\({owner_re},\s?{_quoted(prop)}")

    if object_name:
        object_re = re.escape(object_name)
        # es-shims: no(Object,{entries:r},{entries:function
        alternatives.append(rf"\({object_re},\s*\{{{prop_re}:.*\}},\s*\{{{prop_re}")

        # core-js@3 minified:
        # {target:"Array",proto:true},{fill:fill
        # {target:"Array",proto:true,forced:!HAS_SPECIES_SUPPORT},{filter:
        target = object_name.replace(".prototype", "")
        alternatives.append(rf"\{{target:{_quoted(target)}\S*\}},\{{{prop_re}:")

    # Un-minified code may keep module paths: core-js/modules/es.object.is-frozen
    alternatives.append(rf"core-js/modules/{re.escape(core_js_module)}\"")

    return "|".join(alternatives)


def split_polyfill_name(name: str) -> tuple[Optional[str], str]:
    """Split "String.prototype.repeat" into ("String.prototype", "repeat")."""
    parts = name.split(".")
    if len(parts) == 1:
        return None, name
    return ".".join(parts[:-1]), parts[-1]


def _parse_entry(raw: Any, source: Path) -> PolyfillEntry:
    """Convert one raw JSON catalog item into a PolyfillEntry."""
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid polyfill entry in {source}: {raw!r}")
    name = raw.get("name")
    modules = raw.get("modules")
    if not isinstance(name, str) or not name:
        raise ValueError(f"Polyfill entry without a name in {source}: {raw!r}")
    if not isinstance(modules, list) or not modules or not all(isinstance(m, str) for m in modules):
        raise ValueError(f"Polyfill entry '{name}' has no modules in {source}")
    return PolyfillEntry(name=name, modules=tuple(modules), corejs=bool(raw.get("corejs", False)))


@lru_cache(maxsize=None)
def load_polyfill_module_data(path: Optional[Path] = None) -> tuple[PolyfillEntry, ...]:
    """
    Load the polyfill catalog.

    The catalog is read once per path and shared for the life of the process.

    Args:
        path: Catalog JSON file (default: the bundled asset)

    Returns:
        Immutable tuple of catalog entries

    Raises:
        ValueError: If the file is missing or malformed
    """
    source = path or DEFAULT_MODULE_DATA_PATH
    try:
        with open(source, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ValueError(f"Cannot read polyfill module data {source}: {e}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {source}: {e}") from e

    if not isinstance(data, list):
        raise ValueError(f"Polyfill module data in {source} must be a list")

    entries = tuple(_parse_entry(raw, source) for raw in data)
    logger.debug("Loaded %d polyfill entries from %s", len(entries), source)
    return entries


def get_core_js_polyfill_data(
    catalog: Optional[tuple[PolyfillEntry, ...]] = None,
) -> list[tuple[str, str]]:
    """Return (name, core-js module) for every entry detectable by text."""
    entries = catalog if catalog is not None else load_polyfill_module_data()
    return [(entry.name, entry.core_js_module) for entry in entries if entry.corejs]


def get_polyfill_patterns(catalog: Optional[tuple[PolyfillEntry, ...]] = None) -> list[Pattern]:
    """Build one Pattern per core-js catalog entry."""
    patterns: list[Pattern] = []
    for name, core_js_module in get_core_js_polyfill_data(catalog):
        object_name, prop = split_polyfill_name(name)
        patterns.append(
            Pattern(
                name=name,
                expression=build_polyfill_expression(object_name, prop, core_js_module),
            )
        )
    return patterns
