"""Collect JavaScript files and their source maps from disk."""

from __future__ import annotations

import base64
import binascii
import logging
import os
import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
from urllib.parse import unquote

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from legacy_hunter.core.correlator import Bundle
from legacy_hunter.core.detector import Script
from legacy_hunter.core.sourcemap import SourceMap, SourceMapError

logger = logging.getLogger(__name__)

SCRIPT_SUFFIXES = (".js", ".mjs", ".cjs")

# Directories never walked into when scanning a tree
SKIP_DIRS = frozenset({"node_modules", ".git", ".hg", ".svn"})

_SOURCE_MAPPING_URL_RE = re.compile(r"[#@]\s*sourceMappingURL=([^\s*]+)\s*(?:\*/)?\s*$")
_DATA_URL_RE = re.compile(r"^data:application/json[^,]*?(;base64)?,(.*)$", re.DOTALL)

# Only the tail of a file is searched for the sourceMappingURL comment
_TAIL_BYTES = 4096


@dataclass
class ScriptCollection:
    """Scripts read from disk and the bundles among them."""

    scripts: list[Script] = field(default_factory=list)
    bundles: list[Bundle] = field(default_factory=list)
    scan_errors: list[str] = field(default_factory=list)
    total_bytes: int = 0

    @property
    def total_size_human(self) -> str:
        """Return human-readable total size."""
        return format_size(self.total_bytes)


def format_size(size_bytes: int) -> str:
    """Convert bytes to human-readable format."""
    size = float(size_bytes)
    for unit in ["B", "KB", "MB", "GB", "TB"]:
        if size < 1024:
            return f"{size:.1f} {unit}"
        size /= 1024
    return f"{size:.1f} PB"


def parse_size(size_str: str) -> int:
    """
    Parse human-readable size string to bytes.

    Args:
        size_str: Size string like "1KB", "10MB", "1.5GB"

    Returns:
        Size in bytes

    Raises:
        ValueError: If the size string is invalid
    """
    size_str = size_str.strip().upper()

    # Check longer units first to avoid "KB" matching "B"
    units = [
        ("TB", 1024 * 1024 * 1024 * 1024),
        ("GB", 1024 * 1024 * 1024),
        ("MB", 1024 * 1024),
        ("KB", 1024),
        ("B", 1),
    ]

    for unit, multiplier in units:
        if size_str.endswith(unit):
            try:
                value = float(size_str[: -len(unit)])
            except ValueError:
                raise ValueError(f"Invalid size value: {size_str}") from None
            if value < 0:
                raise ValueError(f"Size cannot be negative: {size_str}")
            return int(value * multiplier)

    # No unit specified, assume bytes
    try:
        value = float(size_str)
    except ValueError:
        raise ValueError(f"Invalid size string: {size_str}") from None
    if value < 0:
        raise ValueError(f"Size cannot be negative: {size_str}")
    return int(value)


def is_script_file(path: Path) -> bool:
    """Check if a path looks like a JavaScript file."""
    return path.suffix.lower() in SCRIPT_SUFFIXES


def find_script_files(paths: Iterable[Path], scan_errors: list[str]) -> list[Path]:
    """
    Expand files and directories into a sorted list of script files.

    Directories are walked recursively, skipping SKIP_DIRS. Files named
    explicitly are always kept, whatever their location.
    """
    found: list[Path] = []
    for path in paths:
        if path.is_file():
            found.append(path)
            continue
        if not path.is_dir():
            scan_errors.append(f"{path}: not found")
            continue

        def on_error(error: OSError) -> None:
            scan_errors.append(f"{error.filename}: {error.strerror}")

        for dirpath, dirnames, filenames in os.walk(path, onerror=on_error):
            dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRS)
            for filename in sorted(filenames):
                candidate = Path(dirpath) / filename
                if is_script_file(candidate):
                    found.append(candidate)

    return found


def extract_source_mapping_url(content: str) -> Optional[str]:
    """Return the last sourceMappingURL declared at the end of a script."""
    tail = content[-_TAIL_BYTES:]
    for line in reversed(tail.splitlines()):
        stripped = line.strip()
        if not stripped:
            continue
        match = _SOURCE_MAPPING_URL_RE.search(stripped)
        return match.group(1) if match else None
    return None


def _decode_data_url(url: str) -> str:
    """Decode an inline data: source map URL into JSON text."""
    match = _DATA_URL_RE.match(url)
    if not match:
        raise SourceMapError("Unsupported source map data URL")
    is_base64, payload = match.groups()
    if not is_base64:
        return unquote(payload)
    try:
        return base64.b64decode(payload).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise SourceMapError(f"Invalid base64 source map: {e}") from e


def load_source_map_text(script_path: Path, content: str, map_path: Optional[Path] = None) -> Optional[str]:
    """
    Find the source map text for a script.

    Order: an explicit map_path, the sourceMappingURL comment (inline data
    URLs or paths relative to the script), then an adjacent "<file>.map".

    Raises:
        SourceMapError: If a declared map cannot be read
    """
    if map_path is not None:
        return _read_text(map_path)

    url = extract_source_mapping_url(content)
    if url:
        if url.startswith("data:"):
            return _decode_data_url(url)
        if "://" not in url:
            candidate = (script_path.parent / unquote(url.split("?", 1)[0])).resolve()
            if candidate.is_file():
                return _read_text(candidate)
            logger.debug("Declared source map %s not found for %s", candidate, script_path)

    adjacent = script_path.with_name(script_path.name + ".map")
    if adjacent.is_file():
        return _read_text(adjacent)
    return None


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceMapError(f"Cannot read source map {path}: {e}") from e


class ScriptCollector:
    """Reads scripts and source maps from disk into detector inputs."""

    def __init__(self, console: Console | None = None, use_source_maps: bool = True):
        self.console = console or Console()
        self.use_source_maps = use_source_maps

    def collect(
        self,
        paths: Iterable[Path],
        map_overrides: Optional[dict[Path, Path]] = None,
    ) -> ScriptCollection:
        """
        Read every script under paths.

        Args:
            paths: Files and directories to collect from
            map_overrides: Explicit source map for a script path

        Returns:
            ScriptCollection with scripts, bundles and per-file errors
        """
        collection = ScriptCollection()
        overrides = {p.resolve(): m for p, m in (map_overrides or {}).items()}
        files = find_script_files(paths, collection.scan_errors)

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            console=self.console,
            transient=True,
        ) as progress:
            task = progress.add_task("Reading scripts...", total=len(files))

            for index, path in enumerate(files):
                progress.update(task, description=f"Reading: {path.name[:40]}")
                self._collect_file(path, str(index), overrides.get(path.resolve()), collection)
                progress.advance(task)

        return collection

    def _collect_file(
        self,
        path: Path,
        script_id: str,
        map_path: Optional[Path],
        collection: ScriptCollection,
    ) -> None:
        try:
            raw = path.read_bytes()
        except OSError as e:
            collection.scan_errors.append(f"{path}: {e}")
            return

        content = raw.decode("utf-8", errors="replace")
        script = Script(url=path.as_posix(), content=content, script_id=script_id)
        collection.scripts.append(script)
        collection.total_bytes += len(raw)

        if not self.use_source_maps:
            return

        try:
            map_text = load_source_map_text(path, content, map_path)
            if map_text is None:
                return
            source_map = SourceMap.from_json(map_text)
        except SourceMapError as e:
            logger.warning("Ignoring source map for %s: %s", path, e)
            collection.scan_errors.append(f"{path}: {e}")
            return

        collection.bundles.append(Bundle(script=script, raw_map=source_map.raw, map=source_map))
