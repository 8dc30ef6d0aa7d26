"""Configuration management for Legacy Hunter CLI."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

# Conditional import for Python 3.10 compatibility
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib  # type: ignore[import-not-found]

from legacy_hunter.core.exporter import VALID_EXPORT_FORMATS, ExportFormat
from legacy_hunter.core.parallel import DEFAULT_WORKERS, MAX_WORKERS
from legacy_hunter.core.scanner import parse_size


@dataclass
class ScanConfig:
    """General scan settings."""

    show_all: bool = False
    min_savings: str = "0B"
    compression_ratio: float = 1.0
    source_maps: bool = True

    @property
    def min_savings_bytes(self) -> int:
        """Convert min_savings to bytes."""
        try:
            return parse_size(self.min_savings)
        except ValueError:
            return 0  # No filter fallback


@dataclass
class ParallelSection:
    """Worker pool settings."""

    enabled: bool = True
    max_workers: int = DEFAULT_WORKERS


@dataclass
class DataConfig:
    """Replacement catalog and size graph files (empty: bundled data)."""

    polyfill_module_data: str = ""
    polyfill_graph_data: str = ""

    @property
    def module_data_path(self) -> Path | None:
        """Return the catalog override path, if any."""
        return Path(self.polyfill_module_data).expanduser() if self.polyfill_module_data else None

    @property
    def graph_data_path(self) -> Path | None:
        """Return the graph override path, if any."""
        return Path(self.polyfill_graph_data).expanduser() if self.polyfill_graph_data else None


@dataclass
class ExportConfig:
    """Default export settings."""

    format: ExportFormat = "json"


@dataclass
class Config:
    """Root configuration container."""

    scan: ScanConfig = field(default_factory=ScanConfig)
    parallel: ParallelSection = field(default_factory=ParallelSection)
    data: DataConfig = field(default_factory=DataConfig)
    export: ExportConfig = field(default_factory=ExportConfig)

    # Metadata (not from TOML)
    _source: Path | None = field(default=None, repr=False)


def get_xdg_config_home() -> Path:
    """Return $XDG_CONFIG_HOME, or ~/.config when it is unset or empty."""
    return Path(os.environ.get("XDG_CONFIG_HOME") or Path.home() / ".config")


def get_config_paths() -> tuple[Path, Path]:
    """Return the user and project config files, lowest precedence first."""
    return (
        get_xdg_config_home() / "legacy-hunter" / "config.toml",
        Path.cwd() / "legacyhunter.toml",
    )


def _load_toml(path: Path) -> dict[str, Any]:
    return tomllib.loads(path.read_text(encoding="utf-8"))


def _merge_dicts(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, override takes precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_dicts(result[key], value)
        else:
            result[key] = value
    return result


def _validate_config(data: dict[str, Any]) -> list[str]:
    """Validate TOML data and return list of errors."""
    errors: list[str] = []
    scan = data.get("scan", {})

    min_savings = scan.get("min_savings")
    if min_savings:
        try:
            parse_size(min_savings)
        except (ValueError, AttributeError):
            errors.append(f"Invalid scan.min_savings: '{min_savings}' (use: 1KB, 10KB, 1MB)")

    ratio = scan.get("compression_ratio")
    if ratio is not None and (
        isinstance(ratio, bool) or not isinstance(ratio, (int, float)) or not 0 < ratio <= 1
    ):
        errors.append(f"Invalid scan.compression_ratio: '{ratio}' (use a number in (0, 1])")

    workers = data.get("parallel", {}).get("max_workers")
    if workers is not None and (
        isinstance(workers, bool) or not isinstance(workers, int) or not 1 <= workers <= MAX_WORKERS
    ):
        errors.append(f"Invalid parallel.max_workers: '{workers}' (use 1-{MAX_WORKERS})")

    export_format = data.get("export", {}).get("format")
    if export_format and export_format not in VALID_EXPORT_FORMATS:
        errors.append(f"Invalid export.format: '{export_format}' (use: json, csv)")

    for key in ("polyfill_module_data", "polyfill_graph_data"):
        value = data.get("data", {}).get(key)
        if value and not Path(str(value)).expanduser().is_file():
            errors.append(f"Invalid data.{key}: '{value}' (file not found)")

    return errors


def _filter_known_keys(data: dict[str, Any], dataclass_type: type) -> dict[str, Any]:
    """Filter dict to only include keys that are valid fields for the dataclass."""
    valid_fields = {f.name for f in fields(dataclass_type)}
    return {k: v for k, v in data.items() if k in valid_fields}


# Mapping of section names to their config classes
SECTION_TYPES = {
    "scan": ScanConfig,
    "parallel": ParallelSection,
    "data": DataConfig,
    "export": ExportConfig,
}


def _dict_to_config(data: dict[str, Any], source: Path | None = None) -> Config:
    """Convert parsed TOML dict to Config dataclass."""
    sections = {
        name: cls(**_filter_known_keys(data.get(name, {}), cls))
        for name, cls in SECTION_TYPES.items()
    }
    return Config(**sections, _source=source)


def _read_layer(path: Path) -> dict[str, Any]:
    try:
        return _load_toml(path)
    except tomllib.TOMLDecodeError as e:
        raise ValueError(f"Invalid TOML in {path}: {e}") from e


def _build(data: dict[str, Any], source: Path | None) -> Config:
    errors = _validate_config(data) if data else []
    if errors:
        raise ValueError(f"Config validation failed ({source}): {'; '.join(errors)}")
    return _dict_to_config(data, source)


def load_config() -> Config:
    """
    Load configuration, layering the project file over the user file.

    Later layers win key by key; built-in defaults fill whatever neither
    file sets. The reported source is the last file that exists.

    Raises:
        ValueError: If a file is not valid TOML or the merged values are invalid
    """
    merged: dict[str, Any] = {}
    source: Path | None = None

    for path in get_config_paths():
        if path.exists():
            merged = _merge_dicts(merged, _read_layer(path))
            source = path

    return _build(merged, source)


def load_config_from_file(path: Path) -> Config:
    """Load configuration from a specific file, ignoring the usual locations."""
    return _build(_read_layer(path), path)


# Default config template for `config init`
DEFAULT_CONFIG_TEMPLATE = """\
# Legacy Hunter Configuration

[scan]
show_all = false           # Show every script vs the top offenders
min_savings = "0B"         # Hide scripts saving less than this: 1KB, 10KB, 1MB
compression_ratio = 1.0    # Scale estimates to transfer size, e.g. 0.3 for gzip
source_maps = true         # Use source maps to find polyfills the text hides

[parallel]
enabled = true
max_workers = 8            # Scripts analyzed at once (1-32)

[data]
# Replacement catalog / size graph JSON files. Empty uses the bundled data.
polyfill_module_data = ""
polyfill_graph_data = ""

[export]
format = "json"            # json or csv
"""
