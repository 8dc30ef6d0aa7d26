"""Tests for the scanner module."""

from __future__ import annotations

import base64
import json
from pathlib import Path

import pytest
from rich.console import Console

from legacy_hunter.core.scanner import (
    ScriptCollector,
    extract_source_mapping_url,
    find_script_files,
    format_size,
    is_script_file,
    load_source_map_text,
    parse_size,
)
from legacy_hunter.core.sourcemap import SourceMapError


def _collector(**kwargs) -> ScriptCollector:
    return ScriptCollector(console=Console(quiet=True), **kwargs)


class TestFormatSize:
    """Tests for format_size function."""

    def test_bytes(self):
        assert format_size(500) == "500.0 B"

    def test_kilobytes(self):
        assert format_size(1024) == "1.0 KB"

    def test_megabytes(self):
        assert format_size(1024 * 1024) == "1.0 MB"

    def test_gigabytes(self):
        assert format_size(1024 * 1024 * 1024) == "1.0 GB"


class TestParseSize:
    """Tests for parse_size function."""

    def test_parse_bytes(self):
        assert parse_size("100") == 100
        assert parse_size("100B") == 100
        assert parse_size("100b") == 100

    def test_parse_kilobytes(self):
        assert parse_size("1KB") == 1024
        assert parse_size("1kb") == 1024
        assert parse_size("2KB") == 2048

    def test_parse_megabytes(self):
        assert parse_size("1MB") == 1024 * 1024

    def test_parse_decimal_values(self):
        assert parse_size("1.5KB") == 1536

    def test_parse_with_whitespace(self):
        assert parse_size("  10KB  ") == 10 * 1024

    def test_parse_invalid_raises_value_error(self):
        with pytest.raises(ValueError):
            parse_size("invalid")
        with pytest.raises(ValueError):
            parse_size("KB10")
        with pytest.raises(ValueError):
            parse_size("")

    def test_parse_negative_raises_value_error(self):
        with pytest.raises(ValueError, match="cannot be negative"):
            parse_size("-10KB")


class TestFindScriptFiles:
    """Tests for script discovery."""

    def test_is_script_file(self):
        assert is_script_file(Path("app.js"))
        assert is_script_file(Path("app.MJS"))
        assert is_script_file(Path("app.cjs"))
        assert not is_script_file(Path("app.js.map"))
        assert not is_script_file(Path("app.ts"))

    def test_walks_directory(self, legacy_project: Path):
        errors: list[str] = []
        files = find_script_files([legacy_project], errors)
        assert [f.name for f in files] == ["bundle.js", "legacy.js", "modern.js"]
        assert errors == []

    def test_explicit_file_in_node_modules(self, legacy_project: Path):
        vendored = legacy_project / "node_modules" / "lib" / "index.js"
        assert find_script_files([vendored], []) == [vendored]

    def test_missing_path(self, temp_dir: Path):
        errors: list[str] = []
        assert find_script_files([temp_dir / "gone"], errors) == []
        assert errors == [f"{temp_dir / 'gone'}: not found"]


class TestSourceMappingUrl:
    """Tests for locating a script's source map."""

    def test_line_comment(self):
        assert extract_source_mapping_url("a();\n//# sourceMappingURL=app.js.map\n") == "app.js.map"

    def test_legacy_marker(self):
        assert extract_source_mapping_url("a();\n//@ sourceMappingURL=app.js.map") == "app.js.map"

    def test_block_comment(self):
        assert extract_source_mapping_url("a();\n/*# sourceMappingURL=app.css.map */") == "app.css.map"

    def test_must_be_last_line(self):
        assert extract_source_mapping_url("//# sourceMappingURL=app.js.map\na();") is None

    def test_data_url(self, temp_dir: Path):
        raw = json.dumps({"version": 3, "sources": ["inline.js"], "mappings": ""})
        encoded = base64.b64encode(raw.encode()).decode()
        content = f"a();\n//# sourceMappingURL=data:application/json;charset=utf-8;base64,{encoded}"
        assert load_source_map_text(temp_dir / "app.js", content) == raw

    def test_bad_data_url(self, temp_dir: Path):
        content = "a();\n//# sourceMappingURL=data:application/json;base64,abc"
        with pytest.raises(SourceMapError):
            load_source_map_text(temp_dir / "app.js", content)

    def test_relative_path(self, temp_dir: Path):
        (temp_dir / "maps").mkdir()
        (temp_dir / "maps" / "app.map").write_text("{}")
        content = "a();\n//# sourceMappingURL=maps/app.map"
        assert load_source_map_text(temp_dir / "app.js", content) == "{}"

    def test_adjacent_map(self, temp_dir: Path):
        (temp_dir / "app.js.map").write_text("{}")
        assert load_source_map_text(temp_dir / "app.js", "a();") == "{}"

    def test_no_map(self, temp_dir: Path):
        assert load_source_map_text(temp_dir / "app.js", "a();") is None

    def test_explicit_map_wins(self, temp_dir: Path):
        (temp_dir / "app.js.map").write_text("{}")
        explicit = temp_dir / "other.map"
        explicit.write_text('{"sources": []}')
        assert load_source_map_text(temp_dir / "app.js", "a();", explicit) == '{"sources": []}'


class TestScriptCollector:
    """Tests for ScriptCollector class."""

    def test_collects_scripts_and_bundles(self, legacy_project: Path):
        collection = _collector().collect([legacy_project])

        assert [Path(s.url).name for s in collection.scripts] == ["bundle.js", "legacy.js", "modern.js"]
        assert [s.script_id for s in collection.scripts] == ["0", "1", "2"]
        assert len(collection.bundles) == 1
        assert collection.bundles[0].script is collection.scripts[0]
        assert collection.bundles[0].sources[1].endswith("es.object.entries.js")
        assert collection.total_bytes == sum(
            (legacy_project / name).stat().st_size for name in ("bundle.js", "legacy.js", "modern.js")
        )
        assert collection.scan_errors == []

    def test_without_source_maps(self, legacy_project: Path):
        collection = _collector(use_source_maps=False).collect([legacy_project])
        assert len(collection.scripts) == 3
        assert collection.bundles == []

    def test_malformed_map_keeps_script(self, temp_dir: Path):
        script = temp_dir / "app.js"
        script.write_text("String.prototype.repeat = function() {};")
        (temp_dir / "app.js.map").write_text("not json")

        collection = _collector().collect([script])

        assert len(collection.scripts) == 1
        assert collection.bundles == []
        assert len(collection.scan_errors) == 1
        assert "Invalid source map JSON" in collection.scan_errors[0]

    def test_map_override(self, temp_dir: Path):
        script = temp_dir / "app.js"
        script.write_text("console.log(1);")
        map_file = temp_dir / "elsewhere.json"
        map_file.write_text(json.dumps({"version": 3, "sources": ["x.js"], "mappings": ""}))

        collection = _collector().collect([script], {script: map_file})

        assert collection.bundles[0].sources == ["x.js"]
