"""Tests for the command line interface."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from legacy_hunter import __version__
from legacy_hunter.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path: Path):
    """Keep user and project config files out of the tests."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.chdir(home)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    return home


class TestScan:
    """Tests for the scan command."""

    def test_reports_legacy_scripts(self, legacy_project: Path):
        result = runner.invoke(app, ["scan", str(legacy_project)])

        assert result.exit_code == 0, result.output
        assert "Legacy JavaScript Summary" in result.output
        assert "2 of 3" in result.output

    def test_clean_scripts(self, legacy_project: Path):
        result = runner.invoke(app, ["scan", str(legacy_project / "modern.js")])
        assert result.exit_code == 0, result.output
        assert "No legacy JavaScript found" in result.output

    def test_export_json(self, legacy_project: Path, temp_dir: Path):
        output = temp_dir / "report.json"
        result = runner.invoke(
            app,
            ["scan", str(legacy_project), "--export", str(output), "--compression-ratio", "0.5"],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["scripts_scanned"] == 3
        signals = sorted(m["name"] for s in data["scripts"] for m in s["matches"])
        assert signals == ["Object.entries", "String.prototype.repeat"]
        legacy = next(s for s in data["scripts"] if s["url"].endswith("legacy.js"))
        assert legacy["wasted_bytes"] == round(legacy["estimated_byte_savings"] * 0.5)

    def test_no_source_maps(self, legacy_project: Path, temp_dir: Path):
        output = temp_dir / "report.json"
        result = runner.invoke(
            app, ["scan", str(legacy_project), "--no-source-maps", "--no-parallel", "--export", str(output)]
        )

        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text(encoding="utf-8"))
        assert [m["name"] for s in data["scripts"] for m in s["matches"]] == ["String.prototype.repeat"]

    def test_explicit_map(self, temp_dir: Path):
        script = temp_dir / "app.js"
        script.write_text("console.log(1);")
        map_file = temp_dir / "app.map.json"
        map_file.write_text(
            json.dumps({"version": 3, "sources": ["node_modules/focus-visible/dist/focus-visible.js"], "mappings": ""})
        )

        output = temp_dir / "report.json"
        result = runner.invoke(app, ["scan", str(script), "--map", str(map_file), "--export", str(output)])

        assert result.exit_code == 0, result.output
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["scripts"][0]["matches"] == [{"name": "focus-visible", "line": 0, "column": 0}]

    def test_map_needs_single_file(self, legacy_project: Path, temp_dir: Path):
        map_file = temp_dir / "app.map"
        map_file.write_text("{}")
        result = runner.invoke(app, ["scan", str(legacy_project), "--map", str(map_file)])
        assert result.exit_code == 1

    def test_invalid_min_savings(self, legacy_project: Path):
        result = runner.invoke(app, ["scan", str(legacy_project), "--min-savings", "lots"])
        assert result.exit_code == 1
        assert "Invalid min-savings" in result.output

    def test_invalid_format(self, legacy_project: Path):
        result = runner.invoke(app, ["scan", str(legacy_project), "--format", "xml"])
        assert result.exit_code == 1


class TestOtherCommands:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_signals(self):
        result = runner.invoke(app, ["signals", "--no-polyfills"])
        assert result.exit_code == 0, result.output
        assert "@babel/plugin-transform-spread" in result.output
        assert "3 signals" in result.output

    def test_info(self):
        result = runner.invoke(app, ["info"])
        assert result.exit_code == 0, result.output
        assert "Polyfills" in result.output

    def test_config_init_and_show(self, isolated_config: Path):
        result = runner.invoke(app, ["config", "init", "--local"])
        assert result.exit_code == 0, result.output
        assert (isolated_config / "legacyhunter.toml").exists()

        again = runner.invoke(app, ["config", "init", "--local"])
        assert again.exit_code == 1

        shown = runner.invoke(app, ["config", "show"])
        assert shown.exit_code == 0, shown.output
        assert "compression_ratio" in shown.output

    def test_bad_config_file(self, temp_dir: Path):
        config_file = temp_dir / "bad.toml"
        config_file.write_text("[scan]\ncompression_ratio = 5\n")
        result = runner.invoke(app, ["--config", str(config_file), "info"])
        assert result.exit_code == 1
        assert "Config error" in result.output

    def test_config_path(self):
        result = runner.invoke(app, ["config", "path"])
        assert result.exit_code == 0, result.output
        assert "global" in result.output
        assert "not found" in result.output
