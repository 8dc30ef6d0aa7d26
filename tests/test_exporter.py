"""Tests for report export."""

from __future__ import annotations

import csv
import json
from pathlib import Path

import pytest

from legacy_hunter import __version__
from legacy_hunter.config import VALID_EXPORT_FORMATS as CONFIG_EXPORT_FORMATS
from legacy_hunter.core.detector import DetectionReport, Script, ScriptReport
from legacy_hunter.core.exporter import CSV_FIELDNAMES, VALID_EXPORT_FORMATS, export_report, report_to_dict
from legacy_hunter.core.matcher import Match


@pytest.fixture
def report() -> DetectionReport:
    script = Script(url="dist/app.js", content="", script_id="0")
    return DetectionReport(
        reports=[
            ScriptReport(
                script=script,
                matches=[Match("Object.entries", 0, 10), Match("String.prototype.repeat", 2, 0)],
                estimated_byte_savings=14145,
                wasted_bytes=4244,
            )
        ],
        warnings=["core-js 2"],
        scan_errors=["dist/broken.js: boom"],
        scripts_scanned=3,
    )


class TestReportToDict:
    def test_fields(self, report: DetectionReport):
        data = report_to_dict(report)
        assert data["version"] == __version__
        assert data["scripts_scanned"] == 3
        assert data["total_wasted_bytes"] == 4244
        assert data["total_signals"] == 2
        assert data["warnings"] == ["core-js 2"]
        assert data["scan_errors"] == ["dist/broken.js: boom"]

        script = data["scripts"][0]
        assert script["url"] == "dist/app.js"
        assert script["matches"][0] == {"name": "Object.entries", "line": 0, "column": 10}


class TestExportReport:
    """Tests for export_report."""

    def test_json(self, report: DetectionReport, temp_dir: Path):
        output = temp_dir / "out" / "report.json"
        export_report(report, output, "json")

        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["type"] == "legacy-javascript"
        assert data["scripts"][0]["estimated_byte_savings"] == 14145

    def test_csv_one_row_per_signal(self, report: DetectionReport, temp_dir: Path):
        output = temp_dir / "report.csv"
        export_report(report, output, "csv")

        with open(output, encoding="utf-8", newline="") as f:
            rows = list(csv.DictReader(f))

        assert list(rows[0].keys()) == CSV_FIELDNAMES
        assert [row["signal"] for row in rows] == ["Object.entries", "String.prototype.repeat"]
        assert rows[1]["line"] == "2"
        assert rows[1]["wasted_bytes"] == "4244"

    def test_unsupported_format(self, report: DetectionReport, temp_dir: Path):
        with pytest.raises(ValueError, match="Unsupported export format"):
            export_report(report, temp_dir / "report.xml", "xml")  # type: ignore[arg-type]

    def test_every_valid_format_exports(self, report: DetectionReport, temp_dir: Path):
        assert VALID_EXPORT_FORMATS == ("json", "csv")
        assert CONFIG_EXPORT_FORMATS is VALID_EXPORT_FORMATS
        for fmt in VALID_EXPORT_FORMATS:
            output = temp_dir / f"report.{fmt}"
            export_report(report, output, fmt)
            assert output.read_text(encoding="utf-8")
