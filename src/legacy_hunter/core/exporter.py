"""Export detection reports to JSON and CSV formats."""

from __future__ import annotations

import csv
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Literal, get_args

from legacy_hunter import __version__
from legacy_hunter.core.detector import DetectionReport, ScriptReport
from legacy_hunter.core.scanner import format_size

ExportFormat = Literal["json", "csv"]
VALID_EXPORT_FORMATS: tuple[ExportFormat, ...] = get_args(ExportFormat)

CSV_FIELDNAMES = [
    "url",
    "signal",
    "line",
    "column",
    "estimated_byte_savings",
    "wasted_bytes",
]


def _script_report_to_dict(report: ScriptReport) -> dict[str, Any]:
    """Convert ScriptReport to serializable dict."""
    return {
        "url": report.url,
        "script_id": report.script.script_id,
        "estimated_byte_savings": report.estimated_byte_savings,
        "wasted_bytes": report.wasted_bytes,
        "wasted_human": format_size(report.wasted_bytes),
        "matches": [
            {"name": m.name, "line": m.line, "column": m.column} for m in report.matches
        ],
    }


def report_to_dict(report: DetectionReport) -> dict[str, Any]:
    """Convert a DetectionReport to a serializable dict."""
    return {
        "type": "legacy-javascript",
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "scripts_scanned": report.scripts_scanned,
        "total_wasted_bytes": report.total_wasted_bytes,
        "total_wasted_human": format_size(report.total_wasted_bytes),
        "total_signals": report.total_signals,
        "scripts": [_script_report_to_dict(r) for r in report.reports],
        "warnings": report.warnings,
        "scan_errors": report.scan_errors,
    }


def export_json(report: DetectionReport, output_path: Path, *, indent: int = 2) -> None:
    """
    Export a detection report to a JSON file.

    Args:
        report: Report to export
        output_path: Path to write JSON file
        indent: JSON indentation level (default: 2)
    """
    data = report_to_dict(report)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent, ensure_ascii=False)


def export_csv(report: DetectionReport, output_path: Path) -> None:
    """Export a detection report to CSV, one row per signal."""
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDNAMES)
        writer.writeheader()
        for script_report in report.reports:
            for match in script_report.matches:
                writer.writerow({
                    "url": script_report.url,
                    "signal": match.name,
                    "line": match.line,
                    "column": match.column,
                    "estimated_byte_savings": script_report.estimated_byte_savings,
                    "wasted_bytes": script_report.wasted_bytes,
                })


def export_report(
    report: DetectionReport,
    output_path: Path,
    format: ExportFormat = "json",
) -> None:
    """
    Export a detection report in the given format.

    Raises:
        ValueError: If format is not supported
    """
    if format == "json":
        export_json(report, output_path)
    elif format == "csv":
        export_csv(report, output_path)
    else:
        raise ValueError(f"Unsupported export format: {format}")
