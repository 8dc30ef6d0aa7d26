"""Analyzer for displaying detection results."""

from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from legacy_hunter.core.detector import DetectionReport, ScriptReport
from legacy_hunter.core.scanner import format_size
from legacy_hunter.patterns import Pattern

# Scripts shown unless --all is given
TOP_SCRIPTS = 20


class Analyzer:
    """Analyzes and displays detection results."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def display_results(
        self,
        report: DetectionReport,
        show_all: bool = False,
        min_savings: int = 0,
    ) -> None:
        """Display detection results, largest savings first."""
        reports = sorted(
            (r for r in report.reports if r.wasted_bytes >= min_savings),
            key=lambda r: r.wasted_bytes,
            reverse=True,
        )

        for warning in report.warnings:
            self.console.print(f"[yellow]Warning:[/yellow] {warning}")

        if not reports:
            self.console.print("[green]No legacy JavaScript found! Nothing to trim.[/green]")
            self._display_errors(report)
            return

        total = sum(r.wasted_bytes for r in reports)
        summary = Panel(
            f"[bold]Potential Savings:[/bold] {format_size(total)}\n"
            f"[bold]Scripts with legacy code:[/bold] {len(reports)} of {report.scripts_scanned}\n"
            f"[bold]Signals:[/bold] {sum(len(r.matches) for r in reports)}",
            title="Legacy JavaScript Summary",
            border_style="blue",
        )
        self.console.print(summary)
        self.console.print()

        table = Table(
            title="Legacy JavaScript",
            show_header=True,
            header_style="bold magenta",
        )
        table.add_column("#", style="dim", width=4)
        table.add_column("Savings", justify="right", style="cyan", width=10)
        table.add_column("Signal", style="green")
        table.add_column("Location", style="white", overflow="ellipsis")

        reports_to_show = reports if show_all else reports[:TOP_SCRIPTS]

        for i, script_report in enumerate(reports_to_show, 1):
            table.add_row(
                str(i),
                format_size(script_report.wasted_bytes),
                f"[bold]{len(script_report.matches)} signal(s)[/bold]",
                script_report.url,
            )
            for match in script_report.matches:
                table.add_row("", "", match.name, self.format_location(script_report, match.line, match.column))

        self.console.print(table)

        if not show_all and len(reports) > TOP_SCRIPTS:
            self.console.print(
                f"\n[dim]Showing top {TOP_SCRIPTS} of {len(reports)} scripts. "
                f"Use --all to see everything.[/dim]"
            )

        self._display_errors(report)

    @staticmethod
    def format_location(script_report: ScriptReport, line: int, column: int) -> str:
        """Format a 0-based position as the 1-based url:line:column editors expect."""
        return f"{script_report.url}:{line + 1}:{column + 1}"

    def display_signals(self, patterns: list[Pattern]) -> None:
        """List every signal the detector knows about."""
        table = Table(title="Detectable Signals", show_header=True, header_style="bold magenta")
        table.add_column("Kind", style="yellow", width=10)
        table.add_column("Signal", style="green")

        for pattern in patterns:
            kind = "transform" if pattern.is_transform else "polyfill"
            table.add_row(kind, pattern.name)

        self.console.print(table)
        self.console.print(f"\n[dim]{len(patterns)} signals[/dim]")

    def _display_errors(self, report: DetectionReport) -> None:
        if report.scan_errors:
            self.console.print(
                f"\n[yellow]Skipped {len(report.scan_errors)} file(s) due to errors.[/yellow]"
            )
            for error in report.scan_errors:
                self.console.print(f"  [dim]{error}[/dim]")
