"""Legacy JavaScript detection: match, correlate, estimate."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional

from legacy_hunter.core.correlator import Bundle, correlate_source_map, uses_core_js_2
from legacy_hunter.core.estimator import DependencyGraph, estimate_wasted_bytes, load_dependency_graph
from legacy_hunter.core.matcher import CodePatternMatcher, Match
from legacy_hunter.core.parallel import ParallelConfig, parallel_map_ordered
from legacy_hunter.core.sourcemap import SourceMap
from legacy_hunter.patterns import PolyfillEntry, get_all_patterns, load_polyfill_module_data

logger = logging.getLogger(__name__)

CORE_JS_2_WARNING = (
    "Version 2 of core-js was detected on the page. "
    "You should upgrade to version 3 for many performance improvements."
)


@dataclass(frozen=True)
class Script:
    """A JavaScript resource to analyze."""

    url: str
    content: str
    script_id: str


@dataclass
class DetectionResult:
    """Signals found in one script and the bytes they cost."""

    matches: list[Match] = field(default_factory=list)
    estimated_byte_savings: int = 0

    @property
    def signals(self) -> list[str]:
        """Return the names of all detected signals."""
        return [match.name for match in self.matches]


@dataclass
class ScriptReport:
    """Detection result for one script, scaled by its compression ratio."""

    script: Script
    matches: list[Match]
    estimated_byte_savings: int
    wasted_bytes: int

    @property
    def url(self) -> str:
        """Return the script URL."""
        return self.script.url


@dataclass
class DetectionReport:
    """Results across every analyzed script."""

    reports: list[ScriptReport] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    scan_errors: list[str] = field(default_factory=list)
    scripts_scanned: int = 0

    @property
    def total_wasted_bytes(self) -> int:
        """Return the wasted bytes summed over all scripts."""
        return sum(report.wasted_bytes for report in self.reports)

    @property
    def total_signals(self) -> int:
        """Return the number of signals summed over all scripts."""
        return sum(len(report.matches) for report in self.reports)


@dataclass(frozen=True)
class DetectionContext:
    """The read-only data every detection shares."""

    matcher: CodePatternMatcher
    catalog: tuple[PolyfillEntry, ...]
    graph: DependencyGraph

    @classmethod
    def create(
        cls,
        matcher: Optional[CodePatternMatcher] = None,
        catalog: Optional[tuple[PolyfillEntry, ...]] = None,
        graph: Optional[DependencyGraph] = None,
    ) -> DetectionContext:
        """Fill in any missing piece from the bundled catalog and graph."""
        if catalog is None:
            catalog = load_polyfill_module_data()
        if matcher is None:
            matcher = CodePatternMatcher(get_all_patterns(catalog))
        if graph is None:
            graph = load_dependency_graph()
        return cls(matcher=matcher, catalog=catalog, graph=graph)


@lru_cache(maxsize=None)
def get_default_context() -> DetectionContext:
    """Return the process-wide context built from the bundled data."""
    return DetectionContext.create()


def detect_legacy_javascript(
    content: str,
    source_map: Optional[SourceMap] = None,
    *,
    context: Optional[DetectionContext] = None,
) -> DetectionResult:
    """
    Detect legacy polyfills and transforms in one script.

    Args:
        content: Script text
        source_map: Parsed source map of the script, if it is a bundle
        context: Matcher, catalog and graph to use (default: bundled data)

    Returns:
        DetectionResult with matches sorted by signal name

    Raises:
        TypeError: If content is not a string
    """
    if content is None or content == "":
        return DetectionResult()
    if not isinstance(content, str):
        raise TypeError(f"Script content must be a string, not {type(content).__name__}")

    ctx = context or get_default_context()

    matches = ctx.matcher.match(content)
    if source_map is not None:
        matches = correlate_source_map(source_map, ctx.catalog, matches)

    estimate = estimate_wasted_bytes(content, matches, ctx.graph, ctx.matcher.pattern_for)
    return DetectionResult(
        matches=sorted(matches, key=lambda m: m.name),
        estimated_byte_savings=estimate,
    )


class LegacyDetector:
    """Runs detection over many scripts with a bounded worker pool."""

    def __init__(
        self,
        context: Optional[DetectionContext] = None,
        parallel_config: Optional[ParallelConfig] = None,
        compression_ratio: float = 1.0,
    ):
        if compression_ratio < 0:
            raise ValueError(f"Compression ratio cannot be negative: {compression_ratio}")
        self.context = context or get_default_context()
        self.parallel_config = parallel_config or ParallelConfig()
        self.compression_ratio = compression_ratio

    def detect(self, script: Script, bundle: Optional[Bundle] = None) -> DetectionResult:
        """Detect legacy code in a single script."""
        source_map = bundle.map if bundle is not None else None
        return detect_legacy_javascript(script.content, source_map, context=self.context)

    def detect_across_scripts(
        self,
        scripts: list[Script],
        bundles: Optional[list[Bundle]] = None,
    ) -> DetectionReport:
        """
        Detect legacy code in every script.

        Scripts without signals are left out of the report. A script that
        fails is logged and listed in scan_errors; the rest still run.

        Args:
            scripts: Scripts to analyze
            bundles: Source-mapped bundles, matched to scripts by script_id

        Returns:
            DetectionReport in input order
        """
        bundles = bundles or []
        bundle_by_id = {bundle.script.script_id: bundle for bundle in bundles}
        report = DetectionReport(scripts_scanned=len(scripts))

        def run(script: Script) -> DetectionResult:
            return self.detect(script, bundle_by_id.get(script.script_id))

        for script, result, error in parallel_map_ordered(run, scripts, self.parallel_config):
            if error is not None:
                logger.warning("Failed to analyze %s: %s", script.url, error)
                report.scan_errors.append(f"{script.url}: {error}")
                continue
            if result is None or not result.matches:
                continue

            report.reports.append(
                ScriptReport(
                    script=script,
                    matches=result.matches,
                    estimated_byte_savings=result.estimated_byte_savings,
                    wasted_bytes=round(result.estimated_byte_savings * self.compression_ratio),
                )
            )

        if any(uses_core_js_2(bundle.sources) for bundle in bundles):
            report.warnings.append(CORE_JS_2_WARNING)

        return report
