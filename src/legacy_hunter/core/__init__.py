"""Core detection and estimation functionality."""

from __future__ import annotations

from .analyzer import Analyzer
from .correlator import Bundle
from .detector import (
    DetectionContext,
    DetectionReport,
    DetectionResult,
    LegacyDetector,
    Script,
    detect_legacy_javascript,
)
from .matcher import CodePatternMatcher, Match
from .scanner import ScriptCollector
from .sourcemap import SourceMap, SourceMapError

__all__ = [
    "Analyzer",
    "Bundle",
    "CodePatternMatcher",
    "DetectionContext",
    "DetectionReport",
    "DetectionResult",
    "LegacyDetector",
    "Match",
    "Script",
    "ScriptCollector",
    "SourceMap",
    "SourceMapError",
    "detect_legacy_javascript",
]
