"""Compiler transform signatures.

Each expression is a string found in the transform's runtime support code.
Those strings live in throw statements, so minifiers leave them alone.
"""

from __future__ import annotations

import re
from typing import Union

from legacy_hunter.patterns.base import Pattern


def count_occurrences(content: str, pattern: Union[str, re.Pattern[str]]) -> int:
    """Count non-overlapping occurrences of a substring or compiled regex."""
    if isinstance(pattern, str):
        return content.count(pattern)
    return sum(1 for _ in pattern.finditer(content))


_REGENERATOR_WRAP_RE = re.compile(r"regeneratorRuntime\(?\)?\.a?wrap")
_SPREAD_CALL_RE = re.compile(r"\.apply\(void 0,\s?_toConsumableArray")


def _estimate_classes(content: str) -> int:
    # _classCallCheck / _defineProperties / _createClass / _toPropertyKey / _toPrimitive
    # cost ~1000 bytes, plus one _classCallCheck() call per constructor after the definition.
    calls = count_occurrences(content, "_classCallCheck") - 1
    return max(0, 1000 + calls * len("_classCallCheck()"))


def _estimate_regenerator(content: str) -> int:
    # regeneratorRuntime.awrap is emitted for every await, ~80 bytes each
    return count_occurrences(content, _REGENERATOR_WRAP_RE) * 80


def _estimate_spread(content: str) -> int:
    per_call = len("_toConsumableArray()")
    return 1169 + count_occurrences(content, _SPREAD_CALL_RE) * per_call


TRANSFORM_PATTERNS: list[Pattern] = [
    # @babel/plugin-transform-classes
    #   function _classCallCheck(a, n) {
    #     if (!(a instanceof n)) throw new TypeError("Cannot call a class as a function");
    #   }
    Pattern(
        name="@babel/plugin-transform-classes",
        expression="Cannot call a class as a function",
        estimate_bytes=_estimate_classes,
    ),
    # @babel/plugin-transform-regenerator (generators and async functions)
    Pattern(
        name="@babel/plugin-transform-regenerator",
        expression="Generator is already running|regeneratorRuntime",
        estimate_bytes=_estimate_regenerator,
    ),
    # @babel/plugin-transform-spread
    #   [].concat(_toConsumableArray(a)) / f.apply(void 0, _toConsumableArray(a))
    Pattern(
        name="@babel/plugin-transform-spread",
        expression="Invalid attempt to spread non-iterable instance",
        estimate_bytes=_estimate_spread,
    ),
]


def get_transform_patterns() -> list[Pattern]:
    """Return the fixed transform signature catalog."""
    return list(TRANSFORM_PATTERNS)
