"""Single-pass multi-pattern matcher for JavaScript source text."""

from __future__ import annotations

import re
from dataclasses import dataclass

from legacy_hunter.patterns import Pattern

_NEWLINE_GROUP = "newline"
_LINE_TERMINATOR_RE = re.compile(r"\r\n|\r|\n")


@dataclass(frozen=True)
class Match:
    """First occurrence of a signal in a file (0-based line and column)."""

    name: str
    line: int
    column: int


@dataclass
class LineCursor:
    """Tracks the current line while the scan moves through the text."""

    line: int = 0
    line_start: int = 0

    def advance(self, newline_end: int) -> None:
        """Move to the line that starts at newline_end."""
        self.line += 1
        self.line_start = newline_end

    def column_of(self, index: int) -> int:
        """Return the column of an absolute offset on the current line."""
        return index - self.line_start

    def skip(self, text: str, start: int, following: str = "") -> None:
        """Account for line terminators consumed inside a pattern match.

        A \\r that ends the match and is followed by \\n is left for the newline
        group, so the pair counts as one line break.
        """
        for terminator in _LINE_TERMINATOR_RE.finditer(text):
            if terminator.group() == "\r" and terminator.end() == len(text) and following.startswith("\n"):
                break
            self.advance(start + terminator.end())


class CodePatternMatcher:
    """
    Matches many patterns against code in a single scan.

    Every pattern becomes its own named group in one alternation regex, led
    by a group for line terminators. The group name, not its position, maps
    a hit back to its pattern. Only the first match per signal name is kept.
    """

    def __init__(self, patterns: list[Pattern]):
        self.patterns = list(patterns)
        self._group_to_pattern: dict[str, Pattern] = {}
        self._by_name: dict[str, Pattern] = {}

        alternatives = [rf"(?P<{_NEWLINE_GROUP}>\r\n|\r|\n)"]
        for index, pattern in enumerate(self.patterns):
            group = f"p{index}"
            self._group_to_pattern[group] = pattern
            self._by_name.setdefault(pattern.name, pattern)
            alternatives.append(f"(?P<{group}>{pattern.expression})")

        self.regex = re.compile("|".join(alternatives))

    def pattern_for(self, name: str) -> Pattern | None:
        """Look up a pattern by signal name."""
        return self._by_name.get(name)

    def match(self, code: str) -> list[Match]:
        """
        Scan code and return the first match of each signal, in text order.

        Args:
            code: JavaScript source text

        Returns:
            One Match per signal name found
        """
        seen: set[str] = set()
        matches: list[Match] = []
        cursor = LineCursor()

        for result in self.regex.finditer(code):
            # The wrapper group always closes last, so lastgroup names it.
            group = result.lastgroup
            if group == _NEWLINE_GROUP:
                cursor.advance(result.end())
                continue

            pattern = self._group_to_pattern[group]
            if pattern.name not in seen:
                seen.add(pattern.name)
                matches.append(
                    Match(
                        name=pattern.name,
                        line=cursor.line,
                        column=cursor.column_of(result.start()),
                    )
                )

            # Expressions such as `=[^=]` can swallow a line break.
            cursor.skip(result.group(), result.start(), code[result.end() : result.end() + 1])

        return matches
