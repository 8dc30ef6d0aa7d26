"""Source map (v3) parsing with lookup by original source path."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional

BASE64_CHARS = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_BASE64_VALUES = {char: index for index, char in enumerate(BASE64_CHARS)}

_VLQ_CONTINUATION_BIT = 0x20
_VLQ_VALUE_MASK = 0x1F


class SourceMapError(ValueError):
    """Raised when a source map cannot be parsed."""


@dataclass(frozen=True)
class SourceMapEntry:
    """One decoded mapping segment (all positions 0-based)."""

    line_number: int
    column_number: int
    source_url: Optional[str] = None
    source_line_number: Optional[int] = None
    source_column_number: Optional[int] = None
    name: Optional[str] = None


def decode_vlq(segment: str) -> list[int] | None:
    """
    Decode a base64 VLQ segment into its signed integer fields.

    Returns:
        List of values, or None if the segment is not valid VLQ
    """
    values: list[int] = []
    shift = 0
    value = 0

    for char in segment:
        digit = _BASE64_VALUES.get(char)
        if digit is None:
            return None
        value += (digit & _VLQ_VALUE_MASK) << shift
        if digit & _VLQ_CONTINUATION_BIT:
            shift += 5
            continue
        negative = value & 1
        value >>= 1
        values.append(-value if negative else value)
        shift = 0
        value = 0

    if shift:
        # Ended in the middle of a value
        return None
    return values


class SourceMap:
    """
    A parsed source map.

    Mappings are decoded lazily on first use. Segments that do not decode or
    point outside the map's sources are skipped rather than failing the map.
    """

    def __init__(self, raw: dict[str, Any]):
        sources = raw.get("sources")
        mappings = raw.get("mappings", "")
        if not isinstance(sources, list) or not all(isinstance(s, str) for s in sources):
            raise SourceMapError("Source map 'sources' must be a list of strings")
        if not isinstance(mappings, str):
            raise SourceMapError("Source map 'mappings' must be a string")

        names = raw.get("names") or []
        self.raw = raw
        self.sources: list[str] = list(sources)
        self.names: list[str] = [n for n in names if isinstance(n, str)]
        self._mappings_text = mappings
        self._entries: list[SourceMapEntry] | None = None

    @classmethod
    def from_dict(cls, raw: Any) -> SourceMap:
        """Build a SourceMap from an already-parsed JSON object."""
        if not isinstance(raw, dict):
            raise SourceMapError("Source map must be a JSON object")
        return cls(raw)

    @classmethod
    def from_json(cls, text: str) -> SourceMap:
        """Parse source map JSON text."""
        # Some servers prefix maps with an XSSI guard line
        if text.startswith(")]}"):
            text = text.split("\n", 1)[1] if "\n" in text else ""
        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise SourceMapError(f"Invalid source map JSON: {e}") from e
        return cls.from_dict(raw)

    def mappings(self) -> list[SourceMapEntry]:
        """Return every decoded mapping entry, ordered by generated position."""
        if self._entries is None:
            self._entries = self._decode_mappings()
        return self._entries

    def find_entry_for_source(self, source_url: str) -> SourceMapEntry | None:
        """Return the first mapping whose original source is source_url."""
        for entry in self.mappings():
            if entry.source_url == source_url:
                return entry
        return None

    def _decode_mappings(self) -> list[SourceMapEntry]:
        entries: list[SourceMapEntry] = []
        source_index = 0
        source_line = 0
        source_column = 0
        name_index = 0

        for line_number, line in enumerate(self._mappings_text.split(";")):
            column = 0
            for segment in line.split(","):
                if not segment:
                    continue
                fields = decode_vlq(segment)
                if not fields or len(fields) not in (1, 4, 5):
                    continue

                column += fields[0]
                if column < 0:
                    continue
                if len(fields) == 1:
                    entries.append(SourceMapEntry(line_number=line_number, column_number=column))
                    continue

                source_index += fields[1]
                source_line += fields[2]
                source_column += fields[3]
                if not 0 <= source_index < len(self.sources):
                    continue

                name = None
                if len(fields) == 5:
                    name_index += fields[4]
                    if 0 <= name_index < len(self.names):
                        name = self.names[name_index]

                entries.append(
                    SourceMapEntry(
                        line_number=line_number,
                        column_number=column,
                        source_url=self.sources[source_index],
                        source_line_number=source_line,
                        source_column_number=source_column,
                        name=name,
                    )
                )

        return entries
