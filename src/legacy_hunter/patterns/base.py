"""Base signal pattern definitions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

# Transform signal names start with this prefix, polyfill names never do.
TRANSFORM_PREFIX = "@"


@dataclass(frozen=True)
class Pattern:
    """A detectable signal: a name and the regex fragment that finds it."""

    name: str
    expression: str  # Regex fragment, OR-joined with every other pattern
    estimate_bytes: Optional[Callable[[str], int]] = None  # Transforms only

    @property
    def is_transform(self) -> bool:
        """Return True if this pattern detects a compiler transform."""
        return is_transform_name(self.name)


@dataclass(frozen=True)
class PolyfillEntry:
    """One polyfilled feature from the polyfill module catalog."""

    name: str
    modules: tuple[str, ...]
    corejs: bool = False

    @property
    def core_js_module(self) -> str:
        """Return the core-js module id used for regex generation."""
        return self.modules[0]


def is_transform_name(name: str) -> bool:
    """Check if a signal name belongs to a transform rather than a polyfill."""
    return name.startswith(TRANSFORM_PREFIX)
