"""UI components for console output and logging."""

from __future__ import annotations

from .console import configure_logging, create_console, print_banner

__all__ = ["configure_logging", "create_console", "print_banner"]
