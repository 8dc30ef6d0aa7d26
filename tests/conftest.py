"""Pytest configuration and fixtures."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path

import pytest

from legacy_hunter.core.estimator import DependencyGraph


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def small_graph() -> DependencyGraph:
    """A graph where three polyfills share helper module 0."""
    return DependencyGraph.from_dict(
        {
            "moduleSizes": [100, 10, 20, 30],
            "dependencies": {
                "Foo.prototype.a": [0, 1],
                "Foo.prototype.b": [0, 2],
                "Foo.prototype.c": [0, 3],
            },
            "maxSize": 1000,
        }
    )


@pytest.fixture
def legacy_project(temp_dir: Path):
    """Create a build output with legacy and modern scripts."""
    dist = temp_dir / "dist"
    dist.mkdir()

    # Polyfilled by direct assignment
    (dist / "legacy.js").write_text("String.prototype.repeat = function(n) { return n; };\n")

    # Nothing to find
    (dist / "modern.js").write_text('const message = "hello world";\nconsole.log(message);\n')

    # Bundle whose polyfills only show up in its source map
    (dist / "bundle.js").write_text("console.log(1);\n//# sourceMappingURL=bundle.js.map\n")
    (dist / "bundle.js.map").write_text(
        json.dumps(
            {
                "version": 3,
                "sources": [
                    "src/main.js",
                    "node_modules/core-js/modules/es.object.entries.js",
                ],
                "mappings": "AAAA",
            }
        )
    )

    # Not a script
    (dist / "styles.css").write_text("body { color: red; }")

    # Dependencies are skipped when walking a directory
    vendored = dist / "node_modules" / "lib"
    vendored.mkdir(parents=True)
    (vendored / "index.js").write_text("Array.prototype.forEach = function() {};")

    yield dist
