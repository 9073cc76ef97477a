"""Shared fixtures and helpers for tests."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest
from tree_sitter import Parser
from tree_sitter_language_pack import get_parser

from twoslash.backend import InMemoryBackend

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# Backend factories
# ---------------------------------------------------------------------------


QUICK_INFO = {
    "a": "const a: 1",
    "b": "const b: 2",
    "hidden": "const hidden: 1",
    "value": "let value: number",
    "console": "var console: Console",
    "log": "(method) Console.log(...data: any[]): void",
}


class RecordingFactory:
    """Backend factory that remembers every backend and option set it was asked for."""

    def __init__(self, **backend_options: Any) -> None:
        self.backend_options = backend_options
        self.backends: list[InMemoryBackend] = []
        self.calls: list[dict[str, Any]] = []

    def __call__(self, compiler_options: dict[str, Any]) -> InMemoryBackend:
        self.calls.append(compiler_options)
        backend = InMemoryBackend(compiler_options, **self.backend_options)
        self.backends.append(backend)
        return backend

    @property
    def last(self) -> InMemoryBackend:
        return self.backends[-1]


@pytest.fixture
def make_factory() -> Callable[..., RecordingFactory]:
    """Return a builder for recording factories; ``quick_info`` defaults to ``QUICK_INFO``."""

    def _make(**backend_options: Any) -> RecordingFactory:
        backend_options.setdefault("quick_info", QUICK_INFO)
        return RecordingFactory(**backend_options)

    return _make


@pytest.fixture
def factory(make_factory: Callable[..., RecordingFactory]) -> RecordingFactory:
    return make_factory()


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------


@pytest.fixture
def typescript_parser() -> Parser:
    """Return a tree-sitter parser for TypeScript."""
    return get_parser("typescript")
