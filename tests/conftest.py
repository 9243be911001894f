"""Shared fixtures for the typemap test suite."""

import importlib.util
from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures"


def pytest_collect_file(parent, file_path):  # noqa: ARG001
    """Skip every test file when the tree-sitter Rust grammar is not installed."""
    if file_path.name.startswith("test_") and file_path.suffix == ".py":
        for module in ("tree_sitter", "tree_sitter_rust"):
            if importlib.util.find_spec(module) is None:
                return None  # skip collection entirely


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES


@pytest.fixture
def example():
    """Build a fixture file by stem: ``example("ex1")``."""
    from typemap import build

    def _build(stem: str, **kwargs):
        return build(FIXTURES / f"{stem}.rs", **kwargs)

    return _build


@pytest.fixture
def graph_of():
    """Build the dependency graph of inline Rust source."""
    from typemap import TypeMap

    def _graph(source: str, **kwargs):
        return TypeMap.from_source(source, **kwargs).graph

    return _graph
