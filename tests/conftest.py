"""Pytest configuration and fixtures for the indexer tests."""

import shutil
import tempfile
from pathlib import Path
from typing import Callable, Dict, Generator

import pytest

from codegraph_indexer.graph import CodeGraph
from codegraph_indexer.models import Node, NodeType, create_node


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmp = Path(tempfile.mkdtemp())
    yield tmp.resolve()
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def sample_project_path() -> Path:
    """Multi-language sample project shipped with the tests."""
    return Path(__file__).parent / "fixtures" / "sample_project"


@pytest.fixture
def isolated_config(temp_dir: Path, monkeypatch) -> Path:
    """Point the config file at a temporary location."""
    base_dir = temp_dir / "home"
    config_file = base_dir / "config.toml"
    monkeypatch.setattr("codegraph_indexer.config.BASE_DIR", base_dir)
    monkeypatch.setattr("codegraph_indexer.config.CONFIG_FILE", config_file)
    return config_file


@pytest.fixture
def write_files(temp_dir: Path) -> Callable[[Dict[str, str]], Path]:
    """Write ``{relative_path: content}`` under a fresh source root."""

    def _write(files: Dict[str, str]) -> Path:
        root = temp_dir / "src"
        for rel_path, content in files.items():
            path = root / rel_path
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        root.mkdir(parents=True, exist_ok=True)
        return root

    return _write


@pytest.fixture
def make_node() -> Callable[..., Node]:
    """Factory for nodes that never touch the filesystem."""

    def _make(
        name: str,
        node_type: NodeType = NodeType.FUNCTION,
        file_path: str = "/virtual/module.py",
        line_range=(1, 1),
        content: str = "",
        **metadata: str,
    ) -> Node:
        node = create_node(node_type, name, file_path, tuple(line_range), content)
        for key, value in metadata.items():
            node.add_metadata(key, value)
        return node

    return _make


@pytest.fixture
def empty_graph() -> CodeGraph:
    return CodeGraph()


@pytest.fixture
def sample_python_code() -> str:
    """Small Python module with a class, methods and calls."""
    return '''"""Sample module for testing."""

def hello(name):
    """Say hello."""
    return format_greeting(name)


def format_greeting(name):
    return f"Hello, {name}!"


class Calculator:
    """Simple calculator."""

    def add(self, a, b):
        return a + b

    def multiply(self, a, b):
        result = self.add(a, 0)
        for _ in range(b - 1):
            result = self.add(result, a)
        return result
'''
