"""Configuration paths and indexing defaults."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(
    os.environ.get("CODEGRAPH_INDEXER_HOME", str(Path.home() / ".codegraph_indexer"))
).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"

DEFAULT_OUTPUT = "code_graph.json"
DEFAULT_FORMAT = "json"
LOG_LEVEL = os.environ.get("CODEGRAPH_INDEXER_LOG", "INFO").upper()

# Names shorter than this are ignored by call resolution.
MIN_NAME_LENGTH = 3

SKIP_DIRS = {
    ".git", ".hg", ".svn", ".venv", "venv", "__pycache__", "node_modules",
    "site-packages", ".tox", ".pytest_cache", ".mypy_cache", ".ruff_cache",
    "build", "dist", "target", ".eggs", ".idea", ".vscode",
}


def ensure_base_dirs() -> None:
    """Create the configuration directory if needed."""
    BASE_DIR.mkdir(parents=True, exist_ok=True)
