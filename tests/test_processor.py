"""Tests for file discovery and the parallel extraction orchestrator."""

import os
from pathlib import Path

import pytest

from codegraph_indexer.discovery import collect_files
from codegraph_indexer.graph import CodeGraph
from codegraph_indexer.models import NodeType
from codegraph_indexer.processor import (
    extract_file,
    process_codebase_parallel,
    resolve_thread_count,
)


def _signature(graph: CodeGraph):
    return sorted(
        (n.file_path, n.name, n.node_type.value, n.line_range) for n in graph.all_nodes()
    )


class TestCollectFiles:
    """Tests for source discovery."""

    def test_filters_and_sorts(self, write_files):
        root = write_files({
            "b.py": "x = 1\n",
            "a/c.go": "package a\n",
            "README.md": "# readme\n",
            "data.json": "{}\n",
        })
        files = collect_files(root)

        assert files == sorted(files)
        assert [f.name for f in files] == ["c.go", "b.py"]
        assert all(f.is_absolute() for f in files)

    def test_skips_vendor_directories(self, write_files):
        root = write_files({
            "src/main.py": "pass\n",
            "node_modules/lib/index.js": "module.exports = {}\n",
            ".git/hooks/pre-commit.py": "pass\n",
            "target/debug/build.rs": "fn main() {}\n",
        })
        assert [f.name for f in collect_files(root)] == ["main.py"]

    def test_custom_skip_dirs(self, write_files):
        root = write_files({"keep/a.py": "pass\n", "generated/b.py": "pass\n"})
        names = [f.name for f in collect_files(root, skip_dirs={"generated"})]
        assert names == ["a.py"]

    def test_symlink_aliases_collapse(self, write_files):
        """A file reachable through a symlink is listed once, by its canonical path."""
        root = write_files({"real/mod.py": "def only_once():\n    pass\n"})
        try:
            os.symlink(root / "real", root / "alias", target_is_directory=True)
        except (OSError, NotImplementedError):
            pytest.skip("symlinks not supported")

        files = collect_files(root)
        assert files == [(root / "real" / "mod.py").resolve()]

    def test_file_symlink_collapses_to_target(self, write_files):
        """Two directory entries for one file yield a single canonical path."""
        root = write_files({"real.py": "def only_once():\n    pass\n"})
        try:
            os.symlink(root / "real.py", root / "alias.py")
        except (OSError, NotImplementedError):
            pytest.skip("symlinks not supported")

        assert collect_files(root) == [(root / "real.py").resolve()]

    def test_file_symlink_indexed_once(self, write_files):
        root = write_files({"real.py": "def only_once():\n    pass\n"})
        try:
            os.symlink(root / "real.py", root / "alias.py")
        except (OSError, NotImplementedError):
            pytest.skip("symlinks not supported")

        graph = process_codebase_parallel(root, 2)
        assert len(graph.find_by_name("only_once")) == 1

    def test_missing_root(self, temp_dir: Path):
        with pytest.raises(FileNotFoundError):
            collect_files(temp_dir / "nope")

    def test_root_is_a_file(self, write_files):
        root = write_files({"a.py": "pass\n"})
        with pytest.raises(NotADirectoryError):
            collect_files(root / "a.py")


class TestResolveThreadCount:
    """Tests for thread count normalization."""

    @pytest.mark.parametrize("value,expected", [(4, 4), ("3", 3), (1, 1)])
    def test_positive_values_pass_through(self, value, expected):
        assert resolve_thread_count(value) == expected

    @pytest.mark.parametrize("value", [0, -2, None, "abc", "", 1.5j])
    def test_invalid_values_fall_back_to_cpu_count(self, value, monkeypatch):
        monkeypatch.setattr(os, "cpu_count", lambda: 7)
        assert resolve_thread_count(value) == 7

    def test_invalid_value_is_logged(self, caplog, monkeypatch):
        monkeypatch.setattr(os, "cpu_count", lambda: 2)
        with caplog.at_level("WARNING"):
            resolve_thread_count("many")
        assert "Invalid thread count" in caplog.text


class TestExtractFile:
    """Tests for single-file extraction."""

    def test_unsupported_language(self, write_files):
        root = write_files({"notes.txt": "hello\n"})
        assert extract_file(root / "notes.txt") == []

    def test_undecodable_file_raises(self, temp_dir: Path):
        path = temp_dir / "latin.py"
        path.write_bytes(b"name = '\xe9t\xe9'\n")
        with pytest.raises(UnicodeDecodeError):
            extract_file(path)

    def test_extracts_entities(self, write_files):
        root = write_files({"tools.py": "def sharpen():\n    pass\n"})
        names = {n.name for n in extract_file(root / "tools.py")}
        assert names == {"tools", "sharpen"}


class TestProcessCodebaseParallel:
    """Tests for the parallel orchestrator."""

    def test_builds_graph_from_sample_project(self, sample_project_path: Path):
        graph = process_codebase_parallel(sample_project_path, 2)

        names = {n.name for n in graph.all_nodes()}
        assert {"Store", "audit_change", "PriceClient", "formatPrice", "Queue",
                "Engine", "compute_total", "Main", "greet", "Counter", "clamp_value",
                "Tally", "normalize_key"} <= names
        assert graph.relationship_count() == 0
        assert len(graph.find_by_kind(NodeType.MODULE)) == 9

    def test_same_entities_for_any_thread_count(self, sample_project_path: Path):
        """Ids differ between runs; everything else about the entity set does not."""
        baseline = _signature(process_codebase_parallel(sample_project_path, 1))
        for threads in (2, 4, 8):
            assert _signature(process_codebase_parallel(sample_project_path, threads)) == baseline

    def test_bad_file_is_skipped(self, write_files, caplog):
        root = write_files({"good.py": "def keeper():\n    pass\n"})
        (root / "bad.py").write_bytes(b"def \xff\xfe():\n    pass\n")

        with caplog.at_level("WARNING"):
            graph = process_codebase_parallel(root, 2)

        files = {Path(n.file_path).name for n in graph.all_nodes()}
        assert files == {"good.py"}
        assert "bad.py" in caplog.text

    def test_progress_callback(self, write_files):
        root = write_files({"a.py": "pass\n", "b.go": "package b\n", "c.rs": "fn c() {}\n"})
        seen = []
        process_codebase_parallel(root, 3, progress=seen.append)
        assert sorted(p.name for p in seen) == ["a.py", "b.go", "c.rs"]

    def test_insertion_failure_propagates(self, write_files, monkeypatch):
        root = write_files({"a.py": "def boom_target():\n    pass\n"})

        def _fail(self, node):
            raise RuntimeError("store is broken")

        monkeypatch.setattr(CodeGraph, "add_node", _fail)
        with pytest.raises(RuntimeError, match="store is broken"):
            process_codebase_parallel(root, 2)

    def test_empty_tree(self, temp_dir: Path):
        graph = process_codebase_parallel(temp_dir, 2)
        assert graph.node_count() == 0
