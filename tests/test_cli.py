"""Integration tests for CLI commands."""

import json
from pathlib import Path

import pytest
import toml
from typer.testing import CliRunner

from codegraph_indexer import __version__
from codegraph_indexer.cli import app


runner = CliRunner()


@pytest.fixture
def indexed_graph(sample_project_path: Path, temp_dir: Path, isolated_config) -> Path:
    """Index the sample project once and return the JSON graph path."""
    output = temp_dir / "graph.json"
    result = runner.invoke(app, ["index", str(sample_project_path), str(output), "2"])
    assert result.exit_code == 0, result.output
    return output


class TestAppBasics:
    """Tests for help and version output."""

    def test_no_command_prints_help(self):
        result = runner.invoke(app, [])
        assert result.exit_code == 0
        assert "index" in result.output

    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestIndexCommand:
    """Tests for 'index'."""

    def test_missing_root_prints_usage(self, isolated_config):
        result = runner.invoke(app, ["index"])
        assert result.exit_code == 0
        assert "Usage" in result.output

    def test_index_sample_project(self, sample_project_path: Path, temp_dir: Path, isolated_config):
        output = temp_dir / "graph.json"
        result = runner.invoke(app, ["index", str(sample_project_path), str(output), "2", "json"])

        assert result.exit_code == 0, result.output
        assert "Nodes:" in result.output
        assert "Relationships:" in result.output

        doc = json.loads(output.read_text(encoding="utf-8"))
        names = {record["name"] for record in doc["nodes"].values()}
        assert "Store::add_item" in names
        assert "Engine::run" in names
        assert all(record["summary"] for record in doc["nodes"].values())

    def test_dot_format(self, sample_project_path: Path, temp_dir: Path, isolated_config):
        output = temp_dir / "graph.dot"
        result = runner.invoke(app, ["index", str(sample_project_path), str(output), "1", "dot"])

        assert result.exit_code == 0, result.output
        assert output.read_text(encoding="utf-8").startswith("digraph CodeGraph {")

    def test_unknown_format_falls_back_to_json(self, sample_project_path: Path, temp_dir: Path, isolated_config):
        output = temp_dir / "graph.out"
        result = runner.invoke(app, ["index", str(sample_project_path), str(output), "2", "xml"])

        assert result.exit_code == 0, result.output
        assert "nodes" in json.loads(output.read_text(encoding="utf-8"))

    def test_invalid_thread_count_uses_default(self, sample_project_path: Path, temp_dir: Path, isolated_config):
        output = temp_dir / "graph.json"
        result = runner.invoke(app, ["index", str(sample_project_path), str(output), "lots"])

        assert result.exit_code == 0, result.output
        assert output.exists()

    def test_missing_directory_fails(self, temp_dir: Path, isolated_config):
        output = temp_dir / "graph.json"
        result = runner.invoke(app, ["index", str(temp_dir / "nope"), str(output)])

        assert result.exit_code == 1
        assert not output.exists()

    def test_output_defaults_from_config(self, sample_project_path: Path, temp_dir: Path, isolated_config):
        configured = temp_dir / "configured.dot"
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text(
            toml.dumps({"indexer": {"output": str(configured), "format": "dot", "threads": 2}}),
            encoding="utf-8",
        )

        result = runner.invoke(app, ["index", str(sample_project_path)])

        assert result.exit_code == 0, result.output
        assert configured.read_text(encoding="utf-8").startswith("digraph")

    def test_non_string_format_in_config(self, sample_project_path: Path, temp_dir: Path, isolated_config):
        output = temp_dir / "graph.json"
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text(toml.dumps({"indexer": {"format": 7}}), encoding="utf-8")

        result = runner.invoke(app, ["index", str(sample_project_path), str(output), "1"])

        assert result.exit_code == 0, result.output
        assert "nodes" in json.loads(output.read_text(encoding="utf-8"))


class TestQueryCommands:
    """Tests for commands that read an exported graph."""

    def test_stats(self, indexed_graph: Path):
        result = runner.invoke(app, ["stats", str(indexed_graph)])
        assert result.exit_code == 0
        assert "Function" in result.output
        assert "Calls" in result.output
        assert "Contains" in result.output

    def test_callers(self, indexed_graph: Path):
        result = runner.invoke(app, ["callers", str(indexed_graph), "compute_total"])
        assert result.exit_code == 0
        assert "Engine::run" in result.output

    def test_callers_by_bare_method_name(self, indexed_graph: Path):
        result = runner.invoke(app, ["callers", str(indexed_graph), "add_item"])
        assert result.exit_code == 0
        assert "build_report" in result.output

    def test_callees(self, indexed_graph: Path):
        result = runner.invoke(app, ["callees", str(indexed_graph), "build_report"])
        assert result.exit_code == 0
        assert "Store::add_item" in result.output
        assert "summarize_store" in result.output

    def test_related(self, indexed_graph: Path):
        result = runner.invoke(app, ["related", str(indexed_graph), "audit_change", "--depth", "1"])
        assert result.exit_code == 0
        assert "Store::add_item" in result.output

    def test_references(self, indexed_graph: Path):
        result = runner.invoke(app, ["references", str(indexed_graph), "Store::add_item", "items"])
        assert result.exit_code == 0
        assert "2 reference(s)" in result.output

    def test_unknown_name(self, indexed_graph: Path):
        result = runner.invoke(app, ["callers", str(indexed_graph), "no_such_function"])
        assert result.exit_code == 1
        assert "No node named" in result.output

    def test_missing_graph_file(self, temp_dir: Path):
        result = runner.invoke(app, ["stats", str(temp_dir / "missing.json")])
        assert result.exit_code == 1


class TestConfigCommands:
    """Tests for 'show-config' and 'set-config'."""

    def test_show_defaults(self, isolated_config):
        result = runner.invoke(app, ["show-config"])
        assert result.exit_code == 0
        assert "threads" in result.output
        assert "code_graph.json" in result.output

    def test_set_then_show(self, isolated_config):
        result = runner.invoke(app, ["set-config", "--threads", "4", "--format", "dot"])
        assert result.exit_code == 0, result.output

        saved = toml.loads(isolated_config.read_text(encoding="utf-8"))
        assert saved["indexer"] == {"threads": 4, "format": "dot"}

    def test_rejects_unknown_format(self, isolated_config):
        result = runner.invoke(app, ["set-config", "--format", "xml"])
        assert result.exit_code == 1
        assert not isolated_config.exists()

    def test_nothing_to_update(self, isolated_config):
        result = runner.invoke(app, ["set-config"])
        assert result.exit_code == 0
        assert "Nothing to update" in result.output
