"""Tests for the TOML configuration manager."""

from pathlib import Path

import pytest
import toml

from codegraph_indexer import config_manager


class TestLoadConfig:
    """Tests for reading configuration."""

    def test_missing_file_gives_defaults(self, isolated_config: Path):
        assert not isolated_config.exists()
        assert config_manager.load_config() == config_manager.DEFAULT_CONFIG

    def test_file_values_override_defaults(self, isolated_config: Path):
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text(
            '[indexer]\nthreads = 6\nformat = "dot"\nunknown = 1\n', encoding="utf-8",
        )

        loaded = config_manager.load_config()
        assert loaded["threads"] == 6
        assert loaded["format"] == "dot"
        assert loaded["output"] == config_manager.DEFAULT_CONFIG["output"]
        assert "unknown" not in loaded

    def test_malformed_file_gives_defaults(self, isolated_config: Path, caplog):
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text("[indexer\nthreads = ", encoding="utf-8")

        with caplog.at_level("WARNING"):
            loaded = config_manager.load_config()

        assert loaded == config_manager.DEFAULT_CONFIG
        assert "Ignoring unreadable config file" in caplog.text

    def test_wrong_type_values_use_defaults(self, isolated_config: Path, caplog):
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text(
            "[indexer]\nformat = 3\noutput = \"graph.dot\"\nskip_dirs = \"vendor\"\n", encoding="utf-8",
        )

        with caplog.at_level("WARNING"):
            loaded = config_manager.load_config()

        assert loaded["format"] == config_manager.DEFAULT_CONFIG["format"]
        assert loaded["skip_dirs"] == []
        assert loaded["output"] == "graph.dot"
        assert "indexer.format" in caplog.text

    def test_defaults_are_not_shared(self, isolated_config: Path):
        loaded = config_manager.load_config()
        loaded["skip_dirs"].append("vendor")
        assert config_manager.DEFAULT_CONFIG["skip_dirs"] == []


class TestSaveConfig:
    """Tests for writing configuration."""

    def test_save_and_reload(self, isolated_config: Path):
        assert config_manager.save_config(threads=3, output="graph.dot", format="dot")
        loaded = config_manager.load_config()

        assert loaded["threads"] == 3
        assert loaded["output"] == "graph.dot"
        assert loaded["format"] == "dot"

    def test_other_sections_are_preserved(self, isolated_config: Path):
        isolated_config.parent.mkdir(parents=True)
        isolated_config.write_text('[editor]\ntheme = "dark"\n', encoding="utf-8")

        config_manager.save_config(threads=2)

        full = toml.loads(isolated_config.read_text(encoding="utf-8"))
        assert full["editor"] == {"theme": "dark"}
        assert full["indexer"] == {"threads": 2}

    def test_none_values_are_skipped(self, isolated_config: Path):
        config_manager.save_config(threads=5)
        config_manager.save_config(threads=None, output="out.json")

        loaded = config_manager.load_config()
        assert loaded["threads"] == 5
        assert loaded["output"] == "out.json"

    def test_unknown_key_rejected(self, isolated_config: Path):
        with pytest.raises(ValueError):
            config_manager.save_config(colour="blue")

    def test_explicit_path(self, temp_dir: Path):
        path = temp_dir / "custom.toml"
        config_manager.save_config(path, threads=9)
        assert config_manager.load_config(path)["threads"] == 9
