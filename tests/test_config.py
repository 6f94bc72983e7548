"""Tests for configuration loading."""

from pathlib import Path
from cc_scaffold.config import Config, DEFAULT_IGNORED_DIRS


def test_config_defaults():
    config = Config()

    assert config.output_dir == Path(".claude")
    assert config.backup_keep == 5
    assert config.scan_file_limit == 30
    assert config.analysis_timeout == 300
    assert config.analysis_stall_timeout == 30
    assert config.claude_binary == "claude"


def test_config_from_env_overrides(monkeypatch):
    """Environment variables should override defaults."""
    monkeypatch.setenv("CC_SCAFFOLD_OUTPUT_DIR", ".assistant")
    monkeypatch.setenv("CC_SCAFFOLD_BACKUP_KEEP", "2")
    monkeypatch.setenv("CC_SCAFFOLD_ANALYSIS_TIMEOUT", "60")
    monkeypatch.setenv("CC_SCAFFOLD_CLAUDE_BINARY", "/opt/claude")
    monkeypatch.setenv("CC_SCAFFOLD_IGNORED_DIRS", "tmp, .mypy_cache")

    config = Config.from_env()

    assert config.output_dir == Path(".assistant")
    assert config.backup_keep == 2
    assert config.analysis_timeout == 60
    assert config.claude_binary == "/opt/claude"

    # New ignored directories are appended to defaults
    assert set(DEFAULT_IGNORED_DIRS).issubset(set(config.ignored_dirs))
    assert "tmp" in config.ignored_dirs
    assert ".mypy_cache" in config.ignored_dirs


def test_invalid_integers_fall_back(monkeypatch):
    monkeypatch.setenv("CC_SCAFFOLD_SCAN_MAX_DEPTH", "deep")
    monkeypatch.setenv("CC_SCAFFOLD_ANALYSIS_STALL_TIMEOUT", "")

    config = Config.from_env()

    assert config.scan_max_depth == 6
    assert config.analysis_stall_timeout == 30
