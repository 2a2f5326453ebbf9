"""Unit tests for config.py"""

import pytest
from pydantic import ValidationError

from mdcite.config import load_config


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Run each test in an empty directory with no MDCITE_* env vars."""
    monkeypatch.chdir(tmp_path)
    for name in ("SIMILARITY_THRESHOLD", "MAX_SUGGESTIONS", "FULL_FILES", "SCOPE_DIR", "LOG_LEVEL", "PARSER_CONFIG"):
        monkeypatch.delenv(f"MDCITE_{name}", raising=False)


def test_load_config_defaults():
    """Settings defaults are used when no config.yaml, env var, or CLI override exists."""
    settings = load_config()
    assert settings.similarity_threshold == 0.5
    assert settings.max_suggestions == 5
    assert settings.full_files is False
    assert settings.scope_dir is None
    assert settings.parser_config == "gfm-like"


def test_load_config_reads_config_yaml(tmp_path):
    (tmp_path / "config.yaml").write_text("similarity_threshold: 0.7\nscope_dir: docs\n")
    settings = load_config()
    assert settings.similarity_threshold == 0.7
    assert settings.scope_dir == "docs"


def test_load_config_env_overrides_config_yaml(tmp_path, monkeypatch):
    """MDCITE_MAX_SUGGESTIONS takes precedence over config.yaml and is coerced to int."""
    (tmp_path / "config.yaml").write_text("max_suggestions: 4\n")
    monkeypatch.setenv("MDCITE_MAX_SUGGESTIONS", "2")
    assert load_config().max_suggestions == 2


def test_load_config_env_bool(monkeypatch):
    monkeypatch.setenv("MDCITE_FULL_FILES", "true")
    assert load_config().full_files is True


def test_load_config_cli_overrides_env(monkeypatch):
    """A non-None CLI override beats the env var; None overrides are ignored."""
    monkeypatch.setenv("MDCITE_SCOPE_DIR", "/env/scope")
    assert load_config(overrides={"scope_dir": "/cli/scope"}).scope_dir == "/cli/scope"
    assert load_config(overrides={"scope_dir": None}).scope_dir == "/env/scope"


def test_load_config_invalid_yaml(tmp_path):
    """load_config raises ValueError when config.yaml contains invalid YAML."""
    (tmp_path / "config.yaml").write_text("key: [unclosed\n")
    with pytest.raises(ValueError, match="Invalid config.yaml"):
        load_config()


def test_load_config_rejects_out_of_range_threshold(monkeypatch):
    monkeypatch.setenv("MDCITE_SIMILARITY_THRESHOLD", "1.5")
    with pytest.raises(ValidationError):
        load_config()


def test_load_config_rejects_unknown_log_level(monkeypatch):
    monkeypatch.setenv("MDCITE_LOG_LEVEL", "LOUD")
    with pytest.raises(ValidationError):
        load_config()
