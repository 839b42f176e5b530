"""Tests for configuration loading."""

import pytest

from prledger_core.config import load_config, load_system_message


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["model"] == "openai"
    assert config["retries"] == 3
    assert config["timeout_ms"] == 120000
    assert config["max_files"] == 150
    assert config["review_draft_prs"] is False
    assert "!dist/**" in config["path_filters"]


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".prledger.yml"
    cfg.write_text("model: anthropic\nmax_files: 30\n")
    config = load_config(config_path=str(cfg))
    assert config["model"] == "anthropic"
    assert config["max_files"] == 30


def test_path_filters_loaded(tmp_path):
    cfg = tmp_path / ".prledger.yml"
    cfg.write_text("path_filters:\n  - 'src/**'\n  - '!**/*.lock'\n")
    config = load_config(config_path=str(cfg))
    assert config["path_filters"] == ["src/**", "!**/*.lock"]


def test_empty_config_file(tmp_path):
    cfg = tmp_path / ".prledger.yml"
    cfg.write_text("")
    assert load_config(config_path=str(cfg))["model"] == "openai"


def test_cli_overrides_config_file(tmp_path):
    cfg = tmp_path / ".prledger.yml"
    cfg.write_text("model: openai\n")
    config = load_config(config_path=str(cfg), cli_overrides={"model": "anthropic"})
    assert config["model"] == "anthropic"


def test_none_cli_overrides_ignored(tmp_path):
    cfg = tmp_path / ".prledger.yml"
    cfg.write_text("model: anthropic\n")
    config = load_config(config_path=str(cfg), cli_overrides={"model": None})
    assert config["model"] == "anthropic"


def test_credentials_from_env(tmp_path, monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    config = load_config(config_path=str(tmp_path / "none.yml"))
    assert config["openai_api_key"] == "sk-test"
    assert config["anthropic_api_key"] is None


def test_defaults_not_shared_between_loads(tmp_path):
    first = load_config(config_path=str(tmp_path / "none.yml"))
    first["path_filters"].append("extra")
    second = load_config(config_path=str(tmp_path / "none.yml"))
    assert "extra" not in second["path_filters"]


class TestLoadSystemMessage:
    def test_unset_returns_none(self):
        assert load_system_message({"system_message": None}) is None

    def test_inline_text(self):
        assert load_system_message({"system_message": "Be terse."}) == "Be terse."

    def test_reads_file(self, tmp_path):
        path = tmp_path / "persona.md"
        path.write_text("# Persona")
        assert load_system_message({"system_message": str(path)}) == "# Persona"

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_system_message({"system_message": str(tmp_path / "missing.md")})
