"""Tests for configuration loading."""

import pytest

from fixscout_core.config import DEFAULT_CONFIG, AnalysisSettings, build_settings, load_config
from fixscout_core.lookups import REPO_MAINTAINERS, SDK_REPOSITORIES


def test_defaults_applied_when_no_config_file(tmp_path):
    config = load_config(config_path=str(tmp_path / "nonexistent.yml"))
    assert config["model"] == "anthropic"
    assert config["batch_size"] == 5
    assert config["max_releases"] == 100
    assert config["max_high_candidates"] == 3
    assert config["max_medium_candidates"] == 5
    assert config["sdk_repositories"] == {}


def test_config_file_overrides_defaults(tmp_path):
    cfg = tmp_path / ".fixscout.yml"
    cfg.write_text("model: openai\nbatch_size: 3\n")
    config = load_config(config_path=str(cfg))
    assert config["model"] == "openai"
    assert config["batch_size"] == 3


def test_empty_config_file_is_allowed(tmp_path):
    cfg = tmp_path / ".fixscout.yml"
    cfg.write_text("")
    assert load_config(config_path=str(cfg))["model"] == "anthropic"


def test_cli_overrides_config_file(tmp_path):
    cfg = tmp_path / ".fixscout.yml"
    cfg.write_text("model: openai\n")
    config = load_config(config_path=str(cfg), cli_overrides={"model": "anthropic"})
    assert config["model"] == "anthropic"


def test_none_cli_overrides_ignored(tmp_path):
    cfg = tmp_path / ".fixscout.yml"
    cfg.write_text("model: openai\n")
    config = load_config(config_path=str(cfg), cli_overrides={"model": None})
    assert config["model"] == "openai"


def test_credentials_come_from_environment(tmp_path, monkeypatch):
    monkeypatch.setenv("GITHUB_TOKEN", "gh-tok")
    monkeypatch.setenv("SLACK_BOT_TOKEN", "xoxb-1")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    config = load_config(config_path=str(tmp_path / "none.yml"))
    assert config["github_token"] == "gh-tok"
    assert config["slack_bot_token"] == "xoxb-1"
    assert config["openai_api_key"] is None


def test_default_tables_are_not_shared_between_loads(tmp_path):
    first = load_config(config_path=str(tmp_path / "none.yml"))
    first["sdk_repositories"]["mine"] = "me/mine"
    second = load_config(config_path=str(tmp_path / "none.yml"))
    assert second["sdk_repositories"] == {}
    assert DEFAULT_CONFIG["sdk_repositories"] == {}


class TestBuildSettings:
    def test_defaults(self):
        settings = build_settings(dict(DEFAULT_CONFIG))
        assert settings == AnalysisSettings()

    def test_default_settings_use_builtin_tables(self):
        settings = AnalysisSettings()
        assert settings.sdk_repositories is SDK_REPOSITORIES
        assert settings.maintainers is REPO_MAINTAINERS
        assert AnalysisSettings(batch_size=2).sdk_repositories["ios"] == SDK_REPOSITORIES["ios"]

    def test_extra_repositories_merged_over_builtin_table(self):
        settings = build_settings({**DEFAULT_CONFIG, "sdk_repositories": {"Acme": "acme/acme-sdk"}})
        assert settings.sdk_repositories["acme"] == "acme/acme-sdk"
        assert settings.sdk_repositories["ios"] == SDK_REPOSITORIES["ios"]
        assert "acme" not in SDK_REPOSITORIES

    def test_extra_maintainers(self):
        settings = build_settings({**DEFAULT_CONFIG, "maintainers": {"acme/acme-sdk": ["@acme-team"]}})
        assert settings.maintainers["acme/acme-sdk"] == ("@acme-team",)

    def test_rejects_zero_batch_size(self):
        with pytest.raises(ValueError):
            build_settings({**DEFAULT_CONFIG, "batch_size": 0})
