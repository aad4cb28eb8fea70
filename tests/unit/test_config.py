"""Tests for configuration system."""

import json
from pathlib import Path

import pytest

from promptsmith.core.config import (
    PromptSmithConfig,
    load_config,
    load_env_overrides,
    load_project_config,
    load_user_config,
    merge_configs,
)
from promptsmith.core.exceptions import ConfigurationError
from promptsmith.core.prompts import PromptFormat, create_configured_builder

ENV_KEYS = ["PROMPTSMITH_FORMAT", "PROMPTSMITH_TOKEN_MODEL"]


@pytest.fixture
def clean_env(monkeypatch):
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def write_profile(home: Path, name: str, data) -> None:
    profile_dir = home / ".promptsmith" / "profiles"
    profile_dir.mkdir(parents=True, exist_ok=True)
    text = data if isinstance(data, str) else json.dumps(data)
    (profile_dir / f"{name}.json").write_text(text)


def write_project(root: Path, data) -> None:
    config_dir = root / ".promptsmith"
    config_dir.mkdir(parents=True, exist_ok=True)
    text = data if isinstance(data, str) else json.dumps(data)
    (config_dir / "config.json").write_text(text)


class TestPromptSmithConfig:
    def test_default_config(self):
        config = PromptSmithConfig()
        assert config.default_format == "markdown"
        assert config.token_model == "gpt-4o"
        assert config.validator == {}
        assert config.prompt_format is PromptFormat.MARKDOWN

    def test_format_normalized(self):
        config = PromptSmithConfig(default_format="TOON")
        assert config.default_format == "toon"

    def test_invalid_format(self):
        with pytest.raises(ConfigurationError, match="Unknown prompt format") as exc_info:
            PromptSmithConfig(default_format="yaml")
        assert exc_info.value.metadata["config_key"] == "default_format"

    def test_empty_token_model(self):
        with pytest.raises(ConfigurationError, match="token_model must be a non-empty string"):
            PromptSmithConfig(token_model="")

    def test_invalid_validator_switch(self):
        with pytest.raises(ConfigurationError, match="Unknown validator switch"):
            PromptSmithConfig(validator={"check_spelling": True})

    def test_validator_config(self):
        config = PromptSmithConfig(validator={"check_identity": False})
        validator_config = config.validator_config()
        assert validator_config.check_identity is False
        assert validator_config.check_recommendations is True

    def test_round_trip(self):
        config = PromptSmithConfig(default_format="compact", validator={"check_identity": False})
        data = config.to_dict()
        assert data == {
            "default_format": "compact",
            "token_model": "gpt-4o",
            "validator": {"check_identity": False},
        }
        assert PromptSmithConfig.from_dict({**data, "unknown": 1}) == config


class TestLoadUserConfig:
    def test_load_nonexistent_profile(self, tmp_path, monkeypatch):
        monkeypatch.setattr(Path, "home", lambda: tmp_path)
        assert load_user_config("nonexistent_profile_xyz") == PromptSmithConfig()

    def test_load_valid_profile(self, tmp_path, monkeypatch):
        write_profile(tmp_path, "test", {"default_format": "toon"})
        monkeypatch.setattr(Path, "home", lambda: tmp_path)

        config = load_user_config("test")
        assert config.default_format == "toon"

    def test_load_invalid_json(self, tmp_path, monkeypatch):
        write_profile(tmp_path, "bad", "{invalid json")
        monkeypatch.setattr(Path, "home", lambda: tmp_path)

        with pytest.raises(ConfigurationError, match="Invalid JSON in profile bad"):
            load_user_config("bad")

    def test_load_non_object(self, tmp_path, monkeypatch):
        write_profile(tmp_path, "list", [1, 2])
        monkeypatch.setattr(Path, "home", lambda: tmp_path)

        with pytest.raises(ConfigurationError, match="must contain a JSON object"):
            load_user_config("list")


class TestLoadProjectConfig:
    def test_load_nonexistent_project_config(self, tmp_path):
        assert load_project_config(tmp_path) is None

    def test_load_valid_project_config(self, tmp_path):
        write_project(tmp_path, {"token_model": "gpt-4", "validator": {"check_identity": False}})

        config = load_project_config(tmp_path)
        assert config.token_model == "gpt-4"
        assert config.validator == {"check_identity": False}

    def test_load_project_config_current_dir(self, tmp_path, monkeypatch):
        write_project(tmp_path, {"default_format": "compact"})
        monkeypatch.chdir(tmp_path)

        config = load_project_config()
        assert config.default_format == "compact"

    def test_load_invalid_project_json(self, tmp_path):
        write_project(tmp_path, "not json")

        with pytest.raises(ConfigurationError, match="Invalid JSON in project config"):
            load_project_config(tmp_path)


class TestEnvOverrides:
    def test_no_env_vars(self, clean_env):
        assert load_env_overrides() == {}

    def test_format_override(self, clean_env, monkeypatch):
        monkeypatch.setenv("PROMPTSMITH_FORMAT", "Toon")
        assert load_env_overrides() == {"default_format": "toon"}

    def test_model_override(self, clean_env, monkeypatch):
        monkeypatch.setenv("PROMPTSMITH_TOKEN_MODEL", "gpt-4o-mini")
        assert load_env_overrides() == {"token_model": "gpt-4o-mini"}

    def test_invalid_format(self, clean_env, monkeypatch):
        monkeypatch.setenv("PROMPTSMITH_FORMAT", "html")
        with pytest.raises(ConfigurationError, match="Invalid PROMPTSMITH_FORMAT: html"):
            load_env_overrides()


class TestMergeConfigs:
    def test_merge_base_only(self):
        base = PromptSmithConfig(default_format="toon")
        assert merge_configs(base) == base

    def test_merge_base_and_project(self):
        base = PromptSmithConfig(default_format="toon", token_model="gpt-4")
        project = PromptSmithConfig(token_model="gpt-4o-mini")

        merged = merge_configs(base, project)
        # Project values equal to defaults do not override the base
        assert merged.default_format == "toon"
        assert merged.token_model == "gpt-4o-mini"

    def test_merge_validator_dicts(self):
        base = PromptSmithConfig(validator={"check_identity": False})
        project = PromptSmithConfig(validator={"check_recommendations": False})

        merged = merge_configs(base, project)
        assert merged.validator == {"check_identity": False, "check_recommendations": False}

    def test_merge_with_env_overrides(self):
        base = PromptSmithConfig(default_format="toon")
        project = PromptSmithConfig(default_format="compact")

        merged = merge_configs(base, project, {"default_format": "markdown"})
        assert merged.default_format == "markdown"


class TestLoadConfig:
    def test_load_config_defaults_only(self, tmp_path, monkeypatch, clean_env):
        monkeypatch.setattr(Path, "home", lambda: tmp_path / "nonexistent")
        monkeypatch.chdir(tmp_path)

        assert load_config() == PromptSmithConfig()

    def test_load_config_full_precedence(self, tmp_path, monkeypatch, clean_env):
        home = tmp_path / "home"
        project = tmp_path / "project"
        write_profile(
            home,
            "default",
            {"default_format": "toon", "token_model": "gpt-4", "validator": {"check_identity": False}},
        )
        write_project(project, {"default_format": "compact"})
        monkeypatch.setattr(Path, "home", lambda: home)
        monkeypatch.setenv("PROMPTSMITH_TOKEN_MODEL", "gpt-4o-mini")

        config = load_config(project_root=project)
        assert config.default_format == "compact"
        assert config.token_model == "gpt-4o-mini"
        assert config.validator == {"check_identity": False}

    def test_create_configured_builder(self, tmp_path, monkeypatch, clean_env):
        monkeypatch.setattr(Path, "home", lambda: tmp_path / "nonexistent")
        write_project(tmp_path, {"default_format": "toon"})

        builder = create_configured_builder(project_root=tmp_path).with_identity("Agent")
        assert builder.build() == "Identity:\n  Agent"
