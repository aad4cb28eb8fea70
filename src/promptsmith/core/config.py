"""Configuration system for PromptSmith.

Provides configuration loading, merging, and validation with precedence:
1. Environment variables (highest)
2. Project config (.promptsmith/config.json)
3. User profile (~/.promptsmith/profiles/<name>.json)
4. Defaults (lowest)
"""

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from promptsmith.core.exceptions import ConfigurationError
from promptsmith.core.prompts.state import PromptFormat
from promptsmith.core.prompts.validation import ValidatorConfig

CONFIG_DIR = ".promptsmith"


@dataclass
class PromptSmithConfig:
    """Defaults applied to builders created through ``create_prompt_builder``.

    ``validator`` holds validator switches by name, e.g.
    ``{"check_identity": False}``.
    """

    default_format: str = PromptFormat.MARKDOWN.value
    token_model: str = "gpt-4o"
    validator: dict[str, bool] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate configuration values."""
        try:
            self.default_format = PromptFormat.parse(self.default_format).value
        except ValueError as e:
            raise ConfigurationError(
                str(e), key="default_format", reason="unknown format"
            ) from e
        if not isinstance(self.token_model, str) or not self.token_model:
            raise ConfigurationError(
                f"token_model must be a non-empty string, got {self.token_model!r}",
                key="token_model",
            )
        # Raises ConfigurationError for unknown or non-boolean switches
        ValidatorConfig.from_dict(self.validator)

    @property
    def prompt_format(self) -> PromptFormat:
        return PromptFormat(self.default_format)

    def validator_config(self) -> ValidatorConfig:
        return ValidatorConfig.from_dict(self.validator)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PromptSmithConfig":
        """Create config from dictionary, ignoring unknown keys."""
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return cls(**filtered)


def _read_config_file(path: Path, label: str) -> PromptSmithConfig:
    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {label}: {e}", reason="invalid json") from e
    except OSError as e:
        raise ConfigurationError(f"Failed to load {label}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"{label} must contain a JSON object", reason="not an object")
    return PromptSmithConfig.from_dict(data)


def load_user_config(profile_name: str = "default") -> PromptSmithConfig:
    """Load user configuration from ~/.promptsmith/profiles/<name>.json.

    Args:
        profile_name: Name of profile to load (default: "default")

    Returns:
        PromptSmithConfig loaded from profile, or default config if not found

    Raises:
        ConfigurationError: If profile file is invalid
    """
    profile_path = Path.home() / CONFIG_DIR / "profiles" / f"{profile_name}.json"

    if not profile_path.exists():
        return PromptSmithConfig()

    return _read_config_file(profile_path, f"profile {profile_name}")


def load_project_config(project_root: Path | None = None) -> PromptSmithConfig | None:
    """Load project-specific configuration from .promptsmith/config.json.

    Args:
        project_root: Root directory to search (default: current directory)

    Returns:
        PromptSmithConfig if config file exists, None otherwise

    Raises:
        ConfigurationError: If config file is invalid
    """
    if project_root is None:
        project_root = Path.cwd()

    config_path = project_root / CONFIG_DIR / "config.json"

    if not config_path.exists():
        return None

    return _read_config_file(config_path, "project config")


def load_env_overrides() -> dict[str, Any]:
    """Load configuration overrides from environment variables.

    Supported environment variables:
    - PROMPTSMITH_FORMAT: Default render format (markdown, toon, compact)
    - PROMPTSMITH_TOKEN_MODEL: Model name used for token counting

    Returns:
        Dictionary of configuration overrides
    """
    overrides: dict[str, Any] = {}

    if fmt := os.getenv("PROMPTSMITH_FORMAT"):
        try:
            overrides["default_format"] = PromptFormat.parse(fmt).value
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid PROMPTSMITH_FORMAT: {fmt}", key="PROMPTSMITH_FORMAT"
            ) from e

    if model := os.getenv("PROMPTSMITH_TOKEN_MODEL"):
        overrides["token_model"] = model

    return overrides


def merge_configs(
    base: PromptSmithConfig,
    project: PromptSmithConfig | None = None,
    env_overrides: dict[str, Any] | None = None,
) -> PromptSmithConfig:
    """Merge configurations with precedence: env > project > base.

    Args:
        base: Base configuration (typically from user profile)
        project: Project-specific configuration (optional)
        env_overrides: Environment variable overrides (optional)

    Returns:
        Merged configuration
    """
    merged = base.to_dict()
    defaults = PromptSmithConfig().to_dict()

    if project:
        for key, value in project.to_dict().items():
            # Validator switches merge key by key
            if key == "validator" and isinstance(value, dict):
                merged.setdefault("validator", {}).update(value)
            elif value != defaults.get(key):
                merged[key] = value

    if env_overrides:
        merged.update(env_overrides)

    return PromptSmithConfig.from_dict(merged)


def load_config(
    profile_name: str = "default", project_root: Path | None = None
) -> PromptSmithConfig:
    """Load and merge all configuration sources.

    Args:
        profile_name: User profile to load (default: "default")
        project_root: Project root directory (default: current directory)

    Returns:
        Merged configuration

    Raises:
        ConfigurationError: If any config source is invalid
    """
    base_config = load_user_config(profile_name)
    project_config = load_project_config(project_root)
    env_overrides = load_env_overrides()
    return merge_configs(base_config, project_config, env_overrides)
