"""Utility functions for working with prompts."""

from pathlib import Path
from typing import TYPE_CHECKING, Any

from promptsmith.core.logger import PromptSmithLogger
from promptsmith.core.prompts.base import SystemPromptBuilder

if TYPE_CHECKING:
    from promptsmith.core.config import PromptSmithConfig


def create_prompt_builder(
    config: "PromptSmithConfig | None" = None,
    logger: PromptSmithLogger | None = None,
) -> SystemPromptBuilder:
    """Create a builder with configured defaults applied.

    Args:
        config: Default format and validator switches (plain defaults if None)
        logger: Logger for the builder (shared package logger if None)

    Returns:
        An empty builder
    """
    builder = SystemPromptBuilder(logger=logger)
    if config is not None:
        builder.with_format(config.prompt_format)
        builder.with_validator_config(config.validator_config())
    return builder


def create_configured_builder(
    profile_name: str = "default",
    project_root: Path | None = None,
    logger: PromptSmithLogger | None = None,
) -> SystemPromptBuilder:
    """Create a builder from the merged profile, project and env configuration.

    Raises:
        ConfigurationError: If any config source is invalid
    """
    from promptsmith.core.config import load_config

    return create_prompt_builder(load_config(profile_name, project_root), logger=logger)


def builder_from_config(
    snapshot: dict[str, Any], logger: PromptSmithLogger | None = None
) -> SystemPromptBuilder:
    """Rebuild a builder from a ``to_config`` snapshot."""
    return SystemPromptBuilder.from_config(snapshot, logger=logger)
