"""
PromptSmith

Assemble AI agent system prompts from a fluent, declarative configuration and
render them as markdown, token-lean toon, or whitespace-compact text.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from promptsmith.core.config import PromptSmithConfig, load_config
from promptsmith.core.exceptions import (
    ConfigurationError,
    PromptSmithException,
    ToolCollisionError,
)
from promptsmith.core.prompts import (
    Example,
    PromptFormat,
    PromptValidator,
    Schema,
    SystemPromptBuilder,
    ValidationResult,
    ValidatorConfig,
    create_prompt_builder,
    create_validator,
    format_validation_result,
)
from promptsmith.core.tokens import TokenCounter
from promptsmith.core.tool_protocol import ToolSpec

__all__ = [
    # Version
    "__version__",
    # Builder
    "SystemPromptBuilder",
    "create_prompt_builder",
    "Example",
    "PromptFormat",
    "Schema",
    "ToolSpec",
    # Validation
    "PromptValidator",
    "ValidationResult",
    "ValidatorConfig",
    "create_validator",
    "format_validation_result",
    # Config and tokens
    "PromptSmithConfig",
    "load_config",
    "TokenCounter",
    # Exceptions
    "PromptSmithException",
    "ToolCollisionError",
    "ConfigurationError",
]
