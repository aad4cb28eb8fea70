"""Core modules for PromptSmith.

This package contains the prompt engine along with the exceptions, logging,
configuration, token counting and tool protocol it is built on.
"""

from .exceptions import (
    # Error codes
    E_NOT_UNIQUE,
    E_VALIDATION,
    ConfigurationError,
    PromptSmithException,
    ToolCollisionError,
    format_error_for_log,
    format_error_for_user,
)
from .logger import PromptSmithLogger, get_logger
from .tool_protocol import ToolSpec, format_tool_export

# prompts must be fully imported before config, which depends on it
from .prompts import PromptFormat, SystemPromptBuilder  # isort: skip
from .config import PromptSmithConfig, load_config  # isort: skip
from .tokens import TokenCounter  # isort: skip

__all__ = [
    # Error codes
    "E_NOT_UNIQUE",
    "E_VALIDATION",
    # Exception classes
    "ConfigurationError",
    "PromptSmithException",
    "ToolCollisionError",
    # Other core components
    "PromptFormat",
    "PromptSmithConfig",
    "PromptSmithLogger",
    "SystemPromptBuilder",
    "TokenCounter",
    "ToolSpec",
    # Helpers
    "format_error_for_log",
    "format_error_for_user",
    "format_tool_export",
    "get_logger",
    "load_config",
]
