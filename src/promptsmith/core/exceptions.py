"""Exception hierarchy with error codes for PromptSmith.

The core has a single hard failure path (tool-name collision during merge);
everything else degrades gracefully or is reported through validation.
"""

from dataclasses import dataclass, field
from typing import Any

# Standard error codes
E_NOT_UNIQUE = "E_NOT_UNIQUE"
E_VALIDATION = "E_VALIDATION"


@dataclass
class PromptSmithException(Exception):  # noqa: N818
    """Base exception for all PromptSmith-specific errors.

    Provides structured error handling with error codes and metadata for
    consistent error reporting across the system.
    """

    message: str
    error_code: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        """Return human-readable error message."""
        return self.message

    def __post_init__(self) -> None:
        """Initialize the exception with the message."""
        super().__init__(self.message)


@dataclass
class ToolCollisionError(PromptSmithException):
    """Two builders being merged both register a tool with the same name.

    Raised before any state is modified, so the merge target is left intact.
    """

    tool_name: str = ""

    def __post_init__(self) -> None:
        """Initialize with tool-specific metadata."""
        if not self.error_code:
            self.error_code = E_NOT_UNIQUE
        if self.tool_name:
            self.metadata["tool_name"] = self.tool_name
        super().__post_init__()


@dataclass
class ConfigurationError(PromptSmithException):
    """Error in system configuration.

    Raised for invalid config values, unreadable config files or malformed
    environment overrides.
    """

    key: str = ""
    reason: str = ""

    def __post_init__(self) -> None:
        """Initialize with configuration-specific metadata."""
        if not self.error_code:
            self.error_code = E_VALIDATION
        if self.key:
            self.metadata["config_key"] = self.key
        if self.reason:
            self.metadata["reason"] = self.reason
        super().__post_init__()


def format_error_for_user(exception: PromptSmithException) -> str:
    """Format exception for user-friendly display.

    Args:
        exception: The promptsmith exception to format

    Returns:
        Human-readable error message without internal details
    """
    if isinstance(exception, ToolCollisionError):
        if exception.tool_name:
            return f"Tool '{exception.tool_name}' is already registered: {exception.message}"
        return f"Tool collision: {exception.message}"

    if isinstance(exception, ConfigurationError):
        if exception.key:
            return f"Configuration error '{exception.key}': {exception.message}"
        return f"Configuration error: {exception.message}"

    return str(exception.message)


def format_error_for_log(exception: PromptSmithException) -> dict[str, Any]:
    """Format exception for structured logging.

    Args:
        exception: The promptsmith exception to format

    Returns:
        Dictionary with structured error information for logs
    """
    log_data: dict[str, Any] = {
        "error_type": type(exception).__name__,
        "message": exception.message,
        "error_code": exception.error_code,
    }

    if exception.metadata:
        log_data["metadata"] = exception.metadata

    if isinstance(exception, ToolCollisionError):
        if exception.tool_name:
            log_data["tool_name"] = exception.tool_name

    elif isinstance(exception, ConfigurationError):
        if exception.key:
            log_data["config_key"] = exception.key
        if exception.reason:
            log_data["reason"] = exception.reason

    return log_data
