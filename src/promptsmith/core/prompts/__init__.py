"""System prompt assembly and rendering.

Public API for building system prompts from a declarative configuration and
rendering them as markdown, toon or compact text.
"""

from promptsmith.core.prompts.base import SystemPromptBuilder
from promptsmith.core.prompts.cache import PromptCache
from promptsmith.core.prompts.renderers import (
    CompactRenderer,
    MarkdownRenderer,
    PromptRenderer,
    ToonRenderer,
    get_renderer,
    render,
)
from promptsmith.core.prompts.schema import (
    OPAQUE_SCHEMA,
    FieldDescriptor,
    Schema,
    coerce_schema,
    describe_parameters,
    from_json_schema,
    from_pydantic,
)
from promptsmith.core.prompts.sections import SECTION_ORDER, Section
from promptsmith.core.prompts.state import BuilderState, Constraint, Example, PromptFormat
from promptsmith.core.prompts.utils import (
    builder_from_config,
    create_configured_builder,
    create_prompt_builder,
)
from promptsmith.core.prompts.validation import (
    PromptValidator,
    ValidationIssue,
    ValidationResult,
    ValidatorConfig,
    create_validator,
    format_validation_result,
)

__all__ = [
    "BuilderState",
    "CompactRenderer",
    "Constraint",
    "Example",
    "FieldDescriptor",
    "MarkdownRenderer",
    "OPAQUE_SCHEMA",
    "PromptCache",
    "PromptFormat",
    "PromptRenderer",
    "PromptValidator",
    "SECTION_ORDER",
    "Schema",
    "Section",
    "SystemPromptBuilder",
    "ToonRenderer",
    "ValidationIssue",
    "ValidationResult",
    "ValidatorConfig",
    "builder_from_config",
    "coerce_schema",
    "create_configured_builder",
    "create_prompt_builder",
    "create_validator",
    "describe_parameters",
    "format_validation_result",
    "from_json_schema",
    "from_pydantic",
    "get_renderer",
    "render",
]
