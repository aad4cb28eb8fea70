"""Core prompt builder.

``SystemPromptBuilder`` is a fluent, mutable container over a
``BuilderState``. Every mutator returns the builder for chaining and drops
all cached renders; ``build`` renders through the per-format cache.
"""

from collections.abc import Iterable
from typing import Any

from promptsmith.core.exceptions import ToolCollisionError, format_error_for_log
from promptsmith.core.logger import PromptSmithLogger, get_logger
from promptsmith.core.prompts.cache import PromptCache
from promptsmith.core.prompts.renderers import render
from promptsmith.core.prompts.state import (
    CONSTRAINT_TYPES,
    BuilderState,
    Constraint,
    Example,
    PromptFormat,
)
from promptsmith.core.prompts.validation import (
    PromptValidator,
    ValidationResult,
    ValidatorConfig,
)
from promptsmith.core.tool_protocol import ToolSpec, format_tool_export


def _as_tool(tool: ToolSpec | dict[str, Any]) -> ToolSpec:
    return tool if isinstance(tool, ToolSpec) else ToolSpec.from_dict(tool)


def _as_example(example: Example | dict[str, Any]) -> Example:
    return example if isinstance(example, Example) else Example.from_dict(example)


class SystemPromptBuilder:
    """Builds system prompts from a declarative configuration.

    Scalar setters overwrite, list setters append. Sections without data are
    left out of the rendered document.
    """

    def __init__(self, logger: PromptSmithLogger | None = None) -> None:
        """Initialize an empty builder."""
        self._state = BuilderState()
        self._cache = PromptCache()
        self._validator_config = ValidatorConfig()
        self._logger = logger or get_logger()

    def _touch(self) -> "SystemPromptBuilder":
        self._cache.invalidate()
        return self

    # Mutators

    def with_identity(self, text: str) -> "SystemPromptBuilder":
        """Set the agent's identity, replacing any previous one."""
        self._state.identity = text
        return self._touch()

    def with_capability(self, capability: str) -> "SystemPromptBuilder":
        self._state.add_capabilities([capability])
        return self._touch()

    def with_capabilities(self, capabilities: Iterable[str]) -> "SystemPromptBuilder":
        self._state.add_capabilities(list(capabilities))
        return self._touch()

    def with_tool(self, tool: ToolSpec | dict[str, Any]) -> "SystemPromptBuilder":
        """Register a tool.

        Names are not checked here; duplicates are reported by ``validate``.

        Args:
            tool: A ``ToolSpec`` or a dict with ``name``, ``description`` and
                ``parameters`` (or ``schema``)
        """
        self._state.tools.append(_as_tool(tool))
        return self._touch()

    def with_tools(self, tools: Iterable[ToolSpec | dict[str, Any]]) -> "SystemPromptBuilder":
        self._state.tools.extend(_as_tool(tool) for tool in tools)
        return self._touch()

    def with_tool_if(
        self, condition: bool, tool: ToolSpec | dict[str, Any]
    ) -> "SystemPromptBuilder":
        """Register ``tool`` only when ``condition`` is true."""
        if condition:
            return self.with_tool(tool)
        return self

    def with_constraint(self, constraint_type: str, rule: str) -> "SystemPromptBuilder":
        """Add a behavioral rule.

        Raises:
            ValueError: If ``constraint_type`` is not a known constraint type
        """
        self._state.add_constraint(constraint_type, rule)
        return self._touch()

    def with_constraints(
        self, constraint_type: str, rules: str | Iterable[str]
    ) -> "SystemPromptBuilder":
        """Add one rule or several rules of the same type."""
        if isinstance(rules, str):
            rules = [rules]
        for rule in rules:
            self._state.add_constraint(constraint_type, rule)
        return self._touch()

    def with_constraint_if(
        self, condition: bool, constraint_type: str, rules: str | Iterable[str]
    ) -> "SystemPromptBuilder":
        if condition:
            return self.with_constraints(constraint_type, rules)
        return self

    def with_output(self, output_format: str) -> "SystemPromptBuilder":
        self._state.output_format = output_format
        return self._touch()

    def with_tone(self, tone: str) -> "SystemPromptBuilder":
        self._state.tone = tone
        return self._touch()

    def with_guardrails(self) -> "SystemPromptBuilder":
        """Enable the fixed security guardrails section."""
        self._state.guardrails_enabled = True
        return self._touch()

    def with_forbidden_topics(self, topics: Iterable[str]) -> "SystemPromptBuilder":
        self._state.add_forbidden_topics(list(topics))
        return self._touch()

    def with_context(self, text: str) -> "SystemPromptBuilder":
        self._state.context = text
        return self._touch()

    def with_examples(
        self, examples: Iterable[Example | dict[str, Any]]
    ) -> "SystemPromptBuilder":
        """Append few-shot examples; examples with no content are skipped."""
        self._state.add_examples([_as_example(ex) for ex in examples])
        return self._touch()

    def with_error_handling(self, instructions: str) -> "SystemPromptBuilder":
        self._state.error_handling = instructions
        return self._touch()

    def with_format(self, prompt_format: PromptFormat | str) -> "SystemPromptBuilder":
        """Set the format ``build()`` uses when none is passed.

        Raises:
            ValueError: If the format name is unknown
        """
        self._state.format = PromptFormat.parse(prompt_format)
        return self._touch()

    def with_validator_config(
        self, config: ValidatorConfig | dict[str, bool]
    ) -> "SystemPromptBuilder":
        """Set the default validator switches used by ``validate``."""
        if not isinstance(config, ValidatorConfig):
            config = ValidatorConfig.from_dict(config)
        self._validator_config = config
        return self

    # Composition

    def extend(self) -> "SystemPromptBuilder":
        """Return an independent builder carrying a copy of this one's state.

        Later changes to either builder never show up in the other.
        """
        child = SystemPromptBuilder(logger=self._logger)
        child._state = self._state.copy()
        child._validator_config = ValidatorConfig.from_dict(self._validator_config.to_dict())
        return child

    def merge(self, source: "SystemPromptBuilder") -> "SystemPromptBuilder":
        """Fold another builder's configuration into this one.

        Identity and format stay as they are here. ``source`` is not modified.

        Raises:
            ToolCollisionError: If a tool name in ``source`` is already
                registered here. This builder is left unchanged.
        """
        try:
            self._state.merge(source._state)
        except ToolCollisionError as e:
            self._logger.error("builder_merge_collision", error=format_error_for_log(e))
            raise

        self._logger.debug(
            "builder_merge",
            tools=len(self._state.tools),
            constraints=len(self._state.constraints),
        )
        return self._touch()

    # Output

    def build(self, prompt_format: PromptFormat | str | None = None) -> str:
        """Render the system prompt.

        Args:
            prompt_format: Format to render; defaults to the configured one

        Returns:
            The rendered document, or ``""`` when nothing is configured
        """
        fmt = PromptFormat.parse(prompt_format) if prompt_format else self._state.format
        cached = self._cache.get(fmt)
        if cached is not None:
            return cached

        with self._logger.operation("prompt_render", format=fmt.value):
            text = render(self._state, fmt)
        self._cache.set(fmt, text)
        return text

    def get_tools(self) -> list[ToolSpec]:
        """Copies of the registered tools; editing them leaves the builder alone."""
        return [tool.copy() for tool in self._state.tools]

    def to_tool_export(self) -> dict[str, dict[str, Any]]:
        """Tools keyed by name, for tool-calling integrations."""
        return format_tool_export(self._state.tools)

    def to_ai_sdk(self) -> dict[str, Any]:
        """Bundle the rendered prompt and tool export.

        Returns:
            ``{"system": build(), "tools": to_tool_export()}``
        """
        return {"system": self.build(), "tools": self.to_tool_export()}

    def to_config(self) -> dict[str, Any]:
        """Snapshot of the full configuration; see ``from_config``."""
        return self._state.to_dict()

    @classmethod
    def from_config(
        cls, snapshot: dict[str, Any], logger: PromptSmithLogger | None = None
    ) -> "SystemPromptBuilder":
        """Rebuild a builder from a ``to_config`` snapshot."""
        builder = cls(logger=logger)
        builder._state = BuilderState.from_dict(snapshot)
        return builder

    # Introspection

    def has_identity(self) -> bool:
        return bool(self._state.identity)

    def has_capabilities(self) -> bool:
        return bool(self._state.capabilities)

    def has_tools(self) -> bool:
        return bool(self._state.tools)

    def has_constraints(self) -> bool:
        return bool(self._state.constraints)

    def has_examples(self) -> bool:
        return bool(self._state.examples)

    def has_guardrails(self) -> bool:
        return self._state.guardrails_enabled

    def has_forbidden_topics(self) -> bool:
        return bool(self._state.forbidden_topics)

    def get_constraints_by_type(self, constraint_type: str) -> list[Constraint]:
        return [Constraint(c.type, c.rule) for c in self._state.constraints_of(constraint_type)]

    def get_summary(self) -> dict[str, Any]:
        """Counts and flags describing the current configuration."""
        state = self._state
        return {
            "has_identity": bool(state.identity),
            "capabilities_count": len(state.capabilities),
            "tools_count": len(state.tools),
            "constraints_count": len(state.constraints),
            "examples_count": len(state.examples),
            "has_guardrails": state.guardrails_enabled,
            "forbidden_topics_count": len(state.forbidden_topics),
            "format": state.format.value,
            "constraints_by_type": {
                constraint_type: len(state.constraints_of(constraint_type))
                for constraint_type in CONSTRAINT_TYPES
            },
        }

    def validate(
        self, config: ValidatorConfig | dict[str, bool] | None = None
    ) -> ValidationResult:
        """Run the validator over the current state.

        Args:
            config: Switches applied on top of the builder's defaults
        """
        overrides = config.to_dict() if isinstance(config, ValidatorConfig) else config
        validator = PromptValidator(self._validator_config.updated(overrides))
        return validator.validate(self._state)

    def get_cache_stats(self) -> dict[str, Any]:
        return self._cache.get_stats()

    def debug(self) -> "SystemPromptBuilder":
        """Log the summary, validation counts and rendered prompt."""
        result = self.validate()
        self._logger.info(
            "builder_debug",
            summary=self.get_summary(),
            valid=result.valid,
            errors=len(result.errors),
            warnings=len(result.warnings),
            info=len(result.info),
            prompt=self.build(),
        )
        return self
