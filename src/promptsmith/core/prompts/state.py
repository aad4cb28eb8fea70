"""Builder state: the accumulated prompt configuration.

Holds the value objects (constraints, examples) and the ``BuilderState``
aggregate, along with its copy and merge rules.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Literal

from promptsmith.core.exceptions import ToolCollisionError
from promptsmith.core.tool_protocol import ToolSpec

ConstraintType = Literal["must", "must_not", "should", "should_not"]

# Rendering order, regardless of insertion order
CONSTRAINT_TYPES: tuple[str, ...] = ("must", "must_not", "should", "should_not")

EXAMPLE_FIELDS: tuple[str, ...] = ("user", "assistant", "input", "output", "explanation")


class PromptFormat(str, Enum):
    """Render targets."""

    MARKDOWN = "markdown"
    TOON = "toon"
    COMPACT = "compact"

    @classmethod
    def parse(cls, value: "PromptFormat | str") -> "PromptFormat":
        """Accept enum members or their string values."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            valid = ", ".join(f.value for f in cls)
            raise ValueError(f"Unknown prompt format '{value}', expected one of: {valid}") from None


@dataclass
class Constraint:
    """A behavioral rule with a severity."""

    type: str
    rule: str

    def __post_init__(self) -> None:
        if self.type not in CONSTRAINT_TYPES:
            raise ValueError(
                f"Constraint type must be one of {', '.join(CONSTRAINT_TYPES)}, got {self.type!r}"
            )

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type, "rule": self.rule}


@dataclass
class Example:
    """A few-shot example.

    ``user``/``assistant`` and ``input``/``output`` are two presentation
    styles; when both are populated the conversational pair wins.
    """

    user: str | None = None
    assistant: str | None = None
    input: str | None = None
    output: str | None = None
    explanation: str | None = None

    @property
    def is_empty(self) -> bool:
        return not (self.user or self.assistant or self.input or self.output)

    @property
    def signature(self) -> tuple[str, ...]:
        """Names of the populated fields, in canonical order."""
        return tuple(name for name in EXAMPLE_FIELDS if getattr(self, name))

    def to_dict(self) -> dict[str, str]:
        return {name: getattr(self, name) for name in self.signature}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Example":
        return cls(**{name: data.get(name) for name in EXAMPLE_FIELDS})


@dataclass
class BuilderState:
    """Everything a prompt is rendered from.

    List fields are append-only through the builder; scalars overwrite.
    """

    identity: str = ""
    capabilities: list[str] = field(default_factory=list)
    tools: list[ToolSpec] = field(default_factory=list)
    constraints: list[Constraint] = field(default_factory=list)
    examples: list[Example] = field(default_factory=list)
    guardrails_enabled: bool = False
    forbidden_topics: list[str] = field(default_factory=list)
    context: str = ""
    tone: str = ""
    output_format: str = ""
    error_handling: str = ""
    format: PromptFormat = PromptFormat.MARKDOWN

    def add_capabilities(self, capabilities: list[str]) -> None:
        self.capabilities.extend(c for c in capabilities if c)

    def add_constraint(self, constraint_type: str, rule: str) -> None:
        constraint = Constraint(constraint_type, rule)
        if rule:
            self.constraints.append(constraint)

    def add_examples(self, examples: list[Example]) -> None:
        self.examples.extend(ex for ex in examples if not ex.is_empty)

    def add_forbidden_topics(self, topics: list[str]) -> None:
        for topic in topics:
            if topic and topic not in self.forbidden_topics:
                self.forbidden_topics.append(topic)

    def constraints_of(self, constraint_type: str) -> list[Constraint]:
        return [c for c in self.constraints if c.type == constraint_type]

    def copy(self) -> "BuilderState":
        """Structural copy sharing no mutable containers with ``self``."""
        return BuilderState(
            identity=self.identity,
            capabilities=list(self.capabilities),
            tools=[tool.copy() for tool in self.tools],
            constraints=[Constraint(c.type, c.rule) for c in self.constraints],
            examples=[Example(**ex.__dict__) for ex in self.examples],
            guardrails_enabled=self.guardrails_enabled,
            forbidden_topics=list(self.forbidden_topics),
            context=self.context,
            tone=self.tone,
            output_format=self.output_format,
            error_handling=self.error_handling,
            format=self.format,
        )

    def merge(self, source: "BuilderState") -> None:
        """Fold ``source`` into this state.

        Raises:
            ToolCollisionError: If a source tool name is already registered
                here (or repeats within the source). Nothing is modified.
        """
        # ``source`` may be this state; read it before anything grows
        tools = [tool.copy() for tool in source.tools]
        constraints = [Constraint(c.type, c.rule) for c in source.constraints]
        examples = [Example(**ex.__dict__) for ex in source.examples]
        capabilities = list(source.capabilities)
        topics = list(source.forbidden_topics)

        names = {tool.name for tool in self.tools}
        for tool in tools:
            if tool.name in names:
                raise ToolCollisionError(
                    f'Cannot merge: duplicate tool name "{tool.name}". '
                    "Tools with the same name must be unique.",
                    tool_name=tool.name,
                )
            names.add(tool.name)

        for capability in capabilities:
            if capability not in self.capabilities:
                self.capabilities.append(capability)

        self.tools.extend(tools)
        self.constraints.extend(constraints)
        self.examples.extend(examples)

        if source.context:
            self.context = f"{self.context}\n\n{source.context}" if self.context else source.context

        if not self.tone:
            self.tone = source.tone
        if not self.output_format:
            self.output_format = source.output_format
        if not self.error_handling:
            self.error_handling = source.error_handling

        self.guardrails_enabled = self.guardrails_enabled or source.guardrails_enabled
        self.add_forbidden_topics(topics)

    def to_dict(self) -> dict[str, Any]:
        """Plain snapshot of the state."""
        return {
            "identity": self.identity,
            "capabilities": list(self.capabilities),
            "tools": [tool.to_dict() for tool in self.tools],
            "constraints": [c.to_dict() for c in self.constraints],
            "output_format": self.output_format,
            "tone": self.tone,
            "guardrails_enabled": self.guardrails_enabled,
            "forbidden_topics": list(self.forbidden_topics),
            "context": self.context,
            "examples": [ex.to_dict() for ex in self.examples],
            "error_handling": self.error_handling,
            "format": self.format.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BuilderState":
        """Rebuild a state from ``to_dict`` output, reapplying insertion rules."""
        state = cls(
            identity=data.get("identity", ""),
            guardrails_enabled=bool(data.get("guardrails_enabled", False)),
            context=data.get("context", ""),
            tone=data.get("tone", ""),
            output_format=data.get("output_format", ""),
            error_handling=data.get("error_handling", ""),
            format=PromptFormat.parse(data.get("format", PromptFormat.MARKDOWN)),
        )
        state.add_capabilities(data.get("capabilities", []))
        state.tools.extend(
            tool if isinstance(tool, ToolSpec) else ToolSpec.from_dict(tool)
            for tool in data.get("tools", [])
        )
        for constraint in data.get("constraints", []):
            state.add_constraint(constraint["type"], constraint["rule"])
        state.add_examples(
            [ex if isinstance(ex, Example) else Example.from_dict(ex) for ex in data.get("examples", [])]
        )
        state.add_forbidden_topics(data.get("forbidden_topics", []))
        return state
