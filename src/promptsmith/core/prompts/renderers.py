"""Document renderers.

Each renderer turns a ``BuilderState`` into one serialization of the system
prompt. All of them share the section contract from ``sections.py``: a
section is emitted only when it has data, always in ``SECTION_ORDER``.
Renderers are pure and never raise for structurally valid state.
"""

import re
from abc import ABC, abstractmethod

from promptsmith.core.prompts.schema import FieldDescriptor, describe_parameters
from promptsmith.core.prompts.sections import (
    CONSTRAINT_HEADINGS,
    EXAMPLES_INTRO,
    GUARDRAIL_RULES,
    GUARDRAILS_INTRO,
    MARKDOWN_HEADINGS,
    RESTRICTIONS_DECLINE,
    RESTRICTIONS_INTRO,
    TOON_LABELS,
    TOON_RESTRICTIONS_POLICY,
    TOON_TOPICS_LABEL,
    Section,
    present_sections,
)
from promptsmith.core.prompts.state import (
    CONSTRAINT_TYPES,
    BuilderState,
    Example,
    PromptFormat,
)

# Minimum number of same-shaped examples before they collapse into a table
TABULAR_EXAMPLES_MIN = 3

INDENT = "  "


class PromptRenderer(ABC):
    """Base class for format back ends.

    Subclasses implement one method per section; ``render`` decides which
    sections appear and in what order.
    """

    format: PromptFormat

    def render(self, state: BuilderState) -> str:
        """Render every non-empty section of ``state``."""
        blocks = [self.render_section(section, state) for section in present_sections(state)]
        return self.join(blocks)

    def render_section(self, section: Section, state: BuilderState) -> str:
        handlers = {
            Section.IDENTITY: self.identity,
            Section.CONTEXT: self.context,
            Section.CAPABILITIES: self.capabilities,
            Section.TOOLS: self.tools,
            Section.EXAMPLES: self.examples,
            Section.CONSTRAINTS: self.constraints,
            Section.ERROR_HANDLING: self.error_handling,
            Section.GUARDRAILS: self.guardrails,
            Section.CONTENT_RESTRICTIONS: self.content_restrictions,
            Section.TONE: self.tone,
            Section.OUTPUT_FORMAT: self.output_format,
        }
        return handlers[section](state)

    @abstractmethod
    def join(self, blocks: list[str]) -> str: ...

    @abstractmethod
    def identity(self, state: BuilderState) -> str: ...

    @abstractmethod
    def context(self, state: BuilderState) -> str: ...

    @abstractmethod
    def capabilities(self, state: BuilderState) -> str: ...

    @abstractmethod
    def tools(self, state: BuilderState) -> str: ...

    @abstractmethod
    def examples(self, state: BuilderState) -> str: ...

    @abstractmethod
    def constraints(self, state: BuilderState) -> str: ...

    @abstractmethod
    def error_handling(self, state: BuilderState) -> str: ...

    @abstractmethod
    def guardrails(self, state: BuilderState) -> str: ...

    @abstractmethod
    def content_restrictions(self, state: BuilderState) -> str: ...

    @abstractmethod
    def tone(self, state: BuilderState) -> str: ...

    @abstractmethod
    def output_format(self, state: BuilderState) -> str: ...


def _requirement(descriptor: FieldDescriptor) -> str:
    return "required" if descriptor.required else "optional"


class MarkdownRenderer(PromptRenderer):
    """Header-delimited document meant for human readers."""

    format = PromptFormat.MARKDOWN

    def join(self, blocks: list[str]) -> str:
        return "".join(blocks).strip()

    def _text(self, section: Section, text: str) -> str:
        return f"{MARKDOWN_HEADINGS[section]}\n{text}\n"

    def identity(self, state: BuilderState) -> str:
        return self._text(Section.IDENTITY, state.identity)

    def context(self, state: BuilderState) -> str:
        return self._text(Section.CONTEXT, state.context)

    def capabilities(self, state: BuilderState) -> str:
        parts = [f"{MARKDOWN_HEADINGS[Section.CAPABILITIES]}\n"]
        parts.extend(f"{i}. {cap}\n" for i, cap in enumerate(state.capabilities, 1))
        return "".join(parts)

    def parameter_lines(self, parameters: object) -> str:
        lines = []
        for descriptor in describe_parameters(parameters):
            if descriptor.is_opaque:
                lines.append(f"- {descriptor.description}")
            else:
                lines.append(
                    f"- `{descriptor.name}` ({descriptor.type_category}, "
                    f"{_requirement(descriptor)}): {descriptor.description}"
                )
        return "\n".join(lines)

    def tools(self, state: BuilderState) -> str:
        parts = [f"{MARKDOWN_HEADINGS[Section.TOOLS]}\n"]
        for tool in state.tools:
            parts.append(f"## {tool.name}\n")
            parts.append(f"{tool.description}\n\n")
            parts.append("**Parameters:**\n")
            parts.append(f"{self.parameter_lines(tool.parameters)}\n")
        return "".join(parts)

    def examples(self, state: BuilderState) -> str:
        parts = [f"{MARKDOWN_HEADINGS[Section.EXAMPLES]}\n", f"{EXAMPLES_INTRO}\n\n"]
        for i, example in enumerate(state.examples, 1):
            parts.append(f"## Example {i}\n")
            input_label = "User" if example.user else "Input"
            output_label = "Assistant" if example.assistant else "Output"
            input_text = example.user or example.input
            output_text = example.assistant or example.output
            if input_text:
                parts.append(f"**{input_label}:** {input_text}\n\n")
            if output_text:
                parts.append(f"**{output_label}:** {output_text}\n\n")
            if example.explanation:
                parts.append(f"*{example.explanation}*\n\n")
        return "".join(parts)

    def constraints(self, state: BuilderState) -> str:
        headings = CONSTRAINT_HEADINGS[PromptFormat.MARKDOWN]
        parts = [f"{MARKDOWN_HEADINGS[Section.CONSTRAINTS]}\n"]
        for constraint_type in CONSTRAINT_TYPES:
            group = state.constraints_of(constraint_type)
            if not group:
                continue
            parts.append(f"{headings[constraint_type]}\n")
            parts.extend(f"- {c.rule}\n" for c in group)
            parts.append("\n")
        return "".join(parts)

    def error_handling(self, state: BuilderState) -> str:
        return self._text(Section.ERROR_HANDLING, state.error_handling)

    def guardrails(self, state: BuilderState) -> str:
        parts = [f"{MARKDOWN_HEADINGS[Section.GUARDRAILS]}\n", f"{GUARDRAILS_INTRO}\n\n"]
        for heading, _label, rules in GUARDRAIL_RULES:
            parts.append(f"{heading}\n")
            parts.extend(f"- {rule}\n" for rule in rules)
            parts.append("\n")
        return "".join(parts)

    def content_restrictions(self, state: BuilderState) -> str:
        parts = [
            f"{MARKDOWN_HEADINGS[Section.CONTENT_RESTRICTIONS]}\n",
            f"{RESTRICTIONS_INTRO}\n\n",
        ]
        parts.extend(f"{i}. {topic}\n" for i, topic in enumerate(state.forbidden_topics, 1))
        parts.append(f"\n{RESTRICTIONS_DECLINE}\n\n")
        return "".join(parts)

    def tone(self, state: BuilderState) -> str:
        return self._text(Section.TONE, state.tone)

    def output_format(self, state: BuilderState) -> str:
        return self._text(Section.OUTPUT_FORMAT, state.output_format)


_HORIZONTAL_RUN = re.compile(r"[ \t]{2,}")
_BLANK_RUN = re.compile(r"\n{3,}")


class CompactRenderer(MarkdownRenderer):
    """Markdown content with redundant whitespace removed."""

    format = PromptFormat.COMPACT

    def join(self, blocks: list[str]) -> str:
        return compact_whitespace(super().join(blocks))


def compact_whitespace(text: str) -> str:
    """Strip every line, squeeze space runs and cap blank lines at one."""
    lines = [_HORIZONTAL_RUN.sub(" ", line.strip()) for line in text.split("\n")]
    return _BLANK_RUN.sub("\n\n", "\n".join(lines)).strip()


def _indent(text: str, level: int = 1) -> list[str]:
    prefix = INDENT * level
    return [f"{prefix}{line}" if line else "" for line in text.split("\n")]


def _labeled(label: str, value: str, level: int) -> list[str]:
    first, *rest = value.split("\n")
    lines = [f"{INDENT * level}{label}: {first}"]
    for line in rest:
        lines.append(f"{INDENT * (level + 1)}{line}" if line else "")
    return lines


def _quote(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


class ToonRenderer(PromptRenderer):
    """Indentation-structured, token-lean rendering.

    Sections are ``Label:`` lines with indented bodies; lists declare their
    length inline as ``Label[N]:``.
    """

    format = PromptFormat.TOON

    def join(self, blocks: list[str]) -> str:
        return "\n".join(blocks)

    def _text(self, section: Section, text: str) -> str:
        return "\n".join([f"{TOON_LABELS[section]}:", *_indent(text)])

    def _list(self, label: str, items: list[str], level: int = 0) -> list[str]:
        lines = [f"{INDENT * level}{label}[{len(items)}]:"]
        for item in items:
            lines.extend(_indent(item, level + 1))
        return lines

    def identity(self, state: BuilderState) -> str:
        return self._text(Section.IDENTITY, state.identity)

    def context(self, state: BuilderState) -> str:
        return self._text(Section.CONTEXT, state.context)

    def capabilities(self, state: BuilderState) -> str:
        return "\n".join(self._list(TOON_LABELS[Section.CAPABILITIES], state.capabilities))

    def tools(self, state: BuilderState) -> str:
        lines = [f"{TOON_LABELS[Section.TOOLS]}[{len(state.tools)}]:"]
        for tool in state.tools:
            lines.append(f"{INDENT}{tool.name}:")
            if tool.description:
                lines.extend(_indent(tool.description, 2))
            descriptors = describe_parameters(tool.parameters)
            if not descriptors:
                continue
            lines.append(f"{INDENT * 2}Parameters:")
            for descriptor in descriptors:
                if descriptor.is_opaque:
                    lines.append(f"{INDENT * 3}{descriptor.description}")
                else:
                    lines.append(
                        f"{INDENT * 3}{descriptor.name}({descriptor.type_category},"
                        f"{_requirement(descriptor)}): {descriptor.description}"
                    )
        return "\n".join(lines)

    def examples(self, state: BuilderState) -> str:
        examples = state.examples
        label = TOON_LABELS[Section.EXAMPLES]
        signatures = {example.signature for example in examples}
        if len(examples) >= TABULAR_EXAMPLES_MIN and len(signatures) == 1:
            fields = examples[0].signature
            lines = [f"{label}[{len(examples)}]{{{','.join(fields)}}}:"]
            for example in examples:
                row = ",".join(_quote(getattr(example, name)) for name in fields)
                lines.append(f"{INDENT}{row}")
            return "\n".join(lines)

        lines = [f"{label}[{len(examples)}]:"]
        for i, example in enumerate(examples, 1):
            lines.append(f"{INDENT}Example {i}:")
            lines.extend(self._example_fields(example))
        return "\n".join(lines)

    def _example_fields(self, example: Example) -> list[str]:
        lines: list[str] = []
        input_label = "User" if example.user else "Input"
        output_label = "Assistant" if example.assistant else "Output"
        input_text = example.user or example.input
        output_text = example.assistant or example.output
        if input_text:
            lines.extend(_labeled(input_label, input_text, 2))
        if output_text:
            lines.extend(_labeled(output_label, output_text, 2))
        if example.explanation:
            lines.extend(_labeled("Explanation", example.explanation, 2))
        return lines

    def constraints(self, state: BuilderState) -> str:
        labels = CONSTRAINT_HEADINGS[PromptFormat.TOON]
        lines = [f"{TOON_LABELS[Section.CONSTRAINTS]}:"]
        for constraint_type in CONSTRAINT_TYPES:
            group = state.constraints_of(constraint_type)
            if group:
                lines.extend(self._list(labels[constraint_type], [c.rule for c in group], 1))
        return "\n".join(lines)

    def error_handling(self, state: BuilderState) -> str:
        return self._text(Section.ERROR_HANDLING, state.error_handling)

    def guardrails(self, state: BuilderState) -> str:
        lines = [f"{TOON_LABELS[Section.GUARDRAILS]}:"]
        for _heading, label, rules in GUARDRAIL_RULES:
            lines.append(f"{INDENT}{label}:")
            lines.extend(f"{INDENT * 2}{rule}" for rule in rules)
        return "\n".join(lines)

    def content_restrictions(self, state: BuilderState) -> str:
        lines = [f"{TOON_LABELS[Section.CONTENT_RESTRICTIONS]}:"]
        lines.extend(self._list(TOON_TOPICS_LABEL, state.forbidden_topics, 1))
        lines.append(f"{INDENT}{TOON_RESTRICTIONS_POLICY}")
        return "\n".join(lines)

    def tone(self, state: BuilderState) -> str:
        return self._text(Section.TONE, state.tone)

    def output_format(self, state: BuilderState) -> str:
        return self._text(Section.OUTPUT_FORMAT, state.output_format)


RENDERERS: dict[PromptFormat, PromptRenderer] = {
    PromptFormat.MARKDOWN: MarkdownRenderer(),
    PromptFormat.TOON: ToonRenderer(),
    PromptFormat.COMPACT: CompactRenderer(),
}


def get_renderer(prompt_format: PromptFormat | str) -> PromptRenderer:
    """Look up the renderer for a format name or member."""
    return RENDERERS[PromptFormat.parse(prompt_format)]


def render(state: BuilderState, prompt_format: PromptFormat | str | None = None) -> str:
    """Render ``state`` in ``prompt_format`` (the state's own format by default)."""
    return get_renderer(prompt_format or state.format).render(state)
