"""Token counting for rendered prompts.

Quantifies what each render format costs, so the token savings of toon and
compact over markdown can be measured for a concrete builder.
"""

from typing import TYPE_CHECKING

import tiktoken

from promptsmith.core.prompts.schema import describe_parameters
from promptsmith.core.prompts.state import PromptFormat

if TYPE_CHECKING:
    from promptsmith.core.config import PromptSmithConfig
    from promptsmith.core.prompts.base import SystemPromptBuilder
    from promptsmith.core.tool_protocol import ToolSpec

DEFAULT_MODEL = "gpt-4o"


class TokenCounter:
    """Counts tokens using tiktoken."""

    def __init__(self, model: str = DEFAULT_MODEL) -> None:
        """Initialize token counter with encoding cache.

        Args:
            model: Model used when a call does not name one
        """
        self.model = model
        self._encoding_cache: dict[str, tiktoken.Encoding] = {}

    @classmethod
    def from_config(cls, config: "PromptSmithConfig") -> "TokenCounter":
        """Create a counter for the configured ``token_model``."""
        return cls(model=config.token_model)

    def _get_encoding(self, model: str) -> tiktoken.Encoding:
        """Get tiktoken encoding for model with caching."""
        if model not in self._encoding_cache:
            try:
                encoding = tiktoken.encoding_for_model(model)
            except KeyError:
                # Unknown models fall back to cl100k_base
                encoding = tiktoken.get_encoding("cl100k_base")
            self._encoding_cache[model] = encoding
        return self._encoding_cache[model]

    def count_text(self, text: str, model: str | None = None) -> int:
        """Count tokens in text string.

        Args:
            text: Text to count tokens for
            model: Model name for encoding selection

        Returns:
            Number of tokens in the text
        """
        if not text:
            return 0

        encoding = self._get_encoding(model or self.model)
        return len(encoding.encode(text))

    def count_prompt(
        self,
        builder: "SystemPromptBuilder",
        prompt_format: PromptFormat | str | None = None,
        model: str | None = None,
    ) -> int:
        """Count tokens in a builder's rendered prompt.

        Args:
            builder: Builder to render
            prompt_format: Format to render (builder's configured format if None)
            model: Model name for encoding selection

        Returns:
            Token count of the rendered document
        """
        return self.count_text(builder.build(prompt_format), model)

    def count_tools(self, tools: list["ToolSpec"], model: str | None = None) -> int:
        """Count tokens for tool names, descriptions and parameter docs."""
        total_tokens = 0
        for tool in tools:
            total_tokens += self.count_text(tool.name, model)
            total_tokens += self.count_text(tool.description, model)
            for descriptor in describe_parameters(tool.parameters):
                total_tokens += self.count_text(
                    f"{descriptor.name} {descriptor.type_category} {descriptor.description}",
                    model,
                )
        return total_tokens

    def compare_formats(
        self, builder: "SystemPromptBuilder", model: str | None = None
    ) -> dict[str, int]:
        """Token count of the builder's prompt in every format.

        Returns:
            Mapping of format name to token count
        """
        return {fmt.value: self.count_prompt(builder, fmt, model) for fmt in PromptFormat}

    def savings(
        self, builder: "SystemPromptBuilder", model: str | None = None
    ) -> dict[str, float]:
        """Percent of markdown's tokens saved by each other format.

        Returns:
            Mapping of format name to percentage (0.0 when markdown is empty)
        """
        counts = self.compare_formats(builder, model)
        baseline = counts[PromptFormat.MARKDOWN.value]
        result = {}
        for name, count in counts.items():
            if name == PromptFormat.MARKDOWN.value:
                continue
            result[name] = (baseline - count) / baseline * 100 if baseline else 0.0
        return result
