"""Per-format memoization of rendered prompts."""

from typing import Any

from promptsmith.core.prompts.state import PromptFormat


class PromptCache:
    """Rendered output keyed by format, guarded by a dirty flag.

    A fresh cache is dirty. ``set`` marks it clean; any builder mutation calls
    ``invalidate`` which drops every entry and marks it dirty again. Reads on
    a dirty cache always miss.
    """

    def __init__(self) -> None:
        self._entries: dict[PromptFormat, str] = {}
        self._dirty = True

    def get(self, prompt_format: PromptFormat | str) -> str | None:
        """Return the cached render for ``prompt_format``, or None on a miss."""
        if self._dirty:
            return None
        return self._entries.get(PromptFormat.parse(prompt_format))

    def set(self, prompt_format: PromptFormat | str, text: str) -> None:
        self._entries[PromptFormat.parse(prompt_format)] = text
        self._dirty = False

    def invalidate(self) -> None:
        self._entries.clear()
        self._dirty = True

    def clear(self) -> None:
        self.invalidate()

    def is_dirty(self) -> bool:
        return self._dirty

    def get_stats(self) -> dict[str, Any]:
        """Cache statistics.

        Returns:
            Dict with ``is_dirty``, ``cached_formats`` (format names) and
            ``cache_size`` (total cached characters)
        """
        return {
            "is_dirty": self._dirty,
            "cached_formats": [fmt.value for fmt in self._entries],
            "cache_size": sum(len(text) for text in self._entries.values()),
        }
