"""Tool metadata types and the tool export shape."""

import copy
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass
class ToolSpec:
    """Declarative description of one externally executed tool.

    ``parameters`` is opaque to the builder: a neutral ``Schema``, a JSON
    Schema dict or a pydantic model class. ``execute`` is never called here;
    it is only handed through to tool-calling integrations.
    """

    name: str
    description: str
    parameters: Any = None
    execute: Callable[..., Any] | None = None

    def __post_init__(self) -> None:
        """Validate tool definition structure."""
        if not isinstance(self.name, str):
            raise TypeError(f"Tool name must be str, got {type(self.name)}")
        if self.description is None:
            self.description = ""

    def _detached_parameters(self) -> Any:
        if isinstance(self.parameters, dict):
            return copy.deepcopy(self.parameters)
        return self.parameters

    def copy(self) -> "ToolSpec":
        """Copy the tool without sharing a mutable parameter dict."""
        return ToolSpec(
            name=self.name,
            description=self.description,
            parameters=self._detached_parameters(),
            execute=self.execute,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a snapshot dictionary that shares no mutable parameters."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": self._detached_parameters(),
            "execute": self.execute,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ToolSpec":
        """Create a tool from a dictionary; ``schema`` is accepted for ``parameters``."""
        parameters = data.get("parameters", data.get("schema"))
        return cls(
            name=data["name"],
            description=data.get("description", ""),
            parameters=parameters,
            execute=data.get("execute"),
        )


def format_tool_export(tools: list[ToolSpec]) -> dict[str, dict[str, Any]]:
    """Export tools keyed by name for tool-calling integrations.

    Args:
        tools: Registered tool specs, in registration order

    Returns:
        ``{name: {"description", "parameters", "execute"}}``; a later tool
        with a repeated name replaces the earlier entry
    """
    exported: dict[str, dict[str, Any]] = {}
    for tool in tools:
        exported[tool.name] = {
            "description": tool.description,
            "parameters": tool.parameters,
            "execute": tool.execute,
        }
    return exported
