"""Tool registry: build once, then resolve, describe and dispatch."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Iterable

from tradegraph.tool.base import BaseTool

logger = logging.getLogger(__name__)


class ToolRegistryBuilder:
    """Collects tools before freezing them into a :class:`ToolRegistry`.

    Registration order is kept; registering a name twice replaces the
    earlier tool in its original position.
    """

    def __init__(self) -> None:
        self._tools: dict[str, BaseTool] = {}

    def register(self, tool: BaseTool) -> ToolRegistryBuilder:
        """Register a tool instance."""
        if tool.name in self._tools:
            logger.warning("Tool %s already registered, overwriting", tool.name)
        self._tools[tool.name] = tool
        return self

    def register_many(self, tools: Iterable[BaseTool]) -> ToolRegistryBuilder:
        """Register multiple tools."""
        for tool in tools:
            self.register(tool)
        return self

    def build(self) -> ToolRegistry:
        return ToolRegistry(self._tools.values())


class ToolRegistry:
    """Read-only registry of available tools.

    Built once at agent construction time and shared by reference; there
    is no way to add or remove tools afterwards, so concurrent readers need
    no locking.
    """

    def __init__(self, tools: Iterable[BaseTool] = ()) -> None:
        by_name: dict[str, BaseTool] = {}
        for tool in tools:
            by_name[tool.name] = tool
        self._tools = MappingProxyType(by_name)

    @classmethod
    def builder(cls) -> ToolRegistryBuilder:
        return ToolRegistryBuilder()

    def get(self, name: str) -> BaseTool | None:
        """Resolve a tool by name."""
        return self._tools.get(name)

    def names(self) -> list[str]:
        """Get all registered tool names, in registration order."""
        return list(self._tools.keys())

    def describe(self) -> str:
        """Bullet list of ``name: description`` for the system prompt."""
        return "\n".join(tool.describe() for tool in self._tools.values())

    def subset(self, names: Iterable[str]) -> ToolRegistry:
        """Create a new registry with only the specified tools."""
        picked = []
        for name in names:
            tool = self._tools.get(name)
            if tool:
                picked.append(tool)
            else:
                logger.warning("Tool %s not found in registry", name)
        return ToolRegistry(picked)

    def unknown_tool_message(self, name: str) -> str:
        available = ", ".join(self.names()) or "(none)"
        return f"Error: unknown tool '{name}'. Available tools: {available}"

    async def dispatch(self, name: str, arguments: dict[str, Any]) -> str:
        """Invoke the named tool and return its observation text."""
        tool = self._tools.get(name)
        if tool is None:
            return self.unknown_tool_message(name)
        return await tool(arguments)

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools
