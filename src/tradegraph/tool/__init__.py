"""Tool system: base classes, registry, market data tools."""

from tradegraph.tool.base import BaseTool, ToolError, ToolOk, ToolResult
from tradegraph.tool.market import build_market_tools
from tradegraph.tool.registry import ToolRegistry, ToolRegistryBuilder
from tradegraph.tool.truncation import truncate_output

__all__ = [
    "BaseTool",
    "ToolResult",
    "ToolOk",
    "ToolError",
    "ToolRegistry",
    "ToolRegistryBuilder",
    "build_market_tools",
    "truncate_output",
]
