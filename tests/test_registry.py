"""Tests for tradegraph.tool.registry (ToolRegistryBuilder, ToolRegistry)."""

from __future__ import annotations

import logging
from typing import ClassVar

import pytest
from pydantic import BaseModel

from tradegraph.tool.base import BaseTool, ToolOk, ToolResult
from tradegraph.tool.registry import ToolRegistry, ToolRegistryBuilder


class _Params(BaseModel):
    symbol: str = ""


def _make_tool(tool_name: str, tool_description: str, reply: str = "ok") -> BaseTool:
    class _Tool(BaseTool[_Params]):
        name: ClassVar[str] = tool_name
        description: ClassVar[str] = tool_description
        param_model: ClassVar[type[BaseModel]] = _Params

        async def execute(self, params: _Params) -> ToolResult:
            return ToolOk(output=reply)

    return _Tool()


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------


class TestBuilder:
    def test_builder_classmethod(self) -> None:
        assert isinstance(ToolRegistry.builder(), ToolRegistryBuilder)

    def test_register_chains(self) -> None:
        registry = (
            ToolRegistry.builder()
            .register(_make_tool("a", "first"))
            .register(_make_tool("b", "second"))
            .build()
        )
        assert registry.names() == ["a", "b"]
        assert len(registry) == 2

    def test_register_many(self) -> None:
        registry = (
            ToolRegistry.builder()
            .register_many([_make_tool("a", "x"), _make_tool("b", "y")])
            .build()
        )
        assert "a" in registry and "b" in registry
        assert "c" not in registry

    def test_last_registration_wins(self, caplog) -> None:
        builder = ToolRegistry.builder().register(_make_tool("a", "old"))
        with caplog.at_level(logging.WARNING):
            builder.register(_make_tool("a", "new"))
        registry = builder.build()
        assert len(registry) == 1
        tool = registry.get("a")
        assert tool is not None
        assert tool.description == "new"
        assert "already registered" in caplog.text

    def test_build_snapshot_is_independent(self) -> None:
        builder = ToolRegistry.builder().register(_make_tool("a", "x"))
        registry = builder.build()
        builder.register(_make_tool("b", "y"))
        assert registry.names() == ["a"]


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class TestRegistry:
    def test_get_unknown_returns_none(self) -> None:
        assert ToolRegistry().get("missing") is None

    def test_describe(self) -> None:
        registry = ToolRegistry(
            [
                _make_tool("fundamentals", "Company fundamentals"),
                _make_tool("news", "Recent news"),
            ]
        )
        assert registry.describe() == (
            "- fundamentals: Company fundamentals\n- news: Recent news"
        )

    def test_describe_empty(self) -> None:
        assert ToolRegistry().describe() == ""

    def test_subset(self, caplog) -> None:
        registry = ToolRegistry(
            [_make_tool("a", "x"), _make_tool("b", "y"), _make_tool("c", "z")]
        )
        with caplog.at_level(logging.WARNING):
            sub = registry.subset(["c", "a", "missing"])
        assert sub.names() == ["c", "a"]
        assert "missing" in caplog.text

    def test_read_only(self) -> None:
        registry = ToolRegistry([_make_tool("a", "x")])
        with pytest.raises(TypeError):
            registry._tools["b"] = _make_tool("b", "y")  # type: ignore[index]


# ---------------------------------------------------------------------------
# Dispatch
# ---------------------------------------------------------------------------


class TestDispatch:
    async def test_dispatch_known(self) -> None:
        registry = ToolRegistry([_make_tool("a", "x", reply="result")])
        assert await registry.dispatch("a", {"symbol": "TSLA"}) == "result"

    async def test_dispatch_unknown(self) -> None:
        registry = ToolRegistry(
            [_make_tool("fundamentals", "x"), _make_tool("news", "y")]
        )
        result = await registry.dispatch("quote", {})
        assert result == (
            "Error: unknown tool 'quote'. Available tools: fundamentals, news"
        )

    async def test_dispatch_unknown_empty_registry(self) -> None:
        result = await ToolRegistry().dispatch("quote", {})
        assert result == "Error: unknown tool 'quote'. Available tools: (none)"
