"""Shared fakes: scripted chat providers, a counting tool, a canned data source."""

from __future__ import annotations

from typing import Callable, ClassVar

import pytest
from pydantic import BaseModel

from tradegraph.data.aggregator import Fundamentals, NewsItem, SentimentSummary
from tradegraph.llm.message import GenerationParams, Message
from tradegraph.tool.base import BaseTool, ToolOk, ToolResult
from tradegraph.tool.registry import ToolRegistry


class ScriptedProvider:
    """Replays canned completions in order and records every request."""

    def __init__(self, replies: list[str]) -> None:
        self.replies = list(replies)
        self.calls: list[list[Message]] = []
        self.params: list[GenerationParams | None] = []

    async def complete(
        self, messages: list[Message], params: GenerationParams | None = None
    ) -> str:
        self.calls.append(list(messages))
        self.params.append(params)
        if not self.replies:
            raise AssertionError("ScriptedProvider ran out of replies")
        return self.replies.pop(0)


class RoutingProvider:
    """Answers by matching a marker in the system prompt.

    ``routes`` maps a substring of the system prompt to a reply, or to a
    callable receiving the messages. The first matching marker wins.
    """

    def __init__(
        self,
        routes: dict[str, str | Callable[[list[Message]], str]],
        default: str = "Final Answer: HOLD",
    ) -> None:
        self.routes = routes
        self.default = default
        self.calls: list[list[Message]] = []

    async def complete(
        self, messages: list[Message], params: GenerationParams | None = None
    ) -> str:
        self.calls.append(list(messages))
        system = messages[0].content
        for marker, reply in self.routes.items():
            if marker in system:
                return reply(messages) if callable(reply) else reply
        return self.default


class EchoParams(BaseModel):
    symbol: str = ""


class CountingTool(BaseTool[EchoParams]):
    """Records each invocation and echoes the symbol back."""

    name: ClassVar[str] = "echo"
    description: ClassVar[str] = 'Echo the symbol. Input: {"symbol": "TSLA"}'
    param_model: ClassVar[type[BaseModel]] = EchoParams

    def __init__(self) -> None:
        self.calls: list[EchoParams] = []

    async def execute(self, params: EchoParams) -> ToolResult:
        self.calls.append(params)
        return ToolOk(output=f"echo:{params.symbol}")


class FakeAggregator:
    """DataAggregator with fixed payloads."""

    def __init__(self) -> None:
        self.requests: list[tuple[str, str]] = []

    def get_fundamental_data(self, symbol: str) -> Fundamentals:
        self.requests.append(("fundamentals", symbol))
        return Fundamentals(symbol=symbol, company_name="Tesla, Inc.", pe_ratio=60.5)

    def get_technical_indicators(self, symbol: str) -> dict[str, float]:
        self.requests.append(("indicators", symbol))
        return {"close": 250.0, "rsi_14": 55.2}

    def get_news_data(self, symbol: str, limit: int = 5) -> list[NewsItem]:
        self.requests.append(("news", symbol))
        items = [NewsItem(title=f"Headline {i}", source="Wire") for i in range(10)]
        return items[:limit]

    def get_social_media_sentiment(self, symbol: str) -> SentimentSummary:
        self.requests.append(("sentiment", symbol))
        return SentimentSummary(symbol=symbol, score=0.4, label="positive", post_count=12)


@pytest.fixture
def counting_tool() -> CountingTool:
    return CountingTool()


@pytest.fixture
def echo_registry(counting_tool: CountingTool) -> ToolRegistry:
    return ToolRegistry.builder().register(counting_tool).build()


@pytest.fixture
def aggregator() -> FakeAggregator:
    return FakeAggregator()


@pytest.fixture
def scripted() -> Callable[[list[str]], ScriptedProvider]:
    return ScriptedProvider


@pytest.fixture
def routed() -> type[RoutingProvider]:
    return RoutingProvider
