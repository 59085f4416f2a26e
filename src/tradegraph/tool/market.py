"""Market data tools: expose a DataAggregator to the reasoning loop."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, ClassVar

from pydantic import BaseModel, Field

from tradegraph.data.aggregator import DataAggregator, as_payload
from tradegraph.tool.base import BaseTool, ToolError, ToolOk, ToolResult
from tradegraph.tool.registry import ToolRegistry

DEFAULT_NEWS_LIMIT = 5


class SymbolParams(BaseModel):
    symbol: str = Field(default="", description="Ticker symbol, e.g. 'TSLA'.")


class NewsParams(SymbolParams):
    limit: int = Field(
        default=DEFAULT_NEWS_LIMIT, ge=1, le=50, description="Number of articles."
    )


class _AggregatorTool(BaseTool[SymbolParams]):
    """Shared plumbing: run the blocking aggregator call off the event loop."""

    param_model: ClassVar[type[BaseModel]] = SymbolParams

    def __init__(self, aggregator: DataAggregator) -> None:
        self._aggregator = aggregator

    async def _fetch(self, fn: Callable[..., Any], *args: Any) -> ToolResult:
        payload = await asyncio.to_thread(fn, *args)
        if not payload:
            return ToolError(
                output=f"Error: {self.name} returned no data for {args[0]!r}"
            )
        return ToolOk(output=self.to_json(as_payload(payload)))


class FundamentalsTool(_AggregatorTool):
    name: ClassVar[str] = "fundamentals"
    description: ClassVar[str] = (
        "Company fundamentals (market cap, valuation, dividend, EPS, margins). "
        'Input: {"symbol": "TSLA"}'
    )

    async def execute(self, params: SymbolParams) -> ToolResult:
        return await self._fetch(self._aggregator.get_fundamental_data, params.symbol)


class MarketIndicatorsTool(_AggregatorTool):
    name: ClassVar[str] = "market_indicators"
    description: ClassVar[str] = (
        "Technical indicators (RSI, MACD, moving averages, Bollinger bands). "
        'Input: {"symbol": "TSLA"}'
    )

    async def execute(self, params: SymbolParams) -> ToolResult:
        return await self._fetch(
            self._aggregator.get_technical_indicators, params.symbol
        )


class NewsTool(_AggregatorTool):
    name: ClassVar[str] = "news"
    description: ClassVar[str] = (
        "Recent news (title, source, summary, sentiment score). "
        'Input: {"symbol": "TSLA", "limit": 5}'
    )
    param_model: ClassVar[type[BaseModel]] = NewsParams

    async def execute(self, params: NewsParams) -> ToolResult:  # type: ignore[override]
        return await self._fetch(
            self._aggregator.get_news_data, params.symbol, params.limit
        )


class SocialSentimentTool(_AggregatorTool):
    name: ClassVar[str] = "social_sentiment"
    description: ClassVar[str] = (
        "Sentiment overview (overall score, positive/negative ratio, post count). "
        'Input: {"symbol": "TSLA"}'
    )

    async def execute(self, params: SymbolParams) -> ToolResult:
        return await self._fetch(
            self._aggregator.get_social_media_sentiment, params.symbol
        )


def build_market_tools(aggregator: DataAggregator) -> ToolRegistry:
    """Registry with the four standard data tools, in listing order."""
    return (
        ToolRegistry.builder()
        .register_many(
            [
                FundamentalsTool(aggregator),
                MarketIndicatorsTool(aggregator),
                NewsTool(aggregator),
                SocialSentimentTool(aggregator),
            ]
        )
        .build()
    )
