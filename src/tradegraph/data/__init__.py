"""Market data back ends consumed by the data tools."""

from tradegraph.data.aggregator import (
    DataAggregator,
    Fundamentals,
    NewsItem,
    SentimentSummary,
    summarize_sentiment,
)
from tradegraph.data.yahoo import YFinanceAggregator

__all__ = [
    "DataAggregator",
    "Fundamentals",
    "NewsItem",
    "SentimentSummary",
    "summarize_sentiment",
    "YFinanceAggregator",
]
