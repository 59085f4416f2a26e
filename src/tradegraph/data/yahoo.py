"""Yahoo Finance data aggregator (via yfinance)."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any

from tradegraph.data.aggregator import (
    Fundamentals,
    NewsItem,
    SentimentSummary,
    keyword_score,
    summarize_sentiment,
)
from tradegraph.data.indicators import compute_indicators

logger = logging.getLogger(__name__)

SENTIMENT_SAMPLE = 20


class YFinanceAggregator:
    """DataAggregator backed by yfinance.

    Social sentiment is approximated from recent headlines with the
    keyword scorer, since Yahoo exposes no social feed.
    """

    def __init__(self, history_period: str = "6mo") -> None:
        self.history_period = history_period

    def _ticker(self, symbol: str) -> Any:
        import yfinance as yf  # lazy import, only needed for live data

        return yf.Ticker(symbol)

    def get_fundamental_data(self, symbol: str) -> Fundamentals:
        logger.info("Fetching fundamentals for %s", symbol)
        info = self._ticker(symbol).info or {}
        return Fundamentals(
            symbol=symbol,
            company_name=info.get("longName") or info.get("shortName") or symbol,
            market_cap=info.get("marketCap"),
            pe_ratio=info.get("trailingPE"),
            pb_ratio=info.get("priceToBook"),
            dividend_yield=info.get("dividendYield"),
            eps=info.get("trailingEps"),
            roe=info.get("returnOnEquity"),
            debt_to_equity=info.get("debtToEquity"),
            gross_margin=info.get("grossMargins"),
            industry=info.get("industry") or "N/A",
            sector=info.get("sector") or "N/A",
        )

    def get_technical_indicators(self, symbol: str) -> dict[str, float]:
        logger.info("Computing technical indicators for %s", symbol)
        history = self._ticker(symbol).history(
            period=self.history_period, interval="1d"
        )
        if history is None or history.empty or "Close" not in history:
            logger.warning("No price history for %s", symbol)
            return {}
        return compute_indicators(history["Close"].dropna())

    def get_news_data(self, symbol: str, limit: int = 5) -> list[NewsItem]:
        logger.info("Fetching %d news items for %s", limit, symbol)
        raw = self._ticker(symbol).news or []
        items = [_parse_news(entry) for entry in raw[: max(limit, 0)]]
        return [item for item in items if item.title]

    def get_social_media_sentiment(self, symbol: str) -> SentimentSummary:
        news = self.get_news_data(symbol, limit=SENTIMENT_SAMPLE)
        return summarize_sentiment(
            symbol,
            [f"{n.title} {n.summary}" for n in news],
            sources=[n.source for n in news if n.source],
        )


def _parse_news(entry: dict[str, Any]) -> NewsItem:
    """Normalize both yfinance news shapes (flat legacy and nested ``content``)."""
    content = entry.get("content")
    if isinstance(content, dict):
        provider = content.get("provider") or {}
        url = (content.get("canonicalUrl") or {}).get("url", "")
        title = content.get("title", "")
        summary = content.get("summary", "") or content.get("description", "")
        item = NewsItem(
            title=title,
            source=provider.get("displayName", ""),
            url=url,
            published_at=content.get("pubDate", ""),
            summary=summary,
        )
    else:
        published = entry.get("providerPublishTime")
        item = NewsItem(
            title=entry.get("title", ""),
            source=entry.get("publisher", ""),
            url=entry.get("link", ""),
            published_at=(
                dt.datetime.fromtimestamp(published, tz=dt.timezone.utc).isoformat()
                if published
                else ""
            ),
            summary=entry.get("summary", ""),
        )
    item.sentiment_score = round(keyword_score(f"{item.title} {item.summary}"), 4)
    return item
