"""Market data aggregator interface and shared data types."""

from __future__ import annotations

import re
from dataclasses import asdict, dataclass, field, is_dataclass
from typing import Any, Protocol, runtime_checkable


@dataclass
class Fundamentals:
    """Company fundamentals snapshot."""

    symbol: str
    company_name: str = ""
    market_cap: float | None = None
    pe_ratio: float | None = None
    pb_ratio: float | None = None
    dividend_yield: float | None = None
    eps: float | None = None
    roe: float | None = None
    debt_to_equity: float | None = None
    gross_margin: float | None = None
    industry: str = "N/A"
    sector: str = "N/A"


@dataclass
class NewsItem:
    title: str
    source: str = ""
    url: str = ""
    published_at: str = ""
    summary: str = ""
    sentiment_score: float = 0.0


@dataclass
class SentimentSummary:
    """Aggregate sentiment over a batch of articles or posts."""

    symbol: str
    score: float = 0.0  # -1.0 (bearish) .. 1.0 (bullish)
    label: str = "neutral"
    positive_ratio: float = 0.0
    negative_ratio: float = 0.0
    post_count: int = 0
    sources: list[str] = field(default_factory=list)


@runtime_checkable
class DataAggregator(Protocol):
    """Market data back end consumed by the data tools.

    Implementations are synchronous; the tools run them off the event
    loop.
    """

    def get_fundamental_data(self, symbol: str) -> Fundamentals: ...

    def get_technical_indicators(self, symbol: str) -> dict[str, float]: ...

    def get_news_data(self, symbol: str, limit: int = 5) -> list[NewsItem]: ...

    def get_social_media_sentiment(self, symbol: str) -> SentimentSummary: ...


# ---------------------------------------------------------------------------
# Keyword sentiment
# ---------------------------------------------------------------------------

POSITIVE_WORDS = frozenset(
    {
        "surge", "surges", "gain", "gains", "profit", "profits", "growth",
        "bullish", "rise", "rises", "rally", "beat", "beats", "upgrade",
        "record", "strong", "outperform", "soar", "soars",
    }
)
NEGATIVE_WORDS = frozenset(
    {
        "fall", "falls", "drop", "drops", "loss", "losses", "decline",
        "declines", "bearish", "crash", "plunge", "plunges", "miss", "misses",
        "downgrade", "weak", "lawsuit", "underperform", "slump",
    }
)

_WORD_RE = re.compile(r"[a-z]+")


def keyword_counts(text: str) -> tuple[int, int]:
    """Count positive and negative keyword hits in ``text``."""
    words = _WORD_RE.findall(text.lower())
    pos = sum(1 for w in words if w in POSITIVE_WORDS)
    neg = sum(1 for w in words if w in NEGATIVE_WORDS)
    return pos, neg


def keyword_score(text: str) -> float:
    """(positive - negative) / total hits, 0.0 when there are no hits."""
    pos, neg = keyword_counts(text)
    total = pos + neg
    return (pos - neg) / total if total else 0.0


def summarize_sentiment(
    symbol: str, texts: list[str], sources: list[str] | None = None
) -> SentimentSummary:
    """Fold per-text keyword hits into one :class:`SentimentSummary`."""
    pos_total = neg_total = 0
    for text in texts:
        pos, neg = keyword_counts(text)
        pos_total += pos
        neg_total += neg

    hits = pos_total + neg_total
    score = (pos_total - neg_total) / hits if hits else 0.0
    if score > 0.1:
        label = "positive"
    elif score < -0.1:
        label = "negative"
    else:
        label = "neutral"

    return SentimentSummary(
        symbol=symbol,
        score=round(score, 4),
        label=label,
        positive_ratio=round(pos_total / hits, 4) if hits else 0.0,
        negative_ratio=round(neg_total / hits, 4) if hits else 0.0,
        post_count=len(texts),
        sources=sorted(set(sources or [])),
    )


def as_payload(obj: Any) -> Any:
    """Convert aggregator results (dataclasses, lists of them) to JSON-able data."""
    if is_dataclass(obj) and not isinstance(obj, type):
        return asdict(obj)
    if isinstance(obj, list):
        return [as_payload(item) for item in obj]
    return obj
