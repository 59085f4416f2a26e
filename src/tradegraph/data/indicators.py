"""Technical indicators computed from a series of daily closes."""

from __future__ import annotations

import math

import pandas as pd

RSI_PERIOD = 14
MACD_FAST = 12
MACD_SLOW = 26
MACD_SIGNAL = 9
BB_PERIOD = 20
BB_WIDTH = 2.0


def rsi(close: pd.Series, period: int = RSI_PERIOD) -> pd.Series:
    """Wilder's relative strength index: 100 - 100 / (1 + avg gain / avg loss)."""
    delta = close.diff()
    gain = delta.clip(lower=0.0)
    loss = -delta.clip(upper=0.0)
    avg_gain = gain.ewm(alpha=1 / period, adjust=False, min_periods=period).mean()
    avg_loss = loss.ewm(alpha=1 / period, adjust=False, min_periods=period).mean()
    rs = avg_gain / avg_loss
    out = 100 - 100 / (1 + rs)
    # No losses in the window means maximal strength
    return out.where(avg_loss != 0, 100.0)


def macd(
    close: pd.Series,
    fast: int = MACD_FAST,
    slow: int = MACD_SLOW,
    signal: int = MACD_SIGNAL,
) -> tuple[pd.Series, pd.Series]:
    """MACD line (EMA fast - EMA slow) and its signal line."""
    line = (
        close.ewm(span=fast, adjust=False).mean()
        - close.ewm(span=slow, adjust=False).mean()
    )
    return line, line.ewm(span=signal, adjust=False).mean()


def bollinger(
    close: pd.Series, period: int = BB_PERIOD, width: float = BB_WIDTH
) -> tuple[pd.Series, pd.Series, pd.Series]:
    """Upper, middle and lower Bollinger bands."""
    middle = close.rolling(period).mean()
    std = close.rolling(period).std(ddof=0)
    return middle + width * std, middle, middle - width * std


def compute_indicators(close: pd.Series) -> dict[str, float]:
    """Latest value of each indicator; indicators without enough history are omitted."""
    if close.empty:
        return {}

    macd_line, macd_signal = macd(close)
    bb_upper, bb_middle, bb_lower = bollinger(close)
    series = {
        "close": close,
        "rsi_14": rsi(close),
        "macd": macd_line,
        "macd_signal": macd_signal,
        "sma_20": close.rolling(20).mean(),
        "sma_50": close.rolling(50).mean(),
        "bb_upper": bb_upper,
        "bb_middle": bb_middle,
        "bb_lower": bb_lower,
    }

    latest: dict[str, float] = {}
    for name, values in series.items():
        value = float(values.iloc[-1])
        if not math.isnan(value):
            latest[name] = round(value, 4)
    return latest
