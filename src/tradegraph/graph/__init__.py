"""Workflow orchestration for trading decisions."""

from tradegraph.graph.trading_graph import (
    TradingGraph,
    build_trading_graph,
    extract_signal,
)

__all__ = ["TradingGraph", "build_trading_graph", "extract_signal"]
