"""Event wire between the trading graph and its observers."""

from tradegraph.session.wire import EventType, Wire, WireEvent

__all__ = ["EventType", "Wire", "WireEvent"]
