"""Decision state data model."""

from tradegraph.model.state import DecisionState, RiskDebate, RiskStance, Signal

__all__ = [
    "DecisionState",
    "RiskDebate",
    "RiskStance",
    "Signal",
]
