"""Agents and the reasoning loop they run."""

from tradegraph.agent.agent import Agent, AgentRole
from tradegraph.agent.loop import LoopOutcome, LoopResult, react_loop
from tradegraph.agent.protocol import Action, FinalAnswer, NoAction, parse_reply
from tradegraph.agent.roles import (
    ANALYSTS,
    AggressiveDebator,
    BearResearcher,
    BullResearcher,
    ComprehensiveAnalyst,
    ConservativeDebator,
    FundamentalsAnalyst,
    MarketAnalyst,
    NeutralDebator,
    NewsAnalyst,
    ResearchManager,
    RiskManager,
    SocialMediaAnalyst,
    Trader,
)

__all__ = [
    "Agent",
    "AgentRole",
    "LoopOutcome",
    "LoopResult",
    "react_loop",
    "Action",
    "FinalAnswer",
    "NoAction",
    "parse_reply",
    "ANALYSTS",
    "AggressiveDebator",
    "BearResearcher",
    "BullResearcher",
    "ComprehensiveAnalyst",
    "ConservativeDebator",
    "FundamentalsAnalyst",
    "MarketAnalyst",
    "NeutralDebator",
    "NewsAnalyst",
    "ResearchManager",
    "RiskManager",
    "SocialMediaAnalyst",
    "Trader",
]
