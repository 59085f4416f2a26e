"""The standard trading-graph roster.

Every role shares the reasoning loop from :class:`Agent`; they differ in
their prompt key, built-in prompts and the state field they write.
"""

from __future__ import annotations

from typing import ClassVar

from tradegraph.agent.agent import Agent, AgentRole
from tradegraph.model import DecisionState, RiskStance

_TOOL_RULES = """
Available tools:
{tools}

To call a tool, output:
Action: <tool_name>
Action Input: {"symbol": "..."}
After each Observation continue reasoning. Finish with:
Final Answer: <%s>
"""


def _system(intro: str, answer: str) -> str:
    return intro.strip() + "\n" + _TOOL_RULES % answer


# ---------------------------------------------------------------------------
# Analysts
# ---------------------------------------------------------------------------


class AnalystAgent(Agent):
    """Writes one ``[<Title>]`` report to ``analyst_reports``."""

    role: ClassVar[AgentRole] = AgentRole.ANALYST

    def contribute(self, state: DecisionState, answer: str) -> DecisionState:
        return state.add_analyst_report(f"[{self.title}]\n{answer}")


class MarketAnalyst(AnalystAgent):
    name: ClassVar[str] = "market_analyst"
    title: ClassVar[str] = "Market Analyst"
    prompt_key: ClassVar[str | None] = "react.analyst.market"
    default_system_prompt: ClassVar[str] = _system(
        "You are a market (technical) analyst. Study trend, momentum (RSI, "
        "MACD), moving averages and Bollinger band position.",
        "technical report ending in BUY/SELL/HOLD",
    )
    default_user_prompt: ClassVar[str] = (
        "Produce a technical analysis report for {symbol} as of {date}. "
        "Start with the market_indicators tool."
    )


class FundamentalsAnalyst(AnalystAgent):
    name: ClassVar[str] = "fundamentals_analyst"
    title: ClassVar[str] = "Fundamentals Analyst"
    prompt_key: ClassVar[str | None] = "react.analyst.fundamentals"
    default_system_prompt: ClassVar[str] = _system(
        "You are a fundamentals analyst. Judge valuation, earnings quality, "
        "profitability, leverage and dividends.",
        "fundamentals report ending in BUY/SELL/HOLD",
    )
    default_user_prompt: ClassVar[str] = (
        "Produce a fundamentals report for {symbol} as of {date}. "
        "Start with the fundamentals tool."
    )


class NewsAnalyst(AnalystAgent):
    name: ClassVar[str] = "news_analyst"
    title: ClassVar[str] = "News Analyst"
    prompt_key: ClassVar[str | None] = "react.analyst.news"
    default_system_prompt: ClassVar[str] = _system(
        "You are a news analyst. Identify the recent headlines that matter "
        "for the stock and their likely price impact.",
        "news report ending in BUY/SELL/HOLD",
    )
    default_user_prompt: ClassVar[str] = (
        "Produce a news report for {symbol} as of {date}. "
        "Start with the news tool."
    )


class SocialMediaAnalyst(AnalystAgent):
    name: ClassVar[str] = "social_media_analyst"
    title: ClassVar[str] = "Social Media Analyst"
    prompt_key: ClassVar[str | None] = "react.analyst.social"
    default_system_prompt: ClassVar[str] = _system(
        "You are a social media and sentiment analyst. Gauge crowd "
        "sentiment and whether it is stretched.",
        "sentiment report ending in BUY/SELL/HOLD",
    )
    default_user_prompt: ClassVar[str] = (
        "Produce a sentiment report for {symbol} as of {date}. "
        "Start with the social_sentiment tool."
    )


class ComprehensiveAnalyst(AnalystAgent):
    """General-purpose researcher using every tool and the common prompts."""

    name: ClassVar[str] = "comprehensive_analyst"
    title: ClassVar[str] = "Comprehensive Analyst"
    prompt_key: ClassVar[str | None] = "react.common"


# ---------------------------------------------------------------------------
# Research debate
# ---------------------------------------------------------------------------

_RESEARCH_USER = """\
Stock: {symbol}, date: {date}

Analyst reports:
{analystReports}

Debate so far:
{researcherViewpoints}

Make your %s case.
"""


class ResearcherAgent(Agent):
    role: ClassVar[AgentRole] = AgentRole.RESEARCHER

    def contribute(self, state: DecisionState, answer: str) -> DecisionState:
        return state.add_researcher_viewpoint(f"[{self.title}]\n{answer}")


class BullResearcher(ResearcherAgent):
    name: ClassVar[str] = "bull_researcher"
    title: ClassVar[str] = "Bull Researcher"
    prompt_key: ClassVar[str | None] = "react.researcher.bull"
    default_system_prompt: ClassVar[str] = _system(
        "You are the bull researcher. Build the strongest evidence-based case "
        "for investing and rebut the bear's latest points.",
        "your bull argument",
    )
    default_user_prompt: ClassVar[str] = _RESEARCH_USER % "bull"


class BearResearcher(ResearcherAgent):
    name: ClassVar[str] = "bear_researcher"
    title: ClassVar[str] = "Bear Researcher"
    prompt_key: ClassVar[str | None] = "react.researcher.bear"
    default_system_prompt: ClassVar[str] = _system(
        "You are the bear researcher. Build the strongest evidence-based case "
        "against investing and rebut the bull's latest points.",
        "your bear argument",
    )
    default_user_prompt: ClassVar[str] = _RESEARCH_USER % "bear"


# ---------------------------------------------------------------------------
# Managers and trader
# ---------------------------------------------------------------------------


class ResearchManager(Agent):
    name: ClassVar[str] = "research_manager"
    title: ClassVar[str] = "Research Manager"
    role: ClassVar[AgentRole] = AgentRole.RESEARCH_MANAGER
    prompt_key: ClassVar[str | None] = "react.manager.research"
    default_system_prompt: ClassVar[str] = _system(
        "You are the research manager and debate judge. Weigh the bull and "
        "bear arguments, pick a side and write an investment plan.",
        "decision (BUY/SELL/HOLD), rationale, investment plan",
    )
    default_user_prompt: ClassVar[str] = """\
Stock: {symbol}, date: {date}

Analyst reports:
{analystReports}

Bull/bear debate:
{researcherViewpoints}

Decide and write the investment plan.
"""

    def contribute(self, state: DecisionState, answer: str) -> DecisionState:
        return state.with_research_manager_decision(answer)


class Trader(Agent):
    name: ClassVar[str] = "trader"
    title: ClassVar[str] = "Trader"
    role: ClassVar[AgentRole] = AgentRole.TRADER
    prompt_key: ClassVar[str | None] = "react.trader"
    default_system_prompt: ClassVar[str] = _system(
        "You are the trader. Turn the research manager's plan into a concrete "
        "trade: direction, entry, position size, stop loss and take profit.",
        "trading plan ending in FINAL TRANSACTION PROPOSAL: BUY/SELL/HOLD",
    )
    default_user_prompt: ClassVar[str] = """\
Stock: {symbol}, date: {date}

Research manager decision:
{managerDecision}

Analyst reports:
{analystReports}

Write the trading plan.
"""

    def contribute(self, state: DecisionState, answer: str) -> DecisionState:
        return state.with_trading_plan(answer)


class RiskManager(Agent):
    name: ClassVar[str] = "risk_manager"
    title: ClassVar[str] = "Risk Manager"
    role: ClassVar[AgentRole] = AgentRole.RISK_MANAGER
    prompt_key: ClassVar[str | None] = "react.manager.risk"
    default_system_prompt: ClassVar[str] = _system(
        "You are the risk manager and final judge. Weigh the aggressive, "
        "conservative and neutral risk views against the trader's plan.",
        "final decision: exactly one of BUY, SELL or HOLD, then rationale",
    )
    default_user_prompt: ClassVar[str] = """\
Stock: {symbol}, date: {date}

Trader's plan:
{tradingPlan}

Risk debate:
{riskDebateHistory}

Issue the final trading decision.
"""

    def contribute(self, state: DecisionState, answer: str) -> DecisionState:
        return state.with_risk_manager_decision(answer)


# ---------------------------------------------------------------------------
# Risk debate
# ---------------------------------------------------------------------------

_RISK_USER = """\
Stock: {symbol}, date: {date}

Trader's plan:
{tradingPlan}

Risk debate so far:
{riskDebateHistory}

Argue the %s case.
"""


class DebatorAgent(Agent):
    """Appends one statement to its stance in the risk debate."""

    role: ClassVar[AgentRole] = AgentRole.DEBATOR
    stance: ClassVar[RiskStance]

    def contribute(self, state: DecisionState, answer: str) -> DecisionState:
        return state.add_risk_statement(self.stance, answer)


class AggressiveDebator(DebatorAgent):
    name: ClassVar[str] = "aggressive_debator"
    title: ClassVar[str] = "Aggressive Debator"
    stance: ClassVar[RiskStance] = RiskStance.AGGRESSIVE
    prompt_key: ClassVar[str | None] = "react.debator.aggressive"
    default_system_prompt: ClassVar[str] = _system(
        "You are the aggressive risk analyst. Champion high-reward "
        "opportunities and argue against excess caution.",
        "your argument",
    )
    default_user_prompt: ClassVar[str] = _RISK_USER % "aggressive"


class ConservativeDebator(DebatorAgent):
    name: ClassVar[str] = "conservative_debator"
    title: ClassVar[str] = "Conservative Debator"
    stance: ClassVar[RiskStance] = RiskStance.CONSERVATIVE
    prompt_key: ClassVar[str | None] = "react.debator.conservative"
    default_system_prompt: ClassVar[str] = _system(
        "You are the conservative risk analyst. Protect capital and argue "
        "for tighter risk controls.",
        "your argument",
    )
    default_user_prompt: ClassVar[str] = _RISK_USER % "conservative"


class NeutralDebator(DebatorAgent):
    name: ClassVar[str] = "neutral_debator"
    title: ClassVar[str] = "Neutral Debator"
    stance: ClassVar[RiskStance] = RiskStance.NEUTRAL
    prompt_key: ClassVar[str | None] = "react.debator.neutral"
    default_system_prompt: ClassVar[str] = _system(
        "You are the neutral risk analyst. Balance upside and downside and "
        "propose a moderate adjustment to the plan.",
        "your argument",
    )
    default_user_prompt: ClassVar[str] = _RISK_USER % "balanced"


ANALYSTS: dict[str, type[AnalystAgent]] = {
    "market": MarketAnalyst,
    "fundamentals": FundamentalsAnalyst,
    "news": NewsAnalyst,
    "social": SocialMediaAnalyst,
    "comprehensive": ComprehensiveAnalyst,
}
