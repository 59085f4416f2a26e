"""DecisionState: the accumulating record of one trading-decision run."""

from __future__ import annotations

import datetime as dt
import enum
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Mapping

from tradegraph.errors import StateTransitionError


class Signal(str, enum.Enum):
    """Terminal classification of a decision run."""

    BUY = "BUY"
    SELL = "SELL"
    HOLD = "HOLD"
    ERROR = "ERROR"


class RiskStance(str, enum.Enum):
    AGGRESSIVE = "aggressive"
    CONSERVATIVE = "conservative"
    NEUTRAL = "neutral"


_STANCE_TITLES = {
    RiskStance.AGGRESSIVE: "Aggressive view",
    RiskStance.CONSERVATIVE: "Conservative view",
    RiskStance.NEUTRAL: "Neutral view",
}


def _empty_metadata() -> Mapping[str, Any]:
    return MappingProxyType({})


@dataclass(frozen=True)
class RiskDebate:
    """Statements from the three risk debators, one tuple per stance.

    Created empty when the risk debate starts, appended to once per
    debator per round, and frozen before the risk manager reads it.
    """

    aggressive: tuple[str, ...] = ()
    conservative: tuple[str, ...] = ()
    neutral: tuple[str, ...] = ()
    frozen: bool = False

    def statements(self, stance: RiskStance) -> tuple[str, ...]:
        return getattr(self, stance.value)

    def add(self, stance: RiskStance, statement: str) -> RiskDebate:
        """Return a copy with ``statement`` appended to the stance's history."""
        if self.frozen:
            raise StateTransitionError(
                f"Risk debate is frozen; cannot add a {stance.value} statement"
            )
        return replace(self, **{stance.value: (*self.statements(stance), statement)})

    def freeze(self) -> RiskDebate:
        return replace(self, frozen=True)

    @property
    def is_empty(self) -> bool:
        return not (self.aggressive or self.conservative or self.neutral)

    def render(self) -> str:
        """Format the debate history as headed bullet lists for prompts."""
        sections = []
        for stance in RiskStance:
            items = self.statements(stance)
            if not items:
                continue
            lines = [f"## {_STANCE_TITLES[stance]}"]
            lines.extend(f"- {item}" for item in items)
            sections.append("\n".join(lines))
        return "\n\n".join(sections)

    def to_dict(self) -> dict[str, Any]:
        return {
            "aggressive": list(self.aggressive),
            "conservative": list(self.conservative),
            "neutral": list(self.neutral),
            "frozen": self.frozen,
        }


@dataclass(frozen=True)
class DecisionState:
    """Immutable state threaded through every stage of the trading graph.

    Every operation returns a new instance. Ordered sequences are tuples
    and only ever grow. The terminal decision fields can be set once;
    ``final_signal`` can additionally be overwritten through
    :meth:`finalize`, which is how the orchestrator records ``ERROR``.
    """

    symbol: str
    date: dt.date
    analyst_reports: tuple[str, ...] = ()
    researcher_viewpoints: tuple[str, ...] = ()
    research_manager_decision: str | None = None
    trading_plan: str | None = None
    risk_debate: RiskDebate = field(default_factory=RiskDebate)
    risk_manager_decision: str | None = None
    final_signal: Signal | None = None
    metadata: Mapping[str, Any] = field(default_factory=_empty_metadata)

    # -- append-only sequences ---------------------------------------------

    def add_analyst_report(self, report: str) -> DecisionState:
        return replace(self, analyst_reports=(*self.analyst_reports, report))

    def add_researcher_viewpoint(self, viewpoint: str) -> DecisionState:
        return replace(
            self, researcher_viewpoints=(*self.researcher_viewpoints, viewpoint)
        )

    # -- set-once decisions ------------------------------------------------

    def with_research_manager_decision(self, decision: str) -> DecisionState:
        self._check_unset("research_manager_decision")
        return replace(self, research_manager_decision=decision)

    def with_trading_plan(self, plan: str) -> DecisionState:
        self._check_unset("trading_plan")
        return replace(self, trading_plan=plan)

    def with_risk_manager_decision(self, decision: str) -> DecisionState:
        self._check_unset("risk_manager_decision")
        return replace(self, risk_manager_decision=decision)

    def with_final_signal(self, signal: Signal | str) -> DecisionState:
        self._check_unset("final_signal")
        return replace(self, final_signal=Signal(signal))

    def finalize(self, signal: Signal | str, reason: str | None = None) -> DecisionState:
        """Set ``final_signal`` unconditionally.

        The only transition allowed to overwrite an existing signal. A
        ``reason`` is recorded under the ``error`` metadata key.
        """
        state = replace(self, final_signal=Signal(signal))
        if reason is not None:
            state = state.put_metadata("error", reason)
        return state

    # -- risk debate lifecycle ---------------------------------------------

    def start_risk_debate(self) -> DecisionState:
        if self.risk_debate.frozen or not self.risk_debate.is_empty:
            raise StateTransitionError(
                f"Risk debate for {self.symbol} has already started"
            )
        return replace(self, risk_debate=RiskDebate())

    def add_risk_statement(self, stance: RiskStance | str, statement: str) -> DecisionState:
        return replace(
            self, risk_debate=self.risk_debate.add(RiskStance(stance), statement)
        )

    def freeze_risk_debate(self) -> DecisionState:
        return replace(self, risk_debate=self.risk_debate.freeze())

    # -- metadata ----------------------------------------------------------

    def put_metadata(self, key: str, value: Any) -> DecisionState:
        merged = dict(self.metadata)
        merged[key] = value
        return replace(self, metadata=MappingProxyType(merged))

    # -- helpers -------------------------------------------------------------

    @property
    def date_str(self) -> str:
        return self.date.isoformat() if self.date else "N/A"

    def _check_unset(self, name: str) -> None:
        if getattr(self, name) is not None:
            raise StateTransitionError(f"{name} is already set for {self.symbol}")

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly dump of the state."""
        return {
            "symbol": self.symbol,
            "date": self.date_str,
            "analyst_reports": list(self.analyst_reports),
            "researcher_viewpoints": list(self.researcher_viewpoints),
            "research_manager_decision": self.research_manager_decision,
            "trading_plan": self.trading_plan,
            "risk_debate": self.risk_debate.to_dict(),
            "risk_manager_decision": self.risk_manager_decision,
            "final_signal": self.final_signal.value if self.final_signal else None,
            "metadata": dict(self.metadata),
        }
