"""Trading graph: sequences the agents and folds their output into one state.

Stages, strictly in order:
1. Analysts (concurrent, joined before the debate)
2. Bull/bear research debate, ``research_rounds`` rounds
3. Research manager
4. Trader
5. Risk debate, ``risk_rounds`` rounds of aggressive/conservative/neutral
6. Risk manager, then the final signal is extracted from its decision
"""

from __future__ import annotations

import asyncio
import datetime as dt
import logging
import re
from collections.abc import Awaitable
from dataclasses import dataclass, field
from typing import Callable, Sequence

from tradegraph.agent.agent import Agent
from tradegraph.agent.loop import LoopResult
from tradegraph.agent.roles import (
    ANALYSTS,
    AggressiveDebator,
    BearResearcher,
    BullResearcher,
    ConservativeDebator,
    NeutralDebator,
    ResearchManager,
    RiskManager,
    Trader,
)
from tradegraph.config import TradegraphConfig, WorkflowConfig
from tradegraph.data.aggregator import DataAggregator
from tradegraph.errors import ConfigError
from tradegraph.llm.message import GenerationParams
from tradegraph.llm.provider import ChatProvider
from tradegraph.model import DecisionState, Signal
from tradegraph.prompt import PromptProvider
from tradegraph.session.wire import EventType, Wire
from tradegraph.tool.market import build_market_tools

logger = logging.getLogger(__name__)

_SIGNAL_RE = re.compile(r"\b(BUY|SELL|HOLD)\b", re.IGNORECASE)


def extract_signal(decision: str | None) -> Signal:
    """First whole-word BUY/SELL/HOLD in ``decision``, case-insensitive.

    Defaults to HOLD when the text names none of them.
    """
    if decision:
        match = _SIGNAL_RE.search(decision)
        if match:
            return Signal(match.group(1).upper())
    return Signal.HOLD


class _StageError(Exception):
    """Carries the failing stage and the last good state out of a run."""

    def __init__(self, stage: str, state: DecisionState, cause: Exception) -> None:
        super().__init__(f"{stage}: {cause}")
        self.stage = stage
        self.state = state
        self.cause = cause


@dataclass
class TradingGraph:
    """The multi-agent decision workflow.

    Holds only its agents and configuration; every run threads its own
    :class:`DecisionState`, so one graph can serve concurrent runs.
    """

    analysts: Sequence[Agent]
    bull: Agent
    bear: Agent
    research_manager: Agent
    trader: Agent
    debators: Sequence[Agent]
    risk_manager: Agent
    config: WorkflowConfig = field(default_factory=WorkflowConfig)
    wire: Wire | None = None

    async def run_decision(
        self, symbol: str, date: dt.date | str | None = None
    ) -> DecisionState:
        """Run every stage for ``symbol`` on ``date`` (today when omitted).

        Never raises: a failing stage finalizes the last good state with
        ``Signal.ERROR`` and the reason in ``metadata["error"]``.
        """
        try:
            state = self.initial_state(symbol, date)
        except Exception as e:
            logger.error("Cannot start run for %r: %s", symbol, e, exc_info=True)
            if self.wire is not None:
                self.wire.send_error(str(e), stage="init")
            bare = DecisionState(symbol=str(symbol or ""), date=dt.date.today())
            return bare.finalize(Signal.ERROR, reason=f"init: {e}")

        logger.info("Trading decision for %s on %s", state.symbol, state.date_str)
        self._emit(EventType.RUN_BEGIN, symbol=state.symbol, date=state.date_str)

        try:
            state = await self._run_stages(state)
        except _StageError as failure:
            logger.error(
                "Stage %s failed for %s: %s",
                failure.stage,
                symbol,
                failure.cause,
                exc_info=failure.cause,
            )
            if self.wire is not None:
                self.wire.send_error(str(failure.cause), stage=failure.stage)
            state = failure.state.finalize(Signal.ERROR, reason=str(failure))

        signal = state.final_signal.value if state.final_signal else None
        logger.info("Decision for %s: %s", state.symbol, signal)
        self._emit(EventType.RUN_END, symbol=state.symbol, signal=signal)
        return state

    @staticmethod
    def initial_state(symbol: str, date: dt.date | str | None = None) -> DecisionState:
        symbol = symbol.strip().upper()
        if not symbol:
            raise ValueError("symbol must not be empty")
        if date is None:
            date = dt.date.today()
        elif isinstance(date, str):
            date = dt.date.fromisoformat(date)
        return DecisionState(symbol=symbol, date=date)

    # -- stages --------------------------------------------------------------

    async def _run_stages(self, state: DecisionState) -> DecisionState:
        state = await self._stage("analysts", state, self._analyst_stage)
        state = await self._stage("research_debate", state, self._research_debate)
        state = await self._stage("research_manager", state, self.research_manager.execute)
        state = await self._stage("trader", state, self.trader.execute)
        state = await self._stage("risk_debate", state, self._risk_debate)
        state = await self._stage("risk_manager", state, self._risk_decision)
        return state

    async def _stage(
        self,
        name: str,
        state: DecisionState,
        fn: Callable[[DecisionState], Awaitable[DecisionState]],
    ) -> DecisionState:
        logger.info("Stage %s: begin", name)
        self._emit(EventType.STAGE_BEGIN, stage=name)
        try:
            state = await fn(state)
        except Exception as e:
            raise _StageError(name, state, e) from e
        self._emit(EventType.STAGE_END, stage=name)
        return state

    async def _analyst_stage(self, state: DecisionState) -> DecisionState:
        return await self._fan_out(self.analysts, state, self.config.parallel_analysts)

    async def _research_debate(self, state: DecisionState) -> DecisionState:
        for round_no in range(1, self.config.research_rounds + 1):
            logger.info("Research debate round %d/%d", round_no, self.config.research_rounds)
            self._status(f"Research debate round {round_no}/{self.config.research_rounds}")
            state = await self.bull.execute(state)
            state = await self.bear.execute(state)
        return state

    async def _risk_debate(self, state: DecisionState) -> DecisionState:
        state = state.start_risk_debate()
        for round_no in range(1, self.config.risk_rounds + 1):
            logger.info("Risk debate round %d/%d", round_no, self.config.risk_rounds)
            self._status(f"Risk debate round {round_no}/{self.config.risk_rounds}")
            state = await self._fan_out(
                self.debators, state, self.config.parallel_debators
            )
        return state.freeze_risk_debate()

    async def _risk_decision(self, state: DecisionState) -> DecisionState:
        state = await self.risk_manager.execute(state)
        return state.with_final_signal(extract_signal(state.risk_manager_decision))

    async def _fan_out(
        self, agents: Sequence[Agent], state: DecisionState, parallel: bool
    ) -> DecisionState:
        """Run ``agents`` against the same input state, fold in order.

        When one concurrent agent fails, the others are cancelled and
        awaited before the error propagates.
        """
        if parallel:
            tasks = [asyncio.ensure_future(agent.run(state)) for agent in agents]
            try:
                results: list[LoopResult] = list(await asyncio.gather(*tasks))
            except BaseException:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise
        else:
            results = [await agent.run(state) for agent in agents]
        for agent, result in zip(agents, results):
            state = agent.apply(state, result)
        return state

    def _emit(self, type: EventType, **data: object) -> None:
        if self.wire is not None:
            self.wire.emit(type, **data)

    def _status(self, message: str) -> None:
        if self.wire is not None:
            self.wire.send_status(message)


# ---------------------------------------------------------------------------
# Graph setup
# ---------------------------------------------------------------------------


def build_trading_graph(
    provider: ChatProvider,
    aggregator: DataAggregator,
    prompts: PromptProvider | None = None,
    config: TradegraphConfig | None = None,
    wire: Wire | None = None,
) -> TradingGraph:
    """Wire the standard roster against one provider and data source.

    Every agent shares the market data tool registry, the generation
    parameters from ``config.llm`` and the workflow settings.
    """
    config = config or TradegraphConfig()
    tools = build_market_tools(aggregator)
    params = GenerationParams(
        temperature=config.llm.temperature, max_tokens=config.llm.max_tokens
    )

    def make(cls: type[Agent]) -> Agent:
        return cls(
            provider=provider,
            tools=tools,
            prompts=prompts,
            config=config.workflow,
            params=params,
            wire=wire,
        )

    analysts = []
    for kind in config.workflow.analysts:
        cls = ANALYSTS.get(kind)
        if cls is None:
            raise ConfigError(
                f"Unknown analyst '{kind}'. Known analysts: {', '.join(ANALYSTS)}"
            )
        analysts.append(make(cls))

    return TradingGraph(
        analysts=analysts,
        bull=make(BullResearcher),
        bear=make(BearResearcher),
        research_manager=make(ResearchManager),
        trader=make(Trader),
        debators=[
            make(AggressiveDebator),
            make(ConservativeDebator),
            make(NeutralDebator),
        ],
        risk_manager=make(RiskManager),
        config=config.workflow,
        wire=wire,
    )
