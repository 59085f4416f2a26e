"""Agent definition: a role that runs the reasoning loop over a DecisionState."""

from __future__ import annotations

import enum
import logging
from abc import ABC, abstractmethod
from typing import ClassVar

from tradegraph.agent.loop import LoopResult, react_loop
from tradegraph.config import WorkflowConfig
from tradegraph.llm.message import GenerationParams
from tradegraph.llm.provider import ChatProvider
from tradegraph.model import DecisionState
from tradegraph.prompt import (
    NullPromptProvider,
    PromptProvider,
    ResolvedPrompts,
    resolve_prompts,
)
from tradegraph.session.wire import Wire
from tradegraph.tool.registry import ToolRegistry

logger = logging.getLogger(__name__)

EMPTY_SECTION = "(none)"

DEFAULT_SYSTEM_PROMPT = """\
You are a research agent with access to market data tools.

Available tools:
{tools}

Interaction rules (follow strictly):
1) Reason step by step, writing your reasoning after "Thought:".
2) To call a tool, output exactly:
   Action: <tool_name>
   Action Input: {json}
3) Wait for the Observation, then continue reasoning.
4) When done, output:
   Final Answer: <your conclusion with a BUY/SELL/HOLD recommendation>
"""

DEFAULT_USER_PROMPT = """\
Goal: assess the investment value of {symbol} as of {date} and give a
BUY/SELL/HOLD recommendation. Use tools where needed.
Use this format:
Thought: ...
Action: <tool_name>
Action Input: {json}
After each Observation, continue until you give a Final Answer.
Initial context: symbol={symbol}, date={date}
"""


class AgentRole(enum.Enum):
    ANALYST = "analyst"
    RESEARCHER = "researcher"
    RESEARCH_MANAGER = "research_manager"
    TRADER = "trader"
    DEBATOR = "debator"
    RISK_MANAGER = "risk_manager"


class Agent(ABC):
    """A trading-graph role.

    Subclasses pick a prompt key and built-in prompts and decide where the
    final answer goes in the state (:meth:`contribute`). Running the loop,
    resolving prompts and recording the trace are shared.

    Collaborators are injected through the constructor; an agent keeps no
    per-run state, so one instance can serve concurrent runs.
    """

    name: ClassVar[str]
    title: ClassVar[str]
    role: ClassVar[AgentRole]
    prompt_key: ClassVar[str | None] = None
    default_system_prompt: ClassVar[str] = DEFAULT_SYSTEM_PROMPT
    default_user_prompt: ClassVar[str] = DEFAULT_USER_PROMPT

    def __init__(
        self,
        provider: ChatProvider,
        tools: ToolRegistry,
        prompts: PromptProvider | None = None,
        config: WorkflowConfig | None = None,
        params: GenerationParams | None = None,
        wire: Wire | None = None,
    ) -> None:
        self.provider = provider
        self.tools = tools
        self.prompts = prompts or NullPromptProvider()
        self.config = config or WorkflowConfig()
        self.params = params or GenerationParams()
        self.wire = wire

    def prompt_variables(self, state: DecisionState) -> dict[str, str]:
        """Variables substituted into this agent's prompts.

        Sequences render as ``(none)`` while empty. Decisions that are not
        set yet are left out, so their placeholders stay visible.
        """
        variables = {
            "symbol": state.symbol,
            "date": state.date_str,
            "analystReports": _join(state.analyst_reports),
            "researcherViewpoints": _join(state.researcher_viewpoints),
        }
        if state.research_manager_decision is not None:
            variables["managerDecision"] = state.research_manager_decision
        if state.trading_plan is not None:
            variables["tradingPlan"] = state.trading_plan
        if not state.risk_debate.is_empty:
            variables["riskDebateHistory"] = state.risk_debate.render()
        variables["tools"] = self.tools.describe()
        return variables

    def build_prompts(self, state: DecisionState) -> ResolvedPrompts:
        return resolve_prompts(
            self.prompts,
            self.prompt_key,
            self.prompt_variables(state),
            self.default_system_prompt,
            self.default_user_prompt,
        )

    async def run(self, state: DecisionState) -> LoopResult:
        """Resolve prompts and run the reasoning loop for ``state``."""
        prompts = self.build_prompts(state)
        logger.info(
            "Running %s for %s (%s prompts)",
            self.name,
            state.symbol,
            "template" if prompts.from_template else "built-in",
        )
        return await react_loop(
            system_prompt=prompts.system,
            user_prompt=prompts.user,
            provider=self.provider,
            tools=self.tools,
            max_steps=self.config.max_steps,
            params=self.params,
            wire=self.wire,
            agent_name=self.name,
        )

    @abstractmethod
    def contribute(self, state: DecisionState, answer: str) -> DecisionState:
        """Write ``answer`` to this role's target field."""
        ...

    def apply(self, state: DecisionState, result: LoopResult) -> DecisionState:
        """Fold a loop result into ``state``, recording the trace."""
        state = self.contribute(state, result.final_answer)
        return state.put_metadata(self.name, tuple(result.trace))

    async def execute(self, state: DecisionState) -> DecisionState:
        return self.apply(state, await self.run(state))

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


def _join(items: tuple[str, ...]) -> str:
    return "\n\n".join(items) if items else EMPTY_SECTION
