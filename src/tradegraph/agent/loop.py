"""The reasoning loop: one agent's conversation with the model.

Each step requests a completion, classifies it with :func:`parse_reply`
and either finishes, invokes a tool, or asks the model to correct
itself. The loop never raises for protocol or tool faults; exceptions
from the chat provider propagate to the caller.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field

from tradegraph.agent.protocol import Action, FinalAnswer, parse_reply
from tradegraph.llm.message import GenerationParams, Message
from tradegraph.llm.provider import ChatProvider
from tradegraph.session.wire import EventType, Wire
from tradegraph.tool.registry import ToolRegistry

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS = 20

NO_ACTION_MESSAGE = (
    "No valid Action detected. Provide the next Action or a Final Answer."
)
EXHAUSTED_ANSWER = (
    "No final answer was reached within the step limit; "
    "treat this result with caution."
)


class LoopOutcome(enum.Enum):
    """How did the loop end?"""

    FINISHED = "finished"  # Model produced a Final Answer
    EXHAUSTED = "exhausted"  # Hit the step limit


@dataclass
class LoopResult:
    final_answer: str
    trace: list[str] = field(default_factory=list)
    outcome: LoopOutcome = LoopOutcome.FINISHED
    steps: int = 0

    @property
    def finished(self) -> bool:
        return self.outcome is LoopOutcome.FINISHED


async def react_loop(
    system_prompt: str,
    user_prompt: str,
    provider: ChatProvider,
    tools: ToolRegistry,
    max_steps: int = DEFAULT_MAX_STEPS,
    history: list[Message] | None = None,
    params: GenerationParams | None = None,
    wire: Wire | None = None,
    agent_name: str = "agent",
) -> LoopResult:
    """Run the reasoning loop until a final answer or the step budget.

    Args:
        system_prompt: System message, including the tool listing.
        user_prompt: First user message.
        provider: Chat provider to request completions from.
        tools: Registry the model's actions are dispatched against.
        max_steps: Maximum number of completions requested.
        history: Message sink; seeded with the two prompts and grown in
            place. A fresh list is used when omitted.
        params: Generation parameters passed on every request.
        wire: Optional event bus for progress events.
        agent_name: Label used in logs and events.
    """
    if history is None:
        history = []
    history.append(Message.system(system_prompt))
    history.append(Message.user(user_prompt))

    trace: list[str] = []

    def _emit(type: EventType, **data: object) -> None:
        if wire is not None:
            wire.emit(type, agent=agent_name, **data)

    for step_no in range(1, max_steps + 1):
        logger.info("Agent %s: step %d/%d", agent_name, step_no, max_steps)
        _emit(EventType.STEP_BEGIN, step=step_no)

        text = await provider.complete(list(history), params)
        trace.append(f"ASSISTANT: {text}")
        history.append(Message.assistant(text))
        _emit(EventType.TEXT, text=text)

        reply = parse_reply(text)

        if isinstance(reply, FinalAnswer):
            logger.info("Agent %s finished after %d steps", agent_name, step_no)
            _emit(EventType.FINAL_ANSWER, text=reply.text)
            return LoopResult(
                final_answer=reply.text,
                trace=trace,
                outcome=LoopOutcome.FINISHED,
                steps=step_no,
            )

        if not isinstance(reply, Action):
            logger.debug("Agent %s: no action in reply", agent_name)
            history.append(Message.observation(NO_ACTION_MESSAGE))
            continue

        _emit(EventType.TOOL_CALL, tool=reply.name, arguments=reply.input)
        observation = await _invoke(reply, tools, agent_name)
        _emit(EventType.TOOL_RESULT, tool=reply.name, content=observation)
        trace.append(f"OBSERVATION[{reply.name}]: {observation}")
        history.append(Message.observation(observation))

    logger.warning("Agent %s hit max steps (%d)", agent_name, max_steps)
    return LoopResult(
        final_answer=EXHAUSTED_ANSWER,
        trace=trace,
        outcome=LoopOutcome.EXHAUSTED,
        steps=max_steps,
    )


async def _invoke(action: Action, tools: ToolRegistry, agent_name: str) -> str:
    """Dispatch one action and return the observation text."""
    if action.name not in tools:
        logger.warning("Agent %s requested unknown tool %s", agent_name, action.name)
        return tools.unknown_tool_message(action.name)

    if action.error is not None:
        logger.warning(
            "Agent %s: bad input for %s: %s", agent_name, action.name, action.error
        )

    try:
        output = await tools.dispatch(action.name, action.input)
    except Exception as e:
        logger.error("Tool %s raised: %s", action.name, e, exc_info=True)
        output = f"Error: tool '{action.name}' failed: {e}"

    if action.error is not None:
        return (
            f"Warning: could not parse Action Input ({action.error}); "
            f"the tool was called with no arguments.\n{output}"
        )
    return output
