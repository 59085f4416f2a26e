"""Tests for tradegraph.agent.loop (react_loop)."""

from __future__ import annotations

import logging
from typing import ClassVar

import pytest
from pydantic import BaseModel

from tradegraph.agent.loop import (
    EXHAUSTED_ANSWER,
    NO_ACTION_MESSAGE,
    LoopOutcome,
    react_loop,
)
from tradegraph.llm.message import GenerationParams, Message
from tradegraph.session.wire import EventType, Wire
from tradegraph.tool.base import BaseTool, ToolOk, ToolResult
from tradegraph.tool.registry import ToolRegistry

ECHO_ACTION = 'Thought: look it up.\nAction: echo\nAction Input: {"symbol": "TSLA"}'


# ---------------------------------------------------------------------------
# Finishing
# ---------------------------------------------------------------------------


class TestFinish:
    async def test_immediate_final_answer(self, scripted, echo_registry) -> None:
        provider = scripted(["Final Answer: BUY"])
        result = await react_loop("sys", "user", provider, echo_registry)
        assert result.final_answer == "BUY"
        assert result.outcome is LoopOutcome.FINISHED
        assert result.finished
        assert result.steps == 1
        assert result.trace == ["ASSISTANT: Final Answer: BUY"]

    async def test_history_seeded_with_prompts(self, scripted, echo_registry) -> None:
        provider = scripted(["Final Answer: HOLD"])
        await react_loop("the system", "the user", provider, echo_registry)
        first_request = provider.calls[0]
        assert first_request == [Message.system("the system"), Message.user("the user")]

    async def test_params_passed_through(self, scripted, echo_registry) -> None:
        provider = scripted(["Final Answer: HOLD"])
        params = GenerationParams(temperature=0.0, max_tokens=100)
        await react_loop("s", "u", provider, echo_registry, params=params)
        assert provider.params == [params]


# ---------------------------------------------------------------------------
# Acting
# ---------------------------------------------------------------------------


class TestAct:
    async def test_tool_invoked_once_per_action(
        self, scripted, echo_registry, counting_tool
    ) -> None:
        provider = scripted([ECHO_ACTION, "Final Answer: BUY"])
        result = await react_loop("s", "u", provider, echo_registry)

        assert len(counting_tool.calls) == 1
        assert counting_tool.calls[0].symbol == "TSLA"
        assert result.final_answer == "BUY"
        assert result.steps == 2
        assert result.trace == [
            f"ASSISTANT: {ECHO_ACTION}",
            "OBSERVATION[echo]: echo:TSLA",
            "ASSISTANT: Final Answer: BUY",
        ]

    async def test_observation_fed_back_as_user_message(
        self, scripted, echo_registry
    ) -> None:
        provider = scripted([ECHO_ACTION, "Final Answer: BUY"])
        history: list[Message] = []
        await react_loop("s", "u", provider, echo_registry, history=history)

        second_request = provider.calls[1]
        assert second_request[-2] == Message.assistant(ECHO_ACTION)
        assert second_request[-1] == Message.user("Observation: echo:TSLA")
        assert second_request[-1].is_observation
        # The sink keeps the full conversation, final reply included
        assert history[-1] == Message.assistant("Final Answer: BUY")
        assert len(history) == 5

    async def test_unknown_tool(self, scripted, echo_registry, counting_tool) -> None:
        provider = scripted(
            ['Action: quote\nAction Input: {"symbol": "TSLA"}', "Final Answer: HOLD"]
        )
        result = await react_loop("s", "u", provider, echo_registry)

        assert counting_tool.calls == []
        observation = provider.calls[1][-1].content
        assert observation == (
            "Observation: Error: unknown tool 'quote'. Available tools: echo"
        )
        assert result.trace[1].startswith("OBSERVATION[quote]: Error: unknown tool")

    async def test_malformed_json_invokes_with_empty_input(
        self, scripted, echo_registry, counting_tool
    ) -> None:
        provider = scripted(
            ['Action: echo\nAction Input: {"symbol": TSLA}', "Final Answer: HOLD"]
        )
        await react_loop("s", "u", provider, echo_registry)

        assert len(counting_tool.calls) == 1
        assert counting_tool.calls[0].symbol == ""
        observation = provider.calls[1][-1].content
        assert observation.startswith("Observation: Warning: could not parse Action Input")
        assert "invalid JSON" in observation
        assert observation.endswith("echo:")

    async def test_tool_validation_error_is_observation(
        self, scripted, echo_registry
    ) -> None:
        provider = scripted(
            ['Action: echo\nAction Input: {"symbol": ["not", "a", "str"]}', "Final Answer: HOLD"]
        )
        result = await react_loop("s", "u", provider, echo_registry)
        assert result.outcome is LoopOutcome.FINISHED
        assert "Error: invalid parameters for echo" in result.trace[1]


# ---------------------------------------------------------------------------
# Retrying
# ---------------------------------------------------------------------------


class TestNoAction:
    async def test_corrective_observation(
        self, scripted, echo_registry, counting_tool
    ) -> None:
        provider = scripted(["Let me think about it.", "Final Answer: SELL"])
        result = await react_loop("s", "u", provider, echo_registry)

        assert counting_tool.calls == []
        assert provider.calls[1][-1] == Message.user(
            f"Observation: {NO_ACTION_MESSAGE}"
        )
        assert result.final_answer == "SELL"
        assert result.trace == [
            "ASSISTANT: Let me think about it.",
            "ASSISTANT: Final Answer: SELL",
        ]


# ---------------------------------------------------------------------------
# Budget exhaustion
# ---------------------------------------------------------------------------


class TestExhaustion:
    async def test_three_steps_then_fallback(
        self, scripted, echo_registry, counting_tool, caplog
    ) -> None:
        provider = scripted([ECHO_ACTION] * 3)
        with caplog.at_level(logging.WARNING, logger="tradegraph.agent.loop"):
            result = await react_loop("s", "u", provider, echo_registry, max_steps=3)

        assert len(provider.calls) == 3
        assert len(counting_tool.calls) == 3
        assert result.final_answer == EXHAUSTED_ANSWER
        assert result.outcome is LoopOutcome.EXHAUSTED
        assert not result.finished
        assert result.steps == 3
        assert len(result.trace) == 6
        assert "hit max steps" in caplog.text

    async def test_no_tools_registered(self, scripted) -> None:
        provider = scripted(["thinking...", "still thinking..."])
        result = await react_loop("s", "u", provider, ToolRegistry(), max_steps=2)
        assert result.outcome is LoopOutcome.EXHAUSTED


# ---------------------------------------------------------------------------
# Provider faults and events
# ---------------------------------------------------------------------------


class _FailingProvider:
    async def complete(self, messages, params=None) -> str:
        raise ConnectionError("model down")


class TestProviderFault:
    async def test_provider_exception_propagates(self, echo_registry) -> None:
        with pytest.raises(ConnectionError, match="model down"):
            await react_loop("s", "u", _FailingProvider(), echo_registry)


class TestWireEvents:
    async def test_events_emitted(self, scripted, echo_registry) -> None:
        wire = Wire()
        queue = wire.subscribe()
        provider = scripted([ECHO_ACTION, "Final Answer: BUY"])
        await react_loop(
            "s", "u", provider, echo_registry, wire=wire, agent_name="market_analyst"
        )

        events = []
        while not queue.empty():
            events.append(queue.get_nowait())
        types = [e.type for e in events]
        assert types == [
            EventType.STEP_BEGIN,
            EventType.TEXT,
            EventType.TOOL_CALL,
            EventType.TOOL_RESULT,
            EventType.STEP_BEGIN,
            EventType.TEXT,
            EventType.FINAL_ANSWER,
        ]
        assert all(e.data["agent"] == "market_analyst" for e in events)
        assert events[2].data["arguments"] == {"symbol": "TSLA"}
        assert events[-1].data["text"] == "BUY"

    async def test_tool_call_announced_before_execution(self, scripted) -> None:
        wire = Wire()
        queue = wire.subscribe()
        seen_during_call: list[EventType] = []

        class _PeekParams(BaseModel):
            symbol: str = ""

        class _PeekTool(BaseTool[_PeekParams]):
            name: ClassVar[str] = "echo"
            description: ClassVar[str] = "Records the events already on the wire."
            param_model: ClassVar[type[BaseModel]] = _PeekParams

            async def execute(self, params: _PeekParams) -> ToolResult:
                while not queue.empty():
                    seen_during_call.append(queue.get_nowait().type)
                return ToolOk(output="ok")

        registry = ToolRegistry.builder().register(_PeekTool()).build()
        provider = scripted([ECHO_ACTION, "Final Answer: BUY"])
        await react_loop("s", "u", provider, registry, wire=wire)

        assert seen_during_call[-1] is EventType.TOOL_CALL
