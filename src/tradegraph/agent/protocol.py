"""Text reasoning protocol: parse one model reply into a tagged variant.

The model answers in free text with two kinds of markers:

    Action: <tool_name>
    Action Input: {"symbol": "TSLA"}

or

    Final Answer: <text>

Parsing is two steps: locate the markers with a regex, then decode the
JSON object that follows ``Action Input:`` with the standard decoder, so
nested and multi-line objects work.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import Any, Union

FINAL_ANSWER_MARKER = "Final Answer:"

_ACTION_RE = re.compile(r"Action\s*:[ \t]*(\w+)[ \t]*\r?\n\s*Action Input\s*:\s*")
_DECODER = json.JSONDecoder()


@dataclass(frozen=True)
class FinalAnswer:
    text: str


@dataclass(frozen=True)
class Action:
    """A tool request.

    ``error`` is set when the input after ``Action Input:`` is not a JSON
    object; ``input`` is then empty.
    """

    name: str
    input: dict[str, Any] = field(default_factory=dict)
    error: str | None = None


@dataclass(frozen=True)
class NoAction:
    pass


Reply = Union[FinalAnswer, Action, NoAction]


def parse_reply(text: str) -> Reply:
    """Classify a model reply.

    A final answer wins over an action in the same reply; the first
    ``Final Answer:`` occurrence is used and the rest of the text, trimmed,
    is the answer.
    """
    idx = text.find(FINAL_ANSWER_MARKER)
    if idx >= 0:
        return FinalAnswer(text=text[idx + len(FINAL_ANSWER_MARKER) :].strip())

    match = _ACTION_RE.search(text)
    if match is None:
        return NoAction()

    name = match.group(1)
    payload, error = _decode_object(text, match.end())
    if error is not None:
        return Action(name=name, error=error)
    return Action(name=name, input=payload)


def _decode_object(text: str, start: int) -> tuple[dict[str, Any], str | None]:
    if start >= len(text) or text[start] != "{":
        snippet = text[start : start + 40].strip() or "<empty>"
        return {}, f"expected a JSON object, got {snippet!r}"
    try:
        value, _ = _DECODER.raw_decode(text, start)
    except json.JSONDecodeError as e:
        return {}, f"invalid JSON: {e.msg} (line {e.lineno}, column {e.colno})"
    if not isinstance(value, dict):
        return {}, "expected a JSON object"
    return value, None
