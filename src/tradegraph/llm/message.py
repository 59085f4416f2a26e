"""Message types for the chat interface."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

OBSERVATION_PREFIX = "Observation: "


@dataclass(frozen=True)
class Message:
    """One entry of a conversation history."""

    role: Literal["system", "user", "assistant"]
    content: str = ""

    @classmethod
    def system(cls, text: str) -> Message:
        return cls(role="system", content=text)

    @classmethod
    def user(cls, text: str) -> Message:
        return cls(role="user", content=text)

    @classmethod
    def assistant(cls, text: str) -> Message:
        return cls(role="assistant", content=text)

    @classmethod
    def observation(cls, text: str) -> Message:
        """An observation fed back to the model after an action.

        Sent with the user role since the text protocol carries no tool
        call ids.
        """
        return cls(role="user", content=f"{OBSERVATION_PREFIX}{text}")

    @property
    def is_observation(self) -> bool:
        return self.role == "user" and self.content.startswith(OBSERVATION_PREFIX)

    def to_openai_dict(self) -> dict[str, Any]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class GenerationParams:
    """Sampling parameters for one completion request."""

    temperature: float | None = 0.3
    max_tokens: int | None = 2000

