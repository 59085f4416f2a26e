"""LLM provider abstraction: unified via litellm.

The reasoning loop only needs one capability from a model: given a
message history and sampling parameters, return the completion text.
litellm handles provider detection, API keys and request shapes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from tradegraph.llm.message import GenerationParams, Message

if TYPE_CHECKING:
    from litellm import ModelResponse

logger = logging.getLogger(__name__)


@runtime_checkable
class ChatProvider(Protocol):
    """Protocol for chat-completion back ends."""

    async def complete(
        self,
        messages: list[Message],
        params: GenerationParams | None = None,
    ) -> str:
        """Return the completion text for ``messages``."""
        ...


# ---------------------------------------------------------------------------
# litellm provider
# ---------------------------------------------------------------------------


@dataclass
class LiteLLMProvider:
    """Chat provider backed by litellm.

    litellm detects the provider from the model string prefix
    (e.g. "openai/gpt-4o-mini", "anthropic/claude-...") and reads API keys
    from environment variables.
    """

    model: str
    default_params: GenerationParams = GenerationParams()

    async def complete(
        self,
        messages: list[Message],
        params: GenerationParams | None = None,
    ) -> str:
        params = params or self.default_params

        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": [m.to_openai_dict() for m in messages],
        }
        if params.temperature is not None:
            kwargs["temperature"] = params.temperature
        if params.max_tokens is not None:
            kwargs["max_tokens"] = params.max_tokens

        response = await _acompletion_with_retry(**kwargs)
        return _response_text(response)


@retry(
    retry=retry_if_exception_type((ConnectionError, TimeoutError, OSError)),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=30),
    before_sleep=before_sleep_log(logger, logging.WARNING),
    reraise=True,
)
async def _acompletion_with_retry(**kwargs: Any) -> ModelResponse:
    """Call litellm.acompletion with retry on transient errors."""
    import litellm

    return await litellm.acompletion(**kwargs)


def _response_text(response: Any) -> str:
    """Extract the assistant text from an OpenAI-shaped response."""
    choices = getattr(response, "choices", None)
    if not choices:
        return ""
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None) if message is not None else None
    return content or ""


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def create_provider(
    model: str,
    temperature: float | None = 0.3,
    max_tokens: int | None = 2000,
) -> ChatProvider:
    """Create a LiteLLM provider.

    Args:
        model: Model name with provider prefix (e.g. "openai/gpt-4o-mini").
        temperature: Default sampling temperature.
        max_tokens: Default max output tokens.
    """
    return LiteLLMProvider(
        model=model,
        default_params=GenerationParams(temperature=temperature, max_tokens=max_tokens),
    )
