"""LLM abstraction layer: unified via litellm."""

from tradegraph.llm.message import (
    OBSERVATION_PREFIX,
    GenerationParams,
    Message,
)
from tradegraph.llm.provider import ChatProvider, LiteLLMProvider, create_provider

__all__ = [
    "OBSERVATION_PREFIX",
    "GenerationParams",
    "Message",
    "ChatProvider",
    "LiteLLMProvider",
    "create_provider",
]
