"""Prompt templates for the agent roles."""

from tradegraph.prompt.template import (
    NullPromptProvider,
    PromptProvider,
    ResolvedPrompts,
    TemplatePromptProvider,
    flatten_templates,
    resolve_prompts,
    substitute,
)

__all__ = [
    "NullPromptProvider",
    "PromptProvider",
    "ResolvedPrompts",
    "TemplatePromptProvider",
    "flatten_templates",
    "resolve_prompts",
    "substitute",
]
