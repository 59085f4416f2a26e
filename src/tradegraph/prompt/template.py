"""Prompt templates: lookup providers, substitution and fallback resolution."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Mapping, Protocol, runtime_checkable

from tradegraph.errors import PromptTemplateError

logger = logging.getLogger(__name__)

SYSTEM_SUFFIX = "system"
USER_SUFFIX = "prompt"
DEFAULT_TEMPLATES = "default.yaml"

_PLACEHOLDER_RE = re.compile(r"\{(\w+)\}")


@runtime_checkable
class PromptProvider(Protocol):
    """Source of role prompt templates, addressed by dot-separated key."""

    def system(self, key: str) -> str:
        """Template at ``<key>.system``, or "" when absent."""
        ...

    def user(self, key: str) -> str:
        """Template at ``<key>.prompt``, or "" when absent."""
        ...


class NullPromptProvider:
    """Provider with no templates; every agent uses its built-in prompts."""

    def system(self, key: str) -> str:
        return ""

    def user(self, key: str) -> str:
        return ""


class TemplatePromptProvider:
    """Provider backed by a flat ``key -> template`` mapping."""

    def __init__(self, templates: Mapping[str, str]) -> None:
        self._templates = dict(templates)

    def get(self, key: str) -> str:
        return self._templates.get(key, "")

    def system(self, key: str) -> str:
        return self.get(f"{key}.{SYSTEM_SUFFIX}")

    def user(self, key: str) -> str:
        return self.get(f"{key}.{USER_SUFFIX}")

    def keys(self) -> list[str]:
        return sorted(self._templates)

    def __len__(self) -> int:
        return len(self._templates)

    @classmethod
    def from_yaml(cls, path: str | Path) -> TemplatePromptProvider:
        """Load templates from a YAML file of nested mappings.

        ``{react: {trader: {system: ..., prompt: ...}}}`` becomes the keys
        ``react.trader.system`` and ``react.trader.prompt``.
        """
        try:
            text = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise PromptTemplateError(f"Cannot read prompt file {path}: {e}") from e
        return cls._from_text(text, str(path))

    @classmethod
    def bundled(cls) -> TemplatePromptProvider:
        """The role templates shipped with the package."""
        text = (
            resources.files("tradegraph.prompt")
            .joinpath(DEFAULT_TEMPLATES)
            .read_text(encoding="utf-8")
        )
        return cls._from_text(text, DEFAULT_TEMPLATES)

    @classmethod
    def _from_text(cls, text: str, origin: str) -> TemplatePromptProvider:
        import yaml  # lazy import, only needed when loading templates

        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise PromptTemplateError(f"Invalid YAML in {origin}: {e}") from e
        if not isinstance(data, dict):
            raise PromptTemplateError(f"{origin}: top level must be a mapping")

        templates = flatten_templates(data)
        logger.info("Loaded %d prompt templates from %s", len(templates), origin)
        return cls(templates)


def flatten_templates(data: Mapping[str, Any], prefix: str = "") -> dict[str, str]:
    """Flatten nested mappings into dot-separated keys; leaves must be strings."""
    flat: dict[str, str] = {}
    for key, value in data.items():
        full_key = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            flat.update(flatten_templates(value, full_key))
        elif isinstance(value, str):
            flat[full_key] = value
        else:
            raise PromptTemplateError(
                f"Template {full_key} must be a string, got {type(value).__name__}"
            )
    return flat


def substitute(template: str, variables: Mapping[str, str]) -> str:
    """Replace every ``{name}`` for each name in ``variables``, in one pass.

    Placeholders without a matching variable are left verbatim, and other
    braces (JSON examples in prompts) are untouched. Substituted values are
    not scanned again, so a report quoting ``{date}`` stays as written.
    """
    return _PLACEHOLDER_RE.sub(
        lambda m: variables.get(m.group(1), m.group(0)), template
    )


@dataclass(frozen=True)
class ResolvedPrompts:
    system: str
    user: str
    from_template: bool


def resolve_prompts(
    provider: PromptProvider,
    key: str | None,
    variables: Mapping[str, str],
    default_system: str,
    default_user: str,
) -> ResolvedPrompts:
    """Pick the templated prompts for ``key`` or fall back to the defaults.

    Templates are used only when both the system and the user template
    are non-empty. Both branches go through :func:`substitute`, so the
    ``{tools}`` listing is injected either way.
    """
    if key:
        system_template = provider.system(key)
        user_template = provider.user(key)
        if system_template and user_template:
            return ResolvedPrompts(
                system=substitute(system_template, variables),
                user=substitute(user_template, variables),
                from_template=True,
            )
        logger.debug("No templates for %s, using built-in prompts", key)

    return ResolvedPrompts(
        system=substitute(default_system, variables),
        user=substitute(default_user, variables),
        from_template=False,
    )
