"""Exception types raised by tradegraph."""

from __future__ import annotations


class TradegraphError(Exception):
    """Base class for all tradegraph errors."""


class StateTransitionError(TradegraphError):
    """An illegal write to a DecisionState (set-once field, frozen debate)."""


class PromptTemplateError(TradegraphError):
    """A prompt template file could not be read or has the wrong shape."""


class ConfigError(TradegraphError):
    """A configuration file could not be parsed or validated."""
