"""Configuration: Pydantic models for tradegraph settings."""

from __future__ import annotations

import json
import os
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from tradegraph.errors import ConfigError

ANALYST_KINDS = ("market", "fundamentals", "news", "social", "comprehensive")


class LLMConfig(BaseModel):
    """LLM provider configuration.

    Model names use litellm's provider-prefix format:
        "openai/gpt-4o-mini"
        "anthropic/claude-sonnet-4-5-20250929"
        "gemini/gemini-2.5-flash"

    API keys are read from env vars automatically by litellm.
    """

    model: str = Field(default="openai/gpt-4o-mini")
    temperature: float | None = Field(default=0.3)
    max_tokens: int | None = Field(default=2000)


class WorkflowConfig(BaseModel):
    """Trading graph configuration."""

    max_steps: int = Field(
        default=20, ge=1, description="Max model calls per agent reasoning loop"
    )
    research_rounds: int = Field(
        default=1, ge=0, description="Bull/bear debate rounds"
    )
    risk_rounds: int = Field(
        default=1, ge=0, description="Aggressive/conservative/neutral debate rounds"
    )
    parallel_analysts: bool = Field(
        default=True, description="Run the analyst stage concurrently"
    )
    parallel_debators: bool = Field(
        default=True, description="Run the risk debators of one round concurrently"
    )
    analysts: list[str] = Field(
        default_factory=lambda: ["market", "fundamentals", "news", "social"],
        description=f"Analyst roster, in report order. Known: {', '.join(ANALYST_KINDS)}",
    )


class TradegraphConfig(BaseModel):
    """Top-level tradegraph configuration."""

    llm: LLMConfig = Field(default_factory=LLMConfig)
    workflow: WorkflowConfig = Field(default_factory=WorkflowConfig)
    prompts_file: str | None = Field(
        default=None, description="YAML prompt templates (defaults to the bundled set)"
    )
    report_dir: str = Field(default="reports", description="Directory for reports")

    @classmethod
    def load(cls, config_path: str | None = None) -> TradegraphConfig:
        """Load config from file, env vars, or defaults.

        Priority: env vars > config file > defaults.

        Env vars:
            TRADEGRAPH_MODEL            - Override model (litellm format)
            TRADEGRAPH_MAX_STEPS        - Override reasoning loop step budget
            TRADEGRAPH_RESEARCH_ROUNDS  - Override bull/bear debate rounds
            TRADEGRAPH_RISK_ROUNDS      - Override risk debate rounds
        """
        from dotenv import load_dotenv

        load_dotenv()

        config_data: dict[str, Any] = {}

        if config_path and os.path.exists(config_path):
            try:
                with open(config_path) as f:
                    config_data = json.load(f)
            except (OSError, json.JSONDecodeError) as e:
                raise ConfigError(f"Cannot read config {config_path}: {e}") from e

        llm = dict(config_data.get("llm", {}))
        workflow = dict(config_data.get("workflow", {}))

        env_model = os.environ.get("TRADEGRAPH_MODEL")
        if env_model:
            llm["model"] = env_model

        for env_name, key in (
            ("TRADEGRAPH_MAX_STEPS", "max_steps"),
            ("TRADEGRAPH_RESEARCH_ROUNDS", "research_rounds"),
            ("TRADEGRAPH_RISK_ROUNDS", "risk_rounds"),
        ):
            value = os.environ.get(env_name)
            if value:
                workflow[key] = value

        if llm:
            config_data["llm"] = llm
        if workflow:
            config_data["workflow"] = workflow

        try:
            return cls.model_validate(config_data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e
