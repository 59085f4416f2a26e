"""Tests for tradegraph.config."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from tradegraph.config import LLMConfig, TradegraphConfig, WorkflowConfig
from tradegraph.errors import ConfigError

_ENV_VARS = (
    "TRADEGRAPH_MODEL",
    "TRADEGRAPH_MAX_STEPS",
    "TRADEGRAPH_RESEARCH_ROUNDS",
    "TRADEGRAPH_RISK_ROUNDS",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    def test_llm(self) -> None:
        llm = LLMConfig()
        assert llm.model == "openai/gpt-4o-mini"
        assert llm.temperature == 0.3
        assert llm.max_tokens == 2000

    def test_workflow(self) -> None:
        wf = WorkflowConfig()
        assert wf.max_steps == 20
        assert wf.research_rounds == 1
        assert wf.risk_rounds == 1
        assert wf.parallel_analysts and wf.parallel_debators
        assert wf.analysts == ["market", "fundamentals", "news", "social"]

    def test_load_without_file(self) -> None:
        config = TradegraphConfig.load(None)
        assert config == TradegraphConfig()
        assert config.report_dir == "reports"
        assert config.prompts_file is None


class TestLoad:
    def test_from_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps(
                {
                    "llm": {"model": "anthropic/claude-sonnet-4-5-20250929"},
                    "workflow": {"research_rounds": 3, "analysts": ["news"]},
                    "report_dir": "out",
                }
            )
        )
        config = TradegraphConfig.load(str(path))
        assert config.llm.model == "anthropic/claude-sonnet-4-5-20250929"
        assert config.llm.temperature == 0.3
        assert config.workflow.research_rounds == 3
        assert config.workflow.analysts == ["news"]
        assert config.report_dir == "out"

    def test_missing_file_uses_defaults(self, tmp_path: Path) -> None:
        config = TradegraphConfig.load(str(tmp_path / "absent.json"))
        assert config == TradegraphConfig()

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"workflow": {"max_steps": 5, "risk_rounds": 2}}))
        monkeypatch.setenv("TRADEGRAPH_MODEL", "gemini/gemini-2.5-flash")
        monkeypatch.setenv("TRADEGRAPH_MAX_STEPS", "7")
        monkeypatch.setenv("TRADEGRAPH_RESEARCH_ROUNDS", "2")
        config = TradegraphConfig.load(str(path))
        assert config.llm.model == "gemini/gemini-2.5-flash"
        assert config.workflow.max_steps == 7
        assert config.workflow.research_rounds == 2
        assert config.workflow.risk_rounds == 2

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError, match="Cannot read config"):
            TradegraphConfig.load(str(path))

    def test_invalid_values(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"workflow": {"max_steps": 0}}))
        with pytest.raises(ConfigError, match="Invalid configuration"):
            TradegraphConfig.load(str(path))

    def test_invalid_env_value(self, monkeypatch) -> None:
        monkeypatch.setenv("TRADEGRAPH_RISK_ROUNDS", "lots")
        with pytest.raises(ConfigError):
            TradegraphConfig.load(None)
