"""Render and persist decision reports."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from tradegraph.model import DecisionState, RiskStance

logger = logging.getLogger(__name__)

_NOT_REACHED = "_Not reached._"


def render_report(state: DecisionState) -> str:
    """Markdown report with one section per stage of the run."""
    signal = state.final_signal.value if state.final_signal else "N/A"
    lines = [
        f"# Trading decision: {state.symbol} ({state.date_str})",
        "",
        f"**Final signal:** {signal}",
    ]
    error = state.metadata.get("error")
    if error:
        lines.append(f"**Error:** {error}")

    lines += ["", "## Analyst reports", ""]
    lines += _items(state.analyst_reports)

    lines += ["", "## Research debate", ""]
    lines += _items(state.researcher_viewpoints)

    lines += ["", "## Research manager decision", ""]
    lines.append(state.research_manager_decision or _NOT_REACHED)

    lines += ["", "## Trading plan", ""]
    lines.append(state.trading_plan or _NOT_REACHED)

    lines += ["", "## Risk debate", ""]
    debate = state.risk_debate
    if debate.is_empty:
        lines.append(_NOT_REACHED)
    else:
        for stance in RiskStance:
            statements = debate.statements(stance)
            if not statements:
                continue
            lines += [f"### {stance.value.capitalize()}", ""]
            lines += _items(statements)
            lines.append("")

    lines += ["", "## Risk manager decision", ""]
    lines.append(state.risk_manager_decision or _NOT_REACHED)
    return "\n".join(lines).rstrip() + "\n"


def _items(items: tuple[str, ...]) -> list[str]:
    if not items:
        return [_NOT_REACHED]
    out: list[str] = []
    for item in items:
        out += [item, ""]
    return out[:-1]


def write_report(state: DecisionState, directory: str | Path) -> Path:
    """Write ``<symbol>_<date>.md`` and a JSON dump of the state.

    Returns the markdown path.
    """
    out_dir = Path(directory)
    out_dir.mkdir(parents=True, exist_ok=True)
    stem = f"{state.symbol}_{state.date_str}"

    md_path = out_dir / f"{stem}.md"
    md_path.write_text(render_report(state), encoding="utf-8")

    json_path = out_dir / f"{stem}.json"
    json_path.write_text(
        json.dumps(state.to_dict(), indent=2, ensure_ascii=False, default=str),
        encoding="utf-8",
    )
    logger.info("Report written to %s", md_path)
    return md_path
