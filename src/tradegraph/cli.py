"""CLI entry point for tradegraph."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import TYPE_CHECKING

import typer

from tradegraph.config import TradegraphConfig
from tradegraph.errors import ConfigError, PromptTemplateError

if TYPE_CHECKING:
    from tradegraph.model import DecisionState
    from tradegraph.prompt import PromptProvider
    from tradegraph.session.wire import Wire

app = typer.Typer(
    name="tradegraph",
    help="Multi-agent trading decisions: analysts, debates, a trader and risk review.",
    no_args_is_help=True,
)

_SIGNAL_STYLES = {
    "BUY": "bold green",
    "SELL": "bold red",
    "HOLD": "bold yellow",
    "ERROR": "bold white on red",
}


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _load_prompts(
    prompts_file: str | None, no_templates: bool
) -> PromptProvider:
    from tradegraph.prompt import NullPromptProvider, TemplatePromptProvider

    if no_templates:
        return NullPromptProvider()
    if prompts_file:
        return TemplatePromptProvider.from_yaml(prompts_file)
    return TemplatePromptProvider.bundled()


@app.command()
def run(
    symbol: str = typer.Argument(help="Ticker symbol, e.g. TSLA."),
    date: str | None = typer.Option(
        None, "--date", "-d", help="Decision date, YYYY-MM-DD (default: today)."
    ),
    model: str | None = typer.Option(
        None,
        "--model",
        "-m",
        help="LLM model to use (default: from env/config).",
    ),
    config_file: str | None = typer.Option(
        None, "--config", "-c", help="Config file path."
    ),
    prompts_file: str | None = typer.Option(
        None, "--prompts", "-p", help="YAML prompt templates (default: bundled)."
    ),
    no_templates: bool = typer.Option(
        False, "--no-templates", help="Use the built-in prompts only."
    ),
    output: str | None = typer.Option(
        None, "--output", "-o", help="Report directory (default: from config)."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging."
    ),
) -> None:
    """Run one trading decision for SYMBOL and print the report."""
    setup_logging(verbose)

    try:
        config = TradegraphConfig.load(config_file)
        if model:
            config.llm.model = model
        prompts = _load_prompts(prompts_file or config.prompts_file, no_templates)
    except (ConfigError, PromptTemplateError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo("tradegraph v0.1.0")
    typer.echo(f"Symbol: {symbol}")
    typer.echo(f"Date: {date or 'today'}")
    typer.echo(f"Model: {config.llm.model}")
    typer.echo(f"Analysts: {', '.join(config.workflow.analysts)}")
    typer.echo(
        f"Rounds: research={config.workflow.research_rounds}, "
        f"risk={config.workflow.risk_rounds}"
    )
    _show_api_key_status(config)
    typer.echo("---")

    try:
        state = asyncio.run(_run_decision(symbol, date, config, prompts))
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    from rich.console import Console
    from rich.markdown import Markdown
    from rich.panel import Panel

    from tradegraph.model import Signal
    from tradegraph.report import render_report, write_report

    console = Console()
    console.rule()
    console.print(Markdown(render_report(state)))
    report_path = write_report(state, output or config.report_dir)
    typer.echo(f"Report saved to: {report_path}")

    signal = state.final_signal or Signal.ERROR
    style = _SIGNAL_STYLES.get(signal, "bold")
    console.print(Panel(f"Final signal: {signal.value}", style=style, expand=False))
    if signal is Signal.ERROR:
        raise typer.Exit(1)


def _show_api_key_status(config: TradegraphConfig) -> None:
    """Print which API key is active so the user can verify the right one is loaded."""
    provider_prefix = config.llm.model.split("/")[0] if "/" in config.llm.model else ""
    key_env_map = {
        "anthropic": "ANTHROPIC_API_KEY",
        "gemini": "GEMINI_API_KEY",
        "openai": "OPENAI_API_KEY",
    }
    env_var = key_env_map.get(provider_prefix, "")
    if env_var:
        key = os.environ.get(env_var, "")
        if key:
            masked = f"{key[:8]}...{key[-4:]}" if len(key) > 12 else "***"
            typer.echo(f"API key: {env_var} = {masked}")
        else:
            typer.echo(
                f"WARNING: {env_var} is not set! Set it in .env or your shell.",
                err=True,
            )
    else:
        typer.echo(f"Provider: {provider_prefix or 'unknown'} (check API key manually)")


async def _run_decision(
    symbol: str,
    date: str | None,
    config: TradegraphConfig,
    prompts: PromptProvider,
) -> DecisionState:
    """Build the graph, stream its events and run one decision."""
    from tradegraph.data import YFinanceAggregator
    from tradegraph.graph import build_trading_graph
    from tradegraph.llm.provider import create_provider
    from tradegraph.session.wire import Wire

    wire = Wire()
    provider = create_provider(
        model=config.llm.model,
        temperature=config.llm.temperature,
        max_tokens=config.llm.max_tokens,
    )
    graph = build_trading_graph(
        provider=provider,
        aggregator=YFinanceAggregator(),
        prompts=prompts,
        config=config,
        wire=wire,
    )
    consumer_task = asyncio.create_task(_consume_wire(wire))

    try:
        return await graph.run_decision(symbol, date)
    finally:
        # Signal wire close and wait for consumer to finish
        wire.close()
        await consumer_task


async def _consume_wire(wire: Wire) -> None:
    """Print wire events as plain text until the wire closes."""
    from tradegraph.session.wire import EventType

    queue = wire.subscribe()
    while True:
        event = await queue.get()
        if event is None:
            break

        d = event.data
        agent = d.get("agent")
        prefix = f"  [{agent}] " if agent else "  "

        if event.type == EventType.STAGE_BEGIN:
            print(f"\n=== Stage: {d.get('stage', '?')} ===", flush=True)

        elif event.type == EventType.STAGE_END:
            print(f"=== {d.get('stage', '?')} done ===", flush=True)

        elif event.type == EventType.STEP_BEGIN:
            print(f"\n{prefix}[Step {d.get('step', 0)}]", flush=True)

        elif event.type == EventType.TEXT:
            print(f"{prefix}{d.get('text', '')}", flush=True)

        elif event.type == EventType.TOOL_CALL:
            print(f"{prefix}> {d.get('tool', '?')} {d.get('arguments', {})}", flush=True)

        elif event.type == EventType.TOOL_RESULT:
            content = d.get("content", "")
            first_line = content.split("\n")[0][:100] if content else "(empty)"
            print(f"{prefix}< {d.get('tool', '?')}: {first_line}", flush=True)

        elif event.type == EventType.FINAL_ANSWER:
            print(f"{prefix}[final answer]", flush=True)

        elif event.type == EventType.STATUS:
            print(f"{prefix}{d.get('message', '')}", flush=True)

        elif event.type == EventType.ERROR:
            stage = d.get("stage")
            where = f" in {stage}" if stage else ""
            print(f"\nERROR{where}: {d.get('error', 'Unknown error')}", flush=True)

        elif event.type == EventType.RUN_END:
            print(f"\nSignal for {d.get('symbol')}: {d.get('signal')}", flush=True)

    wire.unsubscribe(queue)


@app.command()
def tools() -> None:
    """List the market data tools available to the agents."""
    from tradegraph.data import YFinanceAggregator
    from tradegraph.tool.market import build_market_tools

    registry = build_market_tools(YFinanceAggregator())
    typer.echo(registry.describe())


@app.command()
def prompts(
    prompts_file: str | None = typer.Argument(
        None, help="YAML prompt templates (default: bundled)."
    ),
) -> None:
    """List the prompt template keys in FILE or in the bundled set."""
    from tradegraph.prompt import TemplatePromptProvider

    try:
        provider = (
            TemplatePromptProvider.from_yaml(prompts_file)
            if prompts_file
            else TemplatePromptProvider.bundled()
        )
    except PromptTemplateError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    for key in provider.keys():
        typer.echo(key)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
