"""
CLI entry point for the Market Monitor agent.

    POLL_INTERVAL_MS=1000 python -m flowstate.templates.market_monitor run --mock
    DEMO_MODE=false python -m flowstate.templates.market_monitor run --mock  # until Ctrl+C
"""

import asyncio
import dataclasses
import json
import sys

import click

from flowstate.config import RunConfig
from flowstate.graph.interrupt import InterruptController
from flowstate.observability import configure_logging

from .agent import default_agent

# Continuous runs still need a budget; this one is effectively "until cancelled"
CONTINUOUS_MAX_STEPS = 10_000_000


@click.group()
@click.version_option(version="1.0.0")
def cli():
    """Market Monitor Agent - ambient news triage."""
    pass


@cli.command()
@click.option("--mock", is_flag=True, help="Use the offline triage instead of a model")
@click.option("--max-steps", type=int, default=None, help="Override the step budget")
@click.option("--verbose/--quiet", default=True, help="Show each tick")
def run(mock, max_steps, verbose):
    """Monitor the feed. Ctrl+C (or SIGTERM) stops at the next poll."""
    configure_logging("INFO" if verbose else "WARNING")

    run_config = RunConfig()
    if max_steps is not None:
        run_config = dataclasses.replace(run_config, max_steps=max_steps)
    elif not run_config.demo_mode:
        run_config = dataclasses.replace(run_config, max_steps=CONTINUOUS_MAX_STEPS)

    mode = "DEMO (stops after one cycle)" if run_config.demo_mode else "CONTINUOUS (runs forever)"
    click.echo("AMBIENT AGENT - Continuous Monitor")
    click.echo(f"  Poll Interval: {run_config.poll_interval}s")
    click.echo(f"  Mode: {mode}")
    click.echo("  Press Ctrl+C to stop gracefully\n")

    async def monitor():
        interrupt = InterruptController(poll_interval=min(run_config.poll_interval, 0.5))
        interrupt.install_signal_handlers()
        try:
            return await default_agent.run(mock_mode=mock, interrupt=interrupt, run_config=run_config)
        finally:
            interrupt.remove_signal_handlers()

    result = asyncio.run(monitor())

    if result.failed:
        click.echo(f"[Ambient] Fatal error: {result.error}", err=True)
        sys.exit(1)
    if result.cancelled:
        click.echo(f"\n[Ambient] {result.cancel_reason}. Shut down gracefully.")
    else:
        click.echo("\n[Ambient] Agent stopped cleanly.")
    click.echo(json.dumps({"steps_executed": result.steps_executed, "alerts": result.state["alerts"]}, indent=2))


@cli.command()
@click.option("--json", "output_json", is_flag=True)
def info(output_json):
    """Show agent information."""
    info_data = default_agent.info()
    if output_json:
        click.echo(json.dumps(info_data, indent=2))
    else:
        click.echo(f"Agent: {info_data['name']}")
        click.echo(f"Version: {info_data['version']}")
        click.echo(f"Description: {info_data['description']}")
        click.echo(f"\nNodes: {', '.join(info_data['nodes'])}")
        click.echo(f"Entry: {info_data['entry_node']}")


if __name__ == "__main__":
    cli()
