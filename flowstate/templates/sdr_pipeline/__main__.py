"""
CLI entry point for the SDR Pipeline agent.

    python -m flowstate.templates.sdr_pipeline run user_123 https://logistics-widgets.com --mock
    python -m flowstate.templates.sdr_pipeline demo --mock
"""

import asyncio
import json
import sys

import click

from flowstate.observability import configure_logging

from .agent import SDRPipelineAgent, default_agent

DEMO_RUNS = [
    ("RUN 1: Wealthy User (Success)", "user_123", "https://logistics-widgets.com"),
    ("RUN 2: Poor User (Upsell Trigger)", "user_456", "https://another-startup.com"),
]


def _report(result) -> None:
    if result.failed:
        click.echo(f"  Run failed: {result.error}", err=True)
    elif result.state.get("error"):
        click.echo(f"  [Billing] {result.state['error']}")
    else:
        click.echo("\n>>> DELIVERABLE (Ready to Send) <<<")
        click.echo(result.state["email_draft"])


@click.group()
@click.version_option(version="1.0.0")
def cli():
    """AutoSDR - billed cold-email drafting."""
    pass


@cli.command()
@click.argument("user_id")
@click.argument("target_url")
@click.option("--mock", is_flag=True, help="Use canned model replies instead of a model")
@click.option("--verbose", "-v", is_flag=True, help="Show execution details")
def run(user_id, target_url, mock, verbose):
    """Draft one email for TARGET_URL, billed to USER_ID."""
    configure_logging("INFO" if verbose else "WARNING")
    result = asyncio.run(default_agent.run(user_id, target_url, mock_mode=mock))
    _report(result)
    sys.exit(0 if result.success and not result.state.get("error") else 1)


@cli.command()
@click.option("--mock", is_flag=True, help="Use canned model replies instead of a model")
@click.option("--verbose", "-v", is_flag=True, help="Show execution details")
def demo(mock, verbose):
    """Run the wealthy-user and poor-user scenarios against fresh demo accounts."""
    configure_logging("INFO" if verbose else "WARNING")
    agent = SDRPipelineAgent()

    async def run_all():
        for title, user_id, target_url in DEMO_RUNS:
            click.echo(f"\n=== {title} ===")
            result = await agent.run(user_id, target_url, mock_mode=mock)
            _report(result)

    asyncio.run(run_all())


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
