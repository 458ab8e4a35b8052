"""
CLI entry point for the Support Bot agent.

    python -m flowstate.templates.support_bot ask "What is the rate limit?" --mock
    python -m flowstate.templates.support_bot demo --mock
"""

import asyncio
import json
import sys

import click

from flowstate.observability import configure_logging

from .agent import default_agent

DEMO_QUESTIONS = [
    "What is the rate limit?",  # easy hit
    "How do I fix a 500 error?",  # edge case
    "How do I cook pasta?",  # out of domain
]


@click.group()
@click.version_option(version="1.0.0")
def cli():
    """Support Bot - answers from the SuperCloud docs only."""
    pass


@cli.command()
@click.argument("question")
@click.option("--mock", is_flag=True, help="Echo the best doc instead of calling a model")
@click.option("--verbose", "-v", is_flag=True, help="Show execution details")
def ask(question, mock, verbose):
    """Answer a single QUESTION."""
    configure_logging("INFO" if verbose else "WARNING")
    result = asyncio.run(default_agent.run(question, mock_mode=mock))
    if result.failed:
        click.echo(f"Run failed: {result.error}", err=True)
        sys.exit(1)
    click.echo(f"Agent: {result.state['answer']}")


@cli.command()
@click.option("--mock", is_flag=True, help="Echo the best doc instead of calling a model")
@click.option("--verbose", "-v", is_flag=True, help="Show execution details")
def demo(mock, verbose):
    """Ask the three canned questions."""
    configure_logging("INFO" if verbose else "WARNING")

    async def run_all():
        for question in DEMO_QUESTIONS:
            click.echo(f"\n--- User asks: \"{question}\" ---")
            result = await default_agent.run(question, mock_mode=mock)
            if result.failed:
                click.echo(f"Run failed: {result.error}", err=True)
            else:
                click.echo(f"Agent: {result.state['answer']}")

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
