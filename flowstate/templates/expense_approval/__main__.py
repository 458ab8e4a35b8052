"""
CLI entry point for the Expense Approval agent.

    python -m flowstate.templates.expense_approval run "Team dinner for $150.00" --mock
    python -m flowstate.templates.expense_approval demo --mock
"""

import asyncio
import json
import sys

import click

from flowstate.graph.hitl import ApprovalDecision, ApprovalResult, AutoApprover
from flowstate.observability import configure_logging

from .agent import ExpenseApprovalAgent, default_agent

DEMO_SCENARIOS = [
    ("Simple Coffee (Auto Approve)", "I bought a Coffee for $4.50"),
    ("Team Dinner (Needs Approval)", "Team dinner at Steakhouse for $150.00"),
    ("New Laptop (High Value Reject)", "MacBook Pro for $2500.00"),
    ("Forbidden Item (Policy Reject)", "Beers on a Tuesday morning for $20"),
]


class ConsoleApprover(AutoApprover):
    """Asks the person at the terminal instead of answering automatically."""

    async def request(self, request, interrupt):
        self.requests.append(request)
        click.echo(request.format_for_display())
        prompt = asyncio.to_thread(click.confirm, "Approve this expense?", default=False)
        finished, approved = await interrupt.wait_for(prompt)
        if not finished:
            return None
        decision = ApprovalDecision.APPROVE if approved else ApprovalDecision.REJECT
        return ApprovalResult(decision=decision, approver="console")


def _log_level(verbose: bool, debug: bool) -> str:
    if debug:
        return "DEBUG"
    return "INFO" if verbose else "WARNING"


def _summary(result) -> dict:
    data = {
        "status": result.status.value,
        "steps_executed": result.steps_executed,
        "path": result.path,
        "state": result.state,
    }
    if result.error:
        data["error"] = str(result.error)
    return data


@click.group()
@click.version_option(version="1.0.0")
def cli():
    """Expense Approval Agent - policy and amount based expense routing."""
    pass


@cli.command()
@click.argument("expense")
@click.option("--mock", is_flag=True, help="Use the offline classifier instead of a model")
@click.option("--ask", is_flag=True, help="Prompt for manager approval instead of auto-approving")
@click.option("--verbose", "-v", is_flag=True, help="Show execution details")
@click.option("--debug", is_flag=True, help="Show debug logging")
def run(expense, mock, ask, verbose, debug):
    """Process a single expense report."""
    configure_logging(_log_level(verbose, debug))
    approvals = ConsoleApprover() if ask else AutoApprover()
    result = asyncio.run(default_agent.run(expense, mock_mode=mock, approvals=approvals))
    click.echo(json.dumps(_summary(result), indent=2, default=str))
    sys.exit(0 if result.success else 1)


@cli.command()
@click.option("--mock", is_flag=True, help="Use the offline classifier instead of a model")
@click.option("--verbose", "-v", is_flag=True, help="Show execution details")
def demo(mock, verbose):
    """Run the four canned scenarios."""
    configure_logging(_log_level(verbose, False))
    agent = ExpenseApprovalAgent()

    async def run_all():
        for title, expense in DEMO_SCENARIOS:
            click.echo("=" * 42)
            click.echo(f"SCENARIO: {title}")
            click.echo("=" * 42)
            result = await agent.run(expense, mock_mode=mock)
            click.echo(f"  Status: {result.state.get('status')} ({result.status.value})")
            for line in result.state.get("logs", []):
                click.echo(f"    - {line}")
            click.echo("")

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
