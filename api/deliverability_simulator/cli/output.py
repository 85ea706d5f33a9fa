"""Console helpers for the deliverability-sim CLI.

Game results go to stdout as JSON and everything meant for a person goes
to stderr, so `deliverability-sim simulate -c game.yaml | jq` keeps
working while round logs still reach the terminal.
"""

import json
from typing import Any, Optional

from rich.console import Console
from rich.table import Table

from deliverability_simulator.scoring.types import FinalScoreOutput

console = Console(stderr=True)


def output_json(data: Any, indent: Optional[int] = 2):
    """Write a JSON document to stdout.

    Args:
        data: JSON-serializable game output
        indent: Spaces per level, or None for a single line
    """
    print(json.dumps(data, indent=indent), flush=True)


def _log(marker: str, message: str, style: Optional[str] = None, quiet: bool = False):
    if quiet:
        return
    console.print(f"{marker} {message}", style=style)


def log_info(message: str, quiet: bool = False):
    _log("[blue]ℹ[/blue]", message, quiet=quiet)


def log_success(message: str, quiet: bool = False):
    _log("[green]✓[/green]", message, quiet=quiet)


def log_error(message: str):
    """Errors ignore --quiet."""
    _log("[red]✗[/red]", message, style="bold red")


def log_warning(message: str, quiet: bool = False):
    _log("[yellow]⚠[/yellow]", message, style="yellow", quiet=quiet)


def log_final_scores(scores: FinalScoreOutput, quiet: bool = False):
    """Print the victory screen tables to stderr.

    Args:
        scores: Output of calculate_final_scores
        quiet: If True, suppress output
    """
    if quiet:
        return

    table = Table(title="Final Scores", show_header=True, header_style="bold")
    table.add_column("Rank", justify="right")
    table.add_column("Team")
    table.add_column("Reputation", justify="right")
    table.add_column("Revenue", justify="right")
    table.add_column("Technical", justify="right")
    table.add_column("Total", justify="right", style="bold")
    table.add_column("Status")

    for result in scores.team_results:
        status = "[green]qualified[/green]"
        if not result.qualified:
            status = f"[red]{result.disqualification_reason}[/red]"
        breakdown = result.score_breakdown
        table.add_row(
            str(result.rank),
            result.team,
            f"{breakdown.reputation_score:.2f}",
            f"{breakdown.revenue_score:.2f}",
            f"{breakdown.technical_score:.2f}",
            f"{result.total_score:.2f}",
            status,
        )
    console.print(table)

    if scores.winner is None:
        console.print("[bold red]No winner: every team was disqualified[/bold red]")
    else:
        label = " & ".join(scores.winner.teams)
        suffix = " (tie broken by reputation)" if scores.winner.tie_breaker else ""
        console.print(
            f"[bold green]Winner: {label}[/bold green] "
            f"with {scores.winner.total_score:.2f} points{suffix}"
        )

    dest = scores.destination_results
    breakdown = dest.score_breakdown
    outcome = "[green]success[/green]" if dest.success else "[yellow]below target[/yellow]"
    console.print(
        f"Destinations: {dest.collaborative_score:.2f} points ({outcome}) | "
        f"protection {breakdown.industry_protection:.2f}, "
        f"coordination {breakdown.coordination_bonus:.2f}, "
        f"satisfaction {breakdown.user_satisfaction:.2f}"
    )
