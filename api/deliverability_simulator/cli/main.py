"""Deliverability Simulator CLI - Main entry point."""

import typer
from typing_extensions import Annotated

from deliverability_simulator import __version__

app = typer.Typer(
    name="deliverability-sim",
    help="Deliverability Simulator - Round resolution engine for the email deliverability game",
    add_completion=True,
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        from deliverability_simulator.cli.output import console
        console.print(f"[bold]Deliverability Simulator[/bold] v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """Deliverability Simulator CLI - Resolve game rounds offline from scenario files."""
    pass


# Import commands after app is defined to avoid circular imports
from deliverability_simulator.cli.commands.simulate import simulate
from deliverability_simulator.cli.commands.validate_config import validate_config
from deliverability_simulator.cli.commands.rules import show_rules

app.command(name="simulate", help="Run every round of a scenario and score the game")(simulate)
app.command(name="validate-config", help="Validate a scenario file and the rules it uses")(validate_config)
app.command(name="rules", help="Print the effective game rules as JSON")(show_rules)


if __name__ == "__main__":
    app()
