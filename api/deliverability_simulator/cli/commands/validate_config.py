"""CLI command for validating scenario files.

Validation runs in three stages:
1. YAML syntax and scenario schema
2. Rules file referenced by the scenario (or the standard rules)
3. Cross references: destinations, client types, tech ids, filtering
   levels and destination tools must all exist in the rules
"""

from enum import Enum
from pathlib import Path

import typer
import yaml
from rich.panel import Panel
from typing_extensions import Annotated

from deliverability_simulator.cli.output import console, output_json
from deliverability_simulator.config import GameRules, ScenarioConfig, load_scenario
from deliverability_simulator.errors import ConfigurationLookupError


class OutputFormat(str, Enum):
    """Output format options."""
    text = "text"
    json = "json"


def check_references(scenario: ScenarioConfig, rules: GameRules) -> list[str]:
    """Return one message per id the rules do not know."""
    errors = []
    destination_names = set(rules.destination_names)
    if scenario.destinations is not None:
        destination_names = {d.name for d in scenario.destinations}

    for team in scenario.teams:
        for tech_id in team.tech_stack:
            try:
                rules.tech(tech_id)
            except ConfigurationLookupError as e:
                errors.append(f"Team {team.name}: {e}")
        for client in team.clients:
            try:
                rules.client_profile(client.type)
            except ConfigurationLookupError as e:
                errors.append(f"Team {team.name}, client {client.id}: {e}")
            for dest in (client.destination_distribution or {}):
                if dest not in destination_names:
                    errors.append(
                        f"Team {team.name}, client {client.id}: unknown destination {dest}"
                    )

    team_names = {t.name for t in scenario.teams}
    for dest in scenario.destinations or []:
        try:
            rules.destination(dest.name)
        except ConfigurationLookupError as e:
            errors.append(f"Destination {dest.name}: {e}")
        for tool_id in dest.owned_tools:
            try:
                rules.destination_tool(tool_id)
            except ConfigurationLookupError as e:
                errors.append(f"Destination {dest.name}: {e}")
        for team_name in dest.filtering_policies:
            if team_name not in team_names:
                errors.append(f"Destination {dest.name}: policy for unknown team {team_name}")

    return errors


def validate_config(
    scenario_file: Annotated[
        Path,
        typer.Argument(help="Path to the scenario YAML file to validate"),
    ],
    format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format"),
    ] = OutputFormat.text,
):
    """Validate a scenario file and the rules it uses.

    Examples:

        # Basic validation
        deliverability-sim validate-config scenarios/demo.yaml

        # JSON output for programmatic use
        deliverability-sim validate-config scenarios/demo.yaml --format json
    """
    try:
        scenario, rules = load_scenario(scenario_file)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        _output_result(format, scenario_file, [str(e)])
        raise typer.Exit(code=1)

    errors = check_references(scenario, rules)
    _output_result(format, scenario_file, errors, scenario)
    if errors:
        raise typer.Exit(code=1)


def _output_result(
    format: OutputFormat,
    path: Path,
    errors: list[str],
    scenario: ScenarioConfig | None = None,
) -> None:
    if format == OutputFormat.json:
        data = {"valid": not errors, "file": str(path), "errors": errors}
        if scenario is not None:
            data["room_code"] = scenario.room_code
            data["teams"] = [t.name for t in scenario.teams]
            data["rounds"] = scenario.rounds
        output_json(data)
        return

    if errors:
        body = "\n".join(f"[red]✗[/red] {error}" for error in errors)
        console.print(Panel(body, title=f"[bold red]Invalid: {path}[/bold red]"))
        return

    assert scenario is not None
    body = (
        f"Room: {scenario.room_code}\n"
        f"Rounds: {scenario.rounds}\n"
        f"Teams: {', '.join(t.name for t in scenario.teams)}"
    )
    console.print(Panel(body, title=f"[bold green]Valid: {path}[/bold green]"))
