"""Rules command - Print the effective game rules."""

from enum import Enum
from pathlib import Path
from typing import Optional

import typer
import yaml
from typing_extensions import Annotated

from deliverability_simulator.cli.output import log_error, output_json
from deliverability_simulator.config import load_rules


class RulesFormat(str, Enum):
    json = "json"
    yaml = "yaml"


def show_rules(
    rules_file: Annotated[
        Optional[Path],
        typer.Option("--rules", help="Rules file to merge over the defaults"),
    ] = None,
    format: Annotated[
        RulesFormat,
        typer.Option("--format", "-f", help="Output format"),
    ] = RulesFormat.json,
):
    """Print the effective game rules.

    Without --rules the standard rules are printed; the output is a
    complete rules file that can be edited and passed back in.
    """
    try:
        rules = load_rules(rules_file)
    except (FileNotFoundError, ValueError) as e:
        log_error(str(e))
        raise typer.Exit(1)

    data = rules.model_dump(mode="json")
    if format == RulesFormat.yaml:
        typer.echo(yaml.safe_dump(data, sort_keys=False))
    else:
        output_json(data)
