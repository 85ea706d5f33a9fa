"""Simulate command - Resolve every round of a scenario file."""

import logging
import time
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from deliverability_simulator.cli.output import (
    log_error,
    log_final_scores,
    log_info,
    log_success,
    log_warning,
    output_json,
)
from deliverability_simulator.config import load_rules, load_scenario
from deliverability_simulator.errors import DeliverabilitySimError
from deliverability_simulator.game import GameRunner
from deliverability_simulator.resolution.orchestrator import ResolutionOrchestrator
from deliverability_simulator.resolution.verbose import ResolutionLogger, VerboseConfig


def simulate(
    config: Annotated[
        Path,
        typer.Option(
            "--config",
            "-c",
            help="Scenario file (YAML)",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
        ),
    ],
    rounds: Annotated[
        Optional[int],
        typer.Option("--rounds", "-r", help="Override number of rounds to resolve", min=1),
    ] = None,
    rules_file: Annotated[
        Optional[Path],
        typer.Option("--rules", help="Override the rules file named by the scenario"),
    ] = None,
    room_code: Annotated[
        Optional[str],
        typer.Option("--room-code", help="Override the room code (changes spam trap rolls)"),
    ] = None,
    no_spam_traps: Annotated[
        bool,
        typer.Option("--no-spam-traps", help="Skip spam trap rolls"),
    ] = False,
    no_score: Annotated[
        bool,
        typer.Option("--no-score", help="Skip final scoring"),
    ] = False,
    history: Annotated[
        bool,
        typer.Option("--history/--no-history", help="Include per-round results in the JSON output"),
    ] = True,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Suppress logs (stdout only)"),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show every verbose category"),
    ] = False,
    verbose_delivery: Annotated[
        Optional[bool],
        typer.Option("--verbose-delivery/--no-verbose-delivery", help="Per-destination delivery rates"),
    ] = None,
    verbose_reputation: Annotated[
        Optional[bool],
        typer.Option("--verbose-reputation/--no-verbose-reputation", help="Reputation changes"),
    ] = None,
    verbose_spam_traps: Annotated[
        Optional[bool],
        typer.Option("--verbose-spam-traps/--no-verbose-spam-traps", help="Spam trap hits"),
    ] = None,
    verbose_destinations: Annotated[
        Optional[bool],
        typer.Option(
            "--verbose-destinations/--no-verbose-destinations",
            help="Destination satisfaction and revenue",
        ),
    ] = None,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Enable debug logging from the engine"),
    ] = False,
):
    """Run every round of a scenario and score the game.

    Results are written to stdout as JSON; logs go to stderr.

    Examples:

        # Basic run with JSON output
        deliverability-sim simulate --config scenario.yaml

        # Quiet mode for piping
        deliverability-sim simulate -c scenario.yaml --quiet

        # Same teams, different spam trap rolls
        deliverability-sim simulate -c scenario.yaml --room-code XYZ789

        # Detailed round output
        deliverability-sim simulate -c scenario.yaml --verbose --rounds 2
    """
    try:
        if quiet and verbose:
            log_error("--quiet and --verbose are mutually exclusive")
            raise typer.Exit(1)

        if debug:
            logging.basicConfig(level=logging.DEBUG)

        log_info(f"Loading scenario from {config}", quiet)
        try:
            scenario, rules = load_scenario(config)
            if rules_file is not None:
                rules = load_rules(rules_file)
                log_info(f"Using rules from {rules_file}", quiet)
        except (FileNotFoundError, ValueError) as e:
            log_error(str(e))
            raise typer.Exit(1)

        if room_code is not None:
            scenario = scenario.model_copy(update={"room_code": room_code})
        total_rounds = rounds if rounds is not None else scenario.rounds

        snapshot = scenario.to_snapshot(rules)
        if not snapshot.destinations:
            log_warning("Scenario has no destinations; no mail will be delivered", quiet)

        verbose_config = VerboseConfig.from_cli_flags(
            verbose=verbose,
            verbose_delivery=verbose_delivery,
            verbose_reputation=verbose_reputation,
            verbose_spam_traps=verbose_spam_traps,
            verbose_destinations=verbose_destinations,
            quiet=quiet,
        )
        orchestrator = ResolutionOrchestrator(
            rules,
            verbose_logger=ResolutionLogger(verbose_config),
            spam_traps_enabled=not no_spam_traps,
        )

        log_info(
            f"Resolving {total_rounds} round(s) for {len(snapshot.teams)} team(s) "
            f"in room {snapshot.room_code}",
            quiet,
        )
        start_time = time.time()
        outcome = GameRunner(orchestrator, rules).run(
            snapshot, rounds=total_rounds, score=not no_score
        )
        duration = time.time() - start_time
        log_success(f"Resolved {len(outcome.history)} round(s) in {duration:.3f}s", quiet)

        if outcome.final_scores is not None:
            log_final_scores(outcome.final_scores, quiet)

        output_json(outcome.to_dict(include_history=history))

    except typer.Exit:
        raise
    except KeyboardInterrupt:
        log_error("Interrupted by user")
        raise typer.Exit(130)
    except DeliverabilitySimError as e:
        log_error(f"Error: {e}")
        raise typer.Exit(1)
