"""Verbose logging for round resolution.

Sections printed while a round resolves, each behind its own flag:
round banners, volume, delivery tables (--verbose-delivery), reputation
changes (--verbose-reputation), complaints, spam trap hits
(--verbose-spam-traps) and destination revenue (--verbose-destinations).

The logger is handed to the ResolutionOrchestrator; calculators never log.

Example:
    >>> from deliverability_simulator.resolution.verbose import (
    ...     ResolutionLogger, VerboseConfig,
    ... )
    >>> logger = ResolutionLogger(VerboseConfig.all_enabled())
    >>> logger.log_round_start("ABC123", 1, teams=2, destinations=3)
"""

from __future__ import annotations

from dataclasses import dataclass

from rich.console import Console
from rich.table import Table

from deliverability_simulator.resolution.results import DestinationResolution, TeamResolution


@dataclass
class VerboseConfig:
    """Which resolution sections get printed.

    Flags:
    - rounds: Round start/completion messages (default True)
    - volume: Team volume and modifier adjustments
    - delivery: Per-destination delivery rates
    - reputation: Reputation changes and recorded values
    - complaints: Complaint rates and breakpoint penalties
    - spam_traps: Spam trap hits
    - destinations: Destination satisfaction and revenue
    """

    rounds: bool = True
    volume: bool = False
    delivery: bool = False
    reputation: bool = False
    complaints: bool = False
    spam_traps: bool = False
    destinations: bool = False

    @property
    def any(self) -> bool:
        """Return True if any verbose flag is enabled."""
        return (
            self.rounds
            or self.volume
            or self.delivery
            or self.reputation
            or self.complaints
            or self.spam_traps
            or self.destinations
        )

    @classmethod
    def all_enabled(cls) -> VerboseConfig:
        """Create config with all verbose flags enabled."""
        return cls(
            rounds=True,
            volume=True,
            delivery=True,
            reputation=True,
            complaints=True,
            spam_traps=True,
            destinations=True,
        )

    @classmethod
    def quiet(cls) -> VerboseConfig:
        """Create config with every flag disabled."""
        return cls(rounds=False)

    @classmethod
    def from_cli_flags(
        cls,
        *,
        verbose: bool = False,
        verbose_delivery: bool | None = None,
        verbose_reputation: bool | None = None,
        verbose_spam_traps: bool | None = None,
        verbose_destinations: bool | None = None,
        quiet: bool = False,
    ) -> VerboseConfig:
        """Map the simulate command flags onto sections.

        `--verbose` turns every section on; an explicit per-section flag
        (on or off) takes precedence over it.
        `quiet` wins over everything.

        Args:
            verbose: Turn every section on.
            verbose_delivery: Override delivery verbose flag.
            verbose_reputation: Override reputation verbose flag.
            verbose_spam_traps: Override spam trap verbose flag.
            verbose_destinations: Override destinations verbose flag.
            quiet: Disable all output.

        Returns:
            The resulting section flags.
        """
        if quiet:
            return cls.quiet()

        if verbose:
            return cls(
                rounds=True,
                volume=True,
                delivery=verbose_delivery if verbose_delivery is not None else True,
                reputation=verbose_reputation if verbose_reputation is not None else True,
                complaints=True,
                spam_traps=verbose_spam_traps if verbose_spam_traps is not None else True,
                destinations=verbose_destinations if verbose_destinations is not None else True,
            )

        return cls(
            delivery=verbose_delivery or False,
            reputation=verbose_reputation or False,
            spam_traps=verbose_spam_traps or False,
            destinations=verbose_destinations or False,
        )


class ResolutionLogger:
    """Prints rich tables for the sections enabled in a VerboseConfig."""

    def __init__(
        self,
        config: VerboseConfig | None = None,
        console: Console | None = None,
    ) -> None:
        """Initialize the resolution logger.

        Args:
            config: Sections to print.
                Defaults to round messages only.
            console: Rich Console for output. Creates a stderr console if None.
        """
        self._config = config or VerboseConfig()
        self._console = console or Console(stderr=True)

    @property
    def config(self) -> VerboseConfig:
        return self._config

    def log_round_start(
        self, room_code: str, round_number: int, teams: int, destinations: int
    ) -> None:
        if not self._config.rounds:
            return
        self._console.print(
            f"\n[bold cyan]Round {round_number}[/bold cyan] "
            f"(room {room_code}, {teams} teams, {destinations} destinations)"
        )

    def log_team_result(self, result: TeamResolution) -> None:
        """Log every enabled section for one team."""
        if self._config.volume:
            self._log_volume(result)
        if self._config.delivery:
            self._log_delivery(result)
        if self._config.complaints:
            self._log_complaints(result)
        if self._config.spam_traps and result.spam_traps is not None:
            self._log_spam_traps(result)
        if self._config.reputation:
            self._log_reputation(result)

    def _log_volume(self, result: TeamResolution) -> None:
        volume = result.volume
        self._console.print(
            f"  [bold]{result.team}[/bold] volume: {volume.total_volume:,} emails "
            f"from {len(volume.client_volumes)} active clients"
        )
        for cv in volume.client_volumes:
            if cv.adjustments:
                adjustments = ", ".join(f"{k}: {-v:+,}" for k, v in cv.adjustments.items())
                self._console.print(
                    f"    {cv.client_id}: {cv.base_volume:,} → {cv.adjusted_volume:,} ({adjustments})"
                )

    def _log_delivery(self, result: TeamResolution) -> None:
        table = Table(title=f"Delivery: {result.team}", show_header=True)
        table.add_column("Destination", style="cyan")
        table.add_column("Zone")
        table.add_column("Volume", justify="right")
        table.add_column("Rate", justify="right")

        for dest, delivery in result.delivery.items():
            rate_str = f"{delivery.final_rate * 100:.1f}%"
            if delivery.compliance_penalty is not None:
                rate_str = f"[red]{rate_str}[/red]"
            table.add_row(
                dest,
                delivery.zone,
                f"{result.volume.per_destination.get(dest, 0):,}",
                rate_str,
            )

        self._console.print(table)
        self._console.print(
            f"  Aggregate delivery: {result.aggregate_delivery_rate * 100:.1f}% "
            f"→ revenue {result.revenue.actual_revenue:,}"
        )

    def _log_complaints(self, result: TeamResolution) -> None:
        complaints = result.complaints
        line = (
            f"  Complaints: {complaints.base_complaint_rate:.2f}% → "
            f"{complaints.adjusted_complaint_rate:.2f}%"
        )
        if complaints.threshold_penalty is not None:
            line += (
                f" [yellow]{complaints.threshold_penalty.label} "
                f"({complaints.threshold_penalty.penalty:+.0f})[/yellow]"
            )
        self._console.print(line)

    def _log_spam_traps(self, result: TeamResolution) -> None:
        traps = result.spam_traps
        if traps is None or not traps.trap_hit:
            self._console.print("  Spam traps: [green]no hits[/green]")
            return
        capped = " (capped)" if traps.capped_at_max else ""
        self._console.print(
            f"  Spam traps: [red]{len(traps.hit_client_ids)} clients hit[/red] at "
            f"{', '.join(traps.hit_destinations)} → {traps.reputation_penalty:+.0f}{capped}"
        )

    def _log_reputation(self, result: TeamResolution) -> None:
        table = Table(title=f"Reputation: {result.team}", show_header=True)
        table.add_column("Destination", style="cyan")
        table.add_column("Old", justify="right")
        table.add_column("Change", justify="right")
        table.add_column("New", justify="right")

        for dest, update in result.reputation_updates.items():
            delta = update.new_reputation - update.current_reputation
            if delta >= 0:
                delta_str = f"[green]{delta:+.0f}[/green]"
            else:
                delta_str = f"[red]{delta:+.0f}[/red]"
            table.add_row(
                dest,
                f"{update.current_reputation:.0f}",
                delta_str,
                f"{update.new_reputation}",
            )

        self._console.print(table)

    def log_destination_result(self, result: DestinationResolution) -> None:
        if not self._config.destinations:
            return
        revenue = result.revenue
        self._console.print(
            f"  [bold]{result.destination}[/bold]: {result.total_volume:,} emails, "
            f"satisfaction {result.aggregated_satisfaction:.1f} ({revenue.satisfaction_tier}) "
            f"→ revenue {revenue.total_revenue:,}"
        )

    def log_round_complete(self, round_number: int, total_revenue: int) -> None:
        if not self._config.rounds:
            return
        self._console.print(
            f"[green]✓[/green] Round {round_number} resolved "
            f"(sender revenue {total_revenue:,})"
        )
