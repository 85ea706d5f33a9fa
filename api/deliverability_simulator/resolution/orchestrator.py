"""Resolution Orchestrator.

Runs the calculators for one round, in order:

Per sender team:
1. Volume
2. Delivery, once per destination (team reputation there + that
   destination's filtering level toward the team)
3. Volume-weighted aggregate delivery rate, then Revenue
4. Reputation, Complaints, Spam Traps (when enabled), Satisfaction
5. New reputation per destination, rounded and clamped into [0, 100]

Per destination, after every team:
6. Volume-weighted satisfaction and total volume across teams, then
   Destination Revenue

Teams are independent of each other; the order only affects logging.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from deliverability_simulator.calculators.complaints import calculate_complaints
from deliverability_simulator.calculators.delivery import (
    aggregate_delivery_rate,
    calculate_delivery,
)
from deliverability_simulator.calculators.destination_revenue import (
    calculate_destination_revenue,
)
from deliverability_simulator.calculators.reputation import calculate_reputation
from deliverability_simulator.calculators.revenue import calculate_revenue
from deliverability_simulator.calculators.rounding import clamp_reputation
from deliverability_simulator.calculators.satisfaction import (
    calculate_satisfaction,
    weighted_satisfaction,
)
from deliverability_simulator.calculators.spam_traps import calculate_spam_traps
from deliverability_simulator.calculators.volume import calculate_volume
from deliverability_simulator.config.schemas import GameRules, default_rules
from deliverability_simulator.resolution.history import ResolutionHistory, RoundResolution
from deliverability_simulator.resolution.results import (
    DestinationResolution,
    ReputationUpdate,
    ResolutionResults,
    TeamResolution,
)
from deliverability_simulator.resolution.verbose import ResolutionLogger, VerboseConfig
from deliverability_simulator.shared.data_contracts import (
    Destination,
    RoundSnapshot,
    SenderTeam,
)

logger = logging.getLogger(__name__)


class ResolutionOrchestrator:
    """Resolves rounds from snapshots.

    The verbose logger is the only output channel besides the stdlib
    module logger. Calculators stay log-free.

    Example:
        >>> orchestrator = ResolutionOrchestrator()
        >>> history = ResolutionHistory()
        >>> resolution = orchestrator.resolve_round(snapshot, history)
        >>> len(history)
        1
    """

    def __init__(
        self,
        rules: GameRules | None = None,
        verbose_logger: ResolutionLogger | None = None,
        spam_traps_enabled: bool = True,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            rules: Game rules. Defaults to the standard rules.
            verbose_logger: Rich logger for human output. Defaults to a
                logger with every flag disabled.
            spam_traps_enabled: Roll spam traps each round.
        """
        self.rules = rules or default_rules()
        self.verbose_logger = verbose_logger or ResolutionLogger(VerboseConfig.quiet())
        self.spam_traps_enabled = spam_traps_enabled

    def resolve_round(
        self,
        snapshot: RoundSnapshot,
        history: ResolutionHistory | None = None,
    ) -> RoundResolution:
        """Resolve one round.

        Args:
            snapshot: Inbound state for the round.
            history: When given, the resolution is appended to it.

        Returns:
            Immutable RoundResolution.

        Raises:
            ConfigurationLookupError: For unknown ids in the snapshot.
            ResolutionOrderError: If history does not end at the previous round.
        """
        logger.debug(
            "Starting resolution room=%s round=%d", snapshot.room_code, snapshot.round
        )
        self.verbose_logger.log_round_start(
            snapshot.room_code,
            snapshot.round,
            teams=len(snapshot.teams),
            destinations=len(snapshot.destinations),
        )

        team_results: dict[str, TeamResolution] = {}
        for team in snapshot.teams:
            result = self.resolve_team(team, snapshot)
            team_results[team.name] = result
            self.verbose_logger.log_team_result(result)

        destination_results = self.resolve_destinations(
            snapshot.destinations, list(team_results.values())
        )
        for dest_result in destination_results.values():
            self.verbose_logger.log_destination_result(dest_result)

        resolution = RoundResolution(
            round=snapshot.round,
            results=ResolutionResults(
                team_results=team_results,
                destination_results=destination_results,
            ),
        )
        if history is not None:
            history.append(resolution)

        self.verbose_logger.log_round_complete(
            snapshot.round,
            sum(r.revenue.actual_revenue for r in team_results.values()),
        )
        logger.debug("Resolution complete room=%s round=%d", snapshot.room_code, snapshot.round)
        return resolution

    def resolve_team(self, team: SenderTeam, snapshot: RoundSnapshot) -> TeamResolution:
        """Run every sender-side calculator for one team."""
        rules = self.rules
        current_round = snapshot.round
        destinations = snapshot.destination_names
        clients = team.active_clients()
        states = team.client_states

        volume = calculate_volume(clients, states, current_round, destinations, rules)
        logger.debug("Volume team=%s total=%d", team.name, volume.total_volume)

        delivery = {}
        for destination in snapshot.destinations:
            delivery[destination.name] = calculate_delivery(
                reputation=self._current_reputation(team, destination.name),
                tech_stack=team.tech_stack,
                current_round=current_round,
                filtering_level=destination.filtering_level_for(team.name),
                rules=rules,
            )
        aggregate_rate = aggregate_delivery_rate(
            {dest: d.final_rate for dest, d in delivery.items()},
            volume.per_destination,
        )

        revenue = calculate_revenue(clients, states, volume, aggregate_rate)
        reputation = calculate_reputation(
            team.tech_stack, destinations, clients, states, volume, current_round, rules
        )
        complaints = calculate_complaints(clients, states, volume, team.tech_stack, rules)

        spam_traps = None
        if self.spam_traps_enabled:
            spam_traps = calculate_spam_traps(
                snapshot.room_code,
                team.name,
                clients,
                states,
                volume,
                snapshot.destinations,
                current_round,
                rules,
            )

        satisfaction = calculate_satisfaction(
            volume,
            complaints.adjusted_complaint_rate,
            {d.name: d.filtering_level_for(team.name) for d in snapshot.destinations},
            {d.name: d.owned_tools for d in snapshot.destinations},
            rules,
        )

        updates = {}
        for dest, change in reputation.per_destination.items():
            current = self._current_reputation(team, dest)
            trap_penalty = 0.0
            if spam_traps is not None and dest in spam_traps.hit_destinations:
                trap_penalty = spam_traps.reputation_penalty
            updates[dest] = ReputationUpdate(
                current_reputation=current,
                total_change=change.total_change,
                complaint_penalty=complaints.reputation_penalty,
                spam_trap_penalty=trap_penalty,
                new_reputation=clamp_reputation(
                    current + change.total_change + complaints.reputation_penalty + trap_penalty
                ),
            )

        logger.debug(
            "Team resolved team=%s revenue=%d delivery=%.4f",
            team.name,
            revenue.actual_revenue,
            aggregate_rate,
        )
        return TeamResolution(
            team=team.name,
            volume=volume,
            delivery=delivery,
            aggregate_delivery_rate=aggregate_rate,
            revenue=revenue,
            reputation=reputation,
            reputation_updates=updates,
            complaints=complaints,
            satisfaction=satisfaction,
            spam_traps=spam_traps,
        )

    def resolve_destinations(
        self,
        destinations: Sequence[Destination],
        team_results: Sequence[TeamResolution],
    ) -> dict[str, DestinationResolution]:
        """Aggregate satisfaction and volume per destination, then price it."""
        results = {}
        for destination in destinations:
            name = destination.name
            scores = {}
            volumes = {}
            for team_result in team_results:
                if name not in team_result.satisfaction.per_destination:
                    continue
                scores[team_result.team] = team_result.satisfaction.per_destination[name]
                volumes[team_result.team] = team_result.volume.per_destination.get(name, 0)

            if scores:
                satisfaction = weighted_satisfaction(scores, volumes)
            else:
                satisfaction = self.rules.satisfaction.base_satisfaction
            total_volume = sum(volumes.values())

            results[name] = DestinationResolution(
                destination=name,
                total_volume=total_volume,
                aggregated_satisfaction=satisfaction,
                revenue=calculate_destination_revenue(name, total_volume, satisfaction, self.rules),
            )
        return results

    def _current_reputation(self, team: SenderTeam, destination: str) -> float:
        return team.reputation.get(destination, self.rules.default_reputation)
