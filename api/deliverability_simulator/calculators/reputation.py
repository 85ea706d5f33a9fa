"""Reputation Calculator.

Per destination, the unclamped reputation change is:

    total_change = tech_bonus + client_impact + warmup_bonus

- tech_bonus: flat sum of the reputation bonus of every owned upgrade
- client_impact: volume-weighted average of each active client's risk
  tier impact, weighted by adjusted volume
- warmup_bonus: the warmup bonus for each active client with warmup in
  exactly its first active round, weighted by that client's share of the
  team's total adjusted volume

The change is identical across destinations. Clamping into [0, 100]
happens in the orchestrator, not here.
"""

from __future__ import annotations

from collections.abc import Sequence

from deliverability_simulator.calculators.results import (
    BreakdownItem,
    DestinationReputationChange,
    ReputationResult,
    VolumeResult,
)
from deliverability_simulator.config.schemas import GameRules, default_rules
from deliverability_simulator.shared.data_contracts import Client, ClientState


def authentication_reputation_bonus(tech_stack: Sequence[str], rules: GameRules) -> float:
    """Flat reputation bonus of every owned upgrade.

    Raises:
        ConfigurationLookupError: If a tech id is not in the catalog.
    """
    return sum(rules.tech(tech_id).reputation_bonus for tech_id in tech_stack)


def volume_weighted_client_impact(
    clients: Sequence[Client],
    client_states: dict[str, ClientState],
    volume: VolumeResult,
    rules: GameRules,
) -> float:
    """Risk tier impact averaged over active clients by adjusted volume.

    Returns 0.0 when the team sent no volume.
    """
    if volume.total_volume <= 0:
        return 0.0

    weighted = 0.0
    for client in clients:
        state = client_states.get(client.id)
        if state is None or not state.is_active:
            continue
        impact = rules.risk_tier(client.risk).reputation_impact
        weighted += impact * volume.adjusted_volume_of(client.id)
    return weighted / volume.total_volume


def warmup_bonus(
    clients: Sequence[Client],
    client_states: dict[str, ClientState],
    volume: VolumeResult,
    current_round: int,
    rules: GameRules,
) -> float:
    """Volume-weighted warmup bonus.

    Each qualifying client contributes the configured bonus times its
    adjusted volume divided by the team's total adjusted volume.
    """
    if volume.total_volume <= 0:
        return 0.0

    bonus = 0.0
    for client in clients:
        state = client_states.get(client.id)
        if state is None or not state.is_active or not state.has_warmup:
            continue
        if state.first_active_round != current_round:
            continue
        share = volume.adjusted_volume_of(client.id) / volume.total_volume
        bonus += rules.onboarding.warmup_reputation_bonus * share
    return bonus


def calculate_reputation(
    tech_stack: Sequence[str],
    destinations: Sequence[str],
    clients: Sequence[Client],
    client_states: dict[str, ClientState],
    volume: VolumeResult,
    current_round: int,
    rules: GameRules | None = None,
) -> ReputationResult:
    """Calculate reputation changes for every destination.

    Args:
        tech_stack: Owned tech upgrade ids.
        destinations: Destination names.
        clients: Every client owned by the team.
        client_states: Client id -> state for this round.
        volume: Volume result for the same round.
        current_round: Round being resolved.
        rules: Game rules. Defaults to the standard rules.

    Returns:
        ReputationResult with one unclamped change per destination.
    """
    rules = rules or default_rules()

    tech_bonus = authentication_reputation_bonus(tech_stack, rules)
    client_impact = volume_weighted_client_impact(clients, client_states, volume, rules)
    warmup = warmup_bonus(clients, client_states, volume, current_round, rules)

    per_destination = {}
    for dest in destinations:
        per_destination[dest] = DestinationReputationChange(
            tech_bonus=tech_bonus,
            client_impact=client_impact,
            warmup_bonus=warmup,
            total_change=tech_bonus + client_impact + warmup,
            breakdown=[
                BreakdownItem("Authentication Tech", tech_bonus),
                BreakdownItem("Client Risk", client_impact),
                BreakdownItem("Warmup Bonus", warmup),
            ],
        )

    return ReputationResult(
        tech_bonus=tech_bonus,
        volume_weighted_client_impact=client_impact,
        warmup_bonus=warmup,
        per_destination=per_destination,
    )
