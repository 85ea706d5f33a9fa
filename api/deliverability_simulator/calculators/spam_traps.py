"""Spam Trap Calculator.

For each active client:
1. Base risk from the client profile
2. Times every applicable spam trap modifier (same fold as volume)
3. Times the trap multiplier of each destination's tools (spam trap network)
4. One seeded roll per client (audit) and one per (client, destination);
   the destination is hit when its roll falls below the amplified risk

Every client with at least one hit costs penalty_per_hit reputation; the
round total never drops below max_penalty.
"""

from __future__ import annotations

from collections.abc import Sequence

from deliverability_simulator.calculators.modifiers import fold_modifiers
from deliverability_simulator.calculators.results import (
    ClientSpamTrap,
    SpamTrapResult,
    VolumeResult,
)
from deliverability_simulator.config.schemas import GameRules, default_rules
from deliverability_simulator.sampling.seed_manager import SeedManager
from deliverability_simulator.shared.data_contracts import Client, ClientState, Destination


def trap_network_multiplier(destination: Destination, rules: GameRules) -> float:
    """Largest trap multiplier among the destination's tools (1.0 if none).

    Raises:
        ConfigurationLookupError: If a tool id is not in the catalog.
    """
    multiplier = 1.0
    for tool_id in destination.owned_tools:
        multiplier = max(multiplier, rules.destination_tool(tool_id).spam_trap_multiplier)
    return multiplier


def calculate_spam_traps(
    room_code: str,
    team_name: str,
    clients: Sequence[Client],
    client_states: dict[str, ClientState],
    volume: VolumeResult,
    destinations: Sequence[Destination],
    current_round: int,
    rules: GameRules | None = None,
) -> SpamTrapResult:
    """Roll spam trap detection for every active client.

    Args:
        room_code: Room identifier, seed material only.
        team_name: Sender team name, seed material.
        clients: Every client owned by the team.
        client_states: Client id -> state for this round.
        volume: Volume result for the same round.
        destinations: Destinations, with their owned tools.
        current_round: Round being resolved.
        rules: Game rules. Defaults to the standard rules.

    Returns:
        SpamTrapResult. Identical inputs always produce identical hits.

    Raises:
        ConfigurationLookupError: For an unknown client type or tool id.
    """
    rules = rules or default_rules()
    seeds = SeedManager(room_code)
    multipliers = {d.name: trap_network_multiplier(d, rules) for d in destinations}

    per_client = []
    total_base_risk = 0.0
    total_adjusted_risk = 0.0
    hit_client_ids: list[str] = []
    hit_destinations: list[str] = []

    for client in clients:
        state = client_states.get(client.id)
        if state is None or not state.is_active:
            continue

        base_risk = rules.client_profile(client.type).spam_trap_risk
        folded = fold_modifiers(
            base_risk,
            state.spam_trap_modifiers,
            current_round,
            state.first_active_round,
        )
        adjusted_risk = folded.value
        total_base_risk += base_risk
        total_adjusted_risk += adjusted_risk

        destination_risk = {dest: adjusted_risk * m for dest, m in multipliers.items()}
        random_roll = seeds.client_roll(current_round, team_name, client.id)

        client_hits = []
        for dest, risk in destination_risk.items():
            roll = seeds.destination_roll(current_round, team_name, client.id, dest)
            if roll < risk:
                client_hits.append(dest)
                if dest not in hit_destinations:
                    hit_destinations.append(dest)

        if client_hits:
            hit_client_ids.append(client.id)

        per_client.append(
            ClientSpamTrap(
                client_id=client.id,
                client_type=client.type,
                base_risk=base_risk,
                adjusted_risk=adjusted_risk,
                destination_risk=destination_risk,
                volume=volume.adjusted_volume_of(client.id),
                trap_hit=bool(client_hits),
                random_roll=random_roll,
                hit_destinations=client_hits,
            )
        )

    uncapped = len(hit_client_ids) * rules.spam_traps.penalty_per_hit
    penalty = max(uncapped, rules.spam_traps.max_penalty)

    return SpamTrapResult(
        total_base_risk=total_base_risk,
        total_adjusted_risk=total_adjusted_risk,
        per_client=per_client,
        trap_hit=bool(hit_client_ids),
        hit_client_ids=hit_client_ids,
        hit_destinations=hit_destinations,
        reputation_penalty=penalty,
        capped_at_max=uncapped < rules.spam_traps.max_penalty,
    )
