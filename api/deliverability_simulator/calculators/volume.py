"""Volume Calculator.

Computes how many emails each active client sends this round and how
they split across destinations.

For each active client:
1. Start from base volume
2. Fold the client's volume modifiers (permanent reductions first, then
   round-scoped multipliers), rounding half up after every step
3. Split the adjusted volume by the client's destination distribution
   (or the default split), rounding each share

Paused clients, and clients without a state, are left out entirely.
"""

from __future__ import annotations

from collections.abc import Sequence

from deliverability_simulator.calculators.modifiers import fold_modifiers
from deliverability_simulator.calculators.results import ClientVolume, VolumeResult
from deliverability_simulator.calculators.rounding import round_half_up
from deliverability_simulator.config.schemas import GameRules, default_rules
from deliverability_simulator.shared.data_contracts import Client, ClientState


def distribute_volume(
    volume: int,
    distribution: dict[str, float],
    destinations: Sequence[str],
) -> dict[str, int]:
    """Split a volume across destinations by percentage.

    Destinations missing from the distribution receive nothing. Each share
    is rounded on its own, so the shares may differ from the total by one
    email per destination.
    """
    return {
        dest: round_half_up(volume * distribution.get(dest, 0.0) / 100)
        for dest in destinations
    }


def calculate_volume(
    clients: Sequence[Client],
    client_states: dict[str, ClientState],
    current_round: int,
    destinations: Sequence[str] | None = None,
    rules: GameRules | None = None,
) -> VolumeResult:
    """Calculate team volume for one round.

    Args:
        clients: Every client owned by the team.
        client_states: Client id -> state for this round.
        current_round: Round being resolved.
        destinations: Destination names. Defaults to the configured destinations.
        rules: Game rules. Defaults to the standard rules.

    Returns:
        VolumeResult where total_volume is the sum of adjusted volumes and
        each per-destination total is the sum of the client shares.
    """
    rules = rules or default_rules()
    if destinations is None:
        destinations = rules.destination_names

    client_volumes: list[ClientVolume] = []
    per_destination = {dest: 0 for dest in destinations}

    for client in clients:
        state = client_states.get(client.id)
        if state is None or not state.is_active:
            continue

        folded = fold_modifiers(
            client.base_volume,
            state.volume_modifiers,
            current_round,
            state.first_active_round,
            round_each_step=True,
        )
        adjusted = int(folded.value)

        adjustments: dict[str, int] = {}
        for step in folded.steps:
            adjustments[step.modifier_id] = adjustments.get(step.modifier_id, 0) + int(step.removed)

        distribution = client.destination_distribution or rules.default_distribution
        shares = distribute_volume(adjusted, distribution, destinations)
        for dest, share in shares.items():
            per_destination[dest] += share

        client_volumes.append(
            ClientVolume(
                client_id=client.id,
                base_volume=client.base_volume,
                adjusted_volume=adjusted,
                adjustments=adjustments,
                volume_multiplier=folded.multiplier,
                per_destination=shares,
            )
        )

    return VolumeResult(
        client_volumes=client_volumes,
        total_volume=sum(cv.adjusted_volume for cv in client_volumes),
        per_destination=per_destination,
    )
