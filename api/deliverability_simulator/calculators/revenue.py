"""Revenue Calculator.

Per active client:

    actual = round(base_revenue * volume_multiplier * delivery_rate)

volume_multiplier is the product of every volume modifier applied to the
client this round, so revenue scales exactly as volume does (including
multipliers above 1.0). Clients missing from the volume result use 1.0.
"""

from __future__ import annotations

from collections.abc import Sequence

from deliverability_simulator.calculators.results import (
    BreakdownItem,
    ClientRevenue,
    RevenueResult,
    VolumeResult,
)
from deliverability_simulator.calculators.rounding import round_half_up
from deliverability_simulator.shared.data_contracts import Client, ClientState


def calculate_revenue(
    clients: Sequence[Client],
    client_states: dict[str, ClientState],
    volume: VolumeResult,
    delivery_rate: float,
) -> RevenueResult:
    """Calculate team revenue for one round.

    Args:
        clients: Every client owned by the team.
        client_states: Client id -> state for this round.
        volume: Volume result carrying each client's volume multiplier.
        delivery_rate: Volume-weighted aggregate delivery rate.

    Returns:
        RevenueResult with per-client and total revenue.
    """
    per_client = []
    for client in clients:
        state = client_states.get(client.id)
        if state is None or not state.is_active:
            continue
        client_volume = volume.for_client(client.id)
        multiplier = client_volume.volume_multiplier if client_volume is not None else 1.0
        per_client.append(
            ClientRevenue(
                client_id=client.id,
                base_revenue=client.base_revenue,
                volume_multiplier=multiplier,
                actual_revenue=round_half_up(client.base_revenue * multiplier * delivery_rate),
            )
        )

    base_revenue = sum(c.base_revenue for c in per_client)
    actual_revenue = sum(c.actual_revenue for c in per_client)

    return RevenueResult(
        base_revenue=base_revenue,
        actual_revenue=actual_revenue,
        delivery_rate=delivery_rate,
        per_client=per_client,
        breakdown=[
            BreakdownItem("Base Revenue", base_revenue),
            BreakdownItem("Delivery Rate", delivery_rate),
            BreakdownItem("Actual Revenue", actual_revenue),
        ],
    )
