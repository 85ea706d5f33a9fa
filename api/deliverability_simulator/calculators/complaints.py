"""Complaint Calculator.

Volume-weighted complaint rate in percentage units. List hygiene cuts an
individual client's rate before weighting; content-filtering style tech
cuts the aggregate rate afterwards. The adjusted rate is then checked
against the complaint breakpoints, and only the highest one reached is
reported.
"""

from __future__ import annotations

from collections.abc import Sequence

from deliverability_simulator.calculators.results import (
    BreakdownItem,
    ClientComplaint,
    ComplaintResult,
    ComplaintThreshold,
    VolumeResult,
)
from deliverability_simulator.config.schemas import GameRules, default_rules
from deliverability_simulator.shared.data_contracts import Client, ClientState


def complaint_threshold(adjusted_rate: float, rules: GameRules) -> ComplaintThreshold | None:
    """Highest breakpoint at or below the adjusted rate.

    Args:
        adjusted_rate: Complaint rate in percentage units (3.0 means 3%).
        rules: Game rules.

    Returns:
        The single highest breakpoint reached, or None.
    """
    reached = None
    fraction = adjusted_rate / 100
    for candidate in rules.complaint_breakpoints:
        if fraction >= candidate.threshold:
            reached = candidate
    if reached is None:
        return None
    return ComplaintThreshold(
        threshold=reached.threshold,
        penalty=reached.penalty,
        label=reached.label,
    )


def calculate_complaints(
    clients: Sequence[Client],
    client_states: dict[str, ClientState],
    volume: VolumeResult,
    tech_stack: Sequence[str],
    rules: GameRules | None = None,
) -> ComplaintResult:
    """Calculate volume-weighted complaint rates.

    Args:
        clients: Every client owned by the team.
        client_states: Client id -> state for this round.
        volume: Volume result for the same round.
        tech_stack: Owned tech upgrade ids.
        rules: Game rules. Defaults to the standard rules.

    Returns:
        ComplaintResult. Rates are 0.0 when no volume was sent.
    """
    rules = rules or default_rules()
    hygiene_reduction = rules.onboarding.list_hygiene_complaint_reduction

    per_client = []
    weighted_base = 0.0
    weighted_adjusted = 0.0

    for client in clients:
        state = client_states.get(client.id)
        if state is None or not state.is_active:
            continue

        client_volume = volume.adjusted_volume_of(client.id)
        base_rate = client.base_spam_rate
        adjusted_rate = base_rate
        if state.has_list_hygiene:
            adjusted_rate = adjusted_rate * (1 - hygiene_reduction)

        per_client.append(
            ClientComplaint(
                client_id=client.id,
                base_rate=base_rate,
                adjusted_rate=adjusted_rate,
                volume=client_volume,
            )
        )
        weighted_base += base_rate * client_volume
        weighted_adjusted += adjusted_rate * client_volume

    if volume.total_volume > 0:
        base_complaint_rate = weighted_base / volume.total_volume
        adjusted_complaint_rate = weighted_adjusted / volume.total_volume
    else:
        base_complaint_rate = 0.0
        adjusted_complaint_rate = 0.0

    breakdown = [BreakdownItem("Base Complaint Rate", base_complaint_rate)]
    if adjusted_complaint_rate != base_complaint_rate:
        breakdown.append(
            BreakdownItem("List Hygiene", adjusted_complaint_rate - base_complaint_rate)
        )

    for tech_id in tech_stack:
        reduction = rules.tech(tech_id).complaint_reduction
        if reduction > 0:
            before = adjusted_complaint_rate
            adjusted_complaint_rate = adjusted_complaint_rate * (1 - reduction)
            breakdown.append(
                BreakdownItem(rules.tech(tech_id).name, adjusted_complaint_rate - before)
            )

    threshold = complaint_threshold(adjusted_complaint_rate, rules)
    if threshold is not None:
        breakdown.append(BreakdownItem(threshold.label, threshold.penalty))

    return ComplaintResult(
        base_complaint_rate=base_complaint_rate,
        adjusted_complaint_rate=adjusted_complaint_rate,
        per_client=per_client,
        threshold_penalty=threshold,
        breakdown=breakdown,
    )
