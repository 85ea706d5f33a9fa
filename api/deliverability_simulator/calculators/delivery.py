"""Delivery Calculator.

Delivery success rate toward one destination:

    rate = zone base rate + authentication bonus - filtering penalty

From the compliance round on, a team missing the compliance upgrade has
the rate multiplied by the compliance multiplier (bulk rejection). The
result is clamped to [0, 1].
"""

from __future__ import annotations

from collections.abc import Sequence

from deliverability_simulator.calculators.results import BreakdownItem, DeliveryResult
from deliverability_simulator.calculators.rounding import clamp, round_half_up
from deliverability_simulator.config.schemas import GameRules, default_rules
from deliverability_simulator.shared.data_contracts import FilteringLevel


def authentication_delivery_bonus(tech_stack: Sequence[str], rules: GameRules) -> float:
    """Sum of delivery bonuses of every owned upgrade.

    Bonuses stack by summation. Prerequisites between upgrades are not
    checked here.

    Raises:
        ConfigurationLookupError: If a tech id is not in the catalog.
    """
    return sum(rules.tech(tech_id).delivery_bonus for tech_id in tech_stack)


def filtering_penalty(level: FilteringLevel | str | None, rules: GameRules) -> float:
    """False-positive cost of a filtering level as a fraction."""
    policy = rules.filtering_policy(level)
    if policy.level == FilteringLevel.PERMISSIVE:
        return 0.0
    return policy.false_positives / 100


def calculate_delivery(
    reputation: float,
    tech_stack: Sequence[str],
    current_round: int,
    filtering_level: FilteringLevel | str | None = None,
    rules: GameRules | None = None,
) -> DeliveryResult:
    """Calculate delivery success rate.

    Args:
        reputation: Sender reputation at the destination (0-100).
        tech_stack: Owned tech upgrade ids.
        current_round: Round being resolved.
        filtering_level: Destination filtering level toward the sender.
            None means permissive.
        rules: Game rules. Defaults to the standard rules.

    Returns:
        DeliveryResult with final_rate in [0, 1].

    Example:
        >>> round(calculate_delivery(75, ["spf", "dkim"], current_round=1).final_rate, 2)
        0.98
    """
    rules = rules or default_rules()

    zone = rules.zone_for(reputation)
    base_rate = zone.base_rate
    auth_bonus = authentication_delivery_bonus(tech_stack, rules)
    penalty = filtering_penalty(filtering_level, rules)

    final_rate = base_rate + auth_bonus - penalty

    breakdown = [BreakdownItem(f"Base ({zone.name} zone)", base_rate)]
    if auth_bonus > 0:
        breakdown.append(BreakdownItem("Authentication Bonus", auth_bonus))
    if penalty > 0:
        breakdown.append(BreakdownItem("Filtering Penalty", -round_half_up(penalty * 100)))

    compliance_penalty = None
    compliance = rules.delivery
    if current_round >= compliance.compliance_round and compliance.compliance_tech not in tech_stack:
        compliance_penalty = 1 - compliance.compliance_multiplier
        before = final_rate
        final_rate = final_rate * compliance.compliance_multiplier
        breakdown.append(
            BreakdownItem(f"{compliance.compliance_tech.upper()} Missing Penalty", final_rate - before)
        )

    final_rate = clamp(final_rate, 0.0, 1.0)
    breakdown.append(BreakdownItem("Final Rate", final_rate))

    return DeliveryResult(
        final_rate=final_rate,
        base_rate=base_rate,
        zone=zone.name,
        auth_bonus=auth_bonus,
        filtering_penalty=penalty,
        compliance_penalty=compliance_penalty,
        breakdown=breakdown,
    )


def aggregate_delivery_rate(
    per_destination_rates: dict[str, float],
    per_destination_volume: dict[str, int],
) -> float:
    """Volume-weighted delivery rate across destinations.

    Returns:
        Sum(volume * rate) / sum(volume), or 0.0 when no volume was sent.
    """
    total_volume = sum(per_destination_volume.values())
    if total_volume <= 0:
        return 0.0
    delivered = sum(
        volume * per_destination_rates.get(dest, 0.0)
        for dest, volume in per_destination_volume.items()
    )
    return delivered / total_volume
