"""Destination Revenue Calculator.

    volume_bonus  = round(total_volume / volume_unit * volume_bonus_rate)
    total_revenue = round((base_revenue + volume_bonus) * tier multiplier)

The tier is picked from the satisfaction tier table (Crisis through
Excellent).
"""

from __future__ import annotations

from deliverability_simulator.calculators.results import BreakdownItem, DestinationRevenueResult
from deliverability_simulator.calculators.rounding import round_half_up
from deliverability_simulator.config.schemas import GameRules, default_rules


def calculate_destination_revenue(
    destination: str,
    total_volume: int,
    satisfaction: float,
    rules: GameRules | None = None,
) -> DestinationRevenueResult:
    """Calculate one destination's revenue for the round.

    Args:
        destination: Destination (kingdom) name.
        total_volume: Emails received from every sender team.
        satisfaction: Volume-weighted user satisfaction (0-100).
        rules: Game rules. Defaults to the standard rules.

    Returns:
        DestinationRevenueResult.

    Raises:
        ConfigurationLookupError: If the destination has no configured base revenue.

    Example:
        >>> calculate_destination_revenue("zmail", 500000, 76).total_revenue
        440
    """
    rules = rules or default_rules()
    settings = rules.destination_revenue

    base_revenue = rules.destination(destination).base_revenue
    volume_bonus = round_half_up(total_volume / settings.volume_unit * settings.volume_bonus_rate)
    tier = rules.satisfaction_tier(satisfaction)
    total = round_half_up((base_revenue + volume_bonus) * tier.multiplier)

    return DestinationRevenueResult(
        destination=destination,
        base_revenue=base_revenue,
        volume_bonus=volume_bonus,
        satisfaction_multiplier=tier.multiplier,
        satisfaction_tier=tier.label,
        total_revenue=total,
        breakdown=[
            BreakdownItem("Base Revenue", base_revenue),
            BreakdownItem("Volume Bonus", volume_bonus),
            BreakdownItem(f"Satisfaction Multiplier ({tier.label})", tier.multiplier),
            BreakdownItem("Total Revenue", total),
        ],
    )
