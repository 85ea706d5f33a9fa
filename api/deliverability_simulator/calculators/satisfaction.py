"""User Satisfaction Calculator.

Per destination:
1. Effective spam blocking and false-positive rates start from the
   filtering level, then each owned tool adds its percentage points;
   blocking is capped and false positives are floored
2. Mail is split using the complaint rate as the spam proportion:
       blocked%  = spam_rate * blocking * 100
       through%  = spam_rate * (1 - blocking) * 100
       false+%   = (1 - spam_rate) * false_positives * 100
3. satisfaction = base + blocked% * w_blocked / 100
                       - through% * w_through / 100
                       - false+% * w_fp / 100, clamped to [0, 100]

The aggregate is the volume-weighted average across destinations.
"""

from __future__ import annotations

from collections.abc import Sequence

from deliverability_simulator.calculators.results import (
    DestinationSatisfaction,
    SatisfactionResult,
    VolumeResult,
)
from deliverability_simulator.calculators.rounding import clamp, round_half_up
from deliverability_simulator.config.schemas import GameRules, default_rules
from deliverability_simulator.shared.data_contracts import FilteringLevel


def effective_filtering_rates(
    filtering_level: FilteringLevel | str | None,
    owned_tools: Sequence[str],
    rules: GameRules,
) -> tuple[float, float]:
    """Spam blocking and false-positive rates after destination tools.

    Returns:
        (spam_blocking, false_positives) as fractions.

    Raises:
        ConfigurationLookupError: For an unknown level or tool id.
    """
    policy = rules.filtering_policy(filtering_level)
    blocking = policy.spam_reduction / 100
    false_positives = policy.false_positives / 100

    for tool_id in owned_tools:
        tool = rules.destination_tool(tool_id)
        blocking += tool.spam_detection_boost / 100
        false_positives += tool.false_positive_impact / 100

    blocking = min(rules.satisfaction.max_spam_blocking, blocking)
    false_positives = max(rules.satisfaction.min_false_positive, false_positives)
    return blocking, false_positives


def destination_satisfaction(
    destination: str,
    volume_at_destination: int,
    spam_rate: float,
    filtering_level: FilteringLevel | str | None,
    owned_tools: Sequence[str],
    rules: GameRules,
) -> DestinationSatisfaction:
    """Satisfaction model for one destination.

    Args:
        destination: Destination name.
        volume_at_destination: Emails the team sent there.
        spam_rate: Spam proportion as a fraction (0.05 means 5%).
        filtering_level: Destination filtering level toward the team.
        owned_tools: Destination tool ids.
        rules: Game rules.
    """
    settings = rules.satisfaction
    blocking, false_positives = effective_filtering_rates(filtering_level, owned_tools, rules)

    blocked_pct = spam_rate * blocking * 100
    through_pct = spam_rate * (1 - blocking) * 100
    false_positive_pct = (1 - spam_rate) * false_positives * 100

    gain = blocked_pct * settings.spam_blocked_weight / 100
    spam_penalty = through_pct * settings.spam_through_weight / 100
    fp_penalty = false_positive_pct * settings.false_positive_weight / 100

    satisfaction = clamp(settings.base_satisfaction + gain - spam_penalty - fp_penalty, 0.0, 100.0)

    return DestinationSatisfaction(
        destination=destination,
        filtering_level=rules.filtering_policy(filtering_level).level.value,
        spam_rate=spam_rate,
        spam_blocking_rate=blocking,
        false_positive_rate=false_positives,
        spam_blocked_percentage=blocked_pct,
        spam_through_percentage=through_pct,
        false_positive_percentage=false_positive_pct,
        satisfaction_gain=gain,
        spam_penalty=spam_penalty,
        false_positive_penalty=fp_penalty,
        satisfaction=satisfaction,
        total_volume=volume_at_destination,
        spam_blocked_volume=round_half_up(blocked_pct / 100 * volume_at_destination),
        spam_through_volume=round_half_up(through_pct / 100 * volume_at_destination),
        false_positive_volume=round_half_up(false_positive_pct / 100 * volume_at_destination),
    )


def weighted_satisfaction(scores: dict[str, float], volumes: dict[str, int]) -> float:
    """Volume-weighted average of satisfaction scores.

    With no volume at all, every score counts equally. With no scores the
    result is 0.0.
    """
    if not scores:
        return 0.0
    total_volume = sum(volumes.get(dest, 0) for dest in scores)
    if total_volume <= 0:
        return sum(scores.values()) / len(scores)
    weighted = sum(score * volumes.get(dest, 0) for dest, score in scores.items())
    return clamp(weighted / total_volume, 0.0, 100.0)


def calculate_satisfaction(
    volume: VolumeResult,
    complaint_rate: float,
    filtering_levels: dict[str, FilteringLevel | str],
    owned_tools: dict[str, Sequence[str]],
    rules: GameRules | None = None,
) -> SatisfactionResult:
    """Calculate user satisfaction at every destination the team sends to.

    Args:
        volume: Team volume result; its destinations are evaluated.
        complaint_rate: Adjusted complaint rate in percentage units.
        filtering_levels: Destination -> filtering level toward this team.
            Missing entries mean permissive.
        owned_tools: Destination -> tool ids it owns.
        rules: Game rules. Defaults to the standard rules.

    Returns:
        SatisfactionResult with per-destination scores and their
        volume-weighted aggregate.
    """
    rules = rules or default_rules()
    spam_rate = complaint_rate / 100

    breakdown = []
    per_destination: dict[str, float] = {}
    for dest, dest_volume in volume.per_destination.items():
        item = destination_satisfaction(
            dest,
            dest_volume,
            spam_rate,
            filtering_levels.get(dest),
            owned_tools.get(dest, ()),
            rules,
        )
        breakdown.append(item)
        per_destination[dest] = item.satisfaction

    return SatisfactionResult(
        aggregated_satisfaction=weighted_satisfaction(per_destination, volume.per_destination),
        per_destination=per_destination,
        breakdown=breakdown,
    )
