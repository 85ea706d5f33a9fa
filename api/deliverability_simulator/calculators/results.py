"""Result value objects returned by the calculators.

Every result is frozen and carries a breakdown list of named terms so a
player (or a test) can audit how a number was reached. Results are
recomputed every round from the current snapshot and never hold game
state.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class BreakdownItem:
    """One named contribution to a calculated value."""

    label: str
    value: float


class _Serializable:
    """Mixin adding to_dict() to result dataclasses."""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# ============================================================================
# Volume
# ============================================================================

@dataclass(frozen=True)
class ClientVolume(_Serializable):
    """Volume of one active client this round.

    Attributes:
        client_id: Client id.
        base_volume: Volume before modifiers.
        adjusted_volume: Volume after every applicable modifier.
        adjustments: Modifier id -> emails removed by that step (negative
            when the modifier raised volume).
        volume_multiplier: Product of every applied volume modifier.
        per_destination: Destination -> emails sent there.
    """

    client_id: str
    base_volume: int
    adjusted_volume: int
    adjustments: dict[str, int]
    volume_multiplier: float
    per_destination: dict[str, int]


@dataclass(frozen=True)
class VolumeResult(_Serializable):
    """Team volume for one round."""

    client_volumes: list[ClientVolume]
    total_volume: int
    per_destination: dict[str, int]

    @property
    def active_client_ids(self) -> list[str]:
        return [cv.client_id for cv in self.client_volumes]

    def for_client(self, client_id: str) -> ClientVolume | None:
        for cv in self.client_volumes:
            if cv.client_id == client_id:
                return cv
        return None

    def adjusted_volume_of(self, client_id: str) -> int:
        cv = self.for_client(client_id)
        return cv.adjusted_volume if cv is not None else 0


# ============================================================================
# Delivery
# ============================================================================

@dataclass(frozen=True)
class DeliveryResult(_Serializable):
    """Delivery success rate toward one destination.

    Attributes:
        final_rate: Delivery rate in [0, 1].
        base_rate: Rate of the reputation zone.
        zone: Reputation zone name.
        auth_bonus: Summed authentication bonus.
        filtering_penalty: False-positive cost of the filtering level.
        compliance_penalty: Share of mail rejected for missing the
            compliance upgrade (0.8 by default), None when not enforced.
        breakdown: Named terms.
    """

    final_rate: float
    base_rate: float
    zone: str
    auth_bonus: float
    filtering_penalty: float
    compliance_penalty: float | None
    breakdown: list[BreakdownItem]


# ============================================================================
# Reputation
# ============================================================================

@dataclass(frozen=True)
class DestinationReputationChange(_Serializable):
    """Unclamped reputation change at one destination."""

    tech_bonus: float
    client_impact: float
    warmup_bonus: float
    total_change: float
    breakdown: list[BreakdownItem]


@dataclass(frozen=True)
class ReputationResult(_Serializable):
    """Reputation changes for every destination."""

    tech_bonus: float
    volume_weighted_client_impact: float
    warmup_bonus: float
    per_destination: dict[str, DestinationReputationChange]


# ============================================================================
# Complaints
# ============================================================================

@dataclass(frozen=True)
class ClientComplaint(_Serializable):
    client_id: str
    base_rate: float
    adjusted_rate: float
    volume: int


@dataclass(frozen=True)
class ComplaintThreshold(_Serializable):
    """Breakpoint reached by the adjusted complaint rate."""

    threshold: float
    penalty: float
    label: str


@dataclass(frozen=True)
class ComplaintResult(_Serializable):
    """Volume-weighted complaint rates in percentage units."""

    base_complaint_rate: float
    adjusted_complaint_rate: float
    per_client: list[ClientComplaint]
    threshold_penalty: ComplaintThreshold | None = None
    breakdown: list[BreakdownItem] = field(default_factory=list)

    @property
    def reputation_penalty(self) -> float:
        if self.threshold_penalty is None:
            return 0.0
        return self.threshold_penalty.penalty


# ============================================================================
# Spam traps
# ============================================================================

@dataclass(frozen=True)
class ClientSpamTrap(_Serializable):
    """Trap exposure of one client.

    Attributes:
        client_id: Client id.
        client_type: Client profile type.
        base_risk: Hit probability from the client profile.
        adjusted_risk: base_risk times every applicable trap modifier.
        destination_risk: Destination -> risk after network amplification.
        volume: Adjusted volume of the client.
        trap_hit: True when at least one destination was hit.
        random_roll: Primary client roll, kept for auditing.
        hit_destinations: Destinations where the roll fell below the risk.
    """

    client_id: str
    client_type: str
    base_risk: float
    adjusted_risk: float
    destination_risk: dict[str, float]
    volume: int
    trap_hit: bool
    random_roll: float
    hit_destinations: list[str]


@dataclass(frozen=True)
class SpamTrapResult(_Serializable):
    total_base_risk: float
    total_adjusted_risk: float
    per_client: list[ClientSpamTrap]
    trap_hit: bool
    hit_client_ids: list[str]
    hit_destinations: list[str]
    reputation_penalty: float
    capped_at_max: bool


# ============================================================================
# Satisfaction
# ============================================================================

@dataclass(frozen=True)
class DestinationSatisfaction(_Serializable):
    """Satisfaction model for one destination.

    Percentages are shares of the destination's total volume.
    """

    destination: str
    filtering_level: str
    spam_rate: float
    spam_blocking_rate: float
    false_positive_rate: float
    spam_blocked_percentage: float
    spam_through_percentage: float
    false_positive_percentage: float
    satisfaction_gain: float
    spam_penalty: float
    false_positive_penalty: float
    satisfaction: float
    total_volume: int
    spam_blocked_volume: int
    spam_through_volume: int
    false_positive_volume: int


@dataclass(frozen=True)
class SatisfactionResult(_Serializable):
    aggregated_satisfaction: float
    per_destination: dict[str, float]
    breakdown: list[DestinationSatisfaction]


# ============================================================================
# Revenue
# ============================================================================

@dataclass(frozen=True)
class ClientRevenue(_Serializable):
    client_id: str
    base_revenue: int
    volume_multiplier: float
    actual_revenue: int


@dataclass(frozen=True)
class RevenueResult(_Serializable):
    """Team revenue for one round."""

    base_revenue: int
    actual_revenue: int
    delivery_rate: float
    per_client: list[ClientRevenue]
    breakdown: list[BreakdownItem]


@dataclass(frozen=True)
class DestinationRevenueResult(_Serializable):
    """Revenue earned by one destination this round."""

    destination: str
    base_revenue: int
    volume_bonus: int
    satisfaction_multiplier: float
    satisfaction_tier: str
    total_revenue: int
    breakdown: list[BreakdownItem]
