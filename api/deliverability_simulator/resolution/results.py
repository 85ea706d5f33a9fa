"""Merged per-round results produced by the orchestrator.

Field names here are the contract consumed by the final score aggregator
and by the CLI JSON output.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from deliverability_simulator.calculators.results import (
    ComplaintResult,
    DeliveryResult,
    DestinationRevenueResult,
    ReputationResult,
    RevenueResult,
    SatisfactionResult,
    SpamTrapResult,
    VolumeResult,
)


@dataclass(frozen=True)
class ReputationUpdate:
    """Clamped reputation recorded for one destination.

    Fields:
        current_reputation: Reputation before this round
        total_change: Unclamped change from the reputation calculator
        complaint_penalty: Complaint breakpoint penalty (0 when none)
        spam_trap_penalty: Trap penalty when this destination was hit (else 0)
        new_reputation: clamp(round(current + every term), 0, 100)
    """

    current_reputation: float
    total_change: float
    complaint_penalty: float
    spam_trap_penalty: float
    new_reputation: int


@dataclass(frozen=True)
class TeamResolution:
    """Every calculator result for one sender team."""

    team: str
    volume: VolumeResult
    delivery: dict[str, DeliveryResult]
    aggregate_delivery_rate: float
    revenue: RevenueResult
    reputation: ReputationResult
    reputation_updates: dict[str, ReputationUpdate]
    complaints: ComplaintResult
    satisfaction: SatisfactionResult
    spam_traps: SpamTrapResult | None = None

    @property
    def new_reputation(self) -> dict[str, int]:
        return {dest: u.new_reputation for dest, u in self.reputation_updates.items()}


@dataclass(frozen=True)
class DestinationResolution:
    """Aggregated results for one destination across all sender teams."""

    destination: str
    total_volume: int
    aggregated_satisfaction: float
    revenue: DestinationRevenueResult


@dataclass(frozen=True)
class ResolutionResults:
    team_results: dict[str, TeamResolution]
    destination_results: dict[str, DestinationResolution]

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
