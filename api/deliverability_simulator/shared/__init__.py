"""Shared data contracts for the resolution engine."""

from deliverability_simulator.shared.data_contracts import (
    FIRST_ACTIVE_ROUND,
    Client,
    ClientState,
    ClientStatus,
    Destination,
    FilteringLevel,
    Modifier,
    PermanentReduction,
    RiskTier,
    RoundScopedMultiplier,
    RoundSnapshot,
    SenderTeam,
)

__all__ = [
    "FIRST_ACTIVE_ROUND",
    "Client",
    "ClientState",
    "ClientStatus",
    "Destination",
    "FilteringLevel",
    "Modifier",
    "PermanentReduction",
    "RiskTier",
    "RoundScopedMultiplier",
    "RoundSnapshot",
    "SenderTeam",
]
