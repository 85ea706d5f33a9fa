"""Exceptions raised by the resolution engine.

Lookups against the game rules fail fast with ConfigurationLookupError.
Degenerate arithmetic (zero volume, no clients, zero revenue pool) never
raises; calculators return zero or neutral results instead.
"""

from __future__ import annotations


class DeliverabilitySimError(Exception):
    """Base class for all engine errors."""


class ConfigurationLookupError(DeliverabilitySimError, KeyError):
    """Raised when a rules lookup references an unknown id.

    Covers client types, tech upgrades, destination tools, filtering
    levels, risk tiers and destinations.
    """

    def __init__(self, kind: str, key: str) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"Unknown {kind}: {key}")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return f"Unknown {self.kind}: {self.key}"


class ResolutionOrderError(DeliverabilitySimError, ValueError):
    """Raised when a round is appended to history out of order."""

    def __init__(self, expected_round: int, actual_round: int) -> None:
        self.expected_round = expected_round
        self.actual_round = actual_round
        super().__init__(
            f"Expected resolution for round {expected_round}, got round {actual_round}"
        )
