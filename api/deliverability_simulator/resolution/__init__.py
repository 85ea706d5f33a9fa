"""Round resolution: orchestration, history and state application."""

from deliverability_simulator.resolution.application import apply_resolution
from deliverability_simulator.resolution.history import ResolutionHistory, RoundResolution
from deliverability_simulator.resolution.orchestrator import ResolutionOrchestrator
from deliverability_simulator.resolution.results import (
    DestinationResolution,
    ReputationUpdate,
    ResolutionResults,
    TeamResolution,
)
from deliverability_simulator.resolution.verbose import ResolutionLogger, VerboseConfig

__all__ = [
    "DestinationResolution",
    "ReputationUpdate",
    "ResolutionHistory",
    "ResolutionLogger",
    "ResolutionOrchestrator",
    "ResolutionResults",
    "RoundResolution",
    "TeamResolution",
    "VerboseConfig",
    "apply_resolution",
]
