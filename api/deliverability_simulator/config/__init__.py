"""Configuration module for Deliverability Simulator."""
from pydantic import ValidationError

from .schemas import (
    ClientProfile,
    ComplaintBreakpoint,
    DestinationRules,
    DestinationTool,
    FilteringPolicyRules,
    FinalScoringRules,
    GameRules,
    ReputationZone,
    RiskTierRules,
    SatisfactionTier,
    TechUpgrade,
    default_rules,
)
from .loader import load_rules, load_scenario
from .scenario import ClientConfig, DestinationConfig, ScenarioConfig, TeamConfig

__all__ = [
    "ClientConfig",
    "ClientProfile",
    "ComplaintBreakpoint",
    "DestinationConfig",
    "DestinationRules",
    "DestinationTool",
    "FilteringPolicyRules",
    "FinalScoringRules",
    "GameRules",
    "ReputationZone",
    "RiskTierRules",
    "SatisfactionTier",
    "ScenarioConfig",
    "TeamConfig",
    "ValidationError",
    "default_rules",
    "load_rules",
    "load_scenario",
]
