"""End-of-game scoring."""

from deliverability_simulator.scoring.final_score import (
    calculate_final_scores,
    check_qualification,
    determine_winner,
    destination_collaborative_score,
    reputation_score,
    revenue_scores,
    technical_score,
    total_tech_investment,
)
from deliverability_simulator.scoring.types import FinalScoreOutput, TeamFinalResult, WinnerInfo

__all__ = [
    "FinalScoreOutput",
    "TeamFinalResult",
    "WinnerInfo",
    "calculate_final_scores",
    "check_qualification",
    "destination_collaborative_score",
    "determine_winner",
    "reputation_score",
    "revenue_scores",
    "technical_score",
    "total_tech_investment",
]
