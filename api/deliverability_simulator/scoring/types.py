"""Result types for the end-of-game scores.

Example:
    >>> breakdown = ScoreBreakdown(
    ...     reputation_score=40.0,
    ...     revenue_score=35.0,
    ...     technical_score=7.5,
    ...     weighted_reputation=80.0,
    ... )
    >>> breakdown.total
    82.5
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any


@dataclass(frozen=True)
class ScoreBreakdown:
    """Sender team score components.

    Fields:
        reputation_score: Weighted reputation / 100 times the reputation budget
        revenue_score: Revenue relative to the top earner times the revenue budget
        technical_score: Capped tech spend ratio times the technical budget
        weighted_reputation: Kingdom-weighted reputation (0-100), the tie breaker
    """

    reputation_score: float
    revenue_score: float
    technical_score: float
    weighted_reputation: float

    @property
    def total(self) -> float:
        return self.reputation_score + self.revenue_score + self.technical_score


@dataclass(frozen=True)
class RoundMetrics:
    """One round of a team's trail, read back from history."""

    round: int
    revenue: int
    reputation_by_destination: dict[str, int]


@dataclass(frozen=True)
class QualificationResult:
    qualified: bool
    failing_destinations: list[str]
    reason: str | None


@dataclass(frozen=True)
class TeamFinalResult:
    team: str
    rank: int
    total_score: float
    qualified: bool
    disqualification_reason: str | None
    failing_destinations: list[str]
    score_breakdown: ScoreBreakdown
    reputation_by_destination: dict[str, float]
    total_revenue: int
    total_tech_investment: int
    round_history: list[RoundMetrics] = field(default_factory=list)


@dataclass(frozen=True)
class WinnerInfo:
    """Winning team(s).

    tie_breaker is True when several teams shared the top score and
    weighted reputation picked a single winner. Joint winners leave it False.
    """

    teams: list[str]
    total_score: float
    tie_breaker: bool


@dataclass(frozen=True)
class DestinationStats:
    """Filtering outcome of one destination over the whole game."""

    destination: str
    spam_blocked: int
    total_spam_sent: int
    blocking_rate: float
    false_positives: int
    legitimate_emails: int
    false_positive_rate: float


@dataclass(frozen=True)
class CollaborativeBreakdown:
    industry_protection: float
    coordination_bonus: float
    user_satisfaction: float


@dataclass(frozen=True)
class DestinationCollaborativeResult:
    """Shared score of every destination team."""

    collaborative_score: float
    success: bool
    score_breakdown: CollaborativeBreakdown
    per_destination: list[DestinationStats]


@dataclass(frozen=True)
class FinalScoreMetadata:
    calculation_timestamp: str
    room_code: str
    all_disqualified: bool


@dataclass(frozen=True)
class FinalScoreOutput:
    """Everything shown on the victory screen."""

    team_results: list[TeamFinalResult]
    winner: WinnerInfo | None
    destination_results: DestinationCollaborativeResult
    metadata: FinalScoreMetadata

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
