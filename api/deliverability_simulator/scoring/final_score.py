"""Final Score Aggregator.

Runs once, after the last round, over the full resolution history and
the terminal team snapshot.

Sender teams (default budgets: 50 reputation, 35 revenue, 15 technical):
- reputation_score = kingdom-weighted reputation / 100 * budget, with the
  weights rescaled over the destinations actually played
- revenue_score = revenue / top revenue * budget (0 for all when top is 0)
- technical_score = min(tech spend / cap, 1) * budget
- A team qualifies only with reputation >= the minimum at every played
  destination
- Winner: qualified team with the highest total, ties broken by weighted
  reputation; a tie on both yields joint winners

Destinations share one collaborative score:
- industry protection = spam blocking rate * budget
- coordination = points per completed investigation
- user satisfaction = (1 - false-positive rate) * budget
- capped at 100, success above the threshold

All scores are rounded half up to 2 decimals.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from deliverability_simulator.calculators.rounding import clamp, round_to
from deliverability_simulator.config.schemas import GameRules, default_rules
from deliverability_simulator.resolution.history import RoundResolution
from deliverability_simulator.scoring.types import (
    CollaborativeBreakdown,
    DestinationCollaborativeResult,
    DestinationStats,
    FinalScoreMetadata,
    FinalScoreOutput,
    QualificationResult,
    RoundMetrics,
    ScoreBreakdown,
    TeamFinalResult,
    WinnerInfo,
)
from deliverability_simulator.shared.data_contracts import SenderTeam

logger = logging.getLogger(__name__)


@dataclass
class DestinationTotals:
    """Running totals of one destination's filtering outcome."""

    spam_blocked: int = 0
    total_spam_sent: int = 0
    false_positives: int = 0
    legitimate_emails: int = 0


@dataclass
class AggregatedHistory:
    team_revenues: dict[str, int] = field(default_factory=dict)
    team_round_history: dict[str, list[RoundMetrics]] = field(default_factory=dict)
    destination_totals: dict[str, DestinationTotals] = field(default_factory=dict)


# ============================================================================
# Sender team scores
# ============================================================================

def reputation_score(
    reputation: dict[str, float],
    rules: GameRules | None = None,
    destinations: Sequence[str] | None = None,
) -> tuple[float, float]:
    """Kingdom-weighted reputation and its score.

    Weights are rescaled so the played destinations sum to 1. A played
    destination missing from `reputation` counts as 0.

    Args:
        reputation: Terminal reputation per destination.
        rules: Game rules. Defaults to the standard rules.
        destinations: Destinations in play. Defaults to every rules destination.

    Returns:
        (weighted_reputation, score), both rounded to 2 decimals.
    """
    rules = rules or default_rules()
    if destinations is None:
        destinations = rules.destination_names
    weights = rules.kingdom_weights
    total_weight = sum(weights.get(dest, 0.0) for dest in destinations)

    weighted = 0.0
    if total_weight > 0:
        for dest in destinations:
            weight = weights.get(dest, 0.0) / total_weight
            weighted += clamp(reputation.get(dest, 0), 0, 100) * weight
    weighted = round_to(weighted)
    score = round_to(weighted / 100 * rules.final_scoring.reputation_points)
    return weighted, score


def revenue_scores(
    revenues: dict[str, int], rules: GameRules | None = None
) -> dict[str, float]:
    """Revenue score of each team relative to the top earner.

    When the top revenue is zero (or negative), every team scores 0.
    """
    rules = rules or default_rules()
    max_revenue = max([*revenues.values(), 0])
    scores = {}
    for team, revenue in revenues.items():
        if max_revenue == 0:
            scores[team] = 0.0
        else:
            scores[team] = round_to(revenue / max_revenue * rules.final_scoring.revenue_points)
    return scores


def technical_score(total_investment: int, rules: GameRules | None = None) -> float:
    rules = rules or default_rules()
    ratio = min(total_investment / rules.final_scoring.max_tech_investment, 1.0)
    return round_to(ratio * rules.final_scoring.technical_points)


def total_tech_investment(tech_stack: Iterable[str], rules: GameRules | None = None) -> int:
    """Catalog cost of every owned upgrade.

    Raises:
        ConfigurationLookupError: If a tech id is not in the catalog.
    """
    rules = rules or default_rules()
    return sum(rules.tech(tech_id).cost for tech_id in tech_stack)


def check_qualification(
    reputation: dict[str, float],
    rules: GameRules | None = None,
    destinations: Sequence[str] | None = None,
) -> QualificationResult:
    rules = rules or default_rules()
    if destinations is None:
        destinations = rules.destination_names
    minimum = rules.final_scoring.min_reputation
    failing = [dest for dest in destinations if reputation.get(dest, 0) < minimum]
    if not failing:
        return QualificationResult(qualified=True, failing_destinations=[], reason=None)
    return QualificationResult(
        qualified=False,
        failing_destinations=failing,
        reason=f"Reputation below {minimum:g} in: {', '.join(failing)}",
    )


def determine_winner(results: Sequence[TeamFinalResult]) -> WinnerInfo | None:
    """Pick the winner(s) among qualified teams.

    Returns:
        WinnerInfo, or None when every team is disqualified.
    """
    qualified = [r for r in results if r.qualified]
    if not qualified:
        return None

    ordered = sorted(
        qualified,
        key=lambda r: (r.total_score, r.score_breakdown.weighted_reputation),
        reverse=True,
    )
    top_score = ordered[0].total_score
    top_reputation = ordered[0].score_breakdown.weighted_reputation

    winners = [
        r.team
        for r in ordered
        if r.total_score == top_score
        and r.score_breakdown.weighted_reputation == top_reputation
    ]
    same_score = sum(1 for r in ordered if r.total_score == top_score)

    return WinnerInfo(
        teams=winners,
        total_score=top_score,
        tie_breaker=same_score > 1 and len(winners) == 1,
    )


# ============================================================================
# Destination collaborative score
# ============================================================================

def coordination_bonus(investigations: int, rules: GameRules | None = None) -> float:
    rules = rules or default_rules()
    return max(investigations, 0) * rules.final_scoring.coordination_points


def destination_collaborative_score(
    totals: dict[str, DestinationTotals],
    investigations: int = 0,
    rules: GameRules | None = None,
) -> DestinationCollaborativeResult:
    """Combine every destination's filtering outcome into one score."""
    rules = rules or default_rules()
    scoring = rules.final_scoring

    per_destination = []
    spam_blocked = spam_sent = false_positives = legitimate = 0
    for dest, stats in totals.items():
        spam_blocked += stats.spam_blocked
        spam_sent += stats.total_spam_sent
        false_positives += stats.false_positives
        legitimate += stats.legitimate_emails

        blocking_rate = stats.spam_blocked / stats.total_spam_sent * 100 if stats.total_spam_sent > 0 else 0.0
        fp_rate = stats.false_positives / stats.legitimate_emails * 100 if stats.legitimate_emails > 0 else 0.0
        per_destination.append(
            DestinationStats(
                destination=dest,
                spam_blocked=stats.spam_blocked,
                total_spam_sent=stats.total_spam_sent,
                blocking_rate=round_to(blocking_rate),
                false_positives=stats.false_positives,
                legitimate_emails=stats.legitimate_emails,
                false_positive_rate=round_to(fp_rate),
            )
        )

    blocking = spam_blocked / spam_sent if spam_sent > 0 else 0.0
    industry_protection = round_to(blocking * scoring.industry_protection_points)

    coordination = coordination_bonus(investigations, rules)

    fp_rate = false_positives / legitimate if legitimate > 0 else 0.0
    user_satisfaction = round_to((1 - fp_rate) * scoring.user_satisfaction_points)

    score = min(100.0, round_to(industry_protection + coordination + user_satisfaction))

    return DestinationCollaborativeResult(
        collaborative_score=score,
        success=score > scoring.success_threshold,
        score_breakdown=CollaborativeBreakdown(
            industry_protection=industry_protection,
            coordination_bonus=coordination,
            user_satisfaction=user_satisfaction,
        ),
        per_destination=per_destination,
    )


# ============================================================================
# History walk
# ============================================================================

def played_destinations(
    history: Sequence[RoundResolution], rules: GameRules
) -> list[str]:
    """Destination names resolved in the history, in first-seen order."""
    names: list[str] = []
    for entry in history:
        for dest in entry.results.destination_results:
            if dest not in names:
                names.append(dest)
    return names or rules.destination_names


def aggregate_history(
    history: Iterable[RoundResolution],
    destinations: Sequence[str],
) -> AggregatedHistory:
    """Walk the resolution history once.

    Sums revenue per team, rebuilds each team's per-round reputation trail
    from the recorded reputation updates, and totals each destination's
    spam and false-positive volumes from the satisfaction breakdowns.
    Spam sent is blocked plus delivered spam; legitimate mail is the rest
    of the destination volume.
    """
    aggregated = AggregatedHistory(
        destination_totals={dest: DestinationTotals() for dest in destinations}
    )

    for entry in history:
        for team, result in entry.results.team_results.items():
            revenue = result.revenue.actual_revenue
            aggregated.team_revenues[team] = aggregated.team_revenues.get(team, 0) + revenue
            aggregated.team_round_history.setdefault(team, []).append(
                RoundMetrics(
                    round=entry.round,
                    revenue=revenue,
                    reputation_by_destination=result.new_reputation,
                )
            )

            for item in result.satisfaction.breakdown:
                totals = aggregated.destination_totals.get(item.destination)
                if totals is None:
                    continue
                spam = item.spam_blocked_volume + item.spam_through_volume
                totals.spam_blocked += item.spam_blocked_volume
                totals.total_spam_sent += spam
                totals.false_positives += item.false_positive_volume
                totals.legitimate_emails += max(item.total_volume - spam, 0)

    return aggregated


def calculate_final_scores(
    history: Iterable[RoundResolution],
    teams: Sequence[SenderTeam],
    room_code: str = "",
    investigations: int = 0,
    destinations: Sequence[str] | None = None,
    rules: GameRules | None = None,
) -> FinalScoreOutput:
    """Calculate final scores for every team and the destinations.

    Args:
        history: Every RoundResolution, in round order.
        teams: Terminal team snapshot (reputation, tech stack, tech spend).
        room_code: Room identifier, echoed in the metadata.
        investigations: Completed cross-destination investigations.
        destinations: Destinations in play. Defaults to those resolved in
            the history, or every rules destination when it is empty.
        rules: Game rules. Defaults to the standard rules.

    Returns:
        FinalScoreOutput with teams ranked by total score.
    """
    rules = rules or default_rules()
    history = list(history)
    if destinations is None:
        destinations = played_destinations(history, rules)
    aggregated = aggregate_history(history, destinations)

    revenues = {team.name: aggregated.team_revenues.get(team.name, 0) for team in teams}
    rev_scores = revenue_scores(revenues, rules)

    results = []
    for team in teams:
        weighted, rep_score = reputation_score(team.reputation, rules, destinations)
        if team.tech_investment is not None:
            invested = team.tech_investment
        else:
            invested = total_tech_investment(team.tech_stack, rules)
        tech_score = technical_score(invested, rules)
        qualification = check_qualification(team.reputation, rules, destinations)
        breakdown = ScoreBreakdown(
            reputation_score=rep_score,
            revenue_score=rev_scores.get(team.name, 0.0),
            technical_score=tech_score,
            weighted_reputation=weighted,
        )
        results.append(
            TeamFinalResult(
                team=team.name,
                rank=0,
                total_score=round_to(breakdown.total),
                qualified=qualification.qualified,
                disqualification_reason=qualification.reason,
                failing_destinations=qualification.failing_destinations,
                score_breakdown=breakdown,
                reputation_by_destination=dict(team.reputation),
                total_revenue=revenues[team.name],
                total_tech_investment=invested,
                round_history=aggregated.team_round_history.get(team.name, []),
            )
        )

    ordered = sorted(results, key=lambda r: r.total_score, reverse=True)
    ranked = [replace(r, rank=index + 1) for index, r in enumerate(ordered)]

    winner = determine_winner(ranked)
    if winner is None:
        logger.info("All teams disqualified in room %s", room_code)

    return FinalScoreOutput(
        team_results=ranked,
        winner=winner,
        destination_results=destination_collaborative_score(
            aggregated.destination_totals, investigations, rules
        ),
        metadata=FinalScoreMetadata(
            calculation_timestamp=datetime.now(timezone.utc).isoformat(),
            room_code=room_code,
            all_disqualified=all(not r.qualified for r in ranked),
        ),
    )
