"""Multi-round game runner.

Drives the resolve -> record -> apply loop for a fixed number of rounds
and scores the terminal state. Used by the CLI and by integration tests.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from deliverability_simulator.config.schemas import GameRules, default_rules
from deliverability_simulator.resolution.application import apply_resolution
from deliverability_simulator.resolution.history import ResolutionHistory
from deliverability_simulator.resolution.orchestrator import ResolutionOrchestrator
from deliverability_simulator.scoring.final_score import calculate_final_scores
from deliverability_simulator.scoring.types import FinalScoreOutput
from deliverability_simulator.shared.data_contracts import RoundSnapshot

logger = logging.getLogger(__name__)


@dataclass
class GameOutcome:
    """Everything a finished game produced.

    Attributes:
        history: Every resolved round, in order
        final_snapshot: State after the last round was applied
        final_scores: End-of-game scores, or None when scoring was skipped
    """

    history: ResolutionHistory
    final_snapshot: RoundSnapshot
    final_scores: FinalScoreOutput | None = None

    def to_dict(self, include_history: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {
            "room_code": self.final_snapshot.room_code,
            "rounds_played": len(self.history),
            "teams": [
                {
                    "name": team.name,
                    "credits": team.credits,
                    "reputation": dict(team.reputation),
                }
                for team in self.final_snapshot.teams
            ],
            "destinations": [
                {"name": dest.name, "budget": dest.budget}
                for dest in self.final_snapshot.destinations
            ],
        }
        if include_history:
            data["history"] = self.history.to_list()
        if self.final_scores is not None:
            data["final_scores"] = self.final_scores.to_dict()
        return data


class GameRunner:
    """Runs consecutive rounds from an initial snapshot.

    Usage:
        runner = GameRunner(ResolutionOrchestrator(rules), rules)
        outcome = runner.run(scenario.to_snapshot(rules), rounds=4)
    """

    def __init__(
        self,
        orchestrator: ResolutionOrchestrator | None = None,
        rules: GameRules | None = None,
    ) -> None:
        self.rules = rules or default_rules()
        self.orchestrator = orchestrator or ResolutionOrchestrator(self.rules)

    def run(
        self,
        snapshot: RoundSnapshot,
        rounds: int,
        score: bool = True,
    ) -> GameOutcome:
        """Resolve `rounds` rounds starting at snapshot.round.

        Args:
            snapshot: State at the start of the first round.
            rounds: Number of rounds to resolve.
            score: Calculate final scores after the last round.

        Returns:
            GameOutcome with the full history and terminal state.

        Raises:
            ValueError: If rounds is less than 1.
        """
        if rounds < 1:
            raise ValueError(f"rounds must be at least 1, got {rounds}")

        history = ResolutionHistory()
        current = snapshot
        for _ in range(rounds):
            resolution = self.orchestrator.resolve_round(current, history)
            current = apply_resolution(current, resolution, self.rules)

        final_scores = None
        if score:
            final_scores = calculate_final_scores(
                history,
                current.teams,
                room_code=current.room_code,
                investigations=current.investigations,
                destinations=current.destination_names,
                rules=self.rules,
            )
            logger.info(
                "Game complete room=%s rounds=%d winner=%s",
                current.room_code,
                rounds,
                final_scores.winner.teams if final_scores.winner else None,
            )

        return GameOutcome(
            history=history,
            final_snapshot=current,
            final_scores=final_scores,
        )
