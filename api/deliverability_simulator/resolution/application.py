"""Apply a resolved round to produce the next round's snapshot.

- Team credits grow by the team's actual revenue
- Team reputation becomes the recorded new reputation per destination
- Destination budgets grow by their destination revenue
- Tools that only last one round (spam trap network) are dropped
- Active clients without a first active round get the resolved round

The input snapshot is never mutated.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from deliverability_simulator.config.schemas import GameRules, default_rules
from deliverability_simulator.resolution.history import RoundResolution
from deliverability_simulator.shared.data_contracts import (
    ClientState,
    Destination,
    RoundSnapshot,
    SenderTeam,
)

logger = logging.getLogger(__name__)


def _apply_team(team: SenderTeam, resolution: RoundResolution) -> SenderTeam:
    team_result = resolution.results.team_results.get(team.name)
    if team_result is None:
        logger.info("No resolution results found for team %s", team.name)
        return team

    reputation = dict(team.reputation)
    reputation.update(team_result.new_reputation)

    states: dict[str, ClientState] = {}
    for client_id, state in team.client_states.items():
        if state.is_active and state.first_active_round is None:
            state = replace(state, first_active_round=resolution.round)
        states[client_id] = state

    credits = team.credits + team_result.revenue.actual_revenue
    logger.info(
        "Resolution applied team=%s credits=%d->%d",
        team.name,
        team.credits,
        credits,
    )
    return replace(team, credits=credits, reputation=reputation, client_states=states)


def _apply_destination(
    destination: Destination, resolution: RoundResolution, rules: GameRules
) -> Destination:
    dest_result = resolution.results.destination_results.get(destination.name)
    budget = destination.budget
    if dest_result is not None:
        budget += dest_result.revenue.total_revenue

    tools = tuple(
        tool_id
        for tool_id in destination.owned_tools
        if rules.destination_tool(tool_id).permanent
    )
    return replace(destination, budget=budget, owned_tools=tools)


def apply_resolution(
    snapshot: RoundSnapshot,
    resolution: RoundResolution,
    rules: GameRules | None = None,
) -> RoundSnapshot:
    """Build the next round's snapshot from a resolved round.

    Args:
        snapshot: Snapshot the resolution was computed from.
        resolution: Resolution of snapshot.round.
        rules: Game rules. Defaults to the standard rules.

    Returns:
        New RoundSnapshot for round + 1.

    Raises:
        ValueError: If the resolution is for a different round.
    """
    if resolution.round != snapshot.round:
        raise ValueError(
            f"Resolution is for round {resolution.round}, snapshot is round {snapshot.round}"
        )
    rules = rules or default_rules()

    return replace(
        snapshot,
        round=snapshot.round + 1,
        teams=tuple(_apply_team(team, resolution) for team in snapshot.teams),
        destinations=tuple(
            _apply_destination(d, resolution, rules) for d in snapshot.destinations
        ),
    )
