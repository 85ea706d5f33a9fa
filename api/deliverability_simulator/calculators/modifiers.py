"""Modifier stacks shared by the Volume and Spam Trap calculators.

A client carries two ordered modifier lists: one for volume and one for
spam trap risk. Both are evaluated by fold_modifiers():

1. Permanent reductions first, in list order
2. Round-scoped multipliers next, in list order, skipping any whose
   applicable rounds exclude the current round

The factories at the bottom build the modifiers that onboarding services
and incident cards append to a client state.

Example:
    >>> from deliverability_simulator.shared.data_contracts import (
    ...     FIRST_ACTIVE_ROUND, RoundScopedMultiplier,
    ... )
    >>> warmup = RoundScopedMultiplier("warmup", "onboarding", 0.5, (FIRST_ACTIVE_ROUND,))
    >>> result = fold_modifiers(30000, [warmup], current_round=1, first_active_round=1,
    ...                         round_each_step=True)
    >>> result.value
    15000
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from deliverability_simulator.calculators.rounding import round_half_up
from deliverability_simulator.config.schemas import GameRules
from deliverability_simulator.shared.data_contracts import (
    FIRST_ACTIVE_ROUND,
    Client,
    Modifier,
    PermanentReduction,
    RoundScopedMultiplier,
)

WARMUP_MODIFIER_ID = "warmup"
LIST_HYGIENE_MODIFIER_ID = "list_hygiene"


@dataclass(frozen=True)
class ModifierStep:
    """One applied modifier and the value before/after it."""

    modifier_id: str
    source: str
    multiplier: float
    before: float
    after: float

    @property
    def removed(self) -> float:
        """Amount removed by this step. Negative when the modifier raises the value."""
        return self.before - self.after


@dataclass(frozen=True)
class FoldResult:
    """Outcome of folding a modifier list over a starting value."""

    value: float
    multiplier: float
    steps: tuple[ModifierStep, ...]


def is_applicable(
    modifier: Modifier,
    current_round: int,
    first_active_round: int | None,
) -> bool:
    """Check whether a modifier applies in the current round.

    Permanent reductions always apply. A round-scoped multiplier carrying
    the FIRST_ACTIVE_ROUND sentinel applies only when the client's first
    active round is the current round.
    """
    if isinstance(modifier, PermanentReduction):
        return True
    if FIRST_ACTIVE_ROUND in modifier.applicable_rounds:
        return first_active_round is not None and first_active_round == current_round
    return current_round in modifier.applicable_rounds


def application_order(modifiers: Iterable[Modifier]) -> list[Modifier]:
    """Permanent reductions first, then round-scoped multipliers, list order kept."""
    modifiers = list(modifiers)
    permanent = [m for m in modifiers if isinstance(m, PermanentReduction)]
    scoped = [m for m in modifiers if isinstance(m, RoundScopedMultiplier)]
    return permanent + scoped


def fold_modifiers(
    start: float,
    modifiers: Sequence[Modifier],
    current_round: int,
    first_active_round: int | None,
    round_each_step: bool = False,
) -> FoldResult:
    """Apply every applicable modifier to a starting value.

    Args:
        start: Value before any modifier (base volume or base trap risk).
        modifiers: Modifier list from the client state.
        current_round: Round being resolved.
        first_active_round: Round the client first became active, if any.
        round_each_step: Round half up after each step (volumes are whole emails).

    Returns:
        FoldResult with the final value, the product of the applied
        multipliers and one step per applied modifier.
    """
    value = start
    multiplier = 1.0
    steps = []
    for modifier in application_order(modifiers):
        if not is_applicable(modifier, current_round, first_active_round):
            continue
        before = value
        value = value * modifier.multiplier
        if round_each_step:
            value = round_half_up(value)
        multiplier *= modifier.multiplier
        steps.append(
            ModifierStep(
                modifier_id=modifier.id,
                source=modifier.source,
                multiplier=modifier.multiplier,
                before=before,
                after=value,
            )
        )
    return FoldResult(value=value, multiplier=multiplier, steps=tuple(steps))


# ============================================================================
# Factories
# ============================================================================

def warmup_modifier(rules: GameRules) -> RoundScopedMultiplier:
    """Volume reduction for the client's first active round only."""
    return RoundScopedMultiplier(
        id=WARMUP_MODIFIER_ID,
        source="onboarding",
        multiplier=rules.onboarding.warmup_volume_multiplier,
        applicable_rounds=(FIRST_ACTIVE_ROUND,),
    )


def list_hygiene_modifiers(
    client: Client, rules: GameRules
) -> tuple[PermanentReduction, PermanentReduction]:
    """Permanent volume and spam trap reductions from list hygiene.

    Returns:
        (volume_modifier, spam_trap_modifier). The volume cut depends on
        the client's risk tier.
    """
    tier = rules.risk_tier(client.risk)
    volume = PermanentReduction(
        id=LIST_HYGIENE_MODIFIER_ID,
        source="onboarding",
        multiplier=tier.list_hygiene_volume_multiplier,
    )
    spam_trap = PermanentReduction(
        id=LIST_HYGIENE_MODIFIER_ID,
        source="onboarding",
        multiplier=rules.onboarding.list_hygiene_spam_trap_multiplier,
    )
    return volume, spam_trap


def incident_modifier(
    incident_id: str, multiplier: float, rounds: Iterable[int]
) -> RoundScopedMultiplier:
    """Round-scoped multiplier injected by an incident card.

    Works for both volume lists (e.g. 10x viral spike) and spam trap
    lists (e.g. 3x trap exposure).
    """
    return RoundScopedMultiplier(
        id=incident_id,
        source="incident",
        multiplier=multiplier,
        applicable_rounds=tuple(rounds),
    )
