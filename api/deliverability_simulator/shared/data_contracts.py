"""Canonical inbound data structures for round resolution.

These define the snapshot the engine reads each round. The engine never
mutates them: calculators take a snapshot in and hand fresh result
objects back, and resolution application builds the next snapshot with
dataclasses.replace().

Modifiers are appended by outside collaborators (onboarding purchases,
incident cards). The engine only reads and applies them.

Example:
    >>> from deliverability_simulator.shared.data_contracts import (
    ...     Client, ClientState, RiskTier, SenderTeam,
    ... )
    >>> client = Client(
    ...     id="c1",
    ...     name="Luxe Goods",
    ...     type="premium_brand",
    ...     base_volume=30000,
    ...     base_revenue=350,
    ...     risk=RiskTier.LOW,
    ...     base_spam_rate=0.5,
    ... )
    >>> team = SenderTeam(
    ...     name="SendWave",
    ...     clients=(client,),
    ...     client_states={"c1": ClientState()},
    ... )
    >>> [c.id for c in team.active_clients()]
    ['c1']
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

# Sentinel in RoundScopedMultiplier.applicable_rounds: the client's first active round only
FIRST_ACTIVE_ROUND = -1


class RiskTier(str, Enum):
    """Client risk tier."""

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"


class ClientStatus(str, Enum):
    """Per-round client status. Only active clients count anywhere."""

    ACTIVE = "Active"
    PAUSED = "Paused"


class FilteringLevel(str, Enum):
    """Destination filtering strictness toward one sender team."""

    PERMISSIVE = "permissive"
    MODERATE = "moderate"
    STRICT = "strict"
    MAXIMUM = "maximum"


@dataclass(frozen=True)
class PermanentReduction:
    """Modifier that applies every round (e.g. list hygiene).

    Permanent reductions are folded before any round-scoped modifier.
    """

    id: str
    source: str
    multiplier: float


@dataclass(frozen=True)
class RoundScopedMultiplier:
    """Modifier limited to specific rounds (e.g. warmup, incidents).

    applicable_rounds may contain FIRST_ACTIVE_ROUND, in which case the
    modifier applies only in the client's first active round. Multipliers
    above 1.0 are allowed (viral spikes).
    """

    id: str
    source: str
    multiplier: float
    applicable_rounds: tuple[int, ...] = ()


Modifier = Union[PermanentReduction, RoundScopedMultiplier]


@dataclass(frozen=True)
class Client:
    """An acquired sending account.

    Fields:
        id: Unique id within the owning team
        name: Display name
        type: Client profile type (premium_brand, re_engagement, ...)
        base_volume: Emails per round before modifiers
        base_revenue: Credits per round before modifiers
        risk: Risk tier driving reputation impact
        base_spam_rate: Complaint rate in percentage units (0.5 means 0.5%)
        destination_distribution: Percentage split per destination, summing
            to 100. None means the configured default split.
    """

    id: str
    name: str
    type: str
    base_volume: int
    base_revenue: int
    risk: RiskTier
    base_spam_rate: float
    destination_distribution: dict[str, float] | None = None


@dataclass(frozen=True)
class ClientState:
    """Per-round state of one client inside a team."""

    status: ClientStatus = ClientStatus.ACTIVE
    first_active_round: int | None = None
    has_warmup: bool = False
    has_list_hygiene: bool = False
    volume_modifiers: tuple[Modifier, ...] = ()
    spam_trap_modifiers: tuple[Modifier, ...] = ()

    @property
    def is_active(self) -> bool:
        return self.status == ClientStatus.ACTIVE


@dataclass(frozen=True)
class SenderTeam:
    """A sender (ESP) team and its client portfolio.

    Fields:
        name: Team name, also used as RNG seed material
        tech_stack: Owned tech upgrade ids
        reputation: Current reputation per destination (0-100)
        clients: Acquired clients
        client_states: Client id -> state for this round
        credits: Spendable credits
        tech_investment: Explicit tech spend. None means the sum of the
            catalog cost of every owned upgrade.
    """

    name: str
    tech_stack: tuple[str, ...] = ()
    reputation: dict[str, float] = field(default_factory=dict)
    clients: tuple[Client, ...] = ()
    client_states: dict[str, ClientState] = field(default_factory=dict)
    credits: int = 0
    tech_investment: int | None = None

    def active_clients(self) -> list[Client]:
        """Clients whose state is Active. Clients without state are excluded."""
        active = []
        for client in self.clients:
            state = self.client_states.get(client.id)
            if state is not None and state.is_active:
                active.append(client)
        return active


@dataclass(frozen=True)
class Destination:
    """A destination (mailbox provider) team."""

    name: str
    filtering_policies: dict[str, FilteringLevel] = field(default_factory=dict)
    owned_tools: tuple[str, ...] = ()
    budget: int = 0

    def filtering_level_for(self, team_name: str) -> FilteringLevel | str:
        """Filtering level toward a team. Missing policy means permissive."""
        return self.filtering_policies.get(team_name, FilteringLevel.PERMISSIVE)


@dataclass(frozen=True)
class RoundSnapshot:
    """Everything the engine reads to resolve one round.

    Fields:
        room_code: Stable room identifier, used only as RNG seed material
        round: Round being resolved (1-based)
        teams: Sender teams
        destinations: Destination teams
        investigations: Completed cross-destination investigations so far
    """

    room_code: str
    round: int
    teams: tuple[SenderTeam, ...] = ()
    destinations: tuple[Destination, ...] = ()
    investigations: int = 0

    @property
    def destination_names(self) -> list[str]:
        return [d.name for d in self.destinations]
