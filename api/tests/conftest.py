"""
Pytest configuration and shared fixtures.

Provides builders for clients, teams and snapshots so tests only spell
out the fields they care about.
"""

from typing import Optional

import pytest

from deliverability_simulator.config.schemas import GameRules
from deliverability_simulator.shared.data_contracts import (
    Client,
    ClientState,
    Destination,
    RiskTier,
    RoundSnapshot,
    SenderTeam,
)


def make_client(
    client_id: str = "c1",
    client_type: str = "premium_brand",
    volume: int = 30000,
    revenue: int = 350,
    risk: RiskTier = RiskTier.LOW,
    spam_rate: float = 0.5,
    distribution: Optional[dict[str, float]] = None,
) -> Client:
    return Client(
        id=client_id,
        name=f"Client {client_id}",
        type=client_type,
        base_volume=volume,
        base_revenue=revenue,
        risk=risk,
        base_spam_rate=spam_rate,
        destination_distribution=distribution,
    )


def make_team(
    name: str = "SendWave",
    clients: tuple[Client, ...] = (),
    states: Optional[dict[str, ClientState]] = None,
    tech_stack: tuple[str, ...] = (),
    reputation: Optional[dict[str, float]] = None,
    **kwargs,
) -> SenderTeam:
    """Build a team; clients without an explicit state start Active in round 1."""
    if states is None:
        states = {c.id: ClientState(first_active_round=1) for c in clients}
    return SenderTeam(
        name=name,
        tech_stack=tech_stack,
        reputation=reputation if reputation is not None else {},
        clients=clients,
        client_states=states,
        **kwargs,
    )


@pytest.fixture(name="make_client")
def make_client_fixture():
    """Factory fixture for Client objects."""
    return make_client


@pytest.fixture(name="make_team")
def make_team_fixture():
    """Factory fixture for SenderTeam objects."""
    return make_team


@pytest.fixture
def rules() -> GameRules:
    """Fresh standard rules (safe to copy and modify)."""
    return GameRules()


@pytest.fixture
def destinations() -> tuple[Destination, ...]:
    return (Destination(name="zmail"), Destination(name="intake"), Destination(name="yagle"))


@pytest.fixture
def premium_client() -> Client:
    return make_client()


@pytest.fixture
def aggressive_client() -> Client:
    return make_client(
        client_id="c2",
        client_type="aggressive_marketer",
        volume=80000,
        revenue=250,
        risk=RiskTier.HIGH,
        spam_rate=3.0,
    )


@pytest.fixture
def two_team_snapshot(premium_client, aggressive_client, destinations) -> RoundSnapshot:
    """Round 1 with a careful team and a risky team."""
    careful = make_team(
        name="SendWave",
        clients=(premium_client,),
        tech_stack=("spf", "dkim", "dmarc"),
        reputation={"zmail": 75, "intake": 75, "yagle": 75},
    )
    risky = make_team(
        name="BlastCo",
        clients=(aggressive_client,),
        reputation={"zmail": 70, "intake": 70, "yagle": 70},
    )
    return RoundSnapshot(
        room_code="ABC123",
        round=1,
        teams=(careful, risky),
        destinations=destinations,
    )
