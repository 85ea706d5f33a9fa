"""Pydantic schemas for offline scenario files.

A scenario describes the state of a room before round 1: sender teams
with their clients and tech, destinations with their policies and tools.
ScenarioConfig.to_snapshot() turns it into the engine's RoundSnapshot,
filling client defaults from the rules' client profiles.
"""
from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from deliverability_simulator.calculators.modifiers import (
    incident_modifier,
    list_hygiene_modifiers,
    warmup_modifier,
)
from deliverability_simulator.config.schemas import GameRules
from deliverability_simulator.shared.data_contracts import (
    Client,
    ClientState,
    ClientStatus,
    Destination,
    FilteringLevel,
    RiskTier,
    RoundSnapshot,
    SenderTeam,
)


class IncidentConfig(BaseModel):
    """Externally injected incident affecting one client."""
    id: str
    multiplier: float = Field(..., gt=0)
    rounds: list[int] = Field(..., min_length=1)
    target: Literal["volume", "spam_trap"] = "volume"


class ClientConfig(BaseModel):
    """Client entry. Omitted values come from the client profile."""
    id: str
    type: str
    name: str | None = None
    volume: int | None = Field(None, ge=0)
    revenue: int | None = Field(None, ge=0)
    risk: RiskTier | None = None
    spam_rate: float | None = Field(None, ge=0)
    destination_distribution: dict[str, float] | None = None
    status: ClientStatus = ClientStatus.ACTIVE
    first_active_round: int | None = Field(None, ge=1)
    onboarding: list[Literal["warmup", "list_hygiene"]] = Field(default_factory=list)
    incidents: list[IncidentConfig] = Field(default_factory=list)

    @field_validator("destination_distribution")
    @classmethod
    def distribution_sums_to_100(cls, v: dict[str, float] | None) -> dict[str, float] | None:
        """Validate percentages sum to 100."""
        if v is not None and abs(sum(v.values()) - 100) > 1e-6:
            raise ValueError(f"destination_distribution must sum to 100, got {sum(v.values())}")
        return v

    def to_client(self, rules: GameRules) -> Client:
        profile = rules.client_profile(self.type)
        return Client(
            id=self.id,
            name=self.name or f"{self.type}-{self.id}",
            type=self.type,
            base_volume=self.volume if self.volume is not None else profile.volume,
            base_revenue=self.revenue if self.revenue is not None else profile.revenue,
            risk=self.risk or profile.risk,
            base_spam_rate=self.spam_rate if self.spam_rate is not None else profile.spam_rate,
            destination_distribution=self.destination_distribution,
        )

    def to_state(self, client: Client, rules: GameRules, start_round: int) -> ClientState:
        volume_modifiers = []
        spam_trap_modifiers = []
        if "list_hygiene" in self.onboarding:
            volume_mod, trap_mod = list_hygiene_modifiers(client, rules)
            volume_modifiers.append(volume_mod)
            spam_trap_modifiers.append(trap_mod)
        if "warmup" in self.onboarding:
            volume_modifiers.append(warmup_modifier(rules))
        for incident in self.incidents:
            modifier = incident_modifier(incident.id, incident.multiplier, incident.rounds)
            if incident.target == "volume":
                volume_modifiers.append(modifier)
            else:
                spam_trap_modifiers.append(modifier)

        first_active = self.first_active_round
        if first_active is None and self.status == ClientStatus.ACTIVE:
            first_active = start_round

        return ClientState(
            status=self.status,
            first_active_round=first_active,
            has_warmup="warmup" in self.onboarding,
            has_list_hygiene="list_hygiene" in self.onboarding,
            volume_modifiers=tuple(volume_modifiers),
            spam_trap_modifiers=tuple(spam_trap_modifiers),
        )


class TeamConfig(BaseModel):
    """Sender team entry."""
    name: str
    credits: int = 0
    tech_stack: list[str] = Field(default_factory=list)
    reputation: dict[str, float] = Field(default_factory=dict)
    tech_investment: int | None = Field(None, ge=0)
    clients: list[ClientConfig] = Field(default_factory=list)

    @field_validator("reputation")
    @classmethod
    def reputation_in_range(cls, v: dict[str, float]) -> dict[str, float]:
        """Validate reputation values are within 0-100."""
        for dest, value in v.items():
            if not 0 <= value <= 100:
                raise ValueError(f"Reputation for {dest} must be between 0 and 100, got {value}")
        return v

    @model_validator(mode="after")
    def validate_unique_client_ids(self) -> TeamConfig:
        """Validate client ids are unique within the team."""
        ids = [c.id for c in self.clients]
        if len(ids) != len(set(ids)):
            raise ValueError(f"Duplicate client ids in team {self.name}")
        return self


class DestinationConfig(BaseModel):
    """Destination team entry."""
    name: str
    budget: int = 0
    filtering_policies: dict[str, FilteringLevel] = Field(default_factory=dict)
    owned_tools: list[str] = Field(default_factory=list)


class ScenarioConfig(BaseModel):
    """Root scenario schema.

    Example YAML:

        room_code: DEMO01
        rounds: 4
        teams:
          - name: SendWave
            tech_stack: [spf, dkim]
            clients:
              - {id: c1, type: growing_startup, onboarding: [warmup]}
        destinations:
          - name: zmail
            filtering_policies: {SendWave: moderate}
    """
    room_code: str = Field(..., min_length=1)
    rounds: int = Field(4, ge=1)
    start_round: int = Field(1, ge=1)
    rules: str | None = Field(None, description="Rules YAML path, relative to the scenario file")
    investigations: int = Field(0, ge=0)
    teams: list[TeamConfig] = Field(..., min_length=1)
    destinations: list[DestinationConfig] | None = None

    @model_validator(mode="after")
    def validate_unique_names(self) -> ScenarioConfig:
        """Validate team and destination names are unique."""
        team_names = [t.name for t in self.teams]
        if len(team_names) != len(set(team_names)):
            raise ValueError("Duplicate team names")
        if self.destinations is not None:
            dest_names = [d.name for d in self.destinations]
            if len(dest_names) != len(set(dest_names)):
                raise ValueError("Duplicate destination names")
        return self

    def rules_path(self, scenario_path: str | Path) -> Path | None:
        if self.rules is None:
            return None
        path = Path(self.rules)
        if not path.is_absolute():
            path = Path(scenario_path).parent / path
        return path

    def to_snapshot(self, rules: GameRules) -> RoundSnapshot:
        """Build the snapshot for the first round.

        Destinations default to the configured destinations with no
        policies or tools. Team reputation defaults to the rules' default
        reputation at each destination.

        Raises:
            ConfigurationLookupError: For an unknown client type.
        """
        destination_configs = self.destinations
        if destination_configs is None:
            destination_configs = [DestinationConfig(name=n) for n in rules.destination_names]

        destinations = tuple(
            Destination(
                name=d.name,
                filtering_policies=dict(d.filtering_policies),
                owned_tools=tuple(d.owned_tools),
                budget=d.budget,
            )
            for d in destination_configs
        )

        teams = []
        for team in self.teams:
            clients = []
            states = {}
            for client_config in team.clients:
                client = client_config.to_client(rules)
                clients.append(client)
                states[client.id] = client_config.to_state(client, rules, self.start_round)

            reputation = {d.name: rules.default_reputation for d in destinations}
            reputation.update(team.reputation)
            teams.append(
                SenderTeam(
                    name=team.name,
                    tech_stack=tuple(team.tech_stack),
                    reputation=reputation,
                    clients=tuple(clients),
                    client_states=states,
                    credits=team.credits,
                    tech_investment=team.tech_investment,
                )
            )

        return RoundSnapshot(
            room_code=self.room_code,
            round=self.start_round,
            teams=tuple(teams),
            destinations=destinations,
            investigations=self.investigations,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ScenarioConfig:
        return cls.model_validate(data)
