"""Pydantic schemas for the game rules.

Every fixed constant the calculators use lives here, with defaults equal
to the standard game. A rules YAML file may override any subset of them
(see loader.load_rules).
"""
from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from deliverability_simulator.errors import ConfigurationLookupError
from deliverability_simulator.shared.data_contracts import FilteringLevel, RiskTier

# ============================================================================
# Sender-side rules
# ============================================================================

class ReputationZone(BaseModel):
    """Reputation band with its base delivery success rate."""
    name: str = Field(..., description="Zone label (excellent, good, ...)")
    min_reputation: float = Field(..., description="Inclusive lower bound", ge=0, le=100)
    base_rate: float = Field(..., description="Base delivery success rate", ge=0, le=1)


class TechUpgrade(BaseModel):
    """Sender tech upgrade from the catalog."""
    id: str
    name: str
    cost: int = Field(..., description="Credits spent to acquire", ge=0)
    delivery_bonus: float = Field(0.0, description="Additive delivery rate bonus")
    reputation_bonus: float = Field(0.0, description="Flat reputation change per round")
    complaint_reduction: float = Field(
        0.0, description="Fractional reduction of the aggregate complaint rate", ge=0, le=1
    )


class FilteringPolicyRules(BaseModel):
    """Base effects of a destination filtering level, in percent."""
    level: FilteringLevel
    spam_reduction: float = Field(..., description="Percent of spam blocked", ge=0, le=100)
    false_positives: float = Field(..., description="Percent of legitimate mail blocked", ge=0, le=100)


class ClientProfile(BaseModel):
    """Defaults for one client type."""
    type: str
    cost: int = Field(..., ge=0)
    revenue: int = Field(..., ge=0)
    volume: int = Field(..., ge=0)
    risk: RiskTier
    spam_rate: float = Field(..., description="Complaint rate in percent", ge=0)
    available_from_round: int = Field(1, ge=1)
    spam_trap_risk: float = Field(..., description="Per-round trap hit probability", ge=0, le=1)


class RiskTierRules(BaseModel):
    """Per risk tier effects."""
    risk: RiskTier
    reputation_impact: float = Field(..., description="Reputation delta per round")
    list_hygiene_volume_multiplier: float = Field(
        ..., description="Volume kept after list hygiene", gt=0, le=1
    )


class ComplaintBreakpoint(BaseModel):
    """Reputation penalty once the adjusted complaint rate reaches threshold."""
    threshold: float = Field(..., description="Complaint rate as a fraction (0.03 = 3%)", gt=0)
    penalty: float = Field(..., description="Reputation delta, negative", le=0)
    label: str


class DeliveryRules(BaseModel):
    """Compliance enforcement on the delivery rate."""
    compliance_tech: str = Field("dmarc", description="Upgrade required from compliance_round on")
    compliance_round: int = Field(3, ge=1)
    compliance_multiplier: float = Field(
        0.2, description="Final rate multiplier when the upgrade is missing", ge=0, le=1
    )


class OnboardingRules(BaseModel):
    """Onboarding service effects."""
    warmup_volume_multiplier: float = Field(0.5, gt=0, le=1)
    warmup_reputation_bonus: float = Field(2.0, ge=0)
    list_hygiene_complaint_reduction: float = Field(0.5, ge=0, le=1)
    list_hygiene_spam_trap_multiplier: float = Field(0.6, ge=0)


class SpamTrapRules(BaseModel):
    """Reputation penalty for spam trap hits."""
    penalty_per_hit: float = Field(-5.0, le=0)
    max_penalty: float = Field(-5.0, description="Floor of the per-round total", le=0)


# ============================================================================
# Destination-side rules
# ============================================================================

class DestinationTool(BaseModel):
    """Destination-owned tool, effects in percentage points."""
    id: str
    name: str
    spam_detection_boost: float = 0.0
    false_positive_impact: float = 0.0
    spam_trap_multiplier: float = Field(
        1.0, description="Trap risk multiplier for senders at this destination", ge=1
    )
    permanent: bool = True


class DestinationRules(BaseModel):
    """Per destination (kingdom) constants."""
    name: str
    base_revenue: int = Field(..., ge=0)
    kingdom_weight: float = Field(..., description="Weight in the final reputation score", ge=0, le=1)
    default_share: float = Field(
        ..., description="Percent of a client's volume sent here by default", ge=0, le=100
    )


class SatisfactionRules(BaseModel):
    """User satisfaction model weights."""
    base_satisfaction: float = 75.0
    spam_blocked_weight: float = 300.0
    spam_through_weight: float = 400.0
    false_positive_weight: float = 100.0
    max_spam_blocking: float = Field(0.95, gt=0, le=1)
    min_false_positive: float = Field(0.005, ge=0, lt=1)


class SatisfactionTier(BaseModel):
    """Destination revenue multiplier for a satisfaction band."""
    min_satisfaction: float = Field(..., ge=0, le=100)
    multiplier: float = Field(..., ge=0)
    label: str


class DestinationRevenueRules(BaseModel):
    """Volume bonus and satisfaction tiers for destination revenue."""
    volume_unit: int = Field(100000, gt=0)
    volume_bonus_rate: float = Field(20.0, ge=0)
    tiers: list[SatisfactionTier] = Field(default_factory=lambda: _default_satisfaction_tiers())

    @field_validator("tiers")
    @classmethod
    def tiers_not_empty(cls, v: list[SatisfactionTier]) -> list[SatisfactionTier]:
        """Validate at least one tier exists."""
        if not v:
            raise ValueError("At least one satisfaction tier is required")
        return sorted(v, key=lambda t: t.min_satisfaction, reverse=True)


# ============================================================================
# Final scoring
# ============================================================================

class FinalScoringRules(BaseModel):
    """Point budgets and thresholds for the end-of-game scores."""
    reputation_points: float = 50.0
    revenue_points: float = 35.0
    technical_points: float = 15.0
    min_reputation: float = Field(60.0, description="Qualification threshold in every destination")
    max_tech_investment: int = Field(1200, gt=0)
    industry_protection_points: float = 40.0
    coordination_points: float = Field(10.0, description="Per completed investigation")
    user_satisfaction_points: float = 40.0
    success_threshold: float = 80.0


# ============================================================================
# Defaults
# ============================================================================

def _default_zones() -> list[ReputationZone]:
    return [
        ReputationZone(name="excellent", min_reputation=90, base_rate=0.95),
        ReputationZone(name="good", min_reputation=70, base_rate=0.85),
        ReputationZone(name="warning", min_reputation=50, base_rate=0.70),
        ReputationZone(name="poor", min_reputation=30, base_rate=0.50),
        ReputationZone(name="blacklist", min_reputation=0, base_rate=0.05),
    ]


def _default_tech_upgrades() -> list[TechUpgrade]:
    return [
        TechUpgrade(id="spf", name="SPF Authentication", cost=100, delivery_bonus=0.05, reputation_bonus=2),
        TechUpgrade(id="dkim", name="DKIM Signature", cost=150, delivery_bonus=0.08, reputation_bonus=3),
        TechUpgrade(id="dmarc", name="DMARC Policy", cost=200, delivery_bonus=0.12, reputation_bonus=5),
        TechUpgrade(id="content-filtering", name="Content Filtering", cost=120, complaint_reduction=0.3),
        TechUpgrade(id="tls-encryption", name="TLS Encryption", cost=120),
        TechUpgrade(id="anti-spam-filter", name="Anti-Spam Filter", cost=180),
        TechUpgrade(id="dedicated-ip", name="Dedicated IP", cost=250),
        TechUpgrade(id="cdn", name="CDN", cost=150),
        TechUpgrade(id="analytics-dashboard", name="Analytics Dashboard", cost=100),
        TechUpgrade(id="reputation-monitoring", name="Reputation Monitoring", cost=130),
    ]


def _default_filtering_policies() -> list[FilteringPolicyRules]:
    return [
        FilteringPolicyRules(level=FilteringLevel.PERMISSIVE, spam_reduction=0, false_positives=0),
        FilteringPolicyRules(level=FilteringLevel.MODERATE, spam_reduction=35, false_positives=3),
        FilteringPolicyRules(level=FilteringLevel.STRICT, spam_reduction=65, false_positives=8),
        FilteringPolicyRules(level=FilteringLevel.MAXIMUM, spam_reduction=85, false_positives=15),
    ]


def _default_client_profiles() -> list[ClientProfile]:
    return [
        ClientProfile(type="premium_brand", cost=300, revenue=350, volume=30000,
                      risk=RiskTier.LOW, spam_rate=0.5, available_from_round=3, spam_trap_risk=0.005),
        ClientProfile(type="growing_startup", cost=150, revenue=180, volume=35000,
                      risk=RiskTier.MEDIUM, spam_rate=1.2, spam_trap_risk=0.015),
        ClientProfile(type="re_engagement", cost=100, revenue=120, volume=50000,
                      risk=RiskTier.HIGH, spam_rate=2.5, spam_trap_risk=0.03),
        ClientProfile(type="aggressive_marketer", cost=200, revenue=250, volume=60000,
                      risk=RiskTier.HIGH, spam_rate=3.0, available_from_round=2, spam_trap_risk=0.05),
        ClientProfile(type="event_seasonal", cost=120, revenue=150, volume=40000,
                      risk=RiskTier.MEDIUM, spam_rate=1.5, spam_trap_risk=0.025),
    ]


def _default_risk_tiers() -> list[RiskTierRules]:
    return [
        RiskTierRules(risk=RiskTier.LOW, reputation_impact=2, list_hygiene_volume_multiplier=0.95),
        RiskTierRules(risk=RiskTier.MEDIUM, reputation_impact=-1, list_hygiene_volume_multiplier=0.90),
        RiskTierRules(risk=RiskTier.HIGH, reputation_impact=-4, list_hygiene_volume_multiplier=0.85),
    ]


def _default_complaint_breakpoints() -> list[ComplaintBreakpoint]:
    return [
        ComplaintBreakpoint(threshold=0.03, penalty=-1, label="Elevated complaint rate"),
        ComplaintBreakpoint(threshold=0.04, penalty=-2, label="High complaint rate"),
        ComplaintBreakpoint(threshold=0.045, penalty=-3, label="Critical complaint rate"),
    ]


def _default_destination_tools() -> list[DestinationTool]:
    return [
        DestinationTool(id="content_analysis_filter", name="Content Analysis Filter",
                        spam_detection_boost=15, false_positive_impact=-2),
        DestinationTool(id="auth_validator_l1", name="Authentication Validator L1", spam_detection_boost=5),
        DestinationTool(id="auth_validator_l2", name="Authentication Validator L2", spam_detection_boost=8),
        DestinationTool(id="auth_validator_l3", name="Authentication Validator L3", spam_detection_boost=12),
        DestinationTool(id="ml_system", name="Machine Learning System",
                        spam_detection_boost=25, false_positive_impact=-3),
        DestinationTool(id="volume_throttling", name="Volume Throttling",
                        spam_detection_boost=5, false_positive_impact=-1),
        DestinationTool(id="spam_trap_network", name="Spam Trap Network",
                        spam_trap_multiplier=3, permanent=False),
    ]


def _default_destinations() -> list[DestinationRules]:
    return [
        DestinationRules(name="zmail", base_revenue=300, kingdom_weight=0.5, default_share=50),
        DestinationRules(name="intake", base_revenue=200, kingdom_weight=0.3, default_share=30),
        DestinationRules(name="yagle", base_revenue=150, kingdom_weight=0.2, default_share=20),
    ]


def _default_satisfaction_tiers() -> list[SatisfactionTier]:
    return [
        SatisfactionTier(min_satisfaction=90, multiplier=1.5, label="Excellent"),
        SatisfactionTier(min_satisfaction=80, multiplier=1.3, label="Very Good"),
        SatisfactionTier(min_satisfaction=75, multiplier=1.1, label="Good"),
        SatisfactionTier(min_satisfaction=70, multiplier=0.95, label="Acceptable"),
        SatisfactionTier(min_satisfaction=60, multiplier=0.8, label="Warning"),
        SatisfactionTier(min_satisfaction=50, multiplier=0.6, label="Poor"),
        SatisfactionTier(min_satisfaction=0, multiplier=0.3, label="Crisis"),
    ]


# ============================================================================
# Root rules
# ============================================================================

class GameRules(BaseModel):
    """Complete rule set driving every calculator.

    Example:
        >>> rules = GameRules()
        >>> rules.zone_for(75).name
        'good'
        >>> rules.tech("dkim").delivery_bonus
        0.08
    """
    default_reputation: float = Field(70.0, ge=0, le=100)
    zones: list[ReputationZone] = Field(default_factory=_default_zones)
    tech_upgrades: list[TechUpgrade] = Field(default_factory=_default_tech_upgrades)
    filtering_policies: list[FilteringPolicyRules] = Field(default_factory=_default_filtering_policies)
    client_profiles: list[ClientProfile] = Field(default_factory=_default_client_profiles)
    risk_tiers: list[RiskTierRules] = Field(default_factory=_default_risk_tiers)
    complaint_breakpoints: list[ComplaintBreakpoint] = Field(default_factory=_default_complaint_breakpoints)
    destination_tools: list[DestinationTool] = Field(default_factory=_default_destination_tools)
    destinations: list[DestinationRules] = Field(default_factory=_default_destinations)
    delivery: DeliveryRules = Field(default_factory=DeliveryRules)
    onboarding: OnboardingRules = Field(default_factory=OnboardingRules)
    spam_traps: SpamTrapRules = Field(default_factory=SpamTrapRules)
    satisfaction: SatisfactionRules = Field(default_factory=SatisfactionRules)
    destination_revenue: DestinationRevenueRules = Field(default_factory=DestinationRevenueRules)
    final_scoring: FinalScoringRules = Field(default_factory=FinalScoringRules)

    @field_validator("zones")
    @classmethod
    def zones_cover_zero(cls, v: list[ReputationZone]) -> list[ReputationZone]:
        """Validate zones reach down to reputation 0, highest first."""
        if not v or min(z.min_reputation for z in v) != 0:
            raise ValueError("Reputation zones must include a zone starting at 0")
        return sorted(v, key=lambda z: z.min_reputation, reverse=True)

    @field_validator("complaint_breakpoints")
    @classmethod
    def breakpoints_ascending(cls, v: list[ComplaintBreakpoint]) -> list[ComplaintBreakpoint]:
        """Keep breakpoints ordered by threshold."""
        return sorted(v, key=lambda b: b.threshold)

    @model_validator(mode="after")
    def validate_unique_ids(self) -> GameRules:
        """Validate catalog ids are unique."""
        for label, ids in (
            ("tech upgrade", [t.id for t in self.tech_upgrades]),
            ("client profile", [p.type for p in self.client_profiles]),
            ("destination tool", [t.id for t in self.destination_tools]),
            ("destination", [d.name for d in self.destinations]),
        ):
            duplicates = sorted({i for i in ids if ids.count(i) > 1})
            if duplicates:
                raise ValueError(f"Duplicate {label} ids: {duplicates}")
        return self

    @model_validator(mode="after")
    def validate_compliance_tech_known(self) -> GameRules:
        """Validate the compliance upgrade exists in the catalog."""
        if self.delivery.compliance_tech not in {t.id for t in self.tech_upgrades}:
            raise ValueError(
                f"Compliance tech '{self.delivery.compliance_tech}' is not in tech_upgrades"
            )
        return self

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def zone_for(self, reputation: float) -> ReputationZone:
        """Reputation zone for a value; values below 0 fall in the lowest zone."""
        for zone in self.zones:
            if reputation >= zone.min_reputation:
                return zone
        return self.zones[-1]

    def tech(self, tech_id: str) -> TechUpgrade:
        for upgrade in self.tech_upgrades:
            if upgrade.id == tech_id:
                return upgrade
        raise ConfigurationLookupError("tech upgrade", tech_id)

    def filtering_policy(self, level: FilteringLevel | str | None) -> FilteringPolicyRules:
        """Filtering rules for a level. None means permissive."""
        if level is None:
            level = FilteringLevel.PERMISSIVE
        try:
            level = FilteringLevel(level)
        except ValueError as e:
            raise ConfigurationLookupError("filtering level", str(level)) from e
        for policy in self.filtering_policies:
            if policy.level == level:
                return policy
        raise ConfigurationLookupError("filtering level", level.value)

    def client_profile(self, client_type: str) -> ClientProfile:
        for profile in self.client_profiles:
            if profile.type == client_type:
                return profile
        raise ConfigurationLookupError("client type", client_type)

    def risk_tier(self, risk: RiskTier | str) -> RiskTierRules:
        try:
            risk = RiskTier(risk)
        except ValueError as e:
            raise ConfigurationLookupError("risk tier", str(risk)) from e
        for tier in self.risk_tiers:
            if tier.risk == risk:
                return tier
        raise ConfigurationLookupError("risk tier", risk.value)

    def destination_tool(self, tool_id: str) -> DestinationTool:
        for tool in self.destination_tools:
            if tool.id == tool_id:
                return tool
        raise ConfigurationLookupError("destination tool", tool_id)

    def destination(self, name: str) -> DestinationRules:
        for destination in self.destinations:
            if destination.name == name:
                return destination
        raise ConfigurationLookupError("destination", name)

    @property
    def destination_names(self) -> list[str]:
        return [d.name for d in self.destinations]

    @property
    def default_distribution(self) -> dict[str, float]:
        """Default per-destination split in percent."""
        return {d.name: d.default_share for d in self.destinations}

    @property
    def kingdom_weights(self) -> dict[str, float]:
        return {d.name: d.kingdom_weight for d in self.destinations}

    def satisfaction_tier(self, satisfaction: float) -> SatisfactionTier:
        for tier in self.destination_revenue.tiers:
            if satisfaction >= tier.min_satisfaction:
                return tier
        return self.destination_revenue.tiers[-1]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GameRules:
        """Create rules from a dictionary (e.g. parsed YAML).

        Keys left out keep their default values.
        """
        return cls.model_validate(data)


@lru_cache(maxsize=1)
def default_rules() -> GameRules:
    """Shared rule set with every default value. Treat as read-only."""
    return GameRules()
