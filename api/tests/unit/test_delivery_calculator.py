"""Tests for the Delivery Calculator."""

import pytest

from deliverability_simulator.calculators.delivery import (
    aggregate_delivery_rate,
    calculate_delivery,
    filtering_penalty,
)
from deliverability_simulator.errors import ConfigurationLookupError
from deliverability_simulator.shared.data_contracts import FilteringLevel


class TestReputationZones:
    @pytest.mark.parametrize(
        "reputation,zone,rate",
        [
            (95, "excellent", 0.95),
            (90, "excellent", 0.95),
            (75, "good", 0.85),
            (50, "warning", 0.70),
            (30, "poor", 0.50),
            (10, "blacklist", 0.05),
        ],
    )
    def test_base_rate_by_zone(self, reputation, zone, rate):
        result = calculate_delivery(reputation, [], current_round=1)
        assert result.zone == zone
        assert result.base_rate == rate
        assert result.final_rate == pytest.approx(rate)


class TestCalculateDelivery:
    """calculate_delivery() with tech, filtering and compliance."""

    def test_authentication_bonus_stacks(self):
        result = calculate_delivery(75, ["spf", "dkim"], current_round=1)

        assert result.auth_bonus == pytest.approx(0.13)
        assert result.final_rate == pytest.approx(0.98)
        assert result.compliance_penalty is None
        assert result.breakdown[0].label == "Base (good zone)"
        assert result.breakdown[-1].label == "Final Rate"

    def test_missing_dmarc_from_round_three(self):
        result = calculate_delivery(75, ["spf", "dkim"], current_round=3)

        assert result.final_rate == pytest.approx(0.196)
        assert result.compliance_penalty == pytest.approx(0.8)
        assert "DMARC Missing Penalty" in [item.label for item in result.breakdown]

    def test_dmarc_avoids_penalty_and_rate_is_capped(self):
        result = calculate_delivery(75, ["spf", "dkim", "dmarc"], current_round=3)

        assert result.compliance_penalty is None
        assert result.final_rate == 1.0

    def test_filtering_penalty(self):
        result = calculate_delivery(75, [], current_round=1, filtering_level="moderate")

        assert result.filtering_penalty == pytest.approx(0.03)
        assert result.final_rate == pytest.approx(0.82)
        penalty = next(i for i in result.breakdown if i.label == "Filtering Penalty")
        assert penalty.value == -3

    def test_permissive_and_missing_level_cost_nothing(self, rules):
        assert filtering_penalty(None, rules) == 0.0
        assert filtering_penalty(FilteringLevel.PERMISSIVE, rules) == 0.0
        assert filtering_penalty("maximum", rules) == pytest.approx(0.15)

    def test_rate_never_negative(self):
        result = calculate_delivery(0, [], current_round=4, filtering_level="maximum")
        assert result.final_rate == 0.0

    def test_unknown_tech_raises(self):
        with pytest.raises(ConfigurationLookupError) as exc_info:
            calculate_delivery(75, ["bimi"], current_round=1)
        assert str(exc_info.value) == "Unknown tech upgrade: bimi"

    def test_unknown_filtering_level_raises(self):
        with pytest.raises(KeyError):
            calculate_delivery(75, [], current_round=1, filtering_level="extreme")


class TestAggregateDeliveryRate:
    def test_volume_weighted(self):
        rate = aggregate_delivery_rate(
            {"zmail": 1.0, "intake": 0.5},
            {"zmail": 300, "intake": 100},
        )
        assert rate == pytest.approx(0.875)

    def test_zero_volume(self):
        assert aggregate_delivery_rate({"zmail": 0.9}, {"zmail": 0}) == 0.0
