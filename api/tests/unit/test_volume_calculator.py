"""Tests for the Volume Calculator."""

from deliverability_simulator.calculators.modifiers import (
    list_hygiene_modifiers,
    warmup_modifier,
)
from deliverability_simulator.calculators.volume import calculate_volume, distribute_volume
from deliverability_simulator.shared.data_contracts import ClientState, ClientStatus, RiskTier


class TestDistributeVolume:
    def test_default_split(self, rules):
        shares = distribute_volume(30000, rules.default_distribution, rules.destination_names)
        assert shares == {"zmail": 15000, "intake": 9000, "yagle": 6000}

    def test_each_share_rounded_half_up(self, rules):
        shares = distribute_volume(1001, rules.default_distribution, rules.destination_names)
        assert shares == {"zmail": 501, "intake": 300, "yagle": 200}

    def test_missing_destination_gets_nothing(self):
        shares = distribute_volume(1000, {"zmail": 100}, ["zmail", "intake"])
        assert shares == {"zmail": 1000, "intake": 0}


class TestCalculateVolume:
    """calculate_volume() across client states and modifiers."""

    def test_single_client_without_modifiers(self, premium_client):
        states = {"c1": ClientState(first_active_round=1)}

        result = calculate_volume([premium_client], states, current_round=1)

        assert result.total_volume == 30000
        assert result.per_destination == {"zmail": 15000, "intake": 9000, "yagle": 6000}
        assert result.client_volumes[0].adjustments == {}
        assert result.client_volumes[0].volume_multiplier == 1.0

    def test_paused_and_stateless_clients_are_excluded(self, make_client):
        active = make_client("a")
        paused = make_client("p")
        stateless = make_client("s")
        states = {
            "a": ClientState(first_active_round=1),
            "p": ClientState(status=ClientStatus.PAUSED, first_active_round=1),
        }

        result = calculate_volume([active, paused, stateless], states, current_round=2)

        assert result.active_client_ids == ["a"]
        assert result.total_volume == 30000

    def test_warmup_halves_first_active_round_only(self, premium_client, rules):
        states = {
            "c1": ClientState(
                first_active_round=1,
                has_warmup=True,
                volume_modifiers=(warmup_modifier(rules),),
            )
        }

        first = calculate_volume([premium_client], states, current_round=1)
        second = calculate_volume([premium_client], states, current_round=2)

        assert first.total_volume == 15000
        assert first.client_volumes[0].adjustments == {"warmup": 15000}
        assert first.client_volumes[0].volume_multiplier == 0.5
        assert second.total_volume == 30000

    def test_list_hygiene_then_warmup(self, make_client, rules):
        client = make_client(volume=35000, risk=RiskTier.MEDIUM)
        volume_mod, _ = list_hygiene_modifiers(client, rules)
        states = {
            "c1": ClientState(
                first_active_round=1,
                has_warmup=True,
                has_list_hygiene=True,
                volume_modifiers=(warmup_modifier(rules), volume_mod),
            )
        }

        result = calculate_volume([client], states, current_round=1)

        assert result.total_volume == 15750
        assert result.client_volumes[0].adjustments == {
            "list_hygiene": 3500,
            "warmup": 15750,
        }

    def test_custom_distribution(self, make_client):
        client = make_client(distribution={"zmail": 100})
        states = {"c1": ClientState(first_active_round=1)}

        result = calculate_volume([client], states, current_round=1)

        assert result.per_destination == {"zmail": 30000, "intake": 0, "yagle": 0}

    def test_total_is_sum_of_adjusted_volumes(self, premium_client, aggressive_client):
        states = {
            "c1": ClientState(first_active_round=1),
            "c2": ClientState(first_active_round=1),
        }

        result = calculate_volume([premium_client, aggressive_client], states, current_round=1)

        assert result.total_volume == 110000
        assert sum(result.per_destination.values()) == 110000

    def test_no_clients(self):
        result = calculate_volume([], {}, current_round=1)
        assert result.total_volume == 0
        assert result.client_volumes == []
