"""Tests for seeded rolls and the Spam Trap Calculator."""

import pytest

from deliverability_simulator.calculators.modifiers import incident_modifier
from deliverability_simulator.calculators.spam_traps import (
    calculate_spam_traps,
    trap_network_multiplier,
)
from deliverability_simulator.calculators.volume import calculate_volume
from deliverability_simulator.errors import ConfigurationLookupError
from deliverability_simulator.sampling import SeedManager
from deliverability_simulator.shared.data_contracts import (
    ClientState,
    ClientStatus,
    Destination,
    PermanentReduction,
)

CERTAIN_HIT = PermanentReduction("exposure", "test", 1000.0)
NEVER_HIT = PermanentReduction("sealed", "test", 0.0)


def _traps(clients, states, destinations, room_code="ABC123", current_round=1):
    volume = calculate_volume(clients, states, current_round)
    return calculate_spam_traps(
        room_code, "SendWave", clients, states, volume, destinations, current_round
    )


class TestSeedManager:
    """SHA-256 derived rolls."""

    def test_seed_string(self):
        manager = SeedManager("ABC123")
        assert manager.seed_string(1, "SendWave", "c1") == "ABC123-1-SendWave-c1"

    def test_known_rolls(self):
        manager = SeedManager("ABC123")
        assert manager.client_roll(1, "SendWave", "c1") == 0.6532
        assert manager.destination_roll(1, "SendWave", "c1", "zmail") == 0.5152

    def test_deterministic_and_in_range(self):
        first = SeedManager("ROOM42")
        second = SeedManager("ROOM42")
        for round_number in range(1, 5):
            roll = first.client_roll(round_number, "T", "c")
            assert roll == second.client_roll(round_number, "T", "c")
            assert 0.0 <= roll < 1.0

    def test_room_code_changes_rolls(self):
        rolls_a = [SeedManager("AAA").derive_roll(r, "T", "c") for r in range(20)]
        rolls_b = [SeedManager("BBB").derive_roll(r, "T", "c") for r in range(20)]
        assert rolls_a != rolls_b

    @pytest.mark.parametrize(
        "room_code,round_number,team,client,destination,expected",
        [
            ("XYZ789", 1, "SendWave", "c1", "zmail", 0.8812),
            ("ABC123", 2, "SendWave", "c1", "zmail", 0.5543),
            ("ABC123", 1, "BlastCo", "c1", "zmail", 0.6752),
            ("ABC123", 1, "SendWave", "c2", "zmail", 0.358),
            ("ABC123", 1, "SendWave", "c1", "intake", 0.981),
        ],
        ids=["room_code", "round", "team", "client", "destination"],
    )
    def test_each_component_changes_the_roll(
        self, room_code, round_number, team, client, destination, expected
    ):
        baseline = SeedManager("ABC123").destination_roll(1, "SendWave", "c1", "zmail")

        roll = SeedManager(room_code).destination_roll(round_number, team, client, destination)

        assert roll == expected
        assert roll != baseline


class TestTrapNetworkMultiplier:
    def test_without_tools(self, rules):
        assert trap_network_multiplier(Destination("zmail"), rules) == 1.0

    def test_spam_trap_network(self, rules):
        dest = Destination("zmail", owned_tools=("ml_system", "spam_trap_network"))
        assert trap_network_multiplier(dest, rules) == 3.0

    def test_unknown_tool_raises(self, rules):
        with pytest.raises(ConfigurationLookupError):
            trap_network_multiplier(Destination("zmail", owned_tools=("honeypot",)), rules)


class TestCalculateSpamTraps:
    """calculate_spam_traps() outcomes and penalties."""

    def test_identical_inputs_identical_results(self, premium_client, aggressive_client, destinations):
        states = {
            "c1": ClientState(first_active_round=1),
            "c2": ClientState(first_active_round=1),
        }
        clients = [premium_client, aggressive_client]

        first = _traps(clients, states, destinations)
        second = _traps(clients, states, destinations)

        assert first.to_dict() == second.to_dict()

    def test_certain_hit_costs_one_penalty(self, premium_client, destinations):
        states = {"c1": ClientState(first_active_round=1, spam_trap_modifiers=(CERTAIN_HIT,))}

        result = _traps([premium_client], states, destinations)

        assert result.trap_hit
        assert result.hit_client_ids == ["c1"]
        assert result.hit_destinations == ["zmail", "intake", "yagle"]
        assert result.reputation_penalty == -5
        assert not result.capped_at_max

    def test_penalty_capped(self, make_client, destinations):
        clients = [make_client("a"), make_client("b")]
        states = {
            c.id: ClientState(first_active_round=1, spam_trap_modifiers=(CERTAIN_HIT,))
            for c in clients
        }

        result = _traps(clients, states, destinations)

        assert result.hit_client_ids == ["a", "b"]
        assert result.reputation_penalty == -5
        assert result.capped_at_max

    def test_zero_risk_never_hits(self, premium_client, destinations):
        states = {"c1": ClientState(first_active_round=1, spam_trap_modifiers=(NEVER_HIT,))}

        result = _traps([premium_client], states, destinations)

        assert not result.trap_hit
        assert result.hit_destinations == []
        assert result.reputation_penalty == 0

    def test_round_scoped_trap_modifier(self, premium_client, destinations):
        exposure = incident_modifier("trap_exposure", 3.0, [2])
        states = {"c1": ClientState(first_active_round=1, spam_trap_modifiers=(exposure,))}

        round_one = _traps([premium_client], states, destinations, current_round=1)
        round_two = _traps([premium_client], states, destinations, current_round=2)

        assert round_one.per_client[0].adjusted_risk == pytest.approx(0.005)
        assert round_two.per_client[0].adjusted_risk == pytest.approx(0.015)

    def test_network_amplifies_destination_risk(self, premium_client):
        destinations = (
            Destination("zmail", owned_tools=("spam_trap_network",)),
            Destination("intake"),
        )
        states = {"c1": ClientState(first_active_round=1)}

        result = _traps([premium_client], states, destinations)

        risk = result.per_client[0].destination_risk
        assert risk["zmail"] == pytest.approx(0.015)
        assert risk["intake"] == pytest.approx(0.005)

    def test_paused_clients_are_not_rolled(self, premium_client, destinations):
        states = {
            "c1": ClientState(
                status=ClientStatus.PAUSED,
                first_active_round=1,
                spam_trap_modifiers=(CERTAIN_HIT,),
            )
        }

        result = _traps([premium_client], states, destinations)

        assert result.per_client == []
        assert not result.trap_hit

    def test_unknown_client_type_raises(self, make_client, destinations):
        client = make_client(client_type="crypto_promoter")
        with pytest.raises(ConfigurationLookupError):
            _traps([client], {"c1": ClientState(first_active_round=1)}, destinations)
