"""Integration tests for the Resolution Orchestrator and game runner.

Resolves full rounds from snapshots and checks the calculators are wired
together the way the round contract describes.
"""

import pytest

from deliverability_simulator.calculators.modifiers import warmup_modifier
from deliverability_simulator.config import ScenarioConfig, default_rules
from deliverability_simulator.errors import ConfigurationLookupError
from deliverability_simulator.game import GameRunner
from deliverability_simulator.resolution import (
    ResolutionHistory,
    ResolutionLogger,
    ResolutionOrchestrator,
    VerboseConfig,
)
from deliverability_simulator.shared.data_contracts import (
    ClientState,
    Destination,
    FilteringLevel,
    PermanentReduction,
    RoundSnapshot,
)


class TestResolveRound:
    """One round, two teams, three destinations."""

    def test_every_team_and_destination_resolved(self, two_team_snapshot):
        resolution = ResolutionOrchestrator().resolve_round(two_team_snapshot)

        assert resolution.round == 1
        assert set(resolution.results.team_results) == {"SendWave", "BlastCo"}
        assert set(resolution.results.destination_results) == {"zmail", "intake", "yagle"}

    def test_team_result_is_consistent(self, two_team_snapshot):
        resolution = ResolutionOrchestrator(spam_traps_enabled=False).resolve_round(
            two_team_snapshot
        )
        result = resolution.results.team_results["SendWave"]

        assert result.volume.total_volume == 30000
        # good zone 0.85 + spf/dkim/dmarc 0.25, capped
        assert all(d.final_rate == 1.0 for d in result.delivery.values())
        assert result.aggregate_delivery_rate == pytest.approx(1.0)
        assert result.revenue.actual_revenue == 350
        assert result.spam_traps is None
        # 75 + 10 tech + 2 low risk
        assert result.new_reputation == {"zmail": 87, "intake": 87, "yagle": 87}

    def test_complaint_penalty_reaches_reputation(self, two_team_snapshot):
        resolution = ResolutionOrchestrator(spam_traps_enabled=False).resolve_round(
            two_team_snapshot
        )
        result = resolution.results.team_results["BlastCo"]

        update = result.reputation_updates["zmail"]
        assert update.complaint_penalty == -1
        assert update.total_change == pytest.approx(-4)
        assert update.new_reputation == 65

    def test_spam_trap_penalty_only_at_hit_destinations(self, make_team, premium_client):
        team = make_team(
            clients=(premium_client,),
            states={
                "c1": ClientState(
                    first_active_round=1,
                    spam_trap_modifiers=(PermanentReduction("exposure", "test", 1000.0),),
                )
            },
            reputation={"zmail": 70, "intake": 70},
        )
        snapshot = RoundSnapshot(
            room_code="ABC123",
            round=1,
            teams=(team,),
            destinations=(Destination("zmail"), Destination("intake")),
        )

        resolution = ResolutionOrchestrator().resolve_round(snapshot)

        updates = resolution.results.team_results["SendWave"].reputation_updates
        assert updates["zmail"].spam_trap_penalty == -5
        assert updates["zmail"].new_reputation == 67

    def test_filtering_policy_lowers_delivery(self, two_team_snapshot):
        zmail = Destination("zmail", filtering_policies={"BlastCo": FilteringLevel.STRICT})
        snapshot = RoundSnapshot(
            room_code="ABC123",
            round=1,
            teams=two_team_snapshot.teams,
            destinations=(zmail, Destination("intake")),
        )

        resolution = ResolutionOrchestrator(spam_traps_enabled=False).resolve_round(snapshot)

        delivery = resolution.results.team_results["BlastCo"].delivery
        assert delivery["zmail"].final_rate == pytest.approx(0.77)
        assert delivery["intake"].final_rate == pytest.approx(0.85)

    def test_destination_without_senders(self):
        snapshot = RoundSnapshot(
            room_code="ABC123", round=1, teams=(), destinations=(Destination("zmail"),)
        )

        resolution = ResolutionOrchestrator().resolve_round(snapshot)

        zmail = resolution.results.destination_results["zmail"]
        assert zmail.total_volume == 0
        assert zmail.aggregated_satisfaction == 75
        assert zmail.revenue.total_revenue == 330

    def test_history_is_appended(self, two_team_snapshot):
        history = ResolutionHistory()
        ResolutionOrchestrator().resolve_round(two_team_snapshot, history)
        assert history.last_round == 1

    def test_unknown_tech_fails_fast(self, two_team_snapshot, make_team, premium_client):
        team = make_team(clients=(premium_client,), tech_stack=("bimi",))
        snapshot = RoundSnapshot(
            room_code="ABC123", round=1, teams=(team,), destinations=two_team_snapshot.destinations
        )
        with pytest.raises(ConfigurationLookupError):
            ResolutionOrchestrator().resolve_round(snapshot)

    def test_verbose_logging_does_not_change_results(self, two_team_snapshot):
        quiet = ResolutionOrchestrator().resolve_round(two_team_snapshot)
        loud = ResolutionOrchestrator(
            verbose_logger=ResolutionLogger(VerboseConfig.all_enabled())
        ).resolve_round(two_team_snapshot)

        assert quiet.results.to_dict() == loud.results.to_dict()

    def test_warmup_round_reputation_bonus(self, make_team, premium_client):
        rules = default_rules()
        team = make_team(
            clients=(premium_client,),
            states={
                "c1": ClientState(
                    first_active_round=1,
                    has_warmup=True,
                    volume_modifiers=(warmup_modifier(rules),),
                )
            },
            reputation={"zmail": 70},
        )
        snapshot = RoundSnapshot(
            room_code="ABC123", round=1, teams=(team,), destinations=(Destination("zmail"),)
        )

        result = ResolutionOrchestrator(spam_traps_enabled=False).resolve_round(snapshot)

        team_result = result.results.team_results["SendWave"]
        assert team_result.volume.total_volume == 15000
        # 70 + 2 low risk + 2 warmup
        assert team_result.new_reputation["zmail"] == 74


@pytest.mark.slow
class TestGameRunner:
    """Several rounds from a scenario."""

    SCENARIO = {
        "room_code": "GAME01",
        "rounds": 4,
        "investigations": 1,
        "teams": [
            {
                "name": "SendWave",
                "tech_stack": ["spf", "dkim", "dmarc"],
                "clients": [
                    {"id": "c1", "type": "premium_brand"},
                    {"id": "c2", "type": "growing_startup", "onboarding": ["warmup"]},
                ],
            },
            {
                "name": "BlastCo",
                "tech_stack": ["spf"],
                "clients": [
                    {"id": "c1", "type": "aggressive_marketer"},
                    {"id": "c2", "type": "re_engagement", "onboarding": ["list_hygiene"]},
                ],
            },
        ],
        "destinations": [
            {"name": "zmail", "filtering_policies": {"BlastCo": "moderate"}},
            {"name": "intake"},
            {"name": "yagle", "owned_tools": ["spam_trap_network"]},
        ],
    }

    def _run(self, **overrides):
        rules = default_rules()
        scenario = ScenarioConfig.from_dict({**self.SCENARIO, **overrides})
        return GameRunner(rules=rules).run(scenario.to_snapshot(rules), rounds=scenario.rounds)

    def test_runs_every_round(self):
        outcome = self._run()

        assert len(outcome.history) == 4
        assert [entry.round for entry in outcome.history] == [1, 2, 3, 4]
        assert outcome.final_snapshot.round == 5

    def test_reproducible(self):
        first = self._run().to_dict(include_history=True)
        second = self._run().to_dict(include_history=True)

        for data in (first, second):
            data.pop("final_scores")
            for entry in data["history"]:
                entry.pop("timestamp")
        assert first == second

    def test_credits_equal_summed_revenue(self):
        outcome = self._run()

        for team in outcome.final_snapshot.teams:
            earned = sum(
                entry.results.team_results[team.name].revenue.actual_revenue
                for entry in outcome.history
            )
            assert team.credits == earned

    def test_final_scores_use_history(self):
        outcome = self._run()
        scores = outcome.final_scores

        assert scores is not None
        assert {r.team for r in scores.team_results} == {"SendWave", "BlastCo"}
        careful = next(r for r in scores.team_results if r.team == "SendWave")
        assert len(careful.round_history) == 4
        assert careful.round_history[-1].reputation_by_destination == dict(
            outcome.final_snapshot.teams[0].reputation
        )
        assert scores.destination_results.score_breakdown.coordination_bonus == 10.0
        assert scores.destination_results.per_destination[0].total_spam_sent > 0

    def test_reputation_stays_in_bounds(self):
        outcome = self._run()
        for team in outcome.final_snapshot.teams:
            assert all(0 <= value <= 100 for value in team.reputation.values())

    def test_zero_rounds_rejected(self):
        rules = default_rules()
        snapshot = ScenarioConfig.from_dict(self.SCENARIO).to_snapshot(rules)
        with pytest.raises(ValueError):
            GameRunner(rules=rules).run(snapshot, rounds=0)
