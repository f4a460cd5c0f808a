import logging

import pytest

from fantasy_football_tiers.clustering.rank_gap import RankGapStrategy
from fantasy_football_tiers.clustering.value_drop import ValueDropStrategy
from fantasy_football_tiers.config import TierSettings
from fantasy_football_tiers.domain.scoring_format import ScoringFormat
from fantasy_football_tiers.domain.tier import ComputeInput, PresetInput
from fantasy_football_tiers.exceptions import AllStrategiesFailedError
from fantasy_football_tiers.services.tier_orchestrator import TierOrchestrator, classify_input, default_strategies
from tests.fakes.strategies import FailingStrategy
from tests.helpers import entities_from_ranks, make_entity, member_ranks


class TestClassifyInput:
    def test_any_preset_tier_selects_preset_path(self) -> None:
        entities = [make_entity(1.0), make_entity(2.0, preset_tier=1)]
        assert isinstance(classify_input(entities, 6), PresetInput)

    def test_zero_preset_tier_is_ignored(self) -> None:
        entities = [make_entity(1.0, preset_tier=0), make_entity(2.0)]
        assert isinstance(classify_input(entities, 6), ComputeInput)

    def test_compute_input_sorted_with_positive_k(self) -> None:
        request = classify_input(entities_from_ranks([5.0, 1.0, 3.0]), 0)
        assert isinstance(request, ComputeInput)
        assert request.k == 1
        assert [e.average_rank for e in request.entities] == [1.0, 3.0, 5.0]


class TestDefaultStrategies:
    def test_priority_order(self) -> None:
        assert [s.name for s in default_strategies()] == ["gmm", "value-drop", "rank-gap"]

    def test_settings_flow_into_strategies(self) -> None:
        strategies = default_strategies(TierSettings(rank_gap_threshold=10.0))
        entities = entities_from_ranks([1.0, 5.0, 20.0])
        tiers = strategies[2].cluster(entities, 3, ScoringFormat.PPR)
        assert member_ranks(tiers) == [[1.0, 5.0], [20.0]]


class TestPresetTiers:
    def test_groups_by_preset_tier(self) -> None:
        entities = [
            make_entity(9.0, preset_tier=2),
            make_entity(1.0, preset_tier=1),
            make_entity(4.0, preset_tier=2),
            make_entity(2.0, preset_tier=1),
            make_entity(20.0, preset_tier=3),
        ]
        result = TierOrchestrator().compute_tiers(entities, 10)

        assert result.algorithm == "preset"
        assert [t.tier_index for t in result.tiers] == [1, 2, 3]
        assert member_ranks(result.tiers) == [[1.0, 2.0], [4.0, 9.0], [20.0]]
        assert all(t.strategy == "preset" for t in result.tiers)

    def test_preset_tier_numbers_kept(self) -> None:
        entities = [make_entity(1.0, preset_tier=2), make_entity(3.0, preset_tier=5)]
        result = TierOrchestrator().compute_tiers(entities, 2)
        assert [t.tier_index for t in result.tiers] == [2, 5]
        assert [t.label for t in result.tiers] == ["Excellent", "Solid"]

    def test_entities_without_preset_form_trailing_tier(self) -> None:
        entities = [make_entity(1.0, preset_tier=1), make_entity(2.0, preset_tier=2), make_entity(3.0)]
        result = TierOrchestrator().compute_tiers(entities, 6)
        assert [t.tier_index for t in result.tiers] == [1, 2, 3]
        assert member_ranks(result.tiers)[-1] == [3.0]

    def test_preset_skips_strategies(self) -> None:
        failing = FailingStrategy("gmm")
        TierOrchestrator([failing]).compute_tiers([make_entity(1.0, preset_tier=1)], 3)
        assert failing.calls == 0


class TestComputedTiers:
    def test_empty_input_returns_no_tiers(self) -> None:
        result = TierOrchestrator().compute_tiers([], 6)
        assert result.tiers == ()

    def test_gmm_serves_well_formed_input(self) -> None:
        entities = entities_from_ranks([float(r) for r in range(1, 61)])
        result = TierOrchestrator().compute_tiers(entities, 6)

        assert result.algorithm == "gmm"
        assert len(result.tiers) == 6
        assert result.tiers[0].members[0].average_rank == 1.0

    def test_partition_property(self) -> None:
        ranks = [1.0, 1.5, 2.0, 2.0, 6.0, 7.5, 8.0, 15.0, 16.0, 16.5, 30.0, 31.0, 45.0]
        entities = entities_from_ranks(ranks)
        result = TierOrchestrator().compute_tiers(entities, 4)

        members = [m for t in result.tiers for m in t.members]
        assert len(members) == len(entities)
        assert sorted(m.id for m in members) == sorted(e.id for e in entities)

    def test_ordering_property(self) -> None:
        ranks = [1.0, 2.0, 3.0, 9.0, 10.0, 11.0, 25.0, 26.0, 27.0, 50.0, 52.0]
        result = TierOrchestrator().compute_tiers(entities_from_ranks(ranks), 4)
        for left, right in zip(result.tiers, result.tiers[1:], strict=False):
            assert left.avg_rank < right.avg_rank
            assert left.max_rank <= right.min_rank

    def test_deterministic(self) -> None:
        ranks = [1.0, 2.0, 4.0, 8.0, 9.0, 13.0, 14.0, 22.0, 23.0, 40.0]
        orchestrator = TierOrchestrator()
        first = orchestrator.compute_tiers(entities_from_ranks(ranks), 4)
        second = orchestrator.compute_tiers(entities_from_ranks(ranks), 4)
        assert first == second

    def test_input_entities_not_mutated(self) -> None:
        entities = entities_from_ranks([1.0, 2.0, 10.0, 11.0])
        result = TierOrchestrator().compute_tiers(entities, 2)
        assert all(e.tier is None for e in entities)
        assert all(m.tier is not None for t in result.tiers for m in t.members)


class TestFallback:
    def test_gmm_failure_falls_back_to_value_drop(self) -> None:
        entities = entities_from_ranks([1.0, 2.0, 3.0, 10.0, 30.0])
        result = TierOrchestrator().compute_tiers(entities, 8, ScoringFormat.PPR)

        expected = ValueDropStrategy().cluster(entities, 8, ScoringFormat.PPR)
        assert result.algorithm == "value-drop"
        assert list(result.tiers) == expected
        assert len(result.fallback_reasons) == 1

    def test_gmm_and_value_drop_failure_falls_back_to_rank_gap(self) -> None:
        entities = entities_from_ranks([0.0, 1.0, 2.0])
        result = TierOrchestrator().compute_tiers(entities, 5)

        expected = RankGapStrategy().cluster(entities, 5, ScoringFormat.PPR)
        assert result.algorithm == "rank-gap"
        assert list(result.tiers) == expected

    def test_non_finite_rank_falls_through_to_rank_gap(self) -> None:
        entities = entities_from_ranks([1.0, 2.0, float("nan"), 10.0, 11.0, 12.0])
        result = TierOrchestrator().compute_tiers(entities, 2)
        assert result.algorithm == "rank-gap"
        assert [reason.split(":")[0] for reason in result.fallback_reasons] == ["gmm", "value-drop"]

    def test_injected_failures_reach_rank_gap(self) -> None:
        entities = entities_from_ranks([1.0, 2.0, 3.0, 10.0, 11.0, 12.0, 30.0])
        orchestrator = TierOrchestrator([FailingStrategy("gmm"), FailingStrategy("value-drop"), RankGapStrategy()])
        result = orchestrator.compute_tiers(entities, 3)
        assert result.algorithm == "rank-gap"
        assert member_ranks(result.tiers) == [[1.0, 2.0, 3.0], [10.0, 11.0, 12.0], [30.0]]

    def test_no_strategy_retried(self) -> None:
        gmm = FailingStrategy("gmm")
        TierOrchestrator([gmm, RankGapStrategy()]).compute_tiers(entities_from_ranks([1.0, 2.0]), 2)
        assert gmm.calls == 1

    def test_all_strategies_failing_raises(self) -> None:
        orchestrator = TierOrchestrator([FailingStrategy("gmm"), FailingStrategy("value-drop")])
        with pytest.raises(AllStrategiesFailedError) as exc_info:
            orchestrator.compute_tiers(entities_from_ranks([1.0, 2.0]), 2)
        assert [name for name, _ in exc_info.value.failures] == ["gmm", "value-drop"]

    def test_fallback_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        orchestrator = TierOrchestrator([FailingStrategy("gmm"), RankGapStrategy()])
        with caplog.at_level(logging.WARNING, logger="fantasy_football_tiers.services.tier_orchestrator"):
            orchestrator.compute_tiers(entities_from_ranks([1.0, 2.0]), 2)
        assert "gmm" in caplog.text
        assert "exploded" in caplog.text


class TestAlgorithmPreference:
    def test_named_algorithm_tried_first(self) -> None:
        entities = entities_from_ranks([float(r) for r in range(1, 21)])
        result = TierOrchestrator().compute_tiers(entities, 3, algorithm="rank-gap")
        assert result.algorithm == "rank-gap"

    def test_preferred_failure_falls_back_in_default_order(self) -> None:
        orchestrator = TierOrchestrator()
        assert [s.name for s in orchestrator.strategies_for("value-drop")] == ["value-drop", "gmm", "rank-gap"]

    def test_unknown_algorithm_rejected(self) -> None:
        with pytest.raises(ValueError):
            TierOrchestrator().compute_tiers(entities_from_ranks([1.0]), 1, algorithm="kmeans")

    def test_empty_strategy_list_rejected(self) -> None:
        with pytest.raises(ValueError):
            TierOrchestrator([])
