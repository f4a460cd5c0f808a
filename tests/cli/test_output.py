import pytest

from fantasy_football_tiers.cli._output import print_error, print_tier_result
from fantasy_football_tiers.clustering.value_drop import ValueDropStrategy
from fantasy_football_tiers.domain.scoring_format import ScoringFormat
from fantasy_football_tiers.domain.tier import TierResult, TierRunMetadata
from tests.helpers import entities_from_ranks


def _result(*, cache_hit: bool = False) -> TierResult:
    tiers = ValueDropStrategy().cluster(entities_from_ranks([1.0, 2.0, 3.0, 12.0, 13.0]), 2, ScoringFormat.PPR)
    return TierResult(
        category="RB",
        scoring_format=ScoringFormat.PPR,
        tiers=tuple(tiers),
        algorithm="value-drop",
        metadata=TierRunMetadata(
            timestamp="2026-08-01T00:00:00+00:00",
            data_source="test",
            player_count=5,
            execution_time_ms=1.0,
            cache_hit=cache_hit,
        ),
    )


class TestPrintError:
    def test_print_error_writes_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        print_error("something went wrong")
        captured = capsys.readouterr()
        assert "Error:" in captured.err
        assert "something went wrong" in captured.err
        assert captured.out == ""


class TestPrintTierResult:
    def test_prints_heading_and_tiers(self, capsys: pytest.CaptureFixture[str]) -> None:
        print_tier_result(_result())
        out = capsys.readouterr().out
        assert "RB tiers (PPR)" in out
        assert "value-drop" in out
        assert "Tier 1" in out
        assert "Elite" in out
        assert "Player p12" in out
        assert "avg value" in out

    def test_cached_result_marked(self, capsys: pytest.CaptureFixture[str]) -> None:
        print_tier_result(_result(cache_hit=True))
        assert "(cached)" in capsys.readouterr().out
