from collections.abc import Sequence

from fantasy_football_tiers.clustering.grouping import make_tier_group, sort_by_rank, split_at
from fantasy_football_tiers.domain.ranked_entity import RankedEntity
from fantasy_football_tiers.domain.scoring_format import ScoringFormat
from fantasy_football_tiers.domain.tier import TierGroup

DEFAULT_GAP_THRESHOLD = 3.0


def find_rank_gaps(ranks: Sequence[float], gap_threshold: float, max_tiers: int) -> list[int]:
    """Break after position ``i`` when the next rank is more than ``gap_threshold`` away.

    Stops breaking once ``max_tiers`` tiers exist; the rest merge into the last tier.
    """
    breaks: list[int] = []
    for i in range(len(ranks) - 1):
        if len(breaks) >= max_tiers - 1:
            break
        if ranks[i + 1] - ranks[i] > gap_threshold:
            breaks.append(i)
    return breaks


class RankGapStrategy:
    """Last-resort strategy: only reads ``average_rank`` and never raises."""

    name = "rank-gap"

    def __init__(self, gap_threshold: float = DEFAULT_GAP_THRESHOLD) -> None:
        self._gap_threshold = gap_threshold

    def cluster(
        self,
        entities: Sequence[RankedEntity],
        k: int,
        scoring_format: ScoringFormat,
    ) -> list[TierGroup]:
        ordered = sort_by_rank(entities)
        breaks = find_rank_gaps([e.average_rank for e in ordered], self._gap_threshold, max(k, 1))
        return [
            make_tier_group(tier_index, run, self.name)
            for tier_index, run in enumerate(split_at(ordered, breaks), start=1)
        ]
