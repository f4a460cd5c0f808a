import math
import statistics
from collections.abc import Sequence

from fantasy_football_tiers.clustering.grouping import make_tier_group, sort_by_rank, split_at
from fantasy_football_tiers.domain.ranked_entity import RankedEntity
from fantasy_football_tiers.domain.scoring_format import ScoringFormat
from fantasy_football_tiers.domain.tier import TierGroup
from fantasy_football_tiers.exceptions import ClusteringError

# Positional scarcity weighting; unknown categories count as 1.0.
CATEGORY_MULTIPLIERS: dict[str, float] = {
    "QB": 0.8,
    "RB": 1.2,
    "WR": 1.0,
    "TE": 1.1,
    "K": 0.5,
    "DST": 0.6,
}

FORMAT_BOOST = 1.1
MIN_CONSISTENCY_FACTOR = 0.5
# Floor on breakpoint spacing; min_players_per_tier can only widen it.
MIN_TIER_SPACING = 2


def entity_value(entity: RankedEntity, scoring_format: ScoringFormat) -> float:
    """Scalar draft value of an entity; higher is better."""
    if not math.isfinite(entity.average_rank) or entity.average_rank <= 0:
        msg = f"Average rank must be a positive number, got {entity.average_rank} for {entity.id!r}"
        raise ClusteringError(msg)

    category = entity.category.upper()
    value = 100 / math.sqrt(entity.average_rank)
    value *= CATEGORY_MULTIPLIERS.get(category, 1.0)

    if (category == "RB" and scoring_format is ScoringFormat.STANDARD) or (
        category == "WR" and scoring_format is ScoringFormat.PPR
    ):
        value *= FORMAT_BOOST

    if entity.projected_value:
        value += entity.projected_value / 100

    if entity.variability is not None:
        value *= max(1 - entity.variability / 100, MIN_CONSISTENCY_FACTOR)

    return value


def find_value_breaks(values: Sequence[float], k: int, min_players_per_tier: int = 2) -> list[int]:
    """Pick up to ``k - 1`` tier boundaries at the largest consecutive value drops.

    A boundary ``i`` means a tier ends after position ``i``. Candidates are taken
    in descending drop order; one within ``min_tier_size`` positions of an
    already-chosen boundary is skipped, so the larger of two nearby drops wins.
    """
    n = len(values)
    if n < 2 or k < 2:
        return []

    drops = [(i, values[i] - values[i + 1]) for i in range(n - 1)]
    drops.sort(key=lambda d: d[1], reverse=True)

    min_tier_size = max(MIN_TIER_SPACING, min_players_per_tier, n // (2 * k))
    selected: list[int] = []
    for index, _drop in drops:
        if len(selected) >= k - 1:
            break
        if any(abs(index - existing) < min_tier_size for existing in selected):
            continue
        selected.append(index)

    return sorted(selected)


class ValueDropStrategy:
    name = "value-drop"

    def __init__(self, min_players_per_tier: int = 2) -> None:
        self._min_players_per_tier = min_players_per_tier

    def cluster(
        self,
        entities: Sequence[RankedEntity],
        k: int,
        scoring_format: ScoringFormat,
    ) -> list[TierGroup]:
        if not entities:
            return []
        ordered = sort_by_rank(entities)
        values = [entity_value(e, scoring_format) for e in ordered]
        breaks = find_value_breaks(values, k, self._min_players_per_tier)

        tiers: list[TierGroup] = []
        start = 0
        for tier_index, run in enumerate(split_at(ordered, breaks), start=1):
            run_values = values[start : start + len(run)]
            tiers.append(make_tier_group(tier_index, run, self.name, avg_value=statistics.fmean(run_values)))
            start += len(run)
        return tiers
