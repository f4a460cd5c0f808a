from collections.abc import Sequence

from fantasy_football_tiers.domain.ranked_entity import RankedEntity
from fantasy_football_tiers.domain.tier import TierGroup


def make_entity(
    average_rank: float,
    *,
    entity_id: str | None = None,
    category: str = "RB",
    projected_value: float | None = None,
    variability: float | None = None,
    preset_tier: int | None = None,
) -> RankedEntity:
    """Build a RankedEntity whose id and name default to its rank."""
    entity_id = entity_id or f"p{average_rank:g}"
    return RankedEntity(
        id=entity_id,
        name=f"Player {entity_id}",
        average_rank=average_rank,
        group="FA",
        category=category,
        projected_value=projected_value,
        variability=variability,
        preset_tier=preset_tier,
    )


def entities_from_ranks(ranks: Sequence[float], category: str = "RB") -> list[RankedEntity]:
    return [make_entity(rank, category=category) for rank in ranks]


def member_ranks(tiers: Sequence[TierGroup]) -> list[list[float]]:
    return [[m.average_rank for m in tier.members] for tier in tiers]
