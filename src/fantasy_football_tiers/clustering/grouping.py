import statistics
from collections.abc import Iterable, Sequence

from fantasy_football_tiers.domain.ranked_entity import RankedEntity
from fantasy_football_tiers.domain.tier import TierGroup
from fantasy_football_tiers.domain.tier_labels import tier_color, tier_label


def sort_by_rank(entities: Iterable[RankedEntity]) -> list[RankedEntity]:
    # Stable: tied ranks keep their input order.
    return sorted(entities, key=lambda e: e.average_rank)


def make_tier_group(
    tier_index: int,
    members: Sequence[RankedEntity],
    strategy: str,
    avg_value: float | None = None,
) -> TierGroup:
    """Build a labeled TierGroup, stamping ``tier_index`` on copies of the members."""
    ordered = sort_by_rank(members)
    ranks = [m.average_rank for m in ordered]
    return TierGroup(
        tier_index=tier_index,
        members=tuple(m.with_tier(tier_index) for m in ordered),
        color=tier_color(tier_index),
        label=tier_label(tier_index),
        min_rank=min(ranks),
        max_rank=max(ranks),
        avg_rank=statistics.fmean(ranks),
        strategy=strategy,
        avg_value=avg_value,
    )


def split_at(items: Sequence[RankedEntity], boundaries: Iterable[int]) -> list[list[RankedEntity]]:
    """Slice ``items`` into contiguous runs; each boundary is the last index of a run."""
    runs: list[list[RankedEntity]] = []
    start = 0
    for boundary in sorted(boundaries):
        runs.append(list(items[start : boundary + 1]))
        start = boundary + 1
    if start < len(items):
        runs.append(list(items[start:]))
    return [run for run in runs if run]


def groups_from_labels(
    sorted_entities: Sequence[RankedEntity],
    labels: Sequence[int],
    strategy: str,
) -> list[TierGroup]:
    """Group rank-sorted entities by component label into contiguous tiers.

    Labels are forced to be non-decreasing along the rank axis so no tier
    interleaves with another, then renumbered 1..m skipping empty labels.
    """
    if len(sorted_entities) != len(labels):
        msg = f"Got {len(labels)} labels for {len(sorted_entities)} entities"
        raise ValueError(msg)

    boundaries: list[int] = []
    running = labels[0] if labels else 0
    for i in range(1, len(labels)):
        label = max(labels[i], running)
        if label != running:
            boundaries.append(i - 1)
        running = label

    runs = split_at(sorted_entities, boundaries)
    return [make_tier_group(tier_index, run, strategy) for tier_index, run in enumerate(runs, start=1)]
