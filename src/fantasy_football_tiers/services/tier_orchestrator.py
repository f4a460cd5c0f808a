from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING

from fantasy_football_tiers.clustering.gmm import GaussianMixtureStrategy
from fantasy_football_tiers.clustering.grouping import make_tier_group, sort_by_rank
from fantasy_football_tiers.clustering.rank_gap import RankGapStrategy
from fantasy_football_tiers.clustering.value_drop import ValueDropStrategy
from fantasy_football_tiers.domain.scoring_format import ScoringFormat
from fantasy_football_tiers.domain.tier import ComputeInput, PresetInput, TierComputation
from fantasy_football_tiers.exceptions import AllStrategiesFailedError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from fantasy_football_tiers.clustering.protocol import TierStrategy
    from fantasy_football_tiers.config import TierSettings
    from fantasy_football_tiers.domain.ranked_entity import RankedEntity
    from fantasy_football_tiers.domain.tier import ClusteringInput, TierGroup

logger = logging.getLogger(__name__)

AUTO = "auto"
PRESET = "preset"


def default_strategies(settings: TierSettings | None = None) -> list[TierStrategy]:
    """GMM first, then value drops, then rank gaps as the unconditional safety net."""
    if settings is None:
        return [GaussianMixtureStrategy(), ValueDropStrategy(), RankGapStrategy()]
    return [
        GaussianMixtureStrategy(max_iterations=settings.gmm_max_iterations, tolerance=settings.gmm_tolerance),
        ValueDropStrategy(min_players_per_tier=settings.min_players_per_tier),
        RankGapStrategy(gap_threshold=settings.rank_gap_threshold),
    ]


def classify_input(entities: Sequence[RankedEntity], number_of_tiers: int) -> ClusteringInput:
    ordered = tuple(sort_by_rank(entities))
    if any(e.has_preset_tier for e in ordered):
        return PresetInput(entities=ordered)
    return ComputeInput(entities=ordered, k=max(number_of_tiers, 1))


def group_preset_tiers(entities: Sequence[RankedEntity]) -> list[TierGroup]:
    """Group by upstream tier number; unassigned entities form one trailing tier."""
    by_tier: dict[int, list[RankedEntity]] = defaultdict(list)
    unassigned: list[RankedEntity] = []
    for entity in entities:
        if entity.has_preset_tier and entity.preset_tier is not None:
            by_tier[entity.preset_tier].append(entity)
        else:
            unassigned.append(entity)

    tiers = [make_tier_group(tier, members, PRESET) for tier, members in sorted(by_tier.items())]
    if unassigned:
        trailing = max(by_tier) + 1 if by_tier else 1
        tiers.append(make_tier_group(trailing, unassigned, PRESET))
    return tiers


class TierOrchestrator:
    """Single entry point for tiering: presets first, else strategies in priority order."""

    def __init__(self, strategies: Sequence[TierStrategy] | None = None) -> None:
        self._strategies = list(strategies) if strategies is not None else default_strategies()
        if not self._strategies:
            raise ValueError("TierOrchestrator needs at least one strategy")

    @property
    def strategy_names(self) -> list[str]:
        return [s.name for s in self._strategies]

    def strategies_for(self, algorithm: str = AUTO) -> list[TierStrategy]:
        """Ordered strategies for a request; a named algorithm is tried first."""
        if algorithm == AUTO:
            return list(self._strategies)
        preferred = [s for s in self._strategies if s.name == algorithm]
        if not preferred:
            msg = f"Unknown algorithm: {algorithm!r}. Use one of {[AUTO, *self.strategy_names]}."
            raise ValueError(msg)
        return preferred + [s for s in self._strategies if s.name != algorithm]

    def compute_tiers(
        self,
        entities: Sequence[RankedEntity],
        number_of_tiers: int,
        scoring_format: ScoringFormat = ScoringFormat.PPR,
        *,
        algorithm: str = AUTO,
    ) -> TierComputation:
        """Partition ``entities`` into tiers, falling back through strategies on failure.

        Args:
            entities: Entities to tier. Never mutated; output members are stamped copies.
            number_of_tiers: Target tier count. Ignored when preset tiers are present.
            scoring_format: Used by the value-drop strategy's value curve.
            algorithm: ``"auto"`` or a strategy name to try first.

        Raises:
            AllStrategiesFailedError: Only if every strategy, including the
                rank-gap safety net, raised.
        """
        if not entities:
            return TierComputation(tiers=(), algorithm=AUTO)

        request = classify_input(entities, number_of_tiers)
        if isinstance(request, PresetInput):
            logger.info("Using preset tier assignments for %d entities", len(request.entities))
            return TierComputation(tiers=tuple(group_preset_tiers(request.entities)), algorithm=PRESET)

        failures: list[tuple[str, Exception]] = []
        for strategy in self.strategies_for(algorithm):
            try:
                tiers = strategy.cluster(request.entities, request.k, scoring_format)
            except Exception as e:
                logger.warning("Tier strategy %s failed, falling back: %s", strategy.name, e)
                failures.append((strategy.name, e))
                continue
            logger.info(
                "Tier strategy %s produced %d tiers for %d entities", strategy.name, len(tiers), len(request.entities)
            )
            return TierComputation(
                tiers=tuple(tiers),
                algorithm=strategy.name,
                fallback_reasons=tuple(f"{name}: {error}" for name, error in failures),
            )

        raise AllStrategiesFailedError(failures)
