from dataclasses import dataclass

from fantasy_football_tiers.domain.ranked_entity import RankedEntity
from fantasy_football_tiers.domain.scoring_format import ScoringFormat


@dataclass(frozen=True)
class TierGroup:
    tier_index: int  # 1 = best
    members: tuple[RankedEntity, ...]
    color: str
    label: str
    min_rank: float
    max_rank: float
    avg_rank: float
    strategy: str
    avg_value: float | None = None  # value-drop tiers only

    @property
    def size(self) -> int:
        return len(self.members)


@dataclass(frozen=True)
class PresetInput:
    """Entities whose tiers were already decided upstream."""

    entities: tuple[RankedEntity, ...]


@dataclass(frozen=True)
class ComputeInput:
    """Entities to cluster into ``k`` tiers, sorted by ascending rank."""

    entities: tuple[RankedEntity, ...]
    k: int


ClusteringInput = PresetInput | ComputeInput


@dataclass(frozen=True)
class TierComputation:
    tiers: tuple[TierGroup, ...]
    algorithm: str
    fallback_reasons: tuple[str, ...] = ()


@dataclass(frozen=True)
class TierRunMetadata:
    timestamp: str
    data_source: str
    player_count: int
    execution_time_ms: float
    cache_hit: bool = False


@dataclass(frozen=True)
class TierResult:
    category: str | None
    scoring_format: ScoringFormat
    tiers: tuple[TierGroup, ...]
    algorithm: str
    metadata: TierRunMetadata

    @property
    def players(self) -> list[RankedEntity]:
        """Every entity with its tier stamped, in tier then rank order."""
        return [member for tier in self.tiers for member in tier.members]

    @property
    def tier_breaks(self) -> list[float]:
        return [tier.max_rank for tier in self.tiers]

    @property
    def total_tiers(self) -> int:
        return len(self.tiers)


@dataclass(frozen=True)
class BatchSummary:
    total_players: int
    total_tiers: int
    successful_categories: int
    execution_time_ms: float


@dataclass(frozen=True)
class BatchTierResult:
    results: dict[str, TierResult]
    summary: BatchSummary
