from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Sequence

    from fantasy_football_tiers.domain.ranked_entity import RankedEntity
    from fantasy_football_tiers.domain.scoring_format import ScoringFormat
    from fantasy_football_tiers.domain.tier import TierGroup


class TierStrategy(Protocol):
    """A clustering strategy that turns rank-sorted entities into tiers.

    Implementations raise on inputs they cannot handle; the orchestrator
    catches the error and moves on to the next strategy.
    """

    @property
    def name(self) -> str: ...

    def cluster(
        self,
        entities: Sequence[RankedEntity],
        k: int,
        scoring_format: ScoringFormat,
    ) -> list[TierGroup]: ...
