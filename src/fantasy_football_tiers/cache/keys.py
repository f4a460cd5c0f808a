"""Deterministic cache keys for tier requests.

A key serializes the entity-set identity, the scoring format and the
algorithm options as sorted-key JSON, so equal requests always map to the
same entry regardless of input order or dict ordering.
"""

from __future__ import annotations

import hashlib
import json
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from fantasy_football_tiers.domain.ranked_entity import RankedEntity
    from fantasy_football_tiers.domain.scoring_format import ScoringFormat


def entity_set_digest(entities: Sequence[RankedEntity]) -> str:
    """Hash every field a strategy can read, independent of input order."""
    rows = sorted(
        json.dumps([e.id, e.average_rank, e.category, e.projected_value, e.variability, e.preset_tier])
        for e in entities
    )
    return hashlib.sha256("\n".join(rows).encode()).hexdigest()[:16]


def cache_key(
    entities: Sequence[RankedEntity],
    scoring_format: ScoringFormat,
    options: Mapping[str, object],
    *,
    category: str | None = None,
) -> str:
    identity = {"category": category, "entities": entity_set_digest(entities), "count": len(entities)}
    return json.dumps(
        {"entity_set": identity, "format": scoring_format.value, "options": dict(options)},
        sort_keys=True,
        separators=(",", ":"),
    )
