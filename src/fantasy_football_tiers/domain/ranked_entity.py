import dataclasses
import math
from collections.abc import Mapping
from dataclasses import dataclass

from fantasy_football_tiers.exceptions import EntityRecordError


@dataclass(frozen=True)
class RankedEntity:
    id: str
    name: str
    average_rank: float
    group: str = ""  # team
    category: str = ""  # position
    projected_value: float | None = None
    variability: float | None = None  # std dev across expert ranks
    preset_tier: int | None = None
    tier: int | None = None  # stamped on output copies only

    @property
    def has_preset_tier(self) -> bool:
        return self.preset_tier is not None and self.preset_tier > 0

    def with_tier(self, tier: int) -> "RankedEntity":
        return dataclasses.replace(self, tier=tier)


# Upstream feed key -> RankedEntity field. Snake-case field names are accepted as-is.
_RECORD_KEYS: dict[str, str] = {
    "averageRank": "average_rank",
    "team": "group",
    "position": "category",
    "projectedPoints": "projected_value",
    "projectedValue": "projected_value",
    "standardDeviation": "variability",
    "presetTier": "preset_tier",
    "tier": "preset_tier",
}


def _optional_float(value: object) -> float | None:
    if value is None or value == "":
        return None
    return float(str(value))


def entity_from_record(record: Mapping[str, object], index: int = 0) -> RankedEntity:
    """Build a RankedEntity from a ranking-feed record.

    Numeric fields may arrive as strings (the upstream feeds send ``"12.5"``).
    A ``tier`` key on an input record is treated as a preset tier.
    """
    fields: dict[str, object] = {}
    for key, value in record.items():
        fields[_RECORD_KEYS.get(key, key)] = value

    if "id" not in fields or "average_rank" not in fields:
        raise EntityRecordError(index, "records need 'id' and 'averageRank'")

    try:
        average_rank = float(str(fields["average_rank"]))
        projected_value = _optional_float(fields.get("projected_value"))
        variability = _optional_float(fields.get("variability"))
        raw_tier = fields.get("preset_tier")
        preset_tier = int(str(raw_tier)) if raw_tier not in (None, "", 0) else None
    except ValueError as e:
        raise EntityRecordError(index, str(e)) from e

    if not math.isfinite(average_rank) or average_rank <= 0:
        raise EntityRecordError(index, f"averageRank must be a positive number, got {fields['average_rank']!r}")

    return RankedEntity(
        id=str(fields["id"]),
        name=str(fields.get("name", fields["id"])),
        average_rank=average_rank,
        group=str(fields.get("group") or ""),
        category=str(fields.get("category") or ""),
        projected_value=projected_value,
        variability=variability,
        preset_tier=preset_tier,
    )
