import json
from pathlib import Path

from fantasy_football_tiers.domain.ranked_entity import RankedEntity, entity_from_record
from fantasy_football_tiers.exceptions import EntityRecordError


def load_entities(path: Path) -> list[RankedEntity]:
    """Read a JSON array of ranking-feed records (or ``{"players": [...]}``)."""
    data = json.loads(path.read_text())
    if isinstance(data, dict):
        data = data.get("players", [])
    if not isinstance(data, list):
        raise EntityRecordError(0, "expected a JSON array of player records")

    entities: list[RankedEntity] = []
    for index, record in enumerate(data):
        if not isinstance(record, dict):
            raise EntityRecordError(index, "record is not an object")
        entities.append(entity_from_record(record, index))
    return entities
