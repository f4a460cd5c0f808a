from enum import Enum


class ScoringFormat(Enum):
    PPR = "PPR"
    HALF_PPR = "HALF_PPR"
    STANDARD = "STANDARD"


_ALIASES: dict[str, ScoringFormat] = {
    "ppr": ScoringFormat.PPR,
    "full": ScoringFormat.PPR,
    "half": ScoringFormat.HALF_PPR,
    "half_ppr": ScoringFormat.HALF_PPR,
    "half-ppr": ScoringFormat.HALF_PPR,
    "standard": ScoringFormat.STANDARD,
    "std": ScoringFormat.STANDARD,
}


def parse_scoring_format(raw: str | ScoringFormat) -> ScoringFormat:
    """Resolve a scoring format token, accepting the upstream feed's aliases."""
    if isinstance(raw, ScoringFormat):
        return raw
    fmt = _ALIASES.get(raw.strip().lower())
    if fmt is None:
        msg = f"Unknown scoring format: {raw!r}. Use PPR, HALF_PPR or STANDARD."
        raise ValueError(msg)
    return fmt
