from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from config import ConfigurationSet, config_from_dict, config_from_env, config_from_yaml

from fantasy_football_tiers.domain.scoring_format import ScoringFormat, parse_scoring_format
from fantasy_football_tiers.exceptions import ConfigError


class AppConfig(Protocol):
    def __getitem__(self, key: str) -> object: ...


_DEFAULTS: dict[str, object] = {
    "tiers": {
        "default_count": 6,
        "max_count": 20,
        "min_players_per_tier": 2,
        "default_scoring_format": "PPR",
    },
    "gmm": {
        "max_iterations": 100,
        "tolerance": 1e-6,
    },
    "rank_gap": {
        "threshold": 3,
    },
    "cache": {
        "ttl_seconds": 600,
        "sweep_interval_seconds": 300,
    },
}


@dataclass(frozen=True)
class TierSettings:
    default_tiers: int = 6
    max_tiers: int = 20
    min_players_per_tier: int = 2
    default_scoring_format: ScoringFormat = ScoringFormat.PPR
    gmm_max_iterations: int = 100
    gmm_tolerance: float = 1e-6
    rank_gap_threshold: float = 3.0
    cache_ttl_seconds: float = 600.0
    cache_sweep_interval_seconds: float = 300.0


def create_config(
    yaml_path: str = "tiers.yaml",
    env_prefix: str = "FFTIERS",
    defaults: dict[str, object] | None = None,
    *,
    overrides: dict[str, object] | None = None,
) -> ConfigurationSet:
    """Create a layered configuration.

    Priority (highest to lowest): explicit overrides > env vars > YAML file > defaults dict.

    Args:
        yaml_path: Path to the YAML config file. A missing file is ignored.
        env_prefix: Prefix for environment variables, e.g. ``FFTIERS__CACHE__TTL_SECONDS``.
        defaults: Default configuration values.
        overrides: Nested dict applied above every other layer.
    """
    if defaults is None:
        defaults = _DEFAULTS

    layers = [
        config_from_env(env_prefix, separator="__", lowercase_keys=True),
        config_from_yaml(yaml_path, read_from_file=True, ignore_missing_paths=True),
        config_from_dict(defaults),
    ]
    if overrides:
        layers.insert(0, config_from_dict(overrides))

    return ConfigurationSet(*layers)


def _as_int(cfg: AppConfig, key: str) -> int:
    try:
        return int(str(cfg[key]))
    except ValueError as e:
        raise ConfigError(f"{key} must be an integer, got {cfg[key]!r}") from e


def _as_float(cfg: AppConfig, key: str) -> float:
    try:
        return float(str(cfg[key]))
    except ValueError as e:
        raise ConfigError(f"{key} must be a number, got {cfg[key]!r}") from e


def load_tier_settings(cfg: AppConfig | None = None) -> TierSettings:
    if cfg is None:
        cfg = create_config()

    try:
        scoring_format = parse_scoring_format(str(cfg["tiers.default_scoring_format"]))
    except ValueError as e:
        raise ConfigError(str(e)) from e

    settings = TierSettings(
        default_tiers=_as_int(cfg, "tiers.default_count"),
        max_tiers=_as_int(cfg, "tiers.max_count"),
        min_players_per_tier=_as_int(cfg, "tiers.min_players_per_tier"),
        default_scoring_format=scoring_format,
        gmm_max_iterations=_as_int(cfg, "gmm.max_iterations"),
        gmm_tolerance=_as_float(cfg, "gmm.tolerance"),
        rank_gap_threshold=_as_float(cfg, "rank_gap.threshold"),
        cache_ttl_seconds=_as_float(cfg, "cache.ttl_seconds"),
        cache_sweep_interval_seconds=_as_float(cfg, "cache.sweep_interval_seconds"),
    )

    if settings.max_tiers < 1 or settings.default_tiers < 1:
        raise ConfigError("tier counts must be at least 1")
    if settings.cache_ttl_seconds <= 0 or settings.cache_sweep_interval_seconds <= 0:
        raise ConfigError("cache durations must be positive")
    return settings
