"""Async tier request layer: caching, metadata and cache administration.

Computations run in a worker thread so concurrent requests do not block the
event loop. Requests that miss the cache for a key already being computed
await the in-flight computation instead of starting another one.

Usage:
    service = TierService(settings=load_tier_settings())
    service.start()  # begin periodic cache sweeps
    result = await service.get_tiers(rbs, ScoringFormat.PPR, category="RB")
    ...
    await service.aclose()
"""

from __future__ import annotations

import asyncio
import dataclasses
import functools
import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from fantasy_football_tiers.cache.keys import cache_key
from fantasy_football_tiers.cache.memory_store import InMemoryCacheStore
from fantasy_football_tiers.cache.sweeper import CacheSweeper
from fantasy_football_tiers.config import TierSettings
from fantasy_football_tiers.domain.tier import BatchSummary, BatchTierResult, TierResult, TierRunMetadata
from fantasy_football_tiers.services.tier_orchestrator import AUTO, TierOrchestrator, default_strategies

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping, Sequence

    from fantasy_football_tiers.cache.memory_store import CacheStats
    from fantasy_football_tiers.domain.ranked_entity import RankedEntity
    from fantasy_football_tiers.domain.scoring_format import ScoringFormat

logger = logging.getLogger(__name__)

ERROR_ALGORITHM = "error"
ALGORITHMS = (AUTO, "gmm", "value-drop", "rank-gap")


@dataclass(frozen=True)
class TierOptions:
    algorithm: str = AUTO
    max_tiers: int = 6
    min_players_per_tier: int = 2
    force_refresh: bool = False

    def cache_fields(self) -> dict[str, object]:
        """Options that change the computed result; ``force_refresh`` does not."""
        return {
            "algorithm": self.algorithm,
            "max_tiers": self.max_tiers,
            "min_players_per_tier": self.min_players_per_tier,
        }


def _as_flag(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


def validate_tier_options(raw: Mapping[str, object] | None = None, settings: TierSettings | None = None) -> TierOptions:
    """Normalize caller-supplied options, clamping counts to sane bounds."""
    settings = settings or TierSettings()
    raw = raw or {}

    algorithm = str(raw.get("algorithm") or AUTO)
    if algorithm not in ALGORITHMS:
        msg = f"Unknown algorithm: {algorithm!r}. Use one of {list(ALGORITHMS)}."
        raise ValueError(msg)

    max_tiers = int(str(raw.get("max_tiers") or settings.default_tiers))
    min_players = int(str(raw.get("min_players_per_tier") or settings.min_players_per_tier))
    return TierOptions(
        algorithm=algorithm,
        max_tiers=min(max(max_tiers, 1), settings.max_tiers),
        min_players_per_tier=max(min_players, 1),
        force_refresh=_as_flag(raw.get("force_refresh", False)),
    )


class TierService:
    def __init__(
        self,
        *,
        settings: TierSettings | None = None,
        cache: InMemoryCacheStore[TierResult] | None = None,
        orchestrator_factory: Callable[[TierOptions], TierOrchestrator] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._settings = settings or TierSettings()
        self._clock = clock
        if cache is None:
            cache = InMemoryCacheStore(default_ttl_seconds=self._settings.cache_ttl_seconds, clock=clock)
        self._cache: InMemoryCacheStore[TierResult] = cache
        self._orchestrator_factory = orchestrator_factory or self._default_orchestrator
        self._sweeper = CacheSweeper(self._cache, interval_seconds=self._settings.cache_sweep_interval_seconds)
        self._in_flight: dict[str, asyncio.Task[TierResult]] = {}

    @property
    def cache(self) -> InMemoryCacheStore[TierResult]:
        return self._cache

    @property
    def settings(self) -> TierSettings:
        return self._settings

    def _default_orchestrator(self, options: TierOptions) -> TierOrchestrator:
        settings = dataclasses.replace(self._settings, min_players_per_tier=options.min_players_per_tier)
        return TierOrchestrator(default_strategies(settings))

    def start(self) -> None:
        self._sweeper.start()

    async def aclose(self) -> None:
        await self._sweeper.stop()

    def key_for(
        self,
        entities: Sequence[RankedEntity],
        scoring_format: ScoringFormat,
        options: TierOptions,
        category: str | None = None,
    ) -> str:
        return cache_key(entities, scoring_format, options.cache_fields(), category=category)

    async def get_tiers(
        self,
        entities: Sequence[RankedEntity],
        scoring_format: ScoringFormat,
        options: TierOptions | None = None,
        *,
        category: str | None = None,
        data_source: str = "caller",
    ) -> TierResult:
        """Return tiers for ``entities``, from cache when a fresh entry exists.

        A forced refresh skips the cache read but still stores its result.
        """
        options = options or TierOptions(max_tiers=self._settings.default_tiers)
        key = self.key_for(entities, scoring_format, options, category)

        if not options.force_refresh:
            cached = self._cache.get(key)
            if cached is not None:
                logger.debug("Using cached tiers for %s %s", category or "entities", scoring_format.value)
                return dataclasses.replace(cached, metadata=dataclasses.replace(cached.metadata, cache_hit=True))
            pending = self._in_flight.get(key)
            if pending is not None:
                return await asyncio.shield(pending)

        task = asyncio.ensure_future(self._compute(entities, scoring_format, options, category, data_source))
        self._in_flight[key] = task
        task.add_done_callback(functools.partial(self._store_result, key))
        return await asyncio.shield(task)

    def _store_result(self, key: str, task: asyncio.Task[TierResult]) -> None:
        """Cache a finished computation even if every caller awaiting it was cancelled."""
        if self._in_flight.get(key) is task:
            del self._in_flight[key]
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.debug("Tier computation for %s failed: %s", key, error)
            return
        self._cache.set(key, task.result(), self._settings.cache_ttl_seconds)

    async def _compute(
        self,
        entities: Sequence[RankedEntity],
        scoring_format: ScoringFormat,
        options: TierOptions,
        category: str | None,
        data_source: str,
    ) -> TierResult:
        started = time.perf_counter()
        orchestrator = self._orchestrator_factory(options)
        computation = await asyncio.to_thread(
            orchestrator.compute_tiers,
            list(entities),
            options.max_tiers,
            scoring_format,
            algorithm=options.algorithm,
        )
        elapsed_ms = (time.perf_counter() - started) * 1000

        result = TierResult(
            category=category,
            scoring_format=scoring_format,
            tiers=computation.tiers,
            algorithm=computation.algorithm,
            metadata=TierRunMetadata(
                timestamp=self._timestamp(),
                data_source=data_source,
                player_count=len(entities),
                execution_time_ms=elapsed_ms,
                cache_hit=False,
            ),
        )
        logger.info(
            "Calculated %d tiers for %d %s players using %s",
            result.total_tiers,
            len(entities),
            category or "",
            result.algorithm,
        )
        return result

    async def get_all_tiers(
        self,
        entities_by_category: Mapping[str, Sequence[RankedEntity]],
        scoring_format: ScoringFormat,
        options: TierOptions | None = None,
        *,
        data_source: str = "caller",
    ) -> BatchTierResult:
        """Tier several categories concurrently; a failing category gets an error result."""
        started = time.perf_counter()
        categories = list(entities_by_category)
        outcomes = await asyncio.gather(
            *(
                self.get_tiers(
                    entities_by_category[category],
                    scoring_format,
                    options,
                    category=category,
                    data_source=data_source,
                )
                for category in categories
            ),
            return_exceptions=True,
        )

        results: dict[str, TierResult] = {}
        for category, outcome in zip(categories, outcomes, strict=True):
            if isinstance(outcome, BaseException):
                if not isinstance(outcome, Exception):
                    raise outcome
                logger.error("Failed to calculate tiers for %s: %s", category, outcome)
                results[category] = self._error_result(category, scoring_format)
            else:
                results[category] = outcome

        summary = BatchSummary(
            total_players=sum(len(r.players) for r in results.values()),
            total_tiers=sum(r.total_tiers for r in results.values()),
            successful_categories=sum(1 for r in results.values() if r.algorithm != ERROR_ALGORITHM),
            execution_time_ms=(time.perf_counter() - started) * 1000,
        )
        return BatchTierResult(results=results, summary=summary)

    def _error_result(self, category: str, scoring_format: ScoringFormat) -> TierResult:
        return TierResult(
            category=category,
            scoring_format=scoring_format,
            tiers=(),
            algorithm=ERROR_ALGORITHM,
            metadata=TierRunMetadata(
                timestamp=self._timestamp(),
                data_source=ERROR_ALGORITHM,
                player_count=0,
                execution_time_ms=0.0,
                cache_hit=False,
            ),
        )

    def _timestamp(self) -> str:
        return datetime.fromtimestamp(self._clock(), tz=UTC).isoformat()

    def clear_cache(self, key: str | None = None) -> None:
        self._cache.invalidate(key)
        if key is None:
            logger.info("All tier cache cleared")
        else:
            logger.info("Tier cache cleared for %s", key)

    def cache_stats(self) -> CacheStats:
        return self._cache.stats()

    async def warm_cache(
        self,
        entities_by_category: Mapping[str, Sequence[RankedEntity]],
        scoring_formats: Iterable[ScoringFormat],
        options: TierOptions | None = None,
    ) -> int:
        """Pre-compute tiers for every category/format pair; returns how many succeeded."""
        options = dataclasses.replace(options or TierOptions(max_tiers=self._settings.default_tiers), force_refresh=False)
        warmed = 0
        for scoring_format in scoring_formats:
            for category, entities in entities_by_category.items():
                if not entities:
                    continue
                try:
                    await self.get_tiers(entities, scoring_format, options, category=category)
                except Exception as e:
                    logger.warning("Failed to warm cache for %s %s: %s", category, scoring_format.value, e)
                    continue
                warmed += 1
        return warmed
