from fantasy_football_tiers.cache.keys import cache_key, entity_set_digest
from fantasy_football_tiers.cache.memory_store import CacheEntry, CacheStats, InMemoryCacheStore
from fantasy_football_tiers.cache.protocol import TierCacheStore
from fantasy_football_tiers.cache.sweeper import CacheSweeper

__all__ = [
    "CacheEntry",
    "CacheStats",
    "CacheSweeper",
    "InMemoryCacheStore",
    "TierCacheStore",
    "cache_key",
    "entity_set_digest",
]
