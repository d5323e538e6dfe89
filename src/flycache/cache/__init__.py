"""FlyCache Cache: cache store contract and its Redis and in-memory backends."""

from flycache.cache.adapters.memory import InMemoryStore
from flycache.cache.adapters.pool import LeasePool
from flycache.cache.adapters.redis import RedisStore
from flycache.cache.decorators import cache_evict, cache_put, cacheable
from flycache.cache.factory import create_store
from flycache.cache.ports.outbound import CacheStore
from flycache.cache.types import DEFAULT, FOREVER, TTL, Expiry

__all__ = [
    "DEFAULT",
    "FOREVER",
    "TTL",
    "CacheStore",
    "Expiry",
    "InMemoryStore",
    "LeasePool",
    "RedisStore",
    "cache_evict",
    "cache_put",
    "cacheable",
    "create_store",
]
