"""Cache adapters: concrete cache store implementations."""

from flycache.cache.adapters.memory import InMemoryStore
from flycache.cache.adapters.pool import LeasePool
from flycache.cache.adapters.redis import RedisStore

__all__ = ["InMemoryStore", "LeasePool", "RedisStore"]
