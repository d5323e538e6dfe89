"""FlyCache: a uniform cache store contract over Redis and in-process backends."""

from flycache.cache import DEFAULT, FOREVER, CacheStore, InMemoryStore, RedisStore, create_store
from flycache.codec import Codec
from flycache.records import RecordIntrospector

__version__ = "0.1.0"

__all__ = [
    "DEFAULT",
    "FOREVER",
    "CacheStore",
    "Codec",
    "InMemoryStore",
    "RecordIntrospector",
    "RedisStore",
    "create_store",
]
