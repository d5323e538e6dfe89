"""Cache ports: the contract backends implement."""

from flycache.cache.ports.outbound import CacheStore

__all__ = ["CacheStore"]
