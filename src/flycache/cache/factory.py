# Copyright 2026 Firefly Software Solutions Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Build the configured cache store (flycache.cache.*)."""

from __future__ import annotations

import importlib

import structlog

from flycache.cache.adapters.memory import InMemoryStore
from flycache.cache.adapters.redis import RedisStore
from flycache.cache.ports.outbound import CacheStore
from flycache.codec.serializer import Codec
from flycache.config.properties.cache import CacheProperties, RedisProperties
from flycache.core.config import Config
from flycache.kernel.exceptions import ConfigurationException

logger = structlog.get_logger("flycache.cache.factory")

PROVIDERS = ("redis", "memory")


def is_available(module_name: str) -> bool:
    """Check if a Python package is importable."""
    try:
        importlib.import_module(module_name)
        return True
    except ImportError:
        return False


def detect_provider() -> str:
    """Detect the best available cache provider."""
    if is_available("redis.asyncio"):
        return "redis"
    return "memory"


def create_store(config: Config, codec: Codec | None = None) -> CacheStore:
    """Create the cache store described by *config*.

    flycache.cache.provider selects redis or memory; auto
    picks redis when its client library is importable.
    """
    props = config.bind(CacheProperties)
    provider = props.provider.lower()
    if provider == "auto":
        provider = detect_provider()
    if provider not in PROVIDERS:
        raise ConfigurationException(
            f"Unknown cache provider '{props.provider}'",
            context={"provider": props.provider, "supported": list(PROVIDERS)},
        )

    if provider == "memory":
        logger.info("cache_store_created", provider=provider, default_ttl=props.default_ttl)
        return InMemoryStore(props.default_expiry, codec)

    redis = config.bind(RedisProperties)
    store = RedisStore.connect(
        redis.host,
        redis.password,
        props.default_expiry,
        database=redis.database,
        max_connections=redis.max_connections,
        pool_timeout=redis.pool_timeout,
        idle_timeout=redis.idle_timeout,
        test_on_borrow=redis.test_on_borrow,
        codec=codec,
    )
    logger.info(
        "cache_store_created",
        provider=provider,
        host=redis.host,
        database=redis.database,
        default_ttl=props.default_ttl,
    )
    return store
