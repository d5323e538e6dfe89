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
"""In-process cache store."""

from __future__ import annotations

import time
from collections.abc import Sequence
from datetime import timedelta
from typing import Any

from flycache.cache.arguments import check_counter, check_delta, check_mget_arity, split_pairs
from flycache.cache.types import DEFAULT, Expiry, expire_seconds
from flycache.codec.serializer import Codec
from flycache.kernel.exceptions import CacheMissException, NotStoredException


class InMemoryStore:
    """In-memory cache store with TTL support.

    Values go through the same :class:`~flycache.codec.Codec` and TTL
    translation as :class:`~flycache.cache.adapters.redis.RedisStore`, so
    both backends accept and return the same values. Expired entries are
    dropped when read and swept on every write. Suitable for
    development, testing, and single-process applications.
    """

    def __init__(self, default_ttl: Expiry = timedelta(hours=1), codec: Codec | None = None) -> None:
        self._default_ttl = default_ttl
        self.codec = codec if codec is not None else Codec()
        self._store: dict[str, tuple[bytes, float | None]] = {}

    @property
    def default_ttl(self) -> Expiry:
        return self._default_ttl

    async def start(self) -> None:
        """Nothing to connect."""

    async def stop(self) -> None:
        """Nothing to release."""

    def _load(self, key: str) -> bytes | None:
        entry = self._store.get(key)
        if entry is None:
            return None

        data, expires_at = entry
        if expires_at is not None and time.monotonic() > expires_at:
            del self._store[key]
            return None

        return data

    def _save(self, key: str, data: bytes, ttl: Expiry) -> None:
        self._purge_expired()
        seconds = expire_seconds(ttl, self._default_ttl)
        expires_at = time.monotonic() + seconds if seconds > 0 else None
        self._store[key] = (data, expires_at)

    def _purge_expired(self) -> None:
        """Drop every expired entry, including keys that are never read again."""
        now = time.monotonic()
        expired = [key for key, (_, expires_at) in self._store.items() if expires_at is not None and now > expires_at]
        for key in expired:
            del self._store[key]

    def _require(self, key: str) -> bytes:
        data = self._load(key)
        if data is None:
            raise CacheMissException(f"Key '{key}' not found", context={"key": key})
        return data

    async def set(self, key: str, value: Any, ttl: Expiry = DEFAULT) -> None:
        """Store a value, replacing any value and TTL."""
        self._save(key, self.codec.serialize(value), ttl)

    async def add(self, key: str, value: Any, ttl: Expiry = DEFAULT) -> None:
        """Store a value only if the key is absent."""
        if self._load(key) is not None:
            raise NotStoredException(f"Key '{key}' already exists", context={"key": key})
        self._save(key, self.codec.serialize(value), ttl)

    async def replace(self, key: str, value: Any, ttl: Expiry = DEFAULT) -> None:
        """Store a value only if the key is present."""
        self._require(key)
        self._save(key, self.codec.serialize(value), ttl)
        if value is None:
            raise NotStoredException(f"Replaced '{key}' with an empty value", context={"key": key})

    async def get(self, key: str, into: Any = None) -> Any:
        return self.codec.deserialize(self._require(key), into)

    async def delete(self, key: str) -> None:
        """Remove a key. Raises CacheMissException if it did not exist."""
        self._require(key)
        del self._store[key]

    async def exists(self, key: str) -> bool:
        """Check if a key exists and is not expired."""
        return self._load(key) is not None

    async def increment(self, key: str, delta: int) -> int:
        check_delta(delta)
        total = check_counter(self.codec.deserialize(self._require(key), int) + delta, key)
        _, expires_at = self._store[key]
        self._store[key] = (self.codec.serialize(total), expires_at)
        return total

    async def decrement(self, key: str, delta: int) -> int:
        """Subtract *delta*, stopping at zero."""
        check_delta(delta)
        current = self.codec.deserialize(self._require(key), int)
        total = max(current - delta, 0)
        _, expires_at = self._store[key]
        self._store[key] = (self.codec.serialize(total), expires_at)
        return total

    async def flush(self) -> None:
        """Remove all entries."""
        self._store.clear()

    async def mget(self, into: Sequence[Any], *keys: str) -> list[Any]:
        check_mget_arity(into, keys)
        raws = [self._require(key) for key in keys]
        return [self.codec.deserialize(raw, target) for raw, target in zip(raws, into)]

    async def mset_nx(self, ttl: Expiry, *pairs: Any) -> None:
        """Write every pair whose key is absent; existing keys are left alone."""
        entries = [(key, self.codec.serialize(value)) for key, value in split_pairs(pairs)]
        for key, data in entries:
            if self._load(key) is None:
                self._save(key, data, ttl)
