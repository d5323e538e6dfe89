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
"""Redis-backed cache store."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import WatchError

from flycache.cache.adapters.pool import LeasePool
from flycache.cache.arguments import check_counter, check_delta, check_mget_arity, split_pairs
from flycache.cache.types import DEFAULT, Expiry, expire_seconds
from flycache.codec.serializer import Codec
from flycache.kernel.exceptions import (
    CacheMissException,
    InvalidArgumentException,
    NoTTLException,
    NotStoredException,
    WriteConflictException,
)
from flycache.records.introspection import RecordIntrospector

_logger = logging.getLogger(__name__)

_PTTL_MISSING = -2
_PTTL_NO_EXPIRY = -1
_DEFAULT_PORT = "6379"


class RedisStore:
    """Cache store that delegates to a ``redis.asyncio.Redis`` client.

    Every operation leases one pooled connection, runs its commands on it in
    order, and returns the connection on every exit path. Transactional
    operations (MSetNX, HSet with a TTL, IncrementCheckSet) use a pipeline,
    which leases its own connection the same way.

    Add, Replace, Delete, Increment and Decrement probe for the key before
    writing, because Redis would otherwise create missing keys. The probe and
    the write are separate commands, so concurrent writers from other
    processes can interleave between them; use :meth:`increment_check_set`
    or :meth:`increment_atomic` when that matters.

    Values are encoded by the store's :class:`~flycache.codec.Codec`. Record
    types used with the hash operations must be registered on that codec.
    """

    def __init__(
        self,
        client: Redis,
        default_ttl: Expiry = timedelta(hours=1),
        codec: Codec | None = None,
        *,
        owns_pool: bool = False,
    ) -> None:
        self._client = client
        self._default_ttl = default_ttl
        self._owns_pool = owns_pool
        self.codec = codec if codec is not None else Codec()
        self._records = RecordIntrospector(self.codec)

    @classmethod
    def connect(
        cls,
        host: str = "localhost:6379",
        password: str = "",
        default_ttl: Expiry = timedelta(hours=1),
        *,
        database: int = 0,
        max_connections: int = 50,
        pool_timeout: float | None = 20.0,
        idle_timeout: float | None = 240.0,
        test_on_borrow: bool = True,
        codec: Codec | None = None,
    ) -> RedisStore:
        """Create a store with its own :class:`LeasePool` for ``host:port``.

        IPv6 addresses are given bracketed (``[::1]:6380``) or bare without
        a port (``::1``). AUTH is sent once per connection when *password*
        is set; SELECT is sent once per connection when *database* is not 0.
        """
        hostname, port = _split_endpoint(host)
        pool = LeasePool(
            host=hostname,
            port=port,
            password=password or None,
            db=database,
            max_connections=max_connections,
            timeout=pool_timeout,
            idle_timeout=idle_timeout,
            test_on_borrow=test_on_borrow,
        )
        _logger.debug("Created Redis pool for %s (database %d)", host, database)
        return cls(Redis(connection_pool=pool), default_ttl, codec, owns_pool=True)

    @property
    def default_ttl(self) -> Expiry:
        return self._default_ttl

    @asynccontextmanager
    async def _lease(self) -> AsyncIterator[Redis]:
        """Borrow one pooled connection for the duration of an operation."""
        conn = self._client.client()
        try:
            yield conn
        finally:
            await conn.aclose(close_connection_pool=False)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Validate connectivity by pinging Redis."""
        await self._client.ping()

    async def stop(self) -> None:
        """Close the underlying Redis client (and the pool, if the store created it)."""
        await self._client.aclose(close_connection_pool=self._owns_pool or None)

    # ------------------------------------------------------------------
    # Scalar operations
    # ------------------------------------------------------------------

    async def set(self, key: str, value: Any, ttl: Expiry = DEFAULT) -> None:
        """Serialize and store a value, replacing any value and TTL."""
        async with self._lease() as conn:
            await self._write(conn, key, value, ttl)

    async def add(self, key: str, value: Any, ttl: Expiry = DEFAULT) -> None:
        """Store a value only if the key does not exist yet."""
        async with self._lease() as conn:
            if await conn.exists(key):
                raise NotStoredException(f"Key '{key}' already exists", context={"key": key})
            await self._write(conn, key, value, ttl)

    async def replace(self, key: str, value: Any, ttl: Expiry = DEFAULT) -> None:
        """Store a value only if the key exists.

        A ``None`` value is written but still reported as not stored.
        """
        async with self._lease() as conn:
            if not await conn.exists(key):
                raise CacheMissException(f"Key '{key}' not found", context={"key": key})
            await self._write(conn, key, value, ttl)
        if value is None:
            raise NotStoredException(f"Replaced '{key}' with an empty value", context={"key": key})

    async def get(self, key: str, into: Any = None) -> Any:
        """Retrieve and deserialize a cached value."""
        async with self._lease() as conn:
            raw = await conn.get(key)
        if raw is None:
            raise CacheMissException(f"Key '{key}' not found", context={"key": key})
        return self.codec.deserialize(raw, into)

    async def mget(self, into: Sequence[Any], *keys: str) -> list[Any]:
        """Read every key in one MGET; any missing key fails the whole read."""
        check_mget_arity(into, keys)
        if not keys:
            return []
        async with self._lease() as conn:
            raws = await conn.mget(list(keys))
        values: list[Any] = []
        for key, raw, target in zip(keys, raws, into):
            if raw is None:
                raise CacheMissException(f"Key '{key}' not found", context={"key": key})
            values.append(self.codec.deserialize(raw, target))
        return values

    async def mset_nx(self, ttl: Expiry, *pairs: Any) -> None:
        """Write ``key, value`` pairs in one MULTI/EXEC, skipping keys that exist.

        Each key is written with ``SET NX`` so a pre-existing key keeps both
        its value and its TTL while the other keys are still written.
        """
        entries = [(key, self.codec.serialize(value)) for key, value in split_pairs(pairs)]
        if not entries:
            return
        ex = expire_seconds(ttl, self._default_ttl)
        async with self._client.pipeline(transaction=True) as pipe:
            for key, data in entries:
                pipe.set(key, data, nx=True, ex=ex or None)
            await pipe.execute()

    async def delete(self, key: str) -> None:
        """Remove a key, failing if it does not exist."""
        async with self._lease() as conn:
            if not await conn.exists(key):
                raise CacheMissException(f"Key '{key}' not found", context={"key": key})
            await conn.delete(key)

    async def exists(self, key: str) -> bool:
        """Check whether a key exists."""
        async with self._lease() as conn:
            return bool(await conn.exists(key))

    async def flush(self) -> None:
        """Flush every key of the selected database."""
        async with self._lease() as conn:
            await conn.flushdb()
        _logger.info("Flushed Redis cache database")

    # ------------------------------------------------------------------
    # Counters
    # ------------------------------------------------------------------

    async def increment(self, key: str, delta: int) -> int:
        """Add *delta* to an existing counter with a GET followed by a SET.

        Never creates the key. No lock is taken: concurrent increments of the
        same key can overwrite each other.
        """
        check_delta(delta)
        async with self._lease() as conn:
            raw = await conn.get(key)
            if raw is None:
                raise CacheMissException(f"Key '{key}' not found", context={"key": key})
            total = check_counter(self.codec.deserialize(raw, int) + delta, key)
            await conn.set(key, self.codec.serialize(total), keepttl=True)
        return total

    async def increment_check_set(self, key: str, delta: int) -> int:
        """Add *delta* to an existing counter under WATCH.

        The SET only commits if the key was not modified since it was read;
        otherwise :class:`WriteConflictException` is raised and nothing is
        written.
        """
        check_delta(delta)
        async with self._client.pipeline(transaction=True) as pipe:
            await pipe.watch(key)
            raw = await pipe.get(key)
            if raw is None:
                raise CacheMissException(f"Key '{key}' not found", context={"key": key})
            total = check_counter(self.codec.deserialize(raw, int) + delta, key)
            pipe.multi()
            pipe.set(key, self.codec.serialize(total), keepttl=True)
            try:
                await pipe.execute()
            except WatchError as exc:
                raise WriteConflictException(
                    f"Key '{key}' changed while incrementing", context={"key": key}
                ) from exc
        return total

    async def increment_atomic(self, key: str, delta: int) -> int:
        """Add *delta* with INCRBY.

        Atomic on the server, but a missing key is created with value 0
        before the increment.
        """
        check_delta(delta)
        async with self._lease() as conn:
            return int(await conn.incrby(key, delta))

    async def decrement(self, key: str, delta: int) -> int:
        """Subtract *delta* from an existing counter, stopping at zero."""
        check_delta(delta)
        async with self._lease() as conn:
            raw = await conn.get(key)
            if raw is None:
                raise CacheMissException(f"Key '{key}' not found", context={"key": key})
            current = self.codec.deserialize(raw, int)
            if delta > current:
                delta = current
            return int(await conn.decrby(key, delta))

    # ------------------------------------------------------------------
    # Expiry
    # ------------------------------------------------------------------

    async def expire_at(self, key: str, when: int | datetime) -> None:
        """Expire *key* at an absolute time (epoch seconds or datetime)."""
        async with self._lease() as conn:
            applied = await conn.expireat(key, when)
        if not applied:
            raise CacheMissException(f"Key '{key}' not found", context={"key": key})

    async def get_expires_in(self, key: str) -> int:
        """Return the milliseconds until *key* expires."""
        async with self._lease() as conn:
            ttl = int(await conn.pttl(key))
        if ttl == _PTTL_MISSING:
            raise CacheMissException(f"Key '{key}' not found", context={"key": key})
        if ttl == _PTTL_NO_EXPIRY:
            raise NoTTLException(f"Key '{key}' has no TTL", context={"key": key})
        return ttl

    # ------------------------------------------------------------------
    # Hashes
    # ------------------------------------------------------------------

    async def hset(self, key: str, ttl: Expiry, record: Any) -> int:
        """Store every exported field of *record* as a hash field.

        When a TTL applies, HSET and EXPIRE run in one MULTI/EXEC so the hash
        never ends up without its TTL. Returns the number of fields created;
        fields that already existed and were overwritten are not counted.
        """
        items = self._records.to_named_serialized_sequence(record)
        if not items:
            raise InvalidArgumentException(
                f"{type(record).__qualname__} has no exported fields to store",
                context={"key": key},
            )
        ex = expire_seconds(ttl, self._default_ttl)
        if ex > 0:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.hset(key, items=items)
                pipe.expire(key, ex)
                created, _ = await pipe.execute()
            return int(created)
        async with self._lease() as conn:
            return int(await conn.hset(key, items=items))

    async def hget(self, key: str, field: str, into: Any = None) -> Any:
        """Return the decoded value of one hash field."""
        async with self._lease() as conn:
            raw = await conn.hget(key, field)
        if raw is None:
            raise CacheMissException(
                f"Field '{field}' of '{key}' not found", context={"key": key, "field": field}
            )
        return self.codec.deserialize(raw, into)

    async def hgetall(self, key: str, record: Any) -> None:
        """Decode every hash field into the matching field of *record*, in place.

        Hash fields without a matching exported field on the record are
        skipped. This is looser than :meth:`hget`, which fails on a missing
        field.
        """
        self._records.describe(record)
        async with self._lease() as conn:
            raw = await conn.hgetall(key)
        if not raw:
            raise CacheMissException(f"Key '{key}' not found", context={"key": key})
        for name, data in raw.items():
            field = name.decode("utf-8") if isinstance(name, bytes) else str(name)
            if not self._records.has_field(record, field):
                _logger.debug("Skipping hash field '%s' of '%s': no matching record field", field, key)
                continue
            self._records.get_field_handle(record, field).decode(data)

    async def hexists(self, key: str, field: str) -> bool:
        async with self._lease() as conn:
            return bool(await conn.hexists(key, field))

    async def hkeys(self, key: str) -> list[str]:
        """Return all field names of the hash (empty when the key is absent)."""
        async with self._lease() as conn:
            fields = await conn.hkeys(key)
        return [f.decode("utf-8") if isinstance(f, bytes) else str(f) for f in fields]

    async def hlen(self, key: str) -> int:
        async with self._lease() as conn:
            return int(await conn.hlen(key))

    async def hincrby(self, key: str, field: str, increment: int) -> int:
        """HINCRBY: creates the hash and the field (at 0) when missing."""
        async with self._lease() as conn:
            return int(await conn.hincrby(key, field, increment))

    async def hdel(self, key: str, *fields: str) -> int:
        """Remove fields; returns how many existed and were removed."""
        if not fields:
            return 0
        async with self._lease() as conn:
            return int(await conn.hdel(key, *fields))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _write(self, conn: Redis, key: str, value: Any, ttl: Expiry) -> None:
        data = self.codec.serialize(value)
        ex = expire_seconds(ttl, self._default_ttl)
        if ex > 0:
            await conn.set(key, data, ex=ex)
        else:
            await conn.set(key, data)

    def __repr__(self) -> str:
        return f"RedisStore(client={self._client!r}, default_ttl={self._default_ttl!r})"


def _split_endpoint(endpoint: str) -> tuple[str, int]:
    """Split ``host[:port]``, ``[v6addr][:port]`` or a bare IPv6 address."""
    if endpoint.startswith("["):
        address, bracket, rest = endpoint[1:].partition("]")
        if not bracket or (rest and not rest.startswith(":")):
            raise InvalidArgumentException(f"Malformed Redis endpoint '{endpoint}'", context={"host": endpoint})
        return address, _port(rest[1:] or _DEFAULT_PORT, endpoint)
    if endpoint.count(":") > 1:
        return endpoint, int(_DEFAULT_PORT)
    hostname, _, port = endpoint.partition(":")
    return hostname, _port(port or _DEFAULT_PORT, endpoint)


def _port(value: str, endpoint: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise InvalidArgumentException(
            f"Invalid port in Redis endpoint '{endpoint}'", context={"host": endpoint}
        ) from exc
