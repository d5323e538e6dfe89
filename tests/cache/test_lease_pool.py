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
"""Tests for LeasePool and RedisStore.connect()."""

from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import Any

import pytest
from fakeredis import FakeServer
from fakeredis.aioredis import FakeAsyncRedisConnection
from redis.asyncio import Redis
from redis.exceptions import ConnectionError as RedisConnectionError

from flycache.cache.adapters.pool import LeasePool
from flycache.cache.adapters.redis import RedisStore
from flycache.kernel.exceptions import InvalidArgumentException


class RecordingConnection(FakeAsyncRedisConnection):
    """Fake connection that records commands and disconnects."""

    commands: list[str] = []
    disconnects: int = 0

    async def send_command(self, *args: Any, **kwargs: Any) -> None:
        name = args[0].decode() if isinstance(args[0], bytes) else str(args[0])
        type(self).commands.append(name.upper())
        await super().send_command(*args, **kwargs)

    async def disconnect(self, nowait: bool = False, **kwargs: Any) -> None:
        type(self).disconnects += 1
        await super().disconnect(nowait=nowait, **kwargs)


@pytest.fixture(autouse=True)
def reset_recording() -> None:
    RecordingConnection.commands = []
    RecordingConnection.disconnects = 0


def make_store(**pool_options: Any) -> tuple[RedisStore, LeasePool]:
    options: dict[str, Any] = {"max_connections": 1, "timeout": 1.0}
    options.update(pool_options)
    pool = LeasePool(connection_class=RecordingConnection, server=FakeServer(), **options)
    return RedisStore(Redis(connection_pool=pool)), pool


class TestBorrowPing:
    @pytest.mark.asyncio
    async def test_ping_precedes_each_operation(self):
        store, _ = make_store(test_on_borrow=True)
        await store.set("k", 1)
        await store.exists("k")
        assert RecordingConnection.commands[-2:] == ["PING", "EXISTS"]
        assert RecordingConnection.commands.count("PING") == 2

    @pytest.mark.asyncio
    async def test_no_ping_when_disabled(self):
        store, _ = make_store(test_on_borrow=False)
        await store.set("k", 1)
        await store.exists("k")
        assert "PING" not in RecordingConnection.commands


class TestIdleTimeout:
    @pytest.mark.asyncio
    async def test_idle_connection_is_redialed(self):
        store, _ = make_store(idle_timeout=0.0)
        await store.set("k", 1)
        RecordingConnection.disconnects = 0
        await asyncio.sleep(0.01)

        assert await store.exists("k") is True
        assert RecordingConnection.disconnects >= 1

    @pytest.mark.asyncio
    async def test_fresh_connection_is_reused(self):
        store, _ = make_store(idle_timeout=240.0)
        await store.set("k", 1)
        RecordingConnection.disconnects = 0

        assert await store.exists("k") is True
        assert RecordingConnection.disconnects == 0

    @pytest.mark.asyncio
    async def test_no_idle_limit(self):
        store, _ = make_store(idle_timeout=None)
        await store.set("k", 1)
        RecordingConnection.disconnects = 0
        await asyncio.sleep(0.01)

        assert await store.exists("k") is True
        assert RecordingConnection.disconnects == 0


class TestPoolBound:
    @pytest.mark.asyncio
    async def test_borrow_times_out_when_exhausted(self):
        store, pool = make_store(max_connections=1, timeout=0.05)
        async with store._lease() as held:
            await held.ping()
            with pytest.raises(RedisConnectionError):
                await store.exists("k")
        assert await store.exists("k") is False
        assert not pool._in_use_connections


class TestConnect:
    def test_host_and_port(self):
        store = RedisStore.connect("cache.internal:6380", "s3cret", timedelta(minutes=5), database=2)
        pool = store._client.connection_pool
        assert isinstance(pool, LeasePool)
        assert pool.connection_kwargs["host"] == "cache.internal"
        assert pool.connection_kwargs["port"] == 6380
        assert pool.connection_kwargs["password"] == "s3cret"
        assert pool.connection_kwargs["db"] == 2
        assert store.default_ttl == timedelta(minutes=5)

    def test_default_port_and_no_password(self):
        store = RedisStore.connect("cache.internal")
        pool = store._client.connection_pool
        assert pool.connection_kwargs["port"] == 6379
        assert pool.connection_kwargs["password"] is None
        assert pool.connection_kwargs["db"] == 0

    def test_pool_options(self):
        store = RedisStore.connect(max_connections=7, pool_timeout=1.5, idle_timeout=30.0, test_on_borrow=False)
        pool = store._client.connection_pool
        assert pool.max_connections == 7
        assert pool.timeout == 1.5
        assert pool.idle_timeout == 30.0
        assert pool.test_on_borrow is False

    @pytest.mark.parametrize(
        ("endpoint", "host", "port"),
        [
            ("[::1]:6380", "::1", 6380),
            ("[fe80::1]", "fe80::1", 6379),
            ("::1", "::1", 6379),
            ("10.0.0.5:7000", "10.0.0.5", 7000),
        ],
    )
    def test_ipv6_and_ipv4_endpoints(self, endpoint: str, host: str, port: int):
        pool = RedisStore.connect(endpoint)._client.connection_pool
        assert pool.connection_kwargs["host"] == host
        assert pool.connection_kwargs["port"] == port

    @pytest.mark.parametrize("endpoint", ["[::1", "[::1]6380", "cache.internal:port"])
    def test_malformed_endpoint(self, endpoint: str):
        with pytest.raises(InvalidArgumentException):
            RedisStore.connect(endpoint)
