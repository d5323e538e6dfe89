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
"""Cache store protocol."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from flycache.cache.types import DEFAULT, Expiry


@runtime_checkable
class CacheStore(Protocol):
    """The operation set every cache backend implements.

    Failures are signalled with exceptions rather than return values:

    - ``CacheMissException`` when a required key is absent,
    - ``NotStoredException`` when a write is rejected by its existence check,
    - ``InvalidArgumentException`` for malformed arguments,
    - ``DeserializationException`` when a value does not match ``into``.
    """

    async def set(self, key: str, value: Any, ttl: Expiry = DEFAULT) -> None:
        """Store *value* unconditionally, replacing any value and TTL."""
        ...

    async def add(self, key: str, value: Any, ttl: Expiry = DEFAULT) -> None:
        """Store *value* only if *key* is absent."""
        ...

    async def replace(self, key: str, value: Any, ttl: Expiry = DEFAULT) -> None:
        """Store *value* only if *key* is present."""
        ...

    async def get(self, key: str, into: Any = None) -> Any:
        """Return the decoded value stored at *key*."""
        ...

    async def delete(self, key: str) -> None:
        """Remove *key*."""
        ...

    async def exists(self, key: str) -> bool: ...

    async def increment(self, key: str, delta: int) -> int:
        """Add *delta* to an existing counter and return the new value."""
        ...

    async def decrement(self, key: str, delta: int) -> int:
        """Subtract *delta* from an existing counter, never going below zero."""
        ...

    async def flush(self) -> None:
        """Remove every key the backend manages."""
        ...

    async def mget(self, into: Sequence[Any], *keys: str) -> list[Any]:
        """Read all *keys* at once; any missing key fails the whole call."""
        ...

    async def mset_nx(self, ttl: Expiry, *pairs: Any) -> None:
        """Write ``key1, value1, key2, value2, ...``, skipping existing keys."""
        ...
