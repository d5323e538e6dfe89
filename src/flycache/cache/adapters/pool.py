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
"""Bounded Redis connection pool with idle expiry and borrow-time liveness checks."""

from __future__ import annotations

import logging
import time
from typing import Any

from redis.asyncio import BlockingConnectionPool
from redis.asyncio.connection import AbstractConnection

_logger = logging.getLogger(__name__)


class LeasePool(BlockingConnectionPool):
    """``BlockingConnectionPool`` that vets every connection it hands out.

    - At most ``max_connections`` connections are in flight; further borrowers
      wait up to ``timeout`` seconds.
    - A connection left idle for longer than ``idle_timeout`` seconds is
      disconnected and dialed again (AUTH and SELECT are replayed by the
      connection on reconnect).
    - With ``test_on_borrow`` every borrowed connection answers a PING first.
      A failing PING propagates the transport error and the connection goes
      back to the pool.
    """

    def __init__(
        self,
        *,
        idle_timeout: float | None = 240.0,
        test_on_borrow: bool = True,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.idle_timeout = idle_timeout
        self.test_on_borrow = test_on_borrow
        self._released_at: dict[AbstractConnection, float] = {}

    async def ensure_connection(self, connection: AbstractConnection) -> None:
        released_at = self._released_at.pop(connection, None)
        if (
            released_at is not None
            and self.idle_timeout is not None
            and time.monotonic() - released_at > self.idle_timeout
        ):
            _logger.debug("Discarding connection idle for more than %ss", self.idle_timeout)
            await connection.disconnect()

        await super().ensure_connection(connection)

        if self.test_on_borrow:
            await connection.send_command("PING")
            await connection.read_response()

    async def release(self, connection: AbstractConnection) -> None:
        self._released_at[connection] = time.monotonic()
        await super().release(connection)

    async def disconnect(self, inuse_connections: bool = True) -> None:
        await super().disconnect(inuse_connections)
        self._released_at.clear()

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__}(max_connections={self.max_connections}, "
            f"idle_timeout={self.idle_timeout}, test_on_borrow={self.test_on_borrow})>"
        )
