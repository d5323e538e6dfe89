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
"""Cache subsystem configuration properties."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from pydantic import BaseModel, Field

from flycache.core.config import config_properties


@config_properties(prefix="flycache.cache")
@dataclass
class CacheProperties:
    """Configuration for the cache store (flycache.cache.*)."""

    provider: str = "auto"
    default_ttl: int = 3600

    @property
    def default_expiry(self) -> timedelta:
        return timedelta(seconds=self.default_ttl)


@config_properties(prefix="flycache.cache.redis")
class RedisProperties(BaseModel):
    """Redis endpoint and pool settings (flycache.cache.redis.*)."""

    host: str = "localhost:6379"
    password: str = ""
    database: int = Field(default=0, ge=0)
    max_connections: int = Field(default=50, ge=1)
    pool_timeout: float | None = Field(default=20.0, gt=0)
    idle_timeout: float | None = Field(default=240.0, gt=0)
    test_on_borrow: bool = True
