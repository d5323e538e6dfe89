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
"""TTL sentinels and expiry translation shared by all backends."""

from __future__ import annotations

import enum
import math
from datetime import timedelta
from typing import TypeAlias

from flycache.kernel.exceptions import InvalidArgumentException


class TTL(enum.Enum):
    """Sentinel expiries understood by every store."""

    DEFAULT = "default"
    """Use the store's configured default TTL."""

    FOREVER = "forever"
    """Never expire."""


DEFAULT = TTL.DEFAULT
FOREVER = TTL.FOREVER

Expiry: TypeAlias = timedelta | TTL


def expire_seconds(ttl: Expiry, default: Expiry) -> int:
    """Translate *ttl* into whole seconds for an expiry directive.

    ``DEFAULT`` resolves to *default*, ``FOREVER`` to no expiry, durations
    floor to whole seconds. A result of ``0`` means "send no expiry".
    """
    if ttl is TTL.DEFAULT:
        ttl = default
    if isinstance(ttl, TTL):
        return 0
    if not isinstance(ttl, timedelta):
        raise InvalidArgumentException(
            f"TTL must be a timedelta, DEFAULT or FOREVER, got {ttl!r}",
            context={"ttl": repr(ttl)},
        )
    seconds = math.floor(ttl.total_seconds())
    return seconds if seconds > 0 else 0
