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
"""Argument checks shared by the cache backends."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from flycache.kernel.exceptions import InvalidArgumentException

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def check_delta(delta: int) -> int:
    """Counter deltas are non-negative integers."""
    if isinstance(delta, bool) or not isinstance(delta, int) or delta < 0:
        raise InvalidArgumentException(
            f"Counter delta must be a non-negative integer, got {delta!r}",
            context={"delta": repr(delta)},
        )
    return delta


def check_counter(value: int, key: str) -> int:
    """Counters are signed 64-bit integers."""
    if not INT64_MIN <= value <= INT64_MAX:
        raise InvalidArgumentException(
            f"Counter '{key}' would leave the signed 64-bit range",
            context={"key": key, "value": value},
        )
    return value


def check_mget_arity(into: Sequence[Any], keys: Sequence[str]) -> None:
    if len(into) != len(keys):
        raise InvalidArgumentException(
            f"Length of value array is different from number of keys. Got {len(into)}, requires {len(keys)}",
            context={"values": len(into), "keys": len(keys)},
        )


def split_pairs(pairs: Sequence[Any]) -> list[tuple[str, Any]]:
    """Split ``k1, v1, k2, v2, ...`` into ``[(k1, v1), (k2, v2), ...]``."""
    if len(pairs) % 2 != 0:
        raise InvalidArgumentException(
            f"Got {len(pairs) // 2 + 1} keys but {len(pairs) // 2} values",
            context={"arguments": len(pairs)},
        )
    result: list[tuple[str, Any]] = []
    for index in range(0, len(pairs), 2):
        key = pairs[index]
        if not isinstance(key, str):
            raise InvalidArgumentException(
                f"Key at position {index} is not a string: {key!r}",
                context={"position": index},
            )
        result.append((key, pairs[index + 1]))
    return result
