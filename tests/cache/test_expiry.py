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
"""Tests for TTL translation and shared argument checks."""

from __future__ import annotations

from datetime import timedelta

import pytest

from flycache.cache.arguments import check_counter, check_delta, check_mget_arity, split_pairs
from flycache.cache.types import DEFAULT, FOREVER, expire_seconds
from flycache.kernel.exceptions import InvalidArgumentException


class TestExpireSeconds:
    def test_default_resolves_to_store_default(self):
        assert expire_seconds(DEFAULT, timedelta(minutes=2)) == 120

    def test_forever_means_no_expiry(self):
        assert expire_seconds(FOREVER, timedelta(minutes=2)) == 0

    def test_default_that_is_forever(self):
        assert expire_seconds(DEFAULT, FOREVER) == 0

    def test_floors_to_whole_seconds(self):
        assert expire_seconds(timedelta(seconds=2, milliseconds=999), DEFAULT) == 2

    def test_sub_second_and_negative_mean_no_expiry(self):
        assert expire_seconds(timedelta(milliseconds=400), DEFAULT) == 0
        assert expire_seconds(timedelta(seconds=-5), DEFAULT) == 0

    def test_rejects_plain_numbers(self):
        with pytest.raises(InvalidArgumentException):
            expire_seconds(60, DEFAULT)  # type: ignore[arg-type]


class TestArgumentChecks:
    def test_delta_must_be_non_negative_int(self):
        assert check_delta(0) == 0
        for bad in (-1, 1.5, True, "1"):
            with pytest.raises(InvalidArgumentException):
                check_delta(bad)  # type: ignore[arg-type]

    def test_counter_range(self):
        assert check_counter(2**63 - 1, "k") == 2**63 - 1
        with pytest.raises(InvalidArgumentException):
            check_counter(2**63, "k")
        with pytest.raises(InvalidArgumentException):
            check_counter(-(2**63) - 1, "k")

    def test_mget_arity(self):
        check_mget_arity([int, str], ("a", "b"))
        with pytest.raises(InvalidArgumentException, match="Got 1, requires 2"):
            check_mget_arity([int], ("a", "b"))

    def test_split_pairs(self):
        assert split_pairs(("a", 1, "b", 2)) == [("a", 1), ("b", 2)]
        assert split_pairs(()) == []

    def test_split_pairs_odd(self):
        with pytest.raises(InvalidArgumentException):
            split_pairs(("a", 1, "b"))

    def test_split_pairs_non_string_key(self):
        with pytest.raises(InvalidArgumentException):
            split_pairs((1, "a"))
