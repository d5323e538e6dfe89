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
"""Tests for the flycache exception hierarchy."""

import pytest

from flycache.kernel.exceptions import (
    CacheException,
    CacheMissException,
    CodecException,
    ConfigurationException,
    DeserializationException,
    FieldAccessException,
    FieldTypeMismatchException,
    FlyCacheException,
    InvalidArgumentException,
    NoTTLException,
    NotARecordException,
    NotStoredException,
    RecordException,
    SerializationException,
    TypeRegistrationException,
    UnregisteredTypeException,
    ValidationException,
    WriteConflictException,
)


class TestFlyCacheException:
    def test_basic_creation(self):
        exc = FlyCacheException("something went wrong")
        assert str(exc) == "something went wrong"
        assert exc.code is None
        assert exc.context == {}

    def test_with_context(self):
        exc = CacheMissException("not found", context={"key": "user:1"})
        assert exc.context["key"] == "user:1"

    def test_context_defaults_to_empty_dict(self):
        exc = FlyCacheException("test")
        exc.context["key"] = "value"
        assert FlyCacheException("test2").context == {}

    def test_explicit_code_wins(self):
        assert CacheMissException("miss", code="CUSTOM").code == "CUSTOM"


class TestDefaultCodes:
    @pytest.mark.parametrize(
        ("exc_type", "code"),
        [
            (CacheMissException, "CACHE_MISS"),
            (NotStoredException, "NOT_STORED"),
            (NoTTLException, "NO_TTL"),
            (WriteConflictException, "WRITE_CONFLICT"),
            (InvalidArgumentException, "INVALID_ARGUMENT"),
            (ConfigurationException, "CONFIGURATION"),
        ],
    )
    def test_default_code(self, exc_type, code):
        assert exc_type("x").code == code


class TestExceptionHierarchy:
    @pytest.mark.parametrize(
        ("child", "parent"),
        [
            (CacheMissException, CacheException),
            (NotStoredException, CacheException),
            (NoTTLException, CacheException),
            (WriteConflictException, CacheException),
            (InvalidArgumentException, ValidationException),
            (SerializationException, CodecException),
            (DeserializationException, CodecException),
            (UnregisteredTypeException, CodecException),
            (TypeRegistrationException, CodecException),
            (NotARecordException, RecordException),
            (FieldAccessException, RecordException),
            (FieldTypeMismatchException, RecordException),
            (CacheException, FlyCacheException),
            (ValidationException, FlyCacheException),
            (CodecException, FlyCacheException),
            (RecordException, FlyCacheException),
            (ConfigurationException, FlyCacheException),
        ],
    )
    def test_subclass(self, child, parent):
        assert issubclass(child, parent)

    def test_catch_all_cache_errors(self):
        with pytest.raises(FlyCacheException):
            raise NotStoredException("exists")
