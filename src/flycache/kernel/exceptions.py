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
"""Unified exception hierarchy for flycache.

All library exceptions inherit from FlyCacheException, so callers can catch
one type for every cache failure or pick a specific subclass.

Categories:
- CacheException: outcomes of the cache contract (miss, not stored, no TTL)
- ValidationException: malformed arguments
- CodecException: serialization and type registration failures
- RecordException: record field access failures
- ConfigurationException: invalid configuration

Transport errors raised by the Redis client are never wrapped.
"""

from __future__ import annotations


# =============================================================================
# Base Exception
# =============================================================================


class FlyCacheException(Exception):
    """Base exception for all flycache errors.

    Args:
        message: Human-readable error description.
        code: Machine-readable error code (e.g. "CACHE_MISS").
        context: Arbitrary key-value pairs for error context and debugging.
    """

    default_code: str | None = None

    def __init__(
        self,
        message: str,
        code: str | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code if code is not None else self.default_code
        self.context: dict = context if context is not None else {}


# =============================================================================
# Cache Contract Exceptions
# =============================================================================


class CacheException(FlyCacheException):
    """A cache operation could not be satisfied by the stored state."""


class CacheMissException(CacheException):
    """The required key or hash field is absent."""

    default_code = "CACHE_MISS"


class NotStoredException(CacheException):
    """A write was rejected by its existence precondition."""

    default_code = "NOT_STORED"


class NoTTLException(CacheException):
    """The key exists but carries no expiry."""

    default_code = "NO_TTL"


class WriteConflictException(CacheException):
    """A watched key changed between watch and commit."""

    default_code = "WRITE_CONFLICT"


# =============================================================================
# Validation Exceptions
# =============================================================================


class ValidationException(FlyCacheException):
    """Input validation failures."""


class InvalidArgumentException(ValidationException):
    """Mismatched counts, malformed pair lists or out-of-range numbers."""

    default_code = "INVALID_ARGUMENT"


# =============================================================================
# Codec Exceptions
# =============================================================================


class CodecException(FlyCacheException):
    """Failures converting values to and from their stored bytes."""


class SerializationException(CodecException):
    """A value could not be encoded."""

    default_code = "SERIALIZATION"


class DeserializationException(CodecException):
    """Stored bytes are malformed or do not match the requested type."""

    default_code = "DESERIALIZATION"


class UnregisteredTypeException(CodecException):
    """A record type crossed the codec boundary without being registered."""

    default_code = "UNREGISTERED_TYPE"


class TypeRegistrationException(CodecException):
    """A type could not be registered with the codec."""

    default_code = "TYPE_REGISTRATION"


# =============================================================================
# Record Exceptions
# =============================================================================


class RecordException(FlyCacheException):
    """Failures accessing the fields of a structured record."""


class NotARecordException(RecordException):
    """The value is not a record instance."""

    default_code = "NOT_A_RECORD"


class FieldAccessException(RecordException):
    """The field is absent, private, or cannot be written."""

    default_code = "FIELD_ACCESS"


class FieldTypeMismatchException(RecordException):
    """The value's type does not exactly match the field's declared type."""

    default_code = "FIELD_TYPE_MISMATCH"


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationException(FlyCacheException):
    """Invalid or unresolvable configuration."""

    default_code = "CONFIGURATION"
