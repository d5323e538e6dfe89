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
"""Registry of record types known to a codec."""

from __future__ import annotations

import logging

from flycache.kernel.exceptions import TypeRegistrationException, UnregisteredTypeException
from flycache.records.descriptor import RecordDescriptor, describe

_logger = logging.getLogger(__name__)


class TypeRegistry:
    """Maps record types to wire names and their field descriptor tables.

    One registry is owned by each :class:`~flycache.codec.Codec`. Types are
    registered once at process start, before any value of the type is
    stored or read.
    """

    def __init__(self) -> None:
        self._by_name: dict[str, RecordDescriptor] = {}
        self._by_type: dict[type, RecordDescriptor] = {}

    def register(self, record_type: type, name: str | None = None) -> RecordDescriptor:
        """Register *record_type* under *name* (default ``module.qualname``).

        Registering the same type again returns the existing descriptor.
        """
        existing = self._by_type.get(record_type)
        if existing is not None:
            return existing

        type_name = name or f"{record_type.__module__}.{record_type.__qualname__}"
        clash = self._by_name.get(type_name)
        if clash is not None:
            raise TypeRegistrationException(
                f"Type name '{type_name}' is already registered for {clash.record_type.__qualname__}",
                context={"name": type_name},
            )

        descriptor = describe(record_type, type_name)
        self._by_name[type_name] = descriptor
        self._by_type[record_type] = descriptor
        _logger.debug("Registered record type '%s' with fields %s", type_name, [f.name for f in descriptor.fields])
        return descriptor

    def is_registered(self, record_type: type) -> bool:
        return record_type in self._by_type

    def descriptor_for(self, record_type: type) -> RecordDescriptor:
        """Return the descriptor of a registered type."""
        descriptor = self._by_type.get(record_type)
        if descriptor is None:
            raise UnregisteredTypeException(
                f"Type {record_type.__qualname__} is not registered with the codec",
                context={"type": f"{record_type.__module__}.{record_type.__qualname__}"},
            )
        return descriptor

    def lookup(self, type_name: str) -> RecordDescriptor:
        """Return the descriptor registered under a wire name."""
        descriptor = self._by_name.get(type_name)
        if descriptor is None:
            raise UnregisteredTypeException(
                f"Stored value names unregistered type '{type_name}'",
                context={"name": type_name},
            )
        return descriptor

    def __contains__(self, record_type: object) -> bool:
        return record_type in self._by_type

    def __len__(self) -> int:
        return len(self._by_type)
