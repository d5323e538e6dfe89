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
"""Per-type field descriptor tables for cacheable records.

A record is a ``@dataclass``. Fields whose name starts with an underscore
are private: they are kept on the instance but never surfaced to the cache.
The descriptor table is built once, when the type is registered with a
codec, and every field lookup afterwards is a dict access.
"""

from __future__ import annotations

import dataclasses
import types
from dataclasses import dataclass
from typing import Any, Union, get_args, get_origin, get_type_hints

from flycache.kernel.exceptions import TypeRegistrationException

# Types compared by identity: no bool-for-int or int-for-float widening.
_EXACT_TYPES: tuple[type, ...] = (bool, int, float, str, bytes, bytearray)


def is_private(name: str) -> bool:
    """Return True for field names hidden from the cache."""
    return name.startswith("_")


def conforms(value: Any, annotation: Any) -> bool:
    """Return True when *value* exactly matches the declared *annotation*.

    Unions match any member, parameterized generics match on their origin
    (``list[int]`` accepts any ``list``), and primitives match by identity.
    Annotations that cannot be checked at runtime (type variables, unresolved
    forward references) accept any value.
    """
    if annotation is Any or annotation is object:
        return True
    if annotation is None or annotation is type(None):
        return value is None

    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        return any(conforms(value, arg) for arg in get_args(annotation))
    if origin is not None:
        annotation = origin

    if not isinstance(annotation, type):
        return True
    if annotation in _EXACT_TYPES:
        return type(value) is annotation
    return isinstance(value, annotation)


@dataclass(frozen=True)
class FieldDescriptor:
    """Accessor and mutator for one declared field of a record type."""

    name: str
    annotation: Any
    field: dataclasses.Field[Any]

    @property
    def exported(self) -> bool:
        return not is_private(self.name)

    def get(self, record: Any) -> Any:
        return getattr(record, self.name)

    def set(self, record: Any, value: Any) -> None:
        setattr(record, self.name, value)

    def default(self) -> Any:
        """Return the declared default, or ``None`` when there is none."""
        if self.field.default is not dataclasses.MISSING:
            return self.field.default
        if self.field.default_factory is not dataclasses.MISSING:
            return self.field.default_factory()
        return None


class RecordDescriptor:
    """Field table of one registered record type, in declaration order."""

    def __init__(self, record_type: type, type_name: str, fields: list[FieldDescriptor]) -> None:
        self.record_type = record_type
        self.type_name = type_name
        self.frozen: bool = record_type.__dataclass_params__.frozen  # type: ignore[attr-defined]
        self._fields: dict[str, FieldDescriptor] = {f.name: f for f in fields}

    @property
    def fields(self) -> list[FieldDescriptor]:
        return list(self._fields.values())

    @property
    def exported_fields(self) -> list[FieldDescriptor]:
        return [f for f in self._fields.values() if f.exported]

    def field(self, name: str) -> FieldDescriptor | None:
        """Return the exported field called *name*, or ``None``."""
        descriptor = self._fields.get(name)
        if descriptor is None or not descriptor.exported:
            return None
        return descriptor

    def build(self, values: dict[str, Any]) -> Any:
        """Create an instance from exported field values.

        The dataclass ``__init__`` is bypassed so records with required
        private fields or ``init=False`` fields can still be rebuilt. Missing
        values fall back to the field default.
        """
        instance = object.__new__(self.record_type)
        for descriptor in self._fields.values():
            if descriptor.exported and descriptor.name in values:
                value = values[descriptor.name]
            else:
                value = descriptor.default()
            object.__setattr__(instance, descriptor.name, value)
        return instance

    def __repr__(self) -> str:
        return f"RecordDescriptor({self.type_name!r}, fields={list(self._fields)})"


def describe(record_type: type, type_name: str) -> RecordDescriptor:
    """Build the descriptor table for a dataclass type."""
    if not isinstance(record_type, type) or not dataclasses.is_dataclass(record_type):
        raise TypeRegistrationException(
            f"Only dataclass types can be registered, got {record_type!r}",
            context={"type": repr(record_type)},
        )
    try:
        hints = get_type_hints(record_type)
    except NameError as exc:
        raise TypeRegistrationException(
            f"Cannot resolve field annotations of {record_type.__qualname__}: {exc}",
            context={"type": type_name},
        ) from exc

    fields = [
        FieldDescriptor(name=f.name, annotation=hints.get(f.name, Any), field=f)
        for f in dataclasses.fields(record_type)
    ]
    return RecordDescriptor(record_type, type_name, fields)
