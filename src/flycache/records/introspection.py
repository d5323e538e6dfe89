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
"""Name-based access to the exported fields of registered records.

This is how a record is projected onto a Redis hash (one hash field per
exported record field) and rebuilt from one, without per-type code.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from flycache.kernel.exceptions import (
    FieldAccessException,
    FieldTypeMismatchException,
    NotARecordException,
)
from flycache.records.descriptor import FieldDescriptor, RecordDescriptor, conforms

if TYPE_CHECKING:
    from flycache.codec.serializer import Codec


class FieldHandle:
    """Live handle to one field of one record instance.

    Writes through the handle change the record in place.
    """

    __slots__ = ("_codec", "_descriptor", "_record")

    def __init__(self, record: Any, descriptor: FieldDescriptor, codec: Codec) -> None:
        self._record = record
        self._descriptor = descriptor
        self._codec = codec

    @property
    def name(self) -> str:
        return self._descriptor.name

    @property
    def annotation(self) -> Any:
        return self._descriptor.annotation

    def get(self) -> Any:
        return self._descriptor.get(self._record)

    def set(self, value: Any) -> None:
        """Overwrite the field, requiring an exact type match."""
        if not conforms(value, self._descriptor.annotation):
            raise FieldTypeMismatchException(
                f"Field '{self.name}' of {type(self._record).__qualname__} expects "
                f"{_describe(self._descriptor.annotation)}, got {type(value).__qualname__}",
                context={"field": self.name, "actual": type(value).__qualname__},
            )
        self._descriptor.set(self._record, value)

    def decode(self, data: bytes) -> None:
        """Deserialize *data* as the field's declared type and store it."""
        self.set(self._codec.deserialize(data, self._descriptor.annotation))

    def __repr__(self) -> str:
        return f"FieldHandle({type(self._record).__qualname__}.{self.name})"


class RecordIntrospector:
    """Field access by name over the descriptor tables of a codec's registry."""

    def __init__(self, codec: Codec) -> None:
        self._codec = codec

    def describe(self, record: Any) -> RecordDescriptor:
        """Return the descriptor of a registered record instance."""
        if isinstance(record, type) or record is None:
            raise NotARecordException(
                f"Expected a record instance, got {record!r}",
                context={"value": repr(record)},
            )
        if not hasattr(type(record), "__dataclass_fields__"):
            raise NotARecordException(
                f"Expected a record instance, got {type(record).__qualname__}",
                context={"type": type(record).__qualname__},
            )
        return self._codec.registry.descriptor_for(type(record))

    def has_field(self, record: Any, name: str) -> bool:
        """Return True when *record* has an exported field called *name*."""
        return self.describe(record).field(name) is not None

    def get_field_handle(self, record: Any, name: str) -> FieldHandle:
        """Return a live handle to an exported, writable field."""
        descriptor = self.describe(record)
        field = descriptor.field(name)
        if field is None:
            raise FieldAccessException(
                f"{descriptor.record_type.__qualname__} has no exported field '{name}'",
                context={"type": descriptor.type_name, "field": name},
            )
        if descriptor.frozen:
            raise FieldAccessException(
                f"Field '{name}' of frozen record {descriptor.record_type.__qualname__} cannot be written",
                context={"type": descriptor.type_name, "field": name},
            )
        return FieldHandle(record, field, self._codec)

    def set_field(self, record: Any, name: str, value: Any) -> None:
        """Overwrite an exported field in place."""
        self.get_field_handle(record, name).set(value)

    def to_named_serialized_sequence(self, record: Any) -> list[str | bytes]:
        """Return ``[name1, bytes1, name2, bytes2, ...]`` for every exported field.

        Private fields are skipped; fields keep their declaration order.
        Each value is encoded for its field's declared type, so it decodes
        back through :meth:`FieldHandle.decode`.
        """
        descriptor = self.describe(record)
        sequence: list[str | bytes] = []
        for field in descriptor.exported_fields:
            sequence.append(field.name)
            sequence.append(self._codec.serialize_field(field.get(record), field.annotation))
        return sequence


def _describe(annotation: Any) -> str:
    return getattr(annotation, "__qualname__", None) or repr(annotation)
