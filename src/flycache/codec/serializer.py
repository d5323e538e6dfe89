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
"""Value <-> bytes codec used by every cache backend.

Wire format:

- ``bytes`` values are stored verbatim, so response bodies round-trip
  without overhead. Read them back with ``into=bytes``. A record field
  whose declared type is anything but ``bytes`` (``bytes | None``,
  ``Any``) is tagged instead, see :meth:`Codec.serialize_field`.
- ``int`` values are stored as ASCII decimal, which lets the remote
  engine's integer commands (INCRBY, DECRBY) operate on them.
- Everything else is compact JSON. Registered records are tagged objects
  ``{"__type__": name, "fields": {...}}`` carrying only exported fields;
  nested ``bytes`` become ``{"__bytes__": base64}``.
"""

from __future__ import annotations

import base64
import binascii
import dataclasses
import json
import types
from collections.abc import Callable
from typing import Any, TypeVar, Union, get_args, get_origin, overload

from flycache.codec.registry import TypeRegistry
from flycache.kernel.exceptions import DeserializationException, SerializationException
from flycache.records.descriptor import conforms

T = TypeVar("T")

_TYPE_KEY = "__type__"
_FIELDS_KEY = "fields"
_BYTES_KEY = "__bytes__"
_RESERVED_KEYS = frozenset({_TYPE_KEY, _BYTES_KEY})
_SEQUENCE_TYPES: tuple[type, ...] = (tuple, set, frozenset)
_RAW_TYPES: tuple[type, ...] = (bytes, bytearray)


class Codec:
    """Serializes cache values and owns the registry of record types.

    Usage:
        codec = Codec()

        @codec.register
        @dataclass
        class User:
            name: str
            age: int

        data = codec.serialize(User("Alice", 30))
        user = codec.deserialize(data, User)
    """

    def __init__(self, registry: TypeRegistry | None = None) -> None:
        self.registry = registry if registry is not None else TypeRegistry()

    @overload
    def register(self, record_type: type[T], *, name: str | None = None) -> type[T]: ...

    @overload
    def register(self, record_type: None = None, *, name: str | None = None) -> Callable[[type[T]], type[T]]: ...

    def register(self, record_type: type[T] | None = None, *, name: str | None = None) -> Any:
        """Register a record type, directly or as a class decorator."""

        def decorator(cls: type[T]) -> type[T]:
            self.registry.register(cls, name)
            return cls

        if record_type is None:
            return decorator
        return decorator(record_type)

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def serialize(self, value: Any) -> bytes:
        """Encode *value* into its stored byte form."""
        if isinstance(value, (bytes, bytearray, memoryview)):
            return bytes(value)
        if isinstance(value, int) and not isinstance(value, bool):
            return str(int(value)).encode("ascii")
        return self._dump(value)

    def serialize_field(self, value: Any, annotation: Any) -> bytes:
        """Encode a record field value for its declared type.

        Bytes are stored verbatim only when the field is declared exactly
        ``bytes``; under any other annotation they are tagged, so a value
        like ``b"null"`` cannot be read back as ``None``.
        """
        if isinstance(value, (bytes, bytearray, memoryview)) and annotation not in _RAW_TYPES:
            return self._dump(value)
        return self.serialize(value)

    def _dump(self, value: Any) -> bytes:
        try:
            wire = self._to_wire(value)
            return json.dumps(wire, separators=(",", ":"), ensure_ascii=False).encode("utf-8")
        except (TypeError, ValueError, RecursionError) as exc:
            raise SerializationException(
                f"Failed to serialize value of type {type(value).__qualname__}: {exc}",
                context={"type": type(value).__qualname__},
            ) from exc

    def _to_wire(self, value: Any) -> Any:
        if value is None or isinstance(value, (bool, str, float)):
            return value
        if isinstance(value, int):
            return int(value)
        if isinstance(value, (bytes, bytearray, memoryview)):
            return {_BYTES_KEY: base64.b64encode(bytes(value)).decode("ascii")}
        if isinstance(value, (list, tuple, set, frozenset)):
            return [self._to_wire(item) for item in value]
        if isinstance(value, dict):
            return self._mapping_to_wire(value)
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            descriptor = self.registry.descriptor_for(type(value))
            return {
                _TYPE_KEY: descriptor.type_name,
                _FIELDS_KEY: {f.name: self._to_wire(f.get(value)) for f in descriptor.exported_fields},
            }
        raise SerializationException(
            f"Values of type {type(value).__qualname__} cannot be cached",
            context={"type": type(value).__qualname__},
        )

    def _mapping_to_wire(self, mapping: dict[Any, Any]) -> dict[str, Any]:
        wire: dict[str, Any] = {}
        for key, item in mapping.items():
            if not isinstance(key, str):
                raise SerializationException(
                    f"Mapping keys must be strings, got {type(key).__qualname__}",
                    context={"key": repr(key)},
                )
            if key in _RESERVED_KEYS:
                raise SerializationException(f"Mapping key '{key}' is reserved by the codec", context={"key": key})
            wire[key] = self._to_wire(item)
        return wire

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    @overload
    def deserialize(self, data: bytes, into: type[T]) -> T: ...

    @overload
    def deserialize(self, data: bytes, into: Any = None) -> Any: ...

    def deserialize(self, data: bytes, into: Any = None) -> Any:
        """Decode stored bytes.

        When *into* is given the decoded value must match it exactly,
        otherwise :class:`DeserializationException` is raised.
        """
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise DeserializationException(
                f"Expected stored bytes, got {type(data).__qualname__}",
                context={"actual": type(data).__qualname__},
            )
        if into in _RAW_TYPES:
            return into(data)
        try:
            payload = json.loads(bytes(data).decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise DeserializationException(f"Stored value is not decodable: {exc}") from exc

        value = self._from_wire(payload, into)
        if into is not None and not conforms(value, into):
            raise DeserializationException(
                f"Stored value of type {type(value).__qualname__} does not match {_describe(into)}",
                context={"expected": _describe(into), "actual": type(value).__qualname__},
            )
        return value

    def _from_wire(self, payload: Any, annotation: Any = None) -> Any:
        if isinstance(payload, list):
            items = [self._from_wire(item) for item in payload]
            container = _container_for(annotation)
            if container is not None:
                return container(items)
            return items
        if not isinstance(payload, dict):
            return payload
        if _TYPE_KEY in payload:
            return self._record_from_wire(payload)
        if _BYTES_KEY in payload:
            try:
                return base64.b64decode(payload[_BYTES_KEY], validate=True)
            except (binascii.Error, TypeError) as exc:
                raise DeserializationException(f"Malformed bytes payload: {exc}") from exc
        return {key: self._from_wire(item) for key, item in payload.items()}

    def _record_from_wire(self, payload: dict[str, Any]) -> Any:
        descriptor = self.registry.lookup(str(payload[_TYPE_KEY]))
        fields = payload.get(_FIELDS_KEY)
        if not isinstance(fields, dict):
            raise DeserializationException(
                f"Malformed record payload for '{descriptor.type_name}'",
                context={"type": descriptor.type_name},
            )
        values: dict[str, Any] = {}
        for name, item in fields.items():
            field = descriptor.field(name)
            if field is not None:
                values[name] = self._from_wire(item, field.annotation)
        return descriptor.build(values)


def _container_for(annotation: Any) -> type | None:
    """Return the tuple/set type a JSON list should be rebuilt as, if any."""
    if annotation in _SEQUENCE_TYPES:
        return annotation  # type: ignore[no-any-return]
    origin = get_origin(annotation)
    if origin in _SEQUENCE_TYPES:
        return origin  # type: ignore[no-any-return]
    if origin is Union or origin is types.UnionType:
        for arg in get_args(annotation):
            container = _container_for(arg)
            if container is not None:
                return container
    return None


def _describe(annotation: Any) -> str:
    return getattr(annotation, "__qualname__", None) or repr(annotation)
