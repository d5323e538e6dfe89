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
"""Tests for Codec serialization and deserialization."""

from __future__ import annotations

from dataclasses import dataclass, field

import pytest

from flycache.codec.serializer import Codec
from flycache.kernel.exceptions import (
    DeserializationException,
    SerializationException,
    UnregisteredTypeException,
)


@dataclass
class Address:
    city: str = ""
    zip_code: str = ""


@dataclass
class Customer:
    name: str = ""
    tags: tuple[str, ...] = ()
    address: Address | None = None
    avatar: bytes = b""
    _session: str = "none"
    scores: list[int] = field(default_factory=list)


@pytest.fixture
def codec() -> Codec:
    codec = Codec()
    codec.register(Address)
    codec.register(Customer)
    return codec


class TestScalarEncoding:
    def test_int_is_ascii_decimal(self, codec: Codec):
        assert codec.serialize(42) == b"42"
        assert codec.serialize(-7) == b"-7"

    def test_bool_is_not_an_integer(self, codec: Codec):
        assert codec.serialize(True) == b"true"
        assert codec.deserialize(b"true", bool) is True

    def test_bytes_stored_raw(self, codec: Codec):
        assert codec.serialize(b"\x00\xffraw") == b"\x00\xffraw"
        assert codec.deserialize(b"\x00\xffraw", bytes) == b"\x00\xffraw"

    def test_bytearray_stored_raw(self, codec: Codec):
        assert codec.serialize(bytearray(b"abc")) == b"abc"

    def test_field_declared_bytes_stored_raw(self, codec: Codec):
        assert codec.serialize_field(b"null", bytes) == b"null"

    def test_field_declared_optional_bytes_is_tagged(self, codec: Codec):
        data = codec.serialize_field(b"null", bytes | None)
        assert data != b"null"
        assert codec.deserialize(data, bytes | None) == b"null"
        assert codec.deserialize(codec.serialize_field(None, bytes | None), bytes | None) is None

    def test_field_of_other_type_matches_serialize(self, codec: Codec):
        assert codec.serialize_field(7, int | None) == b"7"
        assert codec.serialize_field("x", str) == codec.serialize("x")

    def test_string_and_float(self, codec: Codec):
        assert codec.deserialize(codec.serialize("héllo"), str) == "héllo"
        assert codec.deserialize(codec.serialize(2.5), float) == 2.5

    def test_none(self, codec: Codec):
        assert codec.deserialize(codec.serialize(None)) is None


class TestContainerEncoding:
    def test_dict_with_string_keys(self, codec: Codec):
        value = {"a": 1, "b": [1, 2], "c": {"d": None}}
        assert codec.deserialize(codec.serialize(value), dict) == value

    def test_non_string_keys_rejected(self, codec: Codec):
        with pytest.raises(SerializationException):
            codec.serialize({1: "one"})

    def test_reserved_keys_rejected(self, codec: Codec):
        with pytest.raises(SerializationException):
            codec.serialize({"__type__": "x"})

    def test_tuple_rebuilt_from_annotation(self, codec: Codec):
        assert codec.deserialize(codec.serialize((1, 2)), tuple) == (1, 2)

    def test_nested_bytes(self, codec: Codec):
        assert codec.deserialize(codec.serialize({"blob": b"\x01\x02"})) == {"blob": b"\x01\x02"}

    def test_unsupported_value(self, codec: Codec):
        with pytest.raises(SerializationException):
            codec.serialize(object())


class TestRecordEncoding:
    def test_round_trip(self, codec: Codec):
        customer = Customer(
            name="Alice",
            tags=("vip", "beta"),
            address=Address("Madrid", "28001"),
            avatar=b"\x89PNG",
            scores=[3, 5],
        )
        decoded = codec.deserialize(codec.serialize(customer), Customer)
        assert decoded == customer
        assert isinstance(decoded.tags, tuple)
        assert isinstance(decoded.address, Address)

    def test_private_fields_not_serialized(self, codec: Codec):
        data = codec.serialize(Customer(name="Alice", _session="abc"))
        assert b"_session" not in data
        assert codec.deserialize(data, Customer)._session == "none"

    def test_unregistered_record_rejected(self):
        with pytest.raises(UnregisteredTypeException):
            Codec().serialize(Address("Madrid"))

    def test_unregistered_type_on_decode(self, codec: Codec):
        data = codec.serialize(Address("Madrid"))
        with pytest.raises(UnregisteredTypeException):
            Codec().deserialize(data)

    def test_register_as_decorator(self):
        codec = Codec()

        @codec.register(name="point")
        @dataclass
        class Point:
            x: int = 0
            y: int = 0

        assert codec.serialize(Point(1, 2)) == b'{"__type__":"point","fields":{"x":1,"y":2}}'
        assert codec.deserialize(b'{"__type__":"point","fields":{"x":1,"y":2}}', Point) == Point(1, 2)


class TestDecodingFailures:
    def test_malformed_payload(self, codec: Codec):
        with pytest.raises(DeserializationException):
            codec.deserialize(b"{not json")

    def test_raw_bytes_without_bytes_target(self, codec: Codec):
        with pytest.raises(DeserializationException):
            codec.deserialize(b"\xff\xfe")

    def test_int_does_not_widen_to_float(self, codec: Codec):
        with pytest.raises(DeserializationException):
            codec.deserialize(b"3", float)

    def test_wrong_record_type(self, codec: Codec):
        with pytest.raises(DeserializationException):
            codec.deserialize(codec.serialize(Address("Madrid")), Customer)

    def test_non_bytes_input(self, codec: Codec):
        with pytest.raises(DeserializationException):
            codec.deserialize(None, int)  # type: ignore[arg-type]
        with pytest.raises(DeserializationException):
            codec.deserialize(None, bytes)  # type: ignore[arg-type]

    def test_raw_bytes_under_optional_bytes_are_rejected(self, codec: Codec):
        with pytest.raises(DeserializationException):
            codec.deserialize(b"123", bytes | None)
        with pytest.raises(DeserializationException):
            codec.deserialize(b"abc", bytes | None)

    def test_malformed_record_payload(self, codec: Codec):
        with pytest.raises(DeserializationException):
            codec.deserialize(b'{"__type__":"' + _name(Address) + b'","fields":[]}')


def _name(record_type: type) -> bytes:
    return f"{record_type.__module__}.{record_type.__qualname__}".encode()
