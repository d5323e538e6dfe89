"""flycache Codec: value serialization with an explicit record type registry."""

from flycache.codec.registry import TypeRegistry
from flycache.codec.serializer import Codec

__all__ = ["Codec", "TypeRegistry"]
