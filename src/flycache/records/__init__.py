"""flycache Records: field descriptors and name-based field access."""

from flycache.records.descriptor import FieldDescriptor, RecordDescriptor, conforms, describe
from flycache.records.introspection import FieldHandle, RecordIntrospector

__all__ = [
    "FieldDescriptor",
    "FieldHandle",
    "RecordDescriptor",
    "RecordIntrospector",
    "conforms",
    "describe",
]
