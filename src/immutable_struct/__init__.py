"""
Immutable Struct

Generates immutable value-object classes at runtime from a list of
attribute names.

    Person = define_struct("name", "minor?", ["aliases"])

Generated types get:
    - read-only accessors
    - a mapping / keyword constructor
    - structural equality and hashing
    - merge() to derive a new instance
    - to_dict() covering attributes and zero-argument derived members

Useful for model objects of concepts that are not stored anywhere.
"""

from .attributes import AttributeKind, AttributeSpec
from .errors import CoercionFailure, FrozenInstanceError, InvalidSpecification, StructError
from .struct import ImmutableStruct, define_struct, immutable_struct

__version__ = "2.0.0"

__all__ = [
    "AttributeKind",
    "AttributeSpec",
    "CoercionFailure",
    "FrozenInstanceError",
    "ImmutableStruct",
    "InvalidSpecification",
    "StructError",
    "define_struct",
    "immutable_struct",
]
