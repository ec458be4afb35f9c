"""
Attribute Specifications

Classifies each entry of a struct's attribute list and knows how to pull the
entry's value out of constructor input.

Three kinds exist, decided purely by how the entry is written:

    "name"        plain attribute, accessor returns the value as supplied
    "minor?"      boolean attribute, accessors `minor` (raw value) and
                  `minor?` (the value coerced to bool)
    ["aliases"]   collection attribute, accessor returns a list and never None

Python has no symbol type, so a symbolic name is a str that is a valid
identifier. Anything else (empty strings, punctuation, keywords, names that
start with an underscore) is a generic string value and is rejected, as are
the names of the methods every struct type provides (RESERVED_NAMES).
"""

import keyword
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Sequence, Tuple

from .errors import CoercionFailure, InvalidSpecification


BOOLEAN_SUFFIX = "?"

# Methods every struct type provides. An accessor of the same name would
# replace them, so attributes cannot use these names.
RESERVED_NAMES = frozenset({
    "to_dict",
    "to_h",
    "to_hash",
    "attributes_to_dict",
    "derived_to_dict",
    "merge",
    "coerce",
})


class AttributeKind(Enum):
    """How an attribute stores and exposes its value."""

    PLAIN = "plain"
    BOOLEAN = "boolean"
    COLLECTION = "collection"


@dataclass(frozen=True)
class AttributeSpec:
    """
    One declared attribute of a generated struct type.

    Properties:
        name:
            Raw attribute name, without any "?" suffix or list marker.
            This is also the key the constructor reads the value from.

        kind:
            AttributeKind of the declaration.

    IMPORTANT:
        An AttributeSpec holds no value. Values live on struct instances.
    """

    name: str
    kind: AttributeKind = AttributeKind.PLAIN

    @property
    def predicate_name(self) -> str:
        return self.name + BOOLEAN_SUFFIX

    @property
    def accessor_names(self) -> Tuple[str, ...]:
        """Names of the read accessors installed for this attribute."""
        if self.kind is AttributeKind.BOOLEAN:
            return (self.name, self.predicate_name)
        return (self.name,)

    @property
    def declaration(self) -> Any:
        """The attribute written back the way it is declared."""
        if self.kind is AttributeKind.BOOLEAN:
            return self.predicate_name
        if self.kind is AttributeKind.COLLECTION:
            return [self.name]
        return self.name

    def lookup(self, values: Mapping, keywords: Mapping) -> Any:
        """
        Find the supplied value for this attribute.

        A key present in `values` wins over the same key passed as a keyword.
        Presence decides, not truthiness. Missing everywhere means None.
        """
        if self.name in values:
            return values[self.name]
        return keywords.get(self.name)

    def coerce(self, value: Any) -> Any:
        """Apply the kind-specific conversion to a supplied value."""
        if self.kind is AttributeKind.COLLECTION:
            return coerce_collection(self.name, value)
        return value


def coerce_collection(name: str, value: Any) -> List[Any]:
    """
    Turn a supplied value into a list.

    None becomes an empty list. Mappings become their (key, value) pairs.
    Strings, bytes and non-iterable values are rejected.
    """
    if value is None:
        return []
    if isinstance(value, (str, bytes)):
        raise CoercionFailure(
            f"Cannot coerce {value!r} ({type(value).__name__}) to a collection for '{name}'"
        )
    if isinstance(value, Mapping):
        return list(value.items())
    if isinstance(value, Iterable):
        return list(value)
    raise CoercionFailure(
        f"Cannot coerce {value!r} ({type(value).__name__}) to a collection for '{name}'"
    )


def _is_symbolic_name(name: Any) -> bool:
    return (
        isinstance(name, str)
        and name.isidentifier()
        and not keyword.iskeyword(name)
        and not name.startswith("_")
        and name not in RESERVED_NAMES
    )


def parse_attribute_spec(entry: Any) -> AttributeSpec:
    """
    Classify a single declared entry.

    Raises:
        InvalidSpecification: If the entry is not a recognised shape
    """
    if isinstance(entry, (list, tuple)):
        if len(entry) != 1:
            raise InvalidSpecification(
                f"Collection attribute must wrap exactly one name, got {entry!r}"
            )
        inner = entry[0]
        if not _is_symbolic_name(inner):
            raise InvalidSpecification(f"Invalid collection attribute name: {inner!r}")
        return AttributeSpec(name=inner, kind=AttributeKind.COLLECTION)

    if not isinstance(entry, str):
        raise InvalidSpecification(
            f"Invalid attribute specification {entry!r} ({type(entry).__name__})"
        )

    if entry.endswith(BOOLEAN_SUFFIX):
        raw_name = entry[: -len(BOOLEAN_SUFFIX)]
        if not _is_symbolic_name(raw_name):
            raise InvalidSpecification(f"Invalid boolean attribute name: {entry!r}")
        return AttributeSpec(name=raw_name, kind=AttributeKind.BOOLEAN)

    if not _is_symbolic_name(entry):
        raise InvalidSpecification(f"Invalid attribute name: {entry!r}")
    return AttributeSpec(name=entry)


def parse_attribute_specs(entries: Sequence[Any]) -> Tuple[AttributeSpec, ...]:
    """
    Classify an ordered attribute list.

    Raises:
        InvalidSpecification: If the list is empty, contains a malformed
            entry, or declares the same accessor twice
    """
    if not entries:
        raise InvalidSpecification("At least one attribute must be declared")

    specs = tuple(parse_attribute_spec(entry) for entry in entries)

    seen = set()
    for spec in specs:
        for accessor in spec.accessor_names:
            if accessor in seen:
                raise InvalidSpecification(
                    f"Duplicate attribute {accessor!r} declared by {spec.declaration!r}"
                )
            seen.add(accessor)
    return specs
