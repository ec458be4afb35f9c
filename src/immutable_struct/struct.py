"""
Struct Factory

Creates classes for value objects and read-only records at runtime.

    Person = define_struct("name", "location", "minor?", ["aliases"])

    p = Person(name="Rudy", minor="yup")
    p.name                  # => 'Rudy'
    p.location              # => None
    p.minor                 # => 'yup'
    getattr(p, "minor?")    # => True
    p.aliases               # => []

Extra members come from a body class, either passed as `body=` or by
decorating the class directly:

    @immutable_struct("flappy")
    class Bird:
        def lawsuit(self):
            return "pending"

    Bird(flappy="bird").to_dict()   # => {'flappy': 'bird', 'lawsuit': 'pending'}

ARCHITECTURAL RULE:
    Instances never change after __init__.
    A "changed" value is always a new instance produced by merge().
"""

import inspect
import sys
import types
import warnings
from collections.abc import Mapping
from typing import Any, Callable, Dict, Optional, Tuple

from .attributes import RESERVED_NAMES, AttributeKind, AttributeSpec, parse_attribute_specs
from .errors import CoercionFailure, FrozenInstanceError


# Members of ImmutableStruct that never count as derived values.
HOUSEKEEPING_MEMBERS = RESERVED_NAMES

# Names a body may use to replace the dict view. All three stay in step.
DICT_VIEW_NAMES = ("to_dict", "to_h", "to_hash")

# Class namespace entries that belong to the body class itself and must not
# be copied onto the generated type.
_BODY_ONLY_ENTRIES = frozenset({"__dict__", "__weakref__", "__slots__", "__module__", "__qualname__"})


def _freeze(value: Any) -> Any:
    """Hashable stand-in for a value; only used to compute hashes."""
    if isinstance(value, ImmutableStruct):
        return value
    if isinstance(value, Mapping):
        return frozenset((key, _freeze(item)) for key, item in value.items())
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    if isinstance(value, (set, frozenset)):
        return frozenset(_freeze(item) for item in value)
    return value


class ImmutableStruct:
    """
    Base class of every generated struct type.

    Subclasses are produced by define_struct() and carry:
        __struct_attributes__: ordered AttributeSpec tuple
        __struct_derived__: names of zero-argument body members, in
            definition order

    Stored values live in a single tuple, so equality, hashing and
    serialization all read the same data.
    """

    __slots__ = ("_values",)

    __struct_attributes__: Tuple[AttributeSpec, ...] = ()
    __struct_derived__: Tuple[str, ...] = ()

    def __init__(self, values: Optional[Mapping] = None, /, **kwargs: Any) -> None:
        if values is None:
            values = {}
        elif not isinstance(values, Mapping):
            raise CoercionFailure(
                f"{type(self).__name__} expects a mapping, got {values!r} ({type(values).__name__})"
            )
        stored = tuple(
            spec.coerce(spec.lookup(values, kwargs))
            for spec in self.__struct_attributes__
        )
        object.__setattr__(self, "_values", stored)

    @classmethod
    def coerce(cls, value: Any) -> "ImmutableStruct":
        """
        Turn `value` into an instance of this exact type.

        Instances of this type are returned as they are. Mappings are passed
        to the constructor.

        Raises:
            CoercionFailure: For any other value
        """
        if type(value) is cls:
            return value
        if isinstance(value, Mapping):
            return cls(value)
        raise CoercionFailure(
            f"Cannot coerce {value!r} ({type(value).__name__}) to {cls.__name__}"
        )

    def __setattr__(self, name: str, value: Any) -> None:
        raise FrozenInstanceError(f"cannot assign to attribute {name!r} of {type(self).__name__}")

    def __delattr__(self, name: str) -> None:
        raise FrozenInstanceError(f"cannot delete attribute {name!r} of {type(self).__name__}")

    def attributes_to_dict(self) -> Dict[str, Any]:
        """Accessor name to stored value, in declaration order."""
        result: Dict[str, Any] = {}
        for spec, value in zip(self.__struct_attributes__, self._values):
            result[spec.name] = value
            if spec.kind is AttributeKind.BOOLEAN:
                result[spec.predicate_name] = bool(value)
        return result

    def derived_to_dict(self) -> Dict[str, Any]:
        """
        Values of the zero-argument members defined in the body.

        IMPORTANT:
            A derived member that itself calls to_dict() recurses until
            Python raises RecursionError. This is not guarded.
        """
        cls = type(self)
        result: Dict[str, Any] = {}
        for name in cls.__struct_derived__:
            member = getattr(self, name)
            if isinstance(inspect.getattr_static(cls, name), property):
                result[name] = member
            else:
                result[name] = member()
        return result

    def to_dict(self) -> Dict[str, Any]:
        """Attributes and derived values together; derived values win on clashes."""
        result = self.attributes_to_dict()
        result.update(self.derived_to_dict())
        return result

    def to_h(self) -> Dict[str, Any]:
        return self.to_dict()

    def to_hash(self) -> Dict[str, Any]:
        return self.to_dict()

    def merge(self, overrides: Optional[Mapping] = None, /, **kwargs: Any) -> "ImmutableStruct":
        """
        New instance of the same type with some attributes replaced.

        Built from attributes_to_dict(), not to_dict(). Keys that are not
        attributes are passed along and ignored by the constructor.
        """
        values = self.attributes_to_dict()
        values.update(kwargs)
        if overrides:
            values.update(overrides)
        return type(self)(values)

    def __eq__(self, other: Any) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._values == other._values

    def __hash__(self) -> int:
        return hash((type(self), _freeze(self._values)))

    def __repr__(self) -> str:
        fields = ", ".join(
            f"{spec.name}={value!r}"
            for spec, value in zip(self.__struct_attributes__, self._values)
        )
        return f"{type(self).__name__}({fields})"

    def __reduce__(self):
        values = {
            spec.name: value
            for spec, value in zip(self.__struct_attributes__, self._values)
        }
        return (type(self), (values,))


def _value_accessor(index: int, spec: AttributeSpec) -> property:
    def get(self):
        return self._values[index]

    get.__name__ = spec.name
    return property(get, doc=f"Value of '{spec.name}' as supplied.")


def _predicate_accessor(index: int, spec: AttributeSpec) -> property:
    def get(self):
        return bool(self._values[index])

    get.__name__ = spec.predicate_name
    return property(get, doc=f"Whether '{spec.name}' is truthy.")


def _takes_no_arguments(func: Callable) -> bool:
    """True when `func` can be called with nothing but self."""
    try:
        parameters = list(inspect.signature(func).parameters.values())
    except (TypeError, ValueError):
        return False
    # The first parameter receives self; *args absorbs it as well.
    if not parameters or parameters[0].kind in (
        inspect.Parameter.KEYWORD_ONLY,
        inspect.Parameter.VAR_KEYWORD,
    ):
        return False
    required = [
        p for p in parameters[1:]
        if p.default is inspect.Parameter.empty
        and p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    ]
    return not required


def _discover_derived(namespace: Mapping, accessor_names: frozenset) -> Tuple[str, ...]:
    derived = []
    for name, member in namespace.items():
        if name.startswith("_") or name in accessor_names or name in HOUSEKEEPING_MEMBERS:
            continue
        if isinstance(member, property):
            derived.append(name)
        elif inspect.isfunction(member) and _takes_no_arguments(member):
            derived.append(name)
    return tuple(derived)


def _body_namespace(body: Any) -> Tuple[Dict[str, Any], Tuple[type, ...]]:
    """Split a body into members to copy and capability bases to include."""
    if body is None:
        return {}, ()
    if isinstance(body, Mapping):
        return dict(body), ()
    if isinstance(body, type):
        namespace = {
            key: value for key, value in vars(body).items()
            if key not in _BODY_ONLY_ENTRIES and not inspect.ismemberdescriptor(value)
        }
        bases = tuple(
            base for base in body.__bases__
            if base is not object and base is not ImmutableStruct
        )
        return namespace, bases
    raise TypeError(f"Struct body must be a class or a mapping, got {type(body).__name__}")


def _caller_module(depth: int = 2) -> str:
    try:
        return sys._getframe(depth).f_globals.get("__name__", "__main__")
    except (AttributeError, ValueError):
        return "__main__"


def define_struct(
    *attributes: Any,
    body: Any = None,
    name: Optional[str] = None,
    module: Optional[str] = None,
) -> type:
    """
    Create a new immutable struct type.

    Args:
        *attributes:
            Ordered attribute declarations. "foo" is a plain attribute,
            "foo?" a boolean one and ["foo"] a collection one.
        body:
            Optional class (or mapping) whose members are added to the new
            type. Its bases other than object are mixed in after
            ImmutableStruct, so they add members but do not replace the
            struct's own. Overriding to_h or to_hash also overrides to_dict.
        name:
            Class name; defaults to the body's name or "ImmutableStruct".
        module:
            Value for __module__; defaults to the calling module.

    Returns:
        A subclass of ImmutableStruct

    Raises:
        InvalidSpecification: If the attribute list is empty or malformed
    """
    specs = parse_attribute_specs(attributes)
    namespace, capabilities = _body_namespace(body)

    # to_h and to_hash delegate to to_dict, so an override under any of the
    # three names becomes to_dict.
    if "to_dict" not in namespace:
        for alias in DICT_VIEW_NAMES[1:]:
            if alias in namespace:
                namespace["to_dict"] = namespace[alias]
                break

    # Mixins come after the struct base in the MRO and cannot replace its
    # constructor, equality or hashing.
    struct_bases = tuple(base for base in capabilities if issubclass(base, ImmutableStruct))
    mixins = tuple(base for base in capabilities if not issubclass(base, ImmutableStruct))
    bases = (struct_bases or (ImmutableStruct,)) + mixins

    accessors: Dict[str, property] = {}
    for index, spec in enumerate(specs):
        accessors[spec.name] = _value_accessor(index, spec)
        if spec.kind is AttributeKind.BOOLEAN:
            accessors[spec.predicate_name] = _predicate_accessor(index, spec)

    for accessor_name in accessors:
        if accessor_name in namespace:
            warnings.warn(
                f"Body member {accessor_name!r} shadows the attribute accessor of the same name",
                UserWarning,
                stacklevel=2,
            )

    if name is None:
        name = body.__name__ if isinstance(body, type) else "ImmutableStruct"
    if module is None:
        module = _caller_module()

    members: Dict[str, Any] = dict(accessors)
    members.update(namespace)
    members["__slots__"] = ()
    members["__module__"] = module
    members["__qualname__"] = body.__qualname__ if isinstance(body, type) else name
    members["__struct_attributes__"] = specs
    members["__struct_derived__"] = _discover_derived(namespace, frozenset(accessors))

    return types.new_class(
        name,
        bases,
        exec_body=lambda ns: ns.update(members),
    )


def immutable_struct(*attributes: Any) -> Callable[[type], type]:
    """
    Class decorator form of define_struct().

        @immutable_struct("name", "minor?")
        class Person:
            def greeting(self):
                return f"Hello {self.name}"

    The attribute list is checked when the decorator is created.
    """
    parse_attribute_specs(attributes)

    def wrap(cls: type) -> type:
        return define_struct(*attributes, body=cls, module=cls.__module__)

    return wrap
