"""
Serialization helpers for struct instances.

Encodes through the intermediate dict produced by to_dict(), so derived
members and any body override of to_dict() are honoured. Nested struct
instances are converted recursively.

Decoding goes through StructType.coerce(), which ignores keys that are not
attributes (such as "minor?" or derived values written by the encoder).
"""
from __future__ import annotations

import json
from typing import Any, Dict, Type, TypeVar

import yaml

from immutable_struct.struct import ImmutableStruct

S = TypeVar("S", bound=ImmutableStruct)


def _plain(value: Any) -> Any:
    if isinstance(value, ImmutableStruct):
        return struct_to_dict(value)
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return value


def struct_to_dict(instance: ImmutableStruct) -> Dict[str, Any]:
    if not isinstance(instance, ImmutableStruct):
        raise TypeError(f"Unsupported struct type: {type(instance)}")
    return {key: _plain(value) for key, value in instance.to_dict().items()}


def struct_to_json(instance: ImmutableStruct) -> str:
    return json.dumps(struct_to_dict(instance), sort_keys=True)


def struct_from_json(struct_type: Type[S], s: str) -> S:
    d = json.loads(s)
    return struct_type.coerce(d)


def struct_to_yaml(instance: ImmutableStruct) -> str:
    try:
        return yaml.safe_dump(struct_to_dict(instance))
    except yaml.representer.RepresenterError as e:
        raise TypeError(f"Cannot encode {type(instance).__name__} as YAML: {e}") from e


def struct_from_yaml(struct_type: Type[S], s: str) -> S:
    d = yaml.safe_load(s)
    return struct_type.coerce(d)
