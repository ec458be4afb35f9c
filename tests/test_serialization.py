"""
Tests for JSON/YAML encoding of struct instances.

Encoding goes through to_dict(), so derived values appear in the output
and are ignored again when decoding.
"""

import json

import pytest
import yaml
from immutable_struct import define_struct, immutable_struct
from immutable_struct.serialization import (
    struct_to_dict,
    struct_to_json,
    struct_from_json,
    struct_to_yaml,
    struct_from_yaml,
)


Address = define_struct("street", "city", name="Address")


@immutable_struct("name", "member?", "address", ["tags"])
class Customer:
    def display_name(self):
        return self.name.title()


def build_sample_customer() -> Customer:
    return Customer(
        name="ada lovelace",
        member=True,
        address=Address(street="1 Analytical Way", city="London"),
        tags=["vip", "engine"],
    )


def test_struct_to_dict_converts_nested_structs():
    data = struct_to_dict(build_sample_customer())
    assert data == {
        "name": "ada lovelace",
        "member": True,
        "member?": True,
        "address": {"street": "1 Analytical Way", "city": "London"},
        "tags": ["vip", "engine"],
        "display_name": "Ada Lovelace",
    }


def test_struct_to_dict_inside_collections():
    Group = define_struct(["members"])
    group = Group(members=[Address(city="Paris"), {"inner": Address(city="Rome")}])
    assert struct_to_dict(group) == {
        "members": [
            {"street": None, "city": "Paris"},
            {"inner": {"street": None, "city": "Rome"}},
        ],
    }


def test_struct_to_dict_rejects_other_values():
    with pytest.raises(TypeError):
        struct_to_dict({"name": "not a struct"})


def test_json_output_is_sorted():
    text = struct_to_json(Address(street="Main", city="Springfield"))
    assert text == '{"city": "Springfield", "street": "Main"}'


def test_json_roundtrip():
    customer = Customer(name="grace", member=False, tags=["navy"])
    restored = struct_from_json(Customer, struct_to_json(customer))
    assert restored == customer


def test_yaml_roundtrip():
    customer = Customer(name="grace", member="yes", tags=["navy"])
    yaml_str = struct_to_yaml(customer)
    assert yaml.safe_load(yaml_str)["display_name"] == "Grace"
    restored = struct_from_yaml(Customer, yaml_str)
    assert restored == customer


def test_nested_struct_decodes_as_mapping():
    restored = struct_from_json(Customer, struct_to_json(build_sample_customer()))
    assert restored.address == {"street": "1 Analytical Way", "city": "London"}
    assert Address.coerce(restored.address) == build_sample_customer().address


def test_unencodable_value():
    Holder = define_struct("thing")
    with pytest.raises(TypeError):
        struct_to_json(Holder(thing=object()))
    with pytest.raises(TypeError):
        struct_to_yaml(Holder(thing=object()))


def test_decoding_non_mapping_fails():
    from immutable_struct import CoercionFailure

    with pytest.raises(CoercionFailure):
        struct_from_json(Address, json.dumps(["not", "a", "mapping"]))
