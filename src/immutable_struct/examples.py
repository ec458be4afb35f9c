"""
Example struct types.

Location and Person show the three attribute kinds, body methods, an
alternate constructor and a nested struct value.
"""
from typing import List, Sequence

from immutable_struct.struct import define_struct, immutable_struct


Location = define_struct("city", "country", name="Location")


@immutable_struct("name", "minor?", "location", ["aliases"])
class Person:
    """A person known by one name and any number of aliases."""

    def nick_name(self):
        return "bob"

    def greet(self, other):
        return f"Hello {other}, I am {self.name}"

    @property
    def alias_count(self):
        return len(self.aliases)

    @classmethod
    def from_row(cls, row: Sequence):
        """Alternate constructor from a (name, city, *aliases) row."""
        name, city, *aliases = row
        return cls(name=name, location=Location(city=city), aliases=aliases)


def build_example_people() -> List[Person]:
    dc = Location(city="Washington", country="US")
    return [
        Person(name="Dave", location=dc, minor=False),
        Person(name="Rudy", minor="ayup", aliases=["Rudyard", "Roozoola"]),
        Person.from_row(["Amelia", "London", "Millie"]),
    ]
