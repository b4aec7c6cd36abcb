#  -*- coding: utf-8 -*-
"""
Test suite for the Bean base class and the configuration beans.

Tests cover:
- Construction from keyword arguments and its errors
- Equality, hashing and set membership derived from property values
- repr through reflect, cloning and copy.deepcopy
- Cyclic graphs of beans
- RenderOptions and DisplaySettings as beans
"""

from __future__ import annotations

import copy

import pytest

from typing import Final

from reflecta.bean import Bean
from reflecta.config import DisplaySettings, RenderOptions


# ========== ========== ========== ========== Fixtures
class Address(Bean):
    street: str = ''
    city: str = ''


class Person(Bean):
    name: str = ''
    address: Address | None = None
    friends: list | None = None


class Employee(Person):
    employer: str = ''


class Node(Bean):
    name: str = ''
    next: Node | None = None


class Identified(Bean):
    identifier: Final[str] = 'fixed'


@pytest.fixture
def alice() -> Person:
    """A person with an address."""
    return Person(name='Alice', address=Address(street='Main Street', city='Delft'))


# ========== ========== ========== ========== Test construction
class TestConstruction:
    """Test keyword construction."""

    def test_keywords(self, alice: Person) -> None:
        # Keywords are written to the properties
        assert alice.name == 'Alice'
        assert alice.address.city == 'Delft'

    def test_defaults(self) -> None:
        # Unspecified properties keep their defaults
        person = Person()

        assert person.name == ''
        assert person.address is None

    def test_inherited_properties(self) -> None:
        # Base class properties are accepted
        employee = Employee(name='Bob', employer='ACME')

        assert (employee.name, employee.employer) == ('Bob', 'ACME')

    def test_unknown_keyword(self) -> None:
        # Keywords must name a property
        with pytest.raises(ValueError, match='no property named'):
            Person(nickname='Al')

    def test_read_only_keyword(self) -> None:
        # Read-only properties cannot be initialised
        with pytest.raises(AttributeError, match='not writable'):
            Identified(identifier='other')


# ========== ========== ========== ========== Test equality
class TestEquality:
    """Test equality and hashing."""

    def test_equal_values(self, alice: Person) -> None:
        # Equal property values make equal beans
        other = Person(name='Alice', address=Address(street='Main Street', city='Delft'))

        assert alice == other
        assert hash(alice) == hash(other)

    def test_different_values(self, alice: Person) -> None:
        # Any differing value breaks equality
        other = Person(name='Alice', address=Address(street='Main Street', city='Leiden'))

        assert alice != other

    def test_other_types(self, alice: Person) -> None:
        # Unrelated values are never equal
        assert alice != 5
        assert alice != 'Alice'
        assert alice != Address()
        assert alice is not None

    def test_subclass_with_more_properties(self) -> None:
        # Extra properties make beans unequal, symmetrically
        person, employee = Person(name='Bob'), Employee(name='Bob')

        assert person != employee
        assert employee != person

    def test_sets(self, alice: Person) -> None:
        # Equal beans collapse in sets
        beans = {alice, Person(name='Alice', address=Address(street='Main Street', city='Delft')), Person()}

        assert len(beans) == 2

    def test_cycle(self) -> None:
        # Cyclic beans compare and hash
        first, second = Node(name='a'), Node(name='a')
        first.next, second.next = first, second

        assert first == second
        assert hash(first) == hash(second)


# ========== ========== ========== ========== Test repr
class TestRepr:
    """Test the reflective repr."""

    def test_repr(self, alice: Person) -> None:
        # Nested beans, None skipped
        assert repr(alice) == 'Person{name="Alice", address=Address{street="Main Street", city="Delft"}}'

    def test_repr_with_list(self) -> None:
        # Lists render with the repr of their elements
        person = Person(name='Bob', friends=[Person(name='Carol')])

        assert repr(person) == 'Person{name="Bob", friends=[Person{name="Carol"}]}'

    def test_repr_empty(self) -> None:
        # Defaults are rendered
        assert repr(Address()) == 'Address{street="", city=""}'


# ========== ========== ========== ========== Test cloning
class TestCloning:
    """Test clone and copy.deepcopy."""

    def test_clone(self, alice: Person) -> None:
        # Equal, independent copy
        clone = alice.clone()

        assert clone == alice
        assert clone is not alice
        assert clone.address is not alice.address

        clone.address.city = 'Leiden'
        assert alice.address.city == 'Delft'

    def test_deepcopy(self, alice: Person) -> None:
        # copy.deepcopy delegates to clone
        clone = copy.deepcopy(alice)

        assert clone == alice
        assert clone.address is not alice.address

    def test_clone_cycle(self) -> None:
        # The cycle is preserved
        node = Node(name='a')
        node.next = node

        clone = node.clone()

        assert clone is not node
        assert clone.next is clone

    def test_clone_list(self) -> None:
        # List elements are cloned
        person = Person(name='Bob', friends=[Person(name='Carol')])

        clone = person.clone()

        assert clone.friends == person.friends
        assert clone.friends[0] is not person.friends[0]


# ========== ========== ========== ========== Test configuration beans
class TestConfigurationBeans:
    """Test RenderOptions and DisplaySettings."""

    def test_render_options_defaults(self) -> None:
        # Defaults of reflect
        options = RenderOptions()

        assert options.separator == ', '
        assert (options.left_bracket, options.right_bracket) == ('{', '}')
        assert not options.include_nulls
        assert options.max_value_length == 128
        assert options.type_name_filter is None

    def test_value_semantics(self) -> None:
        # Options and settings compare by value
        assert RenderOptions(separator='; ') == RenderOptions(separator='; ')
        assert RenderOptions(separator='; ') != RenderOptions()
        assert DisplaySettings(console_width=80) == DisplaySettings(console_width=80)

    def test_clone_settings(self) -> None:
        # Settings can be cloned and changed independently
        settings = DisplaySettings(panel_border_style='green')
        clone = settings.clone()
        clone.panel_border_style = 'red'

        assert settings.panel_border_style == 'green'
