#  -*- coding: utf-8 -*-
"""
Test suite for structural equality, hashing and deep cloning.

Tests cover:
- structural_equals: identity, type compatibility, cycles, decimals,
  arrays and containers
- structural_hash: consistency with equality, cycles, 64-bit range
- deep_clone: independence, cycles, custom __deepcopy__, containers and
  the type-identity property
- Atomic type registry
"""

from __future__ import annotations

import copy
import dataclasses
import threading

import numpy as np
import pytest

from collections import namedtuple
from decimal import Decimal
from pathlib import Path

from reflecta.operations import (register_atomic_type,
                                 remove_atomic_type,
                                 is_atomic,
                                 structural_equals,
                                 structural_hash,
                                 deep_clone,
                                 reflective_eq,
                                 reflective_hash,
                                 reflective_deepcopy)


# ========== ========== ========== ========== Fixtures
class Node:
    name: str = ''
    next: Node | None = None
    children: list | None = None


class SpecialNode(Node):
    pass


class WeightedNode(Node):
    weight: int = 0


class Price:
    amount: Decimal | None = None
    currency: str = 'EUR'


class Matrix:
    values: np.ndarray | None = None


class Pair:
    left: object = None
    right: object = None


class Typed:
    label: str = ''

    def get_class(self) -> type:
        return type(self)

    def set_class(self, value: type) -> None:
        raise AssertionError('the type-identity property must not be written')


class Resource:

    def __init__(self, copied: bool = False) -> None:
        self._copied = copied

    def is_copied(self) -> bool:
        return self._copied

    def __deepcopy__(self, memo: dict) -> Resource:
        return Resource(copied=True)


class Reflective:
    value: int = 0

    __eq__ = reflective_eq
    __hash__ = reflective_hash
    __deepcopy__ = reflective_deepcopy


class Money:
    amount: int = 0


class Holder:

    def __init__(self, lock: object) -> None:
        self.lock = lock


class Blank:

    __eq__ = reflective_eq
    __hash__ = reflective_hash


@dataclasses.dataclass
class MutablePoint:
    x: int
    y: int


Coordinates = namedtuple('Coordinates', ['x', 'y'])


def node(name: str, next: Node | None = None, children: list | None = None) -> Node:
    """Create a Node with the given property values."""
    result = Node()
    result.name = name
    result.next = next
    result.children = children
    return result


# ========== ========== ========== ========== Test structural_equals
class TestStructuralEquals:
    """Test equality over bean properties."""

    def test_identity(self) -> None:
        # The same object is equal to itself
        obj = node('a')

        assert structural_equals(obj, obj)

    def test_equal_properties(self) -> None:
        # Distinct objects with equal values
        assert structural_equals(node('a', node('b')), node('a', node('b')))
        assert not structural_equals(node('a', node('b')), node('a', node('c')))

    def test_none(self) -> None:
        # None equals only None
        assert structural_equals(None, None)
        assert not structural_equals(node('a'), None)
        assert not structural_equals(None, node('a'))

    def test_subclass_without_extra_properties(self) -> None:
        # Compatible types compare symmetrically
        special = SpecialNode()
        special.name = 'a'

        assert structural_equals(node('a'), special)
        assert structural_equals(special, node('a'))

    def test_subclass_with_extra_properties(self) -> None:
        # Different property sets are never equal, in both directions
        weighted = WeightedNode()
        weighted.name = 'a'

        assert not structural_equals(node('a'), weighted)
        assert not structural_equals(weighted, node('a'))

    def test_unrelated_types(self) -> None:
        # Type compatibility is required
        assert not structural_equals(node('a'), Pair())
        assert not structural_equals(node('a'), {'name': 'a'})

    def test_self_cycle(self) -> None:
        # Cyclic graphs terminate
        first, second = node('a'), node('a')
        first.next, second.next = first, second

        assert structural_equals(first, first)
        assert structural_equals(first, second)

    def test_two_node_cycle(self) -> None:
        # Cycles through several objects terminate
        a1, a2 = node('a'), node('b')
        b1, b2 = node('a'), node('b')
        a1.next, a2.next = a2, a1
        b1.next, b2.next = b2, b1

        assert structural_equals(a1, b1)

        b2.name = 'c'
        assert not structural_equals(a1, b1)

    def test_decimal_numeric_value(self) -> None:
        # Differently scaled decimals are equal
        first, second = Price(), Price()
        first.amount, second.amount = Decimal('0'), Decimal('0.00')

        assert structural_equals(first, second)

        second.amount = Decimal('0.01')
        assert not structural_equals(first, second)

    def test_arrays(self) -> None:
        # Arrays compare by shape and elements
        first, second = Matrix(), Matrix()
        first.values = np.array([[1.0, 2.0], [3.0, 4.0]])
        second.values = first.values.copy()

        assert structural_equals(first, second)

        second.values = first.values.ravel()
        assert not structural_equals(first, second)

    def test_nested_containers(self) -> None:
        # Elements of lists and mappings are compared structurally
        first = node('a', children=[node('b'), {'key': node('c')}])
        second = node('a', children=[node('b'), {'key': node('c')}])

        assert structural_equals(first, second)

        second.children[1]['key'].name = 'd'
        assert not structural_equals(first, second)

    def test_mapping_order(self) -> None:
        # Mappings ignore insertion order
        first = node('a', children=[{'x': 1, 'y': 2}])
        second = node('a', children=[{'y': 2, 'x': 1}])

        assert structural_equals(first, second)

    def test_list_and_tuple(self) -> None:
        # Sequence kinds must match
        first, second = Pair(), Pair()
        first.left, second.left = [1, 2], (1, 2)

        assert not structural_equals(first, second)

    def test_value_objects(self) -> None:
        # Objects with their own __eq__ are compared with ==
        first, second = Pair(), Pair()
        first.left, second.left = MutablePoint(1, 2), MutablePoint(1, 2)

        assert structural_equals(first, second)

    def test_opaque_objects(self) -> None:
        # Objects without properties keep identity equality
        assert not structural_equals(object(), object())
        assert not structural_equals(Holder(threading.Lock()), Holder(threading.Lock()))

        lock = threading.Lock()
        assert structural_equals(Holder(lock), Holder(lock))

    def test_reflective_without_properties(self) -> None:
        # Reflective classes compare structurally even without properties
        assert structural_equals(Blank(), Blank())
        assert Blank() == Blank()


# ========== ========== ========== ========== Test structural_hash
class TestStructuralHash:
    """Test hashing consistent with equality."""

    def test_equal_objects_equal_hashes(self) -> None:
        # Hash is derived from property values
        assert structural_hash(node('a', node('b'))) == structural_hash(node('a', node('b')))

    def test_range(self) -> None:
        # Non-negative, 64 bits
        for value in (node('a'), -1, 'text', None, [node('x'), -5]):
            result = structural_hash(value)
            assert 0 <= result < 2 ** 64

    def test_none(self) -> None:
        # None hashes to 0
        assert structural_hash(None) == 0

    def test_decimal(self) -> None:
        # Consistent with numeric decimal equality
        first, second = Price(), Price()
        first.amount, second.amount = Decimal('0'), Decimal('0.00')

        assert structural_hash(first) == structural_hash(second)

    def test_cycle(self) -> None:
        # Cyclic graphs terminate
        first, second = node('a'), node('a')
        first.next, second.next = first, second

        assert structural_hash(first) == structural_hash(second)

    def test_mapping_order(self) -> None:
        # Order-independent, as mapping equality
        assert structural_hash({'x': 1, 'y': 2}) == structural_hash({'y': 2, 'x': 1})

    def test_arrays(self) -> None:
        # Equal arrays hash equally
        assert structural_hash(np.arange(6.0)) == structural_hash(np.arange(6.0))
        assert structural_hash(np.arange(6.0)) != structural_hash(np.arange(6.0).reshape(2, 3))

    def test_unhashable_value_objects(self) -> None:
        # Types without __hash__ are hashed through their properties
        assert structural_hash(MutablePoint(1, 2)) == structural_hash(MutablePoint(1, 2))

    def test_opaque_objects(self) -> None:
        # Objects without properties keep their native hash
        lock = threading.Lock()

        assert structural_hash(lock) == hash(lock) & (2 ** 64 - 1)
        assert structural_hash(Holder(lock)) == structural_hash(Holder(lock))
        assert hash(Blank()) == hash(Blank())


# ========== ========== ========== ========== Test deep_clone
class TestDeepClone:
    """Test deep copying through properties."""

    def test_independent_copy(self) -> None:
        # The clone is equal but shares no mutable state
        original = node('a', node('b'), children=[node('c')])
        clone = deep_clone(original)

        assert clone is not original
        assert structural_equals(clone, original)
        assert clone.next is not original.next
        assert clone.children is not original.children
        assert clone.children[0] is not original.children[0]

        clone.next.name = 'changed'
        assert original.next.name == 'b'

    def test_atoms_are_shared(self) -> None:
        # Immutable values are not copied
        text = 'some text'
        original = node(text)

        assert deep_clone(original).name is text
        assert deep_clone(text) is text
        assert deep_clone(None) is None

    def test_self_cycle(self) -> None:
        # The cycle is preserved, not unrolled
        original = node('a')
        original.next = original

        clone = deep_clone(original)

        assert clone is not original
        assert clone.next is clone

    def test_two_node_cycle(self) -> None:
        # References back to ancestors point to their copies
        first, second = node('a'), node('b')
        first.next, second.next = second, first

        clone = deep_clone(first)

        assert clone.next is not second
        assert clone.next.next is clone

    def test_cycle_through_container(self) -> None:
        # Ancestors are found through lists as well
        original = node('a')
        original.children = [original]

        clone = deep_clone(original)

        assert clone.children[0] is clone

    def test_shared_siblings_are_copied_separately(self) -> None:
        # Only ancestors map to a single copy
        shared = node('shared')
        pair = Pair()
        pair.left = pair.right = shared

        clone = deep_clone(pair)

        assert clone.left is not shared
        assert structural_equals(clone.left, clone.right)

    def test_type_property_is_not_copied(self) -> None:
        # The type-identity property is skipped
        original = Typed()
        original.label = 'label'

        clone = deep_clone(original)

        assert clone.label == 'label'
        assert structural_equals(clone, original)

    def test_own_deepcopy(self) -> None:
        # Objects implementing __deepcopy__ are copied with copy.deepcopy
        pair = Pair()
        pair.left = Resource()

        clone = deep_clone(pair)

        assert clone.left.is_copied()
        assert not pair.left.is_copied()

    def test_arrays(self) -> None:
        # Arrays are copied
        original = Matrix()
        original.values = np.zeros(3)

        clone = deep_clone(original)
        clone.values[0] = 1.0

        assert original.values[0] == 0.0

    def test_namedtuple(self) -> None:
        # Tuples are rebuilt with cloned elements
        pair = Pair()
        pair.left = Coordinates(node('x'), 2)

        clone = deep_clone(pair)

        assert isinstance(clone.left, Coordinates)
        assert clone.left.x is not pair.left.x
        assert clone.left.x.name == 'x'
        assert clone.left.y == 2

    def test_containers(self) -> None:
        # Lists, dicts and sets at top level
        original = [node('a'), {'key': node('b')}, {1, 2}]

        clone = deep_clone(original)

        assert clone is not original
        assert clone[0] is not original[0]
        assert clone[1]['key'] is not original[1]['key']
        assert clone[2] == {1, 2} and clone[2] is not original[2]

    def test_non_reflectable_values_are_shared(self) -> None:
        # Objects without writable properties are shared
        marker = object()
        pair = Pair()
        pair.left = marker

        assert deep_clone(pair).left is marker


# ========== ========== ========== ========== Test dunder implementations
class TestReflectiveDunders:
    """Test classes using the reflective implementations directly."""

    def test_equality_and_hash(self) -> None:
        # Equal values, equal hashes, deduplicated in sets
        first, second = Reflective(), Reflective()

        assert first == second
        assert hash(first) == hash(second)
        assert len({first, second}) == 1

        second.value = 1
        assert first != second

    def test_nested_reflective_objects(self) -> None:
        # Classes using reflective_eq are beans, not value objects
        first, second = Pair(), Pair()
        first.left, second.left = Reflective(), Reflective()

        assert structural_equals(first, second)

    def test_deepcopy(self) -> None:
        # copy.deepcopy goes through deep_clone
        original = Reflective()
        original.value = 5

        clone = copy.deepcopy(original)

        assert clone is not original
        assert clone == original


# ========== ========== ========== ========== Test atomic registry
class TestAtomicTypes:
    """Test the atomic type registry."""

    def test_builtin_atoms(self) -> None:
        # Common immutable types are atomic
        for value in (None, 1, 1.5, True, 'text', b'bytes', Decimal('1'), Path('x'), np.float64(1.0)):
            assert is_atomic(value)

    def test_containers_are_not_atomic(self) -> None:
        # Containers and beans are traversed
        for value in ([], {}, set(), (), np.zeros(1), node('a')):
            assert not is_atomic(value)

    def test_register_and_remove(self) -> None:
        # Registered types are shared by clones
        original = Money()

        register_atomic_type(Money)
        try:
            assert is_atomic(original)
            assert deep_clone(original) is original
        finally:
            remove_atomic_type(Money)

        assert not is_atomic(original)
        assert deep_clone(original) is not original

    def test_register_container_raises(self) -> None:
        # Containers cannot be atomic
        with pytest.raises(TypeError):
            register_atomic_type(list)

    def test_remove_unknown(self) -> None:
        # Removing an unknown type is a no-op
        remove_atomic_type(Node)
