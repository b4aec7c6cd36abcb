#  -*- coding: utf-8 -*-
"""
Structural equality, hashing and deep cloning over bean properties.

The three operations walk the readable properties of an object (as found by
``reflecta.cache.properties_of``) and recurse into their values. Each one is
protected by its own thread-local ``RecursionGuard`` so cyclic object graphs
terminate:

- ``structural_equals`` treats a cycle that returns to a pair already under
  comparison as equal when it pairs the same two objects again;
- ``structural_hash`` contributes the constant ``1`` for a cycle;
- ``deep_clone`` returns the copy in progress for an object that refers back
  to one of its ancestors, so cycles are reproduced in the copy.

Values are classified before recursing:

Atomic values
    Registered immutable types (``str``, ``bytes``, numbers, enums,
    ``Path``, dates...), compared with ``==``, hashed natively and shared by
    clones. More types can be registered with ``register_atomic_type``.
Containers
    Mappings, sequences and sets are traversed element by element.
    ``numpy.ndarray`` compares with ``numpy.array_equal`` and clones with
    ``ndarray.copy``.
Value objects
    Objects defining their own ``__eq__`` are compared with ``==``.
Beans
    Objects with identity equality and at least one readable property are
    compared, hashed and cloned through their properties.
Opaque objects
    Objects with identity equality and no properties (locks, sockets...)
    keep identity equality and their native hash.

Classes may use ``reflective_eq``, ``reflective_hash`` and
``reflective_deepcopy`` directly as their ``__eq__``, ``__hash__`` and
``__deepcopy__``; they are then treated as beans, not as value objects.
"""

from __future__ import annotations

import copy
import datetime
import logging
import types
import uuid

from collections.abc import Mapping, MutableMapping, MutableSequence, MutableSet, Sequence, Set
from decimal import Decimal
from enum import Enum
from numbers import Number
from pathlib import PurePath

import numpy

from reflecta.cache import properties_of
from reflecta.guards import RecursionGuards
from reflecta.properties import TYPE_PROPERTY

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, Callable, Final, TypeVar


T = TypeVar('T')

logger = logging.getLogger(__name__)

HASH_MASK: Final[int] = (1 << 64) - 1
CYCLE_HASH: Final[int] = 1

_atomic_types: set[type] = set()


# ========== ========== ========== ========== ========== atomic types
def register_atomic_type(atomic_type: type) -> None:
    """
    Register an immutable type whose instances are compared with ``==``,
    hashed natively and shared (never copied) by ``deep_clone``.

    Raises
    ------
    TypeError
        If the type is a container.
    """
    if issubclass(atomic_type, (list, dict, set, tuple, numpy.ndarray)):
        raise TypeError(f'Cannot register {atomic_type} as atomic type')

    _atomic_types.add(atomic_type)


def remove_atomic_type(atomic_type: type) -> None:
    """Remove a type from the atomic registry. Removing an unknown type is a no-op."""
    _atomic_types.discard(atomic_type)


def is_atomic(value: Any) -> bool:
    """Whether a value is ``None`` or an instance of a registered atomic type."""
    return value is None or isinstance(value, tuple(_atomic_types))


for _atomic_type in (bool, Number, numpy.generic, str, bytes, Enum, type, range, slice,
                     datetime.date, datetime.time, datetime.timedelta, datetime.tzinfo,
                     PurePath, uuid.UUID, types.FunctionType, types.BuiltinFunctionType,
                     types.MethodType, types.ModuleType):
    register_atomic_type(_atomic_type)

del _atomic_type


# ========== ========== ========== ========== ========== equality
def structural_equals(first: Any, second: Any) -> bool:
    """
    Compare two objects by the values of their readable properties.

    Two beans are equal when one is an instance of the other's type, both
    expose the same property names and every pair of property values is
    structurally equal. ``Decimal`` values compare numerically, so
    ``Decimal("0")`` equals ``Decimal("0.00")``.

    Parameters
    ----------
    first, second : object

    Returns
    -------
    bool
    """
    if first is second:
        return True

    if first is None or second is None:
        return False

    if not _is_bean(first):
        return _values_equal(first, second)

    guard = RecursionGuards.EQUALS

    if guard.in_progress(first):
        return guard.get(first) is second

    if not (isinstance(second, type(first)) or isinstance(first, type(second))):
        return False

    with guard.visiting(first, second):
        first_values = _readable_values(first)
        second_values = _readable_values(second)

        if first_values.keys() != second_values.keys():
            return False

        return all(_values_equal(value, second_values[name]) for name, value in first_values.items())


def _values_equal(first: Any, second: Any) -> bool:

    if first is second:
        return True

    if first is None or second is None:
        return False

    if isinstance(first, numpy.ndarray) or isinstance(second, numpy.ndarray):
        return _arrays_equal(first, second)

    if isinstance(first, Decimal) and isinstance(second, Decimal):
        return first.compare(second) == 0

    if isinstance(first, Mapping) and isinstance(second, Mapping):
        return _guarded_equals(first, second, _mappings_equal)

    if _is_sequence(first) and _is_sequence(second):
        return _guarded_equals(first, second, _sequences_equal)

    if _is_bean(first):
        return structural_equals(first, second)

    return bool(first == second)


def _guarded_equals(first: Any, second: Any, compare: Callable[[Any, Any], bool]) -> bool:
    guard = RecursionGuards.EQUALS

    if guard.in_progress(first):
        return guard.get(first) is second

    with guard.visiting(first, second):
        return compare(first, second)


def _mappings_equal(first: Mapping, second: Mapping) -> bool:
    if first.keys() != second.keys():
        return False
    return all(_values_equal(value, second[key]) for key, value in first.items())


def _sequences_equal(first: Sequence, second: Sequence) -> bool:
    if isinstance(first, tuple) != isinstance(second, tuple) or len(first) != len(second):
        return False
    return all(_values_equal(a, b) for a, b in zip(first, second))


def _arrays_equal(first: Any, second: Any) -> bool:
    if not (isinstance(first, numpy.ndarray) and isinstance(second, numpy.ndarray)):
        return False
    return first.shape == second.shape and bool(numpy.array_equal(first, second))


# ========== ========== ========== ========== ========== hash
def structural_hash(value: Any) -> int:
    """
    Hash an object consistently with ``structural_equals``.

    The hash of a bean starts at 1 and folds ``31 * h + hash(v)`` over its
    readable property values in discovery order, masked to 64 bits. A value
    that cycles back to an object whose hash is in progress contributes 1.

    Parameters
    ----------
    value : object

    Returns
    -------
    int
        Non-negative hash.
    """
    if value is None:
        return 0

    if isinstance(value, numpy.ndarray):
        return _guarded_hash(value, _array_hash)

    if isinstance(value, Mapping):
        return _guarded_hash(value, _mapping_hash)

    if _is_sequence(value):
        return _guarded_hash(value, _sequence_hash)

    if isinstance(value, Set):
        return _guarded_hash(value, _set_hash)

    if _is_bean(value) or type(value).__hash__ is None:
        return _guarded_hash(value, _bean_hash)

    return hash(value) & HASH_MASK


def _guarded_hash(value: Any, compute: Callable[[Any], int]) -> int:
    guard = RecursionGuards.HASH

    if guard.in_progress(value):
        return CYCLE_HASH

    with guard.visiting(value):
        return compute(value)


def _combine(values: Any) -> int:
    result = 1
    for item in values:
        result = (31 * result + structural_hash(item)) & HASH_MASK
    return result


def _bean_hash(bean: Any) -> int:
    return _combine(_readable_values(bean).values())


def _sequence_hash(sequence: Sequence) -> int:
    return _combine(sequence)


def _array_hash(array: numpy.ndarray) -> int:
    return (31 * hash(array.shape) + _combine(array.ravel().tolist())) & HASH_MASK


def _mapping_hash(mapping: Mapping) -> int:
    # order-independent, as mapping equality is
    result = 0
    for key, item in mapping.items():
        result = (result + (structural_hash(key) ^ structural_hash(item))) & HASH_MASK
    return result


def _set_hash(items: Set) -> int:
    result = 0
    for item in items:
        result = (result + structural_hash(item)) & HASH_MASK
    return result


# ========== ========== ========== ========== ========== clone
def deep_clone(value: T) -> T:
    """
    Deep copy an object through its properties.

    The shallow copy is made with ``copy.copy`` and registered as the copy
    of ``value`` before any property value is copied, so a reference back
    to ``value`` from inside its own graph becomes a reference to the copy:
    ``clone.next is clone`` for ``a.next is a``. Siblings sharing an object
    that is not an ancestor receive separate copies. Every property that is both
    readable and writable is then written with a deep copy of its value.
    The type-identity property is never copied.

    Property values are copied as follows: atomic values are shared,
    containers are rebuilt with copied elements, arrays are copied with
    ``ndarray.copy``, objects with their own ``__deepcopy__`` go through
    ``copy.deepcopy``, other objects with writable properties are cloned
    recursively; anything else is shared.

    Parameters
    ----------
    value : object

    Returns
    -------
    object
        The copy, or ``value`` itself if it is atomic.
    """
    if is_atomic(value):
        return value

    guard = RecursionGuards.CLONE

    if guard.in_progress(value):
        return guard.get(value)

    if isinstance(value, numpy.ndarray):
        return value.copy()

    if isinstance(value, (Mapping, Sequence, Set)):
        return _clone_container(value)

    clone = copy.copy(value)

    with guard.visiting(value, clone):
        for name, prop in properties_of(value).items():
            if name == TYPE_PROPERTY or not (prop.readable and prop.writable):
                continue
            prop.write(clone, _clone_value(prop.read(value)))

    return clone


def _clone_value(value: Any) -> Any:

    if is_atomic(value):
        return value

    if RecursionGuards.CLONE.in_progress(value):
        return RecursionGuards.CLONE.get(value)

    if isinstance(value, (numpy.ndarray, Mapping, Sequence, Set)):
        return deep_clone(value)

    deepcopy = getattr(type(value), '__deepcopy__', None)

    if deepcopy is reflective_deepcopy:
        return deep_clone(value)

    if deepcopy is not None:
        return copy.deepcopy(value)

    if _is_reflectable(value):
        return deep_clone(value)

    return value


def _clone_container(container: Any) -> Any:
    guard = RecursionGuards.CLONE

    if isinstance(container, MutableMapping):
        clone = copy.copy(container)
        with guard.visiting(container, clone):
            for key, item in container.items():
                clone[key] = _clone_value(item)
        return clone

    if isinstance(container, MutableSequence):
        clone = copy.copy(container)
        with guard.visiting(container, clone):
            for index, item in enumerate(container):
                clone[index] = _clone_value(item)
        return clone

    if isinstance(container, MutableSet):
        clone = copy.copy(container)
        with guard.visiting(container, clone):
            clone.clear()
            for item in container:
                clone.add(_clone_value(item))
        return clone

    if isinstance(container, tuple):
        items = [_clone_value(item) for item in container]
        if hasattr(container, '_fields'):
            return type(container)._make(items)
        return type(container)(items)

    if isinstance(container, frozenset):
        return type(container)(_clone_value(item) for item in container)

    # read-only views and other immutable containers are shared
    return container


# ========== ========== ========== ========== ========== dunder implementations
def reflective_eq(self: Any, other: Any) -> bool:
    """``__eq__`` implementation based on ``structural_equals``."""
    return structural_equals(self, other)


def reflective_hash(self: Any) -> int:
    """``__hash__`` implementation based on ``structural_hash``."""
    return structural_hash(self)


def reflective_deepcopy(self: T, memo: dict[int, Any] | None = None) -> T:
    """``__deepcopy__`` implementation based on ``deep_clone``."""
    return deep_clone(self)


# ========== ========== ========== ========== ========== helpers
def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray, range))


def _is_bean(value: Any) -> bool:
    if is_atomic(value) or isinstance(value, (numpy.ndarray, Mapping, Sequence, Set)):
        return False
    equality = type(value).__eq__

    if equality is reflective_eq:
        return True

    # Opaque objects keep identity equality
    return equality is object.__eq__ and any(
        prop.readable and name != TYPE_PROPERTY for name, prop in properties_of(value).items())


def _is_reflectable(value: Any) -> bool:
    return any(prop.readable and prop.writable for prop in properties_of(value).values())


def _readable_values(bean: Any) -> dict[str, Any]:
    return {
        name: prop.read(bean)
        for name, prop in properties_of(bean).items()
        if prop.readable and name != TYPE_PROPERTY
    }


__all__ = [
    "register_atomic_type",
    "remove_atomic_type",
    "is_atomic",
    "structural_equals",
    "structural_hash",
    "deep_clone",
    "reflective_eq",
    "reflective_hash",
    "reflective_deepcopy",
]
