#  -*- coding: utf-8 -*-
"""
Base class for value objects defined by their bean properties.

Subclasses only declare their properties; equality, hashing, rendering and
deep copying are derived from them::

    class Address(Bean):
        street: str = ''
        city: str = ''

    class Person(Bean):
        name: str = ''
        address: Address | None = None

    alice = Person(name='Alice', address=Address(city='Delft'))
    repr(alice)    # Person{name="Alice", address=Address{street="", city="Delft"}}
    alice == alice.clone()    # True

Cyclic object graphs are supported by every derived operation.
"""

from __future__ import annotations

from reflecta.cache import properties_of
from reflecta.operations import deep_clone, reflective_deepcopy, reflective_eq, reflective_hash
from reflecta.strings import reflective_repr

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, Self


class Bean:
    """
    Value object whose identity is the set of its readable property values.

    Parameters
    ----------
    **values
        Initial property values.

    Raises
    ------
    ValueError
        If a keyword does not name a property.
    AttributeError
        If a named property is not writable.
    """

    def __init__(self, **values: Any) -> None:

        properties = properties_of(type(self))

        for name, value in values.items():

            prop = properties.get(name)

            if prop is None:
                raise ValueError(f"{type(self).__name__} has no property named {name!r}")

            if not prop.write(self, value):
                raise AttributeError(f"Property {name!r} of {type(self).__name__} is not writable")

    # ========== ========== ========== ========== ========== special methods
    __eq__ = reflective_eq
    __hash__ = reflective_hash
    __repr__ = reflective_repr
    __deepcopy__ = reflective_deepcopy

    # ========== ========== ========== ========== ========== public methods
    def clone(self) -> Self:
        """Deep copy through the writable properties."""
        return deep_clone(self)


__all__ = [
    "Bean",
]
