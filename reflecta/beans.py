#  -*- coding: utf-8 -*-
"""
Generic bean access: read and write properties of arbitrary objects by path.

Reading comes in two tiers. ``get_property_value`` raises
``PropertyNotFoundError`` when the path cannot be resolved, while
``find_property_value`` logs the miss at DEBUG level and returns a default.
Exceptions raised by the objects' own accessors always propagate.

Examples
--------
>>> class Point:
...     x: int = 0
...     y: int = 0
>>> point = Point()
>>> set_property_value(point, 'x', 3)
True
>>> get_property_value(point, 'x'), find_property_value(point, 'z', default=-1)
(3, -1)
"""

from __future__ import annotations

import logging

from collections.abc import Mapping

from reflecta.cache import properties_of, flush_caches
from reflecta.classes import create_new
from reflecta.errors import PropertyNotFoundError
from reflecta.paths import MISSING, PropertyPath, resolve
from reflecta.properties import BeanProperty, TYPE_PROPERTY

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, TypeVar


T = TypeVar('T')

logger = logging.getLogger(__name__)


def get_property_value(bean: Any, path: str | PropertyPath) -> Any:
    """
    Read the value a property path denotes.

    Parameters
    ----------
    bean : object
        The root object.
    path : str or PropertyPath
        Dotted/indexed path, e.g. ``"children[2].name"``.

    Returns
    -------
    object
        The value, which may legitimately be ``None``. Absent keys and
        out-of-range positions of an existing container also read as
        ``None``.

    Raises
    ------
    PropertyNotFoundError
        If a property named by the path does not exist or is not readable.
    ValueError
        If the path is malformed.
    """
    value = _read(bean, path)
    return None if value is MISSING else value


def find_property_value(bean: Any, path: str | PropertyPath, default: Any = None) -> Any:
    """
    Best-effort ``get_property_value``: returns ``default`` if the path cannot
    be resolved or denotes an absent key or position.
    """
    try:
        value = _read(bean, path)
    except (PropertyNotFoundError, ValueError) as error:
        logger.debug("%s", error)
        return default

    return default if value is MISSING else value


def _read(bean: Any, path: str | PropertyPath) -> Any:
    """Strict read; ``MISSING`` for absent elements of an existing container."""
    accessor = resolve(bean, path)

    if accessor is None:
        raise PropertyNotFoundError(bean, str(path))

    value = accessor.read(default=MISSING)

    if value is MISSING and accessor.property is not None:
        raise PropertyNotFoundError(bean, str(path))

    if value is MISSING:
        logger.debug('Property "%s" denotes no element of %s object.', path, type(bean).__name__)

    return value


def set_property_value(bean: Any, path: str | PropertyPath, value: Any) -> bool:
    """
    Write the value a property path denotes.

    Returns
    -------
    bool
        ``True`` if the value was written; ``False`` if the path cannot be
        resolved or its last segment is not writable.

    Raises
    ------
    ValueError
        If the path is malformed.
    """
    accessor = resolve(bean, path)

    if accessor is None:
        logger.debug('Property "%s" not found in %s object, value not written.', path, type(bean).__name__)
        return False

    return accessor.write(value)


def get_bean_properties(bean: Any) -> tuple[BeanProperty, ...]:
    """All properties of an object, in discovery order."""
    return tuple(properties_of(bean).values())


def get_property_values(bean: Any) -> dict[str, Any]:
    """
    Values of all readable properties of an object, in discovery order.

    The type-identity property is left out.
    """
    return {
        name: prop.read(bean)
        for name, prop in properties_of(bean).items()
        if prop.readable and name != TYPE_PROPERTY
    }


def create_bean(cls: type[T] | str, values: Mapping[str, Any] | None = None) -> T:
    """
    Instantiate a class through its no-argument constructor and write each of
    the given property values.

    Raises
    ------
    MissingClassError, InstantiationError
        If the class cannot be resolved or instantiated.
    PropertyNotFoundError
        If a value cannot be written.
    """
    bean = create_new(cls)

    for path, value in (values or {}).items():
        if not set_property_value(bean, path, value):
            raise PropertyNotFoundError(bean, path)

    return bean


__all__ = [
    "get_property_value",
    "find_property_value",
    "set_property_value",
    "get_bean_properties",
    "get_property_values",
    "create_bean",
    "flush_caches",
]
