#  -*- coding: utf-8 -*-
"""
Per-type cache of discovered bean properties.

Discovery is relatively expensive, so its result is cached per type. The
cache must never keep a class (or, through it, its module) alive, so entries
are keyed weakly by type and hold their ``PropertyMap`` through a weak
reference. A bounded queue of the most recently discovered maps keeps hot
entries strongly reachable; an entry whose map was reclaimed is silently
rediscovered on the next lookup.
"""

from __future__ import annotations

import inspect
import logging
import threading
import weakref

from collections import deque

from reflecta.errors import IntrospectionError
from reflecta.properties import FieldAccess, PropertyMap, ReflectedProperty, discover_properties

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, Callable


logger = logging.getLogger(__name__)

_EMPTY = PropertyMap()


class TypePropertyCache:
    """
    Thread-safe cache of ``PropertyMap`` per type.

    Parameters
    ----------
    retain : int, default 128
        Number of recently discovered maps held strongly.
    discover : callable, optional
        Discovery function, ``discover_properties`` by default.
    """

    def __init__(self, retain: int = 128, discover: Callable[[type], PropertyMap] = discover_properties) -> None:
        self._lock = threading.Lock()
        self._entries: weakref.WeakKeyDictionary[type, weakref.ref[PropertyMap]] = weakref.WeakKeyDictionary()
        self._retained: deque[PropertyMap] = deque(maxlen=retain)
        self._discover = discover

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for reference in self._entries.values() if reference() is not None)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(entries={len(self)}, retain={self._retained.maxlen})"

    # ========== ========== ========== ========== ========== public methods
    def properties_of(self, source: Any) -> PropertyMap:
        """
        Properties of a type, or of the type of an object.

        Never fails: a type that cannot be reflected has an empty map, and
        the failure is logged at WARNING level.

        Parameters
        ----------
        source : type or object or None
            ``None`` has no properties.

        Returns
        -------
        PropertyMap
        """
        if source is None:
            return _EMPTY

        cls = source if isinstance(source, type) else type(source)

        with self._lock:
            reference = self._entries.get(cls)
            properties = reference() if reference is not None else None

        if properties is not None:
            return properties

        properties = self._reflect(cls)

        with self._lock:
            # a concurrent lookup may have stored an equivalent map already
            reference = self._entries.get(cls)
            stored = reference() if reference is not None else None

            if stored is not None:
                return stored

            self._entries[cls] = weakref.ref(properties)
            self._retained.append(properties)

        return properties

    def flush(self) -> None:
        """Forget every cached entry."""
        with self._lock:
            self._entries.clear()
            self._retained.clear()
        logger.debug("Flushed %s", type(self).__name__)

    # ========== ========== ========== ========== ========== private methods
    def _reflect(self, cls: type) -> PropertyMap:
        try:
            return self._discover(cls)
        except IntrospectionError as error:
            logger.warning("Could not reflect properties of %s: %s", cls.__qualname__, error)
            return PropertyMap()


# ========== ========== ========== ========== ========== default cache
default_cache = TypePropertyCache()


def properties_of(source: Any) -> PropertyMap:
    """
    Properties of an object: the cached properties of its type, followed by
    its public undeclared instance attributes (sorted by name).

    Given a type, only the type properties are returned.
    """
    properties = default_cache.properties_of(source)

    if source is None or isinstance(source, type) or type(source).__module__ == 'builtins':
        return properties

    extra = _instance_properties(source, properties)

    if not extra:
        return properties

    return PropertyMap({**properties, **extra})


def flush_caches() -> None:
    """Flush the default type property cache."""
    default_cache.flush()


def _instance_properties(source: Any, declared: PropertyMap) -> dict[str, ReflectedProperty]:
    try:
        attributes = vars(source)
    except TypeError:
        return {}

    cls = type(source)

    return {
        name: ReflectedProperty(name, field=FieldAccess(name, declared=False))
        for name in sorted(name for name in attributes if isinstance(name, str))
        if not name.startswith('_') and name not in declared and not _shadows_descriptor(cls, name)
    }


def _shadows_descriptor(cls: type, name: str) -> bool:
    # instance values cached by methods or non-data descriptors are not properties
    attribute = inspect.getattr_static(cls, name, None)
    return attribute is not None and hasattr(type(attribute), '__get__')


__all__ = [
    "TypePropertyCache",
    "default_cache",
    "properties_of",
    "flush_caches",
]
