#  -*- coding: utf-8 -*-
"""
Property paths.

A property path is a dot-separated sequence of segments, each either a
property name or a non-negative index, e.g. ``"owner.addresses[0].street"``
or, equivalently, ``"owner.addresses.0.street"``.

A segment resolves against the current object as follows:

1. a property of that name, if the object has one;
2. a key, if the object is a mapping (an index segment also matches the
   string form of the key);
3. a position, if the segment is an index and the object is a sequence,
   a ``numpy.ndarray`` or another iterable. Strings and bytes are never
   indexed.

Positions of lists (any mutable sequence) and arrays can be written. Other
sequences and iterables are read-only by position.
"""

from __future__ import annotations

import itertools
import logging
import re

from collections.abc import Iterable, Mapping, MutableMapping, MutableSequence, Sequence

import numpy

from reflecta.cache import properties_of
from reflecta.properties import BeanProperty

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, Final


logger = logging.getLogger(__name__)

MISSING: Final[object] = object()
"""Sentinel returned by ``ResolvedAccessor.read`` for absent keys and positions."""

_BRACKETED_INDEX = re.compile(r'\[\s*(\d+)\s*\]')
_INDEX = re.compile(r'\d+')
_NEVER_INDEXED = (str, bytes, bytearray)


# ========== ========== ========== ========== ========== PropertyPath
class PropertyPath(tuple):
    """
    Parsed property path: an immutable tuple of segments.

    Property-name segments are ``str``, index segments are ``int``.

    Examples
    --------
    >>> tuple(PropertyPath.parse('items[0].name'))
    ('items', 0, 'name')
    >>> str(PropertyPath.parse('items.0.name'))
    'items[0].name'
    """

    __slots__ = ()

    @classmethod
    def parse(cls, path: str | Iterable[str | int]) -> PropertyPath:
        """
        Parse a dotted/indexed path.

        Parameters
        ----------
        path : str or iterable of segments

        Returns
        -------
        PropertyPath

        Raises
        ------
        ValueError
            If the path is empty or contains a blank segment.
        """
        if isinstance(path, cls):
            return path

        if isinstance(path, str):
            normalized = _BRACKETED_INDEX.sub(r'.\1', path.strip())
            if normalized.startswith('.') and path.strip().startswith('['):
                normalized = normalized[1:]
            raw_segments = normalized.split('.')
        else:
            raw_segments = list(path)

        segments: list[str | int] = []

        for segment in raw_segments:

            if isinstance(segment, int) and not isinstance(segment, bool):
                if segment < 0:
                    raise ValueError(f"Negative index {segment} in property path {path!r}")
                segments.append(segment)
                continue

            segment = str(segment).strip()

            if not segment:
                raise ValueError(f"Blank segment in property path {path!r}")

            segments.append(int(segment) if _INDEX.fullmatch(segment) else segment)

        if not segments:
            raise ValueError("Property path is empty")

        return cls(segments)

    def __str__(self) -> str:
        text = ''
        for segment in self:
            if isinstance(segment, int):
                text += f'[{segment}]'
            else:
                text += f'.{segment}' if text else segment
        return text

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r})"


# ========== ========== ========== ========== ========== ResolvedAccessor
class ResolvedAccessor:
    """
    An (object, property-or-key-or-position) pair a path segment resolved to.

    Obtain instances through ``ResolvedAccessor.of`` or ``resolve``.
    """

    __slots__ = ('bean', 'property', 'key', 'index')

    def __init__(self,
                 bean: Any,
                 property: BeanProperty | None = None,
                 key: Any = MISSING,
                 index: int | None = None) -> None:
        self.bean: Any = bean
        self.property: BeanProperty | None = property
        self.key: Any = key
        self.index: int | None = index

    def __repr__(self) -> str:
        if self.property is not None:
            target = f"property={self.property!r}"
        elif self.index is not None:
            target = f"index={self.index}"
        else:
            target = f"key={self.key!r}"
        return f"{type(self).__name__}({type(self.bean).__name__}, {target})"

    @classmethod
    def of(cls, bean: Any, segment: str | int) -> ResolvedAccessor | None:
        """
        Resolve a single segment against an object.

        Returns
        -------
        ResolvedAccessor or None
            ``None`` if ``bean`` is None or the segment denotes nothing.
        """
        if bean is None:
            return None

        if isinstance(segment, str):
            prop = properties_of(bean).get(segment)
            if prop is not None:
                return cls(bean, property=prop)

        if isinstance(bean, Mapping):
            if isinstance(segment, int) and segment not in bean and str(segment) in bean:
                return cls(bean, key=str(segment))
            return cls(bean, key=segment)

        if isinstance(segment, int) and _is_indexable(bean):
            return cls(bean, index=segment)

        return None

    # ========== ========== ========== ========== ========== public methods
    def read(self, default: Any = None) -> Any:
        """
        Read the denoted value.

        Parameters
        ----------
        default : object, optional
            Returned when the key or position does not exist or the property
            is not readable.
        """
        if self.property is not None:
            return self.property.read(self.bean) if self.property.readable else default

        if self.index is None:
            try:
                return self.bean[self.key]
            except KeyError:
                return default

        bean = self.bean

        if isinstance(bean, (numpy.ndarray, Sequence)):
            if self.index < len(bean):
                return bean[self.index]
            logger.debug("Index %d out of range for %s of length %d", self.index, type(bean).__name__, len(bean))
            return default

        return next(itertools.islice(bean, self.index, None), default)

    def write(self, value: Any) -> bool:
        """
        Write the denoted value.

        Returns
        -------
        bool
            ``True`` if the value was written.
        """
        if self.property is not None:
            return self.property.write(self.bean, value)

        bean = self.bean

        if self.index is None:
            if isinstance(bean, MutableMapping):
                bean[self.key] = value
                return True
            logger.debug("Cannot write key %r of read-only %s", self.key, type(bean).__name__)
            return False

        if not isinstance(bean, (numpy.ndarray, MutableSequence)):
            logger.debug("Cannot write position %d of read-only %s", self.index, type(bean).__name__)
            return False

        if self.index >= len(bean):
            logger.debug("Index %d out of range for %s of length %d", self.index, type(bean).__name__, len(bean))
            return False

        bean[self.index] = value
        return True


def _is_indexable(bean: Any) -> bool:

    if isinstance(bean, numpy.ndarray):
        return bean.ndim > 0

    return isinstance(bean, Iterable) and not isinstance(bean, (*_NEVER_INDEXED, Mapping))


# ========== ========== ========== ========== ========== resolve
def resolve(root: Any, path: str | PropertyPath) -> ResolvedAccessor | None:
    """
    Resolve a property path against an object.

    Every segment but the last is read; the last one is returned unread so
    it can be read or written.

    Parameters
    ----------
    root : object
    path : str or PropertyPath

    Returns
    -------
    ResolvedAccessor or None
        ``None`` if any intermediate segment denotes nothing, or a ``None``
        value.

    Raises
    ------
    ValueError
        If the path is malformed.
    """
    segments = PropertyPath.parse(path)

    current = root

    for segment in segments[:-1]:

        accessor = ResolvedAccessor.of(current, segment)

        if accessor is None:
            return None

        current = accessor.read()

        if current is None:
            return None

    return ResolvedAccessor.of(current, segments[-1])


__all__ = [
    "MISSING",
    "PropertyPath",
    "ResolvedAccessor",
    "resolve",
]
