#  -*- coding: utf-8 -*-
"""
Thread-local recursion guards.

A guard remembers which objects the *current thread* is in the middle of
processing, keyed by object identity (never by ``__eq__`` or ``__hash__``,
which may themselves be the operation being guarded). Every recursive
operation owns its own guard, so an equality check in progress never
interferes with a hash or render in progress on the same object.

Examples
--------
>>> guard = RecursionGuard('example')
>>> node = object()
>>> with guard.visiting(node, 'in progress'):
...     node in guard, guard.get(node)
(True, 'in progress')
>>> node in guard
False
"""

from __future__ import annotations

import threading

from enum import Enum

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any


class RecursionGuard:
    """
    Identity-keyed, thread-local registry of objects being processed.

    Parameters
    ----------
    name : str
        Name used in ``repr``.
    """

    def __init__(self, name: str) -> None:
        self.name: str = name
        self._local = threading.local()

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r}, depth={self.depth()})"

    def __contains__(self, obj: Any) -> bool:
        return id(obj) in self._entries()

    # ========== ========== ========== ========== ========== public methods
    def get(self, obj: Any, default: Any = None) -> Any:
        """
        Value registered for an object in progress, or ``default``.
        """
        entry = self._entries().get(id(obj))
        return default if entry is None else entry[1]

    def depth(self) -> int:
        """Number of objects currently in progress in this thread."""
        return len(self._entries())

    def visiting(self, obj: Any, value: Any = None) -> _Visit:
        """
        Mark ``obj`` as in progress for the duration of a ``with`` block.

        The context manager is re-entrant: if ``obj`` is already in progress,
        entering neither replaces its value nor removes it on exit. Only the
        outermost frame that registered the object unregisters it, whether
        the block exits normally or by an exception.

        Parameters
        ----------
        obj : object
            The object being processed.
        value : object, optional
            Associated value, e.g. the object being compared against or the
            copy being built.

        Returns
        -------
        context manager
            Yields the value registered for ``obj``.
        """
        return _Visit(self, obj, value)

    # ========== ========== ========== ========== ========== private methods
    def _entries(self) -> dict[int, tuple[Any, Any]]:
        try:
            return self._local.entries
        except AttributeError:
            entries = self._local.entries = {}
            return entries


class _Visit:

    __slots__ = ('_guard', '_obj', '_value', '_owner')

    def __init__(self, guard: RecursionGuard, obj: Any, value: Any) -> None:
        self._guard = guard
        self._obj = obj
        self._value = value
        self._owner = False

    def __enter__(self) -> Any:
        entries = self._guard._entries()
        key = id(self._obj)

        if key not in entries:
            # the entry keeps a strong reference, so the id stays unique
            entries[key] = (self._obj, self._value)
            self._owner = True

        return entries[key][1]

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        if self._owner:
            del self._guard._entries()[id(self._obj)]
            self._owner = False
        return False


class RecursionGuards(Enum):
    """
    The independent guards of the recursive structural operations.
    """

    EQUALS = RecursionGuard('equals')
    HASH = RecursionGuard('hash')
    CLONE = RecursionGuard('clone')
    RENDER = RecursionGuard('render')

    @property
    def guard(self) -> RecursionGuard:
        return self.value

    def visiting(self, obj: Any, value: Any = None) -> _Visit:
        """Shortcut for ``self.guard.visiting(obj, value)``."""
        return self.value.visiting(obj, value)

    def in_progress(self, obj: Any) -> bool:
        """Whether ``obj`` is in progress for this operation in the current thread."""
        return obj in self.value

    def get(self, obj: Any, default: Any = None) -> Any:
        """Shortcut for ``self.guard.get(obj, default)``."""
        return self.value.get(obj, default)


__all__ = [
    "RecursionGuard",
    "RecursionGuards",
]
