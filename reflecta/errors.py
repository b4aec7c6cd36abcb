#  -*- coding: utf-8 -*-
"""
Exception hierarchy of the reflection layer.

Every failure that originates in *locating* or *invoking* something through
reflection is reported as a ``ReflectionError``. Exceptions raised by the
reflected code itself (a getter, a setter, a constructor body) are never
wrapped by property access; they reach the caller unmodified.

The concrete errors also derive from the builtin exception a Python caller
would naturally expect, so ``except AttributeError`` keeps working for a
missing property and ``except ImportError`` for a missing class.
"""

from __future__ import annotations


class ReflectionError(RuntimeError):
    """Root of all reflection-layer failures."""


class PropertyNotFoundError(ReflectionError, AttributeError):
    """
    A property path could not be resolved against an object.

    Parameters
    ----------
    bean : object
        The root object the path was resolved against.
    path : str
        The property path that could not be resolved.
    """

    def __init__(self, bean: object, path: str) -> None:
        self.bean = bean
        self.path = path
        super().__init__(f'Property "{path}" not found in {type(bean).__name__} object.')


class IntrospectionError(ReflectionError, TypeError):
    """A type declares incompatible accessors for the same property name."""


class MissingClassError(ReflectionError, ImportError):
    """A class could not be imported by its fully qualified name."""


class MissingMethodError(ReflectionError, AttributeError):
    """A method could not be located on a type."""


class MethodInvocationError(ReflectionError):
    """A located method could not be invoked or raised while being invoked."""


class InstantiationError(MethodInvocationError):
    """A type could not be instantiated."""


__all__ = [
    "ReflectionError",
    "PropertyNotFoundError",
    "IntrospectionError",
    "MissingClassError",
    "MissingMethodError",
    "MethodInvocationError",
    "InstantiationError",
]
