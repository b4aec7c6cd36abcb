#  -*- coding: utf-8 -*-
"""
Class lookup, instantiation and method invocation.

Each operation comes in two tiers:

- a *strict* one (``get_class``, ``create_new``, ``get_method``, ``call``)
  raising a ``ReflectionError`` subclass, and
- a *best-effort* one (``find_class``, ``try_create_new``, ``find_method``,
  ``try_call``) that logs the failure at DEBUG level and returns ``None``.

The best-effort functions are thin wrappers around the strict ones, so both
tiers share the same resolution logic.
"""

from __future__ import annotations

import importlib
import logging

from reflecta.errors import (ReflectionError,
                             MissingClassError,
                             MissingMethodError,
                             MethodInvocationError,
                             InstantiationError)

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, Callable, TypeVar


T = TypeVar('T')

logger = logging.getLogger(__name__)


# ========== ========== ========== ========== ========== ==========
def get_full_qualified_name(cls: type) -> str:
    """
    Return the fully qualified name of a class.

    For built-in types (module is ``builtins``), returns ``cls.__qualname__``.
    For user-defined types, returns ``"<module>.<qualname>"``.

    Parameters
    ----------
    cls : type
        The class to identify.

    Returns
    -------
    str
        Fully qualified name, accepted again by ``get_class``.
    """
    module = cls.__module__

    if module is None or module == 'builtins':
        return cls.__qualname__

    return f"{module}.{cls.__qualname__}"


def check_types(obj: Any,
                types: type | tuple[type, ...],
                can_be_none: bool = False,
                raise_error: bool = True) -> bool:
    """
    Check whether an object is an instance of expected types.

    Parameters
    ----------
    obj : object
        Value to test.
    types : type or tuple of type
        Expected type(s).
    can_be_none : bool, default False
        If True, ``None`` is accepted as valid.
    raise_error : bool, default True
        If True, raises TypeError when the check fails. If False, returns False
        on mismatch.

    Returns
    -------
    bool
        True if obj is an instance of one of the expected types.

    Raises
    ------
    TypeError
        If ``raise_error`` is True and the check fails.

    Examples
    --------
    >>> check_types(1, int)
    True
    >>> check_types(None, int, can_be_none=True)
    True
    >>> check_types("x", int, raise_error=False)
    False
    """
    if can_be_none:
        if isinstance(types, tuple):
            types = (*types, None.__class__)
        else:
            types = (types, None.__class__)

    result = isinstance(obj, types)

    if not result and raise_error:

        if isinstance(types, tuple):
            cls_names = ', '.join(get_full_qualified_name(cls) for cls in types)
        else:
            cls_names = get_full_qualified_name(types)

        error_msg = f"Expected instance of one of the following classes: {cls_names}. " \
                    f"Given {get_full_qualified_name(type(obj))} instead"
        raise TypeError(error_msg)

    return result


# ========== ========== ========== ========== ========== classes
def get_class(name: str) -> type:
    """
    Import a class by its fully qualified name.

    The longest importable module prefix is imported first; the remaining
    dotted part is resolved as (possibly nested) attributes, so
    ``"package.module.Outer.Inner"`` works as well.

    Parameters
    ----------
    name : str
        Fully qualified class name, e.g. ``"decimal.Decimal"``. Builtins may
        be given without module (``"int"``).

    Returns
    -------
    type

    Raises
    ------
    MissingClassError
        If the name is empty, cannot be imported or does not denote a class.
    """
    if not name:
        raise MissingClassError("Class name is required to get a class.")

    parts = name.split('.')
    if len(parts) == 1:
        parts = ['builtins', *parts]

    for split in range(len(parts) - 1, 0, -1):
        module_name = '.'.join(parts[:split])

        try:
            target: Any = importlib.import_module(module_name)
        except ImportError:
            continue

        try:
            for attribute in parts[split:]:
                target = getattr(target, attribute)
        except AttributeError as error:
            raise MissingClassError(f'Class "{name}" not found in module "{module_name}".') from error

        if not isinstance(target, type):
            raise MissingClassError(f'"{name}" is not a class but a {type(target).__name__}.')

        return target

    raise MissingClassError(f'Class "{name}" not found. It is likely that some package is not installed.')


def find_class(name: str) -> type | None:
    """Best-effort ``get_class``: returns ``None`` if the class is not found."""
    try:
        return get_class(name)
    except ReflectionError as error:
        logger.debug("%s", error, exc_info=True)
        return None


def create_new(cls: type[T] | str, *args: Any, **kwargs: Any) -> T:
    """
    Instantiate a class.

    Parameters
    ----------
    cls : type or str
        The class, or its fully qualified name.
    *args, **kwargs
        Constructor arguments.

    Returns
    -------
    object
        The new instance.

    Raises
    ------
    MissingClassError
        If ``cls`` is a name that cannot be resolved.
    InstantiationError
        If the class is abstract or the constructor raised. The original
        exception is chained as ``__cause__``.
    """
    if isinstance(cls, str):
        cls = get_class(cls)

    if not callable(cls):
        raise InstantiationError(f"Cannot instantiate {cls!r}: it is not callable.")

    try:
        return cls(*args, **kwargs)

    except Exception as error:
        abstract = 'abstract ' if getattr(cls, '__abstractmethods__', None) else ''
        raise InstantiationError(
            f"Cannot instantiate {abstract}{get_full_qualified_name(cls)}: {error}") from error


def try_create_new(cls: type[T] | str, *args: Any, **kwargs: Any) -> T | None:
    """Best-effort ``create_new``: returns ``None`` if instantiation fails."""
    try:
        return create_new(cls, *args, **kwargs)
    except ReflectionError as error:
        logger.debug("%s", error, exc_info=True)
        return None


# ========== ========== ========== ========== ========== methods
def get_method(cls: type | str, name: str) -> Callable[..., Any]:
    """
    Locate a method on a class.

    Parameters
    ----------
    cls : type or str
        The class, or its fully qualified name.
    name : str
        The method name.

    Returns
    -------
    callable
        The unbound function (or the bound classmethod / staticmethod target).

    Raises
    ------
    MissingMethodError
        If the class has no callable attribute named ``name``.
    """
    if cls is None:
        raise MissingMethodError(f'Method "{name}" cannot be obtained from class None.')

    if isinstance(cls, str):
        cls = get_class(cls)

    method = getattr(cls, name, None)

    if method is None or not callable(method):
        raise MissingMethodError(f'Method "{name}" was not found in {get_full_qualified_name(cls)}.')

    return method


def find_method(cls: type | str, name: str) -> Callable[..., Any] | None:
    """Best-effort ``get_method``: returns ``None`` if the method is not found."""
    try:
        return get_method(cls, name)
    except ReflectionError as error:
        logger.debug("%s", error, exc_info=True)
        return None


def call(method: Callable[..., Any] | str, subject: Any, *args: Any, **kwargs: Any) -> Any:
    """
    Invoke a method on a subject.

    Parameters
    ----------
    method : callable or str
        The method to invoke. A string is either a method name looked up on
        ``type(subject)``, or a fully qualified ``"module.Class.method"`` name.
    subject : object or None
        Receiver passed as first argument. ``None`` calls the method as a
        plain function (static call).
    *args, **kwargs
        Method arguments.

    Returns
    -------
    object
        The method result.

    Raises
    ------
    MissingMethodError
        If a method name cannot be located.
    MethodInvocationError
        If the method raised. The original exception is chained.
    """
    if method is None:
        raise MethodInvocationError("Cannot invoke method None.")

    if isinstance(method, str):

        if '.' in method:
            class_name, _, method_name = method.rpartition('.')
            method = get_method(class_name, method_name)

        elif subject is None:
            raise MethodInvocationError(
                f'Cannot determine declaring class for method "{method}", subject was None.')

        else:
            method = get_method(type(subject), method)

    name = getattr(method, '__qualname__', repr(method))

    try:
        if subject is None:
            return method(*args, **kwargs)

        return method(subject, *args, **kwargs)

    except Exception as error:
        raise MethodInvocationError(f'Method "{name}" threw exception: {error}') from error


def try_call(method: Callable[..., Any] | str, subject: Any, *args: Any, **kwargs: Any) -> Any:
    """Best-effort ``call``: returns ``None`` if the method cannot be invoked."""
    try:
        return call(method, subject, *args, **kwargs)
    except ReflectionError as error:
        logger.debug("%s", error, exc_info=True)
        return None


__all__ = [
    "get_full_qualified_name",
    "check_types",
    "get_class",
    "find_class",
    "create_new",
    "try_create_new",
    "get_method",
    "find_method",
    "call",
    "try_call",
]
