#  -*- coding: utf-8 -*-
"""
Bean properties and their discovery.

A *bean property* is a named attribute of an object that can be read and/or
written generically. A property is backed by a field, by an accessor pair,
or by both:

Fields
------
Walking the MRO from the root towards the class itself (so base declarations
come first, in source declaration order):

- public annotated class attributes, except ``ClassVar[...]`` ones,
- public ``__slots__`` members and other public data descriptors,
- public ``functools.cached_property`` attributes (read-only).

A field annotated ``Final[...]`` or declared by a frozen dataclass is not
writable.

Accessors
---------
- ``property`` objects: ``fget`` reads, ``fset`` writes.
- Public methods following the bean naming conventions:

  * ``get_name(self)`` / ``getName(self)`` read ``name``,
  * ``is_name(self) -> bool`` / ``isName(self)`` read a boolean ``name``,
  * ``set_name(self, value)`` / ``setName(self, value)`` write ``name``.

Merging
-------
A field and accessors of the same name form one property. The declared type
comes from the accessors when they declare one, else from the field. The
property is readable if a field *or* a read accessor exists, and writable if
a writable field *or* a write accessor exists. Accessors that declare
incompatible types for the same name make the class non-reflectable
(``IntrospectionError``).

``typing.Annotated`` metadata of fields and accessors is collected into the
property's ``metadata`` tuple.
"""

from __future__ import annotations

import dataclasses
import functools
import inspect
import logging
import re
import types
import typing

from abc import ABC, abstractmethod
from collections.abc import Mapping

from reflecta.classes import check_types
from reflecta.errors import IntrospectionError

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, Callable, Iterator, ClassVar, Final, TypeAlias


Getter: TypeAlias = Callable[[object], Any]
Setter: TypeAlias = Callable[[object, Any], None]

TYPE_PROPERTY: Final[str] = 'class'
"""Name of the type-identity property; never copied and never rendered."""

logger = logging.getLogger(__name__)

_ACCESSOR_NAME = re.compile(r'^(?P<prefix>get|is|set)(?:_(?P<snake>[A-Za-z]\w*)|(?P<camel>[A-Z]\w*))$')
_STRING_CLASSVAR = re.compile(r'^\s*(?:typing\.)?ClassVar\b')
_STRING_FINAL = re.compile(r'^\s*(?:typing\.)?Final(?:\[(?P<inner>.*)\])?\s*$')


# ========== ========== ========== ========== ========== BeanProperty
class BeanProperty(ABC):
    """
    A single reflected property of a type.

    Instances are immutable and shared by every object of the type they were
    discovered on.
    """

    __slots__ = ()

    @property
    @abstractmethod
    def name(self) -> str:
        """The property name."""

    @property
    @abstractmethod
    def type(self) -> Any:
        """The declared type (an annotation object, a string or None if unknown)."""

    @property
    @abstractmethod
    def readable(self) -> bool:
        """Whether the property can be read."""

    @property
    @abstractmethod
    def writable(self) -> bool:
        """Whether the property can be written."""

    @property
    @abstractmethod
    def metadata(self) -> tuple[Any, ...]:
        """``Annotated`` metadata found on the backing field and accessors."""

    @abstractmethod
    def read(self, bean: object) -> Any:
        """
        Read the property value of ``bean``.

        Returns ``None`` if the property is not readable. Exceptions raised
        by the property's own read accessor propagate unmodified.
        """

    @abstractmethod
    def write(self, bean: object, value: Any) -> bool:
        """
        Write the property value of ``bean``.

        Returns ``True`` if the value was written and ``False`` if the
        property is not writable. Exceptions raised by the property's own
        write accessor propagate unmodified.
        """


@dataclasses.dataclass(frozen=True, slots=True)
class FieldAccess:
    """Field backing of a property, read and written through ``getattr`` / ``setattr``."""

    name: str
    type: Any = None
    readable: bool = True
    writable: bool = True
    metadata: tuple[Any, ...] = ()
    declared: bool = True
    """False for undeclared instance attributes."""


class ReflectedProperty(BeanProperty):
    """
    A property merged from an optional field and optional accessors.

    Parameters
    ----------
    name : str
        Property name.
    field : FieldAccess, optional
        Field backing.
    fget : callable, optional
        Read accessor ``fget(bean) -> value``.
    fset : callable, optional
        Write accessor ``fset(bean, value)``.
    accessor_type : object, optional
        Type declared by the accessors, preferred over the field type.
    metadata : tuple, optional
        Collected ``Annotated`` metadata.
    """

    __slots__ = ('_name', '_field', '_fget', '_fset', '_type', '_metadata')

    def __init__(self,
                 name: str,
                 field: FieldAccess | None = None,
                 fget: Getter | None = None,
                 fset: Setter | None = None,
                 accessor_type: Any = None,
                 metadata: tuple[Any, ...] = ()) -> None:

        if field is None and fget is None and fset is None:
            raise ValueError(f"Either a field or an accessor must be provided for property {name!r}")

        self._name: str = name
        self._field: FieldAccess | None = field
        self._fget: Getter | None = fget
        self._fset: Setter | None = fset
        self._type: Any = accessor_type if accessor_type is not None or field is None else field.type
        self._metadata: tuple[Any, ...] = metadata

    def __repr__(self) -> str:
        return f"{self._name}{{readable={self.readable}, writable={self.writable}}}"

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def name(self) -> str:
        return self._name

    @property
    def type(self) -> Any:
        return self._type

    @property
    def readable(self) -> bool:
        return self._fget is not None or (self._field is not None and self._field.readable)

    @property
    def writable(self) -> bool:
        return self._fset is not None or (self._field is not None and self._field.writable)

    @property
    def metadata(self) -> tuple[Any, ...]:
        return self._metadata

    @property
    def field(self) -> FieldAccess | None:
        """The field backing, if any."""
        return self._field

    # ========== ========== ========== ========== ========== public methods
    def read(self, bean: object) -> Any:

        if self._fget is not None:
            return self._fget(bean)

        if self._field is not None and self._field.readable:
            try:
                return getattr(bean, self._name)
            except AttributeError as error:
                logger.debug("Could not read %r from %s object because: %s", self, type(bean).__name__, error)
                return None

        logger.debug("%r is not readable in %s object", self, type(bean).__name__)
        return None

    def write(self, bean: object, value: Any) -> bool:

        if self._fset is not None:
            self._fset(bean, value)
            return True

        if self._field is not None and self._field.writable:
            try:
                setattr(bean, self._name, value)
                return True
            except (AttributeError, TypeError) as error:
                logger.debug("Could not write %r to %s object because: %s", self, type(bean).__name__, error)
                return False

        logger.debug("%r is not writable in %s object", self, type(bean).__name__)
        return False


# ========== ========== ========== ========== ========== PropertyMap
class PropertyMap(Mapping):
    """
    Read-only, ordered mapping from property name to ``BeanProperty``.

    Supports weak references so the type property cache can hold it weakly.
    """

    __slots__ = ('_properties', '__weakref__')

    def __init__(self, properties: Mapping[str, BeanProperty] | None = None) -> None:
        self._properties: dict[str, BeanProperty] = dict(properties or {})

    def __getitem__(self, name: str) -> BeanProperty:
        return self._properties[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._properties)

    def __len__(self) -> int:
        return len(self._properties)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self._properties.values())!r})"


# ========== ========== ========== ========== ========== discovery
def derive_property_name(method_name: str) -> tuple[str, str] | None:
    """
    Split an accessor method name into its convention prefix and property name.

    Parameters
    ----------
    method_name : str

    Returns
    -------
    tuple of (str, str) or None
        ``(prefix, property_name)`` where prefix is ``'get'``, ``'is'`` or
        ``'set'``; ``None`` if the name follows no accessor convention.

    Examples
    --------
    >>> derive_property_name('get_value')
    ('get', 'value')
    >>> derive_property_name('isActive')
    ('is', 'active')
    >>> derive_property_name('getURL')
    ('get', 'URL')
    >>> derive_property_name('settle') is None
    True
    """
    match = _ACCESSOR_NAME.match(method_name)

    if match is None:
        return None

    if match['snake'] is not None:
        return match['prefix'], match['snake']

    camel = match['camel']

    # Acronyms keep their capitals
    if len(camel) > 1 and camel[1].isupper():
        return match['prefix'], camel

    return match['prefix'], camel[0].lower() + camel[1:]


@dataclasses.dataclass
class _Draft:
    """Mutable accumulator for one property name during discovery."""

    name: str
    owner: type
    field: FieldAccess | None = None
    fget: Getter | None = None
    fset: Setter | None = None
    fget_type: Any = None
    fset_type: Any = None
    metadata: list[Any] = dataclasses.field(default_factory=list)

    def add_metadata(self, metadata: tuple[Any, ...]) -> None:
        for item in metadata:
            if not any(item is known or _safe_equals(item, known) for known in self.metadata):
                self.metadata.append(item)

    def set_field(self, field: FieldAccess) -> None:
        if self.field is not None and field.type is None:
            field = dataclasses.replace(field, type=self.field.type)
        self.field = field
        self.add_metadata(field.metadata)

    def set_getter(self, fget: Getter, declared_type: Any, metadata: tuple[Any, ...]) -> None:
        self._check_compatible(declared_type, self.fget_type, 'read accessors')
        self._check_compatible(declared_type, self.fset_type, 'read and write accessors')
        self.fget = fget
        self.fget_type = declared_type if declared_type is not None else self.fget_type
        self.add_metadata(metadata)

    def set_setter(self, fset: Setter, declared_type: Any, metadata: tuple[Any, ...]) -> None:
        self._check_compatible(declared_type, self.fset_type, 'write accessors')
        self._check_compatible(declared_type, self.fget_type, 'read and write accessors')
        self.fset = fset
        self.fset_type = declared_type if declared_type is not None else self.fset_type
        self.add_metadata(metadata)

    def _check_compatible(self, declared: Any, known: Any, what: str) -> None:
        if not _compatible_types(declared, known):
            raise IntrospectionError(
                f"Property {self.name!r} of {self.owner.__qualname__} has {what} "
                f"with incompatible types: {_type_name(known)} and {_type_name(declared)}")

    def takes_default(self, attribute: Any) -> bool:
        """Whether ``attribute`` merely changes the default of an inherited field."""
        return (self.fget is None and self.fset is None and self.field is not None
                and not isinstance(attribute, (property, types.FunctionType, staticmethod,
                                               classmethod, functools.cached_property))
                and not _is_data_descriptor(attribute))

    def is_empty(self) -> bool:
        return self.field is None and self.fget is None and self.fset is None

    def build(self) -> ReflectedProperty:
        accessor_type = self.fget_type if self.fget_type is not None else self.fset_type
        return ReflectedProperty(self.name,
                                 field=self.field,
                                 fget=self.fget,
                                 fset=self.fset,
                                 accessor_type=accessor_type,
                                 metadata=tuple(self.metadata))


def discover_properties(cls: type) -> PropertyMap:
    """
    Discover the bean properties of a class.

    This is the strict discovery function; most callers should go through
    the cached ``reflecta.cache.properties_of`` instead.

    Parameters
    ----------
    cls : type
        The class to reflect.

    Returns
    -------
    PropertyMap
        Properties in declaration order, base classes first. Builtin types
        have no properties.

    Raises
    ------
    TypeError
        If ``cls`` is not a class.
    IntrospectionError
        If accessors declare incompatible types for the same property.
    """
    check_types(cls, type)

    drafts: dict[str, _Draft] = {}

    if cls.__module__ == 'builtins':
        return PropertyMap()

    hints = _type_hints(cls)

    def draft(name: str) -> _Draft:
        if name not in drafts:
            drafts[name] = _Draft(name, cls)
        return drafts[name]

    for base in reversed(cls.__mro__):

        if base is object or base.__module__ == 'builtins':
            continue

        namespace = base.__dict__
        frozen = _is_frozen_dataclass(base)

        # Members defined here replace the inherited ones of the same name
        for name, attribute in namespace.items():
            if name in drafts and not drafts[name].takes_default(attribute):
                drafts[name] = _Draft(name, cls)

        # ---------- ---------- ---------- ---------- annotated fields
        for name, raw_hint in _own_annotations(base).items():

            if not _is_public(name):
                continue

            if isinstance(namespace.get(name), (property, types.FunctionType, staticmethod, classmethod)):
                continue

            hint, metadata, class_var, final = _unwrap(hints.get(name, raw_hint))

            if class_var:
                continue

            draft(name).set_field(FieldAccess(name, hint, writable=not (final or frozen), metadata=metadata))

        # ---------- ---------- ---------- ---------- class namespace
        for name, attribute in namespace.items():

            if not _is_public(name):
                continue

            if isinstance(attribute, property):
                _add_property(draft(name), attribute)

            elif isinstance(attribute, types.FunctionType):
                _add_accessor_method(draft, name, attribute)

            elif isinstance(attribute, functools.cached_property):
                hint, metadata, _, _ = _unwrap(_return_hint(attribute.func))
                draft(name).set_field(FieldAccess(name, hint, writable=False, metadata=metadata))

            elif isinstance(attribute, types.GetSetDescriptorType):
                # C-level attributes of extension types
                continue

            elif _is_data_descriptor(attribute):
                hint, metadata, _, final = _unwrap(hints.get(name))
                draft(name).set_field(FieldAccess(name, hint, writable=not (final or frozen), metadata=metadata))

    return PropertyMap({name: item.build() for name, item in drafts.items() if not item.is_empty()})


def _add_property(draft: _Draft, prop: property) -> None:

    if prop.fget is not None:
        hint, metadata, _, _ = _unwrap(_return_hint(prop.fget))
        draft.set_getter(prop.fget, hint, metadata)

    if prop.fset is not None:
        hint, metadata, _, _ = _unwrap(_parameter_hint(prop.fset))
        draft.set_setter(prop.fset, hint, metadata)


def _add_accessor_method(draft: Callable[[str], _Draft], method_name: str, function: types.FunctionType) -> None:

    derived = derive_property_name(method_name)

    if derived is None:
        return

    prefix, name = derived

    try:
        parameters = list(inspect.signature(function).parameters.values())
    except (TypeError, ValueError):
        return

    if not parameters:
        return

    hints = _function_hints(function)
    arguments = parameters[1:]

    if prefix in ('get', 'is'):

        if arguments:
            return

        if 'return' in hints and _is_none_type(hints['return']):
            return

        hint, metadata, _, _ = _unwrap(hints.get('return'))

        if prefix == 'is' and hint is not None and not _is_bool_type(hint):
            return

        draft(name).set_getter(function, hint, metadata)

    else:

        if len(arguments) != 1 or arguments[0].kind not in (inspect.Parameter.POSITIONAL_ONLY,
                                                            inspect.Parameter.POSITIONAL_OR_KEYWORD):
            return

        if 'return' in hints and not _is_none_type(hints['return']):
            return

        hint, metadata, _, _ = _unwrap(hints.get(arguments[0].name))
        draft(name).set_setter(function, hint, metadata)


# ========== ========== ========== ========== ========== annotation helpers
def _is_public(name: str) -> bool:
    return not name.startswith('_')


def _is_frozen_dataclass(cls: type) -> bool:
    params = cls.__dict__.get('__dataclass_params__')
    return params is not None and params.frozen


def _is_data_descriptor(attribute: Any) -> bool:
    kind = type(attribute)
    return hasattr(kind, '__get__') and hasattr(kind, '__set__')


def _type_hints(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except (NameError, TypeError, AttributeError, SyntaxError) as error:
        logger.debug("Could not resolve annotations of %s: %s", cls.__qualname__, error)

    hints: dict[str, Any] = {}
    for base in reversed(cls.__mro__):
        hints.update(_own_annotations(base))
    return hints


def _own_annotations(cls: type) -> dict[str, Any]:
    try:
        return dict(inspect.get_annotations(cls))
    except NameError as error:
        logger.debug("Could not read annotations of %s: %s", cls.__qualname__, error)
        return {}


def _function_hints(function: Callable[..., Any]) -> dict[str, Any]:
    try:
        return typing.get_type_hints(function, include_extras=True)
    except (NameError, TypeError, AttributeError, SyntaxError) as error:
        logger.debug("Could not resolve annotations of %s: %s", getattr(function, '__qualname__', function), error)
        return dict(getattr(function, '__annotations__', None) or {})


def _return_hint(function: Callable[..., Any]) -> Any:
    return _function_hints(function).get('return')


def _parameter_hint(function: Callable[..., Any]) -> Any:
    try:
        parameters = list(inspect.signature(function).parameters.values())
    except (TypeError, ValueError):
        return None

    if len(parameters) < 2:
        return None

    return _function_hints(function).get(parameters[1].name)


def _unwrap(hint: Any) -> tuple[Any, tuple[Any, ...], bool, bool]:
    """
    Split an annotation into ``(type, metadata, is_class_var, is_final)``.
    """
    metadata: list[Any] = []
    class_var = False
    final = False

    while True:

        if isinstance(hint, str):
            if _STRING_CLASSVAR.match(hint):
                class_var = True
                break

            match = _STRING_FINAL.match(hint)
            if match is not None:
                final = True
                hint = match['inner']
                continue

            break

        origin = typing.get_origin(hint)

        if origin is typing.Annotated:
            hint, *extra = typing.get_args(hint)
            metadata.extend(extra)

        elif hint is ClassVar or origin is ClassVar:
            class_var = True
            break

        elif hint is Final or origin is Final:
            final = True
            args = typing.get_args(hint)
            hint = args[0] if args else None

        else:
            break

    return hint, tuple(metadata), class_var, final


def _is_none_type(hint: Any) -> bool:
    return hint is None or hint is type(None) or hint == 'None'


def _is_bool_type(hint: Any) -> bool:
    return hint is bool or hint == 'bool'


def _type_name(hint: Any) -> str:
    if isinstance(hint, str):
        return hint
    if isinstance(hint, type):
        return hint.__name__
    return repr(hint)


def _compatible_types(first: Any, second: Any) -> bool:

    if first is None or second is None:
        return True

    if isinstance(first, type) and isinstance(second, type):
        return issubclass(first, second) or issubclass(second, first)

    if isinstance(first, str) or isinstance(second, str):
        return _type_name(first) == _type_name(second)

    return _safe_equals(first, second)


def _safe_equals(first: Any, second: Any) -> bool:
    try:
        return bool(first == second)
    except (TypeError, ValueError):
        return False


__all__ = [
    "TYPE_PROPERTY",
    "BeanProperty",
    "FieldAccess",
    "ReflectedProperty",
    "PropertyMap",
    "derive_property_name",
    "discover_properties",
]
