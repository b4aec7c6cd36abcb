#  -*- coding: utf-8 -*-
"""
Deep string rendering of objects through their bean properties.

``reflect(obj)`` renders an object as its (filtered) type name followed by
its readable properties between brackets::

    Person{name="Alice", age=42, address=Address{city="Delft"}}

Rendering rules for property values:

- ``None`` values are skipped unless ``include_nulls`` is set, then
  rendered as ``None``;
- strings are quoted, with ``"`` and ``\\`` escaped;
- objects whose ``str()`` is the default ``object.__repr__`` placeholder
  (and classes using ``reflective_repr``) are rendered reflectively with
  the same settings as their parent;
- everything else is rendered with ``str()``;
- values longer than ``max_value_length`` are abbreviated to
  ``<TypeName>``;
- a value that refers back to an object being rendered is rendered with
  ``object.__repr__``, so cyclic graphs terminate.

Type-name filters
-----------------
A *type-name filter* is any callable mapping a class name to the name
rendered as prefix. Filters are passed explicitly, per invocation; the
composed filter of all ``reflecta.type_name_filters`` entry points can be
loaded with ``load_type_name_filters`` and passed along.
"""

from __future__ import annotations

import logging

from importlib.metadata import entry_points

from reflecta.cache import properties_of
from reflecta.guards import RecursionGuards
from reflecta.properties import TYPE_PROPERTY

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any, Callable, Final, Self, TypeAlias, TYPE_CHECKING

if TYPE_CHECKING:
    from reflecta.config import RenderOptions


TypeNameFilter: TypeAlias = Callable[[str], str]

DEFAULT_SEPARATOR: Final[str] = ', '
DEFAULT_LEFT_BRACKET: Final[str] = '{'
DEFAULT_RIGHT_BRACKET: Final[str] = '}'
DEFAULT_MAX_VALUE_LENGTH: Final[int] = 128
ENTRY_POINT_GROUP: Final[str] = 'reflecta.type_name_filters'

_OPTION_NAMES: Final[frozenset[str]] = frozenset({
    'separator', 'left_bracket', 'right_bracket', 'force_brackets',
    'include_nulls', 'max_value_length', 'type_name_filter',
})

logger = logging.getLogger(__name__)


# ========== ========== ========== ========== ========== type-name filters
def chain_filters(*filters: TypeNameFilter | None) -> TypeNameFilter:
    """
    Compose type-name filters, applied left to right.

    ``None`` entries are ignored; without filters the identity is returned.
    """
    chain = tuple(item for item in filters if item is not None)

    def apply(name: str) -> str:
        for item in chain:
            name = item(name)
        return name

    return apply


def load_type_name_filters(group: str = ENTRY_POINT_GROUP) -> TypeNameFilter:
    """
    Compose the type-name filters published as entry points.

    Entry points that cannot be loaded are skipped and logged.

    Parameters
    ----------
    group : str
        Entry point group, ``"reflecta.type_name_filters"`` by default.

    Returns
    -------
    TypeNameFilter
    """
    filters: list[TypeNameFilter] = []

    for entry_point in entry_points(group=group):
        try:
            filters.append(entry_point.load())
        except (ImportError, AttributeError) as error:
            logger.warning("Could not load type-name filter %r: %s", entry_point.name, error)

    logger.debug("Loaded %d type-name filter(s) from %r", len(filters), group)

    return chain_filters(*filters)


# ========== ========== ========== ========== ========== ToStringBuilder
class ToStringBuilder:
    """
    Builder for ``Prefix{name=value, ...}`` strings.

    Parameters
    ----------
    source : object, optional
        Determines the prefix: a string is used verbatim, a class or any
        other object contributes its (filtered) class name. ``None`` means
        no prefix.
    options : RenderOptions, optional
        Initial settings. Any object exposing ``separator``,
        ``left_bracket``, ``right_bracket``, ``force_brackets``,
        ``include_nulls``, ``max_value_length`` and ``type_name_filter``
        attributes is accepted.

    Examples
    --------
    >>> str(ToStringBuilder('Point').append('x', 1).append('y', 2))
    'Point{x=1, y=2}'
    >>> str(ToStringBuilder('Empty'))
    'Empty'
    >>> str(ToStringBuilder(None).append_value('value'))
    '{"value"}'
    """

    def __init__(self, source: Any = None, *, options: RenderOptions | None = None) -> None:

        self._separator: str = _option(options, 'separator', DEFAULT_SEPARATOR)
        self._left_bracket: str = _option(options, 'left_bracket', DEFAULT_LEFT_BRACKET)
        self._right_bracket: str = _option(options, 'right_bracket', DEFAULT_RIGHT_BRACKET)
        self._force_brackets: bool = _option(options, 'force_brackets', False)
        self._include_nulls: bool = _option(options, 'include_nulls', False)
        self._max_value_length: int = _option(options, 'max_value_length', DEFAULT_MAX_VALUE_LENGTH)
        self._type_name_filter: TypeNameFilter | None = _option(options, 'type_name_filter', None)

        self._source: Any = source
        self._fields: list[str] = []

    def __str__(self) -> str:
        if self.has_content():
            return f"{self.prefix}{self._left_bracket}{self._separator.join(self._fields)}{self._right_bracket}"
        return self.prefix

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self)!r})"

    def __len__(self) -> int:
        return len(str(self))

    @classmethod
    def reflect(cls, source: Any, options: RenderOptions | None = None) -> Self:
        """
        Builder with the readable properties of ``source`` appended.

        ``None`` and strings are not reflected.
        """
        builder = cls(source, options=options)

        if source is None or isinstance(source, str):
            return builder

        return builder._append_properties_of(source)

    # ---------- ---------- ---------- ---------- ---------- fluent configuration
    def separator(self, separator: str | None) -> Self:
        """Field separator, ``", "`` by default; ``None`` means no separator."""
        self._separator = separator or ''
        return self

    def brackets(self, left: str | None, right: str | None) -> Self:
        """Brackets around the fields, ``{`` and ``}`` by default."""
        self._left_bracket = left or ''
        self._right_bracket = right or ''
        return self

    def force_brackets(self, left: str | None = None, right: str | None = None) -> Self:
        """
        Render the brackets even without fields, optionally replacing them.
        """
        if left is not None or right is not None:
            self.brackets(left, right)
        self._force_brackets = True
        return self

    def include_nulls(self, include: bool = True) -> Self:
        """Whether ``None`` values are appended; skipped by default."""
        self._include_nulls = include
        return self

    def max_value_length(self, length: int) -> Self:
        """Length above which a value is abbreviated to its type name."""
        self._max_value_length = length
        return self

    def type_name_filter(self, type_name_filter: TypeNameFilter | None) -> Self:
        """Filter applied to class names used as prefix."""
        self._type_name_filter = type_name_filter
        return self

    # ---------- ---------- ---------- ---------- ---------- properties
    @property
    def prefix(self) -> str:
        source = self._source

        if source is None:
            return ''

        if isinstance(source, str):
            return source

        name = source.__name__ if isinstance(source, type) else type(source).__name__

        if self._type_name_filter is not None:
            name = self._type_name_filter(name)

        return name

    # ========== ========== ========== ========== ========== public methods
    def has_content(self) -> bool:
        return self._force_brackets or bool(self._fields)

    def append(self, name: str | None, value: Any) -> Self:
        """
        Append a named field.

        ``None`` values are skipped unless ``include_nulls`` is set.
        """
        if value is not None or self._include_nulls:
            self._fields.append(f"{name}={self._render(value)}" if name else self._render(value))
        return self

    def append_value(self, value: Any) -> Self:
        """Append an unnamed field."""
        return self.append(None, value)

    def append_super(self, text: ToStringBuilder | str | None) -> Self:
        """
        Append the fields of a parent class rendering.

        Given a builder, its fields are appended. Given a string, the part
        between the first left bracket and the last right bracket is
        appended, or the whole string if it has no brackets.
        """
        if text is None:
            return self

        if isinstance(text, ToStringBuilder):
            between = text._separator.join(text._fields)

        else:
            between = str(text)
            left = between.find(self._left_bracket) if self._left_bracket else -1

            if left >= 0:
                start = left + len(self._left_bracket)
                end = between.rfind(self._right_bracket) if self._right_bracket else len(between)
                between = between[start:end] if start <= end else between[start:]

        if between:
            self._fields.append(between)

        return self

    # ========== ========== ========== ========== ========== private methods
    def _child(self, source: Any) -> ToStringBuilder:
        child = type(self)(source)
        child._separator = self._separator
        child._left_bracket = self._left_bracket
        child._right_bracket = self._right_bracket
        child._force_brackets = self._force_brackets
        child._include_nulls = self._include_nulls
        child._max_value_length = self._max_value_length
        child._type_name_filter = self._type_name_filter
        return child

    def _append_properties_of(self, source: Any) -> Self:
        with RecursionGuards.RENDER.visiting(source):
            for name, prop in properties_of(source).items():
                if name != TYPE_PROPERTY and prop.readable:
                    self.append(name, prop.read(source))
        return self

    def _render(self, value: Any) -> str:
        guard = RecursionGuards.RENDER

        if value is not None and guard.in_progress(value):
            return object.__repr__(value)

        with guard.visiting(value):
            return self._render_value(value)

    def _render_value(self, value: Any) -> str:

        quoted = False

        if value is None:
            text = 'None'

        elif isinstance(value, str):
            quoted = True
            text = value.replace('\\', '\\\\').replace('"', '\\"')

        elif _renders_reflectively(value):
            text = str(self._child(value)._append_properties_of(value))

        else:
            text = str(value)
            if text == object.__repr__(value):
                text = str(self._child(value)._append_properties_of(value))

        length = len(value) if quoted else len(text)

        if length > self._max_value_length:
            return f'<{type(value).__name__}>'

        return f'"{text}"' if quoted else text


def _option(options: Any, name: str, default: Any) -> Any:
    if options is None:
        return default
    return getattr(options, name, default)


def _renders_reflectively(value: Any) -> bool:
    kind = type(value)
    return kind.__str__ is object.__str__ and kind.__repr__ in (object.__repr__, reflective_repr)


# ========== ========== ========== ========== ========== functions
def reflect(source: Any, options: RenderOptions | None = None, **overrides: Any) -> str:
    """
    Render an object through its readable properties.

    Parameters
    ----------
    source : object
    options : RenderOptions, optional
        Rendering settings.
    **overrides
        Individual settings taking precedence over ``options``, e.g.
        ``separator=" | "`` or ``include_nulls=True``.

    Returns
    -------
    str

    Examples
    --------
    >>> class Point:
    ...     def __init__(self, x, y):
    ...         self.x, self.y = x, y
    >>> reflect(Point(1, None), include_nulls=True)
    'Point{x=1, y=None}'
    """
    if overrides:
        unknown = set(overrides) - _OPTION_NAMES
        if unknown:
            raise TypeError(f"Unknown render option(s): {', '.join(sorted(unknown))}")
        options = _Overrides(options, overrides)

    return str(ToStringBuilder.reflect(source, options=options))


def render_value(value: Any, options: RenderOptions | None = None) -> str:
    """
    Render a single value as it would appear as a field of ``reflect``.
    """
    return ToStringBuilder(None, options=options)._render(value)


def reflective_repr(self: Any) -> str:
    """``__repr__`` implementation based on ``reflect``."""
    return reflect(self)


class _Overrides:

    def __init__(self, options: Any, overrides: dict[str, Any]) -> None:
        self._options = options
        self._overrides = overrides

    def __getattr__(self, name: str) -> Any:
        if name in self._overrides:
            return self._overrides[name]
        if self._options is None:
            raise AttributeError(name)
        return getattr(self._options, name)


__all__ = [
    "TypeNameFilter",
    "DEFAULT_SEPARATOR",
    "DEFAULT_LEFT_BRACKET",
    "DEFAULT_RIGHT_BRACKET",
    "DEFAULT_MAX_VALUE_LENGTH",
    "chain_filters",
    "load_type_name_filters",
    "ToStringBuilder",
    "reflect",
    "render_value",
    "reflective_repr",
]
