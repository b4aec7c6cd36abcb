#  -*- coding: utf-8 -*-
"""
Rich terminal display of bean properties.

``describe_properties`` tabulates the properties of any object as a
``pandas.DataFrame``; ``Displayable`` is a mixin rendering an object as a
styled Rich panel, by default a form of its readable property values.
"""

from __future__ import annotations

import pandas

from io import StringIO

from rich import box
from rich.align import Align
from rich.console import Console, RenderableType
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from reflecta.beans import get_property_values
from reflecta.cache import properties_of
from reflecta.config import DisplaySettings, RenderOptions
from reflecta.properties import TYPE_PROPERTY
from reflecta.strings import render_value

# ---------- ---------- ---------- ---------- ---------- ---------- typing
from typing import Any


PROPERTY_COLUMNS = ('name', 'type', 'readable', 'writable', 'value')


# ========== ========== ========== ========== ========== ==========
def describe_properties(obj: Any, options: RenderOptions | None = None) -> pandas.DataFrame:
    """
    Tabulate the properties of an object or a class.

    Parameters
    ----------
    obj : object or type
        Given a class, the ``value`` column is empty.
    options : RenderOptions, optional
        Settings used to render the values.

    Returns
    -------
    pandas.DataFrame
        One row per property, indexed by ``name``, with columns ``type``,
        ``readable``, ``writable`` and ``value``.

    Examples
    --------
    >>> class Point:
    ...     x: int = 1
    ...     y: int = 2
    >>> describe_properties(Point())['value'].tolist()
    ['1', '2']
    """
    rows = []

    for name, prop in properties_of(obj).items():

        if name == TYPE_PROPERTY:
            continue

        if isinstance(obj, type) or not prop.readable:
            value = None
        else:
            value = render_value(prop.read(obj), options)

        rows.append((name, _type_name(prop.type), prop.readable, prop.writable, value))

    return pandas.DataFrame(rows, columns=list(PROPERTY_COLUMNS)).set_index('name')


def _type_name(hint: Any) -> str:
    if hint is None:
        return ''
    if isinstance(hint, str):
        return hint
    if isinstance(hint, type):
        return hint.__name__
    return repr(hint).replace('typing.', '')


def _justifications(frame: pandas.DataFrame, align_column: str | dict[str, str] | None) -> list[str]:

    if isinstance(align_column, str):
        return [align_column] * len(frame.columns)

    if isinstance(align_column, dict):
        return [align_column.get(str(column), 'left') for column in frame.columns]

    if align_column is None:
        types = pandas.api.types
        return ['right' if types.is_numeric_dtype(frame[column]) and not types.is_bool_dtype(frame[column])
                else 'left' for column in frame.columns]

    raise TypeError(f'Invalid type for align_column argument: {type(align_column)}')


class _SettingsFactory:
    """Non-data descriptor creating one ``DisplaySettings`` per instance on first access."""

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: object | None, owner: type) -> Any:
        if instance is None:
            return self

        settings = instance.__dict__[self.name] = DisplaySettings()
        return settings


class Displayable:
    """
    Mixin for objects with Rich terminal display.

    The panel title is produced by ``_title()`` and the body by
    ``_content()``. By default the title is the class name and the body a
    form of the readable property values, so any bean gets a useful display
    without further code.

    Attributes
    ----------
    display_settings : DisplaySettings
        Configuration for display formatting, created per instance on first
        access. Assign a shared instance to share styling between objects.

    Examples
    --------
    Custom content::

        class Report(Displayable):
            def __init__(self, frame):
                self.frame = frame

            def _title(self):
                return Text("Data Report")

            def _content(self):
                return self.format_as_table(self.frame)

        report = Report(frame)
        report.display_settings.panel_border_style = 'green'
        print(report.format())
    """

    # not annotated: display settings are not a property of the object
    display_settings = _SettingsFactory()

    # ========== ========== ========== ========== ========== special methods
    def __rich__(self) -> RenderableType:
        """Rich protocol: the display panel."""
        return self._display_panel()

    # ========== ========== ========== ========== ========== protected methods
    def _title(self) -> Text:
        """Panel title, the class name by default."""
        return Text(type(self).__name__, style='bold')

    def _content(self) -> RenderableType:
        """Panel body, a form of the readable property values by default."""
        values = {name: render_value(value) for name, value in get_property_values(self).items()}
        return self.format_as_form(values) if values else Text('(no properties)', style='dim')

    def _display_panel(self) -> Panel:
        """
        Create formatted panel with current settings.

        Combines ``_title()`` and ``_content()`` with ``display_settings``
        styling.
        """
        settings = self.display_settings

        return Panel(
            self._content(),
            title=self._title(),
            border_style=settings.panel_border_style,
            title_align=settings.panel_title_align,
            expand=False,
            box=getattr(box, settings.panel_box)
        )

    # ========== ========== ========== ========== ========== public methods
    def format(self, color: bool = True) -> str:
        """
        Render the display panel as text.

        Parameters
        ----------
        color : bool, optional
            Include ANSI style codes. Default True.

        Returns
        -------
        str
        """
        string_io = StringIO()
        console = Console(file=string_io,
                          force_terminal=color,
                          no_color=not color,
                          width=self.display_settings.console_width)

        console.print(self._display_panel())

        return string_io.getvalue()

    def format_as_form(self, data: dict[str, str] | pandas.Series) -> Table:
        """
        Format data as key-value form.

        Keys get ``':'`` appended and use ``property_style``; values are
        left-aligned without styling.

        Parameters
        ----------
        data : dict[str, str] or pandas.Series

        Returns
        -------
        Table
        """
        form = Table.grid(padding=(0, 4), expand=False)
        form.add_column(justify='left', style=self.display_settings.property_style)
        form.add_column(justify='left', style=None)

        for prop, value in data.items():
            form.add_row(f'{prop}:', escape(str(value)))

        return form

    def format_as_table(self,
                        frame: pandas.DataFrame,
                        show_index: bool = True,
                        align_column: str | dict[str, str] | None = None,
                        max_rows: int = 31,
                        round_floats: int | None = None) -> Table:
        """
        Format a DataFrame as a Rich table.

        The header row uses ``table_header_style`` and the index column
        ``table_index_style`` of the display settings.

        Parameters
        ----------
        frame : pandas.DataFrame
        show_index : bool, optional
            Include the index as first column. Default True.
        align_column : str, dict[str, str] or None, optional
            One alignment for all columns, or per column name (others
            left). None right-aligns numeric columns and left-aligns the rest.
        max_rows : int, optional
            Longer frames show their first and last rows around a ``...``
            row. Default 31.
        round_floats : int, optional
            Decimals of float columns; ``table_round_floats`` by default.

        Returns
        -------
        Table

        Raises
        ------
        TypeError
            If ``align_column`` or ``round_floats`` has an invalid type.
        """
        settings = self.display_settings

        if round_floats is None:
            round_floats = settings.table_round_floats

        if round_floats is not None and (not isinstance(round_floats, int) or isinstance(round_floats, bool)):
            raise TypeError(f'Invalid type for round_floats argument: {type(round_floats)}')

        data = frame.reset_index() if show_index else frame.copy()
        names = [str(column) for column in data.columns]

        table = Table.grid(padding=(0, settings.table_spacing), expand=False)

        for justify in _justifications(data, align_column):
            table.add_column(justify=justify)

        table.add_row(*(Align.center(escape(name)) for name in names), style=settings.table_header_style)

        if round_floats is not None:
            for column in data.select_dtypes(include='float').columns:
                data[column] = data[column].map(f'{{:.{round_floats}f}}'.format)

        cells = data.astype(str)

        if len(cells) > max_rows:
            half = (max_rows - 1) // 2
            parts = [cells.head(half), None, cells.tail(half)]
        else:
            parts = [cells]

        for part in parts:

            if part is None:
                table.add_row(*(Align.center('...') for _ in names))
                continue

            for row in part.itertuples(index=False):
                values = [escape(value) for value in row]
                if show_index:
                    values[0] = Text(row[0], style=settings.table_index_style or '')
                table.add_row(*values)

        return table

    def format_properties(self) -> Table:
        """Table of the properties of this object (see ``describe_properties``)."""
        frame = describe_properties(self)

        if not self.display_settings.show_types:
            frame = frame.drop(columns='type')

        return self.format_as_table(frame.fillna(''), align_column={'readable': 'center', 'writable': 'center'})

    def to_html(self) -> str:
        """Export display as HTML with inline styles."""
        console = Console(record=True, file=StringIO(), width=self.display_settings.console_width)
        console.print(self)
        return console.export_html()

    def to_svg(self) -> str:
        """Export display as SVG."""
        console = Console(record=True, file=StringIO(), width=self.display_settings.console_width)
        console.print(self)
        return console.export_svg()


__all__ = [
    "describe_properties",
    "Displayable",
]
