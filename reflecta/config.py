#  -*- coding: utf-8 -*-
"""
Configuration objects.

Settings are plain ``Bean`` subclasses with annotated class-level defaults,
passed explicitly to the functions that use them. There is no process-wide
configuration state.
"""

from __future__ import annotations

from reflecta.bean import Bean
from reflecta.strings import (TypeNameFilter,
                              DEFAULT_SEPARATOR,
                              DEFAULT_LEFT_BRACKET,
                              DEFAULT_RIGHT_BRACKET,
                              DEFAULT_MAX_VALUE_LENGTH)


# ========== ========== ========== ========== ========== ==========
class RenderOptions(Bean):
    """
    Settings of ``reflecta.strings.reflect``.

    Attributes
    ----------
    separator : str
        Separator between fields. Default ``", "``.
    left_bracket, right_bracket : str
        Brackets around the fields. Default ``"{"`` and ``"}"``.
    force_brackets : bool
        Render the brackets even without fields. Default False.
    include_nulls : bool
        Render ``None`` values. Default False.
    max_value_length : int
        Length above which a value is abbreviated to ``<TypeName>``.
        Default 128.
    type_name_filter : callable or None
        Maps class names to rendered prefixes. Default None.

    Examples
    --------
    >>> from reflecta.strings import reflect
    >>> options = RenderOptions(separator='; ', left_bracket='(', right_bracket=')')
    >>> reflect(RenderOptions(max_value_length=64), options, type_name_filter=str.upper)[:14]
    'RENDEROPTIONS('
    """

    separator: str = DEFAULT_SEPARATOR
    left_bracket: str = DEFAULT_LEFT_BRACKET
    right_bracket: str = DEFAULT_RIGHT_BRACKET
    force_brackets: bool = False
    include_nulls: bool = False
    max_value_length: int = DEFAULT_MAX_VALUE_LENGTH
    type_name_filter: TypeNameFilter | None = None


class DisplaySettings(Bean):
    """
    Configuration for terminal display formatting.

    All styling properties use Rich's style syntax, supporting colors,
    attributes (bold, italic), and combinations.

    Attributes
    ----------
    console_width : int
        Maximum console output width in characters. Default 150.
    property_style : str
        Style for property labels in forms. Default 'bold bright_yellow'.
    panel_border_style : str
        Style for panel borders. Default 'bright_cyan'.
    panel_box : str
        Box style name from rich.box. Default 'ROUNDED'.
    panel_title_align : str
        Panel title alignment. Default 'center'.
    table_index_style : str or None
        Style for table index column. Default None.
    table_header_style : str or None
        Style for table headers. Default 'bold bright_yellow'.
    table_round_floats : int or None
        Decimal places for float rounding. Default None.
    table_spacing : int
        Column spacing in characters. Default 4.
    show_types : bool
        Show the declared type column in property tables. Default True.
    """

    # ---------- ---------- ---------- ---------- console
    console_width: int = 150

    # ---------- ---------- ---------- ---------- property
    property_style: str = 'bold bright_yellow'

    # ---------- ---------- ---------- ---------- panel
    panel_border_style: str = 'bright_cyan'
    panel_box: str = 'ROUNDED'
    panel_title_align: str = 'center'

    # ---------- ---------- ---------- ---------- table
    table_index_style: str | None = None
    table_header_style: str | None = 'bold bright_yellow'
    table_round_floats: int | None = None
    table_spacing: int = 4
    show_types: bool = True


__all__ = [
    "RenderOptions",
    "DisplaySettings",
]
