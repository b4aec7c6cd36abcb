#  -*- coding: utf-8 -*-
"""
Reflecta: generic bean reflection for Python objects.

Reflecta discovers the *bean properties* of arbitrary objects (annotated
fields, slots, descriptors, ``property`` objects and ``get_``/``is_``/``set_``
accessor methods) and builds generic, cycle-safe operations on top of them.

Key Features
------------
- **Property discovery**: Fields and accessors merged per name, cached per type
- **Property paths**: Read and write nested values by ``"a.b[0].c"`` paths
- **Structural operations**: Equality, hashing and deep cloning over properties
- **Deep rendering**: ``Type{name=value, ...}`` strings with cycle detection
- **Rich terminal output**: Property tables and panels with the Rich library

Modules
-------
properties
    Property model and discovery
cache
    Per-type property cache
paths, beans
    Property path resolution and generic bean access
guards
    Thread-local recursion guards
operations
    Structural equality, hash and deep clone
strings
    ToStringBuilder and reflective rendering
bean
    Bean value-object base class
classes
    Class lookup, instantiation and method invocation
display
    Rich display of properties

Examples
--------
>>> from reflecta import Bean, get_property_value
>>>
>>> class Address(Bean):
...     city: str = ''
>>>
>>> class Person(Bean):
...     name: str = ''
...     address: Address | None = None
>>>
>>> alice = Person(name='Alice', address=Address(city='Delft'))
>>> get_property_value(alice, 'address.city')
'Delft'
>>> alice
Person{name="Alice", address=Address{city="Delft"}}
>>> alice == alice.clone()
True
"""

import logging

from .errors import *
from .classes import *
from .properties import *
from .cache import *
from .paths import *
from .beans import *
from .guards import *
from .operations import *
from .strings import *
from .bean import *
from .config import *
from .display import *


logging.getLogger(__name__).addHandler(logging.NullHandler())


__all__ = [
    "ReflectionError",
    "PropertyNotFoundError",
    "IntrospectionError",
    "MissingClassError",
    "MissingMethodError",
    "MethodInvocationError",
    "InstantiationError",
    "BeanProperty",
    "ReflectedProperty",
    "PropertyMap",
    "discover_properties",
    "TypePropertyCache",
    "properties_of",
    "flush_caches",
    "PropertyPath",
    "resolve",
    "get_property_value",
    "find_property_value",
    "set_property_value",
    "get_bean_properties",
    "get_property_values",
    "create_bean",
    "RecursionGuards",
    "structural_equals",
    "structural_hash",
    "deep_clone",
    "ToStringBuilder",
    "reflect",
    "Bean",
    "RenderOptions",
    "DisplaySettings",
    "Displayable",
    "describe_properties",
]


try:
    # this will run if reflecta is installed
    from importlib.metadata import metadata, PackageNotFoundError

    meta = metadata('reflecta')

    __author__ = meta['Author']
    __license__ = meta['License']
    __version__ = meta['Version']

except PackageNotFoundError:
    # this will run during development
    import toml
    from pathlib import Path

    pyproject_filepath = Path(__file__).parent.parent / "pyproject.toml"

    with pyproject_filepath.open() as file:
        pyproject = toml.load(file)

    __version__ = pyproject["project"]["version"]
    __author__ = pyproject["project"]["authors"][0]["name"]
    __license__ = pyproject["project"]["license"]["text"]
