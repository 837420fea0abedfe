"""
reverse-sql: generate C# data access code from a SQL Server schema.

The naming policy (``ObjectNameProvider``), the SQL to C# type mapper and
the class builders can be used on their own; the ``reverse-sql`` command
runs the whole pipeline from a schema snapshot.
"""

from .options import ReverseSqlOptions
from .class_builder import ResultSetClassBuilder, TableClassBuilder, build_class, build_property
from .schema_builder import ReverseDbBuilder
from .introspection import load_schema_snapshot, parse_schema_snapshot
from .exceptions import (
    ReverseSqlError,
    ConfigurationError,
    SchemaIntrospectionError,
    UnsupportedTypeError,
    CodeGenerationError,
    PluginError,
)

__version__ = "0.1.0"

__all__ = [
    'ReverseSqlOptions',
    'ResultSetClassBuilder',
    'TableClassBuilder',
    'build_class',
    'build_property',
    'ReverseDbBuilder',
    'load_schema_snapshot',
    'parse_schema_snapshot',
    'ReverseSqlError',
    'ConfigurationError',
    'SchemaIntrospectionError',
    'UnsupportedTypeError',
    'CodeGenerationError',
    'PluginError',
]
