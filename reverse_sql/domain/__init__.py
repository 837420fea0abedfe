"""
Domain module for reverse-sql.

This module contains the schema model, the SQL to C# type mapper and the
naming policy. None of it performs I/O.
"""

from .models import (
    DbColumn,
    DbTable,
    SqlParameter,
    ResultSet,
    SqlStoredProcedure,
    DatabaseSchema,
    ClassDefinition,
    PropertyDefinition,
)

from .type_mapping import SqlToCSharpTypeMapper

from .naming import (
    ObjectNameProvider,
    DefaultObjectNameProvider,
    get_object_name_provider,
    cleanup,
    capitalize,
    upper_to_lower_camel_case,
    is_reserved_keyword,
    escape_identifier,
    unescape_identifier,
)

__all__ = [
    # Schema model
    'DbColumn',
    'DbTable',
    'SqlParameter',
    'ResultSet',
    'SqlStoredProcedure',
    'DatabaseSchema',

    # Output model
    'ClassDefinition',
    'PropertyDefinition',

    # Type mapping
    'SqlToCSharpTypeMapper',

    # Naming
    'ObjectNameProvider',
    'DefaultObjectNameProvider',
    'get_object_name_provider',
    'cleanup',
    'capitalize',
    'upper_to_lower_camel_case',
    'is_reserved_keyword',
    'escape_identifier',
    'unescape_identifier',
]
