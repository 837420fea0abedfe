"""
SQL Server to C# type mapping.

The mapper never falls back to a default type: a column whose type cannot
be mapped would produce incorrectly typed code, so unknown types raise
``UnsupportedTypeError``.
"""

import re

from ..constants import (
    SQL_TO_CSHARP_TYPE_MAP,
    SQL_DB_TYPE_MAP,
    TypeCategories,
)
from ..exceptions import UnsupportedTypeError


_SIZE_SUFFIX = re.compile(r"\s*\(.*\)\s*$")


class SqlToCSharpTypeMapper:
    """Maps SQL Server type names to C# type names."""

    @staticmethod
    def normalize(sql_type_name: str) -> str:
        """
        Normalize a SQL type name for lookup.

        Example:
            >>> SqlToCSharpTypeMapper.normalize(" NVarChar(50) ")
            'nvarchar'
            >>> SqlToCSharpTypeMapper.normalize("[decimal](18, 2)")
            'decimal'
        """
        if not isinstance(sql_type_name, str):
            raise TypeError(f"Expected string, got {type(sql_type_name).__name__}")
        name = _SIZE_SUFFIX.sub("", sql_type_name.strip())
        return name.replace("[", "").replace("]", "").strip().lower()

    @staticmethod
    def map_type(sql_type_name: str) -> str:
        """
        Map a SQL type name to a C# type name.

        Args:
            sql_type_name: SQL Server type name, case-insensitive

        Returns:
            The C# type name, e.g. ``int`` or ``string``

        Raises:
            UnsupportedTypeError: If the type has no mapping
        """
        normalized = SqlToCSharpTypeMapper.normalize(sql_type_name)
        try:
            return SQL_TO_CSHARP_TYPE_MAP[normalized]
        except KeyError:
            raise UnsupportedTypeError(sql_type_name) from None

    @staticmethod
    def can_be_nullable(type_name: str) -> bool:
        """
        Check whether a C# type needs (and supports) a ``Nullable<T>`` wrapper.

        Reference types such as ``string`` or ``byte[]`` already represent
        absence with ``null`` and return False, as do generated classes.
        """
        return type_name in TypeCategories.NULLABLE_VALUE_TYPES

    @staticmethod
    def map_db_type(sql_type_name: str) -> str:
        """Map a SQL type name to its ``System.Data.SqlDbType`` member."""
        normalized = SqlToCSharpTypeMapper.normalize(sql_type_name)
        try:
            return SQL_DB_TYPE_MAP[normalized]
        except KeyError:
            raise UnsupportedTypeError(sql_type_name) from None

    @staticmethod
    def is_writable(sql_type_name: str) -> bool:
        """False for server-generated types such as ``rowversion``."""
        normalized = SqlToCSharpTypeMapper.normalize(sql_type_name)
        return normalized not in TypeCategories.NON_WRITABLE_SQL_TYPES
