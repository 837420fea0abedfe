"""
Naming convention utilities for reverse-sql.

This module turns raw schema identifiers into C# class, property, method
and parameter names. Every function here is pure: the code generators ask
for the same name several times (model class, mapper, data-access method)
and must always get the same answer.
"""

import re
from abc import ABC, abstractmethod
from typing import Optional

from ..constants import CSHARP_KEYWORDS, DefaultConfig, NamingDefaults
from ..options import ReverseSqlOptions
from .models import DbColumn, DbTable, SqlParameter, SqlStoredProcedure


_NON_WORD_CHARACTERS = re.compile(r"[^\w]", re.ASCII)
_LEADING_ACRONYM = re.compile(r"^([A-Z]+)(?=[A-Z][a-z])")


def cleanup(name: Optional[str]) -> str:
    """
    Remove every character that is not a letter, digit or underscore.

    The function is idempotent and keeps the relative order of the
    retained characters.

    Args:
        name: Raw schema identifier, may be None

    Returns:
        The cleaned identifier, or an empty string

    Example:
        >>> cleanup("Order Details")
        'OrderDetails'
        >>> cleanup("sp-Get#Orders$")
        'spGetOrders'
    """
    if not name:
        return ""
    return _NON_WORD_CHARACTERS.sub("", name)


def capitalize(name: str) -> str:
    """Upper-case the first character and leave the rest untouched."""
    if not name:
        return ""
    return name[0].upper() + name[1:]


def upper_to_lower_camel_case(name: str) -> str:
    """
    Convert an UpperCamelCase identifier to lowerCamelCase.

    A leading acronym is lowered as a whole, an all-caps name is lowered
    completely.

    Example:
        >>> upper_to_lower_camel_case("CustomerId")
        'customerId'
        >>> upper_to_lower_camel_case("XMLDocument")
        'xmlDocument'
        >>> upper_to_lower_camel_case("ID")
        'id'
    """
    if not name:
        return ""
    if name.isupper():
        return name.lower()
    match = _LEADING_ACRONYM.match(name)
    if match:
        acronym = match.group(1)
        return acronym.lower() + name[len(acronym):]
    return name[0].lower() + name[1:]


def is_reserved_keyword(name: str) -> bool:
    """Check if name is a reserved C# keyword."""
    return name in CSHARP_KEYWORDS


def escape_identifier(name: str) -> str:
    """Escape a reserved keyword as a C# verbatim identifier (``@class``)."""
    if is_reserved_keyword(name):
        return f"{NamingDefaults.IDENTIFIER_ESCAPE}{name}"
    return name


def unescape_identifier(name: str) -> str:
    """Drop the verbatim prefix so the name can be composed into a longer one."""
    if name.startswith(NamingDefaults.IDENTIFIER_ESCAPE):
        return name[len(NamingDefaults.IDENTIFIER_ESCAPE):]
    return name


def ensure_leading_character(name: str) -> str:
    """Prefix an underscore when a name would start with a digit."""
    if name and name[0].isdigit():
        return "_" + name
    return name


class ObjectNameProvider(ABC):
    """
    Naming policy for every generated identifier.

    Implement this class to customize naming without touching the builders
    or the code generators.
    """

    @abstractmethod
    def get_table_class_name(self, table: DbTable) -> str:
        """Returns the name to be generated for the specified table."""

    @abstractmethod
    def get_table_type_class_name(self, table_type: DbTable) -> str:
        """Returns the name to be generated for the specified table type."""

    @abstractmethod
    def get_column_property_name(self, column: DbColumn) -> str:
        """Returns the property name for a column of a table or result set."""

    @abstractmethod
    def get_table_insert_method_name(self, table: DbTable) -> str:
        """Method name for inserting data into the table."""

    @abstractmethod
    def get_table_delete_method_name(self, table: DbTable) -> str:
        """Method name for deleting data from the table."""

    @abstractmethod
    def get_table_update_method_name(self, table: DbTable) -> str:
        """Method name for updating data in the table."""

    @abstractmethod
    def get_table_select_by_primary_key_method_name(self, table: DbTable) -> str:
        """Method name for selecting a row by its primary key."""

    @abstractmethod
    def get_table_select_by_expression_method_name(self, table: DbTable) -> str:
        """Method name for selecting rows matching a predicate."""

    @abstractmethod
    def get_stored_procedure_method_name(self, sp: SqlStoredProcedure) -> str:
        """Method name for calling the stored procedure."""

    @abstractmethod
    def get_stored_procedure_result_set_class_name(self, sp: SqlStoredProcedure) -> str:
        """Class name for the result set of the stored procedure."""

    @abstractmethod
    def get_result_set_mapper_class_name(self, result_set_class_name: str) -> str:
        """Class name for the mapper from data records to a generated class."""

    @abstractmethod
    def get_parameter_name(self, parameter: SqlParameter) -> str:
        """C# parameter name for the SQL parameter."""


class DefaultObjectNameProvider(ObjectNameProvider):
    """
    Deterministic default naming policy.

    Names are cleaned of non-word characters and, when ``include_schema`` is
    set, objects outside the default schema get a ``Schema_`` prefix. The
    prefix rule is implemented once and shared by tables, table types,
    stored procedures, result-set classes and CRUD methods.
    """

    def __init__(self, include_schema: bool = False, default_schema: str = DefaultConfig.DEFAULT_SCHEMA):
        self._include_schema = include_schema
        self._default_schema = default_schema

    @property
    def include_schema(self) -> bool:
        return self._include_schema

    @property
    def default_schema(self) -> str:
        return self._default_schema

    def get_table_class_name(self, table: DbTable) -> str:
        return self._get_clean_object_name_with_schema(table.schema, table.name)

    def get_table_type_class_name(self, table_type: DbTable) -> str:
        return self._get_clean_object_name_with_schema(table_type.schema, table_type.name)

    def get_column_property_name(self, column: DbColumn) -> str:
        name = cleanup(column.name)
        if not name:
            return f"{NamingDefaults.POSITIONAL_COLUMN_PREFIX}{column.ordinal}"
        return escape_identifier(ensure_leading_character(name))

    def get_stored_procedure_result_set_class_name(self, sp: SqlStoredProcedure) -> str:
        return self._get_clean_object_name_with_schema(
            sp.schema, f"{sp.name}{NamingDefaults.RESULT_SET_CLASS_SUFFIX}"
        )

    def get_result_set_mapper_class_name(self, result_set_class_name: str) -> str:
        return f"{unescape_identifier(result_set_class_name)}{NamingDefaults.MAPPER_CLASS_SUFFIX}"

    def get_stored_procedure_method_name(self, sp: SqlStoredProcedure) -> str:
        return self._get_clean_object_name_with_schema(sp.schema, sp.name)

    # Format: "Sales_InsertOrder"
    def get_table_insert_method_name(self, table: DbTable) -> str:
        return self._get_crud_method_name(table, NamingDefaults.INSERT_VERB)

    def get_table_delete_method_name(self, table: DbTable) -> str:
        return self._get_crud_method_name(table, NamingDefaults.DELETE_VERB)

    def get_table_update_method_name(self, table: DbTable) -> str:
        return self._get_crud_method_name(table, NamingDefaults.UPDATE_VERB)

    def get_table_select_by_primary_key_method_name(self, table: DbTable) -> str:
        return self._get_crud_method_name(table, NamingDefaults.SELECT_VERB)

    # Format: "Sales_SelectOrderWhere"
    def get_table_select_by_expression_method_name(self, table: DbTable) -> str:
        return self._get_crud_method_name(
            table, NamingDefaults.SELECT_VERB, NamingDefaults.SELECT_WHERE_SUFFIX
        )

    def get_parameter_name(self, parameter: SqlParameter) -> str:
        name = parameter.name or ""
        if name.startswith(NamingDefaults.SQL_PARAMETER_MARKER):
            name = name[len(NamingDefaults.SQL_PARAMETER_MARKER):]
        name = upper_to_lower_camel_case(cleanup(name))
        if not name:
            return f"{NamingDefaults.POSITIONAL_PARAMETER_PREFIX}{parameter.ordinal or ''}"
        name = ensure_leading_character(name)
        if is_reserved_keyword(name):
            # Re-prefix with the marker so the name maps 1:1 to the SQL parameter
            name = f"{NamingDefaults.SQL_PARAMETER_MARKER}{name}"
        return name

    def _get_crud_method_name(self, table: DbTable, verb: str, suffix: str = "") -> str:
        return self._get_clean_object_name_with_schema(
            table.schema, f"{verb}{capitalize(table.name)}{suffix}"
        )

    def _is_qualified(self, schema: Optional[str]) -> bool:
        if not self._include_schema or not schema:
            return False
        return schema.lower() != (self._default_schema or "").lower()

    def _get_clean_object_name_with_schema(self, schema: Optional[str], name: str) -> str:
        cleaned_name = cleanup(name)
        if self._is_qualified(schema):
            cleaned_schema = cleanup(capitalize(schema))
            result = f"{cleaned_schema}{NamingDefaults.SCHEMA_SEPARATOR}{cleaned_name}"
        else:
            result = cleaned_name
        return escape_identifier(ensure_leading_character(result))


def get_object_name_provider(options: Optional[ReverseSqlOptions] = None) -> ObjectNameProvider:
    """Return the provider configured in options, or a default one built from them."""
    opts = options or ReverseSqlOptions()
    if opts.object_name_provider is not None:
        return opts.object_name_provider
    return DefaultObjectNameProvider(opts.include_schema, opts.default_schema)
