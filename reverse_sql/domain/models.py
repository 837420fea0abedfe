"""
Core domain models for reverse-sql.

These models describe the introspected schema (tables, table-valued types,
stored procedures) and the class definitions synthesized from it. They are
immutable: once built from a snapshot they are only read, and derived
values are produced with ``dataclasses.replace``.
"""

from dataclasses import dataclass, field
from typing import Tuple, Optional, Dict, Any


@dataclass(frozen=True)
class DbColumn:
    """
    A column of a table, table-valued type or stored procedure result set.

    ``name`` may be empty for computed result-set columns; ``ordinal`` is
    then the only stable way to refer to the column. ``object_type_name``
    holds the C# type once the schema builder has resolved it.
    """

    name: Optional[str]
    ordinal: int
    sql_type_name: str
    is_nullable: bool = True
    is_primary_key: bool = False
    is_identity: bool = False

    # Size and precision
    length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None

    object_type_name: Optional[str] = None

    def __post_init__(self):
        if self.ordinal < 0:
            raise ValueError(f"Column ordinal must be >= 0, got {self.ordinal}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'name': self.name,
            'ordinal': self.ordinal,
            'sql_type_name': self.sql_type_name,
            'is_nullable': self.is_nullable,
            'is_primary_key': self.is_primary_key,
            'is_identity': self.is_identity,
            'length': self.length,
            'precision': self.precision,
            'scale': self.scale,
            'object_type_name': self.object_type_name,
        }


@dataclass(frozen=True)
class DbTable:
    """
    A table or a table-valued type. Identity is ``(schema, name)``.
    """

    schema: Optional[str]
    name: str
    columns: Tuple[DbColumn, ...] = ()

    @property
    def qualified_name(self) -> str:
        """``schema.name``, or just the name when the schema is unknown."""
        return f"{self.schema}.{self.name}" if self.schema else self.name

    @property
    def primary_key_columns(self) -> Tuple[DbColumn, ...]:
        return tuple(col for col in self.columns if col.is_primary_key)

    @property
    def has_primary_key(self) -> bool:
        return bool(self.primary_key_columns)

    @property
    def identity_column(self) -> Optional[DbColumn]:
        """The identity column, if the table has one."""
        for col in self.columns:
            if col.is_identity:
                return col
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'schema': self.schema,
            'name': self.name,
            'columns': [col.to_dict() for col in self.columns],
        }


@dataclass(frozen=True)
class SqlParameter:
    """
    A stored procedure parameter.

    The name usually keeps its SQL marker (``@customerId``). Table-valued
    parameters reference the table type by schema and name.
    """

    name: str
    sql_type_name: str
    is_nullable: bool = True
    is_output: bool = False
    ordinal: Optional[int] = None

    length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None

    table_type_schema: Optional[str] = None
    table_type_name: Optional[str] = None

    object_type_name: Optional[str] = None

    @property
    def is_table_valued(self) -> bool:
        return bool(self.table_type_name)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'name': self.name,
            'sql_type_name': self.sql_type_name,
            'is_nullable': self.is_nullable,
            'is_output': self.is_output,
            'ordinal': self.ordinal,
            'length': self.length,
            'precision': self.precision,
            'scale': self.scale,
            'table_type_schema': self.table_type_schema,
            'table_type_name': self.table_type_name,
            'object_type_name': self.object_type_name,
        }


@dataclass(frozen=True)
class ResultSet:
    """The columnar shape returned by a stored procedure."""

    columns: Tuple[DbColumn, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.columns


@dataclass(frozen=True)
class SqlStoredProcedure:
    """
    A stored procedure with its parameters and result sets.

    Only the first result set is authoritative; a procedure may yield more,
    but exactly one inferred result shape per procedure is supported.
    """

    schema: Optional[str]
    name: str
    parameters: Tuple[SqlParameter, ...] = ()
    result_sets: Tuple[ResultSet, ...] = ()

    @property
    def qualified_name(self) -> str:
        return f"{self.schema}.{self.name}" if self.schema else self.name

    @property
    def first_result_set(self) -> Optional[ResultSet]:
        """The first result set when it has at least one column."""
        if not self.result_sets or self.result_sets[0].is_empty:
            return None
        return self.result_sets[0]

    @property
    def has_result_set(self) -> bool:
        return self.first_result_set is not None


@dataclass(frozen=True)
class DatabaseSchema:
    """A fully materialized schema snapshot for one generation run."""

    tables: Tuple[DbTable, ...] = ()
    table_types: Tuple[DbTable, ...] = ()
    stored_procedures: Tuple[SqlStoredProcedure, ...] = ()

    def get_table_type(self, schema: Optional[str], name: str) -> Optional[DbTable]:
        """Look up a table type by schema and name (case-insensitive)."""
        for table_type in self.table_types:
            if table_type.name.lower() != name.lower():
                continue
            if schema is None or (table_type.schema or "").lower() == schema.lower():
                return table_type
        return None


@dataclass(frozen=True)
class PropertyDefinition:
    """A property of a generated class."""

    name: str
    type_name: str
    is_nullable: bool = False
    access_modifier: str = "public"

    @property
    def declared_type_name(self) -> str:
        """The type as it appears in source, e.g. ``int?``."""
        return f"{self.type_name}?" if self.is_nullable else self.type_name


@dataclass(frozen=True)
class ClassDefinition:
    """A generated class: a name plus an ordered property list."""

    name: str
    properties: Tuple[PropertyDefinition, ...] = field(default_factory=tuple)
    access_modifier: str = "public"
    description: Optional[str] = None
