"""
Schema snapshot loading.

Catalog queries are run by a separate introspection step; this module reads
the snapshot it produces (YAML or JSON), validates it with pydantic and
turns it into the immutable domain model.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .domain.models import (
    DatabaseSchema,
    DbColumn,
    DbTable,
    ResultSet,
    SqlParameter,
    SqlStoredProcedure,
)
from .exceptions import SchemaIntrospectionError


logger = logging.getLogger(__name__)


# --- Pydantic Models for the Snapshot Format ---


class SnapshotColumn(BaseModel):
    """A column of a table, table type or result set."""

    name: Optional[str] = Field(None, description="Column name; empty for computed result-set columns.")
    ordinal: Optional[int] = Field(None, ge=0, description="Column position; defaults to the 1-based list position.")
    sql_type: str = Field(..., min_length=1, description="SQL Server type name.")
    nullable: bool = True
    primary_key: bool = False
    identity: bool = False
    length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None

    model_config = ConfigDict(extra="ignore")


class SnapshotTable(BaseModel):
    """A table or a table-valued type."""

    schema_name: Optional[str] = Field(None, alias="schema")
    name: str = Field(..., min_length=1)
    columns: List[SnapshotColumn] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class SnapshotParameter(BaseModel):
    """A stored procedure parameter."""

    name: str = Field(..., min_length=1)
    sql_type: str = Field(..., min_length=1)
    nullable: bool = True
    output: bool = False
    length: Optional[int] = None
    precision: Optional[int] = None
    scale: Optional[int] = None
    table_type: Optional[str] = Field(
        None, description="'schema.name' of the user table type for table-valued parameters."
    )

    model_config = ConfigDict(extra="ignore")


class SnapshotResultSet(BaseModel):
    columns: List[SnapshotColumn] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")


class SnapshotStoredProcedure(BaseModel):
    schema_name: Optional[str] = Field(None, alias="schema")
    name: str = Field(..., min_length=1)
    parameters: List[SnapshotParameter] = Field(default_factory=list)
    result_sets: List[SnapshotResultSet] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class SnapshotSchema(BaseModel):
    """Top-level structure of a schema snapshot file."""

    tables: List[SnapshotTable] = Field(default_factory=list)
    table_types: List[SnapshotTable] = Field(default_factory=list)
    stored_procedures: List[SnapshotStoredProcedure] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")

    @field_validator("tables", "table_types", "stored_procedures", mode="before")
    @classmethod
    def none_as_empty(cls, v: Any) -> Any:
        """Allow keys that are present but empty in YAML (``tables:``)."""
        return [] if v is None else v


# --- Conversion to the Domain Model ---


def _split_qualified_name(qualified_name: str) -> Tuple[Optional[str], str]:
    """Split ``schema.name`` into its parts; the schema is None when absent."""
    parts = qualified_name.replace("[", "").replace("]", "").split(".", 1)
    if len(parts) == 2:
        return parts[0], parts[1]
    return None, parts[0]


def _to_columns(columns: List[SnapshotColumn]) -> Tuple[DbColumn, ...]:
    return tuple(
        DbColumn(
            name=col.name,
            ordinal=col.ordinal if col.ordinal is not None else position,
            sql_type_name=col.sql_type,
            is_nullable=col.nullable,
            is_primary_key=col.primary_key,
            is_identity=col.identity,
            length=col.length,
            precision=col.precision,
            scale=col.scale,
        )
        for position, col in enumerate(columns, start=1)
    )


def _to_table(table: SnapshotTable) -> DbTable:
    return DbTable(schema=table.schema_name, name=table.name, columns=_to_columns(table.columns))


def _to_parameter(parameter: SnapshotParameter, ordinal: int) -> SqlParameter:
    table_type_schema, table_type_name = (None, None)
    if parameter.table_type:
        table_type_schema, table_type_name = _split_qualified_name(parameter.table_type)
    return SqlParameter(
        name=parameter.name,
        sql_type_name=parameter.sql_type,
        is_nullable=parameter.nullable,
        is_output=parameter.output,
        ordinal=ordinal,
        length=parameter.length,
        precision=parameter.precision,
        scale=parameter.scale,
        table_type_schema=table_type_schema,
        table_type_name=table_type_name,
    )


def _to_stored_procedure(sp: SnapshotStoredProcedure) -> SqlStoredProcedure:
    return SqlStoredProcedure(
        schema=sp.schema_name,
        name=sp.name,
        parameters=tuple(
            _to_parameter(p, position) for position, p in enumerate(sp.parameters, start=1)
        ),
        result_sets=tuple(ResultSet(columns=_to_columns(rs.columns)) for rs in sp.result_sets),
    )


def parse_schema_snapshot(data: Dict[str, Any], source: Optional[str] = None) -> DatabaseSchema:
    """
    Validate a raw snapshot dictionary and convert it to a DatabaseSchema.

    Args:
        data: Parsed YAML/JSON content
        source: Where the data came from, used in error messages

    Raises:
        SchemaIntrospectionError: If the data does not match the snapshot format
    """
    if not isinstance(data, dict):
        raise SchemaIntrospectionError(
            f"Schema snapshot must be a mapping, got {type(data).__name__}",
            snapshot_path=source,
        )

    try:
        snapshot = SnapshotSchema.model_validate(data)
    except ValidationError as e:
        errors = [
            f"{' -> '.join(str(loc) for loc in error.get('loc', ())) or 'Top Level'}: {error.get('msg')}"
            for error in e.errors()
        ]
        raise SchemaIntrospectionError(
            "Schema snapshot failed validation",
            snapshot_path=source,
            context={"errors": "; ".join(errors)},
        ) from e

    schema = DatabaseSchema(
        tables=tuple(_to_table(t) for t in snapshot.tables),
        table_types=tuple(_to_table(t) for t in snapshot.table_types),
        stored_procedures=tuple(_to_stored_procedure(sp) for sp in snapshot.stored_procedures),
    )
    logger.info(
        f"Found {len(schema.tables)} tables, {len(schema.table_types)} table types "
        f"and {len(schema.stored_procedures)} stored procedures."
    )
    return schema


def load_schema_snapshot(snapshot_path: Union[str, Path]) -> DatabaseSchema:
    """
    Load a schema snapshot from a YAML or JSON file.

    Raises:
        SchemaIntrospectionError: If the file is missing, unreadable or invalid
    """
    path = Path(snapshot_path)
    if not path.is_file():
        raise SchemaIntrospectionError(
            f"Schema snapshot not found: {path}", snapshot_path=str(path)
        )

    logger.info(f"Loading schema snapshot from {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise SchemaIntrospectionError(
            f"Error parsing schema snapshot {path}: {e}", snapshot_path=str(path)
        ) from e
    except OSError as e:
        raise SchemaIntrospectionError(
            f"Error reading schema snapshot {path}: {e}", snapshot_path=str(path)
        ) from e

    return parse_schema_snapshot(data if data is not None else {}, source=str(path))
