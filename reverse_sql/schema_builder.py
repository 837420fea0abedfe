"""
Schema preparation: filtering and type resolution.

The builder runs between the snapshot loader and the class builders. It
selects the objects to generate and resolves every column and parameter to
its C# type, so the later stages only read ``object_type_name``.
"""

import logging
from dataclasses import replace
from typing import Iterable, List, Optional, Set, TypeVar, Union

from .domain.models import (
    DatabaseSchema,
    DbColumn,
    DbTable,
    ResultSet,
    SqlParameter,
    SqlStoredProcedure,
)
from .domain.naming import get_object_name_provider
from .domain.type_mapping import SqlToCSharpTypeMapper
from .exceptions import UnsupportedTypeError
from .options import ReverseSqlOptions


logger = logging.getLogger(__name__)

SchemaObject = TypeVar("SchemaObject", DbTable, SqlStoredProcedure)


def _name_set(names: Optional[Iterable[str]]) -> Optional[Set[str]]:
    if not names:
        return None
    return {name.strip().lower() for name in names}


def _matches(obj: Union[DbTable, SqlStoredProcedure], names: Set[str]) -> bool:
    """Objects match on either ``name`` or ``schema.name``, case-insensitive."""
    return obj.name.lower() in names or obj.qualified_name.lower() in names


def _filter_objects(
    objects: Iterable[SchemaObject],
    include: Optional[Iterable[str]],
    exclude: Optional[Iterable[str]],
    kind: str,
) -> List[SchemaObject]:
    include_set = _name_set(include)
    exclude_set = _name_set(exclude) or set()
    selected = []
    for obj in objects:
        if _matches(obj, exclude_set):
            logger.info(f"Excluding {kind}: {obj.qualified_name}")
            continue
        if include_set is not None and not _matches(obj, include_set):
            logger.debug(f"Skipping {kind} '{obj.qualified_name}' (not in include list).")
            continue
        selected.append(obj)
    return selected


class ReverseDbBuilder:
    """
    Filters a snapshot and resolves SQL types to C# types.

    An unsupported type aborts the run by default. With
    ``continue_on_error`` the affected table or stored procedure is logged
    and left out instead.
    """

    def __init__(self, options: Optional[ReverseSqlOptions] = None, continue_on_error: bool = False):
        self.object_name_provider = get_object_name_provider(options)
        self.continue_on_error = continue_on_error

    def filter_schema(
        self,
        schema: DatabaseSchema,
        include_tables: Optional[List[str]] = None,
        exclude_tables: Optional[List[str]] = None,
        include_stored_procedures: Optional[List[str]] = None,
        exclude_stored_procedures: Optional[List[str]] = None,
    ) -> DatabaseSchema:
        """Return a schema containing only the selected tables and procedures."""
        tables = _filter_objects(schema.tables, include_tables, exclude_tables, "table")
        stored_procedures = _filter_objects(
            schema.stored_procedures, include_stored_procedures, exclude_stored_procedures, "stored procedure"
        )
        if not tables and not stored_procedures:
            logger.warning("No tables or stored procedures selected after filtering.")
        return replace(schema, tables=tuple(tables), stored_procedures=tuple(stored_procedures))

    def resolve_types(self, schema: DatabaseSchema) -> DatabaseSchema:
        """
        Fill ``object_type_name`` on every column and parameter.

        Raises:
            UnsupportedTypeError: If a type cannot be mapped and
                ``continue_on_error`` is off
        """
        table_types = self._resolve_all(schema.table_types, self._resolve_table, "table type")
        resolved = replace(schema, table_types=tuple(table_types))
        tables = self._resolve_all(schema.tables, self._resolve_table, "table")
        stored_procedures = self._resolve_all(
            schema.stored_procedures,
            lambda sp: self._resolve_stored_procedure(sp, resolved),
            "stored procedure",
        )
        return replace(resolved, tables=tuple(tables), stored_procedures=tuple(stored_procedures))

    def build(self, schema: DatabaseSchema, **filters) -> DatabaseSchema:
        """Filter the schema, then resolve its types."""
        logger.info("Resolving SQL types...")
        return self.resolve_types(self.filter_schema(schema, **filters))

    def _resolve_all(self, objects, resolver, kind: str) -> list:
        resolved = []
        for obj in objects:
            try:
                resolved.append(resolver(obj))
            except UnsupportedTypeError as e:
                e.context.setdefault("object", obj.qualified_name)
                if not self.continue_on_error:
                    raise
                logger.error(f"Skipping {kind} '{obj.qualified_name}': {e.message}")
        return resolved

    @staticmethod
    def _resolve_column(column: DbColumn) -> DbColumn:
        return replace(column, object_type_name=SqlToCSharpTypeMapper.map_type(column.sql_type_name))

    def _resolve_table(self, table: DbTable) -> DbTable:
        return replace(table, columns=tuple(self._resolve_column(col) for col in table.columns))

    def _resolve_parameter(self, parameter: SqlParameter, schema: DatabaseSchema) -> SqlParameter:
        if not parameter.is_table_valued:
            return replace(parameter, object_type_name=SqlToCSharpTypeMapper.map_type(parameter.sql_type_name))

        table_type = schema.get_table_type(parameter.table_type_schema, parameter.table_type_name)
        if table_type is None:
            # Table type was not part of the snapshot, or was skipped
            raise UnsupportedTypeError(
                f"{parameter.table_type_schema}.{parameter.table_type_name}"
                if parameter.table_type_schema else parameter.table_type_name,
                context={"parameter": parameter.name},
                suggestions=["Add the table type to the snapshot's table_types list"],
            )
        class_name = self.object_name_provider.get_table_type_class_name(table_type)
        return replace(parameter, object_type_name=f"IEnumerable<{class_name}>")

    def _resolve_stored_procedure(self, sp: SqlStoredProcedure, schema: DatabaseSchema) -> SqlStoredProcedure:
        parameters = tuple(self._resolve_parameter(p, schema) for p in sp.parameters)
        result_sets = sp.result_sets
        if result_sets:
            # Later result sets are never generated, so their types are not checked
            first = ResultSet(columns=tuple(self._resolve_column(col) for col in result_sets[0].columns))
            result_sets = (first,) + tuple(result_sets[1:])
        return replace(sp, parameters=parameters, result_sets=result_sets)
