"""
Class and property synthesis.

Turns tables, table-valued types and stored procedure result sets into
``ClassDefinition`` objects. Property order always follows the column order
of the source; nullability is only carried over to value types that can be
wrapped in ``Nullable<T>``.
"""

import logging
from typing import Iterable, List, Optional

from .domain.models import (
    ClassDefinition,
    DbColumn,
    DbTable,
    PropertyDefinition,
    SqlStoredProcedure,
)
from .domain.naming import ObjectNameProvider, get_object_name_provider
from .domain.type_mapping import SqlToCSharpTypeMapper
from .options import ReverseSqlOptions


logger = logging.getLogger(__name__)


def build_property(column: DbColumn, name_provider: ObjectNameProvider) -> PropertyDefinition:
    """
    Build the property for a single column.

    The type comes from the column's resolved ``object_type_name``; columns
    that were not resolved upstream are mapped here, so an unsupported SQL
    type still surfaces as ``UnsupportedTypeError``.
    """
    type_name = column.object_type_name or SqlToCSharpTypeMapper.map_type(column.sql_type_name)
    return PropertyDefinition(
        name=name_provider.get_column_property_name(column),
        type_name=type_name,
        is_nullable=column.is_nullable and SqlToCSharpTypeMapper.can_be_nullable(type_name),
        access_modifier="public",
    )


def build_class(
    name: str,
    columns: Iterable[DbColumn],
    name_provider: ObjectNameProvider,
    description: Optional[str] = None,
) -> ClassDefinition:
    """Build a public class with one property per column, in column order."""
    properties = tuple(build_property(col, name_provider) for col in columns)
    return ClassDefinition(
        name=name,
        properties=properties,
        access_modifier="public",
        description=description,
    )


class ResultSetClassBuilder:
    """Builds one class per stored procedure result set."""

    def __init__(self, options: Optional[ReverseSqlOptions] = None):
        self.object_name_provider = get_object_name_provider(options)

    def build_stored_proc_result_set_classes(
        self, stored_procedures: Iterable[SqlStoredProcedure]
    ) -> List[ClassDefinition]:
        """
        Build result set classes, preserving the stored procedure order.

        Procedures without a describable result set are skipped. Only the
        first result set is used.

        Args:
            stored_procedures: Stored procedures with resolved column types

        Returns:
            One ClassDefinition per procedure with a non-empty result set
        """
        class_definitions: List[ClassDefinition] = []
        for sp in stored_procedures:
            result_set = sp.first_result_set
            if result_set is None:
                logger.debug(f"Skipping stored procedure '{sp.qualified_name}': no result set.")
                continue

            if len(sp.result_sets) > 1:
                logger.debug(
                    f"Stored procedure '{sp.qualified_name}' declares {len(sp.result_sets)} result sets; "
                    "only the first is used."
                )

            class_definitions.append(build_class(
                name=self.object_name_provider.get_stored_procedure_result_set_class_name(sp),
                columns=result_set.columns,
                name_provider=self.object_name_provider,
                description=f"Result of stored procedure {sp.qualified_name}.",
            ))

        return class_definitions


class TableClassBuilder:
    """Builds model classes for tables and table-valued types."""

    def __init__(self, options: Optional[ReverseSqlOptions] = None):
        self.object_name_provider = get_object_name_provider(options)

    def build_table_classes(self, tables: Iterable[DbTable]) -> List[ClassDefinition]:
        """Build one class per table that has at least one column."""
        class_definitions: List[ClassDefinition] = []
        for table in tables:
            if not table.columns:
                logger.warning(f"Table '{table.qualified_name}' has no columns, skipping...")
                continue
            class_definitions.append(build_class(
                name=self.object_name_provider.get_table_class_name(table),
                columns=table.columns,
                name_provider=self.object_name_provider,
                description=f"Row of table {table.qualified_name}.",
            ))
        return class_definitions

    def build_table_type_classes(self, table_types: Iterable[DbTable]) -> List[ClassDefinition]:
        """Build one class per table-valued type that has at least one column."""
        class_definitions: List[ClassDefinition] = []
        for table_type in table_types:
            if not table_type.columns:
                logger.warning(f"Table type '{table_type.qualified_name}' has no columns, skipping...")
                continue
            class_definitions.append(build_class(
                name=self.object_name_provider.get_table_type_class_name(table_type),
                columns=table_type.columns,
                name_provider=self.object_name_provider,
                description=f"Row of table type {table_type.qualified_name}.",
            ))
        return class_definitions
