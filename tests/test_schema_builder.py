"""
Tests for schema filtering and type resolution.
"""

from dataclasses import replace

import pytest

from reverse_sql.domain.models import (
    DatabaseSchema,
    DbColumn,
    DbTable,
    ResultSet,
    SqlParameter,
    SqlStoredProcedure,
)
from reverse_sql.exceptions import UnsupportedTypeError
from reverse_sql.options import ReverseSqlOptions
from reverse_sql.schema_builder import ReverseDbBuilder


def _table_names(schema):
    return [t.qualified_name for t in schema.tables]


def _sp_names(schema):
    return [sp.qualified_name for sp in schema.stored_procedures]


def test_filter_include_by_name_or_qualified_name(raw_schema):
    filtered = ReverseDbBuilder().filter_schema(raw_schema, include_tables=["customers", "Sales.Order Details"])
    assert _table_names(filtered) == ["dbo.Customers", "Sales.Order Details"]
    assert _sp_names(filtered) == _sp_names(raw_schema)


def test_filter_exclude_wins_over_include(raw_schema):
    filtered = ReverseDbBuilder().filter_schema(
        raw_schema, include_tables=["Customers", "AuditLog"], exclude_tables=["dbo.AuditLog"]
    )
    assert _table_names(filtered) == ["dbo.Customers"]


def test_filter_stored_procedures(raw_schema):
    filtered = ReverseDbBuilder().filter_schema(raw_schema, exclude_stored_procedures=["ImportLines"])
    assert _sp_names(filtered) == ["dbo.GetCustomerOrders"]
    # Table types are always kept for table-valued parameters
    assert len(filtered.table_types) == 1


def test_filter_everything_warns(raw_schema, caplog):
    ReverseDbBuilder().filter_schema(raw_schema, include_tables=["Nope"], include_stored_procedures=["Nope"])
    assert "No tables or stored procedures selected" in caplog.text


def test_resolve_types_fills_object_type_names(resolved_schema):
    customers = resolved_schema.tables[0]
    assert [c.object_type_name for c in customers.columns] == ["int", "string", "decimal", "byte[]"]
    table_type = resolved_schema.table_types[0]
    assert [c.object_type_name for c in table_type.columns] == ["int", "int", "string"]


def test_resolve_stored_procedure_parameters(resolved_schema):
    get_orders, import_lines = resolved_schema.stored_procedures
    assert [p.object_type_name for p in get_orders.parameters] == ["int", "int"]
    assert import_lines.parameters[0].object_type_name == "IEnumerable<OrderLineType>"


def test_only_first_result_set_is_resolved(resolved_schema):
    get_orders = resolved_schema.stored_procedures[0]
    assert [c.object_type_name for c in get_orders.result_sets[0].columns] == ["int", "decimal", "DateTime"]
    # The second result set declares an unsupported type and is left untouched
    assert get_orders.result_sets[1].columns[0].object_type_name is None


def test_table_valued_parameter_uses_qualified_class_name():
    table_type = DbTable(schema="sales", name="LineType", columns=(DbColumn("Qty", 1, "int"),))
    sp = SqlStoredProcedure(
        schema="sales", name="Import",
        parameters=(SqlParameter(name="@Lines", sql_type_name="LineType",
                                 table_type_schema="sales", table_type_name="LineType"),),
    )
    schema = DatabaseSchema(table_types=(table_type,), stored_procedures=(sp,))

    resolved = ReverseDbBuilder(ReverseSqlOptions(include_schema=True)).resolve_types(schema)

    assert resolved.stored_procedures[0].parameters[0].object_type_name == "IEnumerable<Sales_LineType>"


def test_missing_table_type_is_unsupported(raw_schema):
    schema = replace(raw_schema, table_types=())
    with pytest.raises(UnsupportedTypeError) as exc_info:
        ReverseDbBuilder().resolve_types(schema)
    assert exc_info.value.sql_type_name == "dbo.OrderLineType"
    assert exc_info.value.context["object"] == "Sales.ImportLines"


def _schema_with_unsupported_column(raw_schema):
    bad_table = DbTable(schema="dbo", name="Places", columns=(DbColumn("Shape", 1, "geography"),))
    return replace(raw_schema, tables=raw_schema.tables + (bad_table,))


def test_unsupported_type_aborts_by_default(raw_schema):
    with pytest.raises(UnsupportedTypeError) as exc_info:
        ReverseDbBuilder().resolve_types(_schema_with_unsupported_column(raw_schema))
    assert exc_info.value.context["object"] == "dbo.Places"


def test_continue_on_error_skips_object(raw_schema, caplog):
    resolved = ReverseDbBuilder(continue_on_error=True).resolve_types(_schema_with_unsupported_column(raw_schema))
    assert "dbo.Places" not in _table_names(resolved)
    assert _table_names(resolved) == _table_names(raw_schema)
    assert "Skipping table 'dbo.Places'" in caplog.text


def test_unsupported_result_set_column_skips_procedure_with_continue(raw_schema):
    bad_sp = SqlStoredProcedure(
        schema="dbo", name="Broken",
        result_sets=(ResultSet(columns=(DbColumn("Shape", 1, "geometry"),)),),
    )
    schema = replace(raw_schema, stored_procedures=raw_schema.stored_procedures + (bad_sp,))
    resolved = ReverseDbBuilder(continue_on_error=True).resolve_types(schema)
    assert "dbo.Broken" not in _sp_names(resolved)


def test_build_filters_then_resolves(raw_schema):
    built = ReverseDbBuilder().build(raw_schema, include_tables=["AuditLog"])
    assert _table_names(built) == ["dbo.AuditLog"]
    assert built.tables[0].columns[1].object_type_name == "DateTime"


def test_resolution_does_not_mutate_input(raw_schema):
    ReverseDbBuilder().resolve_types(raw_schema)
    assert raw_schema.tables[0].columns[0].object_type_name is None
