# File: tests/conftest.py
# Shared fixtures: a small schema snapshot exercising tables, table types and
# stored procedures, plus helpers writing it to disk.

import copy
from pathlib import Path
from typing import Any, Dict

import pytest
import yaml

from reverse_sql.introspection import parse_schema_snapshot
from reverse_sql.schema_builder import ReverseDbBuilder


SAMPLE_SNAPSHOT: Dict[str, Any] = {
    "tables": [
        {
            "schema": "dbo",
            "name": "Customers",
            "columns": [
                {"name": "CustomerId", "sql_type": "int", "nullable": False, "primary_key": True, "identity": True},
                {"name": "Name", "sql_type": "nvarchar", "nullable": False, "length": 100},
                {"name": "Balance", "sql_type": "decimal", "nullable": True, "precision": 18, "scale": 2},
                {"name": "RowVersion", "sql_type": "rowversion", "nullable": False},
            ],
        },
        {
            "schema": "Sales",
            "name": "Order Details",
            "columns": [
                {"name": "OrderId", "sql_type": "int", "nullable": False, "primary_key": True},
                {"name": "LineNo", "sql_type": "int", "nullable": False, "primary_key": True},
                {"name": "class", "sql_type": "nvarchar", "length": 20},
            ],
        },
        {
            "schema": "dbo",
            "name": "AuditLog",
            "columns": [
                {"name": "Message", "sql_type": "nvarchar", "length": -1},
                {"name": "LoggedAt", "sql_type": "datetime2", "nullable": False},
            ],
        },
    ],
    "table_types": [
        {
            "schema": "dbo",
            "name": "OrderLineType",
            "columns": [
                {"name": "ProductId", "sql_type": "int", "nullable": False},
                {"name": "Quantity", "sql_type": "int", "nullable": True},
                {"name": "Note", "sql_type": "nvarchar", "length": 50},
            ],
        },
    ],
    "stored_procedures": [
        {
            "schema": "dbo",
            "name": "GetCustomerOrders",
            "parameters": [
                {"name": "@CustomerId", "sql_type": "int", "nullable": False},
                {"name": "@TotalCount", "sql_type": "int", "output": True},
            ],
            "result_sets": [
                {
                    "columns": [
                        {"name": "OrderId", "sql_type": "int", "nullable": False},
                        {"name": None, "sql_type": "money"},
                        {"name": "Placed On", "sql_type": "datetime"},
                    ]
                },
                {"columns": [{"name": "Location", "sql_type": "geography"}]},
            ],
        },
        {
            "schema": "Sales",
            "name": "ImportLines",
            "parameters": [
                {"name": "@Lines", "sql_type": "OrderLineType", "table_type": "dbo.OrderLineType"},
            ],
            "result_sets": [],
        },
    ],
}


@pytest.fixture
def snapshot_dict() -> Dict[str, Any]:
    """A fresh copy of the sample snapshot, safe to mutate."""
    return copy.deepcopy(SAMPLE_SNAPSHOT)


@pytest.fixture
def raw_schema(snapshot_dict):
    """The sample snapshot as a DatabaseSchema, types not yet resolved."""
    return parse_schema_snapshot(snapshot_dict)


@pytest.fixture
def resolved_schema(raw_schema):
    """The sample schema with every column and parameter type resolved."""
    return ReverseDbBuilder().resolve_types(raw_schema)


@pytest.fixture
def snapshot_file(tmp_path: Path, snapshot_dict) -> Path:
    """The sample snapshot written as YAML."""
    path = tmp_path / "schema.yaml"
    path.write_text(yaml.safe_dump(snapshot_dict, sort_keys=False), encoding="utf-8")
    return path


@pytest.fixture
def config_file(tmp_path: Path, snapshot_file: Path) -> Path:
    """A tool configuration pointing at the sample snapshot."""
    path = tmp_path / "reverse_sql.yaml"
    config = {
        "snapshot_path": snapshot_file.name,
        "output_dir": str(tmp_path / "generated"),
        "namespace": "Contoso.Data",
    }
    path.write_text(yaml.safe_dump(config), encoding="utf-8")
    return path
