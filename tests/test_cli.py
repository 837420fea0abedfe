"""
End-to-end tests for the reverse-sql command.
"""

from pathlib import Path
from unittest.mock import patch

import pytest
import yaml

from reverse_sql.cli import build_parser, main, run
from reverse_sql.config_validation import ToolConfigSchema


def _generated(tmp_path: Path) -> Path:
    return tmp_path / "generated"


def test_parser_defaults():
    args = build_parser().parse_args(["-c", "config.yaml"])
    assert args.config == "config.yaml"
    assert args.snapshot_path is None
    assert args.include_schema is None
    assert not args.verbose


def test_parser_overrides():
    args = build_parser().parse_args(
        ["-s", "schema.yaml", "-o", "out", "--namespace", "Contoso.Data", "--include-schema", "-v", "--no-color"]
    )
    assert args.snapshot_path == "schema.yaml"
    assert args.output_dir == "out"
    assert args.namespace == "Contoso.Data"
    assert args.include_schema is True
    assert args.verbose and args.no_color


def test_main_generates_all_files(config_file, tmp_path):
    main(["-c", str(config_file), "--no-color"])

    out = _generated(tmp_path)
    assert sorted(p.name for p in out.iterdir()) == ["DataContext.cs", "Mappers.cs", "Models.cs"]

    models = (out / "Models.cs").read_text(encoding="utf-8")
    assert "namespace Contoso.Data" in models
    assert "public partial class Customers" in models
    assert "public partial class GetCustomerOrdersResult" in models
    assert "public decimal? Column2 { get; set; }" in models

    mappers = (out / "Mappers.cs").read_text(encoding="utf-8")
    assert "public static partial class GetCustomerOrdersResultMapper" in mappers
    assert "OrderLineTypeMapper" not in mappers

    data_context = (out / "DataContext.cs").read_text(encoding="utf-8")
    assert "public List<GetCustomerOrdersResult> GetCustomerOrders(int customerId, ref int? totalCount)" in data_context


def test_main_with_schema_qualification(config_file, tmp_path):
    main(["-c", str(config_file), "--include-schema", "--no-color"])
    models = (_generated(tmp_path) / "Models.cs").read_text(encoding="utf-8")
    assert "public partial class Sales_OrderDetails" in models
    assert "public partial class Customers" in models


def test_main_exits_on_unsupported_type(config_file, snapshot_file, tmp_path):
    data = yaml.safe_load(snapshot_file.read_text(encoding="utf-8"))
    data["tables"][0]["columns"][1]["sql_type"] = "geography"
    snapshot_file.write_text(yaml.safe_dump(data), encoding="utf-8")

    with pytest.raises(SystemExit) as exc_info:
        main(["-c", str(config_file), "--no-color"])
    assert exc_info.value.code == 1
    assert not _generated(tmp_path).exists()


def test_main_exits_on_missing_snapshot(tmp_path):
    with pytest.raises(SystemExit) as exc_info:
        main(["-s", str(tmp_path / "missing.yaml"), "-o", str(tmp_path / "out"), "--no-color"])
    assert exc_info.value.code == 1


def test_main_exits_on_invalid_config(tmp_path):
    with pytest.raises(SystemExit) as exc_info:
        main(["-s", "schema.yaml", "--namespace", "Bad Namespace", "--no-color"])
    assert exc_info.value.code == 1


def test_main_exits_on_unexpected_error(config_file):
    with patch("reverse_sql.cli.run", side_effect=RuntimeError("boom")):
        with pytest.raises(SystemExit) as exc_info:
            main(["-c", str(config_file), "--no-color"])
    assert exc_info.value.code == 1


def test_run_honours_generation_flags(snapshot_file, tmp_path):
    config = ToolConfigSchema.model_validate({
        "snapshot_path": str(snapshot_file),
        "output_dir": str(tmp_path / "models_only"),
        "generate_mappers": False,
        "generate_data_access": False,
    })
    written = run(config)
    assert [p.name for p in written] == ["Models.cs"]


def test_run_with_continue_on_error(snapshot_file, tmp_path):
    data = yaml.safe_load(snapshot_file.read_text(encoding="utf-8"))
    data["tables"][2]["columns"][0]["sql_type"] = "hierarchyid"
    snapshot_file.write_text(yaml.safe_dump(data), encoding="utf-8")

    config = ToolConfigSchema.model_validate({
        "snapshot_path": str(snapshot_file),
        "output_dir": str(tmp_path / "out"),
        "continue_on_error": True,
    })
    run(config)
    models = (tmp_path / "out" / "Models.cs").read_text(encoding="utf-8")
    assert "class AuditLog" not in models
    assert "class Customers" in models


def test_run_with_nothing_selected(snapshot_file, tmp_path):
    config = ToolConfigSchema.model_validate({
        "snapshot_path": str(snapshot_file),
        "output_dir": str(tmp_path / "out"),
        "include_tables": ["Nope"],
        "include_stored_procedures": ["Nope"],
    })
    assert run(config) == []
    assert not (tmp_path / "out").exists()
