"""
Tests for configuration validation and loading.
"""

from argparse import Namespace
from pathlib import Path
from unittest import TestCase
from unittest.mock import patch

import pytest
import yaml

from reverse_sql.config_validation import (
    ToolConfigSchema,
    is_valid_csharp_identifier,
    is_valid_csharp_namespace,
    load_config,
    load_object_name_provider,
    validate_and_parse_config,
)
from reverse_sql.domain.naming import DefaultObjectNameProvider, ObjectNameProvider
from reverse_sql.exceptions import ConfigurationError, PluginError


class SchemaLessNames(DefaultObjectNameProvider):
    """Test provider that ignores schema qualification."""

    def get_table_class_name(self, table):
        return f"{table.name}Row"


class NotAProvider:
    pass


def _cli_args(**overrides) -> Namespace:
    values = {
        "config": None,
        "snapshot_path": None,
        "output_dir": None,
        "namespace": None,
        "include_schema": None,
        "verbose": False,
        "no_color": False,
    }
    values.update(overrides)
    return Namespace(**values)


class TestIdentifierHelpers(TestCase):
    """Test cases for the C# identifier checks"""

    def test_identifiers(self):
        assert is_valid_csharp_identifier("DataContext")
        assert is_valid_csharp_identifier("_private")
        assert not is_valid_csharp_identifier("class")
        assert not is_valid_csharp_identifier("2Fast")
        assert not is_valid_csharp_identifier("Données")

    def test_namespaces(self):
        assert is_valid_csharp_namespace("Contoso.Data")
        assert is_valid_csharp_namespace("Single")
        assert not is_valid_csharp_namespace("Contoso..Data")
        assert not is_valid_csharp_namespace("Contoso.namespace")


class TestToolConfigSchema(TestCase):
    """Test cases for ToolConfigSchema"""

    def test_defaults(self):
        config = ToolConfigSchema.model_validate({"snapshot_path": "schema.yaml"})
        assert config.namespace == "Generated.Data"
        assert config.data_context_class_name == "DataContext"
        assert config.default_schema == "dbo"
        assert config.include_schema is False
        assert config.generate_models and config.generate_mappers and config.generate_data_access
        assert config.continue_on_error is False

    def test_extra_keys_are_ignored(self):
        config = ToolConfigSchema.model_validate({"snapshot_path": "schema.yaml", "unknown": 1})
        assert not hasattr(config, "unknown")

    def test_dict_style_access(self):
        config = ToolConfigSchema.model_validate({"snapshot_path": "schema.yaml"})
        assert config["namespace"] == "Generated.Data"
        assert config.get("missing", "fallback") == "fallback"

    def test_filter_lists_are_stripped(self):
        config = ToolConfigSchema.model_validate(
            {"snapshot_path": "s.yaml", "include_tables": [" Customers ", "dbo.Orders"]}
        )
        assert config.include_tables == ["Customers", "dbo.Orders"]
        assert config.filters["include_tables"] == ["Customers", "dbo.Orders"]
        assert config.filters["exclude_stored_procedures"] is None

    def test_to_options(self):
        config = ToolConfigSchema.model_validate(
            {"snapshot_path": "s.yaml", "include_schema": True, "default_schema": "app"}
        )
        options = config.to_options()
        assert options.include_schema is True
        assert options.default_schema == "app"
        assert options.object_name_provider is None

    def test_to_options_with_custom_provider(self):
        config = ToolConfigSchema.model_validate({
            "snapshot_path": "s.yaml",
            "include_schema": True,
            "object_name_provider": f"{__name__}:SchemaLessNames",
        })
        provider = config.to_options().object_name_provider
        assert isinstance(provider, SchemaLessNames)
        assert provider.include_schema is True


@pytest.mark.parametrize("field,value", [
    ("namespace", "Contoso.class"),
    ("namespace", "Contoso Data"),
    ("data_context_class_name", "void"),
    ("data_context_class_name", "My.Context"),
    ("object_name_provider", "no_colon_here"),
    ("include_tables", ["ok", ""]),
    ("include_tables", "Customers"),
    ("exclude_stored_procedures", [1, 2]),
])
def test_invalid_values_exit(field, value, capsys):
    with pytest.raises(SystemExit) as exc_info:
        validate_and_parse_config({"snapshot_path": "s.yaml", field: value})
    assert exc_info.value.code == 1
    assert field in capsys.readouterr().err


def test_missing_snapshot_path_hint(capsys):
    with pytest.raises(SystemExit):
        validate_and_parse_config({})
    assert "--snapshot" in capsys.readouterr().err


class TestLoadObjectNameProvider(TestCase):
    """Test cases for load_object_name_provider"""

    def test_loads_provider(self):
        provider = load_object_name_provider(f"{__name__}:SchemaLessNames", include_schema=True, default_schema="x")
        assert isinstance(provider, ObjectNameProvider)
        assert provider.default_schema == "x"

    def test_invalid_path(self):
        with self.assertRaises(PluginError):
            load_object_name_provider("missing_colon")

    def test_missing_module(self):
        with self.assertRaises(PluginError) as ctx:
            load_object_name_provider("no_such_module_for_tests:Provider")
        assert ctx.exception.context["plugin_name"] == "no_such_module_for_tests:Provider"

    def test_missing_class(self):
        with self.assertRaises(PluginError):
            load_object_name_provider(f"{__name__}:DoesNotExist")

    def test_not_a_provider(self):
        with self.assertRaises(PluginError):
            load_object_name_provider(f"{__name__}:NotAProvider")


def test_load_config_from_file(config_file, snapshot_file):
    config = load_config(str(config_file), _cli_args())
    assert config.namespace == "Contoso.Data"
    # Relative snapshot paths are resolved against the config file's directory
    assert Path(config.snapshot_path) == snapshot_file.resolve()
    assert Path(config.output_dir).is_absolute()


def test_cli_arguments_override_file(config_file, tmp_path):
    config = load_config(
        str(config_file),
        _cli_args(namespace="Override.Data", include_schema=True, output_dir=str(tmp_path / "out")),
    )
    assert config.namespace == "Override.Data"
    assert config.include_schema is True
    assert config.output_dir == str((tmp_path / "out").resolve())


def test_cli_snapshot_path_is_relative_to_working_directory(config_file, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    config = load_config(str(config_file), _cli_args(snapshot_path="other.yaml"))
    assert config.snapshot_path == str((tmp_path / "other.yaml").resolve())


def test_missing_config_file_uses_cli_arguments(tmp_path, caplog):
    config = load_config(str(tmp_path / "absent.yaml"), _cli_args(snapshot_path="s.yaml"))
    assert config.snapshot_path.endswith("s.yaml")
    assert "Config file not found" in caplog.text


def test_non_mapping_config_is_ignored(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text(yaml.safe_dump(["a", "b"]), encoding="utf-8")
    config = load_config(str(path), _cli_args(snapshot_path="s.yaml"))
    assert config.namespace == "Generated.Data"


def test_invalid_yaml_raises_configuration_error(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("namespace: [unclosed", encoding="utf-8")
    with pytest.raises(ConfigurationError) as exc_info:
        load_config(str(path), _cli_args())
    assert exc_info.value.context["config_file"] == str(path)


def test_no_config_path():
    with patch("reverse_sql.config_validation.validate_and_parse_config", wraps=validate_and_parse_config) as mock_validate:
        config = load_config(None, _cli_args(snapshot_path="s.yaml"))
    mock_validate.assert_called_once_with({"snapshot_path": "s.yaml"})
    assert config.generate_models
