from argparse import Namespace
import importlib
import sys
import logging
from typing import List, Optional, Dict, Any
import yaml
from pathlib import Path

from pydantic import (
    BaseModel,
    Field,
    ValidationError,
    field_validator,
    model_validator,
    ConfigDict,
)

from .constants import CSHARP_KEYWORDS, DefaultConfig
from .domain.naming import DefaultObjectNameProvider, ObjectNameProvider
from .exceptions import ConfigurationError, PluginError
from .options import ReverseSqlOptions

logger = logging.getLogger(__name__)

# --- Helper Functions for Validation ---


def is_valid_csharp_identifier(name: str) -> bool:
    """Check if a string is a valid C# identifier and not a reserved keyword."""
    return name.isascii() and name.isidentifier() and name not in CSHARP_KEYWORDS


def is_valid_csharp_namespace(name: str) -> bool:
    """Check a dotted namespace such as ``Company.Project.Data``."""
    return all(is_valid_csharp_identifier(part) for part in name.split("."))


def load_object_name_provider(
    dotted_path: str,
    include_schema: bool = DefaultConfig.INCLUDE_SCHEMA,
    default_schema: str = DefaultConfig.DEFAULT_SCHEMA,
) -> ObjectNameProvider:
    """
    Import and instantiate a custom name provider from ``package.module:ClassName``.

    Subclasses of DefaultObjectNameProvider receive the schema settings;
    other providers are constructed without arguments.
    """
    module_name, _, class_name = dotted_path.partition(":")
    if not module_name or not class_name:
        raise PluginError(
            f"Invalid object name provider path '{dotted_path}'", plugin_name=dotted_path
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise PluginError(
            f"Could not import module '{module_name}': {e}", plugin_name=dotted_path
        ) from e

    provider_class = getattr(module, class_name, None)
    if provider_class is None:
        raise PluginError(
            f"Module '{module_name}' has no attribute '{class_name}'", plugin_name=dotted_path
        )
    if not isinstance(provider_class, type) or not issubclass(provider_class, ObjectNameProvider):
        raise PluginError(
            f"'{dotted_path}' is not an ObjectNameProvider subclass", plugin_name=dotted_path
        )

    try:
        if issubclass(provider_class, DefaultObjectNameProvider):
            return provider_class(include_schema=include_schema, default_schema=default_schema)
        return provider_class()
    except TypeError as e:
        raise PluginError(
            f"Could not instantiate '{dotted_path}': {e}", plugin_name=dotted_path
        ) from e


# --- Pydantic Model for Configuration Schema ---
class ToolConfigSchema(BaseModel):
    """Pydantic schema defining the expected structure and types for the configuration."""

    snapshot_path: str = Field(
        ...,
        min_length=1,
        description="Path to the YAML or JSON schema snapshot to generate from.",
    )
    output_dir: str = Field(
        DefaultConfig.OUTPUT_DIR,
        min_length=1,
        description="Directory the C# files are written to.",
    )
    namespace: str = Field(
        DefaultConfig.NAMESPACE,
        min_length=1,
        description="C# namespace of the generated code.",
    )
    data_context_class_name: str = Field(
        DefaultConfig.DATA_CONTEXT_CLASS_NAME,
        min_length=1,
        description="Name of the generated data access class (C# identifier).",
    )
    include_schema: bool = Field(
        default=DefaultConfig.INCLUDE_SCHEMA,
        description="Prefix names of objects outside the default schema with the schema name.",
    )
    default_schema: str = Field(
        default=DefaultConfig.DEFAULT_SCHEMA,
        min_length=1,
        description="Schema whose objects are never prefixed.",
    )
    object_name_provider: Optional[str] = Field(
        default=None,
        description="Custom naming policy as 'package.module:ClassName'.",
    )
    include_tables: Optional[List[str]] = Field(
        default=None,
        description="Optional list of table names ('name' or 'schema.name') to include.",
    )
    exclude_tables: Optional[List[str]] = Field(
        default=None, description="Optional list of table names to exclude."
    )
    include_stored_procedures: Optional[List[str]] = Field(
        default=None,
        description="Optional list of stored procedure names to include.",
    )
    exclude_stored_procedures: Optional[List[str]] = Field(
        default=None, description="Optional list of stored procedure names to exclude."
    )
    generate_models: bool = Field(default=DefaultConfig.GENERATE_MODELS)
    generate_mappers: bool = Field(default=DefaultConfig.GENERATE_MAPPERS)
    generate_data_access: bool = Field(default=DefaultConfig.GENERATE_DATA_ACCESS)
    continue_on_error: bool = Field(
        default=DefaultConfig.CONTINUE_ON_ERROR,
        description="Skip objects with unsupported types instead of aborting.",
    )

    def __getitem__(self, key: str) -> Any:
        """Allow dictionary-style access."""
        return getattr(self, key)

    def get(self, key: str, default: Any = None) -> Any:
        """Allow dict.get() style access."""
        return getattr(self, key, default)

    # --- Custom Field Validators ---

    @field_validator("namespace")
    @classmethod
    def check_namespace(cls, v: str) -> str:
        if not is_valid_csharp_namespace(v):
            raise ValueError(
                f"'{v}' is not a valid C# namespace (dot-separated identifiers, no reserved keywords)."
            )
        return v

    @field_validator("data_context_class_name")
    @classmethod
    def check_class_name(cls, v: str) -> str:
        if not is_valid_csharp_identifier(v):
            raise ValueError(
                f"'{v}' is not a valid C# identifier or is a reserved keyword."
            )
        return v

    @field_validator("object_name_provider")
    @classmethod
    def check_provider_path(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        module_name, sep, class_name = v.partition(":")
        if not sep or not module_name.strip() or not class_name.strip():
            raise ValueError(f"'{v}' must have the form 'package.module:ClassName'.")
        return v.strip()

    @field_validator(
        "include_tables",
        "exclude_tables",
        "include_stored_procedures",
        "exclude_stored_procedures",
        mode="before",
    )
    @classmethod
    def check_names_list(cls, v: Optional[List[Any]]) -> Optional[List[str]]:
        """Ensure items in the filter lists are non-empty strings."""
        if v is None:
            return None
        if not isinstance(v, list):
            raise ValueError("Filter lists must be lists of names.")
        processed_list = []
        for index, item in enumerate(v):
            if not isinstance(item, str):
                raise ValueError(
                    f"Item at index {index} must be a string, found: {type(item).__name__}"
                )
            stripped_item = item.strip()
            if not stripped_item:
                raise ValueError(
                    f"Item at index {index} cannot be empty or just whitespace."
                )
            processed_list.append(stripped_item)
        return processed_list

    @model_validator(mode="after")
    def check_generation_targets(self) -> "ToolConfigSchema":
        """Perform cross-field validation checks."""
        if not (self.generate_models or self.generate_mappers or self.generate_data_access):
            logger.warning("All generation targets are disabled; no files will be written.")
        if self.generate_data_access and not (self.generate_models and self.generate_mappers):
            logger.warning(
                "Data access code references the model and mapper classes; "
                "generate them too or provide them yourself."
            )
        return self

    model_config = ConfigDict(
        extra="ignore",
    )

    def to_options(self) -> ReverseSqlOptions:
        """Build the options consumed by the naming and class synthesis layers."""
        provider = None
        if self.object_name_provider:
            provider = load_object_name_provider(
                self.object_name_provider, self.include_schema, self.default_schema
            )
            logger.info(f"Using custom object name provider '{self.object_name_provider}'.")
        return ReverseSqlOptions(
            include_schema=self.include_schema,
            default_schema=self.default_schema,
            object_name_provider=provider,
        )

    @property
    def filters(self) -> Dict[str, Optional[List[str]]]:
        """Keyword arguments for ReverseDbBuilder.filter_schema."""
        return {
            "include_tables": self.include_tables,
            "exclude_tables": self.exclude_tables,
            "include_stored_procedures": self.include_stored_procedures,
            "exclude_stored_procedures": self.exclude_stored_procedures,
        }


# --- Validation Function ---
def validate_and_parse_config(config_dict: Dict[str, Any]) -> ToolConfigSchema:
    """
    Validates a raw configuration dictionary against the ToolConfigSchema.
    Exits with error messages if validation fails.
    """
    try:
        validated_config = ToolConfigSchema.model_validate(config_dict)
        logger.debug(
            "Configuration dictionary parsed and validated successfully against schema."
        )
        return validated_config
    except ValidationError as e:
        logger.critical(
            "Configuration validation failed! Please check your config file or arguments."
        )
        print("\n--- Configuration Errors ---", file=sys.stderr)
        for error in e.errors():
            loc_parts = [str(loc_item) for loc_item in error.get("loc", ())]
            loc_str = " -> ".join(loc_parts) if loc_parts else "Model Level"
            msg = error.get("msg", "Unknown validation error")
            input_value = error.get("input", "N/A")

            print(f"  - Location: '{loc_str}'", file=sys.stderr)
            print(f"    Error:    {msg}", file=sys.stderr)

            if any(x in loc_parts for x in ["namespace", "data_context_class_name"]):
                print(
                    f"    Hint:     Value '{input_value}' must be usable as a C# name.",
                    file=sys.stderr,
                )
            elif "snapshot_path" in loc_parts and error.get("type") == "missing":
                print(
                    "    Hint:     Set 'snapshot_path' in the config file or pass --snapshot.",
                    file=sys.stderr,
                )

        print("----------------------------", file=sys.stderr)
        sys.exit(1)


def load_config(config_path: Optional[str], cli_args: Namespace) -> ToolConfigSchema:
    """
    Loads configuration from YAML file, merges with CLI arguments,
    validates the result, and returns a validated Pydantic model instance.
    Exits with error messages if validation fails.
    """
    raw_config: Dict[str, Any] = {}

    # 1. Load from YAML file if path is provided
    if config_path:
        config_file = Path(config_path)
        if config_file.is_file():
            try:
                with open(config_file, "r", encoding="utf-8") as f:
                    yaml_config = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigurationError(
                    f"Error parsing YAML file: {e}", config_file=config_path
                ) from e
            except OSError as e:
                raise ConfigurationError(
                    f"Error reading config file: {e}", config_file=config_path
                ) from e

            if yaml_config and isinstance(yaml_config, dict):
                raw_config.update(yaml_config)
                logger.debug(f"Loaded configuration from {config_path}")
            elif yaml_config:
                logger.warning(
                    f"Content in config file {config_path} is not a dictionary. Ignoring file content."
                )
        else:
            logger.warning(
                f"Config file not found at {config_path}. Using defaults and CLI arguments."
            )

    # 2. Override with CLI arguments (only those explicitly provided)
    overridden_keys = set()
    for key, value in vars(cli_args).items():
        if value is not None and key in ToolConfigSchema.model_fields:
            raw_config[key] = value
            overridden_keys.add(key)
    if overridden_keys:
        logger.debug(f"Overridden config keys from CLI arguments: {overridden_keys}")

    # 3. Validate
    logger.info("Validating final configuration...")
    validated_config = validate_and_parse_config(raw_config)

    # 4. Resolve paths; a relative snapshot path is relative to the config file
    snapshot_path = Path(validated_config.snapshot_path)
    if config_path and not snapshot_path.is_absolute() and "snapshot_path" not in overridden_keys:
        snapshot_path = Path(config_path).parent / snapshot_path
    validated_config.snapshot_path = str(snapshot_path.resolve())
    validated_config.output_dir = str(Path(validated_config.output_dir).resolve())

    logger.info("Configuration loaded and validated successfully.")
    return validated_config
