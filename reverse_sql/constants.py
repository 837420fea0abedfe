"""
Centralized constants for reverse-sql.

This module holds the SQL Server to C# type tables, the C# keyword list and
the default configuration values shared by the naming, mapping and code
generation layers.
"""

from typing import Dict, Set, FrozenSet


# =============================================================================
# CORE CONFIGURATION
# =============================================================================

class DefaultConfig:
    """Default configuration values."""

    OUTPUT_DIR = "./generated"
    NAMESPACE = "Generated.Data"
    DATA_CONTEXT_CLASS_NAME = "DataContext"

    # The catalog's namespace for unqualified objects
    DEFAULT_SCHEMA = "dbo"
    INCLUDE_SCHEMA = False

    GENERATE_MODELS = True
    GENERATE_MAPPERS = True
    GENERATE_DATA_ACCESS = True
    CONTINUE_ON_ERROR = False


class OutputFiles:
    """Names of the generated source files."""

    MODELS = "Models.cs"
    MAPPERS = "Mappers.cs"
    DATA_CONTEXT_SUFFIX = ".cs"


# =============================================================================
# NAMING CONVENTIONS
# =============================================================================

class NamingDefaults:
    """Fragments used when composing generated identifiers."""

    SQL_PARAMETER_MARKER = "@"
    IDENTIFIER_ESCAPE = "@"
    SCHEMA_SEPARATOR = "_"
    RESULT_SET_CLASS_SUFFIX = "Result"
    MAPPER_CLASS_SUFFIX = "Mapper"
    POSITIONAL_COLUMN_PREFIX = "Column"
    POSITIONAL_PARAMETER_PREFIX = "parameter"

    INSERT_VERB = "Insert"
    DELETE_VERB = "Delete"
    UPDATE_VERB = "Update"
    SELECT_VERB = "Select"
    SELECT_WHERE_SUFFIX = "Where"


# Reserved C# keywords (contextual keywords are legal identifiers)
CSHARP_KEYWORDS: FrozenSet[str] = frozenset({
    "abstract", "as", "base", "bool", "break", "byte", "case", "catch",
    "char", "checked", "class", "const", "continue", "decimal", "default",
    "delegate", "do", "double", "else", "enum", "event", "explicit",
    "extern", "false", "finally", "fixed", "float", "for", "foreach",
    "goto", "if", "implicit", "in", "int", "interface", "internal", "is",
    "lock", "long", "namespace", "new", "null", "object", "operator",
    "out", "override", "params", "private", "protected", "public",
    "readonly", "ref", "return", "sbyte", "sealed", "short", "sizeof",
    "stackalloc", "static", "string", "struct", "switch", "this", "throw",
    "true", "try", "typeof", "uint", "ulong", "unchecked", "unsafe",
    "ushort", "using", "virtual", "void", "volatile", "while",
})


# =============================================================================
# TYPE MAPPINGS
# =============================================================================

class CSharpTypes:
    """C# type names produced by the type mapper."""

    BOOL = "bool"
    BYTE = "byte"
    SHORT = "short"
    INT = "int"
    LONG = "long"
    FLOAT = "float"
    DOUBLE = "double"
    DECIMAL = "decimal"
    STRING = "string"
    BYTE_ARRAY = "byte[]"
    DATE_TIME = "DateTime"
    DATE_TIME_OFFSET = "DateTimeOffset"
    TIME_SPAN = "TimeSpan"
    GUID = "Guid"
    OBJECT = "object"


# SQL Server type name (normalized) -> C# type name
SQL_TO_CSHARP_TYPE_MAP: Dict[str, str] = {
    # Exact numerics
    "bit": CSharpTypes.BOOL,
    "tinyint": CSharpTypes.BYTE,
    "smallint": CSharpTypes.SHORT,
    "int": CSharpTypes.INT,
    "bigint": CSharpTypes.LONG,
    "decimal": CSharpTypes.DECIMAL,
    "numeric": CSharpTypes.DECIMAL,
    "money": CSharpTypes.DECIMAL,
    "smallmoney": CSharpTypes.DECIMAL,

    # Approximate numerics
    "float": CSharpTypes.DOUBLE,
    "real": CSharpTypes.FLOAT,

    # Date and time
    "date": CSharpTypes.DATE_TIME,
    "datetime": CSharpTypes.DATE_TIME,
    "datetime2": CSharpTypes.DATE_TIME,
    "smalldatetime": CSharpTypes.DATE_TIME,
    "datetimeoffset": CSharpTypes.DATE_TIME_OFFSET,
    "time": CSharpTypes.TIME_SPAN,

    # Character strings
    "char": CSharpTypes.STRING,
    "varchar": CSharpTypes.STRING,
    "text": CSharpTypes.STRING,
    "nchar": CSharpTypes.STRING,
    "nvarchar": CSharpTypes.STRING,
    "ntext": CSharpTypes.STRING,
    "sysname": CSharpTypes.STRING,
    "xml": CSharpTypes.STRING,

    # Binary strings
    "binary": CSharpTypes.BYTE_ARRAY,
    "varbinary": CSharpTypes.BYTE_ARRAY,
    "image": CSharpTypes.BYTE_ARRAY,
    "timestamp": CSharpTypes.BYTE_ARRAY,
    "rowversion": CSharpTypes.BYTE_ARRAY,

    # Other
    "uniqueidentifier": CSharpTypes.GUID,
    "sql_variant": CSharpTypes.OBJECT,
}


# SQL Server type name (normalized) -> System.Data.SqlDbType member
SQL_DB_TYPE_MAP: Dict[str, str] = {
    "bit": "Bit",
    "tinyint": "TinyInt",
    "smallint": "SmallInt",
    "int": "Int",
    "bigint": "BigInt",
    "decimal": "Decimal",
    "numeric": "Decimal",
    "money": "Money",
    "smallmoney": "SmallMoney",
    "float": "Float",
    "real": "Real",
    "date": "Date",
    "datetime": "DateTime",
    "datetime2": "DateTime2",
    "smalldatetime": "SmallDateTime",
    "datetimeoffset": "DateTimeOffset",
    "time": "Time",
    "char": "Char",
    "varchar": "VarChar",
    "text": "Text",
    "nchar": "NChar",
    "nvarchar": "NVarChar",
    "ntext": "NText",
    "sysname": "NVarChar",
    "xml": "Xml",
    "binary": "Binary",
    "varbinary": "VarBinary",
    "image": "Image",
    "timestamp": "Timestamp",
    "rowversion": "Timestamp",
    "uniqueidentifier": "UniqueIdentifier",
    "sql_variant": "Variant",
}

STRUCTURED_SQL_DB_TYPE = "Structured"


class TypeCategories:
    """Categorized type names for nullability and write decisions."""

    # C# value types that Nullable<T> can wrap
    NULLABLE_VALUE_TYPES: Set[str] = {
        CSharpTypes.BOOL,
        CSharpTypes.BYTE,
        CSharpTypes.SHORT,
        CSharpTypes.INT,
        CSharpTypes.LONG,
        CSharpTypes.FLOAT,
        CSharpTypes.DOUBLE,
        CSharpTypes.DECIMAL,
        CSharpTypes.DATE_TIME,
        CSharpTypes.DATE_TIME_OFFSET,
        CSharpTypes.TIME_SPAN,
        CSharpTypes.GUID,
    }

    # Server-generated SQL types that cannot be inserted or updated
    NON_WRITABLE_SQL_TYPES: Set[str] = {"timestamp", "rowversion"}

    # SQL types whose parameters carry a Size
    SIZED_SQL_TYPES: Set[str] = {
        "char", "varchar", "nchar", "nvarchar", "binary", "varbinary",
    }
    # Size of a (max) parameter
    MAX_SIZE = -1

    # SQL types whose parameters carry Precision/Scale
    PRECISION_SQL_TYPES: Set[str] = {"decimal", "numeric"}


# =============================================================================
# GENERATED CODE
# =============================================================================

class GenerationOptions:
    """Code generation options."""

    DEFAULT_INDENT = "    "  # 4 spaces
    TEMPLATE_DIR = "templates"

    MODELS_TEMPLATE = "models.cs.j2"
    MAPPERS_TEMPLATE = "mappers.cs.j2"
    DATA_CONTEXT_TEMPLATE = "data_context.cs.j2"

    MODEL_USINGS = ["System", "System.Collections.Generic"]
    MAPPER_USINGS = ["System", "System.Data"]
    DATA_CONTEXT_USINGS = [
        "System",
        "System.Collections.Generic",
        "System.Data",
        "System.Data.SqlClient",
    ]
