"""
Custom exception hierarchy for reverse-sql.

Every error carries a context mapping and recovery suggestions so the CLI
can print something actionable instead of a bare traceback.
"""

from typing import Dict, Any, Optional, List


class ReverseSqlError(Exception):
    """
    Base exception for all reverse-sql errors.

    Provides rich context and error recovery guidance.
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        suggestions: Optional[List[str]] = None,
        error_code: Optional[str] = None
    ):
        """
        Initialize the exception with context and recovery suggestions.

        Args:
            message: Human-readable error message
            context: Additional context about where/why the error occurred
            suggestions: List of potential solutions or next steps
            error_code: Unique error code for programmatic handling
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.suggestions = suggestions or []
        self.error_code = error_code

    def __str__(self) -> str:
        """Return formatted error message with context."""
        lines = [self.message]

        if self.error_code:
            lines.append(f"Error Code: {self.error_code}")

        if self.context:
            lines.append("Context:")
            for key, value in self.context.items():
                lines.append(f"  {key}: {value}")

        if self.suggestions:
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  • {suggestion}")

        return "\n".join(lines)


class ConfigurationError(ReverseSqlError):
    """Raised when configuration is invalid or missing."""

    def __init__(self, message: str, config_file: str = None, **kwargs):
        context = kwargs.get('context', {})
        if config_file:
            context['config_file'] = config_file

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check the configuration file syntax",
                "Verify all required fields are present",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="CONFIG_ERROR"
        )


class SchemaIntrospectionError(ReverseSqlError):
    """Raised when a schema snapshot cannot be read or is malformed."""

    def __init__(self, message: str, snapshot_path: str = None, obj: str = None, **kwargs):
        context = kwargs.get('context', {})
        if snapshot_path:
            context['snapshot_path'] = snapshot_path
        if obj:
            context['object'] = obj

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check the snapshot file exists and is valid YAML or JSON",
                "Verify every column declares a name and sql_type",
                "Re-run the introspection step that produced the snapshot",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="INTROSPECTION_ERROR"
        )


class UnsupportedTypeError(ReverseSqlError):
    """Raised when a SQL type has no C# mapping."""

    def __init__(self, sql_type_name: str, obj: str = None, **kwargs):
        self.sql_type_name = sql_type_name
        context = kwargs.get('context', {})
        context['sql_type'] = sql_type_name
        if obj:
            context['object'] = obj

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check if the database type is supported",
                "Exclude the affected table or stored procedure",
                "Set continue_on_error to skip objects with unsupported types",
            ]

        super().__init__(
            f"Unsupported SQL type: '{sql_type_name}'",
            context=context,
            suggestions=suggestions,
            error_code="UNSUPPORTED_TYPE"
        )


class CodeGenerationError(ReverseSqlError):
    """Raised when rendering or writing generated source fails."""

    def __init__(self, message: str, component: str = None, output_path: str = None, **kwargs):
        context = kwargs.get('context', {})
        if component:
            context['component'] = component  # e.g., 'models', 'mappers', 'data_access'
        if output_path:
            context['output_path'] = output_path

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Check the output directory is writable",
                "Try generating one component at a time",
                "Check for naming conflicts between generated classes",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="CODE_GENERATION_ERROR"
        )


class PluginError(ReverseSqlError):
    """Raised when a custom object name provider cannot be loaded."""

    def __init__(self, message: str, plugin_name: str = None, **kwargs):
        context = kwargs.get('context', {})
        if plugin_name:
            context['plugin_name'] = plugin_name

        suggestions = kwargs.get('suggestions', [])
        if not suggestions:
            suggestions = [
                "Use the 'package.module:ClassName' format",
                "Check the module is importable from the current environment",
                "Ensure the class implements ObjectNameProvider",
            ]

        super().__init__(
            message,
            context=context,
            suggestions=suggestions,
            error_code="PLUGIN_ERROR"
        )
