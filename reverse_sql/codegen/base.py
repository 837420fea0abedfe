"""
Shared helpers for C# code generation: the Jinja2 environment, string
escaping and file output.
"""

import html
import re
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from inflect import engine as inflect_engine
from jinja2 import Environment, FileSystemLoader, StrictUndefined

from ..constants import GenerationOptions
from ..exceptions import CodeGenerationError


logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / GenerationOptions.TEMPLATE_DIR

_INFLECT_ENGINE_ = inflect_engine()
_LAST_WORD = re.compile(r"[A-Z]?[a-z]+$")


def _pluralize_word(word: str) -> str:
    # inflect treats capitalized words as proper nouns ("Categorys")
    lowered = word.lower()
    singular = _INFLECT_ENGINE_.singular_noun(lowered)
    if singular and _INFLECT_ENGINE_.plural(singular) == lowered:
        plural = lowered
    else:
        plural = _INFLECT_ENGINE_.plural(lowered) or lowered + "s"
    if word[0].isupper():
        return plural[0].upper() + plural[1:]
    return plural


def pluralize(word: str) -> str:
    """
    Plural form of a class name for generated doc comments.

    Only the last PascalCase word is inflected ("OrderLine" -> "OrderLines");
    names that are plural already are kept ("Customers").
    """
    if not isinstance(word, str) or not word:
        return ""
    match = _LAST_WORD.search(word)
    if not match:
        return word + "s"
    try:
        return word[:match.start()] + _pluralize_word(match.group())
    except Exception as e:
        logger.error(f"Inflect pluralization failed for '{word}': {e}. Falling back to adding 's'.")
        return word + "s"


def xml_doc(text: Optional[str]) -> str:
    """Escape text for use inside a ``/// <summary>`` comment."""
    if not text:
        return ""
    return html.escape(text, quote=False)


def csharp_string_literal(value: str) -> str:
    """Quote a value as a regular (non-verbatim) C# string literal."""
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\r", "\\r")
        .replace("\n", "\\n")
        .replace("\t", "\\t")
    )
    return f'"{escaped}"'


def sql_quote_identifier(name: str) -> str:
    """Quote a SQL Server identifier: ``Order Details`` -> ``[Order Details]``."""
    return "[" + name.replace("]", "]]") + "]"


def sql_object_name(schema: Optional[str], name: str) -> str:
    """Two-part SQL name, ``[schema].[name]``, or ``[name]`` without a schema."""
    if schema:
        return f"{sql_quote_identifier(schema)}.{sql_quote_identifier(name)}"
    return sql_quote_identifier(name)


def setup_jinja_env() -> Environment:
    """Sets up and returns the Jinja2 environment for the C# templates."""
    env = Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        # C# generics use '<' and '>', so no HTML escaping
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.filters["pluralize"] = pluralize
    env.filters["xml_doc"] = xml_doc
    env.filters["csharp_string"] = csharp_string_literal
    return env


def render_template(env: Environment, template_name: str, context: Dict[str, Any]) -> str:
    """Render a template, wrapping template errors in CodeGenerationError."""
    try:
        template = env.get_template(template_name)
        return template.render(context)
    except Exception as e:
        raise CodeGenerationError(
            f"Error rendering template '{template_name}': {e}",
            component=template_name,
        ) from e


def write_generated_file(output_path: Path, content: str) -> None:
    """Write generated source, creating parent directories as needed."""
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(content)
    except OSError as e:
        raise CodeGenerationError(
            f"Could not write generated file: {e}", output_path=str(output_path)
        ) from e
    logger.debug(f"Generated file: {output_path}")
