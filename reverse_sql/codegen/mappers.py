import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from jinja2 import Environment

from ..constants import DefaultConfig, GenerationOptions
from ..domain.models import ClassDefinition, DbColumn, PropertyDefinition
from ..domain.naming import ObjectNameProvider
from .base import render_template, setup_jinja_env


logger = logging.getLogger(__name__)


@dataclass
class MapperDefinition:
    """A static mapper class reading one generated class from an IDataRecord."""

    name: str
    class_name: str
    assignments: List[Dict[str, str]] = field(default_factory=list)


def build_read_expression(prop: PropertyDefinition, column: DbColumn, index: int) -> str:
    """
    C# expression reading field ``index`` of ``record`` into the property.

    DBNull checks follow the column's nullability, not the property's, so a
    nullable string column still maps DBNull to null.
    """
    read = f"({prop.declared_type_name})record.GetValue({index})"
    if column.is_nullable:
        return f"record.IsDBNull({index}) ? null : {read}"
    return read


def build_mapper(
    class_definition: ClassDefinition,
    columns: Sequence[DbColumn],
    name_provider: ObjectNameProvider,
) -> MapperDefinition:
    """Build the mapper for a class whose properties follow ``columns`` in order."""
    if len(columns) != len(class_definition.properties):
        raise ValueError(
            f"Class '{class_definition.name}' has {len(class_definition.properties)} properties "
            f"but {len(columns)} columns were given"
        )
    assignments = [
        {"property": prop.name, "expression": build_read_expression(prop, col, index)}
        for index, (prop, col) in enumerate(zip(class_definition.properties, columns))
    ]
    return MapperDefinition(
        name=name_provider.get_result_set_mapper_class_name(class_definition.name),
        class_name=class_definition.name,
        assignments=assignments,
    )


def generate_mappers_code(
    mappers: List[MapperDefinition],
    namespace: str = DefaultConfig.NAMESPACE,
    env: Optional[Environment] = None,
) -> str:
    """Generates the C# source for the mapper classes."""
    logger.debug(f"Rendering {len(mappers)} mapper classes.")
    context = {
        "namespace": namespace,
        "usings": GenerationOptions.MAPPER_USINGS,
        "mappers": mappers,
    }
    return render_template(env or setup_jinja_env(), GenerationOptions.MAPPERS_TEMPLATE, context)
