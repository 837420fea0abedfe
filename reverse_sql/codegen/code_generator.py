"""
C# Code Generator

This module ties the class builders and the C# writers together: it builds
the class definitions for a schema once and renders the models, mappers and
data context files from them.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Type, Union

from ..class_builder import ResultSetClassBuilder, TableClassBuilder
from ..constants import DefaultConfig, OutputFiles
from ..domain.models import ClassDefinition, DatabaseSchema
from ..domain.naming import get_object_name_provider
from ..options import ReverseSqlOptions
from .base import setup_jinja_env, write_generated_file
from .data_access import DataAccessWriter
from .mappers import MapperDefinition, build_mapper, generate_mappers_code
from .models import generate_models_code


logger = logging.getLogger(__name__)


@dataclass
class GeneratedClasses:
    """Class definitions built for one schema, grouped by source object kind."""

    tables: List[ClassDefinition] = field(default_factory=list)
    table_types: List[ClassDefinition] = field(default_factory=list)
    result_sets: List[ClassDefinition] = field(default_factory=list)

    @property
    def all(self) -> List[ClassDefinition]:
        return [*self.tables, *self.table_types, *self.result_sets]


def build_class_definitions(schema: DatabaseSchema, options: Optional[ReverseSqlOptions] = None) -> GeneratedClasses:
    """Build the table, table type and result set classes for a resolved schema."""
    table_builder = TableClassBuilder(options)
    return GeneratedClasses(
        tables=table_builder.build_table_classes(schema.tables),
        table_types=table_builder.build_table_type_classes(schema.table_types),
        result_sets=ResultSetClassBuilder(options).build_stored_proc_result_set_classes(schema.stored_procedures),
    )


def build_mappers(
    schema: DatabaseSchema,
    classes: GeneratedClasses,
    options: Optional[ReverseSqlOptions] = None,
) -> List[MapperDefinition]:
    """Build a mapper for every table class and result set class."""
    provider = get_object_name_provider(options)
    tables_by_name: Dict[str, ClassDefinition] = {c.name: c for c in classes.tables}
    results_by_name: Dict[str, ClassDefinition] = {c.name: c for c in classes.result_sets}

    mappers: List[MapperDefinition] = []
    for table in schema.tables:
        class_definition = tables_by_name.get(provider.get_table_class_name(table))
        if class_definition is not None:
            mappers.append(build_mapper(class_definition, table.columns, provider))

    for sp in schema.stored_procedures:
        if not sp.has_result_set:
            continue
        class_definition = results_by_name.get(provider.get_stored_procedure_result_set_class_name(sp))
        if class_definition is not None:
            mappers.append(build_mapper(class_definition, sp.first_result_set.columns, provider))

    return mappers


# ---- Design Patterns ----

# Strategy Pattern for the generated files
class CodeGeneratorStrategy(ABC):
    """Abstract Strategy for code generation"""

    @abstractmethod
    def generate_code(self, schema: DatabaseSchema, classes: GeneratedClasses, **kwargs) -> str:
        """Generate the source of one output file."""
        pass


class ModelsGenerator(CodeGeneratorStrategy):
    """Generates the model classes"""
    def generate_code(self, schema: DatabaseSchema, classes: GeneratedClasses, **kwargs) -> str:
        return generate_models_code(classes.all, kwargs.get("namespace", DefaultConfig.NAMESPACE), kwargs.get("env"))


class MappersGenerator(CodeGeneratorStrategy):
    """Generates the IDataRecord mappers"""
    def generate_code(self, schema: DatabaseSchema, classes: GeneratedClasses, **kwargs) -> str:
        mappers = build_mappers(schema, classes, kwargs.get("options"))
        return generate_mappers_code(mappers, kwargs.get("namespace", DefaultConfig.NAMESPACE), kwargs.get("env"))


class DataAccessGenerator(CodeGeneratorStrategy):
    """Generates the data context class"""
    def generate_code(self, schema: DatabaseSchema, classes: GeneratedClasses, **kwargs) -> str:
        writer = DataAccessWriter(
            options=kwargs.get("options"),
            namespace=kwargs.get("namespace", DefaultConfig.NAMESPACE),
            class_name=kwargs.get("data_context_class_name", DefaultConfig.DATA_CONTEXT_CLASS_NAME),
        )
        return writer.write(schema, classes.tables, classes.table_types, classes.result_sets, env=kwargs.get("env"))


# Factory Pattern for creating generators
class CodeGeneratorFactory:
    """Factory for creating code generator strategies"""

    _registry: Dict[str, Type[CodeGeneratorStrategy]] = {
        "models": ModelsGenerator,
        "mappers": MappersGenerator,
        "data_access": DataAccessGenerator,
    }

    @classmethod
    def register(cls, name: str, generator_class: Type[CodeGeneratorStrategy]) -> None:
        """Register a new generator strategy"""
        cls._registry[name] = generator_class

    @classmethod
    def create(cls, name: str) -> CodeGeneratorStrategy:
        """Create a generator strategy instance by name"""
        generator_class = cls._registry.get(name)
        if not generator_class:
            raise ValueError(f"Unknown generator type: {name}")
        return generator_class()


# Facade Pattern for simplified interface
class CodeGenerator:
    """Facade for the code generation system"""

    def __init__(
        self,
        output_dir: Union[str, Path],
        namespace: str = DefaultConfig.NAMESPACE,
        data_context_class_name: str = DefaultConfig.DATA_CONTEXT_CLASS_NAME,
        options: Optional[ReverseSqlOptions] = None,
    ):
        self.output_dir = Path(output_dir)
        self.namespace = namespace
        self.data_context_class_name = data_context_class_name
        self.options = options
        self.env = setup_jinja_env()

    def generate_file(self, generator_name: str, output_path: Path, schema: DatabaseSchema, classes: GeneratedClasses) -> Path:
        """Generate a file using a specific generator strategy"""
        generator = CodeGeneratorFactory.create(generator_name)
        code = generator.generate_code(
            schema,
            classes,
            namespace=self.namespace,
            data_context_class_name=self.data_context_class_name,
            options=self.options,
            env=self.env,
        )
        write_generated_file(output_path, code)
        logger.info(f"Generated file: {output_path}")
        return output_path

    def generate(
        self,
        schema: DatabaseSchema,
        generate_models: bool = DefaultConfig.GENERATE_MODELS,
        generate_mappers: bool = DefaultConfig.GENERATE_MAPPERS,
        generate_data_access: bool = DefaultConfig.GENERATE_DATA_ACCESS,
    ) -> List[Path]:
        """
        Generate the enabled C# files for a resolved schema.

        Args:
            schema: Schema whose column and parameter types have been resolved
            generate_models: Write the model classes file
            generate_mappers: Write the mappers file
            generate_data_access: Write the data context file

        Returns:
            Paths of the written files, in generation order
        """
        classes = build_class_definitions(schema, self.options)
        logger.info(
            f"Built {len(classes.tables)} table classes, {len(classes.table_types)} table type classes "
            f"and {len(classes.result_sets)} result set classes."
        )

        planned = [
            (generate_models, "models", OutputFiles.MODELS),
            (generate_mappers, "mappers", OutputFiles.MAPPERS),
            (generate_data_access, "data_access", f"{self.data_context_class_name}{OutputFiles.DATA_CONTEXT_SUFFIX}"),
        ]
        written: List[Path] = []
        for enabled, generator_name, file_name in planned:
            if not enabled:
                logger.debug(f"Skipping '{generator_name}' generation (disabled).")
                continue
            written.append(self.generate_file(generator_name, self.output_dir / file_name, schema, classes))
        return written
