"""
C# Code Generator Module

Renders model classes, IDataRecord mappers and a typed data context from a
resolved database schema.
"""

from .models import generate_models_code
from .mappers import MapperDefinition, build_mapper, generate_mappers_code
from .data_access import DataAccessWriter, MethodDefinition
from .code_generator import (
    CodeGenerator,
    CodeGeneratorFactory,
    CodeGeneratorStrategy,
    GeneratedClasses,
    build_class_definitions,
    build_mappers,
)


__all__ = [
    'generate_models_code',
    'generate_mappers_code',
    'MapperDefinition',
    'build_mapper',
    'DataAccessWriter',
    'MethodDefinition',
    'CodeGenerator',
    'CodeGeneratorFactory',
    'CodeGeneratorStrategy',
    'GeneratedClasses',
    'build_class_definitions',
    'build_mappers',
]
