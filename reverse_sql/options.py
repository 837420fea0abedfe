"""
Options consumed by the naming and class synthesis layers.
"""

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from .constants import DefaultConfig

if TYPE_CHECKING:
    from .domain.naming import ObjectNameProvider


@dataclass(frozen=True)
class ReverseSqlOptions:
    """
    Immutable configuration value threaded into the builders.

    Attributes:
        include_schema: Prefix names of objects outside the default schema
            with their schema name
        default_schema: The schema that is never used as a prefix
        object_name_provider: Custom naming policy; the default provider is
            used when None
    """

    include_schema: bool = DefaultConfig.INCLUDE_SCHEMA
    default_schema: str = DefaultConfig.DEFAULT_SCHEMA
    object_name_provider: Optional["ObjectNameProvider"] = None
