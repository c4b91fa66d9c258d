"""
Dependency graph models.
"""

from enum import Enum

from pydantic import Field

from codectx.shared.domain.base_model import BaseDomainModel
from codectx.shared.languages import Language


class Relationship(str, Enum):
    """Direction of a dependency, seen from the file being inspected."""

    IMPORTS_FROM = "imports_from"  # the other file exports what this file imports
    IMPORTS_TO = "imports_to"  # the other file imports what this file exports


class DependencyEdge(BaseDomainModel):
    source_file: str
    target_file: str
    symbol: str
    relationship: Relationship


class RelatedFile(BaseDomainModel):
    """
    A file connected to the inspected file through shared symbol names.

    symbols lists every name that links the two files in this direction.
    """

    file_path: str
    relative_path: str
    relationship: Relationship
    symbols: list[str] = Field(default_factory=list)
    language: Language = Language.TEXT
    key_exports: list[str] = Field(default_factory=list)
