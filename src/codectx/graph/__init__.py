"""
Import/export dependency graph derived from the index.
"""

from codectx.graph.builder import DependencyGraphBuilder
from codectx.graph.models import DependencyEdge, RelatedFile, Relationship

__all__ = [
    "DependencyGraphBuilder",
    "DependencyEdge",
    "RelatedFile",
    "Relationship",
]
