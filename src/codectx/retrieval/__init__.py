"""
Context retrieval: assemble, reweight and budget the context for a query.
"""

from codectx.retrieval.budget import estimate_bundle_tokens, prune_to_budget
from codectx.retrieval.focus import apply_focus, is_test_path
from codectx.retrieval.formatter import format_context
from codectx.retrieval.models import (
    ContextBundle,
    ContextUsed,
    CurrentFileContext,
    DependencyContext,
    FocusArea,
    ProjectContext,
    RetrievalOptions,
    SimilarCodeEntry,
)
from codectx.retrieval.retriever import ContextRetriever

__all__ = [
    "ContextRetriever",
    "ContextBundle",
    "ContextUsed",
    "CurrentFileContext",
    "DependencyContext",
    "FocusArea",
    "ProjectContext",
    "RetrievalOptions",
    "SimilarCodeEntry",
    "apply_focus",
    "is_test_path",
    "format_context",
    "estimate_bundle_tokens",
    "prune_to_budget",
]
