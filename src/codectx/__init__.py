"""
codectx - codebase context retrieval engine.

Turns a source tree into a queryable index and assembles token-bounded
context bundles for language-model requests.
"""

__version__ = "0.1.0"

from codectx.engine import AskResult, ContextEngine
from codectx.gateway import GatewayResponse, LanguageModelGateway
from codectx.retrieval import ContextBundle, FocusArea, RetrievalOptions, format_context

__all__ = [
    "ContextEngine",
    "AskResult",
    "LanguageModelGateway",
    "GatewayResponse",
    "ContextBundle",
    "FocusArea",
    "RetrievalOptions",
    "format_context",
]
