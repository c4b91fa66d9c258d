"""Shared domain primitives: base model and exception hierarchy."""

from codectx.shared.domain.base_model import BaseDomainModel, to_camel_case, to_snake_case
from codectx.shared.domain.exceptions import (
    AnalysisError,
    CodectxError,
    ConfigurationError,
    EmbeddingProviderError,
    OperationTimeoutError,
    RetrievalTimeout,
    ScanError,
    StoreTransactionError,
    WorkspaceRootError,
)

__all__ = [
    "BaseDomainModel",
    "to_camel_case",
    "to_snake_case",
    "CodectxError",
    "ScanError",
    "AnalysisError",
    "EmbeddingProviderError",
    "StoreTransactionError",
    "OperationTimeoutError",
    "RetrievalTimeout",
    "ConfigurationError",
    "WorkspaceRootError",
]
