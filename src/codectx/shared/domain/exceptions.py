"""
Domain exceptions for codectx.

All engine errors inherit from CodectxError. Workspace-level operations catch
the per-file and per-step subclasses and report them as structured entries;
only ConfigurationError (a broken root or config file) is allowed to escape.
"""


class CodectxError(Exception):
    """Base class for all codectx exceptions."""

    def __init__(self, message: str, context: dict = None):
        super().__init__(message)
        self.context = context or {}


class ScanError(CodectxError):
    """Raised when a path under the workspace cannot be read."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot scan {path}: {reason}", {"path": path})
        self.path = path
        self.reason = reason


class AnalysisError(CodectxError):
    """Raised when file content cannot be analyzed."""

    pass


class EmbeddingProviderError(CodectxError):
    """Raised when the remote embedding provider fails or times out."""

    pass


class StoreTransactionError(CodectxError):
    """Raised when an index store write could not be committed."""

    pass


class OperationTimeoutError(CodectxError):
    """
    Raised when an operation exceeds its deadline.

    Named to avoid shadowing Python's built-in TimeoutError.
    """

    def __init__(self, operation: str, timeout_seconds: float):
        super().__init__(
            f"Operation '{operation}' timed out after {timeout_seconds}s",
            {"operation": operation, "timeout_seconds": timeout_seconds},
        )
        self.operation = operation
        self.timeout_seconds = timeout_seconds


class RetrievalTimeout(OperationTimeoutError):
    """Raised when a context retrieval sub-step exceeds its deadline."""

    pass


class ConfigurationError(CodectxError):
    """Raised when configuration is invalid or corrupt."""

    pass


class WorkspaceRootError(ConfigurationError):
    """Raised when the workspace root does not exist or is not a directory."""

    pass
