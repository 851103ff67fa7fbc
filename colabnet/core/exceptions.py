"""
Custom exceptions for colabnet.

Provides a hierarchy of exceptions for the scan and query stages,
enabling precise error handling and clear failure reporting.
"""


class ColabNetError(Exception):
    """Base exception for all colabnet errors."""

    def __init__(self, message: str, stage: str = None, details: dict = None):
        super().__init__(message)
        self.stage = stage
        self.details = details or {}

    def __str__(self):
        base_msg = super().__str__()
        if self.stage:
            return f"[{self.stage}] {base_msg}"
        return base_msg


class IngestionError(ColabNetError):
    """Raised when the commit log cannot be read."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, stage="Ingestion", details=details)


class ParseError(ColabNetError):
    """Raised when the commit log cannot be parsed."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, stage="Parsing", details=details)


class AggregationError(ColabNetError):
    """Raised when parsed history cannot be folded into graphs."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, stage="Aggregation", details=details)


class StorageError(ColabNetError):
    """Raised when snapshot reads or writes fail."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, stage="Storage", details=details)


class QueryError(ColabNetError):
    """Raised when a query input cannot be resolved."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, stage="Query", details=details)


class RepositoryNotFoundError(IngestionError):
    """Raised when no git repository root can be discovered."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            f"Repository not found: {reason}",
            details={"path": path, "reason": reason}
        )
