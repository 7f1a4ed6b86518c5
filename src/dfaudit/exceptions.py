"""
Exception classes for dfaudit.
"""

from typing import Any, Dict, Optional


class DfauditError(Exception):
    """Base exception for all dfaudit errors."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.cause = cause

    def __str__(self) -> str:
        result = self.message
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            result += f" [{details_str}]"
        if self.cause:
            result += f" (caused by: {self.cause})"
        return result


class ConfigurationError(DfauditError):
    """Raised when there's an error in configuration."""

    pass


class ManifestReadError(DfauditError):
    """Raised when the compiled Dataform manifest is missing or malformed."""

    def __init__(
        self,
        path: str,
        reason: str,
        cause: Optional[Exception] = None,
    ) -> None:
        super().__init__(
            f"Cannot read Dataform output '{path}': {reason}", cause=cause
        )
        self.path = path
        self.reason = reason


class CompilationError(DfauditError):
    """Raised when the Dataform compiler cannot produce a manifest."""

    pass


class InvalidExclusionPatternError(DfauditError):
    """Raised when a table exclusion pattern is not a valid regular expression."""

    def __init__(self, pattern: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Invalid exclusion pattern: {pattern!r}", cause=cause)
        self.pattern = pattern


class FrozenTreeError(DfauditError):
    """Raised when adding to a resource tree that has been frozen."""

    pass


class WarehouseError(DfauditError):
    """Raised when there's an error with warehouse operations."""

    pass


class WarehouseAccessError(WarehouseError):
    """Raised when listing projects, datasets or tables fails."""

    def __init__(
        self,
        message: str,
        namespace: Optional[str] = None,
        container: Optional[str] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        details = {}
        if namespace:
            details["project"] = namespace
        if container:
            details["dataset"] = container

        super().__init__(message, details, cause)
        self.namespace = namespace
        self.container = container


class DeletionError(WarehouseError):
    """Raised when deleting a single table or dataset fails."""

    def __init__(
        self,
        namespace: str,
        container: str,
        leaf: Optional[str] = None,
        cause: Optional[Exception] = None,
    ) -> None:
        path = ".".join(p for p in (namespace, container, leaf) if p)
        kind = "table" if leaf else "dataset"
        super().__init__(f"Failed to delete {kind} {path}", cause=cause)
        self.namespace = namespace
        self.container = container
        self.leaf = leaf
