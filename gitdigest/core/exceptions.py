"""
Custom exceptions for the repository digest pipeline.

Provides a hierarchy of exceptions separating client-input errors
from processing failures, so callers can map them to a response.
"""


class DigestError(Exception):
    """Base exception for all digest-related errors."""

    def __init__(self, message: str, stage: str = None, details: dict = None):
        super().__init__(message)
        self.stage = stage
        self.details = details or {}

    def __str__(self):
        base_msg = super().__str__()
        if self.stage:
            return f"[{self.stage}] {base_msg}"
        return base_msg


class InvalidInputError(DigestError):
    """Raised when a request is malformed. Always the caller's to fix."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, stage="Validation", details=details)


class InvalidSourceError(InvalidInputError):
    """Raised when a repository locator is not allowed."""

    def __init__(self, url: str, reason: str):
        super().__init__(
            f"Invalid Git repository URL: {reason}",
            details={"url": url, "reason": reason},
        )


class InvalidOptionsError(InvalidInputError):
    """Raised when process options are malformed."""

    def __init__(self, field_name: str, reason: str):
        super().__init__(
            f"Invalid option '{field_name}': {reason}",
            details={"field": field_name, "reason": reason},
        )


class FetchError(DigestError):
    """Raised when the repository cannot be cloned."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, stage="Fetch", details=details)


class FileAccessError(DigestError):
    """Raised when a single file cannot be inspected or read."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            f"Cannot access {path}: {reason}",
            stage="Walk",
            details={"path": path, "reason": reason},
        )


class SerializationError(DigestError):
    """Raised when a digest cannot be rendered."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, stage="Serialization", details=details)


class ProcessingError(DigestError):
    """Raised when a pipeline stage fails unexpectedly."""

    def __init__(self, message: str, stage: str = None, details: dict = None):
        super().__init__(message, stage=stage or "Processing", details=details)


class WorkspaceError(DigestError):
    """Raised when an ephemeral workspace cannot be allocated."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, stage="Workspace", details=details)
