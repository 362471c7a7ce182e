"""Error types raised by the job collaborator adapters."""

from __future__ import annotations


class JobApiError(RuntimeError):
    def __init__(self, message: str, *, operation: str, status_code: int | None = None):
        super().__init__(message)
        self.operation = operation
        self.status_code = status_code


class UnauthorizedError(JobApiError):
    """The collaborator answered 401; the stored token has been cleared."""


class SnapshotParseError(JobApiError):
    """A response body did not match the expected contract."""


class OperationRejected(ValueError):
    """A user operation failed a client-side precondition before any request."""
