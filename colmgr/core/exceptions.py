"""Exception classes for collection management."""


class ColmgrError(Exception):
    """Base exception for collection management errors."""

    pass


class BackendUnavailable(ColmgrError):
    """Raised when the query service is unreachable or returns an error."""

    def __init__(self, backend: str, reason: str):
        """Initialize with backend name and failure reason."""
        self.backend = backend
        self.reason = reason
        super().__init__(f"Query backend {backend} unavailable: {reason}")


class InvalidArgument(ColmgrError, ValueError):
    """Raised when a page, limit, PID or namespace is malformed."""

    def __init__(self, field: str, message: str):
        """Initialize with field and message."""
        self.field = field
        super().__init__(f"Invalid {field}: {message}")


class NotFound(ColmgrError, LookupError):
    """Raised when a repository object does not exist."""

    def __init__(self, pid: str):
        """Initialize with the missing PID."""
        self.pid = pid
        super().__init__(f"Object not found: {pid}")
