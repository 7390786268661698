"""Typed exception hierarchy for blog-sync.

Every error raised on purpose by this package derives from
``BlogSyncError`` so the CLI can catch one type and exit non-zero.
Path errors also derive from ``ValueError``, matching the rest of the
validation helpers.
"""


class BlogSyncError(Exception):
    """Base exception for all blog-sync errors."""


class InvalidPathError(BlogSyncError, ValueError):
    """Raised when a path is empty or otherwise malformed."""

    def __init__(self, path: str, reason: str = "empty path"):
        super().__init__(f"Invalid path {path!r}: {reason}")
        self.path = path
        self.reason = reason


class UnsafePathError(BlogSyncError, ValueError):
    """Raised when a path could escape its root directory."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Unsafe path {path!r}: {reason}")
        self.path = path
        self.reason = reason


class TransportError(BlogSyncError):
    """Raised on network, HTTP or authentication failures."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(BlogSyncError):
    """Raised when a remote resource (usually the collection) is absent."""

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")
        self.resource = resource


class DecodeError(BlogSyncError):
    """Raised when a server response cannot be decoded."""


class ConfigError(BlogSyncError, ValueError):
    """Raised when required settings are missing or invalid."""
