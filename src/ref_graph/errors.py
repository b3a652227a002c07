"""Fatal errors that abort a ref-graph run."""

from typing import Optional


class RefGraphError(Exception):
    """Base exception for errors that stop the whole computation."""

    def __init__(self, message: str, user_guidance: Optional[str] = None):
        super().__init__(message)
        self.user_guidance = user_guidance or ""


class RepositoryOpenError(RefGraphError):
    """Exception raised when the repository cannot be opened."""

    pass


class CommitRangeError(RefGraphError):
    """Exception raised when the requested commit range cannot be walked."""

    pass


class ConfigError(RefGraphError):
    """Exception raised for unreadable or invalid configuration files."""

    pass
