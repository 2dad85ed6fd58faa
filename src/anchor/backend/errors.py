"""Backend command errors."""


class BackendError(Exception):
    """Failure reported by a backend command, carrying a human-readable message."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message


class RepositoryError(BackendError):
    """Raised when the persisted reference document cannot be read or written."""


class ReferenceNotFoundError(BackendError):
    """Raised when a command targets an id the backend does not know."""
