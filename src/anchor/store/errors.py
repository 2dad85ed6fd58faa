"""Reference cache errors."""


class StoreError(Exception):
    """Raised when a backend round trip made on behalf of the cache fails."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
