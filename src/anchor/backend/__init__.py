"""Backend command surface consumed by the reference cache."""

from __future__ import annotations

from typing import Any, Protocol

from .errors import BackendError, ReferenceNotFoundError, RepositoryError
from .local import LocalBackend, run_external
from .repository import DATA_FILENAME, ReferenceRepository


class CommandBackend(Protocol):
    """Anything that can execute named backend commands."""

    async def invoke(self, command: str, **arguments: Any) -> Any:
        """Run ``command`` and return its structured result."""


__all__ = [
    "BackendError",
    "CommandBackend",
    "DATA_FILENAME",
    "LocalBackend",
    "ReferenceNotFoundError",
    "ReferenceRepository",
    "RepositoryError",
    "run_external",
]
