"""Persistence of the reference document on disk."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Sequence

from pydantic import ValidationError

from anchor.references import Reference, StorageFile

from .errors import RepositoryError

DATA_FILENAME = "data.json"


class ReferenceRepository:
    """Read and write the ``data.json`` document holding every reference."""

    def __init__(self, data_dir: Path) -> None:
        """Initialize the repository for a data directory.

        Args:
            data_dir: Directory that holds ``data.json``.
        """
        self._data_dir = data_dir.expanduser()

    @property
    def data_dir(self) -> Path:
        """Return the directory holding the reference document."""
        return self._data_dir

    @property
    def data_path(self) -> Path:
        """Return the full path of the reference document."""
        return self._data_dir / DATA_FILENAME

    def load(self) -> list[Reference]:
        """Load every stored reference in persisted order.

        Returns:
            list[Reference]: Stored references; empty when the file is missing or blank.

        Raises:
            RepositoryError: If the stored data cannot be parsed.
        """
        path = self.data_path
        if not path.exists():
            return []

        try:
            content = path.read_text(encoding="utf-8")
        except OSError as exc:
            raise RepositoryError(f"Unable to read {path}: {exc}") from exc
        if not content.strip():
            return []

        try:
            document = StorageFile.model_validate(json.loads(content))
        except json.JSONDecodeError as exc:
            raise RepositoryError(f"Invalid reference data: {exc}") from exc
        except ValidationError as exc:
            raise RepositoryError(f"Invalid reference data: {exc}") from exc
        return list(document.references)

    def save(self, references: Sequence[Reference]) -> None:
        """Persist ``references`` as the complete document.

        Args:
            references: References to store, in order.

        Raises:
            RepositoryError: If the document cannot be written.
        """
        self.initialize()
        payload = StorageFile(references=list(references)).model_dump(mode="json", by_alias=True)
        try:
            self.data_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        except OSError as exc:
            raise RepositoryError(f"Unable to write {self.data_path}: {exc}") from exc

    def initialize(self) -> Path:
        """Create the data directory when needed and return it."""
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise RepositoryError(f"Unable to create {self._data_dir}: {exc}") from exc
        return self._data_dir


__all__ = ["DATA_FILENAME", "ReferenceRepository"]
