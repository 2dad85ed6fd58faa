"""Reference repository tests."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import pytest

from anchor.backend import DATA_FILENAME, ReferenceRepository, RepositoryError
from anchor.references import Reference


def _reference(reference_id: str = "r1") -> Reference:
    now = datetime(2024, 5, 1, tzinfo=timezone.utc)
    return Reference(
        id=reference_id,
        reference_name=f"Project {reference_id}",
        absolute_path=f"/work/{reference_id}",
        tags=["work"],
        created_at=now,
        last_opened_at=now,
    )


def test_load_missing_file_returns_empty(tmp_path: Path) -> None:
    repo = ReferenceRepository(tmp_path / "anchor")

    assert repo.load() == []


def test_load_blank_file_returns_empty(tmp_path: Path) -> None:
    repo = ReferenceRepository(tmp_path)
    repo.data_path.write_text("  \n", encoding="utf-8")

    assert repo.load() == []


def test_save_and_load_round_trip(tmp_path: Path) -> None:
    repo = ReferenceRepository(tmp_path / "anchor")

    repo.save([_reference("r1"), _reference("r2")])
    loaded = repo.load()

    assert [reference.id for reference in loaded] == ["r1", "r2"]
    assert repo.data_path == tmp_path / "anchor" / DATA_FILENAME
    document = json.loads(repo.data_path.read_text(encoding="utf-8"))
    assert document["references"][0]["referenceName"] == "Project r1"
    assert "createdAt" in document["references"][0]


def test_load_invalid_json_raises(tmp_path: Path) -> None:
    repo = ReferenceRepository(tmp_path)
    repo.data_path.write_text("{not json", encoding="utf-8")

    with pytest.raises(RepositoryError):
        repo.load()


def test_load_invalid_schema_raises(tmp_path: Path) -> None:
    repo = ReferenceRepository(tmp_path)
    repo.data_path.write_text(json.dumps({"references": [{"id": "x"}]}), encoding="utf-8")

    with pytest.raises(RepositoryError):
        repo.load()
