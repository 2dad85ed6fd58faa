"""In-process implementation of the backend command surface."""

from __future__ import annotations

import asyncio
import logging
import subprocess
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Awaitable, Callable, Mapping, Optional, Sequence

from pydantic import ValidationError

from anchor.config.models import IntegrationSettings
from anchor.events import HIDE_POPOVER, REFERENCES_CHANGED, SHOW_DASHBOARD, EventBus
from anchor.references import Reference, ReferenceDraft, draft_from_wire, validate_for_save

from .errors import BackendError, ReferenceNotFoundError
from .repository import ReferenceRepository

LOGGER = logging.getLogger(__name__)

CommandRunner = Callable[[Sequence[str], Optional[str]], None]


def run_external(argv: Sequence[str], stdin_text: Optional[str] = None) -> None:
    """Launch an external command without waiting on it.

    When ``stdin_text`` is given the command is run to completion with the text
    on standard input instead.

    Raises:
        BackendError: If the command cannot be started or exits with an error.
    """

    try:
        if stdin_text is None:
            subprocess.Popen(  # noqa: S603 - argv comes from user configuration
                list(argv),
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        else:
            subprocess.run(list(argv), input=stdin_text, text=True, check=True)  # noqa: S603
    except (OSError, subprocess.CalledProcessError) as exc:
        raise BackendError(f"Unable to run {argv[0]}: {exc}") from exc


class LocalBackend:
    """Serve backend commands from a :class:`ReferenceRepository`.

    Mutations are serialized with an ``asyncio.Lock`` and file I/O runs in a worker
    thread. Every successful mutation publishes ``references_changed`` on the bus.
    """

    def __init__(
        self,
        repository: ReferenceRepository,
        integrations: IntegrationSettings | None = None,
        *,
        bus: EventBus | None = None,
        runner: CommandRunner = run_external,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._repository = repository
        self._integrations = integrations or IntegrationSettings()
        self._bus = bus
        self._runner = runner
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._lock = asyncio.Lock()
        self._commands: dict[str, Callable[..., Awaitable[Any]]] = {
            "get_references": self._get_references,
            "add_reference": self._add_reference,
            "update_reference": self._update_reference,
            "delete_reference": self._delete_reference,
            "path_exists": self._path_exists,
            "open_in_finder": self._open_in_finder,
            "open_in_terminal": self._open_in_terminal,
            "open_in_vscode": self._open_in_vscode,
            "reveal_in_finder": self._reveal_in_finder,
            "copy_path_to_clipboard": self._copy_path_to_clipboard,
            "show_dashboard": self._show_dashboard,
            "hide_popover": self._hide_popover,
        }

    @property
    def repository(self) -> ReferenceRepository:
        """Return the repository backing this backend."""
        return self._repository

    async def invoke(self, command: str, **arguments: Any) -> Any:
        """Execute ``command`` with keyword ``arguments``.

        Raises:
            BackendError: If the command is unknown or fails.
        """
        handler = self._commands.get(command)
        if handler is None:
            raise BackendError(f"Unknown command: {command}")
        return await handler(**arguments)

    # ------------------------------------------------------------------ #
    # Reference commands                                                 #
    # ------------------------------------------------------------------ #

    async def _get_references(self) -> list[dict[str, Any]]:
        references = await asyncio.to_thread(self._repository.load)
        return [_dump(reference) for reference in references]

    async def _add_reference(self, reference: Mapping[str, Any]) -> dict[str, Any]:
        draft = _parse_draft(reference)
        now = self._clock()
        created = Reference(
            id=str(uuid.uuid4()),
            created_at=now,
            last_opened_at=now,
            **draft.model_dump(),
        )
        async with self._lock:
            references = await asyncio.to_thread(self._repository.load)
            references.append(created)
            await asyncio.to_thread(self._repository.save, references)
        LOGGER.info("Added reference %s (%s)", created.id, created.reference_name)
        self._publish(REFERENCES_CHANGED)
        return _dump(created)

    async def _update_reference(self, id: str, reference: Mapping[str, Any]) -> dict[str, Any]:
        draft = _parse_draft(reference)
        async with self._lock:
            references = await asyncio.to_thread(self._repository.load)
            index = _index_of(references, id)
            existing = references[index]
            updated = Reference(
                id=existing.id,
                created_at=existing.created_at,
                last_opened_at=existing.last_opened_at,
                **draft.model_dump(),
            )
            references[index] = updated
            await asyncio.to_thread(self._repository.save, references)
        LOGGER.info("Updated reference %s", id)
        self._publish(REFERENCES_CHANGED)
        return _dump(updated)

    async def _delete_reference(self, id: str) -> None:
        async with self._lock:
            references = await asyncio.to_thread(self._repository.load)
            del references[_index_of(references, id)]
            await asyncio.to_thread(self._repository.save, references)
        LOGGER.info("Deleted reference %s", id)
        self._publish(REFERENCES_CHANGED)

    async def _path_exists(self, path: str) -> bool:
        return await asyncio.to_thread(lambda: Path(path).expanduser().exists())

    # ------------------------------------------------------------------ #
    # Shell integrations                                                 #
    # ------------------------------------------------------------------ #

    async def _open_in_finder(self, path: str) -> None:
        await self._launch(self._integrations.finder_command, path)
        await self._mark_opened(path)

    async def _open_in_terminal(self, path: str) -> None:
        await self._launch(self._integrations.terminal_command, path)
        await self._mark_opened(path)

    async def _open_in_vscode(self, path: str) -> None:
        await self._launch(self._integrations.editor_command, path)
        await self._mark_opened(path)

    async def _reveal_in_finder(self, path: str) -> None:
        await self._launch(self._integrations.reveal_command, path)

    async def _copy_path_to_clipboard(self, path: str) -> None:
        argv = list(self._integrations.clipboard_command)
        if not argv:
            raise BackendError("No clipboard command configured.")
        await asyncio.to_thread(self._runner, argv, path)

    async def _show_dashboard(self) -> None:
        self._publish(SHOW_DASHBOARD)

    async def _hide_popover(self) -> None:
        self._publish(HIDE_POPOVER)

    async def _launch(self, template: Sequence[str], path: str) -> None:
        if not template:
            raise BackendError("No command configured for this action.")
        argv = [part.replace("{path}", path) for part in template]
        await asyncio.to_thread(self._runner, argv, None)

    async def _mark_opened(self, path: str) -> None:
        now = self._clock()
        async with self._lock:
            references = await asyncio.to_thread(self._repository.load)
            touched = False
            for index, reference in enumerate(references):
                if reference.absolute_path == path:
                    references[index] = reference.model_copy(update={"last_opened_at": now})
                    touched = True
            if touched:
                await asyncio.to_thread(self._repository.save, references)
        if touched:
            self._publish(REFERENCES_CHANGED)

    def _publish(self, name: str) -> None:
        if self._bus is None:
            LOGGER.debug("No event bus attached; dropping %s", name)
            return
        self._bus.emit(name)


def _parse_draft(payload: Mapping[str, Any]) -> ReferenceDraft:
    try:
        draft = draft_from_wire(payload)
    except ValidationError as exc:
        raise BackendError(f"Invalid reference: {exc}") from exc
    result = validate_for_save(draft)
    if not result.valid:
        raise BackendError(next(iter(result.errors.values())))
    return draft


def _index_of(references: list[Reference], reference_id: str) -> int:
    for index, reference in enumerate(references):
        if reference.id == reference_id:
            return index
    raise ReferenceNotFoundError(f"Reference not found: {reference_id}")


def _dump(reference: Reference) -> dict[str, Any]:
    return reference.model_dump(mode="json", by_alias=True)


__all__ = ["CommandRunner", "LocalBackend", "run_external"]
