"""Configuration models describing Anchor settings."""

from __future__ import annotations

import sys
from typing import List, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class AnchorSettingsModel(BaseModel):
    """Shared configuration for Anchor settings models."""

    model_config = ConfigDict(extra="forbid")


class StorageSettings(AnchorSettingsModel):
    """Location of the backend data file.

    Attributes:
        data_dir: Directory holding ``data.json`` and ``anchor.log``.
    """

    data_dir: str = "~/.anchor"


class ViewSettings(AnchorSettingsModel):
    """Defaults for the dashboard and quick-access views.

    Attributes:
        default_sort_field: Field the dashboard sorts by on startup.
        default_sort_direction: Direction applied to the default sort field.
        path_check_delay_ms: Quiet period before a path existence check fires.
    """

    default_sort_field: str = "createdAt"
    default_sort_direction: Literal["asc", "desc"] = "desc"
    path_check_delay_ms: int = 500

    @field_validator("default_sort_field")
    @classmethod
    def _known_sort_field(cls, value: str) -> str:
        # Imported here: the views package depends on the backend, which imports this module.
        from anchor.views.pipeline import SORT_FIELDS

        if value not in SORT_FIELDS:
            choices = ", ".join(sorted(SORT_FIELDS))
            raise ValueError(f"unknown sort field {value!r}; expected one of: {choices}")
        return value


class StoreSettings(AnchorSettingsModel):
    """Reference cache behavior.

    Attributes:
        sequence_mutations: Drop responses superseded by a newer mutation on the
            same reference instead of applying them in completion order.
    """

    sequence_mutations: bool = False


class WatchSettings(AnchorSettingsModel):
    """Data-file watch options.

    Attributes:
        debounce_seconds: Quiet period used to coalesce file-change events.
    """

    debounce_seconds: float = 0.25


def _default_opener() -> List[str]:
    if sys.platform == "darwin":
        return ["open", "{path}"]
    if sys.platform.startswith("win"):
        return ["explorer", "{path}"]
    return ["xdg-open", "{path}"]


def _default_terminal() -> List[str]:
    if sys.platform == "darwin":
        return ["open", "-a", "Terminal", "{path}"]
    return ["x-terminal-emulator", "--working-directory", "{path}"]


def _default_reveal() -> List[str]:
    if sys.platform == "darwin":
        return ["open", "-R", "{path}"]
    return _default_opener()


def _default_clipboard() -> List[str]:
    if sys.platform == "darwin":
        return ["pbcopy"]
    return ["xclip", "-selection", "clipboard"]


class IntegrationSettings(AnchorSettingsModel):
    """External commands used by open actions.

    Each command is an argv list; ``{path}`` is replaced with the reference path.
    The clipboard command receives the path on standard input.

    Attributes:
        finder_command: Opens a path in the default viewer.
        terminal_command: Opens a terminal at a path.
        editor_command: Opens a path in the code editor.
        reveal_command: Reveals a path in the file manager.
        clipboard_command: Copies standard input to the clipboard.
    """

    finder_command: List[str] = Field(default_factory=_default_opener)
    terminal_command: List[str] = Field(default_factory=_default_terminal)
    editor_command: List[str] = Field(default_factory=lambda: ["code", "{path}"])
    reveal_command: List[str] = Field(default_factory=_default_reveal)
    clipboard_command: List[str] = Field(default_factory=_default_clipboard)


class LoggingSettings(AnchorSettingsModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "WARNING"
    max_size_mb: int = 10
    backup_count: int = 3


class CLIOptions(AnchorSettingsModel):
    """CLI behavior defaults.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
    """

    quiet_default: bool = False


class AnchorConfig(AnchorSettingsModel):
    """Top-level configuration struct for Anchor."""

    storage: StorageSettings = Field(default_factory=StorageSettings)
    views: ViewSettings = Field(default_factory=ViewSettings)
    store: StoreSettings = Field(default_factory=StoreSettings)
    watch: WatchSettings = Field(default_factory=WatchSettings)
    integrations: IntegrationSettings = Field(default_factory=IntegrationSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "AnchorSettingsModel",
    "StorageSettings",
    "ViewSettings",
    "StoreSettings",
    "WatchSettings",
    "IntegrationSettings",
    "LoggingSettings",
    "CLIOptions",
    "AnchorConfig",
]
