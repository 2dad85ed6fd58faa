"""Configuration file handling for Anchor.

The YAML file lives at ``~/.anchor/config.yaml`` and is created with defaults
on first use. :class:`ConfigManager` reads it, layers environment and CLI
overrides on top, and writes it back with a generated header.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import yaml

from .exceptions import ConfigError
from .models import AnchorConfig
from .resolver import (
    ENV_PREFIX,
    env_overrides_from,
    flatten_for_env,
    resolve_with_precedence,
    set_dotted,
    setting_key,
)

DEFAULT_CONFIG_PATH = Path("~/.anchor/config.yaml")
_HEADER_LINES = (
    "# Anchor configuration file",
    "# Written by anchor; change it with `anchor config set` or `anchor config edit`.",
)


class ConfigManager:
    """Read, resolve, and persist the Anchor configuration file."""

    def __init__(
        self,
        config_path: Optional[Path] = None,
        *,
        env: Optional[Mapping[str, str]] = None,
    ) -> None:
        """Bind the manager to a file and an environment.

        Args:
            config_path: File to manage; defaults to ``~/.anchor/config.yaml``.
            env: Environment consulted for ``ANCHOR__`` overrides; defaults to
                ``os.environ``.
        """

        self._path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env = os.environ if env is None else env

    @property
    def config_path(self) -> Path:
        return self._path

    def load(
        self,
        *,
        cli_overrides: Optional[Mapping[str, Any]] = None,
        include_env: bool = True,
        ensure_file: bool = True,
        env_overrides: Optional[Mapping[str, str]] = None,
    ) -> AnchorConfig:
        """Resolve the effective configuration.

        Args:
            cli_overrides: Highest-precedence values, dotted keys allowed.
            include_env: Apply ``ANCHOR__`` environment variables when True.
            ensure_file: Create the file with defaults when it is missing.
            env_overrides: Environment to read instead of the bound one.

        Returns:
            AnchorConfig: Defaults < file < environment < CLI.

        Raises:
            ConfigError: If the file is unreadable or a value is invalid.
        """

        if ensure_file:
            self.ensure_exists()
        env_layer: Optional[Dict[str, Any]] = None
        if include_env:
            env_layer = env_overrides_from(self._env if env_overrides is None else env_overrides)
        return resolve_with_precedence(
            defaults=AnchorConfig(),
            file_overrides=self.load_file_overrides(),
            env_overrides=env_layer or None,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> Dict[str, Any]:
        """Return the raw mapping stored in the file (empty when absent).

        Raises:
            ConfigError: If the file is not valid YAML or not a mapping.
        """

        if not self._path.exists():
            return {}
        try:
            data = yaml.safe_load(self._path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse configuration file: {exc}") from exc
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError("Configuration file must contain a mapping at the top level.")
        return data

    def save(self, config: Union[AnchorConfig, Mapping[str, Any]]) -> None:
        """Write ``config`` to the file under a fresh header and timestamp."""
        data = config.model_dump(mode="python") if isinstance(config, AnchorConfig) else dict(config)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
        header = "\n".join((*_HEADER_LINES, f"# Last updated: {stamp}")) + "\n"
        body = yaml.safe_dump(data, sort_keys=False)
        self._path.write_text(header + body, encoding="utf-8")

    def ensure_exists(self) -> Path:
        """Create the file from defaults when missing and return its path."""
        if not self._path.exists():
            self.save(AnchorConfig())
        return self._path

    def read_text(self) -> str:
        """Return the file's text, or an empty string when it does not exist."""
        return self._path.read_text(encoding="utf-8") if self._path.exists() else ""


__all__ = [
    "AnchorConfig",
    "ConfigError",
    "ConfigManager",
    "DEFAULT_CONFIG_PATH",
    "ENV_PREFIX",
    "env_overrides_from",
    "flatten_for_env",
    "resolve_with_precedence",
    "set_dotted",
    "setting_key",
]
