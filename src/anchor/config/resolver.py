"""Merge configuration layers into a validated :class:`AnchorConfig`.

Layers are applied in order: built-in defaults, the YAML file, ``ANCHOR__``
environment variables, then CLI overrides. Later layers win key by key.
"""

from __future__ import annotations

from collections.abc import Mapping
from copy import deepcopy
from typing import Any, Dict, Iterator, Optional, Tuple

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import AnchorConfig

ENV_PREFIX = "ANCHOR__"
_ENV_SEPARATOR = "__"


def resolve_with_precedence(
    *,
    defaults: AnchorConfig,
    file_overrides: Optional[Mapping[str, Any]] = None,
    env_overrides: Optional[Mapping[str, Any]] = None,
    cli_overrides: Optional[Mapping[str, Any]] = None,
) -> AnchorConfig:
    """Layer overrides on top of ``defaults`` and validate the result.

    Keys in any layer may be nested mappings or dotted paths such as
    ``"views.path_check_delay_ms"``.

    Raises:
        ConfigError: If a layer is malformed or the merged values do not validate.
    """

    merged = defaults.model_dump(mode="python")
    layers = (("file", file_overrides), ("environment", env_overrides), ("cli", cli_overrides))
    for label, layer in layers:
        if layer is not None:
            _merge_into(merged, _expand_dotted(layer, label))

    try:
        return AnchorConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def env_overrides_from(env: Mapping[str, str]) -> Dict[str, Any]:
    """Collect ``ANCHOR__SECTION__KEY`` variables into a nested mapping.

    Values are parsed as YAML scalars so ``"true"`` and ``"250"`` arrive typed;
    text that is not valid YAML is kept verbatim.
    """

    overrides: Dict[str, Any] = {}
    for name, raw in env.items():
        if not name.startswith(ENV_PREFIX):
            continue
        segments = [part.lower() for part in name[len(ENV_PREFIX) :].split(_ENV_SEPARATOR) if part]
        if not segments:
            continue
        try:
            value: Any = yaml.safe_load(raw)
        except yaml.YAMLError:
            value = raw
        node = overrides
        for segment in segments[:-1]:
            child = node.get(segment)
            if not isinstance(child, dict):
                child = node[segment] = {}
            node = child
        node[segments[-1]] = value
    return overrides


def set_dotted(data: Mapping[str, Any], key: str, value: Any) -> Dict[str, Any]:
    """Return a copy of ``data`` with ``value`` stored at the dotted ``key``.

    Raises:
        ConfigError: If ``key`` is empty.
    """

    segments = [segment.strip() for segment in key.split(".") if segment.strip()]
    if not segments:
        raise ConfigError("Setting keys must be dotted paths such as 'views.path_check_delay_ms'.")
    updated = deepcopy(dict(data))
    _merge_into(updated, _expand_dotted({".".join(segments): value}, "cli"))
    return updated


def setting_key(env_name: str) -> str:
    """Map an ``ANCHOR__SECTION__KEY`` variable name back to ``section.key``."""
    return ".".join(part.lower() for part in env_name[len(ENV_PREFIX) :].split(_ENV_SEPARATOR))


def flatten_for_env(config: AnchorConfig) -> Dict[str, str]:
    """Render every leaf setting as the environment variable that would override it."""
    flat: Dict[str, str] = {}
    for path, value in _leaves(config.model_dump(mode="python")):
        name = ENV_PREFIX + _ENV_SEPARATOR.join(part.upper() for part in path)
        if isinstance(value, list):
            flat[name] = yaml.safe_dump(value, default_flow_style=True).strip()
        elif value is None:
            flat[name] = "null"
        else:
            flat[name] = str(value)
    return flat


def _leaves(data: Mapping[str, Any], prefix: Tuple[str, ...] = ()) -> Iterator[Tuple[Tuple[str, ...], Any]]:
    for key, value in data.items():
        path = prefix + (str(key),)
        if isinstance(value, Mapping):
            yield from _leaves(value, path)
        else:
            yield path, value


def _expand_dotted(layer: Mapping[str, Any], label: str) -> Dict[str, Any]:
    """Turn a layer with dotted or nested keys into a purely nested dict."""
    if not isinstance(layer, Mapping):
        raise ConfigError(f"{label.capitalize()} overrides must be a mapping.")

    expanded: Dict[str, Any] = {}
    for key, value in layer.items():
        if not isinstance(key, str):
            raise ConfigError(f"{label.capitalize()} override keys must be strings.")
        segments = key.split(".")
        node = expanded
        for depth, segment in enumerate(segments[:-1], start=1):
            child = node.setdefault(segment, {})
            if not isinstance(child, dict):
                joined = ".".join(segments[:depth])
                raise ConfigError(f"{label.capitalize()} override {key} conflicts with {joined}.")
            node = child
        leaf = segments[-1]
        if isinstance(value, Mapping):
            nested = _expand_dotted(value, label)
            existing = node.get(leaf)
            if isinstance(existing, dict):
                _merge_into(existing, nested)
            else:
                node[leaf] = nested
        else:
            node[leaf] = value
    return expanded


def _merge_into(target: Dict[str, Any], overrides: Mapping[str, Any]) -> None:
    for key, value in overrides.items():
        current = target.get(key)
        if isinstance(value, Mapping) and isinstance(current, dict):
            _merge_into(current, value)
        else:
            target[key] = deepcopy(value)


__all__ = [
    "ENV_PREFIX",
    "env_overrides_from",
    "flatten_for_env",
    "resolve_with_precedence",
    "set_dotted",
    "setting_key",
]
