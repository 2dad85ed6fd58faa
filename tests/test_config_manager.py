"""Unit tests for configuration management."""

from pathlib import Path

import pytest

from anchor.config import (
    AnchorConfig,
    ConfigError,
    ConfigManager,
    flatten_for_env,
    resolve_with_precedence,
    set_dotted,
    setting_key,
)


def _fresh_manager(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> ConfigManager:
    monkeypatch.setenv("HOME", str(tmp_path))
    return ConfigManager()


def test_ensure_exists_creates_default_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)

    path = manager.ensure_exists()

    assert path == tmp_path / ".anchor" / "config.yaml"
    text = path.read_text(encoding="utf-8")
    assert "Anchor configuration file" in text
    assert "Last updated:" in text

    config = manager.load(include_env=False)
    assert isinstance(config, AnchorConfig)
    assert config.views.path_check_delay_ms == 500
    assert config.store.sequence_mutations is False


def test_resolve_with_precedence_respects_order(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.save({"views": {"default_sort_field": "referenceName"}, "watch": {"debounce_seconds": 1}})

    env = {"ANCHOR__VIEWS__PATH_CHECK_DELAY_MS": "250", "ANCHOR__WATCH__DEBOUNCE_SECONDS": "2"}
    cli = {"views.path_check_delay_ms": 100}

    config = manager.load(cli_overrides=cli, env_overrides=env)

    assert config.views.default_sort_field == "referenceName"
    assert config.watch.debounce_seconds == pytest.approx(2)
    # CLI overrides take precedence over environment
    assert config.views.path_check_delay_ms == 100


def test_invalid_yaml_raises_config_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()

    manager.config_path.write_text("- not-a-mapping", encoding="utf-8")

    with pytest.raises(ConfigError):
        manager.load()


def test_unknown_section_rejected() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(defaults=AnchorConfig(), file_overrides={"llm": {"model": "x"}})


def test_flatten_for_env_covers_defaults() -> None:
    flat = flatten_for_env(AnchorConfig())

    assert flat["ANCHOR__STORAGE__DATA_DIR"] == "~/.anchor"
    assert flat["ANCHOR__VIEWS__PATH_CHECK_DELAY_MS"] == "500"
    assert flat["ANCHOR__STORE__SEQUENCE_MUTATIONS"] == "False"


def test_resolve_with_precedence_invalid_value_raises() -> None:
    with pytest.raises(ConfigError):
        resolve_with_precedence(
            defaults=AnchorConfig(),
            file_overrides={"views": {"path_check_delay_ms": "not-an-int"}},
        )


def test_sort_field_must_be_a_dashboard_column(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    manager = _fresh_manager(tmp_path, monkeypatch)
    manager.ensure_exists()
    manager.config_path.write_text("views:\n  default_sort_field: bogus\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="unknown sort field"):
        manager.load(include_env=False)

    monkeypatch.setenv("ANCHOR__VIEWS__DEFAULT_SORT_FIELD", "lastOpenedAt")
    assert manager.load().views.default_sort_field == "lastOpenedAt"


def test_set_dotted_returns_updated_copy() -> None:
    original = {"views": {"path_check_delay_ms": 250}}

    updated = set_dotted(original, " views . default_sort_field ", "status")

    assert updated == {"views": {"path_check_delay_ms": 250, "default_sort_field": "status"}}
    assert original == {"views": {"path_check_delay_ms": 250}}
    with pytest.raises(ConfigError):
        set_dotted(original, " . ", 1)


def test_setting_key_maps_override_variable() -> None:
    assert setting_key("ANCHOR__VIEWS__PATH_CHECK_DELAY_MS") == "views.path_check_delay_ms"
