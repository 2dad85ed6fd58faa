"""CLI tests for configuration commands."""

import os
from pathlib import Path
from typing import Any

from click.testing import CliRunner
from rich.console import Console

from anchor.cli import cli
from anchor.config import ConfigManager


def _env_with_home(tmp_path: Path) -> dict[str, Any]:
    env = dict(os.environ)
    env["HOME"] = str(tmp_path)
    return env


def _config_path(tmp_path: Path) -> Path:
    return tmp_path / ".anchor" / "config.yaml"


def test_config_view_creates_and_displays_config(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "view"], env=env)

    assert result.exit_code == 0
    assert "views:" in result.output
    assert _config_path(tmp_path).exists()


def test_config_set_updates_value_and_writes_diff(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(
        cli, ["config", "set", "views.path_check_delay_ms", "--value", "750"], env=env
    )

    assert result.exit_code == 0
    assert "750" in result.output

    manager = ConfigManager(config_path=_config_path(tmp_path))
    config = manager.load(include_env=False)
    assert config.views.path_check_delay_ms == 750


def test_config_set_rejects_unknown_key(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(cli, ["config", "set", "views.colour", "--value", "red"], env=env)

    assert result.exit_code != 0
    assert "Invalid configuration values" in result.output


def test_config_edit_applies_changes(tmp_path: Path, monkeypatch) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    manager = ConfigManager(config_path=_config_path(tmp_path))
    manager.ensure_exists()

    def _mock_edit(text: str, **_: Any) -> str:
        return text.replace("sequence_mutations: false", "sequence_mutations: true")

    monkeypatch.setattr("anchor.cli.click.edit", _mock_edit)

    result = runner.invoke(cli, ["config", "edit"], env=env)

    assert result.exit_code == 0
    assert "updated" in result.output.lower()

    config = manager.load(include_env=False)
    assert config.store.sequence_mutations is True


def _wide_console(monkeypatch) -> None:
    monkeypatch.setattr("anchor.cli.console", Console(width=200, color_system=None))


def test_config_set_rejects_unknown_sort_field(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    runner.invoke(cli, ["config", "view"], env=env)
    before = _config_path(tmp_path).read_text(encoding="utf-8")

    result = runner.invoke(
        cli, ["config", "set", "views.default_sort_field", "--value", "bogus"], env=env
    )

    assert result.exit_code == 1
    assert "unknown sort field" in result.output
    assert _config_path(tmp_path).read_text(encoding="utf-8") == before


def test_commands_report_invalid_sort_field_in_file(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    path = _config_path(tmp_path)
    path.parent.mkdir(parents=True)
    path.write_text("views:\n  default_sort_field: bogus\n", encoding="utf-8")

    for command in (["list"], ["watch", "--quiet"]):
        result = runner.invoke(cli, command, env=env)

        assert result.exit_code == 1
        assert not isinstance(result.exception, ValueError)
        assert "unknown sort field" in result.output


def test_config_set_lists_changed_setting_with_override(tmp_path: Path, monkeypatch) -> None:
    _wide_console(monkeypatch)
    runner = CliRunner()
    env = _env_with_home(tmp_path)

    result = runner.invoke(
        cli, ["config", "set", "views.default_sort_field", "--value", "referenceName"], env=env
    )
    repeat = runner.invoke(
        cli, ["config", "set", "views.default_sort_field", "--value", "referenceName"], env=env
    )

    assert result.exit_code == 0
    assert "views.default_sort_field" in result.output
    assert "createdAt" in result.output
    assert "referenceName" in result.output
    assert "ANCHOR__VIEWS__DEFAULT_SORT_FIELD" in result.output
    assert "No changes applied" in repeat.output


def test_config_set_repairs_invalid_file(tmp_path: Path) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    path = _config_path(tmp_path)
    path.parent.mkdir(parents=True)
    path.write_text("views:\n  default_sort_field: bogus\n", encoding="utf-8")

    result = runner.invoke(
        cli, ["config", "set", "views.default_sort_field", "--value", "status"], env=env
    )

    assert result.exit_code == 0
    config = ConfigManager(config_path=path).load(include_env=False)
    assert config.views.default_sort_field == "status"


def test_config_view_lists_override_variables(tmp_path: Path, monkeypatch) -> None:
    _wide_console(monkeypatch)
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    env["ANCHOR__STORE__SEQUENCE_MUTATIONS"] = "true"

    result = runner.invoke(cli, ["config", "view", "--env-names"], env=env)
    ignored = runner.invoke(cli, ["config", "view", "--env-names", "--no-env"], env=env)

    assert result.exit_code == 0
    assert "ANCHOR__STORE__SEQUENCE_MUTATIONS" in result.output
    assert "store.sequence_mutations" in result.output
    assert "True" in result.output
    assert "True" not in ignored.output


def test_config_edit_rejects_invalid_values(tmp_path: Path, monkeypatch) -> None:
    runner = CliRunner()
    env = _env_with_home(tmp_path)
    manager = ConfigManager(config_path=_config_path(tmp_path))
    manager.ensure_exists()
    before = manager.read_text()

    def _mock_edit(text: str, **_: Any) -> str:
        return text.replace("default_sort_field: createdAt", "default_sort_field: colour")

    monkeypatch.setattr("anchor.cli.click.edit", _mock_edit)

    result = runner.invoke(cli, ["config", "edit"], env=env)

    assert result.exit_code == 1
    assert "unknown sort field" in result.output
    assert manager.read_text() == before
