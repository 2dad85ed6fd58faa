"""Command line interface for Anchor."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, NamedTuple, NoReturn, Optional

import click
import yaml
from click.core import ParameterSource
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from anchor import DISTRIBUTION
from anchor.cli_support import AnchorRuntime, build_runtime, configure_logging
from anchor.config import (
    AnchorConfig,
    ConfigError,
    ConfigManager,
    flatten_for_env,
    resolve_with_precedence,
    set_dotted,
    setting_key,
)
from anchor.forms import ReferenceFormSession
from anchor.references import STATUS_ORDER, Reference
from anchor.store import CacheSnapshot, RefreshController, StoreError
from anchor.views import DashboardView, HeaderRow, QuickAccessPanel, StatusGroup
from anchor.views.navigation import NavigationAction
from anchor.views.pipeline import SORT_FIELDS, Row
from anchor.watch import DataFileWatcher

console = Console()
LOGGER = logging.getLogger(__name__)


class SettingChange(NamedTuple):
    """One setting whose saved value moved, keyed by its override variable."""

    env_name: str
    before: Optional[str]
    after: str


def _handle_cli_error(
    message: str,
    *,
    code: str,
    json_output: bool,
    original: Exception | None = None,
) -> NoReturn:
    """Stop the command with ``message``.

    JSON mode prints ``{"error": {"code", "message"}}`` and exits with status 1
    so scripts can branch on ``code``; otherwise the message surfaces as a
    :class:`click.ClickException` chained to ``original``.
    """

    if json_output:
        console.print_json(data={"error": {"code": code, "message": message}})
        raise SystemExit(1)
    raise click.ClickException(message) from original


def _emit(message: Any, *, quiet: bool) -> None:
    if not quiet:
        console.print(message)


def _load_config() -> AnchorConfig:
    manager = ConfigManager()
    try:
        manager.ensure_exists()
        return manager.load()
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc


def _runtime() -> AnchorRuntime:
    config = _load_config()
    runtime = build_runtime(config)
    configure_logging(config.logging, runtime.repository.data_dir)
    return runtime


def _quiet_enabled(ctx: click.Context, quiet: bool, config: AnchorConfig) -> bool:
    explicit = ctx.get_parameter_source("quiet") == ParameterSource.COMMANDLINE
    return quiet if explicit else config.cli.quiet_default


def _check_loaded(snapshot: CacheSnapshot, json_output: bool) -> None:
    if snapshot.error:
        _handle_cli_error(snapshot.error, code="load_failed", json_output=json_output)


def _not_found(reference_id: str, json_output: bool) -> NoReturn:
    _handle_cli_error(
        f"No reference with id {reference_id}.",
        code="not_found",
        json_output=json_output,
    )


def _dump(reference: Reference) -> dict[str, Any]:
    return reference.model_dump(mode="json", by_alias=True)


def _group_table(group: StatusGroup) -> Table:
    table = Table(title=f"{group.label} ({len(group.references)})", title_justify="left")
    table.add_column("Name")
    table.add_column("Path", overflow="fold")
    table.add_column("Type")
    table.add_column("Tags")
    table.add_column("ID", style="dim")
    for reference in group.references:
        name = escape(reference.reference_name)
        table.add_row(
            f"📌 {name}" if reference.pinned else name,
            escape(reference.absolute_path),
            reference.type,
            escape(", ".join(reference.tags[:3])),
            reference.id,
        )
    return table


def _render_rows(rows: list[Row], selected_index: int) -> None:
    position = 0
    for row in rows:
        if isinstance(row, HeaderRow):
            console.print(f"[bold]{row.label}[/bold]")
            continue
        reference = row.reference
        marker = "›" if position == selected_index else " "
        tags = " ".join(f"[cyan]#{escape(tag)}[/cyan]" for tag in reference.tags[:2])
        line = f"{marker} {escape(reference.reference_name)} [dim]{reference.type}[/dim] {tags}"
        console.print(line.rstrip())
        position += 1


async def _submit_session(session: ReferenceFormSession) -> Optional[Reference]:
    await session.path_checker.wait_idle()
    return await session.submit()


def _form_outcome(
    session: ReferenceFormSession,
    saved: Optional[Reference],
    json_output: bool,
) -> Reference:
    if session.validation_errors:
        _handle_cli_error(
            " ".join(session.validation_errors.values()),
            code="invalid_reference",
            json_output=json_output,
        )
    if saved is None:
        _handle_cli_error(
            session.submit_error or "Failed to save reference",
            code="save_failed",
            json_output=json_output,
        )
    return saved


def _emit_saved(
    verb: str,
    session: ReferenceFormSession,
    reference: Reference,
    *,
    json_output: bool,
    quiet: bool,
) -> None:
    if json_output:
        console.print_json(data={"reference": _dump(reference), "warning": session.path_warning})
        return
    if session.path_warning:
        _emit(f"[yellow]{session.path_warning}[/yellow]", quiet=quiet)
    _emit(
        f"[green]{verb} {escape(reference.reference_name)} ({reference.id}).[/green]",
        quiet=quiet,
    )


def _config_manager() -> ConfigManager:
    manager = ConfigManager()
    manager.ensure_exists()
    return manager


def _saved_settings(manager: ConfigManager) -> AnchorConfig:
    """Return the configuration the file currently describes.

    A file that no longer validates is compared as if it held the defaults, so
    ``config set`` and ``config edit`` can still repair it.
    """

    try:
        return resolve_with_precedence(
            defaults=AnchorConfig(), file_overrides=manager.load_file_overrides()
        )
    except ConfigError as exc:
        LOGGER.info("Existing configuration is invalid, comparing against defaults: %s", exc)
        return AnchorConfig()


def _save_settings(manager: ConfigManager, file_data: dict[str, Any]) -> list[SettingChange]:
    """Validate ``file_data``, write it, and list the settings whose values moved.

    Raises:
        click.ClickException: If the new values do not validate; nothing is written.
    """

    before = flatten_for_env(_saved_settings(manager))
    try:
        resolved = resolve_with_precedence(defaults=AnchorConfig(), file_overrides=file_data)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc
    manager.save(file_data)
    return [
        SettingChange(name, before.get(name), value)
        for name, value in flatten_for_env(resolved).items()
        if before.get(name) != value
    ]


def _settings_table(title: str, rows: list[tuple[str, ...]], columns: tuple[str, ...]) -> Table:
    table = Table(title=title, title_justify="left")
    for column in columns:
        table.add_column(column, overflow="fold")
    for row in rows:
        table.add_row(*(escape(cell) for cell in row))
    return table


def _print_changes(changes: list[SettingChange]) -> None:
    rows = [
        (setting_key(change.env_name), change.before or "", change.after, change.env_name)
        for change in changes
    ]
    console.print(_settings_table("Changed settings", rows, ("Setting", "Was", "Now", "Override")))


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name=DISTRIBUTION)
def cli() -> None:
    """Anchor catalogs the folders and files you work with so you can find and open them fast."""


@cli.command("list")
@click.option("--search", "query", default="", help="Case-insensitive name or tag filter.")
@click.option(
    "--sort",
    "sort_field",
    type=click.Choice(sorted(SORT_FIELDS)),
    default=None,
    help="Field to sort by (defaults to configuration).",
)
@click.option("--asc/--desc", "ascending", default=None, help="Sort direction.")
@click.option("--json", "json_output", is_flag=True, help="Emit the grouped references as JSON.")
def list_references(
    query: str,
    sort_field: str | None,
    ascending: bool | None,
    json_output: bool,
) -> None:
    """Show every reference grouped by status, like the dashboard table."""
    runtime = _runtime()
    asyncio.run(runtime.store.load_references())
    _check_loaded(runtime.store.snapshot, json_output)

    views = runtime.config.views
    direction = views.default_sort_direction
    if ascending is not None:
        direction = "asc" if ascending else "desc"
    view = DashboardView(
        runtime.store,
        sort_field=sort_field or views.default_sort_field,
        sort_direction=direction,
    )
    view.search_query = query
    groups = view.groups()

    if json_output:
        console.print_json(
            data={
                "count": len(runtime.store.references),
                "sort": {"field": view.sort_field, "direction": view.sort_direction},
                "groups": [
                    {
                        "status": group.status,
                        "label": group.label,
                        "references": [_dump(reference) for reference in group.references],
                    }
                    for group in groups
                ],
            }
        )
        return

    if view.is_empty:
        console.print("[yellow]No references yet. Add one with `anchor add NAME PATH`.[/yellow]")
        return
    console.print(f"[green]{view.count_label()}[/green]")
    if not groups:
        console.print("[yellow]No references found.[/yellow]")
    for group in groups:
        console.print(_group_table(group))


@cli.command()
@click.option("--search", "query", default="", help="Case-insensitive name or tag filter.")
@click.option("--down", type=click.IntRange(min=0), default=0, help="Press ArrowDown N times.")
@click.option("--up", type=click.IntRange(min=0), default=0, help="Press ArrowUp N times.")
@click.option(
    "--open",
    "open_mode",
    type=click.Choice(["default", "terminal", "editor"]),
    default=None,
    help="Press Enter on the selection (with the terminal or editor modifier).",
)
@click.option("--json", "json_output", is_flag=True, help="Emit the panel rows as JSON.")
def quick(query: str, down: int, up: int, open_mode: str | None, json_output: bool) -> None:
    """Show the quick-access panel and optionally open the selected reference."""
    runtime = _runtime()
    panel = QuickAccessPanel(runtime.store, runtime.actions)

    async def _session() -> Optional[NavigationAction]:
        await runtime.store.load_references()
        if runtime.store.snapshot.error:
            return None
        panel.set_query(query)
        for _ in range(down):
            await panel.handle_key("ArrowDown")
        for _ in range(up):
            await panel.handle_key("ArrowUp")
        if open_mode is None:
            return None
        return await panel.handle_key(
            "Enter",
            primary=open_mode == "terminal",
            secondary=open_mode == "editor",
        )

    action = asyncio.run(_session())
    _check_loaded(runtime.store.snapshot, json_output)
    rows = panel.rows()
    selected = panel.selected_index

    if json_output:
        items: list[dict[str, Any]] = []
        position = 0
        for row in rows:
            if isinstance(row, HeaderRow):
                items.append({"header": row.label})
            else:
                items.append({"reference": _dump(row.reference), "selected": position == selected})
                position += 1
        payload: dict[str, Any] = {"query": query, "selected_index": selected, "rows": items}
        if action is not None:
            payload["action"] = {
                "kind": action.kind,
                "path": action.reference.absolute_path if action.reference else None,
            }
        console.print_json(data=payload)
        return

    if not rows:
        console.print("[yellow]No references found.[/yellow]")
        return
    _render_rows(rows, selected)
    if action is not None and action.reference is not None:
        console.print(
            f"[green]Opened {escape(action.reference.absolute_path)} ({action.kind}).[/green]"
        )


@cli.command()
@click.argument("name")
@click.argument("path")
@click.option(
    "--type",
    "reference_type",
    type=click.Choice(["folder", "file"]),
    default=None,
    help="Reference type (inferred from PATH when omitted).",
)
@click.option("--status", type=click.Choice(STATUS_ORDER), default="active", show_default=True)
@click.option("--tags", default="", help="Comma-separated tags.")
@click.option("--description", default="", help="Optional description.")
@click.option("--pin", is_flag=True, help="Pin the reference to the top of the panel.")
@click.option("--json", "json_output", is_flag=True, help="Emit the saved reference as JSON.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def add(
    ctx: click.Context,
    name: str,
    path: str,
    reference_type: str | None,
    status: str,
    tags: str,
    description: str,
    pin: bool,
    json_output: bool,
    quiet: bool,
) -> None:
    """Catalog PATH under NAME."""
    runtime = _runtime()
    if reference_type is None:
        reference_type = "file" if Path(path).expanduser().is_file() else "folder"

    async def _submit() -> tuple[ReferenceFormSession, Optional[Reference]]:
        session = ReferenceFormSession(runtime.store, runtime.path_checker(), mode="add")
        session.set_field("reference_name", name)
        session.set_field("absolute_path", path)
        session.set_field("type", reference_type)
        session.set_field("status", status)
        session.set_field("tags_text", tags)
        session.set_field("description", description)
        session.set_field("pinned", pin)
        return session, await _submit_session(session)

    session, saved = asyncio.run(_submit())
    reference = _form_outcome(session, saved, json_output)
    _emit_saved(
        "Added",
        session,
        reference,
        json_output=json_output,
        quiet=_quiet_enabled(ctx, quiet, runtime.config),
    )


@cli.command()
@click.argument("reference_id", metavar="ID")
@click.option("--name", default=None, help="New reference name.")
@click.option("--path", default=None, help="New absolute path.")
@click.option("--type", "reference_type", type=click.Choice(["folder", "file"]), default=None)
@click.option("--status", type=click.Choice(STATUS_ORDER), default=None)
@click.option("--tags", default=None, help="Replacement comma-separated tags.")
@click.option("--description", default=None, help="Replacement description.")
@click.option("--pin/--unpin", "pinned", default=None, help="Pin or unpin the reference.")
@click.option("--json", "json_output", is_flag=True, help="Emit the saved reference as JSON.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def edit(
    ctx: click.Context,
    reference_id: str,
    name: str | None,
    path: str | None,
    reference_type: str | None,
    status: str | None,
    tags: str | None,
    description: str | None,
    pinned: bool | None,
    json_output: bool,
    quiet: bool,
) -> None:
    """Update the reference with the given ID; omitted options keep their values."""
    runtime = _runtime()
    updates: dict[str, Any] = {
        "reference_name": name,
        "absolute_path": path,
        "type": reference_type,
        "status": status,
        "tags_text": tags,
        "description": description,
        "pinned": pinned,
    }

    async def _submit() -> Optional[tuple[ReferenceFormSession, Optional[Reference]]]:
        await runtime.store.load_references()
        existing = runtime.store.snapshot.find(reference_id)
        if existing is None:
            return None
        session = ReferenceFormSession(
            runtime.store,
            runtime.path_checker(),
            mode="edit",
            reference=existing,
        )
        for field_name, value in updates.items():
            if value is not None:
                session.set_field(field_name, value)
        return session, await _submit_session(session)

    outcome = asyncio.run(_submit())
    if outcome is None:
        _check_loaded(runtime.store.snapshot, json_output)
        _not_found(reference_id, json_output)
    session, saved = outcome
    reference = _form_outcome(session, saved, json_output)
    _emit_saved(
        "Updated",
        session,
        reference,
        json_output=json_output,
        quiet=_quiet_enabled(ctx, quiet, runtime.config),
    )


@cli.command("rm")
@click.argument("reference_id", metavar="ID")
@click.option("--json", "json_output", is_flag=True, help="Emit the result as JSON.")
def remove(reference_id: str, json_output: bool) -> None:
    """Delete the reference with the given ID."""
    runtime = _runtime()
    try:
        asyncio.run(runtime.store.delete_reference(reference_id))
    except StoreError as exc:
        _handle_cli_error(exc.message, code="delete_failed", json_output=json_output, original=exc)
    if json_output:
        console.print_json(data={"deleted": reference_id})
        return
    console.print(f"[green]Deleted {reference_id}.[/green]")


@cli.command("open")
@click.argument("reference_id", metavar="ID")
@click.option(
    "--with",
    "target",
    type=click.Choice(["finder", "terminal", "editor", "reveal", "copy"]),
    default="finder",
    show_default=True,
    help="How to open the reference.",
)
def open_reference(reference_id: str, target: str) -> None:
    """Open the reference with the given ID."""
    runtime = _runtime()

    async def _open() -> tuple[Optional[Reference], bool]:
        await runtime.store.load_references()
        reference = runtime.store.snapshot.find(reference_id)
        if reference is None:
            return None, False
        actions = runtime.actions
        handlers = {
            "finder": actions.open_in_finder,
            "terminal": actions.open_in_terminal,
            "editor": actions.open_in_editor,
            "reveal": actions.reveal_in_finder,
            "copy": actions.copy_path,
        }
        return reference, await handlers[target](reference.absolute_path)

    reference, succeeded = asyncio.run(_open())
    if reference is None:
        _check_loaded(runtime.store.snapshot, False)
        _not_found(reference_id, False)
    if succeeded:
        console.print(f"[green]{target}: {escape(reference.absolute_path)}[/green]")
    else:
        console.print(f"[yellow]Could not run the {target} action for {reference_id}.[/yellow]")


@cli.command()
@click.option("--quiet", is_flag=True, help="Suppress per-refresh summaries.")
@click.pass_context
def watch(ctx: click.Context, quiet: bool) -> None:
    """Keep the cache live and report every refresh until interrupted."""
    runtime = _runtime()
    quiet_enabled = _quiet_enabled(ctx, quiet, runtime.config)
    view = DashboardView(
        runtime.store,
        sort_field=runtime.config.views.default_sort_field,
        sort_direction=runtime.config.views.default_sort_direction,
    )

    def _report(snapshot: CacheSnapshot) -> None:
        if snapshot.error:
            console.print(f"[yellow]Refresh failed: {escape(snapshot.error)}[/yellow]")
            return
        counts = ", ".join(f"{group.label}={len(group.references)}" for group in view.groups())
        _emit(
            f"[cyan]{view.count_label()}[/cyan]" + (f" ({counts})" if counts else ""),
            quiet=quiet_enabled,
        )

    async def _watch() -> None:
        watcher = DataFileWatcher(
            runtime.repository.data_path,
            runtime.bus,
            debounce_seconds=runtime.config.watch.debounce_seconds,
        )
        async with RefreshController(runtime.store, runtime.bus, on_refresh=_report):
            watcher.start()
            try:
                await asyncio.Event().wait()
            finally:
                watcher.stop()

    _emit(f"[green]Watching {runtime.repository.data_path}.[/green]", quiet=quiet_enabled)
    try:
        asyncio.run(_watch())
    except KeyboardInterrupt:
        _emit("[yellow]Stopped watching.[/yellow]", quiet=quiet_enabled)


@cli.group()
def config() -> None:
    """Manage Anchor configuration files and overrides."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore ANCHOR__ environment overrides.")
@click.option(
    "--env-names",
    is_flag=True,
    help="List each setting with the ANCHOR__ variable that overrides it.",
)
def config_view(no_env: bool, env_names: bool) -> None:
    """Display the effective configuration after applying precedence rules."""
    try:
        loaded = _config_manager().load(include_env=not no_env)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    if env_names:
        rows = [(setting_key(name), value, name) for name, value in flatten_for_env(loaded).items()]
        console.print(_settings_table("Settings", rows, ("Setting", "Value", "Override")))
        return
    yaml_text = yaml.safe_dump(loaded.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="YAML literal to store at KEY.")
def config_set(key: str, value: str) -> None:
    """Store VALUE at the dotted KEY, e.g. ``views.default_sort_field``."""
    manager = _config_manager()
    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        file_data = set_dotted(manager.load_file_overrides(), key, parsed_value)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    changes = _save_settings(manager, file_data)
    if not changes:
        console.print("[yellow]No changes applied; value already up to date.[/yellow]")
        return
    _print_changes(changes)


@config.command("edit")
def config_edit() -> None:
    """Edit the configuration file in $EDITOR and save it if it validates."""
    manager = _config_manager()
    original = manager.read_text()
    edited = click.edit(original, extension=".yaml")

    if edited is None or edited == original:
        console.print("[yellow]No changes detected.[/yellow]")
        return

    try:
        parsed = yaml.safe_load(edited) or {}
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Invalid YAML: {exc}") from exc
    if not isinstance(parsed, dict):
        raise click.ClickException("Configuration file must contain a top-level mapping.")

    changes = _save_settings(manager, parsed)
    console.print("[green]Configuration updated.[/green]")
    if changes:
        _print_changes(changes)


def main() -> None:
    """Invoke the Click CLI as the console script entry point."""
    cli()


if __name__ == "__main__":
    main()
