"""CLI entry point for settingsdb."""

import logging
import sys
import time
from typing import NoReturn

import click

from settingsdb.config import DEFAULT_DATABASE_NAME
from settingsdb.convert import ValueType, parse_value, python_type, to_text
from settingsdb.errors import SettingsError
from settingsdb.manager import SettingsManager
from settingsdb.models.settings_entry import SettingsEntry

log = logging.getLogger("settingsdb.cli")

TYPE_CHOICE = click.Choice([t.value for t in ValueType])

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _manager(ctx: click.Context) -> SettingsManager:
    """Open the database selected by the global options."""
    try:
        return SettingsManager(ctx.obj["db"], ctx.obj["dir"])
    except SettingsError as exc:
        _fail(str(exc))


def _fail(message: str) -> NoReturn:
    click.echo(message, err=True)
    sys.exit(1)


def _canonical(value: str, type_name: str | None) -> str:
    """Validate ``value`` against ``type_name`` and return its stored form."""
    if type_name is None:
        return value
    value_type = ValueType(type_name)
    try:
        return to_text(parse_value(value_type, value))
    except ValueError as exc:
        _fail(f"Invalid value for type {value_type.value}: {exc}")


def _format(value: str | int | bool | float) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    text = str(value)
    return text if text else "(empty)"


def _echo_entry(entry: SettingsEntry) -> None:
    id_tag = click.style(f"[id {entry.id}]", fg="cyan")
    click.echo(f"  {entry.key} = {_format(entry.value)}  {id_tag}")
    if entry.description:
        click.echo(click.style(f"    {entry.description}", dim=True))


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------


@click.group()
@click.option("--db", "db_name", default=DEFAULT_DATABASE_NAME, show_default=True, help="Database name")
@click.option("--dir", "directory", type=click.Path(file_okay=False), help="Directory of the database")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def main(ctx: click.Context, db_name: str, directory: str | None, verbose: bool) -> None:
    """Settings database tool."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )
    ctx.obj = {"db": db_name, "dir": directory}


@main.command("init")
@click.pass_context
def init_command(ctx: click.Context) -> None:
    """Create the database and its schema."""
    manager = _manager(ctx)
    click.echo(f"Database initialized at {manager.db_path}.")


@main.command("list")
@click.pass_context
def list_command(ctx: click.Context) -> None:
    """Show all entries."""
    entries = _manager(ctx).load_all()
    if not entries:
        click.echo("(no entries)")
        return
    for entry in entries:
        _echo_entry(entry)


@main.command("get")
@click.argument("key", type=int)
@click.option("--type", "type_name", type=TYPE_CHOICE, help="Read the value as this type")
@click.pass_context
def get_command(ctx: click.Context, key: int, type_name: str | None) -> None:
    """Print the value of an entry."""
    manager = _manager(ctx)
    try:
        if type_name is None:
            value = manager.load_value(key)
        else:
            value = manager.load_typed_value(key, python_type(ValueType(type_name)))
    except SettingsError as exc:
        _fail(str(exc))

    if value is None:
        _fail(f"No entry with key {key}")
    click.echo(_format(value))


@main.command("add")
@click.argument("key", type=int)
@click.argument("value")
@click.option("-d", "--description", default="", help="Description of the entry")
@click.option("--type", "type_name", type=TYPE_CHOICE, help="Validate the value as this type")
@click.pass_context
def add_command(ctx: click.Context, key: int, value: str, description: str, type_name: str | None) -> None:
    """Add a new entry."""
    text = _canonical(value, type_name)
    try:
        entry = _manager(ctx).add_value(key, text, description)
    except SettingsError as exc:
        _fail(str(exc))
    click.echo(f"Added {entry.key} = {_format(entry.value)} (id {entry.id})")


@main.command("update")
@click.argument("key", type=int)
@click.argument("value")
@click.option("-d", "--description", default="", help="Description, used only if the entry has none")
@click.option("--type", "type_name", type=TYPE_CHOICE, help="Validate the value as this type")
@click.pass_context
def update_command(ctx: click.Context, key: int, value: str, description: str, type_name: str | None) -> None:
    """Update the value of an entry (no-op if the key does not exist)."""
    text = _canonical(value, type_name)
    try:
        _manager(ctx).update_value(key, text, description)
    except SettingsError as exc:
        _fail(str(exc))
    click.echo(f"{key} = {_format(text)}")


@main.command("delete")
@click.argument("key", type=int)
@click.pass_context
def delete_command(ctx: click.Context, key: int) -> None:
    """Delete an entry (no-op if the key does not exist)."""
    try:
        _manager(ctx).delete_entry(key)
    except SettingsError as exc:
        _fail(str(exc))
    click.echo(f"Deleted {key}.")


@main.command("demo")
@click.pass_context
def demo_command(ctx: click.Context) -> None:
    """Walk through add, typed load, list and delete on the selected database."""
    started = time.monotonic()
    try:
        manager = SettingsManager(ctx.obj["db"], ctx.obj["dir"])

        log.info("Add an entry")
        manager.add_value(1, "SomeValue", "Some description")

        first = manager.load_entry(1)
        if first is not None:
            log.info(
                "Value loaded: Id %s, Key %s, Value %s, Description: %s",
                first.id,
                first.key,
                first.value,
                first.description,
            )

        log.info("Add another value")
        second = manager.add_entry(SettingsEntry(id=1, key=2, value="10", description="Some description"))
        log.info("Id of the entry: %s", second.id)

        int_value = manager.load_typed_value(2, int)
        log.info("Value loaded. Value: %s", int_value)

        manager.add_value(3, True, "Some bool value...")
        log.info("Add a third value")

        for entry in manager.load_all():
            log.info(
                "Id %s, Key %s, Value %s, Description: %s",
                entry.id,
                entry.key,
                entry.value,
                entry.description,
            )

        if first is not None:
            log.info("Delete first value")
            manager.delete_entry(first)

        for entry in manager.load_all():
            log.info(
                "Id %s, Key %s, Value %s, Description: %s",
                entry.id,
                entry.key,
                entry.value,
                entry.description,
            )

        log.info("Add an entry with a key that is already in use")
        manager.add_entry(SettingsEntry(key=2, value="10", description="Some description"))
    except SettingsError as exc:
        log.error("Demo stopped: %s", exc)
    finally:
        log.info("Duration: %.3fs", time.monotonic() - started)
        log.info("Done")
