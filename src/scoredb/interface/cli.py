"""
ScoreDB CLI - Command-line interface.

Commands:
- scoredb collections → List collections
- scoredb list users --where rank=1 → List records
- scoredb get users 3 → Show one record
- scoredb save users '{"name": "Steve"}' → Save a record
- scoredb update users 3 '{"name": "Alex"}' → Replace a record
- scoredb delete users 3 → Delete a record
- scoredb count users → Count records
- scoredb clear users → Remove every record
- scoredb status → Show configuration and storage status
"""

import json
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from scoredb.context import StoreContext, create_context
from scoredb.core.config import settings, setup_logging
from scoredb.core.errors import ScoreDBError
from scoredb.storage.backend import SqliteBackingStore

app = typer.Typer(
    name="scoredb",
    help="ScoreDB - Document storage over scoreboard collections",
    no_args_is_help=True,
)
console = Console()

_state: dict[str, Any] = {"db_path": None, "context": None}


def get_context() -> StoreContext:
    """Get or create the context for this invocation."""
    if _state["context"] is None:
        db_path = _state["db_path"]
        if db_path is None:
            settings.ensure_directories()
            db_path = settings.db_path
        _state["context"] = create_context(SqliteBackingStore(db_path))
    return _state["context"]


def parse_json(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        console.print(f"[red]Error: invalid JSON ({e.msg})[/red]")
        raise typer.Exit(code=1)


def parse_where(clauses: list[str]) -> dict[str, Any]:
    """Turn ["rank=1", "name=Steve"] into an equality query. Values are JSON when they parse."""
    query: dict[str, Any] = {}
    for clause in clauses:
        key, sep, value = clause.partition("=")
        if not sep or not key:
            console.print(f"[red]Error: expected key=value, got '{clause}'[/red]")
            raise typer.Exit(code=1)
        try:
            query[key] = json.loads(value)
        except json.JSONDecodeError:
            query[key] = value
    return query


def fail(error: Exception) -> None:
    console.print(f"[red]Error: {escape(str(error))}[/red]")
    raise typer.Exit(code=1)


@app.callback()
def main(
    db: Optional[Path] = typer.Option(None, "--db", help="SQLite file to use instead of the configured one"),
):
    """ScoreDB command-line interface."""
    _state["db_path"] = db
    _state["context"] = None


@app.command()
def collections():
    """List collections and how many entries they hold."""
    setup_logging()

    ctx = get_context()
    names = ctx.backend.list_collections()

    if names:
        table = Table(title="Collections")
        table.add_column("Name", style="cyan")
        table.add_column("Entries", style="green", justify="right")

        for name in names:
            table.add_row(name, str(ctx.storage.count(name)))

        console.print(table)
    else:
        console.print("[dim]No collections found[/dim]")


@app.command("list")
def list_records(
    collection: str = typer.Argument(..., help="Collection name"),
    where: list[str] = typer.Option([], "--where", "-w", help="Filter as key=value (repeatable)"),
):
    """List records, optionally filtered by field equality."""
    setup_logging()

    try:
        records = get_context().storage.get_elements(collection, parse_where(where) or None)
    except ScoreDBError as e:
        fail(e)

    if records:
        table = Table(title=collection)
        table.add_column("ID", style="cyan", justify="right")
        table.add_column("Data", style="white")

        for record in records:
            table.add_row(str(record.id), escape(json.dumps(record.data, ensure_ascii=False)))

        console.print(table)
    else:
        console.print("[dim]No records found[/dim]")


@app.command()
def get(
    collection: str = typer.Argument(..., help="Collection name"),
    record_id: int = typer.Argument(..., help="Record ID"),
):
    """Show one record."""
    setup_logging()

    try:
        data = get_context().storage.get_element_by_id(collection, record_id)
    except ScoreDBError as e:
        fail(e)

    if data is None:
        console.print(f"[yellow]No record {record_id} in {collection}[/yellow]")
        raise typer.Exit(code=1)

    console.print(Panel(escape(json.dumps(data, indent=2, ensure_ascii=False)), title=f"{collection} #{record_id}"))


@app.command()
def save(
    collection: str = typer.Argument(..., help="Collection name"),
    data: str = typer.Argument(..., help="Document as JSON"),
):
    """Save a new record."""
    setup_logging()

    document = parse_json(data)
    try:
        new_id = get_context().storage.save(collection, document)
    except ScoreDBError as e:
        fail(e)

    console.print(f"[green]✓ Saved record {new_id} in {collection}[/green]")


@app.command()
def update(
    collection: str = typer.Argument(..., help="Collection name"),
    record_id: int = typer.Argument(..., help="Record ID"),
    data: str = typer.Argument(..., help="Replacement document as JSON"),
):
    """Replace a record."""
    setup_logging()

    document = parse_json(data)
    try:
        updated = get_context().storage.update_by_id(collection, record_id, document)
    except ScoreDBError as e:
        fail(e)

    if updated:
        console.print(f"[green]✓ Updated record {record_id}[/green]")
    else:
        console.print(f"[yellow]No record {record_id} in {collection}[/yellow]")
        raise typer.Exit(code=1)


@app.command()
def delete(
    collection: str = typer.Argument(..., help="Collection name"),
    record_id: int = typer.Argument(..., help="Record ID"),
):
    """Delete a record."""
    setup_logging()

    try:
        deleted = get_context().storage.delete_by_id(collection, record_id)
    except ScoreDBError as e:
        fail(e)

    if deleted:
        console.print(f"[green]✓ Deleted record {record_id}[/green]")
    else:
        console.print(f"[yellow]No record {record_id} in {collection}[/yellow]")
        raise typer.Exit(code=1)


@app.command()
def count(
    collection: str = typer.Argument(..., help="Collection name"),
    where: list[str] = typer.Option([], "--where", "-w", help="Filter as key=value (repeatable)"),
):
    """Count records."""
    setup_logging()

    try:
        total = get_context().storage.count(collection, parse_where(where) or None)
    except ScoreDBError as e:
        fail(e)

    console.print(str(total))


@app.command()
def clear(
    collection: str = typer.Argument(..., help="Collection name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Don't ask for confirmation"),
):
    """Remove every record of a collection."""
    setup_logging()

    if not yes:
        typer.confirm(f"Remove every record of '{collection}'?", abort=True)

    try:
        get_context().storage.clear(collection)
    except ScoreDBError as e:
        fail(e)

    console.print(f"[green]✓ Cleared {collection}[/green]")


@app.command()
def status():
    """Show configuration and storage status."""
    setup_logging()

    ctx = get_context()
    summary = ctx.to_dict()

    console.print("[bold]ScoreDB Status[/bold]\n")
    console.print(f"Database: {ctx.backend.db_path}")
    console.print(f"  Backend: {summary['backend']}")
    console.print(f"  Collections: {len(summary['collections'])}")

    console.print("\nLimits:")
    console.print(f"  Collection name: {summary['max_name_length']} chars")
    console.print(f"  Entry size: {summary['max_entry_length']} chars")


if __name__ == "__main__":
    app()
