"""Typer-based CLI for jspnav."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from . import __version__, config
from .config_manager import SETTING_KEYS, load_settings, save_setting
from .discovery import discover_workspace
from .lexical import offset_at
from .session import WorkspaceSession

console = Console()

app = typer.Typer(
    help="Go to definition from JSP pages into workspace, dependency and JDK sources.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Show or change navigator settings.")
app.add_typer(config_app, name="config")


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"jspnav v{__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log resolution steps to stderr."),
):
    """jspnav: resolve JSP references to their Java declarations."""
    _configure_logging(verbose)


def _read_document(file: Path) -> str:
    try:
        return file.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise typer.BadParameter(f"Cannot read {file}: {exc}")


def _cursor(text: str, line: int, column: int) -> int:
    """Offset for a 1-based line and column."""
    return offset_at(text, max(line - 1, 0), max(column - 1, 0))


@app.command("definition")
def definition(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSP file to navigate from."),
    line: int = typer.Option(..., "--line", "-l", min=1, help="1-based line of the cursor."),
    column: int = typer.Option(..., "--column", "-c", min=1, help="1-based column of the cursor."),
    workspace: Optional[Path] = typer.Option(
        None, "--workspace", "-w", file_okay=False, help="Workspace folder (defaults to the current directory)."
    ),
):
    """Print the declaration location of the symbol under the cursor."""
    text = _read_document(file)
    folder = (workspace or Path.cwd()).resolve()
    session = WorkspaceSession.from_workspace([folder], load_settings())
    try:
        found = session.resolve_definition(file.resolve().as_uri(), text, _cursor(text, line, column))
    finally:
        session.close()

    if found is None:
        typer.echo("No definition found.")
        raise typer.Exit(code=1)
    typer.echo(f"{found.path}:{found.range.start.line + 1}:{found.range.start.column + 1}")


@app.command("complete")
def complete(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSP file to complete in."),
    line: int = typer.Option(..., "--line", "-l", min=1, help="1-based line of the cursor."),
    column: int = typer.Option(..., "--column", "-c", min=1, help="1-based column of the cursor."),
):
    """List JSP completions available at the cursor."""
    text = _read_document(file)
    offset = _cursor(text, line, column)
    line_start = text.rfind("\n", 0, offset) + 1
    session = WorkspaceSession.from_workspace([], load_settings())
    try:
        items = session.complete(file.resolve().as_uri(), text, offset, text[line_start:offset])
    finally:
        session.close()

    if not items:
        typer.echo("No completions.")
        raise typer.Exit(code=0)
    for item in items:
        typer.echo(item.label)


@app.command("roots")
def roots(
    workspace: Path = typer.Argument(Path("."), exists=True, file_okay=False, help="Workspace folder to scan."),
):
    """Show discovered source roots and dependencies."""
    settings = load_settings()
    layout = discover_workspace([workspace.resolve()], settings)

    if not layout.source_roots:
        console.print("[yellow]No source roots found.[/yellow]")
    else:
        table = Table(title="Source roots")
        table.add_column("Module", style="cyan")
        table.add_column("Source path")
        for root in layout.source_roots:
            table.add_row(str(root.module_path), str(root.source_path))
        console.print(table)

    if layout.dependencies:
        table = Table(title="Dependencies")
        table.add_column("Group", style="cyan")
        table.add_column("Artifact")
        table.add_column("Version")
        table.add_column("Sources", justify="center")
        for dependency in layout.dependencies:
            archive = dependency.sources_archive(settings.dependency_cache_root)
            present = "[green]yes[/green]" if archive.is_file() else "[red]no[/red]"
            table.add_row(dependency.group_id, dependency.artifact_id, dependency.version, present)
        console.print(table)


@app.command("serve")
def serve():
    """Run the language server on stdio."""
    from .server import start

    start()


@config_app.command("show")
def config_show():
    """Show effective settings."""
    settings = load_settings()
    table = Table(title=f"Settings ({config.CONFIG_FILE})")
    table.add_column("Key", style="cyan")
    table.add_column("Value")
    for key, value in sorted(settings.to_dict().items()):
        if isinstance(value, list):
            value = ", ".join(value) or "-"
        table.add_row(key, str(value))
    console.print(table)


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Setting name."),
    value: str = typer.Argument(..., help="New value; lists are comma-separated."),
):
    """Change one setting in the config file."""
    if key not in SETTING_KEYS:
        raise typer.BadParameter(f"Unknown setting '{key}'. Choose from: {', '.join(sorted(SETTING_KEYS))}.")
    try:
        saved = save_setting(key, value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc))
    if not saved:
        typer.echo("Could not write config file.")
        raise typer.Exit(code=1)
    typer.echo(f"Set {key} = {value}")


if __name__ == "__main__":
    app()
