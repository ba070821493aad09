from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from respdoc.config import get_settings
from respdoc.routes import DEFAULT_SOURCE_ROOT, derive_path, list_handler_modules

routes_app = typer.Typer(help="Resolve file-based routes.")
console = Console()


@routes_app.command("modules")
def modules(
    routes_dir: Annotated[
        str | None, typer.Argument(help="Routes directory. Defaults to RESPDOC_ROUTES_DIR.")
    ] = None,
) -> None:
    """List the handler modules found under a routes directory."""
    directory = routes_dir or get_settings().routes_dir
    try:
        handlers = list_handler_modules(directory)
    except FileNotFoundError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc

    table = Table(show_lines=False)
    table.add_column("handler")
    table.add_column("path")
    for handler in handlers:
        module_file = handler.rsplit("::", 1)[0].replace("::", "/") + ".rs"
        table.add_row(handler, derive_path(module_file, source_root="routes"))
    console.print(table)
    console.print(f"({len(handlers)} handlers)")


@routes_app.command("path")
def path(
    file: Annotated[str, typer.Argument(help="Handler source file.")],
    source_root: Annotated[str, typer.Option(help="Prefix stripped from the file path.")] = DEFAULT_SOURCE_ROOT,
) -> None:
    """Print the URL path served by a handler file."""
    console.print(derive_path(file, source_root), markup=False, highlight=False)
