"""Compile commands: response derives, operation-level responses and status codes."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from respdoc.config import OutputFormat, get_settings
from respdoc.core.compile import CompiledResponse, compile_file, compile_responses
from respdoc.core.render import render_chain
from respdoc.core.status import resolve_status
from respdoc.errors import RespdocError

console = Console()

FormatOption = Annotated[
    OutputFormat | None,
    typer.Option("--format", "-f", help="Output format: builder or openapi. Defaults to RESPDOC_OUTPUT_FORMAT."),
]


@contextmanager
def reported_errors() -> Iterator[None]:
    """Print compile failures in red and exit with status 1."""
    try:
        yield
    except (RespdocError, FileNotFoundError) as exc:
        console.print(f"[red]error:[/red] {escape(str(exc))}", soft_wrap=True)
        raise typer.Exit(1) from exc


def _print_compiled(compiled: Sequence[CompiledResponse], output_format: OutputFormat) -> None:
    if output_format is OutputFormat.openapi:
        if len(compiled) == 1:
            console.print_json(data=compiled[0].openapi)
        else:
            console.print_json(data={c.name: c.openapi for c in compiled})
        return
    for item in compiled:
        console.print(f"[bold]{item.name}[/bold] ({item.derive})")
        builder = "ResponsesBuilder" if item.derive != "ToResponse" else "ResponseBuilder"
        console.print(render_chain(item.chain, builder), markup=False, highlight=False, soft_wrap=True)


def compile_command(
    file: Annotated[str, typer.Argument(help="Rust source file to compile.")],
    type_name: Annotated[str | None, typer.Option("--type", "-t", help="Only compile this type.")] = None,
    output_format: FormatOption = None,
) -> None:
    """Compile the ToResponse and IntoResponses derives of a Rust file."""
    output_format = output_format or get_settings().output_format
    with reported_errors():
        compiled = compile_file(file, type_name)
    if not compiled:
        console.print("(0 responses)")
        return
    _print_compiled(compiled, output_format)


def responses_command(
    text: Annotated[str, typer.Argument(help="Entries of a responses(...) list.")],
    source: Annotated[str | None, typer.Option(help="Rust file declaring the referenced types.")] = None,
    output_format: FormatOption = None,
) -> None:
    """Compile an operation-level responses(...) list."""
    output_format = output_format or get_settings().output_format
    with reported_errors():
        source_text = None
        if source is not None:
            try:
                source_text = Path(source).read_text(encoding="utf-8")
            except FileNotFoundError:
                raise FileNotFoundError(f"File not found: {source}") from None
        compiled = compile_responses(text, source_text)
    _print_compiled([compiled], output_format)


def status_command(
    literals: Annotated[list[str], typer.Argument(help="Status literals, e.g. 200, \"4XX\" or StatusCode::OK.")],
) -> None:
    """Resolve status-code literals to their OpenAPI keys."""
    table = Table(show_lines=False)
    table.add_column("literal")
    table.add_column("status")
    with reported_errors():
        for literal in literals:
            table.add_row(escape(literal), resolve_status(literal))
    console.print(table)
