import logging
from typing import Annotated

import typer

from respdoc.cli.compile import compile_command, responses_command, status_command
from respdoc.cli.routes import routes_app
from respdoc.config import get_settings

app = typer.Typer(
    name="respdoc",
    help="respdoc: compile Rust response annotations into OpenAPI response builders.",
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


@app.callback()
def configure(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Log debug output.")] = False,
) -> None:
    level = logging.DEBUG if verbose else get_settings().log_level
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


app.command("compile")(compile_command)
app.command("responses")(responses_command)
app.command("status")(status_command)
app.add_typer(routes_app, name="routes")


def main() -> None:
    app()
