from __future__ import annotations

import typer

from dply import __version__
from dply.cli.commands.create_release import create_release_cmd


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command("create-release")(create_release_cmd)


def _print_version(value: bool) -> None:
    # Eager: runs during parsing, before a subcommand is required.
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_print_version,
        is_eager=True,
    ),
) -> None:
    """Create releases on a deployment server and watch their deployments."""


def main() -> None:
    app()
