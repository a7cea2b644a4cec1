import typer

from .commands.expire import register_expire_commands
from .commands.tickets import register_ticket_commands
from .commands.utils import (
    get_ticketer_version,
    parse_duration,
    raise_exit,
    require_space,
)

app = typer.Typer(add_completion=False, no_args_is_help=True)


def _version_callback(value: bool) -> None:
    if not value:
        return
    typer.echo(f"ticketer {get_ticketer_version()}")
    raise typer.Exit(code=0)


@app.callback()
def _root(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show the version and exit.",
    ),
) -> None:
    # Subcommands implement behavior; `--version` is handled eagerly.
    return


def main() -> None:
    """Entrypoint for CLI execution."""
    app()


register_ticket_commands(
    app,
    require_space=require_space,
    raise_exit=raise_exit,
)
register_expire_commands(
    app,
    require_space=require_space,
    raise_exit=raise_exit,
    parse_duration=parse_duration,
)
