from __future__ import annotations

import json
from pathlib import Path
from typing import Callable, NoReturn, Optional

import typer

from ....core.config import TicketerConfig
from ....core.exceptions import InvalidTicketError
from ....core.ids import decode_ticket
from ....core.space import TicketSpace

RequireSpace = Callable[..., tuple[TicketSpace, TicketerConfig]]
RaiseExit = Callable[..., NoReturn]


def register_ticket_commands(
    app: typer.Typer,
    *,
    require_space: RequireSpace,
    raise_exit: RaiseExit,
) -> None:
    @app.command("generate")
    def generate(
        path: Optional[Path] = typer.Option(None, "--path", help="Ticket directory"),
        config: Optional[Path] = typer.Option(None, "--config", help="Config file"),
        sequence: bool = typer.Option(
            False, "--sequence", "-q", help="Embed a sequence number in each ticket"
        ),
        count: int = typer.Option(1, "--count", "-n", min=1, help="Tickets to print"),
    ) -> None:
        """Print new ticket identifiers."""
        space, _ = require_space(path, config, sequence=sequence)
        for _ in range(count):
            typer.echo(space.generate())

    @app.command("save")
    def save(
        source: Optional[Path] = typer.Argument(
            None, help="File to store (reads stdin when omitted)"
        ),
        ticket: Optional[str] = typer.Option(None, "--ticket", help="Reuse a ticket"),
        path: Optional[Path] = typer.Option(None, "--path", help="Ticket directory"),
        config: Optional[Path] = typer.Option(None, "--config", help="Config file"),
        sequence: bool = typer.Option(False, "--sequence", "-q"),
    ) -> None:
        """Store a payload and print its ticket."""
        space, _ = require_space(path, config, sequence=sequence)
        if source is None:
            saved, ok = space.save(typer.get_binary_stream("stdin"), ticket)
        else:
            try:
                with source.open("rb") as handle:
                    saved, ok = space.save(handle, ticket)
            except OSError as exc:
                raise_exit(f"Unable to read {source}: {exc}", cause=exc)
        if not ok:
            raise_exit(f"Failed to save ticket {saved}")
        typer.echo(saved)

    @app.command("load")
    def load(
        ticket: str = typer.Argument(..., help="Ticket to load"),
        output: Optional[Path] = typer.Option(
            None, "--output", "-o", help="Write to file instead of stdout"
        ),
        path: Optional[Path] = typer.Option(None, "--path", help="Ticket directory"),
        config: Optional[Path] = typer.Option(None, "--config", help="Config file"),
    ) -> None:
        """Write a stored payload to stdout or a file."""
        space, _ = require_space(path, config)
        if output is None:
            data = space.read_bytes(ticket)
            if data is None:
                raise_exit(f"Ticket not found: {ticket}")
            stdout = typer.get_binary_stream("stdout")
            stdout.write(data)
            stdout.flush()
            return
        with output.open("wb") as handle:
            ok = space.load(ticket, handle)
        if not ok:
            output.unlink(missing_ok=True)
            raise_exit(f"Ticket not found: {ticket}")

    @app.command("remove")
    def remove(
        ticket: str = typer.Argument(..., help="Ticket to delete"),
        path: Optional[Path] = typer.Option(None, "--path", help="Ticket directory"),
        config: Optional[Path] = typer.Option(None, "--config", help="Config file"),
    ) -> None:
        """Delete a stored payload."""
        space, _ = require_space(path, config)
        if not space.remove(ticket):
            raise_exit(f"Ticket not found: {ticket}")

    @app.command("next")
    def next_ticket(
        random: bool = typer.Option(
            False, "--random", help="Pick a random entry instead of the listing head"
        ),
        path: Optional[Path] = typer.Option(None, "--path", help="Ticket directory"),
        config: Optional[Path] = typer.Option(None, "--config", help="Config file"),
    ) -> None:
        """Print the path of the next entry to process."""
        space, _ = require_space(path, config)
        selected = space.next(random)
        if selected is None:
            raise_exit("No tickets available.")
        typer.echo(str(selected))

    @app.command("decode")
    def decode(
        ticket: str = typer.Argument(..., help="Ticket to decode"),
        output_json: bool = typer.Option(False, "--json", help="Emit JSON"),
    ) -> None:
        """Show the sequence and timestamp fields of a ticket."""
        try:
            fields = decode_ticket(ticket)
        except InvalidTicketError as exc:
            raise_exit(str(exc), cause=exc)
        payload = {
            "ticket": ticket,
            "sequence": fields.sequence,
            "timestamp_low": fields.timestamp_low,
            "entropy": fields.entropy.hex(),
        }
        if output_json:
            typer.echo(json.dumps(payload, indent=2))
            return
        typer.echo(f"sequence={fields.sequence} timestamp_low={fields.timestamp_low}")
