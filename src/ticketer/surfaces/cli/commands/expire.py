from __future__ import annotations

import asyncio
import dataclasses
import json
import signal
from datetime import timedelta
from pathlib import Path
from typing import Callable, NoReturn, Optional

import typer

from ....core.config import TicketerConfig
from ....core.expiry import ExpiryWorker
from ....core.space import TicketSpace

RequireSpace = Callable[..., tuple[TicketSpace, TicketerConfig]]
RaiseExit = Callable[..., NoReturn]
ParseDuration = Callable[[Optional[str]], Optional[timedelta]]


async def _watch_until_signalled(space: TicketSpace, interval: timedelta) -> None:
    worker = ExpiryWorker(space, interval=interval)
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except (NotImplementedError, RuntimeError):
            continue
    await worker.start()
    try:
        await stop.wait()
    finally:
        await worker.stop()


def register_expire_commands(
    app: typer.Typer,
    *,
    require_space: RequireSpace,
    raise_exit: RaiseExit,
    parse_duration: ParseDuration,
) -> None:
    @app.command("expire")
    def expire(
        ttl: Optional[str] = typer.Option(
            None, "--ttl", help="Maximum age, e.g. 6h or 2d (minimum 1h)"
        ),
        path: Optional[Path] = typer.Option(None, "--path", help="Ticket directory"),
        config: Optional[Path] = typer.Option(None, "--config", help="Config file"),
        output_json: bool = typer.Option(False, "--json", help="Emit JSON"),
    ) -> None:
        """Delete tickets older than the TTL once."""
        space, cfg = require_space(path, config)
        age = parse_duration(ttl) or cfg.ttl
        summary = space.expire(age)
        if summary is None:
            raise_exit(f"Unable to read ticket directory {space.path}")
        if output_json:
            payload = dataclasses.asdict(summary)
            payload["ttl"] = int(summary.ttl.total_seconds())
            typer.echo(json.dumps(payload, indent=2))
            return
        typer.echo(
            "Expire: "
            f"scanned={summary.scanned} removed={summary.removed} "
            f"kept={summary.kept} errors={summary.errors} "
            f"ttl={int(summary.ttl.total_seconds())}s"
        )

    @app.command("watch")
    def watch(
        ttl: Optional[str] = typer.Option(
            None, "--ttl", help="Maximum age, e.g. 6h or 2d (minimum 1h)"
        ),
        path: Optional[Path] = typer.Option(None, "--path", help="Ticket directory"),
        config: Optional[Path] = typer.Option(None, "--config", help="Config file"),
        sequence: bool = typer.Option(False, "--sequence", "-q"),
    ) -> None:
        """Sweep expired tickets every interval until interrupted."""
        space, cfg = require_space(path, config, sequence=sequence)
        if not space.sequencing:
            raise_exit(
                "Expiration only runs in sequencing mode; pass --sequence or set sequence: true."
            )
        age = parse_duration(ttl) or cfg.ttl
        if age is not None:
            # Sets the TTL before the background loop starts reading it.
            space.expire(age)
        typer.echo(f"Watching {space.path} (interval {cfg.sweep_interval})")
        asyncio.run(_watch_until_signalled(space, cfg.sweep_interval))
