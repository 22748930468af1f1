"""CLI entry point for tokentimer.

Uses Click to expose the ``tokentimer`` command group with subcommands
that delegate to the TimerService.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Callable, TypeVar

import click

import tokentimer
from tokentimer.config import get_settings
from tokentimer.core.duration import DurationFormat
from tokentimer.core.service import TimerResponse, TimerService
from tokentimer.core.store import TimerStore
from tokentimer.core.timer import StorageFaultError
from tokentimer.log import configure_logging

T = TypeVar("T")


def _run(action: Callable[[], T]) -> T:
    """Execute *action*, converting caller and storage errors to a CLI error.

    The message is printed to stderr and the process exits with code 1.
    """
    try:
        return action()
    except (ValueError, StorageFaultError) as exc:
        click.echo(str(exc), err=True)
        sys.exit(1)


def _emit(response: TimerResponse) -> None:
    """Print *response* and exit non-zero unless it succeeded."""
    click.echo(response.message, err=not response.ok)
    if not response.ok:
        sys.exit(1)


def _service(ctx: click.Context) -> TimerService:
    store = _run(lambda: TimerStore(ctx.obj["db_path"]))
    ctx.call_on_close(store.close)
    return TimerService(store)


@click.group()
@click.version_option(version=tokentimer.__version__, prog_name="tokentimer")
@click.option(
    "--db",
    "db_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Timer database file (defaults to TOKENTIMER_DB_PATH).",
)
@click.pass_context
def cli(ctx: click.Context, db_path: Path | None) -> None:
    """tokentimer: token-addressed interval timers."""
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["db_path"] = db_path if db_path is not None else settings.db_path


@cli.command()
@click.argument("token")
@click.pass_context
def start(ctx: click.Context, token: str) -> None:
    """Start a timer for TOKEN."""
    service = _service(ctx)
    _emit(_run(lambda: service.start(token)))


@cli.command()
@click.argument("token")
@click.option(
    "--format",
    "fmt",
    type=click.Choice([f.value for f in DurationFormat]),
    default=DurationFormat.RAW.value,
    show_default=True,
    help="Elapsed time encoding.",
)
@click.pass_context
def check(ctx: click.Context, token: str, fmt: str) -> None:
    """Show the time elapsed since TOKEN was started."""
    service = _service(ctx)
    _emit(_run(lambda: service.check(token, fmt)))


@cli.command()
@click.argument("token")
@click.pass_context
def delete(ctx: click.Context, token: str) -> None:
    """Delete the timer for TOKEN."""
    service = _service(ctx)
    _emit(_run(lambda: service.delete(token)))


@cli.command("list")
@click.option("--json", "as_json", is_flag=True, help="Print the listing as JSON.")
@click.pass_context
def list_(ctx: click.Context, as_json: bool) -> None:
    """List all active timers."""
    response = _service(ctx).list_timers()
    if not response.ok:
        _emit(response)
    if as_json:
        click.echo(json.dumps(list(response.entries)))
        return
    if not response.entries:
        click.echo("No timers.")
        return
    for entry in response.entries:
        click.echo(f"{entry['token']}\t{entry['startTime']}")


@cli.command()
@click.pass_context
def serve(ctx: click.Context) -> None:
    """Run the MCP tool server on stdio."""
    from tokentimer.server import serve as run_server

    settings = ctx.obj["settings"].model_copy(update={"db_path": ctx.obj["db_path"]})
    _run(lambda: run_server(settings))
