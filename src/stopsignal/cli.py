"""CLI entry point using Click."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import click

from stopsignal import __version__
from stopsignal.config import StopSignalConfig, load_config
from stopsignal.core.delay import cancelable_delay
from stopsignal.core.derived import derive_any
from stopsignal.core.scheduler import AsyncioScheduler
from stopsignal.core.scope import cancel_boundary
from stopsignal.core.signal import CancelReason, Signal, create_signal
from stopsignal.core.timeout import with_timeout
from stopsignal.errors import ConfigurationError
from stopsignal.utilities.logger import get_logger, setup_logging

logger = get_logger(__name__)


@dataclass(slots=True)
class SleepReport:
    """What happened to a ``stopsignal sleep`` run."""

    requested: float
    elapsed: float
    reason: CancelReason | None = None

    @property
    def completed(self) -> bool:
        return self.reason is None


async def run_sleep(
    duration: float,
    *,
    timeout: float | None = None,
    cancel_after: float | None = None,
    chunk_size: float | None = None,
) -> SleepReport:
    """Sleep under a signal derived from an optional timeout and a manual cancel."""
    scheduler = AsyncioScheduler()
    manual = create_signal(name="manual")
    parents: list[Signal] = [manual.signal]
    timeout_signal = None
    if timeout is not None:
        timeout_signal = with_timeout(timeout, scheduler=scheduler)
        parents.append(timeout_signal)
    governing = derive_any(parents, name="sleep", scheduler=scheduler)

    cancel_timer = None
    if cancel_after is not None:
        cancel_timer = scheduler.call_later(cancel_after, manual.cancel)

    started = scheduler.now()
    with cancel_boundary("sleep") as boundary:
        await cancelable_delay(duration, governing, chunk_size=chunk_size, scheduler=scheduler)
    elapsed = scheduler.now() - started

    if timeout_signal is not None:
        timeout_signal.dispose()
    if cancel_timer is not None:
        cancel_timer.cancel()
    # Release the derived signal's watcher task.
    if manual.is_pending:
        manual.resolve_done()

    return SleepReport(requested=duration, elapsed=elapsed, reason=boundary.reason)


@click.group(invoke_without_command=True)
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path),
              default=None, help="Path to a stopsignal.yaml config file")
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.option("--json-logs", is_flag=True, help="Emit logs as JSON")
@click.option("--version", is_flag=True, help="Show version and exit")
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    debug: bool,
    json_logs: bool,
    version: bool,
) -> None:
    """stopsignal - cooperative cancellation toolkit for asyncio."""
    if version:
        click.echo(f"stopsignal {__version__}")
        ctx.exit(0)

    cli_args: dict[str, Any] = {}
    if debug:
        cli_args["debug"] = True
    if json_logs:
        cli_args["json_logs"] = True

    try:
        config = load_config(cli_args=cli_args, config_path=config_path)
    except ConfigurationError as exc:
        raise click.UsageError(str(exc)) from exc

    setup_logging(debug=config.debug, json_output=config.json_logs)
    ctx.obj = config

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@main.command("sleep")
@click.argument("duration", type=float)
@click.option("--timeout", "-t", type=float, default=None, help="Cancel after this many seconds")
@click.option("--cancel-after", type=float, default=None,
              help="Explicitly cancel after this many seconds")
@click.option("--chunk", type=float, default=None, help="Chunk size in seconds")
@click.pass_obj
def sleep_command(
    config: StopSignalConfig,
    duration: float,
    timeout: float | None,
    cancel_after: float | None,
    chunk: float | None,
) -> None:
    """Sleep for DURATION seconds, honouring timeout and cancellation."""
    if duration < 0:
        raise click.BadParameter("must be >= 0", param_hint="DURATION")
    chunk_size = chunk if chunk is not None else config.chunk_size
    if chunk_size <= 0:
        raise click.BadParameter("must be > 0", param_hint="--chunk")
    if timeout is None:
        timeout = config.default_timeout
    if timeout is not None and timeout < 0:
        raise click.BadParameter("must be >= 0", param_hint="--timeout")

    logger.debug("sleep_started", duration=duration, timeout=timeout, chunk_size=chunk_size)
    report = asyncio.run(
        run_sleep(duration, timeout=timeout, cancel_after=cancel_after, chunk_size=chunk_size)
    )

    if report.completed:
        click.echo(f"completed after {report.elapsed:.3f}s")
        return
    click.echo(f"canceled ({report.reason}) after {report.elapsed:.3f}s")
    raise SystemExit(1)


if __name__ == "__main__":
    main()
