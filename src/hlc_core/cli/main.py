import logging
from enum import Enum
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from hlc_core.clock import Clock
from hlc_core.config import DEMO_REMOTE_SKEW_MS, REFERENCE_WALL_TIME_MS
from hlc_core.errors import HLCError
from hlc_core.metrics import configure_logging, get_registry
from hlc_core.timestamp import Timestamp, compare, pack
from hlc_core.wallclock import ManualWallClock, system_wall_clock

app = typer.Typer(help="Hybrid Logical Clock CLI")
console = Console()
logger = logging.getLogger("cli")


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def parse_packed(value: str) -> Timestamp:
    """Parse a packed timestamp given in decimal, 0x hex or 0b binary."""
    try:
        return Timestamp.from_value(int(value, 0))
    except ValueError:
        console.print(f"[red]Not an integer: {escape(value)}[/red]")
        raise typer.Exit(code=2)


def describe(ts: Timestamp) -> Table:
    table = Table(show_header=False)
    table.add_row("packed", str(ts.value))
    table.add_row("hex", f"0x{ts.value:016x}")
    table.add_row("binary", str(ts))
    table.add_row("physical", str(ts.physical))
    table.add_row("logical", str(ts.logical))
    return table


@app.callback()
def main(
    log_level: LogLevel = typer.Option(
        LogLevel.WARNING, envvar="HLC_LOG_LEVEL", case_sensitive=False, help="Log level"
    ),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit JSON log lines"),
):
    """Inspect and exercise hybrid logical clock timestamps."""
    configure_logging(level=log_level.value, json_format=json_logs)


@app.command()
def now():
    """Print a fresh timestamp from the system clock."""
    ts = Clock.create().timestamp
    console.print(describe(ts))


@app.command()
def encode(
    physical: int = typer.Argument(..., help="Wall time in milliseconds"),
    logical: int = typer.Argument(0, help="Logical counter"),
):
    """Pack a physical time and logical counter into one integer."""
    try:
        ts = pack(physical, logical)
    except HLCError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)
    console.print(ts.value)


@app.command()
def decode(value: str = typer.Argument(..., help="Packed timestamp")):
    """Show the physical and logical parts of a packed timestamp."""
    try:
        ts = parse_packed(value)
    except HLCError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)
    console.print(describe(ts))


@app.command(name="compare")
def compare_cmd(
    a: str = typer.Argument(..., help="First packed timestamp"),
    b: str = typer.Argument(..., help="Second packed timestamp"),
):
    """Print <, = or > for two packed timestamps."""
    try:
        ts_a, ts_b = parse_packed(a), parse_packed(b)
    except HLCError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)
    symbol = {-1: "<", 0: "=", 1: ">"}[compare(ts_a, ts_b)]
    console.print(f"{ts_a.format()} {symbol} {ts_b.format()}")


@app.command()
def demo(
    events: int = typer.Option(20, "--events", "-n", help="Number of local events"),
    wall_time: Optional[int] = typer.Option(
        None, "--wall-time", help="Freeze the wall clock at this time (ms)"
    ),
    metrics: bool = typer.Option(False, "--metrics", help="Print clock metrics afterwards"),
):
    """Run local events and merges against a simulated remote node."""
    if wall_time is not None:
        wall_clock = ManualWallClock(wall_time)
    else:
        wall_clock = system_wall_clock

    # Ordering within and across milliseconds
    early = pack(REFERENCE_WALL_TIME_MS, 0)
    middle = pack(REFERENCE_WALL_TIME_MS, 1)
    late = pack(REFERENCE_WALL_TIME_MS + 1, 0)
    ordered = compare(early, middle) < 0 and compare(middle, late) < 0
    console.print(f"Ordering {early.format()} < {middle.format()} < {late.format()}: {ordered}")

    start = wall_clock()
    clock = Clock.create(now=start)

    table = Table(title="Hybrid Logical Clock")
    table.add_column("#", justify="right")
    table.add_column("event")
    table.add_column("physical", justify="right")
    table.add_column("logical", justify="right")
    table.add_row("0", "start", str(clock.physical), str(clock.logical))

    for i in range(1, events + 1):
        clock = clock.advance(wall_clock=wall_clock)
        table.add_row(str(i), "local", str(clock.physical), str(clock.logical))

    remotes = [
        pack(wall_clock() + DEMO_REMOTE_SKEW_MS, 100),
        pack(start, 10000),
    ]
    for offset, remote in enumerate(remotes, start=1):
        try:
            clock = clock.merge(remote, wall_clock=wall_clock)
        except HLCError as e:
            table.add_row("-", "merge failed", str(remote.physical), str(remote.logical))
            logger.warning(f"Demo merge failed: {e}")
            continue
        table.add_row(
            str(events + offset),
            f"merge {remote.format()}",
            str(clock.physical),
            str(clock.logical),
        )

    console.print(table)
    console.print(f"Final: {clock.timestamp.value}")

    if metrics:
        console.print(get_registry().export_prometheus())


if __name__ == "__main__":
    app()
