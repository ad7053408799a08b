"""CLI interface for clinrec.

Usage:
    clinrec health
    clinrec watch --duration 60
    clinrec records --search smith --status Active
    clinrec departments
    clinrec stats
"""

import sys
import threading
import time
from typing import Callable, Optional, TextIO

import typer

from clinrec import __version__
from clinrec.core.constants import API_BASE_URL, DEFAULT_PAGE_SIZE, HEALTH_TIMEOUT, VALID_DEPARTMENTS
from clinrec.core.exceptions import ApiError
from clinrec.core.logger import setup_logging
from clinrec.core.types import RecordQuery, SortOrder
from clinrec.services.monitoring import AvailabilityMonitor, HealthProbe, ServerState
from clinrec.services.records_client import RecordsClient
from clinrec.ui.formatting import format_date
from clinrec.ui.status_banner import banner_for, indicator_label, wake_hint

app = typer.Typer(
    name="clinrec",
    help="Clinical records client - backend health and record queries",
    add_completion=False,
)

STATE_ICONS = {
    ServerState.ONLINE: "✅",
    ServerState.WAKING: "⏳",
    ServerState.RESTARTING: "🔄",
    ServerState.OFFLINE: "❌",
}

WATCH_RETRY_HINT = "press Enter to retry now"
WATCH_AUTO_RETRY_HINT = "the next automatic check runs shortly"

BaseUrlOption = typer.Option(API_BASE_URL, "--base-url", "-u", help="API root URL")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Show debug logs")


def _init_logging(verbose: bool):
    setup_logging(level="DEBUG" if verbose else "INFO")


def _build_probe(base_url: str, timeout: float) -> HealthProbe:
    return HealthProbe(base_url=base_url, timeout=timeout)


def _build_client(base_url: str) -> RecordsClient:
    return RecordsClient(base_url=base_url)


def _echo_state(state: ServerState, retry_hint: str = "Run 'clinrec health' to retry"):
    typer.echo(f"{STATE_ICONS[state]} {indicator_label(state)} ({state})")
    banner = banner_for(state)
    if banner:
        typer.echo(f"   {banner.heading}: {banner.message}")
        if banner.offers_retry:
            typer.echo(f"   💡 {banner.retry_label}: {retry_hint}")


class _WatchReporter:
    """Prints every published state, plus the slow-wake hint once per waking spell."""

    def __init__(self, retry_hint: str, clock: Callable[[], float] = time.monotonic):
        self._retry_hint = retry_hint
        self._clock = clock
        self._waking_since: Optional[float] = None
        self._hinted = False

    def __call__(self, state: ServerState):
        now = self._clock()
        if state is not ServerState.WAKING:
            self._waking_since = None
        elif self._waking_since is None:
            self._waking_since = now
            self._hinted = False

        _echo_state(state, retry_hint=self._retry_hint)

        if self._waking_since is not None and not self._hinted:
            hint = wake_hint(state, now - self._waking_since)
            if hint:
                typer.echo(f"   ⏱️  {hint}")
                self._hinted = True


def _retry_on_enter(monitor: AvailabilityMonitor, stream: TextIO):
    """Refresh the monitor for each line typed while the backend is offline."""
    for _ in stream:
        if not monitor.is_running():
            break
        if monitor.state is ServerState.OFFLINE:
            typer.echo("🔄 Retrying connection...")
            monitor.refresh()


@app.command()
def version():
    """Show version information."""
    typer.echo(f"clinrec v{__version__}")


@app.command()
def health(
    base_url: str = BaseUrlOption,
    timeout: float = typer.Option(HEALTH_TIMEOUT, "--timeout", "-t", help="Seconds to wait for a response"),
    verbose: bool = VerboseOption,
):
    """Probe the backend once. Exits 0 only when it is online."""
    _init_logging(verbose)
    probe = _build_probe(base_url, timeout)
    try:
        result = probe.check()
    finally:
        probe.close()

    _echo_state(result.state)
    if result.status_code is not None:
        typer.echo(f"   HTTP {result.status_code} in {result.elapsed:.2f}s")
    if result.state is not ServerState.ONLINE:
        raise typer.Exit(1)


@app.command()
def watch(
    base_url: str = BaseUrlOption,
    timeout: float = typer.Option(HEALTH_TIMEOUT, "--timeout", "-t", help="Seconds to wait for each probe"),
    duration: Optional[float] = typer.Option(None, "--duration", "-d", help="Stop after this many seconds"),
    verbose: bool = VerboseOption,
):
    """Poll the backend with adaptive cadence and print every state."""
    _init_logging(verbose)
    probe = _build_probe(base_url, timeout)
    monitor = AvailabilityMonitor(probe)
    interactive = sys.stdin is not None and sys.stdin.isatty()
    monitor.subscribe(_WatchReporter(WATCH_RETRY_HINT if interactive else WATCH_AUTO_RETRY_HINT))
    done = threading.Event()

    typer.echo(f"👀 Watching {probe.url} (Ctrl+C to stop)")
    monitor.start()
    if interactive:
        threading.Thread(
            target=_retry_on_enter, args=(monitor, sys.stdin), name="RetryInput", daemon=True
        ).start()
    try:
        done.wait(duration)
    except KeyboardInterrupt:
        typer.echo("\n🛑 Stopping...")
    finally:
        monitor.stop()
        probe.close()


@app.command()
def records(
    search: str = typer.Option("", "--search", "-s", help="Free-text search"),
    status: str = typer.Option("All", "--status", help="Active, Discharged, Pending, Cancelled or All"),
    department: str = typer.Option("All", "--department", help=f"One of {', '.join(VALID_DEPARTMENTS)} or All"),
    page: int = typer.Option(1, "--page", "-p", min=1),
    limit: int = typer.Option(DEFAULT_PAGE_SIZE, "--limit", "-l", min=1),
    sort_by: str = typer.Option("id", "--sort-by"),
    order: SortOrder = typer.Option(SortOrder.DESC, "--order"),
    base_url: str = BaseUrlOption,
    verbose: bool = VerboseOption,
):
    """List clinical records."""
    _init_logging(verbose)
    client = _build_client(base_url)
    query = RecordQuery(
        search=search,
        status=status,
        department=department,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=order,
    )
    try:
        result = client.fetch_records(query)
    except ApiError as e:
        typer.echo(f"❌ Error: {e}", err=True)
        raise typer.Exit(1)
    finally:
        client.close()

    if not result.data:
        typer.echo("ℹ️  No records found")
        return

    pagination = result.pagination
    typer.echo(f"📋 Records (page {pagination.page}/{pagination.total_pages}, {pagination.total} total):\n")
    for record in result.data:
        typer.echo(f"  {record.patient_id}  {record.patient_name}  [{record.status}]")
        typer.echo(f"     {record.department}: {record.diagnosis}")
        typer.echo(
            f"     Admitted {format_date(record.admission_date)}, "
            f"discharged {format_date(record.discharge_date)}"
        )
    if pagination.has_next:
        typer.echo(f"\n💡 Next page: --page {pagination.page + 1}")


@app.command()
def departments(base_url: str = BaseUrlOption, verbose: bool = VerboseOption):
    """List departments known to the backend."""
    _init_logging(verbose)
    client = _build_client(base_url)
    try:
        names = client.fetch_departments()
    except ApiError as e:
        typer.echo(f"❌ Error: {e}", err=True)
        raise typer.Exit(1)
    finally:
        client.close()

    for name in names:
        typer.echo(f"  • {name}")


@app.command()
def statuses(base_url: str = BaseUrlOption, verbose: bool = VerboseOption):
    """List record statuses known to the backend."""
    _init_logging(verbose)
    client = _build_client(base_url)
    try:
        names = client.fetch_statuses()
    except ApiError as e:
        typer.echo(f"❌ Error: {e}", err=True)
        raise typer.Exit(1)
    finally:
        client.close()

    for name in names:
        typer.echo(f"  • {name}")


@app.command()
def stats(base_url: str = BaseUrlOption, verbose: bool = VerboseOption):
    """Show aggregate record counts."""
    _init_logging(verbose)
    client = _build_client(base_url)
    try:
        summary = client.fetch_stats()
    except ApiError as e:
        typer.echo(f"❌ Error: {e}", err=True)
        raise typer.Exit(1)
    finally:
        client.close()

    typer.echo(f"📊 Total records: {summary.total}")
    if summary.by_status:
        typer.echo("\n   By status:")
        for name, count in summary.by_status.items():
            typer.echo(f"     {name}: {count}")
    if summary.by_department:
        typer.echo("\n   By department:")
        for name, count in summary.by_department.items():
            typer.echo(f"     {name}: {count} ({summary.department_share(name):.0%})")


def main():
    app()


if __name__ == "__main__":
    main()
