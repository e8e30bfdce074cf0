# ABOUTME: The `bookbench perf` command for running the random read workload.
# ABOUTME: Connects to the collection and runs the QueryDriver until SIGINT/SIGTERM.

import click
from rich.console import Console
from rich.markup import escape

from bookbench.cli.options import seed_option
from bookbench.core.driver import DriverConfig, QueryDriver
from bookbench.core.queries import QueryBounds
from bookbench.db.connection import (
    DEFAULT_COLLECTION,
    DEFAULT_DB_NAME,
    DEFAULT_URI,
    BackendConfigError,
    BackendConnectionError,
    connect,
    get_collection,
)

console = Console(stderr=True)


@click.command("perf")
@click.argument("uri", default=DEFAULT_URI, required=False)
@click.argument("db_name", default=DEFAULT_DB_NAME, required=False)
@click.argument("coll", default=DEFAULT_COLLECTION, required=False)
@click.option(
    "--page-size", type=click.IntRange(min=1), default=25, show_default=True,
    help="Maximum documents requested per find.",
)
@click.option(
    "--sleep-ms", type=click.IntRange(min=0), default=0, show_default=True,
    help="Pause between iterations.",
)
@click.option(
    "--stats-every", type=click.IntRange(min=1), default=200, show_default=True,
    help="Print a rolling report every N operations.",
)
@click.option(
    "--max-ops", type=click.IntRange(min=1), default=None,
    help="Stop after N operations (default: run until interrupted).",
)
@seed_option
def perf(
    uri: str,
    db_name: str,
    coll: str,
    page_size: int,
    sleep_ms: int,
    stats_every: int,
    max_ops: int | None,
    seed: int | None,
) -> None:
    """Run random read queries against URI DB_NAME.COLL and report latency."""
    config = DriverConfig(
        uri=uri,
        db_name=db_name,
        collection=coll,
        sleep_ms=sleep_ms,
        stats_every=stats_every,
        bounds=QueryBounds(page_size=page_size),
        max_ops=max_ops,
        seed=seed,
    )

    try:
        client = connect(config.uri)
    except (BackendConfigError, BackendConnectionError) as exc:
        console.print(f"[red]{escape(str(exc))}[/red]", highlight=False)
        raise SystemExit(1) from exc

    try:
        driver = QueryDriver(get_collection(client, db_name, coll), config)
        with driver.signal_handlers():
            driver.run()
    except BackendConnectionError as exc:
        console.print(f"[red]Driver stopped:[/red] {escape(str(exc))}", highlight=False)
        raise SystemExit(1) from exc
    finally:
        client.close()
