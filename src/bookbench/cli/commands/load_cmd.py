# ABOUTME: The `bookbench load` command for bulk-loading synthetic books.
# ABOUTME: Builds a LoaderConfig from options, connects, and runs the BulkLoader.

import click
from rich.console import Console
from rich.markup import escape

from bookbench.cli.options import collection_option, db_option, seed_option, uri_option
from bookbench.core.loader import (
    BulkLoader,
    LoaderConfig,
    LoaderConfigError,
    PartitionError,
    WriteAck,
)
from bookbench.db.connection import (
    BackendConfigError,
    BackendConnectionError,
    connect,
    get_collection,
)

console = Console()
err_console = Console(stderr=True)


def _print_line(line: str) -> None:
    console.print(escape(line), highlight=False, soft_wrap=True)


def _build_config(
    parallel: bool,
    total: int | None,
    batch_size: int | None,
    threads: int | None,
    ack: bool | None,
    exact_count: bool,
    verify: bool,
    seed: int | None,
) -> LoaderConfig:
    """Start from the serial or parallel preset and apply explicit overrides."""
    overrides: dict[str, object] = {
        "exact_count": exact_count,
        "verify_count": verify,
        "seed": seed,
    }
    if total is not None:
        overrides["total_books"] = total
    if batch_size is not None:
        overrides["batch_size"] = batch_size
    if threads is not None:
        overrides["num_threads"] = threads
    if ack is not None:
        overrides["write_ack"] = WriteAck.ACKNOWLEDGED if ack else WriteAck.UNACKNOWLEDGED

    if parallel:
        return LoaderConfig.parallel(**overrides)
    return LoaderConfig(**overrides)  # type: ignore[arg-type]


@click.command("load")
@uri_option
@db_option
@collection_option
@click.option(
    "--parallel",
    is_flag=True,
    default=False,
    help="Use the parallel preset (8 threads, 50k batches, unacknowledged writes).",
)
@click.option("--total", type=click.IntRange(min=0), default=None, help="Books to insert.")
@click.option(
    "--batch-size", type=click.IntRange(min=1), default=None, help="Documents per insert_many.",
)
@click.option("--threads", type=click.IntRange(min=1), default=None, help="Writer threads.")
@click.option(
    "--ack/--no-ack",
    default=None,
    help="Wait for write acknowledgement (default: on, off with --parallel).",
)
@click.option(
    "--exact-count",
    is_flag=True,
    default=False,
    help="Use an exact count for the already-loaded check.",
)
@click.option(
    "--verify/--no-verify",
    default=True,
    help="Count the collection after loading and compare.",
)
@seed_option
def load(
    uri: str,
    db_name: str,
    collection_name: str,
    parallel: bool,
    total: int | None,
    batch_size: int | None,
    threads: int | None,
    ack: bool | None,
    exact_count: bool,
    verify: bool,
    seed: int | None,
) -> None:
    """Fill an empty books collection with synthetic documents."""
    config = _build_config(
        parallel, total, batch_size, threads, ack, exact_count, verify, seed,
    )

    try:
        client = connect(uri)
    except (BackendConfigError, BackendConnectionError) as exc:
        err_console.print(f"[red]{escape(str(exc))}[/red]", highlight=False)
        raise SystemExit(1) from exc

    try:
        collection = get_collection(client, db_name, collection_name)
        loader = BulkLoader(collection, config, emit=_print_line)
        result = loader.run()
    except (LoaderConfigError, PartitionError, BackendConnectionError) as exc:
        err_console.print(f"[red]Load aborted:[/red] {escape(str(exc))}", highlight=False)
        raise SystemExit(1) from exc
    finally:
        client.close()

    if result.skipped:
        return

    if result.count_mismatch:
        err_console.print(
            f"[red]Count mismatch:[/red] collection holds {result.final_count}, "
            f"expected {result.inserted}",
            highlight=False,
        )
        raise SystemExit(1)
