# ABOUTME: CLI package for Bookbench, built on Click.
# ABOUTME: Defines the root command group, logging setup, and registers subcommands.

import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from bookbench.cli.commands import load_cmd, perf_cmd

ENVVAR_PREFIX = "BOOKBENCH"


@click.group()
@click.version_option(package_name="bookbench")
@click.option(
    "-v", "--verbose",
    is_flag=True,
    default=False,
    help="Show informational log messages.",
)
def cli(verbose: bool) -> None:
    """Bookbench - bulk ingest and read-load harness for a MongoDB book collection."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


cli.add_command(load_cmd.load)
cli.add_command(perf_cmd.perf)


def main() -> None:
    """Console-script entry point; every option can also come from BOOKBENCH_* env vars."""
    cli(auto_envvar_prefix=ENVVAR_PREFIX)
