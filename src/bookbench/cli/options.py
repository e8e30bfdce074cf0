# ABOUTME: Shared Click options for Bookbench CLI commands.
# ABOUTME: Provides reusable decorators for the backend URI, database, and collection.

import click

from bookbench.db.connection import DEFAULT_COLLECTION, DEFAULT_DB_NAME, DEFAULT_URI

uri_option = click.option(
    "--uri",
    default=DEFAULT_URI,
    show_default=True,
    help="MongoDB connection string.",
)

db_option = click.option(
    "--db",
    "db_name",
    default=DEFAULT_DB_NAME,
    show_default=True,
    help="Database holding the books collection.",
)

collection_option = click.option(
    "--collection",
    "collection_name",
    default=DEFAULT_COLLECTION,
    show_default=True,
    help="Target collection name.",
)

seed_option = click.option(
    "--seed",
    type=int,
    default=None,
    help="Seed the random source (default: fresh entropy each run).",
)
