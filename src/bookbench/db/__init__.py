# ABOUTME: Public API for the Bookbench storage layer.
# ABOUTME: Exports connection management and the query filter builders.

from bookbench.db.connection import (
    DEFAULT_COLLECTION,
    DEFAULT_DB_NAME,
    DEFAULT_URI,
    BackendConfigError,
    BackendConnectionError,
    connect,
    get_collection,
)

__all__ = [
    "DEFAULT_COLLECTION",
    "DEFAULT_DB_NAME",
    "DEFAULT_URI",
    "BackendConfigError",
    "BackendConnectionError",
    "connect",
    "get_collection",
]
