# ABOUTME: MongoDB connection management for the Bookbench loader and query driver.
# ABOUTME: Opens a client, verifies the server is reachable, and classifies fatal errors.

from pymongo import MongoClient
from pymongo.collection import Collection
from pymongo.errors import (
    ConfigurationError,
    ConnectionFailure,
    InvalidURI,
    OperationFailure,
    PyMongoError,
)

DEFAULT_URI = "mongodb://localhost:28000"
DEFAULT_DB_NAME = "bookstore"
DEFAULT_COLLECTION = "books"

_AUTH_ERROR_CODES = {13, 18}


class BackendConfigError(Exception):
    """Raised when the backend endpoint is missing or cannot be parsed."""


class BackendConnectionError(Exception):
    """Raised when the backend is unreachable or rejects our credentials."""


def is_fatal(exc: BaseException) -> bool:
    """Whether a backend error means the connection itself is unusable.

    Connection loss, server selection timeouts, client misconfiguration and
    authentication failures are fatal. Everything else (write errors,
    individual query failures) is scoped to a single operation.
    """
    if isinstance(exc, (ConnectionFailure, ConfigurationError)):
        return True
    return isinstance(exc, OperationFailure) and exc.code in _AUTH_ERROR_CODES


def connect(uri: str, *, timeout_ms: int = 5000) -> MongoClient:
    """Create a MongoClient and verify the server answers a ping.

    Args:
        uri: A mongodb:// or mongodb+srv:// connection string.
        timeout_ms: Server selection timeout for the initial ping.

    Returns:
        A connected MongoClient. The caller owns it and must close it.

    Raises:
        BackendConfigError: If the URI is empty or invalid.
        BackendConnectionError: If the server cannot be reached or auth fails.
    """
    if not uri:
        raise BackendConfigError("No backend URI given")

    try:
        client: MongoClient = MongoClient(uri, serverSelectionTimeoutMS=timeout_ms)
    except (InvalidURI, ConfigurationError, ValueError) as exc:
        raise BackendConfigError(f"Invalid backend URI {uri!r}: {exc}") from exc

    try:
        client.admin.command("ping")
    except PyMongoError as exc:
        client.close()
        raise BackendConnectionError(f"Cannot reach backend at {uri}: {exc}") from exc

    return client


def get_collection(client: MongoClient, db_name: str, collection_name: str) -> Collection:
    """Return the target collection handle; safe to share across threads."""
    return client[db_name][collection_name]
