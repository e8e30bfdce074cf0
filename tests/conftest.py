# ABOUTME: Shared pytest fixtures for Bookbench tests.
# ABOUTME: Provides in-memory mongomock collections, empty, preloaded, and title fixtures.

import mongomock
import pytest
from pymongo.collection import Collection

from bookbench.core.loader import BulkLoader, LoaderConfig, WriteAck


@pytest.fixture
def mongo_client() -> mongomock.MongoClient:
    """An isolated in-memory MongoDB client."""
    client = mongomock.MongoClient()
    yield client
    client.close()


@pytest.fixture
def books(mongo_client: mongomock.MongoClient) -> Collection:
    """The empty bookstore.books collection."""
    return mongo_client["bookstore"]["books"]


@pytest.fixture
def loaded_books(books: Collection) -> Collection:
    """bookstore.books after a small serial, acknowledged load of 1000 books."""
    config = LoaderConfig(
        total_books=1000,
        batch_size=100,
        num_threads=1,
        write_ack=WriteAck.ACKNOWLEDGED,
    )
    BulkLoader(books, config, emit=lambda line: None).run()
    return books


@pytest.fixture
def title_books(books: Collection) -> Collection:
    """Three books whose titles exercise case-insensitive substring search."""
    books.insert_many([
        {"title": "Cloud Basics", "author": "Jane Smith", "isbn": "978-0000000001",
         "publishedYear": 2001, "price": 20.0},
        {"title": "Intro to Cloud Computing", "author": "John Brown", "isbn": "978-0000000002",
         "publishedYear": 2010, "price": 35.5},
        {"title": "The Art of Data", "author": "Mary Davis", "isbn": "978-0000000003",
         "publishedYear": 2020, "price": 49.99},
    ])
    return books
