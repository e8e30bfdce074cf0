# ABOUTME: Integration tests for query shapes and the driver loop on real documents.
# ABOUTME: Runs against mongomock collections populated by the loader or fixtures.

import json
import os
import random
import signal
from typing import Any

from pymongo.collection import Collection

from bookbench.core.driver import DriverConfig, DriverState, QueryDriver
from bookbench.core.queries import QueryBounds, execute, plan_query, title_contains, year_between


class SignalAfter:
    """Collection proxy that sends SIGTERM to this process on the Nth query."""

    def __init__(self, inner: Collection, queries: int) -> None:
        self._inner = inner
        self._limit = queries
        self.calls = 0

    def _tick(self) -> None:
        self.calls += 1
        if self.calls == self._limit:
            os.kill(os.getpid(), signal.SIGTERM)

    def find(self, *args: Any, **kwargs: Any) -> Any:
        self._tick()
        return self._inner.find(*args, **kwargs)

    def count_documents(self, *args: Any, **kwargs: Any) -> int:
        self._tick()
        return self._inner.count_documents(*args, **kwargs)


class TestYearRangeShape:
    """Shape 3 against loaded data."""

    def test_range_built_low_to_high(self, loaded_books: Collection) -> None:
        """Range bounds are ordered low to high."""
        query = year_between(2000, 1995, 25)
        assert query.filter == {
            "$and": [
                {"publishedYear": {"$gte": 1995}},
                {"publishedYear": {"$lte": 2000}},
            ]
        }

        docs = list(loaded_books.find(query.filter, query.projection).limit(query.limit))
        assert 0 < len(docs) <= 25
        for doc in docs:
            assert 1995 <= doc["publishedYear"] <= 2000
            assert set(doc) == {"_id", "title", "publishedYear"}

    def test_execute_prints_one_matching_document(self, loaded_books: Collection) -> None:
        """Executing a find prints one matching document."""
        lines: list[str] = []
        first = execute(loaded_books, year_between(2000, 1995, 25), lines.append)
        assert len(lines) == 1
        assert 1995 <= json.loads(lines[0])["publishedYear"] <= 2000
        assert 1995 <= first["publishedYear"] <= 2000


class TestTitleShape:
    """Shape 4 against a fixed set of titles."""

    def test_cloud_matches_two_titles_case_insensitively(self, title_books: Collection) -> None:
        """The cloud probe matches two titles regardless of case."""
        query = title_contains("cloud", 25)

        titles = sorted(doc["title"] for doc in title_books.find(query.filter, query.projection))
        assert titles == ["Cloud Basics", "Intro to Cloud Computing"]

    def test_only_first_match_printed(self, title_books: Collection) -> None:
        """Only the first match is printed."""
        lines: list[str] = []
        execute(title_books, title_contains("cloud", 25), lines.append)

        assert len(lines) == 1
        printed = json.loads(lines[0])
        assert printed["title"] in {"Cloud Basics", "Intro to Cloud Computing"}
        assert set(printed) == {"_id", "title"}

    def test_no_match_prints_nothing(self, title_books: Collection) -> None:
        """A probe with no match prints nothing."""
        lines: list[str] = []
        execute(title_books, title_contains("devops", 25), lines.append)
        assert lines == []


class TestAllShapesRun:
    """Every planned shape executes against loaded data."""

    def test_each_shape_executes(self, loaded_books: Collection) -> None:
        """Every shape runs against a loaded collection."""
        rnd = random.Random(99)
        for shape in range(7):
            execute(loaded_books, plan_query(shape, rnd, QueryBounds()), lambda line: None)

    def test_sorted_shapes_return_extreme_years(self, loaded_books: Collection) -> None:
        """Sorted shapes return the nearest year first."""
        bounds = QueryBounds()
        lt = plan_query(1, random.Random(1), bounds)
        first = execute(loaded_books, lt, lambda line: None)
        bound = lt.filter["publishedYear"]["$lt"]
        if first is not None:
            below = loaded_books.find({"publishedYear": {"$lt": bound}})
            expected = max(d["publishedYear"] for d in below)
            assert first["publishedYear"] == expected


class TestDriverRun:
    """The driver loop end to end."""

    def test_signal_after_200_ops(self, loaded_books: Collection) -> None:
        """200 iterations, then SIGTERM: one final report and four rolling reports."""
        lines: list[str] = []
        driver = QueryDriver(
            SignalAfter(loaded_books, 200),
            DriverConfig(stats_every=50),
            emit=lines.append,
            rnd=random.Random(2024),
        )

        with driver.signal_handlers():
            stats = driver.run()

        assert stats.ops == 200
        assert stats.errors == 0
        assert driver.state is DriverState.STOPPED
        rolling = [line for line in lines if line.startswith("[perf] ops=")]
        finals = [line for line in lines if line.startswith("[perf] fim.")]
        assert len(rolling) == 4
        assert finals == [f"[perf] fim. ops=200 | avg={stats.average_ms:.2f} ms"]
