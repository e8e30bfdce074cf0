# ABOUTME: The seven read shapes the query driver draws from, and how to execute them.
# ABOUTME: Shapes are planned as plain query records so they can be inspected before running.

import random
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from bson import json_util
from pymongo.collection import Collection

from bookbench.db import filters
from bookbench.db.filters import Filter, Sort

TITLE_KEYS = (
    "program", "data", "machine", "web", "cloud", "algo",
    "database", "software", "intelligence", "security", "devops", "mobile",
)

SHAPE_COUNT = 7

YEAR = "publishedYear"


@dataclass(frozen=True)
class QueryBounds:
    """Ranges the driver draws random query parameters from."""

    page_size: int = 25
    min_year: int = 1990
    max_year: int = 2026
    min_price: float = 10.0
    max_price: float = 100.0
    title_keys: tuple[str, ...] = TITLE_KEYS


@dataclass(frozen=True)
class FindQuery:
    """A find that materializes at most its first document."""

    filter: Filter
    projection: dict[str, int]
    limit: int
    sort: Sort | None = None


@dataclass(frozen=True)
class CountQuery:
    """A count_documents call whose result is discarded."""

    filter: Filter


Query = FindQuery | CountQuery


def year_equals(year: int, page_size: int) -> FindQuery:
    return FindQuery(
        filter=filters.eq(YEAR, year),
        projection=filters.include("_id", "title", YEAR, "price"),
        limit=page_size,
    )


def year_before(year: int, page_size: int) -> FindQuery:
    return FindQuery(
        filter=filters.lt(YEAR, year),
        projection=filters.include("_id", "title", YEAR),
        limit=page_size,
        sort=filters.descending(YEAR),
    )


def year_after(year: int, page_size: int) -> FindQuery:
    return FindQuery(
        filter=filters.gt(YEAR, year),
        projection=filters.include("_id", "title", YEAR),
        limit=page_size,
        sort=filters.ascending(YEAR),
    )


def year_between(a: int, b: int, page_size: int) -> FindQuery:
    return FindQuery(
        filter=filters.between(YEAR, a, b),
        projection=filters.include("_id", "title", YEAR),
        limit=page_size,
    )


def title_contains(key: str, page_size: int) -> FindQuery:
    return FindQuery(
        filter=filters.contains("title", key, ignore_case=True),
        projection=filters.include("_id", "title"),
        limit=page_size,
    )


def price_between(a: float, b: float, page_size: int) -> FindQuery:
    return FindQuery(
        filter=filters.between("price", a, b),
        projection=filters.include("_id", "title", "price"),
        limit=page_size,
    )


def count_year(year: int) -> CountQuery:
    return CountQuery(filter=filters.eq(YEAR, year))


def count_price_between(a: float, b: float) -> CountQuery:
    return CountQuery(filter=filters.between("price", a, b))


def random_year(rnd: random.Random, bounds: QueryBounds) -> int:
    return rnd.randint(bounds.min_year, bounds.max_year)


def random_price(rnd: random.Random, bounds: QueryBounds) -> float:
    return bounds.min_price + rnd.random() * (bounds.max_price - bounds.min_price)


def plan_query(shape: int, rnd: random.Random, bounds: QueryBounds) -> Query:
    """Build query `shape` (0-6) with parameters drawn from `rnd`.

    Raises:
        ValueError: If shape is outside 0-6.
    """
    page = bounds.page_size
    if shape == 0:
        return year_equals(random_year(rnd, bounds), page)
    if shape == 1:
        return year_before(random_year(rnd, bounds), page)
    if shape == 2:
        return year_after(random_year(rnd, bounds), page)
    if shape == 3:
        return year_between(random_year(rnd, bounds), random_year(rnd, bounds), page)
    if shape == 4:
        return title_contains(rnd.choice(bounds.title_keys), page)
    if shape == 5:
        return price_between(random_price(rnd, bounds), random_price(rnd, bounds), page)
    if shape == 6:
        if rnd.random() < 0.5:
            return count_year(random_year(rnd, bounds))
        return count_price_between(random_price(rnd, bounds), random_price(rnd, bounds))
    raise ValueError(f"Unknown query shape {shape}; expected 0-{SHAPE_COUNT - 1}")


def execute(
    collection: Collection,
    query: Query,
    emit: Callable[[str], None],
) -> dict[str, Any] | int | None:
    """Run a planned query against the collection.

    Finds print their first document (if any) as one JSON line and return
    it. Counts return the count, which the driver ignores.
    """
    if isinstance(query, CountQuery):
        return collection.count_documents(query.filter)

    cursor = collection.find(query.filter, query.projection)
    if query.sort:
        cursor = cursor.sort(query.sort)
    cursor = cursor.limit(query.limit)
    try:
        first = next(cursor, None)
    finally:
        cursor.close()

    if first is not None:
        emit(json_util.dumps(first))
    return first
