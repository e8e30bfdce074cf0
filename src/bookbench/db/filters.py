# ABOUTME: Builders for the MongoDB filter, projection, and sort documents the driver issues.
# ABOUTME: Thin helpers so query shapes read as eq/lt/and_ rather than raw operator dicts.

import re
from typing import Any

from pymongo import ASCENDING, DESCENDING

Filter = dict[str, Any]
Sort = list[tuple[str, int]]


def eq(field: str, value: Any) -> Filter:
    return {field: value}


def lt(field: str, value: Any) -> Filter:
    return {field: {"$lt": value}}


def gt(field: str, value: Any) -> Filter:
    return {field: {"$gt": value}}


def gte(field: str, value: Any) -> Filter:
    return {field: {"$gte": value}}


def lte(field: str, value: Any) -> Filter:
    return {field: {"$lte": value}}


def and_(*filters: Filter) -> Filter:
    """Conjunction of filters, expressed with an explicit $and."""
    return {"$and": list(filters)}


def between(field: str, a: Any, b: Any) -> Filter:
    """Inclusive range filter; the bounds may be given in either order."""
    lo, hi = min(a, b), max(a, b)
    return and_(gte(field, lo), lte(field, hi))


def contains(field: str, text: str, *, ignore_case: bool = True) -> Filter:
    """Substring match on a string field via $regex.

    The text is escaped, so it always matches literally.
    """
    clause: dict[str, Any] = {"$regex": re.escape(text)}
    if ignore_case:
        clause["$options"] = "i"
    return {field: clause}


def include(*fields: str) -> dict[str, int]:
    """Projection that returns only the named fields."""
    return {name: 1 for name in fields}


def ascending(field: str) -> Sort:
    return [(field, ASCENDING)]


def descending(field: str) -> Sort:
    return [(field, DESCENDING)]
