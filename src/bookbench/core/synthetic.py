# ABOUTME: Synthetic field generators for loader-produced Book documents.
# ABOUTME: Pure functions over an injected random source; no I/O.

import math
import random

from bookbench.types import Book

TITLE_PREFIXES = (
    "The Art of", "Introduction to", "Mastering", "Learning", "Advanced",
    "Complete Guide to", "Practical", "Professional", "Essential", "Modern",
)

TITLE_SUBJECTS = (
    "Programming", "Data Science", "Machine Learning", "Web Development",
    "Cloud Computing", "Algorithms", "Databases", "Software Engineering",
    "Artificial Intelligence", "Cybersecurity", "DevOps", "Mobile Development",
)

FIRST_NAMES = (
    "John", "Jane", "Michael", "Sarah", "David", "Emily", "Robert", "Lisa",
    "James", "Mary", "William", "Jennifer", "Richard", "Patricia", "Thomas",
)

LAST_NAMES = (
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller",
    "Davis", "Rodriguez", "Martinez", "Wilson", "Anderson", "Taylor", "Moore",
)

ISBN_SEQUENCE_SPACE = 10_000_000
RUN_PREFIX_SPACE = 1_000_000


def random_title(rnd: random.Random) -> str:
    """Return "<prefix> <subject>", or the same with an edition suffix half the time."""
    prefix = rnd.choice(TITLE_PREFIXES)
    subject = rnd.choice(TITLE_SUBJECTS)
    edition = rnd.randint(1, 5)

    if rnd.random() < 0.5:
        return f"{prefix} {subject}"
    return f"{prefix} {subject} - {edition}th Edition"


def random_author(rnd: random.Random) -> str:
    """Return one "First Last" author, or two comma-joined 30% of the time."""
    author = f"{rnd.choice(FIRST_NAMES)} {rnd.choice(LAST_NAMES)}"
    if rnd.randrange(10) < 3:
        author += f", {rnd.choice(FIRST_NAMES)} {rnd.choice(LAST_NAMES)}"
    return author


def random_year(rnd: random.Random) -> int:
    return 1990 + rnd.randint(0, 35)


def random_price(rnd: random.Random) -> float:
    """Return a price in [19.99, 99.99] rounded half-up to cents."""
    raw = 19.99 + rnd.random() * 80.0
    return math.floor(raw * 100 + 0.5) / 100


def make_isbn(run_prefix: int, sequence: int) -> str:
    """Build the synthetic ISBN for document `sequence` of a run.

    The sequence wraps at 10**7, so ISBNs are only unique for runs of up to
    ten million documents.
    """
    value = run_prefix * ISBN_SEQUENCE_SPACE + sequence % ISBN_SEQUENCE_SPACE
    return f"978-{value:010d}"


def new_run_prefix(rnd: random.Random | None = None) -> int:
    """Draw a run prefix in [0, 10**6), from fresh OS entropy by default."""
    source = rnd if rnd is not None else random.SystemRandom()
    return source.randrange(RUN_PREFIX_SPACE)


def make_book(rnd: random.Random, run_prefix: int, sequence: int) -> Book:
    return Book(
        title=random_title(rnd),
        author=random_author(rnd),
        isbn=make_isbn(run_prefix, sequence),
        published_year=random_year(rnd),
        price=random_price(rnd),
    )
