# ABOUTME: Unit tests for the synthetic Book field generators.
# ABOUTME: Validates ISBN encoding and wrap-around, value ranges, and title/author shapes.

import random
import re

from bookbench.core.synthetic import (
    FIRST_NAMES,
    LAST_NAMES,
    TITLE_PREFIXES,
    TITLE_SUBJECTS,
    make_book,
    make_isbn,
    new_run_prefix,
    random_author,
    random_price,
    random_title,
    random_year,
)
from bookbench.types import validate_document


class TestMakeIsbn:
    """Tests for run-scoped synthetic ISBNs."""

    def test_encodes_prefix_and_sequence(self) -> None:
        """Prefix 42, sequence 7 is 42 * 10**7 + 7, zero-padded to ten digits."""
        assert make_isbn(42, 7) == "978-0420000007"

    def test_wraps_at_ten_million(self) -> None:
        """Sequence numbers wrap at 10**7 within the same prefix."""
        assert make_isbn(42, 10_000_007) == "978-0420000007"

    def test_zero_prefix_and_sequence(self) -> None:
        """Prefix and sequence zero give an all-zero ISBN body."""
        assert make_isbn(0, 0) == "978-0000000000"

    def test_largest_prefix_fits_ten_digits(self) -> None:
        """The largest prefix and sequence still produce exactly ten digits."""
        assert make_isbn(999_999, 9_999_999) == "978-9999999999"

    def test_distinct_within_a_run(self) -> None:
        """Sequences below 10**7 never collide for a fixed prefix."""
        isbns = {make_isbn(123_456, i) for i in range(0, 10_000_000, 997)}
        assert len(isbns) == len(range(0, 10_000_000, 997))


class TestNewRunPrefix:
    """Tests for drawing the per-run ISBN prefix."""

    def test_prefix_in_range(self) -> None:
        """Fresh run prefixes stay below one million."""
        for _ in range(100):
            assert 0 <= new_run_prefix() < 1_000_000

    def test_seeded_source_is_deterministic(self) -> None:
        """A seeded source gives a repeatable prefix."""
        assert new_run_prefix(random.Random(5)) == new_run_prefix(random.Random(5))


class TestRandomFields:
    """Tests for the per-document random fields."""

    def test_year_range(self) -> None:
        """Years stay within 1990 to 2025."""
        rnd = random.Random(1)
        years = {random_year(rnd) for _ in range(5000)}
        assert min(years) == 1990
        assert max(years) == 2025

    def test_price_range_and_cents(self) -> None:
        """Prices lie in [19.99, 99.99] with at most two fractional digits."""
        rnd = random.Random(2)
        for _ in range(5000):
            price = random_price(rnd)
            assert 19.99 <= price <= 99.99
            assert round(price, 2) == price

    def test_price_rounds_to_nearest_cent(self) -> None:
        """Raw prices round to the nearest cent, up or down."""

        class FixedRandom:
            def __init__(self, value: float) -> None:
                self._value = value

            def random(self) -> float:
                return self._value

        assert random_price(FixedRandom(0.00007)) == 20.0  # 19.9956
        assert random_price(FixedRandom(0.00005)) == 19.99  # 19.994

    def test_title_shapes(self) -> None:
        """Titles are "<prefix> <subject>" with an optional edition suffix."""
        pattern = re.compile(
            r"^(?P<prefix>.+?) (?P<subject>" + "|".join(map(re.escape, TITLE_SUBJECTS))
            + r")( - [1-5]th Edition)?$"
        )
        rnd = random.Random(3)
        seen_plain = seen_edition = False
        for _ in range(500):
            title = random_title(rnd)
            match = pattern.match(title)
            assert match is not None, title
            assert match.group("prefix") in TITLE_PREFIXES
            if title.endswith("Edition"):
                seen_edition = True
            else:
                seen_plain = True
        assert seen_plain and seen_edition

    def test_author_shapes(self) -> None:
        """Authors are one or two comma-joined "First Last" pairs."""
        rnd = random.Random(4)
        two_authors = 0
        for _ in range(2000):
            author = random_author(rnd)
            pairs = author.split(", ")
            assert len(pairs) in (1, 2)
            for pair in pairs:
                first, last = pair.split(" ")
                assert first in FIRST_NAMES
                assert last in LAST_NAMES
            two_authors += len(pairs) == 2
        # roughly 30% co-authored
        assert 450 < two_authors < 750


class TestMakeBook:
    """Tests for assembling a whole Book."""

    def test_book_document_conforms(self) -> None:
        """Generated books pass the schema check."""
        rnd = random.Random(6)
        for i in range(200):
            doc = make_book(rnd, 77, i).to_document()
            doc["_id"] = i
            assert validate_document(doc) == []

    def test_isbn_uses_sequence(self) -> None:
        """ISBN reflects the run prefix and sequence."""
        book = make_book(random.Random(7), 42, 7)
        assert book.isbn == "978-0420000007"
