"""Unit tests for app.services.book_search: matching, id ordering, pagination and clamping."""

import unittest
from datetime import date

from app.core.errors import ValidationError
from app.repositories.books import BookRepository
from app.schemas.books import BookPayload, BookRecord
from app.services.book_search import SearchPage, matches, search


class InMemoryBookRepository(BookRepository):
    """List-backed repository; returns records in insertion order, not id order."""

    def __init__(self, records: list[BookRecord] | None = None) -> None:
        self.records = list(records or [])
        self.find_all_calls = 0

    def find_by_id(self, book_id: int) -> BookRecord | None:
        return next((r for r in self.records if r.id == book_id), None)

    def find_all(self) -> list[BookRecord]:
        self.find_all_calls += 1
        return list(self.records)

    def insert(self, data: BookPayload) -> BookRecord:
        record = BookRecord(id=max((r.id for r in self.records), default=0) + 1, **data.model_dump())
        self.records.append(record)
        return record

    def update(self, book_id: int, data: BookPayload) -> BookRecord | None:
        raise NotImplementedError

    def delete(self, book_id: int) -> bool:
        raise NotImplementedError


def _book(id: int, title: str = "Untitled", author: str = "Anon", isbn: str = "0000000000000") -> BookRecord:
    return BookRecord(id=id, title=title, author=author, isbn=isbn, published_date=date(2000, 1, 1))


class TestMatches(unittest.TestCase):
    def setUp(self) -> None:
        self.dune = _book(1, title="Dune", author="Frank Herbert", isbn="9780441013593")

    def test_empty_query_matches_everything(self) -> None:
        self.assertTrue(matches(self.dune, ""))
        self.assertTrue(matches(self.dune, "   "))

    def test_case_insensitive_partial_title_and_author(self) -> None:
        for query in ("dune", "DUNE", "un", "herb", "FRANK H"):
            with self.subTest(query=query):
                self.assertTrue(matches(self.dune, query))

    def test_isbn_substring_ignores_separators(self) -> None:
        for query in ("0441", "978-0441", "978 0441 0135"):
            with self.subTest(query=query):
                self.assertTrue(matches(self.dune, query))

    def test_surrounding_whitespace_is_part_of_the_query(self) -> None:
        self.assertFalse(matches(self.dune, "Dune "))
        self.assertFalse(matches(self.dune, " dune"))
        self.assertTrue(matches(self.dune, "Frank "))

    def test_no_match(self) -> None:
        for query in ("zzz", "-", "Dune Messiah"):
            with self.subTest(query=query):
                self.assertFalse(matches(self.dune, query))


class TestSearch(unittest.TestCase):
    def setUp(self) -> None:
        # Deliberately out of id order.
        self.repo = InMemoryBookRepository(
            [
                _book(5, title="Children of Dune", author="Frank Herbert"),
                _book(2, title="Dune", author="Frank Herbert", isbn="0000000000001"),
                _book(9, title="Neuromancer", author="William Gibson"),
                _book(1, title="Foundation", author="Isaac Asimov"),
                _book(7, title="Dune Messiah", author="Frank Herbert"),
            ]
        )

    def test_empty_query_returns_all_by_id(self) -> None:
        result = search(self.repo, "", page=1, page_size=10)
        self.assertEqual([r.id for r in result.records], [1, 2, 5, 7, 9])
        self.assertEqual(result.total_count, 5)

    def test_query_filters_and_orders(self) -> None:
        result = search(self.repo, "dune", page=1, page_size=10)
        self.assertEqual([r.id for r in result.records], [2, 5, 7])
        self.assertEqual(result.total_count, 3)

    def test_no_matches(self) -> None:
        result = search(self.repo, "zzz")
        self.assertEqual(result.records, [])
        self.assertEqual(result.total_count, 0)

    def test_pages_are_disjoint_and_cover_everything(self) -> None:
        seen: list[int] = []
        for page in (1, 2, 3):
            result = search(self.repo, "", page=page, page_size=2)
            self.assertEqual(result.total_count, 5)
            seen.extend(r.id for r in result.records)
        self.assertEqual(seen, [1, 2, 5, 7, 9])

    def test_page_past_the_end_is_empty_with_total(self) -> None:
        result = search(self.repo, "herbert", page=4, page_size=2)
        self.assertEqual(result.records, [])
        self.assertEqual(result.total_count, 3)
        self.assertEqual(result.page, 4)

    def test_page_size_is_clamped(self) -> None:
        result = search(self.repo, "", page=1, page_size=1000, max_page_size=3)
        self.assertEqual(result.page_size, 3)
        self.assertEqual(len(result.records), 3)
        self.assertEqual(result.total_pages, 2)

    def test_invalid_page_arguments(self) -> None:
        for page, size in ((0, 10), (-1, 10), (1, 0), (1, -5)):
            with self.subTest(page=page, size=size):
                with self.assertRaises(ValidationError):
                    search(self.repo, "", page=page, page_size=size)

    def test_new_records_do_not_shift_earlier_pages(self) -> None:
        first = search(self.repo, "", page=1, page_size=2)
        self.repo.insert(
            BookPayload(title="Hyperion", author="Dan Simmons", isbn="1", published_date=date(1989, 5, 26))
        )
        again = search(self.repo, "", page=1, page_size=2)
        self.assertEqual([r.id for r in again.records], [r.id for r in first.records])
        self.assertEqual(again.total_count, first.total_count + 1)
        last = search(self.repo, "", page=3, page_size=2)
        self.assertEqual([r.id for r in last.records], [9, 10])

    def test_reads_repository_once_per_search(self) -> None:
        search(self.repo, "dune")
        self.assertEqual(self.repo.find_all_calls, 1)


class TestSearchPage(unittest.TestCase):
    def test_total_pages(self) -> None:
        self.assertEqual(SearchPage(records=[], total_count=0, page=1, page_size=10).total_pages, 0)
        self.assertEqual(SearchPage(records=[], total_count=10, page=1, page_size=10).total_pages, 1)
        self.assertEqual(SearchPage(records=[], total_count=11, page=1, page_size=10).total_pages, 2)


if __name__ == "__main__":
    unittest.main()
