"""
Business logic for books.

``BookService`` handles the catalogue (CRUD, listing with optional
year ordering and pagination, title-prefix search) and the loan
workflow.  A book is either unowned or held by exactly one person:

* ``assign`` moves an unowned book to a person and stamps
  ``taken_at``; assigning it again to the same person is a no-op;
  assigning it to anyone else raises ``ConflictError``.
* ``release`` clears the owner and ``taken_at``, but only for the
  person currently holding the book.

Every operation runs in its own unit of work.  ``assign`` uses a
conditional ``UPDATE ... WHERE owner_id IS NULL`` so that two
concurrent requests cannot both take the same book.
"""

import logging
import sqlite3
from typing import List, Optional

from ..core.db import SQLITE_MAX_INTEGER, fits_sqlite_integer, unit_of_work
from ..core.exceptions import ConflictError, NotFoundError
from ..schemas.book import BookCreate, BookRead
from ..schemas.person import PersonRead
from .loan_service import LoanService, utcnow
from .person_service import PersonService

logger = logging.getLogger(__name__)

_COLUMNS = "id, title, year, author, owner_id, taken_at"


def _escape_glob(text: str) -> str:
    # GLOB is case-sensitive like the prefix match we want, but its
    # wildcards have to be matched literally.
    return "".join(f"[{ch}]" if ch in "*?[" else ch for ch in text)


class BookService:
    """Service class for managing books and their loans."""

    @staticmethod
    def _row_to_book(row: sqlite3.Row) -> BookRead:
        return BookRead.model_validate(dict(row))

    @classmethod
    def _fetch(cls, conn: sqlite3.Connection, book_id: int) -> BookRead:
        row = None
        if fits_sqlite_integer(book_id):
            row = conn.execute(f"SELECT {_COLUMNS} FROM book WHERE id = ?", (book_id,)).fetchone()
        if not row:
            logger.error("Book %s not found", book_id)
            raise NotFoundError(f"Book {book_id} not found")
        return cls._row_to_book(row)

    @classmethod
    async def list_books(
        cls,
        sort_by_year: bool = False,
        page: Optional[int] = None,
        per_page: Optional[int] = None,
    ) -> List[BookRead]:
        """Return books, optionally ordered by year and paginated.

        Pagination applies only when both ``page`` (0-based) and
        ``per_page`` are given.  A page past the end yields an empty
        list, as does an offset beyond what SQLite can address.
        """
        logger.info(
            "Listing books: page=%s, per_page=%s, sort_by_year=%s", page, per_page, sort_by_year
        )
        query = f"SELECT {_COLUMNS} FROM book"
        query += " ORDER BY year, id" if sort_by_year else " ORDER BY id"
        params: tuple = ()
        if page is not None and per_page is not None:
            offset = page * per_page
            if offset > SQLITE_MAX_INTEGER:
                return []
            # A negative LIMIT means "no limit" in SQLite.
            limit = per_page if per_page <= SQLITE_MAX_INTEGER else -1
            query += " LIMIT ? OFFSET ?"
            params = (limit, offset)
        with unit_of_work() as conn:
            rows = conn.execute(query, params).fetchall()
            return [cls._row_to_book(row) for row in rows]

    @classmethod
    async def get_book(cls, book_id: int) -> BookRead:
        """Retrieve a single book by ID or raise ``NotFoundError``."""
        with unit_of_work() as conn:
            return cls._fetch(conn, book_id)

    @classmethod
    async def get_owner(cls, book_id: int) -> Optional[PersonRead]:
        """Return the person holding ``book_id``.

        ``None`` if the book is not lent out or does not exist.
        """
        if not fits_sqlite_integer(book_id):
            return None
        with unit_of_work() as conn:
            row = conn.execute(
                "SELECT p.id, p.name, p.year_of_birth FROM book b "
                "JOIN person p ON p.id = b.owner_id WHERE b.id = ?",
                (book_id,),
            ).fetchone()
            return PersonRead.model_validate(dict(row)) if row else None

    @classmethod
    async def create_book(cls, data: BookCreate) -> BookRead:
        with unit_of_work() as conn:
            cursor = conn.execute(
                "INSERT INTO book (title, year, author) VALUES (?, ?, ?)",
                (data.title, data.year, data.author),
            )
            book_id = cursor.lastrowid
        logger.info("Created book %s: %s", book_id, data.title)
        return BookRead(id=book_id, **data.model_dump())

    @classmethod
    async def update_book(cls, book_id: int, data: BookCreate) -> BookRead:
        """Overwrite title, year and author; owner and ``taken_at`` are kept."""
        logger.info("Updating book %s", book_id)
        with unit_of_work() as conn:
            cls._fetch(conn, book_id)
            conn.execute(
                "UPDATE book SET title = ?, year = ?, author = ? WHERE id = ?",
                (data.title, data.year, data.author, book_id),
            )
            book = cls._fetch(conn, book_id)
        logger.info("Book %s updated", book_id)
        return book

    @classmethod
    async def delete_book(cls, book_id: int) -> bool:
        """Delete a book by ID.

        Returns ``True`` if a record was deleted, ``False`` if there was
        nothing to delete.
        """
        if not fits_sqlite_integer(book_id):
            logger.warning("Book %s not found, nothing to delete", book_id)
            return False
        with unit_of_work() as conn:
            affected = conn.execute("DELETE FROM book WHERE id = ?", (book_id,)).rowcount
            if affected:
                LoanService.close_open_loans(conn, utcnow(), book_id=book_id)
        if affected:
            logger.info("Deleted book %s", book_id)
        else:
            logger.warning("Book %s not found, nothing to delete", book_id)
        return affected > 0

    @classmethod
    async def assign(cls, book_id: int, person_id: int) -> BookRead:
        """Lend ``book_id`` to ``person_id``.

        Raises ``NotFoundError`` if the book or the person is missing and
        ``ConflictError`` if the book is held by somebody else.
        """
        logger.info("Assigning book %s to person %s", book_id, person_id)
        with unit_of_work() as conn:
            cls._fetch(conn, book_id)
            person = PersonService._fetch(conn, person_id)
            now = utcnow()
            cursor = conn.execute(
                "UPDATE book SET owner_id = ?, taken_at = ? WHERE id = ? AND owner_id IS NULL",
                (person.id, now.isoformat(), book_id),
            )
            if cursor.rowcount == 1:
                LoanService.open_loan(conn, book_id, person.id, now)
                logger.info("Book %s assigned to %s", book_id, person.name)
                return cls._fetch(conn, book_id)

            book = cls._fetch(conn, book_id)
            if book.owner_id == person.id:
                logger.info("Book %s is already assigned to person %s", book_id, person_id)
                return book
            logger.warning("Book %s is already loaned to person %s", book_id, book.owner_id)
            raise ConflictError(f"Book {book_id} is already loaned")

    @classmethod
    async def release(cls, book_id: int, person_id: int) -> BookRead:
        """Return ``book_id`` from ``person_id``.

        Raises ``NotFoundError`` if the book is missing and
        ``ConflictError`` if it is not held by ``person_id``.
        """
        logger.info("Releasing book %s from person %s", book_id, person_id)
        with unit_of_work() as conn:
            book = cls._fetch(conn, book_id)
            if book.owner_id is None or book.owner_id != person_id:
                logger.warning(
                    "Book %s cannot be released: it is not assigned to person %s", book_id, person_id
                )
                raise ConflictError(f"Book {book_id} is not assigned to this person")
            conn.execute(
                "UPDATE book SET owner_id = NULL, taken_at = NULL WHERE id = ?",
                (book_id,),
            )
            LoanService.close_open_loans(conn, utcnow(), book_id=book_id)
            book = cls._fetch(conn, book_id)
        logger.info("Book %s released", book_id)
        return book

    @classmethod
    async def search_by_title_prefix(cls, query: str) -> List[BookRead]:
        """Return books whose title starts with ``query`` (case-sensitive).

        An empty query matches every book.
        """
        logger.info("Searching books by title prefix %r", query)
        with unit_of_work() as conn:
            rows = conn.execute(
                f"SELECT {_COLUMNS} FROM book WHERE title GLOB ? ORDER BY title, id",
                (_escape_glob(query) + "*",),
            ).fetchall()
            return [cls._row_to_book(row) for row in rows]
