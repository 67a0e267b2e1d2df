"""
Business logic for people (borrowers).

Besides plain CRUD, ``PersonService`` computes which of a person's
books are overdue.  The flag is a read-time projection: a book is
overdue when it has been held for longer than
``settings.loan_period_days`` (10 days by default).  Nothing is
written back to the database.

Deleting a person detaches all of their books first so that no book
keeps pointing at a missing owner.
"""

import logging
import sqlite3
from datetime import datetime, timedelta
from typing import List, Optional

from ..core.config import settings
from ..core.db import fits_sqlite_integer, unit_of_work
from ..core.exceptions import NotFoundError
from ..schemas.book import BookRead
from ..schemas.person import PersonCreate, PersonRead
from .loan_service import LoanService, utcnow

logger = logging.getLogger(__name__)


def is_overdue(taken_at: Optional[datetime], now: datetime, period: Optional[timedelta] = None) -> bool:
    """Return ``True`` if a book taken at ``taken_at`` is overdue at ``now``.

    Strictly longer than ``period`` counts as overdue; a book held for
    exactly the loan period is still on time.
    """
    if taken_at is None:
        return False
    if period is None:
        period = timedelta(days=settings.loan_period_days)
    return now - taken_at > period


class PersonService:
    """Сервис для управления читателями библиотеки."""

    @staticmethod
    def _row_to_person(row: sqlite3.Row) -> PersonRead:
        return PersonRead.model_validate(dict(row))

    @classmethod
    def _fetch(cls, conn: sqlite3.Connection, person_id: int) -> PersonRead:
        row = None
        if fits_sqlite_integer(person_id):
            row = conn.execute(
                "SELECT id, name, year_of_birth FROM person WHERE id = ?",
                (person_id,),
            ).fetchone()
        if not row:
            logger.error("Person %s not found", person_id)
            raise NotFoundError(f"Person {person_id} not found")
        return cls._row_to_person(row)

    @classmethod
    async def list_people(cls) -> List[PersonRead]:
        logger.info("Listing all people")
        with unit_of_work() as conn:
            rows = conn.execute("SELECT id, name, year_of_birth FROM person ORDER BY id").fetchall()
            return [cls._row_to_person(row) for row in rows]

    @classmethod
    async def get_person(cls, person_id: int) -> PersonRead:
        """Retrieve a single person by ID or raise ``NotFoundError``."""
        with unit_of_work() as conn:
            return cls._fetch(conn, person_id)

    @classmethod
    async def get_by_name(cls, name: str) -> Optional[PersonRead]:
        """Return the first person with exactly this name, or ``None``."""
        with unit_of_work() as conn:
            row = conn.execute(
                "SELECT id, name, year_of_birth FROM person WHERE name = ? ORDER BY id LIMIT 1",
                (name,),
            ).fetchone()
            return cls._row_to_person(row) if row else None

    @classmethod
    async def create_person(cls, data: PersonCreate) -> PersonRead:
        with unit_of_work() as conn:
            cursor = conn.execute(
                "INSERT INTO person (name, year_of_birth) VALUES (?, ?)",
                (data.name, data.year_of_birth),
            )
            person_id = cursor.lastrowid
        logger.info("Created person %s (%s)", person_id, data.name)
        return PersonRead(id=person_id, **data.model_dump())

    @classmethod
    async def update_person(cls, person_id: int, data: PersonCreate) -> PersonRead:
        """Overwrite name and year of birth of an existing person."""
        with unit_of_work() as conn:
            cls._fetch(conn, person_id)
            conn.execute(
                "UPDATE person SET name = ?, year_of_birth = ? WHERE id = ?",
                (data.name, data.year_of_birth, person_id),
            )
        logger.info("Updated person %s", person_id)
        return PersonRead(id=person_id, **data.model_dump())

    @classmethod
    async def delete_person(cls, person_id: int) -> None:
        """Delete a person after releasing every book they hold.

        Released books lose both their owner and their ``taken_at``
        timestamp, and the corresponding loans are closed.  Raises
        ``NotFoundError`` if the person does not exist.
        """
        logger.info("Deleting person %s", person_id)
        with unit_of_work() as conn:
            cls._fetch(conn, person_id)
            released = conn.execute(
                "UPDATE book SET owner_id = NULL, taken_at = NULL WHERE owner_id = ?",
                (person_id,),
            ).rowcount
            LoanService.close_open_loans(conn, utcnow(), person_id=person_id)
            conn.execute("DELETE FROM person WHERE id = ?", (person_id,))
        logger.info("Deleted person %s, released %s book(s)", person_id, released)

    @classmethod
    async def books_owned_by(cls, person_id: int, now: Optional[datetime] = None) -> List[BookRead]:
        """Return the books held by ``person_id`` with ``overdue`` filled in.

        ``now`` defaults to the current UTC time.  Raises
        ``NotFoundError`` if the person does not exist.
        """
        if now is None:
            now = utcnow()
        with unit_of_work() as conn:
            cls._fetch(conn, person_id)
            rows = conn.execute(
                "SELECT id, title, year, author, owner_id, taken_at FROM book "
                "WHERE owner_id = ? ORDER BY taken_at, id",
                (person_id,),
            ).fetchall()
        books: List[BookRead] = []
        for row in rows:
            book = BookRead.model_validate(dict(row))
            book.overdue = is_overdue(book.taken_at, now)
            books.append(book)
        logger.info("Person %s holds %s book(s)", person_id, len(books))
        return books
