"""
Loan history.

Each time a book changes hands through ``BookService.assign`` a row is
added to ``book_loans``; releasing the book (or deleting the person
holding it) stamps the row's ``return_date``.  The connection-level
helpers are called from inside the unit of work of the operation that
changes ownership, so the history and the book row are committed
together.
"""

import logging
import sqlite3
from datetime import datetime, timezone
from typing import List, Optional

from ..core.db import unit_of_work
from ..schemas.loan import LoanRead

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class LoanService:
    """Service for reading and maintaining loan history."""

    @staticmethod
    def _row_to_loan(row: sqlite3.Row) -> LoanRead:
        return LoanRead.model_validate(dict(row))

    @classmethod
    def open_loan(cls, conn: sqlite3.Connection, book_id: int, person_id: int, when: datetime) -> int:
        """Record that ``person_id`` took ``book_id`` at ``when``."""
        cursor = conn.execute(
            "INSERT INTO book_loans (book_id, person_id, loan_date) VALUES (?, ?, ?)",
            (book_id, person_id, when.isoformat()),
        )
        logger.debug("Opened loan %s for book %s and person %s", cursor.lastrowid, book_id, person_id)
        return cursor.lastrowid

    @classmethod
    def close_open_loans(
        cls,
        conn: sqlite3.Connection,
        when: datetime,
        book_id: Optional[int] = None,
        person_id: Optional[int] = None,
    ) -> int:
        """Stamp ``return_date`` on open loans of a book and/or a person.

        At least one of ``book_id`` and ``person_id`` must be given.
        Returns the number of loans closed.
        """
        if book_id is None and person_id is None:
            raise ValueError("book_id or person_id is required")
        query = "UPDATE book_loans SET return_date = ? WHERE return_date IS NULL"
        params: list = [when.isoformat()]
        if book_id is not None:
            query += " AND book_id = ?"
            params.append(book_id)
        if person_id is not None:
            query += " AND person_id = ?"
            params.append(person_id)
        cursor = conn.execute(query, tuple(params))
        return cursor.rowcount

    @classmethod
    async def loans_for_person(cls, person_id: int) -> List[LoanRead]:
        """Return every loan of ``person_id``, newest first."""
        with unit_of_work() as conn:
            rows = conn.execute(
                "SELECT l.*, b.title AS book_title FROM book_loans l "
                "LEFT JOIN book b ON b.id = l.book_id "
                "WHERE l.person_id = ? ORDER BY l.loan_date DESC, l.id DESC",
                (person_id,),
            ).fetchall()
            return [cls._row_to_loan(row) for row in rows]

    @classmethod
    async def open_loan_for_book(cls, book_id: int) -> Optional[LoanRead]:
        """Return the loan currently open for ``book_id``, if any."""
        with unit_of_work() as conn:
            row = conn.execute(
                "SELECT * FROM book_loans WHERE book_id = ? AND return_date IS NULL "
                "ORDER BY id DESC LIMIT 1",
                (book_id,),
            ).fetchone()
            return cls._row_to_loan(row) if row else None
