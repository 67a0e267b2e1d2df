"""
SQLite database integration and simple migration system.

This module provides functions for obtaining a database connection
(``get_connection``), running a block of work inside a single
transaction (``unit_of_work``) and applying migrations on application
start (``init_db``).  It uses SQLite as a lightweight embedded
database; to switch to another DBMS you would replace connection logic
and adapt SQL syntax accordingly.

The migration mechanism stores applied migration versions in the
``migrations`` table and executes new migrations in order.
"""

import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .config import settings

logger = logging.getLogger(__name__)

# SQLite stores integers as signed 64-bit values; larger Python ints
# cannot even be bound as parameters.
SQLITE_MAX_INTEGER = 2**63 - 1
SQLITE_MIN_INTEGER = -(2**63)


def fits_sqlite_integer(value: int) -> bool:
    """Return ``True`` if ``value`` can be bound as an SQLite INTEGER."""
    return SQLITE_MIN_INTEGER <= value <= SQLITE_MAX_INTEGER


def get_database_path() -> str:
    """Compute the path to the SQLite database file.

    If ``settings.database_url`` is an absolute path, use it directly.
    Otherwise resolve it relative to the project root (the directory
    containing the ``library_web`` package).
    """
    db_url = settings.database_url
    if os.path.isabs(db_url):
        return db_url
    base_dir = Path(__file__).resolve().parents[3]
    return str((base_dir / db_url).resolve())


def get_connection() -> sqlite3.Connection:
    """Create and return a new SQLite connection.

    The connection uses a row factory to access columns by name.
    Timestamps are stored as ISO 8601 text and parsed by the services,
    so no type detection is enabled.
    """
    conn = sqlite3.connect(get_database_path())
    conn.row_factory = sqlite3.Row
    # Foreign key support is off by default in SQLite and must be
    # enabled per connection.
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@contextmanager
def unit_of_work() -> Iterator[sqlite3.Connection]:
    """Yield a connection whose work is committed or rolled back as a whole.

    The transaction is committed when the block exits normally and
    rolled back when it raises; the exception is re-raised.  The
    connection is closed on every exit path.
    """
    conn = get_connection()
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


MIGRATIONS: list[tuple[int, str]] = [
    # Migration 1: people and books
    (
        1,
        """
        CREATE TABLE IF NOT EXISTS person (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            year_of_birth INTEGER NOT NULL
        );

        CREATE TABLE IF NOT EXISTS book (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            title TEXT NOT NULL,
            year INTEGER NOT NULL,
            author TEXT NOT NULL,
            owner_id INTEGER,
            taken_at TIMESTAMP,
            FOREIGN KEY(owner_id) REFERENCES person(id)
        );

        CREATE INDEX IF NOT EXISTS idx_book_owner_id ON book(owner_id);
        """,
    ),
    # Migration 2: loan history
    (
        2,
        """
        -- Loans are historical records; they intentionally carry no
        -- foreign keys so that deleting a book or a person keeps them.
        CREATE TABLE IF NOT EXISTS book_loans (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            book_id INTEGER NOT NULL,
            person_id INTEGER NOT NULL,
            loan_date TIMESTAMP NOT NULL,
            return_date TIMESTAMP
        );

        CREATE INDEX IF NOT EXISTS idx_book_loans_person_id ON book_loans(person_id);
        CREATE INDEX IF NOT EXISTS idx_book_loans_book_id ON book_loans(book_id);
        """,
    ),
]


def init_db() -> None:
    """Initialise the database and apply pending migrations.

    Creates the ``migrations`` table if it does not exist, checks the
    current schema version, and applies any new migrations defined in
    ``MIGRATIONS``.  If you add a new migration, append it with an
    incremented version number.
    """
    with unit_of_work() as conn:
        conn.execute(
            "CREATE TABLE IF NOT EXISTS migrations (version INTEGER PRIMARY KEY)"
        )
        row = conn.execute("SELECT MAX(version) AS version FROM migrations").fetchone()
        current_version = row["version"] if row and row["version"] is not None else 0

        for version, sql in MIGRATIONS:
            if version > current_version:
                conn.executescript(sql)
                conn.execute("INSERT INTO migrations (version) VALUES (?)", (version,))
                logger.info("Applied migration %s", version)
                current_version = version
