"""
Top-level router for the library pages.

Aggregates the domain routers under their URL prefixes.  The paths
follow the original web interface: books live under ``/book`` and
borrowers under ``/people``.
"""

from fastapi import APIRouter

from .endpoints import books, people

router = APIRouter()

router.include_router(books.router, prefix="/book", tags=["books"])
router.include_router(people.router, prefix="/people", tags=["people"])
