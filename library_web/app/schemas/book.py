"""
Pydantic models for book data.

``BookBase`` holds the fields a librarian edits through the forms and
enforces their constraints; ``BookCreate`` is used for both creating
and updating a book.  ``BookRead`` adds the identity and loan state
maintained by ``BookService``.
"""

from datetime import date, datetime
from typing import Any, List, Mapping, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from .validation import Violation, collect_violations


class BookBase(BaseModel):
    title: str = Field(..., examples=["Dune"])
    year: int = Field(..., examples=[1965])
    author: str = Field(..., examples=["Frank Herbert"])

    @field_validator("title", "author", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("title")
    @classmethod
    def check_title(cls, v: str) -> str:
        if not v:
            raise ValueError("Title must not be empty")
        if not 2 <= len(v) <= 30:
            raise ValueError("Title must be between 2 and 30 characters")
        return v

    @field_validator("author")
    @classmethod
    def check_author(cls, v: str) -> str:
        if not v:
            raise ValueError("Author must not be empty")
        if not 2 <= len(v) <= 100:
            raise ValueError("Author must be between 2 and 100 characters")
        return v

    @field_validator("year", mode="before")
    @classmethod
    def require_year(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("Year of release must not be empty")
        return v

    @field_validator("year")
    @classmethod
    def check_year(cls, v: int) -> int:
        current_year = date.today().year
        if v > current_year:
            raise ValueError(f"Year of release must not be after {current_year}")
        return v


class BookCreate(BookBase):
    """Schema for creating or updating a book.

    Updates overwrite every editable field, so there is no separate
    partial-update schema.
    """
    pass


class BookRead(BookBase):
    """Schema for a stored book.

    ``overdue`` is never persisted; ``PersonService.books_owned_by``
    fills it in at read time.  Two books compare equal when their
    title, year and author match, regardless of ``id``.
    """

    id: int
    owner_id: Optional[int] = None
    taken_at: Optional[datetime] = None
    overdue: bool = False

    model_config = {
        "from_attributes": True,
    }

    @property
    def is_owned(self) -> bool:
        return self.owner_id is not None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BookBase):
            return NotImplemented
        return (self.title, self.year, self.author) == (other.title, other.year, other.author)

    def __hash__(self) -> int:
        return hash((self.title, self.year, self.author))


def validate_book(data: Mapping[str, Any]) -> Tuple[Optional[BookCreate], List[Violation]]:
    """Validate raw form data for a book."""
    return collect_violations(BookCreate, data)
