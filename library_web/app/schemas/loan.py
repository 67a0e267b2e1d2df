"""
Pydantic model for loan history entries.

A loan is opened when a book is assigned to a person and closed
(``return_date`` set) when the book is released or its holder is
deleted.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class LoanRead(BaseModel):
    id: int
    book_id: int
    person_id: int
    loan_date: datetime
    return_date: Optional[datetime] = None
    # Filled in when listing a person's history; ``None`` once the book is deleted.
    book_title: Optional[str] = None

    model_config = {
        "from_attributes": True,
    }

    @property
    def is_open(self) -> bool:
        return self.return_date is None
