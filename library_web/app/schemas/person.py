"""
Pydantic models for people (borrowers).

Library patrons must be at least fourteen years old, which the form
expresses as a birth year between 1900 and 2010 inclusive.
"""

from typing import Any, List, Mapping, Optional, Tuple

from pydantic import BaseModel, Field, field_validator

from .validation import Violation, collect_violations

MIN_YEAR_OF_BIRTH = 1900
MAX_YEAR_OF_BIRTH = 2010


class PersonBase(BaseModel):
    name: str = Field(..., examples=["Alice"])
    year_of_birth: int = Field(..., examples=[1990])

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        if not v:
            raise ValueError("Name must not be empty")
        return v

    @field_validator("year_of_birth", mode="before")
    @classmethod
    def require_year_of_birth(cls, v: Any) -> Any:
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("Year of birth must not be empty")
        return v

    @field_validator("year_of_birth")
    @classmethod
    def check_year_of_birth(cls, v: int) -> int:
        if v < MIN_YEAR_OF_BIRTH:
            raise ValueError(f"Year of birth must not be before {MIN_YEAR_OF_BIRTH}")
        if v > MAX_YEAR_OF_BIRTH:
            raise ValueError(f"Year of birth must not be after {MAX_YEAR_OF_BIRTH}")
        return v


class PersonCreate(PersonBase):
    """Schema for creating or updating a person."""
    pass


class PersonRead(PersonBase):
    """Schema for a stored person."""

    id: int

    model_config = {
        "from_attributes": True,
    }


def validate_person(data: Mapping[str, Any]) -> Tuple[Optional[PersonCreate], List[Violation]]:
    """Validate raw form data for a person."""
    return collect_violations(PersonCreate, data)
