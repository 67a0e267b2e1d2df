"""
People (borrower) pages.

Lists borrowers, shows one borrower with the books they hold (overdue
books are flagged) and their loan history, and handles the create,
edit and delete forms.  Besides the field constraints enforced by
``PersonCreate``, a person's name must not already be taken by
somebody else.
"""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from library_web.app.core.templating import templates
from library_web.app.schemas.person import validate_person
from library_web.app.schemas.validation import Violation, violations_by_field
from library_web.app.services.loan_service import LoanService
from library_web.app.services.person_service import PersonService

logger = logging.getLogger(__name__)

router = APIRouter()


async def _check_person_form(form: Dict[str, str], person_id: Optional[int] = None):
    """Validate a person form, including the unique-name rule."""
    person, violations = validate_person(form)
    if person is not None:
        existing = await PersonService.get_by_name(person.name)
        if existing is not None and existing.id != person_id:
            violations = violations + [("name", "A person with this name already exists")]
            person = None
    return person, violations


def _render_form(
    request: Request,
    template: str,
    form: Dict[str, str],
    violations: List[Violation],
    person_id: Optional[int] = None,
):
    logger.warning("Person form rejected: %s", violations)
    return templates.TemplateResponse(
        request,
        template,
        {"person_id": person_id, "form": form, "errors": violations_by_field(violations)},
        status_code=422,
    )


@router.get("", response_class=HTMLResponse)
async def list_people(request: Request):
    logger.debug("People list requested")
    people = await PersonService.list_people()
    return templates.TemplateResponse(request, "people/index.html", {"people": people})


@router.get("/new", response_class=HTMLResponse)
async def new_person(request: Request):
    return templates.TemplateResponse(request, "people/new.html", {"form": {}, "errors": {}})


@router.post("", response_class=HTMLResponse)
async def create_person(request: Request, name: str = Form(""), year_of_birth: str = Form("")):
    form = {"name": name, "year_of_birth": year_of_birth}
    person, violations = await _check_person_form(form)
    if violations:
        return _render_form(request, "people/new.html", form, violations)
    created = await PersonService.create_person(person)
    logger.info("Person %s created via form", created.id)
    return RedirectResponse("/people", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/{person_id}", response_class=HTMLResponse)
async def show_person(request: Request, person_id: int):
    """Show a person, the books they hold and their loan history."""
    logger.debug("Person %s requested", person_id)
    person = await PersonService.get_person(person_id)
    books = await PersonService.books_owned_by(person_id)
    loans = await LoanService.loans_for_person(person_id)
    return templates.TemplateResponse(
        request,
        "people/show.html",
        {"person": person, "books": books, "loans": loans},
    )


@router.get("/{person_id}/edit", response_class=HTMLResponse)
async def edit_person(request: Request, person_id: int):
    person = await PersonService.get_person(person_id)
    form = {"name": person.name, "year_of_birth": person.year_of_birth}
    return templates.TemplateResponse(
        request, "people/edit.html", {"person_id": person_id, "form": form, "errors": {}}
    )


async def _update_person(request: Request, person_id: int, name: str, year_of_birth: str):
    await PersonService.get_person(person_id)
    form = {"name": name, "year_of_birth": year_of_birth}
    person, violations = await _check_person_form(form, person_id)
    if violations:
        return _render_form(request, "people/edit.html", form, violations, person_id)
    await PersonService.update_person(person_id, person)
    return RedirectResponse("/people", status_code=status.HTTP_303_SEE_OTHER)


@router.post("/{person_id}", response_class=HTMLResponse)
async def update_person(
    request: Request, person_id: int, name: str = Form(""), year_of_birth: str = Form("")
):
    return await _update_person(request, person_id, name, year_of_birth)


@router.patch("/{person_id}", response_class=HTMLResponse)
async def patch_person(
    request: Request, person_id: int, name: str = Form(""), year_of_birth: str = Form("")
):
    return await _update_person(request, person_id, name, year_of_birth)


@router.delete("/{person_id}")
async def delete_person(person_id: int):
    await PersonService.delete_person(person_id)
    return RedirectResponse("/people", status_code=status.HTTP_303_SEE_OTHER)
