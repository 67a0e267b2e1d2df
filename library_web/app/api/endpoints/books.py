"""
Book pages.

These routes render the catalogue, the create/edit forms, the book
detail page (with the assign/release controls) and the title search.
Mutating routes redirect with ``303 See Other`` on success; invalid
form input re-renders the originating form with per-field messages
and status 422.  ``NotFoundError`` and ``ConflictError`` raised by the
service are turned into error pages by the handlers installed in
``main.create_app``.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Form, HTTPException, Query, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse

from library_web.app.core.templating import templates
from library_web.app.schemas.book import validate_book
from library_web.app.schemas.validation import violations_by_field
from library_web.app.services.book_service import BookService
from library_web.app.services.person_service import PersonService

logger = logging.getLogger(__name__)

router = APIRouter()


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


@router.get("", response_class=HTMLResponse)
async def list_books(
    request: Request,
    page: Optional[int] = Query(None, ge=0),
    books_per_page: Optional[int] = Query(None, ge=1),
    sort_by_year: bool = Query(False),
):
    """Show all books.

    - **page**, **books_per_page**: 0-based pagination, applied only when
      both are given.
    - **sort_by_year**: order by year of release instead of by ID.
    """
    logger.debug(
        "Book list requested: page=%s, books_per_page=%s, sort_by_year=%s",
        page, books_per_page, sort_by_year,
    )
    books = await BookService.list_books(sort_by_year=sort_by_year, page=page, per_page=books_per_page)
    return templates.TemplateResponse(
        request,
        "books/index.html",
        {
            "books": books,
            "page": page,
            "books_per_page": books_per_page,
            "sort_by_year": sort_by_year,
        },
    )


@router.get("/new", response_class=HTMLResponse)
async def new_book(request: Request):
    return templates.TemplateResponse(request, "books/new.html", {"form": {}, "errors": {}})


@router.post("", response_class=HTMLResponse)
async def create_book(
    request: Request,
    title: str = Form(""),
    year: str = Form(""),
    author: str = Form(""),
):
    form = {"title": title, "year": year, "author": author}
    book, violations = validate_book(form)
    if violations:
        logger.warning("Book form rejected: %s", violations)
        return templates.TemplateResponse(
            request,
            "books/new.html",
            {"form": form, "errors": violations_by_field(violations)},
            status_code=422,
        )
    created = await BookService.create_book(book)
    logger.info("Book %s created via form", created.id)
    return _redirect("/book")


@router.get("/search", response_class=HTMLResponse)
async def search_page(request: Request, query: Optional[str] = Query(None)):
    """Show the search form; run the search when ``query`` is given."""
    books = await BookService.search_by_title_prefix(query) if query is not None else None
    return templates.TemplateResponse(request, "books/search.html", {"query": query or "", "books": books})


@router.post("/search", response_class=HTMLResponse)
async def search(request: Request, query: str = Form("")):
    logger.debug("Searching books for %r", query)
    books = await BookService.search_by_title_prefix(query)
    return templates.TemplateResponse(request, "books/search.html", {"query": query, "books": books})


@router.get("/{book_id}", response_class=HTMLResponse)
async def show_book(request: Request, book_id: int):
    """Show a book.

    If the book is lent out its holder is shown; otherwise every
    person is listed so the book can be assigned.
    """
    logger.debug("Book %s requested", book_id)
    book = await BookService.get_book(book_id)
    owner = await BookService.get_owner(book_id)
    people = [] if owner is not None else await PersonService.list_people()
    return templates.TemplateResponse(
        request,
        "books/show.html",
        {"book": book, "owner": owner, "people": people},
    )


@router.get("/{book_id}/edit", response_class=HTMLResponse)
async def edit_book(request: Request, book_id: int):
    book = await BookService.get_book(book_id)
    form = {"title": book.title, "year": book.year, "author": book.author}
    return templates.TemplateResponse(
        request, "books/edit.html", {"book_id": book_id, "form": form, "errors": {}}
    )


@router.patch("/{book_id}", response_class=HTMLResponse)
async def update_book(
    request: Request,
    book_id: int,
    title: str = Form(""),
    year: str = Form(""),
    author: str = Form(""),
):
    # A missing book is a 404 whatever the form contains.
    await BookService.get_book(book_id)
    form = {"title": title, "year": year, "author": author}
    data, violations = validate_book(form)
    if violations:
        logger.warning("Book %s form rejected: %s", book_id, violations)
        return templates.TemplateResponse(
            request,
            "books/edit.html",
            {"book_id": book_id, "form": form, "errors": violations_by_field(violations)},
            status_code=422,
        )
    await BookService.update_book(book_id, data)
    return _redirect("/book")


@router.delete("/{book_id}")
async def delete_book(book_id: int):
    await BookService.delete_book(book_id)
    return _redirect("/book")


@router.patch("/{book_id}/release/{person_id}")
async def release_book(book_id: int, person_id: int):
    await BookService.release(book_id, person_id)
    return _redirect(f"/book/{book_id}")


@router.patch("/{book_id}/assign")
async def assign_book(book_id: int, person_id: Optional[int] = Form(None)):
    if person_id is None:
        raise HTTPException(
            status_code=422, detail="Select a person to assign the book to"
        )
    await BookService.assign(book_id, person_id)
    return _redirect(f"/book/{book_id}")
