import asyncio

from library_web.app.services.book_service import BookService
from library_web.app.services.person_service import PersonService


def create_book(client, title="Dune", year="1965", author="Frank Herbert"):
    response = client.post(
        "/book", data={"title": title, "year": year, "author": author}, follow_redirects=False
    )
    assert response.status_code == 303
    assert response.headers["location"] == "/book"


def create_person(client, name="Alice", year_of_birth="1990"):
    response = client.post(
        "/people", data={"name": name, "year_of_birth": year_of_birth}, follow_redirects=False
    )
    assert response.status_code == 303


def test_root_redirects_to_books(client):
    response = client.get("/", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/book"


def test_create_and_list_books(client):
    create_book(client)
    create_book(client, title="Solaris", year="1961", author="Stanislaw Lem")

    response = client.get("/book", params={"sort_by_year": "true"})
    assert response.status_code == 200
    assert response.text.index("Solaris") < response.text.index("Dune")

    response = client.get("/book", params={"page": 0, "books_per_page": 1})
    assert "Dune" in response.text
    assert "Solaris" not in response.text


def test_list_rejects_negative_page(client):
    assert client.get("/book", params={"page": -1, "books_per_page": 2}).status_code == 422


def test_invalid_book_form_is_rendered_again(client):
    response = client.post("/book", data={"title": "D", "year": "", "author": "Frank Herbert"})
    assert response.status_code == 422
    assert "Title must be between 2 and 30 characters" in response.text
    assert "Year of release must not be empty" in response.text
    assert 'value="Frank Herbert"' in response.text
    assert asyncio.run(BookService.list_books()) == []


def test_show_book_offers_people_when_available(client):
    create_book(client)
    create_person(client)

    response = client.get("/book/1")
    assert response.status_code == 200
    assert "The book is available." in response.text
    assert '<option value="1">Alice</option>' in response.text


def test_show_missing_book_is_404(client):
    response = client.get("/book/99")
    assert response.status_code == 404
    assert "Book 99 not found" in response.text


def test_edit_and_update_book(client):
    create_book(client)
    assert 'value="Dune"' in client.get("/book/1/edit").text

    response = client.post(
        "/book/1?_method=PATCH",
        data={"title": "Dune Messiah", "year": "1969", "author": "Frank Herbert"},
        follow_redirects=False,
    )
    assert response.status_code == 303
    assert asyncio.run(BookService.get_book(1)).title == "Dune Messiah"

    response = client.patch("/book/1", data={"title": "Dune", "year": "3000", "author": "Frank Herbert"})
    assert response.status_code == 422
    assert "Year of release must not be after" in response.text


def test_assign_and_release_through_forms(client):
    create_book(client)
    create_person(client)

    response = client.post("/book/1/assign?_method=PATCH", data={"person_id": "1"}, follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/book/1"

    page = client.get("/book/1").text
    assert "The book is with:" in page
    assert "Alice" in page
    assert "Dune" in client.get("/people/1").text

    response = client.post("/book/1/release/1?_method=PATCH", follow_redirects=False)
    assert response.status_code == 303
    assert asyncio.run(BookService.get_book(1)).owner_id is None


def test_assign_conflict_is_409(client):
    create_book(client)
    create_person(client, "Alice")
    create_person(client, "Bob", "1985")
    client.patch("/book/1/assign", data={"person_id": "1"})

    response = client.patch("/book/1/assign", data={"person_id": "2"})
    assert response.status_code == 409
    assert "already loaned" in response.text

    response = client.patch("/book/1/release/2")
    assert response.status_code == 409
    assert "not assigned to this person" in response.text


def test_assign_without_person_is_rejected(client):
    create_book(client)
    response = client.patch("/book/1/assign", data={})
    assert response.status_code == 422


def test_delete_book(client):
    create_book(client)
    response = client.post("/book/1?_method=DELETE", follow_redirects=False)
    assert response.status_code == 303
    assert client.get("/book/1").status_code == 404
    # Deleting again is a quiet no-op.
    assert client.delete("/book/1", follow_redirects=False).status_code == 303


def test_search(client):
    create_book(client, title="Harry Potter", year="1997", author="J. K. Rowling")
    create_book(client, title="The Harbor", year="2000", author="Someone Else")

    assert client.get("/book/search").status_code == 200

    response = client.post("/book/search", data={"query": "Har"})
    assert response.status_code == 200
    assert "Harry Potter" in response.text
    assert "The Harbor" not in response.text

    response = client.get("/book/search", params={"query": "Zzz"})
    assert "No books found." in response.text


def test_person_pages(client):
    create_person(client)
    assert "Alice" in client.get("/people").text
    assert client.get("/people/new").status_code == 200

    response = client.get("/people/1")
    assert response.status_code == 200
    assert "The person has not taken any books." in response.text

    response = client.post("/people/1", data={"name": "Alicia", "year_of_birth": "1991"}, follow_redirects=False)
    assert response.status_code == 303
    assert asyncio.run(PersonService.get_person(1)).name == "Alicia"

    response = client.patch("/people/1", data={"name": "Alicia", "year_of_birth": "1992"}, follow_redirects=False)
    assert response.status_code == 303
    assert asyncio.run(PersonService.get_person(1)).year_of_birth == 1992


def test_invalid_person_form(client):
    response = client.post("/people", data={"name": "", "year_of_birth": "1850"})
    assert response.status_code == 422
    assert "Name must not be empty" in response.text
    assert "Year of birth must not be before 1900" in response.text


def test_person_name_must_be_unique(client):
    create_person(client, "Alice")
    create_person(client, "Bob", "1985")

    response = client.post("/people", data={"name": "Alice", "year_of_birth": "1970"})
    assert response.status_code == 422
    assert "A person with this name already exists" in response.text

    response = client.post("/people/2", data={"name": "Alice", "year_of_birth": "1985"})
    assert response.status_code == 422

    # Keeping one's own name is fine.
    response = client.post("/people/1", data={"name": "Alice", "year_of_birth": "1971"}, follow_redirects=False)
    assert response.status_code == 303


def test_delete_person_releases_books(client):
    create_book(client)
    create_person(client)
    client.patch("/book/1/assign", data={"person_id": "1"})

    response = client.post("/people/1?_method=DELETE", follow_redirects=False)
    assert response.status_code == 303
    assert client.get("/people/1").status_code == 404
    book = asyncio.run(BookService.get_book(1))
    assert book.owner_id is None and book.taken_at is None


def test_update_missing_person_is_404(client):
    response = client.post("/people/5", data={"name": "Nobody", "year_of_birth": "1990"})
    assert response.status_code == 404


HUGE_ID = 2**63


def test_ids_beyond_sqlite_range_are_404(client):
    create_book(client)
    create_person(client)

    assert client.get(f"/book/{HUGE_ID}").status_code == 404
    assert client.get(f"/book/{HUGE_ID}/edit").status_code == 404
    assert client.get(f"/people/{HUGE_ID}").status_code == 404
    assert client.patch(f"/book/{HUGE_ID}/release/1").status_code == 404
    assert client.patch("/book/1/assign", data={"person_id": str(HUGE_ID)}).status_code == 404
    assert client.delete(f"/people/{HUGE_ID}").status_code == 404
    # Deleting an unknown book stays a quiet no-op.
    assert client.delete(f"/book/{HUGE_ID}", follow_redirects=False).status_code == 303


def test_page_beyond_sqlite_range_is_empty(client):
    create_book(client)

    response = client.get("/book", params={"page": 10**18, "books_per_page": 100})
    assert response.status_code == 200
    assert "No books." in response.text

    response = client.get("/book", params={"page": 0, "books_per_page": HUGE_ID})
    assert response.status_code == 200
    assert "Dune" in response.text


def test_update_missing_book_is_404_even_with_invalid_form(client):
    response = client.patch("/book/42", data={"title": "D", "year": "", "author": ""})
    assert response.status_code == 404
    assert "Book 42 not found" in response.text


def test_update_missing_person_is_404_even_with_invalid_form(client):
    response = client.post("/people/42", data={"name": "", "year_of_birth": "1800"})
    assert response.status_code == 404
