"""
Domain exceptions raised by the service layer.

Services signal failures by raising these instead of returning
sentinel values.  Both concrete errors derive from ``ValueError`` so
callers that only care about "the request could not be satisfied" can
catch that.  The HTTP layer maps them to status codes in
``main.create_app``.
"""


class LibraryError(ValueError):
    """Base class for request-scoped library failures."""

    status_code = 400


class NotFoundError(LibraryError):
    """A requested book or person does not exist."""

    status_code = 404


class ConflictError(LibraryError):
    """An assign/release request contradicts the current owner of a book."""

    status_code = 409
