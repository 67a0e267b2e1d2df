"""
HTTP method override for HTML forms.

Browsers only submit forms with GET or POST.  Forms that need to
update or delete a resource post to a URL carrying ``_method`` in the
query string (e.g. ``/book/3?_method=DELETE``); this middleware
rewrites the request method before routing so that the ``PATCH`` and
``DELETE`` handlers receive them.
"""

from starlette.datastructures import QueryParams
from starlette.types import ASGIApp, Receive, Scope, Send

OVERRIDABLE_METHODS = {"PUT", "PATCH", "DELETE"}


class MethodOverrideMiddleware:
    """ASGI middleware that honours ``?_method=`` on POST requests."""

    def __init__(self, app: ASGIApp, param: str = "_method") -> None:
        self.app = app
        self.param = param

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "http" and scope["method"] == "POST":
            params = QueryParams(scope.get("query_string", b""))
            override = params.get(self.param, "").upper()
            if override in OVERRIDABLE_METHODS:
                scope = dict(scope, method=override)
        await self.app(scope, receive, send)
