"""
Main entrypoint for the library web application.

This module assembles the FastAPI application, sets up logging,
installs the method-override middleware and exception handlers, and
includes the page routers.  The ``create_app`` function builds and
configures the app, which is then instantiated at module import time
as ``app``, e.g.::

    uvicorn library_web.app.main:app --reload

The application title and version are provided via ``Settings`` from
``core.config``.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse

from .api.router import router as pages_router
from .core.config import settings
from .core.db import init_db
from .core.exceptions import LibraryError
from .core.logging_config import setup_logging
from .core.middleware import MethodOverrideMiddleware
from .core.templating import templates

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Create the database file if needed and bring the schema up to date.
    init_db()
    yield


def create_app() -> FastAPI:
    """Create and configure a FastAPI application.

    Returns
    -------
    FastAPI
        A configured FastAPI instance ready to be served.
    """
    # Initialise logging before anything else so that the handlers
    # below can safely log messages.
    setup_logging(settings.log_level, settings.log_file, debug=settings.debug)

    app = FastAPI(
        title=settings.project_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.add_middleware(MethodOverrideMiddleware)

    @app.exception_handler(LibraryError)
    async def library_error_handler(request: Request, exc: LibraryError):
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
        return templates.TemplateResponse(
            request,
            "error.html",
            {"status_code": exc.status_code, "message": str(exc)},
            status_code=exc.status_code,
        )

    @app.get("/", include_in_schema=False)
    async def root() -> RedirectResponse:
        return RedirectResponse("/book", status_code=303)

    app.include_router(pages_router)
    return app


app = create_app()
