"""Run the library web application with Uvicorn.

Usage::

    python -m library_web

Host and port are read from ``HOST`` and ``PORT`` (see
``library_web.app.core.config``).  Defaults are ``127.0.0.1`` and
``8080``.
"""

import asyncio

from uvicorn import Config, Server

from library_web.app.core.config import settings
from library_web.app.main import app


async def main() -> None:
    config = Config(
        app=app,
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level=settings.log_level.lower(),
    )
    server = Server(config)
    await server.serve()


def run() -> None:
    try:
        asyncio.run(main())
    except (KeyboardInterrupt, SystemExit):
        pass


if __name__ == "__main__":
    run()
