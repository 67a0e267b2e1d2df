"""
Simple configuration management.

The ``Settings`` dataclass reads configuration directly from
environment variables.  Defaults are provided for all fields so the
application starts with a local SQLite file and console logging.  In
a production deployment you should override these via environment
variables.
"""

import os
from dataclasses import dataclass
from typing import Optional


@dataclass
class Settings:
    """Application settings loaded from environment variables."""

    project_name: str = os.getenv("PROJECT_NAME", "Library")
    app_version: str = os.getenv("APP_VERSION", "1.0.0")
    debug: bool = os.getenv("DEBUG", "false").lower() in {"1", "true", "yes"}
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_file: Optional[str] = os.getenv("LOG_FILE") or None

    # Path to the SQLite database file.  If a relative path is
    # provided, it is resolved relative to the project root by the
    # ``db`` module.
    database_url: str = os.getenv("DATABASE_URL", "library.db")

    # A book held for longer than this many days is shown as overdue
    # on the borrower's page.
    loan_period_days: int = int(os.getenv("LOAN_PERIOD_DAYS", "10"))

    host: str = os.getenv("HOST", "127.0.0.1")
    port: int = int(os.getenv("PORT", "8080"))


# Instantiate settings once so other modules can import it without
# repeatedly reading environment variables.  Environment variables
# must be set before importing this module.
settings = Settings()
