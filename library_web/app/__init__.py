"""
Application package initializer.

The project is organised into logical pieces: ``core`` holds
configuration, logging, database access and the template
environment; ``schemas`` the pydantic models and form validation;
``services`` the business logic; and ``api`` the page routers.
"""

from .main import app  # noqa: F401
