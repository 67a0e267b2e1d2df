"""
Top-level package for the library web application.

All functionality lives in submodules under ``app``; importing
``library_web.app`` builds the FastAPI application.
"""

__all__ = []
