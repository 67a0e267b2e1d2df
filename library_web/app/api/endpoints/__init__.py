"""
Endpoint subpackage.

Each module defines an APIRouter rendering the HTML pages of one
domain (books, people).
"""
