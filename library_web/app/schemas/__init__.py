"""
Pydantic schema definitions for books, people and loans.

Schemas validate form input before it reaches the services and carry
rows from the database to the templates.
"""
