"""
Page routers.

``router.py`` aggregates the domain routers defined in ``endpoints``
and is included by ``main.create_app``.
"""
