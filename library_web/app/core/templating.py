"""
Jinja2 template environment shared by all page handlers.

Templates live in ``library_web/app/templates``.  A few filters are
registered for rendering timestamps in a compact form.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

from fastapi.templating import Jinja2Templates

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


def format_timestamp(value: Optional[datetime]) -> str:
    if value is None:
        return ""
    return value.strftime("%Y-%m-%d %H:%M")


templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["timestamp"] = format_timestamp
