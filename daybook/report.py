"""
Day-book reports.

Templates are Jinja2 files under daybook/templates; amounts go through the
`amount` filter so every column is formatted the same way.
"""
from __future__ import annotations
from functools import partial
from pathlib import Path
from jinja2 import Environment, FileSystemLoader, select_autoescape
from .formatting import format_amount
from .models import DayBook

TEMPLATE_DIR = Path(__file__).parent / "templates"

TEMPLATES = {
    "text": "daybook.txt.j2",
    "html": "daybook.html.j2",
}

FORMATS = ("text", "html", "json")


def _environment(grouping: str) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=select_autoescape(["html", "html.j2"]),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )
    env.filters["amount"] = partial(format_amount, grouping=grouping)
    return env


def render_day_book(day_book: DayBook, fmt: str = "text", *, grouping: str = "indian") -> str:
    """
    Render a day book as text, HTML or JSON.

    JSON keeps amounts as exact decimal strings; text and HTML use the
    display formatting.
    """
    if fmt == "json":
        return day_book.model_dump_json(indent=2) + "\n"
    if fmt not in TEMPLATES:
        raise ValueError(f"Unknown format: {fmt}. Valid: {', '.join(FORMATS)}")
    template = _environment(grouping).get_template(TEMPLATES[fmt])
    return template.render(
        summary=day_book.summary,
        receipts=day_book.receipts,
        payments=day_book.payments,
    )
