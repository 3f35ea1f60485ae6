"""Serialize a ``ResumeLayout`` to a standalone, print-ready HTML document."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from resume_studio.rendering.layout import ResumeLayout
from resume_studio.rendering.theme import hex_to_rgb

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"


def tint(color: str, weight: float) -> str:
    """Mix ``color`` with white; ``weight`` is the share of ``color``."""
    r, g, b = hex_to_rgb(color)
    mixed = (round(c * weight + 255 * (1 - weight)) for c in (r, g, b))
    return "#{:02X}{:02X}{:02X}".format(*mixed)


@lru_cache(maxsize=1)
def _environment() -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=True,
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["tint"] = tint
    return env


def render_html(layout: ResumeLayout) -> str:
    """Render ``layout`` with its template's Jinja2 page."""
    logger.debug("Rendering HTML with the %s template", layout.template_id)
    env = _environment()
    template = env.get_template(f"{layout.template_id}.html")
    return template.render(layout=layout, theme=layout.theme)
