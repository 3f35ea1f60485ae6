"""Template rendering: content + theme -> layout tree -> HTML."""

from resume_studio.rendering.html import render_html
from resume_studio.rendering.layout import ResumeLayout
from resume_studio.rendering.pagination import estimate_page_breaks
from resume_studio.rendering.strategies import available_templates, is_sidebar_section, render_layout
from resume_studio.rendering.theme import ResolvedTheme, resolve_theme

__all__ = [
    "ResolvedTheme",
    "ResumeLayout",
    "available_templates",
    "estimate_page_breaks",
    "is_sidebar_section",
    "render_html",
    "render_layout",
    "resolve_theme",
]
