"""Heuristic auto-pagination.

Estimates section heights from the formatted lines and marks the first
section that would overflow each A4 page with ``page_break_before``. The
estimate only needs to agree with the browser often enough to spare the
user manual breaks.
"""

from __future__ import annotations

import math
from typing import Protocol

from resume_studio.models.content import ResumeContent, ResumeSection, ResumeTheme
from resume_studio.rendering.formatter import format_section
from resume_studio.rendering.layout import RenderedSection
from resume_studio.rendering.strategies import split_sidebar
from resume_studio.rendering.theme import ResolvedTheme, resolve_theme

PAGE_HEIGHT_PX = 1123
PAGE_WIDTH_PX = 794
HEADER_HEIGHT_PX = {
    "minimal": 130,
    "modern": 150,
    "professional": 0,
    "executive": 110,
    "creative": 140,
}
# Share of the page width available to main-column text.
MAIN_WIDTH_RATIO = {
    "minimal": 1.0,
    "modern": 0.94,
    "professional": 0.70,
    "executive": 0.66,
    "creative": 0.5,
}
SECTION_TITLE_PX = 30
AVERAGE_CHAR_WIDTH = 0.52  # in ems


class PageBreakEstimator(Protocol):
    def __call__(self, content: ResumeContent, theme: ResumeTheme, template_id: str) -> ResumeContent: ...


def _chars_per_line(theme: ResolvedTheme, width_px: float) -> int:
    return max(20, int(width_px / (theme.font_size_px * AVERAGE_CHAR_WIDTH)))


def estimate_section_height(section: RenderedSection, theme: ResolvedTheme, width_px: float) -> float:
    """Approximate rendered height of a formatted section, in px."""
    line_px = theme.font_size_px * theme.line_height
    per_line = _chars_per_line(theme, width_px)
    height = SECTION_TITLE_PX + theme.section_gap_px
    if section.is_empty:
        return height + line_px
    for item in section.items:
        for line in item.lines:
            rows = sum(max(1, math.ceil(len(chunk) / per_line)) for chunk in line.plain.split("\n"))
            height += rows * line_px
        height += theme.item_gap_px
    return height


def estimate_page_breaks(content: ResumeContent, theme: ResumeTheme, template_id: str) -> ResumeContent:
    """Copy of ``content`` with page breaks set where each page would overflow.

    Existing breaks are kept and restart the page. The first section of a page
    stays there even when it is taller than the page. Two-column templates are
    estimated by their main column.
    """
    resolved = resolve_theme(theme)
    updated = content.model_copy(deep=True)

    sections: list[ResumeSection] = updated.sections
    if template_id in ("professional", "executive"):
        _, sections = split_sidebar(updated.sections)

    width = (PAGE_WIDTH_PX - 2 * resolved.page_padding_px) * MAIN_WIDTH_RATIO.get(template_id, 1.0)
    usable = PAGE_HEIGHT_PX - 2 * resolved.page_padding_px
    used = float(HEADER_HEIGHT_PX.get(template_id, 0))
    placed = 0  # sections on the current page

    for section in sections:
        height = estimate_section_height(format_section(section), resolved, width)
        if section.page_break_before:
            used, placed = height, 1
            continue
        if placed and used + height > usable:
            section.page_break_before = True
            used, placed = height, 1
        else:
            used += height
            placed += 1
    return updated
