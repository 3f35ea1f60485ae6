"""Fallback PDF renderer using fpdf2 (pure Python, no system deps).

Draws the layout tree directly instead of interpreting HTML. Columns are
flattened into one flow (sidebar first) and page breaks start a new page.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fpdf import FPDF
from fpdf.enums import XPos, YPos
from fpdf.errors import FPDFException

from resume_studio.rendering.html import tint
from resume_studio.rendering.layout import RenderedLine, RenderedSection, ResumeLayout
from resume_studio.rendering.theme import hex_to_rgb

logger = logging.getLogger(__name__)

MM_PER_PX = 25.4 / 96
MM_PER_PT = 25.4 / 72
META_COLOR = (79, 95, 114)

# Unicode-capable (regular, bold) font pairs (macOS, Linux, Windows)
_UNICODE_FONT_PATHS = [
    ("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf", "/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"),
    ("/usr/share/fonts/dejavu/DejaVuSans.ttf", "/usr/share/fonts/dejavu/DejaVuSans-Bold.ttf"),
    ("/Library/Fonts/Arial Unicode.ttf", "/Library/Fonts/Arial Unicode.ttf"),
    ("C:/Windows/Fonts/arial.ttf", "C:/Windows/Fonts/arialbd.ttf"),
]
# Headers filled with the primary color.
_HERO_TEMPLATES = ("modern", "creative")


def _find_unicode_font() -> tuple[str, str] | None:
    """Search for a Unicode TTF font pair on the system."""
    for regular, bold in _UNICODE_FONT_PATHS:
        if Path(regular).exists() and Path(bold).exists():
            return regular, bold
    return None


def _safe_text(text: str, pdf: FPDF) -> str:
    """Ensure text is encodable by the current font. Replace if needed."""
    if pdf.is_ttf_font:
        return text
    # Built-in fonts only cover latin-1
    return text.encode("latin-1", errors="replace").decode("latin-1")


class _Writer:
    def __init__(self, layout: ResumeLayout):
        self.layout = layout
        self.theme = layout.theme
        margin = self.theme.page_padding_px * MM_PER_PX
        self.pdf = FPDF(orientation="portrait", unit="mm", format="A4")
        self.pdf.set_margins(margin, margin, margin)
        self.pdf.set_auto_page_break(auto=True, margin=margin)
        self.font = self._load_font()
        self.size = self.theme.font_size_pt
        self.line_h = self.size * self.theme.line_height * MM_PER_PT

    def _load_font(self) -> str:
        font_pair = _find_unicode_font()
        if font_pair:
            try:
                self.pdf.add_font("ResumeSans", "", font_pair[0])
                self.pdf.add_font("ResumeSans", "B", font_pair[1])
                return "ResumeSans"
            except (OSError, FPDFException):
                logger.debug("Failed to load font %s", font_pair[0])
        return self.theme.fpdf_font

    def _write(self, text: str, *, style: str = "", scale: float = 1.0,
               color: tuple[int, int, int] | None = None, link: str = "") -> None:
        self.pdf.set_font(self.font, style, self.size * scale)
        self.pdf.set_text_color(*(color or hex_to_rgb(self.theme.text_color)))
        self.pdf.multi_cell(
            0,
            self.line_h * scale,
            _safe_text(text, self.pdf),
            link=link,
            new_x=XPos.LMARGIN,
            new_y=YPos.NEXT,
        )

    def header(self) -> None:
        header = self.layout.header
        pdf = self.pdf
        hero = self.layout.template_id in _HERO_TEMPLATES
        color = (255, 255, 255) if hero else None
        if hero:
            contact_rows = 1 + len(" | ".join(header.contacts)) // 90
            height = pdf.t_margin * 2 + self.line_h * (2.2 + 1.2 + contact_rows)
            pdf.set_fill_color(*hex_to_rgb(self.theme.primary_color))
            pdf.rect(0, 0, pdf.w, height, style="F")
        if header.full_name:
            self._write(header.full_name, style="B", scale=2.0, color=color)
        if header.role:
            self._write(header.role, scale=1.2, color=color or hex_to_rgb(self.theme.secondary_color))
        if header.contacts:
            self._write(" | ".join(header.contacts), scale=0.92, color=color)
        if hero:
            pdf.set_y(max(pdf.get_y(), height) + 2)
        else:
            pdf.set_draw_color(*hex_to_rgb(self.theme.primary_color))
            pdf.set_line_width(0.8)
            pdf.line(pdf.l_margin, pdf.get_y() + 1, pdf.w - pdf.r_margin, pdf.get_y() + 1)
            pdf.ln(4)

    def _line(self, line: RenderedLine) -> None:
        primary = hex_to_rgb(self.theme.primary_color)
        if line.kind == "title":
            self._write(line.text, style="B")
        elif line.kind == "meta":
            self._write(line.text, scale=0.95, color=META_COLOR)
        elif line.kind == "link":
            self._write(line.text, color=primary, link=line.text)
        else:
            self._write(line.plain)

    def section(self, section: RenderedSection) -> None:
        pdf = self.pdf
        if section.page_break_before and pdf.get_y() > pdf.t_margin + 0.5:
            pdf.add_page()
        self._write(section.title.upper(), style="B", scale=0.9,
                    color=hex_to_rgb(self.theme.secondary_color))
        pdf.set_draw_color(*hex_to_rgb(tint(self.theme.secondary_color, 0.15)))
        pdf.set_line_width(0.2)
        pdf.line(pdf.l_margin, pdf.get_y(), pdf.w - pdf.r_margin, pdf.get_y())
        pdf.ln(1.5)
        if section.is_empty:
            self._write(section.placeholder, color=META_COLOR)
        for item in section.items:
            for line in item.lines:
                self._line(line)
            pdf.ln(self.theme.item_gap_px * MM_PER_PX)
        pdf.ln(self.theme.section_gap_px * MM_PER_PX)

    def render(self) -> bytes:
        self.pdf.add_page()
        self.header()
        for section in self.layout.sections():
            self.section(section)
        return bytes(self.pdf.output())


def layout_to_pdf_fpdf2(layout: ResumeLayout) -> bytes:
    """Fallback PDF generation using fpdf2 when no browser engine is available."""
    return _Writer(layout).render()
