"""DOCX export built from the layout tree with python-docx."""

from __future__ import annotations

import logging
from io import BytesIO

from docx import Document
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Emu, Mm, Pt, RGBColor, Twips

from resume_studio.rendering.layout import RenderedLine, RenderedSection, ResumeLayout
from resume_studio.rendering.theme import ResolvedTheme, hex_to_rgb

logger = logging.getLogger(__name__)

A4_WIDTH_MM = 210
A4_HEIGHT_MM = 297
PAGE_MARGIN_MM = 18
SIDEBAR_SHARE = 0.31
LINE_GAP_TWIPS = 60
META_COLOR = RGBColor(0x4F, 0x5F, 0x72)
CONTACT_HEADING = "Contato"


def _rgb(value: str) -> RGBColor:
    return RGBColor(*hex_to_rgb(value))


def _paragraph(container, theme: ResolvedTheme, text: str = "", *, after: int | None = None):
    """Add a paragraph to a document or table cell with the theme's spacing."""
    if _is_fresh_cell(container):
        para = container.paragraphs[0]
        if text:
            para.add_run(text)
    else:
        para = container.add_paragraph(text)
    fmt = para.paragraph_format
    fmt.space_after = Twips(theme.docx_spacing_after if after is None else after)
    fmt.line_spacing = theme.docx_line / 240
    return para


def _is_fresh_cell(container) -> bool:
    """A new table cell already holds one empty paragraph; reuse it."""
    paragraphs = getattr(container, "paragraphs", None)
    if not hasattr(container, "_tc") or not paragraphs or len(paragraphs) != 1:
        return False
    return not paragraphs[0].text and not paragraphs[0].runs


def _heading(container, theme: ResolvedTheme, text: str, *, page_break_before: bool = False):
    para = _paragraph(container, theme)
    para.style = "Heading 2"
    run = para.add_run(text)
    run.bold = True
    run.font.color.rgb = _rgb(theme.primary_color)
    para.paragraph_format.page_break_before = page_break_before
    return para


def _line(container, theme: ResolvedTheme, line: RenderedLine, after: int) -> None:
    para = _paragraph(container, theme, after=after)
    if line.kind == "field":
        label = para.add_run(f"{line.label}: ")
        label.bold = True
        para.add_run(line.text)
        return
    run = para.add_run(line.plain)
    if line.kind == "title":
        run.bold = True
    elif line.kind == "meta":
        run.font.color.rgb = META_COLOR
    elif line.kind == "link":
        run.font.color.rgb = _rgb(theme.primary_color)
        run.underline = True


def _section(container, theme: ResolvedTheme, section: RenderedSection) -> None:
    _heading(container, theme, section.title, page_break_before=section.page_break_before)
    if section.is_empty:
        _paragraph(container, theme, section.placeholder)
        return
    for item in section.items:
        last = len(item.lines) - 1
        for index, line in enumerate(item.lines):
            _line(container, theme, line, theme.docx_spacing_after if index == last else LINE_GAP_TWIPS)


def _header(container, layout: ResumeLayout) -> None:
    theme = layout.theme
    header = layout.header
    name = _paragraph(container, theme, after=120)
    name.style = "Title"
    run = name.add_run(header.full_name)
    run.bold = True
    run.font.size = Pt(theme.docx_name_size / 2)
    run.font.color.rgb = _rgb(theme.secondary_color)
    _paragraph(container, theme, header.role, after=120)
    _paragraph(container, theme, " | ".join(header.contacts))


def _set_cell_borders(cell, right_color: str) -> None:
    """Hide every border of ``cell`` except a right rule in ``right_color``."""
    tc_pr = cell._tc.get_or_add_tcPr()
    borders = OxmlElement("w:tcBorders")
    for edge in ("top", "left", "bottom", "right"):
        element = OxmlElement(f"w:{edge}")
        if edge == "right":
            element.set(qn("w:val"), "single")
            element.set(qn("w:sz"), "6")
            element.set(qn("w:color"), right_color.lstrip("#"))
        else:
            element.set(qn("w:val"), "nil")
        borders.append(element)
    tc_pr.append(borders)


def _new_document(theme: ResolvedTheme):
    doc = Document()
    section = doc.sections[0]
    section.page_width = Mm(A4_WIDTH_MM)
    section.page_height = Mm(A4_HEIGHT_MM)
    for side in ("left_margin", "right_margin", "top_margin", "bottom_margin"):
        setattr(section, side, Mm(PAGE_MARGIN_MM))

    normal = doc.styles["Normal"]
    normal.font.name = theme.docx_font
    normal.font.size = Pt(theme.font_size_pt)
    normal.font.color.rgb = _rgb(theme.text_color)
    return doc


def _build_professional(doc, layout: ResumeLayout) -> None:
    theme = layout.theme
    usable = Mm(A4_WIDTH_MM - 2 * PAGE_MARGIN_MM)
    table = doc.add_table(rows=1, cols=2)
    table.autofit = False
    side_cell, main_cell = table.rows[0].cells
    side_cell.width = Emu(int(usable * SIDEBAR_SHARE))
    main_cell.width = Emu(usable - side_cell.width)
    _set_cell_borders(side_cell, theme.primary_color)

    _heading(side_cell, theme, CONTACT_HEADING)
    for value in layout.header.contacts:
        _paragraph(side_cell, theme, value, after=LINE_GAP_TWIPS)
    for section in layout.aside.sections if layout.aside else ():
        _section(side_cell, theme, section)

    _header(main_cell, layout)
    for section in layout.main.sections if layout.main else ():
        _section(main_cell, theme, section)


def render_docx(layout: ResumeLayout) -> bytes:
    """Render ``layout`` to DOCX bytes.

    The professional template becomes a two-cell table (sidebar and main);
    every other template flows in one column.
    """
    doc = _new_document(layout.theme)
    if layout.template_id == "professional":
        _build_professional(doc, layout)
    else:
        _header(doc, layout)
        for section in layout.sections():
            _section(doc, layout.theme, section)

    buf = BytesIO()
    doc.save(buf)
    logger.info("Rendered DOCX (%s template)", layout.template_id)
    return buf.getvalue()
