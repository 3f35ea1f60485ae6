"""Resolve a ``ResumeTheme`` into concrete rendering parameters."""

from __future__ import annotations

from dataclasses import dataclass

from resume_studio.models.content import ResumeTheme

FONT_STACKS = {
    "sourceSans": "'Source Sans 3', Arial, sans-serif",
    "merriweather": "'Merriweather', Georgia, serif",
    "montserrat": "'Montserrat', Helvetica, sans-serif",
}

# Word processors only get the first family of the stack.
DOCX_FONTS = {
    "sourceSans": "Source Sans 3",
    "merriweather": "Merriweather",
    "montserrat": "Montserrat",
}

# Core PDF fonts used by the pure-Python engine.
FPDF_FONTS = {
    "sourceSans": "Helvetica",
    "merriweather": "Times",
    "montserrat": "Helvetica",
}

FONT_SIZES_PX = {"normal": 14, "large": 16}
LINE_HEIGHTS = {"compact": 1.35, "comfortable": 1.5}

# spacing -> (section gap, item gap, page padding) in px
SPACING_PX = {
    "compact": (10, 6, 20),
    "comfortable": (16, 12, 28),
}

# spacing -> (paragraph spacing after, line spacing) in twips
DOCX_SPACING = {
    "compact": (120, 260),
    "comfortable": (190, 300),
}

DOCX_NAME_SIZES = {"normal": 36, "large": 42}  # half-points


@dataclass(frozen=True)
class ResolvedTheme:
    primary_color: str
    secondary_color: str
    text_color: str
    font: str
    font_family: str
    font_size_px: int
    line_height: float
    section_gap_px: int
    item_gap_px: int
    page_padding_px: int
    docx_font: str
    docx_spacing_after: int
    docx_line: int
    docx_name_size: int

    @property
    def fpdf_font(self) -> str:
        return FPDF_FONTS.get(self.font, "Helvetica")

    @property
    def font_size_pt(self) -> float:
        return self.font_size_px * 0.75


def hex_to_rgb(value: str) -> tuple[int, int, int]:
    """"#0A66C2" -> (10, 102, 194)."""
    token = value.lstrip("#")
    return int(token[0:2], 16), int(token[2:4], 16), int(token[4:6], 16)


def resolve_theme(theme: ResumeTheme) -> ResolvedTheme:
    section_gap, item_gap, padding = SPACING_PX[theme.spacing]
    spacing_after, line = DOCX_SPACING[theme.spacing]
    return ResolvedTheme(
        primary_color=theme.primary_color.upper(),
        secondary_color=theme.secondary_color.upper(),
        text_color=theme.text_color.upper(),
        font=theme.font,
        font_family=FONT_STACKS[theme.font],
        font_size_px=FONT_SIZES_PX[theme.font_size_level],
        line_height=LINE_HEIGHTS[theme.spacing],
        section_gap_px=section_gap,
        item_gap_px=item_gap,
        page_padding_px=padding,
        docx_font=DOCX_FONTS[theme.font],
        docx_spacing_after=spacing_after,
        docx_line=line,
        docx_name_size=DOCX_NAME_SIZES[theme.font_size_level],
    )
