"""Template layout strategies.

Each template is a ``LayoutStrategy`` registered under its template id. All
strategies share ``format_section`` for item formatting and differ only in
how they place the header and the formatted sections.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from resume_studio.importer.vocabulary import load_vocabulary
from resume_studio.models.content import HeaderContent, ResumeContent, ResumeSection, ResumeTheme
from resume_studio.rendering.formatter import format_section
from resume_studio.rendering.layout import Column, GridRow, HeaderBlock, ResumeLayout
from resume_studio.rendering.theme import ResolvedTheme, resolve_theme

logger = logging.getLogger(__name__)

SIDEBAR_TYPES = frozenset({"skills", "languages", "certifications"})
DEFAULT_TEMPLATE = "minimal"


def is_sidebar_section(section: ResumeSection) -> bool:
    """Sidebar rule for two-column templates.

    Skills, languages and certifications always go to the sidebar; custom
    sections go there when their title looks like contact or personal data.
    """
    if section.type in SIDEBAR_TYPES:
        return True
    if section.type != "custom":
        return False
    return load_vocabulary().is_sidebar_title(section.title)


def split_sidebar(sections: list[ResumeSection]) -> tuple[list[ResumeSection], list[ResumeSection]]:
    """(sidebar, main), each keeping the original relative order."""
    side = [s for s in sections if is_sidebar_section(s)]
    main = [s for s in sections if not is_sidebar_section(s)]
    return side, main


def pack_creative_rows(sections: list[ResumeSection]) -> list[tuple[ResumeSection | None, ResumeSection | None]]:
    """Pack sections into (left, right) rows for the creative grid.

    Auto sections fill the slot the cursor points at; explicit left/right
    sections fill that slot. Either opens a new row when the slot is taken
    in the last row. Every placement moves the cursor: to the right slot
    after a left placement if it is still free, otherwise back to the left.
    Never returns an empty list.
    """
    rows: list[list[ResumeSection | None]] = []
    auto_next = "left"

    for section in sections:
        column = section.layout_column if section.layout_column in ("left", "right") else "auto"
        row = rows[-1] if rows else None

        if column == "auto":
            slot = 0 if auto_next == "left" else 1
        else:
            slot = 0 if column == "left" else 1

        if row is None or row[slot] is not None:
            row = [None, None]
            rows.append(row)
        row[slot] = section

        if slot == 0:
            auto_next = "right" if row[1] is None else "left"
        else:
            auto_next = "left"

    if not rows:
        return [(None, None)]
    return [(left, right) for left, right in rows]


def build_header(header: HeaderContent, *, include_website: bool = True) -> HeaderBlock:
    return HeaderBlock(
        full_name=header.full_name.strip(),
        role=header.role.strip(),
        contacts=tuple(header.contact_values(include_website=include_website)),
    )


class LayoutStrategy(ABC):
    template_id: str = ""

    @abstractmethod
    def build(self, content: ResumeContent, theme: ResolvedTheme, title: str) -> ResumeLayout:
        ...


_REGISTRY: dict[str, LayoutStrategy] = {}


def register(cls: type[LayoutStrategy]) -> type[LayoutStrategy]:
    _REGISTRY[cls.template_id] = cls()
    return cls


def get_strategy(template_id: str) -> LayoutStrategy:
    """Strategy for ``template_id``; unknown ids use the minimal template."""
    strategy = _REGISTRY.get(template_id)
    if strategy is None:
        logger.debug("Unknown template %r, using %s", template_id, DEFAULT_TEMPLATE)
        strategy = _REGISTRY[DEFAULT_TEMPLATE]
    return strategy


def available_templates() -> tuple[str, ...]:
    return tuple(_REGISTRY)


class _SingleColumn(LayoutStrategy):
    def build(self, content: ResumeContent, theme: ResolvedTheme, title: str) -> ResumeLayout:
        return ResumeLayout(
            template_id=self.template_id,
            title=title,
            theme=theme,
            header=build_header(content.header),
            columns=(Column(role="main", sections=tuple(format_section(s) for s in content.sections)),),
        )


@register
class MinimalLayout(_SingleColumn):
    template_id = "minimal"


@register
class ModernLayout(_SingleColumn):
    """Gradient hero header with every section drawn as a card."""

    template_id = "modern"


@register
class ProfessionalLayout(LayoutStrategy):
    template_id = "professional"
    aside_width = 30

    def build(self, content: ResumeContent, theme: ResolvedTheme, title: str) -> ResumeLayout:
        side, main = split_sidebar(content.sections)
        return ResumeLayout(
            template_id=self.template_id,
            title=title,
            theme=theme,
            header=build_header(content.header, include_website=False),
            columns=(
                Column(
                    role="aside",
                    sections=tuple(format_section(s, dense=True) for s in side),
                    width_pct=self.aside_width,
                ),
                Column(
                    role="main",
                    sections=tuple(format_section(s) for s in main),
                    width_pct=100 - self.aside_width,
                ),
            ),
            header_placement="aside",
        )


@register
class ExecutiveLayout(LayoutStrategy):
    template_id = "executive"
    aside_width = 34

    def build(self, content: ResumeContent, theme: ResolvedTheme, title: str) -> ResumeLayout:
        side, main = split_sidebar(content.sections)
        main_column = Column(role="main", sections=tuple(format_section(s) for s in main))
        if not side:
            columns: tuple[Column, ...] = (main_column,)
        else:
            columns = (
                Column(
                    role="aside",
                    sections=tuple(format_section(s, dense=True) for s in side),
                    width_pct=self.aside_width,
                ),
                Column(role="main", sections=main_column.sections, width_pct=100 - self.aside_width),
            )
        return ResumeLayout(
            template_id=self.template_id,
            title=title,
            theme=theme,
            header=build_header(content.header),
            columns=columns,
        )


@register
class CreativeLayout(LayoutStrategy):
    template_id = "creative"

    def build(self, content: ResumeContent, theme: ResolvedTheme, title: str) -> ResumeLayout:
        rows = tuple(
            GridRow(
                left=format_section(left) if left is not None else None,
                right=format_section(right) if right is not None else None,
            )
            for left, right in pack_creative_rows(content.sections)
        )
        return ResumeLayout(
            template_id=self.template_id,
            title=title,
            theme=theme,
            header=build_header(content.header),
            rows=rows,
        )


def render_layout(
    content: ResumeContent,
    theme: ResumeTheme,
    template_id: str,
    *,
    title: str = "",
) -> ResumeLayout:
    """Lay out ``content`` with the given template; pure and deterministic."""
    return get_strategy(template_id).build(content, resolve_theme(theme), title)
