"""Template-independent layout tree produced by the renderer.

Every node is a frozen dataclass built from tuples, so two renders of the
same input compare equal and the tree can be handed to any emitter.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from resume_studio.rendering.theme import ResolvedTheme

LineKind = Literal["title", "meta", "text", "link", "tags", "field"]
EMPTY_SECTION_PLACEHOLDER = "Sem conteúdo."


@dataclass(frozen=True)
class RenderedLine:
    """One visual line of an item.

    ``tags`` lines carry their chips in ``values``; ``field`` lines carry the
    custom key in ``label``.
    """

    kind: LineKind
    text: str = ""
    label: str = ""
    values: tuple[str, ...] = ()

    @property
    def plain(self) -> str:
        if self.kind == "tags":
            return ", ".join(self.values)
        if self.kind == "field":
            return f"{self.label}: {self.text}"
        return self.text


@dataclass(frozen=True)
class RenderedItem:
    item_id: str
    lines: tuple[RenderedLine, ...]


@dataclass(frozen=True)
class RenderedSection:
    section_id: str
    section_type: str
    title: str
    items: tuple[RenderedItem, ...]
    page_break_before: bool = False
    dense: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.items

    @property
    def placeholder(self) -> str:
        return EMPTY_SECTION_PLACEHOLDER if self.is_empty else ""


@dataclass(frozen=True)
class HeaderBlock:
    full_name: str
    role: str
    contacts: tuple[str, ...] = ()


@dataclass(frozen=True)
class Column:
    """A vertical stack of sections; ``role`` is main, aside or slot."""

    role: str
    sections: tuple[RenderedSection, ...] = ()
    width_pct: int = 100


@dataclass(frozen=True)
class GridRow:
    """Two-slot creative row; ``None`` slots render as blank spacers."""

    left: RenderedSection | None = None
    right: RenderedSection | None = None


@dataclass(frozen=True)
class ResumeLayout:
    template_id: str
    title: str
    theme: ResolvedTheme
    header: HeaderBlock
    columns: tuple[Column, ...] = ()
    rows: tuple[GridRow, ...] = ()
    # "aside" when the header sits in the sidebar (professional).
    header_placement: str = "main"

    @property
    def aside(self) -> Column | None:
        return next((c for c in self.columns if c.role == "aside"), None)

    @property
    def main(self) -> Column | None:
        return next((c for c in self.columns if c.role == "main"), None)

    def sections(self) -> tuple[RenderedSection, ...]:
        """All rendered sections in reading order (aside first)."""
        if self.rows:
            found: list[RenderedSection] = []
            for row in self.rows:
                found.extend(s for s in (row.left, row.right) if s is not None)
            return tuple(found)
        return tuple(s for column in self.columns for s in column.sections)
