"""Per-section-type item formatting shared by every template and emitter."""

from __future__ import annotations

from resume_studio.models.content import ResumeSection, SectionItem
from resume_studio.models.entries import (
    CertificationEntry,
    CustomEntry,
    EducationEntry,
    Entry,
    ExperienceEntry,
    LanguageEntry,
    ProjectEntry,
    SkillsEntry,
    SummaryEntry,
    entry_for,
)
from resume_studio.rendering.layout import RenderedItem, RenderedLine, RenderedSection
from resume_studio.utils.text import join_non_empty, split_skills


def _line(kind: str, text: str) -> list[RenderedLine]:
    return [RenderedLine(kind=kind, text=text)] if text else []


def _period(start: str, end: str) -> str:
    return join_non_empty([start, end], " - ")


def _year_suffix(issuer: str, year: str) -> str:
    if issuer and year:
        return f"{issuer} ({year})"
    return issuer or year


def format_entry(entry: Entry, *, dense: bool = False) -> tuple[RenderedLine, ...]:
    """Lines for one typed entry; empty parts are dropped."""
    lines: list[RenderedLine] = []
    if isinstance(entry, SummaryEntry):
        lines += _line("text", entry.text)
    elif isinstance(entry, ExperienceEntry):
        lines += _line("title", join_non_empty([entry.role, entry.company], " - "))
        lines += _line("meta", join_non_empty([_period(entry.start_date, entry.end_date), entry.location], " | "))
        lines += _line("text", entry.description)
    elif isinstance(entry, EducationEntry):
        lines += _line("title", entry.degree)
        lines += _line("meta", join_non_empty([entry.institution, _period(entry.start_date, entry.end_date)], " | "))
        lines += _line("text", entry.description)
    elif isinstance(entry, SkillsEntry):
        skills = split_skills(entry.name)
        if dense or len(skills) <= 1:
            lines += _line("text", entry.name)
        else:
            lines.append(RenderedLine(kind="tags", values=tuple(skills)))
    elif isinstance(entry, ProjectEntry):
        lines += _line("title", entry.name)
        lines += _line("link", entry.link)
        lines += _line("text", entry.description)
    elif isinstance(entry, CertificationEntry):
        lines += _line("title", entry.name)
        lines += _line("meta", _year_suffix(entry.issuer, entry.year))
    elif isinstance(entry, LanguageEntry):
        lines += _line("title", join_non_empty([entry.language, entry.level], ": "))
    elif isinstance(entry, CustomEntry):
        for key, value in entry.fields:
            if value.strip():
                lines.append(RenderedLine(kind="field", label=key, text=value.strip()))
    return tuple(lines)


def format_item(section_type: str, item: SectionItem, *, dense: bool = False) -> RenderedItem:
    return RenderedItem(
        item_id=item.id,
        lines=format_entry(entry_for(section_type, item), dense=dense),
    )


def format_section(section: ResumeSection, *, dense: bool = False) -> RenderedSection:
    """Format every item; items that produce no line are left out.

    A section left with no item renders its placeholder instead.
    """
    items = tuple(
        rendered
        for rendered in (format_item(section.type, item, dense=dense) for item in section.items)
        if rendered.lines
    )
    return RenderedSection(
        section_id=section.id,
        section_type=section.type,
        title=section.title,
        items=items,
        page_break_before=section.page_break_before,
        dense=dense,
    )
