"""Typed views of section items, one variant per section type.

Stored items keep a plain ``fields`` mapping so the wire format stays
stable; the renderer reads them through these variants instead.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Union

from resume_studio.models.content import SectionItem


def _wire_key(attr: str) -> str:
    head, *rest = attr.split("_")
    return head + "".join(part.capitalize() for part in rest)


def _read(fields: dict[str, str], key: str) -> str:
    value = fields.get(key, "")
    return value.strip() if isinstance(value, str) else ""


class _FromFields:
    @classmethod
    def from_fields(cls, fields: dict[str, str]):
        return cls(**{f.name: _read(fields, _wire_key(f.name)) for f in dataclasses.fields(cls)})


@dataclass(frozen=True)
class SummaryEntry(_FromFields):
    text: str = ""


@dataclass(frozen=True)
class ExperienceEntry(_FromFields):
    role: str = ""
    company: str = ""
    start_date: str = ""
    end_date: str = ""
    location: str = ""
    description: str = ""


@dataclass(frozen=True)
class EducationEntry(_FromFields):
    degree: str = ""
    institution: str = ""
    start_date: str = ""
    end_date: str = ""
    description: str = ""


@dataclass(frozen=True)
class SkillsEntry(_FromFields):
    name: str = ""


@dataclass(frozen=True)
class ProjectEntry(_FromFields):
    name: str = ""
    link: str = ""
    description: str = ""


@dataclass(frozen=True)
class CertificationEntry(_FromFields):
    name: str = ""
    issuer: str = ""
    year: str = ""


@dataclass(frozen=True)
class LanguageEntry(_FromFields):
    language: str = ""
    level: str = ""


@dataclass(frozen=True)
class CustomEntry:
    fields: tuple[tuple[str, str], ...] = ()

    @classmethod
    def from_fields(cls, fields: dict[str, str]) -> CustomEntry:
        return cls(fields=tuple((key, value) for key, value in fields.items() if isinstance(value, str)))


Entry = Union[
    SummaryEntry,
    ExperienceEntry,
    EducationEntry,
    SkillsEntry,
    ProjectEntry,
    CertificationEntry,
    LanguageEntry,
    CustomEntry,
]

ENTRY_TYPES: dict[str, type] = {
    "summary": SummaryEntry,
    "experience": ExperienceEntry,
    "education": EducationEntry,
    "skills": SkillsEntry,
    "projects": ProjectEntry,
    "certifications": CertificationEntry,
    "languages": LanguageEntry,
    "custom": CustomEntry,
}


def entry_for(section_type: str, item: SectionItem) -> Entry:
    """Build the typed variant for ``item`` inside a section of ``section_type``."""
    return ENTRY_TYPES.get(section_type, CustomEntry).from_fields(item.fields)
