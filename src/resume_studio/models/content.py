"""Pydantic models for résumé content and theme."""

from __future__ import annotations

import uuid
from typing import Literal, get_args

from pydantic import BaseModel, Field

TemplateId = Literal["minimal", "modern", "professional", "executive", "creative"]
SectionType = Literal[
    "summary",
    "experience",
    "education",
    "skills",
    "projects",
    "certifications",
    "languages",
    "custom",
]
FontOption = Literal["sourceSans", "merriweather", "montserrat"]
SpacingOption = Literal["compact", "comfortable"]
FontSizeLevel = Literal["normal", "large"]
LayoutColumn = Literal["auto", "left", "right"]

TEMPLATE_IDS: tuple[str, ...] = get_args(TemplateId)
SECTION_TYPES: tuple[str, ...] = get_args(SectionType)
FONT_OPTIONS: tuple[str, ...] = get_args(FontOption)
SPACING_OPTIONS: tuple[str, ...] = get_args(SpacingOption)
FONT_SIZE_LEVELS: tuple[str, ...] = get_args(FontSizeLevel)
LAYOUT_COLUMNS: tuple[str, ...] = get_args(LayoutColumn)

# Expected item keys per typed section; "custom" items are free-form.
SECTION_FIELDS: dict[str, tuple[str, ...]] = {
    "summary": ("text",),
    "experience": ("role", "company", "startDate", "endDate", "location", "description"),
    "education": ("degree", "institution", "startDate", "endDate", "description"),
    "skills": ("name",),
    "projects": ("name", "link", "description"),
    "certifications": ("name", "issuer", "year"),
    "languages": ("language", "level"),
}

HEX_COLOR_PATTERN = r"^#[0-9A-Fa-f]{6}$"


def new_id() -> str:
    return str(uuid.uuid4())


def empty_fields(section_type: str) -> dict[str, str]:
    """All-empty field mapping for a freshly created item."""
    if section_type == "custom":
        return {"field_1": ""}
    return {key: "" for key in SECTION_FIELDS[section_type]}


class HeaderContent(BaseModel):
    full_name: str = Field("", alias="fullName")
    role: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    website: str = ""
    linked_in: str = Field("", alias="linkedIn")
    github: str = ""

    model_config = {"populate_by_name": True}

    def contact_values(self, include_website: bool = True) -> list[str]:
        """Non-empty contact lines in display order."""
        values = [self.email, self.phone, self.location]
        if include_website:
            values.append(self.website)
        values += [self.linked_in, self.github]
        return [v.strip() for v in values if v and v.strip()]


class SectionItem(BaseModel):
    id: str = Field(default_factory=new_id)
    # Insertion order is display order.
    fields: dict[str, str] = Field(default_factory=dict)


class ResumeSection(BaseModel):
    id: str = Field(default_factory=new_id)
    type: SectionType
    title: str
    items: list[SectionItem] = Field(default_factory=list)
    page_break_before: bool = Field(False, alias="pageBreakBefore")
    layout_column: LayoutColumn = Field("auto", alias="layoutColumn")

    model_config = {"populate_by_name": True}

    @classmethod
    def create(cls, section_type: str, title: str | None = None) -> ResumeSection:
        """New section holding exactly one empty item."""
        from resume_studio.models.defaults import default_section_title

        return cls(
            type=section_type,
            title=title or default_section_title(section_type),
            items=[SectionItem(fields=empty_fields(section_type))],
        )


class ResumeContent(BaseModel):
    header: HeaderContent = Field(default_factory=HeaderContent)
    sections: list[ResumeSection] = Field(default_factory=list)


class ResumeTheme(BaseModel):
    primary_color: str = Field("#0A66C2", alias="primaryColor", pattern=HEX_COLOR_PATTERN)
    secondary_color: str = Field("#1A3A5F", alias="secondaryColor", pattern=HEX_COLOR_PATTERN)
    text_color: str = Field("#1C1E21", alias="textColor", pattern=HEX_COLOR_PATTERN)
    font: FontOption = "sourceSans"
    spacing: SpacingOption = "comfortable"
    font_size_level: FontSizeLevel = Field("normal", alias="fontSizeLevel")

    model_config = {"populate_by_name": True}
