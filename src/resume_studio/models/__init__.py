"""Data models for résumé content, themes and versions."""

from resume_studio.models.content import (
    SECTION_FIELDS,
    SECTION_TYPES,
    TEMPLATE_IDS,
    HeaderContent,
    ResumeContent,
    ResumeSection,
    ResumeTheme,
    SectionItem,
)
from resume_studio.models.defaults import (
    build_default_content,
    default_section_title,
    default_theme,
)
from resume_studio.models.entries import entry_for
from resume_studio.models.resume import Resume, ResumeSnapshot, ResumeVersion

__all__ = [
    "HeaderContent",
    "Resume",
    "ResumeContent",
    "ResumeSection",
    "ResumeSnapshot",
    "ResumeTheme",
    "ResumeVersion",
    "SECTION_FIELDS",
    "SECTION_TYPES",
    "SectionItem",
    "TEMPLATE_IDS",
    "build_default_content",
    "default_section_title",
    "default_theme",
    "entry_for",
]
