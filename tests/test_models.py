"""Tests for the résumé content models and typed entries."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from resume_studio.models import (
    SECTION_FIELDS,
    SECTION_TYPES,
    HeaderContent,
    Resume,
    ResumeContent,
    ResumeSection,
    ResumeTheme,
    ResumeVersion,
    SectionItem,
    build_default_content,
    default_section_title,
    default_theme,
    entry_for,
)
from resume_studio.models.entries import (
    CertificationEntry,
    CustomEntry,
    ExperienceEntry,
    LanguageEntry,
    SkillsEntry,
)


class TestHeaderContent:
    def test_accepts_camel_case_aliases(self):
        header = HeaderContent.model_validate({"fullName": "Ana", "linkedIn": "in/ana"})
        assert header.full_name == "Ana"
        assert header.linked_in == "in/ana"

    def test_dumps_camel_case_by_alias(self):
        dumped = HeaderContent(full_name="Ana").model_dump(by_alias=True)
        assert dumped["fullName"] == "Ana"
        assert "linkedIn" in dumped

    def test_contact_values_skip_blank_and_keep_order(self):
        header = HeaderContent(email="a@b.c", phone="  ", location="SP", website="w.dev", github="gh/a")
        assert header.contact_values() == ["a@b.c", "SP", "w.dev", "gh/a"]
        assert header.contact_values(include_website=False) == ["a@b.c", "SP", "gh/a"]


class TestResumeSection:
    @pytest.mark.parametrize("section_type", SECTION_TYPES)
    def test_create_holds_exactly_one_empty_item(self, section_type):
        section = ResumeSection.create(section_type)
        assert len(section.items) == 1
        assert not any(section.items[0].fields.values())
        assert section.title == default_section_title(section_type)

    def test_create_custom_uses_field_1(self):
        assert ResumeSection.create("custom").items[0].fields == {"field_1": ""}

    def test_typed_item_has_expected_keys(self):
        section = ResumeSection.create("experience")
        assert tuple(section.items[0].fields) == SECTION_FIELDS["experience"]

    def test_items_may_be_empty(self):
        section = ResumeSection(type="skills", title="Skills", items=[])
        assert section.items == []

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            ResumeSection(type="hobbies", title="Hobbies")

    def test_layout_column_defaults_to_auto(self):
        section = ResumeSection.model_validate({"type": "summary", "title": "R", "pageBreakBefore": True})
        assert section.layout_column == "auto"
        assert section.page_break_before is True

    def test_custom_fields_keep_insertion_order(self):
        item = SectionItem(fields={"z": "1", "a": "2", "m": "3"})
        restored = SectionItem.model_validate_json(item.model_dump_json())
        assert list(restored.fields) == ["z", "a", "m"]


class TestResumeTheme:
    def test_defaults(self):
        theme = default_theme()
        assert (theme.primary_color, theme.secondary_color, theme.text_color) == ("#0A66C2", "#1A3A5F", "#1C1E21")
        assert (theme.font, theme.spacing, theme.font_size_level) == ("sourceSans", "comfortable", "normal")

    @pytest.mark.parametrize("color", ["0A66C2", "#0A6", "red", "#GGGGGG"])
    def test_rejects_non_hex_colors(self, color):
        with pytest.raises(ValidationError):
            ResumeTheme(primary_color=color)

    def test_rejects_unknown_font(self):
        with pytest.raises(ValidationError):
            ResumeTheme(font="comicSans")


class TestDefaults:
    def test_default_content_has_all_typed_sections(self):
        content = build_default_content()
        assert [s.type for s in content.sections] == [
            "summary", "experience", "education", "skills", "projects", "certifications", "languages",
        ]
        assert content.header.full_name

    def test_default_content_ids_are_fresh(self):
        first, second = build_default_content(), build_default_content()
        assert first.sections[0].id != second.sections[0].id

    def test_default_titles_are_portuguese(self):
        assert default_section_title("experience") == "Experiência"
        assert default_section_title("custom") == "Nova seção"


class TestResumeAndVersion:
    def test_snapshot_is_a_deep_copy(self, sample_content):
        resume = Resume(owner_id="u1", title="CV", content=sample_content)
        snapshot = resume.snapshot()
        resume.content.sections[0].title = "Changed"
        assert snapshot.content.sections[0].title == "Resumo"
        assert snapshot.template_id == "minimal"

    def test_version_is_immutable(self, sample_content):
        resume = Resume(owner_id="u1", title="CV", content=sample_content)
        version = ResumeVersion(resume_id=resume.id, name="v1", snapshot=resume.snapshot())
        with pytest.raises(ValidationError):
            version.name = "v2"

    def test_resume_rejects_unknown_template(self, sample_content):
        with pytest.raises(ValidationError):
            Resume(owner_id="u1", title="CV", template_id="fancy", content=sample_content)


class TestEntries:
    def test_entry_for_reads_camel_case_keys(self):
        item = SectionItem(fields={"role": " Dev ", "startDate": "2020", "endDate": "2022"})
        entry = entry_for("experience", item)
        assert isinstance(entry, ExperienceEntry)
        assert entry.role == "Dev"
        assert entry.start_date == "2020"
        assert entry.company == ""

    def test_entry_for_each_variant(self):
        assert isinstance(entry_for("skills", SectionItem(fields={"name": "Go"})), SkillsEntry)
        assert isinstance(entry_for("languages", SectionItem(fields={})), LanguageEntry)
        assert isinstance(entry_for("certifications", SectionItem(fields={})), CertificationEntry)

    def test_custom_entry_keeps_order(self):
        entry = entry_for("custom", SectionItem(fields={"b": "2", "a": "1"}))
        assert isinstance(entry, CustomEntry)
        assert entry.fields == (("b", "2"), ("a", "1"))

    def test_content_round_trips_through_json(self, sample_content):
        restored = ResumeContent.model_validate_json(sample_content.model_dump_json(by_alias=True))
        assert restored == sample_content
