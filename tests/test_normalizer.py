"""Tests for the layout normalizer (model draft -> strict résumé schema)."""

from __future__ import annotations

import uuid

import pytest

from resume_studio.config import ImporterConfig
from resume_studio.importer.normalizer import (
    normalize_header,
    normalize_hex_color,
    normalize_import,
    normalize_section_items,
    normalize_sections,
    normalize_template_id,
    normalize_theme,
)
from resume_studio.importer.vocabulary import load_vocabulary
from resume_studio.models.content import HeaderContent, ResumeContent, ResumeTheme
from resume_studio.models.defaults import build_default_content


def _import(draft, content: ResumeContent, theme: ResumeTheme | None = None):
    return normalize_import(
        draft,
        current_title="Meu CV",
        current_template_id="modern",
        current_content=content,
        current_theme=theme or ResumeTheme(),
    )


# ---------------------------------------------------------------------------
# Colors, enums and template ids
# ---------------------------------------------------------------------------


class TestColors:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("abc", "#AABBCC"),
            ("#abc", "#AABBCC"),
            ("1a2b3c", "#1A2B3C"),
            ("#0a66c2", "#0A66C2"),
            ("  #FFF ", "#FFFFFF"),
        ],
    )
    def test_valid_colors_are_normalized(self, value, expected):
        assert normalize_hex_color(value, "#000000") == expected

    @pytest.mark.parametrize("value", ["not-a-color", "#12345", "", None, 123, "#GGG"])
    def test_invalid_colors_fall_back(self, value):
        assert normalize_hex_color(value, "#123456") == "#123456"


class TestTheme:
    def test_mixed_valid_and_invalid_values(self):
        fallback = ResumeTheme(text_color="#222222")
        theme = normalize_theme(
            {
                "primaryColor": "abc",
                "secondaryColor": "1a2b3c",
                "textColor": "not-a-color",
                "font": "comicSans",
                "spacing": "compact",
                "fontSizeLevel": "huge",
            },
            fallback,
        )
        assert theme.primary_color == "#AABBCC"
        assert theme.secondary_color == "#1A2B3C"
        assert theme.text_color == "#222222"
        assert theme.font == fallback.font
        assert theme.spacing == "compact"
        assert theme.font_size_level == fallback.font_size_level

    @pytest.mark.parametrize("raw", [None, "dark", [], 42])
    def test_non_mapping_returns_fallback(self, raw):
        fallback = ResumeTheme(primary_color="#FF0000", spacing="compact")
        assert normalize_theme(raw, fallback) == fallback


@pytest.mark.parametrize(
    "value,expected",
    [("creative", "creative"), (" executive ", "executive"), ("fancy", "minimal"), (None, "minimal")],
)
def test_template_id(value, expected):
    assert normalize_template_id(value, "minimal") == expected


# ---------------------------------------------------------------------------
# Header
# ---------------------------------------------------------------------------


class TestHeader:
    def test_fields_fall_back_individually(self, sample_header):
        header = normalize_header({"fullName": "  Maria   Lima ", "email": 42, "role": ""}, sample_header)
        assert header.full_name == "Maria Lima"
        assert header.email == sample_header.email
        assert header.role == sample_header.role

    def test_alternate_keys(self):
        header = normalize_header({"name": "Maria", "linkedin": "in/maria"}, HeaderContent())
        assert header.full_name == "Maria"
        assert header.linked_in == "in/maria"

    def test_caps(self):
        header = normalize_header(
            {"fullName": "n" * 300, "phone": "9" * 300, "website": "w" * 300},
            HeaderContent(),
        )
        assert len(header.full_name) == 120
        assert len(header.phone) == 80
        assert len(header.website) == 160


# ---------------------------------------------------------------------------
# Sections and items
# ---------------------------------------------------------------------------


class TestSectionInference:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("Work Experience", "experience"),
            ("Formação Acadêmica", "education"),
            ("Habilidades Técnicas", "skills"),
            ("IDIOMAS", "languages"),
            ("Certificação AWS", "certifications"),
            ("Prêmios", "custom"),
            ("", "custom"),
        ],
    )
    def test_infer_section_type(self, value, expected):
        assert load_vocabulary().infer_section_type(value) == expected

    def test_title_used_when_type_missing(self):
        sections = normalize_sections([{"title": "Experiência Profissional", "items": []}], [])
        assert sections[0].type == "experience"
        assert sections[0].title == "Experiência Profissional"

    def test_missing_title_uses_default_label(self):
        sections = normalize_sections([{"type": "skills", "items": ["Go"]}], [])
        assert sections[0].title == "Habilidades"

    def test_layout_flags_kept_only_when_valid(self):
        sections = normalize_sections(
            [
                {"type": "summary", "pageBreakBefore": True, "layoutColumn": "right", "items": []},
                {"type": "summary", "pageBreakBefore": "yes", "layoutColumn": "center", "items": []},
            ],
            [],
        )
        assert sections[0].page_break_before is True
        assert sections[0].layout_column == "right"
        assert sections[1].page_break_before is False
        assert sections[1].layout_column == "auto"

    def test_at_most_ten_sections(self):
        raw = [{"type": "summary", "items": [{"text": str(i)}]} for i in range(15)]
        assert len(normalize_sections(raw, [])) == 10

    def test_non_dict_sections_skipped(self):
        sections = normalize_sections(["junk", 3, {"type": "summary", "items": []}], [])
        assert len(sections) == 1


class TestItemSurvival:
    def test_item_with_only_alias_company_is_kept(self):
        items = normalize_section_items("experience", [{"empresa": "Acme", "cargo": ""}])
        assert len(items) == 1
        assert items[0].fields["company"] == "Acme"
        assert items[0].fields["role"] == ""

    def test_all_empty_items_dropped(self):
        items = normalize_section_items(
            "experience",
            [{"role": "Dev"}, {"role": "", "company": "  "}, {"unknown": "x"}],
        )
        assert len(items) == 1
        assert items[0].fields["role"] == "Dev"

    def test_all_dropped_synthesizes_one_empty_item(self):
        items = normalize_section_items("education", [{"degree": ""}, {}, 7])
        assert len(items) == 1
        assert set(items[0].fields) == {"degree", "institution", "startDate", "endDate", "description"}
        assert not any(items[0].fields.values())

    def test_all_dropped_custom_synthesizes_field_1(self):
        assert normalize_section_items("custom", [{"a": ""}])[0].fields == {"field_1": ""}

    def test_missing_items_synthesizes_one(self):
        assert len(normalize_section_items("skills", None)) == 1

    def test_direct_key_wins_over_alias(self):
        items = normalize_section_items("summary", [{"text": "direto", "resumo": "alias"}])
        assert items[0].fields["text"] == "direto"

    def test_alias_matches_normalized_key(self):
        items = normalize_section_items("languages", [{"Idioma": "Inglês", "Nível": "B2"}])
        assert items[0].fields == {"language": "Inglês", "level": "B2"}

    def test_fields_sub_mapping_is_used(self):
        items = normalize_section_items("certifications", [{"id": "x", "fields": {"name": "CKA", "ano": "2024"}}])
        assert items[0].fields == {"name": "CKA", "issuer": "", "year": "2024"}

    def test_bare_string_fills_first_field(self):
        items = normalize_section_items("skills", ["Python, Go"])
        assert items[0].fields == {"name": "Python, Go"}

    def test_values_capped(self):
        items = normalize_section_items("summary", [{"text": "a" * 1000}])
        assert len(items[0].fields["text"]) == 400

    def test_at_most_twelve_items(self):
        raw = [{"name": f"skill {i}"} for i in range(20)]
        assert len(normalize_section_items("skills", raw)) == 12

    def test_custom_limits(self):
        limits = ImporterConfig()
        raw = {f"Campo {i}": f"v{i}" for i in range(12)}
        raw["Campo 0"] = ""
        items = normalize_section_items("custom", [raw], limits=limits)
        fields = items[0].fields
        assert "Campo_0" not in fields
        assert list(fields)[0] == "Campo_1"
        assert len(fields) == limits.max_custom_fields - 1

    def test_custom_keys_made_identifier_safe(self):
        items = normalize_section_items("custom", [{"E-mail:": "ana@exemplo.com", "Área de atuação": "Dados", "???": "x"}])
        assert items[0].fields == {"E_mail": "ana@exemplo.com", "Área_de_atuação": "Dados"}

    def test_custom_key_capped_at_30(self):
        items = normalize_section_items("custom", [{"k" * 50: "v"}])
        assert list(items[0].fields) == ["k" * 30]

    def test_generated_ids_are_uuid4(self):
        items = normalize_section_items("skills", ["Go", "Rust"])
        for item in items:
            assert uuid.UUID(item.id).version == 4
        assert items[0].id != items[1].id


# ---------------------------------------------------------------------------
# Whole drafts
# ---------------------------------------------------------------------------


class TestNormalizeImport:
    @pytest.mark.parametrize(
        "draft",
        [None, "text", 42, [], {"sections": "nope", "header": [], "theme": 5, "title": 9, "templateId": {}}],
    )
    def test_malformed_drafts_keep_current_values(self, draft, sample_content, sample_theme):
        result = _import(draft, sample_content, sample_theme)
        assert result.title == "Meu CV"
        assert result.template_id == "modern"
        assert result.theme == sample_theme
        assert result.content == sample_content

    def test_fallback_sections_are_deep_copies(self, sample_content):
        result = _import({}, sample_content)
        assert result.content.sections[0] == sample_content.sections[0]
        assert result.content.sections[0] is not sample_content.sections[0]
        result.content.sections[0].title = "Mudou"
        assert sample_content.sections[0].title == "Resumo"

    def test_empty_fallback_uses_default_sections(self):
        result = _import({"sections": []}, ResumeContent())
        assert [s.type for s in result.content.sections] == [s.type for s in build_default_content().sections]

    def test_full_draft(self, sample_content):
        draft = {
            "title": "CV Importado",
            "templateId": "creative",
            "theme": {"primaryColor": "f60"},
            "header": {"fullName": "Maria"},
            "sections": [
                {"type": "Work Experience", "title": "Carreira", "items": [{"empresa": "Acme"}]},
            ],
        }
        result = _import(draft, sample_content)
        assert result.title == "CV Importado"
        assert result.template_id == "creative"
        assert result.theme.primary_color == "#FF6600"
        assert result.content.header.full_name == "Maria"
        assert result.content.header.email == sample_content.header.email
        assert len(result.content.sections) == 1
        assert result.content.sections[0].type == "experience"

    def test_nested_content_envelope(self, sample_content):
        draft = {"content": {"header": {"fullName": "Nested"}, "sections": [{"type": "summary", "items": [{"text": "x"}]}]}}
        result = _import(draft, sample_content)
        assert result.content.header.full_name == "Nested"
        assert result.content.sections[0].items[0].fields == {"text": "x"}

    def test_top_level_wins_over_nested(self, sample_content):
        draft = {"header": {"fullName": "Top"}, "content": {"header": {"fullName": "Nested"}}}
        assert _import(draft, sample_content).content.header.full_name == "Top"

    def test_output_is_always_valid(self, sample_content):
        draft = {
            "sections": [
                {"type": None, "title": None, "items": [None, {"fields": "bad"}, ["list"]]},
                {"type": 5, "items": "nope"},
            ]
        }
        result = _import(draft, sample_content)
        validated = ResumeContent.model_validate(result.content.model_dump(by_alias=True))
        assert validated == result.content
        for section in result.content.sections:
            assert len(section.items) == 1
