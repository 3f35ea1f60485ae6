"""Tests for the import vocabulary data file."""

from __future__ import annotations

import pytest

from resume_studio.importer.vocabulary import ImportVocabulary, load_vocabulary
from resume_studio.models.content import SECTION_FIELDS


@pytest.fixture
def vocabulary() -> ImportVocabulary:
    return load_vocabulary()


def test_every_typed_field_has_aliases(vocabulary):
    for keys in SECTION_FIELDS.values():
        for key in keys:
            assert key in vocabulary.field_aliases


def test_section_keywords_cover_typed_sections(vocabulary):
    assert set(vocabulary.section_keywords) == set(SECTION_FIELDS) - {"custom"}


def test_loaded_once(vocabulary):
    assert load_vocabulary() is vocabulary


def test_unknown_key_aliases_to_itself(vocabulary):
    assert vocabulary.aliases_for("nickname") == ["nickname"]


@pytest.mark.parametrize(
    "title,expected",
    [("Contato", True), ("CONTACT", True), ("Informações pessoais", True), ("Voluntariado", False)],
)
def test_sidebar_title_hints(vocabulary, title, expected):
    assert vocabulary.is_sidebar_title(title) is expected


@pytest.mark.parametrize("value", [None, 3, "", "!!!"])
def test_non_text_type_is_custom(vocabulary, value):
    assert vocabulary.infer_section_type(value) == "custom"


def test_custom_vocabulary_file(tmp_path):
    path = tmp_path / "vocab.yaml"
    path.write_text(
        "section_keywords:\n  skills: [stack]\nfield_aliases: {}\nsidebar_title_hints: []\n",
        encoding="utf-8",
    )
    vocabulary = load_vocabulary(path)
    assert vocabulary.infer_section_type("Tech Stack") == "skills"
    assert vocabulary.infer_section_type("Skills") == "custom"
