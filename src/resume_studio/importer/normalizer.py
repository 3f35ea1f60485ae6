"""Coerce loosely-shaped external data into the strict résumé schema.

Every function here is total: malformed input never raises, it falls back
field by field to the caller's current values (or to built-in defaults).
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any

from resume_studio.config import ImporterConfig
from resume_studio.importer.vocabulary import ImportVocabulary, load_vocabulary
from resume_studio.models.content import (
    FONT_OPTIONS,
    FONT_SIZE_LEVELS,
    SECTION_FIELDS,
    SPACING_OPTIONS,
    TEMPLATE_IDS,
    HeaderContent,
    ResumeContent,
    ResumeSection,
    ResumeTheme,
    SectionItem,
    empty_fields,
)
from resume_studio.models.defaults import build_default_content, default_section_title
from resume_studio.utils.text import normalize_token, to_field_key, to_safe_text

logger = logging.getLogger(__name__)

_HEX6 = re.compile(r"^#[0-9A-Fa-f]{6}$")
_HEX3 = re.compile(r"^#[0-9A-Fa-f]{3}$")

# (attribute, source keys, max length)
_HEADER_FIELDS: tuple[tuple[str, tuple[str, ...], int], ...] = (
    ("full_name", ("fullName", "name"), 120),
    ("role", ("role",), 120),
    ("email", ("email",), 120),
    ("phone", ("phone",), 80),
    ("location", ("location",), 120),
    ("website", ("website",), 160),
    ("linked_in", ("linkedIn", "linkedin"), 160),
    ("github", ("github",), 160),
)


@dataclass
class ImportResult:
    """Normalized outcome of a template import."""

    title: str
    template_id: str
    content: ResumeContent
    theme: ResumeTheme


def _as_mapping(value: Any) -> dict:
    return value if isinstance(value, dict) else {}


def _first_present(key: str, *sources: dict) -> Any:
    for source in sources:
        if source.get(key) is not None:
            return source[key]
    return None


def normalize_hex_color(value: Any, fallback: str) -> str:
    """"abc" -> "#AABBCC", "1a2b3c" -> "#1A2B3C", anything else -> fallback."""
    if not isinstance(value, str):
        return fallback
    token = value.strip()
    if not token:
        return fallback
    candidate = token if token.startswith("#") else f"#{token}"
    if _HEX6.match(candidate):
        return candidate.upper()
    if _HEX3.match(candidate):
        r, g, b = candidate[1], candidate[2], candidate[3]
        return f"#{r}{r}{g}{g}{b}{b}".upper()
    return fallback


def _pick_enum(value: Any, allowed: tuple[str, ...], fallback: str) -> str:
    if isinstance(value, str) and value in allowed:
        return value
    return fallback


def normalize_template_id(value: Any, fallback: str) -> str:
    if isinstance(value, str) and value.strip() in TEMPLATE_IDS:
        return value.strip()
    return fallback


def normalize_theme(raw_theme: Any, fallback: ResumeTheme) -> ResumeTheme:
    source = _as_mapping(raw_theme)
    return ResumeTheme(
        primary_color=normalize_hex_color(source.get("primaryColor"), fallback.primary_color),
        secondary_color=normalize_hex_color(source.get("secondaryColor"), fallback.secondary_color),
        text_color=normalize_hex_color(source.get("textColor"), fallback.text_color),
        font=_pick_enum(source.get("font"), FONT_OPTIONS, fallback.font),
        spacing=_pick_enum(source.get("spacing"), SPACING_OPTIONS, fallback.spacing),
        font_size_level=_pick_enum(source.get("fontSizeLevel"), FONT_SIZE_LEVELS, fallback.font_size_level),
    )


def normalize_header(raw_header: Any, fallback: HeaderContent) -> HeaderContent:
    source = _as_mapping(raw_header)
    values: dict[str, str] = {}
    for attr, keys, cap in _HEADER_FIELDS:
        text = ""
        for key in keys:
            text = to_safe_text(source.get(key), cap)
            if text:
                break
        values[attr] = text or getattr(fallback, attr)
    return HeaderContent(**values)


def _field_lookup(source: dict, max_length: int) -> dict[str, str]:
    """Map normalized source keys to their non-empty safe values."""
    lookup: dict[str, str] = {}
    for key, value in source.items():
        token = normalize_token(str(key))
        text = to_safe_text(value, max_length)
        if token and text:
            lookup[token] = text
    return lookup


def _resolve_field(
    key: str,
    source: dict,
    lookup: dict[str, str],
    vocabulary: ImportVocabulary,
    max_length: int,
) -> str:
    direct = to_safe_text(source.get(key), max_length)
    if direct:
        return direct
    for alias in vocabulary.aliases_for(key):
        hit = lookup.get(normalize_token(alias))
        if hit:
            return hit
    return ""


def _normalize_custom_item(source: dict, limits: ImporterConfig) -> dict[str, str]:
    fields: dict[str, str] = {}
    for key, value in list(source.items())[: limits.max_custom_fields]:
        name = to_field_key(str(key))
        text = to_safe_text(value, limits.max_field_length)
        if name and text:
            fields[name] = text
    return fields


def _normalize_typed_item(
    section_type: str,
    entry: Any,
    vocabulary: ImportVocabulary,
    limits: ImporterConfig,
) -> dict[str, str]:
    keys = SECTION_FIELDS[section_type]
    fields = empty_fields(section_type)
    if isinstance(entry, str):
        fields[keys[0]] = to_safe_text(entry, limits.max_field_length)
        return fields
    source = entry.get("fields") if isinstance(entry.get("fields"), dict) else entry
    lookup = _field_lookup(source, limits.max_field_length)
    for key in keys:
        fields[key] = _resolve_field(key, source, lookup, vocabulary, limits.max_field_length)
    return fields


def normalize_section_items(
    section_type: str,
    raw_items: Any,
    *,
    vocabulary: ImportVocabulary | None = None,
    limits: ImporterConfig | None = None,
) -> list[SectionItem]:
    """Normalize up to ``max_items_per_section`` items, never returning an empty list."""
    vocabulary = vocabulary or load_vocabulary()
    limits = limits or ImporterConfig()
    candidates = raw_items[: limits.max_items_per_section] if isinstance(raw_items, list) else []

    items: list[SectionItem] = []
    for entry in candidates:
        if section_type == "custom":
            if not isinstance(entry, dict):
                continue
            source = entry.get("fields") if isinstance(entry.get("fields"), dict) else entry
            fields = _normalize_custom_item(source, limits)
        else:
            if not isinstance(entry, (dict, str)):
                continue
            fields = _normalize_typed_item(section_type, entry, vocabulary, limits)
        if any(fields.values()):
            items.append(SectionItem(fields=fields))

    if not items:
        # Keep the section editable.
        items.append(SectionItem(fields=empty_fields(section_type)))
    return items


def _normalize_section(
    entry: dict,
    vocabulary: ImportVocabulary,
    limits: ImporterConfig,
) -> ResumeSection:
    type_hint = entry.get("type") if isinstance(entry.get("type"), str) else entry.get("title")
    section_type = vocabulary.infer_section_type(type_hint)
    title = to_safe_text(entry.get("title"), 60) or default_section_title(section_type)
    layout_column = entry.get("layoutColumn")
    return ResumeSection(
        type=section_type,
        title=title,
        items=normalize_section_items(
            section_type, entry.get("items"), vocabulary=vocabulary, limits=limits
        ),
        page_break_before=entry.get("pageBreakBefore") is True,
        layout_column=layout_column if layout_column in ("left", "right") else "auto",
    )


def normalize_sections(
    raw_sections: Any,
    fallback_sections: list[ResumeSection],
    *,
    vocabulary: ImportVocabulary | None = None,
    limits: ImporterConfig | None = None,
) -> list[ResumeSection]:
    """Normalize up to ``max_sections`` sections, else deep-copy the fallback list."""
    vocabulary = vocabulary or load_vocabulary()
    limits = limits or ImporterConfig()

    sections: list[ResumeSection] = []
    if isinstance(raw_sections, list):
        for entry in raw_sections[: limits.max_sections]:
            if isinstance(entry, dict):
                sections.append(_normalize_section(entry, vocabulary, limits))

    if sections:
        return sections

    logger.debug("No usable sections in import; keeping %d existing", len(fallback_sections))
    if fallback_sections:
        return [section.model_copy(deep=True) for section in fallback_sections]
    return build_default_content().sections


def normalize_import(
    draft: Any,
    *,
    current_title: str,
    current_template_id: str,
    current_content: ResumeContent,
    current_theme: ResumeTheme,
    vocabulary: ImportVocabulary | None = None,
    limits: ImporterConfig | None = None,
) -> ImportResult:
    """Turn a parsed model draft into a valid title, template, content and theme.

    ``header``, ``sections`` and ``theme`` are read from the top level of the
    draft first and from a nested ``content`` object second.
    """
    source = _as_mapping(draft)
    content_node = _as_mapping(source.get("content"))

    raw_header = _first_present("header", source, content_node)
    raw_sections = _first_present("sections", source, content_node)
    raw_theme = _first_present("theme", source, content_node)

    return ImportResult(
        title=to_safe_text(source.get("title"), 120) or current_title,
        template_id=normalize_template_id(source.get("templateId"), current_template_id),
        content=ResumeContent(
            header=normalize_header(raw_header, current_content.header),
            sections=normalize_sections(
                raw_sections,
                current_content.sections,
                vocabulary=vocabulary,
                limits=limits,
            ),
        ),
        theme=normalize_theme(raw_theme, current_theme),
    )
