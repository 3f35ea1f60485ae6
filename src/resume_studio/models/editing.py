"""Edits on résumé content: header fields, sections, items, page breaks and columns.

Every function takes a ``ResumeContent`` and returns an edited deep copy; the
input is never mutated. Sections and items are addressed by id or by their
1-based position, the numbering ``resume-studio show`` prints.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from resume_studio.errors import InvalidInputError, NotFoundError
from resume_studio.models.content import (
    LAYOUT_COLUMNS,
    SECTION_FIELDS,
    SECTION_TYPES,
    HeaderContent,
    ResumeContent,
    ResumeSection,
    SectionItem,
    empty_fields,
    new_id,
)
from resume_studio.utils.text import to_field_key, to_safe_text

MAX_SECTION_TITLE = 60

# Accepted header keys (wire name or attribute name) -> attribute.
HEADER_KEYS: dict[str, str] = {
    **{name: name for name in HeaderContent.model_fields},
    **{field.alias: name for name, field in HeaderContent.model_fields.items() if field.alias},
}


def _locate(entries: list, ref: str | int, kind: str) -> int:
    """Index of the entry whose id is ``ref``, else of the 1-based position ``ref``."""
    ref_text = str(ref).strip()
    for index, entry in enumerate(entries):
        if entry.id == ref_text:
            return index
    if ref_text.isdigit() and 1 <= int(ref_text) <= len(entries):
        return int(ref_text) - 1
    raise NotFoundError(f"{kind} not found: {ref_text!r}")


def find_section(content: ResumeContent, ref: str | int) -> ResumeSection:
    return content.sections[_locate(content.sections, ref, "Section")]


def _edit_section(content: ResumeContent, ref: str | int) -> tuple[ResumeContent, ResumeSection]:
    edited = content.model_copy(deep=True)
    return edited, edited.sections[_locate(edited.sections, ref, "Section")]


def _clean_value(key: str, value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise InvalidInputError(f"Value for {key!r} must be text.")
    return value.strip()


# ---------------------------------------------------------------------------
# Header
# ---------------------------------------------------------------------------


def update_header(content: ResumeContent, values: dict[str, Any]) -> ResumeContent:
    """Set header fields; keys may be ``fullName`` or ``full_name`` style."""
    updates: dict[str, str] = {}
    for key, value in values.items():
        attr = HEADER_KEYS.get(key)
        if attr is None:
            raise InvalidInputError(
                f"Unknown header field: {key!r}. Use one of: {', '.join(HeaderContent.model_fields)}"
            )
        updates[attr] = to_safe_text(_clean_value(key, value), 160)
    edited = content.model_copy(deep=True)
    edited.header = edited.header.model_copy(update=updates)
    return edited


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


def add_section(
    content: ResumeContent,
    section_type: str,
    title: str | None = None,
    position: int | None = None,
) -> ResumeContent:
    """Insert a section holding one empty item; appended unless ``position`` (1-based) is given."""
    if section_type not in SECTION_TYPES:
        raise InvalidInputError(
            f"Unknown section type: {section_type!r}. Use one of: {', '.join(SECTION_TYPES)}"
        )
    section = ResumeSection.create(section_type, to_safe_text(title, MAX_SECTION_TITLE) or None)
    edited = content.model_copy(deep=True)
    if position is None:
        edited.sections.append(section)
    else:
        edited.sections.insert(max(position - 1, 0), section)
    return edited


def remove_section(content: ResumeContent, ref: str | int) -> ResumeContent:
    edited = content.model_copy(deep=True)
    del edited.sections[_locate(edited.sections, ref, "Section")]
    return edited


def move_section(content: ResumeContent, ref: str | int, position: int) -> ResumeContent:
    """Move a section so it ends up at ``position`` (1-based); the others keep their order."""
    if not 1 <= position <= len(content.sections):
        raise InvalidInputError(f"Position must be between 1 and {len(content.sections)}.")
    edited = content.model_copy(deep=True)
    moved = edited.sections.pop(_locate(edited.sections, ref, "Section"))
    edited.sections.insert(position - 1, moved)
    return edited


def rename_section(content: ResumeContent, ref: str | int, title: str) -> ResumeContent:
    clean = to_safe_text(title, MAX_SECTION_TITLE)
    if not clean:
        raise InvalidInputError("Section title must not be empty.")
    edited, section = _edit_section(content, ref)
    section.title = clean
    return edited


def set_page_break(content: ResumeContent, ref: str | int, enabled: bool) -> ResumeContent:
    edited, section = _edit_section(content, ref)
    section.page_break_before = enabled
    return edited


def set_layout_column(content: ResumeContent, ref: str | int, column: str) -> ResumeContent:
    """Pin a section to the left or right column, or hand it back to the template (``auto``)."""
    if column not in LAYOUT_COLUMNS:
        raise InvalidInputError(f"Unknown column: {column!r}. Use one of: {', '.join(LAYOUT_COLUMNS)}")
    edited, section = _edit_section(content, ref)
    section.layout_column = column
    return edited


# ---------------------------------------------------------------------------
# Items
# ---------------------------------------------------------------------------


def _merge_fields(section_type: str, base: dict[str, str], values: dict[str, Any]) -> dict[str, str]:
    fields = dict(base)
    if section_type == "custom":
        for key, value in values.items():
            name = to_field_key(str(key))
            if not name:
                raise InvalidInputError(f"Invalid field name: {key!r}")
            fields[name] = _clean_value(name, value)
        return fields

    allowed = SECTION_FIELDS[section_type]
    for key, value in values.items():
        if key not in allowed:
            raise InvalidInputError(
                f"Unknown field {key!r} for {section_type} items. Use one of: {', '.join(allowed)}"
            )
        fields[key] = _clean_value(key, value)
    return fields


def add_item(
    content: ResumeContent,
    ref: str | int,
    values: dict[str, Any] | None = None,
) -> ResumeContent:
    edited, section = _edit_section(content, ref)
    values = values or {}
    base = {} if section.type == "custom" and values else empty_fields(section.type)
    section.items.append(SectionItem(fields=_merge_fields(section.type, base, values)))
    return edited


def remove_item(content: ResumeContent, ref: str | int, item_ref: str | int) -> ResumeContent:
    edited, section = _edit_section(content, ref)
    del section.items[_locate(section.items, item_ref, "Item")]
    return edited


def update_item(
    content: ResumeContent,
    ref: str | int,
    item_ref: str | int,
    values: dict[str, Any],
    *,
    replace: bool = False,
) -> ResumeContent:
    """Set item fields. ``replace`` starts from empty fields (custom items lose unlisted keys)."""
    edited, section = _edit_section(content, ref)
    item = section.items[_locate(section.items, item_ref, "Item")]
    if replace:
        base = {} if section.type == "custom" else empty_fields(section.type)
    else:
        base = item.fields
    item.fields = _merge_fields(section.type, base, values)
    return edited


def replace_items(content: ResumeContent, ref: str | int, rows: list[dict[str, Any]]) -> ResumeContent:
    """Rebuild a section's items from table rows, in row order.

    A row's ``id`` keeps an existing item id; rows without one become new
    items. Rows whose values are all empty are dropped.
    """
    edited, section = _edit_section(content, ref)
    items: list[SectionItem] = []
    for row in rows:
        values = {key: value for key, value in row.items() if key != "id"}
        base = {} if section.type == "custom" else empty_fields(section.type)
        fields = _merge_fields(section.type, base, values)
        if not any(fields.values()):
            continue
        if section.type == "custom":
            fields = {key: value for key, value in fields.items() if value}
        items.append(SectionItem(id=row.get("id") or new_id(), fields=fields))
    section.items = items
    return edited


# ---------------------------------------------------------------------------
# Whole documents
# ---------------------------------------------------------------------------


def content_from_json(data: Any) -> ResumeContent:
    """Strictly validate edited JSON: bare content or a ``show --json`` dump holding it."""
    if isinstance(data, dict) and isinstance(data.get("content"), dict):
        data = data["content"]
    if not isinstance(data, dict):
        raise InvalidInputError("Expected a JSON object with header and sections.")
    try:
        return ResumeContent.model_validate(data)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise InvalidInputError(f"Invalid resume content at {location or 'root'}: {first['msg']}") from exc
