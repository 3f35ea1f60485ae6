"""Text helpers shared by the normalizer, renderer and exporters."""

from __future__ import annotations

import re
import unicodedata

_WHITESPACE = re.compile(r"\s+")
_NON_ALNUM = re.compile(r"[^a-z0-9]")
_FILENAME_UNSAFE = re.compile(r"[^A-Za-z0-9_-]")
_FIELD_KEY_UNSAFE = re.compile(r"\W+")


def strip_diacritics(value: str) -> str:
    """Remove combining accents: "Formação" -> "Formacao"."""
    decomposed = unicodedata.normalize("NFD", value)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize_token(value: str) -> str:
    """Lower-case, accent-free, alphanumeric-only token used for keyword matching."""
    return _NON_ALNUM.sub("", strip_diacritics(value).lower())


def to_safe_text(value: object, max_length: int = 400) -> str:
    """Collapse whitespace, trim and cap a loosely-typed value.

    Anything that is not a string becomes "".
    """
    if not isinstance(value, str):
        return ""
    compact = _WHITESPACE.sub(" ", value).strip()
    return compact[:max_length]


def to_field_key(value: object, max_length: int = 30) -> str:
    """Identifier-safe custom field key: "E-mail:" -> "E_mail". Accents are kept."""
    if not isinstance(value, str):
        return ""
    key = _FIELD_KEY_UNSAFE.sub("_", value).strip("_")
    return key[:max_length].rstrip("_")


def join_non_empty(values: list[str], separator: str) -> str:
    return separator.join(v for v in values if v)


def split_skills(value: str) -> list[str]:
    """Split a skills field on commas, semicolons and newlines."""
    return [token.strip() for token in re.split(r"[,;\n]", value) if token.strip()]


def sanitize_filename(value: str, default: str = "Curriculo") -> str:
    text = _FILENAME_UNSAFE.sub("_", strip_diacritics(value))
    text = re.sub(r"_{2,}", "_", text).strip("_")
    return text or default
