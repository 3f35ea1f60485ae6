"""Load the keyword vocabulary used for section inference and field aliasing."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

import yaml
from pydantic import BaseModel

from resume_studio.utils.text import normalize_token

VOCABULARY_PATH = Path(__file__).resolve().parent.parent / "data" / "import_vocabulary.yaml"


class ImportVocabulary(BaseModel):
    section_keywords: dict[str, list[str]]
    field_aliases: dict[str, list[str]]
    sidebar_title_hints: list[str]

    def infer_section_type(self, value: object) -> str:
        """Map a free-form type/title string to a section type, "custom" if unknown."""
        if not isinstance(value, str):
            return "custom"
        token = normalize_token(value)
        if not token:
            return "custom"
        for section_type, keywords in self.section_keywords.items():
            if any(normalize_token(keyword) in token for keyword in keywords):
                return section_type
        return "custom"

    def aliases_for(self, key: str) -> list[str]:
        return self.field_aliases.get(key, [key])

    def is_sidebar_title(self, title: str) -> bool:
        token = normalize_token(title)
        return any(hint in token for hint in self.sidebar_title_hints)


@lru_cache(maxsize=None)
def load_vocabulary(path: str | Path = VOCABULARY_PATH) -> ImportVocabulary:
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return ImportVocabulary(**data)
