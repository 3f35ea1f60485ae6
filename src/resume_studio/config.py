"""Application configuration loaded from config.yaml."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass(frozen=True)
class LLMConfig:
    provider: str = "anthropic"
    model: str = "claude-sonnet-4-5-20250929"
    timeout: float = 90.0
    max_tokens: int = 4096
    temperature: float = 0.1


@dataclass(frozen=True)
class ImporterConfig:
    max_file_bytes: int = 8 * 1024 * 1024
    max_text_chars: int = 18_000
    max_sections: int = 10
    max_items_per_section: int = 12
    max_field_length: int = 400
    max_custom_fields: int = 8
    max_pdf_pages: int = 3


@dataclass(frozen=True)
class ExportConfig:
    pdf_engine: str = "chromium"  # chromium | weasyprint | fpdf
    fallback: bool = True
    chromium_executable: str | None = None

    @property
    def resolved_chromium_executable(self) -> str | None:
        value = self.chromium_executable or os.environ.get("CHROMIUM_EXECUTABLE_PATH", "")
        return value.strip() or None


@dataclass(frozen=True)
class StoreConfig:
    db_path: str = "~/.resume-studio/resumes.db"
    max_resume_bytes: int = 1024 * 1024

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    importer: ImporterConfig = field(default_factory=ImporterConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    store: StoreConfig = field(default_factory=StoreConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        # Look for config.yaml relative to the project root
        candidates = [
            Path.cwd() / "config.yaml",
            Path(__file__).resolve().parent.parent.parent / "config.yaml",
        ]
        for c in candidates:
            if c.exists():
                path = c
                break

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}

    return AppConfig(
        llm=LLMConfig(**raw.get("llm", {})),
        importer=ImporterConfig(**raw.get("importer", {})),
        export=ExportConfig(**raw.get("export", {})),
        store=StoreConfig(**raw.get("store", {})),
    )
