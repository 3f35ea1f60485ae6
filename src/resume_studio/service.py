"""Application service: résumé lifecycle, versions, rendering, export and import."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Callable

from resume_studio.clients.llm_client import LLMClient
from resume_studio.config import AppConfig
from resume_studio.errors import InvalidInputError, NotFoundError, PayloadTooLargeError
from resume_studio.export import build_export_basename, render_docx, render_pdf
from resume_studio.importer.documents import TemplateFile
from resume_studio.importer.template_importer import TemplateImporter
from resume_studio.models import editing
from resume_studio.models.content import TEMPLATE_IDS, ResumeContent, ResumeTheme
from resume_studio.models.defaults import build_default_content, default_theme
from resume_studio.models.resume import Resume, ResumeVersion
from resume_studio.rendering import render_html, render_layout
from resume_studio.rendering.layout import ResumeLayout
from resume_studio.rendering.pagination import PageBreakEstimator, estimate_page_breaks
from resume_studio.store.resume_store import ResumeStore
from resume_studio.utils.text import to_safe_text

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 120
COPY_SUFFIX = " (Copia)"


class ResumeService:
    def __init__(
        self,
        store: ResumeStore,
        config: AppConfig | None = None,
        llm: LLMClient | None = None,
        estimator: PageBreakEstimator = estimate_page_breaks,
    ):
        self.store = store
        self.config = config or AppConfig()
        self._llm = llm
        self.estimator = estimator

    @property
    def llm(self) -> LLMClient:
        """Claude client, created on first use so offline commands never need a key."""
        if self._llm is None:
            self._llm = LLMClient(timeout=self.config.llm.timeout)
        return self._llm

    # ------------------------------------------------------------------
    # Résumés
    # ------------------------------------------------------------------

    def list_resumes(self, owner_id: str) -> list[Resume]:
        return self.store.list_resumes(owner_id)

    def get_resume(self, owner_id: str, resume_id: str) -> Resume:
        resume = self.store.get_resume(resume_id, owner_id)
        if resume is None:
            raise NotFoundError("Resume not found.")
        return resume

    def create_resume(self, owner_id: str, title: str, template_id: str = "minimal") -> Resume:
        """New résumé seeded with the sample content and the default theme."""
        resume = Resume(
            owner_id=owner_id,
            title=_clean_title(title),
            template_id=_check_template(template_id),
            content=build_default_content(),
            theme=default_theme(),
        )
        return self.store.create_resume(resume)

    def update_resume(
        self,
        owner_id: str,
        resume_id: str,
        *,
        title: str | None = None,
        template_id: str | None = None,
        content: ResumeContent | None = None,
        theme: ResumeTheme | None = None,
    ) -> Resume:
        """Replace any of title, template, content and theme wholesale."""
        current = self.get_resume(owner_id, resume_id)
        candidate = current.model_copy(
            update={
                "title": _clean_title(title) if title is not None else current.title,
                "template_id": _check_template(template_id) if template_id is not None else current.template_id,
                "content": content if content is not None else current.content,
                "theme": theme if theme is not None else current.theme,
            }
        )
        self._check_size(candidate)
        updated = self.store.update_resume(
            resume_id,
            title=candidate.title,
            template_id=candidate.template_id,
            content=candidate.content,
            theme=candidate.theme,
        )
        if updated is None:
            raise NotFoundError("Resume not found.")
        return updated

    def delete_resume(self, owner_id: str, resume_id: str) -> None:
        resume = self.get_resume(owner_id, resume_id)
        self.store.delete_resume(resume.id)

    def duplicate_resume(self, owner_id: str, resume_id: str) -> Resume:
        source = self.get_resume(owner_id, resume_id)
        duplicate = Resume(
            owner_id=owner_id,
            title=f"{source.title}{COPY_SUFFIX}",
            template_id=source.template_id,
            content=source.content.model_copy(deep=True),
            theme=source.theme.model_copy(deep=True),
        )
        return self.store.create_resume(duplicate)

    def _check_size(self, resume: Resume) -> None:
        size = len(resume.model_dump_json(by_alias=True).encode("utf-8"))
        limit = self.config.store.max_resume_bytes
        if size > limit:
            raise PayloadTooLargeError(
                f"Resume is too large to save ({size} bytes, limit {limit})."
            )

    # ------------------------------------------------------------------
    # Content editing
    # ------------------------------------------------------------------

    def edit_content(
        self,
        owner_id: str,
        resume_id: str,
        edit: Callable[..., ResumeContent],
        *args: Any,
        **kwargs: Any,
    ) -> Resume:
        """Apply a ``models.editing`` operation to the stored content and save it."""
        resume = self.get_resume(owner_id, resume_id)
        return self.update_resume(owner_id, resume.id, content=edit(resume.content, *args, **kwargs))

    def update_header(self, owner_id: str, resume_id: str, values: dict[str, Any]) -> Resume:
        return self.edit_content(owner_id, resume_id, editing.update_header, values)

    def add_section(
        self,
        owner_id: str,
        resume_id: str,
        section_type: str,
        title: str | None = None,
        position: int | None = None,
    ) -> Resume:
        return self.edit_content(owner_id, resume_id, editing.add_section, section_type, title, position)

    def remove_section(self, owner_id: str, resume_id: str, section_ref: str | int) -> Resume:
        return self.edit_content(owner_id, resume_id, editing.remove_section, section_ref)

    def move_section(self, owner_id: str, resume_id: str, section_ref: str | int, position: int) -> Resume:
        return self.edit_content(owner_id, resume_id, editing.move_section, section_ref, position)

    def rename_section(self, owner_id: str, resume_id: str, section_ref: str | int, title: str) -> Resume:
        return self.edit_content(owner_id, resume_id, editing.rename_section, section_ref, title)

    def set_page_break(self, owner_id: str, resume_id: str, section_ref: str | int, enabled: bool) -> Resume:
        return self.edit_content(owner_id, resume_id, editing.set_page_break, section_ref, enabled)

    def set_layout_column(self, owner_id: str, resume_id: str, section_ref: str | int, column: str) -> Resume:
        return self.edit_content(owner_id, resume_id, editing.set_layout_column, section_ref, column)

    def add_item(
        self,
        owner_id: str,
        resume_id: str,
        section_ref: str | int,
        values: dict[str, Any] | None = None,
    ) -> Resume:
        return self.edit_content(owner_id, resume_id, editing.add_item, section_ref, values)

    def remove_item(self, owner_id: str, resume_id: str, section_ref: str | int, item_ref: str | int) -> Resume:
        return self.edit_content(owner_id, resume_id, editing.remove_item, section_ref, item_ref)

    def update_item(
        self,
        owner_id: str,
        resume_id: str,
        section_ref: str | int,
        item_ref: str | int,
        values: dict[str, Any],
        *,
        replace: bool = False,
    ) -> Resume:
        return self.edit_content(
            owner_id, resume_id, editing.update_item, section_ref, item_ref, values, replace=replace
        )

    def replace_items(
        self,
        owner_id: str,
        resume_id: str,
        section_ref: str | int,
        rows: list[dict[str, Any]],
    ) -> Resume:
        return self.edit_content(owner_id, resume_id, editing.replace_items, section_ref, rows)

    def load_content(self, owner_id: str, resume_id: str, data: Any) -> Resume:
        """Replace the content with edited JSON (bare content or a full ``show --json`` dump)."""
        return self.update_resume(owner_id, resume_id, content=editing.content_from_json(data))

    # ------------------------------------------------------------------
    # Versions
    # ------------------------------------------------------------------

    def list_versions(self, owner_id: str, resume_id: str) -> list[ResumeVersion]:
        resume = self.get_resume(owner_id, resume_id)
        return self.store.list_versions(resume.id)

    def create_version(self, owner_id: str, resume_id: str, name: str) -> ResumeVersion:
        """Freeze the résumé's current title, template, content and theme."""
        resume = self.get_resume(owner_id, resume_id)
        clean_name = to_safe_text(name, MAX_TITLE_LENGTH)
        if not clean_name:
            raise InvalidInputError("Version name must not be empty.")
        version = ResumeVersion(resume_id=resume.id, name=clean_name, snapshot=resume.snapshot())
        return self.store.create_version(version)

    def restore_version(self, owner_id: str, resume_id: str, version_id: str) -> Resume:
        resume = self.get_resume(owner_id, resume_id)
        version = self.store.get_version(version_id, resume.id)
        if version is None:
            raise NotFoundError("Version not found.")
        snapshot = version.snapshot
        logger.info("Restoring resume %s to version %r", resume.id, version.name)
        return self.update_resume(
            owner_id,
            resume.id,
            title=snapshot.title,
            template_id=snapshot.template_id,
            content=snapshot.content,
            theme=snapshot.theme,
        )

    # ------------------------------------------------------------------
    # Rendering & export
    # ------------------------------------------------------------------

    def layout(self, owner_id: str, resume_id: str) -> ResumeLayout:
        resume = self.get_resume(owner_id, resume_id)
        return render_layout(resume.content, resume.theme, resume.template_id, title=resume.title)

    def render_html(self, owner_id: str, resume_id: str) -> str:
        return render_html(self.layout(owner_id, resume_id))

    def export_pdf(
        self,
        owner_id: str,
        resume_id: str,
        engine: str | None = None,
        on: date | None = None,
    ) -> tuple[str, bytes]:
        """(file name, PDF bytes)."""
        resume = self.get_resume(owner_id, resume_id)
        layout = render_layout(resume.content, resume.theme, resume.template_id, title=resume.title)
        export_config = self.config.export
        pdf_bytes = render_pdf(
            layout,
            engine=engine or export_config.pdf_engine,
            fallback=export_config.fallback,
            executable_path=export_config.resolved_chromium_executable,
        )
        return f"{build_export_basename(resume, on)}.pdf", pdf_bytes

    def export_docx(self, owner_id: str, resume_id: str, on: date | None = None) -> tuple[str, bytes]:
        """(file name, DOCX bytes)."""
        resume = self.get_resume(owner_id, resume_id)
        layout = render_layout(resume.content, resume.theme, resume.template_id, title=resume.title)
        return f"{build_export_basename(resume, on)}.docx", render_docx(layout)

    def paginate(self, owner_id: str, resume_id: str) -> Resume:
        """Insert estimated page breaks and save the result."""
        resume = self.get_resume(owner_id, resume_id)
        content = self.estimator(resume.content, resume.theme, resume.template_id)
        added = sum(
            1
            for before, after in zip(resume.content.sections, content.sections)
            if after.page_break_before and not before.page_break_before
        )
        logger.info("Auto-pagination added %d page break(s)", added)
        return self.update_resume(owner_id, resume_id, content=content)

    # ------------------------------------------------------------------
    # AI template import
    # ------------------------------------------------------------------

    async def import_template(
        self,
        owner_id: str,
        resume_id: str,
        file: TemplateFile,
        *,
        provider: str | None = None,
        model: str | None = None,
    ) -> Resume:
        """Analyze ``file`` with Claude and overwrite the résumé with the normalized draft."""
        resume = self.get_resume(owner_id, resume_id)
        importer = TemplateImporter(
            llm_config=self.config.llm,
            limits=self.config.importer,
            client_factory=lambda: self.llm,
        )
        result = await importer.analyze(
            file,
            current_title=resume.title,
            current_template_id=resume.template_id,
            current_content=resume.content,
            current_theme=resume.theme,
            provider=provider,
            model=model,
        )
        return self.update_resume(
            owner_id,
            resume.id,
            title=result.title,
            template_id=result.template_id,
            content=result.content,
            theme=result.theme,
        )


def _clean_title(title: str) -> str:
    clean = to_safe_text(title, MAX_TITLE_LENGTH)
    if not clean:
        raise InvalidInputError("Title must not be empty.")
    return clean


def _check_template(template_id: str) -> str:
    if template_id not in TEMPLATE_IDS:
        raise InvalidInputError(
            f"Unknown template: {template_id!r}. Choose one of: {', '.join(TEMPLATE_IDS)}"
        )
    return template_id
