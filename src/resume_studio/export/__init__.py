"""Document export (PDF, DOCX) for resume-studio."""

from __future__ import annotations

from datetime import date

from resume_studio.export.docx_renderer import render_docx
from resume_studio.export.pdf_renderer import PDF_ENGINES, render_pdf
from resume_studio.models.resume import Resume
from resume_studio.utils.text import sanitize_filename


def build_export_basename(resume: Resume, on: date | None = None) -> str:
    """"Curriculo_<name>_<YYYY-MM-DD>" from the header name, else the title."""
    on = on or date.today()
    name = resume.content.header.full_name.strip() or resume.title
    return f"Curriculo_{sanitize_filename(name)}_{on.isoformat()}"


__all__ = ["PDF_ENGINES", "build_export_basename", "render_docx", "render_pdf"]
