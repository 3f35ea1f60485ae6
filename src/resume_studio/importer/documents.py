"""Turn an uploaded template file into Claude message content blocks.

Images go as-is, PDF pages are rasterized with PyMuPDF, DOCX files are
reduced to their paragraph text and text-like files are sent as text.
"""

from __future__ import annotations

import base64
import logging
import mimetypes
from dataclasses import dataclass
from io import BytesIO
from zipfile import BadZipFile

from resume_studio.errors import UnsupportedFileError

logger = logging.getLogger(__name__)

PDF_DPI = 150

_IMAGE_TYPES = {"image/png", "image/jpeg", "image/gif", "image/webp"}
_TEXT_TYPES = {"application/json", "application/xml", "application/x-yaml", "application/yaml"}
_DOCX_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


@dataclass
class TemplateFile:
    """An uploaded résumé template (image, PDF, DOCX or text)."""

    file_name: str
    data: bytes
    mime_type: str = ""

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def resolved_mime_type(self) -> str:
        if self.mime_type:
            return self.mime_type.lower()
        guessed, _ = mimetypes.guess_type(self.file_name)
        if guessed is None and self.file_name.lower().endswith((".md", ".yaml", ".yml")):
            return "text/plain"
        return (guessed or "application/octet-stream").lower()


def is_text_like(mime_type: str) -> bool:
    return mime_type.startswith("text/") or mime_type in _TEXT_TYPES


def pdf_to_images(pdf_bytes: bytes, max_pages: int) -> list[tuple[bytes, str]]:
    """Convert the first ``max_pages`` PDF pages to PNG images using PyMuPDF.

    Returns:
        List of (image_bytes, media_type) tuples, one per page.
    """
    import fitz  # PyMuPDF

    # FileDataError and the rendering errors all derive from RuntimeError.
    try:
        doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    except RuntimeError as exc:
        raise UnsupportedFileError("Could not read the PDF file.") from exc
    images = []
    try:
        for index, page in enumerate(doc):
            if index >= max_pages:
                break
            mat = fitz.Matrix(PDF_DPI / 72, PDF_DPI / 72)
            pix = page.get_pixmap(matrix=mat)
            images.append((pix.tobytes("png"), "image/png"))
    except RuntimeError as exc:
        raise UnsupportedFileError("Could not read the PDF file.") from exc
    finally:
        doc.close()
    return images


def docx_text(docx_bytes: bytes) -> str:
    from docx import Document
    from docx.opc.exceptions import PackageNotFoundError

    try:
        doc = Document(BytesIO(docx_bytes))
    except (BadZipFile, PackageNotFoundError, KeyError, ValueError) as exc:
        raise UnsupportedFileError("Could not read the DOCX file.") from exc
    lines = [p.text for p in doc.paragraphs if p.text.strip()]
    for table in doc.tables:
        for row in table.rows:
            for cell in row.cells:
                lines.extend(p.text for p in cell.paragraphs if p.text.strip())
    return "\n".join(lines)


def _image_block(data: bytes, media_type: str) -> dict:
    return {
        "type": "image",
        "source": {
            "type": "base64",
            "media_type": media_type,
            "data": base64.b64encode(data).decode("utf-8"),
        },
    }


def _text_block(text: str, max_chars: int) -> dict:
    return {"type": "text", "text": f"Conteudo textual do arquivo:\n{text[:max_chars]}"}


def build_content_blocks(
    file: TemplateFile,
    instruction: str,
    *,
    max_text_chars: int = 18_000,
    max_pdf_pages: int = 3,
) -> list[dict]:
    """Instruction block followed by the file's content blocks."""
    mime_type = file.resolved_mime_type
    blocks: list[dict] = [{"type": "text", "text": instruction}]

    if mime_type in _IMAGE_TYPES:
        blocks.append(_image_block(file.data, mime_type))
    elif mime_type == "application/pdf":
        pages = pdf_to_images(file.data, max_pdf_pages)
        if not pages:
            raise UnsupportedFileError("The PDF has no pages.")
        logger.info("Sending %d PDF page(s) as images", len(pages))
        blocks.extend(_image_block(data, media_type) for data, media_type in pages)
    elif mime_type == _DOCX_TYPE:
        blocks.append(_text_block(docx_text(file.data), max_text_chars))
    elif is_text_like(mime_type):
        blocks.append(_text_block(file.data.decode("utf-8", errors="replace"), max_text_chars))
    else:
        raise UnsupportedFileError(
            f"Unsupported file type: {mime_type}. Use PNG, JPG, GIF, WEBP, PDF, DOCX or text."
        )
    return blocks
