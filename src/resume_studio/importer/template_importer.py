"""AI template import: send a template file to Claude and normalize the draft."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from resume_studio.clients.llm_client import LLMClient, resolve_provider
from resume_studio.config import ImporterConfig, LLMConfig
from resume_studio.errors import EmptyPayloadError, PayloadTooLargeError, UpstreamTimeoutError
from resume_studio.importer.documents import TemplateFile
from resume_studio.importer.normalizer import ImportResult, normalize_import
from resume_studio.importer.prompts import SYSTEM_PROMPT, USER_INSTRUCTION
from resume_studio.models.content import ResumeContent, ResumeTheme
from resume_studio.utils.json_parser import extract_json_object

logger = logging.getLogger(__name__)


def check_template_file(file: TemplateFile, limits: ImporterConfig) -> None:
    """Reject empty or oversized uploads before any provider call."""
    if file.size <= 0:
        raise EmptyPayloadError("The uploaded file is empty.")
    if file.size > limits.max_file_bytes:
        limit_mb = limits.max_file_bytes // (1024 * 1024)
        raise PayloadTooLargeError(f"The uploaded file exceeds the {limit_mb}MB limit.")


class TemplateImporter:
    def __init__(
        self,
        llm: LLMClient | None = None,
        *,
        llm_config: LLMConfig | None = None,
        limits: ImporterConfig | None = None,
        client_factory: Callable[[], LLMClient] | None = None,
    ):
        self._llm = llm
        self._client_factory = client_factory
        self.llm_config = llm_config or LLMConfig()
        self.limits = limits or ImporterConfig()

    @property
    def llm(self) -> LLMClient:
        """Provider client, resolved only once the upload has passed its checks."""
        if self._llm is None:
            if self._client_factory is not None:
                self._llm = self._client_factory()
            else:
                self._llm = LLMClient(timeout=self.llm_config.timeout)
        return self._llm

    def check_file(self, file: TemplateFile) -> None:
        check_template_file(file, self.limits)

    async def request_draft(self, file: TemplateFile, model: str | None = None) -> dict:
        """Single provider call bounded by the configured timeout; returns the raw JSON draft."""
        timeout = self.llm_config.timeout
        try:
            response = await asyncio.wait_for(
                self.llm.generate_from_document(
                    SYSTEM_PROMPT,
                    USER_INSTRUCTION,
                    file,
                    model=model or self.llm_config.model,
                    temperature=self.llm_config.temperature,
                    max_tokens=self.llm_config.max_tokens,
                    max_text_chars=self.limits.max_text_chars,
                    max_pdf_pages=self.limits.max_pdf_pages,
                ),
                timeout=timeout,
            )
        except asyncio.TimeoutError as exc:
            raise UpstreamTimeoutError(f"AI provider did not answer within {timeout:g}s.") from exc
        logger.info(
            "Template draft received (%d chars, %d input / %d output tokens)",
            len(response.text),
            response.input_tokens,
            response.output_tokens,
        )
        return extract_json_object(response.text)

    async def analyze(
        self,
        file: TemplateFile,
        *,
        current_title: str,
        current_template_id: str,
        current_content: ResumeContent,
        current_theme: ResumeTheme,
        provider: str | None = None,
        model: str | None = None,
    ) -> ImportResult:
        """Import ``file`` as a template, falling back to the current values field by field."""
        self.check_file(file)
        resolve_provider(provider or self.llm_config.provider)
        draft = await self.request_draft(file, model=model)
        return normalize_import(
            draft,
            current_title=current_title,
            current_template_id=current_template_id,
            current_content=current_content,
            current_theme=current_theme,
            limits=self.limits,
        )
