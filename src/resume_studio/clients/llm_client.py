"""Claude API wrapper used for AI template import."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

import anthropic

from resume_studio.errors import ProviderConfigError, UpstreamAIError, UpstreamTimeoutError
from resume_studio.importer.documents import TemplateFile, build_content_blocks

logger = logging.getLogger(__name__)

# Accepted provider names -> canonical provider.
SUPPORTED_PROVIDERS: dict[str, str] = {
    "anthropic": "anthropic",
    "claude": "anthropic",
}


def resolve_provider(name: str | None) -> str:
    """Return the canonical provider for ``name`` (default: anthropic)."""
    if name is None or not name.strip():
        return "anthropic"
    provider = SUPPORTED_PROVIDERS.get(name.strip().lower())
    if provider is None:
        raise ProviderConfigError(f"Unsupported AI provider: {name!r}", status_code=400)
    return provider


@dataclass
class LLMResponse:
    """Response from the LLM including usage metadata."""

    text: str
    input_tokens: int
    output_tokens: int


class LLMClient:
    """Async Claude API client.

    SDK retries are disabled: a failed or timed-out call fails the import and
    the caller decides whether to resubmit.
    """

    def __init__(self, api_key: str | None = None, timeout: float | None = None):
        api_key = api_key or os.environ.get("ANTHROPIC_API_KEY")
        if not api_key:
            raise ProviderConfigError(
                "Claude is not configured. Set ANTHROPIC_API_KEY in your environment or .env file."
            )
        kwargs: dict = {"api_key": api_key, "max_retries": 0}
        if timeout is not None:
            kwargs["timeout"] = timeout
        self.client = anthropic.AsyncAnthropic(**kwargs)
        self._token_log: list[tuple[str, int, int]] = []  # (model, input_tokens, output_tokens)

    async def _call_api(
        self,
        content: str | list[dict],
        system: str,
        model: str,
        temperature: float,
        max_tokens: int,
    ) -> anthropic.types.Message:
        """Make the API call, translating SDK failures into upstream errors."""
        kwargs: dict = {
            "model": model,
            "max_tokens": max_tokens,
            "temperature": temperature,
            "messages": [{"role": "user", "content": content}],
        }
        if system:
            kwargs["system"] = system
        try:
            return await self.client.messages.create(**kwargs)
        except anthropic.APITimeoutError as exc:
            raise UpstreamTimeoutError("Timed out waiting for the AI provider.") from exc
        except anthropic.APIStatusError as exc:
            raise UpstreamAIError(
                f"AI analysis failed (status {exc.status_code}): {_error_message(exc)}"
            ) from exc
        except anthropic.APIConnectionError as exc:
            raise UpstreamAIError("Could not reach the AI provider.") from exc

    async def generate(
        self,
        content: str | list[dict],
        system: str = "",
        model: str = "claude-sonnet-4-5-20250929",
        temperature: float = 0.1,
        max_tokens: int = 4096,
    ) -> LLMResponse:
        """Send text or content blocks to Claude and return the text response with usage."""
        logger.debug("LLM call: model=%s", model)
        message = await self._call_api(
            content=content,
            system=system,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
        )
        if message.stop_reason == "refusal":
            raise UpstreamAIError("The AI provider blocked the response.")

        texts = [
            block.text.strip()
            for block in message.content
            if isinstance(getattr(block, "text", None), str) and block.text.strip()
        ]
        if not texts:
            raise UpstreamAIError("The AI provider returned no text to analyse.")

        input_tokens = message.usage.input_tokens
        output_tokens = message.usage.output_tokens
        logger.debug("LLM response: %d input, %d output tokens", input_tokens, output_tokens)
        self._token_log.append((model, input_tokens, output_tokens))
        return LLMResponse(
            text="\n".join(texts),
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )

    async def generate_from_document(
        self,
        system: str,
        instruction: str,
        document: TemplateFile,
        model: str = "claude-sonnet-4-5-20250929",
        temperature: float = 0.1,
        max_tokens: int = 4096,
        max_text_chars: int = 18_000,
        max_pdf_pages: int = 3,
    ) -> LLMResponse:
        """Send an uploaded document (image, PDF, DOCX or text) with an instruction."""
        blocks = build_content_blocks(
            document,
            instruction,
            max_text_chars=max_text_chars,
            max_pdf_pages=max_pdf_pages,
        )
        return await self.generate(
            blocks,
            system=system,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
        )

    def get_token_summary(self) -> dict:
        """Return accumulated token usage and reset the log."""
        summary = {
            "input": sum(t[1] for t in self._token_log),
            "output": sum(t[2] for t in self._token_log),
            "calls": list(self._token_log),
        }
        self._token_log.clear()
        return summary


def _error_message(exc: anthropic.APIStatusError) -> str:
    body = exc.body if isinstance(exc.body, dict) else {}
    error = body.get("error") if isinstance(body.get("error"), dict) else {}
    message = error.get("message")
    return message if isinstance(message, str) and message else str(exc.message)
