"""Typed errors raised by resume-studio.

Each error carries the status code the outer boundary (CLI, UI) should
report, so callers can map error kinds without inspecting messages.
"""

from __future__ import annotations


class ResumeStudioError(Exception):
    """Base class for every error the core raises on purpose."""

    status_code: int = 500

    def __init__(self, message: str, *, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidInputError(ResumeStudioError, ValueError):
    status_code = 400


class EmptyPayloadError(InvalidInputError):
    """Raised when an uploaded file has no bytes."""


class UnsupportedFileError(InvalidInputError):
    status_code = 415


class PayloadTooLargeError(ResumeStudioError):
    """Raised for oversized uploads or oversized persisted résumés."""

    status_code = 413


class NotFoundError(ResumeStudioError, LookupError):
    """Unknown id, or an id not owned by the caller."""

    status_code = 404


class ProviderConfigError(ResumeStudioError):
    """Generative-model provider is unsupported or missing credentials."""

    status_code = 503


class UpstreamAIError(ResumeStudioError):
    """The generative-model provider failed or returned unusable output."""

    status_code = 502


class UpstreamTimeoutError(UpstreamAIError):
    status_code = 504


class ModelOutputError(UpstreamAIError, ValueError):
    """The model's text did not contain a usable JSON object."""


class RenderError(ResumeStudioError):
    """Document emission failed."""

    status_code = 500


class RenderEngineUnavailableError(RenderError):
    """No configured PDF engine could be started."""

    status_code = 503
