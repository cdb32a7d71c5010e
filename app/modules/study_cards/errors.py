"""Error taxonomy for the study card pipeline.

Every error carries a human-readable ``message`` that callers can show
verbatim. Generation failures additionally record which model was attempted
and the raw upstream detail.
"""

from __future__ import annotations


class StudyCardError(Exception):
    """Base class for every failure surfaced by the pipeline."""

    default_message = "Study card generation failed."

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ConfigurationError(StudyCardError):
    default_message = (
        "GEMINI_API_KEY is not configured. Check your .env file."
    )


class InputError(StudyCardError):
    default_message = "The uploaded document is not valid."


class EmptyDocumentError(InputError):
    default_message = "The uploaded file is empty."


class DocumentReadError(InputError):
    default_message = (
        "The PDF could not be read. The file may be corrupt or in an "
        "unsupported format."
    )


class NoExtractableTextError(InputError):
    default_message = (
        "No text could be extracted from the PDF. It may consist of images only."
    )


class GenerationError(StudyCardError):
    """A failed call (or chain of calls) to the generation API."""

    kind = "unknown"

    def __init__(
        self,
        message: str | None = None,
        *,
        model: str | None = None,
        detail: str | None = None,
    ) -> None:
        self.model = model
        self.detail = detail
        super().__init__(message)


class AuthError(GenerationError):
    kind = "auth"
    default_message = "The Gemini API key is invalid. Check GEMINI_API_KEY."


class RateLimitError(GenerationError):
    kind = "rate_limit"
    default_message = (
        "The API request quota was exceeded. Please try again later."
    )


class ModelExhaustedError(GenerationError):
    kind = "all_models_exhausted"
    default_message = (
        "None of the configured Gemini models are available. Check the API key "
        "and the models enabled for it in Google AI Studio."
    )


class UpstreamError(GenerationError):
    kind = "unknown"

    def __init__(
        self,
        message: str | None = None,
        *,
        model: str | None = None,
        detail: str | None = None,
    ) -> None:
        if message is None:
            message = f"Gemini API call failed: {detail or 'unknown error'}\nModel: {model}"
        super().__init__(message, model=model, detail=detail)


class UpstreamTimeoutError(UpstreamError):
    kind = "timeout"

    def __init__(
        self,
        message: str | None = None,
        *,
        model: str | None = None,
        detail: str | None = None,
    ) -> None:
        if message is None:
            message = f"Gemini API call timed out ({detail}).\nModel: {model}"
        super().__init__(message, model=model, detail=detail)


class ResponseFormatError(StudyCardError):
    default_message = (
        "The generated response could not be parsed as study cards. Please try again."
    )


class EmptyResultError(StudyCardError):
    default_message = "No study cards were generated. Please try again."


class PipelineCancelled(StudyCardError):
    default_message = "Study card generation was cancelled."
