"""Document → study cards pipeline.

Sequences extraction, windowing, prompt building, the model fallback call and
response validation. The run is all-or-nothing: any stage failure surfaces as
a single ``StudyCardError`` and no partial cards are returned.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass
from typing import Awaitable, Callable, Sequence

from app.core.config import Settings
from app.core.logging import get_logger, with_request_id
from app.modules.study_cards.errors import (
    DocumentReadError,
    EmptyDocumentError,
    NoExtractableTextError,
    PipelineCancelled,
    StudyCardError,
)
from app.modules.study_cards.extractor import ExtractedDocument, extract_pdf_text
from app.modules.study_cards.fallback import (
    GenerateFn,
    ModelFallbackCaller,
    resolve_candidates,
)
from app.modules.study_cards.generator import GeminiTextGenerator
from app.modules.study_cards.models.cards import StudyCard
from app.modules.study_cards.parsing import MAX_CARDS, parse_cards
from app.modules.study_cards.prompts import build_prompt
from app.modules.study_cards.windowing import DEFAULT_TEXT_BUDGET, window_text

logger = get_logger(__name__)

ExtractFn = Callable[[bytes], Awaitable[ExtractedDocument]]


@dataclass(frozen=True)
class StudyCardResult:
    cards: list[StudyCard]
    model: str


class StudyCardPipeline:
    """Turns one PDF payload into a bounded list of validated study cards."""

    def __init__(
        self,
        generate: GenerateFn,
        models: Sequence[str],
        *,
        extract: ExtractFn = extract_pdf_text,
        text_budget: int = DEFAULT_TEXT_BUDGET,
        max_cards: int = MAX_CARDS,
        attempt_timeout: float | None = None,
    ) -> None:
        self.caller = ModelFallbackCaller(
            generate, models, attempt_timeout=attempt_timeout
        )
        self.extract = extract
        self.text_budget = text_budget
        self.max_cards = max_cards

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        preferred_model: str | None = None,
    ) -> "StudyCardPipeline":
        """Build the production pipeline; raises ``ConfigurationError`` without a key."""
        gen = settings.generation
        generate = GeminiTextGenerator(gen.gemini_api_key)
        models = resolve_candidates(preferred_model or gen.gemini_model)
        return cls(
            generate,
            models,
            text_budget=gen.text_budget,
            max_cards=gen.max_cards,
            attempt_timeout=gen.timeout_seconds,
        )

    @property
    def models(self) -> tuple[str, ...]:
        return self.caller.models

    async def run(
        self, payload: bytes, *, cancel: asyncio.Event | None = None
    ) -> StudyCardResult:
        log = with_request_id(logger, uuid.uuid4().hex[:8])

        if not payload:
            raise EmptyDocumentError()
        log.info("Processing PDF (%d bytes)", len(payload))

        try:
            doc = await self.extract(payload)
        except StudyCardError:
            raise
        except Exception as exc:
            log.error("Text extraction failed: %s", exc)
            raise DocumentReadError() from exc
        if not doc.text or not doc.text.strip():
            raise NoExtractableTextError()

        text = window_text(doc.text, self.text_budget)
        if len(text) != len(doc.text):
            log.info("Windowed text from %d to %d chars", len(doc.text), len(text))
        prompt = build_prompt(text, page_count=doc.page_count)

        if cancel is not None and cancel.is_set():
            raise PipelineCancelled()

        log.info("Candidate models: %s", ", ".join(self.models))
        reply = await self.caller.call(prompt, cancel=cancel)
        if cancel is not None and cancel.is_set():
            raise PipelineCancelled()

        cards = parse_cards(reply.text, max_cards=self.max_cards)
        log.info("Generated %d card(s) with %s", len(cards), reply.model)
        return StudyCardResult(cards=cards, model=reply.model)


async def generate_study_cards(
    payload: bytes,
    settings: Settings,
    *,
    preferred_model: str | None = None,
    cancel: asyncio.Event | None = None,
) -> list[StudyCard]:
    """Convenience wrapper returning only the cards."""
    pipeline = StudyCardPipeline.from_settings(settings, preferred_model=preferred_model)
    result = await pipeline.run(payload, cancel=cancel)
    return result.cards
