"""
End-to-end tests for the study card pipeline with fake collaborators.
"""
import asyncio

import pytest

from app.core.config import GenerationSettings, Settings
from app.modules.study_cards.errors import (
    ConfigurationError,
    DocumentReadError,
    EmptyDocumentError,
    EmptyResultError,
    InputError,
    ModelExhaustedError,
    NoExtractableTextError,
    PipelineCancelled,
    RateLimitError,
    ResponseFormatError,
)
from app.modules.study_cards.fallback import DEFAULT_MODELS
from app.modules.study_cards.pipeline import StudyCardPipeline
from tests.fakes import ScriptedGenerator, cards_json, http_error, static_extractor

MODELS = ("primary", "backup")


def make_pipeline(outcomes, text="Cells are the basic unit of life. " * 10, **kwargs):
    gen = ScriptedGenerator(outcomes)
    extract = kwargs.pop("extract", None) or static_extractor(text)
    return StudyCardPipeline(gen, MODELS, extract=extract, **kwargs), gen, extract


class TestStudyCardPipeline:
    @pytest.mark.asyncio
    async def test_happy_path(self, sample_reply):
        pipeline, gen, _ = make_pipeline({"primary": sample_reply})
        result = await pipeline.run(b"%PDF-1.7 fake")

        assert result.model == "primary"
        assert [c.title for c in result.cards] == [f"Card {i}" for i in range(6)]
        assert len(gen.calls) == 1

    @pytest.mark.asyncio
    async def test_empty_payload_makes_no_calls(self):
        pipeline, gen, extract = make_pipeline({"primary": cards_json(5)})

        with pytest.raises(EmptyDocumentError) as exc_info:
            await pipeline.run(b"")

        assert isinstance(exc_info.value, InputError)
        assert gen.calls == []
        assert extract.calls == 0

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   \n\t  "])
    async def test_blank_text_fails_before_api_call(self, text):
        pipeline, gen, _ = make_pipeline({"primary": cards_json(5)}, text=text)

        with pytest.raises(NoExtractableTextError):
            await pipeline.run(b"%PDF")

        assert gen.calls == []

    @pytest.mark.asyncio
    async def test_extraction_failure_propagates(self):
        async def broken(payload):
            raise DocumentReadError()

        pipeline, gen, _ = make_pipeline({"primary": cards_json(5)}, extract=broken)

        with pytest.raises(DocumentReadError):
            await pipeline.run(b"not a pdf")
        assert gen.calls == []

    @pytest.mark.asyncio
    async def test_long_text_is_windowed_in_prompt(self):
        text = "H" * 3000 + "M" * 5000 + "T" * 3000
        pipeline, gen, _ = make_pipeline({"primary": cards_json(5)}, text=text)
        await pipeline.run(b"%PDF")

        prompt = gen.calls[0][1]
        assert "H" * 2000 in prompt
        assert "T" * 2000 in prompt
        assert "M" not in prompt.split("PDF content:")[-1]

    @pytest.mark.asyncio
    async def test_falls_back_to_backup_model(self):
        pipeline, gen, _ = make_pipeline(
            {"primary": http_error(404), "backup": cards_json(12)}
        )
        result = await pipeline.run(b"%PDF")

        assert result.model == "backup"
        assert len(result.cards) == 10
        assert gen.models_called == ["primary", "backup"]

    @pytest.mark.asyncio
    async def test_all_models_missing(self):
        pipeline, gen, _ = make_pipeline(
            {"primary": http_error(404), "backup": http_error(404)}
        )
        with pytest.raises(ModelExhaustedError):
            await pipeline.run(b"%PDF")
        assert len(gen.calls) == 2

    @pytest.mark.asyncio
    async def test_rate_limit_is_not_retried(self):
        pipeline, gen, _ = make_pipeline(
            {"primary": http_error(429), "backup": cards_json(5)}
        )
        with pytest.raises(RateLimitError):
            await pipeline.run(b"%PDF")
        assert len(gen.calls) == 1

    @pytest.mark.asyncio
    async def test_unparsable_reply(self):
        pipeline, _, _ = make_pipeline({"primary": "I'm sorry, I can't do that."})
        with pytest.raises(ResponseFormatError):
            await pipeline.run(b"%PDF")

    @pytest.mark.asyncio
    async def test_empty_array_reply(self):
        pipeline, _, _ = make_pipeline({"primary": "```json\n[]\n```"})
        with pytest.raises(EmptyResultError):
            await pipeline.run(b"%PDF")

    @pytest.mark.asyncio
    async def test_extractor_crash_is_read_error(self):
        async def crashing(payload):
            raise RuntimeError("stream truncated")

        pipeline, gen, _ = make_pipeline({"primary": cards_json(5)}, extract=crashing)

        with pytest.raises(DocumentReadError) as exc_info:
            await pipeline.run(b"%PDF")
        assert isinstance(exc_info.value.__cause__, RuntimeError)
        assert gen.calls == []

    @pytest.mark.asyncio
    async def test_cancelled_while_model_is_answering(self):
        cancel = asyncio.Event()

        async def answer_then_cancel(model, prompt):
            cancel.set()
            return cards_json(3)

        pipeline = StudyCardPipeline(
            answer_then_cancel, ("only",), extract=static_extractor("Some text")
        )

        with pytest.raises(PipelineCancelled):
            await pipeline.run(b"%PDF", cancel=cancel)

    @pytest.mark.asyncio
    async def test_cancelled_before_generation(self):
        pipeline, gen, _ = make_pipeline({"primary": cards_json(5)})
        cancel = asyncio.Event()
        cancel.set()

        with pytest.raises(PipelineCancelled):
            await pipeline.run(b"%PDF", cancel=cancel)
        assert gen.calls == []

    @pytest.mark.asyncio
    async def test_custom_card_limit(self):
        pipeline, _, _ = make_pipeline({"primary": cards_json(9)}, max_cards=4)
        result = await pipeline.run(b"%PDF")
        assert len(result.cards) == 4


class TestFromSettings:
    def _settings(self, **generation):
        return Settings(generation=GenerationSettings(**generation))

    def test_missing_api_key_fails_fast(self):
        with pytest.raises(ConfigurationError) as exc_info:
            StudyCardPipeline.from_settings(self._settings(GEMINI_API_KEY=None))
        assert "GEMINI_API_KEY" in exc_info.value.message

    def test_uses_default_candidates(self):
        pipeline = StudyCardPipeline.from_settings(self._settings(GEMINI_API_KEY="k"))
        assert pipeline.models == DEFAULT_MODELS

    def test_configured_model_goes_first(self):
        pipeline = StudyCardPipeline.from_settings(
            self._settings(GEMINI_API_KEY="k", GEMINI_MODEL="gemini-2.0-flash")
        )
        assert pipeline.models[0] == "gemini-2.0-flash"

    def test_explicit_preference_overrides_settings(self):
        pipeline = StudyCardPipeline.from_settings(
            self._settings(GEMINI_API_KEY="k", GEMINI_MODEL="gemini-2.0-flash"),
            preferred_model="gemini-pro",
        )
        assert pipeline.models[0] == "gemini-pro"

    def test_legacy_model_setting_is_ignored(self):
        pipeline = StudyCardPipeline.from_settings(
            self._settings(GEMINI_API_KEY="k", GEMINI_MODEL="gemini-1.5-flash")
        )
        assert pipeline.models == DEFAULT_MODELS
