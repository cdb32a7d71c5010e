"""Gemini text generation through pydantic-ai.

Each call builds a plain-text agent for the requested model and runs the
prompt once. Provider imports are kept lazy to avoid import-time errors when
the Google extras or credentials are missing.
"""

from __future__ import annotations

from pydantic_ai import Agent

from app.modules.study_cards.errors import ConfigurationError


class GeminiTextGenerator:
    """Callable ``(model_id, prompt) -> text`` backed by the Gemini API."""

    def __init__(self, api_key: str | None) -> None:
        if not api_key:
            raise ConfigurationError()
        self._api_key = api_key
        self._provider = None

    def _build_google_model(self, model_name: str):
        from pydantic_ai.models.google import GoogleModel
        from pydantic_ai.providers.google import GoogleProvider

        if self._provider is None:
            self._provider = GoogleProvider(api_key=self._api_key)
        return GoogleModel(model_name, provider=self._provider)

    async def __call__(self, model_name: str, prompt: str) -> str:
        model = self._build_google_model(model_name)
        agent: Agent[None, str] = Agent[None, str](model=model, output_type=str)
        res = await agent.run(prompt)
        return res.output
