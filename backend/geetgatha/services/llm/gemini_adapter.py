"""Gemini adapter for the LLM abstraction layer.

Wraps google-genai client with structured output, Google Search grounding
and inline media parts. Uses tenacity for retry logic with configurable
max_retries.
"""

import logging
from typing import Optional, Type

from google.genai import types as genai_types

from geetgatha.services.gemini_client import get_gemini_client, location_for_model
from geetgatha.services.json_utils import clean_and_parse_json
from geetgatha.services.llm.base import (
    GroundedText,
    LLMAdapter,
    MediaPart,
    ModelT,
    SearchSource,
)
from geetgatha.services.llm.retrying import model_retry

logger = logging.getLogger(__name__)


def _grounding_sources(response) -> list[SearchSource]:
    """Collect cited web sources from a grounded response, if any."""
    candidates = getattr(response, "candidates", None) or []
    if not candidates:
        return []
    metadata = getattr(candidates[0], "grounding_metadata", None)
    chunks = getattr(metadata, "grounding_chunks", None) or []

    sources = []
    for chunk in chunks:
        web = getattr(chunk, "web", None)
        if web is not None and getattr(web, "title", None):
            sources.append(SearchSource(title=web.title, uri=web.uri or ""))
    return sources


class GeminiAdapter(LLMAdapter):
    """LLM adapter backed by Google Gemini (google-genai SDK)."""

    def __init__(self, model_id: str, api_key: str, max_retries: int = 3) -> None:
        """Initialize adapter for the given Gemini model.

        Args:
            model_id: Gemini model identifier (e.g., "gemini-3-pro-preview").
            api_key: Credential passed through unchanged to the client.
            max_retries: Default attempts per call.
        """
        self._model_id = model_id
        self._api_key = api_key
        self._max_retries = max_retries

    @property
    def model_id(self) -> str:
        return self._model_id

    def _client(self):
        return get_gemini_client(self._api_key, location=location_for_model(self._model_id))

    async def generate_text(
        self,
        prompt: str,
        schema: Type[ModelT],
        *,
        temperature: float = 0.7,
        system_prompt: Optional[str] = None,
        thinking_budget: Optional[int] = None,
        max_retries: Optional[int] = None,
    ) -> ModelT:
        """Generate structured text using Gemini.

        Args:
            prompt: User prompt to send.
            schema: Pydantic model class for structured output.
            temperature: Sampling temperature.
            system_prompt: Optional system instruction.
            thinking_budget: Optional thinking token budget.
            max_retries: Retry attempts on failure.

        Returns:
            Validated Pydantic model instance.
        """
        @model_retry(max_retries or self._max_retries)
        async def _call() -> ModelT:
            config = genai_types.GenerateContentConfig(
                temperature=temperature,
                response_mime_type="application/json",
                response_schema=schema,
                system_instruction=system_prompt,
            )
            if thinking_budget is not None:
                config.thinking_config = genai_types.ThinkingConfig(thinking_budget=thinking_budget)

            response = await self._client().aio.models.generate_content(
                model=self._model_id,
                contents=prompt,
                config=config,
            )
            return clean_and_parse_json(response.text or "", schema)

        return await _call()

    async def generate_plain(
        self,
        prompt: str,
        *,
        temperature: float = 0.7,
        top_p: Optional[float] = None,
        system_prompt: Optional[str] = None,
        max_retries: Optional[int] = None,
    ) -> str:
        @model_retry(max_retries or self._max_retries)
        async def _call() -> str:
            config = genai_types.GenerateContentConfig(
                temperature=temperature,
                top_p=top_p,
                system_instruction=system_prompt,
            )
            response = await self._client().aio.models.generate_content(
                model=self._model_id,
                contents=prompt,
                config=config,
            )
            return response.text or ""

        return await _call()

    async def generate_grounded(
        self,
        prompt: str,
        *,
        temperature: float = 0.7,
        max_retries: Optional[int] = None,
    ) -> GroundedText:
        """Generate text with the Google Search tool enabled.

        Returns the answer with any grounding sources the model cited.
        """
        @model_retry(max_retries or self._max_retries)
        async def _call() -> GroundedText:
            config = genai_types.GenerateContentConfig(
                temperature=temperature,
                tools=[genai_types.Tool(google_search=genai_types.GoogleSearch())],
            )
            response = await self._client().aio.models.generate_content(
                model=self._model_id,
                contents=prompt,
                config=config,
            )
            sources = _grounding_sources(response)
            logger.debug("Grounded call returned %d source(s)", len(sources))
            return GroundedText(text=response.text or "", sources=sources)

        return await _call()

    async def analyze_media(
        self,
        prompt: str,
        media: list[MediaPart],
        *,
        system_prompt: Optional[str] = None,
        temperature: float = 0.4,
        max_retries: Optional[int] = None,
    ) -> str:
        """Analyze images/audio using Gemini multimodal input.

        Args:
            prompt: Text context sent alongside the media.
            media: Inline media parts (image/jpeg, audio/mp3, ...).
            system_prompt: Optional system instruction.
            temperature: Sampling temperature.
            max_retries: Retry attempts on failure.

        Returns:
            The model's textual description.
        """
        @model_retry(max_retries or self._max_retries)
        async def _call() -> str:
            parts = [genai_types.Part.from_text(text=prompt)]
            for item in media:
                parts.append(genai_types.Part.from_bytes(data=item.data, mime_type=item.mime_type))

            config = genai_types.GenerateContentConfig(
                temperature=temperature,
                system_instruction=system_prompt,
            )
            response = await self._client().aio.models.generate_content(
                model=self._model_id,
                contents=[genai_types.Content(role="user", parts=parts)],
                config=config,
            )
            return response.text or ""

        return await _call()
